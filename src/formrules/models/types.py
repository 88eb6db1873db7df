"""Field type descriptors used for type-identity checks at build time."""

import types
import typing
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

# Python type backing each numeric base; bounds must be exactly this type
NUMERIC_TYPES: dict[str, type] = {
    "int": int,
    "float": float,
    "decimal": Decimal,
}

_BUILTIN_NAMES = {
    str: "str",
    int: "int",
    float: "float",
    Decimal: "decimal",
    bool: "bool",
    Any: "any",
}

_NAME_ALIASES = {
    "str": "str",
    "string": "str",
    "int": "int",
    "integer": "int",
    "float": "float",
    "decimal": "decimal",
    "Decimal": "decimal",
    "bool": "bool",
    "boolean": "bool",
    "any": "any",
    "Any": "any",
}


@dataclass(frozen=True)
class FieldType:
    """Declared type of a form field.

    Two field types are identical iff both the base name and the optional
    flag are equal.
    """
    base: str
    optional: bool = False

    @property
    def is_numeric(self) -> bool:
        return self.base in NUMERIC_TYPES

    @property
    def is_string(self) -> bool:
        return self.base == "str"

    def accepts_bound(self, bound: Any) -> bool:
        """Whether a min_value/max_value literal has exactly this numeric type."""
        expected = NUMERIC_TYPES.get(self.base)
        return expected is not None and type(bound) is expected

    def __str__(self) -> str:
        return f"Optional[{self.base}]" if self.optional else self.base

    @classmethod
    def from_name(cls, name: str) -> "FieldType":
        """Parse a type name such as ``int``, ``str?`` or ``Optional[float]``.

        Raises:
            ValueError: If the name is empty or not identifier-like
        """
        text = name.strip()
        optional = False
        if text.endswith("?"):
            optional = True
            text = text[:-1].strip()
        elif text.startswith("Optional[") and text.endswith("]"):
            optional = True
            text = text[len("Optional["):-1].strip()

        if text in _NAME_ALIASES:
            return cls(_NAME_ALIASES[text], optional)
        if not text or not text.replace(".", "_").isidentifier():
            raise ValueError(f"unsupported field type `{name}`")
        return cls(text, optional)

    @classmethod
    def from_annotation(cls, annotation: Any) -> "FieldType":
        """Build a field type from a Python annotation.

        Handles ``Annotated[...]``, ``Optional[X]`` and ``X | None``; other
        classes keep their own name as the base.
        """
        if isinstance(annotation, FieldType):
            return annotation
        if isinstance(annotation, str):
            return cls.from_name(annotation)

        origin = typing.get_origin(annotation)
        if origin is typing.Annotated:
            return cls.from_annotation(typing.get_args(annotation)[0])

        if origin is typing.Union or origin is types.UnionType:
            members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
            if len(members) == 1 and len(typing.get_args(annotation)) == 2:
                inner = cls.from_annotation(members[0])
                return cls(inner.base, True)
            raise ValueError(f"unsupported union field type `{annotation}`")

        if annotation in _BUILTIN_NAMES:
            return cls(_BUILTIN_NAMES[annotation])
        if origin is not None:
            return cls(str(annotation).replace("typing.", ""))
        if isinstance(annotation, type):
            return cls(annotation.__qualname__)
        raise ValueError(f"unsupported field type `{annotation!r}`")

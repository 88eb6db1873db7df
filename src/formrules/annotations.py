"""Class decorator that compiles ``Annotated`` field metadata into a form.

Example::

    @form(validate_regex(password_rule="^.{8,}$"))
    @dataclass
    class SignupForm:
        email: Annotated[str, validate("email")]
        password: Annotated[str, validate(compiled_regex="password_rule")]
        password2: Annotated[str, validate_match("password")]

    errors = SignupForm(...).validate()

Compilation happens once, when the class is decorated. Build errors surface
at that point, so a class with a bad declaration never exists.
"""

import dataclasses
import types
import typing
from typing import Any, Callable

from formrules.compiler import CompiledForm, compile_form
from formrules.config import FormrulesConfig
from formrules.declarations import Attribute, FieldDeclaration, FormDeclaration
from formrules.errors import MalformedDeclaration


def declaration_from_class(cls: type, attributes: tuple[Attribute, ...] = ()) -> FormDeclaration:
    """Collect field annotations and their ``Attribute`` metadata from ``cls``.

    Dataclass field order is used when ``cls`` is a dataclass, otherwise the
    annotation order. ``ClassVar`` annotations are skipped.
    """
    hints = typing.get_type_hints(cls, include_extras=True)

    if dataclasses.is_dataclass(cls):
        names = [f.name for f in dataclasses.fields(cls)]
    else:
        names = [name for name in hints if not name.startswith("_")]

    fields = []
    for name in names:
        annotation = hints[name]
        if typing.get_origin(annotation) is typing.ClassVar:
            continue
        annotation, field_attributes = _split_annotation(annotation)
        fields.append(FieldDeclaration(name, annotation, field_attributes))

    return FormDeclaration(name=cls.__name__, attributes=list(attributes), fields=fields)


def _split_annotation(annotation: Any) -> tuple[Any, list[Attribute]]:
    """Separate ``Attribute`` metadata from the field's type.

    Metadata is read from ``Annotated[X, ...]`` and from the members of a
    union such as ``Optional[Annotated[X, ...]]``. A union keeps its own
    annotation as the field type.
    """
    origin = typing.get_origin(annotation)
    if origin is typing.Annotated:
        base, *metadata = typing.get_args(annotation)
        return base, [item for item in metadata if isinstance(item, Attribute)]

    if origin is typing.Union or origin is types.UnionType:
        attributes = []
        for member in typing.get_args(annotation):
            if typing.get_origin(member) is typing.Annotated:
                _, *metadata = typing.get_args(member)
                attributes.extend(item for item in metadata if isinstance(item, Attribute))
        return annotation, attributes

    return annotation, []


def form(*attributes: Any, config: FormrulesConfig | None = None) -> Any:
    """Compile a class's validation declarations and attach ``validate()``.

    Usable bare (``@form``) or with struct-level attributes
    (``@form(validate_regex(...))``). Adds:

    - ``__compiled_form__``: the CompiledForm
    - ``__formspec__``: the resolved FormSpec
    - ``validate(self)``: returns the ValidationResult for the instance
    """
    if len(attributes) == 1 and isinstance(attributes[0], type):
        return _decorate(attributes[0], (), config)

    def decorator(cls: type) -> type:
        return _decorate(cls, attributes, config)

    return decorator


def _decorate(cls: type, attributes: tuple, config: FormrulesConfig | None) -> type:
    declaration = declaration_from_class(cls, attributes)

    # A re-decorated subclass may replace the inherited generated method
    existing = getattr(cls, "validate", None)
    if any(f.name == "validate" for f in declaration.fields) or (
        existing is not None and not getattr(existing, "__formrules_generated__", False)
    ):
        raise MalformedDeclaration("`validate` is already defined on the class", form=cls.__name__)

    compiled = compile_form(declaration, config)
    cls.__compiled_form__ = compiled
    cls.__formspec__ = compiled.spec
    cls.validate = _validate_method(compiled)
    return cls


def _validate_method(compiled: CompiledForm) -> Callable:
    def validate(self):
        """Validate this instance against its compiled form rules."""
        return compiled.validate(self)

    validate.__formrules_generated__ = True
    return validate

"""Declarative surface: raw attributes, declaration objects and loaders.

Declarations are ordinary data. Nothing here checks validator names or
argument shapes; that is the Rule Parser's job, so every entry point
(FormBuilder, mapping documents, the @form decorator) reports problems the
same way.

Mapping documents look like::

    name: SignupForm
    validate_regex:
      password_rule: "^.{8,}$"
    fields:
      - name: email
        type: str
        validate: [email]
      - name: age
        type: int
        validate:
          - min_value: 18
      - name: password2
        type: str
        validate_match: password

A file may hold one form or a list of them under ``forms``.
"""

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from formrules.errors import MalformedDeclaration
from formrules.models.types import FieldType

if TYPE_CHECKING:
    from formrules.compiler import CompiledForm
    from formrules.config import FormrulesConfig

logger = logging.getLogger(__name__)


class AttributeName(str, Enum):
    """Attribute names understood by the Rule Parser."""
    VALIDATE = "validate"
    VALIDATE_MATCH = "validate_match"
    VALIDATE_REGEX = "validate_regex"


@dataclass(frozen=True)
class Attribute:
    """One attribute as written: ``name(arg, ..., key=value, ...)``."""
    name: str
    args: tuple[Any, ...] = ()
    kwargs: tuple[tuple[str, Any], ...] = ()

    def __str__(self) -> str:
        parts = [str(arg) if isinstance(arg, str) else repr(arg) for arg in self.args]
        parts.extend(f"{key} = {value!r}" for key, value in self.kwargs)
        return f"{self.name}({', '.join(parts)})"


def validate(*flags: str, **options: Any) -> Attribute:
    """Field-level ``validate(...)``: flags such as ``email`` and keyed validators."""
    return Attribute(AttributeName.VALIDATE.value, tuple(flags), tuple(options.items()))


def validate_match(*targets: str) -> Attribute:
    """Field-level ``validate_match(other_field)``."""
    return Attribute(AttributeName.VALIDATE_MATCH.value, tuple(targets))


def validate_regex(**patterns: str) -> Attribute:
    """Struct-level ``validate_regex(identifier = "pattern", ...)``."""
    return Attribute(AttributeName.VALIDATE_REGEX.value, (), tuple(patterns.items()))


@dataclass
class FieldDeclaration:
    """A field with its declared type and attributes in written order."""
    name: str
    type: Any
    attributes: list[Attribute] = field(default_factory=list)


@dataclass
class FormDeclaration:
    """A structure's struct-level attributes and field declarations."""
    name: str
    attributes: list[Attribute] = field(default_factory=list)
    fields: list[FieldDeclaration] = field(default_factory=list)


class FormBuilder:
    """Builder for form declarations.

    Example::

        signup = (
            FormBuilder("SignupForm")
            .validate_regex(password_rule="^.{8,}$")
            .field("email", str, validate("email"))
            .field("password", str, validate(compiled_regex="password_rule"))
            .field("password2", str, validate_match("password"))
            .build()
        )
    """

    def __init__(self, name: str):
        self._declaration = FormDeclaration(name=name)

    def validate_regex(self, **patterns: str) -> "FormBuilder":
        self._declaration.attributes.append(validate_regex(**patterns))
        return self

    def attribute(self, attribute: Attribute) -> "FormBuilder":
        """Add a raw struct-level attribute."""
        self._declaration.attributes.append(attribute)
        return self

    def field(self, name: str, type: Any, *attributes: Attribute) -> "FormBuilder":
        self._declaration.fields.append(FieldDeclaration(name, type, list(attributes)))
        return self

    def declaration(self) -> FormDeclaration:
        return self._declaration

    def build(self, config: "FormrulesConfig | None" = None) -> "CompiledForm":
        from formrules.compiler import compile_form

        return compile_form(self._declaration, config)


class FieldDocument(BaseModel):
    """A field entry in a declaration document."""
    name: str
    type: str = "str"
    validators: list[str | dict[str, Any]] = Field(alias="validate", default_factory=list)
    validate_match: list[str] = Field(default_factory=list)

    @field_validator("validators", "validate_match", mode="before")
    @classmethod
    def wrap_single(cls, v):
        if v is None:
            return []
        if isinstance(v, (str, dict)):
            return [v]
        return v

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    def to_declaration(self) -> FieldDeclaration:
        decimal_field = self._is_decimal()
        attributes = []
        for entry in self.validators:
            if isinstance(entry, str):
                attributes.append(validate(entry))
            elif decimal_field:
                attributes.append(validate(**{key: _decimal_bound(key, value) for key, value in entry.items()}))
            else:
                attributes.append(validate(**entry))
        attributes.extend(validate_match(target) for target in self.validate_match)
        return FieldDeclaration(self.name, self.type, attributes)

    def _is_decimal(self) -> bool:
        try:
            return FieldType.from_name(self.type).base == "decimal"
        except ValueError:
            # Reported by the Rule Parser with field context
            return False


def _decimal_bound(key: str, value: Any) -> Any:
    """JSON and YAML have no decimal literal; read value bounds as Decimal."""
    if key not in ("min_value", "max_value") or isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            return Decimal(value)
        except InvalidOperation:
            return value
    return value


class FormDocument(BaseModel):
    """One form in a declaration document."""
    name: str
    validate_regex: dict[str, str] = Field(default_factory=dict)
    fields: list[FieldDocument] = Field(default_factory=list)

    @field_validator("fields", mode="before")
    @classmethod
    def fields_from_mapping(cls, v):
        """Accept ``{field_name: {...}}`` as well as a list of field entries."""
        if isinstance(v, dict):
            return [{"name": name, **(spec or {})} for name, spec in v.items()]
        return v

    model_config = ConfigDict(extra="forbid")

    def to_declaration(self) -> FormDeclaration:
        attributes = [validate_regex(**self.validate_regex)] if self.validate_regex else []
        return FormDeclaration(
            name=self.name,
            attributes=attributes,
            fields=[f.to_declaration() for f in self.fields],
        )


def form_declaration_from_mapping(data: dict[str, Any]) -> FormDeclaration:
    """Build a FormDeclaration from a mapping document.

    Raises:
        MalformedDeclaration: If the document does not have the expected shape
    """
    name = data.get("name") if isinstance(data, dict) else None
    try:
        document = FormDocument(**data)
    except (TypeError, ValidationError) as e:
        raise MalformedDeclaration(f"invalid form document: {e}", form=name) from e
    return document.to_declaration()


def load_declarations(path: str | Path) -> list[FormDeclaration]:
    """Load form declarations from a JSON or YAML file.

    Args:
        path: File holding one form document, or a list under ``forms``

    Returns:
        Declarations in file order

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file cannot be parsed
        MalformedDeclaration: If a form document has the wrong shape
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Declaration file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in declaration file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in declaration file {path}: {e}") from e

    if isinstance(data, dict) and "forms" in data:
        documents = data["forms"]
    elif isinstance(data, list):
        documents = data
    else:
        documents = [data]

    if not isinstance(documents, list) or not all(isinstance(d, dict) for d in documents):
        raise ValueError(f"Declaration file {path} must hold a form mapping or a list of them")

    declarations = [form_declaration_from_mapping(document) for document in documents]
    logger.debug(f"Loaded {len(declarations)} form declaration(s) from {path}")
    return declarations

"""Runtime validation outcome returned by compiled forms."""

import dataclasses
from dataclasses import dataclass
from typing import Any, Iterator

from formrules.models.rules import RuleKind


@dataclass(frozen=True)
class ValidationError:
    """A single violated rule found during validation."""
    field: str
    rule: RuleKind
    message: str
    arguments: dict[str, Any] = dataclasses.field(default_factory=dict, hash=False)

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "rule": self.rule.value,
            "message": self.message,
            "arguments": {
                key: value if isinstance(value, (str, int, float, bool)) else str(value)
                for key, value in self.arguments.items()
            },
        }


@dataclass(frozen=True)
class ValidationResult:
    """All violations found in one call, in field-then-rule declaration order."""
    form: str
    errors: tuple[ValidationError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def __iter__(self) -> Iterator[ValidationError]:
        return iter(self.errors)

    def errors_for(self, field_name: str) -> list[ValidationError]:
        return [error for error in self.errors if error.field == field_name]

    @property
    def failed_fields(self) -> list[str]:
        """Names of fields with at least one error, first-failure order."""
        return list(dict.fromkeys(error.field for error in self.errors))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "form": self.form,
            "valid": self.ok,
            "errors": [error.to_dict() for error in self.errors],
        }

"""Compiled form description: patterns, field specs and the form spec."""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from formrules.models.rules import Rule
from formrules.models.types import FieldType

if TYPE_CHECKING:
    from formrules.compiler.registry import PatternRegistry


@dataclass(frozen=True)
class PatternEntry:
    """Named pattern compiled exactly once and shared by every referencing rule."""
    identifier: str
    pattern: str
    compiled: re.Pattern

    def matches(self, value: str) -> bool:
        return self.compiled.search(value) is not None


@dataclass(frozen=True)
class FieldSpec:
    """One field with its rules in declaration order."""
    name: str
    type: FieldType
    rules: tuple[Rule, ...] = ()
    optional: bool = False

    @property
    def skips_none(self) -> bool:
        """Optional fields holding None skip all their rules."""
        return self.optional or self.type.optional

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": str(self.type),
            "optional": self.skips_none,
            "rules": [
                {"kind": rule.kind.value, "arguments": _jsonable(rule.arguments())}
                for rule in self.rules
            ],
        }


@dataclass(frozen=True)
class FormSpec:
    """Immutable description of one structure's validation rules."""
    name: str
    fields: tuple[FieldSpec, ...]
    registry: "PatternRegistry"
    resolved: bool = False

    def field(self, name: str) -> FieldSpec | None:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    @property
    def field_names(self) -> list[str]:
        return [spec.name for spec in self.fields]

    @property
    def rule_count(self) -> int:
        return sum(len(spec.rules) for spec in self.fields)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "name": self.name,
            "resolved": self.resolved,
            "patterns": {entry.identifier: entry.pattern for entry in self.registry.declared()},
            "fields": [spec.to_dict() for spec in self.fields],
        }


def _jsonable(arguments: dict[str, Any]) -> dict[str, Any]:
    return {
        key: value if isinstance(value, (str, int, float, bool)) or value is None else str(value)
        for key, value in arguments.items()
    }

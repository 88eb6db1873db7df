"""Data models for the rule IR, compiled forms and validation results."""

from formrules.models.form import FieldSpec, FormSpec, PatternEntry
from formrules.models.result import ValidationError, ValidationResult
from formrules.models.rules import (
    CompiledRegexRef,
    Email,
    MatchField,
    MaxLength,
    MaxValue,
    MinLength,
    MinValue,
    Phone,
    Regex,
    Rule,
    RuleKind,
)
from formrules.models.types import FieldType

__all__ = [
    "CompiledRegexRef",
    "Email",
    "FieldSpec",
    "FieldType",
    "FormSpec",
    "MatchField",
    "MaxLength",
    "MaxValue",
    "MinLength",
    "MinValue",
    "PatternEntry",
    "Phone",
    "Regex",
    "Rule",
    "RuleKind",
    "ValidationError",
    "ValidationResult",
]

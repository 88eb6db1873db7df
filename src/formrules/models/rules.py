"""Rule IR: one immutable value per declared validator."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from formrules.models.form import PatternEntry


class RuleKind(str, Enum):
    """Supported validator kinds."""
    EMAIL = "email"
    PHONE = "phone"
    MIN_LENGTH = "min_length"
    MAX_LENGTH = "max_length"
    MIN_VALUE = "min_value"
    MAX_VALUE = "max_value"
    REGEX = "regex"
    COMPILED_REGEX = "compiled_regex"
    MATCH_FIELD = "match_field"


# Kinds that only make sense on str fields
STRING_KINDS = frozenset({
    RuleKind.EMAIL,
    RuleKind.PHONE,
    RuleKind.MIN_LENGTH,
    RuleKind.MAX_LENGTH,
    RuleKind.REGEX,
    RuleKind.COMPILED_REGEX,
})


@dataclass(frozen=True)
class Rule:
    """Base class for all rules."""
    kind: ClassVar[RuleKind]

    def arguments(self) -> dict[str, Any]:
        """Arguments carried by the rule, for error descriptors and reports."""
        return {}

    def describe(self) -> str:
        args = ", ".join(f"{key}={value!r}" for key, value in self.arguments().items())
        return f"{self.kind.value}({args})" if args else self.kind.value


@dataclass(frozen=True)
class Email(Rule):
    kind: ClassVar[RuleKind] = RuleKind.EMAIL


@dataclass(frozen=True)
class Phone(Rule):
    """US numbering-plan phone number."""
    kind: ClassVar[RuleKind] = RuleKind.PHONE


@dataclass(frozen=True)
class MinLength(Rule):
    kind: ClassVar[RuleKind] = RuleKind.MIN_LENGTH
    n: int

    def arguments(self) -> dict[str, Any]:
        return {"min": self.n}


@dataclass(frozen=True)
class MaxLength(Rule):
    kind: ClassVar[RuleKind] = RuleKind.MAX_LENGTH
    n: int

    def arguments(self) -> dict[str, Any]:
        return {"max": self.n}


@dataclass(frozen=True)
class MinValue(Rule):
    kind: ClassVar[RuleKind] = RuleKind.MIN_VALUE
    bound: int | float | Decimal

    def arguments(self) -> dict[str, Any]:
        return {"min": self.bound}


@dataclass(frozen=True)
class MaxValue(Rule):
    kind: ClassVar[RuleKind] = RuleKind.MAX_VALUE
    bound: int | float | Decimal

    def arguments(self) -> dict[str, Any]:
        return {"max": self.bound}


@dataclass(frozen=True)
class Regex(Rule):
    """Field-local pattern, compiled once when the form is parsed."""
    kind: ClassVar[RuleKind] = RuleKind.REGEX
    pattern: str
    entry: "PatternEntry | None" = field(default=None, compare=False, repr=False)

    def arguments(self) -> dict[str, Any]:
        return {"pattern": self.pattern}


@dataclass(frozen=True)
class CompiledRegexRef(Rule):
    """Reference to a struct-level named pattern; ``entry`` is set on resolution."""
    kind: ClassVar[RuleKind] = RuleKind.COMPILED_REGEX
    identifier: str
    entry: "PatternEntry | None" = field(default=None, compare=False, repr=False)

    @property
    def is_resolved(self) -> bool:
        return self.entry is not None

    def arguments(self) -> dict[str, Any]:
        return {"identifier": self.identifier}


@dataclass(frozen=True)
class MatchField(Rule):
    kind: ClassVar[RuleKind] = RuleKind.MATCH_FIELD
    target: str

    def arguments(self) -> dict[str, Any]:
        return {"target": self.target}

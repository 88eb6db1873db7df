"""Validator Generator: resolved FormSpec -> runtime validation routine.

Each rule becomes a predicate closure bound at build time. The generated
routine walks fields then rules in declaration order, evaluates every rule
and collects one ValidationError per failure.
"""

import logging
import operator
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable

from formrules.compiler.formats import is_email, is_us_phone
from formrules.models.form import FieldSpec, FormSpec, PatternEntry
from formrules.models.result import ValidationError, ValidationResult
from formrules.models.rules import (
    CompiledRegexRef,
    MatchField,
    MaxLength,
    MaxValue,
    MinLength,
    MinValue,
    Regex,
    Rule,
    RuleKind,
)

logger = logging.getLogger(__name__)

FieldReader = Callable[[str], Any]
Predicate = Callable[[Any, FieldReader], bool]


@dataclass(frozen=True)
class RuleCheck:
    """One generated check: a rule, its predicate and its failure message."""
    field: str
    rule: Rule
    predicate: Predicate
    message: str

    def run(self, value: Any, read: FieldReader) -> ValidationError | None:
        if self.predicate(value, read):
            return None
        return ValidationError(self.field, self.rule.kind, self.message, self.rule.arguments())


@dataclass(frozen=True)
class FieldCheck:
    """Checks for one field, in rule declaration order."""
    name: str
    skips_none: bool
    checks: tuple[RuleCheck, ...]


class CompiledForm:
    """Generated validation routine for one form.

    Holds the resolved FormSpec and its frozen pattern registry. Calls are
    pure functions of the instance and safe to run concurrently.
    """

    def __init__(self, spec: FormSpec, field_checks: tuple[FieldCheck, ...]):
        self.spec = spec
        self._field_checks = field_checks

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def registry(self):
        return self.spec.registry

    def validate(self, instance: Any) -> ValidationResult:
        """Check every rule on every field of ``instance``.

        Instances may be objects (attribute access) or mappings (key access).
        Returns an empty result when all rules pass. Violations are returned,
        never raised.
        """
        read = field_reader(instance)
        errors: list[ValidationError] = []

        for field_check in self._field_checks:
            value = read(field_check.name)
            if value is None and field_check.skips_none:
                continue
            for check in field_check.checks:
                error = check.run(value, read)
                if error is not None:
                    errors.append(error)

        return ValidationResult(self.name, tuple(errors))

    __call__ = validate

    def __repr__(self) -> str:
        return f"CompiledForm({self.name!r}, fields={self.spec.field_names!r})"


def field_reader(instance: Any) -> FieldReader:
    """Return a function reading a field's current value from ``instance``."""
    if isinstance(instance, Mapping):
        return instance.get
    return lambda name: getattr(instance, name, None)


class ValidatorGenerator:
    """Emit a CompiledForm from a resolved FormSpec."""

    def generate(self, spec: FormSpec) -> CompiledForm:
        """Generate the validation routine.

        Raises:
            ValueError: If the spec has not been through the Rule Resolver
        """
        if not spec.resolved:
            raise ValueError(f"FormSpec {spec.name!r} must be resolved before generation")

        field_checks = tuple(self._emit_field(field_spec) for field_spec in spec.fields)
        logger.debug(f"Generated {spec.rule_count} check(s) for {spec.name}")
        return CompiledForm(spec, field_checks)

    def _emit_field(self, field_spec: FieldSpec) -> FieldCheck:
        checks = tuple(
            RuleCheck(field_spec.name, rule, self._emit_predicate(rule), describe_failure(rule))
            for rule in field_spec.rules
        )
        return FieldCheck(field_spec.name, field_spec.skips_none, checks)

    def _emit_predicate(self, rule: Rule) -> Predicate:
        kind = rule.kind
        if kind is RuleKind.EMAIL:
            return lambda value, read: is_email(value)
        if kind is RuleKind.PHONE:
            return lambda value, read: is_us_phone(value)
        if isinstance(rule, MinLength):
            return _length_predicate(rule.n, operator.ge)
        if isinstance(rule, MaxLength):
            return _length_predicate(rule.n, operator.le)
        if isinstance(rule, MinValue):
            return _value_predicate(rule.bound, operator.ge)
        if isinstance(rule, MaxValue):
            return _value_predicate(rule.bound, operator.le)
        if isinstance(rule, (Regex, CompiledRegexRef)):
            if rule.entry is None:
                raise ValueError(f"Pattern for {rule.describe()} was never compiled")
            return _pattern_predicate(rule.entry)
        if isinstance(rule, MatchField):
            target = rule.target
            # Read the target at call time, never at build time
            return lambda value, read: value == read(target)
        raise ValueError(f"No generator for rule kind {kind.value}")


def _length_predicate(n: int, compare: Callable[[int, int], bool]) -> Predicate:
    # Character count (code points), inclusive bounds
    return lambda value, read: isinstance(value, str) and compare(len(value), n)


def _value_predicate(bound: Any, compare: Callable[[Any, Any], bool]) -> Predicate:
    def predicate(value: Any, read: FieldReader) -> bool:
        try:
            return bool(compare(value, bound))
        except TypeError:
            return False
    return predicate


def _pattern_predicate(entry: PatternEntry) -> Predicate:
    return lambda value, read: isinstance(value, str) and entry.matches(value)


def describe_failure(rule: Rule) -> str:
    """Human-readable message for a failed rule."""
    if rule.kind is RuleKind.EMAIL:
        return "invalid email address"
    if rule.kind is RuleKind.PHONE:
        return "invalid phone number"
    if isinstance(rule, MinLength):
        return f"must be at least {rule.n} characters"
    if isinstance(rule, MaxLength):
        return f"must be at most {rule.n} characters"
    if isinstance(rule, MinValue):
        return f"must be at least {rule.bound}"
    if isinstance(rule, MaxValue):
        return f"must be at most {rule.bound}"
    if isinstance(rule, Regex):
        return f"does not match pattern `{rule.pattern}`"
    if isinstance(rule, CompiledRegexRef):
        return f"does not match pattern `{rule.identifier}`"
    if isinstance(rule, MatchField):
        return f"must match `{rule.target}`"
    return f"failed {rule.describe()}"

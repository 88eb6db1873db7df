"""Rule Resolver: proves every reference in a parsed FormSpec is satisfiable."""

import logging
from dataclasses import replace

from formrules.errors import (
    BuildErrorCollector,
    FormBuildError,
    TypeMismatch,
    UnknownMatchTarget,
    UnknownPatternReference,
)
from formrules.models.form import FieldSpec, FormSpec
from formrules.models.rules import (
    STRING_KINDS,
    CompiledRegexRef,
    MatchField,
    MaxValue,
    MinValue,
    Rule,
)

logger = logging.getLogger(__name__)


class RuleResolver:
    """Resolve cross-references and check type consistency.

    The pass is pure: it returns a new FormSpec and never touches the input
    or the registry. By default every problem is collected before raising;
    with ``fail_fast`` the first one is raised immediately.
    """

    def __init__(self, fail_fast: bool = False):
        self.fail_fast = fail_fast

    def resolve(self, spec: FormSpec) -> FormSpec:
        if spec.resolved:
            return spec

        errors = BuildErrorCollector(spec.name, self.fail_fast)
        fields_by_name = {field_spec.name: field_spec for field_spec in spec.fields}

        resolved_fields = []
        for field_spec in spec.fields:
            rules = []
            for rule in field_spec.rules:
                try:
                    rules.append(self._resolve_rule(rule, field_spec, spec, fields_by_name))
                except FormBuildError as e:
                    errors.add(e, field=field_spec.name, attribute=rule.describe())
            resolved_fields.append(replace(field_spec, rules=tuple(rules)))

        errors.raise_if_any()

        logger.debug(f"Resolved {spec.name}: {spec.rule_count} rule(s)")
        return FormSpec(name=spec.name, fields=tuple(resolved_fields), registry=spec.registry,
                        resolved=True)

    def _resolve_rule(self, rule: Rule, field_spec: FieldSpec, spec: FormSpec,
                      fields_by_name: dict[str, FieldSpec]) -> Rule:
        field_type = field_spec.type

        if rule.kind in STRING_KINDS and not field_type.is_string and field_type.base != "any":
            raise TypeMismatch(
                f"{rule.kind.value} requires a str field, `{field_spec.name}` is {field_type}",
                TypeMismatch.FIELD_VS_BOUND,
            )

        if isinstance(rule, (MinValue, MaxValue)):
            if not field_type.is_numeric:
                raise TypeMismatch(
                    f"{rule.kind.value} requires a numeric field, `{field_spec.name}` is {field_type}",
                    TypeMismatch.FIELD_VS_BOUND,
                )
            if not field_type.accepts_bound(rule.bound):
                raise TypeMismatch(
                    f"{rule.kind.value} bound {rule.bound!r} is {type(rule.bound).__name__}, "
                    f"field `{field_spec.name}` is {field_type.base}",
                    TypeMismatch.FIELD_VS_BOUND,
                )
            return rule

        if isinstance(rule, CompiledRegexRef):
            if rule.identifier not in spec.registry:
                raise UnknownPatternReference(rule.identifier)
            return replace(rule, entry=spec.registry.resolve(rule.identifier))

        if isinstance(rule, MatchField):
            if rule.target == field_spec.name:
                raise UnknownMatchTarget(rule.target, reason="validate_match cannot target its own field")
            target = fields_by_name.get(rule.target)
            if target is None:
                raise UnknownMatchTarget(rule.target)
            if target.type != field_type:
                raise TypeMismatch(
                    f"`{field_spec.name}` is {field_type} but validate_match target "
                    f"`{target.name}` is {target.type}",
                    TypeMismatch.FIELD_VS_FIELD,
                )
            return rule

        return rule

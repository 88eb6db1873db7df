"""Rule Parser: declarative attributes -> unresolved FormSpec.

Parsing is syntactic and local. It enforces each validator's own argument
shape and compiles patterns into the form's registry, but leaves
cross-references (compiled_regex identifiers, validate_match targets, bound
vs field types) to the Rule Resolver.
"""

import logging
from decimal import Decimal
from typing import Any

from formrules.compiler.registry import PatternRegistry
from formrules.declarations import Attribute, AttributeName, FieldDeclaration, FormDeclaration
from formrules.errors import BuildErrorCollector, FormBuildError, MalformedDeclaration
from formrules.models.form import FieldSpec, FormSpec
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
)
from formrules.models.types import FieldType

logger = logging.getLogger(__name__)

OPTIONAL_FLAG = "optional"
FLAG_VALIDATORS = {"email", "phone", OPTIONAL_FLAG}
LENGTH_VALIDATORS = {"min_length", "max_length"}
VALUE_VALIDATORS = {"min_value", "max_value"}
PATTERN_VALIDATORS = {"regex", "compiled_regex"}
KEYED_VALIDATORS = LENGTH_VALIDATORS | VALUE_VALIDATORS | PATTERN_VALIDATORS

NUMERIC_LITERAL_TYPES = (int, float, Decimal)


class RuleParser:
    """Parse a FormDeclaration into an unresolved FormSpec."""

    def __init__(self, fail_fast: bool = False):
        self.fail_fast = fail_fast

    def parse(self, declaration: FormDeclaration) -> FormSpec:
        """Parse struct-level then field-level attributes.

        Args:
            declaration: Raw declaration of one structure

        Returns:
            FormSpec with ``resolved=False``

        Raises:
            FormBuildError: First problem found in fail-fast mode, otherwise
                the single problem found or a FormBuildErrors with all of them
        """
        name = declaration.name
        errors = BuildErrorCollector(name, self.fail_fast)
        if not isinstance(name, str) or not name.isidentifier():
            errors.add(MalformedDeclaration(f"form name {name!r} is not an identifier"))

        registry = PatternRegistry(scope=name)

        # Struct patterns first so field order never changes registry contents
        for attribute in declaration.attributes:
            self._parse_struct_attribute(attribute, registry, errors)

        fields: list[FieldSpec] = []
        seen: set[str] = set()
        for field_declaration in declaration.fields:
            field_spec = self._parse_field(field_declaration, registry, errors)
            if field_spec is None:
                continue
            if field_spec.name in seen:
                errors.add(MalformedDeclaration("field declared more than once"), field=field_spec.name)
                continue
            seen.add(field_spec.name)
            fields.append(field_spec)

        errors.raise_if_any()

        spec = FormSpec(name=name, fields=tuple(fields), registry=registry)
        logger.debug(f"Parsed {name}: {len(spec.fields)} field(s), {spec.rule_count} rule(s), "
                     f"{len(registry)} pattern(s)")
        return spec

    def _parse_struct_attribute(self, attribute: Any, registry: PatternRegistry,
                                errors: BuildErrorCollector) -> None:
        if not isinstance(attribute, Attribute):
            errors.add(MalformedDeclaration(f"unsupported struct attribute {attribute!r}"))
            return

        attribute_text = str(attribute)
        if attribute.name != AttributeName.VALIDATE_REGEX.value:
            errors.add(
                MalformedDeclaration(f"`{attribute.name}` is not a struct-level attribute"),
                attribute=attribute_text,
            )
            return

        if attribute.args:
            errors.add(
                MalformedDeclaration("validate_regex only accepts `identifier = \"pattern\"` pairs"),
                attribute=attribute_text,
            )
        if not attribute.kwargs and not attribute.args:
            errors.add(MalformedDeclaration("validate_regex declares no pattern"), attribute=attribute_text)

        for identifier, pattern in attribute.kwargs:
            if not identifier.isidentifier():
                errors.add(
                    MalformedDeclaration(f"regex id `{identifier}` is not an identifier"),
                    attribute=attribute_text,
                )
                continue
            if not isinstance(pattern, str):
                errors.add(
                    MalformedDeclaration("compiling a regex via validate_regex requires a string argument"),
                    attribute=attribute_text,
                )
                continue
            try:
                registry.declare(identifier, pattern)
            except FormBuildError as e:
                errors.add(e, attribute=attribute_text)

    def _parse_field(self, declaration: FieldDeclaration, registry: PatternRegistry,
                     errors: BuildErrorCollector) -> FieldSpec | None:
        name = declaration.name
        if not isinstance(name, str) or not name.isidentifier():
            errors.add(MalformedDeclaration(f"field name {name!r} is not an identifier"))
            return None

        try:
            field_type = FieldType.from_annotation(declaration.type)
        except ValueError as e:
            errors.add(MalformedDeclaration(str(e)), field=name)
            return None

        rules: list[Rule] = []
        optional = False
        for attribute in declaration.attributes:
            if not isinstance(attribute, Attribute):
                errors.add(MalformedDeclaration(f"unsupported field attribute {attribute!r}"), field=name)
                continue

            attribute_text = str(attribute)
            try:
                if attribute.name == AttributeName.VALIDATE.value:
                    parsed, is_optional = self._parse_validate(attribute, name, registry)
                    rules.extend(parsed)
                    optional = optional or is_optional
                elif attribute.name == AttributeName.VALIDATE_MATCH.value:
                    rules.append(self._parse_validate_match(attribute))
                elif attribute.name == AttributeName.VALIDATE_REGEX.value:
                    raise MalformedDeclaration("validate_regex is a struct-level attribute")
                else:
                    raise MalformedDeclaration(f"unknown attribute `{attribute.name}`")
            except FormBuildError as e:
                errors.add(e, field=name, attribute=attribute_text)

        return FieldSpec(name=name, type=field_type, rules=tuple(rules), optional=optional)

    def _parse_validate(self, attribute: Attribute, field_name: str,
                        registry: PatternRegistry) -> tuple[list[Rule], bool]:
        if not attribute.args and not attribute.kwargs:
            raise MalformedDeclaration("validate requires at least one validator")

        rules: list[Rule] = []
        optional = False

        for flag in attribute.args:
            if not isinstance(flag, str):
                raise MalformedDeclaration(f"unsupported validate argument {flag!r}")
            if flag in KEYED_VALIDATORS:
                raise MalformedDeclaration(f"{flag} requires an argument: `{flag} = ...`")
            if flag == "email":
                rules.append(Email())
            elif flag == "phone":
                rules.append(Phone())
            elif flag == OPTIONAL_FLAG:
                optional = True
            else:
                raise MalformedDeclaration(f"unknown validator `{flag}`")

        for key, value in attribute.kwargs:
            if key in FLAG_VALIDATORS:
                raise MalformedDeclaration(f"{key} takes no argument")
            if key in LENGTH_VALIDATORS:
                if type(value) is not int or value < 0:
                    raise MalformedDeclaration(f"{key} requires a non-negative integer argument")
                rules.append(MinLength(value) if key == "min_length" else MaxLength(value))
            elif key in VALUE_VALIDATORS:
                # bool is an int subclass but never a numeric bound
                if isinstance(value, bool) or not isinstance(value, NUMERIC_LITERAL_TYPES):
                    raise MalformedDeclaration(f"{key} requires a numeric argument")
                rules.append(MinValue(value) if key == "min_value" else MaxValue(value))
            elif key == "regex":
                if not isinstance(value, str):
                    raise MalformedDeclaration("regex requires a string argument")
                entry = registry.declare_local(field_name, value)
                rules.append(Regex(value, entry))
            elif key == "compiled_regex":
                if not isinstance(value, str):
                    raise MalformedDeclaration("compiled_regex requires a string argument")
                if not value.isidentifier():
                    raise MalformedDeclaration(f"compiled_regex `{value}` is not a regex id")
                rules.append(CompiledRegexRef(value))
            else:
                raise MalformedDeclaration(f"unknown validator `{key}`")

        return rules, optional

    def _parse_validate_match(self, attribute: Attribute) -> MatchField:
        if attribute.kwargs:
            raise MalformedDeclaration("validate_match takes the target field name only")
        if len(attribute.args) != 1:
            raise MalformedDeclaration(
                f"validate_match takes exactly one field name, got {len(attribute.args)}"
            )
        target = attribute.args[0]
        if not isinstance(target, str) or not target.isidentifier():
            raise MalformedDeclaration(f"validate_match target {target!r} is not a field name")
        return MatchField(target)

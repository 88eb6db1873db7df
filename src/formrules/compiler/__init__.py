"""Rule compilation pipeline: parse -> resolve -> generate.

Usage:
    from formrules.compiler import compile_form

    compiled = compile_form(declaration)
    result = compiled.validate(instance)
    if not result.ok:
        for error in result.errors:
            print(error)
"""

import logging

from formrules.compiler.generator import CompiledForm, ValidatorGenerator
from formrules.compiler.parser import RuleParser
from formrules.compiler.registry import PatternRegistry
from formrules.compiler.resolver import RuleResolver
from formrules.config import FormrulesConfig
from formrules.declarations import FormDeclaration
from formrules.models.form import FormSpec

logger = logging.getLogger(__name__)


def build_form_spec(declaration: FormDeclaration, config: FormrulesConfig | None = None) -> FormSpec:
    """Run the Rule Parser and Rule Resolver, returning the resolved FormSpec.

    Raises:
        FormBuildError: If the declaration is malformed or a reference
            cannot be resolved
    """
    config = config or FormrulesConfig()
    fail_fast = config.resolver.fail_fast

    spec = RuleParser(fail_fast=fail_fast).parse(declaration)
    return RuleResolver(fail_fast=fail_fast).resolve(spec)


def compile_form(declaration: FormDeclaration, config: FormrulesConfig | None = None) -> CompiledForm:
    """Compile one declaration into its validation routine.

    The form's pattern registry is frozen once generation succeeds.

    Raises:
        FormBuildError: If the declaration cannot be built
    """
    spec = build_form_spec(declaration, config)
    compiled = ValidatorGenerator().generate(spec)
    spec.registry.freeze()
    logger.info(f"Compiled form {spec.name}: {len(spec.fields)} field(s), {spec.rule_count} rule(s)")
    return compiled


def compile_forms(declarations: list[FormDeclaration],
                  config: FormrulesConfig | None = None) -> dict[str, CompiledForm]:
    """Compile several declarations, keyed by form name in input order."""
    compiled: dict[str, CompiledForm] = {}
    for declaration in declarations:
        if declaration.name in compiled:
            raise ValueError(f"Form {declaration.name!r} declared more than once")
        compiled[declaration.name] = compile_form(declaration, config)
    return compiled


__all__ = [
    "CompiledForm",
    "PatternRegistry",
    "RuleParser",
    "RuleResolver",
    "ValidatorGenerator",
    "build_form_spec",
    "compile_form",
    "compile_forms",
]

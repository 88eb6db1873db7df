"""End-to-end tests for the compile pipeline and its documented properties."""

import pytest

from formrules.compiler import build_form_spec, compile_form, compile_forms
from formrules.config import FormrulesConfig, ResolverConfig
from formrules.declarations import FormBuilder, validate, validate_match
from formrules.errors import FormBuildError, FormBuildErrors, TypeMismatch, UnknownPatternReference
from formrules.models import RuleKind


@pytest.fixture
def signup_form():
    """Signup scenario: email, password with a length regex, confirmation match."""
    return compile_form(
        FormBuilder("SignupForm")
        .field("email", str, validate("email"))
        .field("password", str, validate(regex="^.{8,}$"))
        .field("password2", str, validate_match("password"))
        .declaration()
    )


class TestSignupScenario:
    """The three-field signup form."""

    def test_three_errors_for_bad_input(self, signup_form):
        result = signup_form.validate({
            "email": "not-an-email",
            "password": "short",
            "password2": "different",
        })

        assert not result.ok
        assert [(error.field, error.rule) for error in result.errors] == [
            ("email", RuleKind.EMAIL),
            ("password", RuleKind.REGEX),
            ("password2", RuleKind.MATCH_FIELD),
        ]

    def test_no_errors_for_good_input(self, signup_form):
        result = signup_form.validate({
            "email": "a@b.com",
            "password": "longenough",
            "password2": "longenough",
        })

        assert result.ok
        assert result.errors == ()


class TestFullEvaluation:
    """Every rule on every field is evaluated; nothing short-circuits."""

    def test_n_failing_rules_give_n_errors_in_declaration_order(self):
        compiled = compile_form(
            FormBuilder("ProfileForm")
            .field("username", str, validate(min_length=5), validate(regex="^[a-z]+$"), validate(max_length=2))
            .field("age", int, validate(min_value=18, max_value=10))
            .field("phone", str, validate("phone"))
            .declaration()
        )

        result = compiled.validate({"username": "AB1", "age": 15, "phone": "nope"})

        assert [(error.field, error.rule) for error in result.errors] == [
            ("username", RuleKind.MIN_LENGTH),
            ("username", RuleKind.REGEX),
            ("username", RuleKind.MAX_LENGTH),
            ("age", RuleKind.MIN_VALUE),
            ("age", RuleKind.MAX_VALUE),
            ("phone", RuleKind.PHONE),
        ]

    def test_errors_are_not_deduplicated(self):
        compiled = compile_form(
            FormBuilder("LoginForm")
            .field("username", str, validate(min_length=3), validate(min_length=3))
            .declaration()
        )

        result = compiled.validate({"username": "a"})

        assert len(result.errors) == 2
        assert result.errors[0] == result.errors[1]


class TestSharedPatterns:
    """Two fields using one compiled_regex behave identically."""

    @pytest.mark.parametrize("pattern,valid,invalid", [
        (r"^\d+$", "123", "abc"),
        (r"^[a-z]+$", "abc", "123"),
    ])
    def test_changing_struct_pattern_changes_both_fields(self, pattern, valid, invalid):
        compiled = compile_form(
            FormBuilder("CodeForm")
            .validate_regex(code=pattern)
            .field("code", str, validate(compiled_regex="code"))
            .field("backup_code", str, validate(compiled_regex="code"))
            .declaration()
        )

        assert compiled.validate({"code": valid, "backup_code": valid}).ok
        result = compiled.validate({"code": invalid, "backup_code": invalid})
        assert result.failed_fields == ["code", "backup_code"]

        rules = [compiled.spec.field(name).rules[0] for name in ("code", "backup_code")]
        assert rules[0].entry is rules[1].entry


class TestBuildFailures:
    """Structural problems are hard build failures."""

    def test_missing_compiled_regex_is_never_skipped(self):
        declaration = (
            FormBuilder("SignupForm")
            .field("password", str, validate(compiled_regex="missing_id"))
            .declaration()
        )

        with pytest.raises(UnknownPatternReference):
            compile_form(declaration)

    def test_min_value_on_non_numeric_field(self):
        declaration = FormBuilder("AgeForm").field("age", str, validate(min_value=18)).declaration()

        with pytest.raises(TypeMismatch):
            compile_form(declaration)

    def test_min_value_with_wrong_numeric_type(self):
        declaration = FormBuilder("AgeForm").field("age", float, validate(min_value=18)).declaration()

        with pytest.raises(TypeMismatch):
            compile_form(declaration)

    def test_build_errors_share_a_base_class(self):
        declaration = (
            FormBuilder("BrokenForm")
            .field("age", str, validate(min_value=18))
            .field("password", str, validate(compiled_regex="missing_id"))
            .declaration()
        )

        with pytest.raises(FormBuildError) as exc_info:
            compile_form(declaration)

        assert isinstance(exc_info.value, FormBuildErrors)
        assert len(exc_info.value.errors) == 2

    def test_fail_fast_from_config(self):
        declaration = (
            FormBuilder("BrokenForm")
            .field("age", str, validate(min_value=18))
            .field("password", str, validate(compiled_regex="missing_id"))
            .declaration()
        )
        config = FormrulesConfig(resolver=ResolverConfig(fail_fast=True))

        with pytest.raises(TypeMismatch):
            compile_form(declaration, config)


class TestPipelineHelpers:
    """build_form_spec and compile_forms."""

    def test_build_form_spec_returns_resolved_spec(self):
        spec = build_form_spec(
            FormBuilder("LoginForm").field("username", str, validate(min_length=3)).declaration()
        )

        assert spec.resolved
        assert spec.field_names == ["username"]
        assert not spec.registry.frozen

    def test_compile_forms_keyed_by_name(self):
        declarations = [
            FormBuilder("LoginForm").field("username", str).declaration(),
            FormBuilder("SignupForm").field("email", str, validate("email")).declaration(),
        ]

        compiled = compile_forms(declarations)

        assert list(compiled) == ["LoginForm", "SignupForm"]

    def test_compile_forms_rejects_duplicate_names(self):
        declarations = [
            FormBuilder("LoginForm").declaration(),
            FormBuilder("LoginForm").declaration(),
        ]

        with pytest.raises(ValueError, match="more than once"):
            compile_forms(declarations)

    def test_builder_build(self):
        compiled = FormBuilder("LoginForm").field("username", str, validate(min_length=3)).build()

        assert compiled.name == "LoginForm"
        assert not compiled.validate({"username": "ab"}).ok

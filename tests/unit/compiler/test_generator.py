"""Tests for the validator generator and compiled forms."""

from dataclasses import dataclass
from decimal import Decimal
from types import SimpleNamespace

import pytest

from formrules.compiler import compile_form
from formrules.compiler.formats import is_email, is_us_phone
from formrules.compiler.generator import ValidatorGenerator, describe_failure
from formrules.compiler.parser import RuleParser
from formrules.declarations import FormBuilder, validate, validate_match
from formrules.models import MatchField, MinLength, RuleKind


def compiled_single(field_type, *attributes):
    return compile_form(FormBuilder("TestForm").field("value", field_type, *attributes).declaration())


class TestGeneratorPreconditions:
    """Generation requires a resolved spec."""

    def test_unresolved_spec_rejected(self):
        spec = RuleParser().parse(FormBuilder("LoginForm").field("username", str).declaration())

        with pytest.raises(ValueError, match="must be resolved"):
            ValidatorGenerator().generate(spec)

    def test_registry_frozen_after_compile(self):
        compiled = compiled_single(str, validate(regex="^a"))

        assert compiled.registry.frozen


class TestLengthChecks:
    """min_length/max_length are inclusive character counts."""

    @pytest.mark.parametrize("value,ok", [("ab", False), ("abc", True), ("abcd", True)])
    def test_min_length(self, value, ok):
        result = compiled_single(str, validate(min_length=3)).validate({"value": value})

        assert result.ok is ok

    @pytest.mark.parametrize("value,ok", [("abcd", True), ("abcde", True), ("abcdef", False)])
    def test_max_length(self, value, ok):
        result = compiled_single(str, validate(max_length=5)).validate({"value": value})

        assert result.ok is ok

    def test_counts_characters_not_bytes(self):
        compiled = compiled_single(str, validate(max_length=5))

        # 5 characters, 10 bytes in UTF-8
        assert compiled.validate({"value": "ééééé"}).ok
        assert not compiled.validate({"value": "éééééé"}).ok

    def test_non_string_fails_length_rule(self):
        result = compiled_single(str, validate(min_length=1)).validate({"value": 42})

        assert [error.rule for error in result.errors] == [RuleKind.MIN_LENGTH]


class TestValueChecks:
    """min_value/max_value are inclusive numeric comparisons."""

    @pytest.mark.parametrize("value,ok", [(17, False), (18, True), (19, True)])
    def test_min_value(self, value, ok):
        assert compiled_single(int, validate(min_value=18)).validate({"value": value}).ok is ok

    @pytest.mark.parametrize("value,ok", [(99, True), (100, True), (101, False)])
    def test_max_value(self, value, ok):
        assert compiled_single(int, validate(max_value=100)).validate({"value": value}).ok is ok

    def test_float_bounds(self):
        compiled = compiled_single(float, validate(min_value=0.5, max_value=1.5))

        assert compiled.validate({"value": 0.5}).ok
        assert compiled.validate({"value": 1.5}).ok
        assert len(compiled.validate({"value": 2.0}).errors) == 1

    def test_decimal_bounds(self):
        compiled = compiled_single(Decimal, validate(min_value=Decimal("0.01")))

        assert compiled.validate({"value": Decimal("0.01")}).ok
        assert not compiled.validate({"value": Decimal("0.00")}).ok

    def test_incomparable_value_fails_instead_of_raising(self):
        result = compiled_single(int, validate(min_value=18)).validate({"value": "eighteen"})

        assert [error.rule for error in result.errors] == [RuleKind.MIN_VALUE]

    def test_error_carries_bound(self):
        result = compiled_single(int, validate(min_value=18)).validate({"value": 17})

        error = result.errors[0]
        assert error.field == "value"
        assert error.arguments == {"min": 18}
        assert error.message == "must be at least 18"


class TestFormatChecks:
    """Email and US phone grammars."""

    @pytest.mark.parametrize("value", ["a@b.com", "first.last+tag@example-mail.co.uk", "x_y@d.io"])
    def test_valid_emails(self, value):
        assert is_email(value)

    @pytest.mark.parametrize("value", ["not-an-email", "a@b", "@b.com", "a b@c.com", "a@b.com\n", None])
    def test_invalid_emails(self, value):
        assert not is_email(value)

    @pytest.mark.parametrize("value", [
        "555-123-4567",
        "(555) 123-4567",
        "555.123.4567",
        "5551234567",
        "+1 555-123-4567",
        "+12 (555)123 4567",
    ])
    def test_valid_phones(self, value):
        assert is_us_phone(value)

    @pytest.mark.parametrize("value", ["123-4567", "555-1234-567", "+123 555-123-4567", "phone", 5551234567])
    def test_invalid_phones(self, value):
        assert not is_us_phone(value)

    def test_phone_rule(self):
        compiled = compiled_single(str, validate("phone"))

        assert compiled.validate({"value": "(555) 123-4567"}).ok
        result = compiled.validate({"value": "12345"})
        assert result.errors[0].message == "invalid phone number"


class TestPatternChecks:
    """regex and compiled_regex rules."""

    def test_field_regex(self):
        compiled = compiled_single(str, validate(regex=r"^\d{5}$"))

        assert compiled.validate({"value": "12345"}).ok
        assert compiled.validate({"value": "1234"}).errors[0].rule is RuleKind.REGEX

    def test_regex_search_is_unanchored(self):
        compiled = compiled_single(str, validate(regex=r"\d"))

        assert compiled.validate({"value": "abc1"}).ok

    def test_shared_compiled_regex(self):
        compiled = compile_form(
            FormBuilder("SignupForm")
            .validate_regex(pw="^.{8,}$")
            .field("password", str, validate(compiled_regex="pw"))
            .field("password2", str, validate(compiled_regex="pw"))
            .declaration()
        )

        result = compiled.validate({"password": "short", "password2": "alsoshort"})

        assert [error.field for error in result.errors] == ["password"]
        assert result.errors[0].rule is RuleKind.COMPILED_REGEX
        assert result.errors[0].arguments == {"identifier": "pw"}


class TestMatchChecks:
    """validate_match reads the target at call time."""

    @pytest.fixture
    def compiled(self):
        return compile_form(
            FormBuilder("SignupForm")
            .field("password", str)
            .field("password2", str, validate_match("password"))
            .declaration()
        )

    def test_match_passes_when_equal(self, compiled):
        assert compiled.validate({"password": "secret", "password2": "secret"}).ok

    def test_match_fails_when_different(self, compiled):
        result = compiled.validate({"password": "secret", "password2": "other"})

        assert len(result.errors) == 1
        assert result.errors[0].field == "password2"
        assert result.errors[0].message == "must match `password`"

    def test_no_caching_across_calls(self, compiled):
        instance = SimpleNamespace(password="one", password2="one")
        assert compiled.validate(instance).ok

        instance.password = "two"
        assert not compiled.validate(instance).ok

        instance.password2 = "two"
        assert compiled.validate(instance).ok


class TestInstanceAccess:
    """Objects and mappings are both accepted."""

    @dataclass
    class Login:
        username: str
        age: int

    def test_object_and_mapping_give_same_result(self):
        compiled = compile_form(
            FormBuilder("Login")
            .field("username", str, validate(min_length=3))
            .field("age", int, validate(min_value=18))
            .declaration()
        )

        from_object = compiled.validate(self.Login(username="mi", age=17))
        from_mapping = compiled({"username": "mi", "age": 17})

        assert from_object.errors == from_mapping.errors
        assert len(from_object.errors) == 2

    def test_missing_value_fails_its_rules(self):
        compiled = compiled_single(str, validate("email"), validate(min_length=1))

        result = compiled.validate({})

        assert [error.rule for error in result.errors] == [RuleKind.EMAIL, RuleKind.MIN_LENGTH]

    def test_optional_none_skips_rules(self):
        compiled = compiled_single(str, validate("optional", "email"))

        assert compiled.validate({"value": None}).ok
        assert not compiled.validate({"value": "nope"}).ok

    def test_optional_type_none_skips_rules(self):
        compiled = compiled_single("str?", validate(min_length=3))

        assert compiled.validate({"value": None}).ok
        assert compiled.validate({"value": "abc"}).ok
        assert not compiled.validate({"value": "ab"}).ok


class TestDescribeFailure:
    """Failure messages by kind."""

    def test_messages(self):
        assert describe_failure(MinLength(8)) == "must be at least 8 characters"
        assert describe_failure(MatchField("password")) == "must match `password`"

"""Tests for runtime validation results."""

from formrules.models import RuleKind, ValidationError, ValidationResult


class TestValidationError:
    """Test ValidationError class."""

    def test_string_representation(self):
        error = ValidationError("email", RuleKind.EMAIL, "invalid email address")

        assert str(error) == "email: invalid email address"

    def test_to_dict(self):
        error = ValidationError("age", RuleKind.MIN_VALUE, "must be at least 18", {"min": 18})

        assert error.to_dict() == {
            "field": "age",
            "rule": "min_value",
            "message": "must be at least 18",
            "arguments": {"min": 18},
        }


class TestValidationResult:
    """Test ValidationResult class."""

    def test_empty_result_is_ok(self):
        result = ValidationResult("LoginForm")

        assert result.ok
        assert list(result) == []
        assert result.to_dict() == {"form": "LoginForm", "valid": True, "errors": []}

    def test_errors_for_and_failed_fields(self):
        result = ValidationResult("SignupForm", (
            ValidationError("password", RuleKind.MIN_LENGTH, "must be at least 8 characters"),
            ValidationError("email", RuleKind.EMAIL, "invalid email address"),
            ValidationError("password", RuleKind.REGEX, "does not match pattern `^a`"),
        ))

        assert not result.ok
        assert len(result.errors_for("password")) == 2
        assert result.errors_for("username") == []
        assert result.failed_fields == ["password", "email"]
        assert result.to_dict()["valid"] is False

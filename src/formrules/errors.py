"""Build-time errors raised while compiling form declarations.

Every error here is fatal to producing a FormSpec. Validation failures found
at run time are never raised; they are returned as ValidationError values
(see formrules.models.result).
"""


class FormBuildError(Exception):
    """Base class for errors that prevent a FormSpec from being built."""

    def __init__(self, message: str, form: str | None = None, field: str | None = None,
                 attribute: str | None = None):
        self.detail = message
        self.form = form
        self.field = field
        self.attribute = attribute
        super().__init__(self._render())

    def _render(self) -> str:
        location = []
        if self.form:
            location.append(self.form)
        if self.field:
            location.append(self.field)
        prefix = ".".join(location)
        if self.attribute:
            prefix = f"{prefix} [{self.attribute}]" if prefix else f"[{self.attribute}]"
        return f"{prefix}: {self.detail}" if prefix else self.detail

    def with_context(self, form: str | None = None, field: str | None = None,
                     attribute: str | None = None) -> "FormBuildError":
        """Fill in context the raising site did not know about."""
        self.form = self.form or form
        self.field = self.field or field
        self.attribute = self.attribute or attribute
        self.args = (self._render(),)
        return self

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "error": type(self).__name__,
            "message": self.detail,
            "form": self.form,
            "field": self.field,
            "attribute": self.attribute,
        }


class MalformedDeclaration(FormBuildError):
    """Attribute syntax is wrong: unknown validator, arity or argument type."""


class DuplicateIdentifier(FormBuildError):
    """A pattern identifier was declared twice in the same struct scope."""

    def __init__(self, identifier: str, **context):
        self.identifier = identifier
        super().__init__(f"regex with id `{identifier}` already defined", **context)


class InvalidPattern(FormBuildError):
    """Pattern text does not compile."""

    def __init__(self, identifier: str, pattern: str, reason: str, subject: str | None = None, **context):
        self.identifier = identifier
        self.pattern = pattern
        subject = subject or f"`{identifier}`"
        super().__init__(f"invalid regex `{pattern}` for {subject}: {reason}", **context)


class UnknownIdentifier(FormBuildError):
    """A registry lookup named an identifier that was never declared."""

    def __init__(self, identifier: str, **context):
        self.identifier = identifier
        super().__init__(f"no regex with id `{identifier}`", **context)


class UnknownPatternReference(UnknownIdentifier):
    """A compiled_regex rule references a pattern missing from the registry."""

    def __init__(self, identifier: str, **context):
        super().__init__(identifier, **context)
        self.detail = (
            f"compiled_regex `{identifier}` requires a pre-compiled regex "
            f"via a `validate_regex` struct attribute"
        )
        self.args = (self._render(),)


class UnknownMatchTarget(FormBuildError):
    """A validate_match rule names a field that does not exist."""

    def __init__(self, target: str, reason: str | None = None, **context):
        self.target = target
        super().__init__(reason or f"validate_match target `{target}` is not a field", **context)


class TypeMismatch(FormBuildError):
    """Declared types disagree.

    ``mismatch`` is ``"field_vs_bound"`` when a rule argument does not fit the
    annotated field, or ``"field_vs_field"`` when a validate_match pair has
    different field types.
    """

    FIELD_VS_BOUND = "field_vs_bound"
    FIELD_VS_FIELD = "field_vs_field"

    def __init__(self, message: str, mismatch: str, **context):
        self.mismatch = mismatch
        super().__init__(message, **context)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["mismatch"] = self.mismatch
        return data


class FormBuildErrors(FormBuildError):
    """Several build errors collected in one pass."""

    def __init__(self, errors: list[FormBuildError], form: str | None = None):
        self.errors = list(errors)
        lines = "\n".join(f"  - {error}" for error in self.errors)
        super().__init__(f"{len(self.errors)} build error(s)\n{lines}", form=None)
        self.form = form

    def to_dict(self) -> dict:
        return {
            "error": type(self).__name__,
            "form": self.form,
            "errors": [error.to_dict() for error in self.errors],
        }


class BuildErrorCollector:
    """Collects build errors for one form, or raises the first in fail-fast mode."""

    def __init__(self, form: str, fail_fast: bool = False):
        self.form = form
        self.fail_fast = fail_fast
        self.errors: list[FormBuildError] = []

    def add(self, error: FormBuildError, field: str | None = None,
            attribute: str | None = None) -> None:
        error.with_context(form=self.form, field=field, attribute=attribute)
        if self.fail_fast:
            raise error
        self.errors.append(error)

    def raise_if_any(self) -> None:
        """Raise the single collected error, or all of them together."""
        if len(self.errors) == 1:
            raise self.errors[0]
        if self.errors:
            raise FormBuildErrors(self.errors, form=self.form)

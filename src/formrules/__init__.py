"""formrules - Declarative form-validation compiler.

formrules compiles validation intents attached to a structure's fields
(format checks, length and range bounds, cross-field equality, shared named
patterns) into an immutable FormSpec and a deterministic validation routine
that reports every violation in one call.
"""

__version__ = "0.1.0"
__author__ = "rpapub"
__email__ = "contact@rpapub.dev"
__description__ = "Declarative form-validation compiler"

from formrules.annotations import form
from formrules.compiler import CompiledForm, compile_form
from formrules.config import FormrulesConfig
from formrules.declarations import (
    FormBuilder,
    form_declaration_from_mapping,
    load_declarations,
    validate,
    validate_match,
    validate_regex,
)
from formrules.errors import FormBuildError, FormBuildErrors
from formrules.models import ValidationError, ValidationResult

__all__ = [
    "__version__",
    "__author__",
    "__email__",
    "__description__",
    "CompiledForm",
    "FormBuilder",
    "FormBuildError",
    "FormBuildErrors",
    "FormrulesConfig",
    "ValidationError",
    "ValidationResult",
    "compile_form",
    "form",
    "form_declaration_from_mapping",
    "load_declarations",
    "validate",
    "validate_match",
    "validate_regex",
]

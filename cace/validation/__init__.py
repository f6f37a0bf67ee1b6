"""Validator boundary: structural checks on agent dialect files."""

from cace.validation import agents as _agents  # noqa: F401  registers validators
from cace.validation.validator import (
    BaseValidator,
    Severity,
    ValidationIssue,
    ValidationResult,
    get_validator,
    register_validator,
    validate,
)

__all__ = [
    "BaseValidator",
    "Severity",
    "ValidationIssue",
    "ValidationResult",
    "get_validator",
    "register_validator",
    "validate",
]

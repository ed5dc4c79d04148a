"""
Enrollment error types.

Field-level problems travel as a ValidationResult inside FieldValidationError;
everything else is a distinct exception so callers can decide whether a retry
makes sense.
"""

from enrollment.rules import ValidationResult
from enrollment.state import WizardField


class EnrollmentError(Exception):
    """Base class for enrollment errors."""


class FieldValidationError(EnrollmentError):
    """One or more named fields failed validation. Recoverable by the user."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(f"Validation failed for: {', '.join(result.field_names())}")


class IntegrityConflict(EnrollmentError):
    """Storage rejected a write because of a uniqueness constraint."""

    def __init__(self, field: WizardField, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field.value}: {message}")

    def to_result(self) -> ValidationResult:
        result = ValidationResult()
        result.add(self.field, self.message)
        return result


class TransportFailure(EnrollmentError):
    """A remote call did not complete. Local state is left untouched."""


class AuthorizationFailure(EnrollmentError):
    """The anti-forgery token was rejected. Not retryable."""

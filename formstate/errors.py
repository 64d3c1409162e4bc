"""Structured error types for formstate.

Two families live here:

- FieldError, a value describing one validation violation. Validation
  failures are never raised; they are collected as FieldError records and
  grouped per field by formstate.validation.ValidationResult.
- Exception classes for programming errors, such as using a controller
  after it has been disposed.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from formstate.types import FieldErrorCode


@dataclass(frozen=True)
class FieldError:
    """Per-field validation error details.

    Represents a single validation failure with a specific error code,
    a human-readable message, and optional context about what was expected
    vs received.

    Attributes:
        path: Dot-notation field path (e.g., "email", "priceRange.min")
        code: Specific validation error code
        message: Human-readable error description
        expected: Optional - what was expected (type, format, enum values, etc.)
        received: Optional - what was actually received

    Examples:
        >>> err = FieldError(
        ...     path="email",
        ...     code=FieldErrorCode.INVALID_FORMAT,
        ...     message="Please enter a valid email address",
        ...     expected="email",
        ...     received="not-an-email"
        ... )
        >>> err.field
        'email'
    """
    path: str
    code: FieldErrorCode
    message: str
    expected: Optional[Any] = None
    received: Optional[Any] = None

    @property
    def field(self) -> str:
        """Top-level field this error belongs to."""
        return self.path.split(".", 1)[0]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "path": self.path,
            "code": self.code.value if isinstance(self.code, FieldErrorCode) else self.code,
            "message": self.message,
        }
        if self.expected is not None:
            result["expected"] = self.expected
        if self.received is not None:
            result["received"] = self.received
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldError":
        """Create FieldError from dict."""
        code = data["code"]
        if isinstance(code, str):
            code = FieldErrorCode(code)
        return cls(
            path=data["path"],
            code=code,
            message=data["message"],
            expected=data.get("expected"),
            received=data.get("received"),
        )


class FormError(Exception):
    """Base class for formstate programming errors."""


class FormDisposedError(FormError):
    """Raised when an operation is attempted on a disposed controller.

    Attributes:
        form_id: ID of the disposed form
        operation: Name of the rejected operation
    """

    def __init__(self, form_id: str, operation: str):
        self.form_id = form_id
        self.operation = operation
        super().__init__(
            f"Cannot call '{operation}' on form '{form_id}': the form has been disposed"
        )


__all__ = [
    "FieldError",
    "FormError",
    "FormDisposedError",
]

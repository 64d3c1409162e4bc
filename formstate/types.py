"""Core type definitions for formstate.

This module defines the fundamental types used throughout the form engine:
- FormPhase: Conceptual lifecycle phases of a form instance
- EventType: Event types published by a form controller
- FieldErrorCode: Validation error codes for individual fields
- FORM_ERROR_KEY: Reserved pseudo-field for form-level errors

A phase is never stored as the source of truth; it is derived from the
controller's flags (dirty, validating, submitting, disposed) and tracked by
formstate.state_machine.FormLifecycle.
"""

from enum import Enum

FORM_ERROR_KEY = "form"
"""Reserved field name for errors not attributable to a single field."""


class FormPhase(str, Enum):
    """Form lifecycle phases.

    Terminal phase: disposed.
    """
    CLEAN = "clean"
    EDITING = "editing"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    DISPOSED = "disposed"


class EventType(str, Enum):
    """Event types emitted by a FormController.

    Every state change a rendering layer might care about emits a typed
    event, so a caller can redraw from the latest snapshot.
    """
    FIELD_UPDATED = "field.updated"
    FIELD_TOUCHED = "field.touched"
    DATA_SETTLED = "data.settled"
    VALIDATION_PASSED = "validation.passed"
    VALIDATION_FAILED = "validation.failed"
    SUBMIT_STARTED = "submit.started"
    SUBMIT_REJECTED = "submit.rejected"
    SUBMIT_SUCCEEDED = "submit.succeeded"
    SUBMIT_FAILED = "submit.failed"
    AUTO_SAVE_TRIGGERED = "autosave.triggered"
    AUTO_SAVE_SKIPPED = "autosave.skipped"
    FORM_RESET = "form.reset"
    PHASE_CHANGED = "phase.changed"
    FORM_DISPOSED = "form.disposed"


class FieldErrorCode(str, Enum):
    """Validation error codes for individual field failures.

    Used in FieldError objects to give tooling a stable classification next
    to the human-readable message.
    """
    REQUIRED = "required"
    INVALID_TYPE = "invalid_type"
    INVALID_FORMAT = "invalid_format"
    INVALID_VALUE = "invalid_value"
    TOO_LONG = "too_long"
    TOO_SHORT = "too_short"
    MISMATCH = "mismatch"
    INTERNAL = "internal"
    CUSTOM = "custom"


__all__ = [
    "FORM_ERROR_KEY",
    "FormPhase",
    "EventType",
    "FieldErrorCode",
]

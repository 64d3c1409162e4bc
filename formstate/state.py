"""Form state snapshot and handler-facing action bundle."""

from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Mapping

from formstate.types import FormPhase


@dataclass(frozen=True)
class FormState:
    """Immutable snapshot of a form, recomputed on every read.

    ``data`` is a read-only view of the controller's dict. The controller
    replaces the dict (and its view) on every update and never mutates it in
    place, so consumers can compare snapshots by reference.

    Attributes:
        data: Current field values
        errors: At most one message per field; absent key means valid or unvalidated
        touched: Fields the user interacted with or a submit attempt swept in
        is_dirty: True iff data differs from the baseline snapshot
        is_valid: Result of whole-form validation against current data
        is_submitting: True while a submit handler is in flight
        phase: Lifecycle phase derived from the flags above
    """
    data: Mapping[str, Any]
    errors: Dict[str, str]
    touched: FrozenSet[str]
    is_dirty: bool
    is_valid: bool
    is_submitting: bool
    phase: FormPhase

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "data": dict(self.data),
            "errors": dict(self.errors),
            "touched": sorted(self.touched),
            "isDirty": self.is_dirty,
            "isValid": self.is_valid,
            "isSubmitting": self.is_submitting,
            "phase": self.phase.value,
        }


@dataclass(frozen=True)
class FormActions:
    """Bound controller operations handed to submit handlers."""
    update_field: Callable[[str, Any], None]
    set_error: Callable[[str, str], None]
    clear_error: Callable[[str], None]
    set_touched: Callable[..., None]
    validate_field: Callable[[str], bool]
    validate_form: Callable[[], bool]
    reset: Callable[..., None]
    set_submitting: Callable[[bool], None]


__all__ = [
    "FormState",
    "FormActions",
]

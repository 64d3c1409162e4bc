"""Form lifecycle tracker.

The phase of a form is never set directly by callers; the controller derives
it from its flags after every mutation (disposed > submitting > validating >
dirty) and reports it here. FormLifecycle checks each change against the
transition table and records a phase.changed event for it.

Usage:
    >>> lifecycle = FormLifecycle(form_id="contact")
    >>> lifecycle.phase
    <FormPhase.CLEAN: 'clean'>
    >>> event = lifecycle.transition_to(FormPhase.EDITING)
    >>> event.payload
    {'from_phase': 'clean', 'to_phase': 'editing'}
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

from formstate.events import FormEvent
from formstate.types import EventType, FormPhase


class InvalidPhaseTransitionError(Exception):
    """Raised when a phase change violates the transition table.

    Attributes:
        current_phase: The phase before the attempted transition
        target_phase: The phase that was attempted
    """

    def __init__(self, current_phase: FormPhase, target_phase: FormPhase, message: str):
        self.current_phase = current_phase
        self.target_phase = target_phase
        super().__init__(message)


# Validation runs synchronously and always hands back to clean/editing;
# the submitting flag is only raised after validation has finished.
VALID_TRANSITIONS: Dict[FormPhase, Set[FormPhase]] = {
    FormPhase.CLEAN: {
        FormPhase.EDITING,
        FormPhase.VALIDATING,
        FormPhase.SUBMITTING,
        FormPhase.DISPOSED,
    },
    FormPhase.EDITING: {
        FormPhase.CLEAN,
        FormPhase.VALIDATING,
        FormPhase.SUBMITTING,
        FormPhase.DISPOSED,
    },
    FormPhase.VALIDATING: {
        FormPhase.CLEAN,
        FormPhase.EDITING,
        FormPhase.DISPOSED,
    },
    FormPhase.SUBMITTING: {
        FormPhase.CLEAN,
        FormPhase.EDITING,
        FormPhase.DISPOSED,
    },
    # Terminal
    FormPhase.DISPOSED: set(),
}


@dataclass
class FormLifecycle:
    """Phase tracker for one form instance.

    Attributes:
        form_id: ID of the tracked form
        phase: Current phase
    """

    form_id: str
    phase: FormPhase = FormPhase.CLEAN
    _events: List[FormEvent] = field(default_factory=list, init=False, repr=False)

    def can_transition_to(self, target_phase: FormPhase) -> bool:
        return target_phase in VALID_TRANSITIONS.get(self.phase, set())

    def transition_to(self, target_phase: FormPhase) -> Optional[FormEvent]:
        """Move to ``target_phase`` and return the recorded event.

        Returns None when the form is already in ``target_phase``.

        Raises:
            InvalidPhaseTransitionError: If the transition is not allowed
        """
        if target_phase == self.phase:
            return None
        if not self.can_transition_to(target_phase):
            allowed = VALID_TRANSITIONS[self.phase]
            raise InvalidPhaseTransitionError(
                current_phase=self.phase,
                target_phase=target_phase,
                message=(
                    f"Invalid phase transition: cannot move from "
                    f"'{self.phase.value}' to '{target_phase.value}'. "
                    f"Valid transitions from '{self.phase.value}' are: "
                    f"{', '.join(sorted(p.value for p in allowed))}"
                    if allowed
                    else f"Invalid phase transition: '{self.phase.value}' is terminal, "
                    f"no transitions are allowed."
                ),
            )

        old_phase = self.phase
        self.phase = target_phase
        event = FormEvent(
            event_id=f"evt_{uuid.uuid4().hex[:16]}",
            type=EventType.PHASE_CHANGED,
            form_id=self.form_id,
            ts=datetime.now(timezone.utc),
            phase=target_phase,
            payload={"from_phase": old_phase.value, "to_phase": target_phase.value},
        )
        self._events.append(event)
        return event

    def is_terminal(self) -> bool:
        return len(VALID_TRANSITIONS[self.phase]) == 0

    def get_events(self) -> List[FormEvent]:
        """All phase changes in chronological order."""
        return list(self._events)


__all__ = [
    "FormLifecycle",
    "InvalidPhaseTransitionError",
    "VALID_TRANSITIONS",
]

"""Event system for formstate.

This module provides the FormEvent record and the EventEmitter used by a
FormController to publish what happened to its state. A rendering layer
subscribes to these events and redraws from the controller's latest
FormState snapshot; the controller itself never schedules re-renders.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from formstate.types import EventType, FormPhase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormEvent:
    """A single event in a form's lifecycle.

    Attributes:
        event_id: Unique event identifier (e.g., "evt_01H8...")
        type: Event type from EventType enum
        form_id: ID of the form this event relates to
        ts: UTC timestamp when the event occurred
        phase: Form phase after this event
        payload: Optional event-specific data (e.g., field name, errors)

    Examples:
        >>> from datetime import datetime, timezone
        >>> event = FormEvent(
        ...     event_id="evt_001",
        ...     type=EventType.FIELD_UPDATED,
        ...     form_id="contact",
        ...     ts=datetime.now(timezone.utc),
        ...     phase=FormPhase.EDITING,
        ...     payload={"field": "email"}
        ... )
        >>> event.to_dict()["type"]
        'field.updated'
    """
    event_id: str
    type: EventType
    form_id: str
    ts: datetime
    phase: FormPhase
    payload: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        """Normalize string enum values."""
        if isinstance(self.type, str) and not isinstance(self.type, EventType):
            object.__setattr__(self, "type", EventType(self.type))
        if isinstance(self.phase, str) and not isinstance(self.phase, FormPhase):
            object.__setattr__(self, "phase", FormPhase(self.phase))

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization.

        Timestamp is formatted as an ISO 8601 string.
        """
        result: Dict[str, Any] = {
            "eventId": self.event_id,
            "type": self.type.value,
            "formId": self.form_id,
            "ts": self.ts.isoformat(),
            "phase": self.phase.value,
        }
        if self.payload is not None:
            result["payload"] = self.payload
        return result

    def to_jsonl(self) -> str:
        """Convert event to a single-line JSON string."""
        return json.dumps(self.to_dict(), separators=(",", ":"), default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormEvent":
        """Create FormEvent from dictionary (camelCase keys)."""
        ts = datetime.fromisoformat(data["ts"].replace("Z", "+00:00"))
        return cls(
            event_id=data["eventId"],
            type=EventType(data["type"]),
            form_id=data["formId"],
            ts=ts,
            phase=FormPhase(data["phase"]),
            payload=data.get("payload"),
        )


EventListener = Callable[[FormEvent], None]
"""Type alias for event listener callbacks.

Listeners are called synchronously when events are emitted and should not
perform long-running work.
"""


class EventEmitter:
    """Observer list dispatching FormEvents to subscribers.

    Features:
    - Type-specific subscriptions (listen to specific event types)
    - Wildcard subscriptions (listen to all events)
    - Synchronous dispatch (listeners called in registration order)
    - Error isolation (a failing listener is logged, the others still run)

    Examples:
        >>> emitter = EventEmitter()
        >>> seen = []
        >>> emitter.on(EventType.FORM_RESET, seen.append)
        >>> emitter.on_any(lambda e: None)
        >>> emitter.listener_count()
        2
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[EventListener]] = {}
        self._any_listeners: List[EventListener] = []

    def on(self, event_type: EventType, listener: EventListener) -> None:
        """Subscribe to a specific event type."""
        self._listeners.setdefault(event_type, []).append(listener)

    def on_any(self, listener: EventListener) -> None:
        """Subscribe to all event types."""
        self._any_listeners.append(listener)

    def off(self, event_type: EventType, listener: EventListener) -> None:
        """Unsubscribe from a specific event type."""
        if event_type in self._listeners:
            try:
                self._listeners[event_type].remove(listener)
            except ValueError:
                pass  # Listener not registered, ignore

    def off_any(self, listener: EventListener) -> None:
        """Unsubscribe from the wildcard subscription."""
        try:
            self._any_listeners.remove(listener)
        except ValueError:
            pass  # Listener not registered, ignore

    def emit(self, event: FormEvent) -> None:
        """Dispatch an event to all registered listeners.

        Type-specific listeners run first, then wildcard listeners. A listener
        that raises is logged and skipped so the others still run.
        """
        listeners = list(self._listeners.get(event.type, [])) + list(self._any_listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "Listener %r failed handling %s for form %s",
                    listener,
                    event.type.value,
                    event.form_id,
                )

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners.clear()
        self._any_listeners.clear()

    def listener_count(self, event_type: Optional[EventType] = None) -> int:
        """Count registered listeners, for one type or overall (including wildcard)."""
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        total = len(self._any_listeners)
        for listeners in self._listeners.values():
            total += len(listeners)
        return total


__all__ = [
    "FormEvent",
    "EventType",
    "EventListener",
    "EventEmitter",
]

"""FormController: form state, validation timing and submission lifecycle.

The controller owns the mutable state of one form instance (data, per-field
errors, touched set, submitting flag) and coordinates:

- when validation runs: on demand, after typing settles (debounced), on blur
  (immediate), and on submit (against the latest, non-debounced data);
- an optional auto-save timer, independent of the validation debounce and
  suppressed while a submission is in flight;
- the submit lifecycle: touch every field, validate, focus the first invalid
  field or run the handler, always clearing the submitting flag afterward.

Everything runs on a single asyncio event loop; the only suspension point is
the caller-supplied submit handler (and, in the background, an async
auto-save callback).

Usage:
    >>> controller = create_form(
    ...     schema={"type": "object", "properties": {"name": {"type": "string", "minLength": 1}},
    ...             "required": ["name"]},
    ...     initial_data={"name": ""},
    ... )
    >>> controller.validate_form()
    False
    >>> controller.update_field("name", "Jo")
    >>> controller.validate_form()
    True
"""

import asyncio
import copy
import inspect
import logging
import uuid
from types import MappingProxyType
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Mapping, Optional, Set

from formstate import validation
from formstate.binding import FieldOptions, FieldProps, bind_field
from formstate.config import FormOptions, SubmitHandler
from formstate.debounce import Debouncer
from formstate.errors import FormDisposedError
from formstate.events import EventEmitter, EventListener, FormEvent
from formstate.state import FormActions, FormState
from formstate.state_machine import FormLifecycle
from formstate.types import EventType, FormPhase
from formstate.validation import Schema, ValidationResult

logger = logging.getLogger(__name__)

SubmitProcedure = Callable[..., Awaitable[bool]]


class FormController:
    """State machine behind a single data-entry form.

    Attributes:
        form_id: Identifier used in events and log records
        options: The FormOptions this controller was built with
        schema: The resolved Schema, or None when the form is unvalidated
    """

    def __init__(
        self,
        options: Optional[FormOptions] = None,
        *,
        form_id: Optional[str] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.options = options or FormOptions()
        self.form_id = form_id or f"form_{uuid.uuid4().hex[:12]}"
        self.schema: Optional[Schema] = self.options.schema
        self._loop = loop

        self._baseline: Dict[str, Any] = copy.deepcopy(dict(self.options.initial_data))
        self._data: Dict[str, Any] = copy.deepcopy(self._baseline)
        self._data_view: Mapping[str, Any] = MappingProxyType(self._data)
        self._errors: Dict[str, str] = {}
        self._touched: FrozenSet[str] = frozenset()
        self._is_submitting = False
        self._is_validating = False
        self._submit_token: Optional[object] = None
        self._disposed = False
        self._last_result: Optional[ValidationResult] = None
        self._validity_for: Optional[Dict[str, Any]] = None
        self._validity = False
        self._fields: Dict[str, Any] = {}
        self._auto_save_tasks: Set["asyncio.Future[Any]"] = set()

        self._emitter = EventEmitter()
        self._lifecycle = FormLifecycle(form_id=self.form_id)

        self._change_debouncer: Debouncer = Debouncer(self.options.debounce_ms, loop=loop)
        self._change_debouncer.subscribe(self._on_data_settled)

        self._auto_save_timer: Optional[Debouncer] = None
        if self.options.auto_save.active:
            self._auto_save_timer = Debouncer(self.options.auto_save.interval_ms, loop=loop)
            self._auto_save_timer.subscribe(self._on_auto_save_due)

        self.actions = FormActions(
            update_field=self.update_field,
            set_error=self.set_error,
            clear_error=self.clear_error,
            set_touched=self.set_touched,
            validate_field=self.validate_field,
            validate_form=self.validate_form,
            reset=self.reset_form,
            set_submitting=self.set_submitting,
        )

    def __repr__(self) -> str:
        return f"FormController(form_id={self.form_id!r}, phase={self.phase.value!r})"

    def __enter__(self) -> "FormController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    # Read-only state

    @property
    def form_state(self) -> FormState:
        """Snapshot of the current state."""
        return FormState(
            data=self._data_view,
            errors=dict(self._errors),
            touched=self._touched,
            is_dirty=self.is_dirty,
            is_valid=self.is_valid,
            is_submitting=self._is_submitting,
            phase=self.phase,
        )

    @property
    def data(self) -> Mapping[str, Any]:
        """Read-only view of the current values; a new view after every update."""
        return self._data_view

    @property
    def errors(self) -> Dict[str, str]:
        return dict(self._errors)

    @property
    def touched(self) -> FrozenSet[str]:
        return self._touched

    @property
    def is_dirty(self) -> bool:
        return self._data != self._baseline

    @property
    def is_valid(self) -> bool:
        """Whole-form validity of the current data, not just an empty error map."""
        if self.schema is None:
            return not self._errors
        if self._validity_for is not self._data:
            self._validity = validation.validate(self.schema, self._data).success
            self._validity_for = self._data
        return self._validity

    @property
    def is_submitting(self) -> bool:
        return self._is_submitting

    @property
    def phase(self) -> FormPhase:
        return self._lifecycle.phase

    @property
    def last_result(self) -> Optional[ValidationResult]:
        """The most recent whole-form result, with every violation retained."""
        return self._last_result

    @property
    def disposed(self) -> bool:
        return self._disposed

    def get_field_value(self, field: str) -> Any:
        return self._data.get(field)

    def get_field_error(self, field: str) -> Optional[str]:
        return self._errors.get(field)

    def is_field_touched(self, field: str) -> bool:
        return field in self._touched

    def is_field_valid(self, field: str) -> bool:
        return field not in self._errors

    # Events

    def on(self, event_type: EventType, listener: EventListener) -> None:
        self._emitter.on(event_type, listener)

    def on_any(self, listener: EventListener) -> None:
        self._emitter.on_any(listener)

    def off(self, event_type: EventType, listener: EventListener) -> None:
        self._emitter.off(event_type, listener)

    def off_any(self, listener: EventListener) -> None:
        self._emitter.off_any(listener)

    # Mutations

    def update_field(self, field: str, value: Any) -> None:
        """Store a new value for ``field``.

        An existing error for the field is cleared optimistically; the next
        debounced pass or blur re-validates it.
        """
        self._ensure_active("update_field")
        self._replace_data({**self._data, field: value})
        if field in self._errors:
            self._errors = {k: v for k, v in self._errors.items() if k != field}
        self._emit(EventType.FIELD_UPDATED, {"field": field})
        self._after_data_change()

    def set_field_value(self, field: str, value: Any) -> None:
        self.update_field(field, value)

    def set_form_data(self, partial: Mapping[str, Any]) -> None:
        """Merge several field values in one update."""
        self._ensure_active("set_form_data")
        self._replace_data({**self._data, **partial})
        self._emit(EventType.FIELD_UPDATED, {"fields": list(partial)})
        self._after_data_change()

    def set_touched(self, field: str, touched: bool = True) -> None:
        """Mark ``field`` touched. Touched fields only become untouched on reset."""
        self._ensure_active("set_touched")
        if not touched:
            if field in self._touched:
                logger.debug(
                    "Form %s: ignoring request to untouch %r before reset", self.form_id, field
                )
            return
        if field in self._touched:
            return
        self._touched = self._touched | {field}
        self._emit(EventType.FIELD_TOUCHED, {"field": field})

    def set_error(self, field: str, message: str) -> None:
        self._ensure_active("set_error")
        self._errors = {**self._errors, field: message}

    def clear_error(self, field: str) -> None:
        self._ensure_active("clear_error")
        if field in self._errors:
            self._errors = {k: v for k, v in self._errors.items() if k != field}

    def set_submitting(self, submitting: bool) -> None:
        """Override the submitting flag, e.g. from inside a submit handler."""
        self._ensure_active("set_submitting")
        self._is_submitting = submitting
        if submitting and self._auto_save_timer is not None:
            self._auto_save_timer.cancel()
        self._sync_phase()
        if not submitting:
            self._schedule_auto_save()

    def register_field(self, field: str, element: Any) -> None:
        """Remember the input for ``field`` so a failed submit can focus it."""
        if element is None:
            self._fields.pop(field, None)
        else:
            self._fields[field] = element

    # Validation

    def validate_field(self, field: str) -> bool:
        """Re-validate one field against the current data and update its error."""
        self._ensure_active("validate_field")
        if self.schema is None:
            return True
        result = validation.validate_field(self.schema, field, self._data.get(field), self._data)
        if result.is_valid:
            if field in self._errors:
                self._errors = {k: v for k, v in self._errors.items() if k != field}
            self._emit(EventType.VALIDATION_PASSED, {"field": field})
        else:
            self._errors = {**self._errors, field: result.error}
            self._emit(EventType.VALIDATION_FAILED, {"field": field, "error": result.error})
        return result.is_valid

    def validate_form(self) -> bool:
        """Re-validate the whole form; the error map is replaced, not merged."""
        self._ensure_active("validate_form")
        if self.schema is None:
            return not self._errors
        return self._run_form_validation(self._data).success

    def request_field_validation(self, field: str) -> None:
        """Validate ``field`` on the next loop iteration (immediately without a loop)."""
        self._ensure_active("request_field_validation")
        loop = self._resolve_loop()
        if loop is None:
            self.validate_field(field)
            return
        loop.call_soon(self._deferred_validate_field, field)

    # Submission

    def handle_submit(self, handler: Optional[SubmitHandler] = None) -> SubmitProcedure:
        """Build the submit procedure.

        The returned coroutine function accepts an optional UI event (its
        ``prevent_default`` is called when present) and returns True when the
        handler ran to completion, False when the attempt was skipped because
        a submit was in flight or rejected because the form is invalid.
        Exceptions raised by the handler propagate to the caller.
        """

        async def submit(event: Any = None) -> bool:
            prevent_default = getattr(event, "prevent_default", None)
            if callable(prevent_default):
                prevent_default()
            return await self._submit(handler)

        return submit

    async def submit_form(self) -> bool:
        return await self.handle_submit()()

    async def _submit(self, handler: Optional[SubmitHandler]) -> bool:
        self._ensure_active("submit")
        if self._is_submitting:
            logger.debug("Form %s is already submitting; ignoring submit", self.form_id)
            return False

        for name in list(self._data):
            self.set_touched(name)

        if not self.validate_form():
            focused = self._focus_first_error() if self.options.focus_on_error else None
            self._emit(
                EventType.SUBMIT_REJECTED,
                {"errors": dict(self._errors), "focused": focused},
            )
            return False

        submit_handler = handler or self.options.on_submit
        data = self._data_view
        token = object()
        self._submit_token = token
        self._is_submitting = True
        if self._auto_save_timer is not None:
            self._auto_save_timer.cancel()
        self._sync_phase()
        self._emit(EventType.SUBMIT_STARTED)

        current = False
        try:
            if submit_handler is not None:
                outcome = submit_handler(data, self.actions)
                if inspect.isawaitable(outcome):
                    await outcome
        except Exception as exc:
            if not self._disposed:
                self._emit(EventType.SUBMIT_FAILED, {"error": repr(exc)})
            raise
        finally:
            current = self._finish_submit(token)

        if not current:
            logger.debug("Form %s: submit finished after dispose or reset; result discarded", self.form_id)
            return True
        self._emit(EventType.SUBMIT_SUCCEEDED)
        if self.options.reset_on_submit:
            self.reset_form()
        return True

    def _finish_submit(self, token: object) -> bool:
        """Clear the submitting flag if ``token`` still owns the submission."""
        if self._disposed or token is not self._submit_token:
            return False
        self._submit_token = None
        self._is_submitting = False
        self._sync_phase()
        self._schedule_auto_save()
        return True

    def _focus_first_error(self) -> Optional[str]:
        order = list(self._data) + [k for k in self._errors if k not in self._data]
        first = next((name for name in order if name in self._errors), None)
        if first is None:
            return None
        focus = getattr(self._fields.get(first), "focus", None)
        if not callable(focus):
            logger.debug("Form %s: no focusable input registered for %r", self.form_id, first)
            return None
        focus()
        return first

    # Reset / dispose

    def reset_form(self, new_data: Optional[Mapping[str, Any]] = None) -> None:
        """Replace data with ``new_data`` (or the baseline) and clear all tracking.

        The reset target becomes the new baseline for dirty comparison.
        """
        self._ensure_active("reset_form")
        target = self._baseline if new_data is None else dict(new_data)
        self._baseline = copy.deepcopy(target)
        self._replace_data(copy.deepcopy(target))
        self._errors = {}
        self._touched = frozenset()
        self._is_submitting = False
        self._submit_token = None
        self._last_result = None
        self._change_debouncer.cancel()
        if self._auto_save_timer is not None:
            self._auto_save_timer.cancel()
        self._sync_phase()
        self._emit(EventType.FORM_RESET, {"fields": list(self._data)})

    def dispose(self) -> None:
        """Cancel both timers and detach listeners. Safe to call twice.

        A submit already in flight keeps running, but its result is not
        applied.
        """
        if self._disposed:
            return
        self._change_debouncer.dispose()
        if self._auto_save_timer is not None:
            self._auto_save_timer.dispose()
        self._disposed = True
        self._sync_phase()
        self._emit(EventType.FORM_DISPOSED)
        self._emitter.clear()
        self._fields.clear()

    # Field binding

    def get_field_props(self, field: str, options: Optional[FieldOptions] = None) -> FieldProps:
        return bind_field(self, field, options)

    # Internals

    def _ensure_active(self, operation: str) -> None:
        if self._disposed:
            raise FormDisposedError(self.form_id, operation)

    def _replace_data(self, data: Dict[str, Any]) -> None:
        self._data = data
        self._data_view = MappingProxyType(data)

    def _resolve_loop(self) -> Optional[asyncio.AbstractEventLoop]:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    def _derive_phase(self) -> FormPhase:
        if self._disposed:
            return FormPhase.DISPOSED
        if self._is_submitting:
            return FormPhase.SUBMITTING
        if self._is_validating:
            return FormPhase.VALIDATING
        return FormPhase.EDITING if self.is_dirty else FormPhase.CLEAN

    def _sync_phase(self) -> None:
        event = self._lifecycle.transition_to(self._derive_phase())
        if event is not None:
            self._emitter.emit(event)

    def _emit(self, event_type: EventType, payload: Optional[Dict[str, Any]] = None) -> None:
        self._emitter.emit(
            FormEvent(
                event_id=f"evt_{uuid.uuid4().hex[:16]}",
                type=event_type,
                form_id=self.form_id,
                ts=datetime.now(timezone.utc),
                phase=self._lifecycle.phase,
                payload=payload,
            )
        )

    def _after_data_change(self) -> None:
        if self.options.validate_on_change and self.schema is not None:
            self._change_debouncer.push(self._data)
        self._schedule_auto_save()
        self._sync_phase()

    def _run_form_validation(self, data: Dict[str, Any]) -> ValidationResult:
        self._is_validating = True
        self._sync_phase()
        try:
            result = validation.validate(self.schema, data)
        finally:
            self._is_validating = False
        self._last_result = result
        self._errors = dict(result.field_errors)
        if data is self._data:
            self._validity_for = data
            self._validity = result.success
        self._sync_phase()
        if result.success:
            self._emit(EventType.VALIDATION_PASSED)
        else:
            self._emit(EventType.VALIDATION_FAILED, {"errors": dict(self._errors)})
        if self.options.on_validation_change is not None:
            self.options.on_validation_change(result.success, dict(self._errors))
        return result

    def _on_data_settled(self, settled: Dict[str, Any]) -> None:
        if self._disposed:
            return
        self._emit(EventType.DATA_SETTLED)
        if not self._touched:
            return
        self._run_form_validation(settled)

    def _deferred_validate_field(self, field: str) -> None:
        if not self._disposed:
            self.validate_field(field)

    def _schedule_auto_save(self) -> None:
        if self._auto_save_timer is None:
            return
        if self.is_dirty and not self._is_submitting:
            self._auto_save_timer.push(self._data)
        else:
            self._auto_save_timer.cancel()

    def _on_auto_save_due(self, _armed: Dict[str, Any]) -> None:
        if self._disposed:
            return
        # Raising the submitting flag cancels the timer; this only guards a direct flush.
        if self._is_submitting:
            logger.debug("Form %s: auto-save suppressed while submitting", self.form_id)
            self._emit(EventType.AUTO_SAVE_SKIPPED, {"reason": "submitting"})
            return
        self._emit(EventType.AUTO_SAVE_TRIGGERED)
        try:
            outcome = self.options.auto_save.on_auto_save(self._data_view)
        except Exception:
            logger.exception("Form %s: auto-save callback failed", self.form_id)
            return
        if inspect.isawaitable(outcome):
            task = asyncio.ensure_future(outcome)
            self._auto_save_tasks.add(task)
            task.add_done_callback(self._on_auto_save_done)

    def _on_auto_save_done(self, task: "asyncio.Future[Any]") -> None:
        self._auto_save_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Form %s: auto-save callback failed", self.form_id, exc_info=exc)


def create_form(
    *,
    form_id: Optional[str] = None,
    loop: Optional[asyncio.AbstractEventLoop] = None,
    **options: Any,
) -> FormController:
    """Build FormOptions from keyword arguments and a controller around them.

    Examples:
        >>> form = create_form(initial_data={"query": ""}, validate_on_change=False)
        >>> form.form_state.is_dirty
        False
    """
    return FormController(FormOptions(**options), form_id=form_id, loop=loop)


__all__ = [
    "FormController",
    "SubmitProcedure",
    "create_form",
]

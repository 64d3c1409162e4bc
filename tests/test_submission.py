"""Tests for the submit lifecycle.

Tests cover:
- Touch-all, validate and handler invocation order
- Rejection with focus on the first invalid field
- At most one submission in flight
- Handler exceptions propagating while the flag is still cleared
- Reset and dispose while a submission is in flight
- reset_on_submit and the prevent_default hook
"""

import asyncio

import pytest

from formstate.controller import create_form
from formstate.errors import FormDisposedError
from formstate.types import EventType, FormPhase


SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "email": {"type": "string", "format": "email"},
    },
    "required": ["name", "email"],
}

VALID = {"name": "Jo", "email": "jo@x.com"}


class FakeInput:
    def __init__(self):
        self.focused = 0

    def focus(self):
        self.focused += 1


class FakeSubmitEvent:
    def __init__(self):
        self.prevented = False

    def prevent_default(self):
        self.prevented = True


def make_form(**options):
    options.setdefault("initial_data", dict(VALID))
    options.setdefault("debounce_ms", 10)
    return create_form(schema=SCHEMA, **options)


class TestSuccessfulSubmit:
    """Test submitting valid data."""

    @pytest.mark.asyncio
    async def test_handler_receives_data_and_actions(self):
        """Should call the handler once with the current data and actions."""
        form = make_form()
        calls = []

        async def handler(data, actions):
            calls.append((data, actions))

        assert await form.handle_submit(handler)() is True
        assert len(calls) == 1
        assert calls[0][0] == VALID
        assert calls[0][1] is form.actions
        assert form.is_submitting is False

    @pytest.mark.asyncio
    async def test_sync_handler_supported(self):
        """Should accept a plain function as the handler."""
        form = make_form()
        calls = []

        assert await form.handle_submit(lambda data, actions: calls.append(data))() is True
        assert calls == [VALID]

    @pytest.mark.asyncio
    async def test_every_field_touched(self):
        """Should mark every field touched before validating."""
        form = make_form()
        await form.handle_submit(lambda d, a: None)()

        assert form.touched == frozenset({"name", "email"})

    @pytest.mark.asyncio
    async def test_default_handler_from_options(self):
        """Should fall back to on_submit from the options."""
        calls = []
        form = make_form(on_submit=lambda data, actions: calls.append(data))

        assert await form.submit_form() is True
        assert calls == [VALID]

    @pytest.mark.asyncio
    async def test_prevent_default_called(self):
        """Should call prevent_default on a UI submit event."""
        form = make_form()
        event = FakeSubmitEvent()

        await form.handle_submit(lambda d, a: None)(event)

        assert event.prevented

    @pytest.mark.asyncio
    async def test_flag_set_during_handler(self):
        """Should report SUBMITTING while the handler runs."""
        form = make_form()
        seen = []

        async def handler(data, actions):
            seen.append((form.is_submitting, form.phase))

        await form.handle_submit(handler)()

        assert seen == [(True, FormPhase.SUBMITTING)]
        assert form.phase == FormPhase.CLEAN

    @pytest.mark.asyncio
    async def test_reset_on_submit(self):
        """Should reset to the baseline after a successful submit."""
        form = make_form(initial_data={"name": "", "email": ""}, reset_on_submit=True)
        form.set_form_data(VALID)

        await form.handle_submit(lambda d, a: None)()

        assert form.data == {"name": "", "email": ""}
        assert form.touched == frozenset()

    @pytest.mark.asyncio
    async def test_lifecycle_events(self):
        """Should publish started then succeeded."""
        form = make_form()
        seen = []
        form.on_any(lambda e: seen.append(e.type))

        await form.handle_submit(lambda d, a: None)()

        submit_events = [t for t in seen if t.value.startswith("submit.")]
        assert submit_events == [EventType.SUBMIT_STARTED, EventType.SUBMIT_SUCCEEDED]

    @pytest.mark.asyncio
    async def test_handler_uses_actions(self):
        """Should let the handler report server-side errors through actions."""
        form = make_form()

        async def handler(data, actions):
            actions.set_error("email", "Already registered")

        await form.handle_submit(handler)()

        assert form.errors == {"email": "Already registered"}


class TestRejectedSubmit:
    """Test submitting invalid data."""

    @pytest.mark.asyncio
    async def test_handler_not_called(self):
        """Should skip the handler and surface every error."""
        form = make_form(initial_data={"name": "", "email": "bad"})
        calls = []

        assert await form.handle_submit(lambda d, a: calls.append(d))() is False
        assert calls == []
        assert set(form.errors) == {"name", "email"}
        assert form.touched == frozenset({"name", "email"})
        assert form.is_submitting is False

    @pytest.mark.asyncio
    async def test_first_invalid_field_focused(self):
        """Should focus the first invalid field in data order."""
        form = make_form(initial_data={"name": "Jo", "email": "bad"})
        name_input, email_input = FakeInput(), FakeInput()
        form.register_field("name", name_input)
        form.register_field("email", email_input)

        await form.handle_submit(lambda d, a: None)()

        assert email_input.focused == 1
        assert name_input.focused == 0

    @pytest.mark.asyncio
    async def test_focus_disabled(self):
        """Should not focus anything when focus_on_error is off."""
        form = make_form(initial_data={"name": "", "email": "bad"}, focus_on_error=False)
        name_input = FakeInput()
        form.register_field("name", name_input)

        await form.handle_submit(lambda d, a: None)()

        assert name_input.focused == 0

    @pytest.mark.asyncio
    async def test_missing_focus_target_is_ignored(self):
        """Should not fail when the first invalid field has no registered input."""
        form = make_form(initial_data={"name": "", "email": "bad"})
        email_input = FakeInput()
        form.register_field("email", email_input)

        assert await form.handle_submit(lambda d, a: None)() is False
        assert email_input.focused == 0

    @pytest.mark.asyncio
    async def test_rejected_event(self):
        """Should publish submit.rejected with the errors."""
        form = make_form(initial_data={"name": "", "email": "jo@x.com"})
        seen = []
        form.on(EventType.SUBMIT_REJECTED, seen.append)

        await form.handle_submit(lambda d, a: None)()

        assert list(seen[0].payload["errors"]) == ["name"]


class TestSingleFlight:
    """Test that at most one submission runs at a time."""

    @pytest.mark.asyncio
    async def test_concurrent_submit_ignored(self):
        """Should run the handler once for two overlapping submits."""
        form = make_form()
        release = asyncio.Event()
        calls = []

        async def handler(data, actions):
            calls.append(data)
            await release.wait()

        submit = form.handle_submit(handler)
        first = asyncio.ensure_future(submit())
        await asyncio.sleep(0)
        assert form.is_submitting

        assert await submit() is False
        release.set()
        assert await first is True

        assert len(calls) == 1
        assert form.is_submitting is False

    @pytest.mark.asyncio
    async def test_gathered_submits(self):
        """Should accept exactly one of two submits started together."""
        form = make_form()
        release = asyncio.Event()
        calls = []

        async def handler(data, actions):
            calls.append(data)
            await release.wait()

        submit = form.handle_submit(handler)
        both = asyncio.gather(submit(), submit())
        await asyncio.sleep(0.01)
        release.set()

        assert sorted(await both) == [False, True]
        assert len(calls) == 1


class TestHandlerFailure:
    """Test handler exceptions."""

    @pytest.mark.asyncio
    async def test_exception_propagates_and_flag_cleared(self):
        """Should re-raise the handler's exception after clearing the flag."""
        form = make_form()

        async def handler(data, actions):
            raise RuntimeError("network")

        with pytest.raises(RuntimeError, match="network"):
            await form.handle_submit(handler)()

        assert form.is_submitting is False
        assert form.phase == FormPhase.CLEAN

    @pytest.mark.asyncio
    async def test_failed_event(self):
        """Should publish submit.failed."""
        form = make_form()
        seen = []
        form.on(EventType.SUBMIT_FAILED, seen.append)

        def handler(data, actions):
            raise ValueError("bad gateway")

        with pytest.raises(ValueError):
            await form.handle_submit(handler)()

        assert "bad gateway" in seen[0].payload["error"]

    @pytest.mark.asyncio
    async def test_form_usable_after_failure(self):
        """Should accept another submit after a failure."""
        form = make_form()

        async def failing(data, actions):
            raise RuntimeError("network")

        with pytest.raises(RuntimeError):
            await form.handle_submit(failing)()

        assert await form.handle_submit(lambda d, a: None)() is True


class TestInterruptedSubmit:
    """Test reset and dispose while a submit is in flight."""

    @pytest.mark.asyncio
    async def test_reset_during_flight(self):
        """Should keep a stale finish from touching the reset state."""
        form = make_form()
        release = asyncio.Event()

        async def slow(data, actions):
            await release.wait()

        first = asyncio.ensure_future(form.handle_submit(slow)())
        await asyncio.sleep(0)
        form.reset_form()
        assert form.is_submitting is False

        # A new submit started after the reset owns the flag.
        second_release = asyncio.Event()

        async def second_handler(data, actions):
            await second_release.wait()

        second = asyncio.ensure_future(form.handle_submit(second_handler)())
        await asyncio.sleep(0)
        assert form.is_submitting

        release.set()
        assert await first is True
        assert form.is_submitting is True

        second_release.set()
        assert await second is True
        assert form.is_submitting is False

    @pytest.mark.asyncio
    async def test_dispose_during_flight(self):
        """Should let the handler finish without applying its result."""
        form = make_form()
        release = asyncio.Event()
        seen = []
        form.on(EventType.SUBMIT_SUCCEEDED, seen.append)

        async def slow(data, actions):
            await release.wait()

        pending = asyncio.ensure_future(form.handle_submit(slow)())
        await asyncio.sleep(0)
        form.dispose()
        release.set()

        assert await pending is True
        assert seen == []
        assert form.phase == FormPhase.DISPOSED

    @pytest.mark.asyncio
    async def test_submit_after_dispose_raises(self):
        """Should refuse to submit a disposed form."""
        form = make_form()
        form.dispose()

        with pytest.raises(FormDisposedError):
            await form.handle_submit(lambda d, a: None)()


class TestManualSubmittingFlag:
    """Test set_submitting."""

    @pytest.mark.asyncio
    async def test_set_submitting_blocks_submit(self):
        """Should treat a manually raised flag as a submit in flight."""
        form = make_form()
        form.set_submitting(True)

        assert await form.handle_submit(lambda d, a: None)() is False

        form.set_submitting(False)
        assert await form.handle_submit(lambda d, a: None)() is True

"""Tests for the auto-save side channel.

Tests cover:
- Auto-save firing once after edits pause, with the latest data
- No auto-save for clean forms or while submitting
- Failing callbacks logged, never raised
- Dispose cancelling a pending auto-save
"""

import asyncio

import pytest

from formstate.config import AutoSaveOptions
from formstate.controller import create_form
from formstate.types import EventType


def make_form(callback, interval_ms=30, **options):
    options.setdefault("initial_data", {"bio": ""})
    return create_form(
        auto_save=AutoSaveOptions(enabled=True, on_auto_save=callback, interval_ms=interval_ms),
        **options,
    )


class TestAutoSaveTiming:
    """Test when auto-save fires."""

    @pytest.mark.asyncio
    async def test_fires_once_with_latest_data(self):
        """Should call the callback once, after the interval, with the latest data."""
        saved = []
        form = make_form(saved.append)

        form.update_field("bio", "H")
        form.update_field("bio", "Hi")
        await asyncio.sleep(0.01)
        assert saved == []

        await asyncio.sleep(0.06)
        assert saved == [{"bio": "Hi"}]

    @pytest.mark.asyncio
    async def test_async_callback_awaited(self):
        """Should run an async callback in the background."""
        saved = []

        async def save(data):
            await asyncio.sleep(0)
            saved.append(data)

        form = make_form(save)
        form.update_field("bio", "Hi")
        await asyncio.sleep(0.08)

        assert saved == [{"bio": "Hi"}]

    @pytest.mark.asyncio
    async def test_clean_form_not_saved(self):
        """Should cancel auto-save when edits return to the baseline."""
        saved = []
        form = make_form(saved.append)

        form.update_field("bio", "Hi")
        form.update_field("bio", "")
        await asyncio.sleep(0.08)

        assert saved == []

    @pytest.mark.asyncio
    async def test_disabled_auto_save(self):
        """Should never fire when disabled."""
        saved = []
        form = create_form(
            initial_data={"bio": ""},
            auto_save=AutoSaveOptions(enabled=False, on_auto_save=saved.append, interval_ms=10),
        )

        form.update_field("bio", "Hi")
        await asyncio.sleep(0.05)

        assert saved == []

    @pytest.mark.asyncio
    async def test_independent_of_validation_debounce(self):
        """Should use its own interval, not the validation debounce."""
        saved = []
        form = make_form(saved.append, interval_ms=20, debounce_ms=1000)

        form.update_field("bio", "Hi")
        await asyncio.sleep(0.06)

        assert saved == [{"bio": "Hi"}]

    @pytest.mark.asyncio
    async def test_triggered_event(self):
        """Should publish autosave.triggered."""
        form = make_form(lambda data: None)
        seen = []
        form.on(EventType.AUTO_SAVE_TRIGGERED, seen.append)

        form.update_field("bio", "Hi")
        await asyncio.sleep(0.06)

        assert len(seen) == 1


class TestAutoSaveDuringSubmit:
    """Test auto-save suppression while submitting."""

    @pytest.mark.asyncio
    async def test_suppressed_while_submitting(self):
        """Should not auto-save while a submit handler is in flight."""
        saved = []
        form = make_form(saved.append)
        release = asyncio.Event()

        async def handler(data, actions):
            await release.wait()

        form.update_field("bio", "Hi")
        pending = asyncio.ensure_future(form.handle_submit(handler)())
        await asyncio.sleep(0.08)

        assert saved == []

        release.set()
        assert await pending is True

    @pytest.mark.asyncio
    async def test_edit_during_submit_not_saved(self):
        """Should not arm auto-save for edits made while submitting."""
        saved = []
        form = make_form(saved.append)
        release = asyncio.Event()

        async def handler(data, actions):
            actions.update_field("bio", "changed mid-submit")
            await release.wait()

        pending = asyncio.ensure_future(form.handle_submit(handler)())
        await asyncio.sleep(0.08)

        assert saved == []
        release.set()
        await pending

    @pytest.mark.asyncio
    async def test_pending_save_cancelled_by_submitting_flag(self):
        """Should drop an armed save when the submitting flag is raised by hand."""
        saved = []
        form = make_form(saved.append)
        triggered = []
        form.on(EventType.AUTO_SAVE_TRIGGERED, triggered.append)

        form.update_field("bio", "Hi")
        form.set_submitting(True)
        form.update_field("bio", "Hello")
        await asyncio.sleep(0.08)

        assert saved == []
        assert triggered == []

        form.set_submitting(False)
        form.update_field("bio", "Hello!")
        await asyncio.sleep(0.08)

        assert saved == [{"bio": "Hello!"}]


class TestAutoSaveFailures:
    """Test failing auto-save callbacks."""

    @pytest.mark.asyncio
    async def test_sync_failure_logged(self, caplog):
        """Should log a failing sync callback and keep the form usable."""

        def save(data):
            raise RuntimeError("offline")

        form = make_form(save)
        with caplog.at_level("ERROR", logger="formstate.controller"):
            form.update_field("bio", "Hi")
            await asyncio.sleep(0.06)

        assert "auto-save callback failed" in caplog.text
        form.update_field("bio", "Hello")
        assert form.data["bio"] == "Hello"

    @pytest.mark.asyncio
    async def test_async_failure_logged(self, caplog):
        """Should log a failing async callback."""

        async def save(data):
            raise RuntimeError("offline")

        form = make_form(save)
        with caplog.at_level("ERROR", logger="formstate.controller"):
            form.update_field("bio", "Hi")
            await asyncio.sleep(0.06)

        assert "auto-save callback failed" in caplog.text


class TestAutoSaveDispose:
    """Test dispose with a pending auto-save."""

    @pytest.mark.asyncio
    async def test_dispose_cancels_auto_save(self):
        """Should never call the callback after dispose."""
        saved = []
        form = make_form(saved.append)

        form.update_field("bio", "Hi")
        form.dispose()
        await asyncio.sleep(0.08)

        assert saved == []

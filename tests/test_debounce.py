"""Unit tests for the debounce scheduler.

Tests cover:
- Trailing-edge delivery of only the latest value
- Timer restart on every push
- Cancel, flush and dispose
- Synchronous use without an event loop
"""

import asyncio

import pytest

from formstate.debounce import Debouncer


class TestSynchronousUse:
    """Test a Debouncer used with no running event loop."""

    def test_value_held_until_flush(self):
        """Should hold the latest value and deliver it on flush."""
        debouncer = Debouncer(300)
        seen = []
        debouncer.subscribe(seen.append)

        debouncer.push("a")
        debouncer.push("ab")

        assert seen == []
        assert debouncer.pending
        assert not debouncer.armed
        assert debouncer.flush() is True
        assert seen == ["ab"]
        assert debouncer.value == "ab"

    def test_flush_without_pending_value(self):
        """Should report False when there is nothing to deliver."""
        assert Debouncer(300).flush() is False

    def test_cancel_drops_pending_value(self):
        """Should drop the pending value so a later flush delivers nothing."""
        debouncer = Debouncer(300)
        seen = []
        debouncer.subscribe(seen.append)

        debouncer.push("a")
        debouncer.cancel()

        assert debouncer.flush() is False
        assert seen == []

    def test_value_is_none_before_first_settle(self):
        """Should expose None until a value settles."""
        debouncer = Debouncer(300)
        debouncer.push("a")
        assert debouncer.value is None

    def test_unsubscribe(self):
        """Should stop notifying an unsubscribed listener."""
        debouncer = Debouncer(0)
        seen = []
        unsubscribe = debouncer.subscribe(seen.append)

        unsubscribe()
        unsubscribe()
        debouncer.push("a")
        debouncer.flush()

        assert seen == []

    def test_negative_delay_rejected(self):
        """Should reject a negative delay."""
        with pytest.raises(ValueError, match="delay_ms"):
            Debouncer(-1)

    def test_push_after_dispose_raises(self):
        """Should refuse new values once disposed."""
        debouncer = Debouncer(300)
        debouncer.dispose()

        assert debouncer.disposed
        with pytest.raises(RuntimeError, match="disposed"):
            debouncer.push("a")


class TestTimedDelivery:
    """Test delivery driven by the event loop."""

    @pytest.mark.asyncio
    async def test_only_latest_value_delivered(self):
        """Should deliver once, with the last value, after the quiet period."""
        debouncer = Debouncer(30)
        seen = []
        debouncer.subscribe(seen.append)

        for value in ["j", "jo", "joh", "john"]:
            debouncer.push(value)
            await asyncio.sleep(0.005)

        assert seen == []
        await asyncio.sleep(0.08)
        assert seen == ["john"]
        assert not debouncer.pending

    @pytest.mark.asyncio
    async def test_push_restarts_timer(self):
        """Should restart the quiet period on each push."""
        debouncer = Debouncer(100)
        seen = []
        debouncer.subscribe(seen.append)

        debouncer.push("a")
        await asyncio.sleep(0.06)
        debouncer.push("b")
        await asyncio.sleep(0.06)

        # 120 ms since the first push, only 60 ms since the second.
        assert seen == []
        await asyncio.sleep(0.1)
        assert seen == ["b"]

    @pytest.mark.asyncio
    async def test_cancel_prevents_delivery(self):
        """Should never fire a cancelled timer."""
        debouncer = Debouncer(20)
        seen = []
        debouncer.subscribe(seen.append)

        debouncer.push("a")
        assert debouncer.armed
        debouncer.cancel()
        await asyncio.sleep(0.05)

        assert seen == []
        assert not debouncer.armed

    @pytest.mark.asyncio
    async def test_flush_delivers_immediately(self):
        """Should deliver at once and disarm the timer."""
        debouncer = Debouncer(1000)
        seen = []
        debouncer.subscribe(seen.append)

        debouncer.push("a")
        debouncer.flush()

        assert seen == ["a"]
        assert not debouncer.armed
        await asyncio.sleep(0.01)
        assert seen == ["a"]

    @pytest.mark.asyncio
    async def test_dispose_cancels_timer(self):
        """Should cancel a scheduled delivery on dispose."""
        debouncer = Debouncer(20)
        seen = []
        debouncer.subscribe(seen.append)

        debouncer.push("a")
        debouncer.dispose()
        await asyncio.sleep(0.05)

        assert seen == []

    @pytest.mark.asyncio
    async def test_zero_delay_fires_on_next_iteration(self):
        """Should still defer delivery to the loop with a zero delay."""
        debouncer = Debouncer(0)
        seen = []
        debouncer.subscribe(seen.append)

        debouncer.push("a")
        assert seen == []
        await asyncio.sleep(0.01)
        assert seen == ["a"]

    @pytest.mark.asyncio
    async def test_explicit_loop(self):
        """Should schedule on the loop it was given."""
        loop = asyncio.get_running_loop()
        debouncer = Debouncer(10, loop=loop)
        seen = []
        debouncer.subscribe(seen.append)

        debouncer.push(1)
        await asyncio.sleep(0.03)

        assert seen == [1]

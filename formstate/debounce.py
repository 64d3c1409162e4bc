"""Trailing-edge debounce scheduler.

A Debouncer delays propagation of a rapidly changing value until ``delay_ms``
milliseconds pass with no new value. Each push cancels and re-arms the timer;
only the most recent value is ever delivered. Subscribers are notified
explicitly when a value settles, which is how the form controller learns
that typing has paused.

Timers run on an asyncio event loop. When no loop was given and none is
running (plain synchronous use), the value is held as pending and delivered
by ``flush()``.
"""

import asyncio
import logging
from typing import Any, Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

SettleListener = Callable[[Any], None]

_UNSET = object()


class Debouncer(Generic[T]):
    """Delay a value until it has stopped changing.

    Examples:
        >>> debouncer = Debouncer(300)
        >>> seen = []
        >>> unsubscribe = debouncer.subscribe(seen.append)
        >>> debouncer.push("a")
        >>> debouncer.push("ab")
        >>> debouncer.flush()
        True
        >>> seen
        ['ab']
    """

    def __init__(self, delay_ms: float, loop: Optional[asyncio.AbstractEventLoop] = None):
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")
        self.delay_ms = delay_ms
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._pending: Any = _UNSET
        self._settled: Any = _UNSET
        self._listeners: List[SettleListener] = []
        self._disposed = False

    @property
    def pending(self) -> bool:
        """True while a pushed value is waiting for its quiet period."""
        return self._pending is not _UNSET

    @property
    def armed(self) -> bool:
        """True while a timer is scheduled on the event loop."""
        return self._handle is not None

    @property
    def value(self) -> Optional[T]:
        """The most recently settled value, or None before the first settle."""
        return None if self._settled is _UNSET else self._settled

    @property
    def disposed(self) -> bool:
        return self._disposed

    def subscribe(self, listener: SettleListener) -> Callable[[], None]:
        """Register a listener for settled values; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass  # already removed

        return unsubscribe

    def push(self, value: T) -> None:
        """Replace the pending value and restart the quiet period."""
        if self._disposed:
            raise RuntimeError("Cannot push to a disposed Debouncer")
        self._cancel_timer()
        self._pending = value
        loop = self._resolve_loop()
        if loop is None:
            logger.debug("No running event loop; debounced value held until flush()")
            return
        self._handle = loop.call_later(self.delay_ms / 1000, self._fire)

    def flush(self) -> bool:
        """Deliver the pending value now. Returns False if nothing was pending."""
        if self._pending is _UNSET:
            return False
        self._cancel_timer()
        self._fire()
        return True

    def cancel(self) -> None:
        """Cancel the timer and drop the pending value."""
        self._cancel_timer()
        self._pending = _UNSET

    def dispose(self) -> None:
        """Cancel any pending timer and detach all listeners."""
        self.cancel()
        self._listeners.clear()
        self._disposed = True

    def _resolve_loop(self) -> Optional[asyncio.AbstractEventLoop]:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        if self._pending is _UNSET:
            return
        value, self._pending = self._pending, _UNSET
        self._settled = value
        for listener in list(self._listeners):
            listener(value)


__all__ = [
    "Debouncer",
    "SettleListener",
]

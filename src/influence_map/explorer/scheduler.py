"""Deferred callbacks with explicit cancellation.

Repeated triggers under the same key within the delay window collapse into a
single call: scheduling a key cancels whatever was pending for it.
"""

import asyncio
import heapq
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class CancelToken:
    """Handle for one scheduled callback."""

    key: str
    cancelled: bool = False
    fired: bool = False
    callback: Callable[[], None] | None = field(default=None, repr=False)

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)


class Scheduler:
    """Base scheduler: keyed, coalescing, cancellable delayed calls."""

    def __init__(self) -> None:
        self._tokens: dict[str, CancelToken] = {}

    def schedule(self, key: str, delay: float, callback: Callable[[], None]) -> CancelToken:
        """Run ``callback`` after ``delay`` seconds, replacing any pending call for ``key``."""
        self.cancel(key)
        token = CancelToken(key=key, callback=callback)
        self._tokens[key] = token
        self._arm(token, delay, callback)
        return token

    def flush(self, key: str) -> bool:
        """Run the pending call for ``key`` now. Returns False if nothing was pending.

        The armed timer stays behind and is skipped when it comes due.
        """
        token = self._tokens.get(key)
        if token is None or not token.pending or token.callback is None:
            return False
        self._fire(token, token.callback)
        return True

    def cancel(self, key: str) -> None:
        """Cancel the pending call for ``key``, if any."""
        token = self._tokens.pop(key, None)
        if token is not None and token.pending:
            token.cancel()
            logger.debug(f"Cancelled scheduled call: {key}")

    def cancel_all(self) -> None:
        for key in list(self._tokens):
            self.cancel(key)

    def is_pending(self, key: str) -> bool:
        token = self._tokens.get(key)
        return token is not None and token.pending

    def _fire(self, token: CancelToken, callback: Callable[[], None]) -> None:
        if not token.pending:
            return
        token.fired = True
        if self._tokens.get(token.key) is token:
            del self._tokens[token.key]
        callback()

    def _arm(self, token: CancelToken, delay: float, callback: Callable[[], None]) -> None:
        raise NotImplementedError


class AsyncioScheduler(Scheduler):
    """Scheduler backed by the running event loop's ``call_later``."""

    def _arm(self, token: CancelToken, delay: float, callback: Callable[[], None]) -> None:
        loop = asyncio.get_running_loop()
        loop.call_later(delay, self._fire, token, callback)


@dataclass(order=True)
class _Timer:
    due: float
    seq: int
    token: CancelToken = field(compare=False)
    callback: Callable[[], None] = field(compare=False)


class ManualScheduler(Scheduler):
    """Virtual-clock scheduler, advanced explicitly (tests, headless runs)."""

    def __init__(self) -> None:
        super().__init__()
        self.now = 0.0
        self._timers: list[_Timer] = []
        self._seq = 0

    def _arm(self, token: CancelToken, delay: float, callback: Callable[[], None]) -> None:
        self._seq += 1
        heapq.heappush(self._timers, _Timer(self.now + delay, self._seq, token, callback))

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due callbacks in order. Returns calls fired."""
        target = self.now + seconds
        fired = 0
        while self._timers and self._timers[0].due <= target:
            timer = heapq.heappop(self._timers)
            self.now = timer.due
            if timer.token.pending:
                self._fire(timer.token, timer.callback)
                fired += 1
        self.now = target
        return fired

    def run_pending(self) -> int:
        """Fire everything still scheduled regardless of delay."""
        if not self._timers:
            return 0
        latest = max(t.due for t in self._timers)
        return self.advance(max(0.0, latest - self.now))

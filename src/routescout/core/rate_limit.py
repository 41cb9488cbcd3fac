"""
In-process pacing and cancellation primitives.

The POI discovery loop talks to a public spatial-query service that expects a
fixed gap between requests. These helpers keep that loop sequential while still
letting callers cancel it from another thread.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable

Clock = Callable[[], float]


class CancellationToken:
    """Cooperative cancellation flag shared between a caller and a worker."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """Block up to `seconds`; return True if cancelled before or during the wait."""
        if seconds <= 0:
            return self._event.is_set()
        return self._event.wait(seconds)


@dataclass
class Deadline:
    """Wall-clock budget measured from construction."""

    seconds: float
    clock: Clock = time.monotonic
    _started: float = field(init=False)

    def __post_init__(self) -> None:
        if self.seconds < 0:
            raise ValueError("seconds must be >= 0")
        self._started = self.clock()

    def elapsed(self) -> float:
        return self.clock() - self._started

    def expired(self) -> bool:
        return self.elapsed() > self.seconds


@dataclass
class FixedDelayRateLimiter:
    """Enforce a fixed pause before every acquisition except the first.

    `acquire()` returns False when the pause was interrupted by cancellation, in
    which case the caller should stop issuing requests.
    """

    delay_seconds: float
    cancel: CancellationToken | None = None
    _acquired: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        if self.cancel is None:
            self.cancel = CancellationToken()

    def acquire(self) -> bool:
        if self.cancel.cancelled:
            return False
        if not self._acquired:
            self._acquired = True
            return True
        return not self.cancel.wait(self.delay_seconds)

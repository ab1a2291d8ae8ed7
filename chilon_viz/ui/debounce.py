"""Quiescence-window rate limiting for bursts of control events."""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

LOGGER = logging.getLogger(__name__)


class Debouncer:
    """Hold the latest call and run it once no newer call arrived for ``wait_seconds``.

    Each call supersedes the pending one, which is discarded rather than
    queued. The owner drives execution by calling :meth:`poll` from its event
    loop, so the callback always runs on the caller's thread.
    """

    def __init__(
        self,
        callback: Callable[..., Any],
        wait_seconds: float = 0.1,
        *,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        if wait_seconds < 0:
            msg = "wait_seconds must not be negative"
            raise ValueError(msg)
        self._callback = callback
        self._wait_seconds = wait_seconds
        self._clock = clock or time.monotonic
        self._pending: Optional[Tuple[Tuple[Any, ...], Dict[str, Any]]] = None
        self._deadline = 0.0
        self.superseded = 0

    @property
    def pending(self) -> bool:
        return self._pending is not None

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline if self._pending is not None else None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        if self._pending is not None:
            self.superseded += 1
        self._pending = (args, kwargs)
        self._deadline = self._clock() + self._wait_seconds

    def poll(self) -> bool:
        """Run the pending call if its quiescence window has elapsed."""

        if self._pending is None or self._clock() < self._deadline:
            return False
        return self.flush()

    def flush(self) -> bool:
        """Run the pending call immediately; return whether one was pending."""

        if self._pending is None:
            return False
        args, kwargs = self._pending
        self._pending = None
        if self.superseded:
            LOGGER.debug("Debounced call ran after discarding %d superseded calls", self.superseded)
        self.superseded = 0
        self._callback(*args, **kwargs)
        return True

    def cancel(self) -> None:
        self._pending = None
        self.superseded = 0

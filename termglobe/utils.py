"""Terminal detection and resize debouncing for the CLI."""

from __future__ import annotations

import locale
import os
import sys
import time
from typing import Callable, Optional


def detect_unicode_support() -> bool:
    """Check whether the terminal likely renders Unicode.

    Looks at ``LC_ALL`` / ``LC_CTYPE`` / ``LANG``, then the preferred locale
    encoding, then ``sys.stdout.encoding``, for a UTF encoding.
    """
    for var in ("LC_ALL", "LC_CTYPE", "LANG"):
        if "utf" in os.environ.get(var, "").lower():
            return True

    encodings = [locale.getpreferredencoding(False), getattr(sys.stdout, "encoding", None)]
    return any(enc and "utf" in enc.lower() for enc in encodings)


def is_terminal() -> bool:
    """Return ``True`` if stdout is a TTY (not piped or redirected)."""
    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        # detached or closed stdout
        return False


class ResizeDebouncer:
    """Let through at most one resize every *interval* seconds.

    Call :meth:`should_handle` on every resize event; suppressed events stay
    pending until :meth:`flush` reports that enough time has passed.

    Args:
        interval: Minimum seconds between handled resizes (default 0.1).
        clock: Callable returning the current time in seconds (defaults to
            :func:`time.monotonic`); injectable for tests.
    """

    def __init__(
        self,
        interval: float = 0.1,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must be non-negative")
        self.interval = interval
        self._clock = clock or time.monotonic
        self._last_handled: Optional[float] = None
        self.pending = False

    def _due(self, now: float) -> bool:
        return self._last_handled is None or now - self._last_handled >= self.interval

    def should_handle(self) -> bool:
        """Record a resize; ``True`` if it should be processed now."""
        now = self._clock()
        if self._due(now):
            self._last_handled = now
            self.pending = False
            return True
        self.pending = True
        return False

    def flush(self) -> bool:
        """``True`` (once) when a suppressed resize is now due."""
        if not self.pending:
            return False
        now = self._clock()
        if self._due(now):
            self._last_handled = now
            self.pending = False
            return True
        return False

"""Whole-second wall-clock timestamps."""

from __future__ import annotations

import time
from dataclasses import dataclass, field


def _current_seconds() -> int:
    return int(time.time())


@dataclass(frozen=True, order=True)
class TimeStamp:
    """A point in time, held as whole seconds since the epoch."""

    seconds: int = field(default_factory=_current_seconds)

    @classmethod
    def now(cls) -> TimeStamp:
        """Return a timestamp for the current moment."""
        return cls()

    def to_int(self) -> int:
        """Return the timestamp as seconds since the epoch."""
        return self.seconds

    def to_string(self) -> str:
        """Render the local time as ``YYYY-MM-DD-HH-MM-SS``.

        The year is counted from 1900 and the month from zero, as the
        ``struct tm`` fields are.
        """
        tm = time.localtime(self.seconds)
        return (
            f"{tm.tm_year - 1900:04d}-{tm.tm_mon - 1:02d}-{tm.tm_mday:02d}-"
            f"{tm.tm_hour:02d}-{tm.tm_min:02d}-{tm.tm_sec:02d}"
        )
"""
Clock abstractions for timestamping persisted rows.

Notes
-----
The gateway stamps `created_at` / `updated_at` from a Clock rather than from the
wall clock directly, so tests can produce deterministic orderings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """A source of timezone-aware timestamps."""

    def now(self) -> datetime:
        """Return the current time as a timezone-aware datetime."""
        ...


@dataclass(frozen=True, slots=True)
class SystemClock:
    """Clock that returns the current system time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


@dataclass(slots=True)
class SteppingClock:
    """
    Clock that advances by a fixed step on every read.

    Each call to `now()` returns a strictly later instant than the previous one,
    which gives inserted rows a predictable creation order in tests.

    Attributes
    ----------
    start:
        First instant returned. Naive values are treated as UTC.
    step:
        Amount added after each read.
    """

    start: datetime
    step: timedelta = timedelta(seconds=1)
    _reads: int = field(default=0, init=False)

    def now(self) -> datetime:
        base = self.start if self.start.tzinfo else self.start.replace(tzinfo=timezone.utc)
        value = base + self.step * self._reads
        self._reads += 1
        return value

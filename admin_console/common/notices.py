"""Transient notices — messages that expire after a fixed duration.

A notice is plain state: a message plus an absolute expiry timestamp taken
from an injectable clock. Nothing runs in the background; readers see the
notice only while it is live, and ``tick()`` drops an expired one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TransientNotice:
    message: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class NoticeSlot:
    """Holds at most one notice; posting replaces the current one."""

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._notice: Optional[TransientNotice] = None

    def post(self, message: str, ttl_seconds: float) -> TransientNotice:
        notice = TransientNotice(
            message=message,
            expires_at=self._clock() + timedelta(seconds=ttl_seconds),
        )
        self._notice = notice
        return notice

    def current(self) -> Optional[TransientNotice]:
        """Return the live notice, clearing it first if it has expired."""
        self.tick()
        return self._notice

    def tick(self) -> None:
        if self._notice is not None and self._notice.is_expired(self._clock()):
            self._notice = None

    def clear(self) -> None:
        self._notice = None

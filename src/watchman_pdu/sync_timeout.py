"""Sync cookie timeout policy."""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Union

from .exceptions import DecodeError, EncodeError


# The server waits one minute for a sync cookie by default.
DEFAULT_SYNC_TIMEOUT_MS = 60_000


class SyncTimeoutKind(Enum):
    """Which sync cookie behavior is requested."""
    DEFAULT = "default"
    DISABLE_COOKIE = "disable_cookie"
    DURATION = "duration"


@dataclass(frozen=True)
class SyncTimeout:
    """
    How long the server waits to observe a sync cookie before answering.

    Disabling the cookie saves roughly 15ms per query but may answer from
    a slightly stale view of the filesystem. It is safe after a
    synchronized ``clock`` or query call has been made.

    The wire value is a millisecond integer. A missing ``sync_timeout``
    means DISABLE_COOKIE in a clock request but DEFAULT in a query, so
    each message decides for itself when to omit the field.

    Attributes:
        kind: The requested behavior
        millis: Timeout in milliseconds, only meaningful for DURATION
    """
    kind: SyncTimeoutKind = SyncTimeoutKind.DEFAULT
    millis: int = 0

    def __post_init__(self):
        if self.kind is SyncTimeoutKind.DURATION and self.millis <= 0:
            raise EncodeError(
                f"sync timeout duration must be positive, got {self.millis}ms"
            )

    @classmethod
    def default(cls) -> "SyncTimeout":
        return cls(SyncTimeoutKind.DEFAULT)

    @classmethod
    def disable_cookie(cls) -> "SyncTimeout":
        return cls(SyncTimeoutKind.DISABLE_COOKIE)

    @classmethod
    def from_duration(cls, duration: Union[timedelta, float, int]) -> "SyncTimeout":
        """
        Build a timeout from a duration.

        Args:
            duration: A timedelta, or a number of seconds

        Returns:
            DISABLE_COOKIE when the duration rounds down to zero
            milliseconds, otherwise a DURATION timeout

        Raises:
            EncodeError: If the duration is negative
        """
        if not isinstance(duration, timedelta):
            duration = timedelta(seconds=duration)
        if duration < timedelta(0):
            raise EncodeError(f"sync timeout cannot be negative: {duration}")
        return cls.from_millis(duration // timedelta(milliseconds=1))

    @classmethod
    def from_millis(cls, millis: int) -> "SyncTimeout":
        if millis < 0:
            raise EncodeError(f"sync timeout cannot be negative: {millis}ms")
        if millis == 0:
            return cls.disable_cookie()
        return cls(SyncTimeoutKind.DURATION, int(millis))

    @classmethod
    def from_wire(cls, value: int) -> "SyncTimeout":
        """Decode a wire millisecond value. 60000 decodes as an explicit duration."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise DecodeError(f"sync_timeout must be an integer, got {value!r}")
        if value < 0:
            raise DecodeError(f"sync_timeout cannot be negative: {value}")
        return cls.from_millis(value)

    def is_default(self) -> bool:
        return self.kind is SyncTimeoutKind.DEFAULT

    def is_disabled(self) -> bool:
        return self.kind is SyncTimeoutKind.DISABLE_COOKIE

    def to_wire(self) -> int:
        """Encode as the millisecond integer sent to the server."""
        if self.kind is SyncTimeoutKind.DEFAULT:
            return DEFAULT_SYNC_TIMEOUT_MS
        if self.kind is SyncTimeoutKind.DISABLE_COOKIE:
            return 0
        return self.millis

    def as_timedelta(self) -> timedelta:
        return timedelta(milliseconds=self.to_wire())

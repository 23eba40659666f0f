"""
Clock tokens and source-control aware clock data.

A clock names a logical point in the server's change history. Clients
thread the clock from one result into the ``since`` field of the next
request and never compare or order tokens themselves; tokens from
different server instances are not comparable at all.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .exceptions import DecodeError
from .wire import drop_none, expect_object, optional_str, require

logger = logging.getLogger(__name__)

NULL_CLOCK = "c:0:0"


@dataclass(frozen=True)
class ClockSpec:
    """
    Opaque clock token.

    Build one with :meth:`null`, :meth:`named_cursor` or
    :meth:`unix_timestamp`, or decode a server value with :meth:`from_wire`.
    The token format is not a stable API.

    Attributes:
        token: The raw clock string
    """
    token: str

    def __post_init__(self):
        if not isinstance(self.token, str) or not self.token:
            raise ValueError(f"clock token must be a non-empty string: {self.token!r}")

    def __str__(self) -> str:
        return self.token

    @classmethod
    def null(cls) -> "ClockSpec":
        """
        A clock from before any change happened.

        A since query with the null clock produces a fresh instance result
        holding every match, so it is the right starting point when there
        is no saved clock.
        """
        return cls(NULL_CLOCK)

    @classmethod
    def named_cursor(cls, name: str) -> "ClockSpec":
        """
        A server-side cursor keyed by ``name``.

        The server stores the clock for you, but takes an exclusive lock on
        the cursor for the whole query, serializing it with every other
        client using that name. Cursor names are per watched project and
        cannot be cleared; first use behaves like the null clock.
        """
        return cls(f"n:{name}")

    @classmethod
    def unix_timestamp(cls, time_t: int) -> "ClockSpec":
        """
        A clock given as seconds since the epoch.

        The server accepts these in since queries but never produces them.
        One second granularity means events within the same second tend to
        be reported more than once.
        """
        return cls(str(int(time_t)))

    @property
    def is_null(self) -> bool:
        return self.token == NULL_CLOCK

    def to_wire(self) -> str:
        return self.token

    @classmethod
    def from_wire(cls, value: Any) -> "ClockSpec":
        if not isinstance(value, str) or not value:
            raise DecodeError(f"clock must be a non-empty string, got {value!r}")
        return cls(value)


@dataclass(frozen=True)
class SavedStateClockData:
    """
    Saved state descriptor for a source control aware query.

    Attributes:
        storage: Name of the saved state storage engine
        commit: Commit id of the saved state (``commit-id`` on the wire)
        config: Storage engine configuration, passed through untouched
    """
    storage: Optional[str] = None
    commit: Optional[str] = None
    config: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        return drop_none({
            "storage": self.storage,
            "commit-id": self.commit,
            "config": self.config,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SavedStateClockData":
        expect_object(data, "saved-state")
        return cls(
            storage=optional_str(data, "storage"),
            commit=optional_str(data, "commit-id"),
            config=data.get("config"),
        )


@dataclass(frozen=True)
class ScmAwareClockData:
    """
    Source control metadata embedded in a clock.

    Attributes:
        mergebase: Commit id of the merge base
        mergebase_with: Ref the merge base is computed against
        saved_state: Optional saved state descriptor
    """
    mergebase: Optional[str] = None
    mergebase_with: Optional[str] = None
    saved_state: Optional[SavedStateClockData] = None

    def to_dict(self) -> Dict[str, Any]:
        return drop_none({
            "mergebase": self.mergebase,
            "mergebase-with": self.mergebase_with,
            "saved-state": self.saved_state.to_dict() if self.saved_state is not None else None,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScmAwareClockData":
        expect_object(data, "scm")
        saved_state = data.get("saved-state")
        return cls(
            mergebase=optional_str(data, "mergebase"),
            mergebase_with=optional_str(data, "mergebase-with"),
            saved_state=SavedStateClockData.from_dict(saved_state) if saved_state is not None else None,
        )


@dataclass(frozen=True)
class FatClockData:
    """
    A clock together with optional source control metadata.

    Attributes:
        clock: The plain clock token
        scm: Source control data, if any
    """
    clock: ClockSpec
    scm: Optional[ScmAwareClockData] = None

    def to_dict(self) -> Dict[str, Any]:
        return drop_none({
            "clock": self.clock.to_wire(),
            "scm": self.scm.to_dict() if self.scm is not None else None,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FatClockData":
        expect_object(data, "clock")
        scm = data.get("scm")
        return cls(
            clock=ClockSpec.from_wire(require(data, "clock", "clock object")),
            scm=ScmAwareClockData.from_dict(scm) if scm is not None else None,
        )


Clock = Union[ClockSpec, FatClockData]


def encode_clock(clock: Clock) -> Union[str, Dict[str, Any]]:
    """Encode a clock as a bare token or as a structured clock object."""
    if isinstance(clock, ClockSpec):
        return clock.to_wire()
    if isinstance(clock, FatClockData):
        return clock.to_dict()
    raise TypeError(f"not a clock: {clock!r}")


def decode_clock(value: Any) -> Clock:
    """
    Decode a clock value.

    The bare token shape is tried first; the structured shape is only
    attempted when that fails.

    Raises:
        DecodeError: If the value matches neither shape
    """
    try:
        return ClockSpec.from_wire(value)
    except DecodeError:
        logger.debug("clock is not a bare token, decoding as structured clock")
    return FatClockData.from_dict(value)


def clock_spec_of(clock: Clock) -> ClockSpec:
    """Return the plain token of either clock shape."""
    if isinstance(clock, FatClockData):
        return clock.clock
    return clock

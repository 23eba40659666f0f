"""
Command envelopes and their responses.

Every command is a positional list ``[command_name, root, *params]``.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .clock import ClockSpec, decode_clock, clock_spec_of
from .exceptions import ServerError
from .query import QueryRequestCommon
from .sync_timeout import SyncTimeout
from .wire import expect_object, optional_str, raise_for_server_error, require

GET_SOCKNAME = "get-sockname"
CLOCK = "clock"
WATCH_PROJECT = "watch-project"
QUERY = "query"


@dataclass(frozen=True)
class GetSockNameRequest:
    """``["get-sockname"]``"""

    def to_wire(self) -> List[Any]:
        return [GET_SOCKNAME]


@dataclass(frozen=True)
class GetSockNameResponse:
    """
    Where the server is listening.

    Attributes:
        version: Server version
        sockname: Path of the server socket
        error: Error text if the server could not answer
    """
    version: str
    sockname: Optional[Path] = None
    error: Optional[str] = None

    def raise_for_error(self) -> None:
        """Raise ServerError if the response carries an error."""
        if self.error is not None:
            raise ServerError(self.error, {"version": self.version, "error": self.error})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GetSockNameResponse":
        expect_object(data, "get-sockname response")
        sockname = optional_str(data, "sockname")
        return cls(
            version=require(data, "version", "get-sockname response"),
            sockname=Path(sockname) if sockname is not None else None,
            error=optional_str(data, "error"),
        )


@dataclass(frozen=True)
class ClockRequestParams:
    """
    Parameters of a ``clock`` request.

    Unlike a query, a missing ``sync_timeout`` here means the cookie is
    disabled, so the field is left off only for DISABLE_COOKIE and the
    default policy is sent explicitly as 60000.

    Attributes:
        sync_timeout: Sync cookie policy
    """
    sync_timeout: SyncTimeout = field(default_factory=SyncTimeout.default)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if not self.sync_timeout.is_disabled():
            data["sync_timeout"] = self.sync_timeout.to_wire()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClockRequestParams":
        expect_object(data, "clock parameters")
        if "sync_timeout" not in data:
            return cls(SyncTimeout.disable_cookie())
        return cls(SyncTimeout.from_wire(data["sync_timeout"]))


@dataclass(frozen=True)
class ClockRequest:
    """``["clock", root, {sync_timeout?}]``"""
    root: Path
    params: ClockRequestParams = field(default_factory=ClockRequestParams)

    def to_wire(self) -> List[Any]:
        return [CLOCK, str(self.root), self.params.to_dict()]


@dataclass(frozen=True)
class ClockResponse:
    """
    Current clock of a watched root.

    Attributes:
        version: Server version
        clock: Current clock
    """
    version: str
    clock: ClockSpec

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClockResponse":
        expect_object(data, "clock response")
        raise_for_server_error(data)
        return cls(
            version=require(data, "version", "clock response"),
            clock=clock_spec_of(decode_clock(require(data, "clock", "clock response"))),
        )


@dataclass(frozen=True)
class WatchProjectRequest:
    """``["watch-project", root]``"""
    root: Path

    def to_wire(self) -> List[Any]:
        return [WATCH_PROJECT, str(self.root)]


@dataclass(frozen=True)
class WatchProjectResponse:
    """
    Result of resolving a path to its watched project.

    Attributes:
        version: Server version
        relative_path: Where the requested path sits inside the project;
            when set it must be used as ``relative_root`` in queries
        watch: Root of the watched project
        watcher: Watcher implementation the server uses for it
    """
    version: str
    watch: Path
    relative_path: Optional[Path] = None
    watcher: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WatchProjectResponse":
        expect_object(data, "watch-project response")
        raise_for_server_error(data)
        watch = require(data, "watch", "watch-project response")
        relative_path = optional_str(data, "relative_path")
        return cls(
            version=require(data, "version", "watch-project response"),
            watch=Path(watch),
            relative_path=Path(relative_path) if relative_path is not None else None,
            watcher=optional_str(data, "watcher"),
        )

    def query_params(self, **kwargs) -> QueryRequestCommon:
        """Query parameters scoped to the requested subdirectory."""
        kwargs.setdefault("relative_root", self.relative_path)
        return QueryRequestCommon(**kwargs)


@dataclass(frozen=True)
class QueryRequest:
    """``["query", root, params]``"""
    root: Path
    params: QueryRequestCommon = field(default_factory=QueryRequestCommon)

    def to_wire(self) -> List[Any]:
        return [QUERY, str(self.root), self.params.to_dict()]

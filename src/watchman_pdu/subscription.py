"""
Subscription lifecycle messages.

``subscribe`` is acknowledged by a :class:`SubscribeResponse`; after that
the server pushes :class:`~.query.QueryResult` shaped messages on the same
channel, in order for a given subscription, until an ``unsubscribe`` or
until it marks the subscription ``canceled``.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .clock import Clock, ClockSpec, decode_clock, encode_clock
from .exceptions import MissingFieldError
from .query import DEFAULT_FIELDS
from .wire import expect_object, optional_bool, optional_str, raise_for_server_error, require, str_list

logger = logging.getLogger(__name__)

SUBSCRIBE = "subscribe"
UNSUBSCRIBE = "unsubscribe"


@dataclass(frozen=True)
class SubscribeRequest:
    """
    Parameters of a standing subscription.

    A subset of the query parameters with no generator selection; the
    server always uses the since generator. Omission rules are the same
    as for queries.

    Attributes:
        since: Clock to start from; omitted means "now"
        relative_root: Subdirectory paths are relative to
        expression: Filter expression, passed through unevaluated
        fields: Field names to render for each file
        empty_on_fresh_instance: Return no files on a fresh instance
        case_sensitive: Treat names as case sensitive everywhere
    """
    since: Optional[Clock] = None
    relative_root: Optional[Path] = None
    expression: Optional[Any] = None
    fields: List[str] = field(default_factory=lambda: list(DEFAULT_FIELDS))
    empty_on_fresh_instance: bool = False
    case_sensitive: bool = False

    def __post_init__(self):
        if isinstance(self.relative_root, str):
            object.__setattr__(self, "relative_root", Path(self.relative_root))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.since is not None:
            data["since"] = encode_clock(self.since)
        if self.relative_root is not None:
            data["relative_root"] = str(self.relative_root)
        if self.expression is not None:
            data["expression"] = self.expression
        data["fields"] = list(self.fields)
        if self.empty_on_fresh_instance:
            data["empty_on_fresh_instance"] = True
        if self.case_sensitive:
            data["case_sensitive"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubscribeRequest":
        expect_object(data, "subscription parameters")
        fields = str_list(data, "fields")
        if fields is None:
            raise MissingFieldError("subscription parameters have no 'fields' field", field="fields")
        relative_root = optional_str(data, "relative_root")
        return cls(
            since=decode_clock(data["since"]) if data.get("since") is not None else None,
            relative_root=Path(relative_root) if relative_root is not None else None,
            expression=data.get("expression"),
            fields=fields,
            empty_on_fresh_instance=optional_bool(data, "empty_on_fresh_instance"),
            case_sensitive=optional_bool(data, "case_sensitive"),
        )


@dataclass(frozen=True)
class SubscribeCommand:
    """``["subscribe", root, name, params]``"""
    root: Path
    name: str
    params: SubscribeRequest = field(default_factory=SubscribeRequest)

    def to_wire(self) -> List[Any]:
        return [SUBSCRIBE, str(self.root), self.name, self.params.to_dict()]


@dataclass(frozen=True)
class SubscribeResponse:
    """
    Acknowledgement of a new subscription.

    A client may subscribe while a state is already asserted, after its
    ``state-enter`` was pushed. ``asserted_states`` lists the states active
    at initiation so such a client can still pair up the later
    ``state-leave``.

    Attributes:
        version: Server version
        subscribe: Echoed subscription name
        clock: Plain clock at initiation time
        asserted_states: States asserted at initiation time
        saved_state_info: Saved state storage metadata, passed through
    """
    version: str
    subscribe: str
    clock: ClockSpec
    asserted_states: List[str] = field(default_factory=list)
    saved_state_info: Optional[Any] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubscribeResponse":
        expect_object(data, "subscribe response")
        raise_for_server_error(data)
        clock = decode_clock(require(data, "clock", "subscribe response"))
        if not isinstance(clock, ClockSpec):
            # Initiation clocks are always plain; keep the token.
            clock = clock.clock
        asserted = str_list(data, "asserted-states")
        return cls(
            version=require(data, "version", "subscribe response"),
            subscribe=require(data, "subscribe", "subscribe response"),
            clock=clock,
            asserted_states=asserted if asserted is not None else [],
            saved_state_info=data.get("saved-state-info"),
        )


@dataclass(frozen=True)
class Unsubscribe:
    """``["unsubscribe", root, name]``"""
    root: Path
    name: str

    def to_wire(self) -> List[Any]:
        return [UNSUBSCRIBE, str(self.root), self.name]


@dataclass(frozen=True)
class UnsubscribeResponse:
    """
    Acknowledgement of an unsubscribe.

    Attributes:
        version: Server version
        unsubscribe: Echoed subscription name
    """
    version: str
    unsubscribe: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UnsubscribeResponse":
        expect_object(data, "unsubscribe response")
        raise_for_server_error(data)
        response = cls(
            version=require(data, "version", "unsubscribe response"),
            unsubscribe=require(data, "unsubscribe", "unsubscribe response"),
        )
        logger.debug(f"Unsubscribed from {response.unsubscribe}")
        return response

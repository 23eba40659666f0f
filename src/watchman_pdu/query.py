"""
Query parameters and query results.

A query runs in three phases: generators pick candidate files, the
``expression`` filters them, and the ``fields`` list decides what is
rendered for each match. With no generator set the server walks every
known file. Several generators may be combined and the server unions
their output, which is legal but rarely what a caller wants.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar, Union

from .clock import Clock, decode_clock, encode_clock
from .content_hash import ContentSha1Hex
from .exceptions import DecodeError, EncodeError, MissingFieldError
from .file_type import FileType
from .sync_timeout import SyncTimeout
from .wire import expect_object, optional_bool, optional_int, optional_str, require, str_list

logger = logging.getLogger(__name__)

F = TypeVar("F")

DEFAULT_FIELDS = ["name"]


@dataclass(frozen=True)
class PathGeneratorElement:
    """
    One entry of the ``path`` generator.

    Without a depth the path is walked recursively; with one the walk stops
    that many levels below it (0 means the directory itself only).

    Attributes:
        path: Path relative to the root (or relative_root)
        depth: Maximum depth, or None for a recursive walk
    """
    path: Path
    depth: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.path, str):
            object.__setattr__(self, "path", Path(self.path))
        if self.depth is not None and self.depth < 0:
            raise EncodeError(f"path depth cannot be negative: {self.depth}")

    def to_wire(self) -> Union[str, Dict[str, Any]]:
        if self.depth is None:
            return str(self.path)
        return {"path": str(self.path), "depth": self.depth}

    @classmethod
    def from_wire(cls, value: Any) -> "PathGeneratorElement":
        if isinstance(value, str):
            return cls(Path(value))
        if isinstance(value, dict) and "path" in value:
            path = optional_str(value, "path")
            if path is None:
                raise DecodeError("path generator element has a null path")
            return cls(Path(path), optional_int(value, "depth"))
        raise DecodeError(f"path generator element has unexpected shape: {value!r}")


@dataclass(frozen=True)
class QueryRequestCommon:
    """
    Parameters of a one-shot query.

    Only ``fields`` is always sent. Optional values are left off the wire
    when unset, and boolean flags are only sent when true. ``sync_timeout``
    is left off when it is the default, since a missing value means the
    default for queries.

    Attributes:
        glob: Globs for the glob generator
        glob_noescape: Do not treat backslash as an escape in globs
        glob_includedotfiles: Let globs match names starting with ``.``
        path: Entries for the path generator
        suffix: Filename suffixes for the suffix generator; scope this with
            relative_root on virtualized filesystems
        since: Clock for the since generator
        relative_root: Subdirectory that input paths are relative to and
            output names are rendered against; leaving it unset risks a
            whole-project walk
        expression: Filter expression, passed through unevaluated
        fields: Field names to render for each file; ``name`` is cheapest
        empty_on_fresh_instance: Return no files on a fresh instance
        case_sensitive: Treat names as case sensitive everywhere
        sync_timeout: Sync cookie policy
        dedup_results: Dedup by name when mixing generators
        lock_timeout: Milliseconds to wait for the view lock
        request_id: Id recorded in server-side sampling data
    """
    glob: Optional[List[str]] = None
    glob_noescape: bool = False
    glob_includedotfiles: bool = False
    path: Optional[List[PathGeneratorElement]] = None
    suffix: Optional[List[str]] = None
    since: Optional[Clock] = None
    relative_root: Optional[Path] = None
    expression: Optional[Any] = None
    fields: List[str] = field(default_factory=lambda: list(DEFAULT_FIELDS))
    empty_on_fresh_instance: bool = False
    case_sensitive: bool = False
    sync_timeout: SyncTimeout = field(default_factory=SyncTimeout.default)
    dedup_results: bool = False
    lock_timeout: Optional[int] = None
    request_id: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.relative_root, str):
            object.__setattr__(self, "relative_root", Path(self.relative_root))
        if self.path is not None:
            object.__setattr__(self, "path", [
                p if isinstance(p, PathGeneratorElement) else PathGeneratorElement(p)
                for p in self.path
            ])

    def generators(self) -> List[str]:
        """Names of the generators this query enables."""
        selected = []
        if self.glob is not None:
            selected.append("glob")
        if self.path is not None:
            selected.append("path")
        if self.suffix is not None:
            selected.append("suffix")
        if self.since is not None:
            selected.append("since")
        return selected

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire object."""
        generators = self.generators()
        if len(generators) > 1:
            logger.warning(
                f"query combines generators {generators}; results are unioned"
                + ("" if self.dedup_results else " and may contain duplicates")
            )

        data: Dict[str, Any] = {}
        if self.glob is not None:
            data["glob"] = list(self.glob)
        if self.glob_noescape:
            data["glob_noescape"] = True
        if self.glob_includedotfiles:
            data["glob_includedotfiles"] = True
        if self.path is not None:
            data["path"] = [p.to_wire() for p in self.path]
        if self.suffix is not None:
            data["suffix"] = list(self.suffix)
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
        if not self.sync_timeout.is_default():
            data["sync_timeout"] = self.sync_timeout.to_wire()
        if self.dedup_results:
            data["dedup_results"] = True
        if self.lock_timeout is not None:
            data["lock_timeout"] = self.lock_timeout
        if self.request_id is not None:
            data["request_id"] = self.request_id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueryRequestCommon":
        """Create from a wire object."""
        expect_object(data, "query parameters")
        fields = str_list(data, "fields")
        if fields is None:
            raise MissingFieldError("query parameters have no 'fields' field", field="fields")
        path = data.get("path")
        if path is not None and not isinstance(path, list):
            raise DecodeError(f"path must be a list, got {path!r}")
        relative_root = optional_str(data, "relative_root")
        return cls(
            glob=str_list(data, "glob"),
            glob_noescape=optional_bool(data, "glob_noescape"),
            glob_includedotfiles=optional_bool(data, "glob_includedotfiles"),
            path=[PathGeneratorElement.from_wire(p) for p in path] if path is not None else None,
            suffix=str_list(data, "suffix"),
            since=decode_clock(data["since"]) if data.get("since") is not None else None,
            relative_root=Path(relative_root) if relative_root is not None else None,
            expression=data.get("expression"),
            fields=fields,
            empty_on_fresh_instance=optional_bool(data, "empty_on_fresh_instance"),
            case_sensitive=optional_bool(data, "case_sensitive"),
            sync_timeout=(
                SyncTimeout.from_wire(data["sync_timeout"])
                if "sync_timeout" in data else SyncTimeout.default()
            ),
            dedup_results=optional_bool(data, "dedup_results"),
            lock_timeout=optional_int(data, "lock_timeout"),
            request_id=optional_str(data, "request_id"),
        )


def decode_file_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Decode the typed fields of a raw file record.

    ``type`` becomes a FileType and ``content.sha1hex`` a ContentSha1Hex;
    everything else is returned as sent. Usable as the ``file_decoder``
    of :meth:`QueryResult.from_dict`.
    """
    decoded = dict(record)
    if decoded.get("type") is not None:
        decoded["type"] = FileType.from_wire(decoded["type"])
    if decoded.get("content.sha1hex") is not None:
        decoded["content.sha1hex"] = ContentSha1Hex.from_wire(decoded["content.sha1hex"])
    return decoded


@dataclass(frozen=True)
class QueryResult(Generic[F]):
    """
    Result of a query, and the shape of every subscription push.

    The element type of ``files`` is chosen by the caller through the
    ``file_decoder`` passed to :meth:`from_dict`, and must match the
    ``fields`` that were requested.

    When ``is_fresh_instance`` is true, ``files`` is the complete set of
    matches and the caller MUST forget every file it knew about that is
    not listed, or its view will silently diverge from the server.
    Otherwise the files are a delta since the clock that was sent.

    Attributes:
        version: Server version
        is_fresh_instance: Files are the full match set, not a delta
        files: Matching files, if the server sent any
        clock: Clock to send as ``since`` next time
        subscription_canceled: The subscription was canceled (``canceled``)
        state_enter: State asserted by this push (``state-enter``)
        state_leave: State vacated by this push (``state-leave``)
        subscription: Subscription name, for pushes
        unilateral: Set by the server on unsolicited pushes
        warning: Advisory text from the server
    """
    version: str
    is_fresh_instance: bool = False
    files: Optional[List[F]] = None
    clock: Optional[Clock] = None
    subscription_canceled: bool = False
    state_enter: Optional[str] = None
    state_leave: Optional[str] = None
    subscription: Optional[str] = None
    unilateral: bool = False
    warning: Optional[str] = None

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        file_decoder: Optional[Callable[[Dict[str, Any]], F]] = None,
        fields: Optional[List[str]] = None,
    ) -> "QueryResult[F]":
        """
        Decode a query response or subscription push.

        Args:
            data: The response object
            file_decoder: Turns one file record into F; records are kept
                as dicts when omitted
            fields: The field list that was requested. When it names a
                single field the server sends bare values instead of
                objects; these are wrapped as ``{field: value}`` before
                decoding.

        Raises:
            DecodeError: If the payload or a file record is malformed
        """
        expect_object(data, "query result")
        version = require(data, "version", "query result")

        files = None
        raw_files = data.get("files")
        if raw_files is not None:
            if not isinstance(raw_files, list):
                raise DecodeError(f"files must be a list, got {raw_files!r}")
            files = [cls._decode_file(raw, file_decoder, fields) for raw in raw_files]

        clock = data.get("clock")
        result = cls(
            version=version,
            is_fresh_instance=optional_bool(data, "is_fresh_instance"),
            files=files,
            clock=decode_clock(clock) if clock is not None else None,
            subscription_canceled=optional_bool(data, "canceled"),
            state_enter=optional_str(data, "state-enter"),
            state_leave=optional_str(data, "state-leave"),
            subscription=optional_str(data, "subscription"),
            unilateral=optional_bool(data, "unilateral"),
            warning=optional_str(data, "warning"),
        )
        if result.subscription_canceled:
            logger.info(f"Subscription canceled by server: {result.subscription}")
        return result

    @staticmethod
    def _decode_file(raw: Any, file_decoder, fields: Optional[List[str]]):
        if not isinstance(raw, dict):
            if fields is not None and len(fields) == 1:
                raw = {fields[0]: raw}
            else:
                raise DecodeError(f"file record must be an object, got {raw!r}")
        if file_decoder is None:
            return raw
        try:
            return file_decoder(raw)
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"cannot decode file record {raw!r}: {e}") from e

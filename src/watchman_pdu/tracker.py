"""Client-side file state kept in step with since queries and pushes."""

import logging
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from .clock import Clock, ClockSpec
from .content_hash import ContentSha1Hex
from .query import QueryResult

logger = logging.getLogger(__name__)


class TrackerState(Enum):
    """Whether a baseline file set has been established."""
    UNKNOWN = "unknown"
    TRACKING = "tracking"


def _get(record: Any, key: str, default: Any = None) -> Any:
    if isinstance(record, dict):
        return record.get(key, default)
    return getattr(record, key, default)


class FileStateTracker:
    """
    Applies query results to a retained set of files.

    A fresh instance result replaces the whole baseline, since the server
    may have restarted or dropped its history and anything not listed is
    gone. Other results are deltas applied by name, with ``exists`` false
    meaning removal. The clock of every applied result is kept for the
    next ``since``.

    Not thread safe: the tracker and its clock belong to one session.
    """

    def __init__(self, key: str = "name", validate_content_hashes: bool = False):
        """
        Initialize the tracker.

        Args:
            key: Record field that identifies a file
            validate_content_hashes: Warn about ``content.sha1hex`` values
                that are not 40 hex digits
        """
        self.key = key
        self.validate_content_hashes = validate_content_hashes
        self.state = TrackerState.UNKNOWN
        self.clock: Optional[Clock] = None
        self.files: Dict[Any, Any] = {}

    def __len__(self) -> int:
        return len(self.files)

    def __contains__(self, name: Any) -> bool:
        return name in self.files

    def since(self) -> Clock:
        """Clock to send in the next since query."""
        if self.state is TrackerState.UNKNOWN or self.clock is None:
            return ClockSpec.null()
        return self.clock

    def reset(self) -> None:
        self.state = TrackerState.UNKNOWN
        self.clock = None
        self.files = {}

    def apply(self, result: QueryResult) -> None:
        """
        Apply a query result or subscription push.

        Args:
            result: Decoded result whose files carry the key field and,
                for deltas, ``exists``
        """
        if result.subscription_canceled:
            logger.info(f"Ignoring canceled subscription push: {result.subscription}")
            return

        files = result.files or []
        if result.is_fresh_instance:
            logger.info(
                f"Fresh instance result, replacing {len(self.files)} tracked files "
                f"with {len(files)}"
            )
            self.files = {}
            self._merge(files)
        else:
            if self.state is TrackerState.UNKNOWN:
                logger.warning("Incremental result received before any baseline")
            logger.debug(f"Applying delta of {len(files)} files")
            self._merge(files)

        self.state = TrackerState.TRACKING
        if result.clock is not None:
            self.clock = result.clock

    def _merge(self, records: Iterable[Any]) -> None:
        for record in records:
            name = _get(record, self.key)
            if name is None:
                logger.warning(f"File record without '{self.key}' skipped: {record!r}")
                continue
            if _get(record, "exists", True) is False:
                self.files.pop(name, None)
                continue
            if self.validate_content_hashes:
                self._check_hash(name, record)
            self.files[name] = record

    def _check_hash(self, name: Any, record: Any) -> None:
        content_hash = _get(record, "content.sha1hex")
        if isinstance(content_hash, str):
            content_hash = ContentSha1Hex.from_wire(content_hash)
        if isinstance(content_hash, ContentSha1Hex) and not content_hash.is_error:
            if not content_hash.is_valid_sha1():
                logger.warning(f"Malformed content hash for {name}: {content_hash.sha1!r}")

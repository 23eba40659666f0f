"""Client-side defaults for building protocol messages."""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from .query import QueryRequestCommon
from .subscription import SubscribeRequest
from .sync_timeout import SyncTimeout


def _env_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class PduConfig:
    """
    Defaults applied to queries and subscriptions built by this client.

    Attributes:
        fields: Field names requested for each file
        sync_timeout_ms: Sync cookie timeout; None keeps the server default
            and 0 disables the cookie
        lock_timeout_ms: View lock timeout; None keeps the server default
        case_sensitive: Request case sensitive name matching
        dedup_results: Dedup results when generators are mixed
        validate_content_hashes: Check returned content hashes look like SHA-1
    """
    fields: List[str] = field(default_factory=lambda: ["name", "exists", "type"])
    sync_timeout_ms: Optional[int] = None
    lock_timeout_ms: Optional[int] = None
    case_sensitive: bool = False
    dedup_results: bool = False
    validate_content_hashes: bool = False

    def __post_init__(self):
        if isinstance(self.fields, str):
            self.fields = [f.strip() for f in self.fields.split(",") if f.strip()]
        if not self.fields:
            raise ValueError("fields must name at least one field")

    @classmethod
    def from_env(cls) -> "PduConfig":
        """Build a config from ``WATCHMAN_PDU_*`` environment variables."""
        config = cls(
            sync_timeout_ms=_env_int("WATCHMAN_PDU_SYNC_TIMEOUT_MS"),
            lock_timeout_ms=_env_int("WATCHMAN_PDU_LOCK_TIMEOUT_MS"),
            case_sensitive=_env_bool("WATCHMAN_PDU_CASE_SENSITIVE"),
            dedup_results=_env_bool("WATCHMAN_PDU_DEDUP_RESULTS"),
            validate_content_hashes=_env_bool("WATCHMAN_PDU_VALIDATE_HASHES"),
        )
        fields = os.environ.get("WATCHMAN_PDU_FIELDS")
        if fields:
            config.fields = [f.strip() for f in fields.split(",") if f.strip()]
        return config

    def sync_timeout(self) -> SyncTimeout:
        if self.sync_timeout_ms is None:
            return SyncTimeout.default()
        return SyncTimeout.from_millis(self.sync_timeout_ms)

    def query_params(self, **overrides) -> QueryRequestCommon:
        """Query parameters from these defaults, with keyword overrides."""
        params = {
            "fields": list(self.fields),
            "sync_timeout": self.sync_timeout(),
            "lock_timeout": self.lock_timeout_ms,
            "case_sensitive": self.case_sensitive,
            "dedup_results": self.dedup_results,
        }
        params.update(overrides)
        return QueryRequestCommon(**params)

    def subscribe_params(self, **overrides) -> SubscribeRequest:
        params = {
            "fields": list(self.fields),
            "case_sensitive": self.case_sensitive,
        }
        params.update(overrides)
        return SubscribeRequest(**params)

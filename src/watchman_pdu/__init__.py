"""
Watchman PDU Package

Request and response message shapes for a client of the watchman file
watching service, and the value types that travel inside them.

Features:
- Opaque clock tokens with source control aware clock data
- Sync cookie timeout policy with per-command omission rules
- File type and content hash codecs
- Query and subscription parameter bundles
- Positional command envelopes and typed responses
- Fresh instance aware file state tracking
"""

from .clock import (
    NULL_CLOCK,
    Clock,
    ClockSpec,
    FatClockData,
    ScmAwareClockData,
    SavedStateClockData,
    encode_clock,
    decode_clock,
    clock_spec_of,
)

from .sync_timeout import SyncTimeout, SyncTimeoutKind, DEFAULT_SYNC_TIMEOUT_MS
from .file_type import FileType
from .content_hash import ContentSha1Hex

from .query import (
    PathGeneratorElement,
    QueryRequestCommon,
    QueryResult,
    decode_file_record,
)

from .subscription import (
    SubscribeRequest,
    SubscribeCommand,
    SubscribeResponse,
    Unsubscribe,
    UnsubscribeResponse,
)

from .commands import (
    GetSockNameRequest,
    GetSockNameResponse,
    ClockRequestParams,
    ClockRequest,
    ClockResponse,
    WatchProjectRequest,
    WatchProjectResponse,
    QueryRequest,
)

from .codec import encode_pdu, decode_pdu, decode_response, is_unilateral
from .tracker import FileStateTracker, TrackerState
from .config import PduConfig

from .exceptions import (
    PduError,
    DecodeError,
    MissingFieldError,
    UnknownFileTypeError,
    EncodeError,
    ServerError,
)


__all__ = [
    # Clocks
    "NULL_CLOCK",
    "Clock",
    "ClockSpec",
    "FatClockData",
    "ScmAwareClockData",
    "SavedStateClockData",
    "encode_clock",
    "decode_clock",
    "clock_spec_of",
    # Value types
    "SyncTimeout",
    "SyncTimeoutKind",
    "DEFAULT_SYNC_TIMEOUT_MS",
    "FileType",
    "ContentSha1Hex",
    # Query
    "PathGeneratorElement",
    "QueryRequestCommon",
    "QueryResult",
    "decode_file_record",
    # Subscriptions
    "SubscribeRequest",
    "SubscribeCommand",
    "SubscribeResponse",
    "Unsubscribe",
    "UnsubscribeResponse",
    # Commands
    "GetSockNameRequest",
    "GetSockNameResponse",
    "ClockRequestParams",
    "ClockRequest",
    "ClockResponse",
    "WatchProjectRequest",
    "WatchProjectResponse",
    "QueryRequest",
    # Codec
    "encode_pdu",
    "decode_pdu",
    "decode_response",
    "is_unilateral",
    # State
    "FileStateTracker",
    "TrackerState",
    # Config
    "PduConfig",
    # Exceptions
    "PduError",
    "DecodeError",
    "MissingFieldError",
    "UnknownFileTypeError",
    "EncodeError",
    "ServerError",
]

__version__ = "0.1.0"

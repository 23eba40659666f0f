"""Per-file ``content.sha1hex`` results."""

import re
from dataclasses import dataclass
from typing import Any, Optional, Union

from .exceptions import DecodeError
from .wire import optional_str


SHA1_HEX_LENGTH = 40
_SHA1_HEX_RE = re.compile(r"[0-9a-fA-F]{40}")


@dataclass(frozen=True)
class ContentSha1Hex:
    """
    Content hash of a file, or the error the server hit computing it.

    A failed hash is data, not a decode failure: the rest of the result
    still decodes. Exactly one of ``sha1`` and ``error`` is set.

    Attributes:
        sha1: 40 hex digit SHA-1 of the file contents
        error: Message describing why the hash is unavailable
    """
    sha1: Optional[str] = None
    error: Optional[str] = None

    def __post_init__(self):
        if (self.sha1 is None) == (self.error is None):
            raise ValueError("exactly one of sha1 and error must be set")

    @classmethod
    def hash(cls, sha1: str) -> "ContentSha1Hex":
        return cls(sha1=sha1)

    @classmethod
    def failure(cls, error: str) -> "ContentSha1Hex":
        return cls(error=error)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def is_valid_sha1(self) -> bool:
        """
        Check that a hash result really is 40 hex digits.

        Shape dispatch does not look at the content, so callers that rely on
        the value should check it here.
        """
        return self.sha1 is not None and bool(_SHA1_HEX_RE.fullmatch(self.sha1))

    def to_wire(self) -> Union[str, dict]:
        if self.error is not None:
            return {"error": self.error}
        return self.sha1

    @classmethod
    def from_wire(cls, value: Any) -> "ContentSha1Hex":
        """
        Decode either a bare hash string or an ``{"error": ...}`` object.

        Raises:
            DecodeError: If the value matches neither shape
        """
        if isinstance(value, dict) and "error" in value:
            message = optional_str(value, "error")
            if message is None:
                raise DecodeError("content.sha1hex error must be a string, got None")
            return cls.failure(message)
        if isinstance(value, str):
            return cls.hash(value)
        raise DecodeError(f"content.sha1hex has unexpected shape: {value!r}")

"""Custom exceptions for the watchman_pdu package."""

from typing import Any, Dict, Optional


class PduError(Exception):
    """Base exception for all protocol message errors."""
    pass


class DecodeError(PduError):
    """Payload does not have the shape of the expected message."""
    pass


class MissingFieldError(DecodeError):
    """A required wire field is absent from the payload."""
    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class UnknownFileTypeError(DecodeError):
    """Server returned a file type token outside the known set."""
    def __init__(self, message: str, token: str = None):
        super().__init__(message)
        self.token = token


class EncodeError(PduError):
    """Value cannot be rendered on the wire."""
    pass


class ServerError(PduError):
    """The server answered a command with an error field."""
    def __init__(self, message: str, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.payload = payload or {}

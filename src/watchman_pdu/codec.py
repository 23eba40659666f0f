"""
JSON line encoding of protocol messages.

The service's JSON protocol carries one JSON value per line. Framing and
the socket itself belong to the transport; this module only turns
messages into bytes and bytes into response objects.
"""

import json
from typing import Any, Callable, Dict, TypeVar, Union

from .exceptions import DecodeError, EncodeError
from .wire import raise_for_server_error

T = TypeVar("T")

PUSH_KEYS = ("files", "state-enter", "state-leave", "canceled")


def _to_wire(pdu: Any) -> Any:
    if hasattr(pdu, "to_wire"):
        return pdu.to_wire()
    if hasattr(pdu, "to_dict"):
        return pdu.to_dict()
    if isinstance(pdu, (list, dict)):
        return pdu
    raise EncodeError(f"cannot encode {type(pdu).__name__} as a message")


def encode_pdu(pdu: Any) -> bytes:
    """
    Encode a request as one JSON line.

    Args:
        pdu: A command envelope, a parameter object, or a plain list/dict

    Returns:
        UTF-8 bytes terminated by a newline
    """
    try:
        text = json.dumps(_to_wire(pdu), separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise EncodeError(f"message is not JSON serializable: {e}") from e
    return text.encode("utf-8") + b"\n"


def decode_pdu(data: Union[bytes, str]) -> Dict[str, Any]:
    """
    Decode one JSON line into a response object.

    Raises:
        DecodeError: If the line is not JSON or not a JSON object
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"response is not valid UTF-8: {e}") from e
    try:
        value = json.loads(data)
    except json.JSONDecodeError as e:
        raise DecodeError(f"response is not valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise DecodeError(f"response must be a JSON object, got {type(value).__name__}")
    return value


def decode_response(
    decoder: Union[type, Callable[..., T]],
    payload: Union[bytes, str, Dict[str, Any]],
    **kwargs,
) -> T:
    """
    Decode a command response, surfacing server errors.

    Args:
        decoder: A response class with ``from_dict``, or a callable
            taking the response object
        payload: Raw line or already parsed response object
        **kwargs: Passed through to the decoder (e.g. ``file_decoder``)

    Raises:
        ServerError: If the response has an ``error`` field
        DecodeError: If the response has the wrong shape
    """
    if not isinstance(payload, dict):
        payload = decode_pdu(payload)
    raise_for_server_error(payload)
    from_dict = getattr(decoder, "from_dict", decoder)
    return from_dict(payload, **kwargs)


def is_unilateral(payload: Dict[str, Any]) -> bool:
    """
    Whether a response looks like an unsolicited subscription push.

    Pushes are matched to subscriptions by shape only; routing them is
    up to the transport.
    """
    if payload.get("unilateral") is True:
        return True
    return "subscription" in payload and any(key in payload for key in PUSH_KEYS)

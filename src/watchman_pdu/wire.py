"""Helpers for reading and writing wire objects."""

from typing import Any, Dict, List, Optional

from .exceptions import DecodeError, MissingFieldError, ServerError


def drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    """Leave unset optional values off the wire instead of sending null."""
    return {key: value for key, value in data.items() if value is not None}


def require(data: Dict[str, Any], key: str, what: str) -> Any:
    if key not in data:
        raise MissingFieldError(f"{what} has no '{key}' field", field=key)
    return data[key]


def optional_bool(data: Dict[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise DecodeError(f"{key} must be a boolean, got {value!r}")
    return value


def optional_str(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise DecodeError(f"{key} must be a string, got {value!r}")
    return value


def optional_int(data: Dict[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
        raise DecodeError(f"{key} must be an integer, got {value!r}")
    return value


def str_list(data: Dict[str, Any], key: str) -> Optional[List[str]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise DecodeError(f"{key} must be a list of strings, got {value!r}")
    return list(value)


def expect_object(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"{what} must be an object, got {data!r}")
    return data


def raise_for_server_error(data: Dict[str, Any]) -> None:
    """Raise ServerError when a response object carries an ``error`` field."""
    if "error" in data:
        raise ServerError(str(data["error"]), data)

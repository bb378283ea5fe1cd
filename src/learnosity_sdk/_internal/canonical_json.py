"""Centralized canonical JSON serialization.

This module provides the single encoder used for request strings, signed
nested packets and generated output. The Learnosity servers recompute the
signature from the JSON text they receive, so the text has to match what
their own encoder produces byte for byte:

- Compact separators (",", ":")
- Forward slashes are NOT escaped
- Non-ASCII characters are emitted as UTF-8, not \\uXXXX escapes, except
  U+2028 and U+2029, which the platform encoder still escapes
- Key order is preserved (no sorting unless explicitly requested)

Failures are returned as a JsonResult rather than raised or kept in global
state, so callers can attach the error description to their own exception.
"""

import json
from enum import IntFlag
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict

from learnosity_sdk.codes import JsonErrorCode


MAX_DEPTH = 512

_ERROR_MESSAGES = {
    JsonErrorCode.NONE: None,
    JsonErrorCode.DEPTH: "Maximum stack depth exceeded",
    JsonErrorCode.STATE_MISMATCH: "Underflow or the modes mismatch",
    JsonErrorCode.CTRL_CHAR: "Unexpected control character found",
    JsonErrorCode.SYNTAX: "Syntax error, malformed JSON",
    JsonErrorCode.UTF8: "Malformed UTF-8 characters, possibly incorrectly encoded",
    JsonErrorCode.UNKNOWN: "Unknown error",
}


class JsonOption(IntFlag):
    """Extra serialization flags that can be OR-ed into encode()."""
    PRETTY_PRINT = 1
    SORT_KEYS = 2
    FORCE_OBJECT = 4


class JsonResult(BaseModel):
    """Outcome of an encode or decode call.

    For encode() the value is the JSON text, for decode() the parsed value.
    """
    ok: bool
    value: Any = None
    error: JsonErrorCode = JsonErrorCode.NONE

    model_config = ConfigDict(frozen=True)

    @classmethod
    def failure(cls, error: JsonErrorCode) -> "JsonResult":
        return cls(ok=False, error=error)

    @property
    def error_message(self) -> Optional[str]:
        """Human readable description of the failure (None on success)."""
        return error_message_for(self.error)


def error_message_for(code: JsonErrorCode) -> Optional[str]:
    """Map a JsonErrorCode to its fixed description."""
    return _ERROR_MESSAGES.get(code, _ERROR_MESSAGES[JsonErrorCode.UNKNOWN])


def _combine_options(options: Union[None, int, Iterable[int]]) -> int:
    if options is None:
        return 0
    if isinstance(options, int):
        return int(options)
    flags = 0
    for option in options:
        flags |= int(option)
    return flags


def _depth_exceeded(obj: Any, limit: int, depth: int = 0, active: Optional[set] = None) -> bool:
    """Return True when containers nest deeper than limit.

    A container that contains itself counts as infinitely deep.
    """
    if not isinstance(obj, (dict, list, tuple)):
        return False
    depth += 1
    if depth > limit:
        return True
    if active is None:
        active = set()
    if id(obj) in active:
        return True
    active.add(id(obj))
    try:
        children = obj.values() if isinstance(obj, dict) else obj
        for child in children:
            if _depth_exceeded(child, limit, depth, active):
                return True
        return False
    finally:
        active.discard(id(obj))


def _force_object(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _force_object(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return {str(i): _force_object(v) for i, v in enumerate(obj)}
    return obj


def _default(obj: Any) -> Any:
    if isinstance(obj, (bytes, bytearray)):
        # Raises UnicodeDecodeError for invalid byte strings
        return bytes(obj).decode("utf-8")
    if isinstance(obj, BaseModel):
        return obj.model_dump(exclude_none=True)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def encode(value: Any, options: Union[None, int, Iterable[int]] = None) -> JsonResult:
    """
    Encode a value as canonical JSON text.

    Args:
        value: Value to serialize (dict, list, str, int, float, bool, None,
            bytes holding UTF-8, or a pydantic model)
        options: Zero or more JsonOption flags; unknown bits are ignored

    Returns:
        JsonResult whose value is the JSON string on success
    """
    flags = _combine_options(options)

    if _depth_exceeded(value, MAX_DEPTH):
        return JsonResult.failure(JsonErrorCode.DEPTH)

    if flags & JsonOption.FORCE_OBJECT:
        value = _force_object(value)

    pretty = bool(flags & JsonOption.PRETTY_PRINT)
    try:
        text = json.dumps(
            value,
            ensure_ascii=False,  # Unescaped unicode
            allow_nan=False,
            sort_keys=bool(flags & JsonOption.SORT_KEYS),
            indent=4 if pretty else None,
            separators=(",", ": ") if pretty else (",", ":"),
            default=_default,
        )
    except UnicodeDecodeError:
        return JsonResult.failure(JsonErrorCode.UTF8)
    except RecursionError:
        return JsonResult.failure(JsonErrorCode.DEPTH)
    except (TypeError, ValueError):
        return JsonResult.failure(JsonErrorCode.UNKNOWN)

    # Lone surrogates survive json.dumps with ensure_ascii=False
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return JsonResult.failure(JsonErrorCode.UTF8)

    # Line/paragraph separators can only occur inside string literals here
    text = text.replace("\u2028", "\\u2028").replace("\u2029", "\\u2029")

    return JsonResult(ok=True, value=text)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def _classify_decode_error(exc: json.JSONDecodeError) -> JsonErrorCode:
    if exc.msg.startswith("Invalid control character"):
        return JsonErrorCode.CTRL_CHAR
    # A closing bracket of the wrong kind, e.g. "[1}"
    if (
        exc.msg.startswith("Expecting ',' delimiter")
        and exc.pos < len(exc.doc)
        and exc.doc[exc.pos] in "]}"
    ):
        return JsonErrorCode.STATE_MISMATCH
    return JsonErrorCode.SYNTAX


def decode(text: Union[str, bytes, bytearray]) -> JsonResult:
    """
    Decode JSON text.

    Args:
        text: JSON document as str, or bytes holding UTF-8

    Returns:
        JsonResult whose value is the parsed object on success
    """
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8")
        except UnicodeDecodeError:
            return JsonResult.failure(JsonErrorCode.UTF8)
    if not isinstance(text, str):
        return JsonResult.failure(JsonErrorCode.UNKNOWN)

    try:
        value = json.loads(text, parse_constant=_reject_constant)
    except RecursionError:
        return JsonResult.failure(JsonErrorCode.DEPTH)
    except json.JSONDecodeError as exc:
        return JsonResult.failure(_classify_decode_error(exc))
    except ValueError:
        return JsonResult.failure(JsonErrorCode.SYNTAX)

    if _depth_exceeded(value, MAX_DEPTH):
        return JsonResult.failure(JsonErrorCode.DEPTH)

    return JsonResult(ok=True, value=value)


def is_json(text: Union[str, bytes, bytearray]) -> bool:
    """Return whether text is valid JSON that does not decode to null."""
    result = decode(text)
    return result.ok and result.value is not None

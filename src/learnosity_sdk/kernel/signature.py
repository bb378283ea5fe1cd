"""Signature hashing for Learnosity request packets.

The pre-hash string is the ordered signing values joined with "_". Values
are stringified the way the Learnosity servers stringify them when they
recompute the signature:

- str as is
- int in decimal, integral floats without a fraction
- True as "1", False and None as ""

Anything else (dicts, lists, arbitrary objects) is rejected.
"""

import hashlib
from typing import Any, Sequence


SEPARATOR = "_"
ALGORITHM = "sha256"


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    raise TypeError(
        f"Cannot use value of type {type(value).__name__} in a signature; "
        f"only str, int, float, bool and None are allowed"
    )


def join_values(values: Sequence[Any]) -> str:
    """Build the pre-hash string from ordered signing values."""
    return SEPARATOR.join(_stringify(value) for value in values)


def hash_string(text: str) -> str:
    """Compute the lowercase SHA256 hex digest of a UTF-8 string."""
    return hashlib.new(ALGORITHM, text.encode("utf-8")).hexdigest()


def hash_value(values: Sequence[Any]) -> str:
    """Compute a signature over ordered signing values.

    Args:
        values: Ordered scalars (security values, secret, request string, action)

    Returns:
        SHA256 hex digest of the values joined with "_"

    Raises:
        TypeError: If a value is not a scalar
    """
    if isinstance(values, (str, bytes)):
        raise TypeError("hash_value expects a sequence of values, not a single string")
    return hash_string(join_values(values))

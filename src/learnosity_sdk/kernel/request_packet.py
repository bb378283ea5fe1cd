"""Request packet parsing and canonical request strings."""

import copy
from typing import Any, Dict, Mapping, Optional, Union

from learnosity_sdk._internal.canonical_json import decode, encode
from learnosity_sdk.exceptions import ValidationError


def parse_request_packet(
    request: Union[Mapping[str, Any], str, bytes, None],
) -> Optional[Dict[str, Any]]:
    """
    Normalize the caller's request packet.

    A JSON string is decoded first. Empty values (None, "", {}, []) mean
    "no request packet". The result is a deep copy, so later adjustments
    never touch the caller's object.

    Returns:
        A new dict, or None when there is no request packet

    Raises:
        ValidationError: If the JSON string is malformed or the packet is
            not a mapping
    """
    if isinstance(request, (str, bytes, bytearray)):
        if not request:
            return None
        result = decode(request)
        if not result.ok:
            raise ValidationError(f"The request packet is not valid JSON - {result.error_message}")
        request = result.value

    if not request:
        return None

    if not isinstance(request, Mapping):
        raise ValidationError("The request packet must be a mapping")

    return copy.deepcopy(dict(request))


def build_request_string(request: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Canonical JSON of the request packet, or None when there is none.

    Raises:
        ValidationError: If the packet cannot be encoded
    """
    if not request:
        return None
    result = encode(request)
    if not result.ok:
        raise ValidationError(
            f"Invalid data, please check your request packet - {result.error_message}"
        )
    return result.value

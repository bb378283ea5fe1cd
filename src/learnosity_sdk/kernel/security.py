"""Pydantic model for the security packet with strict validation."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr
from pydantic import ValidationError as PydanticValidationError

from learnosity_sdk._internal.canonical_json import decode
from learnosity_sdk.codes import Service
from learnosity_sdk.exceptions import ValidationError


# Valid security packet keys, in the order their values enter the signature
SECURITY_KEYS = ("consumer_key", "domain", "timestamp", "expires", "user_id")

DEFAULT_ASSESS_DOMAIN = "assess.learnosity.com"

TIMESTAMP_FORMAT = "%Y%m%d-%H%M"

SecurityValue = Union[StrictStr, StrictInt, StrictFloat]


def default_timestamp(now: Optional[datetime] = None) -> str:
    """Format a UTC timestamp as YYYYMMDD-HHmm.

    Naive datetimes are taken to be UTC already.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime(TIMESTAMP_FORMAT)


def _describe(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item.get("loc", ()))
        parts.append(f"{loc}: {item.get('msg')}" if loc else str(item.get("msg")))
    return "; ".join(parts)


class SecurityPacket(BaseModel):
    """Caller identity and timing attributes used to authenticate a request.

    Frozen: adjustments during request assembly go through replace(), which
    returns a new, re-validated packet. `signature` is set once the packet
    has been signed and is never part of the signing input.
    """
    consumer_key: SecurityValue
    domain: Optional[SecurityValue] = None
    timestamp: Optional[SecurityValue] = None
    expires: Optional[SecurityValue] = None
    user_id: Optional[SecurityValue] = None
    signature: Optional[StrictStr] = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    def signing_values(self) -> List[Any]:
        """Values of the recognized keys in signature order, skipping absent keys."""
        values = []
        for key in SECURITY_KEYS:
            value = getattr(self, key)
            if value is not None:
                values.append(value)
        return values

    def replace(self, **changes: Any) -> "SecurityPacket":
        """Return a new packet with the given fields changed."""
        data = self.model_dump(exclude_none=True)
        data.update(changes)
        try:
            return type(self)(**data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid security packet: {_describe(e)}")

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict of the populated fields, in key order."""
        return self.model_dump(exclude_none=True)


def parse_security_packet(
    security: Union[Mapping[str, Any], str, bytes, None],
    service: Service,
    now: Optional[datetime] = None,
) -> SecurityPacket:
    """
    Validate caller-supplied security attributes and build a SecurityPacket.

    Args:
        security: Mapping of security attributes, or a JSON object string
        service: Service the packet is for (questions requires user_id)
        now: Clock override for the default timestamp

    Returns:
        SecurityPacket with timestamp defaulted

    Raises:
        ValidationError: On a malformed packet, an unknown key, a missing
            consumer_key, or a missing user_id for the questions service
    """
    # In case the caller gave us a JSON security packet
    if isinstance(security, (str, bytes, bytearray)):
        result = decode(security)
        if not result.ok:
            raise ValidationError(
                f"The security packet must be a mapping or a JSON object - {result.error_message}"
            )
        security = result.value

    if not security or not isinstance(security, Mapping):
        raise ValidationError("The security packet must be a non-empty mapping")

    for key in security:
        if key not in SECURITY_KEYS:
            raise ValidationError(f"Invalid key found in the security packet: {key}")

    data = {key: value for key, value in security.items() if value is not None}

    if "consumer_key" not in data:
        raise ValidationError("The security packet must contain a `consumer_key`")

    if "timestamp" not in data:
        data["timestamp"] = default_timestamp(now)

    if service is Service.QUESTIONS and "user_id" not in data:
        raise ValidationError("If using the questions api, a user id needs to be specified")

    try:
        return SecurityPacket(**data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid security packet: {_describe(e)}")

"""Per-service signing and output rules (pure logic).

Each Learnosity service differs in three ways:

- whether the request packet takes part in the signature
- structural adjustments applied to the packets before signing
- the shape of the generated output

SERVICE_RULES maps every Service to a ServiceRules entry holding those
three things. Adjust and shape functions never mutate their arguments.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from learnosity_sdk._internal.canonical_json import encode
from learnosity_sdk.codes import Service
from learnosity_sdk.exceptions import ValidationError
from learnosity_sdk.kernel.security import DEFAULT_ASSESS_DOMAIN, SecurityPacket
from learnosity_sdk.kernel.signature import hash_string, hash_value


RequestPacket = Optional[Dict[str, Any]]
AdjustFn = Callable[[SecurityPacket, RequestPacket, str], Tuple[SecurityPacket, RequestPacket]]
ShapeFn = Callable[[SecurityPacket, RequestPacket, Optional[str]], Any]


@dataclass(frozen=True)
class ServiceRules:
    """How one service signs and shapes its request."""
    sign_request: bool
    adjust: AdjustFn
    shape: ShapeFn
    pre_encoded: bool = False  # shape() already returns JSON strings


def sign(values: Sequence[Any]) -> str:
    """hash_value() with type errors reported as validation failures."""
    try:
        return hash_value(values)
    except TypeError as e:
        raise ValidationError(f"Invalid value in signature - {e}")


def encode_payload(value: Any) -> str:
    """Canonical JSON of generated output.

    Raises:
        ValidationError: If the value cannot be encoded
    """
    result = encode(value)
    if not result.ok:
        raise ValidationError(f"Unable to encode the generated data - {result.error_message}")
    return result.value


# --- adjustments ---

def _no_adjustment(security: SecurityPacket, request: RequestPacket, secret: str):
    return security, request


def _sign_questions_api_activity(security: SecurityPacket, request: RequestPacket, secret: str):
    """Sign the Questions API packet embedded in an Assess API request.

    The domain falls back from the security packet to the embedded packet
    to DEFAULT_ASSESS_DOMAIN, in that order.
    """
    if not request or "questionsApiActivity" not in request:
        return security, request

    activity = request["questionsApiActivity"]
    if not isinstance(activity, Mapping):
        raise ValidationError("`questionsApiActivity` in the request packet must be a mapping")

    if security.domain is not None:
        domain = security.domain
    elif activity.get("domain") is not None:
        domain = activity["domain"]
    else:
        domain = DEFAULT_ASSESS_DOMAIN

    parts = [security.consumer_key, domain, security.timestamp]
    if security.expires is not None:
        parts.append(security.expires)
    parts.extend([security.user_id, secret])

    signed = dict(activity)
    signed["consumer_key"] = security.consumer_key
    signed.pop("domain", None)
    signed["timestamp"] = security.timestamp
    if security.expires is not None:
        signed["expires"] = security.expires
    else:
        signed.pop("expires", None)
    signed["user_id"] = security.user_id
    signed["signature"] = sign(parts)

    adjusted = dict(request)
    adjusted["questionsApiActivity"] = signed
    return security, adjusted


def _copy_request_user_id(security: SecurityPacket, request: RequestPacket, secret: str):
    # Events are shared with these services, so both packets need the same user scope
    if security.user_id is None and request and request.get("user_id") is not None:
        security = security.replace(user_id=request["user_id"])
    return security, request


def _hash_event_users(security: SecurityPacket, request: RequestPacket, secret: str):
    if not request or "users" not in request:
        return security, request

    users = request["users"]
    if not isinstance(users, (list, tuple)):
        raise ValidationError("`users` in the events request packet must be a list")
    if not users:
        return security, request

    hashed = {}
    for user in users:
        if isinstance(user, bool) or not isinstance(user, (str, int)):
            raise ValidationError(
                f"Invalid user in the events request packet: {user!r} (expected a string or int)"
            )
        user_id = str(user)
        # Direct concatenation, no separator
        hashed[user_id] = hash_string(user_id + secret)

    adjusted = dict(request)
    adjusted["users"] = hashed
    return security, adjusted


# --- output shapes ---

def _shape_wrapped(security: SecurityPacket, request: RequestPacket, action: Optional[str]):
    output: Dict[str, Any] = {"security": security.to_dict()}
    if request:
        output["request"] = request
    if action:
        output["action"] = action
    return output


def _shape_assess(security: SecurityPacket, request: RequestPacket, action: Optional[str]):
    return request or None


def _shape_data(security: SecurityPacket, request: RequestPacket, action: Optional[str]):
    output = _shape_wrapped(security, request, action)
    encoded = {"security": encode_payload(output["security"])}
    if "request" in output:
        encoded["request"] = encode_payload(output["request"])
    if "action" in output:
        encoded["action"] = output["action"]
    return encoded


def _shape_questions(security: SecurityPacket, request: RequestPacket, action: Optional[str]):
    output = security.to_dict()
    output.pop("domain", None)
    if request:
        output.update(request)
    return output


def _shape_events(security: SecurityPacket, request: RequestPacket, action: Optional[str]):
    return {"security": security.to_dict(), "config": request}


SERVICE_RULES: Dict[Service, ServiceRules] = {
    Service.ASSESS: ServiceRules(
        sign_request=False, adjust=_sign_questions_api_activity, shape=_shape_assess
    ),
    Service.AUTHOR: ServiceRules(sign_request=True, adjust=_no_adjustment, shape=_shape_wrapped),
    Service.DATA: ServiceRules(
        sign_request=True, adjust=_no_adjustment, shape=_shape_data, pre_encoded=True
    ),
    Service.EVENTS: ServiceRules(sign_request=False, adjust=_hash_event_users, shape=_shape_events),
    Service.ITEMS: ServiceRules(sign_request=True, adjust=_copy_request_user_id, shape=_shape_wrapped),
    Service.QUESTIONS: ServiceRules(sign_request=False, adjust=_no_adjustment, shape=_shape_questions),
    Service.REPORTS: ServiceRules(
        sign_request=True, adjust=_copy_request_user_id, shape=_shape_wrapped
    ),
}

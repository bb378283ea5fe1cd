"""Public API for learnosity_sdk.

Init generates the security and request data, in the format each
Learnosity service expects, needed to initialise that service.
"""

import copy
import logging
from typing import Any, Dict, Mapping, Optional, Union

from learnosity_sdk.codes import Service
from learnosity_sdk.exceptions import ValidationError
from learnosity_sdk.kernel.request_packet import build_request_string, parse_request_packet
from learnosity_sdk.kernel.security import parse_security_packet
from learnosity_sdk.kernel.services import SERVICE_RULES, encode_payload, sign


logger = logging.getLogger(__name__)


def _parse_service(service: Any) -> Service:
    if not service or not isinstance(service, str):
        raise ValidationError("The `service` argument wasn't found or was empty")
    try:
        return Service(service.lower())
    except ValueError:
        raise ValidationError(f"The service provided ({service}) is not valid")


def _validate_secret(secret: Any) -> None:
    if not secret or not isinstance(secret, str):
        raise ValidationError("The `secret` argument must be a valid string")


def _parse_action(action: Any) -> Optional[str]:
    if action is None or action == "":
        return None
    if not isinstance(action, str):
        raise ValidationError("The action parameter must be a string")
    return action


class Init:
    """Signed initialisation data for one Learnosity service request.

    All validation, adjustment and signing happens in the constructor; a
    failed construction raises ValidationError and leaves nothing behind.
    The secret is kept only to recompute the signature and is never part
    of any generated output.

    Args:
        service: One of assess, author, data, events, items, questions,
            reports (case-insensitive)
        security_packet: consumer_key, domain, timestamp, expires, user_id
            as a mapping or JSON object string
        secret: Consumer secret shared with Learnosity
        request_packet: Optional request parameters (mapping or JSON string)
        action: Optional action, used by the Data API
    """

    def __init__(
        self,
        service: Union[str, Service],
        security_packet: Union[Mapping[str, Any], str],
        secret: str,
        request_packet: Union[Mapping[str, Any], str, None] = None,
        action: Optional[str] = None,
    ):
        self._service = _parse_service(service)
        security = parse_security_packet(security_packet, self._service)
        _validate_secret(secret)
        request = parse_request_packet(request_packet)
        self._action = _parse_action(action)
        self._secret = secret

        self._rules = SERVICE_RULES[self._service]
        self._request_string = build_request_string(request)

        security, request = self._rules.adjust(security, request, secret)
        self._security = security
        self._request = request

        signature = self.generate_signature()
        self._security = security.replace(signature=signature)

        logger.debug(
            "Initialised %s request (request signed: %s)",
            self._service.value,
            self._rules.sign_request,
        )

    def __repr__(self) -> str:
        return (
            f"Init(service={self._service.value!r}, "
            f"consumer_key={self._security.consumer_key!r}, "
            f"signature={self._security.signature!r})"
        )

    @property
    def service(self) -> Service:
        return self._service

    @property
    def security_packet(self) -> Dict[str, Any]:
        """Signed security packet (a fresh dict on each access)."""
        return self._security.to_dict()

    @property
    def request_packet(self) -> Optional[Dict[str, Any]]:
        """Adjusted request packet (a fresh copy on each access)."""
        return copy.deepcopy(self._request)

    @property
    def request_string(self) -> Optional[str]:
        """Canonical JSON of the request packet as the caller supplied it."""
        return self._request_string

    @property
    def action(self) -> Optional[str]:
        return self._action

    @property
    def signature(self) -> str:
        return self._security.signature

    @property
    def sign_request_data(self) -> bool:
        return self._rules.sign_request

    def generate_signature(self) -> str:
        """
        Compute the request signature.

        The pre-hash values are, in order:
        - the security packet values in SECURITY_KEYS order
        - the secret
        - the request string, if this service signs request data
        - the action, if one was given

        Returns:
            SHA256 hex digest
        """
        values = self._security.signing_values()
        values.append(self._secret)
        if self._rules.sign_request and self._request_string:
            values.append(self._request_string)
        if self._action:
            values.append(self._action)
        return sign(values)

    def generate(self, encode: bool = True) -> Any:
        """
        Generate the data to pass to a Learnosity API.

        Args:
            encode: Return a JSON string rather than the structure. The data
                service always returns a dict of JSON strings.

        Returns:
            JSON string, or the output structure

        Raises:
            ValidationError: If the output cannot be encoded
        """
        output = self._rules.shape(self._security, copy.deepcopy(self._request), self._action)
        if not encode or self._rules.pre_encoded:
            return output
        return encode_payload(output)

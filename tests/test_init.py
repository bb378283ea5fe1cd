"""Tests for Init construction: validation and signatures."""

import re

import pytest

from learnosity_sdk import Init, Service, ValidationError


CONSUMER_KEY = "yis0TYCu7U9V4o7M"
TIMESTAMP = "20140626-0528"
SECRET = "74c5fd430cf1242a527f6223aebd42d30464be22"


class TestServiceValidation:
    """Tests for the service argument."""

    @pytest.mark.parametrize("service", [None, "", 0])
    def test_missing_service(self, service, security):
        with pytest.raises(ValidationError, match="wasn't found or was empty"):
            Init(service, security, SECRET)

    def test_unknown_service(self, security):
        with pytest.raises(ValidationError, match=r"The service provided \(grading\) is not valid"):
            Init("grading", security, SECRET)

    def test_case_insensitive(self, security):
        assert Init("ITEMS", security, SECRET).service is Service.ITEMS

    def test_enum_accepted(self, security):
        assert Init(Service.AUTHOR, security, SECRET).service is Service.AUTHOR

    def test_non_string_service(self, security):
        with pytest.raises(ValidationError):
            Init(["items"], security, SECRET)


class TestArgumentValidation:
    """Tests for the remaining constructor arguments."""

    def test_security_json_string(self):
        init = Init("items", '{"consumer_key": "k", "timestamp": "t"}', SECRET)
        assert init.security_packet["consumer_key"] == "k"

    def test_bad_security_key(self, security):
        with pytest.raises(ValidationError, match="Invalid key found in the security packet: foo"):
            Init("items", {**security, "foo": "bar"}, SECRET)

    def test_questions_needs_user_id(self, security):
        with pytest.raises(ValidationError, match="user id"):
            Init("questions", security, SECRET)

    @pytest.mark.parametrize("secret", [None, "", 123, b"bytes"])
    def test_invalid_secret(self, secret, security):
        with pytest.raises(ValidationError, match="`secret` argument must be a valid string"):
            Init("items", security, secret)

    def test_request_json_string(self, security):
        init = Init("items", security, SECRET, '{"limit": 50}')
        assert init.request_packet == {"limit": 50}
        assert init.request_string == '{"limit":50}'

    def test_malformed_request_json(self, security):
        with pytest.raises(ValidationError, match="request packet is not valid JSON"):
            Init("items", security, SECRET, '{"limit": ')

    def test_request_not_mapping(self, security):
        with pytest.raises(ValidationError, match="request packet must be a mapping"):
            Init("items", security, SECRET, ["a"])

    def test_request_encode_failure(self, security):
        with pytest.raises(ValidationError) as exc_info:
            Init("items", security, SECRET, {"score": float("nan")})
        assert str(exc_info.value) == (
            "Invalid data, please check your request packet - Unknown error"
        )

    def test_action_must_be_string(self, security):
        with pytest.raises(ValidationError, match="action parameter must be a string"):
            Init("data", security, SECRET, {"limit": 1}, 5)

    def test_empty_action_is_absent(self, security):
        assert Init("data", security, SECRET, {"limit": 1}, "").action is None

    def test_validation_error_is_value_error(self, security):
        with pytest.raises(ValueError):
            Init("nope", security, SECRET)

    def test_timestamp_defaulted(self):
        init = Init("items", {"consumer_key": "k"}, SECRET)
        assert re.fullmatch(r"\d{8}-\d{4}", init.security_packet["timestamp"])

    def test_caller_packets_not_mutated(self, security):
        request = {"limit": 50}
        Init("items", security, SECRET, request)
        assert "signature" not in security
        assert request == {"limit": 50}


class TestKnownSignatures:
    """Signatures match digests computed independently from the pre-hash strings."""

    def test_items(self, security):
        init = Init("items", security, SECRET, {"limit": 50})
        assert init.signature == "d61a62083712f8136e92b40a2c5ea340c77c81a30482da6c19b9c27e72d1f5eb"

    def test_items_user_id_copied(self, security):
        init = Init("items", security, SECRET, {"user_id": "u1", "limit": 50})
        assert init.security_packet["user_id"] == "u1"
        assert init.signature == "bc75ef31d879d3d05db26673588c851418c2ed723d8f5f708df1bfa901221bb6"

    def test_questions_request_not_signed(self, security_with_user):
        init = Init("questions", security_with_user, SECRET, {"type": "local_practice"})
        assert init.sign_request_data is False
        assert init.signature == "e90d4fc8c65cabee125bb94de27fb10f2d96a5be1119c61c97b5b8b972310886"

    def test_events_request_not_signed(self, security):
        init = Init("events", security, SECRET, {"users": ["u1", "u2"]})
        assert init.signature == "20739eed410d54a135e8cb3745628834886ab315bfc01693ce9acc0d14dc98bf"

    def test_data_with_action(self, security):
        init = Init("data", security, SECRET, {"limit": 100}, "get")
        assert init.signature == "e1eae0b86148df69173cb3b824275ea73c9c93967f7d17d6957fcdd299c8a4fe"

    def test_author_unescaped_request_string(self, security):
        init = Init("author", security, SECRET, {"url": "http://a/b", "name": "café"})
        assert init.request_string == '{"url":"http://a/b","name":"café"}'
        assert init.signature == "462cbfa6147ba58f0c7e1fdc75a30e8b37be62dd59f08aed7313bb27a2d6d7ab"

    def test_assess_outer_signature(self):
        security = {"consumer_key": CONSUMER_KEY, "timestamp": TIMESTAMP, "user_id": "u1"}
        init = Init("assess", security, SECRET, {"questionsApiActivity": {"type": "x"}})
        assert init.signature == "433b132c50322c25391baca634b65c05700a99b22a041505b335101b056fc36d"

    def test_null_security_value_is_absent(self):
        """A key present with a null value takes no slot in the signature."""
        security = {"consumer_key": "k", "domain": None, "timestamp": "20240101-0000"}
        init = Init("items", security, SECRET)
        assert init.signature == "af843399660653dd18d41c94324cf7bfd1a2bda882f3f3cdb848c13038bbda29"
        assert "domain" not in init.security_packet

    def test_null_user_id_rejected_for_questions(self, security):
        with pytest.raises(ValidationError, match="user id"):
            Init("questions", {**security, "user_id": None}, SECRET)

    def test_generate_signature_recomputes(self, security):
        init = Init("items", security, SECRET, {"limit": 50})
        assert init.generate_signature() == init.signature


class TestSignatureProperties:
    """Determinism, sensitivity and key-order independence."""

    def test_deterministic(self, security):
        first = Init("items", security, SECRET, {"limit": 1}, "x")
        second = Init("items", dict(security), SECRET, {"limit": 1}, "x")
        assert first.signature == second.signature

    def test_security_key_order_independent(self, security):
        reordered = dict(reversed(list({**security, "user_id": "u", "expires": "e"}.items())))
        first = Init("items", {**security, "user_id": "u", "expires": "e"}, SECRET)
        second = Init("items", reordered, SECRET)
        assert list(reordered)[0] == "expires"
        assert first.signature == second.signature

    @pytest.mark.parametrize("change", [
        {"secret": "other"},
        {"security": {"consumer_key": "other"}},
        {"security": {"domain": "other"}},
        {"security": {"timestamp": "20140626-0529"}},
        {"security": {"expires": "20140626-0600"}},
        {"security": {"user_id": "u2"}},
        {"request": {"limit": 51}},
        {"action": "update"},
    ])
    def test_any_input_change_changes_signature(self, change, security):
        base = dict(service="data", security_packet=security, secret=SECRET,
                    request_packet={"limit": 50}, action="get")
        changed = dict(base)
        if "secret" in change:
            changed["secret"] = change["secret"]
        if "security" in change:
            changed["security_packet"] = {**security, **change["security"]}
        if "request" in change:
            changed["request_packet"] = change["request"]
        if "action" in change:
            changed["action"] = change["action"]
        assert Init(**base).signature != Init(**changed).signature

    def test_request_ignored_for_unsigned_services(self, security_with_user):
        first = Init("questions", security_with_user, SECRET, {"a": 1})
        second = Init("questions", security_with_user, SECRET, {"a": 2})
        assert first.signature == second.signature


class TestInitState:
    """Read-only state exposed by Init."""

    def test_repr_hides_secret(self, security):
        init = Init("items", security, SECRET)
        assert SECRET not in repr(init)
        assert "items" in repr(init)

    def test_security_packet_is_a_copy(self, security):
        init = Init("items", security, SECRET)
        packet = init.security_packet
        packet["consumer_key"] = "tampered"
        assert init.security_packet["consumer_key"] == security["consumer_key"]

    def test_request_packet_is_a_copy(self, security):
        init = Init("items", security, SECRET, {"nested": {"a": 1}})
        init.request_packet["nested"]["a"] = 2
        assert init.request_packet == {"nested": {"a": 1}}

    def test_no_request(self, security):
        init = Init("author", security, SECRET)
        assert init.request_packet is None
        assert init.request_string is None

import base64
import json
import time

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from apigw_kit.errors import BkApiError, KidInvalidError
from apigw_kit.tokens import RsaJwtTokenParser


def _new_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def _pem(private_key):
    return private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()


class _Provider:
    def __init__(self, keys):
        self.keys = keys

    def provide_public_key(self, api_name):
        return self.keys.get(api_name, "")


class _FailingProvider:
    def provide_public_key(self, api_name):
        raise RuntimeError("unavailable")


@pytest.fixture(scope="module")
def private_key():
    return _new_key()


@pytest.fixture
def parser(private_key):
    return RsaJwtTokenParser(_Provider({"testing": _pem(private_key)}))


def _b64(data):
    return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()


def _sign(payload, signing_key, kid=None):
    headers = {"kid": kid} if kid is not None else None
    return jwt.encode(payload, signing_key, algorithm="RS256", headers=headers)


def test_parse_round_trip(parser, private_key):
    payload = {
        "app": {"app_code": "demo", "bk_app_code": "demo", "verified": True},
        "user": {"bk_username": "admin", "source_type": "default", "verified": False},
        "exp": int(time.time()) + 60,
        "iss": "APIGW",
    }
    encoded = _sign(payload, private_key, "testing")

    claims = parser.parse(encoded)

    assert claims.api_name == "testing"
    assert claims.app.app_code == "demo"
    assert claims.app.bk_app_code == "demo"
    assert claims.app.verified is True
    assert claims.user.username == "admin"
    assert claims.user.source_type == "default"
    assert claims.user.verified is False
    assert claims.issuer == "APIGW"
    assert claims.expires_at == payload["exp"]


def test_parse_without_app_and_user(parser, private_key):
    encoded = _sign({"sub": "s"}, private_key, "testing")
    claims = parser.parse(encoded)
    assert claims.app is None
    assert claims.user is None
    assert claims.subject == "s"


def test_missing_kid(parser, private_key):
    encoded = _sign({}, private_key)
    with pytest.raises(KidInvalidError):
        parser.parse(encoded)


def test_non_string_kid(parser):
    encoded = ".".join([_b64({"alg": "RS256", "kid": 1}), _b64({}), "c2ln"])
    with pytest.raises(KidInvalidError):
        parser.parse(encoded)


def test_wrong_signing_key(parser):
    encoded = _sign({}, _new_key(), "testing")
    with pytest.raises(BkApiError) as info:
        parser.parse(encoded)
    assert isinstance(info.value.__cause__, jwt.InvalidSignatureError)


def test_expired_token(parser, private_key):
    encoded = _sign({"exp": int(time.time()) - 3600}, private_key, "testing")
    with pytest.raises(BkApiError) as info:
        parser.parse(encoded)
    assert isinstance(info.value.__cause__, jwt.ExpiredSignatureError)


def test_unknown_gateway_has_no_key(parser, private_key):
    encoded = _sign({}, private_key, "other")
    with pytest.raises(BkApiError) as info:
        parser.parse(encoded)
    assert "other" in str(info.value)


def test_provider_failure(private_key):
    failing_parser = RsaJwtTokenParser(_FailingProvider())
    encoded = _sign({}, private_key, "testing")
    with pytest.raises(BkApiError) as info:
        failing_parser.parse(encoded)
    assert isinstance(info.value.__cause__, RuntimeError)


def test_malformed_token(parser):
    with pytest.raises(BkApiError):
        parser.parse("not-a-token")
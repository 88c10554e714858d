"""Parsing of the JWT tokens the gateway attaches to forwarded requests."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any

import jwt
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from apigw_kit.errors import BkApiError, KidInvalidError

_RSA_ALGORITHMS = ["RS256", "RS384", "RS512", "PS256", "PS384", "PS512"]


@dataclass
class ApigatewayJwtApp:
    """The application that made the request."""

    app_code: str = ""
    bk_app_code: str = ""
    verified: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApigatewayJwtApp:
        return cls(
            app_code=data.get("app_code", ""),
            bk_app_code=data.get("bk_app_code", ""),
            verified=bool(data.get("verified", False)),
        )


@dataclass
class ApigatewayJwtUser:
    """The user on whose behalf the request was made."""

    username: str = ""
    source_type: str = ""
    verified: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApigatewayJwtUser:
        return cls(
            username=data.get("bk_username", ""),
            source_type=data.get("source_type", ""),
            verified=bool(data.get("verified", False)),
        )


@dataclass
class ApigatewayJwtClaims:
    """The verified token payload together with the gateway name from ``kid``."""

    api_name: str = ""
    app: ApigatewayJwtApp | None = None
    user: ApigatewayJwtUser | None = None
    audience: Any = None
    expires_at: int | None = None
    id: str = ""
    issued_at: int | None = None
    issuer: str = ""
    not_before: int | None = None
    subject: str = ""

    @classmethod
    def from_payload(cls, payload: dict[str, Any], api_name: str = "") -> ApigatewayJwtClaims:
        app = payload.get("app")
        user = payload.get("user")
        return cls(
            api_name=api_name,
            app=ApigatewayJwtApp.from_dict(app) if isinstance(app, dict) else None,
            user=ApigatewayJwtUser.from_dict(user) if isinstance(user, dict) else None,
            audience=payload.get("aud"),
            expires_at=payload.get("exp"),
            id=payload.get("jti", ""),
            issued_at=payload.get("iat"),
            issuer=payload.get("iss", ""),
            not_before=payload.get("nbf"),
            subject=payload.get("sub", ""),
        )


def _unverified_header(token: str) -> dict[str, Any]:
    parts = token.split(".")
    if len(parts) != 3:
        raise BkApiError("failed to parse jwt token: token contains an invalid number of segments")
    segment = parts[0]
    try:
        raw = base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))
        header = json.loads(raw)
    except (binascii.Error, ValueError) as exc:
        raise BkApiError("failed to parse jwt token") from exc
    if not isinstance(header, dict):
        raise BkApiError("failed to parse jwt token: header is not an object")
    return header


def _load_rsa_public_key(pem: str, api_name: str) -> rsa.RSAPublicKey:
    data = pem.encode() if isinstance(pem, str) else pem
    try:
        key = serialization.load_pem_public_key(data)
    except Exception:
        try:
            key = x509.load_pem_x509_certificate(data).public_key()
        except Exception as exc:
            raise BkApiError(f"failed to parse rsa public key for {api_name}") from exc
    if not isinstance(key, rsa.RSAPublicKey):
        raise BkApiError(f"failed to parse rsa public key for {api_name}: not an RSA key")
    return key


class RsaJwtTokenParser:
    """Verifies gateway tokens with the RSA public key of the gateway named by ``kid``.

    ``provider`` has a ``provide_public_key(api_name)`` method returning a PEM string.
    """

    def __init__(self, provider: Any) -> None:
        self.provider = provider

    def parse(self, token: str) -> ApigatewayJwtClaims:
        """Verify ``token`` and return its claims; raise :class:`BkApiError` otherwise."""
        header = _unverified_header(token)
        if "kid" not in header:
            raise KidInvalidError("failed to parse jwt token: kid is not found in jwt header")

        api_name = header["kid"]
        if not isinstance(api_name, str):
            raise KidInvalidError(
                f"failed to parse jwt token: expected kid to be str but got {type(api_name).__name__}"
            )

        try:
            public_key = self.provider.provide_public_key(api_name)
        except Exception as exc:
            raise BkApiError(f"failed to get public key for {api_name}") from exc

        key = _load_rsa_public_key(public_key, api_name)

        try:
            payload = jwt.decode(
                token,
                key,
                algorithms=_RSA_ALGORITHMS,
                options={"verify_aud": False},
            )
        except jwt.PyJWTError as exc:
            raise BkApiError("failed to parse jwt token") from exc

        return ApigatewayJwtClaims.from_payload(payload, api_name=api_name)
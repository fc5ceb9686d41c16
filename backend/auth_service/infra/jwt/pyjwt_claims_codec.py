# auth_service/infra/jwt/pyjwt_claims_codec.py
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, cast
from uuid import uuid4

import jwt

from auth_service.services._shared.errors import (
    ExpiredTokenError,
    InvalidTokenError,
    MalformedTokenError,
    SignatureMismatchError,
)
from auth_service.services._shared.ports import Claims, ClaimsCodec

REQUIRED_CLAIMS = ("sub", "iat", "exp", "jti")


def _new_token_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class JWTClaimsCodec(ClaimsCodec):
    """
    HMAC-signed JWT codec built on PyJWT.

    :param secret: Process-wide signing secret.
    :param algorithm: HMAC algorithm (``HS256`` by default).
    :param leeway: Clock-skew tolerance applied to expiry comparisons.
    :param clock: Source of "now" used for ``iat``/``exp`` at signing time.
    :param token_id_factory: Generator for the ``jti`` claim.
    """

    secret: str
    algorithm: str = "HS256"
    leeway: timedelta = timedelta(0)
    clock: Callable[[], datetime] = field(default=_utcnow)
    token_id_factory: Callable[[], str] = field(default=_new_token_id)

    def sign(self, subject: str, ttl: timedelta) -> str:
        ttl_seconds = int(ttl.total_seconds())
        if ttl_seconds < 1:
            raise ValueError(f"Token TTL must be at least one second, got {ttl!r}")

        # NumericDate is whole seconds; exp - iat equals the TTL exactly.
        iat = int(self.clock().timestamp())
        payload: dict[str, Any] = {
            "sub": subject,
            "iat": iat,
            "exp": iat + ttl_seconds,
            "jti": self.token_id_factory(),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str, *, allow_expired: bool = False) -> Claims:
        payload = self._decode(token, verify_exp=not allow_expired)
        try:
            return Claims.from_epoch(
                subject=str(payload["sub"]),
                iat=int(payload["iat"]),
                exp=int(payload["exp"]),
                jti=str(payload["jti"]),
            )
        except (TypeError, ValueError) as exc:
            raise MalformedTokenError("Token claims have unexpected types") from exc

    def peek_expiration(self, token: str) -> int:
        return self.verify(token, allow_expired=True).expires_at_ms

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _decode(self, token: str, *, verify_exp: bool) -> dict[str, Any]:
        """
        Decode ``token`` translating PyJWT failures into service errors.

        PyJWT checks the segments first, then the signature, and only then the
        registered claims, so an embedded ``exp`` is never trusted before the
        signature has been verified.
        """
        if not isinstance(token, str) or not token:
            raise MalformedTokenError("Token must be a non-empty string")
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                leeway=self.leeway,
                options={"require": list(REQUIRED_CLAIMS), "verify_exp": verify_exp},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError() from exc
        except jwt.InvalidSignatureError as exc:
            raise SignatureMismatchError() from exc
        except jwt.ImmatureSignatureError as exc:
            raise InvalidTokenError("Token issued in the future") from exc
        except jwt.InvalidTokenError as exc:
            # DecodeError, MissingRequiredClaimError, InvalidSubjectError, ...
            raise MalformedTokenError() from exc
        return cast(dict[str, Any], payload)

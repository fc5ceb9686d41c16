"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any, TypeVar

from flask import Flask, Response, current_app, g, jsonify, request

from auth_service.core.config import token_settings
from auth_service.core.errors import Unauthorized
from auth_service.core.extensions import get_redis
from auth_service.infra.jwt.pyjwt_claims_codec import JWTClaimsCodec
from auth_service.infra.redis.redis_session_store import RedisSessionStore
from auth_service.infra.sqlalchemy.sqlalchemy_credential_verifier import (
    SQLAlchemyCredentialVerifier,
)
from auth_service.services._shared.base import ServiceContext
from auth_service.services.auth.issuer import TokenIssuer
from auth_service.services.auth.service import AuthOrchestrator

F = TypeVar("F", bound=Callable[..., Any])

AUTHORIZATION_HEADER = "Authorization"
REFRESH_TOKEN_HEADER = "RefreshToken"
BEARER_PREFIX = "Bearer "

_ISSUER_KEY = "token_issuer"


def token_issuer(app: Flask) -> TokenIssuer:
    """Build (once per app) the codec + issuer from the frozen configuration."""

    issuer = app.extensions.get(_ISSUER_KEY)
    if issuer is None:
        cfg = token_settings(app.config)
        codec = JWTClaimsCodec(
            secret=app.config["JWT_SECRET_KEY"],
            algorithm=app.config.get("JWT_ALGORITHM", "HS256"),
            leeway=timedelta(seconds=int(app.config.get("CLOCK_SKEW_LEEWAY_SECONDS", 0))),
        )
        issuer = TokenIssuer(codec=codec, cfg=cfg)
        app.extensions[_ISSUER_KEY] = issuer
    return issuer


def get_auth_orchestrator() -> AuthOrchestrator:
    """Compose a request-scoped :class:`AuthOrchestrator`.

    The codec and issuer are shared per application; the store and the
    credential verifier wrap the app's Redis client and scoped DB session.
    """

    app = current_app._get_current_object()  # type: ignore[attr-defined]
    issuer = token_issuer(app)
    return AuthOrchestrator(
        codec=issuer.codec,
        issuer=issuer,
        store=RedisSessionStore(r=get_redis(app)),
        credentials=SQLAlchemyCredentialVerifier(),
        ctx=ServiceContext(
            request_id=getattr(g, "request_id", None),
            client_ip=request.remote_addr,
        ),
    )


def require_header(name: str, *, strip_bearer: bool = False) -> str:
    """Return a mandatory token header, raising 401 ``invalid_token`` when absent.

    The core receives tokens verbatim; only the ``Authorization`` carrier may
    hold a ``Bearer`` prefix, which is removed here at the protocol boundary.
    """

    value = (request.headers.get(name) or "").strip()
    if strip_bearer and value.startswith(BEARER_PREFIX):
        value = value[len(BEARER_PREFIX) :].strip()
    if not value:
        raise Unauthorized(f"Missing {name} header", code="invalid_token")
    return value


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]

"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, request

from auth_service.api.deps import (
    AUTHORIZATION_HEADER,
    REFRESH_TOKEN_HEADER,
    get_auth_orchestrator,
    json_response,
    require_header,
    timing,
)
from auth_service.schemas import SignInSchema, TokenPairSchema
from auth_service.services.auth.dto import RefreshIn, SignInIn, SignOutIn

bp = Blueprint("auth", __name__)

sign_in_schema = SignInSchema()
token_schema = TokenPairSchema()


@bp.post("/sign-in")
@timing
def sign_in():
    """Authenticate credentials and issue an access/refresh pair."""

    data = sign_in_schema.load(request.get_json(silent=True) or {})
    pair = get_auth_orchestrator().sign_in(SignInIn(email=data["email"], password=data["password"]))
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate the refresh token carried by the ``RefreshToken`` header."""

    refresh_token = require_header(REFRESH_TOKEN_HEADER)
    pair = get_auth_orchestrator().refresh(RefreshIn(refresh_token=refresh_token))
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/sign-out")
@timing
def sign_out():
    """Revoke the refresh token and end the caller's session."""

    access_token = require_header(AUTHORIZATION_HEADER, strip_bearer=True)
    refresh_token = require_header(REFRESH_TOKEN_HEADER)
    get_auth_orchestrator().sign_out(
        SignOutIn(access_token=access_token, refresh_token=refresh_token)
    )
    return "", 204

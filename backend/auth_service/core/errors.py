"""Centralized JSON (RFC 7807) error handling for the API."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from auth_service.core.logger import ensure_request_id
from auth_service.services._shared.errors import (
    AuthenticationError,
    InvalidTokenError,
    ServiceError,
    StoreUnavailableError,
)

log = logging.getLogger(__name__)

# Stable codes for framework-raised HTTP errors
HTTP_ERROR_CODES = {
    400: "bad_request",
    404: "not_found",
    405: "method_not_allowed",
    415: "unsupported_media_type",
}


def problem_response(
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> tuple[Response, int]:
    """
    Render an ``application/problem+json`` response.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Human-readable summary, safe for clients.
    :param details: Optional structured details.
    :returns: ``(response, status)`` tuple for Flask handlers.
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": message,
        "instance": request.path,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        problem["details"] = details
    resp = jsonify(problem)
    resp.mimetype = "application/problem+json"
    return resp, status


class APIError(Exception):
    """
    JSON-serializable API error.

    :param message: Description presented to clients.
    :param status_code: HTTP status code (``400`` by default).
    :param code: Machine-readable identifier, snake_case.
    """

    def __init__(
        self,
        message: str,
        status_code: int = HTTPStatus.BAD_REQUEST,
        code: str = "bad_request",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code


class Unauthorized(APIError):
    """401: bad credentials or an untrusted token."""

    def __init__(self, message: str = "Unauthorized", code: str = "unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code=code)


class ServiceUnavailable(APIError):
    """503: the session store cannot be reached."""

    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(
            message, status_code=HTTPStatus.SERVICE_UNAVAILABLE, code="service_unavailable"
        )


def translate_service_error(exc: ServiceError) -> APIError:
    """
    Map service-level errors to API errors.

    Every token failure collapses into ``invalid_token``: the client must
    sign in again whatever the precise reason was.
    """
    if isinstance(exc, AuthenticationError):
        return Unauthorized(str(exc), code="invalid_credentials")
    if isinstance(exc, InvalidTokenError):
        return Unauthorized(str(exc), code="invalid_token")
    if isinstance(exc, StoreUnavailableError):
        # driver messages may carry backend addresses
        return ServiceUnavailable()
    return APIError(str(exc))


def init_app(app: Flask) -> None:
    """
    Attach problem+json error handlers to ``app``.

    5xx are logged as errors with traceback, 4xx as warnings.
    """

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        level = log.error if err.status_code >= 500 else log.warning
        level("api_error code=%s status=%s msg=%s", err.code, err.status_code, err.message)
        return problem_response(err.status_code, err.code, err.message)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        if isinstance(err, StoreUnavailableError):
            log.error("store_unavailable operation=%s", err.operation, exc_info=err)
        return handle_api_error(translate_service_error(err))

    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        log.warning("validation_error fields=%s", sorted(err.messages))
        return problem_response(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "validation_error",
            "Validation failed",
            details={"errors": err.messages},
        )

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        else:
            message = (err.description or HTTPStatus(status).phrase).strip()
        log.warning("http_error status=%s detail=%s", status, message)
        return problem_response(status, HTTP_ERROR_CODES.get(status, "error"), message)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        log.error("unhandled_exception", exc_info=err)
        return problem_response(
            HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error"
        )

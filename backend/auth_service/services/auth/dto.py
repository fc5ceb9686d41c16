# auth_service/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class SignInIn:
    """
    Input DTO for sign-in.

    :param email: Login email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Raw refresh token, as carried by ``RefreshToken``.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class SignOutIn:
    """
    Input DTO for sign-out.

    :param access_token: Raw access token, as carried by ``Authorization``.
    :type access_token: str
    :param refresh_token: Raw refresh token to revoke.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPair:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Short-lived bearer token.
    :type access_token: str
    :param refresh_token: Long-lived token used only to obtain a new pair.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    :param sign_out_allow_expired_access: Accept an expired (but correctly
        signed) access token to identify the caller on sign-out.
    :type sign_out_allow_expired_access: bool
    :raises ValueError: If a lifetime is not positive or access >= refresh.
    """

    access_expires: timedelta = timedelta(minutes=15)
    refresh_expires: timedelta = timedelta(days=7)
    sign_out_allow_expired_access: bool = False

    def __post_init__(self) -> None:
        if self.access_expires <= timedelta(0) or self.refresh_expires <= timedelta(0):
            raise ValueError("Token lifetimes must be positive.")
        if self.access_expires >= self.refresh_expires:
            raise ValueError(
                "Access token lifetime must be shorter than refresh token lifetime "
                f"({self.access_expires} >= {self.refresh_expires})."
            )

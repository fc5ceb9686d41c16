# auth_service/services/auth/service.py
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from auth_service.core.logger import token_fingerprint
from auth_service.services._shared.base import BaseService, ServiceContext
from auth_service.services._shared.errors import AuthenticationError, InvalidTokenError
from auth_service.services._shared.ports import (
    ClaimsCodec,
    CredentialVerifier,
    SessionStore,
    SwapResult,
)
from auth_service.services.auth.dto import (
    AuthTokenConfig,
    RefreshIn,
    SignInIn,
    SignOutIn,
    TokenPair,
)
from auth_service.services.auth.issuer import TokenIssuer
from auth_service.uow import SessionRecordUnitOfWork

log = logging.getLogger(__name__)

BLACKLIST_PREFIX = "Blacklist_"


def session_key(principal_id: str) -> str:
    """Store key of the principal's live refresh token."""
    return principal_id


def blacklist_key(principal_id: str) -> str:
    """Store key of the principal's revoked refresh token."""
    return f"{BLACKLIST_PREFIX}{principal_id}"


class AuthOrchestrator(BaseService):
    """
    Token lifecycle service (sign-in / refresh / sign-out).

    A refresh token moves through these states::

        Issued -> Active -> Rotated   (superseded by refresh)
                         -> Revoked   (sign-out, kept in the blacklist)
                         -> Expired   (store TTL elapsed)

    Exactly one refresh token per principal is Active: the value of the
    session record. Rotation is a conditional overwrite keyed on the presented
    token, so a replayed or concurrently used token can never rotate twice.
    """

    def __init__(
        self,
        *,
        codec: ClaimsCodec,
        issuer: TokenIssuer,
        store: SessionStore,
        credentials: CredentialVerifier,
        ctx: ServiceContext | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize the orchestrator with its collaborators.

        :param codec: Signs and verifies tokens.
        :param issuer: Mints access/refresh pairs (owns the TTL configuration).
        :param store: TTL key-value store for session and blacklist records.
        :param credentials: Account store used to check passwords and accounts.
        :param ctx: Request-scoped context used for log correlation.
        :param clock: Source of "now"; defaults to the system UTC clock.
        """
        super().__init__(ctx=ctx, clock=clock)
        self.codec = codec
        self.issuer = issuer
        self.store = store
        self.credentials = credentials

    @property
    def cfg(self) -> AuthTokenConfig:
        return self.issuer.cfg

    # ------------------------------------------------------------------ #
    # Sign-in
    # ------------------------------------------------------------------ #

    def sign_in(self, dto: SignInIn) -> TokenPair:
        """
        Authenticate credentials, issue a pair and make its refresh token Active.

        Any previous session record for the principal is overwritten.

        :param dto: Sign-in input.
        :returns: Access/refresh token pair.
        :raises AuthenticationError: If the credentials do not match an active account.
        :raises StoreUnavailableError: If the session record cannot be written.
        """
        principal = self.credentials.verify(dto.email, dto.password)
        if principal is None:
            log.info("auth.sign_in.rejected", extra=self.log_extra(outcome="bad_credentials"))
            raise AuthenticationError()

        pair = self.issuer.issue_pair(principal.email)
        self.store.set(session_key(principal.email), pair.refresh_token, self.issuer.refresh_ttl)

        log.info(
            "auth.sign_in",
            extra=self.log_extra(
                principal=principal.email, token=token_fingerprint(pair.refresh_token)
            ),
        )
        return pair

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPair:
        """
        Rotate the presented refresh token and emit a new pair.

        Security
        --------
        - The token must verify (signature, expiry) before the store is touched.
        - The account must still be active.
        - The session record must hold *exactly* the presented token; the
          overwrite is conditional on it, so a rotated-away token (replay) or
          the loser of a concurrent rotation gets :class:`InvalidTokenError`.

        :raises InvalidTokenError: On any of the conditions above (codec
            subclasses propagate unchanged).
        :raises StoreUnavailableError: If the store cannot be reached.
        """
        claims = self.codec.verify(dto.refresh_token)
        email = claims.subject

        if self.credentials.find_active(email) is None:
            log.info(
                "auth.refresh.rejected",
                extra=self.log_extra(principal=email, outcome="inactive_account"),
            )
            raise InvalidTokenError("Refresh token is no longer valid. Please sign in.")

        new_pair = self.issuer.issue_pair(email)
        outcome = self.store.compare_and_set(
            session_key(email),
            expected=dto.refresh_token,
            value=new_pair.refresh_token,
            ttl=self.issuer.refresh_ttl,
        )

        if outcome is SwapResult.OK:
            log.info(
                "auth.refresh",
                extra=self.log_extra(
                    principal=email,
                    token=token_fingerprint(new_pair.refresh_token),
                    previous=token_fingerprint(dto.refresh_token),
                ),
            )
            return new_pair

        # MISSING: signed out or expired; MISMATCH: rotated away (replay) or lost a race
        log.warning(
            "auth.refresh.rejected",
            extra=self.log_extra(
                principal=email,
                outcome=outcome.name.lower(),
                token=token_fingerprint(dto.refresh_token),
            ),
        )
        raise InvalidTokenError("Invalid refresh token")

    # ------------------------------------------------------------------ #
    # Sign-out
    # ------------------------------------------------------------------ #

    def sign_out(self, dto: SignOutIn) -> None:
        """
        Drop the principal's session record and blacklist the refresh token.

        The blacklist record lives exactly as long as the refresh token would
        have. A refresh token that is already expired is not blacklisted
        (nothing left to revoke). If the blacklist insert fails, the deleted
        session record is restored before the error propagates.

        :raises InvalidTokenError: If either token fails verification (an
            expired access token is tolerated only when configured) or the
            two tokens name different principals.
        :raises StoreUnavailableError: If the store cannot be reached.
        """
        refresh_claims = self.codec.verify(dto.refresh_token, allow_expired=True)
        remaining = timedelta(milliseconds=refresh_claims.expires_at_ms - self.now_ms())

        claims = self.codec.verify(
            dto.access_token, allow_expired=self.cfg.sign_out_allow_expired_access
        )
        email = claims.subject
        if refresh_claims.subject != email:
            log.warning(
                "auth.sign_out.rejected",
                extra=self.log_extra(principal=email, outcome="subject_mismatch"),
            )
            raise InvalidTokenError("Refresh token does not belong to the caller")

        with SessionRecordUnitOfWork(self.store, session_key(email)) as uow:
            had_session = uow.delete_record()

            if remaining <= timedelta(0):
                log.info(
                    "auth.sign_out.blacklist_skipped",
                    extra=self.log_extra(principal=email, outcome="refresh_expired"),
                )
                return

            self.store.set(blacklist_key(email), dto.refresh_token, remaining)

        log.info(
            "auth.sign_out",
            extra=self.log_extra(
                principal=email,
                had_session=had_session,
                blacklist_ttl_ms=int(remaining.total_seconds() * 1000),
                token=token_fingerprint(dto.refresh_token),
            ),
        )

"""Token pair issuance."""

from __future__ import annotations

from datetime import timedelta

from auth_service.services._shared.ports import ClaimsCodec
from auth_service.services.auth.dto import AuthTokenConfig, TokenPair


class TokenIssuer:
    """
    Mint an access/refresh pair for a principal.

    Pure with respect to storage: persisting the refresh token is the
    orchestrator's job. The lifetime ordering is validated once by
    :class:`AuthTokenConfig`, never per call.
    """

    def __init__(self, *, codec: ClaimsCodec, cfg: AuthTokenConfig | None = None) -> None:
        self.codec = codec
        self.cfg = cfg or AuthTokenConfig()

    @property
    def access_ttl(self) -> timedelta:
        return self.cfg.access_expires

    @property
    def refresh_ttl(self) -> timedelta:
        return self.cfg.refresh_expires

    def issue_pair(self, principal_id: str) -> TokenPair:
        """
        Sign both tokens for ``principal_id``.

        :param principal_id: Principal identifier placed in the ``sub`` claim.
        :returns: Fresh token pair.
        :rtype: TokenPair
        """
        return TokenPair(
            access_token=self.codec.sign(principal_id, self.access_ttl),
            refresh_token=self.codec.sign(principal_id, self.refresh_ttl),
        )

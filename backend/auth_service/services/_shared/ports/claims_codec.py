from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


@dataclass(frozen=True)
class Claims:
    """
    Verified facts embedded in a signed token.

    :ivar subject: Principal identifier (login email).
    :ivar issued_at: Issuance instant (UTC, second precision).
    :ivar expires_at: Expiry instant (UTC, second precision).
    :ivar token_id: Random identifier making every token unique.
    """

    subject: str
    issued_at: datetime
    expires_at: datetime
    token_id: str

    @property
    def expires_at_ms(self) -> int:
        """Expiry as epoch milliseconds."""
        return int(self.expires_at.timestamp() * 1000)

    @property
    def lifetime(self) -> timedelta:
        return self.expires_at - self.issued_at

    @classmethod
    def from_epoch(cls, *, subject: str, iat: int, exp: int, jti: str) -> Claims:
        return cls(
            subject=subject,
            issued_at=datetime.fromtimestamp(iat, tz=UTC),
            expires_at=datetime.fromtimestamp(exp, tz=UTC),
            token_id=jti,
        )


class ClaimsCodec(Protocol):
    """Port for signing and verifying compact claim tokens."""

    def sign(self, subject: str, ttl: timedelta) -> str:
        """
        Sign a token for ``subject`` valid for ``ttl`` from now.

        :raises ValueError: If ``ttl`` is shorter than one second.
        """

    def verify(self, token: str, *, allow_expired: bool = False) -> Claims:
        """
        Check structure, then signature, then expiry.

        :raises MalformedTokenError: If the token cannot be parsed.
        :raises SignatureMismatchError: If the signature is wrong.
        :raises ExpiredTokenError: If expiry is at or before now
            (skipped when ``allow_expired`` is set).
        """

    def peek_expiration(self, token: str) -> int:
        """Return the embedded expiry (epoch millis); signature is still checked."""

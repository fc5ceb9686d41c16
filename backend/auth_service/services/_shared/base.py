# auth_service/services/_shared/base.py
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param request_id: Correlation id for logging/tracing.
    :param client_ip: Remote address of the caller, when known.
    """

    request_id: str | None = None
    client_ip: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Own the clock so time-dependent rules can be tested deterministically.
    * Carry the request-scoped :class:`ServiceContext` for log correlation.
    * Keep services thin, orchestration-only, no web/Redis leakage.
    """

    def __init__(
        self,
        *,
        ctx: ServiceContext | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context (tracing).
        :type ctx: ServiceContext | None
        :param clock: Source of timezone-aware UTC "now".
        :type clock: Callable[[], datetime] | None
        """
        self.ctx = ctx or ServiceContext()
        self._clock = clock or (lambda: datetime.now(UTC))

    def now_utc(self) -> datetime:
        """Return the current instant (timezone-aware UTC)."""
        return self._clock()

    def now_ms(self) -> int:
        """Return the current instant as epoch milliseconds."""
        return int(self.now_utc().timestamp() * 1000)

    def log_extra(self, **fields: object) -> dict[str, object]:
        """Build a logging ``extra`` mapping carrying the request context."""
        return {"request_id": self.ctx.request_id, "client_ip": self.ctx.client_ip, **fields}

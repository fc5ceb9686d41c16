# comments in English; reST docstrings
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError, WatchError  # type: ignore[import-untyped]

from auth_service.services._shared.errors import StoreUnavailableError
from auth_service.services._shared.ports import SessionStore, SwapResult
from auth_service.services._shared.ports.session_store import ensure_positive_ttl


def _ms(ttl: timedelta) -> int:
    return max(1, int(ttl.total_seconds() * 1000))


def _s(value: Any) -> str | None:
    if value is None:
        return None
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


@dataclass(slots=True)
class RedisSessionStore(SessionStore):
    """
    Redis-backed session store.

    Keys are used verbatim (the orchestrator owns key naming). TTLs are
    applied with millisecond precision (``SET ... PX``).

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    @contextmanager
    def _guard(operation: str) -> Iterator[None]:
        """Translate transport failures into :class:`StoreUnavailableError`."""
        try:
            yield
        except WatchError:
            raise
        except RedisError as exc:
            raise StoreUnavailableError(operation, str(exc) or None) from exc

    def _read_watched(self, pipe: Any, key: str) -> str | None:
        # immediate-mode GET on a pipeline that is WATCHing ``key``
        return _s(pipe.get(key))

    # -------------------- API ------------------------

    def exists(self, key: str) -> bool:
        with self._guard("exists"):
            return cast(int, self.r.exists(key)) == 1

    def get(self, key: str) -> str | None:
        with self._guard("get"):
            return _s(self.r.get(key))

    def set(self, key: str, value: str, ttl: timedelta) -> None:
        ensure_positive_ttl(ttl)
        with self._guard("set"):
            self.r.set(key, value, px=_ms(ttl))

    def set_if_absent(self, key: str, value: str, ttl: timedelta) -> bool:
        ensure_positive_ttl(ttl)
        with self._guard("set_if_absent"):
            return bool(self.r.set(key, value, px=_ms(ttl), nx=True))

    def delete(self, key: str) -> None:
        with self._guard("delete"):
            self.r.delete(key)

    def compare_and_set(self, key: str, *, expected: str, value: str, ttl: timedelta) -> SwapResult:
        """
        Replace ``expected`` with ``value`` using WATCH/MULTI/EXEC.

        On a concurrent modification the transaction is aborted and the value
        is re-read, so a competing writer that already rotated the key makes
        this call return ``MISMATCH`` instead of overwriting blindly.
        """
        ensure_positive_ttl(ttl)
        with self._guard("compare_and_set"):
            while True:
                try:
                    with self.r.pipeline() as p:
                        p.watch(key)
                        current = self._read_watched(p, key)
                        if current is None:
                            p.unwatch()
                            return SwapResult.MISSING
                        if current != expected:
                            p.unwatch()
                            return SwapResult.MISMATCH

                        p.multi()
                        p.set(key, value, px=_ms(ttl))
                        p.execute()
                    return SwapResult.OK
                except WatchError:
                    # Concurrent modification detected; re-evaluate
                    continue

    def remaining_ttl(self, key: str) -> timedelta | None:
        with self._guard("remaining_ttl"):
            pttl = cast(int, self.r.pttl(key))
        # -2: missing, -1: no expiry (never written by this store)
        if pttl < 0:
            return None
        return timedelta(milliseconds=pttl)

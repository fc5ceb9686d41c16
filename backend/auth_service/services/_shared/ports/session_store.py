from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum, auto
from typing import Protocol


class SwapResult(Enum):
    """Outcome of a conditional (compare-and-set) overwrite."""

    OK = auto()
    MISSING = auto()
    MISMATCH = auto()


class SessionStore(Protocol):
    """
    TTL key-value store holding session and blacklist records.

    Every method is a (potentially) remote call and may raise
    :class:`~auth_service.services._shared.errors.StoreUnavailableError`.
    Implementations never retry on infrastructure failure.
    """

    def exists(self, key: str) -> bool:
        """Return ``True`` when ``key`` holds a live (non-expired) value."""

    def get(self, key: str) -> str | None:
        """Return the value stored under ``key`` or ``None`` when absent."""

    def set(self, key: str, value: str, ttl: timedelta) -> None:
        """
        Store ``value`` under ``key``, replacing any previous value.

        :raises ValueError: If ``ttl`` is not strictly positive.
        """

    def set_if_absent(self, key: str, value: str, ttl: timedelta) -> bool:
        """
        Store ``value`` under ``key`` only when no live value exists.

        :returns: ``True`` if the value was written, ``False`` if ``key`` was taken.
        :raises ValueError: If ``ttl`` is not strictly positive.
        """

    def delete(self, key: str) -> None:
        """Remove ``key``. Deleting a missing key is not an error."""

    def compare_and_set(self, key: str, *, expected: str, value: str, ttl: timedelta) -> SwapResult:
        """
        Atomically replace ``expected`` with ``value`` under ``key``.

        :returns: ``SwapResult.OK`` when the swap happened, ``MISSING`` when no
            value exists, ``MISMATCH`` when the stored value differs.
        """

    def remaining_ttl(self, key: str) -> timedelta | None:
        """Return the remaining lifetime of ``key`` (``None`` when absent)."""


def ensure_positive_ttl(ttl: timedelta) -> None:
    """Reject zero or negative TTLs before they reach a backend."""
    if ttl <= timedelta(0):
        raise ValueError(f"TTL must be positive, got {ttl!r}")


@dataclass(frozen=True)
class _Entry:
    value: str
    expires_at: datetime


class InMemorySessionStore(SessionStore):
    """
    Process-local session store with TTL semantics.

    .. note::
       Uses a threading lock to provide the same atomicity guarantees as the
       Redis adapter; intended for unit tests and single-process development.
    """

    def __init__(self, *, clock: Callable[[], datetime] | None = None) -> None:
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()
        self._clock = clock or (lambda: datetime.now(UTC))

    # ------------------------- helpers -------------------------

    def _live(self, key: str) -> _Entry | None:
        # caller must hold the lock
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        return entry

    # -------------------------- API ----------------------------

    def exists(self, key: str) -> bool:
        with self._lock:
            return self._live(key) is not None

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._live(key)
            return entry.value if entry else None

    def set(self, key: str, value: str, ttl: timedelta) -> None:
        ensure_positive_ttl(ttl)
        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl)

    def set_if_absent(self, key: str, value: str, ttl: timedelta) -> bool:
        ensure_positive_ttl(ttl)
        with self._lock:
            if self._live(key) is not None:
                return False
            self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl)
            return True

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def compare_and_set(self, key: str, *, expected: str, value: str, ttl: timedelta) -> SwapResult:
        ensure_positive_ttl(ttl)
        with self._lock:
            entry = self._live(key)
            if entry is None:
                return SwapResult.MISSING
            if entry.value != expected:
                return SwapResult.MISMATCH
            self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl)
            return SwapResult.OK

    def remaining_ttl(self, key: str) -> timedelta | None:
        with self._lock:
            entry = self._live(key)
            if entry is None:
                return None
            return entry.expires_at - self._clock()

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from werkzeug.security import check_password_hash, generate_password_hash


@dataclass(frozen=True)
class Principal:
    """Authenticated identity as seen by the token lifecycle (email only)."""

    email: str


class CredentialVerifier(Protocol):
    """
    Port onto the account/credential store.

    Lookups return ``None`` instead of raising; the orchestrator decides which
    error a missing principal maps to.
    """

    def verify(self, email: str, password: str) -> Principal | None:
        """Return the principal when ``password`` matches an active account."""

    def find_active(self, email: str) -> Principal | None:
        """Return the principal when an active (non-deleted) account exists."""


class InMemoryCredentialVerifier(CredentialVerifier):
    """Dictionary-backed credential store used in unit tests."""

    def __init__(self) -> None:
        self._hashes: dict[str, str] = {}
        self._deleted: set[str] = set()

    @staticmethod
    def _norm(email: str) -> str:
        return email.strip().lower()

    def add(self, email: str, password: str) -> Principal:
        key = self._norm(email)
        self._hashes[key] = generate_password_hash(password)
        self._deleted.discard(key)
        return Principal(email=key)

    def soft_delete(self, email: str) -> None:
        self._deleted.add(self._norm(email))

    def verify(self, email: str, password: str) -> Principal | None:
        principal = self.find_active(email)
        if principal is None:
            return None
        if not check_password_hash(self._hashes[principal.email], password):
            return None
        return principal

    def find_active(self, email: str) -> Principal | None:
        key = self._norm(email)
        if key not in self._hashes or key in self._deleted:
            return None
        return Principal(email=key)

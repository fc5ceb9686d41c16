"""
auth_service.services._shared.ports
===================================

Collection of *ports* (hexagonal interfaces) that define the contracts
for token signing, session storage and credential verification.

These ports decouple the auth orchestrator from concrete implementations
of token encoding, TTL key-value storage and account persistence.

Modules
-------
- :mod:`claims_codec`:
    Defines :class:`~.ClaimsCodec` and :class:`~.Claims`: signing and
    verification of compact claim tokens.

- :mod:`session_store`:
    Defines :class:`~.SessionStore` and :class:`~.SwapResult`: TTL storage for
    session and blacklist records with an atomic conditional overwrite.

- :mod:`credential_verifier`:
    Defines :class:`~.CredentialVerifier` and :class:`~.Principal`: the narrow
    view of the account store needed to sign in and to re-check accounts.

Design Notes
------------
Concrete adapters (Redis, PyJWT, SQLAlchemy) live under ``auth_service.infra``.
In-memory doubles live next to their port so unit tests need no backend.
"""

from __future__ import annotations

from .claims_codec import Claims, ClaimsCodec
from .credential_verifier import CredentialVerifier, InMemoryCredentialVerifier, Principal
from .session_store import InMemorySessionStore, SessionStore, SwapResult

__all__ = [
    "Claims",
    "ClaimsCodec",
    "CredentialVerifier",
    "InMemoryCredentialVerifier",
    "Principal",
    "SessionStore",
    "InMemorySessionStore",
    "SwapResult",
]

# auth_service/infra/sqlalchemy/sqlalchemy_credential_verifier.py
from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from auth_service.repositories.user import UserRepository
from auth_service.services._shared.ports import CredentialVerifier, Principal


@dataclass(slots=True)
class SQLAlchemyCredentialVerifier(CredentialVerifier):
    """
    Credential check backed by the ``users`` table.

    Read-only: it never commits. Password hashing is delegated to the
    :class:`~auth_service.models.user.User` model (werkzeug).

    :param session: Optional session; defaults to the Flask-scoped one.
    """

    session: Session | None = None
    _repo: UserRepository = field(init=False)

    def __post_init__(self) -> None:
        self._repo = UserRepository(session=self.session)

    def verify(self, email: str, password: str) -> Principal | None:
        user = self._repo.authenticate(email, password)
        return Principal(email=user.email) if user else None

    def find_active(self, email: str) -> Principal | None:
        user = self._repo.get_active_by_email(email)
        return Principal(email=user.email) if user else None

"""User repository for persistence and authentication utilities."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from auth_service.models.user import User
from auth_service.repositories.base import BaseRepository


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It NEVER handles tokens or sessions, only account rows.
    """

    model = User

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive), deleted or not.

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == normalize_email(email))
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_active_by_email(self, email: str) -> User | None:
        """Fetch a non-deleted user by email.

        :param email: Email address to normalise and search.
        :type email: str
        :returns: Active user or ``None``.
        :rtype: User | None
        """
        stmt = select(User).where(
            User.email == normalize_email(email),
            User.is_deleted.is_(False),
        )
        return cast(User | None, self.session.execute(stmt).scalars().first())

    # ---------------------------- Commands ----------------------------

    def create(self, email: str, password: str) -> User:
        """Create an account (password hashed by the model setter)."""
        user = User(email=email)
        user.password = password
        return self.add(user)

    def soft_delete(self, email: str) -> bool:
        """Flag the account as deleted.

        :returns: ``True`` if an active account was found and flagged.
        :rtype: bool
        """
        user = self.get_active_by_email(email)
        if user is None:
            return False
        user.is_deleted = True
        self.flush()
        return True

    def authenticate(self, email: str, password: str) -> User | None:
        """Authenticate an active user by email and password.

        Unknown, deleted and wrong-password cases are indistinguishable.

        :returns: Authenticated user or ``None`` when credentials fail.
        :rtype: User | None
        """
        user = self.get_active_by_email(email)
        if not user or not user.verify_password(password):
            return None
        return user

"""Generic repository base for SQLAlchemy 2.x.

Repositories are persistence-only: they never implement use cases and never
call commit/rollback. The caller owns the transaction.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar, cast

from sqlalchemy.orm import Session

from auth_service.core.extensions import db

E = TypeVar("E")  # SQLAlchemy mapped entity type


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single aggregate.

    Subclasses MUST define ``model``: the SQLAlchemy mapped class.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """
        :param session: Session to use; defaults to the Flask-scoped ``db.session``.
        :type session: Session | None
        """
        self.session = cast(Session, session or db.session)

    def get(self, pk: Any) -> E | None:
        """Fetch an entity by primary key."""
        return self.session.get(self.model, pk)

    def add(self, entity: E) -> E:
        """Stage ``entity`` and flush so generated keys are populated."""
        self.session.add(entity)
        self.flush()
        return entity

    def flush(self) -> None:
        self.session.flush()

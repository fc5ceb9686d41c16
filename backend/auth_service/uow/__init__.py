"""Unit of Work abstractions and concrete implementations.

This package re-exports the compensating unit of work used by sign-out,
alongside the abstract contract it implements.
"""

from .base import UnitOfWork
from .session_record_uow import SessionRecordUnitOfWork

__all__ = [
    "UnitOfWork",
    "SessionRecordUnitOfWork",
]

"""
Compensating Unit of Work around a principal's session record.

Sign-out deletes the session record and then inserts the blacklist record.
The record is snapshotted on entry and written back (value and remaining
TTL) when the scope exits with an error, so the pair of writes is
all-or-nothing from the caller's point of view. A record written by a newer
sign-in in the meantime is never overwritten.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from auth_service.services._shared.ports import SessionStore
from auth_service.uow.base import UnitOfWork

log = logging.getLogger(__name__)


class SessionRecordUnitOfWork(UnitOfWork):
    """
    Scope that restores a deleted session record on failure.

    :param store: Session store holding the record.
    :param key: Session record key (the principal identifier).

    Usage::

        with SessionRecordUnitOfWork(store, email) as uow:
            uow.delete_record()
            store.set(blacklist_key, token, ttl)  # failure -> record restored
    """

    def __init__(self, store: SessionStore, key: str) -> None:
        self.store = store
        self.key = key
        self._value: str | None = None
        self._ttl: timedelta | None = None
        self._deleted = False

    def __enter__(self) -> SessionRecordUnitOfWork:
        super().__enter__()
        return self

    def snapshot(self) -> None:
        self._value = self.store.get(self.key)
        self._ttl = self.store.remaining_ttl(self.key) if self._value is not None else None
        self._deleted = False

    def delete_record(self) -> bool:
        """
        Delete the session record when present.

        :returns: ``True`` if a record existed and was deleted.
        """
        if self._value is None and not self.store.exists(self.key):
            return False
        self.store.delete(self.key)
        self._deleted = True
        return True

    def commit(self) -> None:
        self._value = None
        self._ttl = None
        self._deleted = False

    def rollback(self) -> None:
        if not self._deleted or self._value is None:
            return
        if self._ttl is None or self._ttl <= timedelta(0):
            # expired while we worked
            return
        self._deleted = False
        # a sign-in that landed after the delete owns the key now
        if not self.store.set_if_absent(self.key, self._value, self._ttl):
            log.info(
                "auth.sign_out.rollback_skipped",
                extra={"principal": self.key, "outcome": "superseded"},
            )
            return
        log.warning("auth.sign_out.rollback", extra={"principal": self.key})

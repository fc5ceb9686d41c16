"""
Compensating Unit of Work contract.

The session store offers no multi-key transactions. A unit of work here
records, on entry, whatever it needs to undo the scope's writes and replays
that undo on error. Undo failures are logged and never mask the error that
aborted the scope.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from auth_service.services._shared.errors import StoreUnavailableError

log = logging.getLogger(__name__)


class UnitOfWork(ABC):
    """
    Transactional boundary for a use-case over the session store.

    Subclasses implement :meth:`snapshot` (called on entry), :meth:`commit`
    and :meth:`rollback`; the context-manager protocol is shared.
    """

    def __enter__(self) -> UnitOfWork:
        self.snapshot()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.commit()
            return
        try:
            self.rollback()
        except StoreUnavailableError:
            # the with-statement re-raises the original error
            log.exception("uow.rollback_failed", extra={"outcome": type(exc).__name__})

    @abstractmethod
    def snapshot(self) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...

"""
Unit of Work: manages repositories and transaction boundaries.

One instance serves one logical operation (e.g. one request) and is not safe
to share between concurrent callers.
"""

import asyncio
import threading
from enum import Enum
from typing import Dict, Optional, Type
from sqlmodel.ext.asyncio.session import AsyncSession

from framework.database.session import PersistenceSession
from framework.exceptions.errors import (
    AlreadyInTransaction,
    NoActiveTransaction,
    StoreUnavailable,
    UnitOfWorkClosed,
)
from framework.logging.logger import get_logger
from framework.security import CurrentUserProvider
from .base import Repository

logger = get_logger("unit_of_work")


class TransactionState(str, Enum):
    IDLE = "IDLE"
    IN_TRANSACTION = "IN_TRANSACTION"
    COMMITTED = "COMMITTED"
    ROLLED_BACK = "ROLLED_BACK"


class UnitOfWork:
    """Manages related repositories with a shared session and transaction commit/rollback."""

    def __init__(
        self,
        session: Optional[AsyncSession] = None,
        current_user: Optional[CurrentUserProvider] = None,
        persistence: Optional[PersistenceSession] = None,
    ):
        """Initialize UnitOfWork; pass an AsyncSession or a prepared PersistenceSession."""
        if persistence is None:
            if session is None:
                raise ValueError("Session must be provided. Use UnitOfWork.from_session() or pass session explicitly.")
            persistence = PersistenceSession(session, current_user=current_user)

        self.persistence = persistence
        self.state = TransactionState.IDLE
        self._repositories: Dict[type, Repository] = {}
        self._repositories_lock = threading.Lock()
        self._broken = False
        self._disposed = False

    @classmethod
    async def from_session(
        cls, session: AsyncSession, current_user: Optional[CurrentUserProvider] = None
    ) -> "UnitOfWork":
        """Create UnitOfWork from an existing session."""
        return cls(session=session, current_user=current_user)

    @property
    def session(self) -> AsyncSession:
        return self.persistence.db

    @property
    def in_transaction(self) -> bool:
        return self.state is TransactionState.IN_TRANSACTION

    @property
    def closed(self) -> bool:
        return self._broken or self._disposed

    def _ensure_open(self) -> None:
        if self._disposed:
            raise UnitOfWorkClosed("Unit of work has been closed")
        if self._broken:
            raise UnitOfWorkClosed("Unit of work is unusable after a failed rollback")

    # --- repositories ---

    def get_repository(self, model: type, repo_class: Optional[Type[Repository]] = None) -> Repository:
        """Get or create the repository for ``model`` (one instance per entity type)."""
        self._ensure_open()
        repository = self._repositories.get(model)
        if repository is not None:
            return repository

        with self._repositories_lock:
            repository = self._repositories.get(model)
            if repository is None:
                if repo_class is None:
                    repository = Repository(self.persistence, model)
                else:
                    repository = repo_class(self.persistence)
                self._repositories[model] = repository
        return repository

    # --- transaction lifecycle ---

    async def begin_transaction(self) -> None:
        self._ensure_open()
        if self.in_transaction:
            raise AlreadyInTransaction("A transaction is already active on this unit of work")

        await self.persistence.begin()
        self.state = TransactionState.IN_TRANSACTION
        logger.debug("Transaction started")

    async def save_changes(self) -> int:
        """Flush pending writes; outside a transaction also commits them."""
        self._ensure_open()
        if not self.persistence.has_pending:
            return 0

        try:
            count = await self.persistence.flush()
            if not self.in_transaction:
                await self.persistence.commit()
        except (Exception, asyncio.CancelledError) as exc:
            logger.warning(f"save_changes failed, rolling back: {type(exc).__name__}: {exc}")
            await self._abort()
            raise

        logger.debug(f"save_changes wrote {count} row(s)")
        return count

    async def commit_transaction(self) -> None:
        self._ensure_open()
        if not self.in_transaction:
            raise NoActiveTransaction("commit_transaction() called without begin_transaction()")

        try:
            count = await self.persistence.flush()
            await self.persistence.commit()
        except (Exception, asyncio.CancelledError) as exc:
            logger.warning(f"Commit failed, rolling back: {type(exc).__name__}: {exc}")
            await self._abort()
            raise

        self.state = TransactionState.COMMITTED
        logger.info(f"Transaction committed ({count} row(s) in final flush)")

    async def rollback_transaction(self) -> None:
        self._ensure_open()
        if not self.in_transaction:
            raise NoActiveTransaction("rollback_transaction() called without begin_transaction()")

        await self._abort()
        logger.info("Transaction rolled back")

    async def _abort(self) -> None:
        """Roll back the open database transaction and discard pending writes."""
        was_in_transaction = self.in_transaction
        try:
            await self.persistence.rollback()
        except asyncio.CancelledError:
            # rollback did not finish; the connection state is unknown
            self.state = TransactionState.ROLLED_BACK
            self._broken = True
            logger.error("Rollback cancelled, unit of work closed")
            raise
        except Exception as exc:
            self.state = TransactionState.ROLLED_BACK
            self._broken = True
            logger.error(f"Rollback failed, unit of work closed: {exc}")
            raise StoreUnavailable(f"Rollback failed: {exc}", orig=exc) from exc

        if was_in_transaction:
            self.state = TransactionState.ROLLED_BACK

    # --- disposal ---

    async def close(self) -> None:
        """Roll back an open transaction and release the session; safe to call twice."""
        if self._disposed:
            return
        self._disposed = True
        try:
            if self.in_transaction and not self._broken:
                logger.warning("Closing unit of work with an open transaction, rolling back")
                await self._abort()
        finally:
            self._repositories.clear()
            await self.persistence.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

"""
Persistence session: wraps one AsyncSession for one logical operation.

Writes are recorded as explicit intents (added / modified / soft-deleted) by the
repositories. ``flush`` stamps the audit envelope over every pending intent and
sends them to the database in a single flush. Nothing reaches the store any
other way because the session factory disables autoflush.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy import inspect as sa_inspect, text
from sqlalchemy.exc import (
    DataError,
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
)
from sqlmodel.ext.asyncio.session import AsyncSession

from framework.database.entity import AuditEntity, as_utc, utcnow
from framework.exceptions.errors import ConstraintViolation, StoreUnavailable
from framework.logging.logger import get_logger
from framework.security import CurrentUserProvider

logger = get_logger("persistence_session")

_TICK = timedelta(microseconds=1)


class EntityState(str, Enum):
    """Pending write intent."""
    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    SOFT_DELETED = "SOFT_DELETED"


@dataclass
class PendingWrite:
    entity: AuditEntity
    state: EntityState


@contextmanager
def translate_store_errors(action: str):
    """Map SQLAlchemy/driver failures onto the persistence error taxonomy."""
    try:
        yield
    except (IntegrityError, DataError) as exc:
        raise ConstraintViolation(
            f"Database rejected {action}: {exc.orig}",
            detail=str(exc.orig),
            orig=exc,
        ) from exc
    except DBAPIError as exc:
        if exc.connection_invalidated or isinstance(exc, (OperationalError, InterfaceError)):
            raise StoreUnavailable(f"Database unavailable during {action}: {exc.orig}", orig=exc) from exc
        raise
    except (DisconnectionError, OSError) as exc:
        raise StoreUnavailable(f"Database unavailable during {action}: {exc}", orig=exc) from exc


def _deletion_pending(entity: AuditEntity) -> bool:
    """True when is_deleted flipped to True since the entity was loaded."""
    history = sa_inspect(entity).attrs.is_deleted.history
    return True in (history.added or ())


def _after(previous: Optional[datetime], now: datetime) -> datetime:
    previous = as_utc(previous)
    if previous is not None and now <= previous:
        return previous + _TICK
    return now


class PersistenceSession:
    """Owns the live session, the pending-write list and audit stamping."""

    def __init__(
        self,
        session: AsyncSession,
        current_user: Optional[CurrentUserProvider] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = session
        self.current_user = current_user
        self.clock = clock
        # keyed by id(entity); the PendingWrite holds a reference so ids stay unique
        self._pending: Dict[int, PendingWrite] = {}

    @property
    def pending(self) -> Tuple[PendingWrite, ...]:
        return tuple(self._pending.values())

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    def in_transaction(self) -> bool:
        return self.db.in_transaction()

    def track(self, entity: AuditEntity, state: EntityState) -> None:
        """Record a write intent; repeated intents for one entity collapse."""
        write = self._pending.get(id(entity))
        if write is None:
            self._pending[id(entity)] = PendingWrite(entity, state)
        elif write.state is EntityState.MODIFIED:
            write.state = state
        # ADDED stays ADDED; SOFT_DELETED is not downgraded by a later update

    def discard_pending(self) -> None:
        self._pending.clear()

    def current_user_id(self) -> Optional[int]:
        if self.current_user is None:
            return None
        return self.current_user.current_user_id()

    def stamp(self, writes: List[PendingWrite]) -> None:
        """Fill the audit envelope of every pending entity."""
        user_id = self.current_user_id()
        now = self.clock()

        for write in writes:
            entity = write.entity
            if write.state is EntityState.ADDED:
                entity.created_at = now
                entity.updated_at = now
                entity.created_user_id = user_id
                entity.updated_user_id = user_id
                if entity.is_deleted:
                    entity.deleted_date = entity.deleted_date or now
                    entity.deleted_user_id = user_id
                continue

            entity.updated_at = _after(entity.updated_at, now)
            entity.updated_user_id = user_id
            if entity.is_deleted:
                if entity.deleted_date is None:
                    entity.deleted_date = now
                # only the transition into the deleted state carries the deleter
                if write.state is EntityState.SOFT_DELETED or _deletion_pending(entity):
                    entity.deleted_user_id = user_id
            else:
                entity.deleted_date = None
                entity.deleted_user_id = None
                entity.recstatus = True

        logger.debug(f"Stamped {len(writes)} pending write(s) as user={user_id}")

    def pending_removal_ids(self, model: type) -> List[int]:
        """Ids of stored ``model`` rows whose pending write leaves them deleted."""
        return [
            write.entity.id
            for write in self._pending.values()
            if isinstance(write.entity, model) and write.entity.id is not None and write.entity.is_deleted
        ]

    async def discard_untracked(self) -> int:
        """Reload loaded entities that were mutated without a write intent.

        SQLAlchemy flushes every dirty object in the identity map; only
        entities passed through a repository write may reach the database.
        """
        untracked = [
            entity for entity in self.db.dirty
            if id(entity) not in self._pending and self.db.is_modified(entity)
        ]
        with translate_store_errors("refresh"):
            for entity in untracked:
                await self.db.refresh(entity)
        if untracked:
            logger.warning(f"Discarded changes on {len(untracked)} entity(ies) without a write intent")
        return len(untracked)

    async def flush(self) -> int:
        """Stamp and flush all pending writes; returns the number of rows written."""
        if not self._pending:
            return 0

        await self.discard_untracked()
        writes = list(self._pending.values())
        self.stamp(writes)
        self.db.add_all([write.entity for write in writes])
        with translate_store_errors("flush"):
            await self.db.flush()

        self._pending.clear()
        logger.debug(f"Flushed {len(writes)} write(s)")
        return len(writes)

    async def exec(self, statement):
        """Run a read statement."""
        with translate_store_errors("query"):
            return await self.db.exec(statement)

    async def begin(self) -> None:
        """Open the database transaction (acquires a connection)."""
        with translate_store_errors("begin"):
            await self.db.connection()

    async def commit(self) -> None:
        # commit always flushes; untracked edits must not ride along
        await self.discard_untracked()
        with translate_store_errors("commit"):
            await self.db.commit()

    async def rollback(self) -> None:
        self._pending.clear()
        with translate_store_errors("rollback"):
            await self.db.rollback()

    async def close(self) -> None:
        self._pending.clear()
        with translate_store_errors("close"):
            await self.db.close()

    async def ping(self) -> bool:
        with translate_store_errors("ping"):
            connection = await self.db.connection()
            result = await connection.execute(text("SELECT 1"))
        return result.scalar() == 1

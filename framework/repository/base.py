"""
Repository abstract base class and generic implementation.

Every read AND-combines the caller's predicate with ``is_deleted = false``.
Deleted rows are reachable only through the keyword-only ``include_deleted=True``.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Iterable, List, Optional, Type, TypeVar
from sqlalchemy import func
from sqlalchemy.exc import ArgumentError
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.orm.attributes import QueryableAttribute
from sqlmodel import select, col

from framework.database.entity import AuditEntity, utcnow
from framework.database.session import EntityState, PersistenceSession
from framework.exceptions.errors import InvalidQuery

T = TypeVar("T", bound=AuditEntity)


class Query(Generic[T]):
    """Lazy, restartable query; each enumeration runs against the current database state."""

    def __init__(self, persistence: PersistenceSession, model: Type[T], statement, include_deleted: bool = False):
        self._persistence = persistence
        self._model = model
        self._statement = statement
        self._include_deleted = include_deleted

    @property
    def statement(self):
        return self._statement

    def _derive(self, statement) -> "Query[T]":
        return Query(self._persistence, self._model, statement, self._include_deleted)

    def order_by(self, *clauses) -> "Query[T]":
        try:
            return self._derive(self._statement.order_by(*clauses))
        except (ArgumentError, TypeError) as exc:
            raise InvalidQuery(f"Invalid order_by clause: {exc}") from exc

    def limit(self, limit: int) -> "Query[T]":
        if limit < 0:
            raise InvalidQuery(f"limit must be >= 0, got {limit}")
        return self._derive(self._statement.limit(limit))

    def offset(self, offset: int) -> "Query[T]":
        if offset < 0:
            raise InvalidQuery(f"offset must be >= 0, got {offset}")
        return self._derive(self._statement.offset(offset))

    def _executable(self):
        """Statement as of now; rows removed in this unit but not yet flushed are excluded."""
        if self._include_deleted:
            return self._statement
        removed = self._persistence.pending_removal_ids(self._model)
        if not removed:
            return self._statement
        return self._statement.where(col(self._model.id).not_in(removed))

    async def all(self) -> List[T]:
        result = await self._persistence.exec(self._executable())
        return list(result.all())

    async def first(self) -> Optional[T]:
        result = await self._persistence.exec(self._executable())
        return result.first()

    async def count(self) -> int:
        statement = select(func.count()).select_from(self._executable().order_by(None).subquery())
        result = await self._persistence.exec(statement)
        return result.one()

    async def exists(self) -> bool:
        return await self.limit(1).first() is not None

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for entity in await self.all():
            yield entity


class IRepository(ABC, Generic[T]):
    """Repository interface; defines standard data access API."""

    @abstractmethod
    async def get_by_id(self, id: int, *, include_deleted: bool = False) -> Optional[T]:
        """Get entity by ID."""
        pass

    @abstractmethod
    def query(self, *predicates, include_deleted: bool = False, **filters) -> Query[T]:
        """Build a lazy query over visible rows."""
        pass

    @abstractmethod
    def add(self, entity: T) -> T:
        """Mark entity pending-create."""
        pass

    @abstractmethod
    def update(self, entity: T) -> T:
        """Mark entity pending-modify."""
        pass

    @abstractmethod
    def remove(self, entity: T) -> T:
        """Soft delete entity."""
        pass


class Repository(IRepository[T]):
    """Generic repository over one entity type; subclasses can add custom queries."""

    def __init__(self, session: PersistenceSession, model: Type[T]):
        """Initialize repository with persistence session and model."""
        if not (isinstance(model, type) and issubclass(model, AuditEntity)):
            raise TypeError(f"{model!r} is not an AuditEntity model")
        self.session = session
        self.model = model

    # --- query building ---

    def _filters_to_predicates(self, filters: dict) -> List[Any]:
        predicates = []
        for key, value in filters.items():
            if key not in self.model.model_fields:
                raise InvalidQuery(f"{self.model.__name__} has no attribute '{key}'")
            predicates.append(getattr(self.model, key) == value)
        return predicates

    def _check_predicate(self, predicate) -> None:
        if not isinstance(predicate, (ColumnElement, QueryableAttribute)):
            raise InvalidQuery(
                f"Predicate must be a SQL expression on {self.model.__name__}, got {type(predicate).__name__}"
            )
        try:
            froms = select(self.model).where(predicate).get_final_froms()
        except (ArgumentError, TypeError) as exc:
            raise InvalidQuery(f"Invalid predicate for {self.model.__name__}: {exc}") from exc
        foreign = [f for f in froms if f is not self.model.__table__]
        if foreign:
            names = ", ".join(sorted(str(f) for f in foreign))
            raise InvalidQuery(f"Predicate on {self.model.__name__} references other tables: {names}")

    def _select(self, predicates: Iterable[Any] = (), include_deleted: bool = False, **filters):
        predicates = list(predicates) + self._filters_to_predicates(filters)
        for predicate in predicates:
            self._check_predicate(predicate)

        statement = select(self.model)
        if not include_deleted:
            statement = statement.where(col(self.model.is_deleted) == False)  # noqa: E712
        if predicates:
            statement = statement.where(*predicates)
        return statement

    def query(self, *predicates, include_deleted: bool = False, **filters) -> Query[T]:
        """Lazy query over rows matching all predicates and filters."""
        statement = self._select(predicates, include_deleted=include_deleted, **filters)
        return Query(self.session, self.model, statement, include_deleted)

    # --- reads ---

    async def get_by_id(self, id: int, *, include_deleted: bool = False) -> Optional[T]:
        """Get entity by ID."""
        return await self.query(col(self.model.id) == id, include_deleted=include_deleted).first()

    async def get_all(self, limit: int = 100, offset: int = 0, *, include_deleted: bool = False) -> List[T]:
        """Get all entities (paginated)."""
        query = self.query(include_deleted=include_deleted).order_by(col(self.model.id))
        return await query.limit(limit).offset(offset).all()

    async def find_one(self, *, include_deleted: bool = False, **filters) -> Optional[T]:
        """Find one entity by filters (e.g. username='admin')."""
        return await self.query(include_deleted=include_deleted, **filters).first()

    async def find_all(self, *, include_deleted: bool = False, **filters) -> List[T]:
        """Find entities by filters."""
        return await self.query(include_deleted=include_deleted, **filters).all()

    async def first_or_default(self, *predicates, include_deleted: bool = False) -> Optional[T]:
        return await self.query(*predicates, include_deleted=include_deleted).first()

    async def any(self, *predicates, include_deleted: bool = False, **filters) -> bool:
        return await self.query(*predicates, include_deleted=include_deleted, **filters).exists()

    async def count(self, *predicates, include_deleted: bool = False, **filters) -> int:
        """Count entities matching predicates and filters."""
        return await self.query(*predicates, include_deleted=include_deleted, **filters).count()

    # --- writes (recorded only; nothing reaches the database before flush) ---

    def _check_entity(self, entity: T) -> None:
        if not isinstance(entity, self.model):
            raise TypeError(f"{self.__class__.__name__} handles {self.model.__name__}, got {type(entity).__name__}")

    def add(self, entity: T) -> T:
        """Create entity."""
        self._check_entity(entity)
        self.session.track(entity, EntityState.ADDED)
        return entity

    def add_range(self, entities: Iterable[T]) -> List[T]:
        return [self.add(entity) for entity in entities]

    def update(self, entity: T) -> T:
        """Update entity."""
        self._check_entity(entity)
        self.session.track(entity, EntityState.MODIFIED)
        return entity

    def update_range(self, entities: Iterable[T]) -> List[T]:
        return [self.update(entity) for entity in entities]

    def remove(self, entity: T) -> T:
        """Soft delete entity; the row stays in the database."""
        self._check_entity(entity)
        if entity.mark_deleted(utcnow()):
            self.session.track(entity, EntityState.SOFT_DELETED)
        else:
            self.session.track(entity, EntityState.MODIFIED)
        return entity

    def remove_range(self, entities: Iterable[T]) -> List[T]:
        return [self.remove(entity) for entity in entities]

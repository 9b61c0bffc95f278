"""
Audit envelope shared by every persisted entity.

The envelope fields are written by PersistenceSession during flush; call sites
never set them directly, except through ``mark_deleted`` via Repository.remove().
"""

from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (SQLite returns these) as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class AuditEntity(SQLModel):
    """Base shape for forum entities: identity, provenance and soft-delete envelope."""

    id: Optional[int] = Field(default=None, primary_key=True)

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        nullable=False,
        description="Created at (UTC), set once at first flush",
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        nullable=False,
        description="Updated at (UTC), refreshed on every flushed change",
    )
    created_user_id: Optional[int] = Field(default=None, description="Principal that created the row")
    updated_user_id: Optional[int] = Field(default=None, description="Principal of the last update")

    is_deleted: bool = Field(default=False, index=True, description="Soft delete flag")
    deleted_date: Optional[datetime] = Field(
        default=None,
        sa_type=DateTime(timezone=True),
        description="Soft delete time (UTC)",
    )
    deleted_user_id: Optional[int] = Field(default=None, description="Principal that soft-deleted the row")
    # True = active, False = passive
    recstatus: bool = Field(default=True)

    def mark_deleted(self, at: Optional[datetime] = None) -> bool:
        """Flag the entity deleted; returns False if it already was."""
        if self.is_deleted:
            return False
        self.is_deleted = True
        self.deleted_date = at or utcnow()
        self.recstatus = False
        return True

    def audit_violations(self) -> List[str]:
        """Envelope invariants that do not hold for this instance."""
        problems = []
        created_at, updated_at = as_utc(self.created_at), as_utc(self.updated_at)
        if created_at and updated_at and created_at > updated_at:
            problems.append("created_at is after updated_at")
        if self.is_deleted != (self.deleted_date is not None):
            problems.append("is_deleted and deleted_date disagree")
        if self.deleted_user_id is not None and not self.is_deleted:
            problems.append("deleted_user_id set on a live entity")
        return problems

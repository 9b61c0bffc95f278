"""
Model registration for migrations: import all models that should be migrated by Alembic here.
"""
from apps.forum.models import (
    AuditLog,
    Category,
    Club,
    ClubMembership,
    ClubRequest,
    Notification,
    PasswordResetToken,
    Post,
    PostVote,
    Report,
    Thread,
    User,
    UserBan,
    UserMute,
)

__all__ = [
    "AuditLog",
    "Category",
    "Club",
    "ClubMembership",
    "ClubRequest",
    "Notification",
    "PasswordResetToken",
    "Post",
    "PostVote",
    "Report",
    "Thread",
    "User",
    "UserBan",
    "UserMute",
]

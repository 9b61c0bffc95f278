from sqlmodel import Field
from typing import Optional
from datetime import datetime
from enum import Enum
from sqlalchemy import DateTime, Text, UniqueConstraint
from framework.database.entity import AuditEntity


class UserRole(str, Enum):
    """User role enum."""
    USER = "USER"
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"


class NotificationType(str, Enum):
    THREAD_REPLY = "THREAD_REPLY"
    POST_REPLY = "POST_REPLY"
    SOLUTION_MARKED = "SOLUTION_MARKED"
    THREAD_SOLVED = "THREAD_SOLVED"


class ReportReason(str, Enum):
    SPAM = "SPAM"
    HARASSMENT = "HARASSMENT"
    INAPPROPRIATE_CONTENT = "INAPPROPRIATE_CONTENT"
    MISINFORMATION = "MISINFORMATION"
    OTHER = "OTHER"


class ReportStatus(str, Enum):
    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    RESOLVED = "RESOLVED"
    REJECTED = "REJECTED"


class ClubRole(str, Enum):
    MEMBER = "MEMBER"
    OFFICER = "OFFICER"
    VICE_PRESIDENT = "VICE_PRESIDENT"
    PRESIDENT = "PRESIDENT"


class MembershipStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    LEFT = "LEFT"
    KICKED = "KICKED"


class ClubRequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class User(AuditEntity, table=True):
    __tablename__ = "users"

    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    username: str = Field(unique=True, index=True, max_length=50)
    email: str = Field(unique=True, index=True, max_length=320)
    password_hash: str = Field(max_length=255)
    profile_img: Optional[str] = Field(default=None, max_length=500)
    role: UserRole = Field(default=UserRole.USER)
    is_active: bool = Field(default=True)
    email_verified: bool = Field(default=False)
    last_login_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))


class Club(AuditEntity, table=True):
    __tablename__ = "clubs"

    name: str = Field(max_length=100)
    slug: str = Field(unique=True, index=True, max_length=120)
    description: Optional[str] = Field(default=None, sa_type=Text)
    logo_url: Optional[str] = Field(default=None, max_length=500)
    banner_url: Optional[str] = Field(default=None, max_length=500)
    is_public: bool = Field(default=True)
    requires_approval: bool = Field(default=False)
    member_count: int = Field(default=0)
    founder_id: int = Field(foreign_key="users.id", index=True)


class Category(AuditEntity, table=True):
    __tablename__ = "categories"

    title: str = Field(max_length=100)
    slug: str = Field(unique=True, index=True, max_length=120)
    description: Optional[str] = Field(default=None, max_length=500)
    # Null for site-wide categories
    club_id: Optional[int] = Field(default=None, foreign_key="clubs.id", index=True)


class Thread(AuditEntity, table=True):
    __tablename__ = "threads"

    title: str = Field(max_length=200)
    content: str = Field(sa_type=Text)
    view_count: int = Field(default=0)
    is_solved: bool = Field(default=False)
    is_locked: bool = Field(default=False)
    post_count: int = Field(default=0)
    user_id: int = Field(foreign_key="users.id", index=True)
    category_id: int = Field(foreign_key="categories.id", index=True)


class Post(AuditEntity, table=True):
    __tablename__ = "posts"

    content: str = Field(sa_type=Text)
    img: Optional[str] = Field(default=None, max_length=500)
    is_solution: bool = Field(default=False)
    upvote_count: int = Field(default=0)
    thread_id: int = Field(foreign_key="threads.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    # Set for nested replies
    parent_post_id: Optional[int] = Field(default=None, foreign_key="posts.id", index=True)


class PostVote(AuditEntity, table=True):
    __tablename__ = "post_votes"
    __table_args__ = (UniqueConstraint("post_id", "user_id", name="uq_post_votes_post_user"),)

    post_id: int = Field(foreign_key="posts.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)


class Notification(AuditEntity, table=True):
    __tablename__ = "notifications"

    user_id: int = Field(foreign_key="users.id", index=True, description="Recipient")
    actor_user_id: Optional[int] = Field(default=None, foreign_key="users.id", description="Null for system notifications")
    type: NotificationType
    message: str = Field(max_length=500)
    thread_id: Optional[int] = Field(default=None, foreign_key="threads.id")
    post_id: Optional[int] = Field(default=None, foreign_key="posts.id")
    is_read: bool = Field(default=False, index=True)


class Report(AuditEntity, table=True):
    __tablename__ = "reports"

    reporter_id: int = Field(foreign_key="users.id", index=True)
    reported_user_id: Optional[int] = Field(default=None, foreign_key="users.id")
    reported_post_id: Optional[int] = Field(default=None, foreign_key="posts.id")
    reported_thread_id: Optional[int] = Field(default=None, foreign_key="threads.id")
    reason: ReportReason
    description: Optional[str] = Field(default=None, max_length=1000)
    status: ReportStatus = Field(default=ReportStatus.PENDING, index=True)
    reviewed_by_user_id: Optional[int] = Field(default=None, foreign_key="users.id")
    reviewed_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    admin_note: Optional[str] = Field(default=None, max_length=1000)


class UserBan(AuditEntity, table=True):
    __tablename__ = "user_bans"

    user_id: int = Field(foreign_key="users.id", index=True)
    banned_by_user_id: int = Field(foreign_key="users.id")
    reason: str = Field(default="", max_length=500)
    banned_at: datetime = Field(sa_type=DateTime(timezone=True))
    # Null means permanent
    expires_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    is_active: bool = Field(default=True)


class UserMute(AuditEntity, table=True):
    __tablename__ = "user_mutes"

    user_id: int = Field(foreign_key="users.id", index=True)
    muted_by_user_id: int = Field(foreign_key="users.id")
    reason: str = Field(default="", max_length=500)
    muted_at: datetime = Field(sa_type=DateTime(timezone=True))
    expires_at: datetime = Field(sa_type=DateTime(timezone=True))
    is_active: bool = Field(default=True)


class PasswordResetToken(AuditEntity, table=True):
    __tablename__ = "password_reset_tokens"

    user_id: int = Field(foreign_key="users.id", index=True)
    token: str = Field(unique=True, index=True, max_length=64)
    expires_at: datetime = Field(sa_type=DateTime(timezone=True))
    is_used: bool = Field(default=False)
    request_ip: Optional[str] = Field(default=None, max_length=45)
    used_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))


class AuditLog(AuditEntity, table=True):
    __tablename__ = "audit_logs"

    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    username: Optional[str] = Field(default=None, max_length=50)
    action: str = Field(max_length=100, index=True)
    entity_type: Optional[str] = Field(default=None, max_length=100)
    entity_id: Optional[int] = Field(default=None)
    old_value: Optional[str] = Field(default=None, sa_type=Text)
    new_value: Optional[str] = Field(default=None, sa_type=Text)
    ip_address: Optional[str] = Field(default=None, max_length=45)
    user_agent: Optional[str] = Field(default=None, max_length=500)
    success: bool = Field(default=True)
    error_message: Optional[str] = Field(default=None, max_length=1000)
    notes: Optional[str] = Field(default=None, max_length=1000)


class ClubMembership(AuditEntity, table=True):
    __tablename__ = "club_memberships"

    club_id: int = Field(foreign_key="clubs.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    role: ClubRole = Field(default=ClubRole.MEMBER)
    status: MembershipStatus = Field(default=MembershipStatus.PENDING)
    joined_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    join_note: Optional[str] = Field(default=None, max_length=500)


class ClubRequest(AuditEntity, table=True):
    __tablename__ = "club_requests"

    name: str = Field(max_length=100)
    description: str = Field(max_length=1000)
    purpose: str = Field(max_length=1000)
    status: ClubRequestStatus = Field(default=ClubRequestStatus.PENDING)
    requested_by_user_id: int = Field(foreign_key="users.id", index=True)
    reviewed_by_user_id: Optional[int] = Field(default=None, foreign_key="users.id")
    reviewed_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    rejection_reason: Optional[str] = Field(default=None, max_length=500)

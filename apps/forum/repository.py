"""Forum repository implementations."""

from datetime import datetime
from typing import List, Optional
from sqlmodel import col, or_
from framework.database.entity import utcnow
from framework.repository.base import Repository
from .models import (
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
    ReportStatus,
    Thread,
    User,
    UserBan,
    UserMute,
)


class UserRepository(Repository[User]):
    """User repository."""

    def __init__(self, session):
        super().__init__(session, User)

    async def get_by_username(self, username: str) -> Optional[User]:
        """Find user by username."""
        return await self.find_one(username=username)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Find user by email."""
        return await self.find_one(email=email)


class CategoryRepository(Repository[Category]):
    """Category repository."""

    def __init__(self, session):
        super().__init__(session, Category)

    async def get_by_slug(self, slug: str) -> Optional[Category]:
        return await self.find_one(slug=slug)

    async def list_by_club(self, club_id: Optional[int]) -> List[Category]:
        """Categories of a club; ``None`` lists site-wide categories."""
        if club_id is None:
            predicate = col(Category.club_id).is_(None)
        else:
            predicate = col(Category.club_id) == club_id
        return await self.query(predicate).order_by(col(Category.title)).all()


class ThreadRepository(Repository[Thread]):
    """Thread repository."""

    def __init__(self, session):
        super().__init__(session, Thread)

    async def list_by_category(
        self,
        category_id: int,
        limit: int = 20,
        offset: int = 0
    ) -> List[Thread]:
        """List threads of a category, newest first."""
        query = self.query(category_id=category_id).order_by(col(Thread.created_at).desc())
        return await query.limit(limit).offset(offset).all()

    async def list_by_user(self, user_id: int, limit: int = 20, offset: int = 0) -> List[Thread]:
        query = self.query(user_id=user_id).order_by(col(Thread.created_at).desc())
        return await query.limit(limit).offset(offset).all()


class PostRepository(Repository[Post]):
    """Post repository."""

    def __init__(self, session):
        super().__init__(session, Post)

    async def list_by_thread(
        self,
        thread_id: int,
        limit: int = 50,
        offset: int = 0
    ) -> List[Post]:
        """
        List posts of a thread in reply order.

        Args:
            thread_id: Thread ID
            limit: Page size
            offset: Offset

        Returns:
            Posts ordered by creation time ascending (soft-deleted posts excluded)
        """
        query = self.query(thread_id=thread_id).order_by(col(Post.created_at).asc(), col(Post.id).asc())
        return await query.limit(limit).offset(offset).all()

    async def list_replies(self, parent_post_id: int) -> List[Post]:
        return await self.query(parent_post_id=parent_post_id).order_by(col(Post.created_at).asc()).all()

    async def count_by_thread(self, thread_id: int) -> int:
        return await self.count(thread_id=thread_id)


class PostVoteRepository(Repository[PostVote]):
    """Post vote repository."""

    def __init__(self, session):
        super().__init__(session, PostVote)

    async def get_vote(self, post_id: int, user_id: int) -> Optional[PostVote]:
        """Vote of a user on a post, if any."""
        return await self.find_one(post_id=post_id, user_id=user_id)

    async def count_for_post(self, post_id: int) -> int:
        return await self.count(post_id=post_id)


class NotificationRepository(Repository[Notification]):
    """Notification repository."""

    def __init__(self, session):
        super().__init__(session, Notification)

    async def list_unread(self, user_id: int, limit: int = 50) -> List[Notification]:
        query = self.query(user_id=user_id, is_read=False).order_by(col(Notification.created_at).desc())
        return await query.limit(limit).all()

    async def count_unread(self, user_id: int) -> int:
        return await self.count(user_id=user_id, is_read=False)


class ReportRepository(Repository[Report]):
    """Report repository."""

    def __init__(self, session):
        super().__init__(session, Report)

    async def list_by_status(
        self,
        status: ReportStatus,
        limit: int = 20,
        offset: int = 0
    ) -> List[Report]:
        query = self.query(status=status).order_by(col(Report.created_at).desc())
        return await query.limit(limit).offset(offset).all()


def _in_effect(model, now: datetime):
    """Active row whose expiry is unset or still in the future."""
    return (
        col(model.is_active) == True,  # noqa: E712
        or_(col(model.expires_at).is_(None), col(model.expires_at) > now),
    )


class UserBanRepository(Repository[UserBan]):
    """User ban repository."""

    def __init__(self, session):
        super().__init__(session, UserBan)

    async def get_active_ban(self, user_id: int, now: Optional[datetime] = None) -> Optional[UserBan]:
        """Ban currently in effect for a user."""
        predicates = _in_effect(UserBan, now or utcnow())
        return await self.query(col(UserBan.user_id) == user_id, *predicates).first()


class UserMuteRepository(Repository[UserMute]):
    """User mute repository."""

    def __init__(self, session):
        super().__init__(session, UserMute)

    async def get_active_mute(self, user_id: int, now: Optional[datetime] = None) -> Optional[UserMute]:
        predicates = _in_effect(UserMute, now or utcnow())
        return await self.query(col(UserMute.user_id) == user_id, *predicates).first()


class PasswordResetTokenRepository(Repository[PasswordResetToken]):
    """Password reset token repository."""

    def __init__(self, session):
        super().__init__(session, PasswordResetToken)

    async def get_by_token(self, token: str) -> Optional[PasswordResetToken]:
        return await self.find_one(token=token)


class AuditLogRepository(Repository[AuditLog]):
    """Audit log repository."""

    def __init__(self, session):
        super().__init__(session, AuditLog)


class ClubRepository(Repository[Club]):
    """Club repository."""

    def __init__(self, session):
        super().__init__(session, Club)

    async def get_by_slug(self, slug: str) -> Optional[Club]:
        return await self.find_one(slug=slug)


class ClubMembershipRepository(Repository[ClubMembership]):
    """Club membership repository."""

    def __init__(self, session):
        super().__init__(session, ClubMembership)

    async def get_membership(self, club_id: int, user_id: int) -> Optional[ClubMembership]:
        return await self.find_one(club_id=club_id, user_id=user_id)


class ClubRequestRepository(Repository[ClubRequest]):
    """Club request repository."""

    def __init__(self, session):
        super().__init__(session, ClubRequest)

"""Forum unit of work: one lazily built repository per entity type."""

from framework.repository.unit_of_work import UnitOfWork
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
    Thread,
    User,
    UserBan,
    UserMute,
)
from .repository import (
    AuditLogRepository,
    CategoryRepository,
    ClubMembershipRepository,
    ClubRepository,
    ClubRequestRepository,
    NotificationRepository,
    PasswordResetTokenRepository,
    PostRepository,
    PostVoteRepository,
    ReportRepository,
    ThreadRepository,
    UserBanRepository,
    UserMuteRepository,
    UserRepository,
)


class ForumUnitOfWork(UnitOfWork):
    """Repository accessors for the forum entities, all bound to one session."""

    @property
    def users(self) -> UserRepository:
        return self.get_repository(User, UserRepository)

    @property
    def posts(self) -> PostRepository:
        return self.get_repository(Post, PostRepository)

    @property
    def threads(self) -> ThreadRepository:
        return self.get_repository(Thread, ThreadRepository)

    @property
    def categories(self) -> CategoryRepository:
        return self.get_repository(Category, CategoryRepository)

    @property
    def post_votes(self) -> PostVoteRepository:
        return self.get_repository(PostVote, PostVoteRepository)

    @property
    def notifications(self) -> NotificationRepository:
        return self.get_repository(Notification, NotificationRepository)

    @property
    def reports(self) -> ReportRepository:
        return self.get_repository(Report, ReportRepository)

    @property
    def user_bans(self) -> UserBanRepository:
        return self.get_repository(UserBan, UserBanRepository)

    @property
    def user_mutes(self) -> UserMuteRepository:
        return self.get_repository(UserMute, UserMuteRepository)

    @property
    def password_reset_tokens(self) -> PasswordResetTokenRepository:
        return self.get_repository(PasswordResetToken, PasswordResetTokenRepository)

    @property
    def audit_logs(self) -> AuditLogRepository:
        return self.get_repository(AuditLog, AuditLogRepository)

    @property
    def clubs(self) -> ClubRepository:
        return self.get_repository(Club, ClubRepository)

    @property
    def club_memberships(self) -> ClubMembershipRepository:
        return self.get_repository(ClubMembership, ClubMembershipRepository)

    @property
    def club_requests(self) -> ClubRequestRepository:
        return self.get_repository(ClubRequest, ClubRequestRepository)

    async def ping(self) -> bool:
        """Check the database answers on this unit of work's session."""
        self._ensure_open()
        return await self.persistence.ping()

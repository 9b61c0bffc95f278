from typing import Optional
from framework.security import CurrentUserProvider
from .driver import SQLDriver

class DatabaseManager:
    _instance = None

    def __init__(self, settings):
        self.sql = SQLDriver(
            settings.DATABASE_URL,
            echo=settings.DB_ECHO,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
        )

    @classmethod
    def get_instance(cls, settings=None):
        if cls._instance is None:
            if settings is None:
                from framework.config import settings as app_settings
                settings = app_settings
            cls._instance = cls(settings)
        return cls._instance

    @classmethod
    async def reset_instance(cls):
        """Dispose the engine and forget the singleton."""
        if cls._instance is not None:
            await cls._instance.sql.disconnect()
            cls._instance = None

    def unit_of_work(self, current_user: Optional[CurrentUserProvider] = None):
        """Open a ForumUnitOfWork on a fresh session; use as ``async with``."""
        from apps.forum.unit_of_work import ForumUnitOfWork
        return ForumUnitOfWork(self.sql.session_factory(), current_user=current_user)

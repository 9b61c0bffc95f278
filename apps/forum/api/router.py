from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.database.manager import DatabaseManager
from framework.security import CurrentUserProvider, get_current_user_provider
from ..unit_of_work import ForumUnitOfWork

router = APIRouter()


async def get_db():
    """Get database session."""
    manager = DatabaseManager.get_instance()
    async for session in manager.sql.get_session():
        yield session


async def get_uow(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUserProvider = Depends(get_current_user_provider)
):
    """Dependency: one ForumUnitOfWork per request, closed when the request ends."""
    async with ForumUnitOfWork(session=db, current_user=current_user) as uow:
        yield uow


@router.get("/health")
async def health(uow: ForumUnitOfWork = Depends(get_uow)):
    """Liveness of the API and its database."""
    await uow.ping()
    return {"code": 200, "message": "success", "data": {"database": "ok"}}

"""
Current-user contract consumed by the persistence core.

Token issuance and verification live in the auth layer; it stores the
authenticated principal on ``request.state.user``. Providers are passed to the
unit of work explicitly, never looked up from global state.
"""

from typing import Optional, Protocol, runtime_checkable
from fastapi import Request
from pydantic import BaseModel


class CurrentUser(BaseModel):
    """Current logged-in user context"""
    id: int
    username: str
    role: str = "user"


@runtime_checkable
class CurrentUserProvider(Protocol):
    """Exposes the acting principal. ``None`` means system or anonymous."""

    def current_user_id(self) -> Optional[int]: ...

    def current_username(self) -> Optional[str]: ...

    def current_role(self) -> Optional[str]: ...

    def is_authenticated(self) -> bool: ...


class StaticUserProvider:
    """Fixed principal; for scripts, background jobs and tests."""

    def __init__(self, user: Optional[CurrentUser] = None):
        self.user = user

    @classmethod
    def system(cls) -> "StaticUserProvider":
        return cls(None)

    def current_user_id(self) -> Optional[int]:
        return self.user.id if self.user else None

    def current_username(self) -> Optional[str]:
        return self.user.username if self.user else None

    def current_role(self) -> Optional[str]:
        return self.user.role if self.user else None

    def is_authenticated(self) -> bool:
        return self.user is not None


class RequestUserProvider:
    """Reads the principal the auth layer attached to the request."""

    def __init__(self, request: Request):
        self.request = request

    @property
    def user(self) -> Optional[CurrentUser]:
        user = getattr(self.request.state, "user", None)
        return user if isinstance(user, CurrentUser) else None

    def current_user_id(self) -> Optional[int]:
        user = self.user
        return user.id if user else None

    def current_username(self) -> Optional[str]:
        user = self.user
        return user.username if user else None

    def current_role(self) -> Optional[str]:
        user = self.user
        return user.role if user else None

    def is_authenticated(self) -> bool:
        return self.user is not None


# --- FastAPI dependencies ---

def get_current_user_provider(request: Request) -> CurrentUserProvider:
    """Dependency: provider bound to the current request."""
    return RequestUserProvider(request)

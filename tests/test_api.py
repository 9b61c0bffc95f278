"""Health endpoint, error mapping and current-user providers."""
import json
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from framework.exceptions.errors import (
    AlreadyInTransaction,
    ConstraintViolation,
    InvalidQuery,
    StoreUnavailable,
)
from framework.exceptions.handler import global_exception_handler
from framework.middleware.logging_md import TRACE_HEADER
from framework.security import (
    CurrentUser,
    CurrentUserProvider,
    RequestUserProvider,
    StaticUserProvider,
)


def _request(**state):
    return SimpleNamespace(state=SimpleNamespace(**state))


def _body(response) -> dict:
    return json.loads(response.body)


class TestHealth:
    """Test the health endpoint."""

    @pytest.mark.asyncio
    async def test_health_ok(self, client: AsyncClient):
        response = await client.get("/api/v1/health", headers={TRACE_HEADER: "trace-123"})

        assert response.status_code == 200
        data = response.json()
        assert data["code"] == 200
        assert data["data"] == {"database": "ok"}
        assert response.headers[TRACE_HEADER] == "trace-123"

    @pytest.mark.asyncio
    async def test_trace_id_generated_when_missing(self, client: AsyncClient):
        response = await client.get("/api/v1/health")

        assert len(response.headers[TRACE_HEADER]) == 32

    @pytest.mark.asyncio
    async def test_unreachable_database_maps_to_503(self, tmp_path):
        from main import app
        from apps.forum.api.router import get_db

        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'nowhere' / 'forum.db'}")
        factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

        async def _get_db():
            yield factory()

        app.dependency_overrides[get_db] = _get_db
        try:
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                response = await ac.get("/api/v1/health")
        finally:
            app.dependency_overrides.clear()
            await engine.dispose()

        assert response.status_code == 503
        assert response.json()["code"] == 503


class TestExceptionHandler:
    """Persistence errors map onto HTTP responses."""

    def test_store_unavailable(self):
        response = global_exception_handler(_request(trace_id="t1"), StoreUnavailable("down"))
        assert response.status_code == 503

    def test_constraint_violation_carries_detail(self):
        exc = ConstraintViolation("rejected", detail="UNIQUE constraint failed: users.username")
        response = global_exception_handler(_request(trace_id="t2"), exc)

        assert response.status_code == 409
        assert _body(response)["data"] == "UNIQUE constraint failed: users.username"

    def test_invalid_query(self):
        response = global_exception_handler(_request(), InvalidQuery("User has no attribute 'nickname'"))

        assert response.status_code == 400
        assert _body(response)["message"] == "User has no attribute 'nickname'"

    def test_transaction_misuse_is_internal(self):
        response = global_exception_handler(_request(), AlreadyInTransaction("twice"))
        assert response.status_code == 500

    def test_uncaught_exception(self):
        response = global_exception_handler(_request(trace_id="t3"), RuntimeError("boom"))

        assert response.status_code == 500
        assert _body(response)["code"] == 500


class TestUserProviders:
    """Current-user providers."""

    def test_static_provider(self, test_user: CurrentUser):
        provider = StaticUserProvider(test_user)

        assert isinstance(provider, CurrentUserProvider)
        assert provider.current_user_id() == 7
        assert provider.current_username() == "moderator"
        assert provider.current_role() == "MODERATOR"
        assert provider.is_authenticated() is True

    def test_system_provider_is_anonymous(self):
        provider = StaticUserProvider.system()

        assert provider.current_user_id() is None
        assert provider.is_authenticated() is False

    def test_request_provider_reads_request_state(self, test_user: CurrentUser):
        assert RequestUserProvider(_request(user=test_user)).current_user_id() == 7
        assert RequestUserProvider(_request()).current_user_id() is None
        assert RequestUserProvider(_request(user={"id": 1})).is_authenticated() is False

"""
Audit envelope stamping performed by PersistenceSession on flush.
"""
from datetime import datetime, timezone

import pytest

from apps.forum.models import Category, User
from framework.database.entity import as_utc, utcnow
from framework.database.session import EntityState, PersistenceSession
from framework.security import CurrentUser, StaticUserProvider


class CountingProvider(StaticUserProvider):
    def __init__(self, user):
        super().__init__(user)
        self.calls = 0

    def current_user_id(self):
        self.calls += 1
        return super().current_user_id()


@pytest.mark.asyncio
async def test_created_entity_has_equal_timestamps_near_now(uow, new_user):
    before = utcnow()
    user = uow.users.add(new_user())
    written = await uow.save_changes()
    after = utcnow()

    assert written == 1
    assert user.id is not None
    assert user.created_at == user.updated_at
    assert before <= user.created_at <= after
    assert user.created_user_id == 7
    assert user.updated_user_id == 7
    assert user.audit_violations() == []


@pytest.mark.asyncio
async def test_update_advances_updated_at_and_keeps_created_at(uow, new_user):
    user = uow.users.add(new_user())
    await uow.save_changes()
    created_at, first_update = user.created_at, user.updated_at

    user.first_name = "Alicia"
    uow.users.update(user)
    await uow.save_changes()

    assert user.created_at == created_at
    assert user.updated_at > first_update
    assert user.updated_user_id == 7
    assert user.audit_violations() == []


@pytest.mark.asyncio
async def test_updated_at_strictly_increases_with_a_frozen_clock(uow, new_user):
    frozen = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    uow.persistence.clock = lambda: frozen

    user = uow.users.add(new_user())
    await uow.save_changes()
    assert user.updated_at == frozen

    stamps = []
    for name in ("B", "C", "D"):
        user.first_name = name
        uow.users.update(user)
        await uow.save_changes()
        stamps.append(user.updated_at)

    assert stamps == sorted(set(stamps))
    assert stamps[0] > frozen
    assert user.created_at == frozen


@pytest.mark.asyncio
async def test_update_by_another_principal(open_uow, new_user):
    async with open_uow() as first:
        user = first.users.add(new_user())
        await first.save_changes()
        user_id = user.id

    editor = StaticUserProvider(CurrentUser(id=42, username="editor"))
    async with open_uow(editor) as second:
        loaded = await second.users.get_by_id(user_id)
        loaded.last_name = "Edited"
        second.users.update(loaded)
        await second.save_changes()

        assert loaded.created_user_id == 7
        assert loaded.updated_user_id == 42
        assert as_utc(loaded.updated_at) > as_utc(loaded.created_at)


@pytest.mark.asyncio
async def test_system_actor_stamps_null_principal(open_uow, new_user):
    async with open_uow(StaticUserProvider.system()) as unit:
        user = unit.users.add(new_user())
        await unit.save_changes()

        assert user.created_user_id is None
        assert user.updated_user_id is None
        assert user.created_at == user.updated_at


@pytest.mark.asyncio
async def test_current_user_resolved_once_per_flush(open_uow, new_user, test_user):
    provider = CountingProvider(test_user)
    async with open_uow(provider) as unit:
        unit.users.add(new_user("a"))
        unit.users.add(new_user("b"))
        unit.categories.add(Category(title="News", slug="news"))
        await unit.save_changes()

    assert provider.calls == 1


@pytest.mark.asyncio
async def test_entities_untouched_without_pending_intent(open_uow, new_user):
    async with open_uow() as unit:
        alice = unit.users.add(new_user("alice"))
        await unit.save_changes()
        alice_id, updated_at = alice.id, alice.updated_at

        # mutated but never passed to update(): not stamped, not written
        alice.first_name = "Ignored"
        assert await unit.save_changes() == 0

        unit.users.add(new_user("bob"))
        assert await unit.save_changes() == 1
        assert alice.first_name == "Alice"
        assert as_utc(alice.updated_at) == updated_at

    async with open_uow() as fresh:
        stored = await fresh.users.get_by_id(alice_id)
        assert stored.first_name == "Alice"
        assert as_utc(stored.updated_at) == updated_at


@pytest.mark.asyncio
async def test_commit_does_not_write_untracked_changes(open_uow, new_user):
    async with open_uow() as unit:
        alice = unit.users.add(new_user("alice"))
        await unit.save_changes()

        await unit.begin_transaction()
        alice.last_name = "Untracked"
        await unit.commit_transaction()
        alice_id = alice.id

    async with open_uow() as fresh:
        assert (await fresh.users.get_by_id(alice_id)).last_name == "Tester"


@pytest.mark.asyncio
async def test_repeated_intents_collapse(uow, new_user):
    user = new_user()
    persistence: PersistenceSession = uow.persistence

    uow.users.add(user)
    uow.users.update(user)
    uow.users.remove(user)

    assert len(persistence.pending) == 1
    assert persistence.pending[0].state is EntityState.ADDED


@pytest.mark.asyncio
async def test_soft_delete_wins_over_later_update(uow, new_user):
    user = uow.users.add(new_user())
    await uow.save_changes()

    uow.users.remove(user)
    uow.users.update(user)
    assert uow.persistence.pending[0].state is EntityState.SOFT_DELETED

    await uow.save_changes()
    assert user.deleted_user_id == 7


@pytest.mark.asyncio
async def test_created_already_deleted_carries_deleter(uow, new_user):
    user = new_user()
    uow.users.add(user)
    uow.users.remove(user)
    await uow.save_changes()

    assert user.is_deleted
    assert user.deleted_date is not None
    assert user.deleted_user_id == 7
    assert await uow.users.get_by_id(user.id) is None


def test_audit_violations_detects_broken_envelope():
    user = User(
        first_name="X",
        last_name="Y",
        username="x",
        email="x@example.com",
        password_hash="h",
        created_at=datetime(2026, 2, 1, tzinfo=timezone.utc),
        updated_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        deleted_user_id=3,
    )

    problems = user.audit_violations()

    assert "created_at is after updated_at" in problems
    assert "deleted_user_id set on a live entity" in problems


def test_mark_deleted_is_one_way():
    user = User(first_name="X", last_name="Y", username="x", email="x@example.com", password_hash="h")
    at = datetime(2026, 3, 1, tzinfo=timezone.utc)

    assert user.mark_deleted(at) is True
    assert user.mark_deleted() is False
    assert user.deleted_date == at
    assert user.recstatus is False

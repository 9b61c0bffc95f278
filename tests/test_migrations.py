"""The Alembic schema matches the SQLModel metadata."""
import importlib.util
from pathlib import Path

import pytest
import sqlalchemy as sa
from sqlmodel import SQLModel

import apps.models  # noqa: F401

MIGRATION = Path(__file__).resolve().parents[1] / "alembic" / "versions" / "001_forum_schema.py"


class RecordingOp:
    """Stands in for ``alembic.op`` and records schema operations."""

    def __init__(self):
        self.tables = {}
        self.indexes = []
        self.dropped = []

    def f(self, name):
        return name

    def create_table(self, name, *items, **kw):
        self.tables[name] = [item.name for item in items if isinstance(item, sa.Column)]

    def create_index(self, name, table, columns, unique=False):
        self.indexes.append((name, table, tuple(columns), unique))

    def drop_table(self, name):
        self.dropped.append(name)


@pytest.fixture
def migration():
    module_spec = importlib.util.spec_from_file_location("forum_schema_001", MIGRATION)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    module.op = RecordingOp()
    return module


def test_upgrade_creates_every_model_table(migration):
    migration.upgrade()

    assert set(migration.op.tables) == set(SQLModel.metadata.tables)
    for name, columns in migration.op.tables.items():
        expected = {column.name for column in SQLModel.metadata.tables[name].columns}
        assert set(columns) == expected, name
        assert len(columns) == len(set(columns)), name


def test_every_table_indexes_soft_delete_flag(migration):
    migration.upgrade()

    flagged = {table for _, table, columns, _ in migration.op.indexes if columns == ("is_deleted",)}
    assert flagged == set(migration.op.tables)


def test_downgrade_drops_in_reverse_order(migration):
    migration.upgrade()
    migration.downgrade()

    assert migration.op.dropped == list(reversed(list(migration.op.tables)))

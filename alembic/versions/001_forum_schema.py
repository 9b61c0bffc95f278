"""forum schema with audit envelope

Revision ID: 001
Revises: 
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import List, Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns() -> List[sa.Column]:
    """Identity, provenance and soft-delete columns shared by every table."""
    return [
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_user_id', sa.Integer(), nullable=True),
        sa.Column('updated_user_id', sa.Integer(), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deleted_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_user_id', sa.Integer(), nullable=True),
        sa.Column('recstatus', sa.Boolean(), nullable=False, server_default=sa.true()),
    ]


def _index(table: str, *columns: str, unique: bool = False) -> None:
    op.create_index(op.f(f"ix_{table}_{'_'.join(columns)}"), table, list(columns), unique=unique)


def upgrade() -> None:
    op.create_table(
        'users',
        *_audit_columns(),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('profile_img', sa.String(length=500), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='USER'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('email_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
        sa.UniqueConstraint('email'),
    )
    _index('users', 'username', unique=True)
    _index('users', 'email', unique=True)
    _index('users', 'is_deleted')

    op.create_table(
        'clubs',
        *_audit_columns(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('slug', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('logo_url', sa.String(length=500), nullable=True),
        sa.Column('banner_url', sa.String(length=500), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('requires_approval', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('member_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('founder_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['founder_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug'),
    )
    _index('clubs', 'slug', unique=True)
    _index('clubs', 'founder_id')
    _index('clubs', 'is_deleted')

    op.create_table(
        'categories',
        *_audit_columns(),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('slug', sa.String(length=120), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('club_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug'),
    )
    _index('categories', 'slug', unique=True)
    _index('categories', 'club_id')
    _index('categories', 'is_deleted')

    op.create_table(
        'threads',
        *_audit_columns(),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_solved', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_locked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('post_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    _index('threads', 'user_id')
    _index('threads', 'category_id')
    _index('threads', 'is_deleted')

    op.create_table(
        'posts',
        *_audit_columns(),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('img', sa.String(length=500), nullable=True),
        sa.Column('is_solution', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('upvote_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('thread_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('parent_post_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['thread_id'], ['threads.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['parent_post_id'], ['posts.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    _index('posts', 'thread_id')
    _index('posts', 'user_id')
    _index('posts', 'parent_post_id')
    _index('posts', 'is_deleted')

    op.create_table(
        'post_votes',
        *_audit_columns(),
        sa.Column('post_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('post_id', 'user_id', name='uq_post_votes_post_user'),
    )
    _index('post_votes', 'post_id')
    _index('post_votes', 'user_id')
    _index('post_votes', 'is_deleted')

    op.create_table(
        'notifications',
        *_audit_columns(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('actor_user_id', sa.Integer(), nullable=True),
        sa.Column('type', sa.String(length=30), nullable=False),
        sa.Column('message', sa.String(length=500), nullable=False),
        sa.Column('thread_id', sa.Integer(), nullable=True),
        sa.Column('post_id', sa.Integer(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['actor_user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['thread_id'], ['threads.id'], ),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    _index('notifications', 'user_id')
    _index('notifications', 'is_read')
    _index('notifications', 'is_deleted')

    op.create_table(
        'reports',
        *_audit_columns(),
        sa.Column('reporter_id', sa.Integer(), nullable=False),
        sa.Column('reported_user_id', sa.Integer(), nullable=True),
        sa.Column('reported_post_id', sa.Integer(), nullable=True),
        sa.Column('reported_thread_id', sa.Integer(), nullable=True),
        sa.Column('reason', sa.String(length=30), nullable=False),
        sa.Column('description', sa.String(length=1000), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='PENDING'),
        sa.Column('reviewed_by_user_id', sa.Integer(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('admin_note', sa.String(length=1000), nullable=True),
        sa.ForeignKeyConstraint(['reporter_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['reported_user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['reported_post_id'], ['posts.id'], ),
        sa.ForeignKeyConstraint(['reported_thread_id'], ['threads.id'], ),
        sa.ForeignKeyConstraint(['reviewed_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    _index('reports', 'reporter_id')
    _index('reports', 'status')
    _index('reports', 'is_deleted')

    op.create_table(
        'user_bans',
        *_audit_columns(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('banned_by_user_id', sa.Integer(), nullable=False),
        sa.Column('reason', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('banned_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['banned_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    _index('user_bans', 'user_id')
    _index('user_bans', 'is_deleted')

    op.create_table(
        'user_mutes',
        *_audit_columns(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('muted_by_user_id', sa.Integer(), nullable=False),
        sa.Column('reason', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('muted_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['muted_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    _index('user_mutes', 'user_id')
    _index('user_mutes', 'is_deleted')

    op.create_table(
        'password_reset_tokens',
        *_audit_columns(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_used', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('request_ip', sa.String(length=45), nullable=True),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('token'),
    )
    _index('password_reset_tokens', 'token', unique=True)
    _index('password_reset_tokens', 'user_id')
    _index('password_reset_tokens', 'is_deleted')

    op.create_table(
        'audit_logs',
        *_audit_columns(),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('username', sa.String(length=50), nullable=True),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('entity_type', sa.String(length=100), nullable=True),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('old_value', sa.Text(), nullable=True),
        sa.Column('new_value', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('success', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('error_message', sa.String(length=1000), nullable=True),
        sa.Column('notes', sa.String(length=1000), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    _index('audit_logs', 'user_id')
    _index('audit_logs', 'action')
    _index('audit_logs', 'is_deleted')

    op.create_table(
        'club_memberships',
        *_audit_columns(),
        sa.Column('club_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='MEMBER'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='PENDING'),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('join_note', sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    _index('club_memberships', 'club_id')
    _index('club_memberships', 'user_id')
    _index('club_memberships', 'is_deleted')

    op.create_table(
        'club_requests',
        *_audit_columns(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=1000), nullable=False),
        sa.Column('purpose', sa.String(length=1000), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='PENDING'),
        sa.Column('requested_by_user_id', sa.Integer(), nullable=False),
        sa.Column('reviewed_by_user_id', sa.Integer(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(['requested_by_user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['reviewed_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    _index('club_requests', 'requested_by_user_id')
    _index('club_requests', 'is_deleted')


def downgrade() -> None:
    # Drop in reverse dependency order; indexes go with their tables
    for table in (
        'club_requests',
        'club_memberships',
        'audit_logs',
        'password_reset_tokens',
        'user_mutes',
        'user_bans',
        'reports',
        'notifications',
        'post_votes',
        'posts',
        'threads',
        'categories',
        'clubs',
        'users',
    ):
        op.drop_table(table)

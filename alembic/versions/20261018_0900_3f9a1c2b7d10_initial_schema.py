"""initial_schema

Revision ID: 3f9a1c2b7d10
Revises: 
Create Date: 2026-10-18 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

# revision identifiers, used by Alembic.
revision: str = '3f9a1c2b7d10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Enums are stored as VARCHAR(32)
ENUM = sa.String(length=32)


def _id() -> sa.Column:
    return sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()'))


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _deleted_at() -> sa.Column:
    return sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True)


def _fk(name: str, target: str, ondelete: str | None = None, nullable: bool = False) -> sa.Column:
    return sa.Column(name, UUID(as_uuid=True), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable)


def _org_product() -> list[sa.Column]:
    return [
        _fk('org_id', 'organizations.id', 'CASCADE'),
        _fk('product_id', 'products.id', 'CASCADE'),
    ]


# Tables in creation order; soft-deletable tenant tables get org/deleted_at indexes
SOFT_DELETE_TABLES = [
    'products', 'ideas', 'sprints', 'tasks', 'releases', 'checklist_items',
    'okrs', 'key_results', 'roadmap_items', 'experiments',
]


def upgrade() -> None:
    """Create the full ProdMatic schema."""
    op.create_table(
        'users',
        _id(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=False),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'organizations',
        _id(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('slug', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
        _deleted_at(),
    )
    op.create_index('ix_organizations_slug', 'organizations', ['slug'], unique=True)
    op.create_index('ix_organizations_deleted_at', 'organizations', ['deleted_at'])

    op.create_table(
        'org_members',
        _id(),
        _fk('org_id', 'organizations.id', 'CASCADE'),
        _fk('user_id', 'users.id', 'CASCADE'),
        sa.Column('role', ENUM, nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('org_id', 'user_id', name='uq_org_members_org_user'),
    )
    op.create_index('ix_org_members_org_id', 'org_members', ['org_id'])
    op.create_index('ix_org_members_user_id', 'org_members', ['user_id'])

    op.create_table(
        'invitations',
        _id(),
        _fk('org_id', 'organizations.id', 'CASCADE'),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', ENUM, nullable=False),
        sa.Column('token', sa.String(length=255), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('accepted_at', sa.DateTime(timezone=True), nullable=True),
        _fk('created_by', 'users.id', 'CASCADE'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_invitations_org_id', 'invitations', ['org_id'])
    op.create_index('ix_invitations_email', 'invitations', ['email'])
    op.create_index('ix_invitations_token', 'invitations', ['token'], unique=True)

    op.create_table(
        'activity_log',
        _id(),
        _fk('org_id', 'organizations.id', 'CASCADE'),
        _fk('actor_id', 'users.id', 'CASCADE'),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('entity_type', sa.String(length=50), nullable=False),
        sa.Column('entity_id', UUID(as_uuid=True), nullable=False),
        sa.Column('metadata', JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_activity_log_org_id', 'activity_log', ['org_id'])
    op.create_index('ix_activity_log_actor_id', 'activity_log', ['actor_id'])
    op.create_index('ix_activity_log_created_at', 'activity_log', ['created_at'])
    op.create_index('ix_activity_log_entity', 'activity_log', ['entity_type', 'entity_id'])

    op.create_table(
        'products',
        _id(),
        _fk('org_id', 'organizations.id', 'CASCADE'),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('key', sa.String(length=10), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('vision', sa.Text(), nullable=True),
        sa.Column('lifecycle', ENUM, nullable=False, server_default='ideation'),
        _fk('created_by', 'users.id'),
        *_timestamps(),
        _deleted_at(),
        sa.UniqueConstraint('org_id', 'key', name='uq_products_org_key'),
    )

    op.create_table(
        'ideas',
        _id(),
        *_org_product(),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('problem', sa.Text(), nullable=True),
        sa.Column('hypothesis', sa.Text(), nullable=True),
        sa.Column('source', sa.String(length=100), nullable=True),
        sa.Column('tags', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('priority', ENUM, nullable=False, server_default='medium'),
        sa.Column('status', ENUM, nullable=False, server_default='submitted'),
        sa.Column('reach', sa.Integer(), nullable=True),
        sa.Column('impact', sa.Integer(), nullable=True),
        sa.Column('confidence', sa.Integer(), nullable=True),
        sa.Column('effort', sa.Integer(), nullable=True),
        sa.Column('votes', sa.Integer(), nullable=False, server_default='0'),
        _fk('created_by', 'users.id'),
        *_timestamps(),
        _deleted_at(),
    )
    op.create_index('ix_ideas_created_by', 'ideas', ['created_by'])

    op.create_table(
        'sprints',
        _id(),
        *_org_product(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('goal', sa.Text(), nullable=True),
        sa.Column('status', ENUM, nullable=False, server_default='planned'),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('velocity', sa.Integer(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        _deleted_at(),
    )

    op.create_table(
        'tasks',
        _id(),
        *_org_product(),
        _fk('sprint_id', 'sprints.id', 'SET NULL', nullable=True),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', ENUM, nullable=False, server_default='task'),
        sa.Column('priority', ENUM, nullable=False, server_default='medium'),
        sa.Column('status', ENUM, nullable=False, server_default='new'),
        sa.Column('effort', sa.Integer(), nullable=True),
        sa.Column('time_estimate', sa.Float(), nullable=True),
        sa.Column('time_spent', sa.Float(), nullable=False, server_default='0'),
        sa.Column('acceptance_criteria', sa.Text(), nullable=True),
        _fk('assignee_id', 'users.id', 'SET NULL', nullable=True),
        _fk('created_by', 'users.id'),
        *_timestamps(),
        _deleted_at(),
    )
    op.create_index('ix_tasks_sprint_id', 'tasks', ['sprint_id'])
    op.create_index('ix_tasks_assignee_id', 'tasks', ['assignee_id'])

    op.create_table(
        'releases',
        _id(),
        *_org_product(),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('version', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('type', ENUM, nullable=False, server_default='minor'),
        sa.Column('status', ENUM, nullable=False, server_default='planned'),
        sa.Column('release_date', sa.DateTime(timezone=True), nullable=True),
        _fk('created_by', 'users.id'),
        *_timestamps(),
        _deleted_at(),
    )

    op.create_table(
        'checklist_items',
        _id(),
        _fk('org_id', 'organizations.id', 'CASCADE'),
        _fk('release_id', 'releases.id', 'CASCADE'),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', ENUM, nullable=False, server_default='preparation'),
        sa.Column('is_required', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        _fk('assignee_id', 'users.id', 'SET NULL', nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        *_timestamps(),
        _deleted_at(),
    )
    op.create_index('ix_checklist_items_release_id', 'checklist_items', ['release_id'])

    op.create_table(
        'okrs',
        _id(),
        *_org_product(),
        sa.Column('objective', sa.String(length=300), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('quarter', sa.String(length=2), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        _fk('owner_id', 'users.id', 'SET NULL', nullable=True),
        sa.Column('status', ENUM, nullable=False, server_default='active'),
        sa.Column('progress', sa.Float(), nullable=False, server_default='0'),
        _fk('created_by', 'users.id'),
        *_timestamps(),
        _deleted_at(),
    )

    op.create_table(
        'key_results',
        _id(),
        _fk('org_id', 'organizations.id', 'CASCADE'),
        _fk('okr_id', 'okrs.id', 'CASCADE'),
        sa.Column('description', sa.String(length=300), nullable=False),
        sa.Column('target', sa.Float(), nullable=False),
        sa.Column('current', sa.Float(), nullable=False, server_default='0'),
        sa.Column('unit', sa.String(length=50), nullable=True),
        sa.Column('type', ENUM, nullable=False, server_default='increase'),
        sa.Column('status', ENUM, nullable=False, server_default='active'),
        *_timestamps(),
        _deleted_at(),
    )
    op.create_index('ix_key_results_okr_id', 'key_results', ['okr_id'])

    op.create_table(
        'roadmap_items',
        _id(),
        *_org_product(),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', ENUM, nullable=False, server_default='feature'),
        sa.Column('status', ENUM, nullable=False, server_default='planned'),
        sa.Column('lane', ENUM, nullable=False, server_default='later'),
        sa.Column('quarter', sa.String(length=10), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('effort', sa.Integer(), nullable=True),
        sa.Column('confidence', sa.Integer(), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        _fk('created_by', 'users.id'),
        *_timestamps(),
        _deleted_at(),
    )

    op.create_table(
        'experiments',
        _id(),
        *_org_product(),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('hypothesis', sa.Text(), nullable=False),
        sa.Column('type', ENUM, nullable=False, server_default='ab_test'),
        sa.Column('status', ENUM, nullable=False, server_default='draft'),
        sa.Column('audience', sa.String(length=200), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        _fk('owner_id', 'users.id', 'SET NULL', nullable=True),
        sa.Column('metrics', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('variants', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('results', JSONB(), nullable=True),
        sa.Column('conclusion', sa.Text(), nullable=True),
        _fk('created_by', 'users.id'),
        *_timestamps(),
        _deleted_at(),
    )

    for table in SOFT_DELETE_TABLES:
        op.create_index(f'ix_{table}_org_id', table, ['org_id'])
        op.create_index(f'ix_{table}_deleted_at', table, ['deleted_at'])
        if table not in ('products', 'checklist_items', 'key_results'):
            op.create_index(f'ix_{table}_product_id', table, ['product_id'])


def downgrade() -> None:
    """Drop the full ProdMatic schema."""
    for table in reversed(SOFT_DELETE_TABLES):
        op.drop_table(table)
    op.drop_table('activity_log')
    op.drop_table('invitations')
    op.drop_table('org_members')
    op.drop_table('organizations')
    op.drop_table('users')

"""add_teams_documents_and_research

Revision ID: 8c2d4e6f1a35
Revises: 3f9a1c2b7d10
Create Date: 2026-10-18 14:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

# revision identifiers, used by Alembic.
revision: str = '8c2d4e6f1a35'
down_revision: Union[str, None] = '3f9a1c2b7d10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUM = sa.String(length=32)
EMPTY_LIST = sa.text("'[]'::jsonb")
EMPTY_OBJECT = sa.text("'{}'::jsonb")


def _id() -> sa.Column:
    return sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()'))


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    ]


def _fk(name: str, target: str, ondelete: str | None = None, nullable: bool = False) -> sa.Column:
    return sa.Column(name, UUID(as_uuid=True), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable)


def _org_product() -> list[sa.Column]:
    return [
        _fk('org_id', 'organizations.id', 'CASCADE'),
        _fk('product_id', 'products.id', 'CASCADE'),
    ]


PRODUCT_TABLES = [
    'changelogs', 'documents', 'personas', 'feature_flags', 'kpis',
    'customers', 'interviews', 'insights',
]


def upgrade() -> None:
    """Create teams, documents, changelogs, personas, flags, KPIs and research tables."""
    op.create_table(
        'teams',
        _id(),
        _fk('org_id', 'organizations.id', 'CASCADE'),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('slug', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        _fk('created_by', 'users.id'),
        *_timestamps(),
    )
    op.create_index('ix_teams_org_id', 'teams', ['org_id'])
    op.create_index('ix_teams_deleted_at', 'teams', ['deleted_at'])

    op.create_table(
        'team_members',
        _id(),
        _fk('org_id', 'organizations.id', 'CASCADE'),
        _fk('team_id', 'teams.id', 'CASCADE'),
        _fk('user_id', 'users.id', 'CASCADE'),
        sa.Column('role', ENUM, nullable=False, server_default='contributor'),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('team_id', 'user_id', name='uq_team_members_team_user'),
    )
    op.create_index('ix_team_members_org_id', 'team_members', ['org_id'])
    op.create_index('ix_team_members_team_id', 'team_members', ['team_id'])
    op.create_index('ix_team_members_user_id', 'team_members', ['user_id'])

    op.create_table(
        'changelogs',
        _id(),
        *_org_product(),
        _fk('release_id', 'releases.id', 'SET NULL', nullable=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('type', ENUM, nullable=False, server_default='feature'),
        sa.Column('visibility', ENUM, nullable=False, server_default='public'),
        _fk('created_by', 'users.id'),
        *_timestamps(),
    )
    op.create_index('ix_changelogs_release_id', 'changelogs', ['release_id'])

    op.create_table(
        'documents',
        _id(),
        *_org_product(),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('type', ENUM, nullable=False, server_default='prd'),
        sa.Column('status', ENUM, nullable=False, server_default='draft'),
        sa.Column('template', sa.String(length=100), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('review_comment', sa.Text(), nullable=True),
        _fk('author_id', 'users.id'),
        *_timestamps(),
    )

    op.create_table(
        'personas',
        _id(),
        *_org_product(),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('is_primary', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('demographics', JSONB(), nullable=False, server_default=EMPTY_OBJECT),
        *[
            sa.Column(name, JSONB(), nullable=False, server_default=EMPTY_LIST)
            for name in ('goals', 'pains', 'gains', 'behaviors', 'motivations', 'channels')
        ],
        *_timestamps(),
    )

    op.create_table(
        'feature_flags',
        _id(),
        *_org_product(),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('rollout', sa.Float(), nullable=False, server_default='0'),
        sa.Column('targeting', JSONB(), nullable=False, server_default=EMPTY_OBJECT),
        sa.Column('variants', JSONB(), nullable=False, server_default=EMPTY_OBJECT),
        _fk('created_by', 'users.id'),
        *_timestamps(),
    )
    op.create_index('ix_feature_flags_product_key', 'feature_flags', ['product_id', 'key'])

    op.create_table(
        'kpis',
        _id(),
        *_org_product(),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('metric', sa.String(length=200), nullable=False),
        sa.Column('target', sa.Float(), nullable=False),
        sa.Column('frequency', ENUM, nullable=False, server_default='monthly'),
        _fk('owner_id', 'users.id', 'SET NULL', nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'customers',
        _id(),
        *_org_product(),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('company', sa.String(length=200), nullable=True),
        sa.Column('segment', sa.String(length=100), nullable=True),
        sa.Column('attributes', JSONB(), nullable=False, server_default=EMPTY_OBJECT),
        *_timestamps(),
    )

    op.create_table(
        'interviews',
        _id(),
        *_org_product(),
        _fk('customer_id', 'customers.id', 'CASCADE'),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('location', sa.String(length=200), nullable=True),
        sa.Column('status', ENUM, nullable=False, server_default='scheduled'),
        sa.Column('objectives', JSONB(), nullable=False, server_default=EMPTY_LIST),
        sa.Column('questions', JSONB(), nullable=False, server_default=EMPTY_LIST),
        sa.Column('notes', sa.Text(), nullable=True),
        _fk('conductor_id', 'users.id'),
        *_timestamps(),
    )
    op.create_index('ix_interviews_customer_id', 'interviews', ['customer_id'])

    op.create_table(
        'insights',
        _id(),
        *_org_product(),
        _fk('interview_id', 'interviews.id', 'CASCADE'),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('source', ENUM, nullable=False, server_default='interview'),
        sa.Column('impact', ENUM, nullable=False, server_default='medium'),
        sa.Column('confidence', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('tags', JSONB(), nullable=False, server_default=EMPTY_LIST),
        _fk('created_by', 'users.id'),
        *_timestamps(),
    )
    op.create_index('ix_insights_interview_id', 'insights', ['interview_id'])

    for table in PRODUCT_TABLES:
        op.create_index(f'ix_{table}_org_id', table, ['org_id'])
        op.create_index(f'ix_{table}_product_id', table, ['product_id'])
        op.create_index(f'ix_{table}_deleted_at', table, ['deleted_at'])


def downgrade() -> None:
    """Drop the tables added by this revision."""
    for table in reversed(PRODUCT_TABLES):
        op.drop_table(table)
    op.drop_table('team_members')
    op.drop_table('teams')

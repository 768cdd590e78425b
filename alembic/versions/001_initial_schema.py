"""initial schema: users, workspaces, workout plans

Revision ID: 001
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('email', sa.Text(), nullable=False, unique=True),
        sa.Column('username', sa.Text(), nullable=False, unique=True),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('full_name', sa.Text(), nullable=True),
        sa.Column('role', sa.Text(), nullable=False, server_default='client'),
        sa.Column('status', sa.Text(), nullable=False, server_default='active'),
        sa.Column('trainer_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.CheckConstraint("role IN ('admin', 'trainer', 'client')", name='ck_users_role'),
    )
    op.create_index('ix_users_trainer_id', 'users', ['trainer_id'])

    op.create_table(
        'workspaces',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('trainer_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('logo', sa.Text(), nullable=True),
    )
    op.create_index('ix_workspaces_trainer_id', 'workspaces', ['trainer_id'])

    op.create_table(
        'workout_plans',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('workspace_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('workspaces.id', ondelete='CASCADE'), nullable=False),
        sa.Column('trainer_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('client_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('content', postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False, server_default='draft'),
        sa.Column('session_type', sa.Text(), nullable=True),
        sa.Column('generation_provider', sa.Text(), nullable=True),
        sa.Column('notion_page_id', sa.Text(), nullable=True),
        sa.CheckConstraint(
            "status IN ('draft', 'active', 'completed', 'archived')",
            name='ck_workout_plans_status',
        ),
    )
    op.create_index('ix_workout_plans_trainer_id', 'workout_plans', ['trainer_id'])
    op.create_index('ix_workout_plans_client_id', 'workout_plans', ['client_id'])
    op.create_index('ix_workout_plans_workspace_id', 'workout_plans', ['workspace_id'])


def downgrade() -> None:
    op.drop_table('workout_plans')
    op.drop_table('workspaces')
    op.drop_table('users')

"""create users and history_records tables

Revision ID: 4f1d2a7c9b30
Revises:
Create Date: 2026-10-19 10:00:00.000000

Initial schema:
1. users: accounts with their subscription tier
2. history_records: one row per completed AI request, all four kinds in
   one table, with the per-user `saved` flag
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1d2a7c9b30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users and history_records."""
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),

        # Credentials
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),

        # Profile
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('tier', sa.String(length=20), nullable=False, server_default='personal'),

        # Status and timestamps
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),

        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)

    op.create_table(
        'history_records',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('kind', sa.String(length=40), nullable=False),

        # Payloads
        sa.Column('request_summary', sa.JSON(), nullable=False),
        sa.Column('result', sa.JSON(), nullable=False),
        sa.Column('model_id', sa.String(length=40), nullable=True),

        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('saved', sa.Boolean(), nullable=False, server_default=sa.false()),

        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
    )

    # Listing is always "one user's records, newest first", optionally per kind
    op.create_index(op.f('ix_history_records_user_id'), 'history_records', ['user_id'], unique=False)
    op.create_index(op.f('ix_history_records_kind'), 'history_records', ['kind'], unique=False)
    op.create_index(op.f('ix_history_records_timestamp'), 'history_records', ['timestamp'], unique=False)


def downgrade() -> None:
    """Drop history_records and users."""
    op.drop_index(op.f('ix_history_records_timestamp'), table_name='history_records')
    op.drop_index(op.f('ix_history_records_kind'), table_name='history_records')
    op.drop_index(op.f('ix_history_records_user_id'), table_name='history_records')
    op.drop_table('history_records')
    op.drop_index(op.f('ix_users_username'), table_name='users')
    op.drop_table('users')

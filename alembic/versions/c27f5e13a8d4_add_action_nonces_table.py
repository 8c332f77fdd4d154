"""
add action_nonces table

Revision ID: c27f5e13a8d4
Revises: 8b4e6d0a9c12
Create Date: 2026-10-19 09:20:00.000000
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'c27f5e13a8d4'
down_revision: Union[str, None] = '8b4e6d0a9c12'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'action_nonces',
        sa.Column('token', sa.String(64), primary_key=True),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_action_nonces_action', 'action_nonces', ['action'])
    op.create_index('ix_action_nonces_user_id', 'action_nonces', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_action_nonces_user_id', table_name='action_nonces')
    op.drop_index('ix_action_nonces_action', table_name='action_nonces')
    op.drop_table('action_nonces')

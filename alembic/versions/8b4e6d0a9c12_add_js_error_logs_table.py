"""
add js_error_logs table

Revision ID: 8b4e6d0a9c12
Revises: 3f9a1c7d2e01
Create Date: 2026-10-19 09:10:00.000000
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '8b4e6d0a9c12'
down_revision: Union[str, None] = '3f9a1c7d2e01'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'js_error_logs',
        sa.Column('id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), primary_key=True, autoincrement=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('source', sa.Text(), nullable=False),
        sa.Column('lineno', sa.Integer(), nullable=False),
        sa.Column('colno', sa.Integer(), nullable=False),
        sa.Column('stack', sa.Text(), nullable=False),
        sa.Column('user_agent', sa.Text(), nullable=False),
        sa.Column('ip_address', sa.String(100), nullable=False),
        sqlite_autoincrement=True,
    )


def downgrade() -> None:
    op.drop_table('js_error_logs')

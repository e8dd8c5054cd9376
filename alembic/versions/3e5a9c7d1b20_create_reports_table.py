"""create reports table

Revision ID: 3e5a9c7d1b20
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql


# revision identifiers, used by Alembic.
revision: str = '3e5a9c7d1b20'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TIMESTAMP = sa.DateTime(timezone=True).with_variant(mysql.DATETIME(fsp=6), 'mysql')
PRIORITY = sa.Enum('low', 'medium', 'high', name='report_priority')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'reports',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('town', sa.String(length=255), nullable=False, server_default='Unknown'),
        sa.Column('county', sa.String(length=255), nullable=False, server_default='Unknown'),
        sa.Column('country', sa.String(length=255), nullable=False, server_default='Unknown'),
        sa.Column('priority', PRIORITY, nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('reported_at', TIMESTAMP, nullable=False),
        sa.Column('updated_at', TIMESTAMP, nullable=False),
        sa.Column('image_url', sa.String(length=2048), nullable=True),
        sa.Column('recognized_category', sa.String(length=255), nullable=False, server_default='Analysis Pending'),
        sa.Column('is_clean', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint('id'),
    )
    for column in ('id', 'latitude', 'longitude', 'priority', 'email', 'reported_at', 'is_clean'):
        op.create_index(f'ix_reports_{column}', 'reports', [column])


def downgrade() -> None:
    """Downgrade schema."""
    for column in ('is_clean', 'reported_at', 'email', 'priority', 'longitude', 'latitude', 'id'):
        op.drop_index(f'ix_reports_{column}', table_name='reports')
    op.drop_table('reports')
    PRIORITY.drop(op.get_bind(), checkfirst=True)

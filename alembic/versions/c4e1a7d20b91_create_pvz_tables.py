"""create_pvz_tables

Revision ID: c4e1a7d20b91
Revises:
Create Date: 2026-10-19 10:12:31.504118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'c4e1a7d20b91'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('pvz',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('city', sa.String(length=64), nullable=False),
        sa.Column('registered_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table('receptions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('pvz_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['pvz_id'], ['pvz.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_receptions_pvz_id', 'receptions', ['pvz_id'])
    # PVZ당 진행 중 접수는 최대 1개 (At most one in_progress reception per PVZ)
    op.create_index(
        'uq_receptions_active_pvz', 'receptions', ['pvz_id'],
        unique=True,
        postgresql_where=sa.text("status = 'in_progress'"),
        sqlite_where=sa.text("status = 'in_progress'"),
    )
    op.create_table('products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('reception_id', sa.Uuid(), nullable=False),
        sa.Column('type', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['reception_id'], ['receptions.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_products_reception_created', 'products', ['reception_id', 'created_at'])
    op.create_index('ix_products_created_at', 'products', ['created_at'])
    op.create_table('users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('token', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )


def downgrade() -> None:
    op.drop_table('users')
    op.drop_index('ix_products_created_at', table_name='products')
    op.drop_index('ix_products_reception_created', table_name='products')
    op.drop_table('products')
    op.drop_index('uq_receptions_active_pvz', table_name='receptions')
    op.drop_index('ix_receptions_pvz_id', table_name='receptions')
    op.drop_table('receptions')
    op.drop_table('pvz')

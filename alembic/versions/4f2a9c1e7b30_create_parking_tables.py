"""create parking_lots, current_cars and car_history tables

Revision ID: 4f2a9c1e7b30
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f2a9c1e7b30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'parking_lots',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('time_zone', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table(
        'current_cars',
        sa.Column('parking_lot_id', sa.String(length=64), nullable=False),
        sa.Column('unique_code', sa.String(length=64), nullable=False),
        sa.Column('car_number_plate', sa.String(length=64), nullable=False),
        sa.Column('time_of_entry', sa.DateTime(timezone=True), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('parking_lot_id', 'unique_code')
    )
    op.create_index('ix_current_cars_lot_plate', 'current_cars', ['parking_lot_id', 'car_number_plate'], unique=False)
    op.create_table(
        'car_history',
        sa.Column('parking_lot_id', sa.String(length=64), nullable=False),
        sa.Column('unique_code', sa.String(length=64), nullable=False),
        sa.Column('car_number_plate', sa.String(length=64), nullable=False),
        sa.Column('time_of_entry', sa.DateTime(timezone=True), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=False),
        sa.Column('time_of_exit', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('parking_lot_id', 'unique_code')
    )


def downgrade() -> None:
    op.drop_table('car_history')
    op.drop_index('ix_current_cars_lot_plate', table_name='current_cars')
    op.drop_table('current_cars')
    op.drop_table('parking_lots')

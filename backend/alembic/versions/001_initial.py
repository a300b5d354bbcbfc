"""Create workouts, route_points and key_value tables

Revision ID: 001_initial
Revises:
Create Date: 2025-02-02

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'workouts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('provider_id', sa.String(64), nullable=False),
        sa.Column('activity_type', sa.String(32), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('indoor', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_workouts_provider_id', 'workouts', ['provider_id'], unique=True)
    op.create_index('ix_workouts_start_date', 'workouts', ['start_date'])

    op.create_table(
        'route_points',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'workout_id',
            sa.Integer(),
            sa.ForeignKey('workouts.id', ondelete='CASCADE'),
            nullable=False
        ),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('workout_id', 'timestamp', name='uq_route_points_workout_timestamp'),
    )
    op.create_index('ix_route_points_workout_id', 'route_points', ['workout_id'])

    # Durable key-value slots (sync watermark)
    op.create_table(
        'key_value',
        sa.Column('key', sa.String(64), primary_key=True),
        sa.Column('value', sa.Text(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table('key_value')
    op.drop_index('ix_route_points_workout_id', table_name='route_points')
    op.drop_table('route_points')
    op.drop_index('ix_workouts_start_date', table_name='workouts')
    op.drop_index('ix_workouts_provider_id', table_name='workouts')
    op.drop_table('workouts')

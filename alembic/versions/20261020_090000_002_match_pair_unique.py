"""Escaped match ids and one match per season pair.

Revision ID: 002
Revises: 001
Create Date: 2026-10-20 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Widen matches.id for escaped parts and add the pair constraint."""
    with op.batch_alter_table('matches') as batch_op:
        batch_op.alter_column(
            'id',
            existing_type=sa.String(200),
            type_=sa.String(400),
            existing_nullable=False,
        )
        batch_op.create_unique_constraint(
            'uq_matches_season_pair',
            ['season_id', 'user_a_identity', 'user_b_identity'],
        )


def downgrade() -> None:
    """Drop the pair constraint and restore the original id width."""
    with op.batch_alter_table('matches') as batch_op:
        batch_op.drop_constraint('uq_matches_season_pair', type_='unique')
        batch_op.alter_column(
            'id',
            existing_type=sa.String(400),
            type_=sa.String(200),
            existing_nullable=False,
        )

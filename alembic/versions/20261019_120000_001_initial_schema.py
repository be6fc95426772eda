"""Initial schema: users, seasons, crushes, matches and derived stats.

Revision ID: 001
Revises:
Create Date: 2026-10-19 12:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all initial tables."""

    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('handle', sa.String(64), nullable=False),
        sa.Column('display_name', sa.String(100), nullable=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_handle', 'users', ['handle'], unique=True)

    # Seasons table
    op.create_table(
        'seasons',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('default_visibility', sa.String(32), nullable=False, server_default='MUTUAL_ONLY'),
        sa.Column('mutual_reveal_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_seasons_active', 'seasons', ['active'])

    # Crushes table (the ledger)
    op.create_table(
        'crushes',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('season_id', sa.String(64), nullable=False),
        sa.Column('submitter_identity', sa.String(64), nullable=False),
        sa.Column('submitter_user_id', sa.Uuid(), nullable=True),
        sa.Column('submitter_display_name', sa.String(100), nullable=False),
        sa.Column('target_identity', sa.String(64), nullable=False),
        sa.Column('target_display_name', sa.String(100), nullable=False),
        sa.Column('visibility_mode', sa.String(32), nullable=False, server_default='MUTUAL_ONLY'),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('is_mutual', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('withdrawn', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),

        sa.ForeignKeyConstraint(['season_id'], ['seasons.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['submitter_user_id'], ['users.id'], ondelete='SET NULL'),
        sa.CheckConstraint('submitter_identity <> target_identity', name='no_self_crush_check'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'uq_crushes_active_pair',
        'crushes',
        ['season_id', 'submitter_identity', 'target_identity'],
        unique=True,
        postgresql_where=sa.text('NOT withdrawn'),
        sqlite_where=sa.text('NOT withdrawn'),
    )
    op.create_index(
        'ix_crushes_season_target', 'crushes', ['season_id', 'target_identity', 'withdrawn']
    )
    op.create_index('ix_crushes_created_at', 'crushes', ['created_at'])

    # Matches table, keyed by season + sorted pair
    op.create_table(
        'matches',
        sa.Column('id', sa.String(200), nullable=False),
        sa.Column('season_id', sa.String(64), nullable=False),
        sa.Column('user_a_identity', sa.String(64), nullable=False),
        sa.Column('user_b_identity', sa.String(64), nullable=False),
        sa.Column('user_a_display_name', sa.String(100), nullable=False),
        sa.Column('user_b_display_name', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),

        sa.ForeignKeyConstraint(['season_id'], ['seasons.id'], ondelete='CASCADE'),
        sa.CheckConstraint('user_a_identity < user_b_identity', name='user_order_check'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_matches_season_user_a', 'matches', ['season_id', 'user_a_identity'])
    op.create_index('ix_matches_season_user_b', 'matches', ['season_id', 'user_b_identity'])

    # Derived aggregates
    op.create_table(
        'stats_global',
        sa.Column('id', sa.String(16), nullable=False),
        sa.Column('total_users', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_crushes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_matches', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'stats_seasons',
        sa.Column('season_id', sa.String(64), nullable=False),
        sa.Column('total_crushes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_matches', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['season_id'], ['seasons.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('season_id'),
    )
    op.create_table(
        'stats_season_daily',
        sa.Column('season_id', sa.String(64), nullable=False),
        sa.Column('day', sa.String(10), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['season_id'], ['seasons.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('season_id', 'day'),
    )
    op.create_table(
        'stats_season_targets',
        sa.Column('season_id', sa.String(64), nullable=False),
        sa.Column('target_identity', sa.String(64), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['season_id'], ['seasons.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('season_id', 'target_identity'),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('stats_season_targets')
    op.drop_table('stats_season_daily')
    op.drop_table('stats_seasons')
    op.drop_table('stats_global')

    op.drop_index('ix_matches_season_user_b', table_name='matches')
    op.drop_index('ix_matches_season_user_a', table_name='matches')
    op.drop_table('matches')

    op.drop_index('ix_crushes_created_at', table_name='crushes')
    op.drop_index('ix_crushes_season_target', table_name='crushes')
    op.drop_index('uq_crushes_active_pair', table_name='crushes')
    op.drop_table('crushes')

    op.drop_index('ix_seasons_active', table_name='seasons')
    op.drop_table('seasons')

    op.drop_index('ix_users_handle', table_name='users')
    op.drop_table('users')

"""Create players and rounds tables.

Revision ID: initial_001
Revises:
Create Date: 2025-02-03

Players hold cumulative statistics; rounds hold one flag question each with a
frozen snapshot of the country it asked about. A partial unique index keeps at
most one pending round per player.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from countryquiz.migrations.util import get_uuid_type, get_timestamp_default


# revision identifiers, used by Alembic.
revision: str = "initial_001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create quiz tables."""
    uuid_type = get_uuid_type()
    timestamp_default = get_timestamp_default()

    op.create_table(
        'players',
        sa.Column('player_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('external_key', sa.BigInteger(), nullable=False),
        sa.Column('username', sa.String(100), nullable=True),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('total_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('correct_answers', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('incorrect_answers', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=timestamp_default),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=timestamp_default),
        sa.PrimaryKeyConstraint('player_id'),
    )
    op.create_index('ix_players_external_key', 'players', ['external_key'], unique=True)

    op.create_table(
        'rounds',
        sa.Column('round_id', uuid_type, nullable=False),
        sa.Column('player_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=timestamp_default),
        sa.Column('country_code', sa.String(8), nullable=False),
        sa.Column('country_name', sa.String(255), nullable=False),
        sa.Column('flag_url', sa.String(500), nullable=True),
        sa.Column('submitted_answer', sa.String(255), nullable=True),
        sa.Column('is_correct', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('elapsed_seconds', sa.Integer(), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('round_id'),
        sa.ForeignKeyConstraint(['player_id'], ['players.player_id'], ondelete='CASCADE'),
    )
    op.create_index('ix_rounds_player_id', 'rounds', ['player_id'])
    op.create_index('ix_rounds_created_at', 'rounds', ['created_at'])
    op.create_index('ix_rounds_player_status', 'rounds', ['player_id', 'status'])
    op.create_index('ix_rounds_country_code', 'rounds', ['country_code'])
    op.create_index(
        'uq_rounds_pending_player',
        'rounds',
        ['player_id'],
        unique=True,
        sqlite_where=sa.text("status = 'pending'"),
        postgresql_where=sa.text("status = 'pending'"),
    )


def downgrade() -> None:
    """Drop quiz tables."""
    op.drop_index('uq_rounds_pending_player', table_name='rounds')
    op.drop_index('ix_rounds_country_code', table_name='rounds')
    op.drop_index('ix_rounds_player_status', table_name='rounds')
    op.drop_index('ix_rounds_created_at', table_name='rounds')
    op.drop_index('ix_rounds_player_id', table_name='rounds')
    op.drop_table('rounds')

    op.drop_index('ix_players_external_key', table_name='players')
    op.drop_table('players')

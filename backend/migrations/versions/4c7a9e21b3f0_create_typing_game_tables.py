"""create term, room, player, game_record and word_submission tables

Revision ID: 4c7a9e21b3f0
Revises:
Create Date: 2026-10-18 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c7a9e21b3f0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'it_term' not in existing_tables:
        op.create_table(
            'it_term',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('display_text', sa.String(length=128), nullable=False),
            sa.Column('difficulty_id', sa.Integer(), nullable=False),
            sa.Column('category', sa.String(length=64), nullable=True),
            sa.Column('description', sa.Text(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_it_term_display_text', 'it_term', ['display_text'], unique=True)

    if 'room' not in existing_tables:
        op.create_table(
            'room',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('room_code', sa.String(length=4), nullable=True),
            sa.Column('status', sa.String(length=32), nullable=True),
            sa.Column('host_player_id', sa.Integer(), nullable=True),
            sa.Column('time_limit_sec', sa.Integer(), nullable=True),
            sa.Column('max_players', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.Float(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_room_room_code', 'room', ['room_code'], unique=True)

    if 'player' not in existing_tables:
        op.create_table(
            'player',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=64), nullable=False),
            sa.Column('room_id', sa.Integer(), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('combo', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('max_combo', sa.Integer(), nullable=False, server_default='0'),
            sa.ForeignKeyConstraint(['room_id'], ['room.id']),
            sa.PrimaryKeyConstraint('id'),
        )

    if 'game_record' not in existing_tables:
        op.create_table(
            'game_record',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('room_id', sa.Integer(), nullable=False),
            sa.Column('started_at', sa.Float(), nullable=True),
            sa.Column('ended_at', sa.Float(), nullable=True),
            sa.Column('end_reason', sa.String(length=64), nullable=True),
            sa.Column('current_turn_type', sa.String(length=16), nullable=True),
            sa.Column('current_target_word', sa.String(length=128), nullable=True),
            sa.Column('current_constraint_char', sa.String(length=1), nullable=True),
            sa.Column('turn_start_time', sa.Float(), nullable=True),
            sa.Column('turn_sequence_number', sa.Integer(), nullable=False, server_default='0'),
            sa.ForeignKeyConstraint(['room_id'], ['room.id']),
            sa.PrimaryKeyConstraint('id'),
        )

    if 'word_submission' not in existing_tables:
        op.create_table(
            'word_submission',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('game_id', sa.Integer(), nullable=False),
            sa.Column('player_id', sa.Integer(), nullable=False),
            sa.Column('word', sa.String(length=128), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('combo_at_time', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('is_valid', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('turn_type', sa.String(length=16), nullable=False),
            sa.Column('turn_sequence_number', sa.Integer(), nullable=False),
            sa.Column('target_word', sa.String(length=128), nullable=True),
            sa.Column('constraint_char', sa.String(length=1), nullable=True),
            sa.Column('typing_duration_ms', sa.Float(), nullable=True),
            sa.Column('coefficient', sa.Float(), nullable=True),
            sa.Column('submitted_at', sa.Float(), nullable=True),
            sa.ForeignKeyConstraint(['game_id'], ['game_record.id']),
            sa.ForeignKeyConstraint(['player_id'], ['player.id']),
            sa.PrimaryKeyConstraint('id'),
        )


def downgrade():
    op.drop_table('word_submission')
    op.drop_table('game_record')
    op.drop_table('player')
    op.drop_index('ix_room_room_code', table_name='room')
    op.drop_table('room')
    op.drop_index('ix_it_term_display_text', table_name='it_term')
    op.drop_table('it_term')

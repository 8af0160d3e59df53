"""create user, card, game and game_card tables

Revision ID: 5a1c9e7d2b40
Revises:
Create Date: 2026-06-14 10:12:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5a1c9e7d2b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
        )
        op.create_index('ix_user_username', 'user', ['username'], unique=True)

    if 'card' not in existing_tables:
        op.create_table(
            'card',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('name', sa.String(length=128), nullable=False, unique=True),
            sa.Column('image', sa.String(length=256), nullable=False),
            sa.Column('bad_luck_index', sa.Float(), nullable=False, unique=True),
            sa.Column('theme', sa.String(length=64), nullable=False),
        )

    if 'game' not in existing_tables:
        op.create_table(
            'game',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
            sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
            sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
            sa.Column('outcome', sa.String(length=16), nullable=False),
            sa.Column('cards_collected', sa.Integer(), nullable=False),
        )
        op.create_index('ix_game_user_id', 'game', ['user_id'])

    if 'game_card' not in existing_tables:
        op.create_table(
            'game_card',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id', ondelete='CASCADE'), nullable=False),
            sa.Column('card_id', sa.Integer(), sa.ForeignKey('card.id', ondelete='CASCADE'), nullable=False),
            sa.Column('status', sa.String(length=16), nullable=False),
            sa.Column('round', sa.Integer(), nullable=True),
            sa.Column('guess_time', sa.DateTime(timezone=True), nullable=True),
            sa.Column('is_correct_guess', sa.Boolean(), nullable=True),
            sa.UniqueConstraint('game_id', 'card_id', name='uq_game_card_game_card'),
            sa.UniqueConstraint('game_id', 'round', name='uq_game_card_game_round'),
        )
        op.create_index('ix_game_card_game_id', 'game_card', ['game_id'])


def downgrade():
    op.drop_index('ix_game_card_game_id', table_name='game_card')
    op.drop_table('game_card')
    op.drop_index('ix_game_user_id', table_name='game')
    op.drop_table('game')
    op.drop_table('card')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')

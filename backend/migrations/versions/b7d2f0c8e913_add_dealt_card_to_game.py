"""add dealt_card_id to game

Revision ID: b7d2f0c8e913
Revises: 5a1c9e7d2b40
Create Date: 2026-10-19 09:30:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b7d2f0c8e913'
down_revision = '5a1c9e7d2b40'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    cols = {c['name'] for c in insp.get_columns('game')}
    if 'dealt_card_id' not in cols:
        with op.batch_alter_table('game') as batch_op:
            batch_op.add_column(sa.Column('dealt_card_id', sa.Integer(), nullable=True))
            batch_op.create_foreign_key('fk_game_dealt_card_id_card', 'card', ['dealt_card_id'], ['id'])


def downgrade():
    with op.batch_alter_table('game') as batch_op:
        batch_op.drop_constraint('fk_game_dealt_card_id_card', type_='foreignkey')
        batch_op.drop_column('dealt_card_id')

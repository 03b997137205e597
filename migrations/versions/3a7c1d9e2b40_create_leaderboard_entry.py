"""create leaderboard_entry

Revision ID: 3a7c1d9e2b40
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3a7c1d9e2b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'leaderboard_entry',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('wins', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('game_wins', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('leaderboard_entry') as batch_op:
        batch_op.create_index(batch_op.f('ix_leaderboard_entry_username'), ['username'], unique=True)


def downgrade():
    with op.batch_alter_table('leaderboard_entry') as batch_op:
        batch_op.drop_index(batch_op.f('ix_leaderboard_entry_username'))
    op.drop_table('leaderboard_entry')

"""create daily_sleep_quality_table

Revision ID: 5c2a9d7e1b30
Revises:
Create Date: 2026-10-17 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2a9d7e1b30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'daily_sleep_quality_table' in set(insp.get_table_names()):
        return
    op.create_table(
        'daily_sleep_quality_table',
        sa.Column('night_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('start_time_milli', sa.BigInteger(), nullable=False),
        sa.Column('end_time_milli', sa.BigInteger(), nullable=False),
        sa.Column('sleep_quality', sa.Integer(), nullable=False, server_default='-1'),
    )


def downgrade():
    op.drop_table('daily_sleep_quality_table')

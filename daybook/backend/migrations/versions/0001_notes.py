"""notes table

Revision ID: 0001_notes
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '0001_notes'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'notes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('is_pinned', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_archived', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            'tags',
            sa.JSON().with_variant(postgresql.ARRAY(sa.String(length=64)), 'postgresql'),
            nullable=False,
        ),
        sa.Column('author', sa.String(length=100), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notes_date', 'notes', ['date'])
    op.create_index('ix_notes_deleted_at', 'notes', ['deleted_at'])


def downgrade():
    op.drop_index('ix_notes_deleted_at', table_name='notes')
    op.drop_index('ix_notes_date', table_name='notes')
    op.drop_table('notes')

"""create_tags_table

Revision ID: 003_create_tags_table
Revises: 002_add_description_markdown
Create Date: 2026-01-22 10:12:31.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '003_create_tags_table'
down_revision = '002_add_description_markdown'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(255), nullable=True, comment='标签标题'),
        sa.Column('description', sa.Text(), nullable=True, comment='标签说明'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), comment='创建时间'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), comment='更新时间'),
    )


def downgrade() -> None:
    op.drop_table('tags')

"""add_description_markdown_to_projects

Revision ID: 002_add_description_markdown
Revises: 001_create_cms_tables
Create Date: 2026-01-20 14:40:49.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '002_add_description_markdown'
down_revision = '001_create_cms_tables'
branch_labels = None
depends_on = None


def upgrade() -> None:
    # 添加Markdown描述字段
    op.add_column(
        'projects',
        sa.Column('description_markdown', sa.Text(), nullable=True, comment='Markdown描述')
    )


def downgrade() -> None:
    # 删除Markdown描述字段
    op.drop_column('projects', 'description_markdown')

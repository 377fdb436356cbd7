"""create_cms_tables

Revision ID: 001_create_cms_tables
Revises:
Create Date: 2026-01-12 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision = '001_create_cms_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # 创建 technologies 表（name 不设唯一约束，去重由技术提取流程保证）
    op.create_table(
        'technologies',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=True, comment='技术名称'),
        sa.Column('description', sa.Text(), nullable=True, comment='技术描述'),
        sa.Column('link', sa.String(500), nullable=True, comment='官网链接'),
        sa.Column('category', JSONB(), nullable=True, comment='分类列表（backend/cms/database/...）'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), comment='创建时间'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), comment='更新时间'),
    )
    op.create_index('ix_technologies_name', 'technologies', ['name'])

    # 创建 projects 表
    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(255), nullable=True, comment='项目标题'),
        sa.Column('description', JSONB(), nullable=True, comment='富文本描述（Lexical树结构）'),
        sa.Column('live_link', sa.String(500), nullable=True, comment='在线地址'),
        sa.Column('snapshot_link', sa.String(500), nullable=True, comment='快照地址'),
        sa.Column('github_link', sa.String(500), nullable=True, comment='GitHub地址'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), comment='创建时间'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), comment='更新时间'),
    )

    # 创建 project_technologies 关联表
    op.create_table(
        'project_technologies',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('project_id', sa.Integer(), nullable=False, comment='项目ID'),
        sa.Column('technology_id', sa.Integer(), nullable=False, comment='技术ID'),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0', comment='排序位置'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['technology_id'], ['technologies.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('project_id', 'technology_id', name='uq_project_technologies_project_technology'),
    )
    op.create_index('ix_project_technologies_project_id', 'project_technologies', ['project_id'])

    # 创建 users 表
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True, comment='邮箱'),
        sa.Column('api_key', sa.String(255), nullable=True, unique=True, comment='API Key'),
        sa.Column('enable_api_key', sa.Boolean(), nullable=False, server_default='false', comment='是否启用API Key'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), comment='创建时间'),
    )


def downgrade() -> None:
    op.drop_table('users')
    op.drop_index('ix_project_technologies_project_id', table_name='project_technologies')
    op.drop_table('project_technologies')
    op.drop_table('projects')
    op.drop_index('ix_technologies_name', table_name='technologies')
    op.drop_table('technologies')

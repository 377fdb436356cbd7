"""
项目模型
"""
from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB

from app.core.database import Base


class Project(Base):
    """项目表"""
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=True, comment="项目标题")
    description = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True, comment="富文本描述（Lexical树结构）")
    description_markdown = Column(Text, nullable=True, comment="Markdown描述")
    live_link = Column(String(500), nullable=True, comment="在线地址")
    snapshot_link = Column(String(500), nullable=True, comment="快照地址")
    github_link = Column(String(500), nullable=True, comment="GitHub地址")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), comment="创建时间")
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now(), comment="更新时间")

    def __repr__(self):
        return f"<Project(id={self.id}, title={self.title})>"


class ProjectTechnology(Base):
    """
    项目-技术关联表（metadata.technologies）

    position 保存关联顺序
    """
    __tablename__ = "project_technologies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True, comment="项目ID")
    technology_id = Column(Integer, ForeignKey("technologies.id", ondelete="CASCADE"), nullable=False, comment="技术ID")
    position = Column(Integer, nullable=False, default=0, comment="排序位置")

    __table_args__ = (
        UniqueConstraint('project_id', 'technology_id', name='uq_project_technologies_project_technology'),
    )

    def __repr__(self):
        return f"<ProjectTechnology(project_id={self.project_id}, technology_id={self.technology_id}, position={self.position})>"

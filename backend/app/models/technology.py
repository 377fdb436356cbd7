"""
技术模型
"""
from enum import Enum

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB

from app.core.database import Base


class TechnologyCategory(str, Enum):
    """技术分类枚举"""
    BACKEND = "backend"
    CMS = "cms"
    DATABASE = "database"
    DESIGN = "design"
    DEVOPS = "devops"
    FRAMEWORK = "framework"
    FRONTEND = "frontend"
    LANGUAGE = "language"
    TOOL = "tool"


# 分类显示名称（用于提示词和管理界面）
TECHNOLOGY_CATEGORY_LABELS = {
    TechnologyCategory.BACKEND: "Backend",
    TechnologyCategory.CMS: "CMS",
    TechnologyCategory.DATABASE: "Database",
    TechnologyCategory.DESIGN: "Design",
    TechnologyCategory.DEVOPS: "DevOps",
    TechnologyCategory.FRAMEWORK: "Framework",
    TechnologyCategory.FRONTEND: "Frontend",
    TechnologyCategory.LANGUAGE: "Language",
    TechnologyCategory.TOOL: "Tool",
}

CATEGORY_VALUES = [category.value for category in TechnologyCategory]


class Technology(Base):
    """
    技术表

    注意：name 不设唯一约束，大小写不敏感的去重由技术提取流程保证
    """
    __tablename__ = "technologies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=True, index=True, comment="技术名称")
    description = Column(Text, nullable=True, comment="技术描述")
    link = Column(String(500), nullable=True, comment="官网链接")
    category = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True, comment="分类列表（backend/cms/database/...）")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), comment="创建时间")
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now(), comment="更新时间")

    def to_dict(self) -> dict:
        """转换为文档字典"""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "link": self.link,
            "category": list(self.category or []),
        }

    def __repr__(self):
        return f"<Technology(id={self.id}, name={self.name})>"

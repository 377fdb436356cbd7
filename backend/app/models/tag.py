"""
标签模型
"""
from sqlalchemy import Column, DateTime, Integer, String, Text, func

from app.core.database import Base


class Tag(Base):
    """标签表（独立集合，不参与技术提取流程）"""
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=True, comment="标签标题")
    description = Column(Text, nullable=True, comment="标签说明")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), comment="创建时间")
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now(), comment="更新时间")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
        }

    def __repr__(self):
        return f"<Tag(id={self.id}, title={self.title})>"

"""
管理员用户模型
"""
from sqlalchemy import Boolean, Column, DateTime, Integer, String, func

from app.core.database import Base


class User(Base):
    """用户表（仅用于API Key认证）"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, comment="邮箱")
    api_key = Column(String(255), nullable=True, unique=True, comment="API Key")
    enable_api_key = Column(Boolean, nullable=False, default=False, comment="是否启用API Key")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), comment="创建时间")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"

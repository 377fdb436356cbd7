"""
数据模型模块
"""
from app.models.project import Project, ProjectTechnology
from app.models.tag import Tag
from app.models.technology import Technology
from app.models.user import User

__all__ = [
    "Project",
    "ProjectTechnology",
    "Tag",
    "Technology",
    "User",
]

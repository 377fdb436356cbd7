"""
技术提取相关的Pydantic Schema
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, List, Optional


class ExtractResult(BaseModel):
    """技术提取结果（不持久化）"""
    success: bool
    message: str
    created: List[str] = Field(default_factory=list, description="新创建的技术名称")
    linked: int = Field(0, ge=0, description="项目当前关联的技术数量")
    errors: Optional[List[str]] = Field(None, description="校验/创建错误（仅在非空时返回）")


class ExtractTechnologiesRequest(BaseModel):
    """技术提取请求"""
    model_config = ConfigDict(populate_by_name=True)

    project_id: Optional[int] = Field(None, alias="projectId", description="项目ID")

    @field_validator("project_id", mode="before")
    @classmethod
    def coerce_project_id(cls, value: Any) -> Optional[int]:
        """无法识别为正整数的项目ID视为缺失"""
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value if value > 0 else None
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip()) or None
        return None


class ExtractTechnologiesResponse(BaseModel):
    """技术提取响应"""
    created: List[str]
    errors: Optional[List[str]] = None
    linked: int
    message: str


class TechnologyResponse(BaseModel):
    """技术信息响应"""
    id: int
    name: Optional[str] = None
    description: Optional[str] = None
    link: Optional[str] = None
    category: List[str] = Field(default_factory=list)


class TechnologyListResponse(BaseModel):
    """技术目录响应"""
    items: List[TechnologyResponse]
    total: int


class TechnologyCategoryItem(BaseModel):
    """技术分类项"""
    value: str
    label: str


class TagResponse(BaseModel):
    """标签信息响应"""
    id: int
    title: Optional[str] = None
    description: Optional[str] = None


class TagListResponse(BaseModel):
    """标签列表响应"""
    items: List[TagResponse]
    total: int

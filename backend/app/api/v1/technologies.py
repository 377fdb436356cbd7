"""
技术提取与技术目录API
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.api.deps import get_current_user
from app.core.database import get_db
from app.models.technology import TECHNOLOGY_CATEGORY_LABELS
from app.models.user import User
from app.schemas.technology import (
    ExtractTechnologiesRequest,
    ExtractTechnologiesResponse,
    TagListResponse,
    TagResponse,
    TechnologyCategoryItem,
    TechnologyListResponse,
    TechnologyResponse,
)
from app.services.claude_client import ClaudeClient, get_claude_client
from app.services.document_store import TAGS, TECHNOLOGIES, SQLAlchemyDocumentStore
from app.services.technology_extraction import extract_technologies_from_project

logger = structlog.get_logger()
router = APIRouter(tags=["technologies"])


@router.post("/extract-technologies", response_model=ExtractTechnologiesResponse)
async def extract_technologies(
    request: Optional[ExtractTechnologiesRequest] = Body(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    claude_client: ClaudeClient = Depends(get_claude_client)
):
    """从项目描述中提取技术并关联到项目"""
    if request is None or not request.project_id:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Project ID required"},
        )

    try:
        result = await extract_technologies_from_project(
            request.project_id,
            store=SQLAlchemyDocumentStore(db),
            claude_client=claude_client,
        )
    except Exception as e:
        logger.error("技术提取接口异常", project_id=request.project_id, error=str(e))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": str(e) or "Extraction failed"},
        )

    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"errors": result.errors, "message": result.message},
        )

    logger.info("技术提取接口完成", project_id=request.project_id, user_id=user.id, created=len(result.created))
    return ExtractTechnologiesResponse(
        created=result.created,
        errors=result.errors,
        linked=result.linked,
        message=result.message,
    )


@router.get("/technologies", response_model=TechnologyListResponse)
async def list_technologies(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """获取技术目录"""
    result = await SQLAlchemyDocumentStore(db).find(TECHNOLOGIES, limit=0)
    items = [TechnologyResponse(**doc) for doc in result["docs"]]
    return TechnologyListResponse(items=items, total=result["total_docs"])


@router.get("/technologies/categories", response_model=list[TechnologyCategoryItem])
async def list_technology_categories(user: User = Depends(get_current_user)):
    """获取技术分类枚举"""
    return [
        TechnologyCategoryItem(value=category.value, label=label)
        for category, label in TECHNOLOGY_CATEGORY_LABELS.items()
    ]


@router.get("/tags", response_model=TagListResponse)
async def list_tags(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """获取标签列表"""
    result = await SQLAlchemyDocumentStore(db).find(TAGS, limit=0)
    items = [TagResponse(**doc) for doc in result["docs"]]
    return TagListResponse(items=items, total=result["total_docs"])

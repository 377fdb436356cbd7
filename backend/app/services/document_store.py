"""
文档存储服务
- 以集合（projects / technologies / tags）为单位提供 find_by_id / find / create / update
- 返回普通字典，技术提取流程不直接依赖ORM模型
"""
from typing import Any, Dict, List, Optional
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.models.project import Project, ProjectTechnology
from app.models.tag import Tag
from app.models.technology import Technology

logger = structlog.get_logger()

PROJECTS = "projects"
TECHNOLOGIES = "technologies"
TAGS = "tags"


class DocumentStore:
    """文档存储接口"""

    async def find_by_id(self, collection: str, doc_id: Any) -> Optional[Dict]:
        """按ID获取文档，不存在时返回None"""
        raise NotImplementedError

    async def find(
        self,
        collection: str,
        limit: int = 0,
        where: Optional[Dict[str, Any]] = None
    ) -> Dict:
        """查询文档，limit=0 表示不限制数量，返回 {"docs": [...], "total_docs": n}"""
        raise NotImplementedError

    async def create(self, collection: str, data: Dict) -> Dict:
        """创建文档，返回创建后的文档"""
        raise NotImplementedError

    async def update(self, collection: str, doc_id: Any, data: Dict) -> Dict:
        """更新文档，返回更新后的文档"""
        raise NotImplementedError


class SQLAlchemyDocumentStore(DocumentStore):
    """
    基于SQLAlchemy异步会话的文档存储

    每次 create / update 独立提交，失败时回滚，不影响之前已提交的操作
    """

    TECHNOLOGY_FIELDS = ("name", "description", "link", "category")
    PROJECT_FIELDS = ("title", "description", "description_markdown", "live_link", "snapshot_link", "github_link")
    TAG_FIELDS = ("title", "description")

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, collection: str, doc_id: Any) -> Optional[Dict]:
        if collection == PROJECTS:
            project = await self.db.get(Project, doc_id)
            if project is None:
                return None
            return await self._project_to_dict(project)

        if collection == TECHNOLOGIES:
            technology = await self.db.get(Technology, doc_id)
            return technology.to_dict() if technology else None

        if collection == TAGS:
            tag = await self.db.get(Tag, doc_id)
            return tag.to_dict() if tag else None

        raise ValueError(f"未知的集合: {collection}")

    async def find(
        self,
        collection: str,
        limit: int = 0,
        where: Optional[Dict[str, Any]] = None
    ) -> Dict:
        model = self._get_model(collection)

        query = select(model).order_by(model.id)
        for field, value in (where or {}).items():
            column = getattr(model, field, None)
            if column is None:
                raise ValueError(f"集合 {collection} 不存在字段: {field}")
            query = query.where(column == value)
        if limit and limit > 0:
            query = query.limit(limit)

        result = await self.db.execute(query)
        rows = result.scalars().all()

        if collection == PROJECTS:
            docs = [await self._project_to_dict(row) for row in rows]
        else:
            docs = [row.to_dict() for row in rows]

        return {"docs": docs, "total_docs": len(docs)}

    async def create(self, collection: str, data: Dict) -> Dict:
        if collection == TECHNOLOGIES:
            instance = Technology(**self._pick(data, self.TECHNOLOGY_FIELDS))
        elif collection == PROJECTS:
            instance = Project(**self._pick(data, self.PROJECT_FIELDS))
        elif collection == TAGS:
            instance = Tag(**self._pick(data, self.TAG_FIELDS))
        else:
            raise ValueError(f"未知的集合: {collection}")

        try:
            self.db.add(instance)
            await self.db.flush()
            if collection == PROJECTS:
                technology_ids = (data.get("metadata") or {}).get("technologies")
                if technology_ids is not None:
                    await self._replace_project_technologies(instance.id, technology_ids)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.debug("文档创建成功", collection=collection, doc_id=instance.id)
        return await self.find_by_id(collection, instance.id)

    async def update(self, collection: str, doc_id: Any, data: Dict) -> Dict:
        model = self._get_model(collection)
        instance = await self.db.get(model, doc_id)
        if instance is None:
            raise ValueError(f"文档不存在: {collection}/{doc_id}")

        fields = self._get_fields(collection)
        try:
            for field, value in self._pick(data, fields).items():
                setattr(instance, field, value)

            if collection == PROJECTS and "metadata" in data:
                technology_ids = (data.get("metadata") or {}).get("technologies")
                if technology_ids is not None:
                    await self._replace_project_technologies(doc_id, technology_ids)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.debug("文档更新成功", collection=collection, doc_id=doc_id)
        return await self.find_by_id(collection, doc_id)

    async def _replace_project_technologies(self, project_id: int, technology_ids: List[int]) -> None:
        """整体覆盖项目的技术关联（写入完整列表，而不是追加）"""
        await self.db.execute(
            delete(ProjectTechnology).where(ProjectTechnology.project_id == project_id)
        )
        for position, technology_id in enumerate(technology_ids):
            self.db.add(ProjectTechnology(
                project_id=project_id,
                technology_id=technology_id,
                position=position,
            ))
        await self.db.flush()

    async def _project_to_dict(self, project: Project) -> Dict:
        """项目转换为文档字典，metadata.technologies 为展开后的技术对象"""
        result = await self.db.execute(
            select(Technology)
            .join(ProjectTechnology, ProjectTechnology.technology_id == Technology.id)
            .where(ProjectTechnology.project_id == project.id)
            .order_by(ProjectTechnology.position)
        )
        technologies = [tech.to_dict() for tech in result.scalars().all()]

        return {
            "id": project.id,
            "title": project.title,
            "description": project.description,
            "description_markdown": project.description_markdown,
            "live_link": project.live_link,
            "snapshot_link": project.snapshot_link,
            "github_link": project.github_link,
            "metadata": {"technologies": technologies},
        }

    @staticmethod
    def _get_model(collection: str):
        if collection == PROJECTS:
            return Project
        if collection == TECHNOLOGIES:
            return Technology
        if collection == TAGS:
            return Tag
        raise ValueError(f"未知的集合: {collection}")

    @classmethod
    def _get_fields(cls, collection: str):
        if collection == PROJECTS:
            return cls.PROJECT_FIELDS
        if collection == TAGS:
            return cls.TAG_FIELDS
        return cls.TECHNOLOGY_FIELDS

    @staticmethod
    def _pick(data: Dict, fields) -> Dict:
        return {field: data[field] for field in fields if field in data}

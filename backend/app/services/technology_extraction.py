"""
技术提取服务
- 从项目描述中用AI提取技术名词
- 与现有技术目录去重（大小写不敏感）
- 为新技术获取详细信息、校验并创建
- 将所有技术合并关联到项目
"""
from typing import Any, Dict, List, Optional, Tuple

from pydantic import AnyUrl, TypeAdapter, ValidationError
import structlog

from app.models.technology import CATEGORY_VALUES, TECHNOLOGY_CATEGORY_LABELS
from app.schemas.technology import ExtractResult
from app.services.claude_client import ClaudeClient, get_claude_client, parse_json_from_response
from app.services.document_store import PROJECTS, TECHNOLOGIES, DocumentStore, SQLAlchemyDocumentStore
from app.utils.extraction_exception import ErrorType, ExtractionException
from app.utils.rich_text_utils import extract_text_from_lexical
from app.utils.tech_name_utils import (
    build_name_index,
    dedupe_tech_names,
    merge_technology_ids,
    normalize_tech_name,
    normalize_technology_ids,
)

logger = structlog.get_logger()

MIN_DESCRIPTION_LENGTH = 10

_url_adapter = TypeAdapter(AnyUrl)

# 提取技术名称的输出结构
TECHNOLOGY_NAMES_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "technologies": {
            "type": "array",
            "items": {"type": "string"},
        },
    },
    "required": ["technologies"],
}


def get_technology_details_schema() -> Dict[str, Any]:
    """生成技术详情的输出结构（分类枚举来自技术模型）"""
    return {
        "type": "object",
        "additionalProperties": False,
        "properties": {
            "technologies": {
                "type": "array",
                "items": {
                    "type": "object",
                    "additionalProperties": False,
                    "properties": {
                        "name": {"type": "string"},
                        "category": {
                            "type": "array",
                            "items": {
                                "type": "string",
                                "enum": list(CATEGORY_VALUES),
                            },
                        },
                        "description": {"type": "string"},
                        "link": {"type": "string"},
                    },
                    "required": ["name", "description", "link", "category"],
                },
            },
        },
        "required": ["technologies"],
    }


def assemble_project_text(project: Dict) -> str:
    """
    合并项目的markdown描述和富文本描述

    空的部分会被跳过，两部分之间用空行分隔
    """
    markdown_content = project.get("description_markdown") or ""
    if not isinstance(markdown_content, str):
        markdown_content = ""

    rich_text = project.get("description")
    rich_text_content = extract_text_from_lexical(rich_text) if rich_text else ""

    return "\n\n".join(part for part in (markdown_content, rich_text_content) if part).strip()


def validate_technology(tech: Any) -> Optional[str]:
    """
    校验单个技术详情

    按顺序检查，返回第一个失败规则的错误信息

    Args:
        tech: AI返回的技术详情 {"name", "description", "link", "category"}

    Returns:
        错误信息，校验通过返回None
    """
    if not isinstance(tech, dict):
        return "Technology name is required"

    name = tech.get("name")
    if not isinstance(name, str) or not name.strip():
        return "Technology name is required"

    description = tech.get("description")
    if not isinstance(description, str) or len(description.strip()) < MIN_DESCRIPTION_LENGTH:
        return f'Technology "{name}" has insufficient description (min {MIN_DESCRIPTION_LENGTH} chars)'

    link = tech.get("link")
    if not isinstance(link, str) or not link.strip():
        return f'Technology "{name}" is missing a link'

    try:
        _url_adapter.validate_python(link.strip())
    except ValidationError:
        return f'Technology "{name}" has invalid URL: {link}'

    if not _clean_categories(tech.get("category")):
        return f'Technology "{name}" has no category assigned'

    return None


def _clean_categories(category: Any) -> List[str]:
    """过滤掉不在分类枚举中的值，保持顺序并去重"""
    if isinstance(category, str):
        category = [category]
    if not isinstance(category, list):
        return []
    return list(dict.fromkeys(c for c in category if isinstance(c, str) and c in CATEGORY_VALUES))


class TechnologyExtractionService:
    """技术提取服务"""

    def __init__(self, store: DocumentStore, claude_client: ClaudeClient):
        """
        Args:
            store: 文档存储（projects / technologies）
            claude_client: Claude客户端
        """
        self.store = store
        self.claude_client = claude_client

    async def extract_technology_names(self, text: str) -> List[str]:
        """
        使用AI从项目描述中提取技术名称

        Returns:
            技术名称列表（已按标准化名称去重）
        """
        response = await self.claude_client.send_message(
            [
                {
                    "role": "user",
                    "content": f"""Extract all technology, framework, library, programming language, database, and tool names mentioned in this project description.

The goal is to identify technologies used in the project so they can be:
1. Added to a global technology database (if new)
2. Linked to this project for categorization and filtering
3. Displayed on the project page to show the tech stack

Text:
{text}

Return the technology names as commonly known (e.g., "React", "PostgreSQL", "Docker").""",
                }
            ],
            max_tokens=2048,
            output_schema=TECHNOLOGY_NAMES_SCHEMA,
        )

        result = parse_json_from_response(response, {"technologies": []})
        names = result.get("technologies") if isinstance(result, dict) else None
        if not isinstance(names, list):
            logger.warning("AI返回的技术名称格式无效，按空结果处理", result_type=type(result).__name__)
            return []

        return dedupe_tech_names(names)

    async def get_technology_details(self, names: List[str]) -> Tuple[List[Dict], List[str]]:
        """
        使用AI获取技术详细信息并逐条校验

        Args:
            names: 需要获取详情的技术名称

        Returns:
            (通过校验的技术详情, 校验错误信息)
        """
        available_categories = ", ".join(
            f"{category.value} ({label})" for category, label in TECHNOLOGY_CATEGORY_LABELS.items()
        )

        response = await self.claude_client.send_message(
            [
                {
                    "role": "user",
                    "content": f"""For each of these technologies, provide complete and accurate details.

Technologies: {", ".join(names)}

For each technology, you MUST provide:
- name: The official/common name (e.g., "React", "PostgreSQL")
- description: A comprehensive 1-2 sentence description explaining what the technology is and its primary use case
- link: The official website URL (must be a valid, complete URL starting with https://)
- category: Array of one or more applicable categories from: {available_categories}

These details will be saved to a database and displayed publicly, so ensure accuracy and completeness.""",
                }
            ],
            max_tokens=4096,
            output_schema=get_technology_details_schema(),
        )

        result = parse_json_from_response(response, {"technologies": []})
        items = result.get("technologies") if isinstance(result, dict) else None
        if not isinstance(items, list):
            logger.warning("AI返回的技术详情格式无效，按空结果处理", result_type=type(result).__name__)
            items = []

        valid: List[Dict] = []
        errors: List[str] = []
        for tech in items:
            error = validate_technology(tech)
            if error:
                errors.append(error)
                logger.warning("技术详情校验失败", error=error, tech=tech)
                continue
            valid.append({
                "name": tech["name"].strip(),
                "description": tech["description"].strip(),
                "link": tech["link"].strip(),
                "category": _clean_categories(tech["category"]),
            })

        return valid, errors

    async def extract(self, project_id: Any) -> ExtractResult:
        """
        提取项目中的技术并创建/关联

        流程：
        1. 获取项目
        2. 合并两种描述字段
        3. AI提取技术名称
        4. 与现有技术目录比对（大小写不敏感）
        5. AI获取新技术详情
        6. 逐条校验
        7. 逐条创建（单条失败不影响其他）
        8. 合并技术ID并整体写回项目

        Args:
            project_id: 项目ID

        Returns:
            技术提取结果
        """
        project = await self.store.find_by_id(PROJECTS, project_id)
        if not project:
            raise ExtractionException(
                ErrorType.NOT_FOUND,
                "Project not found",
                {"project_id": project_id},
            )

        text_content = assemble_project_text(project)
        if not text_content:
            raise ExtractionException(
                ErrorType.EMPTY_CONTENT,
                "No description content to analyze",
                {"project_id": project_id},
            )

        logger.info("开始提取技术", project_id=project_id, text_length=len(text_content))
        extracted_names = await self.extract_technology_names(text_content)

        if not extracted_names:
            logger.info("描述中未找到技术", project_id=project_id)
            return ExtractResult(
                success=True,
                message="No technologies found in description",
                created=[],
                linked=0,
            )

        logger.info("AI提取到技术", project_id=project_id, count=len(extracted_names), technologies=extracted_names)

        # 查询全部现有技术（不限制数量）
        existing = await self.store.find(TECHNOLOGIES, limit=0)
        name_index = build_name_index(existing.get("docs", []))

        matched_existing_ids = []
        new_names = []
        for name in extracted_names:
            tech_id = name_index.get(normalize_tech_name(name))
            if tech_id is not None:
                matched_existing_ids.append(tech_id)
            else:
                new_names.append(name)

        created: List[Dict] = []
        errors: List[str] = []

        if new_names:
            logger.info("获取新技术详情", project_id=project_id, count=len(new_names))
            valid_technologies, validation_errors = await self.get_technology_details(new_names)

            if validation_errors:
                errors.extend(validation_errors)

            # 按顺序逐条创建，便于准确归因每条错误
            for tech in valid_technologies:
                key = normalize_tech_name(tech["name"])
                if key in name_index:
                    # AI返回的规范名称已存在于目录中（或本次已创建），直接关联
                    matched_existing_ids.append(name_index[key])
                    logger.info("技术已存在，跳过创建", name=tech["name"], technology_id=name_index[key])
                    continue

                try:
                    doc = await self.store.create(TECHNOLOGIES, tech)
                except Exception as e:
                    error_message = f'Failed to create technology "{tech["name"]}": {e}'
                    errors.append(error_message)
                    logger.error("技术创建失败", name=tech["name"], error=str(e), error_type=ErrorType.PERSISTENCE.value)
                    continue

                name_index[key] = doc["id"]
                created.append({"id": doc["id"], "name": doc.get("name") or tech["name"]})
                logger.info("技术创建成功", name=tech["name"], technology_id=doc["id"])

        current_ids = normalize_technology_ids((project.get("metadata") or {}).get("technologies"))
        merged_ids = merge_technology_ids(
            matched_existing_ids,
            [tech["id"] for tech in created],
            current_ids,
        )

        await self.store.update(PROJECTS, project_id, {"metadata": {"technologies": merged_ids}})

        logger.info(
            "技术提取完成",
            project_id=project_id,
            created=len(created),
            linked=len(merged_ids),
            errors=len(errors),
        )

        return ExtractResult(
            success=True,
            message="Technologies extracted successfully",
            created=[tech["name"] for tech in created],
            linked=len(merged_ids),
            errors=errors or None,
        )


async def extract_technologies_from_project(
    project_id: Any,
    store: Optional[DocumentStore] = None,
    claude_client: Optional[ClaudeClient] = None
) -> ExtractResult:
    """
    从项目描述中提取技术并创建/关联到项目

    调用方总是得到结构化结果：项目不存在、描述为空以及任何未预期的异常
    都会转换为 success=False 的结果。

    Args:
        project_id: 项目ID
        store: 文档存储，为None时自动创建数据库会话
        claude_client: Claude客户端，为None时使用全局实例

    Returns:
        技术提取结果
    """
    claude_client = claude_client or get_claude_client()

    if store is None:
        from app.core.database import AsyncSessionLocal

        async with AsyncSessionLocal() as db:
            return await _run_extraction(project_id, SQLAlchemyDocumentStore(db), claude_client)

    return await _run_extraction(project_id, store, claude_client)


async def _run_extraction(project_id: Any, store: DocumentStore, claude_client: ClaudeClient) -> ExtractResult:
    service = TechnologyExtractionService(store, claude_client)
    try:
        return await service.extract(project_id)
    except ExtractionException as e:
        logger.warning("技术提取终止", project_id=project_id, **e.to_dict())
        return ExtractResult(success=False, message=e.error_message, created=[], linked=0)
    except Exception as e:
        logger.error("技术提取失败", project_id=project_id, error=str(e), error_type=type(e).__name__)
        return ExtractResult(
            success=False,
            message=str(e) or "Extraction failed",
            created=[],
            linked=0,
        )

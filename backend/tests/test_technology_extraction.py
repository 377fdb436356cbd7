"""
技术提取服务单元测试
"""
import pytest

from app.models.technology import CATEGORY_VALUES
from app.services.claude_client import ClaudeAPIError
from app.services.technology_extraction import (
    TECHNOLOGY_NAMES_SCHEMA,
    assemble_project_text,
    extract_technologies_from_project,
    get_technology_details_schema,
    validate_technology,
)
from tests.utils.test_helpers import make_lexical, make_tech_detail


# ============================================
# 校验规则
# ============================================

def test_validate_valid_technology():
    """测试有效技术详情"""
    assert validate_technology(make_tech_detail("React", category=["frontend", "framework"])) is None


@pytest.mark.parametrize("tech, expected", [
    ({"name": "  ", "description": "", "link": "", "category": []}, "Technology name is required"),
    ("not a dict", "Technology name is required"),
    (make_tech_detail("Go", description="  short    "), 'Technology "Go" has insufficient description (min 10 chars)'),
    (make_tech_detail("Go", link="   "), 'Technology "Go" is missing a link'),
    (make_tech_detail("Go", link="go.dev"), 'Technology "Go" has invalid URL: go.dev'),
    (make_tech_detail("Go", category=[]), 'Technology "Go" has no category assigned'),
    (make_tech_detail("Go", category=["not-a-category"]), 'Technology "Go" has no category assigned'),
])
def test_validate_single_error(tech, expected):
    """测试每条技术只返回一条错误信息"""
    assert validate_technology(tech) == expected


def test_validate_rules_checked_in_order():
    """测试多条规则失败时按顺序返回第一条"""
    tech = {"name": "Go", "description": "short", "link": "not a url", "category": []}
    assert validate_technology(tech) == 'Technology "Go" has insufficient description (min 10 chars)'

    tech = {"name": "Go", "description": "A programming language.", "link": "not a url", "category": []}
    assert validate_technology(tech) == 'Technology "Go" has invalid URL: not a url'


def test_description_length_boundary():
    """测试描述长度边界（去除空白后至少10个字符）"""
    assert validate_technology(make_tech_detail("Go", description="  123456789  ")) is not None
    assert validate_technology(make_tech_detail("Go", description="  1234567890  ")) is None


# ============================================
# 输出结构与文本拼接
# ============================================

def test_schemas():
    """测试输出结构约束"""
    assert TECHNOLOGY_NAMES_SCHEMA["required"] == ["technologies"]
    item = get_technology_details_schema()["properties"]["technologies"]["items"]
    assert item["required"] == ["name", "description", "link", "category"]
    assert item["properties"]["category"]["items"]["enum"] == CATEGORY_VALUES
    assert set(CATEGORY_VALUES) == {
        "backend", "cms", "database", "design", "devops", "framework", "frontend", "language", "tool",
    }


def test_assemble_project_text():
    """测试合并markdown和富文本描述，空的部分被跳过"""
    project = {"description_markdown": "# Stack\nUses Go", "description": make_lexical(["Deployed on", "Fly.io"])}
    assert assemble_project_text(project) == "# Stack\nUses Go\n\nDeployed on Fly.io"

    assert assemble_project_text({"description_markdown": "", "description": make_lexical(["Only rich"])}) == "Only rich"
    assert assemble_project_text({"description_markdown": "  only md  ", "description": None}) == "only md"
    assert assemble_project_text({"description_markdown": None, "description": {"root": {"children": []}}}) == ""


# ============================================
# 完整流程
# ============================================

@pytest.mark.asyncio
async def test_scenario_all_new_technologies(fake_store, fake_claude):
    """测试场景：三个新技术全部创建并关联"""
    project_id = fake_store.add_project(description_markdown="Built with React and a PostgreSQL database on Docker")
    fake_claude.queue(
        {"technologies": ["React", "PostgreSQL", "Docker"]},
        {"technologies": [
            make_tech_detail("React", category=["frontend"]),
            make_tech_detail("PostgreSQL", category=["database"]),
            make_tech_detail("Docker", category=["devops"]),
        ]},
    )

    result = await extract_technologies_from_project(project_id, store=fake_store, claude_client=fake_claude)

    assert result.success is True
    assert result.message == "Technologies extracted successfully"
    assert result.created == ["React", "PostgreSQL", "Docker"]
    assert result.linked == 3
    assert result.errors is None
    assert fake_store.project_technology_ids(project_id) == [doc["id"] for doc in fake_store.created]

    # 两次AI调用：先提取名称，再获取详情
    assert len(fake_claude.calls) == 2
    assert fake_claude.calls[0]["max_tokens"] == 2048
    assert fake_claude.calls[0]["output_schema"] == TECHNOLOGY_NAMES_SCHEMA
    assert "Built with React" in fake_claude.calls[0]["messages"][0]["content"]
    assert fake_claude.calls[1]["max_tokens"] == 4096
    assert "React, PostgreSQL, Docker" in fake_claude.calls[1]["messages"][0]["content"]


@pytest.mark.asyncio
async def test_scenario_empty_description(fake_store, fake_claude):
    """测试场景：描述为空"""
    project_id = fake_store.add_project(description_markdown="   ", description=None)

    result = await extract_technologies_from_project(project_id, store=fake_store, claude_client=fake_claude)

    assert result.model_dump() == {
        "success": False,
        "message": "No description content to analyze",
        "created": [],
        "linked": 0,
        "errors": None,
    }
    assert fake_claude.calls == []


@pytest.mark.asyncio
async def test_scenario_project_not_found(fake_store, fake_claude):
    """测试场景：项目不存在"""
    result = await extract_technologies_from_project(999, store=fake_store, claude_client=fake_claude)

    assert result.success is False
    assert result.message == "Project not found"
    assert result.created == []
    assert result.linked == 0
    assert fake_claude.calls == []


@pytest.mark.asyncio
async def test_no_technologies_found_is_success(fake_store, fake_claude):
    """测试未提取到技术时返回成功且不写回项目"""
    project_id = fake_store.add_project(description_markdown="A personal blog about gardening.")
    fake_claude.queue({"technologies": []})

    result = await extract_technologies_from_project(project_id, store=fake_store, claude_client=fake_claude)

    assert result.success is True
    assert result.message == "No technologies found in description"
    assert result.created == []
    assert result.linked == 0
    assert fake_store.updates == []
    assert len(fake_claude.calls) == 1


@pytest.mark.asyncio
async def test_unparseable_names_response_is_treated_as_empty(fake_store, fake_claude):
    """测试名称响应无法解析时按空结果处理"""
    project_id = fake_store.add_project(description_markdown="Some project")
    fake_claude.queue("Sorry, I cannot help with that.")

    result = await extract_technologies_from_project(project_id, store=fake_store, claude_client=fake_claude)

    assert result.success is True
    assert result.message == "No technologies found in description"


@pytest.mark.asyncio
async def test_case_insensitive_match_without_fuzzy(fake_store, fake_claude):
    """测试名称匹配大小写不敏感，但不做模糊匹配"""
    react_id = fake_store.add_technology("React")
    project_id = fake_store.add_project(description_markdown="react and React.js")
    fake_claude.queue(
        {"technologies": ["react", "React.js"]},
        {"technologies": [make_tech_detail("React.js", category=["frontend"])]},
    )

    result = await extract_technologies_from_project(project_id, store=fake_store, claude_client=fake_claude)

    assert result.success is True
    assert result.created == ["React.js"]
    assert "React.js" in fake_claude.calls[1]["messages"][0]["content"]
    assert "Technologies: React.js\n" in fake_claude.calls[1]["messages"][0]["content"]
    ids = fake_store.project_technology_ids(project_id)
    assert ids[0] == react_id
    assert len(ids) == 2


@pytest.mark.asyncio
async def test_all_existing_skips_details_call(fake_store, fake_claude):
    """测试全部技术已存在时不调用详情接口"""
    docker_id = fake_store.add_technology("Docker")
    go_id = fake_store.add_technology("Go")
    project_id = fake_store.add_project(description_markdown="Go service in Docker")
    fake_claude.queue({"technologies": ["GO", "docker"]})

    result = await extract_technologies_from_project(project_id, store=fake_store, claude_client=fake_claude)

    assert result.success is True
    assert result.created == []
    assert result.linked == 2
    assert fake_store.project_technology_ids(project_id) == [go_id, docker_id]
    assert len(fake_claude.calls) == 1


@pytest.mark.asyncio
async def test_idempotent_rerun(fake_store, fake_claude):
    """测试重复执行得到相同的关联集合，且没有重复项"""
    react_id = fake_store.add_technology("React")
    redis_id = fake_store.add_technology("Redis")
    project_id = fake_store.add_project(
        description_markdown="React frontend with a Redis cache",
        metadata={"technologies": [{"id": redis_id, "name": "Redis"}]},
    )
    fake_claude.queue({"technologies": ["React", "Redis"]}, {"technologies": ["React", "Redis"]})

    first = await extract_technologies_from_project(project_id, store=fake_store, claude_client=fake_claude)
    first_ids = list(fake_store.project_technology_ids(project_id))
    second = await extract_technologies_from_project(project_id, store=fake_store, claude_client=fake_claude)
    second_ids = list(fake_store.project_technology_ids(project_id))

    assert first.success and second.success
    assert first.linked == second.linked == 2
    assert first_ids == second_ids == [react_id, redis_id]
    assert len(fake_store.technology_names()) == 2


@pytest.mark.asyncio
async def test_partial_validation(fake_store, fake_claude):
    """测试部分技术校验失败：两条创建成功，一条返回错误，整体仍成功"""
    project_id = fake_store.add_project(description_markdown="Svelte, Vite and Bun")
    fake_claude.queue(
        {"technologies": ["Svelte", "Vite", "Bun"]},
        {"technologies": [
            make_tech_detail("Svelte", category=["frontend"]),
            make_tech_detail("Vite", description="Bundler"),
            make_tech_detail("Bun", category=["tool"]),
        ]},
    )

    result = await extract_technologies_from_project(project_id, store=fake_store, claude_client=fake_claude)

    assert result.success is True
    assert result.created == ["Svelte", "Bun"]
    assert result.errors == ['Technology "Vite" has insufficient description (min 10 chars)']
    assert result.linked == 2
    assert fake_store.technology_names() == ["Svelte", "Bun"]


@pytest.mark.asyncio
async def test_creation_failure_does_not_abort(fake_store, fake_claude):
    """测试单条创建失败时记录错误并继续创建其他技术"""
    project_id = fake_store.add_project(description_markdown="Django and Celery")
    fake_store.fail_on_create.add("Django")
    fake_claude.queue(
        {"technologies": ["Django", "Celery"]},
        {"technologies": [make_tech_detail("Django"), make_tech_detail("Celery")]},
    )

    result = await extract_technologies_from_project(project_id, store=fake_store, claude_client=fake_claude)

    assert result.success is True
    assert result.created == ["Celery"]
    assert result.errors == ['Failed to create technology "Django": database unavailable']
    assert result.linked == 1


@pytest.mark.asyncio
async def test_existing_references_are_preserved(fake_store, fake_claude):
    """测试项目原有关联（纯ID和展开对象混合）被保留，不会丢失"""
    old_a = fake_store.add_technology("Sass")
    old_b = fake_store.add_technology("Figma")
    project_id = fake_store.add_project(
        description_markdown="Now also uses Astro",
        metadata={"technologies": [old_a, {"id": old_b, "name": "Figma"}]},
    )
    fake_claude.queue(
        {"technologies": ["Astro"]},
        {"technologies": [make_tech_detail("Astro", category=["framework"])]},
    )

    result = await extract_technologies_from_project(project_id, store=fake_store, claude_client=fake_claude)

    astro_id = fake_store.created[0]["id"]
    assert result.linked == 3
    assert fake_store.project_technology_ids(project_id) == [astro_id, old_a, old_b]
    assert fake_store.updates[-1]["data"] == {"metadata": {"technologies": [astro_id, old_a, old_b]}}


@pytest.mark.asyncio
async def test_detail_name_matching_catalog_is_linked_not_created(fake_store, fake_claude):
    """测试AI返回的规范名称已存在时直接关联，不重复创建"""
    pg_id = fake_store.add_technology("PostgreSQL")
    project_id = fake_store.add_project(description_markdown="Data lives in Postgres")
    fake_claude.queue(
        {"technologies": ["Postgres"]},
        {"technologies": [make_tech_detail("postgresql", category=["database"])]},
    )

    result = await extract_technologies_from_project(project_id, store=fake_store, claude_client=fake_claude)

    assert result.created == []
    assert fake_store.project_technology_ids(project_id) == [pg_id]
    assert fake_store.technology_names() == ["PostgreSQL"]


@pytest.mark.asyncio
async def test_duplicate_candidates_created_once(fake_store, fake_claude):
    """测试同一次提取中大小写不同的重复名称只创建一次"""
    project_id = fake_store.add_project(description_markdown="Vue vue VUE")
    fake_claude.queue(
        {"technologies": ["Vue", "vue", "VUE"]},
        {"technologies": [make_tech_detail("Vue"), make_tech_detail("vue")]},
    )

    result = await extract_technologies_from_project(project_id, store=fake_store, claude_client=fake_claude)

    assert result.created == ["Vue"]
    assert result.linked == 1
    assert "Technologies: Vue\n" in fake_claude.calls[1]["messages"][0]["content"]


@pytest.mark.asyncio
async def test_llm_transport_error_becomes_failed_result(fake_store, fake_claude):
    """测试AI调用失败时返回失败结果，而不是抛出异常"""
    project_id = fake_store.add_project(description_markdown="Rust CLI")
    fake_claude.queue(ClaudeAPIError("Claude API request failed", status_code=500, response_body="boom"))

    result = await extract_technologies_from_project(project_id, store=fake_store, claude_client=fake_claude)

    assert result.success is False
    assert result.message == "Claude API request failed"
    assert result.created == []
    assert result.linked == 0
    assert fake_store.updates == []


@pytest.mark.asyncio
async def test_rich_text_only_project(fake_store, fake_claude):
    """测试只有富文本描述的项目"""
    project_id = fake_store.add_project(description=make_lexical(["Written in", "TypeScript"]))
    fake_claude.queue(
        {"technologies": ["TypeScript"]},
        {"technologies": [make_tech_detail("TypeScript", category=["language"])]},
    )

    result = await extract_technologies_from_project(project_id, store=fake_store, claude_client=fake_claude)

    assert result.created == ["TypeScript"]
    assert "Written in TypeScript" in fake_claude.calls[0]["messages"][0]["content"]

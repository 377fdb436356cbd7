"""
pytest配置和fixtures
"""
import pytest
import sys
from pathlib import Path
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# 添加backend路径到sys.path
backend_path = Path(__file__).parent.parent
sys.path.insert(0, str(backend_path))

from app.core.database import Base  # noqa: E402
import app.models  # noqa: E402,F401 注册所有模型

from tests.utils.test_helpers import FakeClaudeClient, FakeDocumentStore  # noqa: E402


# 数据库引擎fixture（内存SQLite，每个测试独立）
@pytest.fixture
async def db_engine():
    """创建内存数据库引擎并建表"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """
    创建数据库session

    注意：文档存储的 create / update 内部会commit，
    每个测试使用独立的内存数据库，测试之间互不影响
    """
    session_factory = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_store():
    """内存文档存储"""
    return FakeDocumentStore()


@pytest.fixture
def fake_claude():
    """按顺序返回预设响应的Claude客户端"""
    return FakeClaudeClient()

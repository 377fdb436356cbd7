"""
检查数据库迁移状态
"""
import asyncio
import sys
from pathlib import Path

# 添加项目根目录到路径
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.core.database import AsyncSessionLocal
from sqlalchemy import text
import structlog

logger = structlog.get_logger()

TABLES_TO_CHECK = ['projects', 'technologies', 'project_technologies', 'users', 'tags']


async def check_tables():
    """检查CMS表及 description_markdown 字段是否存在"""
    db = AsyncSessionLocal()
    try:
        result = await db.execute(text("""
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = 'public'
        """))
        existing_tables = [row[0] for row in result.fetchall()]

        missing_tables = [t for t in TABLES_TO_CHECK if t not in existing_tables]
        if missing_tables:
            print(f"缺失的表: {missing_tables}")
            print("请运行数据库迁移: alembic upgrade head")
            return False

        result = await db.execute(text("""
            SELECT column_name
            FROM information_schema.columns
            WHERE table_schema = 'public'
            AND table_name = 'projects'
            AND column_name = 'description_markdown'
        """))
        if result.first() is None:
            print("projects 表缺少 description_markdown 字段")
            print("请运行数据库迁移: alembic upgrade head")
            return False

        print("所有表和字段已存在")
        return True

    except Exception as e:
        logger.error("检查表失败", error=str(e))
        return False
    finally:
        await db.close()


if __name__ == "__main__":
    result = asyncio.run(check_tables())
    sys.exit(0 if result else 1)

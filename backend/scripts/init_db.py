"""
数据库初始化脚本
用于在开发环境中直接创建表结构（生产环境请使用 alembic upgrade head）
"""
import asyncio
import sys
from pathlib import Path

# 添加项目根目录到路径
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.core.database import engine, Base
from app.models import *  # 导入所有模型
import structlog

logger = structlog.get_logger()


async def init_db():
    """初始化数据库表结构"""
    try:
        logger.info("开始初始化数据库...")

        # 创建所有表
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("数据库表创建成功", tables=sorted(Base.metadata.tables.keys()))

    except Exception as e:
        logger.error("数据库初始化失败", error=str(e))
        raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(init_db())

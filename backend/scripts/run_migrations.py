"""
运行数据库迁移脚本
通过Alembic命令API升级或回退CMS表结构

用法:
    python scripts/run_migrations.py                 # 升级到 head
    python scripts/run_migrations.py 001             # 升级到指定版本
    python scripts/run_migrations.py --downgrade 001 # 回退到指定版本
"""
import argparse
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config
import structlog

BACKEND_DIR = Path(__file__).resolve().parent.parent

# alembic/env.py 需要导入 app 包
sys.path.insert(0, str(BACKEND_DIR))

logger = structlog.get_logger()


def get_alembic_config() -> Config:
    """加载 backend/alembic.ini，并固定脚本目录为绝对路径"""
    config = Config(str(BACKEND_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    return config


def run_migrations(revision: str = "head", downgrade: bool = False) -> int:
    """运行数据库迁移，成功返回0"""
    config = get_alembic_config()
    try:
        if downgrade:
            logger.info("回退数据库迁移", revision=revision)
            command.downgrade(config, revision)
        else:
            logger.info("运行数据库迁移", revision=revision)
            command.upgrade(config, revision)
    except Exception as e:
        logger.error("数据库迁移失败", revision=revision, error=str(e))
        return 1

    logger.info("数据库迁移完成", revision=revision)
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="运行Alembic数据库迁移")
    parser.add_argument("revision", nargs="?", default="head", help="目标版本（默认 head）")
    parser.add_argument("--downgrade", action="store_true", help="回退到目标版本")
    args = parser.parse_args(argv)
    return run_migrations(args.revision, downgrade=args.downgrade)


if __name__ == "__main__":
    sys.exit(main())

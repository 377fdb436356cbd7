"""
命令行提取项目技术

使用方法：
   python scripts/extract_technologies.py <project_id> [<project_id> ...]
"""
import asyncio
import json
import sys
from pathlib import Path

# 添加项目根目录到路径
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.core.logging import setup_logging
from app.services.technology_extraction import extract_technologies_from_project


async def main(project_ids):
    """依次处理每个项目，返回失败的数量"""
    failures = 0
    for project_id in project_ids:
        result = await extract_technologies_from_project(project_id)
        print(json.dumps({"project_id": project_id, **result.model_dump(exclude_none=True)}, ensure_ascii=False))
        if not result.success:
            failures += 1
    return failures


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__, file=sys.stderr)
        sys.exit(2)

    try:
        ids = [int(arg) for arg in sys.argv[1:]]
    except ValueError:
        print("项目ID必须是整数", file=sys.stderr)
        sys.exit(2)

    setup_logging()
    sys.exit(1 if asyncio.run(main(ids)) else 0)

"""
API公共依赖
"""
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.core.database import get_db
from app.models.user import User

logger = structlog.get_logger()

# 支持的认证头格式：
#   Authorization: users API-Key <key>
#   Authorization: Bearer <key>
_API_KEY_PREFIXES = ("users api-key ", "bearer ")


class UnauthorizedError(Exception):
    """未认证或API Key无效（由应用级异常处理器转换为401响应）"""

    def __init__(self, message: str = "Unauthorized"):
        self.message = message
        super().__init__(message)


def parse_api_key(authorization: Optional[str]) -> Optional[str]:
    """从Authorization请求头中解析API Key"""
    if not authorization:
        return None

    value = authorization.strip()
    lowered = value.lower()
    for prefix in _API_KEY_PREFIXES:
        if lowered.startswith(prefix):
            api_key = value[len(prefix):].strip()
            return api_key or None
    return None


async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    获取当前认证用户

    Raises:
        UnauthorizedError: 未认证或API Key无效
    """
    api_key = parse_api_key(authorization)
    if not api_key:
        logger.warning("未认证的API请求")
        raise UnauthorizedError()

    result = await db.execute(
        select(User).where(User.api_key == api_key, User.enable_api_key.is_(True))
    )
    user = result.scalar_one_or_none()
    if not user:
        logger.warning("API Key无效")
        raise UnauthorizedError()

    return user

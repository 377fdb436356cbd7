"""
技术提取异常类
定义明确的失败类型和错误信息结构
"""
from typing import Dict, Optional
from enum import Enum


class ErrorType(str, Enum):
    """错误类型枚举"""
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    EMPTY_CONTENT = "empty_content"
    LLM_TRANSPORT = "llm_transport"
    VALIDATION = "validation"
    PERSISTENCE = "persistence"
    UNEXPECTED = "unexpected"


class ExtractionException(Exception):
    """
    技术提取异常类

    NOT_FOUND / EMPTY_CONTENT 会终止流程并转换为 success=False 的结果；
    VALIDATION / PERSISTENCE 只在本地收集，不会抛出到流程外部
    """

    def __init__(
        self,
        error_type: ErrorType,
        error_message: str,
        error_details: Optional[Dict] = None
    ):
        """
        初始化技术提取异常

        Args:
            error_type: 错误类型
            error_message: 错误消息（直接作为结果的message返回给调用方）
            error_details: 错误详情
        """
        super().__init__(error_message)
        self.error_type = error_type
        self.error_message = error_message
        self.error_details = error_details or {}

    def to_dict(self) -> Dict:
        """转换为字典格式"""
        return {
            "error_type": self.error_type.value,
            "error_message": self.error_message,
            "error_details": self.error_details,
        }

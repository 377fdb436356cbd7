"""
Claude服务 - Anthropic Messages API集成
提供带输出结构约束（JSON Schema）的AI调用接口
"""
from typing import Any, Dict, List, Optional, TypeVar
import json
import re
import time

import httpx
import structlog

from app.core.config import settings

logger = structlog.get_logger()

T = TypeVar("T")

DEFAULT_API_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_API_VERSION = "2023-06-01"
DEFAULT_MODEL = "claude-sonnet-4-5"
DEFAULT_MAX_TOKENS = 1024

# 代码块标记（```json ... ``` 或 ``` ... ```）
_FENCE_START = re.compile(r'^\s*```(?:json)?\s*', re.IGNORECASE)
_FENCE_END = re.compile(r'\s*```\s*$')
_ARRAY_PATTERN = re.compile(r'\[.*\]', re.DOTALL)
_OBJECT_PATTERN = re.compile(r'\{.*\}', re.DOTALL)


class ClaudeAPIError(Exception):
    """Claude API调用失败（缺少API Key、非2xx响应或网络错误）"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body


class ClaudeClient:
    """Claude客户端，封装Messages API调用"""

    def __init__(
        self,
        api_key: Optional[str],
        api_url: str = DEFAULT_API_URL,
        api_version: str = DEFAULT_API_VERSION,
        default_model: str = DEFAULT_MODEL,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        初始化Claude客户端

        API Key 在构造时显式注入，客户端本身不读取环境变量。
        缺少 API Key 不会在此处报错，而是在发送请求时抛出 ClaudeAPIError。

        Args:
            api_key: Anthropic API密钥
            api_url: Messages API地址
            api_version: anthropic-version 请求头
            default_model: 默认模型名称
            timeout: 单次请求超时（秒）
            transport: 自定义httpx传输层（测试时注入MockTransport）
        """
        self.api_key = api_key
        self.api_url = api_url
        self.api_version = api_version
        self.default_model = default_model
        self.timeout = timeout
        self.transport = transport

    async def send_message(
        self,
        messages: List[Dict[str, str]],
        max_tokens: int = DEFAULT_MAX_TOKENS,
        model: Optional[str] = None,
        system: Optional[str] = None,
        output_schema: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        发送消息（单次请求，不重试，是否重试由调用方决定）

        Args:
            messages: 消息列表，格式 [{"role": "user", "content": "..."}]，role 为 user/assistant
            max_tokens: 最大输出token数
            model: 模型名称，默认使用构造时的模型
            system: 系统提示（可选）
            output_schema: 输出结构约束（JSON Schema，可选）

        Returns:
            API返回的JSON信封（content/model/stop_reason/usage）

        Raises:
            ClaudeAPIError: 缺少API Key、网络错误或非2xx响应
        """
        model = model or self.default_model

        body: Dict[str, Any] = {
            "max_tokens": max_tokens,
            "messages": messages,
            "model": model,
        }

        if system:
            body["system"] = system

        if output_schema:
            body["output_config"] = {
                "format": {
                    "type": "json_schema",
                    "schema": output_schema,
                }
            }

        if not self.api_key:
            logger.error("Claude API Key未配置")
            raise ClaudeAPIError("CLAUDE_API_KEY environment variable is not set")

        headers = {
            "anthropic-version": self.api_version,
            "content-type": "application/json",
            "x-api-key": self.api_key,
        }

        start_time = time.time()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.api_url, headers=headers, json=body)
        except httpx.HTTPError as e:
            logger.error("Claude API网络错误", model=model, error=str(e))
            raise ClaudeAPIError(f"Claude API request failed: {e}") from e

        response_time_ms = int((time.time() - start_time) * 1000)

        if not response.is_success:
            logger.error(
                "Claude API调用失败",
                model=model,
                status_code=response.status_code,
                response=response.text[:500],
                response_time_ms=response_time_ms,
            )
            raise ClaudeAPIError(
                "Claude API request failed",
                status_code=response.status_code,
                response_body=response.text,
            )

        data = response.json()
        usage = data.get("usage") or {}
        logger.info(
            "Claude API调用成功",
            model=model,
            input_tokens=usage.get("input_tokens", 0),
            output_tokens=usage.get("output_tokens", 0),
            stop_reason=data.get("stop_reason"),
            response_time_ms=response_time_ms,
        )
        return data


def get_text_content(response: Any) -> str:
    """获取响应中第一个内容块的文本，不存在时返回空字符串"""
    if not isinstance(response, dict):
        return ""

    content = response.get("content")
    if not isinstance(content, list) or not content:
        return ""

    first = content[0]
    if not isinstance(first, dict):
        return ""

    text = first.get("text")
    return text if isinstance(text, str) else ""


def parse_json_from_response(response: Any, fallback: T) -> T:
    """
    从响应中解析JSON

    使用结构化输出时响应应当直接是合法JSON，但仍需处理markdown代码块包裹、
    前后带说明文字等情况。解析失败时返回fallback，不抛出异常。

    Args:
        response: send_message 返回的JSON信封
        fallback: 解析失败时的返回值

    Returns:
        解析后的JSON，或fallback
    """
    text = get_text_content(response)

    # 清理响应文本：移除markdown代码块标记
    clean_text = _FENCE_END.sub('', _FENCE_START.sub('', text, count=1)).strip()

    try:
        return json.loads(clean_text)
    except (json.JSONDecodeError, ValueError) as e:
        logger.warning("Claude响应JSON解析失败，尝试提取", error=str(e), response=text[:200])

    # 按出现位置依次尝试提取JSON数组/对象（匹配最外层的括号）
    matches = [m for m in (_ARRAY_PATTERN.search(text), _OBJECT_PATTERN.search(text)) if m]
    for match in sorted(matches, key=lambda m: m.start()):
        try:
            return json.loads(match.group())
        except (json.JSONDecodeError, ValueError):
            logger.warning("提取后的JSON解析失败", candidate=match.group()[:100])

    logger.error("Claude响应中未找到有效JSON，使用默认值", response=text[:200])
    return fallback


# 全局Claude客户端实例（延迟初始化）
_claude_client: Optional[ClaudeClient] = None


def get_claude_client() -> ClaudeClient:
    """获取Claude客户端实例（单例模式，配置来自settings）"""
    global _claude_client
    if _claude_client is None:
        _claude_client = ClaudeClient(
            api_key=settings.CLAUDE_API_KEY,
            api_url=settings.CLAUDE_API_URL,
            api_version=settings.CLAUDE_API_VERSION,
            default_model=settings.CLAUDE_MODEL,
            timeout=settings.CLAUDE_TIMEOUT,
        )
    return _claude_client

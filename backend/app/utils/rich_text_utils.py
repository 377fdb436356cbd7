"""
富文本工具函数
- 将Lexical富文本树展平为纯文本
"""
from typing import Any, List, Tuple


def extract_text_from_lexical(rich_text: Any) -> str:
    """
    从Lexical富文本结构中提取纯文本

    顶层节点之间用换行连接，同一节点的子节点之间用空格连接。
    结构缺失或格式异常时返回空字符串，不抛出异常。

    Args:
        rich_text: Lexical富文本对象，结构为 {"root": {"children": [...]}}

    Returns:
        提取的纯文本

    Examples:
        >>> extract_text_from_lexical({"root": {"children": [
        ...     {"children": [{"text": "Built with"}, {"text": "React"}]},
        ...     {"children": [{"text": "and Docker"}]},
        ... ]}})
        'Built with React\\nand Docker'
    """
    if not isinstance(rich_text, dict):
        return ""

    root = rich_text.get("root")
    if not isinstance(root, dict):
        return ""

    children = root.get("children")
    if not isinstance(children, list):
        return ""

    return "\n".join(_extract_node_text(node) for node in children).strip()


def _extract_node_text(node: Any) -> str:
    """
    提取单个节点的文本

    节点自身有text时直接使用，否则将子节点文本用空格连接。
    使用显式栈遍历，嵌套深度不受解释器递归上限限制。
    """
    output: List[str] = []
    stack: List[Tuple[str, Any, List[str]]] = [("node", node, output)]
    while stack:
        kind, current, out = stack.pop()
        if kind == "join":
            out.append(" ".join(current))
            continue

        if not isinstance(current, dict):
            out.append("")
            continue

        text = current.get("text")
        if text:
            out.append(text if isinstance(text, str) else str(text))
            continue

        children = current.get("children")
        if not isinstance(children, list):
            out.append("")
            continue

        # 先压入合并标记，再逆序压入子节点，保证子节点按原顺序出栈
        parts: List[str] = []
        stack.append(("join", parts, out))
        for child in reversed(children):
            stack.append(("node", child, parts))

    return output[0]

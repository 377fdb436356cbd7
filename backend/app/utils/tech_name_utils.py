"""
技术名词工具函数
- 标准化技术名称用于去重（大小写不敏感，不做模糊匹配）
- 建立现有技术目录的名称索引
- 统一项目技术关联的ID表示
"""
from typing import Any, Dict, Iterable, List


def normalize_tech_name(tech_name: Any) -> str:
    """
    标准化技术名称，用于去重比较

    只做去除首尾空白和小写转换：
    - "react" 和 "React" 被认为是同一个
    - " Docker " 和 "docker" 被认为是同一个
    - "React.js" 和 "React" 不是同一个（不做模糊匹配）

    Args:
        tech_name: 原始技术名称

    Returns:
        标准化后的技术名称（用于比较），非字符串返回空字符串
    """
    if not isinstance(tech_name, str):
        return ""
    return tech_name.strip().lower()


def build_name_index(technologies: Iterable[Dict]) -> Dict[str, int]:
    """
    建立 标准化名称 -> 技术ID 的索引

    同名记录只保留第一条

    Args:
        technologies: 技术文档列表，格式 [{"id": 1, "name": "React", ...}, ...]

    Returns:
        名称索引字典
    """
    index: Dict[str, int] = {}
    for tech in technologies:
        key = normalize_tech_name(tech.get("name"))
        if key and key not in index and tech.get("id") is not None:
            index[key] = tech["id"]
    return index


def dedupe_tech_names(names: Iterable[Any]) -> List[str]:
    """
    按标准化名称去重，保留首次出现的写法

    非字符串和空白名称会被丢弃
    """
    seen = set()
    result = []
    for name in names:
        key = normalize_tech_name(name)
        if not key or key in seen:
            continue
        seen.add(key)
        result.append(name.strip())
    return result


def normalize_technology_ids(references: Any) -> List[int]:
    """
    将项目的技术关联统一为ID列表

    关联可能是纯ID，也可能是展开后的对象（{"id": 1, ...}），
    无法识别的项会被忽略。

    Args:
        references: metadata.technologies 的原始值

    Returns:
        技术ID列表（保持原顺序）
    """
    if not isinstance(references, (list, tuple)):
        return []

    ids = []
    for ref in references:
        if isinstance(ref, bool):
            continue
        if isinstance(ref, int):
            ids.append(ref)
        elif isinstance(ref, dict):
            ref_id = ref.get("id")
            if isinstance(ref_id, int) and not isinstance(ref_id, bool):
                ids.append(ref_id)
    return ids


def merge_technology_ids(*groups: Iterable[int]) -> List[int]:
    """
    合并多组技术ID，去重并保持首次出现的顺序
    """
    return list(dict.fromkeys(tech_id for group in groups for tech_id in group))

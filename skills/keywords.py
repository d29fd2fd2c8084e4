import os
import json
from typing import Iterable, List, Optional

import httpx

from skills.logger import logger
from skills.matcher import KeywordSet


def _parse_lines(text: str) -> List[str]:
    """每行一个关键词，忽略空行和 # 注释"""
    result = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        result.append(line)
    return result


def _parse_payload(text: str) -> List[str]:
    """远程内容既可能是 JSON 数组，也可能是纯文本列表"""
    stripped = text.strip()
    if stripped.startswith("["):
        data = json.loads(stripped)
        if not isinstance(data, list):
            raise ValueError("keyword JSON payload must be an array")
        # 只保留字符串条目
        return [item.strip() for item in data if isinstance(item, str) and item.strip()]
    return _parse_lines(text)


def read_keyword_file(path: str) -> List[str]:
    if not os.path.exists(path):
        logger.warning(f"⚠️ [Keywords] 关键词文件不存在: {path}")
        return []
    with open(path, "r", encoding="utf-8") as f:
        return _parse_lines(f.read())


def read_keyword_json(path: str) -> List[str]:
    if not os.path.exists(path):
        logger.warning(f"⚠️ [Keywords] JSON 关键词文件不存在: {path}")
        return []
    with open(path, "r", encoding="utf-8") as f:
        return _parse_payload(f.read())


def fetch_keywords(url: str, client: Optional[httpx.Client] = None) -> List[str]:
    """
    [Network] 拉取远程关键词列表。失败只记日志，返回空列表，不阻断启动。
    """
    logger.info(f"⚡ [Keywords] GET -> {url}")
    try:
        if client is None:
            with httpx.Client(timeout=15.0) as own_client:
                resp = own_client.get(url)
        else:
            resp = client.get(url)
        resp.raise_for_status()
        return _parse_payload(resp.text)
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"⚠️ [Keywords] 远程关键词拉取失败: {e}")
        return []


def merge_keywords(*sources: Iterable[str]) -> List[str]:
    """按出现顺序合并，大小写不敏感去重"""
    seen = set()
    merged = []
    for source in sources:
        for kw in source:
            key = kw.lower()
            if key in seen:
                continue
            seen.add(key)
            merged.append(kw)
    return merged


def load_keywords(
    path: Optional[str] = None,
    json_path: Optional[str] = None,
    url: Optional[str] = None,
    inline: str = "",
    client: Optional[httpx.Client] = None,
) -> KeywordSet:
    """
    汇总所有来源生成 KeywordSet。只在启动时调用一次。
    顺序：文本文件 -> JSON 文件 -> 远程 URL -> 逗号分隔的内联配置
    """
    sources = []
    if path:
        sources.append(read_keyword_file(path))
    if json_path:
        sources.append(read_keyword_json(json_path))
    if url:
        sources.append(fetch_keywords(url, client=client))
    if inline:
        sources.append([part.strip() for part in inline.split(",") if part.strip()])

    keywords = KeywordSet(keywords=tuple(merge_keywords(*sources)))
    if not keywords.keywords:
        logger.warning("⚠️ [Keywords] 关键词表为空，本次运行不会遮罩任何内容")
    else:
        logger.info(f"📚 [Keywords] 已加载 {len(keywords.keywords)} 个剧透关键词")
    return keywords

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator


class KeywordSet(BaseModel):
    """
    [剧透词表] 有序、不可变的关键词序列
    匹配方式：大小写不敏感的子串包含 (不分词、不做词边界)
    """
    model_config = ConfigDict(frozen=True)

    keywords: Tuple[str, ...] = ()

    @field_validator("keywords")
    @classmethod
    def _non_blank(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        for kw in value:
            if not kw or not kw.strip():
                raise ValueError("spoiler keywords must be non-empty strings")
        return value


class SpoilerMatcher:
    """
    [匹配器] 纯函数：关键词表 + 文本 -> 是否命中
    注意："war" 会命中 "software"，词表质量由外部维护
    """

    def __init__(self, keywords: KeywordSet):
        self.keywords = keywords
        # 预先转小写，避免每个条目都重复计算
        self._lowered = tuple(kw.lower() for kw in keywords.keywords)

    def matches(self, text: Optional[str]) -> bool:
        if not text:
            return False
        lowered = text.lower()
        return any(kw in lowered for kw in self._lowered)

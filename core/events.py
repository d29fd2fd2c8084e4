from typing import NamedTuple, Optional, Union

from skills.logger import logger


class MutationBatch(NamedTuple):
    """一次 MutationObserver 回调 = 一批变更"""
    added: int
    removed: int = 0

    @property
    def has_additions(self) -> bool:
        return self.added > 0


class NavigationFinished(NamedTuple):
    """站内 SPA 跳转完成 (例如 yt-navigate-finish)，不携带核心需要的数据"""
    name: str = ""


PageEvent = Union[MutationBatch, NavigationFinished]


def parse_event(record: dict) -> Optional[PageEvent]:
    """把页面侧队列里的一条原始记录转换成事件对象，无法识别的记录返回 None"""
    kind = record.get("type")
    if kind == "mutation":
        return MutationBatch(
            added=int(record.get("added", 0) or 0),
            removed=int(record.get("removed", 0) or 0),
        )
    if kind == "navigate":
        return NavigationFinished(name=str(record.get("name", "")))

    logger.debug(f"[Events] 忽略未知事件记录: {record}")
    return None

from abc import ABC, abstractmethod
from typing import Any, List, Optional

# 宿主页面里的节点句柄。具体类型由实现决定 (DrissionPage 元素 / 测试用假节点)，核心逻辑不关心
Node = Any


class StaleNodeError(Exception):
    """节点在扫描过程中被页面移除或上下文失效 (SPA 跳转、列表回收)"""


class TreeSurface(ABC):
    """
    [宿主接口] 文档树查询/修改面
    核心逻辑只通过这里读写页面，不缓存任何节点，每轮扫描都重新查询
    """

    @abstractmethod
    def find_items(self, selector: str) -> List[Node]:
        """按文档顺序返回当前匹配某个容器选择器的所有内容卡片"""

    @abstractmethod
    def title_slot(self, item: Node) -> Optional[Node]:
        ...

    @abstractmethod
    def thumbnail_slot(self, item: Node) -> Optional[Node]:
        ...

    @abstractmethod
    def text_of(self, node: Node) -> str:
        ...

    @abstractmethod
    def set_text(self, node: Node, text: str) -> None:
        ...

    @abstractmethod
    def find_overlay(self, slot: Node) -> Optional[Node]:
        """缩略图槽位下已有的遮罩子节点 (没有则 None)"""

    @abstractmethod
    def position_of(self, slot: Node) -> str:
        """计算后的 CSS position 值，默认是 'static'"""

    @abstractmethod
    def set_position(self, slot: Node, value: str) -> None:
        ...

    @abstractmethod
    def append_overlay(self, slot: Node, label: str) -> Node:
        """在槽位下追加一个完全覆盖它的遮罩层"""


class ChangeFeed(ABC):
    """
    [宿主接口] 页面变更通知
    subscribe 之后，页面侧把每批 DOM 变更和每次站内跳转依次记录下来，drain 按到达顺序取出
    """

    @abstractmethod
    def subscribe(self) -> None:
        ...

    @abstractmethod
    def drain(self) -> List[dict]:
        """取出并清空自上次调用以来累积的原始事件记录"""

    @abstractmethod
    def unsubscribe(self) -> None:
        ...

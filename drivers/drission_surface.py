import json
from functools import wraps
from typing import List, Optional

from DrissionPage.errors import ContextLostError, ElementLostError, JavaScriptError

from drivers.host import ChangeFeed, Node, StaleNodeError, TreeSurface
from drivers.js_loader import (
    APPEND_OVERLAY_JS,
    CHANGE_FEED_DRAIN_JS,
    CHANGE_FEED_INSTALL_JS,
    CHANGE_FEED_UNINSTALL_JS,
    COMPUTED_POSITION_JS,
    OVERLAY_STYLE_JSON,
    SET_POSITION_JS,
    SET_TEXT_CONTENT_JS,
    TEXT_CONTENT_JS,
)
from skills.logger import logger
from skills.site_profile import SiteProfile

# 元素被回收 / 页面跳转导致的上下文失效，统一视为节点过期
_STALE_ERRORS = (ElementLostError, ContextLostError, JavaScriptError)


def _stale_guard(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except _STALE_ERRORS as e:
            raise StaleNodeError(str(e)) from e
    return wrapper


class DrissionTreeSurface(TreeSurface):
    """
    [底层驱动] 基于 DrissionPage 标签页的文档树读写面
    所有查询都是即时的 (timeout=0)，找不到就是找不到，不等待渲染
    """

    def __init__(self, tab, profile: SiteProfile):
        self.tab = tab
        self.profile = profile
        self._title_locator = f"css:{profile.title_selector}"
        self._thumbnail_locator = f"css:{profile.thumbnail_selector}"
        # 只认缩略图槽位的直接子节点
        self._overlay_locator = f"css::scope > .{profile.overlay_class}"

    @staticmethod
    def _found(ele) -> Optional[Node]:
        # DrissionPage 找不到元素时返回 NoneElement，其布尔值为 False
        return ele if ele else None

    @_stale_guard
    def find_items(self, selector: str) -> List[Node]:
        return list(self.tab.eles(f"css:{selector}", timeout=0))

    @_stale_guard
    def title_slot(self, item: Node) -> Optional[Node]:
        return self._found(item.ele(self._title_locator, timeout=0))

    @_stale_guard
    def thumbnail_slot(self, item: Node) -> Optional[Node]:
        return self._found(item.ele(self._thumbnail_locator, timeout=0))

    @_stale_guard
    def text_of(self, node: Node) -> str:
        return node.run_js(TEXT_CONTENT_JS) or ""

    @_stale_guard
    def set_text(self, node: Node, text: str) -> None:
        node.run_js(SET_TEXT_CONTENT_JS, text)

    @_stale_guard
    def find_overlay(self, slot: Node) -> Optional[Node]:
        return self._found(slot.ele(self._overlay_locator, timeout=0))

    @_stale_guard
    def position_of(self, slot: Node) -> str:
        return slot.run_js(COMPUTED_POSITION_JS) or ""

    @_stale_guard
    def set_position(self, slot: Node, value: str) -> None:
        slot.run_js(SET_POSITION_JS, value)

    @_stale_guard
    def append_overlay(self, slot: Node, label: str) -> Node:
        slot.run_js(APPEND_OVERLAY_JS, self.profile.overlay_class, label, OVERLAY_STYLE_JSON)
        return self.find_overlay(slot)


class DrissionChangeFeed(ChangeFeed):
    """
    [底层驱动] 页面变更通知
    MutationObserver 和跳转监听都装在页面里，事件先在页面侧排队，Python 轮询 drain() 取走
    """

    def __init__(self, tab, profile: SiteProfile):
        self.tab = tab
        self.profile = profile
        self._subscribed = False
        self._installed = False

    def _install(self) -> bool:
        """安装页面侧监听；页面正在刷新或还没有 body 时返回 False，下次轮询再试"""
        try:
            status = self.tab.run_js(CHANGE_FEED_INSTALL_JS, self.profile.navigation_event)
        except _STALE_ERRORS as e:
            logger.debug(f"[ChangeFeed] 安装监听失败，稍后重试: {e}")
            return False
        if status == "no-body":
            logger.debug("[ChangeFeed] document.body 尚未就绪，稍后重试")
            return False
        self._installed = True
        return True

    def subscribe(self) -> None:
        self._subscribed = True
        if self._install():
            logger.info("👂 [ChangeFeed] 页面监听已就绪")
        else:
            logger.info("⏳ [ChangeFeed] 页面尚未就绪，将在下次轮询时安装监听")

    def drain(self) -> List[dict]:
        if not self._subscribed:
            return []
        if not self._installed:
            return self._reinstall()

        try:
            raw = self.tab.run_js(CHANGE_FEED_DRAIN_JS)
        except _STALE_ERRORS as e:
            # 刷新进行中，旧的 window 已失效
            logger.debug(f"[ChangeFeed] 拉取事件时页面上下文失效: {e}")
            self._installed = False
            return []

        if raw is None:
            # 整页刷新后 window 被重置
            self._installed = False
            return self._reinstall()

        records = json.loads(raw) if isinstance(raw, str) else raw
        return [r for r in records if isinstance(r, dict)]

    def _reinstall(self) -> List[dict]:
        """重新安装成功后补一次跳转事件，让调度器对新页面重扫"""
        if not self._install():
            return []
        logger.info("🔁 [ChangeFeed] 页面已重新加载，监听已重新安装")
        return [{"type": "navigate", "name": "reload"}]

    def unsubscribe(self) -> None:
        if not self._subscribed:
            return
        self._subscribed = False
        self._installed = False
        try:
            self.tab.run_js(CHANGE_FEED_UNINSTALL_JS)
        except _STALE_ERRORS as e:
            logger.debug(f"[ChangeFeed] 卸载监听时页面已失效: {e}")

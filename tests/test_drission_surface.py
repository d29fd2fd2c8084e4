import json

import pytest
from DrissionPage.errors import ContextLostError, ElementLostError, JavaScriptError

from core.reconciler import SpoilerReconciler
from drivers.drission_surface import DrissionChangeFeed, DrissionTreeSurface
from drivers.host import StaleNodeError
from drivers.js_loader import (
    APPEND_OVERLAY_JS,
    CHANGE_FEED_DRAIN_JS,
    CHANGE_FEED_INSTALL_JS,
    CHANGE_FEED_UNINSTALL_JS,
    SET_POSITION_JS,
    SET_TEXT_CONTENT_JS,
    TEXT_CONTENT_JS,
)
from skills.annotator import SpoilerAnnotator
from skills.matcher import KeywordSet, SpoilerMatcher
from skills.site_profile import YOUTUBE_PROFILE
from fake_host import FakeTree, make_item


class Missing:
    """模拟 DrissionPage 的 NoneElement"""

    def __bool__(self):
        return False


class StubElement:
    def __init__(self, children=None, js_results=None, lost=False):
        self.children = children or {}
        self.js_results = js_results or {}
        self.js_calls = []
        self.lost = lost

    def ele(self, locator, timeout=None):
        assert timeout == 0
        return self.children.get(locator, Missing())

    def run_js(self, script, *args):
        if self.lost:
            raise ElementLostError()
        self.js_calls.append((script, args))
        return self.js_results.get(script)


class StubTab:
    def __init__(self, items=None, drained=None):
        self.items = items or {}
        self.drained = list(drained or [])
        self.js_calls = []

    def eles(self, locator, timeout=None):
        return self.items.get(locator, [])

    def run_js(self, script, *args):
        self.js_calls.append((script, args))
        if script == CHANGE_FEED_DRAIN_JS:
            return self.drained.pop(0) if self.drained else json.dumps([])
        if script == CHANGE_FEED_INSTALL_JS:
            return "installed"
        return None


def test_surface_resolves_slots_with_profile_selectors():
    title = StubElement(js_results={TEXT_CONTENT_JS: "Season Finale Recap"})
    item = StubElement(children={f"css:{YOUTUBE_PROFILE.title_selector}": title})
    tab = StubTab(items={"css:ytd-video-renderer": [item]})
    surface = DrissionTreeSurface(tab, YOUTUBE_PROFILE)

    assert surface.find_items("ytd-video-renderer") == [item]
    assert surface.find_items("ytd-shelf-renderer") == []
    assert surface.title_slot(item) is title
    assert surface.thumbnail_slot(item) is None
    assert surface.text_of(title) == "Season Finale Recap"

    surface.set_text(title, "Spoiler")
    assert title.js_calls[-1] == (SET_TEXT_CONTENT_JS, ("Spoiler",))


def test_append_overlay_passes_class_label_and_style():
    overlay = StubElement()
    thumb = StubElement()
    surface = DrissionTreeSurface(StubTab(), YOUTUBE_PROFILE)

    assert surface.find_overlay(thumb) is None
    thumb.children["css::scope > .spoiler-overlay"] = overlay
    assert surface.append_overlay(thumb, "SPOILER") is overlay

    script, args = thumb.js_calls[-1]
    assert script == APPEND_OVERLAY_JS
    assert args[0] == "spoiler-overlay"
    assert args[1] == "SPOILER"
    assert json.loads(args[2])["zIndex"] == "10"


def test_lost_element_becomes_stale_node_error():
    surface = DrissionTreeSurface(StubTab(), YOUTUBE_PROFILE)
    with pytest.raises(StaleNodeError):
        surface.text_of(StubElement(lost=True))


def test_change_feed_drains_records_in_order():
    batches = [{"type": "mutation", "added": 2, "removed": 0}, {"type": "navigate", "name": "yt-navigate-finish"}]
    tab = StubTab(drained=[json.dumps(batches)])
    feed = DrissionChangeFeed(tab, YOUTUBE_PROFILE)

    assert feed.drain() == []  # 未订阅
    feed.subscribe()
    assert tab.js_calls[0] == (CHANGE_FEED_INSTALL_JS, ("yt-navigate-finish",))
    assert feed.drain() == batches
    assert feed.drain() == []


def test_change_feed_reinstalls_after_full_reload():
    tab = StubTab()
    feed = DrissionChangeFeed(tab, YOUTUBE_PROFILE)
    feed.subscribe()
    tab.run_js = _reload_once(tab.run_js)

    assert feed.drain() == [{"type": "navigate", "name": "reload"}]
    assert [call[0] for call in tab.js_calls].count(CHANGE_FEED_INSTALL_JS) == 2


def test_change_feed_unsubscribe_is_idempotent():
    tab = StubTab()
    feed = DrissionChangeFeed(tab, YOUTUBE_PROFILE)
    feed.subscribe()
    feed.unsubscribe()
    feed.unsubscribe()

    assert [call[0] for call in tab.js_calls].count(CHANGE_FEED_UNINSTALL_JS) == 1


def _reload_once(run_js):
    state = {"reloaded": False}

    def wrapper(script, *args):
        if script == CHANGE_FEED_DRAIN_JS and not state["reloaded"]:
            state["reloaded"] = True
            return None
        return run_js(script, *args)

    return wrapper


class ReloadingTab(StubTab):
    """按顺序弹出预设的 run_js 结果；值为异常实例时抛出，模拟刷新过程中的页面"""

    def __init__(self, install_results, drain_results):
        super().__init__()
        self.install_results = list(install_results)
        self.drain_results = list(drain_results)

    def run_js(self, script, *args):
        self.js_calls.append((script, args))
        if script == CHANGE_FEED_INSTALL_JS:
            result = self.install_results.pop(0) if self.install_results else "installed"
        elif script == CHANGE_FEED_DRAIN_JS:
            result = self.drain_results.pop(0) if self.drain_results else json.dumps([])
        else:
            result = None
        if isinstance(result, Exception):
            raise result
        return result


def test_drain_survives_context_loss_and_reinstalls_next_poll():
    tab = ReloadingTab(install_results=["installed"], drain_results=[ContextLostError()])
    feed = DrissionChangeFeed(tab, YOUTUBE_PROFILE)
    feed.subscribe()

    assert feed.drain() == []
    assert feed.drain() == [{"type": "navigate", "name": "reload"}]
    assert feed.drain() == []


def test_install_retried_until_body_exists():
    tab = ReloadingTab(
        install_results=["installed", JavaScriptError(), "no-body", "installed"],
        drain_results=[None],
    )
    feed = DrissionChangeFeed(tab, YOUTUBE_PROFILE)
    feed.subscribe()

    assert feed.drain() == []  # 刷新后重新安装时 observe(null) 报错
    assert feed.drain() == []  # body 还不存在
    assert feed.drain() == [{"type": "navigate", "name": "reload"}]


def test_subscribe_on_unready_page_does_not_raise():
    tab = ReloadingTab(install_results=[ContextLostError()], drain_results=[])
    feed = DrissionChangeFeed(tab, YOUTUBE_PROFILE)
    feed.subscribe()

    assert feed.drain() == [{"type": "navigate", "name": "reload"}]


def test_reconciler_keeps_running_through_page_reload():
    tab = ReloadingTab(
        install_results=["installed", JavaScriptError()],
        drain_results=[ContextLostError()],
    )
    item = make_item("Season Finale Recap")
    tree = FakeTree({"ytd-video-renderer": [item]})
    annotator = SpoilerAnnotator(tree, SpoilerMatcher(KeywordSet(keywords=("finale",))))
    reconciler = SpoilerReconciler(
        tree, annotator, DrissionChangeFeed(tab, YOUTUBE_PROFILE), ["ytd-video-renderer"], settle_delay=60
    )
    reconciler.start()

    assert reconciler.pump() == 0  # ContextLostError
    assert reconciler.pump() == 0  # 重新安装失败
    assert reconciler.pump() == 1  # 安装成功，补扫新页面
    assert reconciler.running


def test_write_snippets_suppress_their_own_mutations():
    for script in (SET_TEXT_CONTENT_JS, SET_POSITION_JS, APPEND_OVERLAY_JS):
        assert "g.quiet(apply)" in script
    assert "takeRecords()" in CHANGE_FEED_INSTALL_JS

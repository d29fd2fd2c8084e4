import sys
import traceback

from DrissionPage.errors import PageDisconnectedError

from config import (
    POLL_INTERVAL_SECONDS,
    RUN_MAX_SECONDS,
    SETTLE_DELAY_SECONDS,
    SPOILER_KEYWORDS,
    SPOILER_KEYWORDS_FILE,
    SPOILER_KEYWORDS_JSON,
    SPOILER_KEYWORDS_URL,
    SPOILER_OVERLAY_LABEL,
    SPOILER_SENTINEL,
    TARGET_URL,
)
from core.reconciler import SpoilerReconciler
from drivers.drission_driver import BrowserDriver
from drivers.drission_surface import DrissionChangeFeed, DrissionTreeSurface
from skills.annotator import SpoilerAnnotator
from skills.keywords import load_keywords
from skills.logger import logger
from skills.matcher import SpoilerMatcher
from skills.site_profile import YOUTUBE_PROFILE


def build_reconciler(tab, profile=YOUTUBE_PROFILE) -> SpoilerReconciler:
    """装配：关键词 -> 匹配器 -> 标注器 -> 调度器"""
    keywords = load_keywords(
        path=SPOILER_KEYWORDS_FILE,
        json_path=SPOILER_KEYWORDS_JSON,
        url=SPOILER_KEYWORDS_URL,
        inline=SPOILER_KEYWORDS,
    )
    surface = DrissionTreeSurface(tab, profile)
    annotator = SpoilerAnnotator(
        surface,
        SpoilerMatcher(keywords),
        sentinel=SPOILER_SENTINEL,
        overlay_label=SPOILER_OVERLAY_LABEL,
    )
    return SpoilerReconciler(
        surface,
        annotator,
        DrissionChangeFeed(tab, profile),
        profile.container_selectors,
        settle_delay=SETTLE_DELAY_SECONDS,
    )


def run(url: str):
    print("\n>>> 正在初始化浏览器驱动...")
    tab = BrowserDriver.open(url)

    print(">>> 正在装配剧透过滤器...")
    reconciler = build_reconciler(tab)

    print(f">>> 系统就绪，监听页面中 (Ctrl+C 退出): {url}")
    reconciler.start()
    try:
        reconciler.run_forever(poll_interval=POLL_INTERVAL_SECONDS, max_seconds=RUN_MAX_SECONDS)
    except KeyboardInterrupt:
        print("\n操作已取消")
    except PageDisconnectedError as e:
        logger.error(f"❌ 浏览器连接已断开: {e}")
    finally:
        try:
            reconciler.stop()
        except PageDisconnectedError as e:
            logger.debug(f"[Main] 停止时浏览器已断开: {e}")


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else TARGET_URL
    try:
        run(target)
    except Exception as e:
        print(f"❌ 启动失败: {e}")
        traceback.print_exc()
    finally:
        print("👋 正在关闭浏览器资源...")
        BrowserDriver.quit()

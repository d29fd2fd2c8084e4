import os
from typing import Optional
from DrissionPage import Chromium, ChromiumOptions

from config import HEADLESS_MODE, BROWSER_USER_DATA_DIR, BROWSER_ARGS
from skills.logger import logger


class BrowserDriver:
    """
    [底层驱动] 浏览器实例管理器 (Singleton Pattern)
    负责：浏览器的初始化、配置、生命周期管理

    特点：
    - 全局单例：避免重复启动浏览器
    - 状态持久化：自动保存 Cookies 到 browser_data 目录
    - 端口隔离：自动分配端口，不与用户日常使用的 Chrome 冲突
    """
    _instance: Optional[Chromium] = None

    @classmethod
    def get_browser(cls) -> Chromium:
        """
        获取浏览器单例实例。如果未初始化，则自动初始化。
        """
        if cls._instance is None:
            cls._init_browser()
        return cls._instance

    @classmethod
    def _init_browser(cls):
        logger.info("🚀 [Driver] Initializing Browser Engine...")

        co = ChromiumOptions()

        # 1. 基础参数配置
        for arg in BROWSER_ARGS:
            co.set_argument(arg)

        # 2. 运行模式 (Headless vs GUI)
        if HEADLESS_MODE:
            logger.info("   -> Mode: Headless (无头模式)")
            co.headless()
        else:
            logger.info("   -> Mode: GUI (可视化模式)")

        # 3. 用户数据持久化
        if BROWSER_USER_DATA_DIR:
            abs_path = os.path.abspath(BROWSER_USER_DATA_DIR)
            os.makedirs(abs_path, exist_ok=True)
            logger.info(f"   -> User Profile: {abs_path}")
            co.set_user_data_path(abs_path)

        # 4. 端口管理
        co.auto_port()

        try:
            cls._instance = Chromium(addr_or_opts=co)
            # base: 基础元素查找超时；page_load: 页面加载超时
            cls._instance.set_timeouts(base=10, page_load=30)
        except Exception as e:
            logger.error(f"❌ [Driver] Failed to launch browser: {e}")
            raise

    @classmethod
    def open(cls, url: str):
        """在当前活跃标签页打开 URL 并等待文档加载，返回该标签页"""
        tab = cls.get_browser().latest_tab
        logger.info(f"🚶 [Driver] Navigating to: {url}")
        tab.get(url)
        tab.wait.doc_loaded()
        return tab

    @classmethod
    def quit(cls):
        """
        彻底关闭浏览器进程
        """
        if cls._instance:
            logger.info("🛑 [Driver] Quitting Browser...")
            try:
                cls._instance.quit()
            except Exception as e:
                logger.warning(f"⚠️ [Driver] Error during quit: {e}")
            finally:
                cls._instance = None

# ==============================================================================
# Spoiler Guard 统一日志模块
# ==============================================================================
# 功能：
# - 系统运行日志: logs/sys_log/spoiler_guard.log (按天轮转)
# - 同时输出到控制台和文件
# ==============================================================================

import os
import logging
from logging.handlers import TimedRotatingFileHandler
from typing import Optional

from config import LOG_DIR

SYS_LOG_DIR = os.path.join(LOG_DIR, "sys_log")

# 确保日志目录存在
os.makedirs(SYS_LOG_DIR, exist_ok=True)


class SpoilerGuardLogger:
    """
    Spoiler Guard 日志管理器

    使用方式:
        from skills.logger import logger
        logger.info("这是一条日志")
    """

    _instance: Optional['SpoilerGuardLogger'] = None
    _logger: Optional[logging.Logger] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._init_logger()
        return cls._instance

    def _init_logger(self):
        """初始化系统日志器"""
        self._logger = logging.getLogger("SpoilerGuard")
        self._logger.setLevel(logging.DEBUG)

        # 防止重复添加 handler
        if self._logger.handlers:
            return

        console_formatter = logging.Formatter(
            fmt="%(message)s"  # 控制台保持简洁
        )
        file_formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

        # 1. 控制台 Handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(console_formatter)

        # 2. 系统日志文件 Handler (按天轮转)
        sys_log_file = os.path.join(SYS_LOG_DIR, "spoiler_guard.log")
        file_handler = TimedRotatingFileHandler(
            filename=sys_log_file,
            when="midnight",
            interval=1,
            backupCount=30,  # 保留30天
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        file_handler.suffix = "%Y%m%d"

        self._logger.addHandler(console_handler)
        self._logger.addHandler(file_handler)

    @property
    def raw(self) -> logging.Logger:
        """底层 logging.Logger，供测试 (caplog) 或临时挂 handler 使用"""
        return self._logger

    # ==================== 日志方法代理 ====================

    def debug(self, msg: str, *args, **kwargs):
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._logger.error(msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        """记录异常信息（自动附加堆栈）"""
        self._logger.exception(msg, *args, **kwargs)


# ==================== 全局单例 ====================

logger = SpoilerGuardLogger()

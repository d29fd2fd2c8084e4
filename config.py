import os
from dotenv import load_dotenv

# 1. 在这里统一加载 .env，其他文件就不需要再写 load_dotenv() 了
load_dotenv()


def _env_float(name: str, default: str) -> float:
    return float(os.getenv(name, default))


# ==============================================================================
# 浏览器自动化配置 (DrissionPage)
# ==============================================================================

# 是否开启无头模式 (True=不显示界面，False=显示界面)
HEADLESS_MODE = os.getenv("HEADLESS_MODE", "False").lower() == "true"

# 浏览器用户数据目录 (保持登录状态、Cookies，避免每次都被 YouTube 要求同意条款)
BROWSER_USER_DATA_DIR = os.getenv("BROWSER_USER_DATA_DIR", "./browser_data")

# 浏览器启动参数 (默认针对 Linux/Docker 环境优化，Windows 下也适用)
BROWSER_ARGS = [
    '--no-sandbox',
    '--disable-gpu',
    '--disable-infobars',
    '--ignore-certificate-errors',
]

# 启动后打开的页面 (命令行第一个参数优先)
TARGET_URL = os.getenv("TARGET_URL", "https://www.youtube.com/")

# ==============================================================================
# 剧透关键词来源 (进程启动时加载一次，之后只读)
# ==============================================================================

# 文本文件：每行一个关键词，# 开头为注释
SPOILER_KEYWORDS_FILE = os.getenv("SPOILER_KEYWORDS_FILE", "./spoiler_keywords.txt")

# 可选：JSON 数组文件
SPOILER_KEYWORDS_JSON = os.getenv("SPOILER_KEYWORDS_JSON")

# 可选：远程关键词列表 (纯文本或 JSON 数组)
SPOILER_KEYWORDS_URL = os.getenv("SPOILER_KEYWORDS_URL")

# 可选：逗号分隔的关键词，追加在最后
SPOILER_KEYWORDS = os.getenv("SPOILER_KEYWORDS", "")

# ==============================================================================
# 遮罩参数
# ==============================================================================

# 命中后标题被替换成的固定文本 (同时也是幂等判断的一半)
SPOILER_SENTINEL = os.getenv("SPOILER_SENTINEL", "Spoiler")

# 缩略图遮罩上显示的文字
SPOILER_OVERLAY_LABEL = os.getenv("SPOILER_OVERLAY_LABEL", "SPOILER")

# ==============================================================================
# 扫描调度
# ==============================================================================

# 启动后补扫一次的延迟 (秒)，兜底异步渲染的首屏内容
SETTLE_DELAY_SECONDS = _env_float("SETTLE_DELAY_SECONDS", "1.0")

# 拉取页面事件队列的轮询间隔 (秒)
POLL_INTERVAL_SECONDS = _env_float("POLL_INTERVAL_SECONDS", "0.25")

# 最长运行时间 (秒)，不设置则一直运行到 Ctrl+C
RUN_MAX_SECONDS = float(os.getenv("RUN_MAX_SECONDS")) if os.getenv("RUN_MAX_SECONDS") else None

# ==============================================================================
# 存储与输出路径
# ==============================================================================

# 日志根目录
LOG_DIR = os.getenv("LOG_DIR", os.path.join(os.path.dirname(os.path.abspath(__file__)), "logs"))

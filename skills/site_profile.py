from typing import Tuple

from pydantic import BaseModel, ConfigDict


class SiteProfile(BaseModel):
    """
    [站点画像] 某个站点上定位内容卡片及其标题/缩略图的选择器集合
    每个容器选择器代表一种展示场景 (主列表、网格、侧边推荐……)，扫描时按顺序遍历
    """
    model_config = ConfigDict(frozen=True)

    name: str
    container_selectors: Tuple[str, ...]
    title_selector: str
    thumbnail_selector: str
    overlay_class: str = "spoiler-overlay"
    # 站内 SPA 跳转完成时派发的事件名，为空表示不监听
    navigation_event: str = ""


YOUTUBE_PROFILE = SiteProfile(
    name="youtube",
    container_selectors=(
        "ytd-video-renderer",
        "ytd-grid-video-renderer",
        "ytd-compact-video-renderer",
        "ytd-rich-grid-media",
        "ytd-playlist-video-renderer",
        "ytd-shelf-renderer",  # 视频货架
        "ytd-watch-next-secondary-results-renderer",  # 侧边栏推荐
        "yt-lockup-view-model",  # 播放页的相关视频
    ),
    title_selector=(
        "#video-title, .yt-core-attributed-string, .title, "
        ".yt-lockup-metadata-view-model-wiz__title span"
    ),
    thumbnail_selector="ytd-thumbnail, yt-thumbnail-view-model",
    navigation_event="yt-navigate-finish",
)

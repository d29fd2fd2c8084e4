from enum import Enum

from drivers.host import Node, TreeSurface
from skills.logger import logger
from skills.matcher import SpoilerMatcher


class AnnotationOutcome(str, Enum):
    SKIPPED_ALREADY_MASKED = "skipped-already-masked"
    SKIPPED_NO_TITLE = "skipped-no-title"
    SKIPPED_NO_MATCH = "skipped-no-match"
    MASKED = "masked"


class SpoilerAnnotator:
    """
    [标注单元] 单个内容卡片的幂等遮罩状态机

    流程：
        1. 找标题槽位，没有或为空白 -> SKIPPED_NO_TITLE
        2. 已遮罩 (标题 == 哨兵文本 且 缩略图下有遮罩层) -> SKIPPED_ALREADY_MASKED
           必须在匹配之前判断：遮罩后的标题已经不是原文了
        3. 用原标题跑匹配器，未命中 -> SKIPPED_NO_MATCH (下一轮扫描仍会再看)
        4. 命中 -> 改写标题，给缩略图加遮罩层 (没有缩略图就只改标题)

    卡片状态全部保存在页面上，本类不持有任何卡片引用。
    """

    def __init__(
        self,
        surface: TreeSurface,
        matcher: SpoilerMatcher,
        sentinel: str = "Spoiler",
        overlay_label: str = "SPOILER",
    ):
        self.surface = surface
        self.matcher = matcher
        self.sentinel = sentinel
        self.overlay_label = overlay_label

    def annotate(self, item: Node) -> AnnotationOutcome:
        title = self.surface.title_slot(item)
        if title is None:
            return AnnotationOutcome.SKIPPED_NO_TITLE

        text = self.surface.text_of(title)
        if not text or not text.strip():
            return AnnotationOutcome.SKIPPED_NO_TITLE

        thumbnail = self.surface.thumbnail_slot(item)

        if text == self.sentinel:
            # 哨兵文本永远不回喂给匹配器
            return self._resume(thumbnail)

        if not self.matcher.matches(text):
            return AnnotationOutcome.SKIPPED_NO_MATCH

        logger.info(f"🙈 [Annotator] Spoiler detected in title: \"{text}\". Hiding...")
        self.surface.set_text(title, self.sentinel)
        if thumbnail is not None:
            self._cover(thumbnail)
        else:
            logger.debug("[Annotator] 该卡片没有缩略图槽位，仅改写标题")
        return AnnotationOutcome.MASKED

    def _resume(self, thumbnail) -> AnnotationOutcome:
        """
        标题已经是哨兵文本时的处理：
        - 有遮罩层，或根本没有缩略图槽位 -> 视为终态
        - 缩略图是后渲染出来的、还没遮罩 -> 补上遮罩层
        """
        if thumbnail is None or self.surface.find_overlay(thumbnail) is not None:
            return AnnotationOutcome.SKIPPED_ALREADY_MASKED

        logger.debug("[Annotator] 缩略图晚于标题渲染，补加遮罩层")
        self._cover(thumbnail)
        return AnnotationOutcome.MASKED

    def _cover(self, thumbnail: Node) -> None:
        if self.surface.find_overlay(thumbnail) is not None:
            return
        # 只在默认定位时改成 relative，不覆盖页面自己设定的定位
        if self.surface.position_of(thumbnail) in ("", "static"):
            self.surface.set_position(thumbnail, "relative")
        self.surface.append_overlay(thumbnail, self.overlay_label)

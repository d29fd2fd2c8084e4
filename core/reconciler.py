import time
from collections import Counter
from typing import Callable, Optional, Sequence

from core.events import PageEvent, MutationBatch, NavigationFinished, parse_event
from drivers.host import ChangeFeed, StaleNodeError, TreeSurface
from skills.annotator import AnnotationOutcome, SpoilerAnnotator
from skills.logger import logger


class ScanReport:
    """一轮全量扫描的统计"""

    def __init__(self):
        self.outcomes: Counter = Counter()
        self.stale = 0

    @property
    def total(self) -> int:
        return sum(self.outcomes.values()) + self.stale

    @property
    def masked(self) -> int:
        return self.outcomes[AnnotationOutcome.MASKED]

    def __repr__(self) -> str:
        parts = ", ".join(f"{k.value}={v}" for k, v in sorted(self.outcomes.items(), key=lambda kv: kv[0].value))
        return f"ScanReport(total={self.total}, {parts}, stale={self.stale})"


class SpoilerReconciler:
    """
    [调度中枢] 负责扫描循环与触发策略

    触发源：
        - start() 时立即全量扫描一次
        - 每次投递 (一次轮询取到的全部变更批次) 含新增节点 -> 全量扫描一次 (按投递，不按节点)
        - 站内跳转完成事件 -> 全量扫描一次
        - 启动后 settle_delay 秒 -> 补扫一次，只触发一次

    单线程协作式：pump() 每次取出已到达的事件，合并后最多扫描一次，每轮扫描都跑完才返回。
    """

    def __init__(
        self,
        surface: TreeSurface,
        annotator: SpoilerAnnotator,
        feed: ChangeFeed,
        container_selectors: Sequence[str],
        settle_delay: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.surface = surface
        self.annotator = annotator
        self.feed = feed
        self.container_selectors = tuple(container_selectors)
        self.settle_delay = settle_delay
        self._clock = clock
        self._sleep = sleep

        self._running = False
        self._settle_deadline: Optional[float] = None
        self._settle_fired = False
        self.scan_count = 0

    @property
    def running(self) -> bool:
        return self._running

    # ================= 扫描 =================

    def scan_all(self) -> ScanReport:
        """按类别顺序、类别内按文档顺序，对当前页面所有内容卡片执行标注"""
        report = ScanReport()
        for selector in self.container_selectors:
            try:
                items = self.surface.find_items(selector)
            except StaleNodeError as e:
                logger.debug(f"[Reconciler] 查询 {selector} 时页面上下文失效: {e}")
                continue

            for item in items:
                try:
                    outcome = self.annotator.annotate(item)
                except StaleNodeError as e:
                    # 节点在扫描途中被移除，留给下一轮
                    logger.debug(f"[Reconciler] 跳过已失效节点 ({selector}): {e}")
                    report.stale += 1
                    continue
                report.outcomes[outcome] += 1

        self.scan_count += 1
        if report.masked:
            logger.info(f"🛡️ [Reconciler] 第 {self.scan_count} 轮扫描遮罩了 {report.masked} 个条目")
        logger.debug(f"[Reconciler] {report}")
        return report

    # ================= 触发策略 =================

    @staticmethod
    def _is_trigger(event: PageEvent) -> bool:
        if isinstance(event, MutationBatch):
            return event.has_additions
        return isinstance(event, NavigationFinished)

    def handle_event(self, event: PageEvent) -> bool:
        """处理一个事件，返回是否触发了扫描"""
        if isinstance(event, MutationBatch):
            if not event.has_additions:
                return False
            logger.debug(f"[Reconciler] New content added (+{event.added}). Re-processing all videos...")
            self.scan_all()
            return True

        if isinstance(event, NavigationFinished):
            logger.info("🧭 [Reconciler] Navigation finished. Re-processing videos...")
            self.scan_all()
            return True

        return False

    # ================= 生命周期 =================

    def start(self) -> ScanReport:
        """首扫 + 订阅变更 + 安排一次延迟补扫。重复调用不会重复订阅。"""
        if self._running:
            logger.debug("[Reconciler] 已在运行，忽略重复 start()")
            return ScanReport()

        logger.info("🚀 [Reconciler] 初始扫描...")
        report = self.scan_all()

        self.feed.subscribe()
        self._running = True
        if not self._settle_fired:
            self._settle_deadline = self._clock() + self.settle_delay
        return report

    def stop(self) -> None:
        if not self._running:
            return
        logger.info("🛑 [Reconciler] 停止监听页面变更")
        self._running = False
        self._settle_deadline = None
        self.feed.unsubscribe()

    def pump(self) -> int:
        """
        一次调度节拍：先看延迟补扫是否到点，再处理自上次轮询以来累积的事件。
        一次 drain() 取到的全部记录视为一次投递：其中只要有新增节点或跳转，就全量扫描一次。
        返回本次执行的扫描轮数。
        """
        if not self._running:
            return 0

        scans = 0
        if self._settle_deadline is not None and self._clock() >= self._settle_deadline:
            self._settle_deadline = None
            self._settle_fired = True
            logger.debug("[Reconciler] 延迟补扫")
            self.scan_all()
            scans += 1

        events = [e for e in (parse_event(r) for r in self.feed.drain()) if e is not None]
        triggers = [e for e in events if self._is_trigger(e)]
        if triggers:
            if len(triggers) > 1:
                logger.debug(f"[Reconciler] 合并 {len(triggers)} 个触发事件为一次扫描")
            # 跳转优先决定日志内容，扫描本身完全相同
            navigation = next((e for e in triggers if isinstance(e, NavigationFinished)), None)
            self.handle_event(navigation or triggers[0])
            scans += 1
        return scans

    def run_forever(self, poll_interval: float = 0.25, max_seconds: Optional[float] = None) -> None:
        """阻塞运行，直到 stop() 或超过 max_seconds"""
        started = self._clock()
        while self._running:
            self.pump()
            if max_seconds is not None and self._clock() - started >= max_seconds:
                logger.info(f"⏱️ [Reconciler] 已运行 {max_seconds}s，退出")
                break
            self._sleep(poll_interval)

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from drivers.host import ChangeFeed, StaleNodeError, TreeSurface


@dataclass(eq=False)
class FakeNode:
    text: str = ""
    position: str = "static"
    children: List["FakeNode"] = field(default_factory=list)
    is_overlay: bool = False


@dataclass(eq=False)
class FakeItem:
    title: Optional[FakeNode] = None
    thumbnail: Optional[FakeNode] = None
    stale: bool = False


def make_item(title: Optional[str] = None, thumbnail: bool = True, position: str = "static") -> FakeItem:
    return FakeItem(
        title=FakeNode(text=title) if title is not None else None,
        thumbnail=FakeNode(position=position) if thumbnail else None,
    )


def overlays(item: FakeItem) -> List[FakeNode]:
    if item.thumbnail is None:
        return []
    return [c for c in item.thumbnail.children if c.is_overlay]


class FakeTree(TreeSurface):
    def __init__(self, categories: Optional[Dict[str, List[FakeItem]]] = None):
        self.categories: Dict[str, List[FakeItem]] = categories or {}
        self.mutations = 0
        self.queries: List[str] = []

    def _check(self, item: FakeItem) -> None:
        if item.stale:
            raise StaleNodeError("node detached")

    def find_items(self, selector):
        self.queries.append(selector)
        return list(self.categories.get(selector, []))

    def title_slot(self, item):
        self._check(item)
        return item.title

    def thumbnail_slot(self, item):
        self._check(item)
        return item.thumbnail

    def text_of(self, node):
        return node.text

    def set_text(self, node, text):
        self.mutations += 1
        node.text = text

    def find_overlay(self, slot):
        for child in slot.children:
            if child.is_overlay:
                return child
        return None

    def position_of(self, slot):
        return slot.position

    def set_position(self, slot, value):
        self.mutations += 1
        slot.position = value

    def append_overlay(self, slot, label):
        self.mutations += 1
        overlay = FakeNode(text=label, position="absolute", is_overlay=True)
        slot.children.append(overlay)
        return overlay


class FakeFeed(ChangeFeed):
    def __init__(self):
        self.pending: List[dict] = []
        self.subscribed = False
        self.subscribe_calls = 0

    def push_mutation(self, added: int, removed: int = 0) -> None:
        self.pending.append({"type": "mutation", "added": added, "removed": removed})

    def push_navigation(self, name: str = "yt-navigate-finish") -> None:
        self.pending.append({"type": "navigate", "name": name})

    def subscribe(self):
        self.subscribe_calls += 1
        self.subscribed = True

    def drain(self):
        records, self.pending = self.pending, []
        return records

    def unsubscribe(self):
        self.subscribed = False


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

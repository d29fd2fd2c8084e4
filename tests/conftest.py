from __future__ import annotations

import os
import tempfile

# 日志目录必须在 config / skills.logger 被导入之前指定
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="spoiler-guard-logs-"))

import pytest  # noqa: E402

from skills.annotator import SpoilerAnnotator  # noqa: E402
from skills.matcher import KeywordSet, SpoilerMatcher  # noqa: E402
from fake_host import FakeTree  # noqa: E402


@pytest.fixture
def tree() -> FakeTree:
    return FakeTree()


@pytest.fixture
def matcher() -> SpoilerMatcher:
    return SpoilerMatcher(KeywordSet(keywords=("finale", "spoiler")))


@pytest.fixture
def annotator(tree: FakeTree, matcher: SpoilerMatcher) -> SpoilerAnnotator:
    return SpoilerAnnotator(tree, matcher, sentinel="Spoiler", overlay_label="SPOILER")

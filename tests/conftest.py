"""Shared fixtures: a small statute exercising every line class."""
from __future__ import annotations

import pytest

from lawview.segmenter import segment_document
from lawview.types import StatuteDocument

SAMPLE_NAME = "中华人民共和国测试法"

# Line indices: title 0, meta 1, printed contents 2-4, body from 5.
SAMPLE_TEXT = "\n".join([
    "中华人民共和国测试法",
    "（2020年5月28日第十三届全国人民代表大会第三次会议通过）",
    "目　录",
    "第一章 总则",
    "第二章 附则",
    "第一章 总则",
    "第一条 为了规范测试活动，制定本法。",
    "第二条 违反本法第一条规定的，依照《中华人民共和国民法典》第十条、第十一条处理。",
    "前款规定适用于根据劳动法第十条的情形。",
    "",
    "第二章 附则",
    "第三条 本法自公布之日起施行。",
])


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_TEXT


@pytest.fixture
def sample_doc() -> StatuteDocument:
    return segment_document(SAMPLE_TEXT, SAMPLE_NAME)

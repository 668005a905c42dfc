"""
Content format detection for knowledge item text.
"""

import re
from enum import Enum
from typing import List, Optional

from ....core.config import ChunkingConfig
from .boundaries import contains_url, estimate_tokens, split_lines


class ContentFormat(str, Enum):
    """Shapes of text the router knows how to chunk."""

    NUMERIC_LIST = "numeric_list"
    BULLET_LIST = "bullet_list"
    SHORT_POST = "short_post"
    PROMO_CTA = "promo_cta"
    PLAIN_TEXT = "plain_text"
    UNKNOWN = "unknown"


# "2014 = $450/mo", "1. Item", "2) Item"
NUMERIC_LINE = re.compile(r"^\s*(\d{4}\s*=|\d+\.\s+|\d+\)\s+)")
BULLET_LINE = re.compile(r"^\s*[-•*]\s+")

CTA_PHRASES = (
    "comment",
    "dm me",
    "dm you",
    "link in bio",
    "guaranteed",
    "check out",
    "limited",
    "click here",
    "sign up",
    "get started",
    "free trial",
)

MIN_LIST_LINES = 3
MIN_NUMERIC_LINE_CHARS = 5


def _is_numeric_list(lines: List[str]) -> bool:
    if len(lines) < MIN_LIST_LINES:
        return False

    considered = [line for line in lines if len(line) >= MIN_NUMERIC_LINE_CHARS]
    numeric = sum(1 for line in considered if NUMERIC_LINE.match(line))

    return numeric >= MIN_LIST_LINES and numeric / len(considered) > 0.5


def _is_bullet_list(lines: List[str]) -> bool:
    if len(lines) < MIN_LIST_LINES:
        return False
    return sum(1 for line in lines if BULLET_LINE.match(line)) >= MIN_LIST_LINES


def _is_promo_cta(text: str) -> bool:
    lower = text.lower()
    has_cta = any(phrase in lower for phrase in CTA_PHRASES)
    return has_cta and contains_url(text)


def detect_format(text: str, config: Optional[ChunkingConfig] = None) -> ContentFormat:
    """Classify cleaned text; the first matching rule wins."""
    config = config or ChunkingConfig()
    text = text.strip()
    if not text:
        return ContentFormat.UNKNOWN

    lines = split_lines(text)

    if _is_numeric_list(lines):
        return ContentFormat.NUMERIC_LIST

    if _is_bullet_list(lines):
        return ContentFormat.BULLET_LIST

    if estimate_tokens(text) < config.short_post_max_tokens:
        if _is_promo_cta(text):
            return ContentFormat.PROMO_CTA
        return ContentFormat.SHORT_POST

    return ContentFormat.PLAIN_TEXT

"""
Token estimation and text boundary helpers shared by every chunking stage.
"""

import re
from typing import List

URL_PATTERN = re.compile(r"https?://\S+", re.IGNORECASE)
URL_ONLY_PATTERN = re.compile(r"^https?://\S+$", re.IGNORECASE)
URL_PREFIX_PATTERN = re.compile(r"^https?://", re.IGNORECASE)

_LINE_BREAK = re.compile(r"\r?\n")
_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")
_WHITESPACE = re.compile(r"\s+")


def estimate_tokens(text: str) -> int:
    """Count whitespace-delimited tokens.

    A cheap sizing proxy, not a model tokenizer count.
    """
    return len([t for t in _WHITESPACE.split(text.strip()) if t])


def split_lines(text: str) -> List[str]:
    """Split text into non-empty trimmed lines."""
    lines = (line.strip() for line in _LINE_BREAK.split(text))
    return [line for line in lines if line]


def split_sentences(text: str) -> List[str]:
    """Split text by sentence boundaries using simple heuristics."""
    sentences = (s.strip() for s in _SENTENCE_BREAK.split(text))
    return [s for s in sentences if s]


def is_url_only(text: str) -> bool:
    return bool(URL_ONLY_PATTERN.match(text.strip()))


def contains_url(text: str) -> bool:
    return bool(URL_PATTERN.search(text))


def starts_with_url(text: str) -> bool:
    return bool(URL_PREFIX_PATTERN.match(text))

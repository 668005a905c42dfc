"""
Map (format, token count) to a chunking strategy.
"""

from typing import Optional, Union

from ....core.config import ChunkingConfig
from .format_detector import ContentFormat
from .strategies import (
    ChunkingStrategy,
    FallbackSentenceStrategy,
    ListToDataPointsStrategy,
    ShortPostClaimStrategy,
)

FormatLike = Union[ContentFormat, str]


def select_strategy(
    content_format: FormatLike, token_count: int, config: Optional[ChunkingConfig] = None
) -> ChunkingStrategy:
    """Pick the deterministic strategy for a detected format.

    plain_text and unrecognized formats go to FallbackSentenceStrategy, which
    is also where plain text lands when the LLM path yields nothing.
    """
    config = config or ChunkingConfig()
    try:
        fmt = ContentFormat(content_format)
    except ValueError:
        fmt = ContentFormat.UNKNOWN

    if fmt is ContentFormat.NUMERIC_LIST:
        return ListToDataPointsStrategy()
    if fmt is ContentFormat.BULLET_LIST:
        if token_count < config.short_post_max_tokens:
            return ShortPostClaimStrategy()
        return FallbackSentenceStrategy()
    if fmt in (ContentFormat.SHORT_POST, ContentFormat.PROMO_CTA):
        return ShortPostClaimStrategy()
    return FallbackSentenceStrategy()


def should_use_llm_extraction(
    content_format: FormatLike, token_count: int, config: Optional[ChunkingConfig] = None
) -> bool:
    """Plain text long enough to need claim extraction, short enough to bound cost."""
    config = config or ChunkingConfig()
    return (
        content_format == ContentFormat.PLAIN_TEXT
        and config.llm_min_tokens <= token_count <= config.llm_max_tokens
    )

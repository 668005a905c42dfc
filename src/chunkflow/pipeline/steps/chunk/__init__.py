"""
Chunking step for knowledge items.

- Preflight gating (empty, URL-only, too short)
- Content format detection (numeric list, bullet list, short post, promo, plain text)
- Strategy routing with an LLM-artifact fast path and deterministic fallback
- Transactional chunk replacement with per-item diagnostics
"""

from .boundaries import estimate_tokens, split_lines, split_sentences
from .coordinator import ChunkingCoordinator
from .format_detector import ContentFormat, detect_format
from .job import chunk_knowledge_item
from .persistence import map_time_horizon
from .preflight import check_preflight
from .router import select_strategy, should_use_llm_extraction

__all__ = [
    "ChunkingCoordinator",
    "ContentFormat",
    "check_preflight",
    "chunk_knowledge_item",
    "detect_format",
    "estimate_tokens",
    "map_time_horizon",
    "select_strategy",
    "should_use_llm_extraction",
    "split_lines",
    "split_sentences",
]

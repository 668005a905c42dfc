from .base import ChunkingStrategy
from .fallback_sentence import FallbackSentenceStrategy
from .list_to_data_points import ListToDataPointsStrategy
from .short_post_claim import ShortPostClaimStrategy

__all__ = [
    "ChunkingStrategy",
    "FallbackSentenceStrategy",
    "ListToDataPointsStrategy",
    "ShortPostClaimStrategy",
]

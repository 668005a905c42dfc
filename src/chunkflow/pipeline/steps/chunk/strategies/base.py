from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .....core.models import ChunkDraft


class ChunkingStrategy(ABC):
    """Abstract base class for deterministic chunking strategies.

    Strategies are side-effect free: text in, chunk drafts out.
    """

    @property
    def name(self) -> str:
        """Identifier recorded in chunking metrics."""
        return type(self).__name__

    @abstractmethod
    def generate_chunks(self, item: Any, text: str) -> list[ChunkDraft]:
        """Generate chunks from the item's cleaned text."""

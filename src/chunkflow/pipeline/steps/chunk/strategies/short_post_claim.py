"""
Extract the leading claim (and one follow-up) from short social posts.
"""

from __future__ import annotations

from typing import Any

from .....core.models import ChunkDraft
from ..boundaries import estimate_tokens, split_lines, split_sentences, starts_with_url
from .base import ChunkingStrategy

MAX_SENTENCES = 2
MIN_LINE_CHARS = 10
MIN_SENTENCE_CHARS = 20  # exclusive
MIN_SENTENCE_TOKENS = 8


def _is_noise_line(line: str) -> bool:
    return starts_with_url(line) or len(line) < MIN_LINE_CHARS


def _qualifies(sentence: str) -> bool:
    return len(sentence) > MIN_SENTENCE_CHARS and estimate_tokens(sentence) >= MIN_SENTENCE_TOKENS


class ShortPostClaimStrategy(ChunkingStrategy):
    def generate_chunks(self, item: Any, text: str) -> list[ChunkDraft]:
        lines = [line for line in split_lines(text) if not _is_noise_line(line)]

        sentences: list[str] = []
        for line in lines:
            for sentence in split_sentences(line):
                if _qualifies(sentence):
                    sentences.append(sentence)
                if len(sentences) >= MAX_SENTENCES:
                    break
            if len(sentences) >= MAX_SENTENCES:
                break

        return [
            ChunkDraft(
                text=sentence,
                role="strategic_claim" if idx == 0 else "instruction",
                authority="medium",
                confidence=0.6,
                token_count=estimate_tokens(sentence),
                source_text=sentence,
                transformation_type="extractive",
            )
            for idx, sentence in enumerate(sentences)
        ]

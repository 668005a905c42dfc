"""
Score sentences of unstructured prose and keep the most informative ones.
"""

from __future__ import annotations

import re
from typing import Any

from .....core.models import ChunkDraft
from ..boundaries import estimate_tokens, split_sentences, starts_with_url
from .base import ChunkingStrategy

CAUSAL_CONNECTORS = ("because", "therefore", "thus", "so", "leads to", "results in", "causes")
INSTRUCTION_VERBS = ("do", "use", "seed", "add", "include", "ensure", "avoid", "create", "build")

MIN_SENTENCE_CHARS = 30  # exclusive
TOP_K = 3

_DIGIT = re.compile(r"\d")


def extract_candidate_sentences(text: str) -> list[str]:
    """Sentences longer than 30 characters that do not open with a URL."""
    return [
        s for s in split_sentences(text) if len(s) > MIN_SENTENCE_CHARS and not starts_with_url(s)
    ]


def score_sentence(sentence: str) -> float:
    lower = sentence.lower()
    score = 0.0

    if _DIGIT.search(sentence):
        score += 2.0

    if any(word in lower for word in CAUSAL_CONNECTORS):
        score += 1.5

    if any(f" {verb} " in lower for verb in INSTRUCTION_VERBS):
        score += 1.0

    # Prefer medium-length sentences
    if 12 <= estimate_tokens(sentence) <= 40:
        score += 1.0

    return score


class FallbackSentenceStrategy(ChunkingStrategy):
    """Top three scored sentences as low-authority heuristics."""

    def generate_chunks(self, item: Any, text: str) -> list[ChunkDraft]:
        scored = [(s, score_sentence(s)) for s in extract_candidate_sentences(text)]
        scored = [(s, score) for s, score in scored if score > 0]

        # sorted() is stable: equal scores keep document order
        ranked = sorted(scored, key=lambda pair: pair[1], reverse=True)

        return [
            ChunkDraft(
                text=sentence,
                role="heuristic",
                authority="low",
                confidence=0.5,
                token_count=estimate_tokens(sentence),
                source_text=sentence,
                transformation_type="extractive",
            )
            for sentence, _ in ranked[:TOP_K]
        ]

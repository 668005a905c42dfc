"""
Read LLM-normalized claim artifacts off a knowledge item.

An external normalization step writes ``normalized_claims`` as
``{"schema_version": "knowledge_compiler_v1", "artifacts": [...]}`` where each
artifact looks like::

    {
        "claim": "...",
        "role": "strategic_claim",
        "authority": "high",
        "confidence": 0.82,
        "context": {"domain": "seo", "actor": "founders", "timeframe": "2025"},
    }

This module only reads that structure; it never calls a model.
"""

import re
from typing import Any, List, Mapping, Optional

from ....core.models import ChunkDraft
from .boundaries import estimate_tokens

SCHEMA_VERSION = "knowledge_compiler_v1"
DEFAULT_MAX_ARTIFACTS = 200

DEFAULT_ROLE = "strategic_claim"
DEFAULT_AUTHORITY = "medium"
DEFAULT_CONFIDENCE = 0.6
AUTHORITIES = ("high", "medium", "low")

DOMAIN_ALIASES = {
    "seo": "seo",
    "search": "seo",
    "content": "content marketing",
    "content marketing": "content marketing",
    "saas": "saas",
    "monetization": "monetization",
    "growth": "growth",
    "business": "business strategy",
    "business strategy": "business strategy",
    "strategy": "business strategy",
}

_WHITESPACE = re.compile(r"\s+")


def normalize_domain(domain: Optional[str]) -> str:
    """Canonicalize a domain label; unknown domains pass through lowercased."""
    domain = _WHITESPACE.sub(" ", (domain or "").strip())
    if not domain:
        return ""
    lowered = domain.lower()
    return DOMAIN_ALIASES.get(lowered, lowered)


def sanitize_authority(value: Any) -> str:
    val = str(value or "").strip().lower()
    if val in AUTHORITIES:
        return val
    for authority in AUTHORITIES:
        if authority in val:
            return authority
    return DEFAULT_AUTHORITY


def clamp_confidence(value: Any) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CONFIDENCE
    if confidence != confidence:  # NaN
        return DEFAULT_CONFIDENCE
    return max(0.0, min(1.0, confidence))


def has_normalized_artifacts(normalized_claims: Any) -> bool:
    return (
        isinstance(normalized_claims, Mapping)
        and normalized_claims.get("schema_version") == SCHEMA_VERSION
        and isinstance(normalized_claims.get("artifacts"), list)
        and len(normalized_claims["artifacts"]) > 0
    )


def _clean(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def artifacts_to_chunks(
    normalized_claims: Any, max_artifacts: int = DEFAULT_MAX_ARTIFACTS
) -> List[ChunkDraft]:
    """Convert recognized claim artifacts into chunk drafts.

    Returns an empty list when the structure is absent, has another schema
    version, or contains no usable claims.
    """
    if not has_normalized_artifacts(normalized_claims):
        return []

    chunks: List[ChunkDraft] = []
    for artifact in normalized_claims["artifacts"][:max_artifacts]:
        if not isinstance(artifact, Mapping):
            continue

        text = _clean(artifact.get("claim"))
        if not text:
            continue

        context = artifact.get("context")
        if not isinstance(context, Mapping):
            context = {}

        chunks.append(
            ChunkDraft(
                text=text,
                role=_clean(artifact.get("role")) or DEFAULT_ROLE,
                authority=sanitize_authority(artifact.get("authority", DEFAULT_AUTHORITY)),
                confidence=clamp_confidence(artifact.get("confidence", DEFAULT_CONFIDENCE)),
                token_count=estimate_tokens(text),
                domain=normalize_domain(_clean(context.get("domain"))) or None,
                actor=_clean(context.get("actor")) or None,
                timeframe=_clean(context.get("timeframe")) or "unknown",
                transformation_type="normalized",
            )
        )

    return chunks

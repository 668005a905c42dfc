"""
Preflight eligibility gate: decides whether a knowledge item's text is worth chunking.
"""

from typing import Any, Dict, Optional

from ....core.config import ChunkingConfig
from ....core.models import PreflightResult, SkipReason
from .boundaries import contains_url, estimate_tokens, is_url_only


def check_preflight(raw_text: Optional[str], config: Optional[ChunkingConfig] = None) -> PreflightResult:
    """
    Classify raw text as eligible or not for chunking.

    Args:
        raw_text: The item's source text (None is treated as empty)
        config: Thresholds; defaults to ChunkingConfig()

    Returns:
        PreflightResult whose metrics are populated win or lose
    """
    config = config or ChunkingConfig()
    raw = raw_text or ""
    clean = raw.strip()

    metrics: Dict[str, Any] = {
        "raw_chars": len(raw),
        "clean_chars": len(clean),
        "contains_url": False,
        "is_url_only": False,
    }

    if not clean:
        return PreflightResult(
            eligible=False,
            skip_reason=SkipReason.EMPTY_AFTER_CLEAN,
            metrics=metrics,
        )

    if is_url_only(clean):
        metrics["is_url_only"] = True
        metrics["contains_url"] = True
        return PreflightResult(
            eligible=False,
            skip_reason=SkipReason.URL_ONLY,
            metrics=metrics,
        )

    # A URL inside longer text is recorded but never disqualifying
    metrics["contains_url"] = contains_url(clean)
    metrics["raw_tokens_est"] = estimate_tokens(raw)
    metrics["clean_tokens_est"] = estimate_tokens(clean)

    if metrics["clean_chars"] < config.min_clean_chars:
        return PreflightResult(
            eligible=False,
            skip_reason=SkipReason.BELOW_MIN_CHARS,
            metrics=metrics,
        )

    if metrics["clean_tokens_est"] < config.min_clean_tokens_est:
        return PreflightResult(
            eligible=False,
            skip_reason=SkipReason.BELOW_MIN_TOKENS,
            metrics=metrics,
        )

    return PreflightResult(eligible=True, metrics=metrics)

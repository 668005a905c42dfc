"""
Chunking coordinator: preflight, format detection, LLM-artifact fast path,
deterministic strategy routing and transactional persistence for one item.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ....core.config import ChunkingConfig
from ....core.logging import log
from ....core.models import (
    ChunkDraft,
    ChunkingDiagnostics,
    ChunkingStatus,
    ErrorCode,
    ProcessResult,
)
from ....db.engine import KnowledgeItem
from .claims import artifacts_to_chunks
from .format_detector import detect_format
from .persistence import build_chunk_rows, replace_chunks, save_diagnostics
from .preflight import check_preflight
from .router import select_strategy, should_use_llm_extraction

LLM_STRATEGY = "llm_claim_extractor"
MAX_ERROR_MESSAGE_CHARS = 1000

# Values of metrics["llm_extraction"]
LLM_NOT_ATTEMPTED = "not_attempted"
LLM_EMPTY = "empty"
LLM_USED = "used"


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class ChunkingCoordinator:
    """Runs the chunking pipeline for one knowledge item at a time.

    The item must be attached to ``session``. Content problems (ineligible
    text, empty or failing strategies) come back as a ProcessResult; database
    errors propagate after the transaction is rolled back.
    """

    def __init__(self, session: Session, config: Optional[ChunkingConfig] = None):
        self.session = session
        self.config = config or ChunkingConfig()

    def process_item(self, item: KnowledgeItem) -> ProcessResult:
        start = time.monotonic()
        now = datetime.now(timezone.utc)
        bound = log.bind(item_id=item.id)

        # Step 1: preflight gating
        preflight = check_preflight(item.raw_text, self.config)
        if not preflight.eligible:
            reason = preflight.skip_reason.value if preflight.skip_reason else None
            bound.info("chunk.preflight.skipped", reason=reason)
            save_diagnostics(
                self.session,
                item,
                ChunkingDiagnostics(
                    status=ChunkingStatus.SKIPPED,
                    skip_reason=reason,
                    metrics=preflight.metrics,
                ),
            )
            return ProcessResult(
                status=ChunkingStatus.SKIPPED,
                reason=reason,
                metrics=preflight.metrics,
            )

        metrics: Dict[str, Any] = dict(preflight.metrics)
        text = (item.raw_text or "").strip()
        token_count = metrics["clean_tokens_est"]

        # Step 2: format detection
        content_format = detect_format(text, self.config)
        metrics["detected_format"] = content_format.value

        # Step 3: LLM-artifact fast path
        metrics["llm_extraction"] = LLM_NOT_ATTEMPTED
        if should_use_llm_extraction(content_format, token_count, self.config):
            llm_chunks = self._try_llm_extraction(item)
            if llm_chunks:
                metrics["llm_extraction"] = LLM_USED
                metrics["strategy_used"] = LLM_STRATEGY
                metrics["duration_ms"] = _elapsed_ms(start)
                bound.info("chunk.llm.used", artifacts=len(llm_chunks))
                return self._persist_chunks(item, llm_chunks, metrics, LLM_STRATEGY, now)
            metrics["llm_extraction"] = LLM_EMPTY

        # Step 4: deterministic strategies
        strategy = select_strategy(content_format, token_count, self.config)
        metrics["strategy_used"] = strategy.name

        try:
            chunks = strategy.generate_chunks(item, text)
        except Exception as e:
            metrics["duration_ms"] = _elapsed_ms(start)
            message = (str(e) or type(e).__name__)[:MAX_ERROR_MESSAGE_CHARS]
            bound.warning("chunk.strategy.error", strategy=strategy.name, error=message)
            return self._fail(item, ErrorCode.PARSER_ERROR, message, metrics)

        metrics["duration_ms"] = _elapsed_ms(start)
        if not chunks:
            bound.warning("chunk.strategy.empty", strategy=strategy.name)
            return self._fail(item, ErrorCode.EXTRACTOR_RETURNED_EMPTY, None, metrics)

        return self._persist_chunks(item, chunks, metrics, strategy.name, now)

    def _try_llm_extraction(self, item: KnowledgeItem) -> List[ChunkDraft]:
        """Chunks from artifacts already written by the claim normalization step."""
        return artifacts_to_chunks(item.normalized_claims, self.config.max_llm_artifacts)

    def _persist_chunks(
        self,
        item: KnowledgeItem,
        chunks: List[ChunkDraft],
        metrics: Dict[str, Any],
        strategy: str,
        now: datetime,
    ) -> ProcessResult:
        rows = build_chunk_rows(item, chunks, now)
        diagnostics = ChunkingDiagnostics(
            status=ChunkingStatus.CREATED,
            metrics={**metrics, "chunks_created": len(rows), "strategy": strategy},
        )
        log.info("chunk.persisting", item_id=item.id, strategy=strategy, chunks=len(rows))
        replace_chunks(self.session, item, rows, diagnostics)

        return ProcessResult(
            status=ChunkingStatus.CREATED,
            chunks_created=len(rows),
            metrics=metrics,
            strategy=strategy,
        )

    def _fail(
        self,
        item: KnowledgeItem,
        error_code: ErrorCode,
        error_message: Optional[str],
        metrics: Dict[str, Any],
    ) -> ProcessResult:
        save_diagnostics(
            self.session,
            item,
            ChunkingDiagnostics(
                status=ChunkingStatus.FAILED,
                error_code=error_code.value,
                error_message=error_message,
                metrics=metrics,
            ),
        )
        return ProcessResult(
            status=ChunkingStatus.FAILED,
            error_code=error_code.value,
            error_message=error_message,
            metrics=metrics,
        )

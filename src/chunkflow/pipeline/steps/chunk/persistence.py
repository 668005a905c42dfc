"""
Transactional chunk replacement and diagnostics persistence.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete
from sqlalchemy.orm import Session

from ....core.artifacts import new_chunk_id
from ....core.models import ChunkDraft, ChunkingDiagnostics
from ....db.engine import KnowledgeChunk, KnowledgeItem

CHUNK_TYPE = "normalized_knowledge"

_YEAR = re.compile(r"\b(19\d{2}|20\d{2})\b")


def map_time_horizon(timeframe: Optional[str], now_year: Optional[int] = None) -> str:
    """Bucket a free-text timeframe into current/near_term/long_term/unknown."""
    tf = (timeframe or "").strip().lower()
    if not tf or tf == "unknown":
        return "unknown"

    match = _YEAR.search(tf)
    if match:
        if now_year is None:
            now_year = datetime.now(timezone.utc).year
        diff = int(match.group(1)) - now_year
        if -2 <= diff <= 0:
            return "current"
        if diff == 1:
            return "near_term"
        if diff >= 2:
            return "long_term"

    if "next" in tf or "soon" in tf:
        return "near_term"
    if "long" in tf or "year" in tf:
        return "long_term"
    return "unknown"


def chunk_source_type(source: Optional[str]) -> str:
    return "text" if not source or source == "manual" else source


def build_chunk_rows(
    item: KnowledgeItem,
    drafts: Sequence[ChunkDraft],
    created_at: datetime,
) -> List[KnowledgeChunk]:
    """Turn drafts into ORM rows that share one created_at timestamp."""
    source_type = chunk_source_type(item.source)
    source_ref: Dict[str, Any] = {
        "ingestion_source_id": item.ingestion_source_id,
        "knowledge_item_id": item.id,
    }

    rows = []
    for draft in drafts:
        rows.append(
            KnowledgeChunk(
                id=new_chunk_id(),
                knowledge_item_id=item.id,
                organization_id=item.organization_id,
                user_id=item.user_id,
                chunk_text=draft.text,
                chunk_type=CHUNK_TYPE,
                chunk_role=draft.role,
                authority=draft.authority,
                confidence=draft.confidence,
                time_horizon=map_time_horizon(draft.timeframe, created_at.year),
                domain=draft.domain,
                actor=draft.actor,
                source_type=source_type,
                source_variant=draft.transformation_type,
                source_ref=dict(source_ref),
                meta=draft.metadata or {},
                token_count=draft.token_count,
                source_text=draft.source_text,
                source_spans=draft.source_spans,
                transformation_type=draft.transformation_type,
                created_at=created_at,
            )
        )
    return rows


def replace_chunks(
    session: Session,
    item: KnowledgeItem,
    rows: Sequence[KnowledgeChunk],
    diagnostics: ChunkingDiagnostics,
) -> None:
    """Delete the item's chunks, insert the new set and record diagnostics.

    All three writes commit together; on any error the transaction is rolled
    back and the previous chunk set stays intact.
    """
    try:
        session.execute(
            delete(KnowledgeChunk)
            .where(KnowledgeChunk.knowledge_item_id == item.id)
            .execution_options(synchronize_session=False)
        )
        session.add_all(rows)
        diagnostics.apply_to(item)
        session.commit()
    except Exception:
        session.rollback()
        raise


def save_diagnostics(session: Session, item: KnowledgeItem, diagnostics: ChunkingDiagnostics) -> None:
    """Record skip/failure diagnostics without touching chunks."""
    try:
        diagnostics.apply_to(item)
        session.commit()
    except Exception:
        session.rollback()
        raise

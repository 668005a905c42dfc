"""
Unit-of-work entry point: chunk one knowledge item by id.

Callers must serialize runs for the same item (one worker per item id);
different items can be processed concurrently.
"""

from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy.orm import Session

from ....core import config as core_config
from ....core.config import ChunkingConfig
from ....core.logging import log
from ....core.models import ChunkingStatus, ErrorCode, ProcessResult
from ....db.engine import KnowledgeItem, get_session
from .coordinator import MAX_ERROR_MESSAGE_CHARS, ChunkingCoordinator


def chunk_knowledge_item(
    item_id: str,
    session_factory: Optional[Callable[[], Session]] = None,
    config: Optional[ChunkingConfig] = None,
) -> Optional[ProcessResult]:
    """Chunk one item and log the outcome.

    Returns None if the item does not exist. Errors escaping the coordinator
    mark the item failed with error code "unknown" and are re-raised.
    """
    session_factory = session_factory or get_session
    config = config or core_config.SETTINGS.chunking_config()

    with session_factory() as session:
        item = session.get(KnowledgeItem, item_id)
        if item is None:
            log.warning("chunk.job.not_found", item_id=item_id)
            return None

        log.info("chunk.job.start", item_id=item_id, source=item.source)
        try:
            result = ChunkingCoordinator(session, config).process_item(item)
        except Exception as e:
            log.error("chunk.job.error", item_id=item_id, error=str(e))
            _mark_failed(session, item_id, str(e))
            raise

        log.info(
            "chunk.job.completed",
            item_id=item_id,
            status=result.status.value,
            chunks_created=result.chunks_created or 0,
            strategy=result.strategy or result.reason,
        )
        return result


def _mark_failed(session: Session, item_id: str, message: str) -> None:
    try:
        session.rollback()
        item = session.get(KnowledgeItem, item_id)
        if item is None:
            return
        item.chunking_status = ChunkingStatus.FAILED.value
        item.chunking_error_code = ErrorCode.UNKNOWN.value
        item.chunking_error_message = message[:MAX_ERROR_MESSAGE_CHARS]
        session.commit()
    except Exception as e:
        session.rollback()
        log.error("chunk.job.mark_failed_error", item_id=item_id, error=str(e))

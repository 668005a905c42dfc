from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class ChunkingStatus(str, Enum):
    CREATED = "created"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(str, Enum):
    EMPTY_AFTER_CLEAN = "empty_after_clean"
    URL_ONLY = "url_only"
    BELOW_MIN_CHARS = "below_min_chars"
    BELOW_MIN_TOKENS = "below_min_tokens"


class ErrorCode(str, Enum):
    EXTRACTOR_RETURNED_EMPTY = "extractor_returned_empty"
    PARSER_ERROR = "parser_error"
    UNKNOWN = "unknown"  # raised outside the strategies (persistence)


class ChunkDraft(BaseModel):
    """A generated chunk before it is persisted."""

    text: str
    role: str
    authority: str = "medium"
    confidence: float = Field(0.6, ge=0.0, le=1.0)
    token_count: int = 0
    domain: Optional[str] = None
    actor: Optional[str] = None
    timeframe: str = "unknown"
    source_text: Optional[str] = None
    source_spans: Optional[list[dict[str, Any]]] = None
    transformation_type: str = "extractive"  # normalized | extractive
    metadata: Optional[dict[str, Any]] = None


class PreflightResult(BaseModel):
    eligible: bool
    skip_reason: Optional[SkipReason] = None
    metrics: dict[str, Any] = {}


class ChunkingDiagnostics(BaseModel):
    """Diagnostic state written onto a knowledge item by one pipeline run.

    Built whole and applied in one step so a run never leaves a mix of old and
    new diagnostic fields.
    """

    status: ChunkingStatus
    skip_reason: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    metrics: dict[str, Any] = {}

    def apply_to(self, item: Any) -> None:
        item.chunking_status = self.status.value
        item.chunking_skip_reason = self.skip_reason
        item.chunking_error_code = self.error_code
        item.chunking_error_message = self.error_message
        item.chunking_metrics = dict(self.metrics)


class ProcessResult(BaseModel):
    """Outcome of one process_item call.

    Shapes: skipped (reason, metrics), failed (error_code, error_message,
    metrics), created (chunks_created, metrics, strategy).
    """

    status: ChunkingStatus
    metrics: dict[str, Any] = {}
    reason: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    chunks_created: Optional[int] = None
    strategy: Optional[str] = None

    def as_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

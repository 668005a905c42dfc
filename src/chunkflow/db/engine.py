from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict
from urllib.parse import urlparse

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    create_engine,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Session
from sqlalchemy.orm import relationship, sessionmaker

from ..core import config


class Base(DeclarativeBase):
    pass


# Global engine and session factory
_engine = None
_session_factory = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_db_url() -> str:
    """Get database URL from settings.

    Raises:
        ValueError: If CHUNKFLOW_DB_URL is not configured.
    """
    db_url = config.SETTINGS.CHUNKFLOW_DB_URL
    if not db_url:
        raise ValueError(
            "CHUNKFLOW_DB_URL is required. "
            "Set CHUNKFLOW_DB_URL to a database URL in your .env file, "
            "then run 'chunkflow db init'."
        )
    return db_url


def get_engine():
    """Get or create the SQLAlchemy engine."""
    global _engine
    if _engine is None:
        _engine = create_engine(get_db_url(), future=True)
    return _engine


def get_session_factory():
    """Get or create the session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine())
    return _session_factory


def get_session() -> Session:
    """Get a new database session."""
    session_factory = get_session_factory()
    return session_factory()


def reset_engine() -> None:
    """Drop the cached engine so the next call re-reads settings."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


def create_tables():
    """Create all tables defined in models."""
    Base.metadata.create_all(get_engine())


def check_db_health() -> Dict[str, Any]:
    """Check database connectivity.

    Returns:
        Dict with status, dialect, database name and host.

    Raises:
        Exception: If database connection fails.
    """
    engine = get_engine()

    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))

        dialect = engine.dialect.name
        parsed_url = urlparse(get_db_url())
        db_name = parsed_url.path.lstrip("/") if parsed_url.path else "default"

        return {
            "status": "ok",
            "dialect": dialect,
            "database": db_name or "memory",
            "host": parsed_url.hostname or "localhost",
        }


class KnowledgeItem(Base):
    """A stored document submitted for ingestion.

    The chunking pipeline reads raw_text, source and normalized_claims and owns
    the chunking_* diagnostic columns.
    """

    __tablename__ = "knowledge_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    organization_id = Column(String(36), nullable=False)
    user_id = Column(String(36), nullable=False)
    ingestion_source_id = Column(String(36))
    source = Column(String(50), nullable=False, default="manual")  # manual, bookmark, platform
    title = Column(String)
    raw_text = Column(Text, nullable=False, default="")
    normalized_claims = Column(JSON)  # {schema_version, artifacts: [...]}

    # Chunking diagnostics (latest run only)
    chunking_status = Column(String(50))  # created, skipped, failed
    chunking_skip_reason = Column(String(100))
    chunking_error_code = Column(String(50))
    chunking_error_message = Column(Text)
    chunking_metrics = Column(JSON)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    chunks = relationship(
        "KnowledgeChunk",
        back_populates="item",
        cascade="all",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_knowledge_items_chunking_status", "chunking_status"),
        Index("idx_knowledge_items_skip_reason", "chunking_skip_reason"),
    )


class KnowledgeChunk(Base):
    """A small extracted or derived fragment of a knowledge item."""

    __tablename__ = "knowledge_chunks"

    id = Column(String(36), primary_key=True)
    knowledge_item_id = Column(
        String(36),
        ForeignKey("knowledge_items.id", ondelete="CASCADE"),
        nullable=False,
    )
    organization_id = Column(String(36), nullable=False)
    user_id = Column(String(36), nullable=False)

    chunk_text = Column(Text, nullable=False)
    chunk_type = Column(String(50), nullable=False, default="normalized_knowledge")
    chunk_role = Column(String(50))  # strategic_claim, instruction, metric, heuristic, ...
    authority = Column(String(10))  # low, medium, high
    confidence = Column(Float)
    time_horizon = Column(String(20), default="unknown")
    domain = Column(String(255))
    actor = Column(String(255))

    source_type = Column(String(50))
    source_variant = Column(String(20))  # normalized, extractive
    source_ref = Column(JSON)
    meta = Column(JSON)  # per-chunk metadata (data point fields)
    token_count = Column(Integer, nullable=False, default=0)  # whitespace tokens
    source_text = Column(Text)
    source_spans = Column(JSON)
    transformation_type = Column(String(20))  # normalized, extractive

    created_at = Column(DateTime(timezone=True), nullable=False)

    item = relationship("KnowledgeItem", back_populates="chunks")

    __table_args__ = (
        Index("idx_knowledge_chunks_item", "knowledge_item_id"),
        Index("idx_knowledge_chunks_org_type", "organization_id", "chunk_type"),
    )

"""Global test configuration for chunkflow tests."""

import pytest
import structlog


@pytest.fixture(autouse=True)
def fresh_logging():
    """Start every test from a clean structlog configuration."""
    from chunkflow.core.logging import setup_logging

    structlog.reset_defaults()
    setup_logging("plain")
    yield
    structlog.reset_defaults()


@pytest.fixture
def db_url(tmp_path, monkeypatch):
    """Point settings and the engine at a fresh SQLite file for one test."""
    from chunkflow.core import config as config_module
    from chunkflow.db import engine as engine_module

    url = f"sqlite:///{tmp_path / 'chunkflow.db'}"

    # The CLI callback reloads settings from env, so set both
    monkeypatch.setenv("CHUNKFLOW_DB_URL", url)
    monkeypatch.setenv("CHUNKFLOW_WORKDIR", str(tmp_path / "var"))
    monkeypatch.setattr(
        config_module,
        "SETTINGS",
        config_module.Settings(CHUNKFLOW_DB_URL=url, CHUNKFLOW_WORKDIR=str(tmp_path / "var")),
    )

    engine_module.reset_engine()
    engine_module.create_tables()

    yield url

    engine_module.reset_engine()


@pytest.fixture
def session(db_url):
    from chunkflow.db.engine import get_session

    with get_session() as session:
        yield session


@pytest.fixture
def make_item(session):
    """Factory that stores a knowledge item and returns it attached to ``session``."""
    from chunkflow.db.engine import KnowledgeItem

    def _make(raw_text="", source="manual", normalized_claims=None, **kwargs):
        item = KnowledgeItem(
            organization_id=kwargs.pop("organization_id", "org-1"),
            user_id=kwargs.pop("user_id", "user-1"),
            source=source,
            raw_text=raw_text,
            normalized_claims=normalized_claims,
            **kwargs,
        )
        session.add(item)
        session.commit()
        return item

    return _make

import json
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import typer
from rich.console import Console
from rich.table import Table

from ..core import config as core_config
from ..core.config import Settings
from ..core.logging import log, setup_logging

app = typer.Typer(add_completion=False, help="chunkflow CLI")
db_app = typer.Typer(help="Database commands")
items_app = typer.Typer(help="Knowledge item commands")
chunk_app = typer.Typer(help="Chunking commands")
app.add_typer(db_app, name="db")
app.add_typer(items_app, name="items")
app.add_typer(chunk_app, name="chunk")

console = Console()


def _safe_db_url(db_url: str) -> str:
    """Mask credentials in a database URL for display."""
    parsed_url = urlparse(db_url)
    if parsed_url.password:
        return db_url.replace(parsed_url.password, "***")
    return db_url


@app.callback()
def _init(
    config_file: Optional[Path] = typer.Option(
        None, "--config", help="Config file (.yaml/.yml/.toml); env vars take precedence"
    ),
) -> None:
    from ..db.engine import reset_engine

    core_config.SETTINGS = Settings.load_config(str(config_file) if config_file else None)
    reset_engine()
    setup_logging(core_config.SETTINGS.LOG_FORMAT)  # type: ignore[arg-type]


@app.command()
def version() -> None:
    from .. import __version__

    typer.echo(__version__)


@app.command()
def config(
    mask_secrets: bool = typer.Option(True, help="Mask secrets in output"),
) -> None:
    """Print effective settings."""
    for k, v in core_config.SETTINGS.model_dump().items():
        if mask_secrets and k == "CHUNKFLOW_DB_URL" and v:
            v = _safe_db_url(v)
        typer.echo(f"{k}={v}")


@db_app.command("init")
def db_init_cmd() -> None:
    """Initialize database schema (safe if tables already exist)."""
    from ..db.engine import create_tables, get_db_url

    try:
        typer.echo(f"Initializing database: {_safe_db_url(get_db_url())}")
        create_tables()
    except Exception as e:
        typer.echo(f"❌ Error initializing database: {e}", err=True)
        raise typer.Exit(1) from e

    typer.echo("✅ Database schema initialized successfully")


@db_app.command("check")
def db_check_cmd() -> None:
    """Check database connectivity."""
    from ..db.engine import check_db_health, get_db_url

    try:
        typer.echo(f"🔍 Checking database: {_safe_db_url(get_db_url())}")
        health_info = check_db_health()
    except Exception as e:
        typer.echo(f"❌ Database check failed: {e}", err=True)
        raise typer.Exit(1) from e

    typer.echo("✅ Database connection successful")
    typer.echo(f"  Engine: {health_info['dialect']}")
    typer.echo(f"  Host: {health_info['host']}")
    typer.echo(f"  Database: {health_info['database']}")


@items_app.command("add")
def items_add_cmd(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Text file to ingest"),
    source: str = typer.Option("manual", "--source", help="Origin tag (manual, bookmark, platform)"),
    organization_id: str = typer.Option("default-org", "--org", help="Owning organization id"),
    user_id: str = typer.Option("default-user", "--user", help="Owning user id"),
    claims: Optional[Path] = typer.Option(
        None, "--claims", exists=True, dir_okay=False, help="JSON file with normalized claims"
    ),
) -> None:
    """Store a text file as a knowledge item and print its id."""
    from ..db.engine import KnowledgeItem, get_session

    normalized_claims = None
    if claims is not None:
        try:
            normalized_claims = json.loads(claims.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            typer.echo(f"❌ Invalid claims JSON: {e}", err=True)
            raise typer.Exit(1) from e

    try:
        with get_session() as session:
            item = KnowledgeItem(
                organization_id=organization_id,
                user_id=user_id,
                source=source,
                title=file.stem,
                raw_text=file.read_text(encoding="utf-8"),
                normalized_claims=normalized_claims,
            )
            session.add(item)
            session.commit()
            item_id = item.id
    except Exception as e:
        typer.echo(f"❌ Could not store item: {e}", err=True)
        raise typer.Exit(1) from e

    typer.echo(item_id)


@chunk_app.command("item")
def chunk_item_cmd(
    item_id: str = typer.Argument(..., help="Knowledge item id"),
) -> None:
    """Chunk a single knowledge item and print the result as JSON."""
    from ..pipeline.steps.chunk.job import chunk_knowledge_item

    try:
        result = chunk_knowledge_item(item_id)
    except Exception as e:
        typer.echo(f"❌ Chunking failed: {e}", err=True)
        raise typer.Exit(1) from e

    if result is None:
        typer.echo(f"❌ Knowledge item {item_id} not found", err=True)
        raise typer.Exit(1)

    typer.echo(json.dumps(result.as_dict(), indent=2))


@chunk_app.command("pending")
def chunk_pending_cmd(
    all_items: bool = typer.Option(False, "--all", help="Re-chunk every item, not only unprocessed ones"),
    limit: Optional[int] = typer.Option(None, "--limit", min=1, help="Maximum items to process"),
) -> None:
    """
    Chunk knowledge items that have not been chunked yet.

    Items are processed one at a time; each run replaces that item's chunks.
    Events are written to var/logs/<run_id>/events.ndjson.

    Example:
        chunkflow chunk pending              # Only items without a chunking status
        chunkflow chunk pending --all        # Re-chunk everything
    """
    from sqlalchemy import select

    from ..core.artifacts import new_run_id
    from ..core.paths import ensure_all
    from ..db.engine import KnowledgeItem, get_session
    from ..obs.events import EventEmitter
    from ..pipeline.steps.chunk.job import chunk_knowledge_item

    try:
        with get_session() as session:
            query = select(KnowledgeItem.id).order_by(KnowledgeItem.created_at, KnowledgeItem.id)
            if not all_items:
                query = query.where(KnowledgeItem.chunking_status.is_(None))
            if limit:
                query = query.limit(limit)
            item_ids = list(session.scalars(query))
    except Exception as e:
        typer.echo(f"❌ Could not list items: {e}", err=True)
        raise typer.Exit(1) from e

    ensure_all()
    run_id = new_run_id()
    counts = {"created": 0, "skipped": 0, "failed": 0, "errors": 0}
    typer.echo(f"🔄 Chunking {len(item_ids)} item(s) in run {run_id}", err=True)

    with EventEmitter(run_id, phase="chunk", component="coordinator") as emitter:
        emitter.start(counts={"items": len(item_ids)})
        for item_id in item_ids:
            try:
                result = chunk_knowledge_item(item_id)
            except Exception as e:
                counts["errors"] += 1
                emitter.error(str(e), item_id=item_id)
                log.error("chunk.pending.item_error", item_id=item_id, error=str(e))
                continue
            if result is None:
                emitter.warning("item disappeared before chunking", item_id=item_id)
                continue
            counts[result.status.value] += 1
            emitter.tick(item_id, result.status.value, strategy=result.strategy)
        emitter.complete(counts)

    typer.echo(
        f"✅ created={counts['created']} skipped={counts['skipped']} "
        f"failed={counts['failed']} errors={counts['errors']}",
        err=True,
    )
    if counts["errors"]:
        raise typer.Exit(1)


@app.command()
def status() -> None:
    """Show knowledge items per chunking status and reason."""
    from sqlalchemy import func, select

    from ..db.engine import KnowledgeItem, get_session

    reason = func.coalesce(KnowledgeItem.chunking_skip_reason, KnowledgeItem.chunking_error_code)
    try:
        with get_session() as session:
            rows = session.execute(
                select(KnowledgeItem.chunking_status, reason, func.count())
                .group_by(KnowledgeItem.chunking_status, reason)
                .order_by(KnowledgeItem.chunking_status, reason)
            ).all()
    except Exception as e:
        typer.echo(f"❌ Could not read status: {e}", err=True)
        raise typer.Exit(1) from e

    table = Table(title="Chunking status")
    table.add_column("Status")
    table.add_column("Reason")
    table.add_column("Items", justify="right")
    for chunk_status, chunk_reason, count in rows:
        table.add_row(chunk_status or "pending", chunk_reason or "-", str(count))

    console.print(table)

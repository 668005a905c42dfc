from datetime import datetime, timezone
import uuid


def new_run_id() -> str:
    """Identifier for one batch of chunking work, sortable by start time."""
    return f"{datetime.now(timezone.utc).strftime('%Y-%m-%d_%H%M%S')}_{uuid.uuid4().hex[:4]}"


def new_chunk_id() -> str:
    return str(uuid.uuid4())

"""Batch event emitter writing NDJSON lines per run."""

import json
import os
import time
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from ..core.logging import log


class EventLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class EventAction(str, Enum):
    START = "start"
    TICK = "tick"
    COMPLETE = "complete"
    ERROR = "error"
    WARNING = "warning"


_STATUS = {
    EventAction.START: "START",
    EventAction.COMPLETE: "END",
    EventAction.ERROR: "FAIL",
    EventAction.WARNING: "OK",
    EventAction.TICK: "OK",
}


class EventEmitter:
    """Append structured events to <log_dir>/<run_id>/events.ndjson.

    Use as a context manager; events emitted outside the context are dropped.
    """

    def __init__(
        self,
        run_id: str,
        phase: str,
        component: str,
        log_dir: Optional[str] = None,
    ):
        self.run_id = run_id
        self.phase = phase
        self.component = component
        self.pid = os.getpid()

        if log_dir is None:
            from ..core.paths import logs

            self.log_dir = logs()
        else:
            self.log_dir = Path(log_dir)
        self.run_log_dir = self.log_dir / run_id
        self.events_path = self.run_log_dir / "events.ndjson"

        self._file: Optional[TextIO] = None
        self._start_time = time.monotonic()

    def __enter__(self):
        self.run_log_dir.mkdir(parents=True, exist_ok=True)
        self._file = open(self.events_path, "a", encoding="utf-8")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._file:
            self._file.close()
            self._file = None

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self._start_time) * 1000)

    def _emit(
        self,
        action: EventAction,
        level: EventLevel = EventLevel.INFO,
        duration_ms: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        if not self._file:
            return

        event: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level.value.upper(),
            "stage": self.phase,
            "rid": self.run_id,
            "op": kwargs.pop("op", None) or f"{self.component}.{action.value}",
            "status": _STATUS[action],
            "pid": self.pid,
            "duration_ms": duration_ms,
            "counts": kwargs.pop("counts", None),
            "item_id": kwargs.pop("item_id", None),
            "reason": kwargs.pop("reason", None),
        }
        event.update(kwargs)

        try:
            self._file.write(json.dumps({k: v for k, v in event.items() if v is not None}) + "\n")
            self._file.flush()
        except OSError as e:
            # Observability must not break the batch
            log.warning("events.write_failed", path=str(self.events_path), error=str(e))

    def start(self, **kwargs: Any) -> None:
        self._emit(EventAction.START, **kwargs)

    def tick(self, item_id: str, status: str, **kwargs: Any) -> None:
        self._emit(EventAction.TICK, item_id=item_id, result=status, **kwargs)

    def complete(self, counts: Dict[str, int], **kwargs: Any) -> None:
        self._emit(
            EventAction.COMPLETE,
            duration_ms=self.elapsed_ms(),
            counts=counts,
            **kwargs,
        )

    def warning(self, message: str, **kwargs: Any) -> None:
        self._emit(EventAction.WARNING, level=EventLevel.WARNING, reason=message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._emit(EventAction.ERROR, level=EventLevel.ERROR, reason=message, **kwargs)

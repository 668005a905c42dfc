import os
import sys
from typing import Any, Literal

import structlog

LogFormat = Literal["json", "plain", "auto"]


def _should_use_json_format() -> bool:
    """Use JSON when running under CI or when stdout is not a terminal."""
    ci_vars = ["CI", "CONTINUOUS_INTEGRATION", "GITHUB_ACTIONS", "JENKINS_URL"]
    if any(os.environ.get(var) for var in ci_vars):
        return True

    return bool(not sys.stdout.isatty())


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    """Print to the current sys.stderr."""
    return structlog.PrintLogger(file=sys.stderr)


def setup_logging(format_type: LogFormat = "auto") -> None:
    """
    Configure structlog for chunkflow.

    Args:
        format_type: "json" for JSON lines, "plain" for human-readable console
            output, "auto" to pick based on TTY/CI.

    Logs go to stderr so that command output on stdout stays machine-readable.
    """
    use_json = format_type == "json" or (format_type == "auto" and _should_use_json_format())

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if use_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        logger_factory=_stderr_logger,
        # Module-level `log` proxies must not pin the first stream they saw
        cache_logger_on_first_use=False,
    )


log = structlog.get_logger()

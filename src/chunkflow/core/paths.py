"""Workspace path management.

Tool-managed artifacts (batch event logs) live under var/, configurable via
CHUNKFLOW_WORKDIR. Relative workdirs resolve against the current directory.
"""

from pathlib import Path

from . import config


def workdir() -> Path:
    """Tool-managed workspace directory (default: var/)"""
    return Path(config.SETTINGS.CHUNKFLOW_WORKDIR)


def logs() -> Path:
    """Event log directory (default: var/logs/)"""
    return workdir() / "logs"


def ensure_all() -> None:
    """Create workspace directories if they don't exist."""
    for dir_path in [workdir(), logs()]:
        dir_path.mkdir(parents=True, exist_ok=True)

"""Append-only debug and audit log."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from pharmacy_pos import config


def log_debug(message: str) -> None:
    """Append one timestamped line to the debug log."""
    try:
        ts = datetime.now(timezone.utc).isoformat()
        path = Path(config.DEBUG_LOG_PATH)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(f"{ts} {message}\n")
    except OSError:
        # Logging must never interfere with the sale flow.
        return


def log_action(action: str, entity: str, details: str) -> None:
    """Record a user-visible business action (sale created, sale cancelled)."""
    log_debug(f"audit action={action!r} entity={entity!r} details={details!r}")

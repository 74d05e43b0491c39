"""PACER Logging Utilities.

JSONL logging for refresh events and debugging.
"""

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Any


class JsonlLogger:
    """Append-only JSONL logger for PACER events."""

    def __init__(self, log_path: Path):
        self.log_path = log_path
        self._ensure_dir()

    def _ensure_dir(self) -> None:
        """Ensure log directory exists."""
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, event: str, data: Optional[Dict[str, Any]] = None) -> None:
        """Log an event with optional data.

        Args:
            event: Event type (e.g., "refresh_start", "refresh_end", "error")
            data: Optional event data
        """
        entry = {
            "ts": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
            "event": event,
            "pid": os.getpid(),
        }

        if data:
            entry.update(data)

        try:
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry) + "\n")
        except IOError:
            pass  # Best effort logging

    def log_refresh_start(self, source: str) -> None:
        self.log("refresh_start", {"source": source})

    def log_refresh_end(
        self,
        zone: str,
        buffer: float,
        used_units: float,
        monthly_limit: float,
    ) -> None:
        """Log a completed refresh."""
        self.log("refresh_end", {
            "zone": zone,
            "buffer": round(buffer, 2),
            "used_units": used_units,
            "monthly_limit": monthly_limit,
        })

    def log_username_resolved(self, username: str, reason: str) -> None:
        self.log("username_resolved", {"username": username, "reason": reason})

    def log_limit_reset(self, invalid_value: Any, default: float) -> None:
        self.log("limit_reset", {"invalid_value": repr(invalid_value), "default": default})

    def log_error(self, error: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Log an error."""
        data: Dict[str, Any] = {"error": error}
        if context:
            data["context"] = context
        self.log("error", data)

    def read_recent(self, n: int = 50) -> list:
        """Read the last N log entries."""
        if not self.log_path.exists():
            return []

        entries = []
        try:
            with open(self.log_path, "r", encoding="utf-8") as f:
                lines = f.readlines()
                for line in lines[-n:]:
                    try:
                        entries.append(json.loads(line))
                    except json.JSONDecodeError:
                        continue
        except IOError:
            pass

        return entries

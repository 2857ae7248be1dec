"""Audit trail module for OpenHue MCP."""

from __future__ import annotations

import csv
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock


class AuditWriter:
    """CSV writer for the tool call audit trail.

    Appends one row per tool call (which light/room/scene command ran, how
    long it took, whether it failed). Thread-safe with lazy file creation.
    """

    CSV_HEADERS = [
        "timestamp",
        "correlation_id",
        "tool",
        "latency_ms",
        "status",
        "error_code",
    ]

    def __init__(self, csv_path: str | Path, enabled: bool = True):
        self.csv_path = Path(csv_path)
        self.enabled = enabled
        self._lock = Lock()
        self._initialized = False

    def _ensure_file(self) -> None:
        """Create CSV file with headers if needed."""
        if self._initialized:
            return

        self.csv_path.parent.mkdir(parents=True, exist_ok=True)

        if not self.csv_path.exists():
            with open(self.csv_path, "w", newline="") as f:
                writer = csv.writer(f)
                writer.writerow(self.CSV_HEADERS)

        self._initialized = True

    def record(
        self,
        correlation_id: str,
        tool: str,
        latency_ms: float,
        success: bool,
        error_code: str | None = None,
    ) -> None:
        """Append a record to the audit CSV."""
        if not self.enabled:
            return

        with self._lock:
            self._ensure_file()

            with open(self.csv_path, "a", newline="") as f:
                writer = csv.writer(f)
                writer.writerow([
                    datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
                    correlation_id,
                    tool,
                    round(latency_ms, 2),
                    "ok" if success else "error",
                    error_code or "",
                ])

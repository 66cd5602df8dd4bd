"""
Run ledger — one NDJSON line per sync run.

When ``audit_log`` is configured, each run appends a summary: when and
where it ran, the counts per outcome, and which packages failed and
why. The receipts say what is installed; the ledger says what each
startup did about it. Nothing in the engine reads it back.
"""

from __future__ import annotations

import json
import logging
import socket
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class AuditEntry(BaseModel):
    """Summary of one sync run."""

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    host: str = Field(default_factory=socket.gethostname)
    run_id: str = ""
    working_directory: str = ""
    always_install: bool = False

    status: str = ""               # ok, partial, failed
    packages_total: int = 0
    packages_installed: int = 0
    packages_skipped: int = 0
    packages_failed: int = 0
    duration_ms: int = 0

    failed_packages: list[str] = Field(default_factory=list)   # container/name keys
    errors: list[str] = Field(default_factory=list)            # "<key or entry>: <cause>"


class AuditWriter:
    """Appends run summaries to an NDJSON file, creating it on first use."""

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: AuditEntry) -> None:
        """Append ``entry``. Failures are logged, not raised."""
        line = json.dumps(entry.model_dump(mode="json"), ensure_ascii=False)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            logger.error("Failed to write ledger entry to %s: %s", self._path, e)
            return
        logger.debug("Ledger entry written for run %s", entry.run_id)

    def entries(self) -> Iterator[AuditEntry]:
        """Yield entries oldest first, skipping lines that don't parse."""
        if not self._path.is_file():
            return
        with self._path.open("r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    yield AuditEntry.model_validate_json(line)
                except ValidationError as e:
                    logger.warning("Skipping corrupt ledger line %d in %s: %s", line_num, self._path, e)

    def read_all(self) -> list[AuditEntry]:
        return list(self.entries())

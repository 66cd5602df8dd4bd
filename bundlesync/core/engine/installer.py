"""
Installer — fetch, extract, clean up, record.

    catalog.fetch_to(tmp) → extractor.extract(tmp, working_dir)
        → delete tmp → receipts.put(name, now)

Each step runs at most once. Any failure ends the install with a
'failed' outcome; extracted files are never rolled back. Deleting the
temp download is best-effort and cannot fail an install.
"""

from __future__ import annotations

import logging
import os
import tempfile
import time
from datetime import UTC, datetime
from pathlib import Path

from bundlesync.adapters.base import ArchiveExtractor, RemoteCatalog
from bundlesync.core.errors import ExtractionError, InstallError
from bundlesync.core.models.outcome import InstallOutcome
from bundlesync.core.models.package import ResolvedPackage
from bundlesync.core.persistence.receipts import ReceiptStore

logger = logging.getLogger(__name__)


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not delete temporary file %s: %s", path, e)


class Installer:
    """Installs one resolved package into the working directory."""

    def __init__(
        self,
        catalog: RemoteCatalog,
        extractor: ArchiveExtractor,
        receipts: ReceiptStore,
        working_directory: Path,
        temp_directory: Path | None = None,
    ):
        self._catalog = catalog
        self._extractor = extractor
        self._receipts = receipts
        self._working_directory = working_directory
        self._temp_directory = temp_directory

    @property
    def working_directory(self) -> Path:
        return self._working_directory

    def _allocate_temp(self, package: ResolvedPackage) -> Path:
        if self._temp_directory is not None:
            self._temp_directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self._temp_directory,
            prefix="bundlesync_",
            suffix=Path(package.name).suffix or ".pkg",
        )
        os.close(fd)
        return Path(tmp_path)

    def _extract(self, package: ResolvedPackage, archive: Path) -> None:
        logger.info("Extracting %s", package.name)
        result = self._extractor.extract(archive, self._working_directory)
        if not result.ok:
            if result.stdout:
                logger.error("%s output:\n%s", self._extractor.name, result.stdout)
            raise ExtractionError(
                result.error or f"{self._extractor.name} failed",
                output=result.diagnostics,
                return_code=result.return_code,
            )
        logger.info("Extraction finished")

    def install(self, package: ResolvedPackage) -> InstallOutcome:
        """Install ``package`` and return its outcome. Never raises."""
        started_at = datetime.now(UTC)
        start = time.monotonic()

        def elapsed() -> dict:
            return {
                "started_at": started_at.isoformat(),
                "ended_at": datetime.now(UTC).isoformat(),
                "duration_ms": int((time.monotonic() - start) * 1000),
            }

        tmp: Path | None = None
        try:
            tmp = self._allocate_temp(package)
            self._catalog.fetch_to(package.container, package.name, tmp)
            self._extract(package, tmp)
        except ExtractionError as e:
            return InstallOutcome.failure(
                package,
                error=str(e),
                metadata={"step": "extract", "output": e.output, "return_code": e.return_code},
                **elapsed(),
            )
        except (InstallError, OSError) as e:
            return InstallOutcome.failure(
                package, error=str(e), metadata={"step": "fetch"}, **elapsed()
            )
        finally:
            if tmp is not None:
                _discard(tmp)

        try:
            self._receipts.put(package.name, datetime.now(UTC))
        except (InstallError, OSError) as e:
            logger.error("Package \"%s\" extracted but its receipt was not written", package.key)
            return InstallOutcome.failure(
                package, error=str(e), metadata={"step": "receipt"}, **elapsed()
            )

        return InstallOutcome.installed(
            package,
            reason=f"extracted to {self._working_directory}",
            **elapsed(),
        )

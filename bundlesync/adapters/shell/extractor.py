"""
Command extractor — unpack archives with an external tool.

Extraction correctness belongs to the tool (7-Zip by default). This
adapter only builds the argv, runs it without a shell, captures the
output, and reports the exit status.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from pathlib import Path

from bundlesync.adapters.base import ArchiveExtractor, CommandResult
from bundlesync.core.config.loader import DEFAULT_EXTRACT_COMMAND

logger = logging.getLogger(__name__)


class CommandExtractor(ArchiveExtractor):
    """Run an extractor command built from an argv template.

    Template placeholders:
        {archive}      path of the downloaded archive
        {destination}  directory to extract into
    """

    def __init__(self, command: list[str] | None = None, timeout: int = 600):
        self._command = list(command or DEFAULT_EXTRACT_COMMAND)
        self._timeout = timeout

    @property
    def name(self) -> str:
        return Path(self._command[0]).name

    @property
    def command(self) -> list[str]:
        return list(self._command)

    def is_available(self) -> bool:
        return shutil.which(self._command[0]) is not None

    def build_argv(self, archive: Path, destination: Path) -> list[str]:
        return [
            arg.format(archive=archive, destination=destination)
            for arg in self._command
        ]

    def extract(self, archive: Path, destination: Path) -> CommandResult:
        argv = self.build_argv(archive, destination)
        logger.debug("Extracting: %s", " ".join(argv))
        start = time.monotonic()

        try:
            destination.mkdir(parents=True, exist_ok=True)
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                stdin=subprocess.DEVNULL,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(
                ok=False,
                error=f"{self.name} timed out after {self._timeout}s",
            )
        except OSError as e:
            return CommandResult(ok=False, error=f"Cannot run {self.name}: {e}")

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = result.stdout.strip()
        stderr = result.stderr.strip()

        if result.returncode != 0:
            return CommandResult(
                ok=False,
                return_code=result.returncode,
                stdout=stdout,
                stderr=stderr,
                error=f"{self.name} exited with error code {result.returncode}",
                duration_ms=elapsed_ms,
            )

        return CommandResult(
            ok=True,
            return_code=0,
            stdout=stdout,
            stderr=stderr,
            duration_ms=elapsed_ms,
        )

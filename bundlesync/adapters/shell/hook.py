"""
Script hook runner — run a package's post-install script to completion.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import time
from pathlib import Path

from bundlesync.adapters.base import CommandResult, HookRunner

logger = logging.getLogger(__name__)


def _script_argv(script: Path) -> list[str]:
    suffix = script.suffix.lower()
    if suffix in (".bat", ".cmd"):
        return ["cmd", "/c", str(script)]
    if suffix == ".py":
        return [sys.executable, str(script)]
    if suffix == ".sh" and not os.access(script, os.X_OK):
        return ["sh", str(script)]
    return [str(script)]


class ScriptHookRunner(HookRunner):
    """Run a hook script synchronously and record its exit code."""

    def __init__(self, timeout: int | None = None):
        self._timeout = timeout

    def run(self, script: Path, cwd: Path) -> CommandResult:
        argv = _script_argv(script)
        logger.info("Starting %s", script)
        start = time.monotonic()

        try:
            result = subprocess.run(
                argv,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                stdin=subprocess.DEVNULL,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(ok=False, error=f"Hook timed out after {self._timeout}s")
        except OSError as e:
            return CommandResult(ok=False, error=f"Cannot start hook {script}: {e}")

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info("Finished %s", script)
        logger.info("Exit code = %d", result.returncode)

        return CommandResult(
            ok=result.returncode == 0,
            return_code=result.returncode,
            stdout=result.stdout.strip(),
            stderr=result.stderr.strip(),
            duration_ms=elapsed_ms,
        )

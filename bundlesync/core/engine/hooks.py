"""
Post-install hooks — optional script shipped inside a package.

After a package installs, look for ``<working_dir>/<package>/<script>``
and run it. Its exit code is recorded; its failure is only logged.
"""

from __future__ import annotations

import logging
from pathlib import Path

from bundlesync.adapters.base import CommandResult, HookRunner
from bundlesync.core.errors import HookError
from bundlesync.core.models.package import ResolvedPackage

logger = logging.getLogger(__name__)


def find_hook(package: ResolvedPackage, working_directory: Path, script_name: str) -> Path | None:
    """Locate the hook script for an extracted package.

    The package directory is the name without its archive suffix
    (``tool.zip`` → ``tool/``); the literal name is tried as a fallback.
    """
    for directory in dict.fromkeys((package.stem, package.name)):
        candidate = working_directory / directory / script_name
        if candidate.is_file():
            return candidate
    return None


def run_post_install_hook(
    package: ResolvedPackage,
    working_directory: Path,
    script_name: str,
    runner: HookRunner,
) -> int | None:
    """Run the package's hook if present.

    Returns:
        The hook's exit code, or None when there is no hook or it
        could not be started.
    """
    script = find_hook(package, working_directory, script_name)
    if script is None:
        logger.debug("No %s in %s", script_name, package.key)
        return None

    try:
        return _exit_code(script, runner.run(script, script.parent), package)
    except HookError as e:
        logger.warning("Post-install hook for %s failed: %s", package.key, e)
        return None


def _exit_code(script: Path, result: CommandResult, package: ResolvedPackage) -> int:
    if result.return_code is None:
        raise HookError(result.error or f"Hook {script} did not run")

    if not result.ok:
        logger.warning(
            "Post-install hook for %s exited with code %d: %s",
            package.key,
            result.return_code,
            result.diagnostics,
        )
    return result.return_code

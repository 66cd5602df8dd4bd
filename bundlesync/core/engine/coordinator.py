"""
Run coordinator — the sequential install loop.

Packages are attempted one at a time, in resolved order. Each one ends
in exactly one outcome before the next begins, and nothing that happens
to one package can stop another from being attempted.

Flow per package:
    staleness check → install → post-install hook → outcome
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from bundlesync.adapters.base import HookRunner, RemoteCatalog
from bundlesync.core.engine.hooks import run_post_install_hook
from bundlesync.core.engine.installer import Installer
from bundlesync.core.engine.resolver import EntryError
from bundlesync.core.engine.staleness import needs_install
from bundlesync.core.models.outcome import InstallOutcome
from bundlesync.core.models.package import ResolvedPackage
from bundlesync.core.persistence.audit import AuditEntry, AuditWriter
from bundlesync.core.persistence.receipts import ReceiptStore

logger = logging.getLogger(__name__)

_MARKERS = {"installed": "✓", "skipped": "⊘", "failed": "✗"}


@dataclass
class HookSettings:
    """Post-install hook behaviour for one run."""

    runner: HookRunner
    script_name: str = "runme.sh"


@dataclass
class SyncReport:
    """Result of one sync run."""

    run_id: str = ""
    always_install: bool = False
    outcomes: list[InstallOutcome] = field(default_factory=list)
    resolution_errors: list[EntryError] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def installed(self) -> int:
        return sum(1 for o in self.outcomes if o.status == "installed")

    @property
    def skipped(self) -> int:
        return sum(1 for o in self.outcomes if o.status == "skipped")

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.failed)

    @property
    def all_ok(self) -> bool:
        return self.failed == 0 and not self.resolution_errors

    @property
    def status(self) -> str:
        if self.all_ok:
            return "ok"
        if self.installed or self.skipped:
            return "partial"
        return "failed"

    def to_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "status": self.status,
            "always_install": self.always_install,
            "total": self.total,
            "installed": self.installed,
            "skipped": self.skipped,
            "failed": self.failed,
            "duration_ms": self.duration_ms,
            "resolution_errors": [e.to_dict() for e in self.resolution_errors],
            "outcomes": [o.model_dump(mode="json") for o in self.outcomes],
        }


def attempt_package(
    package: ResolvedPackage,
    installer: Installer,
    receipts: ReceiptStore,
    catalog: RemoteCatalog,
    *,
    always_install: bool = False,
    hooks: HookSettings | None = None,
) -> InstallOutcome:
    """Bring one package up to date. Never raises."""
    try:
        if not needs_install(package, receipts, catalog, always_install=always_install):
            return InstallOutcome.skipped(package, reason="receipt is newer than remote object")

        logger.info("Installing %s", package.key)
        outcome = installer.install(package)
    except Exception as e:
        return InstallOutcome.failure(package, error=f"{type(e).__name__}: {e}")

    if outcome.status == "installed" and hooks is not None:
        try:
            outcome.hook_exit_code = run_post_install_hook(
                package,
                installer.working_directory,
                hooks.script_name,
                hooks.runner,
            )
        except Exception:
            logger.exception("Post-install hook for %s could not run", package.key)

    return outcome


def run_packages(
    packages: Iterable[ResolvedPackage],
    installer: Installer,
    receipts: ReceiptStore,
    catalog: RemoteCatalog,
    *,
    always_install: bool = False,
    hooks: HookSettings | None = None,
    run_id: str = "",
) -> SyncReport:
    """Attempt every package in order and collect the outcomes.

    Args:
        packages: Resolved packages, in install order.
        installer: Installer bound to the working directory.
        receipts: Receipt store consulted by the staleness check.
        catalog: Remote catalog for metadata queries.
        always_install: Skip the staleness check and reinstall everything.
        hooks: Post-install hook settings; None disables hooks.
        run_id: Identifier for logs and the ledger.

    Returns:
        SyncReport with one outcome per package.
    """
    report = SyncReport(run_id=run_id or generate_run_id(), always_install=always_install)
    start = time.monotonic()

    for package in packages:
        outcome = attempt_package(
            package,
            installer,
            receipts,
            catalog,
            always_install=always_install,
            hooks=hooks,
        )
        report.outcomes.append(outcome)

        if outcome.failed:
            logger.error(
                "%s Package \"%s\" failed to install, %s",
                _MARKERS["failed"],
                package.key,
                outcome.error,
            )
        else:
            logger.info("%s %s → %s", _MARKERS[outcome.status], package.key, outcome.status)

    report.duration_ms = int((time.monotonic() - start) * 1000)
    logger.info(
        "Run %s finished: %d installed, %d skipped, %d failed",
        report.run_id,
        report.installed,
        report.skipped,
        report.failed,
    )
    return report


def write_audit_entry(
    report: SyncReport,
    audit_path: Path,
    working_directory: Path | None = None,
) -> None:
    """Append the run's summary to the ledger."""
    errors = [f"{o.package.key}: {o.error}" for o in report.outcomes if o.failed]
    errors += [f"{e.entry}: {e.error}" for e in report.resolution_errors]

    AuditWriter(audit_path).write(
        AuditEntry(
            run_id=report.run_id,
            working_directory=str(working_directory or ""),
            always_install=report.always_install,
            status=report.status,
            packages_total=report.total,
            packages_installed=report.installed,
            packages_skipped=report.skipped,
            packages_failed=report.failed,
            duration_ms=report.duration_ms,
            failed_packages=[o.package.key for o in report.outcomes if o.failed],
            errors=errors,
        )
    )


def generate_run_id() -> str:
    """Generate a unique run ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"run-{now}-{short}"

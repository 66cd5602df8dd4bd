"""
Sync use case — resolve the package list and bring every package up to date.

This is the full vertical slice the agent runs at startup:
config → catalog → resolve → install loop → ledger → exit status.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from botocore.exceptions import BotoCoreError

from bundlesync.adapters.base import ArchiveExtractor, HookRunner, RemoteCatalog
from bundlesync.core.config.loader import SyncConfig
from bundlesync.core.engine.coordinator import (
    HookSettings,
    SyncReport,
    generate_run_id,
    run_packages,
    write_audit_entry,
)
from bundlesync.core.engine.installer import Installer
from bundlesync.core.engine.resolver import ResolutionResult, resolve_packages
from bundlesync.core.errors import ConfigError
from bundlesync.core.persistence.receipts import FileReceiptStore, ReceiptStore

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Result of a sync run."""

    report: SyncReport | None = None
    resolution: ResolutionResult | None = None
    fail_on_error: bool = True
    error: str | None = None

    @property
    def exit_code(self) -> int:
        """Process exit status for this run."""
        if self.error:
            return 2
        if self.report is None or self.report.all_ok or not self.fail_on_error:
            return 0
        return 1

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return self.report.to_dict() if self.report else {}


def build_catalog(config: SyncConfig) -> RemoteCatalog:
    """Create the remote catalog for the configured connection.

    Raises:
        ConfigError: If the client cannot be created (bad profile, region...).
    """
    from bundlesync.adapters.storage.s3 import S3Catalog

    try:
        return S3Catalog.from_settings(config.connection)
    except BotoCoreError as e:
        raise ConfigError(f"Cannot create storage client: {e}") from e


def build_extractor(config: SyncConfig) -> ArchiveExtractor:
    from bundlesync.adapters.shell.extractor import CommandExtractor

    return CommandExtractor(config.extractor.command, timeout=config.extractor.timeout)


def build_hook_runner(config: SyncConfig) -> HookRunner:
    from bundlesync.adapters.shell.hook import ScriptHookRunner

    return ScriptHookRunner(timeout=config.hook_timeout)


def run_sync(
    config: SyncConfig,
    catalog: RemoteCatalog | None = None,
    extractor: ArchiveExtractor | None = None,
    receipts: ReceiptStore | None = None,
    hook_runner: HookRunner | None = None,
    always_install: bool | None = None,
) -> SyncResult:
    """Run one sync.

    Args:
        config: Validated configuration.
        catalog: Optional pre-built catalog (default: S3 from config).
        extractor: Optional pre-built extractor (default: configured command).
        receipts: Optional receipt store (default: files in the working directory).
        hook_runner: Optional hook runner (default: subprocess runner).
        always_install: Override ``config.always_install`` for this run.

    Returns:
        SyncResult with the run report. Only a configuration problem
        fills ``error``; package failures live in the report.
    """
    result = SyncResult(fail_on_error=config.fail_on_error)
    force = config.always_install if always_install is None else always_install
    working_directory = config.working_directory

    # ── Collaborators ────────────────────────────────────────────
    try:
        working_directory.mkdir(parents=True, exist_ok=True)
        if catalog is None:
            catalog = build_catalog(config)
    except ConfigError as e:
        result.error = str(e)
        return result
    except OSError as e:
        result.error = f"Cannot create working directory {working_directory}: {e}"
        return result

    if extractor is None:
        extractor = build_extractor(config)
    if receipts is None:
        receipts = FileReceiptStore(working_directory)

    hooks = None
    if config.run_hooks:
        hooks = HookSettings(
            runner=hook_runner or build_hook_runner(config),
            script_name=config.hook_script,
        )

    if force:
        logger.warning("always_install is on: every package will be reinstalled")

    # ── Resolve ──────────────────────────────────────────────────
    run_id = generate_run_id()
    logger.info("InstallPackages (run %s)", run_id)
    resolution = resolve_packages(config.packages, catalog)
    result.resolution = resolution

    # ── Install ──────────────────────────────────────────────────
    installer = Installer(
        catalog=catalog,
        extractor=extractor,
        receipts=receipts,
        working_directory=working_directory,
        temp_directory=config.temp_directory,
    )
    report = run_packages(
        resolution.packages,
        installer,
        receipts,
        catalog,
        always_install=force,
        hooks=hooks,
        run_id=run_id,
    )
    report.resolution_errors = list(resolution.errors)
    result.report = report

    # ── Ledger ───────────────────────────────────────────────────
    if config.audit_log is not None:
        write_audit_entry(report, config.audit_log, working_directory)

    return result

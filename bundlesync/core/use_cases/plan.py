"""
Plan use case — what would a sync do right now?

Resolves the package list and runs the staleness check for each
package without fetching, extracting, or writing anything.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from bundlesync.adapters.base import RemoteCatalog
from bundlesync.core.config.loader import SyncConfig
from bundlesync.core.engine.resolver import EntryError, resolve_packages
from bundlesync.core.engine.staleness import needs_install
from bundlesync.core.errors import ConfigError
from bundlesync.core.models.package import ResolvedPackage
from bundlesync.core.persistence.receipts import FileReceiptStore, ReceiptStore
from bundlesync.core.use_cases.sync import build_catalog

logger = logging.getLogger(__name__)


@dataclass
class PlanItem:
    package: ResolvedPackage
    action: str            # install, skip, error
    detail: str = ""

    def to_dict(self) -> dict:
        return {"package": self.package.key, "action": self.action, "detail": self.detail}


@dataclass
class PlanResult:
    items: list[PlanItem] = field(default_factory=list)
    resolution_errors: list[EntryError] = field(default_factory=list)
    always_install: bool = False
    error: str | None = None

    @property
    def to_install(self) -> list[PlanItem]:
        return [i for i in self.items if i.action == "install"]

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "always_install": self.always_install,
            "items": [i.to_dict() for i in self.items],
            "resolution_errors": [e.to_dict() for e in self.resolution_errors],
        }


def plan_sync(
    config: SyncConfig,
    catalog: RemoteCatalog | None = None,
    receipts: ReceiptStore | None = None,
) -> PlanResult:
    """Preview a sync without side effects."""
    result = PlanResult(always_install=config.always_install)

    if catalog is None:
        try:
            catalog = build_catalog(config)
        except ConfigError as e:
            result.error = str(e)
            return result
    if receipts is None:
        receipts = FileReceiptStore(config.working_directory)

    resolution = resolve_packages(config.packages, catalog)
    result.resolution_errors = list(resolution.errors)

    for package in resolution.packages:
        try:
            stale = needs_install(
                package, receipts, catalog, always_install=config.always_install
            )
        except Exception as e:
            result.items.append(PlanItem(package, "error", f"{type(e).__name__}: {e}"))
            continue

        if stale:
            detail = "always_install" if config.always_install else "remote is newer"
            result.items.append(PlanItem(package, "install", detail))
        else:
            result.items.append(PlanItem(package, "skip", "receipt is current"))

    return result

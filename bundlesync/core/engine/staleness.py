"""
Staleness checker — does this package need (re)installing?

A package is stale when its receipt is strictly older than the remote
object's last-modified time. No receipt means stale. Equal timestamps
mean current. Clock drift between this machine and the object store is
not corrected for.
"""

from __future__ import annotations

import logging
from datetime import datetime

from bundlesync.adapters.base import RemoteCatalog
from bundlesync.core.models.package import ResolvedPackage
from bundlesync.core.persistence.receipts import ReceiptStore

logger = logging.getLogger(__name__)


def is_stale(receipt_time: datetime | None, remote_time: datetime) -> bool:
    """True iff the receipt is missing or strictly older than the remote object."""
    if receipt_time is None:
        return True
    return receipt_time < remote_time


def needs_install(
    package: ResolvedPackage,
    receipts: ReceiptStore,
    catalog: RemoteCatalog,
    *,
    always_install: bool = False,
) -> bool:
    """Decide whether ``package`` must be installed.

    With ``always_install`` the comparison is bypassed and neither the
    catalog nor the receipt store is consulted.

    Raises:
        CatalogError: If the remote metadata cannot be read.
    """
    if always_install:
        return True

    remote_time = catalog.get_last_modified(package.container, package.name)
    receipt_time = receipts.get(package.name)

    if is_stale(receipt_time, remote_time):
        logger.info("%s is new or not yet installed.", package.name)
        return True

    logger.info("%s has previously been installed, skipping download.", package.name)
    return False

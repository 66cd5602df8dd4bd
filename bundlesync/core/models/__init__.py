"""
Domain models — Pydantic types for bundlesync.

All models are re-exported here for convenient access:

    from bundlesync.core.models import PackageReference, ResolvedPackage, InstallOutcome
"""

from bundlesync.core.models.outcome import InstallOutcome, OutcomeStatus
from bundlesync.core.models.package import WILDCARD, PackageReference, ResolvedPackage

__all__ = [
    # outcome.py
    "InstallOutcome",
    "OutcomeStatus",
    # package.py
    "PackageReference",
    "ResolvedPackage",
    "WILDCARD",
]

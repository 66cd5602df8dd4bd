"""
InstallOutcome — the per-package result of a sync run.

The coordinator never learns about a package through exceptions. Every
package it attempts comes back as exactly one outcome: installed,
skipped, or failed. Failures carry their cause as text so the report
can be logged and written to the run ledger.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from bundlesync.core.models.package import ResolvedPackage

OutcomeStatus = Literal["installed", "skipped", "failed"]


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class InstallOutcome(BaseModel):
    """Result of attempting one resolved package."""

    package: ResolvedPackage
    status: OutcomeStatus

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    reason: str = ""                    # why it was skipped / what was done
    error: str | None = None            # underlying cause when failed
    hook_exit_code: int | None = None   # post-install hook, if one ran

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the package ended up current (installed or skipped)."""
        return self.status != "failed"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def installed(
        cls,
        package: ResolvedPackage,
        reason: str = "",
        **kwargs: Any,
    ) -> InstallOutcome:
        """Create an installed outcome."""
        return cls(package=package, status="installed", reason=reason, **kwargs)

    @classmethod
    def skipped(
        cls,
        package: ResolvedPackage,
        reason: str = "",
        **kwargs: Any,
    ) -> InstallOutcome:
        """Create a skipped outcome."""
        return cls(package=package, status="skipped", reason=reason, **kwargs)

    @classmethod
    def failure(
        cls,
        package: ResolvedPackage,
        error: str,
        **kwargs: Any,
    ) -> InstallOutcome:
        """Create a failed outcome."""
        return cls(package=package, status="failed", error=error, **kwargs)

"""
Error taxonomy for a sync run.

Only ConfigError is allowed to end a run. Everything else is caught at
the boundary of the operation it belongs to:

    ResolutionError  → one package-list entry contributes no packages
    InstallError     → one package gets a 'failed' outcome
    HookError        → logged, the package stays 'installed'
"""

from __future__ import annotations


class BundleSyncError(Exception):
    """Base class for all bundlesync errors."""


class ConfigError(BundleSyncError):
    """Raised when required settings are missing or invalid."""


class ResolutionError(BundleSyncError):
    """Raised when a package-list entry cannot be expanded."""


class InstallError(BundleSyncError):
    """Raised when fetching, extracting, or recording a package fails."""


class CatalogError(InstallError):
    """Raised when the remote catalog cannot list, describe, or fetch an object."""


class ExtractionError(InstallError):
    """Raised when the archive extractor exits non-zero or cannot start.

    ``output`` carries the extractor's captured stdout for diagnostics.
    """

    def __init__(self, message: str, output: str = "", return_code: int | None = None):
        super().__init__(message)
        self.output = output
        self.return_code = return_code


class ReceiptError(InstallError):
    """Raised when a receipt cannot be written."""


class HookError(BundleSyncError):
    """Raised when a post-install hook cannot be launched."""

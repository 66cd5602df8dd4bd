"""Adapters — bindings to the object store and external tools.

Public re-exports for convenient access.
"""

from bundlesync.adapters.base import ArchiveExtractor, CommandResult, HookRunner, RemoteCatalog
from bundlesync.adapters.mock import MockCatalog, MockExtractor

__all__ = [
    "ArchiveExtractor",
    "CommandResult",
    "HookRunner",
    "MockCatalog",
    "MockExtractor",
    "RemoteCatalog",
]

"""
Adapter base — the contracts between the engine and the outside world.

The engine never talks to the object store or spawns processes itself.
It goes through these interfaces:

    RemoteCatalog      list / describe / fetch objects in a container
    ArchiveExtractor   unpack an archive into a directory
    HookRunner         run a post-install script

Catalog calls either succeed or raise CatalogError after the client's
own retries are exhausted. Process-backed adapters NEVER raise: they
return a CommandResult and the caller decides what a failure means.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel


class CommandResult(BaseModel):
    """Outcome of running an external process."""

    ok: bool
    return_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None
    duration_ms: int = 0

    @property
    def diagnostics(self) -> str:
        """Best available explanation of a failure."""
        return self.stdout or self.stderr or self.error or ""


class RemoteCatalog(ABC):
    """Read-only view of a remote object store."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The catalog identifier (e.g. 's3', 'mock')."""

    @abstractmethod
    def list_objects(self, container: str) -> list[str]:
        """List every object path in ``container``, in discovery order.

        Raises:
            CatalogError: If the container cannot be listed.
        """

    @abstractmethod
    def get_last_modified(self, container: str, name: str) -> datetime:
        """Return the object's last-modified time (timezone-aware UTC).

        Does not download the object body.

        Raises:
            CatalogError: If the object cannot be described.
        """

    @abstractmethod
    def fetch_to(self, container: str, name: str, destination: Path) -> None:
        """Download the object body into ``destination`` (overwritten).

        Raises:
            CatalogError: If the object cannot be fetched.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class ArchiveExtractor(ABC):
    """Unpacks an archive into a directory, overwriting existing files."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The extractor identifier."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether the underlying tool can be run. Never raises."""

    @abstractmethod
    def extract(self, archive: Path, destination: Path) -> CommandResult:
        """Extract ``archive`` into ``destination``.

        MUST never raise. A non-zero exit is reported with ok=False and
        the tool's captured stdout.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class HookRunner(ABC):
    """Runs a post-install script and waits for it."""

    @abstractmethod
    def run(self, script: Path, cwd: Path) -> CommandResult:
        """Run ``script`` with ``cwd`` as its working directory.

        MUST never raise. Launch failures are reported with ok=False
        and return_code=None.
        """

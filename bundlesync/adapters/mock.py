"""
Mock adapters — test doubles for the catalog and the extractor.

Used by tests to drive the engine without an object store or an
archive tool. Objects live in memory; the mock extractor writes a
marker file into ``<destination>/<archive stem>/`` so extracted
directories can be asserted on.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from bundlesync.adapters.base import ArchiveExtractor, CommandResult, RemoteCatalog
from bundlesync.core.errors import CatalogError


class MockCatalog(RemoteCatalog):
    """In-memory catalog.

    Objects are kept in insertion order, which is the "discovery order"
    that list_objects returns. Failures can be injected per container
    (listing) or per object (describe / fetch).
    """

    def __init__(self) -> None:
        self._objects: dict[str, dict[str, tuple[datetime, bytes]]] = {}
        self._list_failures: dict[str, str] = {}
        self._fetch_failures: dict[tuple[str, str], str] = {}
        self._metadata_failures: dict[tuple[str, str], str] = {}
        self._call_log: list[tuple[str, str, str]] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[tuple[str, str, str]]:
        """Every call as ``(operation, container, name)``."""
        return self._call_log

    def calls(self, operation: str) -> list[tuple[str, str]]:
        """``(container, name)`` pairs for one operation."""
        return [(c, n) for op, c, n in self._call_log if op == operation]

    def put_object(
        self,
        container: str,
        name: str,
        body: bytes = b"",
        last_modified: datetime | None = None,
    ) -> None:
        """Add or replace an object."""
        if last_modified is None:
            last_modified = datetime.now(UTC)
        elif last_modified.tzinfo is None:
            last_modified = last_modified.replace(tzinfo=UTC)
        self._objects.setdefault(container, {})[name] = (last_modified, body)

    def set_list_failure(self, container: str, error: str = "Mock list failure") -> None:
        self._list_failures[container] = error

    def set_fetch_failure(self, container: str, name: str, error: str = "Mock fetch failure") -> None:
        self._fetch_failures[(container, name)] = error

    def set_metadata_failure(
        self, container: str, name: str, error: str = "Mock metadata failure"
    ) -> None:
        self._metadata_failures[(container, name)] = error

    def list_objects(self, container: str) -> list[str]:
        self._call_log.append(("list", container, ""))
        if container in self._list_failures:
            raise CatalogError(self._list_failures[container])
        return list(self._objects.get(container, {}))

    def _lookup(self, container: str, name: str) -> tuple[datetime, bytes]:
        try:
            return self._objects[container][name]
        except KeyError:
            raise CatalogError(f"No such object: {container}/{name}") from None

    def get_last_modified(self, container: str, name: str) -> datetime:
        self._call_log.append(("metadata", container, name))
        if (container, name) in self._metadata_failures:
            raise CatalogError(self._metadata_failures[(container, name)])
        return self._lookup(container, name)[0]

    def fetch_to(self, container: str, name: str, destination: Path) -> None:
        self._call_log.append(("fetch", container, name))
        if (container, name) in self._fetch_failures:
            raise CatalogError(self._fetch_failures[(container, name)])
        _, body = self._lookup(container, name)
        destination.write_bytes(body)


class MockExtractor(ArchiveExtractor):
    """Extractor double.

    "Extracts" by creating ``<destination>/<directory>/payload.bin``,
    where ``directory`` is the first line of the archive bytes (the
    archive's file stem when that line is empty). Downloads land in
    randomly named temp files, so failures are injected by payload.
    """

    def __init__(self, available: bool = True):
        self._available = available
        self._failures: dict[str, CommandResult] = {}
        self._call_log: list[tuple[Path, Path]] = []
        self._payloads: list[bytes] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[tuple[Path, Path]]:
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def payloads(self) -> list[bytes]:
        """Archive bytes seen by each extract call."""
        return self._payloads

    def is_available(self) -> bool:
        return self._available

    def set_failure(self, payload: bytes, return_code: int = 2, stdout: str = "Mock extract failure") -> None:
        """Fail whenever an archive with exactly these bytes is extracted."""
        self._failures[payload.hex()] = CommandResult(
            ok=False,
            return_code=return_code,
            stdout=stdout,
            error=f"mock exited with error code {return_code}",
        )

    def extract(self, archive: Path, destination: Path) -> CommandResult:
        self._call_log.append((archive, destination))
        payload = archive.read_bytes()
        self._payloads.append(payload)

        failure = self._failures.get(payload.hex())
        if failure is not None:
            return failure

        # Payload convention: "<directory>\n<anything>" names the output dir
        directory = payload.split(b"\n", 1)[0].decode("utf-8", "replace").strip() or archive.stem
        target = destination / directory
        target.mkdir(parents=True, exist_ok=True)
        (target / "payload.bin").write_bytes(payload)
        return CommandResult(ok=True, return_code=0, stdout=f"Extracted {archive.name}")

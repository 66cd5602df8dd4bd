"""
Receipt store — "package P was installed as of time T".

A receipt is a small text file at ``<working_directory>/<name>.receipt``.
Its content is a human-readable install time for operators; it is never
parsed back. The comparison anchor is the file's own creation time.

Receipts are replaced atomically (write to temp file, then rename) so a
fresh inode, and with it a fresh creation time, exists after every
successful install.
"""

from __future__ import annotations

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from pathlib import Path

from bundlesync.core.errors import ReceiptError

logger = logging.getLogger(__name__)

RECEIPT_SUFFIX = ".receipt"


class ReceiptStore(ABC):
    """Persistence boundary for install receipts.

    The staleness checker only ever asks ``get`` and the installer only
    ever calls ``put``; how the timestamp is persisted is up to the store.
    """

    @abstractmethod
    def get(self, name: str) -> datetime | None:
        """Return the UTC time the package was last recorded, or None."""

    @abstractmethod
    def put(self, name: str, timestamp: datetime) -> None:
        """Record that the package was installed at ``timestamp``.

        Raises:
            ReceiptError: If the receipt cannot be persisted.
        """


def _creation_time(path: Path) -> datetime:
    st = path.stat()
    # st_birthtime where the platform reports it, else last content change
    seconds = getattr(st, "st_birthtime", None) or st.st_mtime
    return datetime.fromtimestamp(seconds, UTC)


class FileReceiptStore(ReceiptStore):
    """Receipts as files next to the extracted packages."""

    def __init__(self, root: Path):
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, name: str) -> Path:
        """Deterministic receipt path for a package name."""
        return self._root / f"{name}{RECEIPT_SUFFIX}"

    def get(self, name: str) -> datetime | None:
        path = self.path_for(name)
        if not path.is_file():
            return None
        return _creation_time(path)

    def put(self, name: str, timestamp: datetime) -> None:
        path = self.path_for(name)
        content = timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S %Z") + "\n"

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=path.parent,
                prefix=".receipt_",
                suffix=".tmp",
            )
            os.close(fd)
            tmp = Path(tmp_path)
            try:
                tmp.write_text(content, encoding="utf-8")
                tmp.replace(path)
            except Exception:
                tmp.unlink(missing_ok=True)
                raise
        except OSError as e:
            raise ReceiptError(f"Cannot write receipt {path}: {e}") from e

        logger.info("Wrote package receipt %s", path)


class MemoryReceiptStore(ReceiptStore):
    """In-memory receipts, used by tests."""

    def __init__(self, receipts: dict[str, datetime] | None = None):
        self._receipts: dict[str, datetime] = dict(receipts or {})

    def get(self, name: str) -> datetime | None:
        return self._receipts.get(name)

    def put(self, name: str, timestamp: datetime) -> None:
        self._receipts[name] = timestamp

    def __contains__(self, name: object) -> bool:
        return name in self._receipts

"""
Package list resolver — configuration text to an ordered install list.

    "apps/tool.zip; libs/*"
        → apps/tool.zip, libs/a.zip, libs/b.zip, ...

Entries are separated by ``;`` or ``,``. Each entry is ``container/name``
or ``container\\name``, split on the first separator only. Blank entries
are skipped. A ``*`` name expands to every object in the container,
sorted by object path. One bad entry never stops the others.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from pydantic import ValidationError

from bundlesync.adapters.base import RemoteCatalog
from bundlesync.core.errors import BundleSyncError, ResolutionError
from bundlesync.core.models.package import PackageReference, ResolvedPackage

logger = logging.getLogger(__name__)

_ENTRY_DELIMITERS = re.compile(r"[;,]")
_PATH_SEPARATORS = re.compile(r"[/\\]")


@dataclass
class EntryError:
    """A package-list entry that produced no packages."""

    entry: str
    error: str

    def to_dict(self) -> dict:
        return {"entry": self.entry, "error": self.error}


@dataclass
class ResolutionResult:
    """Ordered packages plus the entries that failed to resolve."""

    packages: list[ResolvedPackage] = field(default_factory=list)
    errors: list[EntryError] = field(default_factory=list)

    @property
    def all_ok(self) -> bool:
        return not self.errors


def split_entries(text: str) -> list[str]:
    """Split the package list into trimmed, non-blank entries."""
    return [e.strip() for e in _ENTRY_DELIMITERS.split(text or "") if e.strip()]


def parse_entry(entry: str) -> PackageReference:
    """Parse ``container/name`` (or ``container\\name``).

    Raises:
        ResolutionError: If the entry has no separator or an empty part.
    """
    fields = _PATH_SEPARATORS.split(entry.strip(), maxsplit=1)
    if len(fields) != 2:
        raise ResolutionError(f"Expected 'container/name', got {entry!r}")
    try:
        return PackageReference(container=fields[0], name=fields[1])
    except ValidationError as e:
        raise ResolutionError(f"Invalid package entry {entry!r}: {e}") from e


def expand_reference(ref: PackageReference, catalog: RemoteCatalog) -> list[ResolvedPackage]:
    """Turn one reference into concrete packages.

    Wildcards list the container and sort by full object path; the
    catalog's own listing order never leaks into the result.
    """
    if not ref.is_wildcard:
        return [ResolvedPackage(container=ref.container, name=ref.name)]

    packages: list[ResolvedPackage] = []
    for name in sorted(catalog.list_objects(ref.container)):
        try:
            packages.append(ResolvedPackage(container=ref.container, name=name))
        except ValidationError:
            logger.warning("Skipping object %r in %s: not a usable package name", name, ref.container)
    logger.info("Expanded %s to %d package(s)", ref, len(packages))
    return packages


def resolve_packages(text: str, catalog: RemoteCatalog) -> ResolutionResult:
    """Resolve the whole package list, isolating failures per entry."""
    result = ResolutionResult()
    entries = split_entries(text)

    for entry in entries:
        try:
            ref = parse_entry(entry)
            result.packages.extend(expand_reference(ref, catalog))
        except (BundleSyncError, ValidationError) as e:
            logger.error("Package \"%s\" could not be resolved: %s", entry, e)
            result.errors.append(EntryError(entry=entry, error=str(e)))
        except Exception as e:
            logger.exception("Package \"%s\" could not be resolved", entry)
            result.errors.append(EntryError(entry=entry, error=f"{type(e).__name__}: {e}"))

    logger.info("Resolved %d package(s) from %d entries", len(result.packages), len(entries))
    return result

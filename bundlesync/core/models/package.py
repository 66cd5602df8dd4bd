"""
Package models — what the package list declares and what gets installed.

A PackageReference is a line of intent from configuration. It may name
a single object or use the ``*`` wildcard for "everything in this
container". A ResolvedPackage is always concrete.
"""

from __future__ import annotations

from pydantic import BaseModel, field_validator

WILDCARD = "*"

# Archive suffixes stripped to find the directory a package extracts into
_ARCHIVE_SUFFIXES = (".tar.gz", ".tar.bz2", ".tar.xz", ".tgz", ".zip", ".7z", ".tar")


class PackageReference(BaseModel):
    """A declared package: ``container/name`` or ``container/*``."""

    container: str
    name: str

    @field_validator("container", "name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @property
    def is_wildcard(self) -> bool:
        return self.name == WILDCARD

    def __str__(self) -> str:
        return f"{self.container}/{self.name}"


class ResolvedPackage(BaseModel):
    """A concrete ``(container, name)`` pair ready for installation."""

    container: str
    name: str

    @field_validator("container")
    @classmethod
    def _container_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("container must not be empty")
        return value

    @field_validator("name")
    @classmethod
    def _concrete_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be empty")
        if value == WILDCARD:
            raise ValueError("a resolved package cannot be a wildcard")
        return value

    @property
    def key(self) -> str:
        """Display identity, e.g. ``apps/tool.zip``."""
        return f"{self.container}/{self.name}"

    @property
    def stem(self) -> str:
        """Package name with its archive suffix removed (``tool.zip`` → ``tool``)."""
        lowered = self.name.lower()
        for suffix in _ARCHIVE_SUFFIXES:
            if lowered.endswith(suffix) and len(self.name) > len(suffix):
                return self.name[: -len(suffix)]
        return self.name

    def __str__(self) -> str:
        return self.key

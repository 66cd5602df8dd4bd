"""
Tests for domain models — package references and install outcomes.
"""

import pytest
from pydantic import ValidationError

from bundlesync.core.models import InstallOutcome, PackageReference, ResolvedPackage


class TestPackageReference:
    def test_wildcard(self):
        ref = PackageReference(container="libs", name="*")
        assert ref.is_wildcard
        assert str(ref) == "libs/*"

    def test_concrete(self):
        ref = PackageReference(container="apps", name="tool.zip")
        assert not ref.is_wildcard

    def test_strips_whitespace(self):
        ref = PackageReference(container=" apps ", name=" tool.zip ")
        assert ref.container == "apps"
        assert ref.name == "tool.zip"

    def test_empty_container_rejected(self):
        with pytest.raises(ValidationError):
            PackageReference(container="  ", name="tool.zip")


class TestResolvedPackage:
    def test_key(self):
        pkg = ResolvedPackage(container="apps", name="tool.zip")
        assert pkg.key == "apps/tool.zip"
        assert str(pkg) == "apps/tool.zip"

    def test_wildcard_rejected(self):
        with pytest.raises(ValidationError):
            ResolvedPackage(container="apps", name="*")

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            ResolvedPackage(container="apps", name="")

    @pytest.mark.parametrize(
        ("name", "stem"),
        [
            ("tool.zip", "tool"),
            ("tool.tar.gz", "tool"),
            ("Tool.ZIP", "Tool"),
            ("tool", "tool"),
            ("nested/tool.7z", "nested/tool"),
            (".zip", ".zip"),
        ],
    )
    def test_stem(self, name, stem):
        assert ResolvedPackage(container="c", name=name).stem == stem


class TestInstallOutcome:
    def _pkg(self) -> ResolvedPackage:
        return ResolvedPackage(container="apps", name="tool.zip")

    def test_installed(self):
        outcome = InstallOutcome.installed(self._pkg(), reason="done")
        assert outcome.status == "installed"
        assert outcome.ok
        assert not outcome.failed

    def test_skipped_is_ok(self):
        outcome = InstallOutcome.skipped(self._pkg())
        assert outcome.status == "skipped"
        assert outcome.ok

    def test_failure(self):
        outcome = InstallOutcome.failure(self._pkg(), error="boom")
        assert outcome.failed
        assert not outcome.ok
        assert outcome.error == "boom"

    def test_serializes(self):
        outcome = InstallOutcome.installed(self._pkg(), hook_exit_code=0)
        data = outcome.model_dump(mode="json")
        assert data["package"] == {"container": "apps", "name": "tool.zip"}
        assert data["status"] == "installed"
        assert data["hook_exit_code"] == 0

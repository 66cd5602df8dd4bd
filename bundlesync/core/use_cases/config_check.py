"""
Config check use case — validate bundlesync.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from bundlesync.adapters.shell.extractor import CommandExtractor
from bundlesync.core.config.loader import SyncConfig, load_config
from bundlesync.core.engine.resolver import parse_entry, split_entries
from bundlesync.core.errors import ConfigError, ResolutionError


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: SyncConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "working_directory": str(self.config.working_directory) if self.config else None,
            "entry_count": len(split_entries(self.config.packages)) if self.config else 0,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate configuration and report issues.

    Args:
        config_path: Optional explicit path to bundlesync.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult(config_path=config_path)

    try:
        config = load_config(config_path)
        result.config = config
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    # Entries must parse; wildcard listing is not attempted here
    entries = split_entries(config.packages)
    if not entries:
        result.warnings.append("Package list is empty. Nothing will be installed.")
    for entry in entries:
        try:
            parse_entry(entry)
        except ResolutionError as e:
            result.errors.append(str(e))

    repeated = sorted({e for e in entries if entries.count(e) > 1})
    if repeated:
        result.warnings.append(f"Listed more than once: {', '.join(repeated)}")

    if config.always_install:
        result.warnings.append(
            "always_install is on: every package is reinstalled on every run."
        )

    extractor = CommandExtractor(config.extractor.command)
    if not extractor.is_available():
        result.warnings.append(f"Extractor '{config.extractor.command[0]}' not found on PATH.")

    if not config.working_directory.exists():
        result.warnings.append(
            f"Working directory does not exist yet: {config.working_directory}"
        )

    result.valid = len(result.errors) == 0
    return result

"""
Configuration loader — reads bundlesync.yml into a SyncConfig.

Settings are read ONCE at startup and the resulting SyncConfig is
passed explicitly to every component that needs it. Nothing below
this module looks settings up on its own.

Sources, in precedence order:
    BUNDLESYNC_* environment variables  >  bundlesync.yml  >  defaults

The package list and the catalog connection are required. A run
without either is a ConfigError, which is the only error allowed to
stop the whole run.
"""

from __future__ import annotations

import logging
import os
import shlex
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from bundlesync.core.errors import ConfigError

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "bundlesync.yml"

ENV_PACKAGES = "BUNDLESYNC_PACKAGES"
ENV_CONNECTION = "BUNDLESYNC_CONNECTION_STRING"
ENV_WORKING_DIRECTORY = "BUNDLESYNC_WORKING_DIRECTORY"
ENV_ALWAYS_INSTALL = "BUNDLESYNC_ALWAYS_INSTALL"

DEFAULT_WORKING_DIRECTORY = Path("/opt/bundlesync/apps")
DEFAULT_EXTRACT_COMMAND = ["7za", "x", "-y", "-o{destination}", "{archive}"]

# Connection-string keys → ConnectionSettings fields
_CONNECTION_KEYS = {
    "endpointurl": "endpoint_url",
    "region": "region_name",
    "profile": "profile_name",
    "accesskeyid": "access_key_id",
    "secretaccesskey": "secret_access_key",
    "maxattempts": "max_attempts",
    "readtimeout": "read_timeout",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}


class ConnectionSettings(BaseModel):
    """How to reach the remote catalog.

    The retry and timeout values are handed to the storage client, which
    owns the retry loop. Callers treat each catalog call as one blocking
    operation.
    """

    endpoint_url: str | None = None
    region_name: str | None = None
    profile_name: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None

    max_attempts: int = Field(default=100, ge=1)
    retry_mode: str = "standard"
    connect_timeout: int = Field(default=60, ge=1)
    read_timeout: int = Field(default=600, ge=1)


class ExtractorSettings(BaseModel):
    """External archive extractor invocation.

    ``command`` is an argv template; ``{destination}`` and ``{archive}``
    are substituted per install. Overwrite-always must be part of the
    template (``-y`` for 7-Zip). A string command is split with shell
    quoting rules, so quote a path that contains spaces.
    """

    command: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTRACT_COMMAND))
    timeout: int = Field(default=600, ge=1)

    @field_validator("command", mode="before")
    @classmethod
    def _split_command(cls, value: Any) -> Any:
        if isinstance(value, str):
            return shlex.split(value)
        return value

    @field_validator("command")
    @classmethod
    def _needs_archive(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("extractor command must not be empty")
        if not any("{archive}" in arg for arg in value):
            raise ValueError("extractor command must reference {archive}")
        try:
            for arg in value:
                arg.format(archive="", destination="")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"extractor command has an unknown placeholder: {e}") from e
        return value


class SyncConfig(BaseModel):
    """Everything one sync run needs, built once at startup."""

    packages: str
    connection: ConnectionSettings

    working_directory: Path = DEFAULT_WORKING_DIRECTORY
    temp_directory: Path | None = None

    always_install: bool = False     # skip the staleness check entirely
    fail_on_error: bool = True       # non-zero exit when any package failed

    run_hooks: bool = True
    hook_script: str = "runme.sh"
    hook_timeout: int | None = None  # None = wait for completion

    extractor: ExtractorSettings = Field(default_factory=ExtractorSettings)
    audit_log: Path | None = None

    @field_validator("packages", mode="before")
    @classmethod
    def _join_package_list(cls, value: Any) -> Any:
        # YAML may give a sequence of entries instead of one delimited string
        if isinstance(value, list):
            return ";".join(str(v) for v in value if v is not None)
        return value

    @field_validator("connection", mode="before")
    @classmethod
    def _parse_connection(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_connection_string(value)
        return value


def parse_connection_string(text: str) -> dict[str, str]:
    """Parse ``Key=Value;Key=Value`` into ConnectionSettings fields.

    Keys are case-insensitive. Unknown keys and segments without ``=``
    are errors rather than silently ignored.

    Raises:
        ConfigError: If the string is empty or malformed.
    """
    if not text.strip():
        raise ConfigError("Connection string is empty")

    fields: dict[str, str] = {}
    for segment in text.split(";"):
        segment = segment.strip()
        if not segment:
            continue
        key, sep, value = segment.partition("=")
        if not sep:
            raise ConfigError(f"Malformed connection string segment: {segment!r}")
        field_name = _CONNECTION_KEYS.get(key.strip().lower())
        if field_name is None:
            raise ConfigError(f"Unknown connection string key: {key.strip()!r}")
        fields[field_name] = value.strip()
    return fields


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for bundlesync.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to bundlesync.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def _read_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The file may wrap everything under a "bundlesync" key or be flat
    section = data.get("bundlesync", data)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"Expected a mapping under 'bundlesync' in {path}")
    return dict(section)


def _apply_env(data: dict[str, Any], env: Mapping[str, str]) -> None:
    if ENV_PACKAGES in env:
        data["packages"] = env[ENV_PACKAGES]
    if ENV_CONNECTION in env:
        data["connection"] = env[ENV_CONNECTION]
    if env.get(ENV_WORKING_DIRECTORY):
        data["working_directory"] = env[ENV_WORKING_DIRECTORY]
    if ENV_ALWAYS_INSTALL in env:
        data["always_install"] = env[ENV_ALWAYS_INSTALL].strip().lower() in _TRUE_VALUES


def load_config(
    path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> SyncConfig:
    """Load and validate the sync configuration.

    Args:
        path: Explicit path to bundlesync.yml. If None, searches upward;
            when no file is found, environment variables alone must
            supply the required settings.
        env: Environment mapping (default: ``os.environ``).

    Returns:
        Validated SyncConfig. Relative paths in the file are resolved
        against the file's directory.

    Raises:
        ConfigError: If required settings are missing or invalid.
    """
    env = os.environ if env is None else env

    if path is None:
        path = find_config_file()

    data: dict[str, Any] = {}
    base_dir = Path.cwd()
    if path is not None:
        data = _read_file(path)
        base_dir = path.parent.resolve()

    _apply_env(data, env)

    missing = [key for key in ("packages", "connection") if data.get(key) is None]
    if missing:
        source = str(path) if path else "environment"
        raise ConfigError(f"Missing required setting(s) {', '.join(missing)} in {source}")

    try:
        config = SyncConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    for name in ("working_directory", "temp_directory", "audit_log"):
        value = getattr(config, name)
        if value is not None and not value.is_absolute():
            setattr(config, name, base_dir / value)

    logger.info(
        "Loaded config (working_directory=%s, always_install=%s)",
        config.working_directory,
        config.always_install,
    )
    return config

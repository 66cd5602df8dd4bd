"""
bundlesync — CLI entrypoint.

Provisioning scripts run the agent with no arguments, which performs a
sync. The subcommands exist for operators:

Usage:
    bundlesync
    bundlesync sync --always-install
    bundlesync plan
    bundlesync config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from bundlesync import __version__
from bundlesync.core.config.loader import SyncConfig, load_config
from bundlesync.core.errors import ConfigError
from bundlesync.core.observability.logging_config import (
    ENV_LOG_FILE,
    ENV_LOG_FILE_LEVEL,
    resolve_level,
    setup_logging,
)

_STATUS_COLORS = {"installed": "green", "skipped": "white", "failed": "red"}


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="bundlesync")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to bundlesync.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """bundlesync — install remote bundles that changed since the last run."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet, env=os.environ),
        log_file=os.environ.get(ENV_LOG_FILE),
        log_file_level=os.environ.get(ENV_LOG_FILE_LEVEL),
        quiet_third_party=not debug,
    )

    if ctx.invoked_subcommand is None:
        ctx.invoke(sync)


def _load(ctx: click.Context) -> SyncConfig:
    try:
        return load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(2)


@cli.command()
@click.option(
    "--always-install",
    is_flag=True,
    help="Reinstall every package, ignoring receipts.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def sync(ctx: click.Context, always_install: bool, as_json: bool) -> None:
    """Install every package that is new or changed (the default command)."""
    from bundlesync.core.use_cases.sync import run_sync

    config = _load(ctx)
    result = run_sync(config, always_install=True if always_install else None)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red", err=True)
        sys.exit(result.exit_code)

    report = result.report
    assert report is not None  # guaranteed after error check above

    for outcome in report.outcomes:
        click.secho(f"   {outcome.status:<9}", fg=_STATUS_COLORS[outcome.status], nl=False)
        click.echo(f" {outcome.package.key}")
        if outcome.failed:
            click.echo(f"             {outcome.error}")
    for entry_error in report.resolution_errors:
        click.secho("   unresolved", fg="red", nl=False)
        click.echo(f" {entry_error.entry}: {entry_error.error}")

    click.echo()
    click.echo(
        f"   {report.installed} installed, {report.skipped} skipped, "
        f"{report.failed} failed ({report.status})"
    )
    sys.exit(result.exit_code)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def plan(ctx: click.Context, as_json: bool) -> None:
    """Show which packages a sync would install, without installing."""
    from bundlesync.core.use_cases.plan import plan_sync

    config = _load(ctx)
    result = plan_sync(config)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(2 if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red", err=True)
        sys.exit(2)

    colors = {"install": "cyan", "skip": "white", "error": "red"}
    for item in result.items:
        click.secho(f"   {item.action:<8}", fg=colors[item.action], nl=False)
        click.echo(f" {item.package.key}  ({item.detail})")
    for entry_error in result.resolution_errors:
        click.secho("   unresolved", fg="red", nl=False)
        click.echo(f" {entry_error.entry}: {entry_error.error}")

    click.echo()
    click.echo(f"   {len(result.to_install)} of {len(result.items)} package(s) would be installed")


@cli.group()
def config() -> None:
    """Configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate bundlesync.yml."""
    from bundlesync.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    cfg = result.config
    if result.valid and cfg is not None:
        click.secho(f"✅ {result.config_path or 'environment'}: configuration is valid", fg="green")
        click.echo(f"   Package entries:   {result.to_dict()['entry_count']}")
        click.echo(f"   Working directory: {cfg.working_directory}")
        click.echo(f"   Extractor:         {' '.join(cfg.extractor.command)}")
        hooks = cfg.hook_script if cfg.run_hooks else "disabled"
        click.echo(f"   Post-install hook: {hooks}")
    else:
        click.secho("❌ Configuration errors:", fg="red", err=True)
        for err in result.errors:
            click.echo(f"   • {err}", err=True)

    for warn in result.warnings:
        click.secho(f"   ⚠ {warn}", fg="yellow")

    sys.exit(0 if result.valid else 1)


if __name__ == "__main__":
    cli()

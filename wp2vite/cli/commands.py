#!/usr/bin/env python3
"""wp2vite CLI - Main Entry Point.

Usage:
    wp2vite <command> [options]

Commands:
    migrate [ROOT]       Generate vite.config.js, index.html and package.json for a project
    inspect [ROOT]       Show what would be extracted, without writing anything
    help                 Show this help message

Options (migrate / inspect):
    --config PATH        Bundler config to use instead of the conventional location
    --flavor NAME        Force the project flavor (cra, cra-ejected, react-app-rewired,
                         vue-cli, vue, other)
    --dry-run            (migrate) List the files that would be written
    --debug              Print diagnostic output
"""

from __future__ import annotations

import sys
from pathlib import Path

import click
import yaml

from wp2vite.core.errors import MigrationError
from wp2vite.core.flavor import Flavor
from wp2vite.core.migrator import run_migration, synthesize
from wp2vite.helpers.helpers_logging import print_error, set_debug

# Minimum number of CLI args (program name + command)
_MIN_ARGS = 2

_FLAVOR_CHOICE = click.Choice([f.value for f in Flavor])

_EXIT_CANCELLED = 130


def print_help() -> None:
    """Print help message with all available commands."""
    print(__doc__)


def _flavor(value: str | None) -> Flavor | None:
    return Flavor(value) if value else None


@click.group(invoke_without_command=True)
@click.pass_context
def _click_cli(ctx: click.Context) -> int:
    """Top-level wp2vite command group."""
    if ctx.invoked_subcommand is None:
        print_help()
    return 0


@_click_cli.command(name="migrate", help="Migrate a webpack project to vite")
@click.argument("root", required=False, default=".",
                type=click.Path(file_okay=False, path_type=Path))
@click.option("--config", "config_path", default=None,
              help="Bundler config path (relative to ROOT)")
@click.option("--flavor", type=_FLAVOR_CHOICE, default=None,
              help="Force the project flavor")
@click.option("--dry-run", is_flag=True, help="Do not write any file")
@click.option("--debug", is_flag=True, help="Print diagnostic output")
def migrate_cmd(
    root: Path,
    config_path: str | None,
    flavor: str | None,
    dry_run: bool,
    debug: bool,
) -> int:
    set_debug(debug)
    try:
        run_migration(root, _flavor(flavor), config_path, dry_run=dry_run)
    except MigrationError as e:
        print_error(str(e))
        return 1
    return 0


@_click_cli.command(name="inspect", help="Print the extracted migration description")
@click.argument("root", required=False, default=".",
                type=click.Path(file_okay=False, path_type=Path))
@click.option("--config", "config_path", default=None,
              help="Bundler config path (relative to ROOT)")
@click.option("--flavor", type=_FLAVOR_CHOICE, default=None,
              help="Force the project flavor")
@click.option("--debug", is_flag=True, help="Print diagnostic output")
def inspect_cmd(
    root: Path,
    config_path: str | None,
    flavor: str | None,
    debug: bool,
) -> int:
    set_debug(debug)
    try:
        result = synthesize(root, _flavor(flavor), config_path)
    except MigrationError as e:
        print_error(str(e))
        return 1

    report = {
        "flavor": result.profile.flavor.value,
        "config": str(result.config_path),
        "synthesis": result.descriptor.to_dict(),
    }
    print(yaml.safe_dump(report, sort_keys=False, allow_unicode=True), end="")
    return 0


@_click_cli.command(name="help", help="Show help message")
def _help_cmd() -> int:
    print_help()
    return 0


def main() -> int:
    """Main CLI entry point."""
    if len(sys.argv) < _MIN_ARGS or sys.argv[1] in ["--help", "-h"]:
        print_help()
        return 0

    try:
        result = _click_cli.main(
            args=sys.argv[1:],
            prog_name="wp2vite",
            standalone_mode=False,
        )
    except click.Abort:
        print("\n⚠️  Cancelled by user")
        return _EXIT_CANCELLED
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    return 0 if result is None else int(result)


if __name__ == "__main__":
    sys.exit(main())

"""CLI entrypoint for changesets-digger.

Each command is a thin wrapper that parses options and delegates to a
``run_*`` function in :mod:`changesets_digger.cli.commands`.
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from changesets_digger import __version__
from changesets_digger.cli.commands.add import run_add
from changesets_digger.cli.commands.generate import run_generate
from changesets_digger.cli.commands.tag import run_tag
from changesets_digger.cli.commands.version import OutputFormat, run_version

console = Console()
err_console = Console(stderr=True)

path_option = click.option(
    "--path",
    "-p",
    type=click.Path(file_okay=False, dir_okay=True),
    default=None,
    help="Project directory (defaults to the current directory)",
)


def configure_logging(verbose: bool) -> None:
    """Send library diagnostics to stderr through rich."""
    handler = RichHandler(console=err_console, show_time=False, show_path=False)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )


@click.group()
@click.version_option(__version__, prog_name="changesets-digger")
@click.option("--verbose", "-v", is_flag=True, help="Show debug diagnostics")
def cli(verbose: bool) -> None:
    """changesets-digger - Git-native changelog generation from changeset history."""
    configure_logging(verbose)


@cli.command()
@click.option(
    "--type",
    "-t",
    "bump_type",
    type=str,
    default=None,
    help="Version bump type (major, minor, patch)",
)
@click.option("--message", "-m", type=str, default=None, help="Change description")
@path_option
def add(bump_type: str | None, message: str | None, path: str | None) -> None:
    """Create a new changeset describing changes in this repository."""
    run_add(path, bump_type, message, console, err_console)


@cli.command()
@click.option("--output", "-o", type=str, default=None, help="Output directory for changelog files")
@click.option(
    "--max-versions",
    "-m",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of versions to include",
)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=str,
    default=None,
    help="Path to a JSON or TOML config file",
)
@click.option("--dry-run", is_flag=True, help="Show what would be generated without writing")
@click.option(
    "--ignore-errors",
    is_flag=True,
    help="Continue even if changeset files are corrupted",
)
@path_option
def generate(
    output: str | None,
    max_versions: int | None,
    config_file: str | None,
    dry_run: bool,
    ignore_errors: bool,
    path: str | None,
) -> None:
    """Generate changelogs from git history and current changesets."""
    run_generate(
        path, output, max_versions, config_file, dry_run, ignore_errors, console, err_console
    )


cli.add_command(generate, name="gen")


@cli.command()
@click.option("--dry-run", is_flag=True, help="Show the tag without creating it")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Create the tag even with uncommitted changes",
)
@click.option(
    "--push/--no-push",
    default=None,
    help="Push the tag to the remote (default from configuration)",
)
@click.option("--remote", type=str, default=None, help="Remote name to push to (default: origin)")
@path_option
def tag(
    dry_run: bool,
    force: bool,
    push: bool | None,
    remote: str | None,
    path: str | None,
) -> None:
    """Create a release tag based on current changesets."""
    run_tag(path, dry_run, force, push, remote, console, err_console)


@cli.command()
@click.option(
    "--output",
    "-o",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.JSON.value,
    show_default=True,
    help="Output format",
)
@path_option
def version(output: str, path: str | None) -> None:
    """Get version information based on current changesets."""
    run_version(path, OutputFormat(output), err_console)


def main() -> None:
    cli()

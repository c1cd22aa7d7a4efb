"""Thin CLI wrapper for release_prepare.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
import logging
from typing import Annotated

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler

from release_prepare import __version__
from release_prepare.config import get_settings, print_settings_json
from release_prepare.release.service import ReleaseServiceError, build_preparer
from release_prepare.types import PreparationStatus

app = typer.Typer(
    name="release-prepare",
    help="Release Prepare - publish release archives and catalog metadata",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"release-prepare version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Release Prepare - publish release archives and catalog metadata."""


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        typer.echo(print_settings_json(settings))
        return

    console.print("[bold]Effective Configuration:[/bold]")
    console.print()
    console.print("[bold]Stores:[/bold]")
    console.print(f"  Deploy directory:    {settings.deploy_dir}")
    console.print(f"  Artifacts directory: {settings.artifacts_dir}")
    console.print(f"  Public domain:       {settings.public_domain}")
    console.print(f"  Catalog path:        {settings.catalog_path}")
    console.print(f"  Artifact namespace:  {settings.artifact_namespace}")
    console.print()
    console.print("[bold]Release metadata:[/bold]")
    console.print(f"  Minimum version:     {settings.minimum_version}")
    console.print(f"  Repository URL:      {settings.github_repo_url}")
    console.print()
    console.print("[bold]Services:[/bold]")
    console.print(f"  Changelog URL:       {settings.changelog_url or '(not set)'}")
    console.print(f"  Changelog directory: {settings.changelog_dir or '(not set)'}")
    console.print(f"  Changelog locales:   {', '.join(settings.changelog_locales)}")
    console.print(f"  Update API URL:      {settings.update_api_url or '(not set)'}")
    console.print(f"  HTTP timeout:        {settings.http_timeout}")
    console.print(f"  Log level:           {settings.log_level}")


@app.command()
def prepare(
    tag: Annotated[str, typer.Argument(help="Release tag to prepare, e.g. 6.4.5")],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Upload release archives, update the catalog and register the release.

    Exits with code 1 when a step fails. A release that is already public
    is rejected without changes and exits with code 0.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    with httpx.Client(timeout=settings.http_timeout) as client:
        try:
            preparer = build_preparer(settings, client)
        except ReleaseServiceError as e:
            err_console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1) from None

        result = preparer.prepare_release(tag)

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    elif result.status == PreparationStatus.COMPLETED:
        console.print(f"[green]{result.message}[/green]")
        if result.record is not None:
            console.print(f"  Install: {result.record.download_link_install}")
            console.print(f"  Update:  {result.record.download_link_update}")
        if not result.changelog_merged:
            console.print("  [yellow]Changelog was not updated[/yellow]")
    elif result.status == PreparationStatus.REJECTED:
        console.print(f"[yellow]Rejected: {result.message}[/yellow]")
    else:
        console.print(
            f"[red]Failed at step '{result.step.value}': {result.message}[/red]"
        )

    if result.status == PreparationStatus.FAILED:
        raise typer.Exit(code=1)


__all__ = ["app", "configure_logging"]

from __future__ import annotations

import logging
import shutil

import typer

from helm_browse import __version__
from helm_browse.config import settings
from helm_browse.models import Package, PackageVersion, Repository, Session
from helm_browse.tui import HelmBrowserTui

__all__ = [
    "HelmBrowserTui",
    "Package",
    "PackageVersion",
    "Repository",
    "Session",
    "cli",
    "run",
]


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(f"helm-browse {__version__}")
    raise typer.Exit()


def _configure_logging() -> None:
    if settings.log_file is None:
        return
    logging.basicConfig(
        filename=settings.log_file,
        level=logging.DEBUG,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


cli = typer.Typer(
    add_completion=False,
    help="Browse Helm repositories and download a chart's default values.",
)


@cli.callback(invoke_without_command=True)
def run(
    _version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    if shutil.which(settings.helm_binary) is None:
        typer.echo(
            "Error: helm command not found. Please install Helm first.", err=True
        )
        raise typer.Exit(code=1)

    _configure_logging()
    app = HelmBrowserTui(
        helm_binary=settings.helm_binary,
        output_dir=settings.output_dir,
    )
    try:
        app.run()
    except Exception as exc:
        typer.echo(f"Error running program: {exc!s}", err=True)
        raise typer.Exit(code=1) from exc
    if app.return_code:
        raise typer.Exit(code=app.return_code)


if __name__ == "__main__":
    cli()

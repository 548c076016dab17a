"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from edgewatch.config import get_settings
from edgewatch.config.settings import configure_logging

app = typer.Typer(
    name="edgewatch",
    help="EdgeWatch - Polymarket edge scanner with live updates and sheet mirroring.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. dev) to overlay on default.toml"
    ),
) -> None:
    """Configure logging and store options in context."""
    settings = get_settings(profile, config_dir)
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile}


# Subcommands registered from other modules
from edgewatch.cli import export, scan, serve, sync_cmd  # noqa: E402

app.add_typer(serve.app, name="serve")
app.add_typer(scan.app, name="scan")
app.add_typer(sync_cmd.app, name="sync")
app.add_typer(export.app, name="export")


def run() -> None:
    app()


if __name__ == "__main__":
    run()

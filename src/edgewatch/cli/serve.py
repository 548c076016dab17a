"""Serve command: API + WebSocket server with poll and sync timers."""

import typer

from edgewatch.api.main import run_api

app = typer.Typer(help="Start the API/WebSocket server with polling and sheet sync")


@app.callback(invoke_without_command=True)
def serve(
    ctx: typer.Context,
    host: str | None = typer.Option(None, "--host", help="Bind host (default from config)"),
    port: int | None = typer.Option(None, "--port", help="Bind port (default from config)"),
) -> None:
    if ctx.invoked_subcommand is not None:
        return
    settings = ctx.obj["settings"]
    run_api(
        host=host or settings.server_host,
        port=port or settings.server_port,
        profile=ctx.obj.get("profile"),
    )


if __name__ == "__main__":
    app()

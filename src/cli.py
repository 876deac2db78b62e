"""Click CLI for running and inspecting the Messenger relay."""

from __future__ import annotations

import json
import logging

import click
import uvicorn

from src.config import RelaySettings


@click.group()
def cli() -> None:
    """Messenger document-QA relay."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: $HOST or 0.0.0.0).")
@click.option("--port", type=int, default=None, help="Bind port (default: $PORT or 2000).")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="info",
    envvar="LOG_LEVEL",
    help="Logging level.",
)
def serve(host: str | None, port: int | None, log_level: str) -> None:
    """Run the webhook server."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = RelaySettings.from_env()
    bind_host = host or settings.host
    bind_port = port or settings.port
    click.echo(f"Server is running on port {bind_port}", err=True)
    uvicorn.run(
        "src.server.app:create_app_from_env",
        factory=True,
        host=bind_host,
        port=bind_port,
        log_level=log_level.lower(),
    )


@cli.command("show-config")
def show_config() -> None:
    """Print the effective settings with secrets masked."""
    settings = RelaySettings.from_env()
    click.echo(json.dumps(settings.redacted(), indent=2))


if __name__ == "__main__":
    cli()

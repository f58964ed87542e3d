"""userspan command-line interface."""

import os

import structlog
import typer
import uvicorn
from rich.console import Console

from userspan import __version__
from userspan.config import get_settings
from userspan.core.logging import configure_logging


console = Console()
logger = structlog.get_logger()

app = typer.Typer(
    name="userspan",
    help="Run the traced user lookup service.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.command()
def serve(
    host: str | None = typer.Option(
        None, "--host", help="Bind address (default: HOST or 0.0.0.0)."
    ),
    port: int | None = typer.Option(
        None, "--port", "-p", help="Bind port (default: PORT or 8081)."
    ),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes."),
) -> None:
    """Start the HTTP server.

    The process exits non-zero when tracing cannot be set up or the
    listener cannot bind.
    """
    # The app factory reads settings from the environment
    if host is not None:
        os.environ["HOST"] = host
    if port is not None:
        os.environ["PORT"] = str(port)
    get_settings.cache_clear()
    settings = get_settings()

    configure_logging(settings)
    logger.info("server_starting", address=f"{settings.host}:{settings.port}")

    uvicorn.run(
        "userspan.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.callback(invoke_without_command=True)
def version_callback(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit."
    ),
) -> None:
    """userspan CLI - run the traced user lookup service."""
    if version:
        console.print(f"[bold cyan]userspan[/bold cyan] version {__version__}")
        raise typer.Exit()


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

"""Typer CLI root application with serve command."""

import typer

from outreach_api.core.config import get_settings
from outreach_api.core.logging import setup_logging

app = typer.Typer(name="outreach-api", help="Representative lookup and prayer outreach CLI")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)


@app.command()
def serve(
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
    host: str = typer.Option("0.0.0.0", "--host", help="Bind host"),  # noqa: S104
    port: int = typer.Option(8000, "--port", help="Bind port"),
) -> None:
    """Start the API server."""
    import uvicorn

    uvicorn.run(
        "outreach_api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


def _register_subcommands() -> None:
    """Register all CLI subcommand groups."""
    from outreach_api.cli.db_cmd import db_app
    from outreach_api.cli.outreach_cmd import outreach_app
    from outreach_api.cli.reps_cmd import reps_app

    app.add_typer(db_app, name="db", help="Database migration commands")
    app.add_typer(reps_app, name="reps", help="Representative directory and mapping commands")
    app.add_typer(outreach_app, name="outreach", help="Outreach delivery commands")


_register_subcommands()

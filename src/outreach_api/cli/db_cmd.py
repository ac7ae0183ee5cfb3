"""Database migration CLI commands using Alembic programmatically."""

from typing import Annotated

import typer
from alembic import command
from alembic.config import Config
from loguru import logger

db_app = typer.Typer()

ConfigOption = Annotated[str, typer.Option("--config", "-c", help="Path to alembic.ini")]


def _alembic_config(path: str) -> Config:
    return Config(path)


@db_app.command()
def upgrade(
    revision: str = typer.Argument("head", help="Target revision"),
    config: ConfigOption = "alembic.ini",
) -> None:
    """Apply migrations up to the target revision."""
    logger.info(f"Upgrading database to {revision}")
    command.upgrade(_alembic_config(config), revision)
    logger.info("Database upgrade complete")


@db_app.command()
def downgrade(
    revision: str = typer.Argument("-1", help="Target revision"),
    config: ConfigOption = "alembic.ini",
) -> None:
    """Roll migrations back to the target revision."""
    logger.info(f"Downgrading database to {revision}")
    command.downgrade(_alembic_config(config), revision)
    logger.info("Database downgrade complete")


@db_app.command()
def current(config: ConfigOption = "alembic.ini") -> None:
    """Show the current migration revision."""
    command.current(_alembic_config(config), verbose=True)

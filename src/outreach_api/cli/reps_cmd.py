"""CLI commands for the representative directory and user mapping.

``sync-federal`` and ``sync-state`` replace directory slots from Congress.gov
and Open States; ``assign`` rebuilds one user's bindings.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Annotated

import typer
from loguru import logger

reps_app = typer.Typer()


@reps_app.command("sync-federal")
def sync_federal(
    state: Annotated[str, typer.Option("--state", help="Two-letter state code")],
    house_district: Annotated[
        str | None, typer.Option("--house-district", help="Congressional district number or At-Large")
    ] = None,
) -> None:
    """Replace a state's U.S. senators (and optionally one House seat)."""
    asyncio.run(_sync_federal_impl(state, house_district))


async def _sync_federal_impl(state: str, house_district: str | None) -> None:
    """Async implementation of the sync-federal command."""
    from outreach_api.core.config import get_settings
    from outreach_api.core.database import dispose_engine, get_session_factory, init_engine
    from outreach_api.lib.officials import OfficialsConfigError, OfficialsProviderError
    from outreach_api.services.representative_sync_service import run_federal_sync

    settings = get_settings()
    init_engine(settings.database_url, echo=False, schema=settings.database_schema)
    try:
        factory = get_session_factory()
        async with factory() as session:
            seeded = await run_federal_sync(session, settings, state, house_district)
        typer.echo(f"Federal sync {state.upper()}: senate={seeded['senate']} house={seeded['house']}")
    except (ValueError, OfficialsConfigError, OfficialsProviderError) as e:
        logger.error("Federal sync failed: {}", e)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()


@reps_app.command("sync-state")
def sync_state(
    state: Annotated[str, typer.Option("--state", help="Two-letter state code")],
    sd: Annotated[str | None, typer.Option("--sd", help="State senate district")] = None,
    hd: Annotated[str | None, typer.Option("--hd", help="State house district")] = None,
) -> None:
    """Replace the state senate and house seats for the given districts."""
    if not sd and not hd:
        typer.echo("Provide --sd and/or --hd", err=True)
        raise typer.Exit(code=1)
    asyncio.run(_sync_state_impl(state, sd, hd))


async def _sync_state_impl(state: str, sd: str | None, hd: str | None) -> None:
    """Async implementation of the sync-state command."""
    from outreach_api.core.config import get_settings
    from outreach_api.core.database import dispose_engine, get_session_factory, init_engine
    from outreach_api.lib.officials import OfficialsConfigError, OfficialsProviderError
    from outreach_api.services.representative_sync_service import run_state_sync

    settings = get_settings()
    init_engine(settings.database_url, echo=False, schema=settings.database_schema)
    try:
        factory = get_session_factory()
        async with factory() as session:
            seeded = await run_state_sync(session, settings, state, sd, hd)
        typer.echo(f"State sync {state.upper()}: senate={seeded['senate']} house={seeded['house']}")
    except (ValueError, OfficialsConfigError, OfficialsProviderError) as e:
        logger.error("State sync failed: {}", e)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()


@reps_app.command("assign")
def assign(
    user_id: Annotated[str, typer.Argument(help="User id (UUID)")],
    no_sync: Annotated[bool, typer.Option("--no-sync", help="Map from the directory as is")] = False,
) -> None:
    """Rebuild one user's representative bindings from their primary address."""
    try:
        parsed = uuid.UUID(user_id)
    except ValueError as e:
        typer.echo(f"Invalid user id: {user_id}", err=True)
        raise typer.Exit(code=1) from e
    asyncio.run(_assign_impl(parsed, sync=not no_sync))


async def _assign_impl(user_id: uuid.UUID, *, sync: bool) -> None:
    """Async implementation of the assign command."""
    from outreach_api.core.config import get_settings
    from outreach_api.core.database import dispose_engine, get_session_factory, init_engine
    from outreach_api.services.user_representative_service import assign_for_user

    settings = get_settings()
    init_engine(settings.database_url, echo=False, schema=settings.database_schema)
    try:
        factory = get_session_factory()
        async with factory() as session:
            result = await assign_for_user(session, user_id, settings if sync else None)
    finally:
        await dispose_engine()

    typer.echo(f"Assigned: {result.assigned_count} | State: {result.state or '-'}")
    if result.message:
        typer.echo(f"  {result.message}")

"""CLI commands for outreach delivery."""

from __future__ import annotations

import asyncio
import uuid
from typing import Annotated

import typer
from loguru import logger

outreach_app = typer.Typer()


@outreach_app.command("deliver-queued")
def deliver_queued(
    limit: Annotated[int | None, typer.Option("--limit", min=1, help="Maximum requests to process")] = None,
) -> None:
    """Deliver queued outreach requests, oldest first."""
    asyncio.run(_deliver_queued_impl(limit))


async def _deliver_queued_impl(limit: int | None) -> None:
    """Async implementation of the deliver-queued command."""
    from outreach_api.core.config import get_settings
    from outreach_api.core.database import dispose_engine, get_session_factory, init_engine
    from outreach_api.lib.outreach import EmailConfigError
    from outreach_api.services import outreach_service

    settings = get_settings()
    init_engine(settings.database_url, echo=False, schema=settings.database_schema)
    try:
        factory = get_session_factory()
        async with factory() as session:
            summary = await outreach_service.deliver_queued(session, settings, limit=limit)
    except EmailConfigError as e:
        logger.error("Email is not configured: {}", e)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()

    typer.echo(
        f"Processed: {summary.processed} | Sent: {summary.sent} | Failed: {summary.failed}\n"
        f"  Stream: {summary.used_stream} | Template: {summary.used_template_alias or '-'}"
    )
    for detail in summary.details:
        if detail.status == "failed":
            typer.echo(f"  {detail.request_id}: {detail.error}")


@outreach_app.command("mark-sent")
def mark_sent(
    ids: Annotated[list[str], typer.Argument(help="Outreach request ids")],
) -> None:
    """Flip requests to sent without delivering them."""
    try:
        parsed = [uuid.UUID(value) for value in ids]
    except ValueError as e:
        typer.echo(f"Invalid request id: {e}", err=True)
        raise typer.Exit(code=1) from e
    asyncio.run(_mark_sent_impl(parsed))


async def _mark_sent_impl(ids: list[uuid.UUID]) -> None:
    """Async implementation of the mark-sent command."""
    from outreach_api.core.config import get_settings
    from outreach_api.core.database import dispose_engine, get_session_factory, init_engine
    from outreach_api.services import outreach_service

    settings = get_settings()
    init_engine(settings.database_url, echo=False, schema=settings.database_schema)
    try:
        factory = get_session_factory()
        async with factory() as session:
            updated = await outreach_service.mark_sent(session, ids)
    finally:
        await dispose_engine()
    typer.echo(f"Marked {updated} requests sent")

"""Outreach service: enqueue, dedupe, and deliver prayer messages to representatives.

Requests are keyed by (user, representative, prayer, UTC send date).  Within
one day a queued or sent request is never duplicated; a failed or throttled
one is reset to queued in place.
"""

import uuid
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import UTC, date, datetime
from typing import Any

from loguru import logger
from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from outreach_api.core.config import Settings
from outreach_api.lib.outreach import (
    EmailDeliveryError,
    OutgoingEmail,
    PostmarkClient,
    TierCache,
    disallowed_channels,
    greeting,
    normalize_emails,
    render_email_html,
    render_email_text,
)
from outreach_api.models.outreach_request import OUTREACH_CHANNELS, OutreachRequest
from outreach_api.models.prayer import Prayer
from outreach_api.models.representative import Representative
from outreach_api.models.user import User
from outreach_api.models.user_representative import UserRepresentative
from outreach_api.services import address_service, user_representative_service

ERROR_REP_NOT_FOUND = "Representative not found"
ERROR_NO_EMAIL = "No email on file for representative"
PRESIDENT_LIMIT = 3


class OutreachRequestNotFoundError(Exception):
    """Raised when no matching request exists for the caller."""


class OutreachRequestConflictError(Exception):
    """Raised when a request is not in the queued state."""


@dataclass
class DispatchDetail:
    """Outcome of delivering one request."""

    request_id: uuid.UUID
    to: str
    status: str
    used_stream: str
    used_template_alias: str | None = None
    message_id: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["request_id"] = str(self.request_id)
        return {k: v for k, v in data.items() if v is not None or k == "used_template_alias"}


@dataclass
class DispatchSummary:
    """Counts folded from per-request details."""

    processed: int
    sent: int
    failed: int
    used_stream: str
    used_template_alias: str | None
    details: list[DispatchDetail] = field(default_factory=list)

    @classmethod
    def from_details(
        cls, details: list[DispatchDetail], used_stream: str, used_template_alias: str | None
    ) -> "DispatchSummary":
        return cls(
            processed=len(details),
            sent=sum(1 for d in details if d.status == "sent"),
            failed=sum(1 for d in details if d.status == "failed"),
            used_stream=used_stream,
            used_template_alias=used_template_alias,
            details=details,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "sent": self.sent,
            "failed": self.failed,
            "used_stream": self.used_stream,
            "used_template_alias": self.used_template_alias,
            "details": [d.to_dict() for d in self.details],
        }


def _today() -> date:
    return datetime.now(UTC).date()


def _validate_channels(channels: list[str]) -> list[str]:
    cleaned = list(dict.fromkeys(ch.strip().lower() for ch in channels if ch and ch.strip()))
    if not cleaned:
        msg = "At least one channel is required"
        raise ValueError(msg)
    unknown = [ch for ch in cleaned if ch not in OUTREACH_CHANNELS]
    if unknown:
        msg = f"Unknown channel(s): {', '.join(unknown)}"
        raise ValueError(msg)
    return cleaned


# ---------------------------------------------------------------------------
# Enqueue
# ---------------------------------------------------------------------------


async def _mapped_rep_ids_with_email(
    session: AsyncSession,
    user_id: uuid.UUID,
    rep_ids: list[uuid.UUID] | None = None,
) -> list[uuid.UUID]:
    query = (
        select(Representative.id, Representative.email)
        .join(UserRepresentative, UserRepresentative.rep_id == Representative.id)
        .where(UserRepresentative.user_id == user_id)
    )
    if rep_ids is not None:
        query = query.where(Representative.id.in_(rep_ids))
    rows = (await session.execute(query)).all()
    return [rep_id for rep_id, email in rows if normalize_emails(email)]


async def _queue_for_targets(
    session: AsyncSession,
    user_id: uuid.UUID,
    prayer_id: uuid.UUID,
    rep_ids: list[uuid.UUID],
    channels: list[str],
    subject: str | None,
    body: str | None,
) -> list[OutreachRequest]:
    """Apply the per-day dedupe rules for each target and commit.

    Returns:
        Requeued rows followed by newly inserted rows.
    """
    if not rep_ids:
        return []
    send_date = _today()
    result = await session.execute(
        select(OutreachRequest).where(
            OutreachRequest.user_id == user_id,
            OutreachRequest.prayer_id == prayer_id,
            OutreachRequest.send_date == send_date,
            OutreachRequest.target_rep_id.in_(rep_ids),
        )
    )
    existing = {row.target_rep_id: row for row in result.scalars().all()}

    requeued: list[OutreachRequest] = []
    inserted: list[OutreachRequest] = []
    for rep_id in dict.fromkeys(rep_ids):
        row = existing.get(rep_id)
        if row is None:
            row = OutreachRequest(
                user_id=user_id,
                prayer_id=prayer_id,
                target_rep_id=rep_id,
                channels=channels,
                status="queued",
                subject=subject,
                body=body,
                send_date=send_date,
            )
            session.add(row)
            inserted.append(row)
        elif row.status in ("failed", "throttled"):
            row.status = "queued"
            row.error = None
            row.subject = subject
            row.body = body
            row.channels = channels
            requeued.append(row)

    await session.commit()
    rows = requeued + inserted
    for row in rows:
        await session.refresh(row)
    logger.info(
        "Queued outreach for prayer {}: {} new, {} requeued, {} skipped",
        prayer_id,
        len(inserted),
        len(requeued),
        len(rep_ids) - len(rows),
    )
    return rows


async def _require_prayer(session: AsyncSession, prayer_id: uuid.UUID) -> None:
    if await session.get(Prayer, prayer_id) is None:
        msg = "Prayer not found"
        raise ValueError(msg)


async def enqueue(
    session: AsyncSession,
    user_id: uuid.UUID,
    prayer_id: uuid.UUID,
    channels: list[str],
    *,
    rep_ids: list[uuid.UUID] | None = None,
    subject: str | None = None,
    body: str | None = None,
    settings: Settings | None = None,
) -> list[OutreachRequest]:
    """Queue a prayer for the user's representatives.

    Without ``rep_ids`` the user's mapping is refreshed first and every
    mapped representative with an email is targeted.  With ``rep_ids`` the
    targets are constrained to mapped representatives with an email.

    Args:
        session: Database session.
        user_id: Sending user.
        prayer_id: Prayer whose text is delivered.
        channels: Requested channels.
        rep_ids: Optional explicit subset of representatives.
        subject: Optional subject line.
        body: Optional body overriding the prayer text.
        settings: Enables directory sync during the mapping refresh.

    Returns:
        Requeued and newly inserted requests.

    Raises:
        ValueError: On unknown channels or a missing prayer.
    """
    channels = _validate_channels(channels)
    await _require_prayer(session, prayer_id)

    if rep_ids is None:
        assignment = await user_representative_service.assign_for_user(session, user_id, settings)
        if assignment.message:
            logger.info("Mapping refresh before enqueue: {}", assignment.message)
    elif not rep_ids:
        return []

    targets = await _mapped_rep_ids_with_email(session, user_id, rep_ids)
    return await _queue_for_targets(session, user_id, prayer_id, targets, channels, subject, body)


async def enqueue_to_president(
    session: AsyncSession,
    user_id: uuid.UUID,
    prayer_id: uuid.UUID,
    channels: list[str],
    *,
    subject: str | None = None,
    body: str | None = None,
) -> list[OutreachRequest]:
    """Queue a prayer for directory rows whose office or name mentions the president."""
    channels = _validate_channels(channels)
    await _require_prayer(session, prayer_id)

    result = await session.execute(
        select(Representative.id, Representative.email)
        .where(
            or_(
                Representative.office_name.ilike("%president%"),
                Representative.name.ilike("%president%"),
            )
        )
        .limit(PRESIDENT_LIMIT)
    )
    targets = [rep_id for rep_id, email in result.all() if normalize_emails(email)]
    return await _queue_for_targets(session, user_id, prayer_id, targets, channels, subject, body)


# ---------------------------------------------------------------------------
# Read operations
# ---------------------------------------------------------------------------


async def list_user_requests(session: AsyncSession, user_id: uuid.UUID, limit: int = 100) -> list[OutreachRequest]:
    """Return a user's requests, newest first."""
    result = await session.execute(
        select(OutreachRequest)
        .where(OutreachRequest.user_id == user_id)
        .order_by(OutreachRequest.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def prayer_outreach_analytics(session: AsyncSession, prayer_id: uuid.UUID) -> dict[str, Any]:
    """Count a prayer's requests by status and by channel."""
    result = await session.execute(
        select(OutreachRequest.status, OutreachRequest.channels).where(OutreachRequest.prayer_id == prayer_id)
    )
    rows = result.all()
    by_status = Counter(status for status, _ in rows)
    by_channel = Counter(ch for _, channels in rows for ch in (channels or []))
    return {
        "prayer_id": str(prayer_id),
        "total": len(rows),
        "by_status": dict(by_status),
        "by_channel": dict(by_channel),
    }


# ---------------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------------


def build_email_client(settings: Settings) -> PostmarkClient:
    """Create the Postmark client from settings.

    Raises:
        EmailConfigError: If the server token or sender is missing.
    """
    return PostmarkClient(
        server_token=settings.postmark_server_token,
        from_address=settings.email_from,
        from_name=settings.email_from_name,
        message_stream=settings.postmark_stream,
    )


class OutreachDispatcher:
    """Delivers queued requests one at a time for a single dispatch call.

    Args:
        session: Database session.
        settings: Application settings.
        client: Email client.
    """

    def __init__(self, session: AsyncSession, settings: Settings, client: PostmarkClient) -> None:
        self._session = session
        self._settings = settings
        self._client = client
        self._stream = settings.postmark_stream
        self._template_alias = settings.postmark_template_alias.strip() if settings.email_template_enabled else None
        self._tiers = TierCache(self._load_tier)

    async def _load_tier(self, user_id: uuid.UUID) -> str | None:
        result = await self._session.execute(select(User.tier).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def _author_meta(self, user_id: uuid.UUID) -> tuple[str | None, str | None]:
        user = await self._session.get(User, user_id)
        address = await address_service.get_primary_address(self._session, user_id)
        return (user.email if user else None), (address.postal_code if address else None)

    def _detail(self, row: OutreachRequest, status: str, to: str = "(none)", **kwargs: Any) -> DispatchDetail:
        return DispatchDetail(
            request_id=row.id,
            to=to,
            status=status,
            used_stream=self._stream,
            used_template_alias=self._template_alias,
            **kwargs,
        )

    async def _mark_failed(self, row: OutreachRequest, message: str, to: str = "(none)") -> DispatchDetail:
        row.status = "failed"
        row.error = message
        await self._session.commit()
        return self._detail(row, "failed", to, error=message)

    async def _mark_sent(self, row: OutreachRequest, to: str, message_id: str | None) -> DispatchDetail:
        row.status = "sent"
        row.error = None
        row.sent_at = datetime.now(UTC)
        await self._session.commit()
        return self._detail(row, "sent", to, message_id=message_id)

    def _compose(
        self,
        rep: Representative,
        to: str,
        subject: str,
        prayer_text: str,
        author_email: str | None,
        author_zip: str | None,
    ) -> OutgoingEmail:
        salutation = greeting(rep.office_name, rep.name)
        if self._template_alias:
            return OutgoingEmail(
                to=to,
                subject=subject,
                reply_to=author_email,
                template_alias=self._template_alias,
                template_model={
                    "subject": subject,
                    "recipient_name": rep.name,
                    "recipient_office": rep.office_name or "",
                    "greeting": salutation,
                    "prayer_text": prayer_text,
                    "author_email": author_email or "",
                    "author_zip": author_zip or "",
                    "site_url": self._settings.site_url,
                },
            )
        return OutgoingEmail(
            to=to,
            subject=subject,
            html_body=render_email_html(
                subject,
                salutation,
                prayer_text,
                brand=self._settings.email_from_name,
                site_url=self._settings.site_url,
            ),
            text_body=render_email_text(salutation, prayer_text),
            reply_to=author_email,
        )

    async def deliver(self, row: OutreachRequest) -> DispatchDetail:
        """Deliver one queued request and record its outcome.

        Provider failures mark the row failed; they never propagate.
        """
        rep = await self._session.get(Representative, row.target_rep_id) if row.target_rep_id else None
        if rep is None:
            return await self._mark_failed(row, ERROR_REP_NOT_FOUND)

        tier = await self._tiers.get(row.user_id)
        blocked = disallowed_channels(list(row.channels or []), tier)
        if blocked:
            return await self._mark_failed(row, f"Channel(s) not allowed for tier '{tier}': {', '.join(blocked)}")

        emails = normalize_emails(rep.email)
        if not emails:
            return await self._mark_failed(row, ERROR_NO_EMAIL)
        to = emails[0]

        subject = row.subject or self._settings.outreach_default_subject
        prayer_text = row.body or ""
        if not prayer_text:
            prayer = await self._session.get(Prayer, row.prayer_id)
            prayer_text = prayer.content if prayer else ""
        author_email, author_zip = await self._author_meta(row.user_id)

        email = self._compose(rep, to, subject, prayer_text, author_email, author_zip)
        try:
            message_id = await self._client.send(email)
        except EmailDeliveryError as e:
            logger.warning("Outreach request {} failed: {}", row.id, e.message)
            return await self._mark_failed(row, e.message, to)
        return await self._mark_sent(row, to, message_id)


async def _claim_next_queued(session: AsyncSession) -> OutreachRequest | None:
    """Lock the oldest queued request, skipping rows another batch holds.

    The lock lasts until the row's sent/failed status is committed.
    """
    result = await session.execute(
        select(OutreachRequest)
        .where(OutreachRequest.status == "queued")
        .order_by(OutreachRequest.created_at)
        .limit(1)
        .with_for_update(skip_locked=True)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def deliver_queued(
    session: AsyncSession,
    settings: Settings,
    *,
    limit: int | None = None,
    client: PostmarkClient | None = None,
) -> DispatchSummary:
    """Deliver up to ``limit`` queued requests, oldest first.

    Args:
        session: Database session.
        settings: Application settings.
        limit: Batch size (defaults to OUTREACH_BATCH_LIMIT).
        client: Email client; built from settings when omitted.

    Returns:
        DispatchSummary folded from per-request details.

    Raises:
        EmailConfigError: If email is not configured (no row is touched).
    """
    owns_client = client is None
    email_client = client or build_email_client(settings)
    try:
        dispatcher = OutreachDispatcher(session, settings, email_client)
        details: list[DispatchDetail] = []
        for _ in range(limit or settings.outreach_batch_limit):
            row = await _claim_next_queued(session)
            if row is None:
                break
            details.append(await dispatcher.deliver(row))
    finally:
        if owns_client:
            await email_client.close()

    summary = DispatchSummary.from_details(
        details, settings.postmark_stream, settings.postmark_template_alias.strip() or None
    )
    logger.bind(json_output=True, event="outreach_batch").info(
        "Outreach batch: processed={} sent={} failed={}", summary.processed, summary.sent, summary.failed
    )
    return summary


async def deliver_single(
    session: AsyncSession,
    settings: Settings,
    user_id: uuid.UUID,
    *,
    request_id: uuid.UUID | None = None,
    prayer_id: uuid.UUID | None = None,
    client: PostmarkClient | None = None,
) -> DispatchDetail:
    """Deliver one of the caller's queued requests.

    Looks up ``request_id`` or, failing that, the newest queued request for
    ``prayer_id``; either way the request must belong to ``user_id``.

    Raises:
        ValueError: If neither id is given.
        EmailConfigError: If email is not configured.
        OutreachRequestNotFoundError: If no matching request belongs to the user.
        OutreachRequestConflictError: If the request is not queued.
    """
    if request_id is None and prayer_id is None:
        msg = "request_id or prayer_id is required"
        raise ValueError(msg)

    owns_client = client is None
    email_client = client or build_email_client(settings)
    try:
        query = select(OutreachRequest).where(OutreachRequest.user_id == user_id)
        if request_id is not None:
            query = query.where(OutreachRequest.id == request_id)
        else:
            query = query.where(
                and_(OutreachRequest.prayer_id == prayer_id, OutreachRequest.status == "queued")
            ).order_by(OutreachRequest.created_at.desc())
        locked = query.limit(1).with_for_update().execution_options(populate_existing=True)
        row = (await session.execute(locked)).scalar_one_or_none()
        if row is None:
            msg = "No matching queued request found"
            raise OutreachRequestNotFoundError(msg)
        if row.status != "queued":
            msg = f"Request is not queued (status={row.status})"
            raise OutreachRequestConflictError(msg)

        return await OutreachDispatcher(session, settings, email_client).deliver(row)
    finally:
        if owns_client:
            await email_client.close()


async def mark_sent(session: AsyncSession, ids: list[uuid.UUID]) -> int:
    """Flip the given requests to sent without delivering them.

    Returns:
        Number of rows updated.

    Raises:
        ValueError: If ``ids`` is empty.
    """
    if not ids:
        msg = "No ids provided"
        raise ValueError(msg)
    result = await session.execute(
        update(OutreachRequest)
        .where(OutreachRequest.id.in_(ids))
        .values(status="sent", sent_at=datetime.now(UTC), error=None)
    )
    await session.commit()
    logger.info("Marked {} outreach requests sent", result.rowcount)
    return result.rowcount

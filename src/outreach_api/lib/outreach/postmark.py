"""Postmark email client.

Postmark reports some failures as HTTP 200 with a non-zero ``ErrorCode``;
both that and any non-2xx response raise ``EmailDeliveryError``.
"""

from dataclasses import dataclass, field
from typing import Any

import httpx
from loguru import logger

POSTMARK_API_URL = "https://api.postmarkapp.com"
DEFAULT_TIMEOUT = 10.0


class EmailConfigError(Exception):
    """Raised when the email provider is not configured (token or sender missing)."""


class EmailDeliveryError(Exception):
    """Raised when the email provider rejects or fails a send.

    Args:
        provider_name: Name of the failing provider.
        message: Provider error message.
        status_code: HTTP status code, when one was received.
        error_code: Provider-specific error code, when present.
    """

    def __init__(
        self,
        provider_name: str,
        message: str,
        status_code: int | None = None,
        error_code: int | None = None,
    ) -> None:
        self.provider_name = provider_name
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(f"{provider_name}: {message}")


@dataclass
class OutgoingEmail:
    """One message to send, either as raw HTML/text or through a template."""

    to: str
    subject: str
    html_body: str | None = None
    text_body: str | None = None
    reply_to: str | None = None
    template_alias: str | None = None
    template_model: dict[str, Any] = field(default_factory=dict)


class PostmarkClient:
    """Sends email through the Postmark HTTP API.

    Args:
        server_token: Postmark server API token.
        from_address: Verified sender address.
        from_name: Sender display name.
        message_stream: Postmark message stream id.
        timeout: Request timeout in seconds.
        base_url: API root (overridable for tests).

    Raises:
        EmailConfigError: If the token or sender address is missing.
    """

    def __init__(
        self,
        server_token: str | None,
        from_address: str | None,
        from_name: str | None = None,
        message_stream: str = "outreach",
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = POSTMARK_API_URL,
    ) -> None:
        if not server_token:
            msg = "POSTMARK_SERVER_TOKEN missing"
            raise EmailConfigError(msg)
        if not from_address:
            msg = "EMAIL_FROM missing"
            raise EmailConfigError(msg)
        self._from = f"{from_name} <{from_address}>" if from_name else from_address
        self.message_stream = message_stream
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "X-Postmark-Server-Token": server_token,
                "Accept": "application/json",
            },
            timeout=timeout,
        )

    @property
    def provider_name(self) -> str:
        return "postmark"

    async def send(self, email: OutgoingEmail) -> str | None:
        """Send one message.

        Returns:
            Postmark MessageID.

        Raises:
            EmailDeliveryError: On a non-2xx response, a non-zero ErrorCode, or a transport error.
        """
        if email.template_alias:
            path = "/email/withTemplate"
            payload: dict[str, Any] = {
                "From": self._from,
                "To": email.to,
                "TemplateAlias": email.template_alias,
                "TemplateModel": email.template_model,
                "MessageStream": self.message_stream,
            }
        else:
            path = "/email"
            payload = {
                "From": self._from,
                "To": email.to,
                "Subject": email.subject,
                "MessageStream": self.message_stream,
            }
            if email.html_body:
                payload["HtmlBody"] = email.html_body
            if email.text_body:
                payload["TextBody"] = email.text_body
        if email.reply_to:
            payload["ReplyTo"] = email.reply_to

        try:
            response = await self._client.post(path, json=payload)
        except httpx.RequestError as exc:
            logger.error("Postmark request failed: {}", exc)
            raise EmailDeliveryError(self.provider_name, f"Request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        error_code = data.get("ErrorCode", 0) or 0
        if response.is_success and error_code == 0:
            message_id: str | None = data.get("MessageID")
            return message_id

        message = data.get("Message") or f"HTTP {response.status_code}"
        logger.warning(
            "Postmark rejected message (HTTP {}, ErrorCode {}): {}", response.status_code, error_code, message
        )
        raise EmailDeliveryError(
            self.provider_name,
            message,
            status_code=response.status_code,
            error_code=error_code or None,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

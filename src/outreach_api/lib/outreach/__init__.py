"""Outreach library: message composition, tier gating, and email delivery.

Public API:
    - greeting / title_for_office / last_name / normalize_emails: Salutation rules
    - render_email_html / render_email_text: Local email bodies
    - TierCache / disallowed_channels: Channel gating by membership tier
    - PostmarkClient / OutgoingEmail: Email provider client
    - EmailDeliveryError / EmailConfigError: Provider errors
"""

from outreach_api.lib.outreach.email_template import render_email_html, render_email_text
from outreach_api.lib.outreach.postmark import EmailConfigError, EmailDeliveryError, OutgoingEmail, PostmarkClient
from outreach_api.lib.outreach.salutation import greeting, last_name, normalize_emails, title_for_office
from outreach_api.lib.outreach.tiers import TierCache, allowed_channels, disallowed_channels

__all__ = [
    "EmailConfigError",
    "EmailDeliveryError",
    "OutgoingEmail",
    "PostmarkClient",
    "TierCache",
    "allowed_channels",
    "disallowed_channels",
    "greeting",
    "last_name",
    "normalize_emails",
    "render_email_html",
    "render_email_text",
    "title_for_office",
]

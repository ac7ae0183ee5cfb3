"""Locally rendered outreach email bodies (used when no Postmark template is configured)."""

import html
from datetime import UTC, datetime

_STYLE = """\
      .wrapper{background:#f7f7f8;padding:24px;}
      .card{max-width:640px;margin:0 auto;background:#ffffff;border-radius:12px;padding:24px;
            border:1px solid #e5e7eb;font-family:ui-sans-serif,system-ui,-apple-system,"Segoe UI",Roboto,Arial;}
      .brand{font-weight:700;font-size:18px;color:#111827;margin:0 0 12px;}
      .meta{color:#6b7280;font-size:12px;margin:0 0 16px;}
      .body{color:#111827;font-size:15px;line-height:1.6;}
      .hr{border:none;border-top:1px solid #e5e7eb;margin:20px 0;}
      .footer{color:#6b7280;font-size:12px;}"""


def text_to_html(text: str) -> str:
    """Escape ``text`` and turn line breaks into ``<br/>`` (blank lines keep their height)."""
    escaped = html.escape(text or "", quote=False)
    return "<br/>".join(line or "&nbsp;" for line in escaped.split("\n"))


def render_email_html(
    subject: str,
    greeting: str,
    body: str,
    brand: str = "Cyber Kingdom of Christ",
    site_url: str = "",
    sent_at: datetime | None = None,
) -> str:
    """Render the card-style HTML email."""
    sent_at = sent_at or datetime.now(UTC)
    footer = f"Sent via {html.escape(site_url)}" if site_url else f"Sent via {html.escape(brand)}"
    return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width" />
    <title>{html.escape(subject)}</title>
    <style>
{_STYLE}
    </style>
  </head>
  <body class="wrapper">
    <div class="card">
      <div class="brand">{html.escape(brand)}</div>
      <div class="meta">{sent_at.strftime("%a, %d %b %Y %H:%M:%S GMT")}</div>
      <div class="body">
        <p>{text_to_html(greeting)}</p>
        <p>{text_to_html(body)}</p>
      </div>
      <div class="hr"></div>
      <div class="footer">
        {footer}
      </div>
    </div>
  </body>
</html>"""


def render_email_text(greeting: str, body: str) -> str:
    return f"{greeting}\n\n{body or ''}"

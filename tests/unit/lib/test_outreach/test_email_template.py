"""Unit tests for the locally rendered email bodies."""

from datetime import UTC, datetime

from outreach_api.lib.outreach.email_template import render_email_html, render_email_text, text_to_html


class TestTextToHtml:
    def test_escapes_and_breaks_lines(self) -> None:
        assert text_to_html("a < b\n\nc") == "a &lt; b<br/>&nbsp;<br/>c"


class TestRenderEmailHtml:
    def test_contains_escaped_parts(self) -> None:
        sent_at = datetime(2026, 3, 2, 15, 4, 5, tzinfo=UTC)
        html = render_email_html(
            subject="Prayer <update>",
            greeting="Dear Sen. Ossoff,",
            body="Line one\nLine two",
            site_url="https://example.org",
            sent_at=sent_at,
        )

        assert "<title>Prayer &lt;update&gt;</title>" in html
        assert "Dear Sen. Ossoff," in html
        assert "Line one<br/>Line two" in html
        assert "Mon, 02 Mar 2026 15:04:05 GMT" in html
        assert "Sent via https://example.org" in html

    def test_footer_falls_back_to_brand(self) -> None:
        html = render_email_html(subject="s", greeting="g", body="b", brand="Prayer Circle")
        assert "Sent via Prayer Circle" in html


class TestRenderEmailText:
    def test_greeting_then_body(self) -> None:
        assert render_email_text("Dear Rep. Williams,", "Praying for you.") == "Dear Rep. Williams,\n\nPraying for you."

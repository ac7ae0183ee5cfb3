"""Outreach API: district detection, representative directory sync, and outreach email delivery."""

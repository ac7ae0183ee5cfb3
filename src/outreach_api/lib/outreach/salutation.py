"""Honorific and greeting rules for outreach email."""

import re

_NAME_SUFFIXES = frozenset({"jr", "sr", "ii", "iii", "iv", "phd", "md", "esq"})


def _normalize_office(office: str | None) -> str:
    return re.sub(r"[^a-z0-9]+", " ", (office or "").lower()).strip()


def title_for_office(office: str | None) -> str:
    """Honorific for an office title: President, Sen., Rep., or Hon."""
    normalized = _normalize_office(office)
    if "president" in normalized:
        return "President"
    if "senate" in normalized or "senator" in normalized:
        return "Sen."
    if any(word in normalized for word in ("house", "representative", "congress")):
        return "Rep."
    return "Hon."


def last_name(name: str) -> str:
    """Last word of a name after dropping suffixes such as Jr., III, PhD, M.D., Esq."""
    parts = (name or "").replace(",", " ").split()
    while parts and parts[-1].lower().replace(".", "") in _NAME_SUFFIXES:
        parts.pop()
    if not parts:
        return (name or "").strip()
    return parts[-1].rstrip(".")


def greeting(office: str | None, name: str) -> str:
    """E.g. ``Dear Sen. Ossoff,``."""
    return f"Dear {title_for_office(office)} {last_name(name)},"


def normalize_emails(value: object) -> list[str]:
    """Accept a list of addresses or a ``{a@b,c@d}`` / comma-separated string."""
    if isinstance(value, (list, tuple)):
        return [v.strip() for v in value if isinstance(v, str) and v.strip()]
    if isinstance(value, str):
        inner = value.strip().removeprefix("{").removesuffix("}")
        return [part.strip() for part in re.split(r"[,;]", inner) if part.strip()]
    return []

"""Adapter from Census geography layers to district numbers.

Layer keys differ between data vintages ("119th Congressional Districts",
"2024 State Legislative Districts - Upper", ...), so layers are located by
case-insensitive substring rather than exact key.
"""

import re
from typing import Any

from outreach_api.lib.geocoder.base import AT_LARGE

_CD_KEYS = ("congressional district",)
_SD_KEYS = ("state legislative districts - upper", "sldu")
_HD_KEYS = ("state legislative districts - lower", "sldl")

_DIGITS = re.compile(r"\d+")


def find_layer(geographies: dict[str, Any], needles: tuple[str, ...]) -> list[dict[str, Any]] | None:
    """Return the first geography layer whose key contains any of ``needles``.

    Returns None when no key matches, or an empty list when the layer is
    present but has no features.
    """
    for key, features in geographies.items():
        lowered = key.lower()
        if any(needle in lowered for needle in needles):
            return features if isinstance(features, list) else []
    return None


def district_number(feature: dict[str, Any]) -> str | None:
    """First integer in the feature's NAME with leading zeros removed."""
    name = str(feature.get("NAME") or feature.get("BASENAME") or "")
    match = _DIGITS.search(name)
    if match is None:
        return None
    return str(int(match.group()))


def _congressional(features: list[dict[str, Any]] | None) -> str | None:
    if not features:
        return None
    number = district_number(features[0])
    # Census encodes single-district states as "(at Large)" or district 0/00
    if number is None or number == "0":
        return AT_LARGE
    return number


def _legislative(features: list[dict[str, Any]] | None) -> str | None:
    if not features:
        return None
    number = district_number(features[0])
    if number is None or number == "0":
        return None
    return number


def extract_districts(geographies: dict[str, Any]) -> tuple[str | None, str | None, str | None]:
    """Extract (cd, sd, hd) from a Census ``geographies`` mapping.

    An unnumbered congressional layer is reported as ``AT_LARGE``.  Unnumbered
    state legislative layers are reported as None.
    """
    cd = _congressional(find_layer(geographies, _CD_KEYS))
    sd = _legislative(find_layer(geographies, _SD_KEYS))
    hd = _legislative(find_layer(geographies, _HD_KEYS))
    return cd, sd, hd

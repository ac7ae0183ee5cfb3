"""US state codes and OCD division identifiers."""

import re

STATE_NAME_TO_CODE: dict[str, str] = {
    "Alabama": "AL",
    "Alaska": "AK",
    "Arizona": "AZ",
    "Arkansas": "AR",
    "California": "CA",
    "Colorado": "CO",
    "Connecticut": "CT",
    "Delaware": "DE",
    "District of Columbia": "DC",
    "Florida": "FL",
    "Georgia": "GA",
    "Hawaii": "HI",
    "Idaho": "ID",
    "Illinois": "IL",
    "Indiana": "IN",
    "Iowa": "IA",
    "Kansas": "KS",
    "Kentucky": "KY",
    "Louisiana": "LA",
    "Maine": "ME",
    "Maryland": "MD",
    "Massachusetts": "MA",
    "Michigan": "MI",
    "Minnesota": "MN",
    "Mississippi": "MS",
    "Missouri": "MO",
    "Montana": "MT",
    "Nebraska": "NE",
    "Nevada": "NV",
    "New Hampshire": "NH",
    "New Jersey": "NJ",
    "New Mexico": "NM",
    "New York": "NY",
    "North Carolina": "NC",
    "North Dakota": "ND",
    "Ohio": "OH",
    "Oklahoma": "OK",
    "Oregon": "OR",
    "Pennsylvania": "PA",
    "Puerto Rico": "PR",
    "Rhode Island": "RI",
    "South Carolina": "SC",
    "South Dakota": "SD",
    "Tennessee": "TN",
    "Texas": "TX",
    "Utah": "UT",
    "Vermont": "VT",
    "Virginia": "VA",
    "Washington": "WA",
    "West Virginia": "WV",
    "Wisconsin": "WI",
    "Wyoming": "WY",
}

STATE_CODE_TO_NAME: dict[str, str] = {code: name for name, code in STATE_NAME_TO_CODE.items()}

_NAME_LOOKUP = {name.lower(): code for name, code in STATE_NAME_TO_CODE.items()}
_STATE_IN_DIVISION = re.compile(r"state:([a-z]{2})\b", re.IGNORECASE)
_DISTRICT_IN_DIVISION = re.compile(r"/(cd|sldu|sldl):(\w+)", re.IGNORECASE)


def to_state_code(value: str | None) -> str | None:
    """Normalize a USPS code or full state name to a two-letter code.

    Returns None for anything that is not a known state.
    """
    if not value:
        return None
    text = value.strip()
    if len(text) == 2:
        code = text.upper()
        return code if code in STATE_CODE_TO_NAME else None
    return _NAME_LOOKUP.get(text.lower())


def state_name(code: str) -> str | None:
    return STATE_CODE_TO_NAME.get(code.upper())


def division_id(state: str, kind: str | None = None, district: str | None = None) -> str:
    """Build an OCD division id such as ``ocd-division/country:us/state:ga/cd:5``.

    Args:
        state: Two-letter state code.
        kind: ``cd``, ``sldu``, or ``sldl``; omit for a statewide seat.
        district: District number; omit for a statewide seat.
    """
    base = f"ocd-division/country:us/state:{state.lower()}"
    if kind and district:
        return f"{base}/{kind}:{district.lower()}"
    return base


def state_from_division(division: str) -> str | None:
    match = _STATE_IN_DIVISION.search(division)
    return match.group(1).upper() if match else None


def district_from_division(division: str) -> tuple[str | None, str | None]:
    """Return (kind, district) from a division id, e.g. ("cd", "5").

    Numeric districts lose their leading zeros so they line up with the
    numbers produced by district detection.
    """
    match = _DISTRICT_IN_DIVISION.search(division)
    if match is None:
        return None, None
    kind, district = match.group(1).lower(), match.group(2)
    if district.isdigit():
        district = str(int(district))
    return kind, district

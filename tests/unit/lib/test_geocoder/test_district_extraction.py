"""Unit tests for Census layer to district extraction."""

from outreach_api.lib.geocoder.base import AT_LARGE
from outreach_api.lib.geocoder.districts import district_number, extract_districts, find_layer


def _geographies(cd_name: str | None = "Congressional District 5", sd: str | None = "36", hd: str | None = "58"):
    geos: dict = {}
    if cd_name is not None:
        geos["119th Congressional Districts"] = [{"NAME": cd_name, "GEOID": "1305"}]
    if sd is not None:
        geos["2024 State Legislative Districts - Upper"] = [{"NAME": f"State Senate District {sd}"}]
    if hd is not None:
        geos["2024 State Legislative Districts - Lower"] = [{"NAME": f"State House District {hd}"}]
    return geos


class TestFindLayer:
    def test_matches_case_insensitive_substring(self) -> None:
        geos = {"119th CONGRESSIONAL DISTRICTS": [{"NAME": "x"}]}
        assert find_layer(geos, ("congressional district",)) == [{"NAME": "x"}]

    def test_missing_layer_returns_none(self) -> None:
        assert find_layer({"Counties": []}, ("sldu",)) is None

    def test_matches_short_layer_codes(self) -> None:
        geos = {"SLDU 2024": [{"NAME": "District 12"}]}
        assert find_layer(geos, ("state legislative districts - upper", "sldu")) == [{"NAME": "District 12"}]


class TestDistrictNumber:
    def test_strips_leading_zeros(self) -> None:
        assert district_number({"NAME": "State House District 007"}) == "7"

    def test_uses_basename_when_name_missing(self) -> None:
        assert district_number({"BASENAME": "14"}) == "14"

    def test_no_digits(self) -> None:
        assert district_number({"NAME": "Congressional District (at Large)"}) is None


class TestExtractDistricts:
    def test_full_match(self) -> None:
        assert extract_districts(_geographies()) == ("5", "36", "58")

    def test_unnumbered_congressional_layer_is_at_large(self) -> None:
        cd, _, _ = extract_districts(_geographies(cd_name="Congressional District (at Large)"))
        assert cd == AT_LARGE

    def test_zero_congressional_district_is_at_large(self) -> None:
        cd, _, _ = extract_districts(_geographies(cd_name="Congressional District 00"))
        assert cd == AT_LARGE
        assert cd not in (None, "0")

    def test_unnumbered_legislative_layer_is_none(self) -> None:
        geos = _geographies()
        geos["2024 State Legislative Districts - Upper"] = [{"NAME": "State Senate District ZZ"}]
        _, sd, hd = extract_districts(geos)
        assert sd is None
        assert hd == "58"

    def test_missing_layers(self) -> None:
        assert extract_districts({}) == (None, None, None)

    def test_empty_congressional_layer_is_none(self) -> None:
        geos = {"119th Congressional Districts": []}
        assert extract_districts(geos) == (None, None, None)

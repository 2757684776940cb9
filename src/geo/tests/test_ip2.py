"""Tests for IP to location resolution."""

import typing as t

from pytest import MonkeyPatch

from geo.ip2 import resolve_ip_to_location
from geo.schema import UNKNOWN, GeoLocation


class _Record:
    city = "Accra"
    region = "Greater Accra"
    country_short = "GH"
    timezone = "-"


def test_resolves_known_ip() -> None:
    location = resolve_ip_to_location("102.89.34.10")

    assert location == GeoLocation(city="Lagos", region="Lagos", country="NG", timezone="+01:00")


def test_ipv4_mapped_ipv6_is_unwrapped(monkeypatch: MonkeyPatch) -> None:
    seen: list[str] = []

    class _DB:
        def get_all(self, ip: str) -> _Record:
            seen.append(ip)
            return _Record()

    monkeypatch.setattr("geo.ip2.get_ip2location", lambda: _DB())

    location = resolve_ip_to_location("::ffff:41.58.1.1")

    assert seen == ["41.58.1.1"]
    assert location.city == "Accra"
    assert location.timezone == UNKNOWN


def test_unknown_ip_is_not_looked_up() -> None:
    assert resolve_ip_to_location(UNKNOWN) == GeoLocation()
    assert resolve_ip_to_location("") == GeoLocation()


def test_lookup_errors_degrade_to_unknown(monkeypatch: MonkeyPatch) -> None:
    def broken() -> t.Any:
        raise OSError("database file missing")

    monkeypatch.setattr("geo.ip2.get_ip2location", broken)

    assert resolve_ip_to_location("102.89.34.10") == GeoLocation()

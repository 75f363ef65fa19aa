"""Tests for product version parsing."""
from __future__ import annotations

import math
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from version import ProductVersion, parse_product_version


def test_parse_full_version() -> None:
    v = parse_product_version("15.0.2000.5")
    assert v.major == 15
    assert v.minor == 0
    assert v.build == 2000
    assert v.revision == 5
    assert v.number == 15.0


def test_parse_two_segments() -> None:
    v = parse_product_version("16.1")
    assert (v.major, v.minor, v.build, v.revision) == (16, 1, None, None)
    assert v.number == 16.1


def test_minor_is_concatenated_as_decimal() -> None:
    assert parse_product_version("10.50.6000.34").number == 10.5


def test_malformed_versions_do_not_raise() -> None:
    for raw in ("garbage", "", "15", "15.x.1.2", "a.b", None, ".0"):
        v = parse_product_version(raw)
        assert math.isnan(v.number)


def test_version_to_dict() -> None:
    d = ProductVersion(major=14, minor=0, raw="14.0").to_dict()
    assert d["major"] == 14
    assert d["minor"] == 0
    assert d["build"] is None
    assert d["raw"] == "14.0"

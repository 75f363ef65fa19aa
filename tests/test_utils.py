"""Tests for utils."""
from __future__ import annotations

import math
import sys
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils import env_bool, env_float, env_int, is_number, label_value, safe_ratio, to_number


def test_to_number_numeric_cells() -> None:
    assert to_number(3) == 3.0
    assert to_number(2.5) == 2.5
    assert to_number(Decimal("10.25")) == 10.25
    assert to_number(" 42 ") == 42.0
    assert to_number("1e3") == 1000.0
    assert to_number(True) == 1.0


def test_to_number_non_numeric_is_nan() -> None:
    for value in (None, "", "   ", "ONLINE_STATE_0", "abc", object(), [1]):
        assert math.isnan(to_number(value))


def test_is_number() -> None:
    assert is_number(0.0)
    assert is_number(-1.5)
    assert not is_number(float("nan"))
    assert not is_number(None)


def test_safe_ratio() -> None:
    assert safe_ratio(500, 1000) == 50.0
    assert math.isnan(safe_ratio(500, 0))
    assert math.isnan(safe_ratio(float("nan"), 10))
    assert math.isnan(safe_ratio(10, float("nan")))
    assert safe_ratio(1, 4, scale=1.0) == 0.25


def test_label_value() -> None:
    assert label_value(None) == ""
    assert label_value("dbA") == "dbA"
    assert label_value(0) == "0"
    assert label_value(b"tempdb") == "tempdb"


def test_env_helpers(monkeypatch) -> None:
    monkeypatch.setenv("X_BOOL", "yes")
    monkeypatch.setenv("X_INT", "12")
    monkeypatch.setenv("X_FLOAT", "not-a-float")
    assert env_bool("X_BOOL") is True
    assert env_int("X_INT") == 12
    assert env_float("X_FLOAT", 1.5) == 1.5
    assert env_int("X_MISSING", 7) == 7

"""
Tests for the shared reporting arithmetic
"""
import pytest
from datetime import datetime, timezone, timedelta
from decimal import Decimal

from marketdesk.services.metrics import to_float, growth_rate, range_start, as_naive

NOW = datetime(2025, 8, 20, 15, 45)


@pytest.mark.parametrize("value,expected", [
    (None, 0.0),
    (Decimal("12.30"), 12.3),
    ("7.5", 7.5),
    ("n/a", 0.0),
    (3, 3.0),
])
def test_to_float(value, expected):
    assert to_float(value) == expected


def test_growth_rate():
    assert growth_rate(150, 100) == 50.0
    assert growth_rate(50, 100) == -50.0
    assert growth_rate(10, 0) == 0.0
    assert growth_rate(10, 0, empty_baseline=100.0) == 100.0


@pytest.mark.parametrize("time_range,expected", [
    ("today", datetime(2025, 8, 20)),
    ("week", datetime(2025, 8, 13)),
    ("month", datetime(2025, 8, 1)),
    ("quarter", datetime(2025, 7, 1)),
    ("year", datetime(2025, 1, 1)),
    ("all", None),
    (None, None),
])
def test_range_start(time_range, expected):
    assert range_start(time_range, NOW) == expected


def test_as_naive_converts_to_utc():
    aware = datetime(2025, 8, 20, 18, 0, tzinfo=timezone(timedelta(hours=3)))

    assert as_naive(aware) == datetime(2025, 8, 20, 15, 0)
    assert as_naive(NOW) is NOW
    assert as_naive(None) is None

"""
Unit tests for the half-open interval predicate and the date helpers it relies on.
"""
from datetime import datetime, timedelta
from itertools import product

import pytest
import pytz

from carhire.exceptions import ValidationError
from carhire.services.common import overlap
from carhire.utils.dates import ceil_days, parse_instant


def d(day, hour=0):
    return datetime(2030, 1, day, hour, tzinfo=pytz.utc)


def test_overlap_is_symmetric():
    points = [d(1), d(3), d(5), d(7), d(9)]
    intervals = [(a, b) for a, b in product(points, points) if a < b]
    for (a1, a2), (b1, b2) in product(intervals, intervals):
        assert overlap(a1, a2, b1, b2) == overlap(b1, b2, a1, a2)


@pytest.mark.parametrize("a, b, expected", [
    ((d(10), d(15)), (d(15), d(20)), False),  # touching after
    ((d(15), d(20)), (d(10), d(15)), False),  # touching before
    ((d(10), d(15)), (d(12), d(18)), True),   # partial, right edge
    ((d(12), d(18)), (d(10), d(15)), True),   # partial, left edge
    ((d(10), d(20)), (d(12), d(14)), True),   # contains
    ((d(12), d(14)), (d(10), d(20)), True),   # contained
    ((d(10), d(15)), (d(10), d(15)), True),   # identical
    ((d(1), d(3)), (d(5), d(7)), False),      # disjoint
])
def test_overlap_cases(a, b, expected):
    assert overlap(*a, *b) is expected


def test_ceil_days_rounds_partial_days_up():
    assert ceil_days(d(1), d(4)) == 3
    assert ceil_days(d(1), d(1, 1)) == 1
    assert ceil_days(d(1), d(2) + timedelta(minutes=1)) == 2


def test_parse_instant_formats():
    assert parse_instant("2024-06-01") == datetime(2024, 6, 1, tzinfo=pytz.utc)
    assert parse_instant("2024-06-01T10:30:00Z") == datetime(2024, 6, 1, 10, 30, tzinfo=pytz.utc)
    # offsets are normalised to UTC
    assert parse_instant("2024-06-01T12:00:00+02:00") == datetime(2024, 6, 1, 10, tzinfo=pytz.utc)


@pytest.mark.parametrize("bad", [None, "", "yesterday", "2024-13-01", 42, "0001-01-01T00:00:00+01:00"])
def test_parse_instant_rejects_garbage(bad):
    with pytest.raises(ValidationError):
        parse_instant(bad)

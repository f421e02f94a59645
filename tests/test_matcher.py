# Pytest suite for date matching:
#   - fixed days, n-th / last weekdays, computed dates
#   - region filtering and match order
#   - unknown functions (lenient vs strict)
#   - range queries

from __future__ import annotations

from datetime import date, datetime
import logging

import numpy as np
import pytest

from holiday_rules import (
    Holidays,
    UnknownArgument,
    UnknownFunction,
    easter,
)
from holiday_rules.matcher import Matcher, nth_weekday_mday


# -------------------------
# Fixtures
# -------------------------
@pytest.fixture()
def hol() -> Holidays:
    h = Holidays.default()
    h.load_definitions({
        'months': {
            1: [
                {'name': "New Year's Day", 'regions': ['us', 'ca', 'gb'], 'mday': 1},
                {'name': 'Martin Luther King Jr. Day', 'regions': ['us'], 'week': 3, 'wday': 1},
            ],
            5: [{'name': 'Memorial Day', 'regions': ['us'], 'week': -1, 'wday': 1}],
            7: [{'name': 'Canada Day', 'regions': ['ca'], 'mday': 1}],
            11: [{'name': 'Thanksgiving', 'regions': ['us'], 'week': 4, 'wday': 4}],
            0: [{'name': 'Easter Sunday', 'regions': ['us', 'gb'], 'function': 'easter(year)'}],
        }
    })
    return h


# ============================================================
# 1) Weekday arithmetic
# ============================================================
@pytest.mark.parametrize(
    "year, month, week, wday, expected",
    [
        (2023, 11, 4, 4, 23),   # Thanksgiving 2023
        (2024, 11, 4, 4, 28),   # Thanksgiving 2024
        (2024, 1, 3, 1, 15),    # MLK day 2024
        (2024, 5, -1, 1, 27),   # Memorial Day 2024
        (2025, 5, -1, 1, 26),   # Memorial Day 2025
        (2024, 6, 1, 6, 1),     # June 1st 2024 is a Saturday
        (2024, 3, -1, 0, 31),   # March 31st 2024 is a Sunday
        (2024, 2, 5, 4, 29),    # leap year: 5th Thursday of February 2024
        (2023, 2, 5, 4, None),  # no 5th Thursday in February 2023
        (2024, 4, 5, 1, 29),
        (2024, 4, 5, 0, None),  # no 5th Sunday in April 2024
    ],
)
def test_nth_weekday_mday(year: int, month: int, week: int, wday: int, expected) -> None:
    assert nth_weekday_mday(year, month, week, wday) == expected


@pytest.mark.parametrize("year", [2019, 2020, 2021, 2022, 2023, 2024, 2025, 2026])
def test_fourth_thursday_of_november_every_year(hol: Holidays, year: int) -> None:
    day = nth_weekday_mday(year, 11, 4, 4)
    d = date(year, 11, day)
    assert d.weekday() == 3  # Thursday
    assert 22 <= day <= 28
    assert [m.name for m in hol.on(d, 'us')] == ['Thanksgiving']
    assert hol.on(date(year, 11, day - 7), 'us') == []


def test_fifth_week_does_not_overflow_into_next_month() -> None:
    h = Holidays()
    h.load_definitions({'months': {2: [{'name': 'Fifth Thursday', 'regions': ['r'], 'week': 5, 'wday': 4}]}})

    assert [m.name for m in h.on(date(2024, 2, 29), 'r')] == ['Fifth Thursday']
    # 2023: the 5th Thursday would be March 2nd
    assert h.on(date(2023, 3, 2), 'r') == []
    assert all(not h.on(date(2023, 2, d), 'r') for d in range(1, 29))


# ============================================================
# 2) Fixed days, regions and order
# ============================================================
def test_fixed_day_matches_only_its_day(hol: Holidays) -> None:
    assert [m.name for m in hol.on(date(2023, 7, 1), 'ca')] == ['Canada Day']
    assert hol.on(date(2023, 7, 2), 'ca') == []


def test_region_filtering(hol: Holidays) -> None:
    assert hol.on(date(2024, 7, 1), 'us') == []
    assert hol.on(date(2024, 7, 1), 'fr') == []
    assert [m.name for m in hol.on(date(2024, 7, 1), 'us', 'ca')] == ['Canada Day']
    assert [m.name for m in hol.on(date(2024, 7, 1), ['us', 'ca'])] == ['Canada Day']


def test_query_regions_are_canonicalized(hol: Holidays) -> None:
    assert [m.name for m in hol.on(date(2024, 7, 1), '  CA ')] == ['Canada Day']


def test_any_region_matches_everything(hol: Holidays) -> None:
    matches = hol.on(date(2024, 1, 1), 'any')
    assert [m.name for m in matches] == ["New Year's Day"]
    assert matches[0].regions == ('us', 'ca', 'gb')


def test_matcher_accepts_a_single_region_string() -> None:
    h = Holidays()
    h.load_definitions({'months': {6: [{'name': 'Test Holiday', 'regions': ['test_region'], 'mday': 15}]}})
    matcher = Matcher(h.store, h.registry)

    assert [m.name for m in matcher.on(date(2023, 6, 15), 'test_region')] == ['Test Holiday']
    assert [m.name for m in matcher.on(date(2023, 6, 15), ['TEST_REGION'])] == ['Test Holiday']
    assert matcher.on(date(2023, 6, 15), 't') == []


def test_no_region_means_any(hol: Holidays) -> None:
    assert [m.name for m in hol.on(date(2024, 7, 1))] == ['Canada Day']
    assert [m.name for _, m in hol.between(date(2024, 7, 1), date(2024, 7, 31))] == ['Canada Day']


def test_match_order_follows_registration_order() -> None:
    h = Holidays()
    h.load_definitions({'months': {12: [
        {'name': 'First', 'regions': ['r'], 'mday': 25},
        {'name': 'Second', 'regions': ['r'], 'week': -1, 'wday': 3},  # last Wednesday: 2024-12-25
    ]}})
    h.load_definitions({'months': {12: [{'name': 'Third', 'regions': ['r'], 'mday': 25}]}})

    matches = h.on(date(2024, 12, 25), 'r')
    assert [m.name for m in matches] == ['First', 'Second', 'Third']
    assert matches[0].as_dict() == {'name': 'First', 'regions': ['r']}


def test_no_match_is_an_empty_list(hol: Holidays) -> None:
    assert hol.on(date(2024, 8, 15), 'us') == []
    assert hol.on(date(2024, 8, 15), 'unknown_region') == []
    assert Holidays().on(date(2024, 8, 15), 'us') == []


@pytest.mark.parametrize(
    "query",
    ["2024-07-01", "07/01/2024", datetime(2024, 7, 1, 18, 30), np.datetime64("2024-07-01")],
)
def test_date_like_queries(hol: Holidays, query) -> None:
    assert [m.name for m in hol.on(query, 'ca')] == ['Canada Day']


@pytest.mark.parametrize("query", ["2024-13-01", "07/01/24", "20240701", "July 1st 2024", "2024-02-30"])
def test_invalid_date_strings_raise(hol: Holidays, query: str) -> None:
    with pytest.raises(ValueError):
        hol.on(query, 'ca')


# ============================================================
# 3) Computed dates
# ============================================================
@pytest.mark.parametrize(
    "year, expected",
    [
        (2000, date(2000, 4, 23)),
        (2019, date(2019, 4, 21)),
        (2024, date(2024, 3, 31)),
        (2025, date(2025, 4, 20)),
        (2038, date(2038, 4, 25)),
    ],
)
def test_easter(year: int, expected: date) -> None:
    assert easter(year) == expected


def test_computed_rule_matches_exact_date(hol: Holidays) -> None:
    assert [m.name for m in hol.on(date(2024, 3, 31), 'gb')] == ['Easter Sunday']
    assert [m.name for m in hol.on(date(2025, 4, 20), 'gb')] == ['Easter Sunday']
    assert hol.on(date(2025, 3, 31), 'gb') == []


def test_computed_rule_in_fixed_month() -> None:
    h = Holidays()
    h.register_function('f', 'year', lambda year: date(year, 8, 10))
    h.load_definitions({'months': {8: [{'name': 'F Day', 'regions': ['region'], 'function': 'f(year)'}]}})

    assert len(h.on(date(2023, 8, 10), 'region')) == 1
    assert len(h.on(date(2024, 8, 10), 'region')) == 1
    assert h.on(date(2023, 8, 11), 'region') == []


def test_computed_datetime_result_is_truncated() -> None:
    h = Holidays()
    h.register_function('noon', 'year', lambda year: datetime(year, 6, 1, 12))
    h.load_definitions({'months': {6: [{'name': 'Noon', 'regions': ['r'], 'function': 'noon(year)'}]}})

    assert [m.name for m in h.on(date(2024, 6, 1), 'r')] == ['Noon']


def test_unknown_function_is_skipped_and_logged(caplog) -> None:
    h = Holidays()
    h.load_definitions({'months': {8: [
        {'name': 'Missing', 'regions': ['r'], 'function': 'missing(year)'},
        {'name': 'Present', 'regions': ['r'], 'mday': 10},
    ]}})

    with caplog.at_level(logging.WARNING, logger="holiday_rules.matcher"):
        matches = h.on(date(2024, 8, 10), 'r')

    assert [m.name for m in matches] == ['Present']
    assert "missing" in caplog.text


def test_unknown_function_raises_in_strict_mode() -> None:
    h = Holidays(strict=True)
    h.load_definitions({'months': {8: [{'name': 'Missing', 'regions': ['r'], 'function': 'missing(year)'}]}})

    with pytest.raises(UnknownFunction):
        h.on(date(2024, 8, 10), 'r')
    # rules outside the queried regions are never evaluated
    assert h.on(date(2024, 8, 10), 'other') == []


def test_declared_only_function_is_unknown_at_match_time() -> None:
    h = Holidays(strict=True)
    h.load_definitions({
        'months': {8: [{'name': 'Declared', 'regions': ['r'], 'function': 'declared(year)'}]},
        'methods': {'declared': {'arguments': 'year'}},
    })

    with pytest.raises(UnknownFunction):
        h.on(date(2024, 8, 10), 'r')


def test_unsupported_argument_name() -> None:
    h = Holidays(strict=True)
    h.register_function('g', 'year, month', lambda year, month: date(year, month, 1))
    h.load_definitions({'months': {8: [{'name': 'G', 'regions': ['r'], 'function': 'g(year, month)'}]}})

    with pytest.raises(UnknownArgument):
        h.on(date(2024, 8, 1), 'r')

    lenient = Holidays(store=h.store, registry=h.registry)
    assert lenient.on(date(2024, 8, 1), 'r') == []


def test_callback_errors_propagate() -> None:
    h = Holidays()

    def broken(year):
        raise RuntimeError("boom")

    h.register_function('broken', 'year', broken)
    h.load_definitions({'months': {8: [{'name': 'Broken', 'regions': ['r'], 'function': 'broken(year)'}]}})

    with pytest.raises(RuntimeError):
        h.on(date(2024, 8, 1), 'r')


def test_register_overwrites_silently() -> None:
    h = Holidays()
    h.register_function('f', 'year', lambda year: date(year, 8, 10))
    h.register_function('f', 'year', lambda year: date(year, 8, 11))
    h.load_definitions({'months': {8: [{'name': 'F', 'regions': ['r'], 'function': 'f(year)'}]}})

    assert h.on(date(2024, 8, 10), 'r') == []
    assert [m.name for m in h.on(date(2024, 8, 11), 'r')] == ['F']


# ============================================================
# 4) Range queries
# ============================================================
def test_between(hol: Holidays) -> None:
    out = hol.between(date(2024, 1, 1), date(2024, 6, 30), 'us')
    assert [(d.isoformat(), m.name) for d, m in out] == [
        ('2024-01-01', "New Year's Day"),
        ('2024-01-15', 'Martin Luther King Jr. Day'),
        ('2024-03-31', 'Easter Sunday'),
        ('2024-05-27', 'Memorial Day'),
    ]


def test_between_single_day_and_empty_range(hol: Holidays) -> None:
    assert [m.name for _, m in hol.between("2024-07-01", "2024-07-01", 'ca')] == ['Canada Day']
    assert hol.between(date(2024, 8, 1), date(2024, 8, 31), 'ca') == []


def test_between_rejects_reversed_range(hol: Holidays) -> None:
    with pytest.raises(ValueError):
        hol.between(date(2024, 2, 1), date(2024, 1, 1), 'us')

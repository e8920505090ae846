from datetime import date, datetime, timedelta, timezone

import pytest

from gym_api.analytics.series import (
    add_months,
    aggregate_series_by_week,
    as_utc,
    bucket_sum,
    build_day_series,
    build_monthly_series,
    calculate_age,
    day_key,
    key_in_range,
    percentage,
    safe_ratio,
    sum_in_range,
)


UTC = timezone.utc


def test_day_key_normalizes_to_utc():
    plus_five = timezone(timedelta(hours=5))
    # 02:00 at UTC+5 is still the previous day in UTC
    assert day_key(datetime(2024, 3, 10, 2, 0, tzinfo=plus_five)) == "2024-03-09"
    assert day_key(datetime(2024, 3, 10, 23, 59)) == "2024-03-10"


def test_as_utc_treats_naive_as_utc():
    naive = datetime(2024, 1, 1, 12, 0)
    assert as_utc(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


def test_day_series_is_dense_and_inclusive():
    start = datetime(2024, 2, 26, tzinfo=UTC)
    end = datetime(2024, 3, 2, 18, 0, tzinfo=UTC)
    values = {"2024-02-28": 12.5}

    series = build_day_series(start, end, lambda key: values.get(key, 0))

    assert [p["label"] for p in series] == [
        "2024-02-26",
        "2024-02-27",
        "2024-02-28",
        "2024-02-29",
        "2024-03-01",
        "2024-03-02",
    ]
    assert len(series) == (end - start).days + 1
    assert [p["value"] for p in series] == [0, 0, 12.5, 0, 0, 0]


def test_day_series_empty_when_start_after_end():
    start = datetime(2024, 3, 2, tzinfo=UTC)
    assert build_day_series(start, start - timedelta(seconds=1), lambda key: 1.0) == []


def test_day_series_rounds_each_value_to_cents():
    day = datetime(2024, 3, 1, tzinfo=UTC)
    series = build_day_series(day, day, lambda key: 10.0 / 3)
    assert series == [{"label": "2024-03-01", "value": 3.33}]


def test_weekly_rollup_anchors_on_monday():
    series = [
        {"label": "2024-03-03", "value": 5.0},  # Sunday -> week of Feb 26
        {"label": "2024-03-04", "value": 1.0},  # Monday
        {"label": "2024-03-10", "value": 2.0},  # Sunday -> week of Mar 4
        {"label": "2024-02-26", "value": 4.0},  # Monday
    ]

    weekly = aggregate_series_by_week(series)

    assert weekly == [
        {"label": "2024-02-26", "value": 9.0},
        {"label": "2024-03-04", "value": 3.0},
    ]


def test_weekly_rollup_preserves_total():
    start = datetime(2024, 1, 1, tzinfo=UTC)
    end = datetime(2024, 2, 29, tzinfo=UTC)
    daily = build_day_series(start, end, lambda key: int(key[-2:]) * 1.337)

    weekly = aggregate_series_by_week(daily)

    assert sum(p["value"] for p in weekly) == pytest.approx(sum(p["value"] for p in daily), abs=0.01)
    assert [p["label"] for p in weekly] == sorted(p["label"] for p in weekly)


def test_monthly_series_spans_year_boundary():
    calls = []

    def resolve(key, month_start, month_end):
        calls.append((key, month_start, month_end))
        return {"label": key, "value": 0}

    series = build_monthly_series(
        datetime(2023, 11, 20, tzinfo=UTC),
        datetime(2024, 2, 3, tzinfo=UTC),
        resolve,
    )

    assert [p["label"] for p in series] == ["2023-11", "2023-12", "2024-01", "2024-02"]
    assert calls[1][1] == datetime(2023, 12, 1, tzinfo=UTC)
    assert calls[1][2] == datetime(2024, 1, 1, tzinfo=UTC)


def test_add_months_handles_negative_offsets():
    assert add_months(datetime(2024, 6, 1, tzinfo=UTC), -11) == datetime(2023, 7, 1, tzinfo=UTC)
    assert add_months(datetime(2024, 12, 1, tzinfo=UTC), 1) == datetime(2025, 1, 1, tzinfo=UTC)


def test_key_in_range_is_half_open():
    start = datetime(2024, 3, 1, tzinfo=UTC)
    end = datetime(2024, 4, 1, tzinfo=UTC)
    assert key_in_range("2024-03-01", start, end)
    assert key_in_range("2024-03-31", start, end)
    assert not key_in_range("2024-04-01", start, end)


def test_sum_in_range():
    by_day = {"2024-02-29": 10.0, "2024-03-01": 2.5, "2024-03-15": 2.5, "2024-04-01": 7.0}
    total = sum_in_range(by_day, datetime(2024, 3, 1, tzinfo=UTC), datetime(2024, 4, 1, tzinfo=UTC))
    assert total == 5.0


@pytest.mark.parametrize(
    "numerator,denominator,expected",
    [(1, 0, 0.0), (0, 0, 0.0), (3, 4, 0.75)],
)
def test_safe_ratio(numerator, denominator, expected):
    assert safe_ratio(numerator, denominator) == expected


def test_percentage_rounds_to_one_decimal():
    assert percentage(1, 3) == 33.3
    assert percentage(5, 0) == 0.0


def test_bucket_sum_skips_missing_keys():
    rows = [("a", 2), ("b", 3), (None, 100), ("a", 5)]
    assert bucket_sum(rows, key=lambda r: r[0], value=lambda r: r[1]) == {"a": 7, "b": 3}
    assert bucket_sum(rows, key=lambda r: r[0]) == {"a": 2, "b": 1}


def test_calculate_age_uses_calendar_years():
    today = date(2024, 6, 15)
    assert calculate_age(date(2006, 6, 15), today) == 18
    assert calculate_age(date(2006, 6, 16), today) == 17
    assert calculate_age(date(2000, 2, 29), date(2024, 2, 28)) == 23

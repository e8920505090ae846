"""Bucketing primitives shared by every figure of the analytics report.

All instants are handled in UTC. Series points are plain ``{"label", "value"}``
dicts so they can be summed, sorted and fed straight into the report schemas.
"""
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, Hashable, Iterable, List, Optional, TypeVar


T = TypeVar("T")

Point = Dict[str, object]

_ONE_DAY = timedelta(days=1)


def as_utc(instant: datetime) -> datetime:
    """Return ``instant`` as an aware UTC datetime; naive values are taken as UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def day_key(instant: datetime) -> str:
    """Calendar-day bucket key (``YYYY-MM-DD``) of an instant in UTC."""
    return as_utc(instant).strftime("%Y-%m-%d")


def month_key(instant: datetime) -> str:
    return as_utc(instant).strftime("%Y-%m")


def start_of_day(instant: datetime) -> datetime:
    return as_utc(instant).replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_month(instant: datetime) -> datetime:
    return start_of_day(instant).replace(day=1)


def add_months(month_start: datetime, months: int) -> datetime:
    """Shift a first-of-month instant by a whole number of calendar months."""
    index = month_start.year * 12 + (month_start.month - 1) + months
    return month_start.replace(year=index // 12, month=index % 12 + 1, day=1)


def key_in_range(key: str, start: datetime, end: datetime) -> bool:
    """True when the day ``key`` (at UTC midnight) lies in ``[start, end)``."""
    instant = datetime.strptime(key, "%Y-%m-%d").replace(tzinfo=timezone.utc)
    return start <= instant < end


def in_window(instant: Optional[datetime], start: datetime, end: datetime) -> bool:
    """Inclusive ``[start, end]`` membership; ``None`` is never in a window."""
    if instant is None:
        return False
    return start <= as_utc(instant) <= end


def round_currency(value: float) -> float:
    return round(value, 2)


def round_percent(value: float) -> float:
    return round(value, 1)


def safe_ratio(numerator: float, denominator: float) -> float:
    """Plain division that yields 0 for a zero denominator."""
    if not denominator:
        return 0.0
    return numerator / denominator


def percentage(numerator: float, denominator: float) -> float:
    """``numerator / denominator`` as a 1-decimal percentage, 0 for an empty base."""
    return round_percent(safe_ratio(numerator, denominator) * 100.0)


def bucket_sum(
    records: Iterable[T],
    key: Callable[[T], Optional[Hashable]],
    value: Callable[[T], float] = lambda _record: 1,
) -> Dict[Hashable, float]:
    """Group ``records`` by ``key`` and sum ``value`` per group.

    Records whose key resolves to ``None`` are skipped, which is how dangling
    foreign keys drop out of a single contribution without failing the report.
    """
    buckets: Dict[Hashable, float] = defaultdict(int)
    for record in records:
        bucket = key(record)
        if bucket is None:
            continue
        buckets[bucket] += value(record)
    return dict(buckets)


def sum_in_range(by_day: Dict[str, float], start: datetime, end: datetime) -> float:
    """Sum a day-keyed map over the half-open window ``[start, end)``."""
    return sum(amount for key, amount in by_day.items() if key_in_range(key, start, end))


def build_day_series(start: datetime, end: datetime, value_for: Callable[[str], float]) -> List[Point]:
    """Dense daily series from ``start`` through ``end`` inclusive.

    One point per day even when ``value_for`` returns 0; empty when
    ``start > end``. Values are rounded to cents here, so roll-ups built on
    top of this series sum already-rounded figures.
    """
    series: List[Point] = []
    cursor = as_utc(start)
    end = as_utc(end)
    while cursor <= end:
        key = day_key(cursor)
        series.append({"label": key, "value": round_currency(value_for(key))})
        cursor += _ONE_DAY
    return series


def _week_start(day: date) -> date:
    # Monday-anchored: Sunday belongs to the week that began six days earlier
    return day - timedelta(days=day.weekday())


def aggregate_series_by_week(series: Iterable[Point]) -> List[Point]:
    """Roll a daily series up into Monday-anchored weeks labelled by week start."""
    weeks = bucket_sum(
        series,
        key=lambda point: _week_start(date.fromisoformat(point["label"])).isoformat(),
        value=lambda point: point["value"],
    )
    return [{"label": label, "value": round_currency(weeks[label])} for label in sorted(weeks)]


def build_monthly_series(
    start: datetime,
    end: datetime,
    resolve: Callable[[str, datetime, datetime], Point],
) -> List[Point]:
    """Call ``resolve(month_key, month_start, month_end)`` once per calendar month.

    Months run from ``start``'s month through ``end``'s month inclusive and
    ``month_end`` is exclusive. The resolver filters its own raw sources, so
    monthly figures never compound the daily rounding.
    """
    series: List[Point] = []
    cursor = start_of_month(start)
    final = start_of_month(end)
    while cursor <= final:
        month_end = add_months(cursor, 1)
        series.append(resolve(month_key(cursor), cursor, month_end))
        cursor = month_end
    return series


def calculate_age(date_of_birth: date, today: date) -> int:
    """Whole calendar years between a birth date and ``today``."""
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age

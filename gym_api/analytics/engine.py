"""Pure construction of the reporting & analytics report and dashboard summary.

Nothing here touches the database: both builders are functions of a single
``now`` snapshot and fully materialized source collections, so every relative
window (today, last 30/90 days, last 12 months) is derived once and shared.
"""
from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, NamedTuple, Optional

from gym_api.analytics.series import (
    add_months,
    aggregate_series_by_week,
    as_utc,
    bucket_sum,
    build_day_series,
    build_monthly_series,
    calculate_age,
    day_key,
    in_window,
    month_key,
    percentage,
    round_currency,
    safe_ratio,
    start_of_day,
    start_of_month,
    sum_in_range,
)
from gym_api.analytics.schemas.records import DashboardSources, ReportSources
from gym_api.analytics.schemas.report import DashboardMetric, DashboardStats, ReportingAnalytics


DAILY_WINDOW_DAYS = 30
CATEGORY_WINDOW_DAYS = 90
MONTHLY_WINDOW_MONTHS = 12
ACTIVE_WINDOW_DAYS = 30
EXPIRY_HORIZON_DAYS = 7

TOP_CLASSES = 8
TOP_TRAINERS = 5

QUALIFYING_BOOKING_STATUSES = ("CONFIRMED", "COMPLETED")
ENGAGED_SESSION_STATUSES = ("SCHEDULED", "COMPLETED")
CHURNED_SUBSCRIPTION_STATUSES = ("CANCELLED", "EXPIRED")
OUTSTANDING_INVOICE_STATUSES = ("SENT", "OVERDUE")

UNKNOWN_CLASS = "Unknown Class"
UNKNOWN_TRAINER = "Unknown Trainer"
UNKNOWN_PLAN = "Unknown Plan"
UNKNOWN_GENDER = "Unknown"
DEFAULT_CLASS_CATEGORY = "GENERAL"


class ReportWindows(NamedTuple):
    """Every lookback window of one report, derived from a single ``now``."""
    now: datetime
    daily_start: datetime
    category_start: datetime
    monthly_start: datetime
    active_start: datetime
    previous_active_start: datetime

    @property
    def pull_start(self) -> datetime:
        """Earliest instant any revenue figure can reach back to."""
        return min(self.daily_start, self.category_start, self.monthly_start)

    @property
    def day_after_now(self) -> datetime:
        return start_of_day(self.now) + timedelta(days=1)


def report_windows(now: datetime) -> ReportWindows:
    now = as_utc(now)
    today = start_of_day(now)
    return ReportWindows(
        now=now,
        daily_start=today - timedelta(days=DAILY_WINDOW_DAYS - 1),
        category_start=today - timedelta(days=CATEGORY_WINDOW_DAYS - 1),
        monthly_start=add_months(start_of_month(now), -(MONTHLY_WINDOW_MONTHS - 1)),
        active_start=now - timedelta(days=ACTIVE_WINDOW_DAYS),
        previous_active_start=now - timedelta(days=2 * ACTIVE_WINDOW_DAYS),
    )


class _ResolvedBooking(NamedTuple):
    class_name: str
    category: str
    trainer_id: Optional[int]


def _top(counts: Dict, limit: int) -> List[tuple]:
    # Highest count first; ties broken by key so the ranking is stable
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:limit]


def _revenue_maps(sources: ReportSources, windows: ReportWindows):
    start, now = windows.pull_start, windows.now
    memberships = bucket_sum(
        (p for p in sources.payments if p.status == "PAID" and in_window(p.created_at, start, now)),
        key=lambda p: day_key(p.created_at),
        value=lambda p: p.amount,
    )
    products = bucket_sum(
        (s for s in sources.product_sales if s.status == "COMPLETED" and in_window(s.sold_at, start, now)),
        key=lambda s: day_key(s.sold_at),
        value=lambda s: s.total,
    )
    # Scheduled sessions occupy their day but earn nothing until completed
    sessions = bucket_sum(
        (
            s
            for s in sources.trainer_sessions
            if s.status in ENGAGED_SESSION_STATUSES and in_window(s.session_date, start, now)
        ),
        key=lambda s: day_key(s.session_date),
        value=lambda s: s.rate if s.status == "COMPLETED" else 0.0,
    )
    return memberships, products, sessions


def _revenue_reports(sources: ReportSources, windows: ReportWindows):
    """Revenue section plus the 90-day revenue total behind the lifetime value."""
    memberships, products, sessions = _revenue_maps(sources, windows)
    category_maps = (memberships, products, sessions)

    daily = build_day_series(
        windows.daily_start,
        windows.now,
        lambda key: sum(by_day.get(key, 0.0) for by_day in category_maps),
    )

    def _month_revenue(key: str, month_start: datetime, month_end: datetime) -> dict:
        total = sum(sum_in_range(by_day, month_start, month_end) for by_day in category_maps)
        return {"label": key, "value": round_currency(total)}

    monthly = build_monthly_series(windows.monthly_start, windows.now, _month_revenue)

    category_start, window_end = windows.category_start, windows.day_after_now
    membership_total = sum_in_range(memberships, category_start, window_end)
    product_total = sum_in_range(products, category_start, window_end)
    session_total = sum_in_range(sessions, category_start, window_end)

    invoices = [i for i in sources.invoices if in_window(i.due_date, category_start, windows.now)]
    invoiced = sum(i.total for i in invoices)
    collected = sum(i.total for i in invoices if i.status == "PAID")
    invoice_outstanding = sum(i.total for i in invoices if i.status in OUTSTANDING_INVOICE_STATUSES)
    pending = sum(
        p.amount
        for p in sources.payments
        if p.status == "PENDING" and in_window(p.created_at, category_start, windows.now)
    )

    reports = {
        "daily_revenue": daily,
        "weekly_revenue": aggregate_series_by_week(daily),
        "monthly_revenue": monthly,
        "revenue_by_source": {
            "memberships": round_currency(membership_total),
            "products": round_currency(product_total),
            "sessions": round_currency(session_total),
        },
        "payment_collection": {
            "invoiced_amount": round_currency(invoiced),
            "collected_amount": round_currency(collected),
            "collection_rate": percentage(collected, invoiced),
        },
        "outstanding_payments": {
            "invoice_outstanding": round_currency(invoice_outstanding),
            "pending_payments": round_currency(pending),
            "total_outstanding": round_currency(invoice_outstanding + pending),
        },
    }
    return reports, membership_total + product_total + session_total


def _age_bucket(age: Optional[int]) -> str:
    if age is None:
        return "unknown"
    if age < 18:
        return "under_18"
    if age <= 25:
        return "age_18_to_25"
    if age <= 35:
        return "age_26_to_35"
    if age <= 45:
        return "age_36_to_45"
    return "age_46_plus"


def _member_analytics(sources: ReportSources, windows: ReportWindows) -> dict:
    now = windows.now
    members = sources.members
    member_ids = {m.id for m in members}

    created_by_month = bucket_sum(
        (m for m in members if m.created_at <= now),
        key=lambda m: month_key(m.created_at),
    )
    growth = build_monthly_series(
        windows.monthly_start,
        now,
        lambda key, _start, _end: {"label": key, "value": int(created_by_month.get(key, 0))},
    )

    subscriptions = sources.subscriptions
    churned = sum(
        1
        for s in subscriptions
        if s.status in CHURNED_SUBSCRIPTION_STATUSES and in_window(s.end_date, windows.category_start, now)
    )

    # Attendance of members that no longer exist is a dangling reference
    active = len(set(sources.active_member_ids) & member_ids)
    previous_active = len(set(sources.previous_active_member_ids) & member_ids)

    genders = bucket_sum(members, key=lambda m: (m.gender or "").strip() or UNKNOWN_GENDER)
    today = now.date()
    ages = bucket_sum(
        members,
        key=lambda m: _age_bucket(calculate_age(m.date_of_birth, today) if m.date_of_birth else None),
    )

    plan_names = {p.id: p.name for p in sources.membership_plans}
    plan_counts = bucket_sum(
        (s for s in subscriptions if s.start_date <= now and s.end_date >= windows.category_start),
        key=lambda s: plan_names.get(s.membership_plan_id, UNKNOWN_PLAN),
    )

    return {
        "growth_trends": growth,
        "churn_rate": percentage(churned, len(subscriptions)),
        "churned_subscriptions": churned,
        "total_subscriptions": len(subscriptions),
        "active_vs_inactive": {
            "active_members": active,
            "inactive_members": max(len(members) - active, 0),
            "previous_period_active_members": previous_active,
        },
        "demographics": {
            "gender_distribution": {gender: int(count) for gender, count in genders.items()},
            "age_distribution": {bucket: int(count) for bucket, count in ages.items()},
        },
        "membership_plan_distribution": [
            {"plan_name": name, "count": int(count)} for name, count in _top(plan_counts, len(plan_counts))
        ],
    }


def _resolve_bookings(sources: ReportSources, windows: ReportWindows) -> List[_ResolvedBooking]:
    """Qualifying bookings joined to their class and trainer through the schedule.

    Bookings whose schedule (or the schedule's class id) no longer resolves are
    dropped; a schedule pointing at a deleted class keeps the booking under a
    fallback name.
    """
    schedules = {s.id: s for s in sources.class_schedules}
    classes = {c.id: c for c in sources.classes}
    resolved = []
    for booking in sources.class_bookings:
        if booking.status not in QUALIFYING_BOOKING_STATUSES:
            continue
        if not in_window(booking.booked_at, windows.category_start, windows.now):
            continue
        schedule = schedules.get(booking.class_schedule_id)
        if schedule is None or schedule.class_id is None:
            continue
        gym_class = classes.get(schedule.class_id)
        resolved.append(
            _ResolvedBooking(
                class_name=gym_class.name if gym_class else UNKNOWN_CLASS,
                category=(gym_class.category if gym_class else None) or DEFAULT_CLASS_CATEGORY,
                trainer_id=schedule.trainer_id,
            )
        )
    return resolved


def display_name(person, fallback: str) -> str:
    """``first last`` of a trainer or member record, ``fallback`` when missing or blank."""
    if person is None:
        return fallback
    name = f"{person.first_name or ''} {person.last_name or ''}".strip()
    return name or fallback


def _operational_metrics(sources: ReportSources, windows: ReportWindows) -> dict:
    now, start = windows.now, windows.category_start

    by_hour = bucket_sum(
        (a for a in sources.attendance if in_window(a.check_in_time, start, now)),
        key=lambda a: as_utc(a.check_in_time).hour,
    )
    peak_hours = [{"label": f"{hour:02d}:00", "value": int(by_hour.get(hour, 0))} for hour in range(24)]

    bookings = _resolve_bookings(sources, windows)
    class_counts = bucket_sum(bookings, key=lambda b: b.class_name)
    category_usage = bucket_sum(bookings, key=lambda b: b.category)

    trainer_counts = Counter(bucket_sum(bookings, key=lambda b: b.trainer_id))
    trainer_counts.update(
        bucket_sum(
            (
                s
                for s in sources.trainer_sessions
                if s.status in ENGAGED_SESSION_STATUSES and in_window(s.session_date, start, now)
            ),
            key=lambda s: s.trainer_id,
        )
    )
    trainers = {t.id: t for t in sources.trainers}
    engaged = len(set(trainer_counts) & set(trainers))

    return {
        "peak_hours_analysis": peak_hours,
        "class_attendance_trends": [
            {"class_name": name, "attendance_count": int(count)} for name, count in _top(class_counts, TOP_CLASSES)
        ],
        "trainer_utilization": {
            "total_trainers": len(trainers),
            "engaged_trainers": engaged,
            "utilization_rate": percentage(engaged, len(trainers)),
            "top_trainers_by_sessions": [
                {
                    "trainer_id": trainer_id,
                    "trainer_name": display_name(trainers.get(trainer_id), UNKNOWN_TRAINER),
                    "sessions_count": int(count),
                }
                for trainer_id, count in _top(trainer_counts, TOP_TRAINERS)
            ],
        },
        "equipment_usage_patterns": {
            "usage_by_class_category": [
                {"category": category, "usage": int(count)}
                for category, count in _top(category_usage, len(category_usage))
            ],
            "active_equipment_by_category": {
                category: int(count)
                for category, count in bucket_sum(
                    (e for e in sources.equipment if e.is_active), key=lambda e: e.category
                ).items()
            },
        },
    }


def build_reporting_analytics(now: datetime, sources: ReportSources) -> ReportingAnalytics:
    """Assemble the full reporting & analytics snapshot from one set of pulls."""
    windows = report_windows(now)
    revenue, lifetime_revenue = _revenue_reports(sources, windows)

    operational = _operational_metrics(sources, windows)
    operational["average_member_lifetime_value"] = round_currency(
        safe_ratio(lifetime_revenue, len(sources.members))
    )

    return ReportingAnalytics(
        generated_at=windows.now,
        revenue_reports=revenue,
        member_analytics=_member_analytics(sources, windows),
        operational_metrics=operational,
    )


def _metric(value, change, trend: Optional[str] = None) -> DashboardMetric:
    return DashboardMetric(value=value, change=change, type=trend or ("increase" if change >= 0 else "decrease"))


def _plan_revenue(prices: Iterable[Optional[float]]) -> float:
    return sum(price or 0.0 for price in prices)


def build_dashboard_stats(now: datetime, sources: DashboardSources) -> DashboardStats:
    """Current totals with their change against the previous calendar month."""
    member_change = sources.current_month_members - sources.last_month_members
    active_change = sources.active_memberships - sources.previous_active_memberships
    check_in_change = sources.current_month_check_ins - sources.last_month_check_ins
    current_revenue = _plan_revenue(sources.current_month_plan_prices)
    revenue_change = current_revenue - _plan_revenue(sources.last_month_plan_prices)

    return DashboardStats(
        generated_at=as_utc(now),
        total_members=_metric(sources.total_members, member_change),
        new_signups=_metric(sources.current_month_members, member_change),
        active_memberships=_metric(sources.active_memberships, active_change),
        expiring_memberships=_metric(sources.expiring_memberships, 0, "decrease"),
        monthly_check_ins=_metric(sources.current_month_check_ins, check_in_change),
        monthly_revenue=_metric(round_currency(current_revenue), round_currency(revenue_change)),
    )

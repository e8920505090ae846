"""Source pulls behind the analytics endpoints.

Independent pulls fan out as concurrent tasks, each running its blocking query
in a worker thread on its own session, and are joined before any aggregation
begins. A failed pull fails the whole report: the report is an atomic snapshot.
"""
import asyncio
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gym_api.analytics.engine import (
    EXPIRY_HORIZON_DAYS,
    build_dashboard_stats,
    build_reporting_analytics,
    report_windows,
)
from gym_api.analytics.panels import (
    ACTIVITY_PULL_LIMIT,
    RECENT_MEMBERS,
    UPCOMING_WINDOW_DAYS,
    build_popular_classes,
    build_recent_activity,
    build_recent_members,
    build_upcoming_classes,
)
from gym_api.analytics.schemas.records import (
    ActivitySources,
    ClassScheduleSources,
    DashboardSources,
    RecentMemberSources,
    ReportSources,
)
from gym_api.analytics.schemas.report import (
    ActivityEntry,
    DashboardStats,
    RecentMemberEntry,
    ReportingAnalytics,
    ScheduledClassEntry,
    UpcomingClasses,
)
from gym_api.analytics.series import add_months, as_utc, start_of_day, start_of_month
from gym_api.records.cruds import billing as billing_crud
from gym_api.records.cruds import classes as classes_crud
from gym_api.records.cruds import equipment as equipment_crud
from gym_api.records.cruds import members as members_crud


logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]
Pull = Tuple[Any, ...]


class ReportSourceError(RuntimeError):
    """A record collection could not be read; no partial report is produced."""

    def __init__(self, source: str):
        super().__init__(f"Report source '{source}' is unavailable")
        self.source = source


def _run_pull(session_factory: SessionFactory, source: str, query: Callable, *args):
    db = session_factory()
    started = time.perf_counter()
    try:
        return query(db, *args)
    except SQLAlchemyError as exc:
        logger.error("Pull of %s failed: %s", source, exc)
        raise ReportSourceError(source) from exc
    finally:
        db.close()
        logger.debug("Pulled %s in %.1f ms", source, (time.perf_counter() - started) * 1000)


async def _gather_pulls(session_factory: SessionFactory, pulls: Dict[str, Pull]) -> Dict[str, Any]:
    names = list(pulls)
    results = await asyncio.gather(
        *(asyncio.to_thread(_run_pull, session_factory, name, *pulls[name]) for name in names)
    )
    return dict(zip(names, results))


async def pull_report_sources(session_factory: SessionFactory, now: datetime) -> ReportSources:
    """Pull every collection the report needs in two concurrent rounds.

    The second round resolves plan names and class schedules, which needs the
    ids seen in the subscriptions and bookings of the first round.
    """
    windows = report_windows(now)
    first = await _gather_pulls(
        session_factory,
        {
            "payments": (billing_crud.get_payments, windows.pull_start, windows.now),
            "product_sales": (billing_crud.get_product_sales, windows.pull_start, windows.now),
            "trainer_sessions": (classes_crud.get_trainer_sessions, windows.pull_start, windows.now),
            "members": (members_crud.get_members,),
            "subscriptions": (members_crud.get_subscriptions,),
            "attendance": (members_crud.get_attendance, windows.category_start, windows.now),
            "class_bookings": (classes_crud.get_class_bookings, windows.category_start, windows.now),
            "classes": (classes_crud.get_classes,),
            "trainers": (classes_crud.get_trainers,),
            "equipment": (equipment_crud.get_active_equipment,),
            "invoices": (billing_crud.get_invoices, windows.category_start, windows.now),
            "active_member_ids": (members_crud.get_active_member_ids, windows.active_start, windows.now),
            "previous_active_member_ids": (
                members_crud.get_active_member_ids,
                windows.previous_active_start,
                windows.active_start,
            ),
        },
    )
    second = await _gather_pulls(
        session_factory,
        {
            "membership_plans": (
                members_crud.get_membership_plans,
                [s.membership_plan_id for s in first["subscriptions"]],
            ),
            "class_schedules": (
                classes_crud.get_class_schedules,
                [b.class_schedule_id for b in first["class_bookings"]],
            ),
        },
    )
    return ReportSources(**first, **second)


def _resolve_now(now: Optional[datetime]) -> datetime:
    return as_utc(now) if now else datetime.now(timezone.utc)


async def pull_dashboard_sources(session_factory: SessionFactory, now: datetime) -> DashboardSources:
    """Counts for the calendar month so far and the whole month before it."""
    now = as_utc(now)
    month_start = start_of_month(now)
    last_month_start = add_months(month_start, -1)
    results = await _gather_pulls(
        session_factory,
        {
            "total_members": (members_crud.count_members,),
            "current_month_members": (members_crud.count_members, month_start),
            "last_month_members": (members_crud.count_members, last_month_start, month_start),
            "active_memberships": (members_crud.count_active_subscriptions, now),
            "previous_active_memberships": (members_crud.count_active_subscriptions, month_start),
            "expiring_memberships": (
                members_crud.count_subscriptions,
                "ACTIVE",
                now,
                now + timedelta(days=EXPIRY_HORIZON_DAYS),
            ),
            "current_month_check_ins": (members_crud.count_check_ins, month_start),
            "last_month_check_ins": (members_crud.count_check_ins, last_month_start, month_start),
            "current_month_plan_prices": (
                members_crud.get_plan_prices_for_started,
                month_start,
                add_months(month_start, 1),
            ),
            "last_month_plan_prices": (members_crud.get_plan_prices_for_started, last_month_start, month_start),
        },
    )
    return DashboardSources(**results)


async def pull_class_schedule_sources(
    session_factory: SessionFactory, start: datetime, end: datetime
) -> ClassScheduleSources:
    first = await _gather_pulls(
        session_factory,
        {
            "schedules": (classes_crud.get_schedules_starting, start, end),
            "classes": (classes_crud.get_classes,),
            "trainers": (classes_crud.get_trainers,),
        },
    )
    second = await _gather_pulls(
        session_factory,
        {"bookings": (classes_crud.get_bookings_for_schedules, [s.id for s in first["schedules"]])},
    )
    return ClassScheduleSources(**first, **second)


async def pull_activity_sources(session_factory: SessionFactory, now: datetime) -> ActivitySources:
    """Latest check-ins and bookings of the current calendar month, then who and what they refer to."""
    now = as_utc(now)
    first = await _gather_pulls(
        session_factory,
        {
            "check_ins": (members_crud.get_recent_check_ins, start_of_month(now), now, ACTIVITY_PULL_LIMIT),
            "bookings": (classes_crud.get_recent_bookings, start_of_month(now), now, ACTIVITY_PULL_LIMIT),
            "classes": (classes_crud.get_classes,),
        },
    )
    member_ids = [c.member_id for c in first["check_ins"]] + [b.member_id for b in first["bookings"]]
    second = await _gather_pulls(
        session_factory,
        {
            "members": (members_crud.get_members_by_ids, member_ids),
            "class_schedules": (
                classes_crud.get_class_schedules,
                [b.class_schedule_id for b in first["bookings"]],
            ),
        },
    )
    return ActivitySources(**first, **second)


async def pull_recent_member_sources(session_factory: SessionFactory) -> RecentMemberSources:
    recent = await _gather_pulls(
        session_factory, {"members": (members_crud.get_recent_members, RECENT_MEMBERS)}
    )
    subscriptions = await _gather_pulls(
        session_factory,
        {"subscriptions": (members_crud.get_member_subscriptions, [m.id for m in recent["members"]])},
    )
    plans = await _gather_pulls(
        session_factory,
        {
            "membership_plans": (
                members_crud.get_membership_plans,
                [s.membership_plan_id for s in subscriptions["subscriptions"]],
            )
        },
    )
    return RecentMemberSources(**recent, **subscriptions, **plans)


async def get_reporting_analytics(
    session_factory: SessionFactory, now: Optional[datetime] = None
) -> ReportingAnalytics:
    """Fresh pull + aggregate of the reporting & analytics snapshot."""
    now = _resolve_now(now)
    started = time.perf_counter()
    sources = await pull_report_sources(session_factory, now)
    report = build_reporting_analytics(now, sources)
    logger.info(
        "Built analytics report for %s from %d members in %.1f ms",
        now.isoformat(),
        len(sources.members),
        (time.perf_counter() - started) * 1000,
    )
    return report


async def get_dashboard_stats(session_factory: SessionFactory, now: Optional[datetime] = None) -> DashboardStats:
    now = _resolve_now(now)
    sources = await pull_dashboard_sources(session_factory, now)
    return build_dashboard_stats(now, sources)


async def get_upcoming_classes(
    session_factory: SessionFactory,
    now: Optional[datetime] = None,
    days: int = UPCOMING_WINDOW_DAYS,
) -> UpcomingClasses:
    now = _resolve_now(now)
    sources = await pull_class_schedule_sources(session_factory, now, now + timedelta(days=days))
    return build_upcoming_classes(now, sources, days)


async def get_popular_classes(
    session_factory: SessionFactory, now: Optional[datetime] = None
) -> List[ScheduledClassEntry]:
    now = _resolve_now(now)
    today = start_of_day(now)
    sources = await pull_class_schedule_sources(session_factory, today, today + timedelta(days=1))
    return build_popular_classes(now, sources)


async def get_recent_activity(session_factory: SessionFactory, now: Optional[datetime] = None) -> List[ActivityEntry]:
    now = _resolve_now(now)
    sources = await pull_activity_sources(session_factory, now)
    return build_recent_activity(now, sources)


async def get_recent_members(session_factory: SessionFactory) -> List[RecentMemberEntry]:
    sources = await pull_recent_member_sources(session_factory)
    return build_recent_members(sources)

"""Dashboard side panels: class schedule load, the activity feed and newest members.

Like the report these are pure functions of one ``now`` and pulled records.
References that no longer resolve fall back to placeholder labels.
"""
from datetime import datetime, timedelta
from typing import Dict, List

from gym_api.analytics.engine import UNKNOWN_CLASS, UNKNOWN_TRAINER, display_name
from gym_api.analytics.schemas.records import ActivitySources, ClassScheduleSources, RecentMemberSources
from gym_api.analytics.schemas.report import (
    ActivityEntry,
    RecentMemberEntry,
    ScheduledClassEntry,
    UpcomingClasses,
)
from gym_api.analytics.series import as_utc, bucket_sum, in_window, percentage, start_of_day


UPCOMING_WINDOW_DAYS = 7
TOP_SCHEDULES = 5
ACTIVITY_FEED_SIZE = 6
ACTIVITY_PULL_LIMIT = 20
RECENT_MEMBERS = 5

UNKNOWN_MEMBER = "Unknown Member"
NO_PLAN = "No Plan"


def _schedule_entries(sources: ClassScheduleSources, schedules, booked: Dict) -> List[dict]:
    classes = {c.id: c for c in sources.classes}
    trainers = {t.id: t for t in sources.trainers}
    entries = []
    for schedule in schedules:
        gym_class = classes.get(schedule.class_id)
        entries.append(
            {
                "schedule_id": schedule.id,
                "class_name": gym_class.name if gym_class else UNKNOWN_CLASS,
                "trainer_name": display_name(trainers.get(schedule.trainer_id), UNKNOWN_TRAINER),
                "booked": int(booked.get(schedule.id, 0)),
                "capacity": gym_class.max_capacity if gym_class else 0,
                "start_time": schedule.start_time,
            }
        )
    return entries


def _most_booked(entries: List[dict], limit: int) -> List[dict]:
    # Earlier classes win ties
    return sorted(entries, key=lambda e: (-e["booked"], e["start_time"], e["schedule_id"]))[:limit]


def build_upcoming_classes(
    now: datetime, sources: ClassScheduleSources, days: int = UPCOMING_WINDOW_DAYS
) -> UpcomingClasses:
    """Capacity utilization of classes starting in ``[now, now + days]``.

    Only CONFIRMED bookings fill a seat; a schedule whose class is gone offers
    no capacity.
    """
    now = as_utc(now)
    end = now + timedelta(days=days)
    booked = bucket_sum(
        (b for b in sources.bookings if b.status == "CONFIRMED"),
        key=lambda b: b.class_schedule_id,
    )
    upcoming = [s for s in sources.schedules if in_window(s.start_time, now, end)]
    entries = _schedule_entries(sources, upcoming, booked)
    total_capacity = sum(e["capacity"] for e in entries)
    total_bookings = sum(e["booked"] for e in entries)

    return UpcomingClasses(
        generated_at=now,
        window_days=days,
        total_upcoming_classes=len(entries),
        total_capacity=total_capacity,
        total_bookings=total_bookings,
        utilization=percentage(total_bookings, total_capacity),
        top_classes=_most_booked(entries, TOP_SCHEDULES),
    )


def build_popular_classes(now: datetime, sources: ClassScheduleSources) -> List[ScheduledClassEntry]:
    """Today's classes ranked by bookings of any status."""
    today = start_of_day(now)
    tomorrow = today + timedelta(days=1)
    booked = bucket_sum(sources.bookings, key=lambda b: b.class_schedule_id)
    todays = [s for s in sources.schedules if s.start_time is not None and today <= s.start_time < tomorrow]
    entries = _schedule_entries(sources, todays, booked)
    return [ScheduledClassEntry(**entry) for entry in _most_booked(entries, TOP_SCHEDULES)]


def build_recent_activity(now: datetime, sources: ActivitySources) -> List[ActivityEntry]:
    """Check-ins and class bookings merged into one newest-first feed."""
    now = as_utc(now)
    members = {m.id: m for m in sources.members}
    schedules = {s.id: s for s in sources.class_schedules}
    classes = {c.id: c for c in sources.classes}

    feed = []
    for check_in in sources.check_ins:
        name = display_name(members.get(check_in.member_id), UNKNOWN_MEMBER)
        feed.append(
            {
                "id": check_in.id,
                "member": name,
                "action": "Check-in",
                "detail": f"{name} checked in",
                "category": "Class" if check_in.type == "CLASS_ATTENDANCE" else "Gym Visit",
                "status": "completed",
                "time": check_in.check_in_time,
            }
        )
    for booking in sources.bookings:
        name = display_name(members.get(booking.member_id), UNKNOWN_MEMBER)
        schedule = schedules.get(booking.class_schedule_id)
        gym_class = classes.get(schedule.class_id) if schedule else None
        feed.append(
            {
                "id": booking.id,
                "member": name,
                "action": "Class booking",
                "detail": f"{name} booked {gym_class.name if gym_class else UNKNOWN_CLASS}",
                "category": "Class",
                "class_category": gym_class.category if gym_class else None,
                "status": booking.status.lower(),
                "time": booking.booked_at,
            }
        )

    feed = [item for item in feed if item["time"] <= now]
    feed.sort(key=lambda item: item["time"], reverse=True)
    return [ActivityEntry(**item) for item in feed[:ACTIVITY_FEED_SIZE]]


def build_recent_members(sources: RecentMemberSources) -> List[RecentMemberEntry]:
    """Newest members with the plan and status of their latest subscription."""
    plan_names = {p.id: p.name for p in sources.membership_plans}
    latest = {}
    for subscription in sorted(sources.subscriptions, key=lambda s: s.start_date):
        latest[subscription.member_id] = subscription

    newest = sorted(sources.members, key=lambda m: (m.created_at, m.id), reverse=True)[:RECENT_MEMBERS]
    entries = []
    for member in newest:
        subscription = latest.get(member.id)
        entries.append(
            RecentMemberEntry(
                id=member.id,
                name=display_name(member, UNKNOWN_MEMBER),
                plan=plan_names.get(subscription.membership_plan_id, NO_PLAN) if subscription else NO_PLAN,
                joined=member.created_at.date(),
                status=subscription.status if subscription else None,
            )
        )
    return entries

import asyncio
from datetime import date

import pytest
from sqlalchemy import text

from conftest import NOW, days_ago
from gym_api.analytics.cruds.analytics import (
    ReportSourceError,
    get_dashboard_stats,
    get_popular_classes,
    get_recent_activity,
    get_recent_members,
    get_reporting_analytics,
    get_upcoming_classes,
    pull_report_sources,
)
from gym_api.records.cruds import billing, classes, members
from gym_api.records.models import (
    Attendance,
    ClassBooking,
    ClassSchedule,
    Equipment,
    GymClass,
    Invoice,
    Member,
    MembershipPlan,
    Payment,
    ProductSale,
    Subscription,
    Trainer,
    TrainerSession,
)


@pytest.fixture
def gym(db):
    """A tiny gym with a few records either side of each window edge."""
    db.add_all(
        [
            MembershipPlan(id=1, name="Basic", price=29.99),
            MembershipPlan(id=2, name="Premium", price=59.99),
            Member(id=1, first_name="Ana", last_name="Lopez", gender="Female", date_of_birth=date(1990, 1, 1), created_at=days_ago(10)),
            Member(id=2, gender="Male", date_of_birth=date(2010, 5, 5), created_at=days_ago(40)),
            Member(id=3, gender=None, created_at=days_ago(200)),
            Subscription(member_id=1, membership_plan_id=2, status="ACTIVE", start_date=days_ago(10), end_date=days_ago(-3)),
            Subscription(member_id=2, membership_plan_id=1, status="EXPIRED", start_date=days_ago(40), end_date=days_ago(10)),
            Subscription(member_id=3, membership_plan_id=5, status="CANCELLED", start_date=days_ago(200), end_date=days_ago(170)),
            Payment(amount=59.99, status="PAID", created_at=days_ago(10)),
            Payment(amount=29.99, status="PAID", created_at=days_ago(40)),
            Payment(amount=29.99, status="PENDING", created_at=days_ago(2)),
            Payment(amount=500, status="PAID", created_at=days_ago(500)),
            Invoice(total=59.99, status="PAID", due_date=days_ago(5)),
            Invoice(total=29.99, status="OVERDUE", due_date=days_ago(20)),
            ProductSale(total=4.5, status="COMPLETED", sold_at=days_ago(1)),
            ProductSale(total=40, status="REFUNDED", sold_at=days_ago(1)),
            Trainer(id=1, first_name="Alex", last_name="Morgan"),
            Trainer(id=2, first_name="Sam", last_name="Rivera"),
            TrainerSession(trainer_id=2, rate=55, status="COMPLETED", session_date=days_ago(3)),
            TrainerSession(trainer_id=2, rate=55, status="CANCELLED", session_date=days_ago(3)),
            GymClass(id=1, name="Morning Yoga", category="YOGA", max_capacity=20),
            ClassSchedule(id=1, class_id=1, trainer_id=1, start_time=days_ago(4)),
            ClassBooking(member_id=1, class_schedule_id=1, status="CONFIRMED", booked_at=days_ago(5)),
            ClassBooking(member_id=2, class_schedule_id=77, status="CONFIRMED", booked_at=days_ago(5)),
            Attendance(member_id=1, check_in_time=days_ago(1, hour=7)),
            Attendance(member_id=1, check_in_time=days_ago(2, hour=7)),
            Attendance(member_id=2, check_in_time=days_ago(45, hour=18)),
            Equipment(name="Treadmill", category="CARDIO", is_active=True),
            Equipment(name="Old Bike", category="CARDIO", is_active=False),
        ]
    )
    db.commit()
    return db


def test_payments_are_bounded_by_window(gym):
    rows = billing.get_payments(gym, days_ago(90), NOW)
    assert sorted(r.amount for r in rows) == [29.99, 29.99, 59.99]
    assert all(r.created_at.tzinfo is not None for r in rows)


def test_product_sales_only_completed(gym):
    rows = billing.get_product_sales(gym, days_ago(90), NOW)
    assert [r.total for r in rows] == [4.5]


def test_active_member_ids_are_distinct(gym):
    assert members.get_active_member_ids(gym, NOW.replace(day=1), NOW) == [1]
    assert sorted(members.get_active_member_ids(gym, days_ago(60), NOW)) == [1, 2]


def test_lookups_ignore_missing_ids(gym):
    plans = members.get_membership_plans(gym, [2, None, 5, 2])
    assert [(p.id, p.name) for p in plans] == [(2, "Premium")]
    assert members.get_membership_plans(gym, [None]) == []
    schedules = classes.get_class_schedules(gym, [1, 77])
    assert [(s.id, s.class_id, s.trainer_id) for s in schedules] == [(1, 1, 1)]


def test_plan_prices_for_started_subscriptions(gym):
    prices = members.get_plan_prices_for_started(gym, days_ago(250), NOW)
    assert sorted(prices, key=lambda p: (p is None, p)) == [29.99, 59.99, None]


def test_pull_report_sources_runs_both_rounds(gym, session_factory):
    sources = asyncio.run(pull_report_sources(session_factory, NOW))

    assert len(sources.members) == 3
    assert len(sources.subscriptions) == 3
    assert [p.name for p in sources.membership_plans] == ["Basic", "Premium"]
    assert [s.id for s in sources.class_schedules] == [1]
    assert sources.active_member_ids == [1]
    assert sources.previous_active_member_ids == [2]
    assert [e.category for e in sources.equipment] == ["CARDIO"]


def test_reporting_analytics_end_to_end(gym, session_factory):
    report = asyncio.run(get_reporting_analytics(session_factory, NOW))

    revenue = report.revenue_reports
    assert revenue.revenue_by_source.memberships == 89.98
    assert revenue.revenue_by_source.products == 4.5
    assert revenue.revenue_by_source.sessions == 55
    assert revenue.outstanding_payments.pending_payments == 29.99
    assert revenue.outstanding_payments.invoice_outstanding == 29.99
    assert revenue.payment_collection.collection_rate == 66.7

    analytics = report.member_analytics
    assert analytics.churned_subscriptions == 1
    assert analytics.churn_rate == 33.3
    assert analytics.active_vs_inactive.active_members == 1
    assert analytics.active_vs_inactive.inactive_members == 2
    assert analytics.demographics.age_distribution.under_18 == 1
    assert {(e.plan_name, e.count) for e in analytics.membership_plan_distribution} == {("Premium", 1), ("Basic", 1)}

    operational = report.operational_metrics
    assert [(t.class_name, t.attendance_count) for t in operational.class_attendance_trends] == [("Morning Yoga", 1)]
    assert operational.trainer_utilization.engaged_trainers == 2
    assert operational.trainer_utilization.utilization_rate == 100.0
    assert operational.equipment_usage_patterns.active_equipment_by_category == {"CARDIO": 1}
    assert next(p.value for p in operational.peak_hours_analysis if p.label == "07:00") == 2


def test_dashboard_stats_end_to_end(gym, session_factory):
    stats = asyncio.run(get_dashboard_stats(session_factory, NOW))

    assert stats.total_members.value == 3
    # One member joined in June, one in May
    assert stats.new_signups.value == 1
    assert stats.total_members.change == 0
    # The only ACTIVE subscription started after the first of the month
    assert stats.active_memberships.value == 1
    assert stats.active_memberships.change == 1
    assert stats.expiring_memberships.value == 1
    assert stats.monthly_check_ins.value == 2
    assert stats.monthly_check_ins.change == 1
    assert stats.monthly_check_ins.type == "increase"
    assert stats.monthly_revenue.value == 59.99
    assert stats.monthly_revenue.change == 30.0


def test_missing_table_fails_the_whole_report(gym, session_factory):
    gym.execute(text("DROP TABLE invoices"))
    gym.commit()

    with pytest.raises(ReportSourceError) as excinfo:
        asyncio.run(get_reporting_analytics(session_factory, NOW))

    assert excinfo.value.source == "invoices"


def test_active_memberships_are_bounded_by_their_term(db, session_factory):
    db.add_all(
        [Subscription(member_id=i, status="ACTIVE", start_date=days_ago(i), end_date=days_ago(-25)) for i in range(1, 6)]
        + [Subscription(member_id=i, status="ACTIVE", start_date=days_ago(60), end_date=days_ago(-10)) for i in (6, 7)]
        # Never flipped to EXPIRED, but its term ended long ago
        + [Subscription(member_id=8, status="ACTIVE", start_date=days_ago(330), end_date=days_ago(300))]
    )
    db.commit()

    assert members.count_active_subscriptions(db, NOW) == 7
    stats = asyncio.run(get_dashboard_stats(session_factory, NOW))

    assert stats.active_memberships.value == 7
    assert stats.active_memberships.change == 5
    assert stats.active_memberships.type == "increase"
    assert stats.expiring_memberships.value == 0


def test_class_schedule_panels_end_to_end(gym, session_factory):
    gym.add_all(
        [
            ClassSchedule(id=2, class_id=1, trainer_id=2, start_time=days_ago(-2)),
            ClassSchedule(id=3, class_id=1, trainer_id=1, start_time=days_ago(-3), is_active=False),
            ClassSchedule(id=4, class_id=1, trainer_id=1, start_time=days_ago(0, hour=18)),
            ClassBooking(member_id=1, class_schedule_id=2, status="CONFIRMED", booked_at=days_ago(1)),
            ClassBooking(member_id=2, class_schedule_id=2, status="CONFIRMED", booked_at=days_ago(1)),
            ClassBooking(member_id=2, class_schedule_id=3, status="CONFIRMED", booked_at=days_ago(1)),
            ClassBooking(member_id=3, class_schedule_id=4, status="WAITLISTED", booked_at=days_ago(1)),
        ]
    )
    gym.commit()

    upcoming = asyncio.run(get_upcoming_classes(session_factory, NOW))

    # Schedule 4 starts later today, schedule 3 is inactive
    assert upcoming.total_upcoming_classes == 2
    assert upcoming.total_capacity == 40
    assert upcoming.total_bookings == 2
    assert upcoming.utilization == 5.0
    assert [(c.schedule_id, c.trainer_name) for c in upcoming.top_classes] == [(2, "Sam Rivera"), (4, "Alex Morgan")]

    popular = asyncio.run(get_popular_classes(session_factory, NOW))

    assert [(c.schedule_id, c.booked) for c in popular] == [(4, 1)]


def test_recent_activity_end_to_end(gym, session_factory):
    feed = asyncio.run(get_recent_activity(session_factory, NOW))

    assert [item.action for item in feed] == ["Check-in", "Check-in", "Class booking", "Class booking"]
    assert feed[0].detail == "Ana Lopez checked in"
    assert {item.detail for item in feed[2:]} == {
        "Ana Lopez booked Morning Yoga",
        "Unknown Member booked Unknown Class",
    }


def test_recent_members_end_to_end(gym, session_factory):
    recent = asyncio.run(get_recent_members(session_factory))

    assert [(m.id, m.plan, m.status) for m in recent] == [
        (1, "Premium", "ACTIVE"),
        (2, "Basic", "EXPIRED"),
        (3, "No Plan", "CANCELLED"),
    ]
    assert recent[0].name == "Ana Lopez"

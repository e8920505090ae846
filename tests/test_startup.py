import asyncio
import random

from conftest import NOW
from gym_api.analytics.cruds.analytics import get_reporting_analytics
from gym_api.mock_data import generate_demo_records
from gym_api.records.models import Member
from gym_api.startup import populate_demo_data


def test_demo_records_are_reproducible():
    first = generate_demo_records(NOW, rng=random.Random(7), num_members=20, progress=False)
    second = generate_demo_records(NOW, rng=random.Random(7), num_members=20, progress=False)
    assert len(first) == len(second)
    assert sum(1 for row in first if isinstance(row, Member)) == 20


def test_populate_demo_data_is_idempotent(session_factory, db):
    written = populate_demo_data(session_factory, num_members=25, now=NOW)

    assert written > 0
    assert db.query(Member).count() == 25
    assert populate_demo_data(session_factory, num_members=25, now=NOW) == 0


def test_report_over_demo_data_holds_its_invariants(session_factory):
    populate_demo_data(session_factory, num_members=60, now=NOW)

    report = asyncio.run(get_reporting_analytics(session_factory, NOW))

    split = report.member_analytics.active_vs_inactive
    assert split.active_members + split.inactive_members == 60
    for rate in (
        report.revenue_reports.payment_collection.collection_rate,
        report.member_analytics.churn_rate,
        report.operational_metrics.trainer_utilization.utilization_rate,
    ):
        assert 0 <= rate <= 100
    assert len(report.operational_metrics.class_attendance_trends) <= 8
    assert len(report.operational_metrics.trainer_utilization.top_trainers_by_sessions) <= 5
    assert sum(a.value for a in report.operational_metrics.peak_hours_analysis) > 0

import csv
import io
from datetime import datetime
from typing import Iterable

from gym_api.analytics.schemas.report import ActivityEntry, DashboardStats, ReportingAnalytics


_SUMMARY_FIELDS = (
    "total_members",
    "new_signups",
    "active_memberships",
    "expiring_memberships",
    "monthly_check_ins",
    "monthly_revenue",
)


def export_filename(generated_at: datetime) -> str:
    return f"dashboard-report-{generated_at.strftime('%Y-%m-%d')}.csv"


def build_dashboard_csv(
    generated_at: datetime,
    stats: DashboardStats,
    analytics: ReportingAnalytics,
    recent_activity: Iterable[ActivityEntry] = (),
) -> str:
    """Render the dashboard as ``section,key,value`` rows.

    One ``meta`` row, the ``summary`` figures, one ``revenue_daily`` row per day
    and one ``activity`` row per feed entry.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["section", "key", "value"])
    writer.writerow(["meta", "generated_at", generated_at.isoformat()])
    for field in _SUMMARY_FIELDS:
        writer.writerow(["summary", field, getattr(stats, field).value])
    for point in analytics.revenue_reports.daily_revenue:
        writer.writerow(["revenue_daily", point.label, point.value])
    for item in recent_activity:
        writer.writerow(
            ["activity", "" if item.id is None else item.id, f"{item.time.isoformat()} {item.action} {item.detail}"]
        )
    return buffer.getvalue()

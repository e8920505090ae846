from datetime import date, datetime
from typing import Dict, List, Literal, Optional, Union
from pydantic import BaseModel


class TimeSeriesPoint(BaseModel):
    """One labelled bucket of a currency series."""
    label: str
    value: float


class CountPoint(BaseModel):
    """One labelled bucket of a count series."""
    label: str
    value: int


class RevenueBySource(BaseModel):
    memberships: float
    products: float
    sessions: float


class PaymentCollection(BaseModel):
    invoiced_amount: float
    collected_amount: float
    collection_rate: float


class OutstandingPayments(BaseModel):
    invoice_outstanding: float
    pending_payments: float
    total_outstanding: float


class RevenueReports(BaseModel):
    daily_revenue: List[TimeSeriesPoint]
    weekly_revenue: List[TimeSeriesPoint]
    monthly_revenue: List[TimeSeriesPoint]
    revenue_by_source: RevenueBySource
    payment_collection: PaymentCollection
    outstanding_payments: OutstandingPayments


class ActiveVsInactive(BaseModel):
    active_members: int
    inactive_members: int
    previous_period_active_members: int


class AgeDistribution(BaseModel):
    under_18: int = 0
    age_18_to_25: int = 0
    age_26_to_35: int = 0
    age_36_to_45: int = 0
    age_46_plus: int = 0
    unknown: int = 0


class Demographics(BaseModel):
    gender_distribution: Dict[str, int]
    age_distribution: AgeDistribution


class PlanDistributionEntry(BaseModel):
    plan_name: str
    count: int


class MemberAnalytics(BaseModel):
    growth_trends: List[CountPoint]
    churn_rate: float
    churned_subscriptions: int
    total_subscriptions: int
    active_vs_inactive: ActiveVsInactive
    demographics: Demographics
    membership_plan_distribution: List[PlanDistributionEntry]


class ClassAttendanceEntry(BaseModel):
    class_name: str
    attendance_count: int


class TrainerLeaderboardEntry(BaseModel):
    trainer_id: int
    trainer_name: str
    sessions_count: int


class TrainerUtilization(BaseModel):
    total_trainers: int
    engaged_trainers: int
    utilization_rate: float
    top_trainers_by_sessions: List[TrainerLeaderboardEntry]


class CategoryUsage(BaseModel):
    category: str
    usage: int


class EquipmentUsagePatterns(BaseModel):
    """Bookings per class category (a usage proxy) next to the real inventory."""
    usage_by_class_category: List[CategoryUsage]
    active_equipment_by_category: Dict[str, int]


class OperationalMetrics(BaseModel):
    peak_hours_analysis: List[CountPoint]
    class_attendance_trends: List[ClassAttendanceEntry]
    trainer_utilization: TrainerUtilization
    equipment_usage_patterns: EquipmentUsagePatterns
    average_member_lifetime_value: float


class ReportingAnalytics(BaseModel):
    """Composite reporting & analytics snapshot served to the operator dashboard."""
    generated_at: datetime
    revenue_reports: RevenueReports
    member_analytics: MemberAnalytics
    operational_metrics: OperationalMetrics


class DashboardMetric(BaseModel):
    value: Union[int, float]
    change: Union[int, float]
    type: Literal["increase", "decrease"]


class DashboardStats(BaseModel):
    generated_at: datetime
    total_members: DashboardMetric
    new_signups: DashboardMetric
    active_memberships: DashboardMetric
    expiring_memberships: DashboardMetric
    monthly_check_ins: DashboardMetric
    monthly_revenue: DashboardMetric


class ScheduledClassEntry(BaseModel):
    schedule_id: int
    class_name: str
    trainer_name: str
    booked: int
    capacity: int
    start_time: datetime


class UpcomingClasses(BaseModel):
    """Booked share of class capacity over the next ``window_days`` days."""
    generated_at: datetime
    window_days: int
    total_upcoming_classes: int
    total_capacity: int
    total_bookings: int
    utilization: float
    top_classes: List[ScheduledClassEntry]


class ActivityEntry(BaseModel):
    id: Optional[int] = None
    member: str
    action: str
    detail: str
    category: str
    class_category: Optional[str] = None
    status: str
    time: datetime


class RecentMemberEntry(BaseModel):
    id: int
    name: str
    plan: str
    joined: date
    # None when the member never subscribed
    status: Optional[str] = None

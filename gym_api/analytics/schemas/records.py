"""Read-side projections of the gym records consumed by the report engine.

Each projection carries only the fields the aggregation reads. They validate
straight from SQLAlchemy rows (``from_attributes``) and every instant is
normalized to an aware UTC datetime on the way in.
"""
from datetime import date, datetime
from typing import Annotated, List, Optional
from pydantic import AfterValidator, BaseModel

from gym_api.analytics.series import as_utc


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class _Projection(BaseModel):
    class Config:
        from_attributes = True


class PaymentRecord(_Projection):
    amount: float
    status: str
    created_at: UtcDatetime


class ProductSaleRecord(_Projection):
    total: float
    status: str = "COMPLETED"
    sold_at: UtcDatetime


class TrainerSessionRecord(_Projection):
    rate: float
    duration: int = 0
    status: str
    session_date: UtcDatetime
    trainer_id: Optional[int] = None


class MemberRecord(_Projection):
    id: int
    created_at: UtcDatetime
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None


class SubscriptionRecord(_Projection):
    start_date: UtcDatetime
    end_date: UtcDatetime
    status: str
    membership_plan_id: Optional[int] = None
    member_id: Optional[int] = None


class AttendanceRecord(_Projection):
    id: Optional[int] = None
    member_id: int
    check_in_time: UtcDatetime
    type: str = "GYM_VISIT"


class ClassBookingRecord(_Projection):
    id: Optional[int] = None
    member_id: Optional[int] = None
    class_schedule_id: Optional[int] = None
    status: str
    booked_at: UtcDatetime


class ClassRecord(_Projection):
    id: int
    name: str
    category: Optional[str] = None
    max_capacity: int = 0


class TrainerRecord(_Projection):
    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class EquipmentRecord(_Projection):
    category: str
    is_active: bool = True


class InvoiceRecord(_Projection):
    total: float
    status: str
    due_date: UtcDatetime


class ClassScheduleRecord(_Projection):
    id: int
    class_id: Optional[int] = None
    trainer_id: Optional[int] = None
    start_time: Optional[UtcDatetime] = None


class MembershipPlanRecord(_Projection):
    id: int
    name: str
    price: float = 0.0


class ReportSources(BaseModel):
    """Fully materialized source pulls for one analytics report.

    Every collection defaults to empty so a missing source degrades to
    zero-valued figures.
    """
    payments: List[PaymentRecord] = []
    product_sales: List[ProductSaleRecord] = []
    trainer_sessions: List[TrainerSessionRecord] = []
    members: List[MemberRecord] = []
    subscriptions: List[SubscriptionRecord] = []
    attendance: List[AttendanceRecord] = []
    class_bookings: List[ClassBookingRecord] = []
    classes: List[ClassRecord] = []
    trainers: List[TrainerRecord] = []
    equipment: List[EquipmentRecord] = []
    invoices: List[InvoiceRecord] = []
    active_member_ids: List[int] = []
    previous_active_member_ids: List[int] = []
    # Second round, resolved from ids seen in the first round
    membership_plans: List[MembershipPlanRecord] = []
    class_schedules: List[ClassScheduleRecord] = []


class DashboardSources(BaseModel):
    """Counts and price lists behind the dashboard summary.

    ``current_month_*`` covers the calendar month up to now and ``last_month_*``
    the whole previous calendar month. Active memberships are counted at the
    instant closing each period.
    """
    total_members: int = 0
    current_month_members: int = 0
    last_month_members: int = 0
    active_memberships: int = 0
    previous_active_memberships: int = 0
    expiring_memberships: int = 0
    current_month_check_ins: int = 0
    last_month_check_ins: int = 0
    # Plan price per subscription started in the month; None when the plan is gone
    current_month_plan_prices: List[Optional[float]] = []
    last_month_plan_prices: List[Optional[float]] = []


class ClassScheduleSources(BaseModel):
    """Schedules starting in one window with the bookings made against them."""
    schedules: List[ClassScheduleRecord] = []
    bookings: List[ClassBookingRecord] = []
    classes: List[ClassRecord] = []
    trainers: List[TrainerRecord] = []


class ActivitySources(BaseModel):
    check_ins: List[AttendanceRecord] = []
    bookings: List[ClassBookingRecord] = []
    # Resolved from ids seen in the check-ins and bookings
    members: List[MemberRecord] = []
    class_schedules: List[ClassScheduleRecord] = []
    classes: List[ClassRecord] = []


class RecentMemberSources(BaseModel):
    members: List[MemberRecord] = []
    subscriptions: List[SubscriptionRecord] = []
    membership_plans: List[MembershipPlanRecord] = []

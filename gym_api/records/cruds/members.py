from datetime import datetime
from typing import Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from gym_api.analytics.schemas.records import (
    AttendanceRecord,
    MemberRecord,
    MembershipPlanRecord,
    SubscriptionRecord,
)
from gym_api.records.models.members import Attendance, Member, MembershipPlan, Subscription


def get_members(db: Session) -> List[MemberRecord]:
    rows = db.query(Member.id, Member.created_at, Member.gender, Member.date_of_birth).all()
    return [MemberRecord.model_validate(row) for row in rows]


def count_members(db: Session, start: Optional[datetime] = None, end: Optional[datetime] = None) -> int:
    """Members created in ``[start, end)``; unbounded sides are left open."""
    query = db.query(func.count(Member.id))
    if start is not None:
        query = query.filter(Member.created_at >= start)
    if end is not None:
        query = query.filter(Member.created_at < end)
    return query.scalar() or 0


def get_subscriptions(db: Session) -> List[SubscriptionRecord]:
    """Every subscription; churn is measured against the whole population."""
    rows = db.query(
        Subscription.start_date,
        Subscription.end_date,
        Subscription.status,
        Subscription.membership_plan_id,
        Subscription.member_id,
    ).all()
    return [SubscriptionRecord.model_validate(row) for row in rows]


def count_subscriptions(
    db: Session,
    status: str,
    ending_from: Optional[datetime] = None,
    ending_to: Optional[datetime] = None,
) -> int:
    query = db.query(func.count(Subscription.id)).filter(Subscription.status == status)
    if ending_from is not None:
        query = query.filter(Subscription.end_date >= ending_from)
    if ending_to is not None:
        query = query.filter(Subscription.end_date <= ending_to)
    return query.scalar() or 0


def count_active_subscriptions(db: Session, at: datetime) -> int:
    """ACTIVE subscriptions whose term covers the instant ``at``."""
    return (
        db.query(func.count(Subscription.id))
        .filter(
            Subscription.status == "ACTIVE",
            Subscription.start_date <= at,
            Subscription.end_date >= at,
        )
        .scalar()
        or 0
    )


def get_plan_prices_for_started(db: Session, start: datetime, end: datetime) -> List[Optional[float]]:
    """Plan price of each subscription started in ``[start, end)``; ``None`` for a deleted plan."""
    rows = (
        db.query(MembershipPlan.price)
        .select_from(Subscription)
        .outerjoin(MembershipPlan, MembershipPlan.id == Subscription.membership_plan_id)
        .filter(Subscription.start_date >= start, Subscription.start_date < end)
        .all()
    )
    return [row.price for row in rows]


def get_membership_plans(db: Session, plan_ids: Iterable[Optional[int]]) -> List[MembershipPlanRecord]:
    ids = sorted({plan_id for plan_id in plan_ids if plan_id is not None})
    if not ids:
        return []
    rows = (
        db.query(MembershipPlan.id, MembershipPlan.name, MembershipPlan.price)
        .filter(MembershipPlan.id.in_(ids))
        .order_by(MembershipPlan.id)
        .all()
    )
    return [MembershipPlanRecord.model_validate(row) for row in rows]


def get_attendance(db: Session, start: datetime, end: datetime) -> List[AttendanceRecord]:
    rows = (
        db.query(Attendance.member_id, Attendance.check_in_time, Attendance.type)
        .filter(Attendance.check_in_time >= start, Attendance.check_in_time <= end)
        .all()
    )
    return [AttendanceRecord.model_validate(row) for row in rows]


def get_active_member_ids(db: Session, start: datetime, end: datetime) -> List[int]:
    """Distinct members with at least one check-in in ``(start, end]``."""
    rows = (
        db.query(Attendance.member_id, func.count(Attendance.id).label("visits"))
        .filter(Attendance.check_in_time > start, Attendance.check_in_time <= end)
        .group_by(Attendance.member_id)
        .order_by(Attendance.member_id)
        .all()
    )
    return [row.member_id for row in rows]


def count_check_ins(db: Session, start: datetime, end: Optional[datetime] = None) -> int:
    query = db.query(func.count(Attendance.id)).filter(Attendance.check_in_time >= start)
    if end is not None:
        query = query.filter(Attendance.check_in_time < end)
    return query.scalar() or 0


def get_recent_check_ins(db: Session, start: datetime, end: datetime, limit: int) -> List[AttendanceRecord]:
    rows = (
        db.query(Attendance.id, Attendance.member_id, Attendance.check_in_time, Attendance.type)
        .filter(Attendance.check_in_time >= start, Attendance.check_in_time <= end)
        .order_by(Attendance.check_in_time.desc(), Attendance.id.desc())
        .limit(limit)
        .all()
    )
    return [AttendanceRecord.model_validate(row) for row in rows]


def get_recent_members(db: Session, limit: int) -> List[MemberRecord]:
    rows = (
        db.query(Member.id, Member.created_at, Member.first_name, Member.last_name)
        .order_by(Member.created_at.desc(), Member.id.desc())
        .limit(limit)
        .all()
    )
    return [MemberRecord.model_validate(row) for row in rows]


def get_members_by_ids(db: Session, member_ids: Iterable[Optional[int]]) -> List[MemberRecord]:
    ids = sorted({member_id for member_id in member_ids if member_id is not None})
    if not ids:
        return []
    rows = (
        db.query(Member.id, Member.created_at, Member.first_name, Member.last_name)
        .filter(Member.id.in_(ids))
        .order_by(Member.id)
        .all()
    )
    return [MemberRecord.model_validate(row) for row in rows]


def get_member_subscriptions(db: Session, member_ids: Iterable[int]) -> List[SubscriptionRecord]:
    ids = sorted(set(member_ids))
    if not ids:
        return []
    rows = (
        db.query(
            Subscription.start_date,
            Subscription.end_date,
            Subscription.status,
            Subscription.membership_plan_id,
            Subscription.member_id,
        )
        .filter(Subscription.member_id.in_(ids))
        .order_by(Subscription.start_date, Subscription.id)
        .all()
    )
    return [SubscriptionRecord.model_validate(row) for row in rows]

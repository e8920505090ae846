from datetime import datetime
from typing import Iterable, List, Optional, Sequence
from sqlalchemy.orm import Session

from gym_api.analytics.schemas.records import (
    ClassBookingRecord,
    ClassRecord,
    ClassScheduleRecord,
    TrainerRecord,
    TrainerSessionRecord,
)
from gym_api.records.models.classes import ClassBooking, ClassSchedule, GymClass, Trainer, TrainerSession


def get_trainer_sessions(
    db: Session,
    start: datetime,
    end: datetime,
    statuses: Sequence[str] = ("SCHEDULED", "COMPLETED"),
) -> List[TrainerSessionRecord]:
    rows = (
        db.query(
            TrainerSession.rate,
            TrainerSession.duration,
            TrainerSession.status,
            TrainerSession.session_date,
            TrainerSession.trainer_id,
        )
        .filter(
            TrainerSession.session_date >= start,
            TrainerSession.session_date <= end,
            TrainerSession.status.in_(statuses),
        )
        .all()
    )
    return [TrainerSessionRecord.model_validate(row) for row in rows]


def get_class_bookings(db: Session, start: datetime, end: datetime) -> List[ClassBookingRecord]:
    """Bookings of every status made within ``[start, end]``."""
    rows = (
        db.query(ClassBooking.class_schedule_id, ClassBooking.status, ClassBooking.booked_at)
        .filter(ClassBooking.booked_at >= start, ClassBooking.booked_at <= end)
        .all()
    )
    return [ClassBookingRecord.model_validate(row) for row in rows]


def get_classes(db: Session) -> List[ClassRecord]:
    rows = db.query(GymClass.id, GymClass.name, GymClass.category, GymClass.max_capacity).all()
    return [ClassRecord.model_validate(row) for row in rows]


def get_class_schedules(db: Session, schedule_ids: Iterable[Optional[int]]) -> List[ClassScheduleRecord]:
    ids = sorted({schedule_id for schedule_id in schedule_ids if schedule_id is not None})
    if not ids:
        return []
    rows = (
        db.query(ClassSchedule.id, ClassSchedule.class_id, ClassSchedule.trainer_id, ClassSchedule.start_time)
        .filter(ClassSchedule.id.in_(ids))
        .order_by(ClassSchedule.id)
        .all()
    )
    return [ClassScheduleRecord.model_validate(row) for row in rows]


def get_trainers(db: Session) -> List[TrainerRecord]:
    rows = db.query(Trainer.id, Trainer.first_name, Trainer.last_name).all()
    return [TrainerRecord.model_validate(row) for row in rows]


def get_schedules_starting(db: Session, start: datetime, end: datetime) -> List[ClassScheduleRecord]:
    """Active schedules starting within ``[start, end]``."""
    rows = (
        db.query(ClassSchedule.id, ClassSchedule.class_id, ClassSchedule.trainer_id, ClassSchedule.start_time)
        .filter(
            ClassSchedule.is_active.is_(True),
            ClassSchedule.start_time >= start,
            ClassSchedule.start_time <= end,
        )
        .order_by(ClassSchedule.start_time, ClassSchedule.id)
        .all()
    )
    return [ClassScheduleRecord.model_validate(row) for row in rows]


def get_bookings_for_schedules(db: Session, schedule_ids: Iterable[int]) -> List[ClassBookingRecord]:
    ids = sorted(set(schedule_ids))
    if not ids:
        return []
    rows = (
        db.query(ClassBooking.class_schedule_id, ClassBooking.status, ClassBooking.booked_at)
        .filter(ClassBooking.class_schedule_id.in_(ids))
        .all()
    )
    return [ClassBookingRecord.model_validate(row) for row in rows]


def get_recent_bookings(db: Session, start: datetime, end: datetime, limit: int) -> List[ClassBookingRecord]:
    rows = (
        db.query(
            ClassBooking.id,
            ClassBooking.member_id,
            ClassBooking.class_schedule_id,
            ClassBooking.status,
            ClassBooking.booked_at,
        )
        .filter(ClassBooking.booked_at >= start, ClassBooking.booked_at <= end)
        .order_by(ClassBooking.booked_at.desc(), ClassBooking.id.desc())
        .limit(limit)
        .all()
    )
    return [ClassBookingRecord.model_validate(row) for row in rows]

from sqlalchemy import Boolean, Column, Integer, String, Float, DateTime
from sqlalchemy.sql import func

from gym_api.database import Base


class Trainer(Base):
    __tablename__ = "trainers"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)


class GymClass(Base):
    """A class offering (Yoga, HIIT, ...). Named to avoid shadowing the keyword."""

    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=True, index=True)
    max_capacity = Column(Integer, nullable=False, default=20)


class ClassSchedule(Base):
    __tablename__ = "class_schedules"

    id = Column(Integer, primary_key=True, index=True)
    class_id = Column(Integer, nullable=True, index=True)
    trainer_id = Column(Integer, nullable=True, index=True)
    start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)


class ClassBooking(Base):
    __tablename__ = "class_bookings"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, nullable=True, index=True)
    class_schedule_id = Column(Integer, nullable=True, index=True)
    # CONFIRMED, COMPLETED, CANCELLED, WAITLISTED, NO_SHOW
    status = Column(String, nullable=False, index=True)
    booked_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)


class TrainerSession(Base):
    """One-to-one personal training session."""

    __tablename__ = "trainer_sessions"

    id = Column(Integer, primary_key=True, index=True)
    trainer_id = Column(Integer, nullable=True, index=True)
    member_id = Column(Integer, nullable=True, index=True)
    rate = Column(Float, nullable=False, default=0.0)
    duration = Column(Integer, nullable=False, default=60)
    # SCHEDULED, COMPLETED, CANCELLED
    status = Column(String, nullable=False, index=True)
    session_date = Column(DateTime(timezone=True), nullable=False, index=True)

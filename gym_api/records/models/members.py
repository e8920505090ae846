from sqlalchemy import Column, Integer, String, Float, Date, DateTime
from sqlalchemy.sql import func

from gym_api.database import Base


class Member(Base):
    __tablename__ = "members"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    gender = Column(String, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)


class MembershipPlan(Base):
    __tablename__ = "membership_plans"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    price = Column(Float, nullable=False, default=0.0)
    duration_days = Column(Integer, nullable=False, default=30)


class Subscription(Base):
    """A member's enrolment in a membership plan."""

    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    # Plain columns rather than enforced FKs: plans and members may be deleted
    # independently and the analytics side tolerates dangling references.
    member_id = Column(Integer, nullable=True, index=True)
    membership_plan_id = Column(Integer, nullable=True, index=True)
    # ACTIVE, CANCELLED, EXPIRED, SUSPENDED
    status = Column(String, nullable=False, index=True)
    start_date = Column(DateTime(timezone=True), nullable=False, index=True)
    end_date = Column(DateTime(timezone=True), nullable=False, index=True)


class Attendance(Base):
    __tablename__ = "attendance"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, nullable=False, index=True)
    check_in_time = Column(DateTime(timezone=True), nullable=False, index=True)
    # GYM_VISIT or CLASS_ATTENDANCE
    type = Column(String, nullable=False, default="GYM_VISIT")

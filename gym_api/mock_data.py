"""Synthetic gym dataset for local demos and dashboard development.

Rows are generated relative to ``now`` so every lookback window of the report
has data, with explicit ids so cross-record references resolve before flush.
"""
import random
from datetime import date, datetime, timedelta
from typing import List

from tqdm import tqdm

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


PLANS = [
    ("Basic", 29.99, 30),
    ("Premium", 59.99, 30),
    ("Student", 19.99, 30),
    ("Annual", 499.0, 365),
]

CLASSES = [
    ("Morning Yoga", "YOGA", 20),
    ("Power Vinyasa", "YOGA", 18),
    ("HIIT Blast", "HIIT", 25),
    ("Tabata", "HIIT", 20),
    ("Spin Express", "CARDIO", 30),
    ("Boxing Basics", "COMBAT", 16),
    ("Barbell Club", "STRENGTH", 12),
    ("Pilates Core", "PILATES", 15),
    ("Zumba", "DANCE", 35),
    ("Mobility Flow", None, 20),
]

TRAINERS = [
    ("Alex", "Morgan"),
    ("Sam", "Rivera"),
    ("Jordan", "Lee"),
    ("Taylor", "Nguyen"),
    ("Casey", "Okafor"),
    ("Riley", "Schmidt"),
]

EQUIPMENT = [
    ("Treadmill", "CARDIO"),
    ("Rowing Machine", "CARDIO"),
    ("Spin Bike", "CARDIO"),
    ("Squat Rack", "STRENGTH"),
    ("Bench Press", "STRENGTH"),
    ("Dumbbell Set", "STRENGTH"),
    ("Yoga Mats", "YOGA"),
    ("Heavy Bag", "COMBAT"),
]

GENDERS = ["Male", "Female", "Non-binary", None, " "]

# Gym check-ins cluster before and after office hours
CHECK_IN_HOURS = [6, 6, 7, 7, 7, 8, 12, 12, 17, 17, 18, 18, 18, 19, 19, 20]


def _random_instant(rng: random.Random, start: datetime, end: datetime) -> datetime:
    span = max((end - start).total_seconds(), 1.0)
    return start + timedelta(seconds=rng.uniform(0, span))


def _at_hour(rng: random.Random, day: datetime, hours: List[int]) -> datetime:
    return day.replace(hour=rng.choice(hours), minute=rng.randrange(60), second=0, microsecond=0)


def generate_demo_records(
    now: datetime,
    rng: random.Random,
    num_members: int = 200,
    history_days: int = 400,
    progress: bool = True,
) -> list:
    """Build ORM rows for a small gym covering the last ``history_days`` days."""
    history_start = now - timedelta(days=history_days)
    rows: list = []

    plans = [
        MembershipPlan(id=i, name=name, price=price, duration_days=days)
        for i, (name, price, days) in enumerate(PLANS, start=1)
    ]
    trainers = [
        Trainer(id=i, first_name=first, last_name=last) for i, (first, last) in enumerate(TRAINERS, start=1)
    ]
    classes = [
        GymClass(id=i, name=name, category=category, max_capacity=capacity)
        for i, (name, category, capacity) in enumerate(CLASSES, start=1)
    ]
    rows.extend(plans + trainers + classes)
    rows.extend(
        Equipment(name=name, category=category, is_active=rng.random() > 0.1)
        for name, category in EQUIPMENT
        for _ in range(rng.randint(1, 4))
    )

    schedules = []
    # Past classes plus two weeks of timetable ahead
    for schedule_id in range(1, 141):
        schedules.append(
            ClassSchedule(
                id=schedule_id,
                class_id=rng.choice(classes).id,
                trainer_id=rng.choice(trainers).id,
                start_time=_at_hour(
                    rng, _random_instant(rng, now - timedelta(days=120), now + timedelta(days=14)), CHECK_IN_HOURS
                ),
                is_active=rng.random() > 0.05,
            )
        )
    rows.extend(schedules)

    for member_id in tqdm(range(1, num_members + 1), total=num_members, disable=not progress):
        created_at = _random_instant(rng, history_start, now)
        age_years = rng.randint(15, 70)
        dob = None if rng.random() < 0.1 else date(now.year - age_years, rng.randint(1, 12), rng.randint(1, 28))
        rows.append(
            Member(
                id=member_id,
                first_name=f"Member{member_id}",
                last_name="Demo",
                gender=rng.choice(GENDERS),
                date_of_birth=dob,
                created_at=created_at,
            )
        )

        plan = rng.choice(plans)
        start = created_at
        while start < now:
            end = start + timedelta(days=plan.duration_days)
            if end >= now:
                status = "ACTIVE" if rng.random() > 0.1 else "CANCELLED"
            else:
                status = rng.choice(["EXPIRED", "EXPIRED", "CANCELLED"])
            rows.append(
                Subscription(
                    member_id=member_id,
                    membership_plan_id=plan.id,
                    status=status,
                    start_date=start,
                    end_date=end,
                )
            )
            rows.append(
                Payment(
                    member_id=member_id,
                    amount=plan.price,
                    status=rng.choices(["PAID", "PENDING", "FAILED"], weights=[85, 10, 5])[0],
                    created_at=start,
                )
            )
            rows.append(
                Invoice(
                    member_id=member_id,
                    total=plan.price,
                    status=rng.choices(["PAID", "SENT", "OVERDUE", "DRAFT"], weights=[75, 10, 10, 5])[0],
                    due_date=start + timedelta(days=14),
                    created_at=start,
                )
            )
            if status == "CANCELLED" or rng.random() < 0.25:
                break
            start = end

        for _ in range(rng.randint(0, 40)):
            visit = _at_hour(rng, _random_instant(rng, max(created_at, now - timedelta(days=120)), now), CHECK_IN_HOURS)
            if visit > now:
                continue
            rows.append(
                Attendance(
                    member_id=member_id,
                    check_in_time=visit,
                    type=rng.choice(["GYM_VISIT", "GYM_VISIT", "CLASS_ATTENDANCE"]),
                )
            )

        for _ in range(rng.randint(0, 6)):
            schedule = rng.choice(schedules)
            rows.append(
                ClassBooking(
                    member_id=member_id,
                    # A few bookings point at schedules that have since been deleted
                    class_schedule_id=schedule.id if rng.random() > 0.03 else 10_000 + schedule.id,
                    status=rng.choices(["CONFIRMED", "COMPLETED", "CANCELLED", "NO_SHOW"], weights=[40, 40, 15, 5])[0],
                    booked_at=_random_instant(rng, now - timedelta(days=100), now),
                )
            )

    for _ in range(rng.randint(150, 300)):
        session_date = _random_instant(rng, history_start, now)
        rows.append(
            TrainerSession(
                trainer_id=rng.choice(trainers).id,
                member_id=rng.randint(1, num_members),
                rate=rng.choice([40.0, 55.0, 70.0]),
                duration=rng.choice([30, 45, 60]),
                status=rng.choices(["COMPLETED", "SCHEDULED", "CANCELLED"], weights=[70, 20, 10])[0],
                session_date=session_date,
            )
        )

    for _ in range(rng.randint(300, 600)):
        rows.append(
            ProductSale(
                total=round(rng.uniform(2.5, 80.0), 2),
                status=rng.choices(["COMPLETED", "REFUNDED"], weights=[95, 5])[0],
                sold_at=_random_instant(rng, history_start, now),
            )
        )

    return rows

from .billing import Invoice, Payment, ProductSale
from .classes import ClassBooking, ClassSchedule, GymClass, Trainer, TrainerSession
from .equipment import Equipment
from .members import Attendance, Member, MembershipPlan, Subscription

__all__ = [
	"Attendance",
	"ClassBooking",
	"ClassSchedule",
	"Equipment",
	"GymClass",
	"Invoice",
	"Member",
	"MembershipPlan",
	"Payment",
	"ProductSale",
	"Subscription",
	"Trainer",
	"TrainerSession",
]

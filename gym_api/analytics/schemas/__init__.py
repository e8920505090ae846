from .records import (
	ActivitySources,
	AttendanceRecord,
	ClassBookingRecord,
	ClassRecord,
	ClassScheduleRecord,
	ClassScheduleSources,
	DashboardSources,
	EquipmentRecord,
	InvoiceRecord,
	MemberRecord,
	MembershipPlanRecord,
	PaymentRecord,
	ProductSaleRecord,
	RecentMemberSources,
	ReportSources,
	SubscriptionRecord,
	TrainerRecord,
	TrainerSessionRecord,
)
from .report import (
	ActivityEntry,
	DashboardStats,
	RecentMemberEntry,
	ReportingAnalytics,
	ScheduledClassEntry,
	TimeSeriesPoint,
	UpcomingClasses,
)

__all__ = [
	"ActivityEntry",
	"ActivitySources",
	"AttendanceRecord",
	"ClassBookingRecord",
	"ClassRecord",
	"ClassScheduleRecord",
	"ClassScheduleSources",
	"DashboardSources",
	"DashboardStats",
	"EquipmentRecord",
	"InvoiceRecord",
	"MemberRecord",
	"MembershipPlanRecord",
	"PaymentRecord",
	"ProductSaleRecord",
	"RecentMemberEntry",
	"RecentMemberSources",
	"ReportSources",
	"ReportingAnalytics",
	"ScheduledClassEntry",
	"SubscriptionRecord",
	"TimeSeriesPoint",
	"TrainerRecord",
	"TrainerSessionRecord",
	"UpcomingClasses",
]

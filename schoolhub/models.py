"""Data models for SchoolHub entities."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Union

from .const import STATUS_NO_CLASS, TREND_STABLE


@dataclass
class StudentAddress:
	"""Postal address of a student."""
	street: Optional[str] = None
	city: Optional[str] = None
	state: Optional[str] = None
	zip_code: Optional[str] = None


@dataclass
class Student:
	"""A student as listed by the admin screens."""
	id: str
	first_name: str
	last_name: str
	email: str
	student_id: str
	age: Optional[int] = None
	gender: Optional[str] = None  # "male", "female", "other"
	phone: Optional[str] = None
	address: Optional[StudentAddress] = None
	enrolled_at: Optional[datetime] = None
	is_active: bool = True
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None

	@property
	def full_name(self) -> str:
		return f"{self.first_name} {self.last_name}".strip()


@dataclass
class CreateStudentData:
	first_name: str
	last_name: str
	email: str
	student_id: str
	age: Optional[int] = None
	gender: Optional[str] = None
	phone: Optional[str] = None
	address: Optional[StudentAddress] = None
	enrolled_at: Optional[datetime] = None
	is_active: bool = True


@dataclass
class ClassReference:
	"""A class embedded in a teacher payload."""
	id: str
	class_name: str = ""
	grade: str = ""
	room_no: str = ""
	subjects: List[str] = field(default_factory=list)


@dataclass
class Teacher:
	id: str
	first_name: str
	last_name: str
	email: str
	employee_id: str
	phone: Optional[str] = None
	department: Optional[str] = None
	qualification: Optional[str] = None
	specialization: Optional[str] = None
	subjects: List[str] = field(default_factory=list)
	status: str = "active"  # "active", "inactive", "on-leave"
	employment_type: str = "full-time"  # "full-time", "part-time", "contract"
	experience: Optional[int] = None  # years
	joining_date: Optional[datetime] = None
	is_active: bool = True
	classes: List[Union[str, ClassReference]] = field(default_factory=list)
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None

	@property
	def full_name(self) -> str:
		return f"{self.first_name} {self.last_name}".strip()


@dataclass
class CreateTeacherData:
	first_name: str
	last_name: str
	email: str
	employee_id: str
	phone: Optional[str] = None
	department: Optional[str] = None
	qualification: Optional[str] = None
	specialization: Optional[str] = None
	subjects: List[str] = field(default_factory=list)
	status: str = "active"
	employment_type: str = "full-time"
	experience: Optional[int] = None
	joining_date: Optional[datetime] = None
	is_active: bool = True


@dataclass
class SchoolClass:
	"""A class (group of students) with its form teacher."""
	id: str
	name: str
	grade: str
	section: str
	teacher_id: Optional[str] = None
	teacher_name: Optional[str] = None
	student_count: int = 0
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None


@dataclass
class CreateClassData:
	name: str
	grade: str
	section: str
	teacher_id: Optional[str] = None


@dataclass
class LectureTeacher:
	first_name: str = ""
	last_name: str = ""
	email: str = ""
	teacher_id: str = ""

	@property
	def full_name(self) -> str:
		return f"{self.first_name} {self.last_name}".strip()


@dataclass
class LectureSchedule:
	day_of_week: str = ""
	start_time: str = ""  # HH:MM
	end_time: str = ""
	room: Optional[str] = None


@dataclass
class LectureMaterial:
	name: str
	type: str  # "document", "presentation", "video", "link"
	url: str


@dataclass
class Lecture:
	id: str
	title: str
	subject: str
	teacher: LectureTeacher
	schedule: LectureSchedule
	duration: int  # minutes
	description: Optional[str] = None
	type: str = "lecture"
	materials: List[LectureMaterial] = field(default_factory=list)
	is_active: bool = True
	class_id: Optional[str] = None
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None

	def __str__(self) -> str:
		if self.schedule.start_time and self.schedule.end_time:
			return f"{self.title} ({self.schedule.day_of_week} {self.schedule.start_time}-{self.schedule.end_time})"
		return self.title


@dataclass
class CreateLectureData:
	title: str
	subject: str
	teacher: LectureTeacher
	schedule: LectureSchedule
	duration: int
	description: Optional[str] = None
	type: str = "lecture"
	materials: List[LectureMaterial] = field(default_factory=list)
	is_active: bool = True
	class_id: Optional[str] = None


@dataclass
class AttendanceRecord:
	"""One attendance mark for a student on a given day."""
	id: str
	date: Optional[datetime]  # None when the server sent no usable date
	class_id: str
	status: str  # "present", "absent", "late", "excused"
	class_name: str = ""
	remarks: str = ""
	submitted_by: Optional[str] = None
	submitted_at: Optional[datetime] = None

	def __str__(self) -> str:
		return f"{self.class_name or self.class_id} [{self.status}] - {self.date.strftime('%Y-%m-%d') if self.date else 'no date'}"


@dataclass
class AttendanceSummary:
	total_days: int = 0
	present_days: int = 0
	absent_days: int = 0
	late_days: int = 0
	excused_days: int = 0
	attendance_rate: float = 0.0


@dataclass
class Pagination:
	page: int = 1
	limit: int = 0
	total_pages: int = 0
	total_records: int = 0


@dataclass
class AttendanceRecordsPage:
	records: List[AttendanceRecord]
	summary: AttendanceSummary
	pagination: Pagination


@dataclass
class OverallAttendance(AttendanceSummary):
	trend: str = TREND_STABLE


@dataclass
class MonthlyBreakdown(AttendanceSummary):
	month: str = ""  # YYYY-MM


@dataclass
class ClassWiseBreakdown(AttendanceSummary):
	class_id: str = ""
	class_name: str = ""


@dataclass
class AttendanceStatistics:
	overall: OverallAttendance
	monthly_breakdown: List[MonthlyBreakdown] = field(default_factory=list)
	class_wise_breakdown: List[ClassWiseBreakdown] = field(default_factory=list)


@dataclass
class CalendarDay:
	date: Optional[datetime]
	status: str = STATUS_NO_CLASS  # attendance status, "holiday" or "no_class"
	class_id: Optional[str] = None
	class_name: Optional[str] = None
	remarks: str = ""

	@property
	def has_class(self) -> bool:
		return self.class_id is not None


@dataclass
class AttendanceCalendar:
	year: int
	month: int
	days: List[CalendarDay] = field(default_factory=list)


@dataclass
class AttendanceFilters:
	"""Query filters for the student and teacher attendance lists."""
	start_date: Optional[str] = None  # YYYY-MM-DD
	end_date: Optional[str] = None
	class_id: Optional[str] = None
	status: Optional[str] = None
	lecture_id: Optional[str] = None  # teacher list only
	page: Optional[int] = None
	limit: Optional[int] = None


@dataclass
class RecentAttendanceRecord:
	date: Optional[datetime]
	status: str
	class_name: str = ""


@dataclass
class ChildSummary(AttendanceSummary):
	trend: str = TREND_STABLE


@dataclass
class ChildAttendanceSummary:
	"""Parent view of one child's attendance."""
	child_id: str
	child_name: str
	summary: ChildSummary
	class_id: str = ""
	class_name: str = ""
	recent_records: List[RecentAttendanceRecord] = field(default_factory=list)


@dataclass
class OverallChildrenSummary:
	total_days: int = 0
	present_days: int = 0
	absent_days: int = 0
	late_days: int = 0
	excused_days: int = 0
	average_attendance_rate: float = 0.0


@dataclass
class ChildrenAttendanceOverview:
	children: List[ChildAttendanceSummary]
	overall_summary: OverallChildrenSummary


@dataclass
class ChildComparisonData:
	child_id: str
	child_name: str
	attendance_rate: float = 0.0
	total_days: int = 0
	present_days: int = 0
	absent_days: int = 0
	late_days: int = 0
	excused_days: int = 0


@dataclass
class ComparisonAverage:
	attendance_rate: float = 0.0
	total_days: float = 0.0
	present_days: float = 0.0


@dataclass
class AttendanceComparison:
	children: List[ChildComparisonData]
	average: ComparisonAverage


@dataclass
class StudentAttendance:
	"""One student's mark inside a teacher-submitted class session."""
	student_id: str
	status: str
	student_name: str = ""
	remarks: str = ""
	student_id_number: str = ""  # school roll number, when the server sends it
	marked_at: Optional[datetime] = None


@dataclass
class ClassAttendanceRecord:
	"""A class session as marked by a teacher."""
	id: str
	class_id: str
	date: Optional[datetime]
	students: List[StudentAttendance] = field(default_factory=list)
	class_name: Optional[str] = None
	lecture_id: Optional[str] = None
	lecture_title: Optional[str] = None
	type: str = "date"  # "date" or "lecture"
	submitted_by: Optional[str] = None
	submitted_at: Optional[datetime] = None
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None
	is_locked: bool = False
	version: Optional[int] = None


@dataclass
class MarkAttendanceData:
	class_id: str
	date: str  # YYYY-MM-DD
	students: List[StudentAttendance] = field(default_factory=list)
	lecture_id: Optional[str] = None


@dataclass
class StudentAttendanceStats(AttendanceSummary):
	student_id: str = ""
	student_name: str = ""
	trend: str = TREND_STABLE


@dataclass
class DailyBreakdownItem:
	date: str  # YYYY-MM-DD
	present: int = 0
	absent: int = 0
	late: int = 0
	excused: int = 0


@dataclass
class ClassAttendanceStatistics:
	"""Per-student and per-day figures for one class over a period."""
	class_id: str
	class_name: str = ""
	start_date: Optional[str] = None
	end_date: Optional[str] = None
	overall: AttendanceSummary = field(default_factory=AttendanceSummary)
	student_stats: List[StudentAttendanceStats] = field(default_factory=list)
	daily_breakdown: List[DailyBreakdownItem] = field(default_factory=list)


@dataclass
class StudentAttendanceHistory:
	student_id: str
	student_name: str = ""
	records: List[AttendanceRecord] = field(default_factory=list)
	summary: AttendanceSummary = field(default_factory=AttendanceSummary)


@dataclass
class TeacherAttendancePage:
	"""Class sessions visible to the signed-in teacher, one page at a time."""
	records: List[ClassAttendanceRecord]
	count: int = 0
	page: int = 1
	total_pages: int = 0


@dataclass
class RecentActivityItem:
	class_id: str
	class_name: str = ""
	date: str = ""
	students_count: int = 0
	marked_at: str = ""


@dataclass
class UpcomingClassItem:
	class_id: str
	class_name: str = ""
	scheduled_time: str = ""
	has_attendance: bool = False


@dataclass
class TeacherAttendanceDashboard:
	total_classes: int = 0
	pending_attendance: int = 0
	today_attendance: int = 0
	recent_activity: List[RecentActivityItem] = field(default_factory=list)
	upcoming_classes: List[UpcomingClassItem] = field(default_factory=list)


@dataclass
class QuickStats:
	total_students: int = 0
	total_teachers: int = 0
	total_classes: int = 0
	total_lectures: int = 0
	total_enrolled: int = 0


@dataclass
class CountBreakdown:
	"""A ``{_id, count}`` aggregation bucket (gender, department, grade...)."""
	key: str
	count: int = 0


@dataclass
class RecentStudent:
	id: str
	first_name: str = ""
	last_name: str = ""
	email: str = ""
	student_id: str = ""
	grade: str = ""
	created_at: Optional[datetime] = None


@dataclass
class RecentClass:
	id: str
	class_name: str = ""
	grade: str = ""
	room_no: str = ""
	capacity: int = 0
	enrolled: int = 0
	created_at: Optional[datetime] = None


@dataclass
class Enrollment:
	total_capacity: int = 0
	total_enrolled: int = 0
	available_slots: int = 0


@dataclass
class UpcomingLecture:
	id: str
	title: str = ""
	subject: str = ""
	teacher: LectureTeacher = field(default_factory=LectureTeacher)
	schedule: LectureSchedule = field(default_factory=LectureSchedule)
	duration: int = 0
	type: str = "lecture"


@dataclass
class DashboardOverview:
	total_students: int = 0
	total_teachers: int = 0
	total_classes: int = 0
	total_lectures: int = 0


@dataclass
class StudentStats:
	total: int = 0
	by_gender: List[CountBreakdown] = field(default_factory=list)
	recent: List[RecentStudent] = field(default_factory=list)


@dataclass
class TeacherStats:
	total: int = 0
	by_department: List[CountBreakdown] = field(default_factory=list)


@dataclass
class ClassStats:
	total: int = 0
	by_grade: List[CountBreakdown] = field(default_factory=list)
	average_capacity: float = 0.0
	average_enrolled: float = 0.0
	enrollment: Enrollment = field(default_factory=Enrollment)
	recent: List[RecentClass] = field(default_factory=list)


@dataclass
class LectureStats:
	total: int = 0
	by_type: List[CountBreakdown] = field(default_factory=list)
	by_subject: List[CountBreakdown] = field(default_factory=list)
	upcoming: List[UpcomingLecture] = field(default_factory=list)


@dataclass
class DashboardStats:
	overview: DashboardOverview
	students: StudentStats
	teachers: TeacherStats
	classes: ClassStats
	lectures: LectureStats

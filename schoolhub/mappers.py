"""Mappers between API payloads (DTOs) and domain models.

Entity endpoints speak snake_case, attendance and dashboard endpoints speak
camelCase. Every lookup goes through ``_get`` which accepts either spelling
and treats ``None`` as missing, so each ``*_from_dto`` function is total: a
missing optional value becomes an explicit default, never ``None`` in a
field that has a non-optional type.
"""

import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from .calculators import rate_from_counts
from .const import STATUS_NO_CLASS, TREND_STABLE
from .models import (
	AttendanceCalendar,
	AttendanceComparison,
	AttendanceFilters,
	AttendanceRecord,
	AttendanceRecordsPage,
	AttendanceStatistics,
	AttendanceSummary,
	CalendarDay,
	ChildAttendanceSummary,
	ChildComparisonData,
	ChildrenAttendanceOverview,
	ChildSummary,
	ClassAttendanceRecord,
	ClassAttendanceStatistics,
	ClassReference,
	ClassStats,
	ClassWiseBreakdown,
	ComparisonAverage,
	CountBreakdown,
	CreateClassData,
	CreateLectureData,
	CreateStudentData,
	CreateTeacherData,
	DailyBreakdownItem,
	DashboardOverview,
	DashboardStats,
	Enrollment,
	Lecture,
	LectureMaterial,
	LectureSchedule,
	LectureStats,
	LectureTeacher,
	MarkAttendanceData,
	MonthlyBreakdown,
	OverallAttendance,
	OverallChildrenSummary,
	Pagination,
	QuickStats,
	RecentActivityItem,
	RecentAttendanceRecord,
	RecentClass,
	RecentStudent,
	SchoolClass,
	Student,
	StudentAddress,
	StudentAttendance,
	StudentAttendanceHistory,
	StudentAttendanceStats,
	StudentStats,
	Teacher,
	TeacherAttendanceDashboard,
	TeacherAttendancePage,
	TeacherStats,
	UpcomingClassItem,
	UpcomingLecture,
)

_LOGGER = logging.getLogger(__name__)

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

# Fallback formats when the value is not ISO-8601.
_DATE_FORMATS = [
	"%Y-%m-%d %H:%M:%S",
	"%d/%m/%Y",
	"%d.%m.%Y",
]

Dto = Dict[str, Any]


def _to_snake(name: str) -> str:
	return _CAMEL_RE.sub("_", name).lower()


def _to_camel(name: str) -> str:
	head, *rest = name.split("_")
	return head + "".join(part.title() for part in rest)


def _get(dto: Optional[Dto], name: str, default: Any = None) -> Any:
	"""Read ``name`` in either snake_case or camelCase; ``None`` counts as missing."""
	if not isinstance(dto, dict):
		return default
	for key in (name, _to_snake(name), _to_camel(name)):
		value = dto.get(key)
		if value is not None:
			return value
	return default


def _get_id(dto: Optional[Dto]) -> str:
	return str(_get(dto, "id", _get(dto, "_id", "")))


def _str(dto: Optional[Dto], name: str, default: str = "") -> str:
	value = _get(dto, name, default)
	return str(value)


def _opt_str(dto: Optional[Dto], name: str) -> Optional[str]:
	value = _get(dto, name)
	return None if value is None or value == "" else str(value)


def _int(dto: Optional[Dto], name: str, default: int = 0) -> int:
	value = _get(dto, name, default)
	try:
		return int(value)
	except (TypeError, ValueError):
		_LOGGER.warning(f"Expected an integer for {name}, got {value!r}")
		return default


def _opt_int(dto: Optional[Dto], name: str) -> Optional[int]:
	value = _get(dto, name)
	if value is None or value == "":
		return None
	try:
		return int(value)
	except (TypeError, ValueError):
		_LOGGER.warning(f"Expected an integer for {name}, got {value!r}")
		return None


def _float(dto: Optional[Dto], name: str, default: float = 0.0) -> float:
	value = _get(dto, name, default)
	try:
		return float(value)
	except (TypeError, ValueError):
		_LOGGER.warning(f"Expected a number for {name}, got {value!r}")
		return default


def _list(dto: Optional[Dto], name: str) -> list:
	value = _get(dto, name, [])
	return list(value) if isinstance(value, (list, tuple)) else []


def parse_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
	"""Parse an ISO-8601 (or common fallback) string; empty gives ``None``."""
	if value is None or value == "":
		return None
	if isinstance(value, datetime):
		return value
	text = str(value).strip()
	if text.endswith("Z"):
		text = text[:-1] + "+00:00"
	try:
		return datetime.fromisoformat(text)
	except ValueError:
		pass
	for fmt in _DATE_FORMATS:
		try:
			return datetime.strptime(text, fmt)
		except ValueError:
			continue
	_LOGGER.warning(f"Failed to parse date: {value}")
	return None


def _record_date(dto: Dto, name: str = "date") -> Optional[datetime]:
	"""Date of a record; missing or unparseable dates decode to ``None``."""
	value = _get(dto, name)
	if value is None:
		_LOGGER.warning(f"Record {_get_id(dto) or '(no id)'} has no {name}")
		return None
	return parse_datetime(value)


def format_datetime(value: Optional[datetime]) -> Optional[str]:
	return value.isoformat() if value is not None else None


def _compact(payload: Dto) -> Dto:
	"""Drop keys whose value is ``None`` so optional fields are omitted."""
	return {key: value for key, value in payload.items() if value is not None}


# Students

def student_address_from_dto(dto: Optional[Dto]) -> Optional[StudentAddress]:
	if not isinstance(dto, dict):
		return None
	return StudentAddress(
		street=_opt_str(dto, "street"),
		city=_opt_str(dto, "city"),
		state=_opt_str(dto, "state"),
		zip_code=_opt_str(dto, "zip_code"),
	)


def student_address_to_dto(address: Optional[StudentAddress]) -> Optional[Dto]:
	if address is None:
		return None
	return _compact({
		"street": address.street,
		"city": address.city,
		"state": address.state,
		"zip_code": address.zip_code,
	})


def student_from_dto(dto: Dto) -> Student:
	return Student(
		id=_get_id(dto),
		first_name=_str(dto, "first_name"),
		last_name=_str(dto, "last_name"),
		email=_str(dto, "email"),
		student_id=_str(dto, "student_id"),
		age=_opt_int(dto, "age"),
		gender=_opt_str(dto, "gender"),
		phone=_opt_str(dto, "phone"),
		address=student_address_from_dto(_get(dto, "address")),
		enrolled_at=parse_datetime(_get(dto, "enrolled_at")),
		is_active=bool(_get(dto, "is_active", True)),
		created_at=parse_datetime(_get(dto, "created_at")),
		updated_at=parse_datetime(_get(dto, "updated_at")),
	)


def student_to_dto(data: Union[CreateStudentData, Student]) -> Dto:
	"""Create/update payload; ``id`` and server timestamps are never sent."""
	return _compact({
		"first_name": data.first_name,
		"last_name": data.last_name,
		"email": data.email,
		"student_id": data.student_id,
		"age": data.age,
		"gender": data.gender,
		"phone": data.phone,
		"address": student_address_to_dto(data.address),
		"enrolled_at": format_datetime(data.enrolled_at),
		"is_active": data.is_active,
	})


# Teachers

def class_reference_from_dto(dto: Union[str, Dto]) -> Union[str, ClassReference]:
	"""Teacher ``classes`` hold either bare ids or embedded class objects."""
	if not isinstance(dto, dict):
		return str(dto)
	return ClassReference(
		id=_get_id(dto),
		class_name=_str(dto, "class_name", _str(dto, "name")),
		grade=_str(dto, "grade"),
		room_no=_str(dto, "room_no"),
		subjects=[str(s) for s in _list(dto, "subjects")],
	)


def teacher_from_dto(dto: Dto) -> Teacher:
	return Teacher(
		id=_get_id(dto),
		first_name=_str(dto, "first_name"),
		last_name=_str(dto, "last_name"),
		email=_str(dto, "email"),
		employee_id=_str(dto, "employee_id"),
		phone=_opt_str(dto, "phone"),
		department=_opt_str(dto, "department"),
		qualification=_opt_str(dto, "qualification"),
		specialization=_opt_str(dto, "specialization"),
		subjects=[str(s) for s in _list(dto, "subjects")],
		status=_str(dto, "status", "active"),
		employment_type=_str(dto, "employment_type", "full-time"),
		experience=_opt_int(dto, "experience"),
		joining_date=parse_datetime(_get(dto, "joining_date")),
		is_active=bool(_get(dto, "is_active", True)),
		classes=[class_reference_from_dto(c) for c in _list(dto, "classes")],
		created_at=parse_datetime(_get(dto, "created_at")),
		updated_at=parse_datetime(_get(dto, "updated_at")),
	)


def teacher_to_dto(data: Union[CreateTeacherData, Teacher]) -> Dto:
	"""Create/update payload; class assignments are managed server side."""
	return _compact({
		"first_name": data.first_name,
		"last_name": data.last_name,
		"email": data.email,
		"employee_id": data.employee_id,
		"phone": data.phone,
		"department": data.department,
		"qualification": data.qualification,
		"specialization": data.specialization,
		"subjects": list(data.subjects),
		"status": data.status,
		"employment_type": data.employment_type,
		"experience": data.experience,
		"joining_date": format_datetime(data.joining_date),
		"is_active": data.is_active,
	})


# Classes

def class_from_dto(dto: Dto) -> SchoolClass:
	return SchoolClass(
		id=_get_id(dto),
		name=_str(dto, "name", _str(dto, "class_name")),
		grade=_str(dto, "grade"),
		section=_str(dto, "section"),
		teacher_id=_opt_str(dto, "teacher_id"),
		teacher_name=_opt_str(dto, "teacher_name"),
		student_count=_int(dto, "student_count"),
		created_at=parse_datetime(_get(dto, "created_at")),
		updated_at=parse_datetime(_get(dto, "updated_at")),
	)


def class_to_dto(data: Union[CreateClassData, SchoolClass]) -> Dto:
	return _compact({
		"name": data.name,
		"grade": data.grade,
		"section": data.section,
		"teacher_id": data.teacher_id,
	})


# Lectures

def lecture_teacher_from_dto(dto: Optional[Dto]) -> LectureTeacher:
	"""A ``null`` teacher decodes to an empty teacher, not ``None``."""
	return LectureTeacher(
		first_name=_str(dto, "first_name"),
		last_name=_str(dto, "last_name"),
		email=_str(dto, "email"),
		teacher_id=_str(dto, "teacher_id"),
	)


def lecture_teacher_to_dto(teacher: LectureTeacher) -> Dto:
	return {
		"first_name": teacher.first_name,
		"last_name": teacher.last_name,
		"email": teacher.email,
		"teacher_id": teacher.teacher_id,
	}


def lecture_schedule_from_dto(dto: Optional[Dto]) -> LectureSchedule:
	"""A ``null`` schedule decodes to an empty schedule, not ``None``."""
	return LectureSchedule(
		day_of_week=_str(dto, "day_of_week"),
		start_time=_str(dto, "start_time"),
		end_time=_str(dto, "end_time"),
		room=_opt_str(dto, "room"),
	)


def lecture_schedule_to_dto(schedule: LectureSchedule) -> Dto:
	return _compact({
		"day_of_week": schedule.day_of_week,
		"start_time": schedule.start_time,
		"end_time": schedule.end_time,
		"room": schedule.room,
	})


def lecture_material_from_dto(dto: Dto) -> LectureMaterial:
	return LectureMaterial(
		name=_str(dto, "name"),
		type=_str(dto, "type", "document"),
		url=_str(dto, "url"),
	)


def lecture_from_dto(dto: Dto) -> Lecture:
	return Lecture(
		id=_get_id(dto),
		title=_str(dto, "title"),
		subject=_str(dto, "subject"),
		teacher=lecture_teacher_from_dto(_get(dto, "teacher")),
		schedule=lecture_schedule_from_dto(_get(dto, "schedule")),
		duration=_int(dto, "duration"),
		description=_opt_str(dto, "description"),
		type=_str(dto, "type", "lecture"),
		materials=[lecture_material_from_dto(m) for m in _list(dto, "materials") if isinstance(m, dict)],
		is_active=bool(_get(dto, "is_active", True)),
		class_id=_opt_str(dto, "class_id"),
		created_at=parse_datetime(_get(dto, "created_at")),
		updated_at=parse_datetime(_get(dto, "updated_at")),
	)


def lecture_to_dto(data: Union[CreateLectureData, Lecture]) -> Dto:
	return _compact({
		"title": data.title,
		"description": data.description,
		"subject": data.subject,
		"teacher": lecture_teacher_to_dto(data.teacher),
		"schedule": lecture_schedule_to_dto(data.schedule),
		"duration": data.duration,
		"type": data.type,
		"materials": [
			{"name": m.name, "type": m.type, "url": m.url} for m in data.materials
		],
		"is_active": data.is_active,
		"class_id": data.class_id,
	})


# Student attendance

def attendance_record_from_dto(dto: Dto) -> AttendanceRecord:
	return AttendanceRecord(
		id=_get_id(dto),
		date=_record_date(dto),
		class_id=_str(dto, "classId"),
		class_name=_str(dto, "className"),
		status=_str(dto, "status"),
		remarks=_str(dto, "remarks"),
		submitted_by=_opt_str(dto, "submittedBy"),
		submitted_at=parse_datetime(_get(dto, "submittedAt")),
	)


def _summary_fields(dto: Optional[Dto]) -> Dict[str, Any]:
	total = _int(dto, "totalDays")
	present = _int(dto, "presentDays")
	excused = _int(dto, "excusedDays")
	rate = _get(dto, "attendanceRate")
	return {
		"total_days": total,
		"present_days": present,
		"absent_days": _int(dto, "absentDays"),
		"late_days": _int(dto, "lateDays"),
		"excused_days": excused,
		# The server figure is kept as sent; recomputed only when absent.
		"attendance_rate": _float(dto, "attendanceRate") if rate is not None else rate_from_counts(present, excused, total),
	}


def attendance_summary_from_dto(dto: Optional[Dto]) -> AttendanceSummary:
	return AttendanceSummary(**_summary_fields(dto))


def pagination_from_dto(dto: Optional[Dto]) -> Pagination:
	return Pagination(
		page=_int(dto, "page", 1),
		limit=_int(dto, "limit"),
		total_pages=_int(dto, "totalPages"),
		total_records=_int(dto, "totalRecords"),
	)


def attendance_records_page_from_dto(data: Dto) -> AttendanceRecordsPage:
	"""Decode ``{records, summary, pagination}`` (student and parent views)."""
	return AttendanceRecordsPage(
		records=[attendance_record_from_dto(r) for r in _list(data, "records")],
		summary=attendance_summary_from_dto(_get(data, "summary")),
		pagination=pagination_from_dto(_get(data, "pagination")),
	)


def monthly_breakdown_from_dto(dto: Dto) -> MonthlyBreakdown:
	return MonthlyBreakdown(month=_str(dto, "month"), **_summary_fields(dto))


def class_wise_breakdown_from_dto(dto: Dto) -> ClassWiseBreakdown:
	return ClassWiseBreakdown(
		class_id=_str(dto, "classId"),
		class_name=_str(dto, "className"),
		**_summary_fields(dto),
	)


def attendance_statistics_from_dto(data: Dto) -> AttendanceStatistics:
	overall = _get(data, "overall", {})
	return AttendanceStatistics(
		overall=OverallAttendance(trend=_str(overall, "trend", TREND_STABLE), **_summary_fields(overall)),
		monthly_breakdown=[monthly_breakdown_from_dto(m) for m in _list(data, "monthlyBreakdown")],
		class_wise_breakdown=[class_wise_breakdown_from_dto(c) for c in _list(data, "classWiseBreakdown")],
	)


def calendar_day_from_dto(dto: Dto) -> CalendarDay:
	return CalendarDay(
		date=_record_date(dto),
		status=_str(dto, "status", STATUS_NO_CLASS),
		class_id=_opt_str(dto, "classId"),
		class_name=_opt_str(dto, "className"),
		remarks=_str(dto, "remarks"),
	)


def attendance_calendar_from_dto(data: Dto) -> AttendanceCalendar:
	return AttendanceCalendar(
		year=_int(data, "year"),
		month=_int(data, "month"),
		days=[calendar_day_from_dto(d) for d in _list(data, "days")],
	)


def attendance_filters_to_params(filters: Optional[AttendanceFilters]) -> Dict[str, str]:
	"""Query string parameters; empty filters are left out."""
	if filters is None:
		return {}
	params = {
		"startDate": filters.start_date,
		"endDate": filters.end_date,
		"classId": filters.class_id,
		"status": filters.status,
		"lectureId": filters.lecture_id,
		"page": filters.page,
		"limit": filters.limit,
	}
	return {key: str(value) for key, value in params.items() if value not in (None, "")}


# Parent attendance

def recent_attendance_record_from_dto(dto: Dto) -> RecentAttendanceRecord:
	return RecentAttendanceRecord(
		date=_record_date(dto),
		status=_str(dto, "status"),
		class_name=_str(dto, "className"),
	)


def child_attendance_summary_from_dto(dto: Dto) -> ChildAttendanceSummary:
	summary = _get(dto, "summary", {})
	return ChildAttendanceSummary(
		child_id=_str(dto, "childId"),
		child_name=_str(dto, "childName"),
		class_id=_str(dto, "classId"),
		class_name=_str(dto, "className"),
		summary=ChildSummary(trend=_str(summary, "trend", TREND_STABLE), **_summary_fields(summary)),
		recent_records=[recent_attendance_record_from_dto(r) for r in _list(dto, "recentRecords")],
	)


def children_overview_from_dto(data: Dto) -> ChildrenAttendanceOverview:
	overall = _get(data, "overallSummary", {})
	return ChildrenAttendanceOverview(
		children=[child_attendance_summary_from_dto(c) for c in _list(data, "children")],
		overall_summary=OverallChildrenSummary(
			total_days=_int(overall, "totalDays"),
			present_days=_int(overall, "presentDays"),
			absent_days=_int(overall, "absentDays"),
			late_days=_int(overall, "lateDays"),
			excused_days=_int(overall, "excusedDays"),
			average_attendance_rate=_float(overall, "averageAttendanceRate"),
		),
	)


def child_comparison_from_dto(dto: Dto) -> ChildComparisonData:
	return ChildComparisonData(
		child_id=_str(dto, "childId"),
		child_name=_str(dto, "childName"),
		attendance_rate=_float(dto, "attendanceRate"),
		total_days=_int(dto, "totalDays"),
		present_days=_int(dto, "presentDays"),
		absent_days=_int(dto, "absentDays"),
		late_days=_int(dto, "lateDays"),
		excused_days=_int(dto, "excusedDays"),
	)


def attendance_comparison_from_dto(data: Dto) -> AttendanceComparison:
	average = _get(data, "average", {})
	return AttendanceComparison(
		children=[child_comparison_from_dto(c) for c in _list(data, "children")],
		average=ComparisonAverage(
			attendance_rate=_float(average, "attendanceRate"),
			total_days=_float(average, "totalDays"),
			present_days=_float(average, "presentDays"),
		),
	)


# Class attendance sessions

def student_attendance_from_dto(dto: Dto) -> StudentAttendance:
	return StudentAttendance(
		student_id=_str(dto, "studentId"),
		student_name=_str(dto, "studentName"),
		status=_str(dto, "status"),
		remarks=_str(dto, "remarks"),
		student_id_number=_str(dto, "studentIdNumber"),
		marked_at=parse_datetime(_get(dto, "markedAt")),
	)


def class_attendance_record_from_dto(dto: Dto) -> ClassAttendanceRecord:
	return ClassAttendanceRecord(
		id=_get_id(dto),
		class_id=_str(dto, "classId"),
		class_name=_opt_str(dto, "className"),
		date=_record_date(dto),
		lecture_id=_opt_str(dto, "lectureId"),
		lecture_title=_opt_str(dto, "lectureTitle"),
		type=_str(dto, "type", "date"),
		students=[student_attendance_from_dto(s) for s in _list(dto, "students") if isinstance(s, dict)],
		submitted_by=_opt_str(dto, "submittedBy"),
		submitted_at=parse_datetime(_get(dto, "submittedAt")),
		created_at=parse_datetime(_get(dto, "createdAt")),
		updated_at=parse_datetime(_get(dto, "updatedAt")),
		is_locked=bool(_get(dto, "isLocked", False)),
		version=_opt_int(dto, "version"),
	)


def mark_attendance_to_dto(data: MarkAttendanceData) -> Dto:
	return _compact({
		"class_id": data.class_id,
		"date": data.date,
		"lecture_id": data.lecture_id,
		"students": [
			_compact({
				"student_id": s.student_id,
				"status": s.status,
				"remarks": s.remarks or None,
			})
			for s in data.students
		],
	})


# Teacher attendance

def teacher_attendance_page_from_dto(data: Union[Dto, list]) -> TeacherAttendancePage:
	"""Decode the teacher session list, either a bare list or ``{count, page, totalPages, data}``."""
	if isinstance(data, list):
		records = [class_attendance_record_from_dto(r) for r in data if isinstance(r, dict)]
		return TeacherAttendancePage(records=records, count=len(records), page=1, total_pages=1 if records else 0)
	items = _list(data, "data") or _list(data, "records")
	records = [class_attendance_record_from_dto(r) for r in items if isinstance(r, dict)]
	return TeacherAttendancePage(
		records=records,
		count=_int(data, "count", len(records)),
		page=_int(data, "page", 1),
		total_pages=_int(data, "totalPages"),
	)


def recent_activity_from_dto(dto: Dto) -> RecentActivityItem:
	return RecentActivityItem(
		class_id=_str(dto, "classId"),
		class_name=_str(dto, "className"),
		date=_str(dto, "date"),
		students_count=_int(dto, "studentsCount"),
		marked_at=_str(dto, "markedAt"),
	)


def upcoming_class_from_dto(dto: Dto) -> UpcomingClassItem:
	return UpcomingClassItem(
		class_id=_str(dto, "classId"),
		class_name=_str(dto, "className"),
		scheduled_time=_str(dto, "scheduledTime"),
		has_attendance=bool(_get(dto, "hasAttendance", False)),
	)


def teacher_dashboard_from_dto(data: Dto) -> TeacherAttendanceDashboard:
	return TeacherAttendanceDashboard(
		total_classes=_int(data, "totalClasses"),
		pending_attendance=_int(data, "pendingAttendance"),
		today_attendance=_int(data, "todayAttendance"),
		recent_activity=[recent_activity_from_dto(a) for a in _list(data, "recentActivity")],
		upcoming_classes=[upcoming_class_from_dto(c) for c in _list(data, "upcomingClasses")],
	)


def student_attendance_stats_from_dto(dto: Dto) -> StudentAttendanceStats:
	return StudentAttendanceStats(
		student_id=_str(dto, "studentId"),
		student_name=_str(dto, "studentName"),
		trend=_str(dto, "trend", TREND_STABLE),
		**_summary_fields(dto),
	)


def daily_breakdown_from_dto(dto: Dto) -> DailyBreakdownItem:
	return DailyBreakdownItem(
		date=_str(dto, "date"),
		present=_int(dto, "present"),
		absent=_int(dto, "absent"),
		late=_int(dto, "late"),
		excused=_int(dto, "excused"),
	)


def class_attendance_statistics_from_dto(data: Dto) -> ClassAttendanceStatistics:
	period = _get(data, "period", {})
	return ClassAttendanceStatistics(
		class_id=_str(data, "classId"),
		class_name=_str(data, "className"),
		start_date=_opt_str(period, "startDate"),
		end_date=_opt_str(period, "endDate"),
		overall=attendance_summary_from_dto(_get(data, "overall")),
		student_stats=[student_attendance_stats_from_dto(s) for s in _list(data, "studentStats")],
		daily_breakdown=[daily_breakdown_from_dto(d) for d in _list(data, "dailyBreakdown")],
	)


def student_attendance_history_from_dto(data: Dto) -> StudentAttendanceHistory:
	return StudentAttendanceHistory(
		student_id=_str(data, "studentId"),
		student_name=_str(data, "studentName"),
		records=[attendance_record_from_dto(r) for r in _list(data, "records")],
		summary=attendance_summary_from_dto(_get(data, "summary")),
	)


# Dashboard

def quick_stats_from_dto(dto: Dto) -> QuickStats:
	return QuickStats(
		total_students=_int(dto, "totalStudents"),
		total_teachers=_int(dto, "totalTeachers"),
		total_classes=_int(dto, "totalClasses"),
		total_lectures=_int(dto, "totalLectures"),
		total_enrolled=_int(dto, "totalEnrolled"),
	)


def count_breakdown_from_dto(dto: Dto) -> CountBreakdown:
	return CountBreakdown(key=_str(dto, "_id", _str(dto, "key")), count=_int(dto, "count"))


def _breakdowns(dto: Optional[Dto], name: str) -> List[CountBreakdown]:
	return [count_breakdown_from_dto(b) for b in _list(dto, name) if isinstance(b, dict)]


def recent_student_from_dto(dto: Dto) -> RecentStudent:
	return RecentStudent(
		id=_get_id(dto),
		first_name=_str(dto, "firstName"),
		last_name=_str(dto, "lastName"),
		email=_str(dto, "email"),
		student_id=_str(dto, "studentId"),
		grade=_str(dto, "grade"),
		created_at=parse_datetime(_get(dto, "createdAt")),
	)


def recent_class_from_dto(dto: Dto) -> RecentClass:
	return RecentClass(
		id=_get_id(dto),
		class_name=_str(dto, "className"),
		grade=_str(dto, "grade"),
		room_no=_str(dto, "roomNo"),
		capacity=_int(dto, "capacity"),
		enrolled=_int(dto, "enrolled"),
		created_at=parse_datetime(_get(dto, "createdAt")),
	)


def upcoming_lecture_from_dto(dto: Dto) -> UpcomingLecture:
	return UpcomingLecture(
		id=_get_id(dto),
		title=_str(dto, "title"),
		subject=_str(dto, "subject"),
		teacher=lecture_teacher_from_dto(_get(dto, "teacher")),
		schedule=lecture_schedule_from_dto(_get(dto, "schedule")),
		duration=_int(dto, "duration"),
		type=_str(dto, "type", "lecture"),
	)


def dashboard_stats_from_dto(data: Dto) -> DashboardStats:
	overview = _get(data, "overview", {})
	students = _get(data, "students", {})
	teachers = _get(data, "teachers", {})
	classes = _get(data, "classes", {})
	lectures = _get(data, "lectures", {})
	enrollment = _get(classes, "enrollment", {})
	return DashboardStats(
		overview=DashboardOverview(
			total_students=_int(overview, "totalStudents"),
			total_teachers=_int(overview, "totalTeachers"),
			total_classes=_int(overview, "totalClasses"),
			total_lectures=_int(overview, "totalLectures"),
		),
		students=StudentStats(
			total=_int(students, "total"),
			by_gender=_breakdowns(students, "byGender"),
			recent=[recent_student_from_dto(s) for s in _list(students, "recent") if isinstance(s, dict)],
		),
		teachers=TeacherStats(
			total=_int(teachers, "total"),
			by_department=_breakdowns(teachers, "byDepartment"),
		),
		classes=ClassStats(
			total=_int(classes, "total"),
			by_grade=_breakdowns(classes, "byGrade"),
			# Averages arrive as preformatted strings such as "32.50".
			average_capacity=_float(classes, "averageCapacity"),
			average_enrolled=_float(classes, "averageEnrolled"),
			enrollment=Enrollment(
				total_capacity=_int(enrollment, "totalCapacity"),
				total_enrolled=_int(enrollment, "totalEnrolled"),
				available_slots=_int(enrollment, "availableSlots"),
			),
			recent=[recent_class_from_dto(c) for c in _list(classes, "recent") if isinstance(c, dict)],
		),
		lectures=LectureStats(
			total=_int(lectures, "total"),
			by_type=_breakdowns(lectures, "byType"),
			by_subject=_breakdowns(lectures, "bySubject"),
			upcoming=[upcoming_lecture_from_dto(item) for item in _list(lectures, "upcoming") if isinstance(item, dict)],
		),
	)

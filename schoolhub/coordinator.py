"""Cached access to SchoolHub data."""

import logging
from datetime import timedelta
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Union

import aiohttp

from .aggregators import (
	build_attendance_statistics,
	build_calendar,
	calculate_student_trend,
	find_lowest_attendance,
	sort_by_date,
)
from .client import SchoolHubClient
from .config import SchoolHubSettings
from .const import DEFAULT_LIST_STALE_TIME, DEFAULT_STATS_STALE_TIME
from .export import export_to_csv
from .formatters import format_date_iso, month_range
from .models import (
	AttendanceCalendar,
	AttendanceComparison,
	AttendanceFilters,
	AttendanceRecordsPage,
	AttendanceStatistics,
	ChildAttendanceSummary,
	ChildrenAttendanceOverview,
	ClassAttendanceRecord,
	ClassAttendanceStatistics,
	CreateClassData,
	CreateLectureData,
	CreateStudentData,
	CreateTeacherData,
	DashboardStats,
	Lecture,
	MarkAttendanceData,
	QuickStats,
	SchoolClass,
	Student,
	StudentAttendance,
	StudentAttendanceHistory,
	Teacher,
	TeacherAttendanceDashboard,
	TeacherAttendancePage,
)
from .query import QueryClient, QueryKey
from .query_keys import (
	QueryKeys,
	attendance_keys,
	class_attendance_keys,
	class_keys,
	dashboard_keys,
	lecture_keys,
	parent_attendance_keys,
	student_keys,
	teacher_attendance_keys,
	teacher_keys,
)

_LOGGER = logging.getLogger(__name__)


class SchoolDataCoordinator:
	"""Reads through the query cache and invalidates it on writes."""

	def __init__(
		self,
		client: SchoolHubClient,
		query_client: Optional[QueryClient] = None,
		list_stale_time: timedelta = DEFAULT_LIST_STALE_TIME,
		stats_stale_time: timedelta = DEFAULT_STATS_STALE_TIME,
	) -> None:
		"""Initialise coordinator.

		Args:
			client: API client used for every fetch and mutation.
			query_client: Cache to use; a new one is created if omitted.
			list_stale_time: Freshness of lists, records and child history.
			stats_stale_time: Freshness of statistics, calendars and comparisons.
		"""
		self.client = client
		self.query_client = query_client or QueryClient(default_stale_time=list_stale_time)
		self.list_stale_time = list_stale_time
		self.stats_stale_time = stats_stale_time

	@classmethod
	def from_settings(cls, settings: SchoolHubSettings, session: Optional[aiohttp.ClientSession] = None) -> "SchoolDataCoordinator":
		return cls(
			SchoolHubClient.from_settings(settings, session=session),
			list_stale_time=settings.list_stale_time,
			stats_stale_time=settings.stats_stale_time,
		)

	async def __aenter__(self):
		await self.client.__aenter__()
		return self

	async def __aexit__(self, exc_type, exc_val, exc_tb):
		await self.client.__aexit__(exc_type, exc_val, exc_tb)

	async def _query(self, key: QueryKey, fetcher: Callable[[], Awaitable[Any]], stale_time: Optional[timedelta] = None) -> Any:
		if stale_time is None:
			stale_time = self.list_stale_time
		return await self.query_client.fetch_query(key, fetcher, stale_time)

	async def _mutate(
		self,
		mutation_fn: Callable[..., Awaitable[Any]],
		*args: Any,
		invalidate: Iterable[QueryKey],
		remove: Iterable[QueryKey] = (),
	) -> Any:
		remove = list(remove)

		def forget(_result: Any) -> None:
			for prefix in remove:
				self.query_client.remove_queries(prefix)

		return await self.query_client.run_mutation(
			mutation_fn, *args,
			invalidate=list(invalidate),
			on_success=forget if remove else None,
		)

	def _entity_invalidations(self, keys: QueryKeys, item_id: Optional[str] = None) -> List[QueryKey]:
		# Entity counts feed the dashboard
		prefixes = [keys.all(), dashboard_keys.all()]
		if item_id is not None:
			prefixes.append(keys.detail(item_id))
		return prefixes

	def _attendance_invalidations(self) -> List[QueryKey]:
		return [
			class_attendance_keys.all(),
			teacher_attendance_keys.all(),
			attendance_keys.all(),
			parent_attendance_keys.all(),
		]

	async def refresh(self, prefix: QueryKey = ()) -> Dict[QueryKey, Any]:
		"""Refetch every cached query under ``prefix``."""
		results = await self.query_client.refetch_queries(prefix)
		_LOGGER.debug(f"Refreshed {len(results)} queries under {tuple(prefix)}")
		return results

	# Students

	async def get_students(self, filters: Optional[Dict[str, Any]] = None) -> List[Student]:
		return await self._query(student_keys.list(filters), lambda: self.client.get_students(filters))

	async def get_student(self, student_id: str) -> Student:
		return await self._query(student_keys.detail(student_id), lambda: self.client.get_student(student_id))

	async def create_student(self, data: CreateStudentData) -> Student:
		return await self._mutate(self.client.create_student, data, invalidate=self._entity_invalidations(student_keys))

	async def update_student(self, student_id: str, data: Union[CreateStudentData, Dict[str, Any]]) -> Student:
		return await self._mutate(
			self.client.update_student, student_id, data,
			invalidate=self._entity_invalidations(student_keys, student_id),
		)

	async def delete_student(self, student_id: str) -> None:
		await self._mutate(
			self.client.delete_student, student_id,
			invalidate=self._entity_invalidations(student_keys),
			remove=[student_keys.detail(student_id)],
		)

	# Teachers

	async def get_teachers(self, filters: Optional[Dict[str, Any]] = None) -> List[Teacher]:
		return await self._query(teacher_keys.list(filters), lambda: self.client.get_teachers(filters))

	async def get_teacher(self, teacher_id: str) -> Teacher:
		return await self._query(teacher_keys.detail(teacher_id), lambda: self.client.get_teacher(teacher_id))

	async def create_teacher(self, data: CreateTeacherData) -> Teacher:
		return await self._mutate(self.client.create_teacher, data, invalidate=self._entity_invalidations(teacher_keys))

	async def update_teacher(self, teacher_id: str, data: Union[CreateTeacherData, Dict[str, Any]]) -> Teacher:
		return await self._mutate(
			self.client.update_teacher, teacher_id, data,
			invalidate=self._entity_invalidations(teacher_keys, teacher_id),
		)

	async def delete_teacher(self, teacher_id: str) -> None:
		await self._mutate(
			self.client.delete_teacher, teacher_id,
			invalidate=self._entity_invalidations(teacher_keys),
			remove=[teacher_keys.detail(teacher_id)],
		)

	# Classes

	async def get_classes(self, filters: Optional[Dict[str, Any]] = None) -> List[SchoolClass]:
		return await self._query(class_keys.list(filters), lambda: self.client.get_classes(filters))

	async def get_class(self, class_id: str) -> SchoolClass:
		return await self._query(class_keys.detail(class_id), lambda: self.client.get_class(class_id))

	async def create_class(self, data: CreateClassData) -> SchoolClass:
		return await self._mutate(self.client.create_class, data, invalidate=self._entity_invalidations(class_keys))

	async def update_class(self, class_id: str, data: Union[CreateClassData, Dict[str, Any]]) -> SchoolClass:
		return await self._mutate(
			self.client.update_class, class_id, data,
			invalidate=self._entity_invalidations(class_keys, class_id),
		)

	async def delete_class(self, class_id: str) -> None:
		await self._mutate(
			self.client.delete_class, class_id,
			invalidate=self._entity_invalidations(class_keys),
			remove=[class_keys.detail(class_id)],
		)

	# Lectures

	async def get_lectures(self, filters: Optional[Dict[str, Any]] = None) -> List[Lecture]:
		return await self._query(lecture_keys.list(filters), lambda: self.client.get_lectures(filters))

	async def get_lecture(self, lecture_id: str) -> Lecture:
		return await self._query(lecture_keys.detail(lecture_id), lambda: self.client.get_lecture(lecture_id))

	async def create_lecture(self, data: CreateLectureData) -> Lecture:
		return await self._mutate(self.client.create_lecture, data, invalidate=self._entity_invalidations(lecture_keys))

	async def update_lecture(self, lecture_id: str, data: Union[CreateLectureData, Dict[str, Any]]) -> Lecture:
		return await self._mutate(
			self.client.update_lecture, lecture_id, data,
			invalidate=self._entity_invalidations(lecture_keys, lecture_id),
		)

	async def delete_lecture(self, lecture_id: str) -> None:
		await self._mutate(
			self.client.delete_lecture, lecture_id,
			invalidate=self._entity_invalidations(lecture_keys),
			remove=[lecture_keys.detail(lecture_id)],
		)

	# Student attendance

	async def get_attendance_records(self, filters: Optional[AttendanceFilters] = None) -> AttendanceRecordsPage:
		return await self._query(
			attendance_keys.list(filters),
			lambda: self.client.get_attendance_records(filters),
		)

	async def get_attendance_stats(
		self,
		start_date: Optional[str] = None,
		end_date: Optional[str] = None,
		period: Optional[str] = None,
	) -> AttendanceStatistics:
		key = attendance_keys.stats({"start_date": start_date, "end_date": end_date, "period": period})
		return await self._query(
			key,
			lambda: self.client.get_attendance_stats(start_date, end_date, period),
			self.stats_stale_time,
		)

	async def get_attendance_calendar(self, year: int, month: int, class_id: Optional[str] = None) -> AttendanceCalendar:
		return await self._query(
			attendance_keys.calendar(year, month, class_id),
			lambda: self.client.get_attendance_calendar(year, month, class_id),
			self.stats_stale_time,
		)

	async def summarize_attendance(self, filters: Optional[AttendanceFilters] = None) -> AttendanceStatistics:
		"""Statistics computed locally from the cached record list."""
		page = await self.get_attendance_records(filters)
		return build_attendance_statistics(page.records)

	async def build_month_calendar(self, year: int, month: int, holidays: Iterable[Any] = ()) -> AttendanceCalendar:
		"""Calendar built locally from the records of one month."""
		start, end = month_range(year, month)
		filters = AttendanceFilters(start_date=format_date_iso(start), end_date=format_date_iso(end))
		page = await self.get_attendance_records(filters)
		return build_calendar(year, month, page.records, holidays)

	# Parent attendance

	async def get_children_overview(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> ChildrenAttendanceOverview:
		return await self._query(
			parent_attendance_keys.overview({"start_date": start_date, "end_date": end_date}),
			lambda: self.client.get_children_overview(start_date, end_date),
		)

	async def get_child_attendance(
		self,
		child_id: str,
		start_date: Optional[str] = None,
		end_date: Optional[str] = None,
		page: Optional[int] = None,
		limit: Optional[int] = None,
	) -> AttendanceRecordsPage:
		filters = {"start_date": start_date, "end_date": end_date, "page": page, "limit": limit}
		return await self._query(
			parent_attendance_keys.child(child_id, filters),
			lambda: self.client.get_child_attendance(child_id, start_date, end_date, page, limit),
		)

	async def compare_children(
		self,
		child_ids: Iterable[str],
		start_date: Optional[str] = None,
		end_date: Optional[str] = None,
	) -> AttendanceComparison:
		child_ids = list(child_ids)
		return await self._query(
			parent_attendance_keys.compare(child_ids, {"start_date": start_date, "end_date": end_date}),
			lambda: self.client.compare_children_attendance(child_ids, start_date, end_date),
			self.stats_stale_time,
		)

	async def get_lowest_attendance_child(
		self,
		start_date: Optional[str] = None,
		end_date: Optional[str] = None,
	) -> Optional[ChildAttendanceSummary]:
		overview = await self.get_children_overview(start_date, end_date)
		return find_lowest_attendance(overview.children)

	# Class attendance sessions

	async def get_class_attendance(
		self,
		class_id: str,
		start_date: Optional[str] = None,
		end_date: Optional[str] = None,
	) -> List[ClassAttendanceRecord]:
		return await self._query(
			class_attendance_keys.class_list(class_id, {"start_date": start_date, "end_date": end_date}),
			lambda: self.client.get_class_attendance(class_id, start_date, end_date),
		)

	async def mark_attendance(self, data: MarkAttendanceData) -> ClassAttendanceRecord:
		return await self._mutate(
			self.client.mark_attendance, data,
			invalidate=self._attendance_invalidations(),
		)

	async def update_class_attendance(self, class_id: str, record_id: str, students: List[StudentAttendance]) -> ClassAttendanceRecord:
		return await self._mutate(
			self.client.update_class_attendance, class_id, record_id, students,
			invalidate=self._attendance_invalidations(),
		)

	async def delete_class_attendance(self, class_id: str, record_id: str) -> None:
		await self._mutate(
			self.client.delete_class_attendance, class_id, record_id,
			invalidate=self._attendance_invalidations(),
		)

	async def get_class_attendance_by_date(self, class_id: str, day: str) -> Optional[ClassAttendanceRecord]:
		return await self._query(
			class_attendance_keys.by_date(class_id, day),
			lambda: self.client.get_class_attendance_by_date(class_id, day),
		)

	async def get_class_attendance_by_lecture(self, class_id: str, lecture_id: str) -> List[ClassAttendanceRecord]:
		return await self._query(
			class_attendance_keys.by_lecture(class_id, lecture_id),
			lambda: self.client.get_class_attendance_by_lecture(class_id, lecture_id),
		)

	async def get_class_statistics(
		self,
		class_id: str,
		start_date: Optional[str] = None,
		end_date: Optional[str] = None,
	) -> ClassAttendanceStatistics:
		return await self._query(
			class_attendance_keys.statistics(class_id, {"start_date": start_date, "end_date": end_date}),
			lambda: self.client.get_class_statistics(class_id, start_date, end_date),
			self.stats_stale_time,
		)

	async def get_student_attendance_history(
		self,
		student_id: str,
		class_id: Optional[str] = None,
		start_date: Optional[str] = None,
		end_date: Optional[str] = None,
		page: Optional[int] = None,
		limit: Optional[int] = None,
	) -> StudentAttendanceHistory:
		filters = {"class_id": class_id, "start_date": start_date, "end_date": end_date, "page": page, "limit": limit}
		return await self._query(
			class_attendance_keys.student_history(student_id, filters),
			lambda: self.client.get_student_attendance_history(student_id, class_id, start_date, end_date, page, limit),
		)

	async def export_class_attendance(
		self,
		class_id: str,
		start_date: Optional[str] = None,
		end_date: Optional[str] = None,
	) -> str:
		"""CSV of a class's sessions, oldest first."""
		sessions = await self.get_class_attendance(class_id, start_date, end_date)
		return export_to_csv(sort_by_date(sessions, ascending=True))

	# Teacher attendance

	async def get_teacher_dashboard(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> TeacherAttendanceDashboard:
		return await self._query(
			teacher_attendance_keys.dashboard({"start_date": start_date, "end_date": end_date}),
			lambda: self.client.get_teacher_dashboard(start_date, end_date),
			self.stats_stale_time,
		)

	async def get_teacher_attendance(self, filters: Optional[AttendanceFilters] = None) -> TeacherAttendancePage:
		return await self._query(
			teacher_attendance_keys.list(filters),
			lambda: self.client.get_teacher_attendance(filters),
		)

	async def get_teacher_class_statistics(
		self,
		class_id: str,
		start_date: Optional[str] = None,
		end_date: Optional[str] = None,
	) -> ClassAttendanceStatistics:
		return await self._query(
			teacher_attendance_keys.statistics(class_id, {"start_date": start_date, "end_date": end_date}),
			lambda: self.client.get_teacher_class_statistics(class_id, start_date, end_date),
			self.stats_stale_time,
		)

	async def get_student_trends(
		self,
		class_id: str,
		recent_rates: Optional[Dict[str, float]] = None,
		start_date: Optional[str] = None,
		end_date: Optional[str] = None,
	) -> Dict[str, str]:
		"""Trend per student id for one class.

		A student with an entry in ``recent_rates`` is compared against
		that rate; the others keep the server's trend.
		"""
		stats = await self.get_teacher_class_statistics(class_id, start_date, end_date)
		recent_rates = recent_rates or {}
		return {
			s.student_id: calculate_student_trend(s, recent_rates.get(s.student_id))
			for s in stats.student_stats
		}

	# Dashboard

	async def get_quick_stats(self) -> QuickStats:
		return await self._query(dashboard_keys.quick(), self.client.get_quick_stats, self.stats_stale_time)

	async def get_dashboard_stats(self) -> DashboardStats:
		return await self._query(dashboard_keys.stats(), self.client.get_dashboard_stats, self.stats_stale_time)

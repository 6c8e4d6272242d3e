"""Async client for the SchoolHub REST API."""

import asyncio
import json
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar, Union

import aiohttp

from .config import SchoolHubSettings
from .const import (
	DEFAULT_BASE_URL,
	DEFAULT_TIMEOUT_SECONDS,
	ENDPOINT_CLASS_ATTENDANCE,
	ENDPOINT_CLASS_STATISTICS,
	ENDPOINT_CLASSES,
	ENDPOINT_DASHBOARD_QUICK,
	ENDPOINT_DASHBOARD_STATS,
	ENDPOINT_LECTURES,
	ENDPOINT_PARENT_ATTENDANCE,
	ENDPOINT_STUDENT_ATTENDANCE,
	ENDPOINT_STUDENT_HISTORY,
	ENDPOINT_STUDENTS,
	ENDPOINT_TEACHER_ATTENDANCE,
	ENDPOINT_TEACHERS,
	STATS_PERIODS,
)
from .exceptions import (
	SchoolHubAPIError,
	SchoolHubAuthError,
	SchoolHubConnectionError,
	SchoolHubDataError,
	SchoolHubValidationError,
)
from .mappers import (
	attendance_calendar_from_dto,
	attendance_comparison_from_dto,
	attendance_filters_to_params,
	attendance_records_page_from_dto,
	attendance_statistics_from_dto,
	children_overview_from_dto,
	class_attendance_record_from_dto,
	class_attendance_statistics_from_dto,
	class_from_dto,
	class_to_dto,
	dashboard_stats_from_dto,
	lecture_from_dto,
	lecture_to_dto,
	mark_attendance_to_dto,
	quick_stats_from_dto,
	student_attendance_history_from_dto,
	student_from_dto,
	student_to_dto,
	teacher_attendance_page_from_dto,
	teacher_dashboard_from_dto,
	teacher_from_dto,
	teacher_to_dto,
)
from .models import (
	AttendanceCalendar,
	AttendanceComparison,
	AttendanceFilters,
	AttendanceRecordsPage,
	AttendanceStatistics,
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
from .validation import (
	validate_attendance_update,
	validate_class,
	validate_lecture,
	validate_mark_attendance,
	validate_student,
	validate_teacher,
)

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")
Payload = Dict[str, Any]


def _clean_params(params: Dict[str, Any]) -> Dict[str, str]:
	return {key: str(value) for key, value in params.items() if value not in (None, "")}


def _items(data: Any, key: str) -> List[Any]:
	"""List payloads arrive either bare or wrapped as ``{key: [...]}``."""
	if isinstance(data, list):
		return data
	if isinstance(data, dict) and isinstance(data.get(key), list):
		return data[key]
	raise SchoolHubDataError(f"Expected a list of {key}, got {type(data).__name__}")


class SchoolHubClient:
	"""Client for interacting with the SchoolHub API."""

	def __init__(
		self,
		base_url: str = DEFAULT_BASE_URL,
		token: Optional[str] = None,
		session: Optional[aiohttp.ClientSession] = None,
		timeout: float = DEFAULT_TIMEOUT_SECONDS,
	):
		"""Initialise SchoolHub client.

		Args:
			base_url: API root, e.g. ``http://localhost:5000/api``.
			token: Bearer token sent with every request, if any.
			session: Optional aiohttp session. If None, one is created on
				entering the context manager (or on first request).
			timeout: Total request timeout in seconds.
		"""
		self.base_url = base_url.rstrip("/")
		self.token = token
		self._session = session
		self._own_session = session is None
		self._timeout = aiohttp.ClientTimeout(total=timeout)

	@classmethod
	def from_settings(cls, settings: SchoolHubSettings, session: Optional[aiohttp.ClientSession] = None) -> "SchoolHubClient":
		return cls(
			base_url=settings.base_url,
			token=settings.token,
			session=session,
			timeout=settings.timeout_seconds,
		)

	async def __aenter__(self):
		"""Async context manager entry."""
		self._ensure_session()
		return self

	async def __aexit__(self, exc_type, exc_val, exc_tb):
		"""Async context manager exit."""
		await self.close()

	async def close(self) -> None:
		if self._own_session and self._session:
			await self._session.close()
			self._session = None

	def _ensure_session(self) -> aiohttp.ClientSession:
		if self._session is None:
			self._session = aiohttp.ClientSession(timeout=self._timeout)
			self._own_session = True
		return self._session

	def _headers(self) -> Dict[str, str]:
		headers = {
			"Accept": "application/json",
			"Content-Type": "application/json",
		}
		if self.token:
			headers["Authorization"] = f"Bearer {self.token}"
		return headers

	async def _request(
		self,
		method: str,
		path: str,
		params: Optional[Dict[str, Any]] = None,
		payload: Optional[Payload] = None,
		allow_empty: bool = False,
	) -> Any:
		"""Send a request and return the ``data`` member of the envelope.

		Args:
			method: HTTP method.
			path: Path below ``base_url``.
			params: Query parameters; empty values are dropped.
			payload: JSON body.
			allow_empty: Accept a 2xx response without ``data`` (DELETE).

		Returns:
			The unwrapped ``data`` payload.
		"""
		session = self._ensure_session()
		url = f"{self.base_url}{path}"
		query = _clean_params(params or {})
		_LOGGER.debug(f"{method} {url} params={query}")

		try:
			async with session.request(
				method,
				url,
				params=query or None,
				json=payload,
				headers=self._headers(),
				timeout=self._timeout,
			) as resp:
				body = await self._read_body(resp)
				return self._unwrap(resp.status, body, f"{method} {path}", allow_empty)
		except aiohttp.ClientError as e:
			_LOGGER.warning(f"Connection error for {method} {path}: {e}")
			raise SchoolHubConnectionError(f"Connection error: {e}") from e
		except asyncio.TimeoutError as e:
			_LOGGER.warning(f"Timed out on {method} {path}")
			raise SchoolHubConnectionError(f"Request timed out: {method} {path}") from e

	async def _read_body(self, resp: aiohttp.ClientResponse) -> Any:
		try:
			return await resp.json()
		except aiohttp.ContentTypeError:
			# Some proxies send JSON as text/html
			text = await resp.text()
			if not text.strip():
				return None
			try:
				return json.loads(text)
			except ValueError:
				if resp.status >= 400:
					return None
				raise SchoolHubDataError(f"Expected JSON response, got: {text[:200]}")
		except ValueError as e:
			if resp.status >= 400:
				return None
			raise SchoolHubDataError(f"Invalid JSON response: {e}") from e

	def _unwrap(self, status: int, body: Any, what: str, allow_empty: bool = False) -> Any:
		message = body.get("message") if isinstance(body, dict) else None
		if status in (401, 403):
			raise SchoolHubAuthError(message or f"Not authorised: HTTP {status}", status)
		if status >= 400:
			_LOGGER.warning(f"{what} failed with HTTP {status}: {message}")
			raise SchoolHubAPIError(message or f"Request failed: HTTP {status}", status)

		if allow_empty and not isinstance(body, dict):
			return None
		if not isinstance(body, dict) or "success" not in body:
			_LOGGER.warning(f"{what} returned no response envelope")
			raise SchoolHubDataError(f"Malformed response envelope for {what}")
		if body["success"] is not True:
			raise SchoolHubAPIError(message or f"Request failed: {what}", status)
		data = body.get("data")
		if data is None and not allow_empty:
			_LOGGER.warning(f"{what} returned no data")
			raise SchoolHubDataError(f"Response for {what} is missing data")
		return data

	async def _get(self, path: str, decoder: Callable[[Any], T], params: Optional[Dict[str, Any]] = None) -> T:
		data = await self._request("GET", path, params=params)
		try:
			return decoder(data)
		except (AttributeError, TypeError) as e:
			raise SchoolHubDataError(f"Unexpected payload from {path}: {e}") from e

	async def _get_list(self, path: str, key: str, decoder: Callable[[Any], T], params: Optional[Dict[str, Any]] = None) -> List[T]:
		return await self._get(path, lambda data: [decoder(item) for item in _items(data, key)], params)

	async def _send(self, method: str, path: str, payload: Payload, decoder: Callable[[Any], T]) -> T:
		data = await self._request(method, path, payload=payload)
		try:
			return decoder(data)
		except (AttributeError, TypeError) as e:
			raise SchoolHubDataError(f"Unexpected payload from {path}: {e}") from e

	async def _delete(self, path: str) -> None:
		await self._request("DELETE", path, allow_empty=True)

	# Students

	async def get_students(self, filters: Optional[Dict[str, Any]] = None) -> List[Student]:
		return await self._get_list(ENDPOINT_STUDENTS, "students", student_from_dto, filters)

	async def get_student(self, student_id: str) -> Student:
		return await self._get(f"{ENDPOINT_STUDENTS}/{student_id}", student_from_dto)

	async def create_student(self, data: CreateStudentData) -> Student:
		payload = validate_student(student_to_dto(data))
		return await self._send("POST", ENDPOINT_STUDENTS, payload, student_from_dto)

	async def update_student(self, student_id: str, data: Union[CreateStudentData, Payload]) -> Student:
		"""Update a student; a dict is sent as a partial wire payload."""
		payload = data if isinstance(data, dict) else student_to_dto(data)
		payload = validate_student(payload, partial=True)
		return await self._send("PUT", f"{ENDPOINT_STUDENTS}/{student_id}", payload, student_from_dto)

	async def delete_student(self, student_id: str) -> None:
		await self._delete(f"{ENDPOINT_STUDENTS}/{student_id}")

	# Teachers

	async def get_teachers(self, filters: Optional[Dict[str, Any]] = None) -> List[Teacher]:
		return await self._get_list(ENDPOINT_TEACHERS, "teachers", teacher_from_dto, filters)

	async def get_teacher(self, teacher_id: str) -> Teacher:
		return await self._get(f"{ENDPOINT_TEACHERS}/{teacher_id}", teacher_from_dto)

	async def create_teacher(self, data: CreateTeacherData) -> Teacher:
		payload = validate_teacher(teacher_to_dto(data))
		return await self._send("POST", ENDPOINT_TEACHERS, payload, teacher_from_dto)

	async def update_teacher(self, teacher_id: str, data: Union[CreateTeacherData, Payload]) -> Teacher:
		payload = data if isinstance(data, dict) else teacher_to_dto(data)
		payload = validate_teacher(payload, partial=True)
		return await self._send("PUT", f"{ENDPOINT_TEACHERS}/{teacher_id}", payload, teacher_from_dto)

	async def delete_teacher(self, teacher_id: str) -> None:
		await self._delete(f"{ENDPOINT_TEACHERS}/{teacher_id}")

	# Classes

	async def get_classes(self, filters: Optional[Dict[str, Any]] = None) -> List[SchoolClass]:
		return await self._get_list(ENDPOINT_CLASSES, "classes", class_from_dto, filters)

	async def get_class(self, class_id: str) -> SchoolClass:
		return await self._get(f"{ENDPOINT_CLASSES}/{class_id}", class_from_dto)

	async def create_class(self, data: CreateClassData) -> SchoolClass:
		payload = validate_class(class_to_dto(data))
		return await self._send("POST", ENDPOINT_CLASSES, payload, class_from_dto)

	async def update_class(self, class_id: str, data: Union[CreateClassData, Payload]) -> SchoolClass:
		payload = data if isinstance(data, dict) else class_to_dto(data)
		payload = validate_class(payload, partial=True)
		return await self._send("PUT", f"{ENDPOINT_CLASSES}/{class_id}", payload, class_from_dto)

	async def delete_class(self, class_id: str) -> None:
		await self._delete(f"{ENDPOINT_CLASSES}/{class_id}")

	# Lectures

	async def get_lectures(self, filters: Optional[Dict[str, Any]] = None) -> List[Lecture]:
		return await self._get_list(ENDPOINT_LECTURES, "lectures", lecture_from_dto, filters)

	async def get_lecture(self, lecture_id: str) -> Lecture:
		return await self._get(f"{ENDPOINT_LECTURES}/{lecture_id}", lecture_from_dto)

	async def create_lecture(self, data: CreateLectureData) -> Lecture:
		payload = validate_lecture(lecture_to_dto(data))
		return await self._send("POST", ENDPOINT_LECTURES, payload, lecture_from_dto)

	async def update_lecture(self, lecture_id: str, data: Union[CreateLectureData, Payload]) -> Lecture:
		payload = data if isinstance(data, dict) else lecture_to_dto(data)
		payload = validate_lecture(payload, partial=True)
		return await self._send("PUT", f"{ENDPOINT_LECTURES}/{lecture_id}", payload, lecture_from_dto)

	async def delete_lecture(self, lecture_id: str) -> None:
		await self._delete(f"{ENDPOINT_LECTURES}/{lecture_id}")

	# Student attendance

	async def get_attendance_records(self, filters: Optional[AttendanceFilters] = None) -> AttendanceRecordsPage:
		"""Get the signed-in student's attendance records.

		Args:
			filters: Optional date range, class, status and paging filters.

		Returns:
			Records with the server's summary and pagination.
		"""
		return await self._get(
			ENDPOINT_STUDENT_ATTENDANCE,
			attendance_records_page_from_dto,
			attendance_filters_to_params(filters),
		)

	async def get_attendance_stats(
		self,
		start_date: Optional[str] = None,
		end_date: Optional[str] = None,
		period: Optional[str] = None,
	) -> AttendanceStatistics:
		if period is not None and period not in STATS_PERIODS:
			raise SchoolHubValidationError({"period": f"Period must be one of {', '.join(STATS_PERIODS)}"})
		params = {"startDate": start_date, "endDate": end_date, "period": period}
		return await self._get(f"{ENDPOINT_STUDENT_ATTENDANCE}/stats", attendance_statistics_from_dto, params)

	async def get_attendance_calendar(self, year: int, month: int, class_id: Optional[str] = None) -> AttendanceCalendar:
		if not 1 <= month <= 12:
			raise SchoolHubValidationError({"month": "Month must be between 1 and 12"})
		params = {"year": year, "month": month, "classId": class_id}
		return await self._get(f"{ENDPOINT_STUDENT_ATTENDANCE}/calendar", attendance_calendar_from_dto, params)

	# Parent attendance

	async def get_children_overview(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> ChildrenAttendanceOverview:
		params = {"startDate": start_date, "endDate": end_date}
		return await self._get(f"{ENDPOINT_PARENT_ATTENDANCE}/overview", children_overview_from_dto, params)

	async def get_child_attendance(
		self,
		child_id: str,
		start_date: Optional[str] = None,
		end_date: Optional[str] = None,
		page: Optional[int] = None,
		limit: Optional[int] = None,
	) -> AttendanceRecordsPage:
		params = {"startDate": start_date, "endDate": end_date, "page": page, "limit": limit}
		return await self._get(f"{ENDPOINT_PARENT_ATTENDANCE}/{child_id}", attendance_records_page_from_dto, params)

	async def compare_children_attendance(
		self,
		child_ids: Iterable[str],
		start_date: Optional[str] = None,
		end_date: Optional[str] = None,
	) -> AttendanceComparison:
		child_ids = list(child_ids)
		if not child_ids:
			raise SchoolHubValidationError({"childIds": "At least one child is required"})
		params = {"childIds": ",".join(child_ids), "startDate": start_date, "endDate": end_date}
		return await self._get(f"{ENDPOINT_PARENT_ATTENDANCE}/compare", attendance_comparison_from_dto, params)

	# Class attendance sessions

	async def get_class_attendance(
		self,
		class_id: str,
		start_date: Optional[str] = None,
		end_date: Optional[str] = None,
	) -> List[ClassAttendanceRecord]:
		path = ENDPOINT_CLASS_ATTENDANCE.format(class_id=class_id)
		params = {"startDate": start_date, "endDate": end_date}
		return await self._get_list(path, "records", class_attendance_record_from_dto, params)

	async def mark_attendance(self, data: MarkAttendanceData) -> ClassAttendanceRecord:
		payload = validate_mark_attendance(mark_attendance_to_dto(data))
		path = ENDPOINT_CLASS_ATTENDANCE.format(class_id=data.class_id)
		return await self._send("POST", path, payload, class_attendance_record_from_dto)

	async def update_class_attendance(
		self,
		class_id: str,
		record_id: str,
		students: List[StudentAttendance],
	) -> ClassAttendanceRecord:
		dto = mark_attendance_to_dto(MarkAttendanceData(class_id=class_id, date="", students=students))
		payload = validate_attendance_update({"students": dto["students"]})
		path = f"{ENDPOINT_CLASS_ATTENDANCE.format(class_id=class_id)}/{record_id}"
		return await self._send("PUT", path, payload, class_attendance_record_from_dto)

	async def delete_class_attendance(self, class_id: str, record_id: str) -> None:
		await self._delete(f"{ENDPOINT_CLASS_ATTENDANCE.format(class_id=class_id)}/{record_id}")

	async def get_class_attendance_by_date(self, class_id: str, day: str) -> Optional[ClassAttendanceRecord]:
		"""Get the session marked for ``day`` (``YYYY-MM-DD``).

		Returns:
			The session, or None when nothing was marked that day.
		"""
		path = f"{ENDPOINT_CLASS_ATTENDANCE.format(class_id=class_id)}/date/{day}"
		try:
			data = await self._request("GET", path, allow_empty=True)
		except SchoolHubAPIError as e:
			if e.status == 404:
				return None
			raise
		if not isinstance(data, dict):
			return None
		if not (data.get("_id") or data.get("id")):
			_LOGGER.warning(f"Ignoring session without an id from {path}")
			return None
		return class_attendance_record_from_dto(data)

	async def get_class_attendance_by_lecture(self, class_id: str, lecture_id: str) -> List[ClassAttendanceRecord]:
		path = f"{ENDPOINT_CLASS_ATTENDANCE.format(class_id=class_id)}/lecture/{lecture_id}"
		return await self._get_list(path, "records", class_attendance_record_from_dto)

	async def get_class_statistics(
		self,
		class_id: str,
		start_date: Optional[str] = None,
		end_date: Optional[str] = None,
	) -> ClassAttendanceStatistics:
		params = {"startDate": start_date, "endDate": end_date}
		return await self._get(ENDPOINT_CLASS_STATISTICS.format(class_id=class_id), class_attendance_statistics_from_dto, params)

	async def get_student_attendance_history(
		self,
		student_id: str,
		class_id: Optional[str] = None,
		start_date: Optional[str] = None,
		end_date: Optional[str] = None,
		page: Optional[int] = None,
		limit: Optional[int] = None,
	) -> StudentAttendanceHistory:
		params = {"classId": class_id, "startDate": start_date, "endDate": end_date, "page": page, "limit": limit}
		path = ENDPOINT_STUDENT_HISTORY.format(student_id=student_id)
		return await self._get(path, student_attendance_history_from_dto, params)

	# Teacher attendance

	async def get_teacher_dashboard(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> TeacherAttendanceDashboard:
		params = {"startDate": start_date, "endDate": end_date}
		return await self._get(f"{ENDPOINT_TEACHER_ATTENDANCE}/dashboard", teacher_dashboard_from_dto, params)

	async def get_teacher_attendance(self, filters: Optional[AttendanceFilters] = None) -> TeacherAttendancePage:
		"""Get the sessions of the signed-in teacher's classes.

		Args:
			filters: Optional class, lecture, date range, status and paging filters.

		Returns:
			One page of class sessions.
		"""
		return await self._get(
			ENDPOINT_TEACHER_ATTENDANCE,
			teacher_attendance_page_from_dto,
			attendance_filters_to_params(filters),
		)

	async def get_teacher_class_statistics(
		self,
		class_id: str,
		start_date: Optional[str] = None,
		end_date: Optional[str] = None,
	) -> ClassAttendanceStatistics:
		params = {"startDate": start_date, "endDate": end_date}
		return await self._get(
			f"{ENDPOINT_TEACHER_ATTENDANCE}/statistics/{class_id}",
			class_attendance_statistics_from_dto,
			params,
		)

	# Dashboard

	async def get_quick_stats(self) -> QuickStats:
		return await self._get(ENDPOINT_DASHBOARD_QUICK, quick_stats_from_dto)

	async def get_dashboard_stats(self) -> DashboardStats:
		return await self._get(ENDPOINT_DASHBOARD_STATS, dashboard_stats_from_dto)

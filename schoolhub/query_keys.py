"""Hierarchical cache keys.

Keys are tuples so that a shorter key is a prefix of every longer key built
from it, e.g. ``("students",)`` covers ``("students", "list", ...)`` and
``("students", "detail", "s1")``.
"""

from dataclasses import asdict, is_dataclass
from typing import Any, Mapping, Optional, Tuple

from .query import QueryKey


def serialize_filters(filters: Any) -> Tuple[Tuple[str, Any], ...]:
	"""Turn a filter mapping or dataclass into a sorted, hashable tuple.

	Empty values (``None`` and ``""``) are dropped so that ``{}`` and
	``{"status": None}`` share one cache entry.
	"""
	if filters is None:
		return ()
	if is_dataclass(filters) and not isinstance(filters, type):
		filters = asdict(filters)
	if not isinstance(filters, Mapping):
		raise TypeError(f"Filters must be a mapping or dataclass, got {type(filters).__name__}")
	items = []
	for name, value in filters.items():
		if value is None or value == "":
			continue
		if isinstance(value, (list, set)):
			value = tuple(sorted(value))
		items.append((name, value))
	return tuple(sorted(items))


class QueryKeys:
	"""Key factory for one resource."""

	def __init__(self, root: str) -> None:
		self.root = root

	def all(self) -> QueryKey:
		return (self.root,)

	def lists(self) -> QueryKey:
		return (self.root, "list")

	def list(self, filters: Any = None) -> QueryKey:
		return self.lists() + (serialize_filters(filters),)

	def details(self) -> QueryKey:
		return (self.root, "detail")

	def detail(self, item_id: str) -> QueryKey:
		return self.details() + (item_id,)


class StudentAttendanceKeys(QueryKeys):
	def __init__(self) -> None:
		super().__init__("attendance")

	def stats(self, filters: Any = None) -> QueryKey:
		return (self.root, "stats", serialize_filters(filters))

	def calendar(self, year: int, month: int, class_id: Optional[str] = None) -> QueryKey:
		return (self.root, "calendar", year, month, class_id)


class ParentAttendanceKeys(QueryKeys):
	def __init__(self) -> None:
		super().__init__("parent-attendance")

	def overview(self, filters: Any = None) -> QueryKey:
		return (self.root, "overview", serialize_filters(filters))

	def child(self, child_id: str, filters: Any = None) -> QueryKey:
		return (self.root, "child", child_id, serialize_filters(filters))

	def compare(self, child_ids: Any, filters: Any = None) -> QueryKey:
		return (self.root, "compare", tuple(child_ids), serialize_filters(filters))


class ClassAttendanceKeys(QueryKeys):
	def __init__(self) -> None:
		super().__init__("class-attendance")

	def for_class(self, class_id: str) -> QueryKey:
		return (self.root, "class", class_id)

	def class_list(self, class_id: str, filters: Any = None) -> QueryKey:
		return self.for_class(class_id) + (serialize_filters(filters),)

	def by_date(self, class_id: str, day: str) -> QueryKey:
		return self.for_class(class_id) + ("date", day)

	def by_lecture(self, class_id: str, lecture_id: str) -> QueryKey:
		return self.for_class(class_id) + ("lecture", lecture_id)

	def statistics(self, class_id: str, filters: Any = None) -> QueryKey:
		return self.for_class(class_id) + ("statistics", serialize_filters(filters))

	def student_history(self, student_id: str, filters: Any = None) -> QueryKey:
		return (self.root, "student", student_id, serialize_filters(filters))


class TeacherAttendanceKeys(QueryKeys):
	def __init__(self) -> None:
		super().__init__("teacher-attendance")

	def dashboard(self, filters: Any = None) -> QueryKey:
		return (self.root, "dashboard", serialize_filters(filters))

	def statistics(self, class_id: str, filters: Any = None) -> QueryKey:
		return (self.root, "statistics", class_id, serialize_filters(filters))


class DashboardKeys(QueryKeys):
	def __init__(self) -> None:
		super().__init__("dashboard")

	def quick(self) -> QueryKey:
		return (self.root, "quick")

	def stats(self) -> QueryKey:
		return (self.root, "stats")


student_keys = QueryKeys("students")
teacher_keys = QueryKeys("teachers")
class_keys = QueryKeys("classes")
lecture_keys = QueryKeys("lectures")
attendance_keys = StudentAttendanceKeys()
parent_attendance_keys = ParentAttendanceKeys()
class_attendance_keys = ClassAttendanceKeys()
teacher_attendance_keys = TeacherAttendanceKeys()
dashboard_keys = DashboardKeys()

"""Attendance rate and trend calculations."""

from datetime import date, datetime
from typing import Iterable, Optional, Tuple, Union

from .const import (
	MAX_DAYS_TO_DELETE,
	MAX_DAYS_TO_UPDATE,
	RATE_DECIMALS,
	STATUS_ABSENT,
	STATUS_EXCUSED,
	STATUS_LATE,
	STATUS_PRESENT,
	TREND_DECLINING,
	TREND_IMPROVING,
	TREND_STABLE,
	TREND_THRESHOLD,
)
from .formatters import to_local
from .models import AttendanceSummary


def rate_from_counts(present_days: int, excused_days: int, total_days: int) -> float:
	"""Percentage of days present or excused, rounded to one decimal."""
	if total_days <= 0:
		return 0.0
	return round((present_days + excused_days) / total_days * 100, RATE_DECIMALS)


def calculate_attendance_rate(summary: AttendanceSummary) -> float:
	"""Attendance rate for a summary; zero total days gives ``0``."""
	return rate_from_counts(summary.present_days, summary.excused_days, summary.total_days)


def calculate_trend(current_rate: float, previous_rate: float) -> str:
	"""Classify the change between two rates.

	The change has to be strictly greater than ``TREND_THRESHOLD`` points
	to count as a direction; exactly two points is still stable.
	"""
	# Rounded so that e.g. 80.1 - 78.1 compares as exactly 2.
	diff = round(current_rate - previous_rate, 6)
	if diff > TREND_THRESHOLD:
		return TREND_IMPROVING
	if diff < -TREND_THRESHOLD:
		return TREND_DECLINING
	return TREND_STABLE


def count_statuses(statuses: Iterable[str]) -> AttendanceSummary:
	"""Count attendance statuses into a summary.

	Calendar-only statuses (``holiday``, ``no_class``) are not class days
	and are left out of ``total_days``.
	"""
	summary = AttendanceSummary()
	for status in statuses:
		if status == STATUS_PRESENT:
			summary.present_days += 1
		elif status == STATUS_ABSENT:
			summary.absent_days += 1
		elif status == STATUS_LATE:
			summary.late_days += 1
		elif status == STATUS_EXCUSED:
			summary.excused_days += 1
		else:
			continue
		summary.total_days += 1
	summary.attendance_rate = calculate_attendance_rate(summary)
	return summary


def summarize_records(records: Iterable) -> AttendanceSummary:
	"""Build a summary from anything with a ``status`` attribute."""
	return count_statuses(record.status for record in records)


def _days_old(value: Union[date, datetime], today: Optional[date] = None) -> int:
	if isinstance(value, datetime):
		value = to_local(value).date()
	today = today or date.today()
	return (today - value).days


def can_update_attendance(value: Union[date, datetime], max_days_old: int = MAX_DAYS_TO_UPDATE, today: Optional[date] = None) -> bool:
	"""Teachers may edit a session for ``max_days_old`` days."""
	days_old = _days_old(value, today)
	return 0 <= days_old <= max_days_old


def can_delete_attendance(value: Union[date, datetime], max_days_old: int = MAX_DAYS_TO_DELETE, today: Optional[date] = None) -> bool:
	days_old = _days_old(value, today)
	return 0 <= days_old <= max_days_old


def can_modify_record(value: Union[date, datetime], action: str, today: Optional[date] = None) -> Tuple[bool, Optional[str]]:
	"""Check an ``"update"`` or ``"delete"`` against its window.

	Returns ``(allowed, reason)``; ``reason`` is set only when refused.
	"""
	if _days_old(value, today) < 0:
		return False, "Cannot modify attendance for a future date"
	if action == "update":
		if can_update_attendance(value, today=today):
			return True, None
		return False, f"Attendance older than {MAX_DAYS_TO_UPDATE} days cannot be updated"
	if action == "delete":
		if can_delete_attendance(value, today=today):
			return True, None
		return False, f"Attendance older than {MAX_DAYS_TO_DELETE} days cannot be deleted"
	raise ValueError(f"Unknown action: {action!r}")

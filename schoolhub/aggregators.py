"""Summaries derived from lists of attendance records."""

import calendar
import logging
from collections import OrderedDict
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, TypeVar, Union

from .calculators import calculate_trend, count_statuses, summarize_records
from .const import RECENT_RECORDS_LIMIT, STATUS_HOLIDAY, STATUS_NO_CLASS, TREND_STABLE
from .formatters import month_key, to_local
from .mappers import parse_datetime
from .models import (
	AttendanceCalendar,
	AttendanceComparison,
	AttendanceRecord,
	AttendanceStatistics,
	AttendanceSummary,
	CalendarDay,
	ChildAttendanceSummary,
	ChildComparisonData,
	ChildrenAttendanceOverview,
	ChildSummary,
	ClassAttendanceRecord,
	ClassWiseBreakdown,
	ComparisonAverage,
	MonthlyBreakdown,
	OverallAttendance,
	OverallChildrenSummary,
	RecentAttendanceRecord,
	StudentAttendanceStats,
)

_LOGGER = logging.getLogger(__name__)

DayLike = Union[date, datetime, str]
Dated = TypeVar("Dated", AttendanceRecord, ClassAttendanceRecord)


def _local_date(value: Optional[DayLike]) -> Optional[date]:
	"""Local calendar date of a value; unparseable strings give ``None``."""
	if value is None:
		return None
	if isinstance(value, str):
		value = parse_datetime(value)
		if value is None:
			return None
	if isinstance(value, datetime):
		return to_local(value).date()
	return value


def _bound(value: Optional[DayLike], name: str) -> Optional[date]:
	if value is None:
		return None
	day = _local_date(value)
	if day is None:
		raise ValueError(f"Invalid {name} date: {value!r}")
	return day


def _sort_key(value: datetime) -> datetime:
	# Naive local time so that naive and aware values compare
	return to_local(value).replace(tzinfo=None)


def _summary_kwargs(summary: AttendanceSummary) -> Dict[str, Union[int, float]]:
	return {
		"total_days": summary.total_days,
		"present_days": summary.present_days,
		"absent_days": summary.absent_days,
		"late_days": summary.late_days,
		"excused_days": summary.excused_days,
		"attendance_rate": summary.attendance_rate,
	}


def group_records_by_month(records: Iterable[AttendanceRecord]) -> Dict[str, List[AttendanceRecord]]:
	"""Group records by local ``YYYY-MM``, keys in chronological order.

	Records without a date belong to no month and are left out.
	"""
	groups: Dict[str, List[AttendanceRecord]] = {}
	for record in records:
		if record.date is None:
			continue
		groups.setdefault(month_key(record.date), []).append(record)
	return {key: groups[key] for key in sorted(groups)}


def monthly_breakdown(records: Iterable[AttendanceRecord]) -> List[MonthlyBreakdown]:
	return [
		MonthlyBreakdown(month=key, **_summary_kwargs(summarize_records(group)))
		for key, group in group_records_by_month(records).items()
	]


def class_wise_breakdown(records: Iterable[AttendanceRecord]) -> List[ClassWiseBreakdown]:
	"""One summary per class, in the order classes first appear."""
	groups: "OrderedDict[str, List[AttendanceRecord]]" = OrderedDict()
	names: Dict[str, str] = {}
	for record in records:
		groups.setdefault(record.class_id, []).append(record)
		if record.class_name and not names.get(record.class_id):
			names[record.class_id] = record.class_name
	return [
		ClassWiseBreakdown(
			class_id=class_id,
			class_name=names.get(class_id, ""),
			**_summary_kwargs(summarize_records(group)),
		)
		for class_id, group in groups.items()
	]


def build_attendance_statistics(records: Sequence[AttendanceRecord]) -> AttendanceStatistics:
	"""Overall summary plus monthly and class-wise breakdowns.

	The overall trend compares the last two months; with fewer than two
	months of data it is ``stable``.
	"""
	months = monthly_breakdown(records)
	trend = TREND_STABLE
	if len(months) >= 2:
		trend = calculate_trend(months[-1].attendance_rate, months[-2].attendance_rate)
	overall = OverallAttendance(trend=trend, **_summary_kwargs(summarize_records(records)))
	return AttendanceStatistics(
		overall=overall,
		monthly_breakdown=months,
		class_wise_breakdown=class_wise_breakdown(records),
	)


def build_calendar(
	year: int,
	month: int,
	records: Iterable[AttendanceRecord],
	holidays: Iterable[DayLike] = (),
) -> AttendanceCalendar:
	"""Materialize every day of a month.

	Days with a record take its status, class and remarks. The first record
	seen for a day wins. Days without one are ``holiday`` when listed in
	``holidays`` and ``no_class`` otherwise.
	"""
	by_day: Dict[date, AttendanceRecord] = {}
	for record in records:
		day = _local_date(record.date)
		if day is not None:
			by_day.setdefault(day, record)
	holiday_days = {_bound(h, "holiday") for h in holidays}

	days = []
	for day in range(1, calendar.monthrange(year, month)[1] + 1):
		current = date(year, month, day)
		record = by_day.get(current)
		if record is not None:
			days.append(CalendarDay(
				date=datetime(year, month, day),
				status=record.status,
				class_id=record.class_id,
				class_name=record.class_name,
				remarks=record.remarks,
			))
		else:
			days.append(CalendarDay(
				date=datetime(year, month, day),
				status=STATUS_HOLIDAY if current in holiday_days else STATUS_NO_CLASS,
			))
	return AttendanceCalendar(year=year, month=month, days=days)


def sort_by_date(records: Iterable[Dated], ascending: bool = False) -> List[Dated]:
	"""Records ordered by date, newest first by default; undated ones go last."""
	records = list(records)
	dated = sorted(
		(r for r in records if r.date is not None),
		key=lambda r: _sort_key(r.date),
		reverse=not ascending,
	)
	return dated + [r for r in records if r.date is None]


def recent_records(records: Iterable[AttendanceRecord], limit: int = RECENT_RECORDS_LIMIT) -> List[RecentAttendanceRecord]:
	newest = sort_by_date(records)[:limit]
	return [RecentAttendanceRecord(date=r.date, status=r.status, class_name=r.class_name) for r in newest]


def build_child_summary(
	child_id: str,
	child_name: str,
	records: Sequence[AttendanceRecord],
	class_id: str = "",
	class_name: str = "",
	previous_rate: Optional[float] = None,
) -> ChildAttendanceSummary:
	"""Summary of one child's records with a trend against ``previous_rate``."""
	summary = summarize_records(records)
	trend = TREND_STABLE
	if previous_rate is not None:
		trend = calculate_trend(summary.attendance_rate, previous_rate)
	return ChildAttendanceSummary(
		child_id=child_id,
		child_name=child_name,
		class_id=class_id,
		class_name=class_name,
		summary=ChildSummary(trend=trend, **_summary_kwargs(summary)),
		recent_records=recent_records(records),
	)


def _mean(values: Sequence[float]) -> float:
	return sum(values) / len(values) if values else 0.0


def compare_children(children: Sequence[ChildAttendanceSummary]) -> AttendanceComparison:
	"""Side-by-side figures for several children.

	The average rate is the mean of the children's rates, not the rate of
	the summed days.
	"""
	rows = [
		ChildComparisonData(
			child_id=child.child_id,
			child_name=child.child_name,
			attendance_rate=child.summary.attendance_rate,
			total_days=child.summary.total_days,
			present_days=child.summary.present_days,
			absent_days=child.summary.absent_days,
			late_days=child.summary.late_days,
			excused_days=child.summary.excused_days,
		)
		for child in children
	]
	average = ComparisonAverage(
		attendance_rate=_mean([r.attendance_rate for r in rows]),
		total_days=_mean([r.total_days for r in rows]),
		present_days=_mean([r.present_days for r in rows]),
	)
	return AttendanceComparison(children=rows, average=average)


def build_children_overview(children: Sequence[ChildAttendanceSummary]) -> ChildrenAttendanceOverview:
	"""Day totals summed across children; the rate is a mean of child rates."""
	overall = OverallChildrenSummary(
		total_days=sum(c.summary.total_days for c in children),
		present_days=sum(c.summary.present_days for c in children),
		absent_days=sum(c.summary.absent_days for c in children),
		late_days=sum(c.summary.late_days for c in children),
		excused_days=sum(c.summary.excused_days for c in children),
		average_attendance_rate=_mean([c.summary.attendance_rate for c in children]),
	)
	return ChildrenAttendanceOverview(children=list(children), overall_summary=overall)


def find_lowest_attendance(children: Sequence[ChildAttendanceSummary]) -> Optional[ChildAttendanceSummary]:
	"""Child with the lowest rate; ties keep the first one listed."""
	if not children:
		return None
	return min(children, key=lambda c: c.summary.attendance_rate)


def filter_records_by_status(records: Iterable[AttendanceRecord], status: str) -> List[AttendanceRecord]:
	return [r for r in records if r.status == status]


def filter_records_by_date_range(
	records: Iterable[Dated],
	start: Optional[DayLike] = None,
	end: Optional[DayLike] = None,
) -> List[Dated]:
	"""Records whose local date falls within ``[start, end]``, both inclusive.

	With a bound given, records without a date never match.
	"""
	start_day = _bound(start, "start")
	end_day = _bound(end, "end")
	if start_day is None and end_day is None:
		return list(records)
	result = []
	for record in records:
		day = _local_date(record.date)
		if day is None:
			continue
		if start_day is not None and day < start_day:
			continue
		if end_day is not None and day > end_day:
			continue
		result.append(record)
	return result


def filter_by_lecture(sessions: Iterable[ClassAttendanceRecord], lecture_id: str) -> List[ClassAttendanceRecord]:
	return [s for s in sessions if s.lecture_id == lecture_id]


def get_attendance_by_date(sessions: Iterable[ClassAttendanceRecord], day: DayLike) -> Optional[ClassAttendanceRecord]:
	"""First session held on the local date of ``day``, if any."""
	wanted = _bound(day, "session")
	for session in sessions:
		if _local_date(session.date) == wanted:
			return session
	return None


def get_unique_dates(records: Iterable[Dated]) -> List[date]:
	"""Distinct local dates, newest first."""
	days = {_local_date(r.date) for r in records}
	days.discard(None)
	return sorted(days, reverse=True)


def class_session_stats(sessions: Iterable[ClassAttendanceRecord]) -> AttendanceSummary:
	"""Counts over every student mark in a set of class sessions."""
	return count_statuses(s.status for session in sessions for s in session.students)


def student_session_stats(sessions: Iterable[ClassAttendanceRecord], student_id: str) -> StudentAttendanceStats:
	"""Counts for one student across class sessions."""
	name = ""
	statuses = []
	for session in sessions:
		for mark in session.students:
			if mark.student_id != student_id:
				continue
			statuses.append(mark.status)
			name = name or mark.student_name
	summary = count_statuses(statuses)
	if not statuses:
		_LOGGER.debug(f"No session marks found for student {student_id}")
	return StudentAttendanceStats(student_id=student_id, student_name=name, **_summary_kwargs(summary))


def calculate_student_trend(stats: StudentAttendanceStats, recent_rate: Optional[float] = None) -> str:
	"""Trend of a recent rate against the student's period rate.

	Without a recent rate the server's trend is kept.
	"""
	if recent_rate is not None:
		return calculate_trend(recent_rate, stats.attendance_rate)
	return stats.trend or TREND_STABLE

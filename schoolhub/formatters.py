"""Display helpers for dates and numbers."""

import calendar
from datetime import date, datetime, time
from typing import Tuple, Union

DateLike = Union[date, datetime]


def to_local(value: DateLike) -> DateLike:
	"""Return ``value`` in local time; naive values are already local."""
	if isinstance(value, datetime) and value.tzinfo is not None:
		return value.astimezone()
	return value


def format_date(value: DateLike) -> str:
	"""Format as ``Jan 5, 2024``."""
	value = to_local(value)
	return f"{value.strftime('%b')} {value.day}, {value.year}"


def format_date_full(value: DateLike) -> str:
	"""Format as ``Friday, January 5, 2024``."""
	value = to_local(value)
	return f"{value.strftime('%A, %B')} {value.day}, {value.year}"


def format_date_iso(value: DateLike) -> str:
	"""Format as ``YYYY-MM-DD``."""
	return to_local(value).strftime("%Y-%m-%d")


def month_key(value: DateLike) -> str:
	"""Grouping key ``YYYY-MM`` taken from the local calendar date."""
	value = to_local(value)
	return f"{value.year}-{value.month:02d}"


def month_name(value: DateLike) -> str:
	"""Format as ``January 2024``."""
	return to_local(value).strftime("%B %Y")


def month_label(key: str) -> str:
	"""Turn a ``YYYY-MM`` key back into ``January 2024``."""
	year, month = key.split("-", 1)
	return month_name(date(int(year), int(month), 1))


def format_percentage(value: float, decimals: int = 1) -> str:
	return f"{value:.{decimals}f}%"


def format_attendance_rate(rate: float) -> str:
	return format_percentage(rate, 1)


def month_range(year: int, month: int) -> Tuple[datetime, datetime]:
	"""First and last instant of a month."""
	last_day = calendar.monthrange(year, month)[1]
	start = datetime(year, month, 1)
	end = datetime.combine(date(year, month, last_day), time.max)
	return start, end

#!/usr/bin/env python3
"""Unit tests for attendance rate and trend helpers."""

from datetime import date, datetime

import pytest

from schoolhub.calculators import (
	calculate_attendance_rate,
	calculate_trend,
	can_delete_attendance,
	can_modify_record,
	can_update_attendance,
	count_statuses,
	rate_from_counts,
	summarize_records,
)
from schoolhub.models import AttendanceSummary


def test_zero_total_days_gives_zero_rate():
	assert calculate_attendance_rate(AttendanceSummary()) == 0
	assert rate_from_counts(0, 0, 0) == 0


def test_rate_counts_present_and_excused():
	summary = AttendanceSummary(total_days=3, present_days=1, absent_days=1, late_days=1)
	assert calculate_attendance_rate(summary) == 33.3

	summary = AttendanceSummary(total_days=8, present_days=5, excused_days=2, absent_days=1)
	assert calculate_attendance_rate(summary) == round(7 / 8 * 100, 1)


def test_rate_is_rounded_to_one_decimal():
	assert rate_from_counts(2, 0, 3) == 66.7
	assert rate_from_counts(1, 0, 7) == 14.3


def test_equal_rates_are_stable():
	assert calculate_trend(85.0, 85.0) == "stable"


def test_difference_of_exactly_two_is_stable():
	assert calculate_trend(80.1, 78.1) == "stable"
	assert calculate_trend(78.1, 80.1) == "stable"
	assert calculate_trend(92.0, 90.0) == "stable"


def test_difference_above_two_sets_direction():
	assert calculate_trend(85.0, 82.9) == "improving"
	assert calculate_trend(82.9, 85.0) == "declining"


def test_trend_just_past_the_threshold():
	# Arguments are (current, previous)
	previous = 80.0
	assert calculate_trend(previous - 2.01, previous) == "declining"
	assert calculate_trend(previous + 2.01, previous) == "improving"
	assert calculate_trend(previous - 1.99, previous) == "stable"
	assert calculate_trend(previous + 1.99, previous) == "stable"


def test_count_statuses_skips_calendar_only_days():
	summary = count_statuses(["present", "holiday", "no_class", "excused", "late"])
	assert summary.total_days == 3
	assert summary.present_days == 1
	assert summary.excused_days == 1
	assert summary.late_days == 1
	assert summary.attendance_rate == 66.7


def test_summarize_records_reads_status_attribute(make_record):
	records = [
		make_record("2024-01-15", "present"),
		make_record("2024-01-16", "absent"),
		make_record("2024-01-17", "present"),
		make_record("2024-01-18", "present"),
	]
	summary = summarize_records(records)
	assert (summary.total_days, summary.present_days, summary.absent_days) == (4, 3, 1)
	assert summary.attendance_rate == 75.0


def test_update_and_delete_windows():
	today = date(2024, 3, 31)
	assert can_update_attendance(date(2024, 3, 1), today=today) is True
	assert can_update_attendance(date(2024, 2, 29), today=today) is False
	assert can_delete_attendance(date(2024, 3, 24), today=today) is True
	assert can_delete_attendance(date(2024, 3, 23), today=today) is False


def test_modify_record_explains_refusal():
	today = date(2024, 3, 31)
	assert can_modify_record(datetime(2024, 3, 20, 9, 0), "update", today=today) == (True, None)

	allowed, reason = can_modify_record(date(2024, 3, 20), "delete", today=today)
	assert allowed is False
	assert "7 days" in reason

	allowed, reason = can_modify_record(date(2024, 4, 2), "update", today=today)
	assert allowed is False
	assert "future" in reason


def test_modify_record_rejects_unknown_action():
	with pytest.raises(ValueError):
		can_modify_record(date(2024, 3, 30), "archive", today=date(2024, 3, 31))

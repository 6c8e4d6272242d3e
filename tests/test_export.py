#!/usr/bin/env python3
"""Tests for CSV export of class sessions."""

import io
from datetime import datetime

from schoolhub.export import EXPORT_COLUMNS, export_rows, export_to_csv
from schoolhub.models import ClassAttendanceRecord, StudentAttendance


def _session():
	return ClassAttendanceRecord(
		id="a1",
		class_id="c1",
		class_name="Math 101",
		date=datetime(2024, 3, 1),
		submitted_by="t1",
		submitted_at=datetime(2024, 3, 1, 9, 15),
		students=[
			StudentAttendance(student_id="s1", student_id_number="STU001", student_name="Ada", status="present"),
			StudentAttendance(student_id="s2", student_name="Alan", status="late", remarks="Bus, again"),
		],
	)


def test_one_row_per_student_mark():
	rows = export_rows([_session()])
	assert rows[0] == ["Mar 1, 2024", "Math 101", "STU001", "Ada", "PRESENT", "", "Friday, March 1, 2024", "t1"]
	assert rows[1][2] == "s2"
	assert rows[1][4] == "LATE"


def test_csv_has_header_and_quotes_commas():
	stream = io.StringIO()
	text = export_to_csv([_session()], stream)

	assert stream.getvalue() == text
	lines = text.splitlines()
	assert lines[0] == ",".join(EXPORT_COLUMNS)
	assert lines[2].endswith('"Bus, again","Friday, March 1, 2024",t1')


def test_undated_session_exports_blank_date():
	session = ClassAttendanceRecord(id="a2", class_id="c1", date=None, students=[StudentAttendance(student_id="s1", status="absent")])
	assert export_rows([session]) == [["", "", "s1", "", "ABSENT", "", "", ""]]

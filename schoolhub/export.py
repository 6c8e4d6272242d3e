"""CSV export of teacher-marked class sessions."""

import csv
import io
from typing import IO, Iterable, List, Optional

from .formatters import format_date, format_date_full
from .models import ClassAttendanceRecord

EXPORT_COLUMNS = [
	"Date",
	"Class",
	"Student ID",
	"Student Name",
	"Status",
	"Remarks",
	"Submitted At",
	"Submitted By",
]


def export_rows(sessions: Iterable[ClassAttendanceRecord]) -> List[List[str]]:
	"""One row per student mark, sessions in the order given."""
	rows = []
	for session in sessions:
		for mark in session.students:
			rows.append([
				format_date(session.date) if session.date else "",
				session.class_name or "",
				mark.student_id_number or mark.student_id,
				mark.student_name,
				mark.status.upper(),
				mark.remarks,
				format_date_full(session.submitted_at) if session.submitted_at else "",
				session.submitted_by or "",
			])
	return rows


def export_to_csv(sessions: Iterable[ClassAttendanceRecord], stream: Optional[IO[str]] = None) -> str:
	"""Write sessions as CSV with a header row.

	Args:
		sessions: Class sessions to export.
		stream: Text stream to write to. When omitted the CSV is only
			returned.

	Returns:
		The CSV text.
	"""
	buffer = io.StringIO()
	writer = csv.writer(buffer, lineterminator="\n")
	writer.writerow(EXPORT_COLUMNS)
	writer.writerows(export_rows(sessions))
	text = buffer.getvalue()
	if stream is not None:
		stream.write(text)
	return text

"""Shared fixtures: sample API payloads and a fake aiohttp session."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from schoolhub.models import AttendanceRecord, ChildAttendanceSummary, ChildSummary


def envelope(data, success=True, message=None):
	body = {"success": success, "data": data}
	if message is not None:
		body["message"] = message
	return body


def fake_response(status=200, body=None, text=None):
	"""Response double; ``text`` simulates a non-JSON content type."""
	resp = MagicMock()
	resp.status = status
	if text is not None:
		resp.json = AsyncMock(side_effect=aiohttp.ContentTypeError(MagicMock(), ()))
		resp.text = AsyncMock(return_value=text)
	else:
		resp.json = AsyncMock(return_value=body)
	return resp


def _context(resp):
	ctx = MagicMock()
	ctx.__aenter__ = AsyncMock(return_value=resp)
	ctx.__aexit__ = AsyncMock(return_value=False)
	return ctx


@pytest.fixture
def make_session():
	"""Build a session whose ``request`` returns ``responses`` in order."""
	def _make(*responses):
		session = MagicMock()
		session.request = MagicMock(side_effect=[_context(r) for r in responses])
		return session
	return _make


@pytest.fixture
def make_record():
	def _make(day, status="present", class_id="c1", class_name="Math 101", record_id=None):
		return AttendanceRecord(
			id=record_id or f"r-{day}-{class_id}",
			date=datetime.strptime(day, "%Y-%m-%d"),
			class_id=class_id,
			class_name=class_name,
			status=status,
		)
	return _make


@pytest.fixture
def make_child():
	def _make(child_id, rate, total=10, present=None, name=None):
		present = total if present is None else present
		return ChildAttendanceSummary(
			child_id=child_id,
			child_name=name or f"Child {child_id}",
			summary=ChildSummary(
				total_days=total,
				present_days=present,
				absent_days=total - present,
				attendance_rate=rate,
			),
		)
	return _make


@pytest.fixture
def attendance_list_data():
	return {
		"records": [
			{
				"id": "r1",
				"date": "2024-01-15T09:00:00.000Z",
				"classId": "c1",
				"className": "Mathematics",
				"status": "present",
				"submittedBy": "t1",
				"submittedAt": "2024-01-15T09:05:00.000Z",
			},
			{
				"id": "r2",
				"date": "2024-01-16T09:00:00.000Z",
				"classId": "c1",
				"className": "Mathematics",
				"status": "absent",
				"remarks": "Sick",
			},
			{
				"id": "r3",
				"date": "2024-01-17T09:00:00.000Z",
				"classId": "c2",
				"className": "Physics",
				"status": "late",
			},
		],
		"summary": {
			"totalDays": 3,
			"presentDays": 1,
			"absentDays": 1,
			"lateDays": 1,
			"excusedDays": 0,
			"attendanceRate": 33.3,
		},
		"pagination": {"page": 1, "limit": 10, "totalPages": 1, "totalRecords": 3},
	}


@pytest.fixture
def attendance_stats_data():
	return {
		"overall": {
			"totalDays": 40,
			"presentDays": 34,
			"absentDays": 3,
			"lateDays": 2,
			"excusedDays": 1,
			"attendanceRate": 87.5,
			"trend": "improving",
		},
		"monthlyBreakdown": [
			{"month": "2024-01", "totalDays": 20, "presentDays": 16, "absentDays": 2, "lateDays": 1, "excusedDays": 1, "attendanceRate": 85.0},
			{"month": "2024-02", "totalDays": 20, "presentDays": 18, "absentDays": 1, "lateDays": 1, "excusedDays": 0, "attendanceRate": 90.0},
		],
		"classWiseBreakdown": [
			{"classId": "c1", "className": "Mathematics", "totalDays": 40, "presentDays": 34, "absentDays": 3, "lateDays": 2, "excusedDays": 1, "attendanceRate": 87.5},
		],
	}


@pytest.fixture
def student_dto():
	return {
		"id": "s1",
		"first_name": "Ada",
		"last_name": "Lovelace",
		"email": "ada@example.com",
		"student_id": "STU001",
		"age": 15,
		"gender": "female",
		"phone": "5551234567",
		"address": {"street": "1 Main St", "city": "London", "state": "LDN", "zip_code": "12345"},
		"enrolled_at": "2023-09-01T00:00:00+00:00",
		"is_active": True,
		"created_at": "2023-09-01T08:00:00+00:00",
		"updated_at": "2024-01-10T08:00:00+00:00",
	}


@pytest.fixture
def teacher_dto():
	return {
		"id": "t1",
		"first_name": "Alan",
		"last_name": "Turing",
		"email": "alan@example.com",
		"employee_id": "EMP001",
		"phone": "5559876543",
		"department": "Mathematics",
		"qualification": "PhD Mathematics",
		"specialization": "Logic",
		"subjects": ["Mathematics", "Computing"],
		"status": "active",
		"employment_type": "full-time",
		"experience": 12,
		"joining_date": "2015-08-20T00:00:00+00:00",
		"is_active": True,
		"classes": ["c1", {"_id": "c2", "className": "Physics A", "grade": "10", "roomNo": "B2", "subjects": ["Physics"]}],
	}


@pytest.fixture
def lecture_dto():
	return {
		"id": "l1",
		"title": "Intro to Algebra",
		"description": "Variables and expressions",
		"subject": "Mathematics",
		"teacher": {"first_name": "Alan", "last_name": "Turing", "email": "alan@example.com", "teacher_id": "EMP001"},
		"schedule": {"day_of_week": "Monday", "start_time": "09:00", "end_time": "10:00", "room": "A1"},
		"duration": 60,
		"type": "lecture",
		"materials": [{"name": "Slides", "type": "presentation", "url": "https://example.com/slides.pdf"}],
		"is_active": True,
		"class_id": "c1",
	}


@pytest.fixture
def dashboard_stats_data():
	return {
		"overview": {"totalStudents": 120, "totalTeachers": 12, "totalClasses": 6, "totalLectures": 40},
		"students": {
			"total": 120,
			"byGender": [{"_id": "female", "count": 64}, {"_id": "male", "count": 56}],
			"recent": [{"_id": "s9", "firstName": "Grace", "lastName": "Hopper", "email": "grace@example.com", "studentId": "STU009", "grade": "10", "createdAt": "2024-02-01T10:00:00Z"}],
		},
		"teachers": {"total": 12, "byDepartment": [{"_id": "Science", "count": 5}]},
		"classes": {
			"total": 6,
			"byGrade": [{"_id": "10", "count": 3}],
			"averageCapacity": "32.50",
			"averageEnrolled": "20.00",
			"enrollment": {"totalCapacity": 195, "totalEnrolled": 120, "availableSlots": 75},
			"recent": [],
		},
		"lectures": {
			"total": 40,
			"byType": [{"_id": "lecture", "count": 30}],
			"bySubject": [{"_id": "Mathematics", "count": 10}],
			"upcoming": [{"_id": "l7", "title": "Optics", "subject": "Physics", "teacher": None, "schedule": None, "duration": 45}],
		},
	}

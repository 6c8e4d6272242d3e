#!/usr/bin/env python3
"""Tests for the API client with a faked aiohttp session."""

import asyncio
from datetime import datetime

import aiohttp
import pytest

from conftest import envelope, fake_response
from schoolhub.client import SchoolHubClient
from schoolhub.exceptions import (
	SchoolHubAPIError,
	SchoolHubAuthError,
	SchoolHubConnectionError,
	SchoolHubDataError,
	SchoolHubValidationError,
)
from schoolhub.models import (
	AttendanceFilters,
	CreateStudentData,
	MarkAttendanceData,
	StudentAttendance,
)

BASE_URL = "http://school.test/api"


def _client(session, token="secret"):
	return SchoolHubClient(base_url=BASE_URL, token=token, session=session)


def test_attendance_records_end_to_end(make_session, attendance_list_data):
	session = make_session(fake_response(body=envelope(attendance_list_data)))
	client = _client(session)

	page = asyncio.run(client.get_attendance_records(AttendanceFilters(start_date="2024-01-01", limit=10)))

	assert len(page.records) == 3
	assert isinstance(page.records[0].date, datetime)
	assert page.summary.attendance_rate == 33.3
	assert page.summary.present_days == 1

	args, kwargs = session.request.call_args
	assert args == ("GET", f"{BASE_URL}/student/attendance")
	assert kwargs["params"] == {"startDate": "2024-01-01", "limit": "10"}
	assert kwargs["headers"]["Authorization"] == "Bearer secret"


def test_no_token_sends_no_authorization_header(make_session):
	session = make_session(fake_response(body=envelope({"totalStudents": 3})))
	stats = asyncio.run(_client(session, token=None).get_quick_stats())
	assert stats.total_students == 3
	assert "Authorization" not in session.request.call_args.kwargs["headers"]


def test_success_false_raises_api_error_with_server_message(make_session):
	session = make_session(fake_response(body={"success": False, "message": "Student not found"}))
	with pytest.raises(SchoolHubAPIError) as err:
		asyncio.run(_client(session).get_student("missing"))
	assert err.value.message == "Student not found"
	assert str(err.value) == "Student not found"


def test_http_error_keeps_server_message_and_status(make_session):
	session = make_session(fake_response(status=409, body={"success": False, "message": "Email already exists"}))
	with pytest.raises(SchoolHubAPIError) as err:
		asyncio.run(_client(session).get_students())
	assert err.value.status == 409
	assert err.value.message == "Email already exists"


def test_unauthorised_maps_to_auth_error(make_session):
	session = make_session(fake_response(status=401, body={"success": False, "message": "Token expired"}))
	with pytest.raises(SchoolHubAuthError) as err:
		asyncio.run(_client(session).get_dashboard_stats())
	assert err.value.status == 401


def test_missing_data_is_a_data_error(make_session):
	session = make_session(fake_response(body={"success": True}))
	with pytest.raises(SchoolHubDataError):
		asyncio.run(_client(session).get_attendance_records())


def test_missing_envelope_is_a_data_error(make_session):
	session = make_session(fake_response(body=[{"id": "s1"}]))
	with pytest.raises(SchoolHubDataError):
		asyncio.run(_client(session).get_students())


def test_html_body_is_a_data_error(make_session):
	session = make_session(fake_response(text="<html>Bad gateway</html>"))
	with pytest.raises(SchoolHubDataError):
		asyncio.run(_client(session).get_classes())


def test_json_sent_as_text_is_still_parsed(make_session):
	session = make_session(fake_response(text='{"success": true, "data": [{"id": "c1", "name": "10-A", "grade": "10", "section": "A"}]}'))
	classes = asyncio.run(_client(session).get_classes())
	assert classes[0].name == "10-A"


def test_transport_failure_is_a_connection_error(make_session):
	session = make_session()
	session.request.side_effect = aiohttp.ClientConnectionError("refused")
	with pytest.raises(SchoolHubConnectionError) as err:
		asyncio.run(_client(session).get_students())
	assert "refused" in str(err.value)


def test_timeout_is_a_connection_error(make_session):
	session = make_session()
	session.request.side_effect = asyncio.TimeoutError()
	with pytest.raises(SchoolHubConnectionError):
		asyncio.run(_client(session).get_students())


def test_list_payload_may_be_wrapped(make_session, student_dto):
	session = make_session(fake_response(body=envelope({"students": [student_dto], "total": 1})))
	students = asyncio.run(_client(session).get_students({"grade": "10"}))
	assert students[0].student_id == "STU001"
	assert session.request.call_args.kwargs["params"] == {"grade": "10"}


def test_create_student_validates_before_sending(make_session):
	session = make_session()
	data = CreateStudentData(first_name="A", last_name="Lovelace", email="not-an-email", student_id="S1", age=3)
	with pytest.raises(SchoolHubValidationError) as err:
		asyncio.run(_client(session).create_student(data))
	assert set(err.value.errors) == {"first_name", "email", "student_id", "age"}
	session.request.assert_not_called()


def test_create_student_posts_payload(make_session, student_dto):
	session = make_session(fake_response(status=201, body=envelope(student_dto)))
	data = CreateStudentData(first_name="Ada", last_name="Lovelace", email="ada@example.com", student_id="STU001")
	student = asyncio.run(_client(session).create_student(data))

	assert student.id == "s1"
	args, kwargs = session.request.call_args
	assert args == ("POST", f"{BASE_URL}/students")
	assert kwargs["json"] == {
		"first_name": "Ada",
		"last_name": "Lovelace",
		"email": "ada@example.com",
		"student_id": "STU001",
		"is_active": True,
	}


def test_partial_update_accepts_a_dict(make_session, student_dto):
	session = make_session(fake_response(body=envelope(student_dto)))
	asyncio.run(_client(session).update_student("s1", {"phone": "5551234567"}))
	args, kwargs = session.request.call_args
	assert args == ("PUT", f"{BASE_URL}/students/s1")
	assert kwargs["json"] == {"phone": "5551234567"}


def test_delete_succeeds_without_data(make_session):
	session = make_session(fake_response(body={"success": True, "message": "Deleted"}))
	assert asyncio.run(_client(session).delete_teacher("t1")) is None
	assert session.request.call_args.args == ("DELETE", f"{BASE_URL}/teachers/t1")


def test_mark_attendance_posts_to_class_path(make_session):
	record = {"_id": "a1", "classId": "c1", "date": "2024-03-01", "students": [{"studentId": "s1", "status": "present"}]}
	session = make_session(fake_response(status=201, body=envelope(record)))
	data = MarkAttendanceData(class_id="c1", date="2024-03-01", students=[StudentAttendance(student_id="s1", status="present")])

	result = asyncio.run(_client(session).mark_attendance(data))

	assert result.id == "a1"
	args, kwargs = session.request.call_args
	assert args == ("POST", f"{BASE_URL}/attendance/classes/c1/attendance")
	assert kwargs["json"]["students"] == [{"student_id": "s1", "status": "present"}]


def test_mark_attendance_requires_students(make_session):
	session = make_session()
	with pytest.raises(SchoolHubValidationError) as err:
		asyncio.run(_client(session).mark_attendance(MarkAttendanceData(class_id="c1", date="2024-03-01")))
	assert "students" in err.value.errors


def test_compare_joins_child_ids(make_session):
	data = {
		"children": [
			{"childId": "k1", "childName": "Sam", "attendanceRate": 100, "totalDays": 10, "presentDays": 10},
			{"childId": "k2", "childName": "Kim", "attendanceRate": 50, "totalDays": 10, "presentDays": 5},
		],
		"average": {"attendanceRate": 75, "totalDays": 10, "presentDays": 7.5},
	}
	session = make_session(fake_response(body=envelope(data)))
	comparison = asyncio.run(_client(session).compare_children_attendance(["k1", "k2"]))

	assert comparison.average.attendance_rate == 75.0
	assert session.request.call_args.kwargs["params"] == {"childIds": "k1,k2"}


def test_stats_period_is_checked(make_session):
	session = make_session()
	with pytest.raises(SchoolHubValidationError):
		asyncio.run(_client(session).get_attendance_stats(period="decade"))
	session.request.assert_not_called()


def test_calendar_request(make_session):
	data = {"year": 2024, "month": 2, "days": [{"date": "2024-02-01", "status": "present", "classId": "c1"}, {"date": "2024-02-02"}]}
	session = make_session(fake_response(body=envelope(data)))
	calendar = asyncio.run(_client(session).get_attendance_calendar(2024, 2))

	assert calendar.days[0].has_class is True
	assert calendar.days[1].status == "no_class"
	assert session.request.call_args.kwargs["params"] == {"year": "2024", "month": "2"}


def test_records_without_dates_reach_the_caller(make_session):
	data = {
		"records": [{"status": "present"}, {"status": "absent"}, {"status": "late"}],
		"summary": {"totalDays": 3, "presentDays": 1, "absentDays": 1, "lateDays": 1, "excusedDays": 0, "attendanceRate": 33.3},
		"pagination": {"page": 1, "limit": 10, "totalPages": 1, "totalRecords": 3},
	}
	session = make_session(fake_response(body=envelope(data)))

	page = asyncio.run(_client(session).get_attendance_records())

	assert [r.status for r in page.records] == ["present", "absent", "late"]
	assert page.records[0].date is None
	assert page.summary.attendance_rate == 33.3
	assert page.pagination.total_records == 3


def test_teacher_attendance_list(make_session):
	data = {"count": 1, "page": 1, "totalPages": 1, "data": [{"_id": "a1", "classId": "c1", "date": "2024-03-01", "students": []}]}
	session = make_session(fake_response(body=envelope(data)))

	page = asyncio.run(_client(session).get_teacher_attendance(AttendanceFilters(class_id="c1", lecture_id="l1", page=1)))

	assert page.records[0].id == "a1"
	args, kwargs = session.request.call_args
	assert args == ("GET", f"{BASE_URL}/teacher/attendance")
	assert kwargs["params"] == {"classId": "c1", "lectureId": "l1", "page": "1"}


def test_attendance_by_date_missing_is_none(make_session):
	session = make_session(
		fake_response(status=404, body={"success": False, "message": "No attendance found"}),
		fake_response(body=envelope(None)),
		fake_response(body=envelope({"_id": "a1", "classId": "c1", "date": "2024-03-01"})),
	)
	client = _client(session)

	assert asyncio.run(client.get_class_attendance_by_date("c1", "2024-03-01")) is None
	assert asyncio.run(client.get_class_attendance_by_date("c1", "2024-03-01")) is None
	found = asyncio.run(client.get_class_attendance_by_date("c1", "2024-03-01"))
	assert found.id == "a1"
	assert session.request.call_args.args == ("GET", f"{BASE_URL}/attendance/classes/c1/attendance/date/2024-03-01")


def test_attendance_by_date_keeps_other_errors(make_session):
	session = make_session(fake_response(status=500, body={"success": False, "message": "Server error"}))
	with pytest.raises(SchoolHubAPIError) as err:
		asyncio.run(_client(session).get_class_attendance_by_date("c1", "2024-03-01"))
	assert err.value.status == 500


def test_class_statistics_and_history_paths(make_session):
	session = make_session(
		fake_response(body=envelope({"classId": "c1", "overall": {"totalDays": 2, "presentDays": 1}})),
		fake_response(body=envelope({"studentId": "s1", "records": [], "summary": {}})),
		fake_response(body=envelope([{"_id": "a2", "classId": "c1", "date": "2024-03-02", "lectureId": "l1"}])),
		fake_response(body=envelope({"totalClasses": 2})),
		fake_response(body=envelope({"classId": "c1"})),
	)
	client = _client(session)

	async def scenario():
		stats = await client.get_class_statistics("c1", start_date="2024-03-01")
		history = await client.get_student_attendance_history("s1", class_id="c1", limit=5)
		by_lecture = await client.get_class_attendance_by_lecture("c1", "l1")
		dashboard = await client.get_teacher_dashboard()
		teacher_stats = await client.get_teacher_class_statistics("c1")
		return stats, history, by_lecture, dashboard, teacher_stats

	stats, history, by_lecture, dashboard, teacher_stats = asyncio.run(scenario())

	assert stats.overall.attendance_rate == 50.0
	assert history.student_id == "s1"
	assert by_lecture[0].lecture_id == "l1"
	assert dashboard.total_classes == 2
	assert teacher_stats.class_id == "c1"
	calls = [(c.args[1], c.kwargs["params"]) for c in session.request.call_args_list]
	assert calls == [
		(f"{BASE_URL}/attendance/classes/c1/statistics", {"startDate": "2024-03-01"}),
		(f"{BASE_URL}/attendance/students/s1", {"classId": "c1", "limit": "5"}),
		(f"{BASE_URL}/attendance/classes/c1/attendance/lecture/l1", None),
		(f"{BASE_URL}/teacher/attendance/dashboard", None),
		(f"{BASE_URL}/teacher/attendance/statistics/c1", None),
	]

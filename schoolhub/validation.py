"""Client-side validation of create/update payloads.

Schemas run against the outgoing DTO, so error paths use the wire field
names (``address.zip_code``, ``students.0.status``).
"""

import logging
import re
from datetime import date
from typing import Any, Dict

import voluptuous as vol

from .const import (
	AGE_MAX,
	AGE_MIN,
	ATTENDANCE_STATUSES,
	CITY_MAX_LENGTH,
	CODE_MAX_LENGTH,
	CODE_MIN_LENGTH,
	DAY_OF_WEEK_OPTIONS,
	DESCRIPTION_MAX_LENGTH,
	DURATION_MAX,
	DURATION_MIN,
	EMAIL_MAX_LENGTH,
	EMPLOYMENT_TYPE_OPTIONS,
	EXPERIENCE_MAX,
	EXPERIENCE_MIN,
	GENDER_OPTIONS,
	LECTURE_TYPE_OPTIONS,
	MATERIAL_TYPE_OPTIONS,
	NAME_MAX_LENGTH,
	NAME_MIN_LENGTH,
	PHONE_MAX_LENGTH,
	PHONE_MIN_LENGTH,
	QUALIFICATION_MAX_LENGTH,
	QUALIFICATION_MIN_LENGTH,
	REMARKS_MAX_LENGTH,
	ROOM_MAX_LENGTH,
	STATE_MAX_LENGTH,
	STREET_MAX_LENGTH,
	SUBJECT_MAX_LENGTH,
	SUBJECT_MIN_LENGTH,
	TEACHER_STATUS_OPTIONS,
	TITLE_MAX_LENGTH,
	TITLE_MIN_LENGTH,
	ZIP_CODE_MAX_LENGTH,
)
from .exceptions import SchoolHubValidationError

_LOGGER = logging.getLogger(__name__)

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_PHONE_RE = re.compile(r"^\+?[\d\s\-()]+$")


def _text(min_length: int = 0, max_length: int = None, label: str = "Value") -> vol.All:
	"""Stripped string with length bounds."""
	validators = [str, vol.Strip]
	if min_length:
		validators.append(vol.Length(min=min_length, msg=f"{label} must be at least {min_length} characters"))
	if max_length is not None:
		validators.append(vol.Length(max=max_length, msg=f"{label} cannot exceed {max_length} characters"))
	return vol.All(*validators)


def _iso_date(value: Any) -> str:
	"""``YYYY-MM-DD`` calendar date."""
	try:
		date.fromisoformat(str(value))
	except ValueError as e:
		raise vol.Invalid("Date must be in YYYY-MM-DD format") from e
	return str(value)


NAME = _text(NAME_MIN_LENGTH, NAME_MAX_LENGTH, "Name")
EMAIL = vol.All(
	_text(max_length=EMAIL_MAX_LENGTH, label="Email"),
	vol.Email(msg="Please provide a valid email address"),
)
CODE = _text(CODE_MIN_LENGTH, CODE_MAX_LENGTH, "ID")
PHONE = vol.All(
	_text(PHONE_MIN_LENGTH, PHONE_MAX_LENGTH, "Phone number"),
	vol.Match(_PHONE_RE, msg="Please provide a valid phone number"),
)
TIME = vol.All(str, vol.Match(_TIME_RE, msg="Time must be in HH:MM format"))

ADDRESS_SCHEMA = vol.Schema({
	vol.Optional("street"): _text(max_length=STREET_MAX_LENGTH, label="Street"),
	vol.Optional("city"): _text(max_length=CITY_MAX_LENGTH, label="City"),
	vol.Optional("state"): _text(max_length=STATE_MAX_LENGTH, label="State"),
	vol.Optional("zip_code"): _text(max_length=ZIP_CODE_MAX_LENGTH, label="Zip code"),
})

STUDENT_SCHEMA = {
	vol.Required("first_name"): NAME,
	vol.Required("last_name"): NAME,
	vol.Required("email"): EMAIL,
	vol.Required("student_id"): CODE,
	vol.Optional("age"): vol.All(
		vol.Coerce(int),
		vol.Range(min=AGE_MIN, max=AGE_MAX, msg=f"Age must be between {AGE_MIN} and {AGE_MAX}"),
	),
	vol.Optional("gender"): vol.In(GENDER_OPTIONS, msg="Gender must be male, female, or other"),
	vol.Optional("phone"): PHONE,
	vol.Optional("address"): ADDRESS_SCHEMA,
	vol.Optional("enrolled_at"): str,
	vol.Optional("is_active"): bool,
}

TEACHER_SCHEMA = {
	vol.Required("first_name"): NAME,
	vol.Required("last_name"): NAME,
	vol.Required("email"): EMAIL,
	vol.Required("employee_id"): CODE,
	vol.Optional("phone"): PHONE,
	vol.Optional("department"): _text(max_length=NAME_MAX_LENGTH * 2, label="Department"),
	vol.Optional("qualification"): _text(QUALIFICATION_MIN_LENGTH, QUALIFICATION_MAX_LENGTH, "Qualification"),
	vol.Optional("specialization"): _text(max_length=QUALIFICATION_MAX_LENGTH, label="Specialization"),
	vol.Optional("subjects"): [_text(1, SUBJECT_MAX_LENGTH, "Subject")],
	vol.Optional("status"): vol.In(TEACHER_STATUS_OPTIONS, msg="Invalid teacher status"),
	vol.Optional("employment_type"): vol.In(EMPLOYMENT_TYPE_OPTIONS, msg="Invalid employment type"),
	vol.Optional("experience"): vol.All(
		vol.Coerce(int),
		vol.Range(
			min=EXPERIENCE_MIN,
			max=EXPERIENCE_MAX,
			msg=f"Experience must be between {EXPERIENCE_MIN} and {EXPERIENCE_MAX} years",
		),
	),
	vol.Optional("joining_date"): str,
	vol.Optional("is_active"): bool,
}

CLASS_SCHEMA = {
	vol.Required("name"): _text(1, NAME_MAX_LENGTH, "Class name"),
	vol.Required("grade"): _text(1, label="Grade"),
	vol.Required("section"): _text(1, label="Section"),
	vol.Optional("teacher_id"): str,
}

LECTURE_TEACHER_SCHEMA = vol.Schema({
	vol.Required("first_name"): NAME,
	vol.Required("last_name"): NAME,
	vol.Required("email"): EMAIL,
	vol.Required("teacher_id"): CODE,
})

LECTURE_SCHEDULE_SCHEMA = vol.Schema({
	vol.Required("day_of_week"): vol.In(DAY_OF_WEEK_OPTIONS, msg="Invalid day of week"),
	vol.Required("start_time"): TIME,
	vol.Required("end_time"): TIME,
	vol.Optional("room"): _text(max_length=ROOM_MAX_LENGTH, label="Room"),
})

LECTURE_MATERIAL_SCHEMA = vol.Schema({
	vol.Required("name"): _text(1, label="Material name"),
	vol.Required("type"): vol.In(MATERIAL_TYPE_OPTIONS, msg="Invalid material type"),
	vol.Required("url"): vol.Url(msg="Material URL must be a valid URL"),
})

LECTURE_SCHEMA = {
	vol.Required("title"): _text(TITLE_MIN_LENGTH, TITLE_MAX_LENGTH, "Title"),
	vol.Optional("description"): _text(max_length=DESCRIPTION_MAX_LENGTH, label="Description"),
	vol.Required("subject"): _text(SUBJECT_MIN_LENGTH, SUBJECT_MAX_LENGTH, "Subject"),
	vol.Required("teacher"): LECTURE_TEACHER_SCHEMA,
	vol.Required("schedule"): LECTURE_SCHEDULE_SCHEMA,
	vol.Required("duration"): vol.All(
		vol.Coerce(int),
		vol.Range(
			min=DURATION_MIN,
			max=DURATION_MAX,
			msg=f"Duration must be between {DURATION_MIN} and {DURATION_MAX} minutes",
		),
	),
	vol.Optional("type"): vol.In(LECTURE_TYPE_OPTIONS, msg="Invalid lecture type"),
	vol.Optional("materials"): [LECTURE_MATERIAL_SCHEMA],
	vol.Optional("is_active"): bool,
	vol.Optional("class_id"): str,
}

STUDENT_MARK_SCHEMA = vol.Schema({
	vol.Required("student_id"): _text(1, label="Student ID"),
	vol.Required("status"): vol.In(ATTENDANCE_STATUSES, msg="Invalid attendance status"),
	vol.Optional("remarks"): _text(max_length=REMARKS_MAX_LENGTH, label="Remarks"),
})

MARK_ATTENDANCE_SCHEMA = vol.Schema({
	vol.Required("class_id"): _text(1, label="Class ID"),
	vol.Required("date"): _iso_date,
	vol.Optional("lecture_id"): str,
	vol.Required("students"): vol.All(
		[STUDENT_MARK_SCHEMA],
		vol.Length(min=1, msg="At least one student is required"),
	),
})

UPDATE_ATTENDANCE_SCHEMA = vol.Schema({
	vol.Required("students"): vol.All(
		[STUDENT_MARK_SCHEMA],
		vol.Length(min=1, msg="At least one student is required"),
	),
})


def _all_optional(fields: Dict[Any, Any]) -> Dict[Any, Any]:
	"""Same validators with every key optional, for partial updates."""
	return {vol.Optional(key.schema): value for key, value in fields.items()}


_CREATE_SCHEMAS = {
	"student": vol.Schema(STUDENT_SCHEMA),
	"teacher": vol.Schema(TEACHER_SCHEMA),
	"class": vol.Schema(CLASS_SCHEMA),
	"lecture": vol.Schema(LECTURE_SCHEMA),
}

_UPDATE_SCHEMAS = {
	"student": vol.Schema(_all_optional(STUDENT_SCHEMA)),
	"teacher": vol.Schema(_all_optional(TEACHER_SCHEMA)),
	"class": vol.Schema(_all_optional(CLASS_SCHEMA)),
	"lecture": vol.Schema(_all_optional(LECTURE_SCHEMA)),
}


def errors_from_invalid(error: vol.Invalid) -> Dict[str, str]:
	"""Flatten voluptuous errors into ``{dotted.path: message}``."""
	found = error.errors if isinstance(error, vol.MultipleInvalid) else [error]
	errors: Dict[str, str] = {}
	for err in found:
		path = ".".join(str(part) for part in err.path) or "_root"
		# First message per field wins
		errors.setdefault(path, err.msg)
	return errors


def validate(schema: vol.Schema, payload: Dict[str, Any]) -> Dict[str, Any]:
	"""Run ``schema`` and raise ``SchoolHubValidationError`` on failure."""
	try:
		return schema(payload)
	except vol.Invalid as e:
		errors = errors_from_invalid(e)
		_LOGGER.debug(f"Payload rejected: {errors}")
		raise SchoolHubValidationError(errors) from e


def validate_student(payload: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
	return validate((_UPDATE_SCHEMAS if partial else _CREATE_SCHEMAS)["student"], payload)


def validate_teacher(payload: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
	return validate((_UPDATE_SCHEMAS if partial else _CREATE_SCHEMAS)["teacher"], payload)


def validate_class(payload: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
	return validate((_UPDATE_SCHEMAS if partial else _CREATE_SCHEMAS)["class"], payload)


def validate_lecture(payload: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
	return validate((_UPDATE_SCHEMAS if partial else _CREATE_SCHEMAS)["lecture"], payload)


def validate_mark_attendance(payload: Dict[str, Any]) -> Dict[str, Any]:
	return validate(MARK_ATTENDANCE_SCHEMA, payload)


def validate_attendance_update(payload: Dict[str, Any]) -> Dict[str, Any]:
	return validate(UPDATE_ATTENDANCE_SCHEMA, payload)

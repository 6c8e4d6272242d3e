"""Constants for the SchoolHub client."""

from datetime import timedelta

# Configuration
CONF_BASE_URL = "SCHOOLHUB_BASE_URL"
CONF_TOKEN = "SCHOOLHUB_TOKEN"
CONF_TIMEOUT = "SCHOOLHUB_TIMEOUT"
CONF_LIST_STALE = "SCHOOLHUB_LIST_STALE_SECONDS"
CONF_STATS_STALE = "SCHOOLHUB_STATS_STALE_SECONDS"

# Default values
DEFAULT_BASE_URL = "http://localhost:5000/api"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_LIST_STALE_TIME = timedelta(minutes=5)  # records, lists, child history
DEFAULT_STATS_STALE_TIME = timedelta(minutes=10)  # stats, calendar, comparison

# Endpoints
ENDPOINT_STUDENTS = "/students"
ENDPOINT_TEACHERS = "/teachers"
ENDPOINT_CLASSES = "/classes"
ENDPOINT_LECTURES = "/lectures"
ENDPOINT_STUDENT_ATTENDANCE = "/student/attendance"
ENDPOINT_PARENT_ATTENDANCE = "/parent/attendance"
ENDPOINT_CLASS_ATTENDANCE = "/attendance/classes/{class_id}/attendance"
ENDPOINT_CLASS_STATISTICS = "/attendance/classes/{class_id}/statistics"
ENDPOINT_STUDENT_HISTORY = "/attendance/students/{student_id}"
ENDPOINT_TEACHER_ATTENDANCE = "/teacher/attendance"
ENDPOINT_DASHBOARD_QUICK = "/dashboard/quick"
ENDPOINT_DASHBOARD_STATS = "/dashboard/stats"

# Attendance statuses
STATUS_PRESENT = "present"
STATUS_ABSENT = "absent"
STATUS_LATE = "late"
STATUS_EXCUSED = "excused"
STATUS_HOLIDAY = "holiday"
STATUS_NO_CLASS = "no_class"

ATTENDANCE_STATUSES = (STATUS_PRESENT, STATUS_ABSENT, STATUS_LATE, STATUS_EXCUSED)

# Trends
TREND_IMPROVING = "improving"
TREND_DECLINING = "declining"
TREND_STABLE = "stable"
TREND_THRESHOLD = 2.0  # percentage points; a difference of exactly this is stable

RATE_DECIMALS = 1
RECENT_RECORDS_LIMIT = 3

# Modification windows for teacher-marked sessions
MAX_DAYS_TO_UPDATE = 30
MAX_DAYS_TO_DELETE = 7

# Stats periods accepted by /student/attendance/stats
STATS_PERIODS = ("week", "month", "semester", "year")

# Entity option lists
GENDER_OPTIONS = ("male", "female", "other")
TEACHER_STATUS_OPTIONS = ("active", "inactive", "on-leave")
EMPLOYMENT_TYPE_OPTIONS = ("full-time", "part-time", "contract")
LECTURE_TYPE_OPTIONS = ("lecture", "lab", "seminar", "tutorial")
MATERIAL_TYPE_OPTIONS = ("document", "presentation", "video", "link")
DAY_OF_WEEK_OPTIONS = (
	"Monday",
	"Tuesday",
	"Wednesday",
	"Thursday",
	"Friday",
	"Saturday",
	"Sunday",
)

# Validation bounds
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 100
CODE_MIN_LENGTH = 3  # student id, employee id, teacher id
CODE_MAX_LENGTH = 20
PHONE_MIN_LENGTH = 10
PHONE_MAX_LENGTH = 15
AGE_MIN = 5
AGE_MAX = 100
STREET_MAX_LENGTH = 100
CITY_MAX_LENGTH = 50
STATE_MAX_LENGTH = 50
ZIP_CODE_MAX_LENGTH = 10
QUALIFICATION_MIN_LENGTH = 3
QUALIFICATION_MAX_LENGTH = 100
EXPERIENCE_MIN = 0
EXPERIENCE_MAX = 50
TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000
SUBJECT_MIN_LENGTH = 2
SUBJECT_MAX_LENGTH = 100
DURATION_MIN = 15  # minutes
DURATION_MAX = 180
ROOM_MAX_LENGTH = 50
REMARKS_MAX_LENGTH = 500

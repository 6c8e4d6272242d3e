#!/usr/bin/env python3
"""
SchoolHub Debug Script

Fetches the signed-in student's attendance list, statistics and the
current month calendar, and prints a short report.

Usage:
    python3 debug_schoolhub.py

Settings are read from the environment after loading a .env file:
    SCHOOLHUB_BASE_URL=http://localhost:5000/api
    SCHOOLHUB_TOKEN=your_api_token_here
"""

import asyncio
import getpass
import logging
import sys
from datetime import date

from schoolhub.config import load_settings
from schoolhub.coordinator import SchoolDataCoordinator
from schoolhub.exceptions import SchoolHubAuthError, SchoolHubConnectionError, SchoolHubError
from schoolhub.formatters import format_attendance_rate, format_date, month_label

# Set up detailed logging
logging.basicConfig(
	level=logging.DEBUG,
	format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


async def debug_attendance(coordinator: SchoolDataCoordinator) -> bool:
	"""Print records, statistics and calendar for the current month."""
	print("\n1️⃣ Fetching attendance records...")
	page = await coordinator.get_attendance_records()
	summary = page.summary
	print(f"   Records: {len(page.records)} of {page.pagination.total_records}")
	print(f"   Rate: {format_attendance_rate(summary.attendance_rate)} "
		f"({summary.present_days} present, {summary.absent_days} absent, "
		f"{summary.late_days} late, {summary.excused_days} excused)")
	for record in page.records[:5]:
		day = format_date(record.date) if record.date else "no date"
		print(f"   - {day}: {record.class_name or record.class_id} [{record.status}]")

	print("\n2️⃣ Fetching statistics...")
	stats = await coordinator.get_attendance_stats()
	print(f"   Overall: {format_attendance_rate(stats.overall.attendance_rate)} ({stats.overall.trend})")
	for month in stats.monthly_breakdown:
		print(f"   {month_label(month.month)}: {format_attendance_rate(month.attendance_rate)}")
	for item in stats.class_wise_breakdown:
		print(f"   {item.class_name}: {format_attendance_rate(item.attendance_rate)}")

	today = date.today()
	print(f"\n3️⃣ Fetching calendar for {today.year}-{today.month:02d}...")
	calendar = await coordinator.get_attendance_calendar(today.year, today.month)
	class_days = [d for d in calendar.days if d.has_class]
	print(f"   Server calendar: {len(calendar.days)} days, {len(class_days)} with class")

	local = await coordinator.build_month_calendar(today.year, today.month)
	local_class_days = [d for d in local.days if d.has_class]
	if len(local_class_days) != len(class_days):
		print(f"   ⚠️ Local calendar from this month's records has {len(local_class_days)} class days")
	else:
		print("   ✅ Local calendar matches the server")
	return True


async def main():
	"""Main debug function."""
	print("SchoolHub Debug Script")
	print("This will fetch attendance data with detailed logging.\n")

	try:
		settings = load_settings()
	except SchoolHubError as e:
		print(f"❌ Invalid settings: {e}")
		return

	if not settings.token:
		settings.token = getpass.getpass("SchoolHub API token (empty for none): ").strip() or None

	print(f"\n🚀 Connecting to {settings.base_url}...")

	async with SchoolDataCoordinator.from_settings(settings) as coordinator:
		try:
			await debug_attendance(coordinator)
		except SchoolHubAuthError as e:
			print(f"\n❌ Not authorised: {e.message}. Please check your token and try again.")
			return
		except SchoolHubConnectionError as e:
			print(f"\n❌ Could not reach the API: {e}")
			return

	print("\n✅ Debug complete! Check the output above for any issues.")


if __name__ == "__main__":
	try:
		asyncio.run(main())
	except KeyboardInterrupt:
		print("\n\n⚠️ Debug interrupted by user.")
		sys.exit(1)
	except Exception as e:
		print(f"\n\n❌ Unexpected error: {e}")
		sys.exit(1)

"""User-facing messages and remediation guidance for rule failures.

Messages are read by workers as young as 12, so they name the problem,
the limit, and what to change.
"""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal

GENERIC_ERROR_MESSAGE = (
    "An error occurred while checking compliance. Please contact your supervisor."
)
GENERIC_ERROR_REMEDIATION = (
    "This may be a system issue. Please try again or contact support."
)

SCHOOL_HOURS_REMEDIATION = (
    "Please adjust start/end times to be outside 7:00 AM - 3:00 PM, or mark this "
    "as a non-school day with an explanatory note."
)


def format_date(value: date) -> str:
    """Render a date as e.g. "Monday, January 15"."""
    return f"{value:%A}, {value:%B} {value.day}"


def format_time(value: time) -> str:
    """Render a wall-clock time as e.g. "3:30 PM"."""
    period = "PM" if value.hour >= 12 else "AM"
    hour = value.hour % 12 or 12
    return f"{hour}:{value.minute:02d} {period}"


def format_minutes(minutes: int) -> str:
    return format_time(time(minutes // 60, minutes % 60))


def format_hours(hours: Decimal) -> str:
    return f"{hours:.1f}"


# ============================================================================
# Hour limits
# ============================================================================


def daily_limit(band: str, limit: Decimal, hours: Decimal, day: date, day_kind: str) -> str:
    return (
        f"Daily hour limit exceeded: Ages {band} may work a maximum of {limit} hours "
        f"{day_kind}. You entered {format_hours(hours)} hours on {format_date(day)}."
    )


def daily_limit_remediation(limit: Decimal, school_day: bool) -> str:
    if school_day:
        return (
            f"Please reduce hours to {limit} or less, or verify this is not a school day "
            "and update the school day designation with a note."
        )
    return f"Please reduce hours to {limit} or less for that day."


def weekly_limit(band: str, limit: Decimal, hours: Decimal, week_kind: str) -> str:
    return (
        f"Weekly hour limit exceeded: Ages {band} may work a maximum of {limit} hours "
        f"{week_kind}. Your total is {format_hours(hours)} hours."
    )


def weekly_limit_remediation(limit: Decimal) -> str:
    return f"Please reduce your total weekly hours to {limit} or less."


def day_count(band: str, limit: int, days_worked: int) -> str:
    return (
        f"Day count limit exceeded: Ages {band} may work a maximum of {limit} days per "
        f"week. You have entries on {days_worked} days."
    )


def day_count_remediation(limit: int) -> str:
    return f"Please remove entries so you work no more than {limit} days this week."


# ============================================================================
# Time windows
# ============================================================================


def school_hours(band: str, day: date, start: time, end: time) -> str:
    return (
        f"School hours violation: Ages {band} cannot work during school hours "
        f"(7:00 AM - 3:00 PM) on school days. You logged work from {format_time(start)} "
        f"to {format_time(end)} on {format_date(day)}."
    )


def work_window(
    band: str,
    window_start: int,
    window_end: int,
    day: date,
    start: time,
    end: time,
    summer: bool = False,
) -> str:
    suffix = " (summer hours)" if summer else ""
    return (
        f"Work window violation: Ages {band} may only work between "
        f"{format_minutes(window_start)} and {format_minutes(window_end)}{suffix}. "
        f"You logged work from {format_time(start)} to {format_time(end)} on "
        f"{format_date(day)}."
    )


def work_window_remediation(window_start: int, window_end: int) -> str:
    return (
        f"Please adjust your times to be between {format_minutes(window_start)} and "
        f"{format_minutes(window_end)}."
    )


def school_night(day: date, end: time) -> str:
    return (
        "School night violation: Ages 16-17 cannot work past 10:00 PM on nights before "
        f"school days. You logged work ending at {format_time(end)} on {format_date(day)}."
    )


SCHOOL_NIGHT_REMEDIATION = "Please adjust your end time to be before 10:00 PM."


# ============================================================================
# Documentation
# ============================================================================

DOCUMENT_LABELS = {
    "parental_consent": "Parental consent",
    "work_permit": "Work permit",
    "safety_training": "Safety training",
}


def document_missing(document_type: str, employee_name: str) -> str:
    label = DOCUMENT_LABELS[document_type]
    return (
        f"{label} required: {employee_name} is under 18 and requires a valid "
        f"{label.lower()} record on file before submitting timesheets."
    )


def document_expired(document_type: str, expires_at: date) -> str:
    label = DOCUMENT_LABELS[document_type]
    return (
        f"{label} expired: The document on file expired on {format_date(expires_at)}. "
        "You cannot submit timesheets until a valid one is on file."
    )


def document_revoked(document_type: str) -> str:
    label = DOCUMENT_LABELS[document_type]
    return (
        f"{label} has been revoked. Timesheets cannot be submitted until a new "
        "one is provided."
    )


def work_permit_missing(age: int) -> str:
    return (
        "Work permit required: State law requires a Youth Employment Permit for workers "
        f"ages 14-17. You are currently {age} years old."
    )


DOCUMENT_REMEDIATION = {
    "parental_consent": "Please have your parent/guardian provide consent to your supervisor.",
    "work_permit": (
        "Please obtain a work permit from your school and have your supervisor upload it "
        "before submitting."
    ),
    "safety_training": (
        "Please contact your supervisor to complete and document your safety training."
    ),
}


# ============================================================================
# Task restrictions
# ============================================================================


def task_min_age(code: str, name: str, min_age: int, age: int, day: date) -> str:
    return (
        f"Task age restriction: Task {code} ({name}) requires a minimum age of {min_age}. "
        f"You were {age} years old on {format_date(day)}."
    )


TASK_REASSIGN_REMEDIATION = (
    "Please remove this task from your timesheet or speak with your supervisor about "
    "reassignment."
)


def minor_prohibited_task(code: str, name: str, activity: str) -> str:
    return (
        f"Task restriction: Task {code} ({name}) involves {activity}, which is "
        "prohibited for workers under 18."
    )


def minor_prohibited_remediation(activity: str) -> str:
    return (
        "Please remove this task from your timesheet. "
        f"Work involving {activity} is not permitted for minors."
    )


def solo_cash_handling(code: str, name: str, age: int) -> str:
    return (
        f"Cash handling restriction: Task {code} ({name}) involves solo cash handling, "
        f"which is prohibited for workers under 14. You are {age} years old."
    )


SOLO_CASH_REMEDIATION = (
    "Please remove this task from your timesheet or speak with your supervisor about "
    "supervised cash handling."
)


def supervisor_attestation(code: str, name: str, day: date) -> str:
    return (
        f"Supervisor attestation required: Task {code} ({name}) on {format_date(day)} "
        "requires a supervisor to be present. No supervisor name was recorded."
    )


SUPERVISOR_ATTESTATION_REMEDIATION = (
    "Please edit the entry and add the name of the supervisor who was present during "
    "this task."
)


# ============================================================================
# Breaks
# ============================================================================


def meal_break(day: date, hours: Decimal) -> str:
    return (
        f"Meal break required: You worked {format_hours(hours)} hours on "
        f"{format_date(day)}. Workers under 18 must take a 30-minute meal break when "
        "working more than 6 hours."
    )


MEAL_BREAK_REMEDIATION = (
    "Please confirm that you took a 30-minute meal break by checking the meal break "
    "confirmation box for that day."
)

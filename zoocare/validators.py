"""
Field-level validation for care tasks.

Checks run in a fixed order and stop at the first failure:
required fields, at least one schedule time, time format, recurrence dates.
"""

import re
from datetime import date, datetime
from typing import Any

from dateutil import parser as date_parser

from zoocare.errors import ValidationError
from zoocare.models import RecurrencePattern

TIME_RE = re.compile(r"^[0-9]{2}:[0-9]{2}\Z")

REQUIRED_TASK_FIELDS = {
    "type": "type",
    "animal_id": "animalId",
    "assigned_to": "assignedTo",
    "schedule_date": "scheduleDate",
}


def parse_date(value: Any, field: str) -> date:
    """
    Parse a calendar date from a ``date``, ``datetime`` or ISO 8601 string.

    Args:
        value: Raw value from the request or the stored task
        field: Wire name of the field, used in the error

    Returns:
        The calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date_parser.isoparse(str(value).strip()).date()
    except (ValueError, OverflowError):
        raise ValidationError(f"Invalid date for {field}: {value!r}", field=field)


def is_valid_time(value: str) -> bool:
    """True for a 24-hour ``HH:MM`` string."""
    if not TIME_RE.match(value):
        return False
    hours, minutes = (int(part) for part in value.split(":"))
    return hours < 24 and minutes < 60


def clean_schedule_times(times: list[str] | None) -> list[str]:
    # blank entries are dropped; the rest are matched untrimmed
    valid = [t for t in (times or []) if isinstance(t, str) and t.strip()]
    if not valid:
        raise ValidationError(
            "Please provide at least one schedule time", field="scheduleTimes"
        )
    if any(not is_valid_time(t) for t in valid):
        raise ValidationError(
            "Please ensure all times are in HH:MM format", field="scheduleTimes"
        )
    return valid


def validate_task_fields(data: dict[str, Any]) -> dict[str, Any]:
    """
    Validate a task's schedule fields before it is persisted.

    Args:
        data: snake_case task fields (request fields merged over any stored task)

    Returns:
        The normalized schedule fields: blank times dropped, dates parsed,
        recurrence fields cleared on one-off tasks
    """
    for attr, wire_name in REQUIRED_TASK_FIELDS.items():
        if not data.get(attr):
            raise ValidationError(
                "Please fill all required fields", field=wire_name
            )

    schedule_times = clean_schedule_times(data.get("schedule_times"))
    schedule_date = parse_date(data["schedule_date"], "scheduleDate")

    is_recurring = bool(data.get("is_recurring"))
    recurrence_pattern = None
    end_date = None
    if is_recurring:
        if not data.get("end_date"):
            raise ValidationError(
                "Please select an end date for recurring tasks", field="endDate"
            )
        end_date = parse_date(data["end_date"], "endDate")
        if end_date <= schedule_date:
            raise ValidationError(
                "End date must be after the schedule date", field="endDate"
            )
        recurrence_pattern = (
            data.get("recurrence_pattern") or RecurrencePattern.DAILY
        )

    return {
        "type": data["type"],
        "animal_id": data["animal_id"],
        "assigned_to": data["assigned_to"],
        "schedule_date": schedule_date,
        "schedule_times": schedule_times,
        "is_recurring": is_recurring,
        "recurrence_pattern": recurrence_pattern,
        "end_date": end_date,
    }

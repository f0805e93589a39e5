"""
Read-only expansion of a task's schedule into concrete occurrences.

Nothing is stored or dispatched; recurrence stays descriptive metadata on the
task and this only previews the slots it describes. Times are wall-clock times
at the facility and carry no timezone.
"""

from collections.abc import Iterator
from datetime import datetime, time
from itertools import islice

from dateutil import rrule

from zoocare.models import RecurrencePattern, Task

FREQUENCIES = {
    RecurrencePattern.DAILY: rrule.DAILY,
    RecurrencePattern.WEEKLY: rrule.WEEKLY,
    RecurrencePattern.MONTHLY: rrule.MONTHLY,
}


def _days(task: Task) -> Iterator[datetime]:
    start = datetime.combine(task.schedule_date, time())
    if not task.is_recurring or task.end_date is None:
        yield start
        return
    # rrule skips months that lack the start day (e.g. the 31st)
    yield from rrule.rrule(
        FREQUENCIES[task.recurrence_pattern or RecurrencePattern.DAILY],
        dtstart=start,
        until=datetime.combine(task.end_date, time()),
    )


def iter_occurrences(task: Task) -> Iterator[datetime]:
    slots = sorted(time.fromisoformat(t) for t in task.schedule_times)
    for day in _days(task):
        for slot in slots:
            yield datetime.combine(day.date(), slot)


def expand_occurrences(task: Task, limit: int) -> list[datetime]:
    return list(islice(iter_occurrences(task), limit))

"""Merge a day's time entries into work log entries and top the day up."""

import logging
from datetime import date

from models import REQUIRED_TIME_SPENT, TimeEntry, WorkLogEntry
from utils import format_hours, local_midnight

logger = logging.getLogger(__name__)

# Added on top of the deficit so the filled day never ends a few seconds short
FILL_BUFFER_SECONDS = 60


def fill_log_id(issue_id: str, day: date) -> str:
    return f"fill-{issue_id}-{day.isoformat()}"


def merge_into(existing: WorkLogEntry, entry: TimeEntry) -> WorkLogEntry:
    """Add a time entry's duration and description to an existing work log.

    A description that already appears anywhere in the combined comment is
    not repeated. This is a substring check, so a short description that
    happens to be part of a longer one is dropped too.
    """
    existing.time_spent += entry.duration
    if entry.description not in existing.comment:
        existing.comment = f"{existing.comment}\n{entry.description}"

    logger.info(
        "Added time spent for issue %s on %s: %s (entry %s -> log %s)",
        existing.issue_id,
        existing.day.isoformat(),
        format_hours(entry.duration),
        entry.entry_id,
        existing.log_id,
    )
    return existing


def aggregate_entries(entries: list[TimeEntry], resolver, day: date) -> dict[str, WorkLogEntry]:
    """Merge time entries that resolve to the same issue into one work log each.

    ``entries`` must be ordered oldest-first. The first entry seen for an
    issue lends its id as the delivery id and its start as the ``spent_on``
    anchor, so the same id is used on every run over the same entries.
    """
    work_logs: dict[str, WorkLogEntry] = {}
    keys: dict[tuple[str, date], str] = {}

    for entry in entries:
        issue_id = resolver.resolve(entry)
        if issue_id is None:
            continue

        key = keys.get((issue_id, day))
        if key is not None:
            merge_into(work_logs[key], entry)
            continue

        keys[(issue_id, day)] = entry.entry_id
        work_logs[entry.entry_id] = WorkLogEntry(
            log_id=entry.entry_id,
            issue_id=issue_id,
            time_spent=entry.duration,
            comment=entry.description,
            spent_on=entry.start,
            day=day,
        )

    return work_logs


def should_fill(day: date, today: date, fill_issue_id: str | None) -> bool:
    """Only completed weekdays get filled: never today, never weekends."""
    return bool(fill_issue_id) and day != today and day.isoweekday() <= 5


def fill_day(
    work_logs: dict[str, WorkLogEntry],
    day: date,
    fill_issue_id: str,
    fill_comment: str = "",
    required: int = REQUIRED_TIME_SPENT,
) -> dict[str, WorkLogEntry]:
    """Book the remaining time of the day on the filler issue."""
    fill_entry = None
    total = 0
    for work_log in work_logs.values():
        if work_log.issue_id == fill_issue_id:
            fill_entry = work_log
        total += work_log.time_spent

    if total >= required:
        return work_logs

    fill_time = required - total + FILL_BUFFER_SECONDS

    if fill_entry is None:
        fill_entry = WorkLogEntry(
            log_id=fill_log_id(fill_issue_id, day),
            issue_id=fill_issue_id,
            time_spent=fill_time,
            comment=fill_comment,
            spent_on=local_midnight(day),
            day=day,
        )
        work_logs[fill_entry.log_id] = fill_entry
    else:
        fill_entry.time_spent += fill_time

    logger.info("Filled %s with %s on %s", fill_issue_id, format_hours(fill_time), day.isoformat())
    return work_logs

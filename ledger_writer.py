"""Push merged work log entries to Jira, at most once per delivery id."""

import logging
from datetime import datetime

import requests

from clients import ApiError
from delivery_log import DeliveryLog, DeliveryLogError
from models import SyncState, WorkLogEntry
from patterns import Patterns
from utils import format_hours

logger = logging.getLogger(__name__)


def started_day(started: str) -> str | None:
    """Calendar day (YYYY-MM-DD) of a Jira "started" value, in its own offset."""
    match = Patterns.JIRA_STARTED.match(started or "")
    if match:
        return match.group(1)
    try:
        return datetime.fromisoformat(started).date().isoformat()
    except (TypeError, ValueError):
        return None


class LedgerWriter:
    """Creates Jira work logs and records successful deliveries."""

    def __init__(self, jira_client, delivery_log: DeliveryLog, notify_users: bool = True):
        self.jira = jira_client
        self.delivery_log = delivery_log
        self.notify_users = notify_users

    def _clear_existing(self, entry: WorkLogEntry, user_key: str, overwrite: bool) -> int:
        """Delete the user's same-day work logs when overwriting; return how many."""
        deleted = 0
        day = entry.day.isoformat()
        for work_log in self.jira.get_worklogs(entry.issue_id):
            author = work_log.get("author") or {}
            if started_day(work_log.get("started")) != day or author.get("key") != user_key:
                continue

            if not overwrite:
                # Keep what is there and add one more entry next to it
                logger.warning(
                    "Issue %s already has a work log on %s, adding another one (log %s)",
                    entry.issue_id,
                    day,
                    entry.log_id,
                )
                break

            self.jira.delete_worklog(entry.issue_id, work_log["id"])
            deleted += 1
            logger.info("Deleted existing work log %s on %s for %s", work_log["id"], entry.issue_id, day)
        return deleted

    def write(self, entry: WorkLogEntry, user_key: str, overwrite: bool, state: SyncState | None = None) -> bool:
        """Deliver one entry. Returns True when it is (or already was) in Jira."""
        state = state if state is not None else SyncState()
        try:
            if self.delivery_log.contains(entry.log_id):
                logger.debug("Log %s for %s already uploaded, skipping", entry.log_id, entry.issue_id)
                state.skipped += 1
                return True

            state.deleted += self._clear_existing(entry, user_key, overwrite)

            result = self.jira.add_worklog(
                entry.issue_id,
                entry.time_spent,
                entry.comment,
                entry.started,
                self.notify_users,
            )
            error_messages = (result or {}).get("errorMessages") or []
            if error_messages:
                logger.error(
                    "%s (issue %s, day %s, log %s)",
                    "\n".join(error_messages),
                    entry.issue_id,
                    entry.day.isoformat(),
                    entry.log_id,
                )
                state.failed += 1
                return False

            self.delivery_log.mark(entry.log_id)
        except (ApiError, DeliveryLogError, requests.RequestException, OSError, ValueError) as e:
            logger.error(
                "Could not add worklog entry for issue %s on %s (log %s): %s",
                entry.issue_id,
                entry.day.isoformat(),
                entry.log_id,
                e,
            )
            state.failed += 1
            return False

        state.created += 1
        logger.info(
            "Saved work logs entry for %s on %s: %s (log %s)",
            entry.issue_id,
            entry.day.isoformat(),
            format_hours(entry.time_spent),
            entry.log_id,
        )
        return True

    def write_all(
        self, work_logs: dict[str, WorkLogEntry], user_key: str, overwrite: bool, state: SyncState | None = None
    ) -> list[WorkLogEntry]:
        """Deliver every entry; return the ones that failed."""
        failed = []
        for entry in work_logs.values():
            if not self.write(entry, user_key, overwrite, state):
                failed.append(entry)
        return failed

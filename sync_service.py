"""Day-by-day sync of Toggl time entries into Jira work logs."""

import logging
from datetime import date

import requests

from clients import ApiError
from delivery_log import DeliveryLog
from ledger_writer import LedgerWriter
from models import SyncConfig, SyncState, TimeEntry
from resolver import EntryResolver, ProjectCache
from utils import day_bounds, format_hours, iter_days
from worklogs import aggregate_entries, fill_day, should_fill

logger = logging.getLogger(__name__)


class UserNotFoundError(Exception):
    """The configured Jira username does not exist."""


class SyncService:
    """Drives the sync: one calendar day at a time, oldest day first."""

    def __init__(
        self,
        toggl_client,
        jira_client,
        delivery_log: DeliveryLog,
        username: str,
        config: SyncConfig | None = None,
        today: date | None = None,
    ):
        self.toggl = toggl_client
        self.jira = jira_client
        self.delivery_log = delivery_log
        self.username = username
        self.config = config or SyncConfig()
        self._today = today
        self.writer = LedgerWriter(jira_client, delivery_log, self.config.notify_users)

    @property
    def today(self) -> date:
        return self._today or date.today()

    def get_user_key(self) -> str:
        user = self.jira.get_user(self.username)
        if not user or not user.get("key"):
            raise UserNotFoundError(f"No user found for username {self.username}.")
        return user["key"]

    def get_time_entries(self, day: date) -> list[TimeEntry] | None:
        """Fetch a full day of time entries, None if Toggl could not be reached."""
        start, end = day_bounds(day)
        try:
            return self.toggl.fetch_time_entries(start, end)
        except (ApiError, requests.RequestException, ValueError, KeyError) as e:
            logger.error("Failed to get time entries from Toggl for %s: %s", day.isoformat(), e)
            return None

    def sync(self, start_date: date, end_date: date, overwrite: bool = False, dry_run: bool = False) -> SyncState:
        """Sync every day in [start_date, end_date].

        Raises UserNotFoundError before touching any day when the configured
        username is unknown, and DeliveryLogError when the delivery log cannot
        be read. A failed Toggl fetch stops the run at that day
        and sets ``halted`` on the returned state.
        """
        state = SyncState()
        user_key = self.get_user_key()
        resolver = EntryResolver(self.toggl, ProjectCache(self.toggl))

        for day in iter_days(start_date, end_date):
            time_entries = self.get_time_entries(day)
            if time_entries is None:
                state.halted = True
                break

            state.days += 1
            if not time_entries:
                continue

            # Oldest first, so the first entry per issue is stable between runs
            time_entries = sorted(time_entries, key=lambda e: (e.start, e.entry_id))
            work_logs = aggregate_entries(time_entries, resolver, day)

            for work_log in work_logs.values():
                logger.info(
                    "Found time entry for issue %s on %s: %s (log %s, uploaded: %s)",
                    work_log.issue_id,
                    day.isoformat(),
                    format_hours(work_log.time_spent),
                    work_log.log_id,
                    "Yes" if self.delivery_log.contains(work_log.log_id) else "No",
                )

            if dry_run:
                state.entries.extend(work_logs.values())
                continue

            if should_fill(day, self.today, self.config.fill_issue_id):
                work_logs = fill_day(
                    work_logs,
                    day,
                    self.config.fill_issue_id,
                    self.config.fill_issue_comment,
                    self.config.required_seconds,
                )

            state.entries.extend(work_logs.values())
            self.writer.write_all(work_logs, user_key, overwrite, state)

        if dry_run:
            logger.info("Dry run finished, nothing was written.")
        else:
            logger.info("All done for today, time to go home!")
        return state

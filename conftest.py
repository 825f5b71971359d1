"""Shared fixtures: in-memory Toggl and Jira clients, temporary delivery logs."""

from datetime import datetime

import pytest

from clients import ApiError
from delivery_log import JsonFileDeliveryLog
from models import TimeEntry


def make_entry(
    entry_id="1",
    start="2024-01-02T09:00:00+00:00",
    duration=3600,
    description="Working on stuff",
    project_id="100",
    workspace_id="10",
) -> TimeEntry:
    return TimeEntry(
        entry_id=str(entry_id),
        workspace_id=str(workspace_id),
        project_id=project_id,
        description=description,
        start=datetime.fromisoformat(start),
        duration=duration,
    )


class FakeToggl:
    """Time entries keyed by day (YYYY-MM-DD), projects keyed by workspace."""

    def __init__(self, entries_by_day=None, projects=None):
        self.entries_by_day = entries_by_day or {}
        self.projects = projects or {"10": [{"id": 100, "name": "PROJ-1"}, {"id": 200, "name": "OPS-1"}]}
        self.failing_days: set[str] = set()
        self.entry_calls: list[tuple[str, str]] = []
        self.project_calls: list[str] = []

    def fetch_time_entries(self, start_date, end_date):
        self.entry_calls.append((start_date, end_date))
        day = start_date[:10]
        if day in self.failing_days:
            raise ApiError("Toggl: Server error. The service may be temporarily unavailable.", 500)
        return list(self.entries_by_day.get(day, []))

    def fetch_projects(self, workspace_id):
        self.project_calls.append(workspace_id)
        if workspace_id not in self.projects:
            raise ApiError("Toggl: Resource not found. Check the URL in config.json!", 404)
        return self.projects[workspace_id]


class FakeJira:
    """Keeps work logs per issue in memory and records every write."""

    def __init__(self, users=None):
        self.users = users if users is not None else {"jdoe": {"key": "jdoe", "displayName": "John Doe"}}
        self.worklogs: dict[str, list[dict]] = {}
        self.created: list[dict] = []
        self.deleted: list[tuple[str, str]] = []
        self.error_issues: dict[str, list[str]] = {}
        self.broken_issues: set[str] = set()
        self._next_id = 1000

    def get_user(self, username):
        return self.users.get(username)

    def get_worklogs(self, issue_id):
        if issue_id in self.broken_issues:
            raise ApiError("Jira: Server error. The service may be temporarily unavailable.", 500)
        return list(self.worklogs.get(issue_id, []))

    def add_worklog(self, issue_id, seconds, comment, started, notify_users=True):
        if issue_id in self.error_issues:
            return {"errorMessages": self.error_issues[issue_id]}
        self._next_id += 1
        work_log = {
            "id": str(self._next_id),
            "started": started,
            "timeSpentSeconds": seconds,
            "comment": comment,
            "author": {"key": "jdoe"},
        }
        self.worklogs.setdefault(issue_id, []).append(work_log)
        self.created.append({"issue": issue_id, "notify_users": notify_users, **work_log})
        return work_log

    def delete_worklog(self, issue_id, worklog_id):
        self.deleted.append((issue_id, worklog_id))
        self.worklogs[issue_id] = [wl for wl in self.worklogs.get(issue_id, []) if wl["id"] != worklog_id]

    def seed(self, issue_id, started, author_key="jdoe", seconds=1800):
        self._next_id += 1
        self.worklogs.setdefault(issue_id, []).append(
            {"id": str(self._next_id), "started": started, "timeSpentSeconds": seconds, "author": {"key": author_key}}
        )


@pytest.fixture
def toggl():
    return FakeToggl()


@pytest.fixture
def jira():
    return FakeJira()


@pytest.fixture
def delivery_log(tmp_path):
    return JsonFileDeliveryLog(tmp_path / "cache" / "logs.json")

"""Data models for Toggl to Jira sync."""

from dataclasses import dataclass, field
from datetime import date, datetime

DEFAULT_DELIVERY_LOG = "data/cache/logs.json"
REQUIRED_TIME_SPENT = 28800  # 8 hours


def parse_toggl_datetime(value: str) -> datetime:
    """Parse a Toggl ISO 8601 timestamp ("Z" suffix allowed) into local time."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return parsed.astimezone()


@dataclass(frozen=True)
class TimeEntry:
    """A time entry from Toggl."""

    entry_id: str
    workspace_id: str
    project_id: str | None
    description: str | None
    start: datetime
    duration: int  # seconds, negative while the timer is running

    @classmethod
    def from_api(cls, data: dict) -> "TimeEntry":
        # v9 uses workspace_id/project_id, v8 used wid/pid
        workspace_id = data.get("workspace_id", data.get("wid"))
        project_id = data.get("project_id", data.get("pid"))
        start = data.get("start")
        if not isinstance(start, str) or not start:
            raise ValueError(f"Time entry {data.get('id')} has no start timestamp")
        return cls(
            entry_id=str(data["id"]),
            workspace_id=str(workspace_id),
            project_id=str(project_id) if project_id is not None else None,
            description=data.get("description"),
            start=parse_toggl_datetime(start),
            duration=int(data.get("duration") or 0),
        )


@dataclass
class WorkLogEntry:
    """A merged work log entry, ready to be pushed to Jira."""

    log_id: str  # delivery identifier, from the first contributing time entry
    issue_id: str
    time_spent: int
    comment: str
    spent_on: datetime
    day: date

    @property
    def hours(self) -> float:
        return round(self.time_spent / 3600, 2)

    @property
    def started(self) -> str:
        """Jira timestamp format, e.g. 2024-01-02T09:00:00.000+0100."""
        millis = self.spent_on.microsecond // 1000
        return f"{self.spent_on:%Y-%m-%dT%H:%M:%S}.{millis:03d}{self.spent_on:%z}"


@dataclass
class SyncConfig:
    """Configuration for sync behavior."""

    fill_issue_id: str | None = None
    fill_issue_comment: str = ""
    notify_users: bool = True
    required_seconds: int = REQUIRED_TIME_SPENT
    delivery_log: str = DEFAULT_DELIVERY_LOG

    @classmethod
    def from_dict(cls, data: dict | None) -> "SyncConfig":
        data = data or {}
        return cls(
            fill_issue_id=data.get("fill_issue_id") or None,
            fill_issue_comment=data.get("fill_issue_comment", ""),
            notify_users=bool(data.get("notify_users", True)),
            required_seconds=int(data.get("required_seconds", REQUIRED_TIME_SPENT)),
            delivery_log=data.get("delivery_log", DEFAULT_DELIVERY_LOG),
        )


@dataclass
class SyncState:
    """State tracking for a sync operation."""

    days: int = 0
    entries: list[WorkLogEntry] = field(default_factory=list)
    created: int = 0
    deleted: int = 0
    failed: int = 0
    skipped: int = 0
    halted: bool = False

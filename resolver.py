"""Map Toggl time entries to Jira issue keys via their project names."""

import logging

import requests

from clients import ApiError
from models import TimeEntry
from patterns import Patterns

logger = logging.getLogger(__name__)


class ProjectCache:
    """Per-run cache of workspace id -> projects. Never persisted."""

    def __init__(self, toggl_client):
        self.toggl_client = toggl_client
        self._projects: dict[str, list[dict]] = {}

    def get(self, workspace_id: str) -> list[dict]:
        if workspace_id not in self._projects:
            self._projects[workspace_id] = self.toggl_client.fetch_projects(workspace_id)
        return self._projects[workspace_id]


class EntryResolver:
    """Resolve a time entry to the Jira issue named by its Toggl project."""

    def __init__(self, toggl_client, cache: ProjectCache | None = None):
        self.cache = cache or ProjectCache(toggl_client)

    def _projects(self, entry: TimeEntry) -> list[dict] | None:
        try:
            return self.cache.get(entry.workspace_id)
        except (ApiError, requests.RequestException) as e:
            logger.error("Failed to get projects from Toggl for workspace %s: %s", entry.workspace_id, e)
            return None

    def resolve(self, entry: TimeEntry) -> str | None:
        """Return the issue key, or None when the entry cannot be linked to Jira."""
        if not entry.description:
            logger.error("Missing description information (entry %s, start %s)", entry.entry_id, entry.start)
            return None

        if entry.project_id is None:
            logger.error(
                "Missing project for time entry %s: %r (%s)", entry.entry_id, entry.description, entry.start
            )
            return None

        projects = self._projects(entry)
        if projects is None:
            return None

        issue_id = None
        for project in projects:
            if str(project.get("id")) == entry.project_id:
                issue_id = project.get("name")
                break

        if not issue_id or Patterns.ISSUE_SEPARATOR not in issue_id:
            logger.warning(
                "Could not parse issue string %r, cannot link to Jira (entry %s)", issue_id, entry.entry_id
            )
            return None

        if entry.duration <= 0:
            logger.info("0 seconds, or timer still running, skipping (issue %s, entry %s)", issue_id, entry.entry_id)
            return None

        return issue_id

"""API clients for Toggl and Jira."""

import logging

import requests

from models import TimeEntry

logger = logging.getLogger(__name__)

TOGGL_API_URL = "https://api.track.toggl.com/api/v9"


class ApiError(Exception):
    """User-friendly API error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _handle_api_error(response: requests.Response, service: str) -> str:
    """Convert HTTP errors to user-friendly messages."""
    status = response.status_code

    messages = {
        401: f"{service}: Authentication failed. Check your API token!",
        403: f"{service}: Access denied. Check your permissions or API token!",
        404: f"{service}: Resource not found. Check the URL in config.json!",
        429: f"{service}: Too many requests. Wait a moment and try again.",
        500: f"{service}: Server error. The service may be temporarily unavailable.",
        502: f"{service}: Bad gateway. The service may be temporarily unavailable.",
        503: f"{service}: Service unavailable. Try again later.",
    }

    return messages.get(status, f"{service}: HTTP {status} - {response.reason}")


def _request(method: str, url: str, service: str, **kwargs) -> requests.Response:
    """Send a request, turning network failures into ApiError."""
    try:
        return requests.request(method, url, **kwargs)
    except requests.exceptions.ConnectionError:
        raise ApiError(f"{service}: Cannot connect to {url}. Check your network!")
    except requests.exceptions.Timeout:
        raise ApiError(f"{service}: Connection timed out. The server may be slow.")


class TogglClient:
    """Client for Toggl Track REST API."""

    def __init__(self, config: dict):
        self.token = config["toggl"]["api_token"]
        self.base_url = config["toggl"].get("base_url", TOGGL_API_URL).rstrip("/")

    def _get(self, path: str, params: dict | None = None):
        r = _request(
            "GET",
            f"{self.base_url}{path}",
            "Toggl",
            auth=(self.token, "api_token"),
            headers={"Accept": "application/json"},
            params=params,
            timeout=30,
        )
        if not r.ok:
            raise ApiError(_handle_api_error(r, "Toggl"), r.status_code)
        return r.json()

    def fetch_time_entries(self, start_date: str, end_date: str) -> list[TimeEntry]:
        """Fetch the current user's time entries within [start_date, end_date]."""
        data = self._get("/me/time_entries", {"start_date": start_date, "end_date": end_date})
        logger.debug("Toggl returned %d time entries for %s - %s", len(data or []), start_date, end_date)
        return [TimeEntry.from_api(item) for item in data or []]

    def fetch_projects(self, workspace_id: str) -> list[dict]:
        """Fetch all projects ({id, name, ...}) of a workspace."""
        return self._get(f"/workspaces/{workspace_id}/projects") or []


class JiraClient:
    """Client for Jira REST API (v2, username/key based)."""

    def __init__(self, config: dict):
        self.base_url = config["jira"]["base_url"].rstrip("/")
        self.username = config["jira"]["username"]
        self.token = config["jira"]["api_token"]

    def _call(self, method: str, path: str, **kwargs) -> requests.Response:
        kwargs.setdefault("timeout", 10)
        return _request(
            method,
            f"{self.base_url}{path}",
            "Jira",
            auth=(self.username, self.token),
            headers={"Accept": "application/json"},
            **kwargs,
        )

    def get_user(self, username: str) -> dict | None:
        """Look up a user by username, None if Jira does not know it."""
        r = self._call("GET", "/rest/api/2/user", params={"username": username})
        if r.status_code == 404:
            return None
        if not r.ok:
            raise ApiError(_handle_api_error(r, "Jira"), r.status_code)
        return r.json()

    def get_worklogs(self, issue_id: str) -> list[dict]:
        """Fetch all work log entries of an issue."""
        r = self._call("GET", f"/rest/api/2/issue/{issue_id}/worklog")
        if not r.ok:
            raise ApiError(_handle_api_error(r, "Jira"), r.status_code)
        return r.json().get("worklogs", [])

    def add_worklog(
        self, issue_id: str, seconds: int, comment: str, started: str, notify_users: bool = True
    ) -> dict:
        """Create a work log entry.

        Validation failures (4xx with a JSON body) are returned as the parsed
        body so the caller can inspect ``errorMessages``; anything else raises.
        """
        r = self._call(
            "POST",
            f"/rest/api/2/issue/{issue_id}/worklog",
            params={"adjustEstimate": "auto", "notifyUsers": "true" if notify_users else "false"},
            json={"timeSpentSeconds": seconds, "comment": comment, "started": started},
        )
        if r.ok:
            return r.json()
        if 400 <= r.status_code < 500:
            try:
                body = r.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and (body.get("errorMessages") or body.get("errors")):
                messages = list(body.get("errorMessages") or [])
                messages.extend(f"{k}: {v}" for k, v in (body.get("errors") or {}).items())
                return {"errorMessages": messages}
        raise ApiError(_handle_api_error(r, "Jira"), r.status_code)

    def delete_worklog(self, issue_id: str, worklog_id: str) -> None:
        r = self._call("DELETE", f"/rest/api/2/issue/{issue_id}/worklog/{worklog_id}")
        if not r.ok:
            raise ApiError(_handle_api_error(r, "Jira"), r.status_code)

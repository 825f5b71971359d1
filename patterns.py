"""Centralized regex patterns for worklog sync."""

import re


class Patterns:
    """Regex patterns used throughout the sync process."""

    # Separator every Jira issue key carries: PROJ-123
    ISSUE_SEPARATOR = "-"

    # Jira ticket key: ABC-123
    TICKET_KEY = re.compile(r"^([A-Z][A-Z0-9_]+-\d+)$")

    # Date format: YYYY-MM-DD
    DATE_FORMAT = re.compile(r"^\d{4}-\d{2}-\d{2}$")

    # Jira worklog "started": 2024-01-02T09:00:00.000+0100
    JIRA_STARTED = re.compile(r"^(\d{4}-\d{2}-\d{2})T\d{2}:\d{2}:\d{2}(\.\d+)?([+-]\d{4}|Z)?$")

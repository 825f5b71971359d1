"""Utility functions for Toggl to Jira sync."""

import json
import logging
import os
import sys
from datetime import date, datetime, time, timedelta
from typing import Iterator

from patterns import Patterns

# File paths
CONFIG_FILE = "config.json"

LOG_FORMAT = "[%(levelname)s] %(message)s"


def load_config(path: str = CONFIG_FILE) -> dict:
    """Load config.json with Toggl and Jira credentials."""
    with open(path) as f:
        return json.load(f)


def validate_config(config: dict) -> list[str]:
    """Validate config structure and return list of error messages.

    Returns:
        Empty list if valid, otherwise list of error messages.
    """
    errors = []

    # Check required sections
    for section in ["toggl", "jira"]:
        if section not in config:
            errors.append(f"Missing section '{section}' in config.json")

    # Check Toggl
    if "toggl" in config:
        if not config["toggl"].get("api_token"):
            errors.append("Missing toggl.api_token")

    # Check Jira credentials
    if "jira" in config:
        for key in ["base_url", "username", "api_token"]:
            if not config["jira"].get(key):
                errors.append(f"Missing jira.{key}")

    # Optional sync section
    sync = config.get("sync") or {}
    if not isinstance(sync, dict):
        errors.append("Section 'sync' must be an object")
    else:
        fill_issue = sync.get("fill_issue_id")
        if fill_issue and not Patterns.TICKET_KEY.match(fill_issue):
            errors.append(f"Invalid sync.fill_issue_id '{fill_issue}', expected e.g. OPS-1")
        required = sync.get("required_seconds")
        if required is not None and (not isinstance(required, int) or required <= 0):
            errors.append("sync.required_seconds must be a positive integer")

    return errors


def load_config_safe(path: str = CONFIG_FILE) -> dict | None:
    """Load config with user-friendly error messages.

    Returns:
        Config dict if valid, None if errors occurred.
    """
    if not os.path.exists(path):
        print(f"[!] ERROR: {path} not found!")
        print()
        print("    Create config.json based on config.example.json:")
        print("    $ cp config.example.json config.json")
        print("    $ nano config.json  # Fill in your credentials")
        print()
        return None

    try:
        config = load_config(path)
    except json.JSONDecodeError as e:
        print(f"[!] ERROR: {path} is not valid JSON!")
        print(f"    Line {e.lineno}, column {e.colno}: {e.msg}")
        print()
        print("    Check for missing commas, quotes, or brackets.")
        return None

    errors = validate_config(config)
    if errors:
        print(f"[!] ERROR: {path} is incomplete:")
        for err in errors:
            print(f"    - {err}")
        print()
        print("    See config.example.json for the required structure.")
        return None

    return config


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr, debug level when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
    # requests/urllib3 connection chatter is only useful when debugging
    logging.getLogger("urllib3").setLevel(logging.DEBUG if verbose else logging.WARNING)


def parse_date(value: str) -> date:
    """Parse YYYY-MM-DD, raising ValueError on anything else."""
    if not Patterns.DATE_FORMAT.match(value):
        raise ValueError(f"Invalid date '{value}'. Expected YYYY-MM-DD")
    return datetime.strptime(value, "%Y-%m-%d").date()


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from start to end, inclusive."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def day_bounds(day: date) -> tuple[str, str]:
    """ISO 8601 bounds [00:00:00, 23:59:59] of a day in the local timezone."""
    # Each bound gets its own offset, the day may be 23 or 25 hours long
    start = datetime.combine(day, time.min).astimezone()
    end = datetime.combine(day, time(23, 59, 59)).astimezone()
    return start.isoformat(), end.isoformat()


def local_midnight(day: date) -> datetime:
    return datetime.combine(day, time.min).astimezone()


def format_hours(seconds: int) -> str:
    return f"{round(seconds / 3600, 2)} hours"

"""Check Jira and Toggl credentials and show what a sync would see."""

import argparse
from datetime import date, timedelta

from clients import ApiError, JiraClient, TogglClient
from models import SyncConfig
from utils import CONFIG_FILE, day_bounds, load_config_safe


def check_jira(config: dict) -> str | None:
    """Look up the configured user and read the filler issue's work logs."""
    jira = JiraClient(config)
    username = config["jira"]["username"]

    print("[*] Testing Jira user lookup...")
    try:
        user = jira.get_user(username)
    except ApiError as e:
        print(f"    Error: {e}")
        return None
    if not user or not user.get("key"):
        print(f"    [!] No user found for username {username}")
        return None
    print(f"    User: {user.get('displayName', '?')} (key: {user['key']})")

    fill_issue = SyncConfig.from_dict(config.get("sync")).fill_issue_id
    if fill_issue:
        print()
        print(f"[*] Testing work log access on {fill_issue}...")
        try:
            worklogs = jira.get_worklogs(fill_issue)
        except ApiError as e:
            print(f"    Error: {e}")
            return user["key"]
        mine = [wl for wl in worklogs if (wl.get("author") or {}).get("key") == user["key"]]
        print(f"    Found {len(worklogs)} work logs, {len(mine)} of them yours")
        for wl in mine[-5:]:
            hours = wl.get("timeSpentSeconds", 0) / 3600
            print(f"      {wl.get('started', '')[:10]}: {hours:.2f}h")
    return user["key"]


def check_toggl(config: dict, days: int) -> bool:
    """Fetch recent time entries and resolve their projects."""
    toggl = TogglClient(config)
    start, _ = day_bounds(date.today() - timedelta(days=days))
    _, end = day_bounds(date.today())

    print(f"[*] Testing Toggl time entries (last {days} days)...")
    try:
        entries = toggl.fetch_time_entries(start, end)
    except ApiError as e:
        print(f"    Error: {e}")
        return False
    print(f"    Found {len(entries)} time entries")

    workspaces = sorted({e.workspace_id for e in entries})
    for workspace_id in workspaces:
        print()
        print(f"[*] Testing Toggl projects for workspace {workspace_id}...")
        try:
            projects = toggl.fetch_projects(workspace_id)
        except ApiError as e:
            print(f"    Error: {e}")
            return False
        linkable = [p for p in projects if "-" in (p.get("name") or "")]
        print(f"    Found {len(projects)} projects, {len(linkable)} named like a Jira issue")
        for project in linkable[:5]:
            print(f"      - {project['name']}")
    return True


def main():
    parser = argparse.ArgumentParser(description="Check Jira and Toggl connections")
    parser.add_argument("--config", default=CONFIG_FILE, help=f"Path to config file (default: {CONFIG_FILE})")
    parser.add_argument("--days", type=int, default=7, help="How many days of time entries to fetch")
    args = parser.parse_args()

    config = load_config_safe(args.config)
    if config is None:
        return 1

    user_key = check_jira(config)
    print()
    toggl_ok = check_toggl(config, args.days)

    print()
    if user_key and toggl_ok:
        print("[*] All connections OK.")
        return 0
    print("[!] Some checks failed, see above.")
    return 1


if __name__ == "__main__":
    exit(main())

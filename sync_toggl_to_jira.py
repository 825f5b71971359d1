"""
Sync Toggl time entries to Jira work logs.

Usage:
    # Sync today
    python sync_toggl_to_jira.py

    # Sync a date range
    python sync_toggl_to_jira.py 2024-01-01 2024-01-07

    # Show what would be synced, without writing anything
    python sync_toggl_to_jira.py 2024-01-01 2024-01-07 --dry-run

    # Replace your existing same-day work logs on the target issues
    python sync_toggl_to_jira.py 2024-01-01 --overwrite
"""

import argparse
from datetime import date

from clients import ApiError, JiraClient, TogglClient
from delivery_log import DeliveryLogError, open_delivery_log
from models import SyncConfig, SyncState
from sync_service import SyncService, UserNotFoundError
from utils import CONFIG_FILE, load_config_safe, parse_date, setup_logging


def print_summary(state: SyncState, dry_run: bool) -> None:
    print()
    print(f"[*] Days processed: {state.days}")
    print(f"    Work log entries: {len(state.entries)}")
    if dry_run:
        for entry in state.entries:
            print(f"    - {entry.issue_id} | {entry.hours}h | {entry.day.isoformat()} [log:{entry.log_id}]")
        print()
        print("Run without --dry-run to apply changes.")
        return
    print(f"    Created: {state.created}")
    print(f"    Deleted: {state.deleted}")
    print(f"    Already synced: {state.skipped}")
    print(f"    Failed: {state.failed}")
    if state.halted:
        print()
        print("[!] Stopped early: could not fetch time entries from Toggl.")


def run(start: date, end: date, overwrite: bool, dry_run: bool, config_path: str = CONFIG_FILE) -> int:
    config = load_config_safe(config_path)
    if config is None:
        return 1

    sync_config = SyncConfig.from_dict(config.get("sync"))
    service = SyncService(
        TogglClient(config),
        JiraClient(config),
        open_delivery_log(sync_config.delivery_log),
        config["jira"]["username"],
        sync_config,
    )

    print(f"[*] Syncing {start.isoformat()} - {end.isoformat()}" + (" (dry-run)" if dry_run else ""))
    try:
        state = service.sync(start, end, overwrite=overwrite, dry_run=dry_run)
    except (UserNotFoundError, ApiError, DeliveryLogError) as e:
        print(f"[!] ERROR: {e}")
        return 1

    print_summary(state, dry_run)
    return 1 if state.halted else 0


def main():
    parser = argparse.ArgumentParser(
        description="Sync Toggl time entries to Jira work logs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python sync_toggl_to_jira.py                          # today
    python sync_toggl_to_jira.py 2024-01-01 2024-01-07    # date range
    python sync_toggl_to_jira.py 2024-01-01 --dry-run     # preview only
        """,
    )

    parser.add_argument("start", nargs="?", default=None, help="First day to sync (YYYY-MM-DD), default: today")
    parser.add_argument("end", nargs="?", default=None, help="Last day to sync (YYYY-MM-DD), default: start")
    parser.add_argument(
        "--overwrite", action="store_true", help="Delete your existing same-day work logs before creating"
    )
    parser.add_argument("--dry-run", action="store_true", help="Fetch and merge only, write nothing")
    parser.add_argument("--config", default=CONFIG_FILE, help=f"Path to config file (default: {CONFIG_FILE})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()
    setup_logging(args.verbose)

    try:
        start = parse_date(args.start) if args.start else date.today()
        end = parse_date(args.end) if args.end else start
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if end < start:
        print(f"Error: End date {end.isoformat()} is before start date {start.isoformat()}")
        return 1

    return run(start, end, args.overwrite, args.dry_run, args.config)


if __name__ == "__main__":
    exit(main())

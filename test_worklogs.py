"""Tests for merging time entries and filling up the day."""

from datetime import date, datetime, timezone

import pytest

from conftest import make_entry
from models import WorkLogEntry
from resolver import EntryResolver
from worklogs import aggregate_entries, fill_day, fill_log_id, should_fill

DAY = date(2024, 1, 2)  # Tuesday


def work_log(log_id, issue_id, seconds, comment="x"):
    return WorkLogEntry(
        log_id=log_id,
        issue_id=issue_id,
        time_spent=seconds,
        comment=comment,
        spent_on=datetime(2024, 1, 2, 9, tzinfo=timezone.utc),
        day=DAY,
    )


# ---------------------------------------------------------------------------
# aggregate_entries
# ---------------------------------------------------------------------------

class TestAggregate:

    @pytest.fixture
    def resolver(self, toggl):
        return EntryResolver(toggl)

    def test_same_issue_is_merged(self, resolver):
        entries = [
            make_entry(entry_id="1", start="2024-01-02T09:00:00+00:00", duration=3600, description="Design"),
            make_entry(entry_id="2", start="2024-01-02T13:00:00+00:00", duration=1800, description="Review"),
        ]
        result = aggregate_entries(entries, resolver, DAY)

        assert list(result) == ["1"]
        merged = result["1"]
        assert merged.issue_id == "PROJ-1"
        assert merged.time_spent == 5400
        assert merged.comment == "Design\nReview"
        assert merged.comment.count("Design") == 1
        assert merged.comment.count("Review") == 1

    def test_first_entry_is_anchor(self, resolver):
        entries = [
            make_entry(entry_id="7", start="2024-01-02T08:00:00+00:00"),
            make_entry(entry_id="3", start="2024-01-02T10:00:00+00:00"),
        ]
        merged = aggregate_entries(entries, resolver, DAY)["7"]
        assert merged.log_id == "7"
        assert merged.spent_on == datetime(2024, 1, 2, 8, tzinfo=timezone.utc)
        assert merged.day == DAY

    def test_duplicate_description_is_not_repeated(self, resolver):
        entries = [
            make_entry(entry_id="1", description="Standup"),
            make_entry(entry_id="2", description="Standup"),
            make_entry(entry_id="3", description="Planning"),
        ]
        merged = aggregate_entries(entries, resolver, DAY)["1"]
        assert merged.comment == "Standup\nPlanning"
        assert merged.time_spent == 3 * 3600

    def test_substring_description_is_suppressed(self, resolver):
        entries = [
            make_entry(entry_id="1", description="Fix login form"),
            make_entry(entry_id="2", description="login"),
        ]
        assert aggregate_entries(entries, resolver, DAY)["1"].comment == "Fix login form"

    def test_different_issues_stay_apart(self, resolver):
        entries = [
            make_entry(entry_id="1", project_id="100"),
            make_entry(entry_id="2", project_id="200"),
            make_entry(entry_id="3", project_id="100"),
        ]
        result = aggregate_entries(entries, resolver, DAY)
        assert {k: v.issue_id for k, v in result.items()} == {"1": "PROJ-1", "2": "OPS-1"}
        assert result["1"].time_spent == 7200
        assert result["2"].time_spent == 3600

    def test_rejected_entries_never_appear(self, resolver):
        entries = [
            make_entry(entry_id="1", duration=-1, description="Still running"),
            make_entry(entry_id="2", duration=1800, description="Done"),
        ]
        result = aggregate_entries(entries, resolver, DAY)
        assert list(result) == ["2"]
        assert result["2"].time_spent == 1800
        assert "Still running" not in result["2"].comment

    def test_rejected_first_entry_does_not_own_the_key(self, resolver):
        entries = [
            make_entry(entry_id="1", project_id=None),
            make_entry(entry_id="2"),
        ]
        assert list(aggregate_entries(entries, resolver, DAY)) == ["2"]

    def test_empty(self, resolver):
        assert aggregate_entries([], resolver, DAY) == {}


# ---------------------------------------------------------------------------
# fill_day
# ---------------------------------------------------------------------------

class TestFillDay:

    def test_adds_filler_entry(self):
        work_logs = {"1": work_log("1", "PROJ-1", 18000)}
        result = fill_day(work_logs, DAY, "OPS-1", "General work")

        filler = result[fill_log_id("OPS-1", DAY)]
        assert filler.issue_id == "OPS-1"
        assert filler.time_spent == 28800 - 18000 + 60
        assert filler.comment == "General work"
        assert filler.day == DAY
        assert filler.spent_on.date() == DAY
        assert result["1"].time_spent == 18000

    def test_extends_existing_filler_issue(self):
        work_logs = {
            "1": work_log("1", "PROJ-1", 14400),
            "2": work_log("2", "OPS-1", 3600),
        }
        result = fill_day(work_logs, DAY, "OPS-1", "General work")
        assert list(result) == ["1", "2"]
        assert result["2"].time_spent == 3600 + (28800 - 18000 + 60)

    @pytest.mark.parametrize("seconds", [28800, 30000])
    def test_full_day_unchanged(self, seconds):
        work_logs = {"1": work_log("1", "PROJ-1", seconds)}
        result = fill_day(work_logs, DAY, "OPS-1")
        assert list(result) == ["1"]
        assert result["1"].time_spent == seconds

    def test_custom_threshold(self):
        result = fill_day({"1": work_log("1", "PROJ-1", 3600)}, DAY, "OPS-1", required=7200)
        assert result[fill_log_id("OPS-1", DAY)].time_spent == 3660

    def test_total_reaches_threshold(self):
        work_logs = {"1": work_log("1", "PROJ-1", 100), "2": work_log("2", "X-2", 200)}
        result = fill_day(work_logs, DAY, "OPS-1")
        assert sum(w.time_spent for w in result.values()) >= 28800


# ---------------------------------------------------------------------------
# should_fill
# ---------------------------------------------------------------------------

class TestShouldFill:

    TODAY = date(2024, 1, 10)  # Wednesday

    @pytest.mark.parametrize("day", [date(2024, 1, 8), date(2024, 1, 9), date(2024, 1, 5)])
    def test_past_weekday(self, day):
        assert should_fill(day, self.TODAY, "OPS-1")

    def test_not_today(self):
        assert not should_fill(self.TODAY, self.TODAY, "OPS-1")

    @pytest.mark.parametrize("day", [date(2024, 1, 6), date(2024, 1, 7)])
    def test_not_weekend(self, day):
        assert not should_fill(day, self.TODAY, "OPS-1")

    @pytest.mark.parametrize("fill_issue", [None, ""])
    def test_not_configured(self, fill_issue):
        assert not should_fill(date(2024, 1, 9), self.TODAY, fill_issue)

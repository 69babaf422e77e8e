"""Tests for week and entry lifecycle rules."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from autobiography.models.entry import Entry
from autobiography.models.prompt import Prompt
from autobiography.schemas.entry import DisplayStatus, EntryStatus, WeekRow, WeekSort
from autobiography.services.lifecycle import (
    TOTAL_WEEKS,
    DuplicateEntryError,
    aggregate_counts,
    all_completed,
    build_catalog_rows,
    build_week_rows,
    current_week,
    display_status,
    group_week_rows,
    last_activity,
    normalize_status,
    open_weeks,
    past_entries,
    projected_end_date,
    scheduled_date,
    sort_week_rows,
    toggle_complete,
)


def make_prompt(week: int, title: str | None = None) -> Prompt:
    return Prompt(
        prompt_key=f"p{week:02d}",
        week=week,
        title=title if title is not None else f"Prompt {week}",
        category="",
        coaching="",
        questions=[],
        helpful_followups=[],
        active=True,
    )


def make_entry(
    week: int,
    content: str = "Some words",
    status: str | None = "in_progress",
    title: str | None = None,
    updated_at: datetime | None = None,
    created_at: datetime | None = None,
    id: int | None = None,
) -> Entry:
    return Entry(
        id=id if id is not None else week,
        user_id=1,
        week=week,
        title=title,
        content=content,
        status=status,
        created_at=created_at,
        updated_at=updated_at,
    )


def full_catalog() -> list[Prompt]:
    return [make_prompt(w) for w in range(1, TOTAL_WEEKS + 1)]


def make_row(
    week: int,
    status: DisplayStatus = DisplayStatus.OPEN,
    title: str | None = None,
    updated_at: datetime | None = None,
) -> WeekRow:
    return WeekRow(
        week=week,
        title=title or f"Prompt {week}",
        display_status=status,
        updated_at=updated_at,
    )


class TestCurrentWeek:
    """Tests for current week derivation."""

    def test_missing_start_date_is_week_one(self) -> None:
        assert current_week(None, datetime(2025, 6, 1, tzinfo=UTC)) == 1

    def test_first_day_is_week_one(self) -> None:
        assert current_week(date(2025, 1, 1), datetime(2025, 1, 1, 23, 59, tzinfo=UTC)) == 1

    def test_day_seven_starts_week_two(self) -> None:
        start = date(2025, 1, 1)
        assert current_week(start, datetime(2025, 1, 7, 23, 59, tzinfo=UTC)) == 1
        assert current_week(start, datetime(2025, 1, 8, 0, 0, tzinfo=UTC)) == 2

    def test_partial_days_never_advance(self) -> None:
        start = date(2025, 1, 1)
        just_before = datetime(2025, 1, 8, tzinfo=UTC) - timedelta(microseconds=1)
        assert current_week(start, just_before) == 1

    def test_future_start_date_is_week_one(self) -> None:
        assert current_week(date(2025, 3, 1), datetime(2025, 1, 1, tzinfo=UTC)) == 1

    def test_clamped_to_fifty_two(self) -> None:
        assert current_week(date(2020, 1, 1), datetime(2025, 1, 1, tzinfo=UTC)) == 52

    def test_last_week_boundary(self) -> None:
        start = date(2025, 1, 1)
        week_52 = datetime.combine(start, datetime.min.time(), tzinfo=UTC) + timedelta(weeks=51)
        assert current_week(start, week_52) == 52
        assert current_week(start, week_52 - timedelta(seconds=1)) == 51

    def test_naive_datetime_treated_as_utc(self) -> None:
        assert current_week(date(2025, 1, 1), datetime(2025, 1, 15, 12, 0)) == 3

    def test_other_timezones_converted(self) -> None:
        # 2025-01-08 01:00 in UTC+02:00 is still 2025-01-07 in UTC
        plus_two = timezone(timedelta(hours=2))
        assert current_week(date(2025, 1, 1), datetime(2025, 1, 8, 1, 0, tzinfo=plus_two)) == 1

    def test_date_argument(self) -> None:
        assert current_week(date(2025, 1, 1), date(2025, 1, 22)) == 4

    @pytest.mark.parametrize("days", [0, 1, 6, 7, 13, 14, 100, 356, 357, 500, 5000])
    def test_always_within_plan(self, days: int) -> None:
        start = date(2024, 2, 29)
        week = current_week(start, start + timedelta(days=days))
        assert 1 <= week <= 52
        assert week == min(52, days // 7 + 1)


class TestSchedule:
    """Tests for scheduled and projected dates."""

    def test_scheduled_date(self) -> None:
        assert scheduled_date(date(2025, 1, 1), 1) == date(2025, 1, 1)
        assert scheduled_date(date(2025, 1, 1), 3) == date(2025, 1, 15)

    def test_scheduled_date_without_start(self) -> None:
        assert scheduled_date(None, 5) is None

    def test_projected_end_date(self) -> None:
        assert projected_end_date(date(2025, 1, 1)) == date(2025, 12, 24)
        assert projected_end_date(None) is None


class TestStatus:
    """Tests for status normalization and display status."""

    def test_only_exact_complete_is_complete(self) -> None:
        assert normalize_status("complete") is EntryStatus.COMPLETE
        assert normalize_status(EntryStatus.COMPLETE) is EntryStatus.COMPLETE

    @pytest.mark.parametrize("raw", ["draft", "in_progress", "", None, "Complete", "COMPLETE"])
    def test_everything_else_is_in_progress(self, raw: str | None) -> None:
        assert normalize_status(raw) is EntryStatus.IN_PROGRESS

    def test_missing_entry_is_open(self) -> None:
        assert display_status(None) is DisplayStatus.OPEN

    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    def test_blank_content_is_open_even_if_complete(self, content: str) -> None:
        entry = make_entry(1, content=content, status="complete")
        assert display_status(entry) is DisplayStatus.OPEN

    def test_written_entry_in_progress(self) -> None:
        assert display_status(make_entry(1, status="draft")) is DisplayStatus.IN_PROGRESS

    def test_written_entry_complete(self) -> None:
        assert display_status(make_entry(1, status="complete")) is DisplayStatus.COMPLETE


class TestToggleComplete:
    """Tests for completion toggling."""

    def test_in_progress_becomes_complete(self) -> None:
        assert toggle_complete(make_entry(1, status="in_progress")) is EntryStatus.COMPLETE

    def test_legacy_draft_becomes_complete(self) -> None:
        assert toggle_complete(make_entry(1, status="draft")) is EntryStatus.COMPLETE

    def test_complete_becomes_in_progress(self) -> None:
        assert toggle_complete(make_entry(1, status="complete")) is EntryStatus.IN_PROGRESS

    def test_missing_entry_cannot_toggle(self) -> None:
        assert toggle_complete(None) is None

    def test_blank_entry_cannot_toggle(self) -> None:
        assert toggle_complete(make_entry(1, content="  ", status="complete")) is None

    def test_double_toggle_restores_status(self) -> None:
        entry = make_entry(1, status="draft")
        entry.status = toggle_complete(entry).value
        entry.status = toggle_complete(entry).value
        assert normalize_status(entry.status) is EntryStatus.IN_PROGRESS


class TestBuildWeekRows:
    """Tests for joining prompts with entries."""

    def test_one_row_per_prompt(self) -> None:
        prompts = [make_prompt(3), make_prompt(1), make_prompt(2)]
        entries = [make_entry(2), make_entry(3, status="complete")]

        rows = build_week_rows(prompts, entries)

        assert [r.week for r in rows] == [1, 2, 3]
        assert [r.display_status for r in rows] == [
            DisplayStatus.OPEN,
            DisplayStatus.IN_PROGRESS,
            DisplayStatus.COMPLETE,
        ]
        assert [r.can_toggle for r in rows] == [False, True, True]

    def test_entry_title_and_presence(self) -> None:
        prompts = [make_prompt(1), make_prompt(2), make_prompt(3)]
        entries = [make_entry(2, title="The farm"), make_entry(3, content="")]

        rows = build_week_rows(prompts, entries)

        assert [r.has_entry for r in rows] == [False, True, True]
        assert [r.entry_title for r in rows] == [None, "The farm", None]
        # A blank entry still exists but displays as Open
        assert rows[2].display_status is DisplayStatus.OPEN

    def test_entries_without_prompt_are_ignored(self) -> None:
        rows = build_week_rows([make_prompt(1)], [make_entry(40)])
        assert len(rows) == 1
        assert rows[0].display_status is DisplayStatus.OPEN

    def test_untitled_prompt_falls_back_to_week_label(self) -> None:
        rows = build_week_rows([make_prompt(4, title="")], [])
        assert rows[0].title == "Week 4"

    def test_scheduled_dates(self) -> None:
        rows = build_week_rows([make_prompt(1), make_prompt(2)], [], date(2025, 1, 1))
        assert rows[1].scheduled_date == date(2025, 1, 8)

    def test_updated_at_falls_back_to_created_at(self) -> None:
        created = datetime(2025, 1, 2, 9, 0)
        rows = build_week_rows([make_prompt(1)], [make_entry(1, created_at=created)])
        assert rows[0].updated_at == created

    def test_duplicate_week_raises(self) -> None:
        entries = [make_entry(5, id=1), make_entry(5, id=2)]
        with pytest.raises(DuplicateEntryError) as exc_info:
            build_week_rows([make_prompt(5)], entries)
        assert exc_info.value.week == 5


class TestBuildCatalogRows:
    """Tests for administrator catalog rows."""

    def test_empty_catalog_shows_full_plan(self) -> None:
        rows = build_catalog_rows([], [make_entry(10)])
        assert len(rows) == 52
        assert rows[9].title == "Week 10"
        assert rows[9].display_status is DisplayStatus.IN_PROGRESS

    def test_partial_catalog_fills_missing_titles(self) -> None:
        rows = build_catalog_rows([make_prompt(1, "Childhood"), make_prompt(3, "School")], [])
        assert [r.week for r in rows] == [1, 2]
        assert [r.title for r in rows] == ["Childhood", "Week 2"]


class TestSortAndGroup:
    """Tests for row ordering and grouping."""

    def test_sort_by_title_case_insensitive(self) -> None:
        rows = [make_row(1, title="beta"), make_row(2, title="Alpha"), make_row(3, title="gamma")]
        assert [r.week for r in sort_week_rows(rows, WeekSort.TITLE)] == [2, 1, 3]

    def test_sort_by_title_ties_keep_week_order(self) -> None:
        rows = [make_row(3, title="Same"), make_row(1, title="same")]
        assert [r.week for r in sort_week_rows(rows, WeekSort.TITLE)] == [1, 3]

    def test_sort_by_updated_most_recent_first(self) -> None:
        rows = [
            make_row(1, updated_at=datetime(2025, 1, 1)),
            make_row(2),
            make_row(3, updated_at=datetime(2025, 3, 1)),
            make_row(4, updated_at=datetime(2025, 2, 1)),
        ]
        assert [r.week for r in sort_week_rows(rows, WeekSort.UPDATED)] == [3, 4, 1, 2]

    def test_default_sort_is_week(self) -> None:
        rows = [make_row(2), make_row(1)]
        assert [r.week for r in sort_week_rows(rows)] == [1, 2]

    def test_group_splits_complete(self) -> None:
        rows = [
            make_row(3, DisplayStatus.COMPLETE),
            make_row(1, DisplayStatus.OPEN),
            make_row(2, DisplayStatus.IN_PROGRESS),
        ]
        not_complete, complete = group_week_rows(rows)
        assert [r.week for r in not_complete] == [1, 2]
        assert [r.week for r in complete] == [3]


class TestAggregateCounts:
    """Tests for progress counts."""

    def test_counts_sum_to_rows(self) -> None:
        prompts = full_catalog()
        entries = [make_entry(1, status="complete"), make_entry(2), make_entry(3, content="")]

        counts = aggregate_counts(build_week_rows(prompts, entries))

        assert counts.complete_count == 1
        assert counts.in_progress_count == 1
        assert counts.open_count == 50
        assert counts.open_count + counts.in_progress_count + counts.complete_count == 52

    def test_percent_uses_fixed_plan_length(self) -> None:
        prompts = [make_prompt(w) for w in range(1, 11)]
        entries = [make_entry(w, status="complete") for w in range(1, 11)]

        counts = aggregate_counts(build_week_rows(prompts, entries))

        assert counts.complete_count == 10
        assert counts.percent_complete == 19

    def test_percent_rounds(self) -> None:
        rows = [make_row(w, DisplayStatus.COMPLETE) for w in range(1, 27)]
        assert aggregate_counts(rows).percent_complete == 50

    def test_empty(self) -> None:
        counts = aggregate_counts([])
        assert counts.percent_complete == 0
        assert counts.open_count == 0


class TestAllCompleted:
    """Tests for the all-completed flag."""

    def test_full_catalog_all_complete(self) -> None:
        entries = [make_entry(w, status="complete") for w in range(1, 53)]
        assert all_completed(build_week_rows(full_catalog(), entries)) is True

    def test_one_in_progress(self) -> None:
        entries = [make_entry(w, status="complete") for w in range(1, 52)]
        entries.append(make_entry(52, status="draft"))
        assert all_completed(build_week_rows(full_catalog(), entries)) is False

    def test_partial_catalog_never_completed(self) -> None:
        prompts = [make_prompt(w) for w in range(1, 11)]
        entries = [make_entry(w, status="complete") for w in range(1, 11)]
        assert all_completed(build_week_rows(prompts, entries)) is False

    def test_empty(self) -> None:
        assert all_completed([]) is False


class TestOpenWeeks:
    """Tests for weeks still needing work."""

    def test_open_and_in_progress_included(self) -> None:
        prompts = [make_prompt(w) for w in range(1, 5)]
        entries = [make_entry(1, status="complete"), make_entry(2), make_entry(4, content=" ")]

        result = open_weeks(build_week_rows(prompts, entries))

        assert [w.week for w in result] == [2, 3, 4]
        assert result[0].title == "Prompt 2"


class TestPastEntries:
    """Tests for the past entries list."""

    def test_only_written_entries(self) -> None:
        prompts = [make_prompt(1, "Childhood"), make_prompt(2, "School")]
        entries = [make_entry(1, title="Home"), make_entry(2, content="")]

        result = past_entries(prompts, entries)

        assert len(result) == 1
        assert result[0].prompt_title == "Childhood"
        assert result[0].entry_title == "Home"

    def test_missing_prompt_uses_week_label(self) -> None:
        result = past_entries([], [make_entry(7)])
        assert result[0].prompt_title == "Week 7"
        assert result[0].entry_title == ""

    def test_sort_by_updated(self) -> None:
        entries = [
            make_entry(1, updated_at=datetime(2025, 1, 1)),
            make_entry(2, updated_at=datetime(2025, 2, 1)),
            make_entry(3),
        ]
        result = past_entries([], entries, WeekSort.UPDATED)
        assert [p.week for p in result] == [2, 1, 3]

    def test_sort_by_title(self) -> None:
        prompts = [make_prompt(1, "b"), make_prompt(2, "A")]
        result = past_entries(prompts, [make_entry(1), make_entry(2)], WeekSort.TITLE)
        assert [p.week for p in result] == [2, 1]


class TestLastActivity:
    """Tests for last activity."""

    def test_latest_of_updated_or_created(self) -> None:
        entries = [
            make_entry(1, updated_at=datetime(2025, 1, 5)),
            make_entry(2, created_at=datetime(2025, 2, 1)),
        ]
        assert last_activity(entries) == datetime(2025, 2, 1)

    def test_no_entries(self) -> None:
        assert last_activity([]) is None

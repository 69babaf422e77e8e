"""Week and entry lifecycle rules.

Pure functions shared by every view: which week a writer is on, how an
entry's stored status is displayed, and how the prompt catalog is joined
against one user's entries and summarized. Nothing here touches the
database; callers load prompts and entries and pass them in.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime, time, timedelta
from typing import TYPE_CHECKING

from autobiography.schemas.entry import (
    DisplayStatus,
    EntryStatus,
    OpenWeek,
    PastEntry,
    WeekCounts,
    WeekRow,
    WeekSort,
)

if TYPE_CHECKING:
    from autobiography.models.entry import Entry
    from autobiography.models.prompt import Prompt

TOTAL_WEEKS = 52
DAYS_PER_WEEK = 7


class DuplicateEntryError(ValueError):
    """Raised when one user has more than one entry for the same week."""

    def __init__(self, week: int) -> None:
        super().__init__(f"More than one entry found for week {week}")
        self.week = week


def clamp_week(week: int) -> int:
    """Clamp a week number into 1..52."""
    return max(1, min(TOTAL_WEEKS, week))


def current_week(start_date: date | None, now: date | datetime) -> int:
    """Return the active week number for a writer.

    Whole days are counted from UTC midnight of ``start_date``; partial days
    never advance the week. A missing start date means week 1, and start
    dates in the future also resolve to week 1. After 52 weeks the result
    stays at 52.
    """
    if start_date is None:
        return 1

    start = datetime.combine(start_date, time.min, tzinfo=UTC)
    if isinstance(now, datetime):
        moment = now if now.tzinfo is not None else now.replace(tzinfo=UTC)
    else:
        moment = datetime.combine(now, time.min, tzinfo=UTC)

    elapsed_days = (moment - start) // timedelta(days=1)
    return clamp_week(elapsed_days // DAYS_PER_WEEK + 1)


def scheduled_date(start_date: date | None, week: int) -> date | None:
    """Date on which ``week`` opens, or None without a start date."""
    if start_date is None:
        return None
    return start_date + timedelta(days=(week - 1) * DAYS_PER_WEEK)


def projected_end_date(start_date: date | None) -> date | None:
    """Date on which the final week opens."""
    return scheduled_date(start_date, TOTAL_WEEKS)


def normalize_status(raw: str | EntryStatus | None) -> EntryStatus:
    """Map a stored status onto the two persisted states.

    Only the exact value ``"complete"`` is complete. Every other value,
    including the legacy ``"draft"``, blanks and None, is in progress.
    """
    if raw == EntryStatus.COMPLETE.value:
        return EntryStatus.COMPLETE
    return EntryStatus.IN_PROGRESS


def has_content(entry: Entry | None) -> bool:
    """Whether an entry exists and has non-blank content."""
    if entry is None:
        return False
    return bool((entry.content or "").strip())


def display_status(entry: Entry | None) -> DisplayStatus:
    """Derive the displayed status of one week.

    A missing entry and an entry whose content is blank are both Open,
    whatever status is stored on the row.
    """
    if not has_content(entry):
        return DisplayStatus.OPEN
    if normalize_status(entry.status) is EntryStatus.COMPLETE:
        return DisplayStatus.COMPLETE
    return DisplayStatus.IN_PROGRESS


def toggle_complete(entry: Entry | None) -> EntryStatus | None:
    """Return the status an entry flips to, or None when it cannot flip.

    Entries without content never become complete.
    """
    if not has_content(entry):
        return None
    if normalize_status(entry.status) is EntryStatus.COMPLETE:
        return EntryStatus.IN_PROGRESS
    return EntryStatus.COMPLETE


def index_entries_by_week(entries: Iterable[Entry]) -> dict[int, Entry]:
    """Index one user's entries by week.

    Raises:
        DuplicateEntryError: If two entries share a week.
    """
    by_week: dict[int, Entry] = {}
    for entry in entries:
        if entry.week in by_week:
            raise DuplicateEntryError(entry.week)
        by_week[entry.week] = entry
    return by_week


def _week_row(
    week: int,
    title: str,
    entry: Entry | None,
    start_date: date | None,
) -> WeekRow:
    status = display_status(entry)
    updated = entry_title = None
    if entry is not None:
        updated = entry.updated_at or entry.created_at
        entry_title = entry.title
    return WeekRow(
        week=week,
        title=title,
        display_status=status,
        scheduled_date=scheduled_date(start_date, week),
        updated_at=updated,
        entry_title=entry_title,
        has_entry=entry is not None,
        can_toggle=status is not DisplayStatus.OPEN,
    )


def build_week_rows(
    prompts: Iterable[Prompt],
    entries: Iterable[Entry],
    start_date: date | None = None,
) -> list[WeekRow]:
    """Join the prompt catalog against one user's entries.

    Returns exactly one row per prompt, ordered by week. ``entries`` must
    already be limited to a single user.
    """
    by_week = index_entries_by_week(entries)
    rows = [
        _week_row(
            prompt.week,
            prompt.title or f"Week {prompt.week}",
            by_week.get(prompt.week),
            start_date,
        )
        for prompt in prompts
    ]
    return sort_week_rows(rows, WeekSort.WEEK)


def build_catalog_rows(
    prompts: Sequence[Prompt],
    entries: Iterable[Entry],
    start_date: date | None = None,
) -> list[WeekRow]:
    """Rows for weeks 1..N, where N is the catalog size (52 if empty).

    Weeks missing from the catalog get a synthesized "Week N" title, so an
    administrator still sees a user's writing while prompts are being seeded.
    """
    by_week = index_entries_by_week(entries)
    titles = {p.week: p.title or f"Week {p.week}" for p in prompts}
    count = len(prompts) or TOTAL_WEEKS
    return [
        _week_row(week, titles.get(week, f"Week {week}"), by_week.get(week), start_date)
        for week in range(1, count + 1)
    ]


def sort_week_rows(rows: Iterable[WeekRow], order: WeekSort = WeekSort.WEEK) -> list[WeekRow]:
    """Sort week rows by week, by title (case-insensitive) or by last update.

    Most recently updated rows come first; rows never updated sort last.
    """
    by_week = sorted(rows, key=lambda r: r.week)
    if order is WeekSort.TITLE:
        return sorted(by_week, key=lambda r: r.title.casefold())
    if order is WeekSort.UPDATED:
        dated = [r for r in by_week if r.updated_at is not None]
        undated = [r for r in by_week if r.updated_at is None]
        return sorted(dated, key=lambda r: r.updated_at, reverse=True) + undated
    return by_week


def group_week_rows(rows: Iterable[WeekRow]) -> tuple[list[WeekRow], list[WeekRow]]:
    """Split rows into (not complete, complete), each ordered by week."""
    ordered = sort_week_rows(rows, WeekSort.WEEK)
    not_complete = [r for r in ordered if r.display_status is not DisplayStatus.COMPLETE]
    complete = [r for r in ordered if r.display_status is DisplayStatus.COMPLETE]
    return not_complete, complete


def aggregate_counts(rows: Iterable[WeekRow]) -> WeekCounts:
    """Count rows per display status.

    The percentage is always out of the 52-week plan, not out of the number
    of rows, so a partially seeded catalog reports a low percentage.
    """
    counts = dict.fromkeys(DisplayStatus, 0)
    for row in rows:
        counts[row.display_status] += 1

    complete = counts[DisplayStatus.COMPLETE]
    return WeekCounts(
        open_count=counts[DisplayStatus.OPEN],
        in_progress_count=counts[DisplayStatus.IN_PROGRESS],
        complete_count=complete,
        percent_complete=round(complete / TOTAL_WEEKS * 100),
    )


def all_completed(rows: Sequence[WeekRow]) -> bool:
    """True only for a full 52-row catalog with every row complete."""
    if len(rows) != TOTAL_WEEKS:
        return False
    return all(r.display_status is DisplayStatus.COMPLETE for r in rows)


def open_weeks(rows: Iterable[WeekRow]) -> list[OpenWeek]:
    """Weeks still needing work: Open and In Progress rows alike."""
    return [
        OpenWeek(week=r.week, title=r.title)
        for r in sort_week_rows(rows, WeekSort.WEEK)
        if r.display_status is not DisplayStatus.COMPLETE
    ]


def past_entries(
    prompts: Iterable[Prompt],
    entries: Iterable[Entry],
    order: WeekSort = WeekSort.WEEK,
) -> list[PastEntry]:
    """Entries with written content, labelled with their prompt title."""
    titles = {p.week: p.title for p in prompts}
    written = [
        PastEntry(
            id=e.id,
            week=e.week,
            prompt_title=titles.get(e.week) or f"Week {e.week}",
            entry_title=e.title or "",
            updated_at=e.updated_at,
        )
        for e in index_entries_by_week(entries).values()
        if has_content(e)
    ]
    written.sort(key=lambda p: p.week)
    if order is WeekSort.TITLE:
        written.sort(key=lambda p: p.prompt_title.casefold())
    elif order is WeekSort.UPDATED:
        dated = sorted(
            (p for p in written if p.updated_at is not None),
            key=lambda p: p.updated_at,
            reverse=True,
        )
        written = dated + [p for p in written if p.updated_at is None]
    return written


def last_activity(entries: Iterable[Entry]) -> datetime | None:
    """Most recent update (or creation) time across entries."""
    times = [e.updated_at or e.created_at for e in entries]
    times = [t for t in times if t is not None]
    return max(times, default=None)

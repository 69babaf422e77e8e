"""Tests for draft tracking and the auto-save timer."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from autobiography.models.entry import Entry
from autobiography.schemas.entry import EntryStatus
from autobiography.services.drafts import AutosaveTimer, Draft


def create_mock_entry(content: str = "Old text", status: str | None = "draft") -> MagicMock:
    """Create a mock Entry object."""
    mock_entry = MagicMock(spec=Entry)
    mock_entry.week = 3
    mock_entry.title = "Title"
    mock_entry.content = content
    mock_entry.status = status
    mock_entry.life_stage = None
    mock_entry.tone = None
    mock_entry.key_people = "Mum"
    mock_entry.locations = None
    mock_entry.themes = None
    return mock_entry


class TestDraft:
    """Tests for dirty tracking and the leave guard."""

    def test_new_draft_is_clean(self) -> None:
        draft = Draft(week=1)
        assert draft.is_dirty is False
        assert draft.has_text is False

    def test_from_entry_normalizes_status(self) -> None:
        draft = Draft.from_entry(3, create_mock_entry())
        assert draft.status is EntryStatus.IN_PROGRESS
        assert draft.key_people == "Mum"
        assert draft.life_stage == ""
        assert draft.is_dirty is False

    def test_from_missing_entry(self) -> None:
        draft = Draft.from_entry(5, None)
        assert draft.week == 5
        assert draft.content == ""

    def test_edit_marks_dirty(self) -> None:
        draft = Draft(week=1)
        draft.content = "Once upon a time"
        assert draft.is_dirty is True
        assert draft.has_text is True

    def test_reverting_edit_is_clean(self) -> None:
        draft = Draft(week=1, content="a")
        draft.content = "b"
        draft.content = "a"
        assert draft.is_dirty is False

    def test_whitespace_is_not_text(self) -> None:
        draft = Draft(week=1, title="  ", content="\n")
        assert draft.has_text is False

    def test_mark_saved(self) -> None:
        draft = Draft(week=1)
        draft.title = "Title"
        draft.mark_saved()
        assert draft.is_dirty is False

    def test_confirm_leave_clean_skips_prompt(self) -> None:
        confirm = MagicMock(return_value=False)
        assert Draft(week=1).confirm_leave(confirm) is True
        confirm.assert_not_called()

    def test_confirm_leave_dirty_declined(self) -> None:
        draft = Draft(week=1)
        draft.content = "unsaved"
        assert draft.confirm_leave(lambda: False) is False

    def test_confirm_leave_dirty_accepted(self) -> None:
        draft = Draft(week=1)
        draft.content = "unsaved"
        assert draft.confirm_leave(lambda: True) is True

    def test_to_save_request(self) -> None:
        draft = Draft(week=2, title=" My title ", content="Text", themes="  ")
        body = draft.to_save_request(autosave=True)
        assert body.title == "My title"
        assert body.themes is None
        assert body.autosave is True
        assert body.status is EntryStatus.IN_PROGRESS


class TestAutosaveTimer:
    """Tests for timer-driven saves."""

    async def test_tick_saves_dirty_draft(self) -> None:
        draft = Draft(week=1)
        draft.content = "New text"
        save = AsyncMock()
        timer = AutosaveTimer(draft, save, interval=60)

        assert await timer.tick() is True
        save.assert_awaited_once_with(draft)
        assert draft.is_dirty is False

    async def test_tick_skips_clean_draft(self) -> None:
        save = AsyncMock()
        timer = AutosaveTimer(Draft(week=1, content="Saved"), save, interval=60)

        assert await timer.tick() is False
        save.assert_not_awaited()

    async def test_tick_skips_draft_without_text(self) -> None:
        draft = Draft(week=1)
        draft.tone = "Warm"
        save = AsyncMock()
        timer = AutosaveTimer(draft, save, interval=60)

        assert await timer.tick() is False
        save.assert_not_awaited()

    async def test_tick_swallows_errors(self) -> None:
        draft = Draft(week=1)
        draft.content = "New text"
        save = AsyncMock(side_effect=RuntimeError("network down"))
        timer = AutosaveTimer(draft, save, interval=60)

        assert await timer.tick() is False
        assert draft.is_dirty is True

    async def test_save_now_propagates_errors(self) -> None:
        draft = Draft(week=1)
        draft.content = "New text"
        timer = AutosaveTimer(draft, AsyncMock(side_effect=RuntimeError("boom")), interval=60)

        with pytest.raises(RuntimeError, match="boom"):
            await timer.save_now()

    async def test_edit_during_save_stays_dirty(self) -> None:
        draft = Draft(week=1)
        draft.content = "First"

        async def slow_save(d: Draft) -> None:
            d.content = "First and more"

        timer = AutosaveTimer(draft, slow_save, interval=60)

        assert await timer.tick() is True
        assert draft.is_dirty is True

    async def test_overlapping_save_dropped(self) -> None:
        draft = Draft(week=1)
        draft.content = "Text"
        release = asyncio.Event()
        calls = 0

        async def blocking_save(_d: Draft) -> None:
            nonlocal calls
            calls += 1
            await release.wait()

        timer = AutosaveTimer(draft, blocking_save, interval=60)
        first = asyncio.create_task(timer.save_now())
        await asyncio.sleep(0)

        assert await timer.tick() is False

        release.set()
        assert await first is True
        assert calls == 1

    async def test_manual_save_waits_for_running_autosave(self) -> None:
        draft = Draft(week=1)
        draft.content = "First"
        release = asyncio.Event()
        stored: list[str] = []

        async def recording_save(d: Draft) -> None:
            content = d.content
            if not stored:
                await release.wait()
            stored.append(content)

        timer = AutosaveTimer(draft, recording_save, interval=60)
        autosave = asyncio.create_task(timer.tick())
        await asyncio.sleep(0)

        draft.content = "First and the ending"
        manual = asyncio.create_task(timer.save_now())
        await asyncio.sleep(0)
        release.set()

        assert await autosave is True
        assert await manual is True
        assert stored == ["First", "First and the ending"]
        assert draft.is_dirty is False

    async def test_background_task_saves_and_stops(self) -> None:
        draft = Draft(week=1)
        draft.content = "Text"
        save = AsyncMock()

        async with AutosaveTimer(draft, save, interval=0.01) as timer:
            assert timer.running is True
            for _ in range(100):
                if save.await_count:
                    break
                await asyncio.sleep(0.01)

        assert timer.running is False
        save.assert_awaited_once_with(draft)

    async def test_start_twice_keeps_one_task(self) -> None:
        timer = AutosaveTimer(Draft(week=1), AsyncMock(), interval=60)
        timer.start()
        task = timer._task
        timer.start()
        assert timer._task is task
        await timer.stop()
        assert timer.running is False

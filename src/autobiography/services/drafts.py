"""Write-view draft state: dirty tracking, unsaved-changes guard and auto-save."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from autobiography.config import get_settings
from autobiography.schemas.entry import EntrySave, EntryStatus
from autobiography.services.lifecycle import normalize_status

if TYPE_CHECKING:
    from autobiography.models.entry import Entry

logger = logging.getLogger(__name__)

SaveCallback = Callable[["Draft"], Awaitable[Any]]

DRAFT_FIELDS = (
    "week",
    "title",
    "content",
    "status",
    "life_stage",
    "tone",
    "key_people",
    "locations",
    "themes",
)


class Draft:
    """In-memory copy of one week's entry while it is being edited."""

    def __init__(
        self,
        week: int,
        title: str = "",
        content: str = "",
        status: EntryStatus = EntryStatus.IN_PROGRESS,
        life_stage: str = "",
        tone: str = "",
        key_people: str = "",
        locations: str = "",
        themes: str = "",
    ) -> None:
        self.week = week
        self.title = title
        self.content = content
        self.status = status
        self.life_stage = life_stage
        self.tone = tone
        self.key_people = key_people
        self.locations = locations
        self.themes = themes
        self._saved_snapshot = self.snapshot()

    @classmethod
    def from_entry(cls, week: int, entry: Entry | None) -> Draft:
        """Start a clean draft from the stored entry (or a blank one)."""
        if entry is None:
            return cls(week=week)
        return cls(
            week=week,
            title=entry.title or "",
            content=entry.content or "",
            status=normalize_status(entry.status),
            life_stage=entry.life_stage or "",
            tone=entry.tone or "",
            key_people=entry.key_people or "",
            locations=entry.locations or "",
            themes=entry.themes or "",
        )

    def snapshot(self) -> tuple:
        """Comparable copy of every editable field."""
        return tuple(getattr(self, name) for name in DRAFT_FIELDS)

    @property
    def is_dirty(self) -> bool:
        return self.snapshot() != self._saved_snapshot

    @property
    def has_text(self) -> bool:
        """Whether the title or content holds anything but whitespace."""
        return bool(self.title.strip() or self.content.strip())

    def mark_saved(self, snapshot: tuple | None = None) -> None:
        """Record ``snapshot`` (default: the current state) as persisted."""
        self._saved_snapshot = snapshot if snapshot is not None else self.snapshot()

    def confirm_leave(self, confirm: Callable[[], bool]) -> bool:
        """Guard navigation away from the draft.

        Returns True straight away when there is nothing unsaved; otherwise
        asks ``confirm`` whether the changes may be discarded.
        """
        if not self.is_dirty:
            return True
        return bool(confirm())

    def to_save_request(self, autosave: bool = False) -> EntrySave:
        """Build the request body for PUT /api/entries/{week}."""
        return EntrySave(
            title=self.title,
            content=self.content,
            status=self.status,
            life_stage=self.life_stage,
            tone=self.tone,
            key_people=self.key_people,
            locations=self.locations,
            themes=self.themes,
            autosave=autosave,
        )


class AutosaveTimer:
    """Periodically saves a dirty draft while the write view is open.

    A tick saves only when the draft is dirty and has a title or content.
    Auto-save failures are logged and swallowed; manual saves through
    ``save_now`` raise. Use as an async context manager, or call ``start``
    and ``stop``, so the background task is always cancelled.
    """

    def __init__(
        self,
        draft: Draft,
        save: SaveCallback,
        interval: float | None = None,
    ) -> None:
        self.draft = draft
        self._save = save
        if interval is None:
            interval = get_settings().autosave_interval_seconds
        self.interval = interval
        self._task: asyncio.Task | None = None
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking. Calling start on a running timer does nothing."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Cancel the timer and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.tick()

    async def tick(self) -> bool:
        """Run one auto-save check. Returns True when a save succeeded."""
        if not self.draft.is_dirty or not self.draft.has_text:
            return False
        try:
            return await self._persist(autosave=True)
        except Exception as e:
            logger.warning("Auto-save of week %s failed: %s", self.draft.week, e)
            return False

    async def save_now(self) -> bool:
        """Manual save. Errors propagate to the caller."""
        return await self._persist(autosave=False)

    async def _persist(self, autosave: bool) -> bool:
        # One save at a time. A tick that overlaps a save is dropped; a manual
        # save waits for it and then writes the current state
        if autosave and self._lock.locked():
            return False
        async with self._lock:
            snapshot = self.draft.snapshot()
            await self._save(self.draft)
            self.draft.mark_saved(snapshot)
            if not autosave:
                logger.debug("Saved week %s", self.draft.week)
            return True

    async def __aenter__(self) -> AutosaveTimer:
        self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.stop()

"""Debounced push of the local Dataset to the remote mirror.

State is ``idle`` / ``dirty`` / ``syncing`` crossed with an online flag that
only changes through ``set_online`` events. Every local mutation calls
``mark_dirty``; while online and dirty a single timer task is (re)armed and,
once it sleeps through ``delay`` without being replaced, runs one push.

At most one push runs at a time. Mutations that land while a push is in
flight bump a generation counter, so the push cannot clear the dirty flag
for changes it did not carry, and the timer is re-armed when it settles.
Failed pushes are logged and leave the flag set; nothing retries on its own
until the next mutation or a manual ``sync()``.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel, computed_field

from vocaaid.core.logging import get_logger
from vocaaid.modules.vocabulary.models import Word

logger = get_logger(__name__)


PushCallable = Callable[[], Awaitable[None]]
PullCallable = Callable[[], Awaitable[list[Word]]]


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class SyncState(str, Enum):
    IDLE = "idle"
    DIRTY = "dirty"
    SYNCING = "syncing"


class SyncStatus(BaseModel):
    is_online: bool
    has_local_changes: bool
    is_loading: bool
    last_sync_time: Optional[datetime] = None

    @computed_field
    def state(self) -> SyncState:
        if self.is_loading:
            return SyncState.SYNCING
        if self.has_local_changes:
            return SyncState.DIRTY
        return SyncState.IDLE


class SyncCoordinator:
    def __init__(
        self,
        *,
        push: PushCallable,
        pull: Optional[PullCallable] = None,
        delay: float = 2.0,
        online: bool = True,
    ) -> None:
        self._push_fn = push
        self._pull_fn = pull
        self.delay = max(0.0, float(delay))
        self.is_online = online
        self.has_local_changes = False
        self.last_sync_time: Optional[datetime] = None
        self._generation = 0
        self._pushing = False
        self._pulling = False
        self._timer: Optional[asyncio.Task[None]] = None
        self._closed = False
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def is_loading(self) -> bool:
        return self._pushing or self._pulling

    @property
    def is_syncing(self) -> bool:
        return self._pushing

    def status(self) -> SyncStatus:
        return SyncStatus(
            is_online=self.is_online,
            has_local_changes=self.has_local_changes,
            is_loading=self.is_loading,
            last_sync_time=self.last_sync_time,
        )

    # Events -------------------------------------------------------------
    def mark_dirty(self) -> None:
        self.has_local_changes = True
        self._generation += 1
        self._arm()

    def set_online(self, online: bool) -> None:
        online = bool(online)
        if online == self.is_online:
            return
        self.is_online = online
        logger.info(f"Connectivity changed: {'online' if online else 'offline'}")
        if online:
            self._arm()
        else:
            self._cancel_timer()

    # Timer --------------------------------------------------------------
    def _cancel_timer(self) -> None:
        if self._timer and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def _arm(self) -> None:
        self._cancel_timer()
        if self._closed or not (self.is_online and self.has_local_changes):
            return
        if self._pushing:
            # re-armed once the in-flight push settles
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop (e.g. CLI); only manual sync() pushes
            return
        self._timer = loop.create_task(self._fire_after_delay())

    async def _fire_after_delay(self) -> None:
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            return
        # Detach so a later re-arm cannot cancel the push we are about to run
        self._timer = None
        await self._push()

    # Push / pull --------------------------------------------------------
    async def _push(self) -> bool:
        if self._pushing or not self.is_online or not self.has_local_changes:
            return False
        self._pushing = True
        self._idle.clear()
        generation = self._generation
        try:
            await self._push_fn()
        except Exception:  # noqa: BLE001
            logger.exception("Push to remote mirror failed; local changes kept")
            return False
        else:
            self.last_sync_time = _now_utc()
            if self._generation == generation:
                self.has_local_changes = False
            logger.info("Pushed local data to remote mirror")
            return True
        finally:
            self._pushing = False
            self._idle.set()
            if self._generation != generation:
                self._arm()

    async def sync(self) -> bool:
        """Push now; a no-op (False) when offline, clean or already syncing."""
        if not self.is_online or not self.has_local_changes or self._pushing:
            return False
        self._cancel_timer()
        return await self._push()

    async def refresh(self) -> Optional[list[Word]]:
        """Pull from the mirror; None when offline, unsupported or failed."""
        if not self.is_online or self._pull_fn is None:
            return None
        self._pulling = True
        generation = self._generation
        try:
            words = await self._pull_fn()
        except Exception:  # noqa: BLE001
            logger.exception("Pull from remote mirror failed")
            return None
        finally:
            self._pulling = False
        self.last_sync_time = _now_utc()
        if words and self._generation == generation:
            # the pull replaced the local words, nothing left to push
            self.has_local_changes = False
            self._cancel_timer()
        return words

    async def aclose(self) -> None:
        self._closed = True
        self._cancel_timer()
        await self._idle.wait()
        # no timer outlives close
        self._cancel_timer()

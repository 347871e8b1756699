"""In-memory registry of study and quiz sessions.

Sessions live in-process only; each one is addressed by a short id. A sweep
task drops sessions nobody has touched for ``idle_seconds``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Generic, Optional, TypeVar
from uuid import uuid4

from vocaaid.core.errors import NotFoundError
from vocaaid.core.logging import get_logger
from vocaaid.modules.sessions.quiz import QuizSession
from vocaaid.modules.sessions.study import StudySession

logger = get_logger(__name__)

M = TypeVar("M", StudySession, QuizSession)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _short_id() -> str:
    # 8-char slice from uuid4
    return uuid4().hex[:8]


@dataclass
class SessionEntry(Generic[M]):
    id: str
    machine: M
    created_at: datetime = field(default_factory=_now_utc)
    last_activity: datetime = field(default_factory=_now_utc)

    def touch(self) -> None:
        self.last_activity = _now_utc()


class SessionManager(Generic[M]):
    def __init__(self, factory: Callable[[], M], *, kind: str) -> None:
        self._factory = factory
        self.kind = kind
        self.sessions: dict[str, SessionEntry[M]] = {}
        self._cleanup_task: Optional[asyncio.Task] = None
        self._idle_seconds: int = 1800
        self._sweep_interval: int = 60

    # Lifecycle ----------------------------------------------------------
    def create(self) -> SessionEntry[M]:
        entry = SessionEntry(id=_short_id(), machine=self._factory())
        self.sessions[entry.id] = entry
        logger.info(f"Created {self.kind} session", extra={"session_id": entry.id})
        return entry

    def get(self, session_id: str) -> SessionEntry[M]:
        entry = self.sessions.get(session_id)
        if entry is None:
            raise NotFoundError(f"{self.kind.capitalize()} session not found")
        entry.touch()
        return entry

    def drop(self, session_id: str) -> None:
        if self.sessions.pop(session_id, None) is None:
            raise NotFoundError(f"{self.kind.capitalize()} session not found")

    # Cleanup loop -------------------------------------------------------
    def start(self, *, idle_seconds: int = 1800, sweep_interval: int = 60) -> None:
        self._idle_seconds = max(60, int(idle_seconds))
        self._sweep_interval = max(5, int(sweep_interval))
        if self._cleanup_task and not self._cleanup_task.done():
            return
        self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def stop(self) -> None:
        if self._cleanup_task and not self._cleanup_task.done():
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
        self._cleanup_task = None

    def sweep(self, now: Optional[datetime] = None) -> list[str]:
        now = now or _now_utc()
        expired = [
            sid
            for sid, entry in self.sessions.items()
            if (now - entry.last_activity).total_seconds() > self._idle_seconds
        ]
        for sid in expired:
            self.sessions.pop(sid, None)
        if expired:
            logger.info(f"Dropped {len(expired)} idle {self.kind} sessions")
        return expired

    async def _cleanup_loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self._sweep_interval)
                self.sweep()
        except asyncio.CancelledError:
            return


def study_manager() -> SessionManager[StudySession]:
    return SessionManager(StudySession, kind="study")


def quiz_manager() -> SessionManager[QuizSession]:
    return SessionManager(QuizSession, kind="quiz")

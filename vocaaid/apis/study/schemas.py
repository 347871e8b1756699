from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from vocaaid.modules.sessions.manager import SessionEntry
from vocaaid.modules.sessions.study import StudySession, StudyStatus
from vocaaid.modules.vocabulary.models import Selection, Word


class CreateStudyRequest(BaseModel):
    selection: Optional[Selection] = Field(
        default=None, description="Start immediately with this selection"
    )


class KeyRequest(BaseModel):
    key: str = Field(
        ...,
        description="KeyboardEvent.key name: ' ' reveals or advances, 's' stars the card",
    )


class StarRequest(BaseModel):
    word_id: Optional[str] = Field(
        default=None, description="Defaults to the current card"
    )


class StudyState(BaseModel):
    success: bool = True
    session_id: str
    status: StudyStatus
    index: int
    total: int
    revealed: bool
    current: Optional[Word] = None
    selection: Optional[Selection] = None

    @classmethod
    def of(cls, entry: SessionEntry[StudySession]) -> "StudyState":
        machine = entry.machine
        return cls(
            session_id=entry.id,
            status=machine.status,
            index=machine.index,
            total=machine.total,
            revealed=machine.revealed,
            current=machine.current,
            selection=machine.selection,
        )

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from vocaaid.modules.sessions.manager import SessionEntry
from vocaaid.modules.sessions.quiz import QuizResult, QuizSession, QuizStatus
from vocaaid.modules.vocabulary.models import Selection, Word


class CreateQuizRequest(BaseModel):
    selection: Optional[Selection] = None


class AnswerRequest(BaseModel):
    answer: str


class KeyRequest(BaseModel):
    key: str = Field(
        ...,
        description="KeyboardEvent.key name; only 'Enter' (next question) is bound",
    )


class StarRequest(BaseModel):
    word_id: Optional[str] = None


class QuizState(BaseModel):
    success: bool = True
    session_id: str
    status: QuizStatus
    index: int
    total: int
    score: int
    answered: bool
    last_correct: Optional[bool] = None
    current: Optional[Word] = None
    last_result: Optional[QuizResult] = None
    selection: Optional[Selection] = None

    @classmethod
    def of(cls, entry: SessionEntry[QuizSession]) -> "QuizState":
        machine = entry.machine
        return cls(
            session_id=entry.id,
            status=machine.status,
            index=machine.index,
            total=machine.total,
            score=machine.score,
            answered=machine.answered,
            last_correct=machine.last_correct,
            current=machine.current,
            last_result=machine.results[-1] if machine.answered else None,
            selection=machine.selection,
        )


class QuizSummary(BaseModel):
    success: bool = True
    session_id: str
    status: QuizStatus
    score: int
    total: int
    correct: list[QuizResult] = Field(default_factory=list)
    incorrect: list[QuizResult] = Field(default_factory=list)

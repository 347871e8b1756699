from __future__ import annotations

from fastapi import APIRouter, status

from vocaaid.apis.deps import QuizSessions, Vocabulary
from vocaaid.core.config import settings
from vocaaid.core.errors import NotFoundError, ValidationError
from vocaaid.core.logging import bind, get_logger
from vocaaid.modules.sessions.quiz import QuizStatus
from vocaaid.modules.vocabulary.models import Selection
from .schemas import (
    AnswerRequest,
    CreateQuizRequest,
    KeyRequest,
    QuizState,
    QuizSummary,
    StarRequest,
)


router = APIRouter()
logger = get_logger(__name__)

PREFIX = f"/{settings.app.version}/quiz/sessions"


@router.post(
    PREFIX,
    response_model=QuizState,
    status_code=status.HTTP_201_CREATED,
    tags=["quiz"],
)
async def create_session(
    req: CreateQuizRequest, sessions: QuizSessions, vocabulary: Vocabulary
) -> QuizState:
    entry = sessions.create()
    if req.selection is not None:
        try:
            entry.machine.start(await vocabulary.snapshot(), req.selection)
        except Exception:
            sessions.drop(entry.id)
            raise
    return QuizState.of(entry)


@router.get(f"{PREFIX}/{{session_id}}", response_model=QuizState, tags=["quiz"])
async def get_session(session_id: str, sessions: QuizSessions) -> QuizState:
    return QuizState.of(sessions.get(session_id))


@router.post(f"{PREFIX}/{{session_id}}/start", response_model=QuizState, tags=["quiz"])
async def start_session(
    session_id: str,
    selection: Selection,
    sessions: QuizSessions,
    vocabulary: Vocabulary,
) -> QuizState:
    entry = sessions.get(session_id)
    entry.machine.start(await vocabulary.snapshot(), selection)
    bind(logger, session_id=entry.id).info(
        f"Quiz started with {entry.machine.total} words"
    )
    return QuizState.of(entry)


@router.post(f"{PREFIX}/{{session_id}}/retry", response_model=QuizState, tags=["quiz"])
async def retry_session(
    session_id: str, sessions: QuizSessions, vocabulary: Vocabulary
) -> QuizState:
    entry = sessions.get(session_id)
    entry.machine.retry(await vocabulary.snapshot())
    return QuizState.of(entry)


@router.post(f"{PREFIX}/{{session_id}}/submit", response_model=QuizState, tags=["quiz"])
async def submit_answer(
    session_id: str, req: AnswerRequest, sessions: QuizSessions
) -> QuizState:
    entry = sessions.get(session_id)
    if not req.answer.strip():
        raise ValidationError("Answer is required")
    entry.machine.submit(req.answer)
    return QuizState.of(entry)


@router.post(f"{PREFIX}/{{session_id}}/advance", response_model=QuizState, tags=["quiz"])
async def advance_question(session_id: str, sessions: QuizSessions) -> QuizState:
    entry = sessions.get(session_id)
    entry.machine.advance()
    if entry.machine.status == QuizStatus.FINISHED:
        bind(logger, session_id=entry.id).info(
            f"Quiz finished: {entry.machine.score}/{entry.machine.total}"
        )
    return QuizState.of(entry)


@router.post(f"{PREFIX}/{{session_id}}/key", response_model=QuizState, tags=["quiz"])
async def press_key(session_id: str, req: KeyRequest, sessions: QuizSessions) -> QuizState:
    entry = sessions.get(session_id)
    entry.machine.press(req.key)
    return QuizState.of(entry)


@router.post(f"{PREFIX}/{{session_id}}/star", response_model=QuizState, tags=["quiz"])
async def star_word(
    session_id: str, req: StarRequest, sessions: QuizSessions, vocabulary: Vocabulary
) -> QuizState:
    entry = sessions.get(session_id)
    word_id = req.word_id
    if word_id is None:
        current = entry.machine.current
        if current is None:
            raise NotFoundError("No question to star")
        word_id = current.id
    updated = entry.machine.toggle_star(word_id)
    if updated is None:
        raise NotFoundError("Word not found in this quiz")
    await vocabulary.set_star(updated.id, updated.is_starred)
    return QuizState.of(entry)


@router.get(
    f"{PREFIX}/{{session_id}}/summary", response_model=QuizSummary, tags=["quiz"]
)
async def get_summary(session_id: str, sessions: QuizSessions) -> QuizSummary:
    entry = sessions.get(session_id)
    correct, incorrect = entry.machine.summary()
    return QuizSummary(
        session_id=entry.id,
        status=entry.machine.status,
        score=entry.machine.score,
        total=entry.machine.total,
        correct=correct,
        incorrect=incorrect,
    )


@router.post(f"{PREFIX}/{{session_id}}/reset", response_model=QuizState, tags=["quiz"])
async def reset_session(session_id: str, sessions: QuizSessions) -> QuizState:
    entry = sessions.get(session_id)
    entry.machine.reset()
    return QuizState.of(entry)


@router.delete(f"{PREFIX}/{{session_id}}", tags=["quiz"])
async def delete_session(session_id: str, sessions: QuizSessions) -> dict:
    sessions.drop(session_id)
    return {"success": True}

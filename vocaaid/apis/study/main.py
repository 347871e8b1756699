"""Flip-card study sessions over HTTP.

Sessions are held in memory by the app's study SessionManager. Starring a card
also writes the new star value to the stored Dataset.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, status

from vocaaid.apis.deps import StudySessions, Vocabulary
from vocaaid.core.config import settings
from vocaaid.core.errors import NotFoundError
from vocaaid.core.logging import bind, get_logger
from vocaaid.modules.vocabulary.models import Selection, Word
from vocaaid.modules.vocabulary.service import VocabularyService
from .schemas import CreateStudyRequest, KeyRequest, StarRequest, StudyState


router = APIRouter()
logger = get_logger(__name__)

PREFIX = f"/{settings.app.version}/study/sessions"


async def _persist_star(vocabulary: VocabularyService, word: Optional[Word]) -> None:
    if word is not None:
        await vocabulary.set_star(word.id, word.is_starred)


@router.post(
    PREFIX,
    response_model=StudyState,
    status_code=status.HTTP_201_CREATED,
    tags=["study"],
)
async def create_session(
    req: CreateStudyRequest, sessions: StudySessions, vocabulary: Vocabulary
) -> StudyState:
    entry = sessions.create()
    if req.selection is not None:
        try:
            entry.machine.start(await vocabulary.snapshot(), req.selection)
        except Exception:
            sessions.drop(entry.id)
            raise
    return StudyState.of(entry)


@router.get(f"{PREFIX}/{{session_id}}", response_model=StudyState, tags=["study"])
async def get_session(session_id: str, sessions: StudySessions) -> StudyState:
    return StudyState.of(sessions.get(session_id))


@router.post(f"{PREFIX}/{{session_id}}/start", response_model=StudyState, tags=["study"])
async def start_session(
    session_id: str,
    selection: Selection,
    sessions: StudySessions,
    vocabulary: Vocabulary,
) -> StudyState:
    entry = sessions.get(session_id)
    entry.machine.start(await vocabulary.snapshot(), selection)
    bind(logger, session_id=entry.id).info(
        f"Study started with {entry.machine.total} words"
    )
    return StudyState.of(entry)


@router.post(f"{PREFIX}/{{session_id}}/retry", response_model=StudyState, tags=["study"])
async def retry_session(
    session_id: str, sessions: StudySessions, vocabulary: Vocabulary
) -> StudyState:
    entry = sessions.get(session_id)
    entry.machine.retry(await vocabulary.snapshot())
    return StudyState.of(entry)


@router.post(f"{PREFIX}/{{session_id}}/reveal", response_model=StudyState, tags=["study"])
async def reveal_card(session_id: str, sessions: StudySessions) -> StudyState:
    entry = sessions.get(session_id)
    entry.machine.reveal()
    return StudyState.of(entry)


@router.post(f"{PREFIX}/{{session_id}}/advance", response_model=StudyState, tags=["study"])
async def advance_card(session_id: str, sessions: StudySessions) -> StudyState:
    entry = sessions.get(session_id)
    entry.machine.advance()
    return StudyState.of(entry)


@router.post(f"{PREFIX}/{{session_id}}/key", response_model=StudyState, tags=["study"])
async def press_key(
    session_id: str, req: KeyRequest, sessions: StudySessions, vocabulary: Vocabulary
) -> StudyState:
    entry = sessions.get(session_id)
    await _persist_star(vocabulary, entry.machine.press(req.key))
    return StudyState.of(entry)


@router.post(f"{PREFIX}/{{session_id}}/star", response_model=StudyState, tags=["study"])
async def star_card(
    session_id: str, req: StarRequest, sessions: StudySessions, vocabulary: Vocabulary
) -> StudyState:
    entry = sessions.get(session_id)
    word_id = req.word_id
    if word_id is None:
        current = entry.machine.current
        if current is None:
            raise NotFoundError("No card to star")
        word_id = current.id
    updated = entry.machine.toggle_star(word_id)
    if updated is None:
        raise NotFoundError("Word not found in this session")
    await _persist_star(vocabulary, updated)
    return StudyState.of(entry)


@router.post(f"{PREFIX}/{{session_id}}/reset", response_model=StudyState, tags=["study"])
async def reset_session(session_id: str, sessions: StudySessions) -> StudyState:
    entry = sessions.get(session_id)
    entry.machine.reset()
    return StudyState.of(entry)


@router.delete(f"{PREFIX}/{{session_id}}", tags=["study"])
async def delete_session(session_id: str, sessions: StudySessions) -> dict:
    sessions.drop(session_id)
    return {"success": True}

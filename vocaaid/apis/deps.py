from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from vocaaid.modules.sessions.manager import SessionManager
from vocaaid.modules.sessions.quiz import QuizSession
from vocaaid.modules.sessions.study import StudySession
from vocaaid.modules.vocabulary.service import VocabularyService


def get_vocabulary(request: Request) -> VocabularyService:
    """The service built by the app lifespan."""
    return request.app.state.vocabulary


def get_study_sessions(request: Request) -> SessionManager[StudySession]:
    return request.app.state.study_sessions


def get_quiz_sessions(request: Request) -> SessionManager[QuizSession]:
    return request.app.state.quiz_sessions


Vocabulary = Annotated[VocabularyService, Depends(get_vocabulary)]
StudySessions = Annotated[SessionManager[StudySession], Depends(get_study_sessions)]
QuizSessions = Annotated[SessionManager[QuizSession], Depends(get_quiz_sessions)]

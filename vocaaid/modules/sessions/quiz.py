"""Fill-in-the-answer quiz session.

``not_started -> in_progress(index, answered) -> finished``. Answers are
compared after boundary trim and case folding against the primary and the
optional secondary meaning; there is no fuzzy matching.
"""

from __future__ import annotations

import random
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from vocaaid.core.errors import EmptySelectionError
from vocaaid.modules.sessions.study import shuffled
from vocaaid.modules.vocabulary.models import Dataset, Selection, Word

# key names as in a browser KeyboardEvent.key
NEXT_KEY = "Enter"


class QuizStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class QuizResult(BaseModel):
    word: Word
    user_answer: str
    is_correct: bool


class QuizSession:
    def __init__(self, *, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()
        self.status = QuizStatus.NOT_STARTED
        self.words: list[Word] = []
        self.index = 0
        self.answered = False
        self.last_correct: Optional[bool] = None
        self.results: list[QuizResult] = []
        self.selection: Optional[Selection] = None

    @property
    def current(self) -> Optional[Word]:
        if self.status != QuizStatus.IN_PROGRESS:
            return None
        return self.words[self.index]

    @property
    def total(self) -> int:
        return len(self.words)

    @property
    def score(self) -> int:
        return sum(1 for r in self.results if r.is_correct)

    def start(self, dataset: Dataset, selection: Selection) -> None:
        matches = selection.apply(dataset.words)
        if not matches:
            raise EmptySelectionError("No words to quiz in this selection")
        self.selection = selection
        self.words = shuffled(matches, self.rng)
        self.index = 0
        self.answered = False
        self.last_correct = None
        self.results = []
        self.status = QuizStatus.IN_PROGRESS

    def retry(self, dataset: Dataset) -> None:
        if self.selection is None:
            raise EmptySelectionError("Nothing to retry; start a quiz first")
        self.start(dataset, self.selection)

    def submit(self, answer: str) -> Optional[QuizResult]:
        word = self.current
        if word is None or self.answered:
            return None
        user_answer = answer.strip()
        if not user_answer:
            return None
        result = QuizResult(
            word=word, user_answer=user_answer, is_correct=word.accepts(user_answer)
        )
        self.results.append(result)
        self.answered = True
        self.last_correct = result.is_correct
        return result

    def advance(self) -> bool:
        if self.status != QuizStatus.IN_PROGRESS or not self.answered:
            return False
        if self.index + 1 < len(self.words):
            self.index += 1
            self.answered = False
            self.last_correct = None
        else:
            self.status = QuizStatus.FINISHED
        return True

    def toggle_star(self, word_id: str) -> Optional[Word]:
        """Flip the star in the snapshot and in every recorded result."""
        if self.status == QuizStatus.NOT_STARTED:
            return None
        updated: Optional[Word] = None
        for i, word in enumerate(self.words):
            if word.id == word_id:
                updated = word.model_copy(update={"is_starred": not word.is_starred})
                self.words[i] = updated
                break
        if updated is None:
            return None
        self.results = [
            r.model_copy(update={"word": updated}) if r.word.id == word_id else r
            for r in self.results
        ]
        return updated

    def press(self, key: str) -> bool:
        if self.status != QuizStatus.IN_PROGRESS or key != NEXT_KEY:
            return False
        return self.advance()

    def summary(self) -> tuple[list[QuizResult], list[QuizResult]]:
        correct = [r for r in self.results if r.is_correct]
        incorrect = [r for r in self.results if not r.is_correct]
        return correct, incorrect

    def reset(self) -> None:
        self.status = QuizStatus.NOT_STARTED
        self.words = []
        self.index = 0
        self.answered = False
        self.last_correct = None
        self.results = []

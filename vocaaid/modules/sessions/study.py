"""Flip-card study session.

``not_started -> in_progress(index, revealed) -> completed``. A session holds
a shuffled snapshot of the words its selection matched at start; it never
re-reads the Dataset except on ``retry``. Star toggles update the snapshot
and hand the changed word back so the caller can persist it.
"""

from __future__ import annotations

import random
from enum import Enum
from typing import Optional

from vocaaid.core.errors import EmptySelectionError
from vocaaid.modules.vocabulary.models import Dataset, Selection, Word

# key names as in a browser KeyboardEvent.key
REVEAL_OR_ADVANCE_KEY = " "
STAR_KEYS = ("s", "S")


class StudyStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


def shuffled(words: list[Word], rng: random.Random) -> list[Word]:
    deck = list(words)
    rng.shuffle(deck)
    return deck


class StudySession:
    def __init__(self, *, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()
        self.status = StudyStatus.NOT_STARTED
        self.words: list[Word] = []
        self.index = 0
        self.revealed = False
        self.selection: Optional[Selection] = None

    @property
    def current(self) -> Optional[Word]:
        if self.status != StudyStatus.IN_PROGRESS:
            return None
        return self.words[self.index]

    @property
    def total(self) -> int:
        return len(self.words)

    def start(self, dataset: Dataset, selection: Selection) -> None:
        matches = selection.apply(dataset.words)
        if not matches:
            raise EmptySelectionError()
        self.selection = selection
        self.words = shuffled(matches, self.rng)
        self.index = 0
        self.revealed = False
        self.status = StudyStatus.IN_PROGRESS

    def retry(self, dataset: Dataset) -> None:
        if self.selection is None:
            raise EmptySelectionError("Nothing to retry; start a session first")
        self.start(dataset, self.selection)

    def reveal(self) -> bool:
        if self.status != StudyStatus.IN_PROGRESS or self.revealed:
            return False
        self.revealed = True
        return True

    def advance(self) -> bool:
        if self.status != StudyStatus.IN_PROGRESS or not self.revealed:
            return False
        if self.index + 1 < len(self.words):
            self.index += 1
            self.revealed = False
        else:
            self.index = len(self.words)
            self.status = StudyStatus.COMPLETED
        return True

    def toggle_star(self, word_id: str) -> Optional[Word]:
        """Flip the star on a snapshot word; returns the updated word."""
        if self.status == StudyStatus.NOT_STARTED:
            return None
        for i, word in enumerate(self.words):
            if word.id == word_id:
                updated = word.model_copy(update={"is_starred": not word.is_starred})
                self.words[i] = updated
                return updated
        return None

    def press(self, key: str) -> Optional[Word]:
        """Keyboard binding: space reveals or advances, ``s`` stars the card.

        Returns the starred word when the key changed one, else None.
        """
        if self.status != StudyStatus.IN_PROGRESS:
            return None
        if key == REVEAL_OR_ADVANCE_KEY:
            if not self.revealed:
                self.reveal()
            else:
                self.advance()
            return None
        if key in STAR_KEYS:
            current = self.current
            return self.toggle_star(current.id) if current else None
        return None

    def reset(self) -> None:
        self.status = StudyStatus.NOT_STARTED
        self.words = []
        self.index = 0
        self.revealed = False

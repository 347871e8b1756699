"""Pure operations over a Dataset.

Each function returns a new Dataset and leaves its input untouched. When the
call has nothing to do (blank input, unknown id or folder, unconfirmed delete)
the input object itself is returned, which lets callers skip the write.
"""

from __future__ import annotations

import time
from typing import Iterable, Mapping, Optional
from uuid import uuid4

from vocaaid.modules.vocabulary.models import (
    FOLDER_NAME_LIMIT,
    WORD_TEXT_LIMIT,
    Dataset,
    Folder,
    Selection,
    Word,
)


def generate_id() -> str:
    # millisecond timestamp plus a random suffix so ids made in the same ms differ
    return f"{int(time.time() * 1000)}-{uuid4().hex[:9]}"


def _clean(text: Optional[str], limit: int) -> str:
    return (text or "").strip()[:limit]


def _clean_optional(text: Optional[str], limit: int) -> Optional[str]:
    cleaned = _clean(text, limit)
    return cleaned or None


def _folder_exists(dataset: Dataset, folder_id: Optional[str]) -> bool:
    # None means unassigned, which always exists
    return folder_id is None or dataset.find_folder(folder_id) is not None


def add_word(
    dataset: Dataset,
    english: str,
    korean: str,
    korean2: Optional[str] = None,
    folder_id: Optional[str] = None,
) -> Dataset:
    english = _clean(english, WORD_TEXT_LIMIT)
    korean = _clean(korean, WORD_TEXT_LIMIT)
    if not english or not korean or not _folder_exists(dataset, folder_id):
        return dataset
    word = Word(
        id=generate_id(),
        english=english,
        korean=korean,
        korean2=_clean_optional(korean2, WORD_TEXT_LIMIT),
        folder_id=folder_id,
    )
    return dataset.model_copy(update={"words": [word, *dataset.words]})


def delete_word(dataset: Dataset, word_id: str) -> Dataset:
    if dataset.find_word(word_id) is None:
        return dataset
    return dataset.model_copy(
        update={"words": [w for w in dataset.words if w.id != word_id]}
    )


def update_word(dataset: Dataset, word: Word) -> Dataset:
    if dataset.find_word(word.id) is None:
        return dataset
    english = _clean(word.english, WORD_TEXT_LIMIT)
    korean = _clean(word.korean, WORD_TEXT_LIMIT)
    if not english or not korean or not _folder_exists(dataset, word.folder_id):
        return dataset
    cleaned = word.model_copy(
        update={
            "english": english,
            "korean": korean,
            "korean2": _clean_optional(word.korean2, WORD_TEXT_LIMIT),
        }
    )
    return dataset.model_copy(
        update={"words": [cleaned if w.id == word.id else w for w in dataset.words]}
    )


def toggle_star(dataset: Dataset, word_id: str) -> Dataset:
    word = dataset.find_word(word_id)
    if word is None:
        return dataset
    return set_star(dataset, word_id, not word.is_starred)


def set_star(dataset: Dataset, word_id: str, starred: bool) -> Dataset:
    word = dataset.find_word(word_id)
    if word is None or word.is_starred == starred:
        return dataset
    return dataset.model_copy(
        update={
            "words": [
                w.model_copy(update={"is_starred": starred}) if w.id == word_id else w
                for w in dataset.words
            ]
        }
    )


def move_words(
    dataset: Dataset, word_ids: Iterable[str], destination_folder_id: Optional[str]
) -> Dataset:
    ids = set(word_ids)
    if not ids or not _folder_exists(dataset, destination_folder_id):
        return dataset
    return dataset.model_copy(
        update={
            "words": [
                w.model_copy(update={"folder_id": destination_folder_id})
                if w.id in ids
                else w
                for w in dataset.words
            ]
        }
    )


def add_folder(dataset: Dataset, name: str) -> Dataset:
    name = _clean(name, FOLDER_NAME_LIMIT)
    if not name:
        return dataset
    folder = Folder(id=generate_id(), name=name)
    return dataset.model_copy(update={"folders": [*dataset.folders, folder]})


def rename_folder(dataset: Dataset, folder_id: str, name: str) -> Dataset:
    name = _clean(name, FOLDER_NAME_LIMIT)
    if not name or dataset.find_folder(folder_id) is None:
        return dataset
    return dataset.model_copy(
        update={
            "folders": [
                f.model_copy(update={"name": name}) if f.id == folder_id else f
                for f in dataset.folders
            ]
        }
    )


def delete_folder(dataset: Dataset, folder_id: str, *, confirmed: bool) -> Dataset:
    """Remove a folder and unassign its words in the same new Dataset."""
    if not confirmed or dataset.find_folder(folder_id) is None:
        return dataset
    return Dataset(
        folders=[f for f in dataset.folders if f.id != folder_id],
        words=[
            w.model_copy(update={"folder_id": None}) if w.folder_id == folder_id else w
            for w in dataset.words
        ],
    )


def assign_remote_ids(dataset: Dataset, mapping: Mapping[str, str]) -> Dataset:
    """Record remote references handed back by a push (word id -> remote id)."""
    current = {w.id: w.remote_id for w in dataset.words}
    pending = {
        wid: rid
        for wid, rid in mapping.items()
        if wid in current and current[wid] != rid
    }
    if not pending:
        return dataset
    return dataset.model_copy(
        update={
            "words": [
                w.model_copy(update={"remote_id": pending[w.id]}) if w.id in pending else w
                for w in dataset.words
            ]
        }
    )


def adopt_remote_words(dataset: Dataset, words: Iterable[Word]) -> list[Word]:
    """Clean a pulled word list against the local folders.

    Words whose English or Korean text is blank are dropped; a folder id that
    names no local folder becomes unassigned.
    """
    adopted: list[Word] = []
    for word in words:
        english = _clean(word.english, WORD_TEXT_LIMIT)
        korean = _clean(word.korean, WORD_TEXT_LIMIT)
        if not english or not korean:
            continue
        folder_id = word.folder_id if _folder_exists(dataset, word.folder_id) else None
        adopted.append(
            word.model_copy(
                update={
                    "english": english,
                    "korean": korean,
                    "korean2": _clean_optional(word.korean2, WORD_TEXT_LIMIT),
                    "folder_id": folder_id,
                }
            )
        )
    return adopted


def count_words(dataset: Dataset, selection: Selection) -> int:
    return sum(1 for w in dataset.words if selection.matches(w))


def search_words(
    dataset: Dataset, query: str = "", selection: Optional[Selection] = None
) -> list[Word]:
    """Words matching ``selection`` whose text contains ``query`` (any case)."""
    words = selection.apply(dataset.words) if selection else list(dataset.words)
    needle = query.strip().casefold()
    if not needle:
        return words
    return [
        w
        for w in words
        if needle in w.english.casefold()
        or needle in w.korean.casefold()
        or (w.korean2 is not None and needle in w.korean2.casefold())
    ]

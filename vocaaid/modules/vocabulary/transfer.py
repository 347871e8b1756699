"""Export/import document handling.

Exports are sanitized copies of the Dataset (angle brackets stripped, trimmed,
length-capped) stamped with ``exportedAt``/``version``/``source``. Imports
only check the structure (``folders`` and ``words`` arrays) before the
document replaces the Dataset.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from vocaaid.core.errors import InvalidImportError
from vocaaid.modules.vocabulary.models import (
    FOLDER_NAME_LIMIT,
    WORD_TEXT_LIMIT,
    Dataset,
    Word,
)

EXPORT_VERSION = "2.0"
EXPORT_SOURCE = "VocaAid-Python"
METADATA_KEYS = ("exportedAt", "version", "source")

_ANGLE_BRACKETS_RE = re.compile(r"[<>]")


def sanitize_text(text: str, limit: int) -> str:
    return _ANGLE_BRACKETS_RE.sub("", text).strip()[:limit]


def trim_text(text: str, limit: int) -> str:
    return text.strip()[:limit]


def sanitize_dataset(dataset: Dataset, *, strip_markup: bool = True) -> Dataset:
    """Copy of ``dataset`` with capped text; ``strip_markup`` also drops ``<``/``>``."""
    clean = sanitize_text if strip_markup else trim_text
    return Dataset(
        folders=[
            f.model_copy(update={"name": clean(f.name, FOLDER_NAME_LIMIT)})
            for f in dataset.folders
        ],
        words=[
            w.model_copy(
                update={
                    "english": clean(w.english, WORD_TEXT_LIMIT),
                    "korean": clean(w.korean, WORD_TEXT_LIMIT),
                    "korean2": clean(w.korean2, WORD_TEXT_LIMIT) if w.korean2 else None,
                }
            )
            for w in dataset.words
        ],
    )


def sanitize_word(word: Word) -> Word:
    return word.model_copy(
        update={
            "english": trim_text(word.english, WORD_TEXT_LIMIT),
            "korean": trim_text(word.korean, WORD_TEXT_LIMIT),
            "korean2": trim_text(word.korean2, WORD_TEXT_LIMIT) if word.korean2 else None,
        }
    )


def build_export(dataset: Dataset, *, now: Optional[datetime] = None) -> dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    document = sanitize_dataset(dataset).to_document()
    document.update(
        {
            "exportedAt": now.isoformat().replace("+00:00", "Z"),
            "version": EXPORT_VERSION,
            "source": EXPORT_SOURCE,
        }
    )
    return document


def export_filename(today: Optional[date] = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"vocab_data_{today.isoformat()}.json"


def parse_import(document: Any) -> Dataset:
    """Validate the import structure and build the Dataset it describes."""
    if (
        not isinstance(document, dict)
        or not isinstance(document.get("folders"), list)
        or not isinstance(document.get("words"), list)
    ):
        raise InvalidImportError()
    payload = {k: v for k, v in document.items() if k not in METADATA_KEYS}
    try:
        return Dataset.model_validate(payload)
    except PydanticValidationError as e:
        raise InvalidImportError(f"Invalid file format: {e.error_count()} bad entries") from e


"""Pydantic models for the vocabulary Dataset and word selections.

Field names are snake_case in Python and camelCase on the wire, so the stored
document and the export file keep the ``{folders, words}`` shape with
``folderId``/``isStarred``/``remoteId`` keys.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

WORD_TEXT_LIMIT = 500
FOLDER_NAME_LIMIT = 100


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Word(_CamelModel):
    id: str
    english: str
    korean: str
    korean2: Optional[str] = None
    folder_id: Optional[str] = None
    is_starred: bool = False
    # Older exports call this notionPageId
    remote_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("remoteId", "remote_id", "notionPageId"),
        serialization_alias="remoteId",
    )

    def accepts(self, answer: str) -> bool:
        """Case-insensitive exact match against either accepted answer."""
        normalized = answer.strip().casefold()
        if not normalized:
            return False
        if normalized == self.korean.strip().casefold():
            return True
        return bool(self.korean2) and normalized == self.korean2.strip().casefold()


class Folder(_CamelModel):
    id: str
    name: str
    remote_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("remoteId", "remote_id", "notionPageId"),
        serialization_alias="remoteId",
    )


class Dataset(_CamelModel):
    folders: list[Folder] = Field(default_factory=list)
    words: list[Word] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.folders and not self.words

    def find_word(self, word_id: str) -> Optional[Word]:
        return next((w for w in self.words if w.id == word_id), None)

    def find_folder(self, folder_id: str) -> Optional[Folder]:
        return next((f for f in self.folders if f.id == folder_id), None)


class SelectionKind(str, Enum):
    ALL = "all"
    UNASSIGNED = "unassigned"
    STARRED = "starred"
    FOLDER = "folder"
    CUSTOM = "custom"


class Selection(BaseModel):
    """Which words a study/quiz session or a list view draws from.

    ``folder_id`` is only read for FOLDER; ``folder_ids``,
    ``include_unassigned`` and ``starred_only`` only for CUSTOM.
    """

    kind: SelectionKind = SelectionKind.ALL
    folder_id: Optional[str] = None
    folder_ids: set[str] = Field(default_factory=set)
    include_unassigned: bool = True
    starred_only: bool = False

    @classmethod
    def folder(cls, folder_id: str) -> "Selection":
        return cls(kind=SelectionKind.FOLDER, folder_id=folder_id)

    @classmethod
    def custom(
        cls,
        folder_ids: Iterable[str],
        *,
        include_unassigned: bool = True,
        starred_only: bool = False,
    ) -> "Selection":
        return cls(
            kind=SelectionKind.CUSTOM,
            folder_ids=set(folder_ids),
            include_unassigned=include_unassigned,
            starred_only=starred_only,
        )

    def matches(self, word: Word) -> bool:
        if self.kind == SelectionKind.ALL:
            return True
        if self.kind == SelectionKind.UNASSIGNED:
            return word.folder_id is None
        if self.kind == SelectionKind.STARRED:
            return word.is_starred
        if self.kind == SelectionKind.FOLDER:
            return word.folder_id is not None and word.folder_id == self.folder_id
        # CUSTOM: union of chosen folders (plus unassigned), then starred filter
        if word.folder_id is None:
            picked = self.include_unassigned
        else:
            picked = word.folder_id in self.folder_ids
        return picked and (word.is_starred or not self.starred_only)

    def apply(self, words: Iterable[Word]) -> list[Word]:
        return [w for w in words if self.matches(w)]

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from vocaaid.modules.vocabulary.models import Dataset, Folder, Word


class _Request(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AddWordRequest(_Request):
    english: str = Field(..., description="Prompt text")
    korean: str = Field(..., description="Primary accepted answer")
    korean2: Optional[str] = Field(default=None, description="Secondary accepted answer")
    folder_id: Optional[str] = None


class UpdateWordRequest(AddWordRequest):
    is_starred: Optional[bool] = None


class MoveWordsRequest(_Request):
    word_ids: list[str]
    destination_folder_id: Optional[str] = None


class FolderRequest(_Request):
    name: str


class DataResponse(BaseModel):
    success: bool = True
    data: Dataset


class WordResponse(BaseModel):
    success: bool = True
    word: Optional[Word] = None


class WordListResponse(BaseModel):
    success: bool = True
    total: int
    words: list[Word] = Field(default_factory=list)


class FolderSummary(Folder):
    word_count: int = 0


class FolderListResponse(BaseModel):
    success: bool = True
    folders: list[FolderSummary] = Field(default_factory=list)
    total_words: int = 0
    unassigned_count: int = 0
    starred_count: int = 0

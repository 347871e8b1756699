from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from vocaaid.modules.vocabulary.models import Word
from vocaaid.modules.vocabulary.mutators import generate_id


class RemoteWordRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    english: str = ""
    korean: str = ""
    korean2: Optional[str] = None
    folder_id: Optional[str] = None
    is_starred: bool = False
    remote_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("remoteId", "remote_id", "notionPageId"),
    )

    def to_word(self) -> Word:
        return Word(
            id=self.id or generate_id(),
            english=self.english,
            korean=self.korean,
            korean2=self.korean2,
            folder_id=self.folder_id,
            is_starred=self.is_starred,
            remote_id=self.remote_id,
        )


class RemoteDeleteRequest(BaseModel):
    remote_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("remoteId", "remote_id", "notionPageId"),
    )


class RemoteWordResponse(BaseModel):
    success: bool = True
    word: Word


class RemoteWordsResponse(BaseModel):
    success: bool = True
    words: list[Word] = Field(default_factory=list)


class RemoteSyncResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    synced_at: str = Field(alias="syncedAt")
    created: int = 0


class SuccessResponse(BaseModel):
    success: bool = True

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, status

from vocaaid.apis.deps import Vocabulary
from vocaaid.core.config import settings
from vocaaid.core.errors import NotFoundError, ValidationError
from vocaaid.modules.vocabulary import mutators
from vocaaid.modules.vocabulary.models import Selection, SelectionKind
from vocaaid.modules.vocabulary.mutators import count_words
from .schemas import (
    AddWordRequest,
    DataResponse,
    FolderListResponse,
    FolderRequest,
    FolderSummary,
    MoveWordsRequest,
    UpdateWordRequest,
    WordListResponse,
    WordResponse,
)


router = APIRouter()

PREFIX = f"/{settings.app.version}"


def _require_text(english: str, korean: str) -> None:
    if not english.strip() or not korean.strip():
        raise ValidationError("English and Korean fields are required")


def _unknown_folder(folder_id: Optional[str]) -> ValidationError:
    return ValidationError(f"Unknown folder: {folder_id}")


def selection_from_query(
    kind: SelectionKind,
    folder_id: Optional[str],
    folder_ids: Optional[list[str]],
    include_unassigned: bool,
    starred_only: bool,
) -> Selection:
    if kind == SelectionKind.FOLDER and not folder_id:
        raise ValidationError("folder_id is required for a folder selection")
    return Selection(
        kind=kind,
        folder_id=folder_id,
        folder_ids=set(folder_ids or []),
        include_unassigned=include_unassigned,
        starred_only=starred_only,
    )


@router.get(f"{PREFIX}/data", response_model=DataResponse, tags=["vocabulary"])
async def get_data(vocabulary: Vocabulary) -> DataResponse:
    return DataResponse(data=await vocabulary.snapshot())


# Words ------------------------------------------------------------------
@router.get(f"{PREFIX}/words", response_model=WordListResponse, tags=["vocabulary"])
async def list_words(
    vocabulary: Vocabulary,
    kind: SelectionKind = SelectionKind.ALL,
    folder_id: Optional[str] = None,
    folder_ids: Optional[list[str]] = Query(default=None),
    include_unassigned: bool = True,
    starred_only: bool = False,
    q: str = "",
) -> WordListResponse:
    selection = selection_from_query(
        kind, folder_id, folder_ids, include_unassigned, starred_only
    )
    words = await vocabulary.list_words(selection, q)
    return WordListResponse(total=len(words), words=words)


@router.post(
    f"{PREFIX}/words",
    response_model=WordResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["vocabulary"],
)
async def add_word(req: AddWordRequest, vocabulary: Vocabulary) -> WordResponse:
    _require_text(req.english, req.korean)
    dataset, changed = await vocabulary.apply(
        mutators.add_word, req.english, req.korean, req.korean2, req.folder_id
    )
    if not changed:
        raise _unknown_folder(req.folder_id)
    # new words are prepended
    return WordResponse(word=dataset.words[0])


@router.put(
    f"{PREFIX}/words/{{word_id}}", response_model=WordResponse, tags=["vocabulary"]
)
async def update_word(
    word_id: str, req: UpdateWordRequest, vocabulary: Vocabulary
) -> WordResponse:
    _require_text(req.english, req.korean)
    current = await vocabulary.snapshot()
    existing = current.find_word(word_id)
    if existing is None:
        raise NotFoundError("Word not found")
    changes = {
        "english": req.english,
        "korean": req.korean,
        "korean2": req.korean2,
        "folder_id": req.folder_id,
    }
    if req.is_starred is not None:
        changes["is_starred"] = req.is_starred
    dataset, changed = await vocabulary.apply(
        mutators.update_word, existing.model_copy(update=changes)
    )
    if not changed:
        # missing word or unknown folder
        if dataset.find_word(word_id) is None:
            raise NotFoundError("Word not found")
        raise _unknown_folder(req.folder_id)
    return WordResponse(word=dataset.find_word(word_id))


@router.delete(
    f"{PREFIX}/words/{{word_id}}", response_model=WordResponse, tags=["vocabulary"]
)
async def delete_word(word_id: str, vocabulary: Vocabulary) -> WordResponse:
    await vocabulary.delete_word(word_id)
    return WordResponse()


@router.post(
    f"{PREFIX}/words/{{word_id}}/star", response_model=WordResponse, tags=["vocabulary"]
)
async def toggle_star(word_id: str, vocabulary: Vocabulary) -> WordResponse:
    dataset = await vocabulary.toggle_star(word_id)
    word = dataset.find_word(word_id)
    if word is None:
        raise NotFoundError("Word not found")
    return WordResponse(word=word)


@router.post(f"{PREFIX}/words/move", response_model=DataResponse, tags=["vocabulary"])
async def move_words(req: MoveWordsRequest, vocabulary: Vocabulary) -> DataResponse:
    dataset, changed = await vocabulary.apply(
        mutators.move_words, req.word_ids, req.destination_folder_id
    )
    if not changed and req.word_ids:
        raise _unknown_folder(req.destination_folder_id)
    return DataResponse(data=dataset)


# Folders ----------------------------------------------------------------
@router.get(f"{PREFIX}/folders", response_model=FolderListResponse, tags=["vocabulary"])
async def list_folders(vocabulary: Vocabulary) -> FolderListResponse:
    dataset = await vocabulary.snapshot()
    return FolderListResponse(
        folders=[
            FolderSummary(
                **f.model_dump(),
                word_count=count_words(dataset, Selection.folder(f.id)),
            )
            for f in dataset.folders
        ],
        total_words=len(dataset.words),
        unassigned_count=count_words(dataset, Selection(kind=SelectionKind.UNASSIGNED)),
        starred_count=count_words(dataset, Selection(kind=SelectionKind.STARRED)),
    )


@router.post(
    f"{PREFIX}/folders",
    response_model=DataResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["vocabulary"],
)
async def add_folder(req: FolderRequest, vocabulary: Vocabulary) -> DataResponse:
    if not req.name.strip():
        raise ValidationError("Folder name is required")
    return DataResponse(data=await vocabulary.add_folder(req.name))


@router.patch(
    f"{PREFIX}/folders/{{folder_id}}", response_model=DataResponse, tags=["vocabulary"]
)
async def rename_folder(
    folder_id: str, req: FolderRequest, vocabulary: Vocabulary
) -> DataResponse:
    if not req.name.strip():
        raise ValidationError("Folder name is required")
    if (await vocabulary.snapshot()).find_folder(folder_id) is None:
        raise NotFoundError("Folder not found")
    return DataResponse(data=await vocabulary.rename_folder(folder_id, req.name))


@router.delete(
    f"{PREFIX}/folders/{{folder_id}}", response_model=DataResponse, tags=["vocabulary"]
)
async def delete_folder(
    folder_id: str, vocabulary: Vocabulary, confirm: bool = False
) -> DataResponse:
    return DataResponse(data=await vocabulary.delete_folder(folder_id, confirmed=confirm))

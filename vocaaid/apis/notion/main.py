"""Request handlers for the Notion mirror.

These sit beside the debounced sync: a client can push a whole Dataset,
list the remote words, or create/update/archive single pages. Bad input is a
400; any remote failure is logged and answered with a fixed 500 message.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Request

from vocaaid.apis.errors import remote_call
from vocaaid.core.config import settings
from vocaaid.core.errors import InvalidImportError, MissingRemoteReferenceError, ValidationError
from vocaaid.modules.notion.mirror import RemoteMirror
from vocaaid.modules.vocabulary.transfer import parse_import, sanitize_dataset, sanitize_word
from .schemas import (
    RemoteDeleteRequest,
    RemoteSyncResponse,
    RemoteWordRequest,
    RemoteWordResponse,
    RemoteWordsResponse,
    SuccessResponse,
)


router = APIRouter()

PREFIX = f"/{settings.app.version}/notion"


def _mirror(request: Request) -> RemoteMirror:
    return request.app.state.vocabulary.mirror


def _require_text(req: RemoteWordRequest) -> None:
    if not req.english.strip() or not req.korean.strip():
        raise ValidationError("English and Korean fields are required")


@router.post(f"{PREFIX}/sync", response_model=RemoteSyncResponse, tags=["notion"])
async def sync_dataset(request: Request, payload: Any = Body(...)) -> RemoteSyncResponse:
    try:
        dataset = parse_import(payload)
    except InvalidImportError as e:
        raise InvalidImportError("Invalid data structure") from e
    async with remote_call("Failed to sync data"):
        created = await _mirror(request).push_all(
            sanitize_dataset(dataset, strip_markup=False)
        )
    return RemoteSyncResponse(
        message="Data synced successfully",
        synced_at=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        created=len(created),
    )


@router.get(f"{PREFIX}/words", response_model=RemoteWordsResponse, tags=["notion"])
async def fetch_words(request: Request) -> RemoteWordsResponse:
    async with remote_call("Failed to fetch words"):
        words = await _mirror(request).fetch_all()
    return RemoteWordsResponse(words=words)


@router.post(f"{PREFIX}/words", response_model=RemoteWordResponse, tags=["notion"])
async def create_word(req: RemoteWordRequest, request: Request) -> RemoteWordResponse:
    _require_text(req)
    word = sanitize_word(req.to_word())
    async with remote_call("Failed to create word"):
        remote_id = await _mirror(request).create(word)
    return RemoteWordResponse(word=word.model_copy(update={"remote_id": remote_id}))


@router.put(f"{PREFIX}/words", response_model=RemoteWordResponse, tags=["notion"])
async def update_word(req: RemoteWordRequest, request: Request) -> RemoteWordResponse:
    if not req.remote_id:
        raise MissingRemoteReferenceError("Remote page ID is required for update")
    _require_text(req)
    word = sanitize_word(req.to_word())
    async with remote_call("Failed to update word"):
        await _mirror(request).update(word)
    return RemoteWordResponse(word=word)


@router.delete(f"{PREFIX}/words", response_model=SuccessResponse, tags=["notion"])
async def delete_word(req: RemoteDeleteRequest, request: Request) -> SuccessResponse:
    if not req.remote_id:
        raise MissingRemoteReferenceError()
    async with remote_call("Failed to delete word"):
        await _mirror(request).delete(req.remote_id)
    return SuccessResponse()

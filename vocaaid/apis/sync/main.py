from __future__ import annotations

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from vocaaid.apis.deps import Vocabulary
from vocaaid.core.config import settings
from vocaaid.modules.sync.coordinator import SyncStatus
from vocaaid.modules.vocabulary.models import Word


router = APIRouter()

PREFIX = f"/{settings.app.version}/sync"


class ConnectivityRequest(BaseModel):
    online: bool


class SyncStatusResponse(BaseModel):
    success: bool = True
    status: SyncStatus


class PushResponse(SyncStatusResponse):
    pushed: bool


class RefreshResponse(SyncStatusResponse):
    pulled: bool
    words: Optional[list[Word]] = None


@router.get(f"{PREFIX}/status", response_model=SyncStatusResponse, tags=["sync"])
async def sync_status(vocabulary: Vocabulary) -> SyncStatusResponse:
    return SyncStatusResponse(status=vocabulary.coordinator.status())


@router.post(f"{PREFIX}/push", response_model=PushResponse, tags=["sync"])
async def push_now(vocabulary: Vocabulary) -> PushResponse:
    """Manual sync: push immediately instead of waiting for the debounce."""
    pushed = await vocabulary.coordinator.sync()
    return PushResponse(pushed=pushed, status=vocabulary.coordinator.status())


@router.post(f"{PREFIX}/refresh", response_model=RefreshResponse, tags=["sync"])
async def refresh(vocabulary: Vocabulary) -> RefreshResponse:
    words = await vocabulary.coordinator.refresh()
    return RefreshResponse(
        pulled=words is not None, words=words, status=vocabulary.coordinator.status()
    )


@router.post(f"{PREFIX}/connectivity", response_model=SyncStatusResponse, tags=["sync"])
async def set_connectivity(
    req: ConnectivityRequest, vocabulary: Vocabulary
) -> SyncStatusResponse:
    vocabulary.coordinator.set_online(req.online)
    return SyncStatusResponse(status=vocabulary.coordinator.status())

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Body, Response

from vocaaid.apis.deps import Vocabulary
from vocaaid.apis.vocabulary.schemas import DataResponse
from vocaaid.core.config import settings
from vocaaid.core.errors import InvalidImportError
from vocaaid.core.logging import get_logger
from vocaaid.modules.vocabulary.models import Dataset
from vocaaid.modules.vocabulary.transfer import build_export, export_filename, parse_import


router = APIRouter()
logger = get_logger(__name__)

PREFIX = f"/{settings.app.version}"


def _file_response(dataset: Dataset) -> Response:
    body = json.dumps(build_export(dataset), ensure_ascii=False, indent=2)
    return Response(
        content=body,
        media_type="application/json",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename()}"'
        },
    )


@router.post(f"{PREFIX}/export", tags=["transfer"])
async def export_posted(payload: Any = Body(...)) -> Response:
    """Sanitized download of the Dataset sent in the body."""
    try:
        dataset = parse_import(payload)
    except InvalidImportError as e:
        raise InvalidImportError("Invalid data structure") from e
    return _file_response(dataset)


@router.get(f"{PREFIX}/export", tags=["transfer"])
async def export_stored(vocabulary: Vocabulary) -> Response:
    """Sanitized download of the stored Dataset."""
    return _file_response(await vocabulary.snapshot())


@router.post(f"{PREFIX}/import", response_model=DataResponse, tags=["transfer"])
async def import_data(
    vocabulary: Vocabulary, payload: Any = Body(...), confirm: bool = False
) -> DataResponse:
    """Replace the whole Dataset with an exported document (needs ``confirm``)."""
    dataset = await vocabulary.import_document(payload, confirmed=confirm)
    return DataResponse(data=dataset)

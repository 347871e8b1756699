"""Key/value persistence of the whole Dataset under one namespaced key."""

from __future__ import annotations

import json
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vocaaid.core.db.base import session_scope
from vocaaid.core.db.schemas.storage import KeyValueEntry
from vocaaid.core.errors import PersistenceReadError
from vocaaid.core.logging import get_logger
from vocaaid.modules.vocabulary.models import Dataset, Word

logger = get_logger(__name__)


class DatasetStore:
    """Loads and overwrites the Dataset document.

    Reads never fail: a missing, undecodable or schema-invalid document is
    treated as an empty Dataset. The first ``load`` of the process also folds
    a pre-folder word list stored under ``legacy_key`` into the new shape.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        *,
        key: str = "vocab-data",
        legacy_key: Optional[str] = "vocab-words",
    ) -> None:
        self.session_maker = session_maker
        self.key = key
        self.legacy_key = legacy_key
        self._legacy_checked = legacy_key is None

    # Raw key access -----------------------------------------------------
    async def get_raw(self, key: str) -> Optional[str]:
        async with self.session_maker() as session:
            entry = await session.get(KeyValueEntry, key)
            return entry.value if entry else None

    async def put_raw(self, key: str, value: str) -> None:
        async with session_scope(self.session_maker) as session:
            entry = await session.get(KeyValueEntry, key)
            if entry is None:
                session.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value

    async def delete_raw(self, key: str) -> None:
        async with session_scope(self.session_maker) as session:
            await session.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))

    # Dataset ------------------------------------------------------------
    @staticmethod
    def decode(raw: str) -> Dataset:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise PersistenceReadError(f"Stored document is not JSON: {e}") from e
        try:
            return Dataset.model_validate(data)
        except PydanticValidationError as e:
            raise PersistenceReadError(f"Stored document has the wrong shape: {e}") from e

    async def _load_current(self) -> Dataset:
        raw = await self.get_raw(self.key)
        if raw is None:
            return Dataset()
        try:
            return self.decode(raw)
        except PersistenceReadError as e:
            logger.warning(f"Ignoring unreadable data under '{self.key}': {e.message}")
            return Dataset()

    async def load(self) -> Dataset:
        if not self._legacy_checked:
            self._legacy_checked = True
            await self.migrate_legacy()
        return await self._load_current()

    async def save(self, dataset: Dataset) -> None:
        payload = json.dumps(dataset.to_document(), ensure_ascii=False)
        await self.put_raw(self.key, payload)

    # Import overwrites the same way a mutation does
    replace = save

    async def migrate_legacy(self) -> bool:
        """Move a legacy word array into the Dataset; returns True if migrated.

        Runs at most once per stored legacy document: the legacy key is
        removed after it has been read, whether or not the words were used.
        Errors are logged and swallowed.
        """
        if self.legacy_key is None:
            return False
        try:
            raw = await self.get_raw(self.legacy_key)
            if raw is None:
                return False
            try:
                old_words = json.loads(raw)
                if not isinstance(old_words, list) or not old_words:
                    return False
                current = await self._load_current()
                if not current.is_empty():
                    logger.info("Legacy word list found but data already exists; dropping it")
                    return False
                words = [Word.model_validate({**w, "folderId": None}) for w in old_words]
                await self.save(Dataset(words=words))
                logger.info(f"Migrated {len(words)} legacy words into '{self.key}'")
                return True
            finally:
                await self.delete_raw(self.legacy_key)
        except Exception:
            logger.exception("Failed to migrate legacy words")
            return False

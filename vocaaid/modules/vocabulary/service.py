"""Single write path for the Dataset.

Every change goes load -> pure mutator -> save -> mark dirty under one
``asyncio.Lock``, so two requests never interleave a read-modify-write on
the stored document. Remote pushes read a snapshot and only take the lock
again to record the page ids they created.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Iterable, Optional

from vocaaid.core.config import SyncSettings
from vocaaid.core.errors import ConfirmationRequired, TransportError
from vocaaid.core.logging import get_logger
from vocaaid.modules.notion.mirror import RemoteMirror
from vocaaid.modules.sync.coordinator import SyncCoordinator
from vocaaid.modules.vocabulary import mutators
from vocaaid.modules.vocabulary.models import Dataset, Selection, Word
from vocaaid.modules.vocabulary.store import DatasetStore
from vocaaid.modules.vocabulary.transfer import parse_import, sanitize_dataset

logger = get_logger(__name__)


class VocabularyService:
    def __init__(
        self,
        store: DatasetStore,
        mirror: RemoteMirror,
        *,
        sync: Optional[SyncSettings] = None,
    ) -> None:
        sync = sync or SyncSettings()
        self.store = store
        self.mirror = mirror
        self._lock = asyncio.Lock()
        self.coordinator = SyncCoordinator(
            push=self.push_remote,
            pull=self.pull_remote,
            delay=sync.debounce_seconds,
            online=sync.start_online,
        )

    async def snapshot(self) -> Dataset:
        return await self.store.load()

    async def apply(
        self, fn: Callable[..., Dataset], *args: Any, **kwargs: Any
    ) -> tuple[Dataset, bool]:
        """Run ``fn`` under the lock; the flag is False when it changed nothing."""
        async with self._lock:
            current = await self.store.load()
            updated = fn(current, *args, **kwargs)
            if updated is current:
                return current, False
            await self.store.save(updated)
        self.coordinator.mark_dirty()
        return updated, True

    async def mutate(
        self, fn: Callable[..., Dataset], *args: Any, **kwargs: Any
    ) -> Dataset:
        dataset, _ = await self.apply(fn, *args, **kwargs)
        return dataset

    # Words --------------------------------------------------------------
    async def add_word(
        self,
        english: str,
        korean: str,
        korean2: Optional[str] = None,
        folder_id: Optional[str] = None,
    ) -> Dataset:
        return await self.mutate(mutators.add_word, english, korean, korean2, folder_id)

    async def delete_word(self, word_id: str) -> Dataset:
        return await self.mutate(mutators.delete_word, word_id)

    async def update_word(self, word: Word) -> Dataset:
        return await self.mutate(mutators.update_word, word)

    async def toggle_star(self, word_id: str) -> Dataset:
        return await self.mutate(mutators.toggle_star, word_id)

    async def set_star(self, word_id: str, starred: bool) -> Dataset:
        return await self.mutate(mutators.set_star, word_id, starred)

    async def move_words(
        self, word_ids: Iterable[str], destination_folder_id: Optional[str]
    ) -> Dataset:
        return await self.mutate(mutators.move_words, list(word_ids), destination_folder_id)

    # Folders ------------------------------------------------------------
    async def add_folder(self, name: str) -> Dataset:
        return await self.mutate(mutators.add_folder, name)

    async def rename_folder(self, folder_id: str, name: str) -> Dataset:
        return await self.mutate(mutators.rename_folder, folder_id, name)

    async def delete_folder(self, folder_id: str, *, confirmed: bool) -> Dataset:
        if not confirmed:
            raise ConfirmationRequired(
                "Deleting a folder moves its words to unassigned; confirm to proceed"
            )
        return await self.mutate(mutators.delete_folder, folder_id, confirmed=True)

    # Queries ------------------------------------------------------------
    async def list_words(
        self, selection: Optional[Selection] = None, query: str = ""
    ) -> list[Word]:
        return mutators.search_words(await self.snapshot(), query, selection)

    # Import -------------------------------------------------------------
    async def import_document(self, document: Any, *, confirmed: bool) -> Dataset:
        dataset = parse_import(document)
        if not confirmed:
            raise ConfirmationRequired(
                "Importing overwrites the current word book; confirm to proceed"
            )
        async with self._lock:
            await self.store.replace(dataset)
        logger.info(
            f"Imported {len(dataset.folders)} folders and {len(dataset.words)} words"
        )
        self.coordinator.mark_dirty()
        return dataset

    # Remote mirror ------------------------------------------------------
    async def push_remote(self) -> None:
        async with self._lock:
            dataset = await self.store.load()
        try:
            created = await self.mirror.push_all(
                sanitize_dataset(dataset, strip_markup=False)
            )
        except TransportError as e:
            # pages made before the failure must not be created again
            await self._record_remote_ids(e.created)
            raise
        await self._record_remote_ids(created)

    async def _record_remote_ids(self, created: dict[str, str]) -> None:
        if not created:
            return
        async with self._lock:
            latest = await self.store.load()
            updated = mutators.assign_remote_ids(latest, created)
            if updated is not latest:
                # bookkeeping only; these ids do not need pushing back
                await self.store.save(updated)

    async def pull_remote(self) -> list[Word]:
        """Fetch the remote word list; a non-empty result replaces local words.

        Rows without English or Korean text are skipped and folder ids that
        name no local folder are cleared.
        """
        fetched = await self.mirror.fetch_all()
        if not fetched:
            return fetched
        async with self._lock:
            current = await self.store.load()
            words = mutators.adopt_remote_words(current, fetched)
            skipped = len(fetched) - len(words)
            if skipped:
                logger.warning(f"Skipped {skipped} remote rows without English or Korean text")
            if not words:
                return words
            await self.store.save(current.model_copy(update={"words": words}))
        logger.info(f"Replaced local words with {len(words)} remote words")
        return words

    async def aclose(self) -> None:
        await self.coordinator.aclose()

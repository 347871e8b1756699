import json

import httpx
import pytest

from vocaaid.core.config import SyncSettings
from vocaaid.core.errors import ConfirmationRequired, InvalidImportError
from vocaaid.modules.notion.mirror import NotionMirror
from vocaaid.modules.vocabulary import mutators
from vocaaid.modules.vocabulary.models import Dataset, Word
from vocaaid.modules.vocabulary.service import VocabularyService


class RecordingMirror:
    def __init__(self, remote_words=None):
        self.remote_words = remote_words or []
        self.pushed = []

    async def fetch_all(self):
        return list(self.remote_words)

    async def create(self, word):
        return f"page-{word.id}"

    async def update(self, word):
        return None

    async def delete(self, remote_id):
        return None

    async def push_all(self, dataset):
        self.pushed.append(dataset)
        return {w.id: f"page-{w.id}" for w in dataset.words if not w.remote_id}


def _service(store, mirror=None):
    return VocabularyService(
        store,
        mirror or RecordingMirror(),
        sync=SyncSettings(SYNC_DEBOUNCE_SECONDS=60, SYNC_START_ONLINE=True),
    )


class TestMutations:
    def test_mutation_persists_and_marks_dirty(self, with_store):
        async def scenario(store):
            service = _service(store)
            await service.add_word("cat", "고양이")
            dirty = service.coordinator.has_local_changes
            stored = await store.load()
            await service.aclose()
            return dirty, stored

        dirty, stored = with_store(scenario)
        assert dirty is True
        assert [w.english for w in stored.words] == ["cat"]

    def test_noop_does_not_mark_dirty(self, with_store):
        async def scenario(store):
            service = _service(store)
            await service.delete_word("missing")
            await service.add_word("  ", "x")
            return service.coordinator.has_local_changes

        assert with_store(scenario) is False

    def test_delete_folder_needs_confirmation(self, with_store, dataset):
        async def scenario(store):
            await store.save(dataset)
            service = _service(store)
            with pytest.raises(ConfirmationRequired):
                await service.delete_folder("f1", confirmed=False)
            updated = await service.delete_folder("f1", confirmed=True)
            await service.aclose()
            return updated

        updated = with_store(scenario)
        assert [f.id for f in updated.folders] == ["f2"]
        assert updated.find_word("w1").folder_id is None


class TestImport:
    def test_shape_is_checked_before_confirmation(self, with_store):
        async def scenario(store):
            service = _service(store)
            with pytest.raises(InvalidImportError):
                await service.import_document({"words": []}, confirmed=False)
            with pytest.raises(ConfirmationRequired):
                await service.import_document({"folders": [], "words": []}, confirmed=False)

        with_store(scenario)

    def test_import_replaces_dataset(self, with_store, dataset):
        async def scenario(store):
            await store.save(dataset)
            service = _service(store)
            document = {"folders": [], "words": [{"id": "n", "english": "a", "korean": "b"}]}
            await service.import_document(document, confirmed=True)
            stored = await store.load()
            dirty = service.coordinator.has_local_changes
            await service.aclose()
            return stored, dirty

        stored, dirty = with_store(scenario)
        assert stored.folders == []
        assert [w.id for w in stored.words] == ["n"]
        assert dirty is True


class TestRemote:
    def test_push_records_created_ids(self, with_store, dataset):
        mirror = RecordingMirror()

        async def scenario(store):
            await store.save(dataset)
            service = _service(store, mirror)
            service.coordinator.mark_dirty()
            pushed = await service.coordinator.sync()
            stored = await store.load()
            dirty = service.coordinator.has_local_changes
            await service.aclose()
            return pushed, stored, dirty

        pushed, stored, dirty = with_store(scenario)
        assert pushed is True
        assert dirty is False
        assert stored.find_word("w1").remote_id == "page-w1"
        assert len(mirror.pushed) == 1

    def test_pull_replaces_words_but_keeps_folders(self, with_store, dataset):
        remote = [Word(id="p1", english="x", korean="y", remote_id="p1")]

        async def scenario(store):
            await store.save(dataset)
            service = _service(store, RecordingMirror(remote_words=remote))
            words = await service.coordinator.refresh()
            stored = await store.load()
            await service.aclose()
            return words, stored

        words, stored = with_store(scenario)
        assert [w.id for w in words] == ["p1"]
        assert [w.id for w in stored.words] == ["p1"]
        assert stored.folders == dataset.folders

    def test_pull_skips_blank_rows_and_unknown_folders(self, with_store, dataset):
        remote = [
            Word(id="p1", english="", korean="", remote_id="p1"),
            Word(id="p2", english="pear", korean="배", folder_id="f1", remote_id="p2"),
            Word(id="p3", english="plum", korean="자두", folder_id="elsewhere", remote_id="p3"),
        ]

        async def scenario(store):
            await store.save(dataset)
            service = _service(store, RecordingMirror(remote_words=remote))
            words = await service.coordinator.refresh()
            stored = await store.load()
            await service.aclose()
            return words, stored

        words, stored = with_store(scenario)
        assert [w.id for w in words] == ["p2", "p3"]
        assert all(w.english.strip() and w.korean.strip() for w in stored.words)
        assert stored.find_word("p2").folder_id == "f1"
        assert stored.find_word("p3").folder_id is None

    def test_pull_of_only_blank_rows_keeps_local_data(self, with_store, dataset):
        remote = [Word(id="p1", english=" ", korean="", remote_id="p1")]

        async def scenario(store):
            await store.save(dataset)
            service = _service(store, RecordingMirror(remote_words=remote))
            service.coordinator.mark_dirty()
            await service.coordinator.refresh()
            dirty = service.coordinator.has_local_changes
            stored = await store.load()
            await service.aclose()
            return stored, dirty

        stored, dirty = with_store(scenario)
        assert stored == dataset
        assert dirty is True

    def test_failed_push_keeps_pages_already_created(self, with_store):
        titles = []

        def handler(request):
            if request.method == "PATCH":
                return httpx.Response(200, json={"id": request.url.path.rsplit("/", 1)[-1]})
            body = json.loads(request.content)
            titles.append(body["properties"]["English"]["title"][0]["text"]["content"])
            if len(titles) == 2:
                return httpx.Response(502, json={"message": "bad gateway"})
            return httpx.Response(200, json={"id": f"page-{len(titles)}"})

        async def scenario(store):
            await store.save(
                Dataset(
                    words=[
                        Word(id="a", english="a", korean="가"),
                        Word(id="b", english="b", korean="나"),
                    ]
                )
            )
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                mirror = NotionMirror(token="t", database_id="db", client=client)
                service = _service(store, mirror)
                service.coordinator.mark_dirty()
                first = await service.coordinator.sync()
                after_failure = await store.load()
                second = await service.coordinator.sync()
                stored = await store.load()
                await service.aclose()
            return first, after_failure, second, stored

        first, after_failure, second, stored = with_store(scenario)
        assert first is False
        assert after_failure.find_word("a").remote_id == "page-1"
        assert after_failure.find_word("b").remote_id is None
        assert second is True
        assert titles == ["a", "b", "b"]
        assert stored.find_word("b").remote_id == "page-3"

    def test_empty_pull_leaves_local_data(self, with_store, dataset):
        async def scenario(store):
            await store.save(dataset)
            service = _service(store)
            await service.coordinator.refresh()
            return await store.load()

        assert with_store(scenario) == dataset


def test_set_star_from_session(with_store, dataset):
    async def scenario(store):
        await store.save(dataset)
        service = _service(store)
        await service.set_star("w2", True)
        await service.set_star("w2", True)
        stored = await store.load()
        await service.aclose()
        return stored

    assert with_store(scenario).find_word("w2").is_starred is True


def test_snapshot_of_empty_store(with_store):
    async def scenario(store):
        return await _service(store).snapshot()

    assert with_store(scenario) == Dataset()


def test_folder_deleted_before_add_leaves_no_orphan(with_store, dataset):
    async def scenario(store):
        await store.save(dataset)
        service = _service(store)
        await service.delete_folder("f2", confirmed=True)
        result, changed = await service.apply(
            mutators.add_word, "cat", "고양이", None, "f2"
        )
        stored = await store.load()
        await service.aclose()
        return result, changed, stored

    result, changed, stored = with_store(scenario)
    assert changed is False
    assert result == stored
    assert all(w.folder_id in (None, "f1") for w in stored.words)

import json

from vocaaid.modules.vocabulary.models import Dataset


def test_missing_document_loads_empty(with_store):
    async def scenario(store):
        return await store.load()

    assert with_store(scenario) == Dataset()


def test_save_then_load(with_store, dataset):
    async def scenario(store):
        await store.save(dataset)
        return await store.load(), await store.get_raw("vocab-data")

    loaded, raw = with_store(scenario)
    assert loaded == dataset
    document = json.loads(raw)
    assert document["words"][0]["folderId"] == "f1"
    assert document["words"][0]["isStarred"] is True


class TestUnreadableData:
    def test_malformed_json_loads_empty(self, with_store):
        async def scenario(store):
            await store.put_raw("vocab-data", "{not json")
            return await store.load()

        assert with_store(scenario) == Dataset()

    def test_wrong_shape_loads_empty(self, with_store):
        async def scenario(store):
            await store.put_raw("vocab-data", json.dumps({"words": "nope"}))
            return await store.load()

        assert with_store(scenario) == Dataset()


class TestLegacyMigration:
    """The old word array is read once, then its key is always removed."""

    def test_legacy_words_become_unassigned(self, with_store):
        legacy = [
            {"id": "1", "english": "cat", "korean": "고양이", "isStarred": True},
            {"id": "2", "english": "dog", "korean": "개", "notionPageId": "page-2"},
        ]

        async def scenario(store):
            await store.put_raw("vocab-words", json.dumps(legacy))
            loaded = await store.load()
            return loaded, await store.get_raw("vocab-words")

        loaded, leftover = with_store(scenario)
        assert [w.english for w in loaded.words] == ["cat", "dog"]
        assert all(w.folder_id is None for w in loaded.words)
        assert loaded.words[0].is_starred is True
        assert loaded.words[1].remote_id == "page-2"
        assert leftover is None

    def test_existing_data_wins(self, with_store, dataset):
        async def scenario(store):
            await store.save(dataset)
            await store.put_raw(
                "vocab-words", json.dumps([{"id": "9", "english": "x", "korean": "y"}])
            )
            return await store.load(), await store.get_raw("vocab-words")

        loaded, leftover = with_store(scenario)
        assert loaded == dataset
        assert leftover is None

    def test_broken_legacy_is_dropped(self, with_store):
        async def scenario(store):
            await store.put_raw("vocab-words", "[{broken")
            return await store.load(), await store.get_raw("vocab-words")

        loaded, leftover = with_store(scenario)
        assert loaded == Dataset()
        assert leftover is None

    def test_runs_once_per_store(self, with_store):
        async def scenario(store):
            await store.load()
            await store.put_raw(
                "vocab-words", json.dumps([{"id": "1", "english": "a", "korean": "b"}])
            )
            return await store.load()

        assert with_store(scenario) == Dataset()

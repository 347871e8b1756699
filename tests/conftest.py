import asyncio

import pytest
from fastapi.testclient import TestClient

from vocaaid.core.config import (
    NotionSettings,
    Settings,
    StorageSettings,
    SyncSettings,
)
from vocaaid.core.db.base import build_engine, build_session_maker, create_tables
from vocaaid.modules.vocabulary.models import Dataset, Folder, Word
from vocaaid.modules.vocabulary.store import DatasetStore


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'vocaaid-test.db'}"


@pytest.fixture
def test_settings(db_url):
    return Settings(
        storage=StorageSettings(DATABASE_URL=db_url),
        notion=NotionSettings(NOTION_TOKEN=None, NOTION_DATABASE_ID=None),
        sync=SyncSettings(SYNC_DEBOUNCE_SECONDS=60, SYNC_START_ONLINE=False),
    )


@pytest.fixture
def client(test_settings):
    from main import create_app

    with TestClient(create_app(test_settings)) as c:
        yield c


@pytest.fixture
def with_store(db_url):
    """Run ``fn(store)`` against a fresh store on the temp database."""

    def run(fn, legacy_key="vocab-words"):
        async def go():
            engine = build_engine(StorageSettings(DATABASE_URL=db_url))
            try:
                await create_tables(engine)
                store = DatasetStore(
                    build_session_maker(engine), key="vocab-data", legacy_key=legacy_key
                )
                return await fn(store)
            finally:
                await engine.dispose()

        return asyncio.run(go())

    return run


@pytest.fixture
def dataset():
    return Dataset(
        folders=[Folder(id="f1", name="Fruit"), Folder(id="f2", name="Animals")],
        words=[
            Word(id="w1", english="apple", korean="사과", folder_id="f1", is_starred=True),
            Word(id="w2", english="banana", korean="바나나", folder_id="f1"),
            Word(id="w3", english="dog", korean="개", korean2="강아지", folder_id="f2"),
            Word(id="w4", english="hello", korean="안녕", is_starred=True),
        ],
    )

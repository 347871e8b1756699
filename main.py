from fastapi import FastAPI
from contextlib import asynccontextmanager
from typing import Optional

from vocaaid.core.config import Settings, settings as default_settings
from vocaaid.core.db.base import build_engine, build_session_maker, create_tables
from vocaaid.core.logging import get_logger
from vocaaid.apis.errors import install_error_handlers
from vocaaid.apis.vocabulary.main import router as vocabulary_router
from vocaaid.apis.transfer.main import router as transfer_router
from vocaaid.apis.notion.main import router as notion_router
from vocaaid.apis.study.main import router as study_router
from vocaaid.apis.quiz.main import router as quiz_router
from vocaaid.apis.sync.main import router as sync_router
from vocaaid.modules.notion.mirror import build_mirror
from vocaaid.modules.sessions.manager import quiz_manager, study_manager
from vocaaid.modules.vocabulary.service import VocabularyService
from vocaaid.modules.vocabulary.store import DatasetStore

import uvicorn
from fastapi.middleware.cors import CORSMiddleware

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = build_engine(settings.storage)
        await create_tables(engine)
        store = DatasetStore(
            build_session_maker(engine),
            key=settings.storage.key,
            legacy_key=settings.storage.legacy_key,
        )
        mirror = build_mirror(settings.notion)
        vocabulary = VocabularyService(store, mirror, sync=settings.sync)
        study_sessions = study_manager()
        quiz_sessions = quiz_manager()
        for manager in (study_sessions, quiz_sessions):
            manager.start(
                idle_seconds=settings.sessions.idle_seconds,
                sweep_interval=settings.sessions.sweep_seconds,
            )

        app.state.vocabulary = vocabulary
        app.state.study_sessions = study_sessions
        app.state.quiz_sessions = quiz_sessions
        logger.info(
            f"{settings.app.name} ready (remote mirror: "
            f"{'notion' if settings.notion.is_configured else 'offline'})"
        )
        try:
            yield
        finally:
            await vocabulary.aclose()
            await study_sessions.stop()
            await quiz_sessions.stop()
            await engine.dispose()

    app = FastAPI(
        title=settings.app.name, version=settings.app.version, lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    install_error_handlers(app)

    app.include_router(vocabulary_router)
    app.include_router(transfer_router)
    app.include_router(notion_router)
    app.include_router(study_router)
    app.include_router(quiz_router)
    app.include_router(sync_router)

    @app.get("/")
    async def root():
        return {
            "status": "ok",
            "app": settings.app.name,
            "version": settings.app.version,
            "remote": "notion" if settings.notion.is_configured else "offline",
        }

    return app


app = create_app()


if __name__ == "__main__":
    try:
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=default_settings.app.port,
            reload=not default_settings.app.is_production,
        )
    except Exception as e:
        logger.error(f"An error occurred when starting the server: {e}.")

"""
FastAPI application for the QuizArena backend.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quizarena.core.config import settings
from quizarena.core.database import DatabaseManager, SessionLocal, check_database_connection, init_db
from quizarena.core.errors import register_exception_handlers
from quizarena.core.logging_config import setup_logging
from quizarena.routers import api_router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    DatabaseManager.create_all_tables()
    db = SessionLocal()
    try:
        init_db(db)
    finally:
        db.close()
    logger.info("%s %s started", settings.PROJECT_NAME, settings.VERSION)
    yield


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description=settings.DESCRIPTION,
        lifespan=lifespan
    )

    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.BACKEND_CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        database_ok = check_database_connection()
        return {
            "success": database_ok,
            "data": {"database": "ok" if database_ok else "unavailable"}
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("quizarena.main:app", host="0.0.0.0", port=3000)

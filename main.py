import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from db import Base, SessionLocal, engine
from repository import QuestionStore
from stats import StatisticsEngine

# Routers
from routers.health import router as health_router
from routers.questions import router as questions_router
from routers.statistics import router as statistics_router

logger = logging.getLogger("math-quiz")
logging.basicConfig(level=logging.INFO)

# Front ends allowed to call the API; ";"-separated
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv(
        "QUIZ_CORS_ORIGINS", "http://localhost:5173;http://127.0.0.1:5173;http://localhost:3001"
    ).split(";")
    if o.strip()
]


def _attach(app: FastAPI, store: QuestionStore) -> None:
    app.state.store = store
    app.state.stats = StatisticsEngine(store)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "store", None) is None:
        Base.metadata.create_all(engine)
        _attach(app, QuestionStore(SessionLocal))
        logger.info("Question store opened at %s", engine.url.render_as_string(hide_password=True))
    yield


def create_app(store: Optional[QuestionStore] = None) -> FastAPI:
    app = FastAPI(title="Math Quiz – Question & Statistics API", lifespan=lifespan)
    app.state.store = None
    if store is not None:
        _attach(app, store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def health_root():
        return {"ok": True}

    app.include_router(questions_router)  # /api/new-question, /api/submit-answer, ...
    app.include_router(statistics_router)  # /api/statistics, /api/today, /api/daily, ...
    app.include_router(health_router)  # /health/...
    return app


app = create_app()

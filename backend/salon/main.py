# /backend/salon/main.py

from __future__ import annotations
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from salon.config import CORS_ORIGINS, LOG_LEVEL, SESSION_STORAGE_PATH
from salon.db import RecordStore
from salon.services.auth_service import AuthStub, SessionStorage
from salon.api.routers import auth, user, client, visit, measurement

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_app(
    store: RecordStore | None = None,
    auth_stub: AuthStub | None = None,
) -> FastAPI:
    """
    스토어와 AuthStub 을 주입받아 앱을 만든다.
    지정하지 않으면 seed 데이터 스토어 + 설정의 세션 저장소를 쓴다.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # 앱 시작 시
        app.state.store = store or RecordStore.seeded()
        app.state.auth = auth_stub or AuthStub(SessionStorage(SESSION_STORAGE_PATH))
        logger.info("record store ready: %s", ", ".join(app.state.store.table_names()))
        yield

    app = FastAPI(
        title="Salon Records API",
        lifespan=lifespan,
    )

    # CORS 미들웨어를 가장 먼저 등록
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router)
    app.include_router(user.router)
    app.include_router(client.router)
    app.include_router(visit.router)
    app.include_router(measurement.router)

    @app.get("/health")
    async def health():
        return {"ok": True}

    return app


app = create_app()

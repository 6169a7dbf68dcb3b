"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어, 라우터, 주기 작업 등록.

FastAPI application entry point — Middleware, routers and the periodic
expiry sweep started in the lifespan.
"""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from loomtrack.config import settings
from loomtrack.database import async_session
from loomtrack.middleware.axiom_logging import AxiomLoggingMiddleware
from loomtrack.services.expiry_service import run_sweep_loop
from loomtrack.utils.clock import system_clock

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """시작 시 만료 정리 루프를 띄우고 종료 시 취소합니다.

    Start the expiry sweep loop on startup (unless SWEEP_INTERVAL_SECONDS is 0)
    and cancel it on shutdown.
    """
    sweep_task: asyncio.Task | None = None
    if settings.SWEEP_INTERVAL_SECONDS > 0:
        sweep_task = asyncio.create_task(
            run_sweep_loop(async_session, system_clock, settings.SWEEP_INTERVAL_SECONDS)
        )
    yield
    if sweep_task is not None:
        sweep_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweep_task
        logger.info("expiry sweep loop stopped")


app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Axiom API 로깅 미들웨어 — Axiom API request/response logging
# CORS보다 먼저 등록하여 모든 요청을 캡처 (Registered before CORS to capture all requests)
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 — Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# 라우터 등록 — Router registration
# ---------------------------------------------------------------------------
# auth_router: 회원가입/로그인/프로필 (Sign-up, login, profile)
# admin_router: 직기/근무 관리, 만료 정리, 점검 (Loom & shift admin, sweep, diagnostics)
# app_router: 직공 앱 — 내 근무, 직기 가동/정지 (Weaver app: my shifts, loom start/stop)
# sensor_router: 측정값 수집 및 조회 (Reading ingestion and reporting)
from loomtrack.api.auth import router as auth_router  # noqa: E402
from loomtrack.api.admin import admin_router  # noqa: E402
from loomtrack.api.app import app_router  # noqa: E402
from loomtrack.api.sensor import sensor_router  # noqa: E402

app.include_router(auth_router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(admin_router, prefix="/api/v1/admin")
app.include_router(app_router, prefix="/api/v1/app")
app.include_router(sensor_router, prefix="/api/v1/sensor")

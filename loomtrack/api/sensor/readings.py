"""센서 라우터 — 측정값 수집, 실시간 시계열, 최신값, 이력, 통계.

Sensor Router — Reading ingestion, live series, latest reading, per-shift
history and date-range statistics. Any authenticated user may call these.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.api.deps import get_current_user, parse_uuid
from loomtrack.database import get_db
from loomtrack.models.sensor import SensorReading
from loomtrack.models.user import User
from loomtrack.schemas.sensor import LoomStatsResponse, ReadingCreate, ReadingResponse, ShiftHistoryEntry
from loomtrack.services.sensor_service import sensor_service
from loomtrack.utils.clock import Clock, get_clock

router: APIRouter = APIRouter()


@router.post("/readings", response_model=ReadingResponse, status_code=201)
async def ingest_reading(
    data: ReadingCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """누적 측정값 수집 (Ingest a cumulative reading)."""
    reading: SensorReading = await sensor_service.ingest(
        db,
        loom_id=parse_uuid(data.loom_id, "loom_id"),
        production=data.production,
        energy=data.energy,
        now=clock.now(),
        timestamp=data.timestamp,
    )
    result: dict = sensor_service.reading_to_dict(reading)
    await db.commit()
    return result


@router.get("/looms/{loom_id}/live", response_model=list[ReadingResponse])
async def get_live_series(
    loom_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    limit: Annotated[int | None, Query(ge=1, le=1000)] = None,
) -> list[dict]:
    """현재 세션 실시간 시계열, 정지 시 빈 목록."""
    return await sensor_service.live_series(db, loom_id, limit)


@router.get("/looms/{loom_id}/latest", response_model=ReadingResponse)
async def get_latest_reading(
    loom_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    return await sensor_service.latest_reading(db, loom_id)


@router.get("/looms/{loom_id}/history", response_model=list[ShiftHistoryEntry])
async def get_history(
    loom_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    limit: Annotated[int | None, Query(ge=1, le=500)] = None,
) -> list[dict]:
    """최근 완료 근무별 생산/에너지 이력 (Per-shift history, newest first)."""
    return await sensor_service.history_for_loom(db, loom_id, limit)


@router.get("/looms/{loom_id}/stats", response_model=LoomStatsResponse)
async def get_stats(
    loom_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    date_from: Annotated[date | None, Query()] = None,
    date_to: Annotated[date | None, Query()] = None,
) -> dict:
    """기간 통계 — 총계(마지막 측정값), 평균, 측정 개수."""
    return await sensor_service.stats_for_loom(db, loom_id, date_from, date_to)

"""관리자 측정값 라우터 — 보존기간 지난 측정값 정리.

Admin Readings Router — Age-based purge of sensor readings.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.api.deps import require_admin
from loomtrack.config import settings
from loomtrack.database import get_db
from loomtrack.models.user import User
from loomtrack.schemas.common import PurgeResponse
from loomtrack.services.sensor_service import sensor_service
from loomtrack.utils.clock import Clock, get_clock

router: APIRouter = APIRouter()


@router.delete("", response_model=PurgeResponse)
async def purge_readings(
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
    current_user: Annotated[User, Depends(require_admin)],
    older_than_days: Annotated[int | None, Query(ge=1)] = None,
) -> PurgeResponse:
    """older_than_days(기본 SENSOR_RETENTION_DAYS)보다 오래된 측정값 삭제."""
    deleted: int = await sensor_service.purge_readings(
        db, older_than_days or settings.SENSOR_RETENTION_DAYS, clock.now()
    )
    await db.commit()
    return PurgeResponse(deleted_count=deleted)

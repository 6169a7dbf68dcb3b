"""관리자 직기 점검 라우터 — 상태 점검, 복구, 전체 정지.

Admin Diagnostics Router — Loom run-state check, repair and stop-all.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.api.deps import require_admin
from loomtrack.database import get_db
from loomtrack.models.user import User
from loomtrack.schemas.loom import DiagnosticsActionResponse, DiagnosticsResponse
from loomtrack.services.diagnostics_service import diagnostics_service
from loomtrack.utils.clock import Clock, get_clock

router: APIRouter = APIRouter()


@router.get("", response_model=DiagnosticsResponse)
async def diagnose_looms(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    return await diagnostics_service.diagnose(db)


@router.post("/repair", response_model=DiagnosticsActionResponse)
async def repair_looms(
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
    current_user: Annotated[User, Depends(require_admin)],
) -> DiagnosticsActionResponse:
    """가동 상태 불일치 직기 복구 (Repair inconsistent looms)."""
    repaired: int = await diagnostics_service.repair(db, clock.now())
    await db.commit()
    return DiagnosticsActionResponse(action="repair", affected=repaired)


@router.post("/stop-all", response_model=DiagnosticsActionResponse)
async def stop_all_looms(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> DiagnosticsActionResponse:
    """모든 가동 중 직기 정지 (Stop every running loom)."""
    stopped: int = await diagnostics_service.stop_all(db)
    await db.commit()
    return DiagnosticsActionResponse(action="stop_all", affected=stopped)

"""관리자 직기 라우터 — 직기 CRUD, 담당 직공, 배정 해제, 강제 정지, 이력.

Admin Loom Router — Loom CRUD, weaver assignment, forced unassignment,
force stop, upcoming shifts, stored summaries and history export.
"""

from datetime import date
from io import BytesIO
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.api.deps import parse_uuid, require_admin
from loomtrack.database import get_db
from loomtrack.models.loom import Loom
from loomtrack.models.user import User
from loomtrack.schemas.auth import UserResponse
from loomtrack.schemas.loom import LoomCreate, LoomResponse, LoomWeaverUpdate, UnassignResponse
from loomtrack.schemas.sensor import ShiftSummaryResponse
from loomtrack.schemas.shift import ShiftResponse
from loomtrack.services.auth_service import auth_service
from loomtrack.services.loom_service import loom_service
from loomtrack.services.sensor_service import sensor_service
from loomtrack.services.shift_service import shift_service
from loomtrack.utils.clock import Clock, get_clock

router: APIRouter = APIRouter()


@router.get("/looms", response_model=list[LoomResponse])
async def list_looms(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> list[dict]:
    """직기 목록 — 담당 직공 이름과 최신 측정값 포함."""
    looms = await loom_service.list_looms(db)
    return [await loom_service.build_response(db, loom) for loom in looms]


@router.post("/looms", response_model=LoomResponse, status_code=201)
async def create_loom(
    data: LoomCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """직기를 등록합니다 (Register a new loom)."""
    loom: Loom = await loom_service.create_loom(db, data.loom_code)
    result: dict = await loom_service.build_response(db, loom)
    await db.commit()
    return result


@router.get("/looms/{loom_id}", response_model=LoomResponse)
async def get_loom(
    loom_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    loom: Loom = await loom_service.get_loom(db, loom_id)
    return await loom_service.build_response(db, loom)


@router.delete("/looms/{loom_id}", status_code=204)
async def delete_loom(
    loom_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> None:
    """직기 삭제 — 근무, 요약, 측정값도 함께 삭제.

    Delete a loom together with its shifts, summaries and readings.
    """
    await loom_service.delete_loom(db, loom_id)
    await db.commit()


@router.put("/looms/{loom_id}/weaver", response_model=LoomResponse)
async def assign_weaver(
    loom_id: UUID,
    data: LoomWeaverUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """담당 직공 지정/해제 (Set or clear the loom's current weaver)."""
    weaver_id: UUID | None = parse_uuid(data.weaver_id, "weaver_id") if data.weaver_id else None
    loom: Loom = await loom_service.assign_weaver(db, loom_id, weaver_id)
    result: dict = await loom_service.build_response(db, loom)
    await db.commit()
    return result


@router.get("/looms/{loom_id}/shifts", response_model=list[ShiftResponse])
async def list_loom_shifts(
    loom_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
    current_user: Annotated[User, Depends(require_admin)],
    from_date: Annotated[date | None, Query()] = None,
) -> list[dict]:
    """직기의 예정 근무 목록 (기본: 오늘부터).

    Upcoming non-completed shifts of a loom, from today by default.
    """
    shifts = await shift_service.shifts_for_loom(db, loom_id, from_date or clock.today())
    return [await shift_service.build_response(db, s) for s in shifts]


@router.post("/looms/{loom_id}/unassign", response_model=UnassignResponse)
async def unassign_loom(
    loom_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """직기 배정 강제 해제 — 예정 근무 삭제, 정지, 담당 직공 해제.

    Force-unassign a loom: remove future unstarted shifts, stop it and clear
    its current weaver.
    """
    result: dict = await loom_service.force_unassign(db, loom_id, clock.today())
    await db.commit()
    return result


@router.post("/looms/{loom_id}/stop", response_model=LoomResponse)
async def force_stop_loom(
    loom_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """관리자 강제 정지 (Admin force stop)."""
    loom: Loom = await loom_service.stop(db, loom_id, current_user, clock.now())
    result: dict = await loom_service.build_response(db, loom)
    await db.commit()
    return result


@router.get("/looms/{loom_id}/summaries", response_model=list[ShiftSummaryResponse])
async def list_shift_summaries(
    loom_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    limit: Annotated[int | None, Query(ge=1, le=500)] = None,
) -> list[dict]:
    """저장된 근무 요약 목록 (Stored shift summaries, newest first)."""
    return await sensor_service.summaries_for_loom(db, loom_id, limit)


@router.get("/looms/{loom_id}/history/export")
async def export_loom_history(
    loom_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    limit: Annotated[int | None, Query(ge=1, le=500)] = None,
) -> StreamingResponse:
    """근무별 이력을 Excel 파일로 내보냅니다."""
    excel_bytes: bytes = await sensor_service.export_history_excel(db, loom_id, limit)
    return StreamingResponse(
        BytesIO(excel_bytes),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename=loom_{loom_id}_history.xlsx"},
    )


@router.get("/weavers", response_model=list[UserResponse])
async def list_weavers(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> list[UserResponse]:
    """활성 직공 목록 (Active weavers, by name)."""
    weavers = await loom_service.list_weavers(db)
    return [auth_service.to_response(w) for w in weavers]

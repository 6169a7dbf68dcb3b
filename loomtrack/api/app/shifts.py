"""앱 근무 라우터 — 내 활성/예정 근무, 출근 체크, 근무 종료.

App Shift Router — The calling weaver's active and upcoming shifts,
attendance marking and manual shift end.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.api.deps import require_weaver
from loomtrack.database import get_db
from loomtrack.models.shift import Shift
from loomtrack.models.user import User
from loomtrack.schemas.shift import ShiftResponse
from loomtrack.services.shift_service import shift_service
from loomtrack.utils.clock import Clock, get_clock

router: APIRouter = APIRouter()


@router.get("/my/shifts/active", response_model=list[ShiftResponse])
async def list_my_active_shifts(
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
    current_user: Annotated[User, Depends(require_weaver)],
) -> list[dict]:
    """현재 진행 중이거나 곧 시작하는 내 근무.

    My shifts that are running now or start within the lookahead. Expired
    shifts found on the way are closed, so this call commits.
    """
    shifts = await shift_service.active_shifts_for_weaver(db, current_user.id, clock.now())
    result: list[dict] = [await shift_service.build_response(db, s) for s in shifts]
    await db.commit()
    return result


@router.get("/my/shifts/upcoming", response_model=list[ShiftResponse])
async def list_my_upcoming_shifts(
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
    current_user: Annotated[User, Depends(require_weaver)],
    to_date: Annotated[date | None, Query()] = None,
) -> list[dict]:
    """오늘부터의 내 예정 근무 (My upcoming shifts from today)."""
    shifts = await shift_service.upcoming_shifts_for_weaver(db, current_user.id, clock.today(), to_date)
    return [await shift_service.build_response(db, s) for s in shifts]


@router.post("/my/shifts/{shift_id}/attendance", response_model=ShiftResponse)
async def mark_my_attendance(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_weaver)],
) -> dict:
    """출근 체크 (Mark attendance on my shift)."""
    shift: Shift = await shift_service.mark_attendance(db, shift_id, current_user.id)
    result: dict = await shift_service.build_response(db, shift)
    await db.commit()
    return result


@router.post("/my/shifts/{shift_id}/end", response_model=ShiftResponse)
async def end_my_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
    current_user: Annotated[User, Depends(require_weaver)],
) -> dict:
    """근무 종료 — 직기 정지 및 근무 요약 기록.

    End my shift now: the shift is completed, its summary written and the
    loom stopped.
    """
    shift: Shift = await shift_service.end_manually(db, shift_id, current_user.id, clock.now())
    result: dict = await shift_service.build_response(db, shift)
    await db.commit()
    return result

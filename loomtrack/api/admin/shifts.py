"""관리자 근무 라우터 — 근무 배정, 삭제, 만료 정리.

Admin Shift Router — Shift assignment, deletion and expiry sweep.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.api.deps import parse_uuid, require_admin
from loomtrack.database import get_db
from loomtrack.models.shift import Shift
from loomtrack.models.user import User
from loomtrack.schemas.common import SweepResponse
from loomtrack.schemas.shift import ShiftCreate, ShiftResponse
from loomtrack.services.expiry_service import expiry_service
from loomtrack.services.shift_service import shift_service
from loomtrack.utils.clock import Clock, get_clock

router: APIRouter = APIRouter()


@router.post("", response_model=ShiftResponse, status_code=201)
async def assign_shift(
    data: ShiftCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """직공을 직기 근무에 배정합니다.

    Assign a weaver to a loom for a Morning/Evening/Night shift.
    """
    shift: Shift = await shift_service.assign(
        db,
        loom_id=parse_uuid(data.loom_id, "loom_id"),
        weaver_id=parse_uuid(data.weaver_id, "weaver_id"),
        shift_type=data.shift_type,
        scheduled_date=data.scheduled_date,
        today=clock.today(),
    )
    result: dict = await shift_service.build_response(db, shift)
    await db.commit()
    return result


@router.post("/sweep", response_model=SweepResponse)
async def sweep_expired_shifts(
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
    current_user: Annotated[User, Depends(require_admin)],
) -> SweepResponse:
    """종료 시각이 지난 근무를 일괄 종료합니다.

    Close every shift whose window has passed and stop its loom.
    """
    closed_count: int = await expiry_service.sweep(db, clock.now())
    await db.commit()
    return SweepResponse(closed_count=closed_count)


@router.delete("/{shift_id}", status_code=204)
async def delete_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> None:
    """가동 전 근무를 삭제합니다 (Delete a shift that has not started)."""
    await shift_service.delete_shift(db, shift_id)
    await db.commit()

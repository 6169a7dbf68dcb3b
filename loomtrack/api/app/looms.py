"""앱 직기 라우터 — 직기 가동/정지.

App Loom Router — Start and stop a loom from the weaver app.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.api.deps import get_current_user, require_weaver
from loomtrack.database import get_db
from loomtrack.models.loom import Loom
from loomtrack.models.user import User
from loomtrack.schemas.loom import LoomResponse
from loomtrack.services.loom_service import loom_service
from loomtrack.utils.clock import Clock, get_clock

router: APIRouter = APIRouter()


@router.post("/looms/{loom_id}/start", response_model=LoomResponse)
async def start_loom(
    loom_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
    current_user: Annotated[User, Depends(require_weaver)],
) -> dict:
    """근무 시간대 안에서 직기를 가동합니다.

    Start the loom during one of my shift windows on it.
    """
    loom: Loom = await loom_service.start(db, loom_id, current_user.id, clock.now())
    result: dict = await loom_service.build_response(db, loom)
    await db.commit()
    return result


@router.post("/looms/{loom_id}/stop", response_model=LoomResponse)
async def stop_loom(
    loom_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """직기를 정지합니다. 이미 정지된 경우에도 성공.

    Stop the loom; succeeds unchanged when it is already stopped.
    """
    loom: Loom = await loom_service.stop(db, loom_id, current_user, clock.now())
    result: dict = await loom_service.build_response(db, loom)
    await db.commit()
    return result

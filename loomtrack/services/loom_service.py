"""직기 서비스 — 가동/정지 세션 제어 및 직기 관리.

Loom Service — Loom session control (start, stop, forced unassignment) and
loom administration (create, list, delete, weaver assignment).

Run-state changes go through LoomRepository's conditional UPDATEs, so two
concurrent starts on the same loom never both succeed and concurrent stops
converge to "stopped".
"""

import logging
from datetime import date, datetime, timedelta
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.models.loom import Loom
from loomtrack.models.shift import Shift
from loomtrack.models.user import ROLE_ADMIN, ROLE_WEAVER, User
from loomtrack.repositories.loom_repository import loom_repository
from loomtrack.repositories.shift_repository import shift_repository
from loomtrack.repositories.user_repository import user_repository
from loomtrack.services.sensor_service import sensor_service
from loomtrack.services.shift_window import contains, format_clock
from loomtrack.utils.exceptions import (
    DuplicateError,
    ForbiddenError,
    InvalidInputError,
    LoomAlreadyRunningError,
    NoActiveShiftError,
    NotFoundError,
    OutsideShiftWindowError,
)

logger = logging.getLogger(__name__)


def _session_dates(now: datetime) -> list[date]:
    # 어제 + 오늘 — Night shifts scheduled yesterday run past midnight
    today: date = now.date()
    return [today - timedelta(days=1), today]


class LoomService:
    """직기 세션 및 관리 서비스.

    Loom session controller and loom administration service.
    """

    async def get_loom(self, db: AsyncSession, loom_id: UUID) -> Loom:
        loom: Loom | None = await loom_repository.get_by_id(db, loom_id)
        if loom is None:
            raise NotFoundError("직기를 찾을 수 없습니다 (Loom not found)")
        return loom

    # === 세션 제어 (Session control) ===

    async def start(
        self,
        db: AsyncSession,
        loom_id: UUID,
        caller_id: UUID,
        now: datetime,
    ) -> Loom:
        """직공이 자신의 근무 시간대 안에서 직기를 가동합니다.

        Start a loom for the caller. The caller must hold a non-completed
        shift on this loom (scheduled today, or yesterday for a Night shift)
        whose [start, end) window contains now.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            loom_id: 직기 UUID (Loom UUID)
            caller_id: 요청 직공 UUID (Calling weaver UUID)
            now: 현재 시각 (Current facility-local time)

        Returns:
            Loom: 가동 상태 직기 (Loom in running state)

        Raises:
            NotFoundError: 직기 없음 (Loom not found)
            NoActiveShiftError: 이 직기에 배정된 근무 없음 (No shift on this loom)
            OutsideShiftWindowError: 근무 시간대 밖 (Now is outside every shift window)
            LoomAlreadyRunningError: 이미 가동 중 (Loom is already running)
        """
        loom: Loom = await self.get_loom(db, loom_id)

        shifts: Sequence[Shift] = await shift_repository.get_open_for_weaver(
            db, caller_id, _session_dates(now), loom_id=loom.id
        )
        if not shifts:
            raise NoActiveShiftError("오늘 이 직기에 배정된 근무가 없습니다 (No active shift for this loom today)")

        current: Shift | None = next(
            (s for s in shifts if contains(s.start_time, s.end_time, now)), None
        )
        if current is None:
            raise OutsideShiftWindowError(self._window_guidance(shifts, now))

        if not await loom_repository.try_start(db, loom.id, now, caller_id):
            raise LoomAlreadyRunningError(f"Loom {loom.loom_code} is already running")

        await shift_repository.mark_actual_start(db, current.id, now)
        logger.info("loom %s started by %s for shift %s", loom.loom_code, caller_id, current.id)

        await db.refresh(loom)
        return loom

    @staticmethod
    def _window_guidance(shifts: Sequence[Shift], now: datetime) -> str:
        upcoming = [s for s in shifts if s.start_time > now]
        if upcoming:
            first: Shift = min(upcoming, key=lambda s: s.start_time)
            return f"Shift starts at {format_clock(first.start_time)}"
        last: Shift = max(shifts, key=lambda s: s.end_time)
        return f"Shift ended at {format_clock(last.end_time)}"

    async def stop(
        self,
        db: AsyncSession,
        loom_id: UUID,
        caller: User,
        now: datetime,
    ) -> Loom:
        """직기를 정지합니다. 이미 정지된 직기는 그대로 성공합니다.

        Stop a loom. Allowed for admins, the loom's current weaver, or a
        weaver whose non-completed shift on this loom covers now. Stopping
        a stopped loom succeeds without change.

        Raises:
            NotFoundError: 직기 없음 (Loom not found)
            ForbiddenError: 권한 없음 (Caller may not stop this loom)
        """
        loom: Loom = await self.get_loom(db, loom_id)

        allowed: bool = (
            caller.role == ROLE_ADMIN
            or loom.current_weaver_id == caller.id
            or await self._holds_current_shift(db, loom.id, caller.id, now)
        )
        if not allowed:
            raise ForbiddenError("이 직기를 정지할 권한이 없습니다 (Not allowed to stop this loom)")

        if await loom_repository.try_stop(db, loom.id):
            logger.info("loom %s stopped by %s", loom.loom_code, caller.id)

        await db.refresh(loom)
        return loom

    @staticmethod
    async def _holds_current_shift(db: AsyncSession, loom_id: UUID, weaver_id: UUID, now: datetime) -> bool:
        shifts: Sequence[Shift] = await shift_repository.get_open_for_weaver(
            db, weaver_id, _session_dates(now), loom_id=loom_id
        )
        return any(contains(s.start_time, s.end_time, now) for s in shifts)

    async def force_unassign(self, db: AsyncSession, loom_id: UUID, today: date) -> dict:
        """직기 배정을 강제로 해제합니다.

        Remove all future unstarted shifts of the loom, stop it if running and
        clear its current weaver. Shifts that already ran are kept.

        Returns:
            dict: {"deleted_shifts": int, "stopped": bool}
        """
        loom: Loom = await self.get_loom(db, loom_id)
        deleted: int = await shift_repository.delete_future_unstarted_for_loom(db, loom.id, today)
        stopped: bool = await loom_repository.try_stop(db, loom.id)
        await loom_repository.set_current_weaver(db, loom.id, None)
        logger.info("loom %s unassigned: %d shift(s) removed, stopped=%s", loom.loom_code, deleted, stopped)
        return {"deleted_shifts": deleted, "stopped": stopped}

    # === 직기 관리 (Loom administration) ===

    async def create_loom(self, db: AsyncSession, loom_code: str) -> Loom:
        """직기를 등록합니다 (Register a loom with a unique code)."""
        code: str = loom_code.strip()
        if not code:
            raise InvalidInputError("loom_code is required")
        if await loom_repository.get_by_code(db, code) is not None:
            raise DuplicateError(f"Loom {code} already exists")
        return await loom_repository.create(db, {"loom_code": code})

    async def list_looms(self, db: AsyncSession) -> Sequence[Loom]:
        return await loom_repository.get_all_ordered(db)

    async def delete_loom(self, db: AsyncSession, loom_id: UUID) -> None:
        """직기와 관련 근무/측정값/요약을 삭제합니다 (Delete a loom with cascade)."""
        loom: Loom = await self.get_loom(db, loom_id)
        await loom_repository.delete_with_children(db, loom.id)

    async def assign_weaver(self, db: AsyncSession, loom_id: UUID, weaver_id: UUID | None) -> Loom:
        """직기의 담당 직공을 지정/해제합니다.

        Set (or clear with None) the loom's current weaver.
        """
        loom: Loom = await self.get_loom(db, loom_id)
        if weaver_id is not None:
            weaver: User | None = await user_repository.get_by_id(db, weaver_id)
            if weaver is None or weaver.role != ROLE_WEAVER:
                raise NotFoundError("직공을 찾을 수 없습니다 (Weaver not found)")
        await loom_repository.set_current_weaver(db, loom.id, weaver_id)
        await db.refresh(loom)
        return loom

    async def list_weavers(self, db: AsyncSession) -> Sequence[User]:
        return await user_repository.get_weavers(db)

    async def build_response(self, db: AsyncSession, loom: Loom) -> dict:
        """직기 응답 딕셔너리를 구성합니다 (담당 직공 이름, 최신 측정값 포함).

        Build loom response dict with current weaver name and latest reading.
        """
        weaver_name: str | None = None
        if loom.current_weaver_id is not None:
            weaver: User | None = await user_repository.get_by_id(db, loom.current_weaver_id)
            weaver_name = weaver.name if weaver else None

        return {
            "id": str(loom.id),
            "loom_code": loom.loom_code,
            "run_status": loom.run_status,
            "running_since": loom.running_since,
            "current_weaver_id": str(loom.current_weaver_id) if loom.current_weaver_id else None,
            "current_weaver_name": weaver_name,
            "latest_reading": await sensor_service.session_latest(db, loom),
            "created_at": loom.created_at,
        }


# 싱글턴 인스턴스 — Singleton instance
loom_service: LoomService = LoomService()

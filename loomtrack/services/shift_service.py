"""근무 서비스 — 근무 배정, 조회, 출근 체크, 수동 종료.

Shift Service — Shift registry business logic: admin assignment with
past-date and slot-conflict checks, weaver active/upcoming lookups,
deletion of unstarted shifts, attendance and manual end.
"""

from datetime import date, datetime, timedelta
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.config import settings
from loomtrack.models.loom import Loom
from loomtrack.models.shift import SHIFT_TYPES, Shift
from loomtrack.models.user import ROLE_WEAVER, User
from loomtrack.repositories.loom_repository import loom_repository
from loomtrack.repositories.shift_repository import shift_repository
from loomtrack.repositories.user_repository import user_repository
from loomtrack.services.expiry_service import expiry_service
from loomtrack.services.shift_window import compute_window
from loomtrack.utils.exceptions import (
    AlreadyStartedError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    PastDateError,
    SlotConflictError,
)


class ShiftService:
    """근무 서비스.

    Shift registry service.
    """

    async def _get_shift(self, db: AsyncSession, shift_id: UUID) -> Shift:
        shift: Shift | None = await shift_repository.get_by_id(db, shift_id)
        if shift is None:
            raise NotFoundError("근무를 찾을 수 없습니다 (Shift not found)")
        return shift

    def _check_owner(self, shift: Shift, caller_id: UUID) -> None:
        if shift.weaver_id != caller_id:
            raise ForbiddenError("본인 근무가 아닙니다 (Shift belongs to another weaver)")

    async def assign(
        self,
        db: AsyncSession,
        loom_id: UUID,
        weaver_id: UUID,
        shift_type: str,
        scheduled_date: date,
        today: date,
    ) -> Shift:
        """직공을 직기의 근무에 배정합니다.

        Assign a weaver to a loom for one shift. The window is computed here
        once and stored.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            loom_id: 직기 UUID (Loom UUID)
            weaver_id: 직공 UUID (Weaver UUID)
            shift_type: 근무 유형 (Morning | Evening | Night)
            scheduled_date: 근무 날짜 (Scheduled date)
            today: 공장 기준 오늘 (Facility-local today)

        Returns:
            Shift: 생성된 근무 (Created shift, completed=False)

        Raises:
            InvalidInputError: 근무 유형 오류 (Unknown shift type)
            NotFoundError: 직기/직공 없음 (Loom or weaver not found)
            PastDateError: 과거 날짜 (Scheduled date before today)
            SlotConflictError: 슬롯에 미완료 근무 존재 (Slot already assigned)
        """
        if shift_type not in SHIFT_TYPES:
            raise InvalidInputError(f"Invalid shift type: {shift_type}")

        loom: Loom | None = await loom_repository.get_by_id(db, loom_id)
        if loom is None:
            raise NotFoundError("직기를 찾을 수 없습니다 (Loom not found)")
        weaver: User | None = await user_repository.get_by_id(db, weaver_id)
        if weaver is None or weaver.role != ROLE_WEAVER:
            raise NotFoundError("직공을 찾을 수 없습니다 (Weaver not found)")

        if scheduled_date < today:
            raise PastDateError(f"Cannot assign a shift to a past date ({scheduled_date.isoformat()})")

        existing: Shift | None = await shift_repository.get_open_in_slot(db, loom_id, scheduled_date, shift_type)
        if existing is not None:
            raise SlotConflictError(
                f"{shift_type} shift on {scheduled_date.isoformat()} is already assigned for loom {loom.loom_code}"
            )

        start, end = compute_window(shift_type, scheduled_date)
        try:
            return await shift_repository.create(
                db,
                {
                    "loom_id": loom_id,
                    "weaver_id": weaver_id,
                    "shift_type": shift_type,
                    "scheduled_date": scheduled_date,
                    "start_time": start,
                    "end_time": end,
                    "completed": False,
                },
            )
        except IntegrityError:
            # 동시 배정이 부분 고유 인덱스에 걸린 경우 — Concurrent assignment hit the open-slot index
            await db.rollback()
            raise SlotConflictError(
                f"{shift_type} shift on {scheduled_date.isoformat()} is already assigned for loom {loom.loom_code}"
            )

    async def active_shifts_for_weaver(
        self,
        db: AsyncSession,
        weaver_id: UUID,
        now: datetime,
    ) -> list[Shift]:
        """직공의 현재 활성 근무를 조회합니다.

        Retrieve the weaver's shifts that are running now or start within the
        lookahead. Yesterday's shifts are included so a Night shift past
        midnight is still found. Each candidate is swept first; expired ones
        are closed and dropped.

        Returns:
            list[Shift]: 활성 근무 목록 (Active shifts ordered by start)
        """
        today: date = now.date()
        candidates: Sequence[Shift] = await shift_repository.get_open_for_weaver(
            db, weaver_id, [today - timedelta(days=1), today]
        )
        horizon: datetime = now + timedelta(minutes=settings.ACTIVE_SHIFT_LOOKAHEAD_MINUTES)

        active: list[Shift] = []
        for shift in candidates:
            await expiry_service.sweep_one(db, shift, now)
            if shift.end_time < now or shift.start_time > horizon:
                continue
            active.append(shift)
        return active

    async def upcoming_shifts_for_weaver(
        self,
        db: AsyncSession,
        weaver_id: UUID,
        from_date: date,
        to_date: date | None = None,
    ) -> Sequence[Shift]:
        """직공의 예정 근무 (Upcoming shifts of a weaver, date then start order)."""
        if to_date is not None and to_date < from_date:
            raise InvalidInputError("to_date must not be before from_date")
        return await shift_repository.get_upcoming_for_weaver(db, weaver_id, from_date, to_date)

    async def shifts_for_loom(
        self,
        db: AsyncSession,
        loom_id: UUID,
        from_date: date,
    ) -> Sequence[Shift]:
        """직기의 예정 근무 (Upcoming shifts of a loom, date then start order)."""
        if await loom_repository.get_by_id(db, loom_id) is None:
            raise NotFoundError("직기를 찾을 수 없습니다 (Loom not found)")
        return await shift_repository.get_upcoming_for_loom(db, loom_id, from_date)

    async def delete_shift(self, db: AsyncSession, shift_id: UUID) -> None:
        """가동 전 근무를 삭제합니다.

        Delete a shift that has not been started.

        Raises:
            NotFoundError: 근무 없음 (Shift not found)
            AlreadyStartedError: 이미 가동됨 (Shift already started)
        """
        shift: Shift = await self._get_shift(db, shift_id)
        if shift.actual_start_time is not None:
            raise AlreadyStartedError("이미 시작된 근무는 삭제할 수 없습니다 (Shift has already started)")
        if not await shift_repository.delete_unstarted(db, shift.id):
            raise AlreadyStartedError("이미 시작된 근무는 삭제할 수 없습니다 (Shift has already started)")

    async def mark_attendance(self, db: AsyncSession, shift_id: UUID, caller_id: UUID) -> Shift:
        """출근 체크 (Mark attendance on the caller's own shift)."""
        shift: Shift = await self._get_shift(db, shift_id)
        self._check_owner(shift, caller_id)
        await shift_repository.mark_attendance(db, shift.id)
        await db.refresh(shift)
        return shift

    async def end_manually(
        self,
        db: AsyncSession,
        shift_id: UUID,
        caller_id: UUID,
        now: datetime,
    ) -> Shift:
        """직공이 근무를 직접 종료합니다.

        Weaver ends their own shift. The shift is closed at now through the
        same close-out as the expiry sweep; a shift that is already completed
        is returned unchanged.
        """
        shift: Shift = await self._get_shift(db, shift_id)
        self._check_owner(shift, caller_id)
        if shift.completed:
            return shift

        await expiry_service.close_shift(db, shift, now)
        await db.refresh(shift)
        return shift

    async def build_response(self, db: AsyncSession, shift: Shift) -> dict:
        """근무 응답 딕셔너리를 구성합니다 (직기 번호, 직공 이름 포함).

        Build shift response dict with loom code and weaver name resolved.
        """
        loom_result = await db.execute(select(Loom.loom_code).where(Loom.id == shift.loom_id))
        loom_code: str = loom_result.scalar() or "Unknown"
        weaver_result = await db.execute(select(User.name).where(User.id == shift.weaver_id))
        weaver_name: str = weaver_result.scalar() or "Unknown"

        return {
            "id": str(shift.id),
            "loom_id": str(shift.loom_id),
            "loom_code": loom_code,
            "weaver_id": str(shift.weaver_id),
            "weaver_name": weaver_name,
            "shift_type": shift.shift_type,
            "scheduled_date": shift.scheduled_date,
            "start_time": shift.start_time,
            "end_time": shift.end_time,
            "completed": shift.completed,
            "attendance_marked": shift.attendance_marked,
            "actual_start_time": shift.actual_start_time,
            "actual_end_time": shift.actual_end_time,
        }


# 싱글턴 인스턴스 — Singleton instance
shift_service: ShiftService = ShiftService()

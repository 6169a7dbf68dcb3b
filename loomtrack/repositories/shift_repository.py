"""근무 레포지토리 — 근무 배정 조회 및 상태 전이 쿼리.

Shift Repository — Shift lookups and guarded state transitions
(complete, first-start marker, attendance, unstarted deletion).
"""

from datetime import date, datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.models.shift import Shift, ShiftSummary
from loomtrack.repositories.base import BaseRepository


class ShiftRepository(BaseRepository[Shift]):
    """근무 레포지토리.

    Shift repository. Queries that list "open" shifts always exclude
    completed ones.

    Extends:
        BaseRepository[Shift]
    """

    def __init__(self) -> None:
        super().__init__(Shift)

    def _open(self) -> Select:
        return select(Shift).where(Shift.completed.is_(False))

    async def get_open_in_slot(
        self,
        db: AsyncSession,
        loom_id: UUID,
        scheduled_date: date,
        shift_type: str,
    ) -> Shift | None:
        """직기+날짜+근무유형 슬롯의 미완료 근무를 조회합니다.

        Retrieve the non-completed shift occupying a (loom, date, type) slot.
        """
        result = await db.execute(
            self._open().where(
                Shift.loom_id == loom_id,
                Shift.scheduled_date == scheduled_date,
                Shift.shift_type == shift_type,
            )
        )
        return result.scalars().first()

    async def get_open_for_weaver(
        self,
        db: AsyncSession,
        weaver_id: UUID,
        dates: Sequence[date],
        loom_id: UUID | None = None,
    ) -> Sequence[Shift]:
        """직공의 지정 날짜 미완료 근무를 시작 시각순으로 조회합니다.

        Retrieve a weaver's non-completed shifts scheduled on any of the given
        dates, optionally restricted to one loom, ordered by start time.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            weaver_id: 직공 UUID (Weaver UUID)
            dates: 근무 날짜 목록 (Scheduled dates to include)
            loom_id: 직기 UUID 필터, 선택 (Optional loom filter)

        Returns:
            Sequence[Shift]: 근무 목록 (Shifts ordered by start_time)
        """
        query: Select = self._open().where(
            Shift.weaver_id == weaver_id,
            Shift.scheduled_date.in_(list(dates)),
        )
        if loom_id is not None:
            query = query.where(Shift.loom_id == loom_id)
        result = await db.execute(query.order_by(Shift.start_time))
        return result.scalars().all()

    async def get_upcoming_for_weaver(
        self,
        db: AsyncSession,
        weaver_id: UUID,
        from_date: date,
        to_date: date | None = None,
    ) -> Sequence[Shift]:
        """직공의 예정 근무를 조회합니다 (Upcoming non-completed shifts of a weaver)."""
        query: Select = self._open().where(
            Shift.weaver_id == weaver_id,
            Shift.scheduled_date >= from_date,
        )
        if to_date is not None:
            query = query.where(Shift.scheduled_date <= to_date)
        result = await db.execute(query.order_by(Shift.scheduled_date, Shift.start_time))
        return result.scalars().all()

    async def get_upcoming_for_loom(
        self,
        db: AsyncSession,
        loom_id: UUID,
        from_date: date,
    ) -> Sequence[Shift]:
        """직기의 예정 근무를 조회합니다 (Upcoming non-completed shifts of a loom)."""
        result = await db.execute(
            self._open()
            .where(Shift.loom_id == loom_id, Shift.scheduled_date >= from_date)
            .order_by(Shift.scheduled_date, Shift.start_time)
        )
        return result.scalars().all()

    async def get_expired_open(self, db: AsyncSession, now: datetime) -> Sequence[Shift]:
        """종료 시각이 지난 미완료 근무 (Non-completed shifts whose end is before now)."""
        result = await db.execute(
            self._open().where(Shift.end_time < now).order_by(Shift.end_time)
        )
        return result.scalars().all()

    async def get_completed_for_loom(
        self,
        db: AsyncSession,
        loom_id: UUID,
        limit: int,
    ) -> Sequence[Shift]:
        """직기의 최근 완료 근무를 최신순으로 조회합니다.

        Retrieve the most recent completed shifts of a loom, newest first.
        """
        result = await db.execute(
            select(Shift)
            .where(Shift.loom_id == loom_id, Shift.completed.is_(True))
            .order_by(Shift.end_time.desc())
            .limit(limit)
        )
        return result.scalars().all()

    async def try_complete(self, db: AsyncSession, shift_id: UUID, ended_at: datetime) -> bool:
        """미완료 → 완료 전이를 시도합니다.

        Compare-and-set completed False → True with actual_end_time.

        Returns:
            bool: 이 호출이 근무를 종료했는지 (Whether this call closed the shift)
        """
        result = await db.execute(
            update(Shift)
            .where(Shift.id == shift_id, Shift.completed.is_(False))
            .values(completed=True, actual_end_time=ended_at)
        )
        await db.flush()
        return result.rowcount > 0

    async def mark_actual_start(self, db: AsyncSession, shift_id: UUID, started_at: datetime) -> bool:
        """최초 가동 시각을 기록합니다 (비어 있을 때만).

        Record the first start of the shift; later starts keep the first marker.
        """
        result = await db.execute(
            update(Shift)
            .where(Shift.id == shift_id, Shift.actual_start_time.is_(None))
            .values(actual_start_time=started_at)
        )
        await db.flush()
        return result.rowcount > 0

    async def mark_attendance(self, db: AsyncSession, shift_id: UUID) -> bool:
        result = await db.execute(
            update(Shift).where(Shift.id == shift_id).values(attendance_marked=True)
        )
        await db.flush()
        return result.rowcount > 0

    async def delete_unstarted(self, db: AsyncSession, shift_id: UUID) -> bool:
        """가동 전 근무만 삭제합니다.

        Delete the shift only while actual_start_time is still unset.

        Returns:
            bool: 삭제 여부 (False when the shift has already started)
        """
        result = await db.execute(
            delete(Shift).where(Shift.id == shift_id, Shift.actual_start_time.is_(None))
        )
        await db.flush()
        return result.rowcount > 0

    async def delete_future_unstarted_for_loom(
        self,
        db: AsyncSession,
        loom_id: UUID,
        from_date: date,
    ) -> int:
        """직기의 가동 전 미완료 예정 근무를 일괄 삭제합니다.

        Delete every non-started, non-completed shift of the loom scheduled on
        or after from_date.

        Returns:
            int: 삭제된 근무 수 (Number of deleted shifts)
        """
        result = await db.execute(
            delete(Shift).where(
                Shift.loom_id == loom_id,
                Shift.scheduled_date >= from_date,
                Shift.completed.is_(False),
                Shift.actual_start_time.is_(None),
            )
        )
        await db.flush()
        return result.rowcount


class ShiftSummaryRepository(BaseRepository[ShiftSummary]):
    """근무 요약 레포지토리 (Shift summary repository)."""

    def __init__(self) -> None:
        super().__init__(ShiftSummary)

    async def get_by_shift(self, db: AsyncSession, shift_id: UUID) -> ShiftSummary | None:
        result = await db.execute(select(ShiftSummary).where(ShiftSummary.shift_id == shift_id))
        return result.scalar_one_or_none()

    async def get_for_loom(self, db: AsyncSession, loom_id: UUID, limit: int) -> Sequence[ShiftSummary]:
        """직기의 최근 근무 요약 (Most recent summaries of a loom, newest first)."""
        result = await db.execute(
            select(ShiftSummary)
            .where(ShiftSummary.loom_id == loom_id)
            .order_by(ShiftSummary.end_time.desc())
            .limit(limit)
        )
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instances
shift_repository: ShiftRepository = ShiftRepository()
shift_summary_repository: ShiftSummaryRepository = ShiftSummaryRepository()

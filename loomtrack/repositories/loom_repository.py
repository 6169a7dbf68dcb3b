"""직기 레포지토리 — 직기 조회 및 가동 상태 전이 쿼리.

Loom Repository — Loom lookups and run-state transitions.
Each transition is an UPDATE guarded by the expected current state; the
returned rowcount says whether this caller performed the transition.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.models.loom import LOOM_RUNNING, LOOM_STOPPED, Loom
from loomtrack.models.sensor import SensorReading
from loomtrack.models.shift import Shift, ShiftSummary
from loomtrack.repositories.base import BaseRepository


class LoomRepository(BaseRepository[Loom]):
    """직기 레포지토리.

    Loom repository with compare-and-set run/stop transitions.

    Extends:
        BaseRepository[Loom]
    """

    def __init__(self) -> None:
        super().__init__(Loom)

    async def get_by_code(self, db: AsyncSession, loom_code: str) -> Loom | None:
        """직기 번호로 조회합니다 (Retrieve a loom by its human code)."""
        result = await db.execute(select(Loom).where(Loom.loom_code == loom_code))
        return result.scalar_one_or_none()

    async def get_all_ordered(self, db: AsyncSession) -> Sequence[Loom]:
        """직기 번호순 전체 목록 (All looms ordered by code)."""
        result = await db.execute(select(Loom).order_by(Loom.loom_code))
        return result.scalars().all()

    async def try_start(
        self,
        db: AsyncSession,
        loom_id: UUID,
        started_at: datetime,
        weaver_id: UUID,
    ) -> bool:
        """정지 → 가동 전이를 시도합니다.

        Compare-and-set stopped → running.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            loom_id: 직기 UUID (Loom UUID)
            started_at: 세션 시작 시각 (Session start instant)
            weaver_id: 가동한 직공 UUID (Weaver starting the loom)

        Returns:
            bool: 이 호출이 전이를 수행했는지 (Whether this call won the transition)
        """
        result = await db.execute(
            update(Loom)
            .where(Loom.id == loom_id, Loom.run_status == LOOM_STOPPED)
            .values(run_status=LOOM_RUNNING, running_since=started_at, current_weaver_id=weaver_id)
        )
        await db.flush()
        return result.rowcount > 0

    async def try_stop(
        self,
        db: AsyncSession,
        loom_id: UUID,
        started_not_after: datetime | None = None,
        started_before: datetime | None = None,
        started_not_before: datetime | None = None,
        weaver_id: UUID | None = None,
    ) -> bool:
        """가동 → 정지 전이를 시도합니다.

        Compare-and-set running → stopped. The optional bounds restrict the
        stop to one session; a running loom outside them is left alone.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            loom_id: 직기 UUID (Loom UUID)
            started_not_after: 지정 시 running_since <= 이 시각인 세션만 정지
                (Only stop a session that began at or before this instant)
            started_before: 지정 시 running_since < 이 시각인 세션만 정지
                (Only stop a session that began strictly before this instant)
            started_not_before: 지정 시 running_since >= 이 시각인 세션만 정지
                (Only stop a session that began at or after this instant)
            weaver_id: 지정 시 이 직공이 가동한 세션만 정지
                (Only stop a session run by this weaver)

        Returns:
            bool: 이 호출이 정지시켰는지 (Whether this call stopped the loom)
        """
        query = update(Loom).where(Loom.id == loom_id, Loom.run_status == LOOM_RUNNING)
        if started_not_after is not None:
            query = query.where(Loom.running_since <= started_not_after)
        if started_before is not None:
            query = query.where(Loom.running_since < started_before)
        if started_not_before is not None:
            query = query.where(Loom.running_since >= started_not_before)
        if weaver_id is not None:
            query = query.where(Loom.current_weaver_id == weaver_id)
        result = await db.execute(query.values(run_status=LOOM_STOPPED, running_since=None))
        await db.flush()
        return result.rowcount > 0

    async def set_current_weaver(self, db: AsyncSession, loom_id: UUID, weaver_id: UUID | None) -> bool:
        """현재 담당 직공을 설정/해제합니다 (Set or clear the current weaver)."""
        result = await db.execute(
            update(Loom).where(Loom.id == loom_id).values(current_weaver_id=weaver_id)
        )
        await db.flush()
        return result.rowcount > 0

    async def stop_all(self, db: AsyncSession) -> int:
        """모든 가동 중 직기를 정지합니다 (Stop every running loom)."""
        result = await db.execute(
            update(Loom)
            .where(Loom.run_status == LOOM_RUNNING)
            .values(run_status=LOOM_STOPPED, running_since=None)
        )
        await db.flush()
        return result.rowcount

    async def repair_run_state(self, db: AsyncSession, now: datetime) -> int:
        """가동 상태와 시작 시각이 어긋난 직기를 바로잡습니다.

        Repair looms that violate the run-state invariant:
        running without running_since gets now, stopped with a leftover
        running_since gets it cleared.

        Returns:
            int: 수정된 직기 수 (Number of repaired looms)
        """
        running_fix = await db.execute(
            update(Loom)
            .where(Loom.run_status == LOOM_RUNNING, Loom.running_since.is_(None))
            .values(running_since=now)
        )
        stopped_fix = await db.execute(
            update(Loom)
            .where(Loom.run_status != LOOM_RUNNING, Loom.running_since.is_not(None))
            .values(run_status=LOOM_STOPPED, running_since=None)
        )
        await db.flush()
        return running_fix.rowcount + stopped_fix.rowcount

    async def delete_with_children(self, db: AsyncSession, loom_id: UUID) -> bool:
        """직기와 하위 근무/요약/측정값을 함께 삭제합니다.

        Delete a loom together with its shifts, summaries and readings.
        Children are deleted explicitly; store-level FK cascades are not assumed.
        """
        await db.execute(delete(SensorReading).where(SensorReading.loom_id == loom_id))
        await db.execute(delete(ShiftSummary).where(ShiftSummary.loom_id == loom_id))
        await db.execute(delete(Shift).where(Shift.loom_id == loom_id))
        result = await db.execute(delete(Loom).where(Loom.id == loom_id))
        await db.flush()
        return result.rowcount > 0


# 싱글턴 인스턴스 — Singleton instance
loom_repository: LoomRepository = LoomRepository()

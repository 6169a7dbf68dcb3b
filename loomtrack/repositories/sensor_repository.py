"""센서 측정값 레포지토리 — 구간 조회, 최신값, 통계, 보존기간 정리.

Sensor Reading Repository — Range queries, latest reading, aggregate stats
and age-based purge. Readings are append-only; nothing here updates a row.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.models.sensor import SensorReading
from loomtrack.repositories.base import BaseRepository

# 최신순 — equal timestamps fall back to the larger cumulative value
_NEWEST_FIRST = (SensorReading.timestamp.desc(), SensorReading.production.desc(), SensorReading.energy.desc())
_OLDEST_FIRST = (SensorReading.timestamp, SensorReading.production, SensorReading.energy)


class SensorReadingRepository(BaseRepository[SensorReading]):
    """센서 측정값 레포지토리.

    Sensor reading repository.

    Extends:
        BaseRepository[SensorReading]
    """

    def __init__(self) -> None:
        super().__init__(SensorReading)

    def _in_range(
        self,
        query: Select,
        loom_id: UUID,
        start: datetime | None,
        end: datetime | None,
    ) -> Select:
        query = query.where(SensorReading.loom_id == loom_id)
        if start is not None:
            query = query.where(SensorReading.timestamp >= start)
        if end is not None:
            query = query.where(SensorReading.timestamp <= end)
        return query

    async def get_latest(
        self,
        db: AsyncSession,
        loom_id: UUID,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> SensorReading | None:
        """구간 내 가장 최근 측정값을 조회합니다.

        Retrieve the most recent reading of the loom within [since, until].

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            loom_id: 직기 UUID (Loom UUID)
            since: 하한 시각, 선택 (Optional inclusive lower bound)
            until: 상한 시각, 선택 (Optional inclusive upper bound)

        Returns:
            SensorReading | None: 최신 측정값 또는 None (Latest reading or None)
        """
        query = self._in_range(select(SensorReading), loom_id, since, until)
        result = await db.execute(
            query.order_by(*_NEWEST_FIRST).limit(1)
        )
        return result.scalars().first()

    async def get_recent(
        self,
        db: AsyncSession,
        loom_id: UUID,
        since: datetime,
        limit: int,
    ) -> list[SensorReading]:
        """since 이후 최근 limit개 측정값을 시간 오름차순으로 반환합니다.

        Retrieve the latest `limit` readings at or after `since`, returned in
        ascending time order.
        """
        query = self._in_range(select(SensorReading), loom_id, since, None)
        result = await db.execute(
            query.order_by(*_NEWEST_FIRST).limit(limit)
        )
        readings: list[SensorReading] = list(result.scalars().all())
        readings.reverse()
        return readings

    async def get_in_range(
        self,
        db: AsyncSession,
        loom_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Sequence[SensorReading]:
        """구간 내 측정값 전체 (All readings in [start, end], ascending)."""
        query = self._in_range(select(SensorReading), loom_id, start, end)
        result = await db.execute(query.order_by(*_OLDEST_FIRST))
        return result.scalars().all()

    async def get_averages(
        self,
        db: AsyncSession,
        loom_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> tuple[int, float, float]:
        """구간 내 측정값 개수와 평균을 집계합니다.

        Aggregate reading count and mean production/energy in [start, end].

        Returns:
            tuple[int, float, float]: (개수, 평균 생산량, 평균 에너지)
                                      (count, average production, average energy)
        """
        query = self._in_range(
            select(
                func.count(SensorReading.id),
                func.avg(SensorReading.production),
                func.avg(SensorReading.energy),
            ),
            loom_id,
            start,
            end,
        )
        count, avg_production, avg_energy = (await db.execute(query)).one()
        return int(count or 0), float(avg_production or 0.0), float(avg_energy or 0.0)

    async def purge_older_than(self, db: AsyncSession, cutoff: datetime) -> int:
        """cutoff 이전 측정값을 삭제합니다 (Delete readings older than cutoff)."""
        result = await db.execute(delete(SensorReading).where(SensorReading.timestamp < cutoff))
        await db.flush()
        return result.rowcount


# 싱글턴 인스턴스 — Singleton instance
sensor_reading_repository: SensorReadingRepository = SensorReadingRepository()

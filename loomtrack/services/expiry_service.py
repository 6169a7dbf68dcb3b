"""근무 만료 서비스 — 근무 종료 처리 및 만료 근무 일괄 정리.

Expiry Service — Shift close-out and expired-shift sweeping.

close_shift() is the one place where a shift ends, whether a weaver ends it
by hand or the sweeper finds it past its window. It is safe to run from both
paths at once: the completed flag is flipped by a conditional UPDATE so only
one caller writes the summary, and both callers attempt the loom stop so the
loom ends up stopped whichever order they run in.
"""

import asyncio
import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from loomtrack.models.sensor import SensorReading
from loomtrack.models.shift import Shift
from loomtrack.repositories.loom_repository import loom_repository
from loomtrack.repositories.sensor_repository import sensor_reading_repository
from loomtrack.repositories.shift_repository import shift_summary_repository, shift_repository
from loomtrack.services.shift_window import reading_window
from loomtrack.utils.clock import Clock

logger = logging.getLogger(__name__)


class ExpiryService:
    """근무 종료 및 만료 정리 서비스.

    Shift close-out and expiry sweep service.
    """

    async def close_shift(self, db: AsyncSession, shift: Shift, ended_at: datetime) -> bool:
        """근무를 종료하고 요약을 기록한 뒤 직기를 정지합니다.

        Close a shift: flip completed, write the shift summary (winner only),
        then stop the loom if its current session belongs to this shift. When
        the shift is closed before its window end, that is a session the
        shift's weaver began within [start, ended_at]; once the window has
        passed, any session begun before the window end. Sessions of other
        weavers or later shifts keep running.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            shift: 종료할 근무 (Shift to close)
            ended_at: 종료 시각 — 수동 종료는 요청 시각, 만료는 근무 종료 시각
                      (Close instant: request time for manual end, window end for sweep)

        Returns:
            bool: 이 호출이 근무를 종료했는지 (Whether this call closed the shift)
        """
        won: bool = await shift_repository.try_complete(db, shift.id, ended_at)
        if won:
            await self._write_summary(db, shift, ended_at)

        if ended_at < shift.end_time:
            stopped: bool = await loom_repository.try_stop(
                db,
                shift.loom_id,
                started_not_before=shift.start_time,
                started_not_after=ended_at,
                weaver_id=shift.weaver_id,
            )
        else:
            stopped = await loom_repository.try_stop(db, shift.loom_id, started_before=shift.end_time)
        if won or stopped:
            logger.info(
                "shift %s closed at %s (closed=%s, loom_stopped=%s)",
                shift.id, ended_at.isoformat(), won, stopped,
            )
        return won

    async def _write_summary(self, db: AsyncSession, shift: Shift, ended_at: datetime) -> None:
        window_start, window_end = reading_window(shift.start_time, shift.end_time, ended_at)
        latest: SensorReading | None = await sensor_reading_repository.get_latest(
            db, shift.loom_id, since=window_start, until=window_end
        )
        await shift_summary_repository.create(
            db,
            {
                "shift_id": shift.id,
                "loom_id": shift.loom_id,
                "weaver_id": shift.weaver_id,
                "shift_type": shift.shift_type,
                "total_energy": round(latest.energy, 3) if latest else 0.0,
                "total_production": round(latest.production, 3) if latest else 0.0,
                "start_time": window_start,
                "end_time": window_end,
            },
        )

    async def sweep_one(self, db: AsyncSession, shift: Shift, now: datetime) -> bool:
        """단일 근무가 만료되었으면 종료합니다.

        Close a single shift if its window has passed.

        Returns:
            bool: 이 호출이 근무를 종료했는지 (Whether this call closed the shift)
        """
        if shift.completed or not shift.end_time < now:
            return False
        return await self.close_shift(db, shift, shift.end_time)

    async def sweep(self, db: AsyncSession, now: datetime) -> int:
        """종료 시각이 지난 모든 미완료 근무를 종료합니다.

        Close every non-completed shift whose end is before now. Each shift
        is closed at its nominal end, not at now. Running it twice in a row
        closes nothing the second time.

        Returns:
            int: 이 호출이 종료한 근무 수 (Number of shifts this call closed)
        """
        expired = await shift_repository.get_expired_open(db, now)
        closed_count: int = 0
        for shift in expired:
            if await self.close_shift(db, shift, shift.end_time):
                closed_count += 1
        if closed_count:
            logger.info("expiry sweep at %s closed %d shift(s)", now.isoformat(), closed_count)
        return closed_count


# 싱글턴 인스턴스 — Singleton instance
expiry_service: ExpiryService = ExpiryService()


async def run_sweep_loop(
    session_factory: async_sessionmaker[AsyncSession],
    clock: Clock,
    interval_seconds: float,
) -> None:
    """주기적으로 만료 근무를 정리합니다 (앱 lifespan에서 실행).

    Run the expiry sweep every `interval_seconds` in its own session until
    cancelled. A failed round is logged and the loop carries on.
    """
    logger.info("expiry sweep loop started (every %ss)", interval_seconds)
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            async with session_factory() as db:
                await expiry_service.sweep(db, clock.now())
                await db.commit()
        except Exception:
            logger.exception("expiry sweep round failed")

"""센서 집계 서비스 — 측정값 수집, 실시간 시계열, 근무별 이력, 통계.

Sensor Aggregator Service — Reading ingestion, live series, per-shift
history, statistics, shift summaries, Excel export and retention purge.

Readings carry cumulative totals since the loom session started, so the
total of any range is its last reading and never a sum. All numbers leaving
this service are rounded to 3 decimals.
"""

import logging
from datetime import date, datetime, time, timedelta
from io import BytesIO
from typing import Sequence
from uuid import UUID

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.config import settings
from loomtrack.models.loom import Loom
from loomtrack.models.sensor import SensorReading
from loomtrack.models.shift import Shift, ShiftSummary
from loomtrack.repositories.loom_repository import loom_repository
from loomtrack.repositories.sensor_repository import sensor_reading_repository
from loomtrack.repositories.shift_repository import shift_repository, shift_summary_repository
from loomtrack.repositories.user_repository import user_repository
from loomtrack.services.shift_window import reading_window
from loomtrack.utils.clock import to_facility_local
from loomtrack.utils.exceptions import InvalidInputError, NotFoundError, ReadingRegressionError

logger = logging.getLogger(__name__)


def _r(value: float | None) -> float:
    return round(float(value or 0.0), 3)


class SensorService:
    """센서 집계 서비스.

    Sensor aggregator service.
    """

    async def _get_loom(self, db: AsyncSession, loom_id: UUID) -> Loom:
        loom: Loom | None = await loom_repository.get_by_id(db, loom_id)
        if loom is None:
            raise NotFoundError("직기를 찾을 수 없습니다 (Loom not found)")
        return loom

    def reading_to_dict(self, reading: SensorReading) -> dict:
        return {
            "timestamp": reading.timestamp,
            "production": _r(reading.production),
            "energy": _r(reading.energy),
        }

    # === 수집 (Ingestion) ===

    async def ingest(
        self,
        db: AsyncSession,
        loom_id: UUID,
        production: float,
        energy: float,
        now: datetime,
        timestamp: datetime | None = None,
    ) -> SensorReading:
        """센서 측정값을 저장합니다.

        Store a cumulative reading. Readings for stopped looms are accepted.
        While the loom is running, a reading lower than the latest reading of
        the current session is rejected.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            loom_id: 직기 UUID (Loom UUID)
            production: 누적 생산량 m (Cumulative production)
            energy: 누적 에너지 kWh (Cumulative energy)
            now: 현재 시각 (Current facility-local time)
            timestamp: 측정 시각, 없으면 now (Measurement instant, defaults to now)

        Returns:
            SensorReading: 저장된 측정값 (Stored reading)

        Raises:
            NotFoundError: 직기 없음 (Loom not found)
            InvalidInputError: 음수 값 (Negative value)
            ReadingRegressionError: 누적값 감소 (Cumulative value went backwards)
        """
        loom: Loom = await self._get_loom(db, loom_id)
        if production < 0 or energy < 0:
            raise InvalidInputError("Production and energy must be non-negative")

        measured_at: datetime = to_facility_local(timestamp) if timestamp else now
        if loom.is_running and loom.running_since is not None and measured_at >= loom.running_since:
            latest: SensorReading | None = await sensor_reading_repository.get_latest(
                db, loom.id, since=loom.running_since
            )
            if latest is not None and (production < latest.production or energy < latest.energy):
                raise ReadingRegressionError(
                    f"Reading ({production}, {energy}) is below the session's latest "
                    f"({latest.production}, {latest.energy})"
                )

        return await sensor_reading_repository.create(
            db,
            {
                "loom_id": loom.id,
                "timestamp": measured_at,
                "production": production,
                "energy": energy,
            },
        )

    # === 실시간 (Live) ===

    async def live_series(
        self,
        db: AsyncSession,
        loom_id: UUID,
        limit: int | None = None,
    ) -> list[dict]:
        """현재 세션의 최근 측정값 시계열 (오름차순).

        Most recent readings of the current session in ascending order;
        empty when the loom is stopped.
        """
        loom: Loom = await self._get_loom(db, loom_id)
        if not loom.is_running or loom.running_since is None:
            return []
        readings = await sensor_reading_repository.get_recent(
            db, loom.id, since=loom.running_since, limit=limit or settings.LIVE_SERIES_LIMIT
        )
        return [self.reading_to_dict(r) for r in readings]

    async def latest_reading(self, db: AsyncSession, loom_id: UUID) -> dict:
        """현재 세션의 최신 측정값, 없으면 0 값.

        Latest reading of the current session, or a zero placeholder.
        """
        loom: Loom = await self._get_loom(db, loom_id)
        return await self.session_latest(db, loom)

    async def session_latest(self, db: AsyncSession, loom: Loom) -> dict:
        if loom.is_running and loom.running_since is not None:
            latest = await sensor_reading_repository.get_latest(db, loom.id, since=loom.running_since)
            if latest is not None:
                return self.reading_to_dict(latest)
        return {"timestamp": None, "production": 0.0, "energy": 0.0}

    # === 이력 및 통계 (History & Stats) ===

    async def history_for_loom(
        self,
        db: AsyncSession,
        loom_id: UUID,
        limit: int | None = None,
    ) -> list[dict]:
        """직기의 최근 완료 근무별 생산/에너지 이력.

        Per-shift history of the most recent completed shifts. Each shift's
        readings are taken from its window [start, end], cut short at the
        actual end of a shift closed early, the same window its summary
        covers. Totals are the last reading in that window, or 0.

        Returns:
            list[dict]: 최신순 근무 이력 (History entries, newest first)
        """
        await self._get_loom(db, loom_id)
        shifts: Sequence[Shift] = await shift_repository.get_completed_for_loom(
            db, loom_id, limit or settings.HISTORY_DEFAULT_LIMIT
        )
        names: dict = await user_repository.get_names(db, {s.weaver_id for s in shifts})

        history: list[dict] = []
        for shift in shifts:
            window_start, window_end = reading_window(shift.start_time, shift.end_time, shift.actual_end_time)
            readings = await sensor_reading_repository.get_in_range(
                db, loom_id, start=window_start, end=window_end
            )
            last: SensorReading | None = readings[-1] if readings else None
            history.append({
                "shift_id": str(shift.id),
                "weaver_id": str(shift.weaver_id),
                "weaver_name": names.get(shift.weaver_id, "Unknown"),
                "shift_type": shift.shift_type,
                "scheduled_date": shift.scheduled_date,
                "start_time": shift.start_time,
                "end_time": shift.end_time,
                "total_production": _r(last.production if last else 0.0),
                "total_energy": _r(last.energy if last else 0.0),
                "readings": [self.reading_to_dict(r) for r in readings],
            })
        return history

    async def stats_for_loom(
        self,
        db: AsyncSession,
        loom_id: UUID,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> dict:
        """기간 내 통계 — 총계는 마지막 측정값, 평균은 측정값 평균.

        Statistics over [date_from 00:00, date_to end of day]: totals are the
        last reading in range, averages the mean of readings.
        """
        await self._get_loom(db, loom_id)
        if date_from and date_to and date_to < date_from:
            raise InvalidInputError("date_to must not be before date_from")

        start: datetime | None = datetime.combine(date_from, time.min) if date_from else None
        end: datetime | None = datetime.combine(date_to, time.max) if date_to else None

        last: SensorReading | None = await sensor_reading_repository.get_latest(db, loom_id, since=start, until=end)
        count, avg_production, avg_energy = await sensor_reading_repository.get_averages(
            db, loom_id, start=start, end=end
        )
        return {
            "loom_id": str(loom_id),
            "date_from": date_from,
            "date_to": date_to,
            "total_production": _r(last.production if last else 0.0),
            "total_energy": _r(last.energy if last else 0.0),
            "avg_production": _r(avg_production),
            "avg_energy": _r(avg_energy),
            "data_points": count,
        }

    async def summaries_for_loom(
        self,
        db: AsyncSession,
        loom_id: UUID,
        limit: int | None = None,
    ) -> list[dict]:
        """저장된 근무 요약 목록 (Stored shift summaries, newest first)."""
        await self._get_loom(db, loom_id)
        summaries: Sequence[ShiftSummary] = await shift_summary_repository.get_for_loom(
            db, loom_id, limit or settings.HISTORY_DEFAULT_LIMIT
        )
        names: dict = await user_repository.get_names(db, {s.weaver_id for s in summaries})
        return [
            {
                "id": str(s.id),
                "shift_id": str(s.shift_id),
                "weaver_id": str(s.weaver_id),
                "weaver_name": names.get(s.weaver_id, "Unknown"),
                "shift_type": s.shift_type,
                "start_time": s.start_time,
                "end_time": s.end_time,
                "total_production": _r(s.total_production),
                "total_energy": _r(s.total_energy),
            }
            for s in summaries
        ]

    async def export_history_excel(
        self,
        db: AsyncSession,
        loom_id: UUID,
        limit: int | None = None,
    ) -> bytes:
        """근무별 이력을 Excel 파일로 내보내기."""
        loom: Loom = await self._get_loom(db, loom_id)
        history: list[dict] = await self.history_for_loom(db, loom_id, limit)

        wb = Workbook()
        header_font = Font(bold=True, color="FFFFFF", size=11)
        header_fill = PatternFill(start_color="2D3436", end_color="2D3436", fill_type="solid")

        def style_headers(ws, headers: list[str]) -> None:
            for col_idx, h in enumerate(headers, 1):
                cell = ws.cell(row=1, column=col_idx, value=h)
                cell.font = header_font
                cell.fill = header_fill
                cell.alignment = Alignment(horizontal="center")

        # --- Sheet 1: Shift totals ---
        ws1 = wb.active
        ws1.title = "Shift History"
        style_headers(ws1, ["Loom", "Weaver", "Shift", "Date", "Start", "End", "Production (m)", "Energy (kWh)"])
        for entry in history:
            ws1.append([
                loom.loom_code,
                entry["weaver_name"],
                entry["shift_type"],
                str(entry["scheduled_date"]),
                entry["start_time"].isoformat(),
                entry["end_time"].isoformat(),
                entry["total_production"],
                entry["total_energy"],
            ])
        for i, w in enumerate([15, 20, 10, 12, 20, 20, 16, 14], 1):
            ws1.column_dimensions[ws1.cell(row=1, column=i).column_letter].width = w

        # --- Sheet 2: Raw readings ---
        ws2 = wb.create_sheet("Readings")
        style_headers(ws2, ["Shift", "Date", "Timestamp", "Production (m)", "Energy (kWh)"])
        for entry in history:
            for reading in entry["readings"]:
                ws2.append([
                    entry["shift_type"],
                    str(entry["scheduled_date"]),
                    reading["timestamp"].isoformat(),
                    reading["production"],
                    reading["energy"],
                ])
        for i, w in enumerate([10, 12, 22, 16, 14], 1):
            ws2.column_dimensions[ws2.cell(row=1, column=i).column_letter].width = w

        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    # === 보존기간 정리 (Retention) ===

    async def purge_readings(self, db: AsyncSession, older_than_days: int, now: datetime) -> int:
        """보존기간이 지난 측정값을 삭제합니다.

        Delete readings older than `older_than_days` days before now.

        Returns:
            int: 삭제된 측정값 수 (Number of deleted readings)
        """
        if older_than_days < 1:
            raise InvalidInputError("older_than_days must be at least 1")
        cutoff: datetime = now - timedelta(days=older_than_days)
        deleted: int = await sensor_reading_repository.purge_older_than(db, cutoff)
        logger.info("purged %d sensor reading(s) older than %s", deleted, cutoff.isoformat())
        return deleted


# 싱글턴 인스턴스 — Singleton instance
sensor_service: SensorService = SensorService()

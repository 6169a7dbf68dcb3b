"""센서 집계 테스트 — 수집 검증, 실시간 시계열, 누적값 통계, 근무별 이력, 보존기간 정리.

Sensor aggregator tests — Ingestion checks, live series, cumulative stats,
per-shift history and retention purge.
"""

import uuid
from datetime import timedelta
from io import BytesIO

import pytest
from openpyxl import load_workbook
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.repositories.shift_repository import shift_summary_repository
from loomtrack.services.expiry_service import expiry_service
from loomtrack.services.loom_service import loom_service
from loomtrack.services.sensor_service import sensor_service
from loomtrack.services.shift_service import shift_service
from loomtrack.utils.exceptions import InvalidInputError, NotFoundError, ReadingRegressionError
from tests.conftest import NOW, TODAY, YESTERDAY, at, make_shift


async def _running(db: AsyncSession, loom, weaver, started_at=None):
    await make_shift(db, loom, weaver, "Morning", TODAY)
    await loom_service.start(db, loom.id, weaver.id, started_at or at(7, 0))


class TestIngest:
    """측정값 수집."""

    async def test_default_timestamp_is_now(self, db: AsyncSession, loom):
        reading = await sensor_service.ingest(db, loom.id, 1.0, 0.1, NOW)
        assert reading.timestamp == NOW

    async def test_stopped_loom_accepted(self, db: AsyncSession, loom):
        """정지된 직기의 측정값도 저장."""
        reading = await sensor_service.ingest(db, loom.id, 5.0, 0.5, NOW)
        assert reading.loom_id == loom.id

    async def test_negative_rejected(self, db: AsyncSession, loom):
        with pytest.raises(InvalidInputError):
            await sensor_service.ingest(db, loom.id, -1.0, 0.1, NOW)

    async def test_unknown_loom(self, db: AsyncSession):
        with pytest.raises(NotFoundError):
            await sensor_service.ingest(db, uuid.uuid4(), 1.0, 0.1, NOW)

    async def test_regression_rejected_while_running(self, db: AsyncSession, loom, weaver_user):
        """가동 중 누적값 감소는 거부."""
        await _running(db, loom, weaver_user)
        await sensor_service.ingest(db, loom.id, 2.0, 0.2, NOW, timestamp=at(8, 0))
        with pytest.raises(ReadingRegressionError):
            await sensor_service.ingest(db, loom.id, 1.5, 0.25, NOW, timestamp=at(8, 5))

    async def test_previous_session_not_compared(self, db: AsyncSession, loom, weaver_user):
        """이전 세션 값과는 비교하지 않음 (세션마다 누적값 초기화)."""
        await sensor_service.ingest(db, loom.id, 9.0, 0.9, NOW, timestamp=at(6, 30))
        await _running(db, loom, weaver_user)
        reading = await sensor_service.ingest(db, loom.id, 0.5, 0.05, NOW, timestamp=at(7, 30))
        assert reading.production == 0.5


class TestLiveAndLatest:
    """실시간 시계열 및 최신값."""

    async def test_live_series_ascending(self, db: AsyncSession, loom, weaver_user):
        await _running(db, loom, weaver_user)
        await sensor_service.ingest(db, loom.id, 1.0, 0.1, NOW, timestamp=at(8, 0))
        await sensor_service.ingest(db, loom.id, 1.5, 0.15, NOW, timestamp=at(8, 1))

        series = await sensor_service.live_series(db, loom.id)
        assert [r["production"] for r in series] == [1.0, 1.5]
        assert [r["timestamp"] for r in series] == [at(8, 0), at(8, 1)]

    async def test_live_series_limit_keeps_latest(self, db: AsyncSession, loom, weaver_user):
        await _running(db, loom, weaver_user)
        for minute in range(5):
            await sensor_service.ingest(db, loom.id, float(minute), 0.0, NOW, timestamp=at(8, minute))
        series = await sensor_service.live_series(db, loom.id, limit=2)
        assert [r["production"] for r in series] == [3.0, 4.0]

    async def test_live_series_empty_when_stopped(self, db: AsyncSession, loom):
        await sensor_service.ingest(db, loom.id, 1.0, 0.1, NOW)
        assert await sensor_service.live_series(db, loom.id) == []

    async def test_live_series_tie_matches_latest(self, db: AsyncSession, loom, weaver_user):
        """같은 시각 측정값은 최신값과 같은 기준으로 정렬."""
        await _running(db, loom, weaver_user)
        await sensor_service.ingest(db, loom.id, 1.0, 0.1, NOW, timestamp=at(8, 0))
        await sensor_service.ingest(db, loom.id, 1.5, 0.15, NOW, timestamp=at(8, 0))

        series = await sensor_service.live_series(db, loom.id, limit=1)
        latest = await sensor_service.latest_reading(db, loom.id)
        assert [r["production"] for r in series] == [1.5]
        assert latest["production"] == 1.5

    async def test_latest_placeholder(self, db: AsyncSession, loom):
        """측정값이 없으면 0 값."""
        latest = await sensor_service.latest_reading(db, loom.id)
        assert latest == {"timestamp": None, "production": 0.0, "energy": 0.0}

    async def test_latest_rounded(self, db: AsyncSession, loom, weaver_user):
        await _running(db, loom, weaver_user)
        await sensor_service.ingest(db, loom.id, 1.23456, 0.98765, NOW, timestamp=at(8, 0))
        latest = await sensor_service.latest_reading(db, loom.id)
        assert latest["production"] == 1.235
        assert latest["energy"] == 0.988


class TestStats:
    """기간 통계."""

    async def test_totals_are_latest_not_sum(self, db: AsyncSession, loom, weaver_user):
        """총계는 합이 아니라 마지막 누적값."""
        await _running(db, loom, weaver_user)
        await sensor_service.ingest(db, loom.id, 1.0, 0.1, NOW, timestamp=at(8, 0))
        await sensor_service.ingest(db, loom.id, 1.5, 0.15, NOW, timestamp=at(8, 1))

        stats = await sensor_service.stats_for_loom(db, loom.id, TODAY, TODAY)
        assert stats["total_production"] == 1.5
        assert stats["total_energy"] == 0.15
        assert stats["avg_production"] == pytest.approx(1.25)
        assert stats["avg_energy"] == pytest.approx(0.125)
        assert stats["data_points"] == 2

    async def test_date_range_bounds(self, db: AsyncSession, loom):
        await sensor_service.ingest(db, loom.id, 3.0, 0.3, NOW, timestamp=at(23, 0, day=YESTERDAY))
        await sensor_service.ingest(db, loom.id, 1.0, 0.1, NOW, timestamp=at(23, 59, day=TODAY))
        stats = await sensor_service.stats_for_loom(db, loom.id, TODAY, TODAY)
        assert stats["data_points"] == 1
        assert stats["total_production"] == 1.0

    async def test_empty_range(self, db: AsyncSession, loom):
        stats = await sensor_service.stats_for_loom(db, loom.id, TODAY, TODAY)
        assert stats["total_production"] == 0.0
        assert stats["data_points"] == 0

    async def test_inverted_range(self, db: AsyncSession, loom):
        with pytest.raises(InvalidInputError):
            await sensor_service.stats_for_loom(db, loom.id, TODAY, YESTERDAY)


class TestHistory:
    """근무별 이력 및 요약."""

    async def test_history_per_completed_shift(self, db: AsyncSession, loom, weaver_user):
        shift = await make_shift(db, loom, weaver_user, "Morning", TODAY)
        await loom_service.start(db, loom.id, weaver_user.id, at(7, 0))
        await sensor_service.ingest(db, loom.id, 1.0, 0.1, NOW, timestamp=at(8, 0))
        await sensor_service.ingest(db, loom.id, 4.0, 0.4, NOW, timestamp=at(13, 59))
        await expiry_service.sweep(db, at(14, 5))
        await sensor_service.ingest(db, loom.id, 0.2, 0.02, NOW, timestamp=at(15, 0))

        history = await sensor_service.history_for_loom(db, loom.id)
        assert len(history) == 1
        entry = history[0]
        assert entry["shift_id"] == str(shift.id)
        assert entry["weaver_name"] == "Test Weaver"
        assert entry["total_production"] == 4.0
        assert entry["total_energy"] == 0.4
        assert len(entry["readings"]) == 2

    async def test_history_matches_summary_after_early_end(self, db: AsyncSession, loom, weaver_user):
        """조기 종료 근무의 이력 총계는 저장된 요약과 같음."""
        shift = await make_shift(db, loom, weaver_user, "Morning", TODAY)
        await loom_service.start(db, loom.id, weaver_user.id, at(7, 0))
        await sensor_service.ingest(db, loom.id, 2.0, 0.2, NOW, timestamp=at(10, 30))
        await shift_service.end_manually(db, shift.id, weaver_user.id, at(11, 0))
        await sensor_service.ingest(db, loom.id, 0.3, 0.03, NOW, timestamp=at(12, 0))

        history = await sensor_service.history_for_loom(db, loom.id)
        summary = await shift_summary_repository.get_by_shift(db, shift.id)
        assert history[0]["total_production"] == summary.total_production == 2.0
        assert history[0]["total_energy"] == summary.total_energy == 0.2
        assert len(history[0]["readings"]) == 1

    async def test_open_shifts_excluded(self, db: AsyncSession, loom, weaver_user):
        await make_shift(db, loom, weaver_user, "Morning", TODAY)
        assert await sensor_service.history_for_loom(db, loom.id) == []

    async def test_summaries_listed(self, db: AsyncSession, loom, weaver_user):
        await make_shift(db, loom, weaver_user, "Morning", TODAY)
        await expiry_service.sweep(db, at(15, 0))
        summaries = await sensor_service.summaries_for_loom(db, loom.id)
        assert len(summaries) == 1
        assert summaries[0]["shift_type"] == "Morning"

    async def test_excel_export(self, db: AsyncSession, loom, weaver_user):
        """Excel 내보내기 — 근무 이력/측정값 시트."""
        await make_shift(db, loom, weaver_user, "Morning", TODAY)
        await loom_service.start(db, loom.id, weaver_user.id, at(7, 0))
        await sensor_service.ingest(db, loom.id, 2.0, 0.2, NOW, timestamp=at(9, 0))
        await expiry_service.sweep(db, at(15, 0))

        content = await sensor_service.export_history_excel(db, loom.id)
        wb = load_workbook(BytesIO(content))
        assert wb.sheetnames == ["Shift History", "Readings"]
        rows = list(wb["Shift History"].iter_rows(min_row=2, values_only=True))
        assert rows[0][0] == "LOOM-001"
        assert rows[0][6] == 2.0
        assert wb["Readings"].max_row == 2


class TestPurge:
    """보존기간 정리."""

    async def test_purge_older_than(self, db: AsyncSession, loom):
        await sensor_service.ingest(db, loom.id, 1.0, 0.1, NOW, timestamp=NOW - timedelta(days=40))
        await sensor_service.ingest(db, loom.id, 2.0, 0.2, NOW, timestamp=NOW - timedelta(days=1))
        deleted = await sensor_service.purge_readings(db, 30, NOW)
        assert deleted == 1
        stats = await sensor_service.stats_for_loom(db, loom.id)
        assert stats["data_points"] == 1

    async def test_purge_minimum_days(self, db: AsyncSession):
        with pytest.raises(InvalidInputError):
            await sensor_service.purge_readings(db, 0, NOW)

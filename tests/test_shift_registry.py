"""근무 배정 테스트 — 배정 검증, 활성/예정 조회, 삭제, 출근 체크, 수동 종료.

Shift registry tests — Assignment validation, active/upcoming lookups,
deletion of unstarted shifts, attendance and manual end.
"""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.repositories.shift_repository import shift_repository, shift_summary_repository
from loomtrack.services.expiry_service import expiry_service
from loomtrack.services.loom_service import loom_service
from loomtrack.services.shift_service import shift_service
from loomtrack.utils.exceptions import (
    AlreadyStartedError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    PastDateError,
    SlotConflictError,
)
from tests.conftest import NOW, TODAY, TOMORROW, YESTERDAY, at, make_shift


class TestAssign:
    """근무 배정."""

    async def test_assign_computes_window(self, db: AsyncSession, loom, weaver_user):
        """배정 시 시간대가 계산되어 저장됨."""
        shift = await shift_service.assign(db, loom.id, weaver_user.id, "Night", TODAY, TODAY)
        assert shift.start_time == at(22)
        assert shift.end_time == at(6, day=TOMORROW)
        assert shift.completed is False
        assert shift.actual_start_time is None

    async def test_past_date_rejected(self, db: AsyncSession, loom, weaver_user):
        """과거 날짜 배정은 거부."""
        with pytest.raises(PastDateError):
            await shift_service.assign(db, loom.id, weaver_user.id, "Morning", YESTERDAY, TODAY)

    async def test_slot_conflict(self, db: AsyncSession, loom, weaver_user, other_weaver):
        """같은 직기/날짜/유형에 미완료 근무가 있으면 충돌."""
        await make_shift(db, loom, weaver_user, "Morning", TODAY)
        with pytest.raises(SlotConflictError):
            await shift_service.assign(db, loom.id, other_weaver.id, "Morning", TODAY, TODAY)

    async def test_same_slot_on_other_loom_allowed(self, db: AsyncSession, loom, second_loom, weaver_user):
        """다른 직기의 같은 슬롯은 허용."""
        await make_shift(db, loom, weaver_user, "Morning", TODAY)
        shift = await make_shift(db, second_loom, weaver_user, "Morning", TODAY)
        assert shift.loom_id == second_loom.id

    async def test_slot_reusable_after_completion(self, db: AsyncSession, loom, weaver_user, other_weaver):
        """완료된 근무의 슬롯은 재배정 가능."""
        first = await make_shift(db, loom, weaver_user, "Morning", TODAY)
        await expiry_service.close_shift(db, first, NOW)
        second = await shift_service.assign(db, loom.id, other_weaver.id, "Morning", TODAY, TODAY)
        assert second.id != first.id

    async def test_invalid_type(self, db: AsyncSession, loom, weaver_user):
        with pytest.raises(InvalidInputError):
            await shift_service.assign(db, loom.id, weaver_user.id, "Lunch", TODAY, TODAY)

    async def test_admin_is_not_a_weaver(self, db: AsyncSession, loom, admin_user):
        """관리자에게는 근무 배정 불가."""
        with pytest.raises(NotFoundError):
            await shift_service.assign(db, loom.id, admin_user.id, "Morning", TODAY, TODAY)


class TestActiveShifts:
    """직공 활성 근무 조회."""

    async def test_current_shift_listed(self, db: AsyncSession, loom, weaver_user):
        morning = await make_shift(db, loom, weaver_user, "Morning", TODAY)
        active = await shift_service.active_shifts_for_weaver(db, weaver_user.id, NOW)
        assert [s.id for s in active] == [morning.id]

    async def test_lookahead_window(self, db: AsyncSession, loom, weaver_user):
        """시작 30분 전부터 노출."""
        evening = await make_shift(db, loom, weaver_user, "Evening", TODAY)
        assert await shift_service.active_shifts_for_weaver(db, weaver_user.id, at(13, 0)) == []
        active = await shift_service.active_shifts_for_weaver(db, weaver_user.id, at(13, 30))
        assert [s.id for s in active] == [evening.id]

    async def test_night_shift_after_midnight(self, db: AsyncSession, loom, weaver_user):
        """어제 배정된 야간 근무는 자정 이후에도 활성."""
        night = await make_shift(db, loom, weaver_user, "Night", YESTERDAY)
        active = await shift_service.active_shifts_for_weaver(db, weaver_user.id, at(2, 0))
        assert [s.id for s in active] == [night.id]

    async def test_expired_shift_swept(self, db: AsyncSession, loom, weaver_user):
        """만료된 근무는 조회 중 종료되고 제외됨."""
        night = await make_shift(db, loom, weaver_user, "Night", YESTERDAY)
        active = await shift_service.active_shifts_for_weaver(db, weaver_user.id, NOW)
        assert active == []
        await db.refresh(night)
        assert night.completed is True
        assert night.actual_end_time == night.end_time

    async def test_other_weaver_not_listed(self, db: AsyncSession, loom, weaver_user, other_weaver):
        await make_shift(db, loom, weaver_user, "Morning", TODAY)
        assert await shift_service.active_shifts_for_weaver(db, other_weaver.id, NOW) == []


class TestUpcomingShifts:
    """예정 근무 조회."""

    async def test_ordered_by_date_then_start(self, db: AsyncSession, loom, weaver_user):
        tomorrow_morning = await make_shift(db, loom, weaver_user, "Morning", TOMORROW)
        today_night = await make_shift(db, loom, weaver_user, "Night", TODAY)
        today_morning = await make_shift(db, loom, weaver_user, "Morning", TODAY)
        upcoming = await shift_service.upcoming_shifts_for_weaver(db, weaver_user.id, TODAY)
        assert [s.id for s in upcoming] == [today_morning.id, today_night.id, tomorrow_morning.id]

    async def test_to_date_bound(self, db: AsyncSession, loom, weaver_user):
        today_morning = await make_shift(db, loom, weaver_user, "Morning", TODAY)
        await make_shift(db, loom, weaver_user, "Morning", TOMORROW)
        upcoming = await shift_service.upcoming_shifts_for_weaver(db, weaver_user.id, TODAY, TODAY)
        assert [s.id for s in upcoming] == [today_morning.id]

    async def test_inverted_range_rejected(self, db: AsyncSession, weaver_user):
        with pytest.raises(InvalidInputError):
            await shift_service.upcoming_shifts_for_weaver(db, weaver_user.id, TODAY, TODAY - timedelta(days=2))


class TestDeleteShift:
    """가동 전 근무 삭제."""

    async def test_delete_unstarted(self, db: AsyncSession, loom, weaver_user):
        shift = await make_shift(db, loom, weaver_user, "Evening", TODAY)
        await shift_service.delete_shift(db, shift.id)
        assert await shift_repository.get_by_id(db, shift.id) is None

    async def test_started_shift_kept(self, db: AsyncSession, loom, weaver_user):
        """가동된 근무는 삭제 불가."""
        shift = await make_shift(db, loom, weaver_user, "Morning", TODAY)
        await loom_service.start(db, loom.id, weaver_user.id, NOW)
        with pytest.raises(AlreadyStartedError):
            await shift_service.delete_shift(db, shift.id)

    async def test_missing_shift(self, db: AsyncSession, loom, weaver_user):
        shift = await make_shift(db, loom, weaver_user, "Evening", TODAY)
        await shift_service.delete_shift(db, shift.id)
        with pytest.raises(NotFoundError):
            await shift_service.delete_shift(db, shift.id)


class TestAttendanceAndManualEnd:
    """출근 체크 및 수동 종료."""

    async def test_mark_attendance(self, db: AsyncSession, loom, weaver_user):
        shift = await make_shift(db, loom, weaver_user, "Morning", TODAY)
        marked = await shift_service.mark_attendance(db, shift.id, weaver_user.id)
        assert marked.attendance_marked is True

    async def test_attendance_other_weaver_forbidden(self, db: AsyncSession, loom, weaver_user, other_weaver):
        shift = await make_shift(db, loom, weaver_user, "Morning", TODAY)
        with pytest.raises(ForbiddenError):
            await shift_service.mark_attendance(db, shift.id, other_weaver.id)

    async def test_end_manually(self, db: AsyncSession, loom, weaver_user):
        """수동 종료 시 완료 처리, 요약 기록, 직기 정지."""
        shift = await make_shift(db, loom, weaver_user, "Morning", TODAY)
        await loom_service.start(db, loom.id, weaver_user.id, at(7, 0))

        ended = await shift_service.end_manually(db, shift.id, weaver_user.id, NOW)
        assert ended.completed is True
        assert ended.actual_end_time == NOW
        summary = await shift_summary_repository.get_by_shift(db, shift.id)
        assert summary is not None
        assert summary.end_time == NOW
        await db.refresh(loom)
        assert loom.run_status == "stopped"
        assert loom.running_since is None

    async def test_end_twice_is_noop(self, db: AsyncSession, loom, weaver_user):
        """이미 완료된 근무는 그대로 반환."""
        shift = await make_shift(db, loom, weaver_user, "Morning", TODAY)
        await shift_service.end_manually(db, shift.id, weaver_user.id, NOW)
        again = await shift_service.end_manually(db, shift.id, weaver_user.id, NOW + timedelta(minutes=5))
        assert again.actual_end_time == NOW

    async def test_end_other_weaver_forbidden(self, db: AsyncSession, loom, weaver_user, other_weaver):
        shift = await make_shift(db, loom, weaver_user, "Morning", TODAY)
        with pytest.raises(ForbiddenError):
            await shift_service.end_manually(db, shift.id, other_weaver.id, NOW)

"""직기 세션 테스트 — 가동 조건, 중복 가동, 정지 권한, 강제 배정 해제.

Loom session tests — Start preconditions, double start, stop permissions
and forced unassignment.
"""

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.repositories.shift_repository import shift_repository
from loomtrack.services.loom_service import loom_service
from loomtrack.utils.exceptions import (
    DuplicateError,
    ForbiddenError,
    LoomAlreadyRunningError,
    NoActiveShiftError,
    NotFoundError,
    OutsideShiftWindowError,
)
from tests.conftest import NOW, TODAY, TOMORROW, YESTERDAY, at, make_shift


class TestStart:
    """직기 가동."""

    async def test_start_inside_window(self, db: AsyncSession, loom, weaver_user):
        """근무 시간대 안에서 가동 성공."""
        shift = await make_shift(db, loom, weaver_user, "Morning", TODAY)
        started = await loom_service.start(db, loom.id, weaver_user.id, NOW)
        assert started.run_status == "running"
        assert started.running_since == NOW
        assert started.current_weaver_id == weaver_user.id
        await db.refresh(shift)
        assert shift.actual_start_time == NOW

    async def test_no_shift(self, db: AsyncSession, loom, weaver_user):
        """배정된 근무가 없으면 가동 불가."""
        with pytest.raises(NoActiveShiftError):
            await loom_service.start(db, loom.id, weaver_user.id, NOW)

    async def test_shift_on_other_loom_only(self, db: AsyncSession, loom, second_loom, weaver_user):
        """다른 직기 근무로는 가동 불가."""
        await make_shift(db, second_loom, weaver_user, "Morning", TODAY)
        with pytest.raises(NoActiveShiftError):
            await loom_service.start(db, loom.id, weaver_user.id, NOW)

    async def test_before_window(self, db: AsyncSession, loom, weaver_user):
        """시작 전이면 시작 시각 안내."""
        await make_shift(db, loom, weaver_user, "Evening", TODAY)
        with pytest.raises(OutsideShiftWindowError) as exc_info:
            await loom_service.start(db, loom.id, weaver_user.id, NOW)
        assert "Shift starts at 14:00" in exc_info.value.detail

    async def test_after_window(self, db: AsyncSession, loom, weaver_user):
        """종료 후면 종료 시각 안내."""
        await make_shift(db, loom, weaver_user, "Morning", TODAY)
        with pytest.raises(OutsideShiftWindowError) as exc_info:
            await loom_service.start(db, loom.id, weaver_user.id, at(14, 30))
        assert "Shift ended at 14:00" in exc_info.value.detail

    async def test_window_end_is_exclusive(self, db: AsyncSession, loom, weaver_user):
        """정확히 종료 시각에는 가동 불가."""
        await make_shift(db, loom, weaver_user, "Morning", TODAY)
        with pytest.raises(OutsideShiftWindowError):
            await loom_service.start(db, loom.id, weaver_user.id, at(14, 0))

    async def test_night_shift_after_midnight(self, db: AsyncSession, loom, weaver_user):
        """어제 야간 근무로 자정 이후 가동."""
        await make_shift(db, loom, weaver_user, "Night", YESTERDAY)
        started = await loom_service.start(db, loom.id, weaver_user.id, at(3, 0))
        assert started.run_status == "running"

    async def test_double_start(self, db: AsyncSession, loom, weaver_user):
        """이미 가동 중이면 거부."""
        await make_shift(db, loom, weaver_user, "Morning", TODAY)
        await loom_service.start(db, loom.id, weaver_user.id, NOW)
        with pytest.raises(LoomAlreadyRunningError):
            await loom_service.start(db, loom.id, weaver_user.id, at(10, 5))

    async def test_actual_start_kept_on_restart(self, db: AsyncSession, loom, weaver_user):
        """재가동해도 최초 가동 시각 유지."""
        shift = await make_shift(db, loom, weaver_user, "Morning", TODAY)
        await loom_service.start(db, loom.id, weaver_user.id, at(7, 0))
        await loom_service.stop(db, loom.id, weaver_user, at(8, 0))
        restarted = await loom_service.start(db, loom.id, weaver_user.id, at(9, 0))
        assert restarted.running_since == at(9, 0)
        await db.refresh(shift)
        assert shift.actual_start_time == at(7, 0)

    async def test_missing_loom(self, db: AsyncSession, weaver_user):
        with pytest.raises(NotFoundError):
            await loom_service.start(db, uuid.uuid4(), weaver_user.id, NOW)


class TestStop:
    """직기 정지."""

    async def test_stop_running(self, db: AsyncSession, loom, weaver_user):
        await make_shift(db, loom, weaver_user, "Morning", TODAY)
        await loom_service.start(db, loom.id, weaver_user.id, NOW)
        stopped = await loom_service.stop(db, loom.id, weaver_user, at(11, 0))
        assert stopped.run_status == "stopped"
        assert stopped.running_since is None

    async def test_stop_is_idempotent(self, db: AsyncSession, loom, weaver_user):
        """정지된 직기 정지는 그대로 성공."""
        await make_shift(db, loom, weaver_user, "Morning", TODAY)
        stopped = await loom_service.stop(db, loom.id, weaver_user, NOW)
        assert stopped.run_status == "stopped"

    async def test_unrelated_weaver_forbidden(self, db: AsyncSession, loom, weaver_user, other_weaver):
        """근무가 없는 직공은 정지 불가."""
        await make_shift(db, loom, weaver_user, "Morning", TODAY)
        await loom_service.start(db, loom.id, weaver_user.id, NOW)
        with pytest.raises(ForbiddenError):
            await loom_service.stop(db, loom.id, other_weaver, NOW)

    async def test_weaver_of_later_shift_forbidden(self, db: AsyncSession, loom, weaver_user, other_weaver):
        """같은 직기의 다른 시간대 근무자는 진행 중인 세션을 정지할 수 없음."""
        await make_shift(db, loom, weaver_user, "Morning", TODAY)
        await make_shift(db, loom, other_weaver, "Evening", TODAY)
        await loom_service.start(db, loom.id, weaver_user.id, at(7, 0))

        with pytest.raises(ForbiddenError):
            await loom_service.stop(db, loom.id, other_weaver, NOW)
        await db.refresh(loom)
        assert loom.run_status == "running"

    async def test_admin_can_stop(self, db: AsyncSession, loom, weaver_user, admin_user):
        await make_shift(db, loom, weaver_user, "Morning", TODAY)
        await loom_service.start(db, loom.id, weaver_user.id, NOW)
        stopped = await loom_service.stop(db, loom.id, admin_user, NOW)
        assert stopped.run_status == "stopped"


class TestForceUnassign:
    """강제 배정 해제."""

    async def test_removes_future_shifts_and_stops(self, db: AsyncSession, loom, weaver_user):
        """예정 근무 삭제, 가동 근무 유지, 직기 정지."""
        running_shift = await make_shift(db, loom, weaver_user, "Morning", TODAY)
        evening = await make_shift(db, loom, weaver_user, "Evening", TODAY)
        tomorrow = await make_shift(db, loom, weaver_user, "Morning", TOMORROW)
        await loom_service.start(db, loom.id, weaver_user.id, NOW)

        result = await loom_service.force_unassign(db, loom.id, TODAY)
        assert result == {"deleted_shifts": 2, "stopped": True}

        assert await shift_repository.get_by_id(db, running_shift.id) is not None
        assert await shift_repository.get_by_id(db, evening.id) is None
        assert await shift_repository.get_by_id(db, tomorrow.id) is None
        await db.refresh(loom)
        assert loom.run_status == "stopped"
        assert loom.current_weaver_id is None

    async def test_stopped_loom(self, db: AsyncSession, loom):
        result = await loom_service.force_unassign(db, loom.id, TODAY)
        assert result == {"deleted_shifts": 0, "stopped": False}


class TestLoomAdmin:
    """직기 관리."""

    async def test_create_duplicate_code(self, db: AsyncSession, loom):
        with pytest.raises(DuplicateError):
            await loom_service.create_loom(db, "LOOM-001")

    async def test_assign_and_clear_weaver(self, db: AsyncSession, loom, weaver_user):
        assigned = await loom_service.assign_weaver(db, loom.id, weaver_user.id)
        assert assigned.current_weaver_id == weaver_user.id
        cleared = await loom_service.assign_weaver(db, loom.id, None)
        assert cleared.current_weaver_id is None

    async def test_current_weaver_can_stop(self, db: AsyncSession, loom, weaver_user, other_weaver):
        """담당 직공은 근무 없이도 정지 가능."""
        await make_shift(db, loom, weaver_user, "Morning", TODAY)
        await loom_service.start(db, loom.id, weaver_user.id, NOW)
        await loom_service.assign_weaver(db, loom.id, other_weaver.id)
        stopped = await loom_service.stop(db, loom.id, other_weaver, NOW)
        assert stopped.run_status == "stopped"

"""공장 현지 시각 제공 모듈.

Facility clock module.
Every time-dependent rule (shift windows, expiry, sessions) reads "now"
through a Clock; tests substitute FixedClock.

All instants are naive datetimes in the facility's local civil time
(settings.FACILITY_TIMEZONE). Mixing them with aware datetimes is an error.
"""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from loomtrack.config import settings


class Clock:
    """현재 시각 제공자 인터페이스 (Current-time provider interface)."""

    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """실제 시스템 시계 — 공장 타임존 기준 현지 시각.

    Wall clock converted to the facility's local time, tzinfo stripped.
    """

    def __init__(self, tz_name: str | None = None) -> None:
        self._tz: ZoneInfo = ZoneInfo(tz_name or settings.FACILITY_TIMEZONE)

    def now(self) -> datetime:
        return datetime.now(self._tz).replace(tzinfo=None, microsecond=0)


class FixedClock(Clock):
    """고정 시계 — 테스트 및 재처리용.

    Clock pinned to a given instant; advance() moves it forward.
    """

    def __init__(self, instant: datetime) -> None:
        self._instant: datetime = instant

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = instant

    def advance(self, **delta: float) -> datetime:
        self._instant = self._instant + timedelta(**delta)
        return self._instant


# 전역 시계 싱글턴 — Global clock singleton
system_clock: SystemClock = SystemClock()


def get_clock() -> Clock:
    """FastAPI 의존성 — 테스트에서 dependency_overrides로 교체합니다.

    FastAPI dependency returning the active clock (overridden in tests).
    """
    return system_clock


def to_facility_local(instant: datetime, tz_name: str | None = None) -> datetime:
    """외부 입력 시각을 공장 현지 naive 시각으로 맞춥니다.

    Normalize an incoming instant: aware datetimes are converted to the
    facility timezone and stripped; naive ones are taken as already local.
    """
    if instant.tzinfo is None:
        return instant
    return instant.astimezone(ZoneInfo(tz_name or settings.FACILITY_TIMEZONE)).replace(tzinfo=None)

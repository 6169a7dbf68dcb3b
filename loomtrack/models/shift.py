"""근무 및 근무 요약 SQLAlchemy ORM 모델 정의.

Shift and shift summary SQLAlchemy ORM model definitions.

Tables:
    - shifts: 직기별 근무 배정 (Weaver-to-loom shift assignments)
    - shift_summaries: 종료된 근무의 생산/에너지 스냅샷 (Write-once totals of closed shifts)
"""

import uuid
from datetime import date, datetime, timezone
from sqlalchemy import Boolean, Date, DateTime, Float, ForeignKey, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from loomtrack.database import Base

# 근무 유형 상수 — Shift types
SHIFT_MORNING: str = "Morning"
SHIFT_EVENING: str = "Evening"
SHIFT_NIGHT: str = "Night"
SHIFT_TYPES: tuple[str, ...] = (SHIFT_MORNING, SHIFT_EVENING, SHIFT_NIGHT)


class Shift(Base):
    """근무 모델 — 한 직공을 한 직기에 한 시간대 동안 배정.

    Shift model — Assigns one weaver to one loom for a Morning/Evening/Night
    window. start_time/end_time are derived from (shift_type, scheduled_date)
    once at creation and never edited afterwards.

    Status flow:
        open (completed=False) → completed (manual end or expiry sweep)

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        loom_id: 직기 FK (Loom the shift runs on)
        weaver_id: 직공 FK (Assigned weaver)
        shift_type: 근무 유형 (Shift type: Morning/Evening/Night)
        scheduled_date: 근무 날짜 (Calendar date the shift is scheduled for)
        start_time: 근무 시작 시각 (Window start, facility local)
        end_time: 근무 종료 시각 (Window end, facility local; Night ends next day)
        completed: 완료 여부 (Whether the shift has been closed)
        attendance_marked: 출근 체크 여부 (Whether the weaver marked attendance)
        actual_start_time: 실제 최초 가동 시각 (First loom start within this shift)
        actual_end_time: 실제 종료 시각 (When the shift was closed)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)

    Constraints:
        uq_shift_open_slot: 직기+날짜+근무유형 당 미완료 근무는 하나
            (One non-completed shift per loom+date+shift type)
    """

    __tablename__ = "shifts"

    # 근무 고유 식별자 — Shift unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 직기 FK — Loom (CASCADE: 직기 삭제 시 근무도 삭제)
    loom_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("looms.id", ondelete="CASCADE"), nullable=False)
    # 직공 FK — Assigned weaver
    weaver_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 근무 유형 — "Morning" | "Evening" | "Night"
    shift_type: Mapped[str] = mapped_column(String(20), nullable=False)
    # 근무 날짜 — Scheduled calendar date (date only, no time)
    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False)
    # 근무 시작/종료 시각 — Window derived once from shift_type + scheduled_date
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    # 완료 여부 — Closed by manual end or expiry sweep
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # 출근 체크 — Attendance marked by the weaver
    attendance_marked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # 실제 가동 시작 — Set on the first loom start of this shift only
    actual_start_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    # 실제 종료 — Manual end: request time, sweep: nominal end_time
    actual_end_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index(
            "uq_shift_open_slot",
            "loom_id", "scheduled_date", "shift_type",
            unique=True,
            postgresql_where=text("NOT completed"),
            sqlite_where=text("NOT completed"),
        ),
        Index("ix_shifts_weaver_date", "weaver_id", "scheduled_date"),
        Index("ix_shifts_open_end", "completed", "end_time"),
    )


class ShiftSummary(Base):
    """근무 요약 모델 — 종료된 근무의 누적 생산량/에너지 스냅샷.

    Shift summary model — Snapshot of a closed shift's totals. Written once by
    whichever path (manual end or sweep) closed the shift.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        shift_id: 근무 FK, 고유 (Source shift, unique → write-once)
        loom_id: 직기 FK (Loom)
        weaver_id: 직공 FK (Weaver)
        shift_type: 근무 유형 (Shift type)
        total_energy: 총 에너지 kWh (Last cumulative energy reading in range)
        total_production: 총 생산량 m (Last cumulative production reading in range)
        start_time: 집계 시작 (Aggregation window start)
        end_time: 집계 종료 (Aggregation window end)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "shift_summaries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shift_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False, unique=True)
    loom_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("looms.id", ondelete="CASCADE"), nullable=False)
    weaver_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    shift_type: Mapped[str] = mapped_column(String(20), nullable=False)
    total_energy: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_production: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

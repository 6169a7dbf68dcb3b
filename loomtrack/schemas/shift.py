"""근무 관련 Pydantic 요청/응답 스키마 정의.

Shift-related Pydantic request/response schema definitions.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


class ShiftCreate(BaseModel):
    """근무 배정 요청 스키마 (Admin shift assignment request)."""

    loom_id: str  # 직기 UUID (Loom UUID)
    weaver_id: str  # 직공 UUID (Weaver UUID)
    shift_type: str = Field(pattern="^(Morning|Evening|Night)$")  # 근무 유형 (Shift type)
    scheduled_date: date  # 근무 날짜 (Scheduled date, YYYY-MM-DD)


class ShiftResponse(BaseModel):
    """근무 응답 스키마 — 직기 번호, 직공 이름 포함.

    Shift response with loom code and weaver name resolved.
    """

    id: str
    loom_id: str
    loom_code: str  # 직기 번호 (Loom code)
    weaver_id: str
    weaver_name: str  # 직공 이름 (Weaver name)
    shift_type: str  # "Morning" | "Evening" | "Night"
    scheduled_date: date
    start_time: datetime  # 근무 시작, 공장 현지 시각 (Window start, facility local)
    end_time: datetime  # 근무 종료, Night는 다음날 (Window end, next day for Night)
    completed: bool
    attendance_marked: bool
    actual_start_time: datetime | None = None  # 최초 가동 시각 (First loom start)
    actual_end_time: datetime | None = None  # 종료 시각 (Close instant)

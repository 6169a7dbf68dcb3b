"""센서 측정값 관련 Pydantic 요청/응답 스키마 정의.

Sensor reading Pydantic request/response schema definitions.
Values are cumulative totals since the loom session started.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


class ReadingCreate(BaseModel):
    """측정값 수집 요청 (Reading ingestion request)."""

    loom_id: str  # 직기 UUID (Loom UUID)
    production: float = Field(ge=0)  # 누적 생산량 m (Cumulative production)
    energy: float = Field(ge=0)  # 누적 에너지 kWh (Cumulative energy)
    timestamp: datetime | None = None  # 측정 시각, 없으면 서버 시각 (Defaults to server clock)


class ReadingResponse(BaseModel):
    """측정값 응답 (Reading response, rounded to 3 decimals)."""

    timestamp: datetime | None = None
    production: float
    energy: float


class ShiftHistoryEntry(BaseModel):
    """근무별 이력 항목 (Per-shift history entry)."""

    shift_id: str
    weaver_id: str
    weaver_name: str
    shift_type: str
    scheduled_date: date
    start_time: datetime
    end_time: datetime
    total_production: float  # 구간 내 마지막 측정값 (Last reading in the shift window)
    total_energy: float
    readings: list[ReadingResponse]


class LoomStatsResponse(BaseModel):
    """기간 통계 응답 (Date-range statistics)."""

    loom_id: str
    date_from: date | None = None
    date_to: date | None = None
    total_production: float  # 구간 내 마지막 측정값 (Last reading in range)
    total_energy: float
    avg_production: float  # 측정값 평균 (Mean of readings)
    avg_energy: float
    data_points: int  # 측정값 개수 (Reading count)


class ShiftSummaryResponse(BaseModel):
    """근무 요약 응답 (Stored shift summary)."""

    id: str
    shift_id: str
    weaver_id: str
    weaver_name: str
    shift_type: str
    start_time: datetime
    end_time: datetime
    total_production: float
    total_energy: float

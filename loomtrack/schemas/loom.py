"""직기 관련 Pydantic 요청/응답 스키마 정의.

Loom-related Pydantic request/response schema definitions.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from loomtrack.schemas.sensor import ReadingResponse


class LoomCreate(BaseModel):
    """직기 등록 요청 (Register loom request)."""

    loom_code: str = Field(min_length=1, max_length=64)  # 현장 직기 번호 (Human loom code, e.g. "LOOM-001")


class LoomWeaverUpdate(BaseModel):
    """담당 직공 지정 요청 — null이면 해제 (Set or clear the current weaver)."""

    weaver_id: str | None = None


class LoomResponse(BaseModel):
    """직기 응답 스키마 — 담당 직공 이름 및 최신 측정값 포함.

    Loom response with current weaver name and latest reading.
    """

    id: str
    loom_code: str
    run_status: str  # "stopped" | "running"
    running_since: datetime | None = None  # 현재 세션 시작 (Current session start)
    current_weaver_id: str | None = None
    current_weaver_name: str | None = None
    latest_reading: ReadingResponse  # 현재 세션 최신 측정값, 없으면 0 (Latest session reading or zeros)
    created_at: datetime | None = None


class UnassignResponse(BaseModel):
    """강제 배정 해제 결과 (Forced unassignment result)."""

    deleted_shifts: int  # 삭제된 예정 근무 수 (Removed future shifts)
    stopped: bool  # 이번 호출로 정지되었는지 (Whether this call stopped the loom)


class LoomDiagnosticEntry(BaseModel):
    """직기 상태 점검 항목 (Per-loom run-state check)."""

    loom_id: str
    loom_code: str
    run_status: str
    running_since: datetime | None = None
    current_weaver_id: str | None = None
    consistent: bool  # 가동 상태와 시작 시각 일치 여부 (run_status agrees with running_since)


class DiagnosticsResponse(BaseModel):
    """직기 상태 점검 결과 (Loom run-state diagnostics)."""

    total: int
    running: int
    stopped: int
    inconsistent: int
    looms: list[LoomDiagnosticEntry]


class DiagnosticsActionResponse(BaseModel):
    """점검 조치 결과 — repair / stop-all (Diagnostics action result)."""

    action: str  # "repair" | "stop_all"
    affected: int  # 변경된 직기 수 (Looms changed)

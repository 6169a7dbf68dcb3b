"""공통 Pydantic 응답 스키마.

Shared Pydantic response schemas.
"""

from pydantic import BaseModel


class SweepResponse(BaseModel):
    """만료 정리 결과 (Expiry sweep result)."""

    closed_count: int  # 이번 호출이 종료한 근무 수 (Shifts closed by this call)


class PurgeResponse(BaseModel):
    """측정값 정리 결과 (Reading purge result)."""

    deleted_count: int  # 삭제된 측정값 수 (Deleted readings)

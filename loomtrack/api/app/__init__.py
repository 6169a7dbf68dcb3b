"""앱 API 라우터 패키지 — 모든 앱(직공용) 엔드포인트 통합.

App API Router package — Aggregates all weaver-app endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - shifts: 내 근무, 출근 체크, 근무 종료 (My shifts, attendance, manual end)
    - looms: 직기 가동/정지 (Loom start/stop)
"""

from fastapi import APIRouter

from loomtrack.api.app.shifts import router as shifts_router
from loomtrack.api.app.looms import router as looms_router

app_router: APIRouter = APIRouter()

# 내 근무: /my/shifts 하위 (My shifts)
app_router.include_router(shifts_router, tags=["App Shifts"])
# 직기: /looms/{loom_id}/start|stop (Loom session control)
app_router.include_router(looms_router, tags=["App Looms"])

"""관리자 API 라우터 패키지 — 모든 관리자 엔드포인트 통합.

Admin API Router package — Aggregates all admin-facing endpoints
into a single router for inclusion in the FastAPI application.

Included routers (Looms & Shifts):
    - looms: 직기 관리, 배정 해제, 강제 정지, 이력 (Loom CRUD, unassign, force stop, history)
    - shifts: 근무 배정, 삭제, 만료 정리 (Shift assignment, deletion, expiry sweep)

Included routers (Operations):
    - readings: 측정값 보존기간 정리 (Reading retention purge)
    - diagnostics: 직기 상태 점검 (Loom run-state diagnostics)
"""

from fastapi import APIRouter

from loomtrack.api.admin.looms import router as looms_router
from loomtrack.api.admin.shifts import router as shifts_router
from loomtrack.api.admin.readings import router as readings_router
from loomtrack.api.admin.diagnostics import router as diagnostics_router

admin_router: APIRouter = APIRouter()

# ---------------------------------------------------------------------------
# 직기/근무 라우터 등록 — Register loom & shift routers
# ---------------------------------------------------------------------------
# 직기: /looms, /weavers (Loom administration)
admin_router.include_router(looms_router, tags=["Admin Looms"])
# 근무: /shifts 하위 (Shift assignment & sweep)
admin_router.include_router(shifts_router, prefix="/shifts", tags=["Admin Shifts"])

# ---------------------------------------------------------------------------
# 운영 라우터 등록 — Register operations routers
# ---------------------------------------------------------------------------
admin_router.include_router(readings_router, prefix="/readings", tags=["Admin Readings"])
admin_router.include_router(diagnostics_router, prefix="/diagnostics", tags=["Admin Diagnostics"])

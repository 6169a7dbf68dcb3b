"""센서 API 라우터 패키지 — 측정값 수집 및 조회 엔드포인트.

Sensor API Router package — Reading ingestion and live/history queries.
"""

from fastapi import APIRouter

from loomtrack.api.sensor.readings import router as readings_router

sensor_router: APIRouter = APIRouter()

sensor_router.include_router(readings_router, tags=["Sensor"])

"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package registers every table with the metadata, which
create_all (seed, tests) and Alembic rely on.

Modules:
    user: 사용자 (Admin and weaver accounts)
    loom: 직기 (Looms and their run state)
    shift: 근무 및 근무 요약 (Shifts and write-once shift summaries)
    sensor: 센서 측정값 (Cumulative sensor readings)
"""

from loomtrack.models.user import User
from loomtrack.models.loom import Loom
from loomtrack.models.shift import Shift, ShiftSummary
from loomtrack.models.sensor import SensorReading

__all__ = [
    "User",
    "Loom",
    "Shift", "ShiftSummary",
    "SensorReading",
]

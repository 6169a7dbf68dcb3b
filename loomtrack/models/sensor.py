"""센서 측정값 SQLAlchemy ORM 모델 정의.

Sensor reading SQLAlchemy ORM model definition.
Each row is a cumulative snapshot (totals since the session started), not a
delta. Rows are immutable; cleanup is purge-by-age only.

Tables:
    - sensor_readings: 직기 센서 측정값 (Loom sensor readings)
"""

import uuid
from datetime import datetime
from sqlalchemy import DateTime, Float, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from loomtrack.database import Base


class SensorReading(Base):
    """센서 측정값 모델.

    Sensor reading model.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        loom_id: 직기 FK (Loom the reading belongs to)
        timestamp: 측정 시각, 공장 현지 시각 (Measurement instant, facility local)
        production: 누적 생산량 m (Cumulative production length)
        energy: 누적 에너지 kWh (Cumulative energy)
    """

    __tablename__ = "sensor_readings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 직기 FK — Loom (CASCADE: 직기 삭제 시 측정값도 삭제)
    loom_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("looms.id", ondelete="CASCADE"), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    production: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    energy: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    __table_args__ = (
        Index("ix_sensor_readings_loom_ts", "loom_id", "timestamp"),
    )

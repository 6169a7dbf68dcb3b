"""직기 관련 SQLAlchemy ORM 모델 정의.

Loom SQLAlchemy ORM model definition.

Run state invariant:
    run_status == "running"  <=>  running_since IS NOT NULL
    run_status == "stopped"  <=>  running_since IS NULL

Only the loom session service and the expiry sweeper mutate run state, and
always through conditional UPDATEs (see LoomRepository).

Tables:
    - looms: 직기 (Physical weaving machines)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from loomtrack.database import Base

# 가동 상태 상수 — Run status values
LOOM_STOPPED: str = "stopped"
LOOM_RUNNING: str = "running"


class Loom(Base):
    """직기 모델 — 가동/정지 상태와 현재 세션 시작 시각.

    Loom model — Run/stop state and the start marker of the current session.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        loom_code: 현장 직기 번호 (Human loom ID, e.g. "LOOM-001", unique)
        run_status: 가동 상태 (Run status: "stopped" | "running")
        running_since: 현재 세션 시작 시각, 공장 현지 시각 (Session start, facility local time)
        current_weaver_id: 현재 담당 직공 FK (Weaver currently responsible for the loom)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "looms"

    # 직기 고유 식별자 — Loom unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 현장 직기 번호 — Human-readable loom code painted on the machine
    loom_code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    # 가동 상태 — "stopped" → "running" → "stopped"
    run_status: Mapped[str] = mapped_column(String(20), nullable=False, default=LOOM_STOPPED)
    # 세션 시작 시각 — Start of the current running session (null while stopped)
    running_since: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    # 현재 담당 직공 FK — Weaver currently responsible (SET NULL on user deletion)
    current_weaver_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    @property
    def is_running(self) -> bool:
        return self.run_status == LOOM_RUNNING

"""사용자 관련 SQLAlchemy ORM 모델 정의.

User SQLAlchemy ORM model definition.
Two roles exist: "admin" (facility supervisor who manages looms and shifts)
and "weaver" (operator who starts/stops looms during assigned shifts).

Tables:
    - users: 사용자 계정 (User accounts)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from loomtrack.database import Base

# 역할 상수 — Role names
ROLE_ADMIN: str = "admin"
ROLE_WEAVER: str = "weaver"


class User(Base):
    """사용자 모델 — 관리자 및 직공 계정.

    User model — Admin and weaver accounts.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 표시 이름 (Display name)
        email: 로그인 이메일 (Login email, globally unique)
        password_hash: bcrypt 해시된 비밀번호 (bcrypt-hashed password)
        role: 역할 (Role: "admin" | "weaver")
        is_active: 활성 상태 (Active status)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — User unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 표시 이름 — Display name shown on loom cards and reports
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 로그인 이메일 — Login email (전역 고유, globally unique)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    # 비밀번호 해시 — bcrypt hashed password (평문 저장 금지, never store plaintext)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # 역할 — "admin" or "weaver"
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_WEAVER)
    # 활성 상태 — Whether the account may log in
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

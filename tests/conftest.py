"""테스트 인프라 — 인메모리 SQLite DB, 세션, 고정 시계, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite DB, session, fixed clock and httpx
client fixtures. Each test gets a fresh schema; all instants are pinned to
NOW through a FixedClock.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SWEEP_INTERVAL_SECONDS"] = "0"
os.environ["AXIOM_API_TOKEN"] = ""

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import date, datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from loomtrack.database import Base, get_db  # noqa: E402
from loomtrack.main import app  # noqa: E402
from loomtrack.models import *  # noqa: E402,F401,F403 — register all models with metadata
from loomtrack.models.loom import Loom  # noqa: E402
from loomtrack.models.shift import Shift  # noqa: E402
from loomtrack.models.user import ROLE_ADMIN, ROLE_WEAVER, User  # noqa: E402
from loomtrack.services.shift_service import shift_service  # noqa: E402
from loomtrack.utils.clock import FixedClock, get_clock  # noqa: E402
from loomtrack.utils.jwt import create_access_token  # noqa: E402
from loomtrack.utils.password import hash_password  # noqa: E402

# ---------------------------------------------------------------------------
# 기준 시각 — 오늘 오전 근무(06:00~14:00) 중
# ---------------------------------------------------------------------------
TODAY = date(2026, 3, 10)
YESTERDAY = TODAY - timedelta(days=1)
TOMORROW = TODAY + timedelta(days=1)
NOW = datetime(2026, 3, 10, 10, 0)


def at(hour: int, minute: int = 0, day: date = TODAY) -> datetime:
    """공장 현지 시각 헬퍼 (Facility-local instant on the given day)."""
    return datetime(day.year, day.month, day.day, hour, minute)


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 시계, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트마다 새 인메모리 DB를 만들고 스키마를 생성합니다."""
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def clock() -> FixedClock:
    """NOW에 고정된 시계."""
    return FixedClock(NOW)


@pytest_asyncio.fixture
async def client(db: AsyncSession, clock: FixedClock) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션과 시계를 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def _make_user(db: AsyncSession, name: str, email: str, password: str, role: str) -> User:
    user = User(name=name, email=email, password_hash=hash_password(password), role=role)
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession) -> User:
    """관리자 사용자를 생성합니다."""
    return await _make_user(db, "Test Admin", "admin@test.com", "admin123!", ROLE_ADMIN)


@pytest_asyncio.fixture
async def weaver_user(db: AsyncSession) -> User:
    """직공 사용자를 생성합니다."""
    return await _make_user(db, "Test Weaver", "weaver@test.com", "weaver123!", ROLE_WEAVER)


@pytest_asyncio.fixture
async def other_weaver(db: AsyncSession) -> User:
    """두 번째 직공을 생성합니다."""
    return await _make_user(db, "Other Weaver", "other@test.com", "other123!", ROLE_WEAVER)


@pytest_asyncio.fixture
async def loom(db: AsyncSession) -> Loom:
    """테스트 직기를 생성합니다."""
    lm = Loom(loom_code="LOOM-001")
    db.add(lm)
    await db.flush()
    await db.refresh(lm)
    return lm


@pytest_asyncio.fixture
async def second_loom(db: AsyncSession) -> Loom:
    """두 번째 직기를 생성합니다."""
    lm = Loom(loom_code="LOOM-002")
    db.add(lm)
    await db.flush()
    await db.refresh(lm)
    return lm


async def make_shift(
    db: AsyncSession,
    loom: Loom,
    weaver: User,
    shift_type: str = "Morning",
    scheduled_date: date = TODAY,
) -> Shift:
    """근무를 배정합니다 (배정일 기준으로 과거 날짜 검사 통과)."""
    return await shift_service.assign(db, loom.id, weaver.id, shift_type, scheduled_date, today=scheduled_date)


def make_token(user: User) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": str(user.id), "role": user.role})


@pytest.fixture
def admin_token(admin_user: User) -> str:
    return make_token(admin_user)


@pytest.fixture
def weaver_token(weaver_user: User) -> str:
    return make_token(weaver_user)


@pytest.fixture
def other_token(other_weaver: User) -> str:
    return make_token(other_weaver)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}

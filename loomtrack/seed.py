"""초기 데이터 시드 스크립트 — 관리자, 샘플 직공, 샘플 직기 생성.

Seed script — Creates the admin account, sample weavers and sample looms.
Run this script once to bootstrap the database.

Usage:
    python -m loomtrack.seed

Creates:
    - 1개 관리자 계정: admin@loomtrack.local / admin123 (1 admin user)
    - 2개 직공 계정: weaver1@ / weaver2@loomtrack.local, 비밀번호 weaver123 (2 weavers)
    - 4개 직기: LOOM-001 ~ LOOM-004 (4 looms)
"""

import asyncio

from sqlalchemy import select

from loomtrack.database import Base, async_session, engine
from loomtrack.models import Loom, User
from loomtrack.models.user import ROLE_ADMIN, ROLE_WEAVER
from loomtrack.utils.password import hash_password


async def seed() -> None:
    """데이터베이스를 초기 데이터로 시드합니다.

    Seed the database with initial data. Creates tables if they don't
    exist. Skips entirely when any user already exists.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        result = await db.execute(select(User).limit(1))
        if result.scalar_one_or_none():
            print("Already seeded. Skipping.")
            return

        db.add(User(
            name="Facility Admin",
            email="admin@loomtrack.local",
            password_hash=hash_password("admin123"),
            role=ROLE_ADMIN,
        ))
        for i in (1, 2):
            db.add(User(
                name=f"Weaver {i}",
                email=f"weaver{i}@loomtrack.local",
                password_hash=hash_password("weaver123"),
                role=ROLE_WEAVER,
            ))
        for i in range(1, 5):
            db.add(Loom(loom_code=f"LOOM-{i:03d}"))

        await db.commit()
        print("Seeded: admin=admin@loomtrack.local/admin123, 2 weavers, 4 looms")


if __name__ == "__main__":
    asyncio.run(seed())

"""인증 API 테스트 — 회원가입, 로그인, /me 엔드포인트.

Auth API tests — Sign-up, login and /me endpoints.
"""

from httpx import AsyncClient

from tests.conftest import auth_header

AUTH = "/api/v1/auth"


class TestSignup:
    """직공 회원가입."""

    async def test_signup_creates_weaver(self, client: AsyncClient):
        """회원가입 시 직공 계정이 생성되고 토큰 발급."""
        res = await client.post(f"{AUTH}/signup", json={
            "name": "New Weaver",
            "email": "New.Weaver@Test.com",
            "password": "secret1",
        })
        assert res.status_code == 201
        token = res.json()["access_token"]

        me = await client.get(f"{AUTH}/me", headers=auth_header(token))
        assert me.status_code == 200
        data = me.json()
        assert data["role"] == "weaver"
        assert data["email"] == "new.weaver@test.com"

    async def test_duplicate_email(self, client: AsyncClient, weaver_user):
        """이미 등록된 이메일은 409."""
        res = await client.post(f"{AUTH}/signup", json={
            "name": "Dup",
            "email": "WEAVER@test.com",
            "password": "secret1",
        })
        assert res.status_code == 409

    async def test_short_password(self, client: AsyncClient):
        res = await client.post(f"{AUTH}/signup", json={
            "name": "Short",
            "email": "short@test.com",
            "password": "123",
        })
        assert res.status_code == 422

    async def test_invalid_email(self, client: AsyncClient):
        res = await client.post(f"{AUTH}/signup", json={
            "name": "Bad",
            "email": "not-an-email",
            "password": "secret1",
        })
        assert res.status_code == 422


class TestLogin:
    """로그인."""

    async def test_login_success(self, client: AsyncClient, admin_user):
        res = await client.post(f"{AUTH}/login", json={"email": "admin@test.com", "password": "admin123!"})
        assert res.status_code == 200
        data = res.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"

    async def test_wrong_password(self, client: AsyncClient, admin_user):
        res = await client.post(f"{AUTH}/login", json={"email": "admin@test.com", "password": "wrong"})
        assert res.status_code == 401

    async def test_unknown_email(self, client: AsyncClient):
        res = await client.post(f"{AUTH}/login", json={"email": "nobody@test.com", "password": "whatever"})
        assert res.status_code == 401

    async def test_inactive_user(self, client: AsyncClient, db, weaver_user):
        """비활성 계정 로그인 실패."""
        weaver_user.is_active = False
        await db.flush()
        res = await client.post(f"{AUTH}/login", json={"email": "weaver@test.com", "password": "weaver123!"})
        assert res.status_code == 401


class TestMe:
    """/me 엔드포인트."""

    async def test_me(self, client: AsyncClient, admin_token):
        res = await client.get(f"{AUTH}/me", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json()["role"] == "admin"

    async def test_no_token(self, client: AsyncClient):
        """토큰 없이 접근 시 401/403."""
        res = await client.get(f"{AUTH}/me")
        assert res.status_code in (401, 403)

    async def test_invalid_token(self, client: AsyncClient):
        res = await client.get(f"{AUTH}/me", headers=auth_header("invalid.token.here"))
        assert res.status_code == 401

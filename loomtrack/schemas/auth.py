"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers weaver sign-up, login and current user info.
"""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """로그인 요청 스키마 (Login request schema).

    Attributes:
        email: 로그인 이메일 (Login email)
        password: 비밀번호 (Plain text password, verified against bcrypt hash)
    """

    email: str  # 로그인 이메일 (Login email, case-insensitive)
    password: str  # 비밀번호 — 평문, 서버에서 bcrypt 해시와 비교 (Plain text, compared to bcrypt hash)


class SignupRequest(BaseModel):
    """직공 회원가입 요청 스키마.

    Weaver self-registration request schema. Admin accounts are created by
    the seed script, never through sign-up.
    """

    name: str = Field(min_length=1, max_length=255)  # 표시 이름 (Display name)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")  # 로그인 이메일 (Login email)
    password: str = Field(min_length=6)  # 비밀번호 — 서버에서 bcrypt 해싱 (Server hashes with bcrypt)


class TokenResponse(BaseModel):
    """JWT 토큰 발급 응답 스키마.

    Attributes:
        access_token: JWT 액세스 토큰 (Access token)
        token_type: 토큰 유형 (Always "bearer" for Authorization header)
    """

    access_token: str  # JWT 액세스 토큰 — 만료: 12시간 기본 (Access token, default TTL: 12h)
    token_type: str = "bearer"  # 토큰 유형 — 항상 "bearer" (Token type for Authorization header)


class UserResponse(BaseModel):
    """사용자 정보 응답 스키마 (GET /me, 직공 목록)."""

    id: str  # 사용자 UUID (User UUID)
    name: str  # 표시 이름 (Display name)
    email: str  # 이메일 (Email)
    role: str  # 역할 — "admin" | "weaver"
    is_active: bool  # 활성 상태 (Active status)

"""공통 인증 라우터 — 회원가입, 로그인, 프로필 조회.

Common Auth Router — Sign-up, login and profile endpoints shared by the
admin console and the weaver app.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.api.deps import get_current_user
from loomtrack.database import get_db
from loomtrack.models.user import User
from loomtrack.schemas.auth import LoginRequest, SignupRequest, TokenResponse, UserResponse
from loomtrack.services.auth_service import auth_service

router: APIRouter = APIRouter()


@router.post("/signup", response_model=TokenResponse, status_code=201)
async def signup(
    data: SignupRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """직공 회원가입 (Weaver self-registration)."""
    result: TokenResponse = await auth_service.signup(db, data)
    await db.commit()
    return result


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """로그인 — 이메일/비밀번호로 액세스 토큰 발급.

    Login with email and password.
    """
    return await auth_service.login(db, data)


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    """현재 사용자 프로필 조회."""
    return auth_service.to_response(current_user)

"""FastAPI 의존성 주입 모듈 — 인증 및 역할 검사.

FastAPI dependency injection module — Authentication and role checks.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies JWT and returns payload)
    3. 페이로드의 "sub" 필드로 DB에서 사용자를 조회하고 활성 상태 확인
       (User is fetched by "sub" and must be active)

Authorization:
    require_role("admin") / require_role("weaver") — 역할이 다르면 403
    (403 when the caller's role does not match)
"""

from typing import Annotated, Awaitable, Callable
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.database import get_db
from loomtrack.models.user import ROLE_ADMIN, ROLE_WEAVER, User
from loomtrack.repositories.user_repository import user_repository
from loomtrack.utils.jwt import decode_token

# HTTP Bearer 토큰 추출기 (Extracts JWT token from Authorization: Bearer <token> header)
security: HTTPBearer = HTTPBearer()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """JWT 토큰에서 현재 인증된 사용자를 추출합니다.

    Decode JWT from the Authorization header and return the authenticated user.

    Raises:
        HTTPException(401): 토큰이 유효하지 않거나 만료됨 (Invalid or expired token)
        HTTPException(401): 사용자를 찾을 수 없거나 비활성 (User not found or inactive)
    """
    try:
        payload: dict = decode_token(credentials.credentials)
        if payload.get("type") != "access":
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token type")
        user_id: str | None = payload.get("sub")
        if user_id is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
        user_uuid: UUID = UUID(user_id)
    except HTTPException:
        raise
    except (jwt.ExpiredSignatureError, jwt.InvalidTokenError, KeyError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    user: User | None = await user_repository.get_by_id(db, user_uuid)
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or inactive")

    return user


def require_role(role: str) -> Callable[..., Awaitable[User]]:
    """역할 기반 권한 검사 의존성 팩토리.

    Dependency factory enforcing that the caller has the given role.
    """
    async def _check(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if current_user.role != role:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current_user
    return _check


# 편의 의존성 — Pre-configured role dependencies
require_admin = require_role(ROLE_ADMIN)    # 관리자만 허용 (Admins only)
require_weaver = require_role(ROLE_WEAVER)  # 직공만 허용 (Weavers only)


def parse_uuid(value: str, label: str = "id") -> UUID:
    """경로/본문 문자열을 UUID로 변환합니다. 잘못된 형식은 422.

    Parse a path/body string into a UUID; malformed values raise 422.
    """
    try:
        return UUID(value)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=f"Invalid {label}")

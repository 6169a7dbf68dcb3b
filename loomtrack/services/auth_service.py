"""인증 서비스 — 로그인, 직공 회원가입, 프로필 조회.

Auth Service — Business logic for login, weaver sign-up and profile lookup.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.models.user import ROLE_WEAVER, User
from loomtrack.repositories.user_repository import user_repository
from loomtrack.schemas.auth import LoginRequest, SignupRequest, TokenResponse, UserResponse
from loomtrack.utils.exceptions import DuplicateError, UnauthorizedError
from loomtrack.utils.jwt import create_access_token
from loomtrack.utils.password import hash_password, verify_password


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    """

    def _issue_token(self, user: User) -> TokenResponse:
        return TokenResponse(access_token=create_access_token({"sub": str(user.id), "role": user.role}))

    async def signup(self, db: AsyncSession, data: SignupRequest) -> TokenResponse:
        """직공 계정을 생성하고 토큰을 발급합니다.

        Create a weaver account and issue an access token.

        Raises:
            DuplicateError: 이메일 중복 (Email already registered)
        """
        email: str = data.email.strip().lower()
        if await user_repository.get_by_email(db, email) is not None:
            raise DuplicateError("이미 등록된 이메일입니다 (Email already registered)")

        user: User = await user_repository.create(
            db,
            {
                "name": data.name.strip(),
                "email": email,
                "password_hash": hash_password(data.password),
                "role": ROLE_WEAVER,
            },
        )
        return self._issue_token(user)

    async def login(self, db: AsyncSession, data: LoginRequest) -> TokenResponse:
        """이메일/비밀번호 로그인.

        Verify credentials and issue an access token.

        Raises:
            UnauthorizedError: 잘못된 인증 정보 또는 비활성 계정
                               (Invalid credentials or deactivated account)
        """
        user: User | None = await user_repository.get_by_email(db, data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")
        if not user.is_active:
            raise UnauthorizedError("Account is deactivated")
        return self._issue_token(user)

    def to_response(self, user: User) -> UserResponse:
        return UserResponse(
            id=str(user.id),
            name=user.name,
            email=user.email,
            role=user.role,
            is_active=user.is_active,
        )


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()

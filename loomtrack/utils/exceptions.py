"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for the loom/shift business
rules. Services raise them directly; FastAPI turns them into responses, so
every business-rule rejection reaches the caller as a regular 4xx outcome.

Usage:
    from loomtrack.utils.exceptions import NotFoundError, SlotConflictError
    raise NotFoundError("Loom not found")
    raise SlotConflictError("Morning shift on 2026-10-20 is already assigned")
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 직기/근무/사용자를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised when a referenced loom, shift or user does not exist.
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DuplicateError(HTTPException):
    """409 Conflict 예외 — 중복 리소스 생성 시도 시 사용.

    409 Conflict exception.
    Raised when a uniqueness rule is violated (duplicate loom code, email).
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ForbiddenError(HTTPException):
    """403 Forbidden 예외 — 권한 부족 시 사용.

    403 Forbidden exception.
    Raised when the caller is not the shift's weaver, or not an admin for
    admin-only operations.
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    401 Unauthorized exception.
    Raised when authentication is missing, invalid, or expired.
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 비즈니스 규칙 위반 시 사용.

    400 Bad Request exception.
    Base class for business-rule rejections that are not conflicts.
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidInputError(HTTPException):
    """422 예외 — 누락되었거나 잘못된 요청 필드.

    422 Unprocessable Entity — missing or malformed request fields that
    slipped past schema validation.
    """

    def __init__(self, detail: str = "Invalid input") -> None:
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class PastDateError(BadRequestError):
    """과거 날짜로 근무를 배정하려 할 때 (Shift assignment dated before today)."""

    def __init__(self, detail: str = "Cannot assign a shift to a past date") -> None:
        super().__init__(detail=detail)


class SlotConflictError(DuplicateError):
    """동일 직기+날짜+근무유형에 미완료 근무가 이미 있을 때.

    The (loom, date, shift type) slot already holds a non-completed shift.
    """

    def __init__(self, detail: str = "Shift slot is already assigned") -> None:
        super().__init__(detail=detail)


class AlreadyStartedError(DuplicateError):
    """이미 가동된 근무는 삭제 불가 (Shift already ran and cannot be deleted)."""

    def __init__(self, detail: str = "Shift has already started") -> None:
        super().__init__(detail=detail)


class NoActiveShiftError(BadRequestError):
    """오늘 이 직기에 배정된 근무가 없을 때 (No shift on this loom today)."""

    def __init__(self, detail: str = "No active shift for this loom") -> None:
        super().__init__(detail=detail)


class OutsideShiftWindowError(BadRequestError):
    """근무 시간대 밖에서 직기를 가동하려 할 때.

    Start requested outside the shift's [start, end) window. The detail carries
    timing guidance such as "Shift starts at 14:00".
    """

    def __init__(self, detail: str = "Outside of shift window") -> None:
        super().__init__(detail=detail)


class LoomAlreadyRunningError(DuplicateError):
    """이미 가동 중인 직기 (Loom is already running)."""

    def __init__(self, detail: str = "Loom is already running") -> None:
        super().__init__(detail=detail)


class ReadingRegressionError(InvalidInputError):
    """누적 센서값이 직전 값보다 작을 때.

    A cumulative reading is lower than the previous reading of the same
    running session.
    """

    def __init__(self, detail: str = "Cumulative reading went backwards") -> None:
        super().__init__(detail=detail)

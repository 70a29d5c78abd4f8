from enum import Enum

from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings


class ErrorCode(str, Enum):
    """에러 코드 열거형"""

    GITHUB_UNAUTHORIZED = "GITHUB_UNAUTHORIZED"
    GITHUB_RATE_LIMITED = "GITHUB_RATE_LIMITED"
    GITHUB_API_ERROR = "GITHUB_API_ERROR"
    NO_REPOSITORIES = "NO_REPOSITORIES"
    INVALID_INPUT = "INVALID_INPUT"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class CustomException(Exception):
    def __init__(
        self,
        status_code: int,
        error_code: ErrorCode | str,
        message: str,
        detail: str | None = None,
    ):
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.detail = detail
        super().__init__(message)


class GitHubAPIError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=502,
            error_code=ErrorCode.GITHUB_API_ERROR,
            message="GitHub API 호출에 실패했습니다",
            detail=detail,
        )


class GitHubUnauthorizedError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=401,
            error_code=ErrorCode.GITHUB_UNAUTHORIZED,
            message="GitHub 토큰이 유효하지 않거나 만료되었습니다",
            detail=detail,
        )


class GitHubRateLimitError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=429,
            error_code=ErrorCode.GITHUB_RATE_LIMITED,
            message="GitHub API 요청 한도를 초과했거나 토큰 권한이 부족합니다",
            detail=detail,
        )


class NoRepositoriesError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=404,
            error_code=ErrorCode.NO_REPOSITORIES,
            message="분석할 레포지토리가 없습니다",
            detail=detail,
        )


class ValidationError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=400,
            error_code=ErrorCode.INVALID_INPUT,
            message="입력값이 올바르지 않습니다",
            detail=detail,
        )


def register_exception_handlers(app):
    @app.exception_handler(CustomException)
    async def custom_exception_handler(request: Request, exc: CustomException):
        content = {
            "error_code": exc.error_code,
            "message": exc.message,
        }
        if exc.detail and not settings.is_production:
            content["detail"] = exc.detail

        return JSONResponse(
            status_code=exc.status_code,
            content=content,
        )

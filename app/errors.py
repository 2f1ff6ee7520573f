"""Error taxonomy shared by the services and routes.

Every error is an ``HTTPException`` so services can raise them directly and
FastAPI turns them into ``{"detail": message}`` responses.
"""
from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "服务器内部错误"

    def __init__(self, detail: str | None = None, headers: dict | None = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "请求参数无效"


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "用户名或密码错误"


class AuthRequiredError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "请先登录"

    def __init__(self, detail: str | None = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "没有权限执行此操作"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "资源不存在"


class PayloadTooLargeError(AppError):
    status_code = 413
    default_detail = "文件过大"


class InternalError(AppError):
    pass

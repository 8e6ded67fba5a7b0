"""Custom exceptions for the API.

Services raise these directly; FastAPI renders them as ``{"detail": ...}``.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class BadRequestException(APIException):
    """400 Bad Request exception."""

    def __init__(self, detail: str = "Bad request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class UnauthorizedException(APIException):
    """401: missing, invalid, expired or rejected credentials."""

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenException(APIException):
    """403: authenticated but lacking a required role or permission."""

    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class QuotaExceededException(ForbiddenException):
    """403 raised when a subscription's create limit is reached."""

    def __init__(self, entity: str, limit: int):
        super().__init__(detail=f"Subscription limit reached for {entity} ({limit})")
        self.entity = entity
        self.limit = limit


class NotFoundException(APIException):
    """404: entity absent or soft-deleted."""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictException(APIException):
    """409: uniqueness violation."""

    def __init__(self, detail: str = "Resource conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)

import logging
from fastapi import status, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.core.validation import FieldError, ValidationErrorKind
from app.schemas.response import ErrorResponse

logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    error_code_map = {
        400: "BAD_REQUEST",
        401: "UNAUTHORIZED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        409: "CONFLICT",
        500: "INTERNAL_SERVER_ERROR",
        503: "STORAGE_UNAVAILABLE",
    }
    error_code = error_code_map.get(exc.status_code, f"HTTP_{exc.status_code}")

    response_data = ErrorResponse(
        error=str(exc.detail),
        code=error_code,
        details=getattr(exc, "details", None),
    ).model_dump(exclude_none=True)
    return JSONResponse(status_code=exc.status_code, content=response_data, headers=getattr(exc, "headers", None))


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        FieldError(
            field=".".join(str(part) for part in error["loc"][1:]) or str(error["loc"][0]),
            kind=ValidationErrorKind.INVALID_TYPE,
            message=error["msg"],
        ).to_dict()
        for error in exc.errors()
    ]
    logger.warning(f"Rejected malformed request to {request.url.path}: {details}")
    response_data = ErrorResponse(
        error="Validation failed", code="BAD_REQUEST", details=details
    ).model_dump(exclude_none=True)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=response_data)


async def storage_unavailable_handler(request: Request, exc: "StorageUnavailableError"):
    logger.error(f"Storage unavailable while serving {request.url.path}: {exc}")
    return await http_exception_handler(request, StorageUnavailableException())


class StorageUnavailableError(Exception):
    """Raised by the persistence layer when the store cannot be reached or rejects a write."""


class NotFoundException(HTTPException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class BadRequestException(HTTPException):
    def __init__(self, detail: str = "Bad request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ValidationFailedException(BadRequestException):
    def __init__(self, errors: list[FieldError], detail: str = "Validation failed"):
        super().__init__(detail=detail)
        self.details = [error.to_dict() for error in errors]


class UnauthorizedException(HTTPException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class ForbiddenException(HTTPException):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class StorageUnavailableException(HTTPException):
    def __init__(self, detail: str = "Storage unavailable, please retry later"):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)

import logging
from typing import Any, Dict, List, Optional, Type

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.core import exceptions
from src.core.response.schemas import (
    BaseResponse,
    ErrorDetail,
    ErrorResponse,
    PaginatedResponse,
)

logger = logging.getLogger(__name__)

STATUS_CODES: Dict[Type[exceptions.ServiceException], int] = {
    exceptions.ValidationException: status.HTTP_400_BAD_REQUEST,
    exceptions.UnauthorizedException: status.HTTP_401_UNAUTHORIZED,
    exceptions.AuthorizationException: status.HTTP_403_FORBIDDEN,
    exceptions.NotFoundException: status.HTTP_404_NOT_FOUND,
    exceptions.ConflictException: status.HTTP_409_CONFLICT,
    exceptions.PersistenceException: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def success_response(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    body = BaseResponse[Any](success=True, message=message, data=jsonable_encoder(data))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def paginated_response(
    items: List[Any],
    total: int,
    page: int,
    per_page: int,
    pages: int,
    message: Optional[str] = None,
) -> JSONResponse:
    body = PaginatedResponse[Any](
        success=True,
        message=message,
        data=jsonable_encoder(items),
        total=total,
        page=page,
        per_page=per_page,
        pages=pages,
    )
    return JSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump())


def error_response(
    error_code: str,
    message: str,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    details: Optional[List[Dict[str, Any]]] = None,
) -> JSONResponse:
    body = ErrorResponse(
        message=message,
        error_code=error_code,
        error_details=[ErrorDetail(**detail) for detail in details or []],
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request payloads as 400 with one detail per field."""
    details = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        details.append(
            {
                "field": ".".join(loc),
                "code": str(error.get("type", "invalid")).upper(),
                "message": error.get("msg", "Invalid value"),
            }
        )
    return error_response(
        error_code="VALIDATION_ERROR",
        message="Request validation failed",
        status_code=status.HTTP_400_BAD_REQUEST,
        details=details,
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return error_response(
        error_code="INTERNAL_ERROR",
        message="Internal server error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def service_error_response(exc: exceptions.ServiceException) -> JSONResponse:
    """Translate a service exception into the standard error envelope."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for exc_type in type(exc).__mro__:
        if exc_type in STATUS_CODES:
            status_code = STATUS_CODES[exc_type]
            break
    return error_response(
        error_code=exc.error_code,
        message=str(exc.detail),
        status_code=status_code,
        details=[detail.model_dump() for detail in exc.error_details],
    )


async def service_exception_handler(
    request: Request, exc: exceptions.ServiceException
) -> JSONResponse:
    """Handle service exceptions raised outside route bodies (e.g. dependencies)."""
    return service_error_response(exc)

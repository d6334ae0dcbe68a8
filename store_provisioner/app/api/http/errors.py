"""Translation of lifecycle errors into HTTP error responses.

Every error body has the shape `{"error": {"code": ..., "message": ...}}`.
"""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from store_provisioner.app.api.http.schemas.stores import ErrorDetail, ErrorResponse
from store_provisioner.app.core.errors import ErrorKind, StoreProvisionerError

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNSUPPORTED_ENGINE: 422,
    ErrorKind.DRIVER_FAILURE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    ErrorKind.UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_CODE_BY_STATUS: dict[int, str] = {
    status.HTTP_404_NOT_FOUND: ErrorKind.NOT_FOUND.value,
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


def error_response(
    status_code: int, code: str, message: str, details: list | None = None
) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, details=details))
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(exclude_none=True)),
    )


def setup_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StoreProvisionerError)
    async def lifecycle_error_handler(
        request: Request, exc: StoreProvisionerError
    ) -> JSONResponse:
        status_code = STATUS_BY_KIND[exc.kind]
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
        return error_response(status_code, exc.kind.value, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            ErrorKind.VALIDATION.value,
            "Validation failed",
            details=list(exc.errors()),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        code = _CODE_BY_STATUS.get(exc.status_code, "HTTP_ERROR")
        return error_response(exc.status_code, code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.opt(exception=exc).error(
            f"Unhandled error in {request.method} {request.url.path}"
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorKind.INTERNAL.value,
            "An unexpected error occurred",
        )

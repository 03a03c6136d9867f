# app/core/exceptions.py
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class TicketingError(Exception):
    """Base error; carries a short message for the caller plus the underlying detail."""

    status_code: int = 500
    message: str = "Internal error"

    def __init__(self, message: str | None = None, error: str | None = None):
        self.message = message or self.__class__.message
        self.error = error
        super().__init__(self.message if error is None else f"{self.message}: {error}")

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.error is not None:
            body["error"] = self.error
        return body


class ValidationError(TicketingError):
    status_code = 422
    message = "Invalid request"


class AuthDecodeError(TicketingError):
    status_code = 401
    message = "Invalid token"


class Forbidden(TicketingError):
    status_code = 403
    message = "Insufficient permissions"


class NotFoundError(TicketingError):
    status_code = 404
    message = "Ticket not found"


class UpstreamError(TicketingError):
    status_code = 502
    message = "Upstream service failure"


async def ticketing_error_handler(request: Request, exc: TicketingError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthDecodeError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail, "error": f"{request.method} {request.url.path}"},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"message": ValidationError.message, "error": jsonable_encoder(exc.errors())},
    )


__all__ = [
    "TicketingError",
    "ValidationError",
    "AuthDecodeError",
    "Forbidden",
    "NotFoundError",
    "UpstreamError",
    "ticketing_error_handler",
    "request_validation_error_handler",
    "http_error_handler",
]

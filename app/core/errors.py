"""
Error taxonomy shared by services and routers.

Services raise these; the handlers registered in ``app.main`` turn them into
``{"error": ...}`` responses. A lookup that misses because the row belongs to
another clinic raises ``NotFound``, never ``Forbidden``.
"""
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class AppError(Exception):
    status_code = 500
    default_message = "An internal server error occurred."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(AppError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class ValidationFailed(AppError):
    status_code = 400
    default_message = "Invalid data"

    def __init__(self, message: str | None = None, fields: dict[str, str] | None = None):
        super().__init__(message)
        self.fields = fields or {}


class Conflict(AppError):
    status_code = 409
    default_message = "Conflict"


class InvitationUnavailable(Conflict):
    # invitation endpoints answer 400 for accepted/expired tokens
    status_code = 400


async def app_error_handler(request: Request, exc: AppError):
    body: dict = {"error": exc.message}
    if isinstance(exc, ValidationFailed) and exc.fields:
        body["fields"] = exc.fields
    return JSONResponse(status_code=exc.status_code, content=body)


def _field_name(loc: tuple) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields: dict[str, str] = {}
    for err in exc.errors():
        fields.setdefault(_field_name(tuple(err.get("loc", ()))), err.get("msg", "Invalid value"))
    return JSONResponse(status_code=400, content={"error": "Invalid data", "fields": fields})

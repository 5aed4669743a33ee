"""
Maps domain exceptions to JSON error responses.
Body shape: {"error": <message>, "type": <kind>} (+ "missing" for validation).
Malformed request bodies rejected by FastAPI get the same shape.
"""
import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from .errors import AuthError, ConflictError, NotFoundError, ValidationError, WellnessError

log = logging.getLogger(__name__)


def _body(exc: WellnessError) -> dict:
    return {"error": str(exc), "type": exc.kind}


def _describe(errors) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "invalid request"


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(ValidationError)
    async def handle_validation(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={**_body(exc), "missing": exc.missing},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _describe(exc.errors()), "type": ValidationError.kind, "missing": []},
        )

    @app.exception_handler(AuthError)
    async def handle_auth(request: Request, exc: AuthError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=_body(exc),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=_body(exc))

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=_body(exc))

    @app.exception_handler(WellnessError)
    async def handle_generic(request: Request, exc: WellnessError) -> JSONResponse:
        log.error("unhandled %s on %s %s: %s", exc.kind, request.method, request.url.path, exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=_body(exc))

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from middlewares.timing import elapsed_ms
from services.errors import (
    ArtifactGenerationError, GradeServiceError, GradeValidationError,
    NotFoundError, PersistenceError,
)

logger = logging.getLogger(__name__)

# 도메인 예외 → HTTP 상태코드
STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (GradeValidationError, 422),
    (PersistenceError, 409),
    (ArtifactGenerationError, 500),
)


def _now_iso():
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _error_body(request: Request, code: str, message: str) -> dict:
    return {
        "success": False,
        "error": {"code": code, "message": message},
        "generated_at": _now_iso(),
        "latency_ms": elapsed_ms(request),
    }


def status_for(exc: GradeServiceError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 400


def add_error_handlers(app: FastAPI):
    @app.exception_handler(GradeServiceError)
    async def grade_service_exception_handler(request: Request, exc: GradeServiceError):
        status_code = status_for(exc)
        logger.warning(f"{request.method} {request.url.path} → {status_code} {exc.code}: {exc.message}")
        return JSONResponse(status_code=status_code, content=_error_body(request, exc.code, exc.message))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"처리되지 않은 예외: {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content=_error_body(request, "INTERNAL_ERROR", str(exc)))

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)


def elapsed_ms(request: Request) -> int:
    """요청 시작 시각(request.state.started_at) 기준 경과 시간. 미들웨어 밖이면 0"""
    started_at = getattr(request.state, "started_at", None)
    if started_at is None:
        return 0
    return int((time.perf_counter() - started_at) * 1000)


class TimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request.state.started_at = time.perf_counter()
        response = await call_next(request)
        latency_ms = elapsed_ms(request)
        response.headers["X-Latency-Ms"] = str(latency_ms)
        logger.debug(f"{request.method} {request.url.path} {response.status_code} {latency_ms}ms")
        return response

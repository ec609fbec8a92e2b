import time

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

SLOW_THRESHOLD_MS = 500


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """모든 HTTP 요청을 로깅하는 미들웨어.

    기록 항목: 메서드, 경로, 클라이언트 IP, 상태코드, 요청 크기, 처리시간(ms)
    업로드는 변환 + 외부 호출이 끼어 있어서 느릴 수 있다.
    처리시간이 500ms를 초과하면 WARNING 레벨로 기록하고,
    처리시간은 X-Response-Time 헤더로도 내려준다.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - start) * 1000
        client_ip = request.client.host if request.client else "unknown"
        size = request.headers.get("content-length", "0")
        line = (
            f"{request.method} {request.url.path} | {client_ip} | "
            f"{response.status_code} | {size}B | {elapsed_ms:.0f}ms"
        )

        if elapsed_ms > SLOW_THRESHOLD_MS:
            logger.warning(f"{line} (slow)")
        else:
            logger.info(line)

        response.headers["X-Response-Time"] = f"{elapsed_ms:.0f}ms"
        return response

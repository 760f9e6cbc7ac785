# gymtrack/middleware.py
import json
import logging
import time

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("api_monitor")

# path prefix -> area tag on every access-log line
API_AREAS = (
    ("/api/push", "push"),
    ("/api/notifications", "device"),
    ("/api/predefined-routines", "predefined"),
    ("/api/routines", "routines"),
    ("/api/auth", "auth"),
)

# registration tokens address a single device
MASKED_FIELDS = {"fcm_token"}


def api_area(path: str) -> str:
    for prefix, area in API_AREAS:
        if path.startswith(prefix):
            return area
    return "system"


def loggable_body(raw: bytes):
    """Request body for the log with device tokens masked"""
    if not raw:
        return None
    try:
        payload = json.loads(raw)
    except ValueError:
        return raw.decode("utf-8", errors="replace")

    if isinstance(payload, dict):
        for key in MASKED_FIELDS & payload.keys():
            token = str(payload[key])
            payload[key] = f"{token[:6]}…" if len(token) > 6 else "***"
    return payload


class APIAccessLoggerMiddleware(BaseHTTPMiddleware):
    """Access log: one INFO line per success, a JSON record per 4xx/5xx, crashes answered with 500"""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        path = request.url.path
        area = api_area(path)

        try:
            body = loggable_body(await request.body())
        except RuntimeError:
            body = "[unreadable]"

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(json.dumps({
                "event": "SYSTEM_CRITICAL_ERROR",
                "area": area,
                "method": request.method,
                "path": path,
                "input": body,
                "error_type": type(e).__name__,
                "error_message": str(e),
                "duration": f"{time.perf_counter() - started:.4f}s",
            }, ensure_ascii=False), exc_info=True)

            # answered here so uvicorn does not log it twice
            return JSONResponse(
                status_code=500,
                content={"status": "error", "message": "Internal server error.", "path": path},
            )

        duration = time.perf_counter() - started
        if response.status_code >= 400:
            logger.warning(json.dumps({
                "event": "HTTP_ERROR",
                "area": area,
                "status": response.status_code,
                "method": request.method,
                "path": path,
                "input": body,
                "duration": f"{duration:.4f}s",
            }, ensure_ascii=False))
        else:
            logger.info(f"✅ [{area}] {request.method} {path} | {response.status_code} | {duration:.4f}s")
        return response

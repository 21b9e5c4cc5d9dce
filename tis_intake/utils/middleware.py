import time
from threading import Lock
from typing import Callable, Dict, List, Optional
from fastapi import HTTPException
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from tis_intake.utils.logger import get_logger


logger = get_logger("middleware")

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."
BODY_TOO_LARGE_MESSAGE = "Request entity too large"


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding-window limit per client IP on paths under ``path_prefix``.

    Keys whose newest hit has left the window are swept at most once per
    window, so idle or one-off clients do not accumulate.
    """

    def __init__(self, app, limit: int = 100, window: float = 900,
                 path_prefix: str = "/api", clock: Callable[[], float] = time.time):
        super().__init__(app)
        self.limit = limit
        self.window = window
        self.path_prefix = path_prefix
        self.clock = clock
        self.requests: Dict[str, List[float]] = {}
        self.lock = Lock()
        self._last_sweep: Optional[float] = None

    def _sweep(self, cutoff: float) -> None:
        stale = [key for key, hits in self.requests.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self.requests[key]

    def allow(self, key: str) -> bool:
        now = self.clock()
        cutoff = now - self.window
        with self.lock:
            if self._last_sweep is None or now - self._last_sweep >= self.window:
                self._sweep(cutoff)
                self._last_sweep = now
            hits = [t for t in self.requests.get(key, ()) if t > cutoff]
            if len(hits) >= self.limit:
                self.requests[key] = hits
                return False
            hits.append(now)
            self.requests[key] = hits
        return True

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)
        ip = client_ip(request)
        if not self.allow(ip):
            logger.warning("Rate limit exceeded: %s", ip)
            return JSONResponse({"success": False, "message": RATE_LIMIT_MESSAGE}, status_code=429)
        return await call_next(request)


class RequestTooLarge(HTTPException):
    def __init__(self):
        super().__init__(status_code=413, detail=BODY_TOO_LARGE_MESSAGE)


def too_large_response() -> JSONResponse:
    return JSONResponse({"success": False, "message": BODY_TOO_LARGE_MESSAGE}, status_code=413)


class BodySizeLimitMiddleware:
    """
    Caps request bodies at ``max_bytes``.

    A declared Content-Length over the cap is refused up front; otherwise the
    ``http.request`` chunks are counted as the app reads them, so chunked
    uploads hit the same limit.
    """

    def __init__(self, app: ASGIApp, max_bytes: int = 10 * 1024 * 1024):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared and declared.isdigit() and int(declared) > self.max_bytes:
            logger.warning("Rejected %s byte body on %s", declared, scope.get("path"))
            await too_large_response()(scope, receive, send)
            return

        received = 0
        started = False

        async def counting_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    logger.warning("Streamed body on %s passed %d bytes", scope.get("path"), self.max_bytes)
                    raise RequestTooLarge()
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await self.app(scope, counting_receive, tracking_send)
        except RequestTooLarge:
            if started:
                raise
            await too_large_response()(scope, receive, send)

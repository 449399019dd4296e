import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.log import log_event

REQUEST_ID_HEADER = "X-Request-Id"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Garantiza que SIEMPRE:
    - exista request.state.request_id (para logs/errores)
    - vuelva X-Request-Id en el response
    """

    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get(REQUEST_ID_HEADER) or f"req_{uuid.uuid4().hex}"
        request.state.request_id = rid

        t0 = time.time()
        log_event(
            "request_start",
            request_id=rid,
            method=request.method,
            path=request.url.path,
        )

        response: Response = await call_next(request)

        log_event(
            "request_end",
            request_id=rid,
            status_code=response.status_code,
            # los redirects 303 de las acciones llevan Location
            location=response.headers.get("location"),
            ms=int((time.time() - t0) * 1000),
        )

        response.headers[REQUEST_ID_HEADER] = rid
        return response

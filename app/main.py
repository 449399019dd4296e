from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.core.errors import AppError, error_body
from app.core.log import configure_logging, logger
from app.db import init_schema
from app.middlewares.request_id import RequestIdMiddleware
from app.routers.auth import router as auth_router
from app.routers.invoices import router as invoices_router
from app.seed import seed


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)

    if settings.seed_on_startup:
        await run_in_threadpool(seed)
    else:
        await run_in_threadpool(init_schema)
    yield


app = FastAPI(title="Invoice Dashboard API", version="0.1.0", lifespan=lifespan)
app.add_middleware(RequestIdMiddleware)


def _err(code: str, message: str, request: Request, details=None):
    rid = getattr(request.state, "request_id", None)
    return error_body(
        code=code,
        message=message,
        request_id=rid or "req_unknown",
        details=details,
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content=_err(exc.code, exc.message, request, exc.details),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exc_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=_err("HTTP_ERROR", str(exc.detail), request),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=_err(
            "VALIDATION_ERROR",
            "Invalid request",
            request,
            {"errors": jsonable_encoder(exc.errors())},
        ),
    )


@app.exception_handler(Exception)
async def unhandled_handler(request: Request, exc: Exception):
    logger.exception("unhandled_exception")
    return JSONResponse(
        status_code=500,
        content=_err("INTERNAL_ERROR", "Unexpected error", request),
    )


@app.get("/")
def root():
    return {"message": "Invoice dashboard backend running. Go to /docs"}


@app.get("/health")
def health():
    return {"status": "ok"}


# Routers
app.include_router(auth_router)
app.include_router(invoices_router)

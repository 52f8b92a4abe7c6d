# bugtracker/main.py
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from bugtracker.bug.routes import router as bug_router
from bugtracker.bug.schemas import ErrorDetail, ErrorResponse
from bugtracker.core.config import get_settings
from bugtracker.core.database import engine, init_db
from bugtracker.core.errors import BugTrackerError, ValidationError
from bugtracker.core.logging import setup_logging

logger = structlog.get_logger("bugtracker")
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
    try:
        await init_db()
    except Exception:
        # the API is useless without its database; let the server exit
        logger.critical("database_init_failed", url=engine.url.render_as_string(hide_password=True))
        raise
    logger.info(
        "app_started", app=settings.APP_NAME, version=settings.APP_VERSION, environment=settings.ENVIRONMENT
    )
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESC,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

origins = settings.cors_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials="*" not in origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


if settings.ENVIRONMENT != "test":

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        return response


def error_response(status_code: int, error: str, details: list[ErrorDetail] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=error, details=details).to_content())


@app.exception_handler(ValidationError)
async def handle_validation_error(request: Request, exc: ValidationError):
    details = [ErrorDetail(**error.as_dict()) for error in exc.errors]
    return error_response(exc.status_code, exc.message, details)


@app.exception_handler(BugTrackerError)
async def handle_domain_error(request: Request, exc: BugTrackerError):
    if exc.status_code >= 500:
        logger.error(
            "request_failed",
            method=request.method,
            path=request.url.path,
            error=exc.message,
            exc_info=exc.__cause__,
        )
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    details = []
    for error in exc.errors():
        # drop the "body"/"query"/"path" prefix from pydantic locations
        location = [str(part) for part in error.get("loc", ())[1:]]
        details.append(ErrorDetail(field=".".join(location) or "body", message=error.get("msg", "Invalid value")))
    return error_response(400, "Validation failed", details)


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return error_response(404, f"Not found - {request.url.path}")
    return error_response(exc.status_code, str(exc.detail))


# Routers
app.include_router(bug_router)


@app.get("/api/health", tags=["Health"])
async def health():
    return {
        "status": "ok",
        "message": f"{settings.APP_NAME} is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.ENVIRONMENT,
    }

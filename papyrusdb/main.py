"""PapyrusDB API - FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .auth import require_server_key
from .config import get_settings
from .database import get_store
from .errors import PapyrusError
from .logging_config import configure_logging, get_logger
from .migrations import run_migrations
from .models import ErrorResponse
from .rate_limit import limiter
from .routes import categories_router, entries_router, status_router, sync_router

logger = get_logger("papyrusdb.app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    settings = get_settings()
    configure_logging("DEBUG" if settings.debug else settings.log_level)
    store = get_store(settings)
    results = run_migrations(store)
    logger.info(f"Migrations: {results}")
    logger.info(
        f"PapyrusDB is online at http://{settings.host}:{settings.port} "
        f"(server key {settings.masked_key()})"
    )
    yield
    # Shutdown
    logger.info("Shutting down PapyrusDB")


def _error(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=headers,
    )


async def papyrus_error_handler(request: Request, exc: PapyrusError) -> JSONResponse:
    return _error(exc.status_code, exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"Invalid or missing field: {field}" if field else "Malformed request."
    return _error(status.HTTP_400_BAD_REQUEST, message)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Log full error server-side, return a generic message to the client
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error.")


app = FastAPI(
    title="PapyrusDB",
    description="Self-hosted sync endpoint for Papyrus notes, tasks and categories",
    version=__version__,
    lifespan=lifespan,
    dependencies=[Depends(require_server_key)],
)

app.add_exception_handler(PapyrusError, papyrus_error_handler)
app.add_exception_handler(StarletteHTTPException, http_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# CORS middleware
settings = get_settings()
if settings.cors:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    logger.warning("CORS is disabled: the Papyrus app will not be able to reach this server")

# Include routers
app.include_router(status_router)
app.include_router(sync_router)
app.include_router(entries_router)
app.include_router(categories_router)

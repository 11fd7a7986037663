"""
TreeDiff - FastAPI Application

Serves the comparison and validation routes plus a health probe.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from config import settings
from diffcore import DiffError


logging.basicConfig(
    level=settings.log_level(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject bodies whose declared size exceeds MAX_REQUEST_SIZE."""

    async def dispatch(self, request: Request, call_next):
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > settings.MAX_REQUEST_SIZE:
            logger.warning(f"Rejected {request.url.path}: {declared} bytes over limit")
            return JSONResponse(
                status_code=413,
                content={"detail": f"Request body exceeds {settings.MAX_REQUEST_SIZE} bytes"},
            )
        return await call_next(request)


@asynccontextmanager
async def lifespan(app: FastAPI):
    defaults = settings.diff_options()
    logger.info(
        f"Starting {settings.APP_NAME} v{settings.APP_VERSION} "
        f"(mode={defaults.sequence_diff_mode}, max_depth={defaults.max_depth})"
    )
    yield
    logger.info(f"{settings.APP_NAME} stopped")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Structural diff engine for JSON-like values",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)

app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(DiffError)
async def diff_error_handler(request: Request, exc: DiffError):
    # Only option errors reach here; they are client errors
    logger.info(f"Diff request rejected: {exc}")
    return JSONResponse(status_code=400, content={"detail": str(exc)})


from api.routes import comparison

app.include_router(comparison.router, prefix="/api", tags=["Comparison"])


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }

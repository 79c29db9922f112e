"""
Reelbox: Main FastAPI Application

Multilingual video catalog backed by R2 / S3-compatible object storage.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from reelbox.core.config import get_settings
from reelbox.core.errors import ReelboxError, UpstreamUnavailable, ValidationError
from reelbox.core.logging import configure_logging
from reelbox.core.locales import SUPPORTED_LOCALES
from reelbox.services.ads.ad_config import has_ads

settings = get_settings()

# ── Logging ──────────────────────────────────────────────────────────────

configure_logging(settings.log_level)
logger = structlog.get_logger()


# ── Lifespan ─────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown hooks."""
    logger.info(
        "Starting Reelbox",
        version=settings.app_version,
        bucket=settings.r2_bucket,
        endpoint=settings.r2_endpoint_url,
        ads=has_ads(settings),
    )
    if not settings.r2_bucket:
        logger.warning("R2_BUCKET is not set; catalog and upload routes will fail")
    if not settings.admin_password:
        logger.warning("ADMIN_PASSWORD is not set; admin login is disabled")

    yield

    logger.info("Shutting down Reelbox")


# ── App ──────────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.app_name,
    description="Multilingual video catalog with per-locale metadata, likes and comments",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Prometheus metrics
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)


# ── Errors ───────────────────────────────────────────────────────────────

@app.exception_handler(ReelboxError)
async def reelbox_error_handler(request: Request, exc: ReelboxError):
    if isinstance(exc, UpstreamUnavailable):
        logger.error("Upstream failure", path=request.url.path, error=exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("query", "body", "path")]
        fields[".".join(loc) or "request"] = err.get("msg", "invalid value")
    first = next(iter(fields), "request")
    error = ValidationError(first, f"Invalid value for '{first}'", {"fields": fields})
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# ── Routes ───────────────────────────────────────────────────────────────

from reelbox.api.routes import admin, ads, interactions, videos

app.include_router(videos.router, prefix=settings.api_prefix)
app.include_router(interactions.router, prefix=settings.api_prefix)
app.include_router(admin.router, prefix=settings.api_prefix)
app.include_router(ads.router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "locales": list(SUPPORTED_LOCALES),
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("reelbox.main:app", host="0.0.0.0", port=8000)

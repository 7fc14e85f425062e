"""
Main application entry point - FastAPI app instance and configuration.
Run with: uvicorn medisage.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from medisage.ai.registry import list_models
from medisage.ai.schemas.query import SubscriptionTier
from medisage.core.config import settings
from medisage.db.base import import_models
from medisage.routers import auth, medical, users
from medisage.services.query_orchestrator import query_orchestrator

logger = logging.getLogger("medisage")

# Every mapper must be registered before the first query
import_models()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Let in-flight history writes finish before the process exits
    await query_orchestrator.wait_for_pending()


# ---------------------------------------------------------------------------
# CREATE FASTAPI APPLICATION
# ---------------------------------------------------------------------------
app = FastAPI(
    title=settings.APP_NAME,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS MIDDLEWARE
# ---------------------------------------------------------------------------
# Permissive for the web client during development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # TODO: restrict to the deployed web client origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# ERROR ENVELOPE
# ---------------------------------------------------------------------------
# Every error leaves the API as {"message": ...}. A dict detail (capability
# denied) is passed through as the body.

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict):
        body = exc.detail
    else:
        body = {"message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"message": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# ---------------------------------------------------------------------------
# REGISTER ROUTERS
# ---------------------------------------------------------------------------
# auth.router: /api/auth/register, /api/auth/login, /api/auth/status
# users.router: /api/user/save-item, /api/user/medical-history, /api/user/tier
# medical.router: /api/medical-query, /api/symptom-checker,
#                 /api/medicine-scanner, /api/voice-assistant
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(medical.router)


# ---------------------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ---------------------------------------------------------------------------
@app.get("/api/health", tags=["health"])
def health_check():
    """
    Liveness check. Does not check the database or upstream providers.

    Returns:
        {"status": "ok"}
    """
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# MODEL CATALOG
# ---------------------------------------------------------------------------
@app.get("/api/models", tags=["models"])
def models(tier: Optional[SubscriptionTier] = None):
    """Registered models with their tier and capabilities, optionally for one tier."""
    return [
        model.to_dict()
        for model in list_models()
        if tier is None or model.tier == tier
    ]

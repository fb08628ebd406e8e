# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Patwa Toli API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.config import settings
from app.dependencies import get_coordinator
from app.exceptions import (
    ToliException,
    toli_exception_handler,
    validation_exception_handler,
)
from app.routers import health, users, posts, stories, listings

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: log configuration
    - Shutdown: close the asset store's HTTP client if it was created
    """
    logger.info(f"Starting Patwa Toli API in {settings.ENVIRONMENT} mode")
    logger.info(f"Media namespace: {settings.ASSET_NAMESPACE} (store: {settings.ASSET_STORE_BACKEND})")

    yield

    logger.info("Shutting down Patwa Toli API")
    if get_coordinator.cache_info().currsize:
        await get_coordinator().asset_store.close()


# Create FastAPI application
app = FastAPI(
    title="Patwa Toli API",
    description="""
## Community Social Network API

Profiles, posts, stories, events and business listings with media.

### Media handling

- Uploads are checked against a per-class type/size policy before anything
  leaves the server.
- Records are only saved once their media is stored.
- Replaced or deleted media is removed from the media store after the record
  change is saved; failures there never fail the request.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Users", "description": "Profiles and profile pictures"},
        {"name": "Posts", "description": "Posts with an image or a video"},
        {"name": "Stories", "description": "Media that expires after a day"},
        {"name": "Events", "description": "Community events"},
        {"name": "Businesses", "description": "Business listings"},
        {"name": "Health", "description": "API health checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(ToliException)
async def handle_toli_exception(request: Request, exc: ToliException):
    """Handle custom API exceptions."""
    return await toli_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError):
    return await validation_exception_handler(request, exc)


@app.exception_handler(ValidationError)
async def handle_model_validation(request: Request, exc: ValidationError):
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(users.router, prefix="/api/v1", tags=["Users"])
app.include_router(posts.router, prefix="/api/v1/posts", tags=["Posts"])
app.include_router(stories.router, prefix="/api/v1/stories", tags=["Stories"])
app.include_router(listings.events_router, prefix="/api/v1/events", tags=["Events"])
app.include_router(listings.businesses_router, prefix="/api/v1/businesses", tags=["Businesses"])


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint - returns API info."""
    return {
        "name": "Patwa Toli API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }

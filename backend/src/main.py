# pyright: reportMissingTypeStubs=false
"""
Clinic Finance Backend API

A FastAPI application exposing the revenue-splitting calculation engine.

Features:
- Appointment calculation preview (card fee, tax, costs, bonus, split)
- Payout summaries net of shared expenses
- PostgreSQL database with SQLAlchemy ORM
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import calculations, payouts
from core.config import LOG_LEVEL
from core.constants import CORS_ORIGINS
from core.database import is_database_configured

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info("Starting Clinic Finance Backend API")
    if not is_database_configured():
        logger.warning("DATABASE_URL is not set; endpoints that need storage will return 503")

    yield

    logger.info("Shutting down Clinic Finance Backend API")


# Create FastAPI application
app = FastAPI(
    title="Clinic Finance Backend",
    description="Revenue splitting and payouts for a multi-professional clinic",
    version="1.0.0",
    docs_url="/docs",  # Swagger UI
    redoc_url="/redoc",  # ReDoc
    lifespan=lifespan,
)

# CORS middleware for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(
    calculations.router,
    prefix="/api/calculations",
    tags=["calculations"],
    responses={
        404: {"description": "Resource not found"},
        409: {"description": "Owner professional not configured"},
        500: {"description": "Internal server error"},
        503: {"description": "Database not configured"},
    },
)
app.include_router(
    payouts.router,
    prefix="/api/payouts",
    tags=["payouts"],
    responses={
        400: {"description": "Bad request"},
        409: {"description": "Owner professional not configured"},
        500: {"description": "Internal server error"},
        503: {"description": "Database not configured"},
    },
)


@app.get(
    "/",
    summary="Root endpoint",
    description="Returns basic API information",
)
async def root() -> dict[str, str]:
    """Get API information."""
    return {
        "message": "Clinic Finance Backend API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get(
    "/health",
    summary="Health check",
    description="Returns the health status of the API",
)
async def health_check() -> dict[str, str]:
    """Check if the API is healthy and responding."""
    return {"status": "healthy"}


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions globally."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "type": "internal_error"},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Handle ValueError exceptions."""
    logger.warning(f"ValueError: {exc}")
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "type": "validation_error"},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)

"""
SPBU API - Main FastAPI Application
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging import setup_logging, get_logger
from app.core.middleware import setup_middleware, setup_exception_handlers
from app.api.routes import router as api_router
from app.db.database import engine, Base
from app.db import models  # noqa: F401  registers every table on Base.metadata
from app.domain.services.health_service import check_readiness

# Setup logging before anything else
setup_logging(
    level="DEBUG" if settings.DEBUG else "INFO",
    json_format=not settings.DEBUG,
    app_name=settings.APP_NAME
)

logger = get_logger(__name__)

# Used when ALLOWED_ORIGINS is empty and DEBUG is on
_DEV_ORIGINS = [
    "http://localhost",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def _parse_allowed_origins(raw: str) -> list[str]:
    """Parse comma-separated CORS origins string into a clean list."""
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup, release the connection pool on shutdown"""
    logger.info("Starting application", extra_data={"app_name": settings.APP_NAME})
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialized")

    yield

    logger.info("Shutting down application")
    await engine.dispose()
    logger.info("Database connections disposed")


_OPENAPI_TAGS = [
    {"name": "users", "description": "Registration, login, password reset and profiles."},
    {"name": "brands", "description": "Fuel retailer brands."},
    {"name": "services", "description": "Amenities a station can offer."},
    {"name": "spbu", "description": "Fuel stations, their services and fuel prices."},
    {"name": "reviews", "description": "Station reviews and rating summaries."},
    {"name": "wishlist", "description": "Stations saved by the authenticated user."},
    {"name": "transactions", "description": "Fuel purchases: create, pay and cancel."},
    {"name": "health", "description": "Liveness and readiness probes."},
]


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="Fuel station (SPBU) directory and fuel purchase API.",
    openapi_tags=_OPENAPI_TAGS,
    lifespan=lifespan,
)

setup_middleware(app)
setup_exception_handlers(app)

allowed_origins = _parse_allowed_origins(settings.ALLOWED_ORIGINS)
if not allowed_origins and settings.DEBUG:
    allowed_origins = _DEV_ORIGINS

if allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Correlation-ID"],
    )

app.include_router(api_router)


@app.get(
    "/health",
    summary="Liveness probe",
    description="The process is up and answering. Dependencies are not checked.",
    tags=["health"],
)
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}


@app.get(
    "/health/ready",
    summary="Readiness probe",
    description="Checks the database. Returns 503 with status=degraded when it is unavailable.",
    responses={
        200: {"content": {"application/json": {"example": {"status": "healthy", "db": "ok"}}}},
        503: {"content": {"application/json": {"example": {"status": "degraded", "db": "error: db_unavailable"}}}},
    },
    tags=["health"],
)
async def readiness_check() -> JSONResponse:
    result = await check_readiness()
    status_code = 200 if result["status"] == "healthy" else 503
    return JSONResponse(content=result, status_code=status_code)

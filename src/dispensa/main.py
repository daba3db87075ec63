"""FastAPI application entry point."""

import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from dispensa.config import get_settings
from dispensa.database import Base, async_engine
from dispensa.logging_config import clear_context, configure_logging, get_logger, set_context
from dispensa.routers import (
    dashboard_router,
    inspiration_router,
    pantry_router,
    recipes_router,
    shopping_list_router,
    weekly_plan_router,
)

settings = get_settings()

# Configure logging on module load
configure_logging(settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Starting Dispensa API")

    # Create database tables if they don't exist
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialized")

    yield

    logger.info("Shutting down Dispensa API")
    await async_engine.dispose()


app = FastAPI(
    title="Dispensa API",
    description="Household pantry, recipes, weekly meal plan and shopping list",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Tag every log line of a request with its id."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
    set_context(request_id=request_id)
    try:
        response = await call_next(request)
    finally:
        clear_context()
    response.headers["X-Request-ID"] = request_id
    return response


# Include routers
app.include_router(pantry_router)
app.include_router(recipes_router)
app.include_router(weekly_plan_router)
app.include_router(shopping_list_router)
app.include_router(inspiration_router)
app.include_router(dashboard_router)


@app.get("/health")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "ok", "service": "dispensa-api"}


@app.get("/")
async def root() -> dict:
    """Root endpoint with API information."""
    return {
        "name": "Dispensa API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }

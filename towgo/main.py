"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from towgo.config import settings
from towgo.database import init_db
from towgo.routers import favorites, location_share, search, services, smithery
from towgo.services.redis_client import redis_client

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if not settings.perplexity_api_key:
        logger.warning("PERPLEXITY_API_KEY is not set. AI-enhanced search features will be limited.")
    if not settings.smithery_api_key:
        logger.info("No Smithery API key found - Smithery features are disabled")
    yield


# Create FastAPI app
app = FastAPI(
    title="TowGo API",
    description="Backend API for TowGo - find nearby tow trucks and businesses",
    version="1.0.0",
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.frontend_url,
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(search.router, prefix="/api")
app.include_router(favorites.router, prefix="/api")
app.include_router(location_share.router, prefix="/api")
app.include_router(services.router, prefix="/api")
app.include_router(smithery.router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Welcome to TowGo API",
        "version": "1.0.0",
        "docs": "/docs" if settings.environment == "development" else "disabled",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "redis": redis_client.ping()}


@app.get("/debug/config")
async def debug_config():
    """Debug endpoint to check configuration (development only)."""
    if settings.environment != "development":
        return {"error": "Not available in production"}

    def mask_key(key: str) -> str:
        """Mask API key showing only first/last 4 chars."""
        if not key:
            return "NOT_SET"
        if len(key) < 12:
            return f"{key[:2]}..."
        return f"{key[:4]}...{key[-4:]}"

    return {
        "status": "ok",
        "perplexity_api_key": mask_key(settings.perplexity_api_key),
        "smithery_api_key": mask_key(settings.smithery_api_key),
        "google_maps_api_key": mask_key(settings.google_maps_api_key),
        "stripe_configured": bool(settings.stripe_secret_key),
        "auth0_domain": settings.auth0_domain or "NOT_SET",
        "websearch_providers": settings.provider_names,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "towgo.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )

"""
FastAPI application main module.
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from . import config
from .config import Config
from .dependencies.services import create_http_client
from .routers import chat_router, onchain_router, research_router, social_router
from .utils.errors import TokenIntelError
from .utils.logging_config import setup_logging

# Configure logging
logger = setup_logging('tokenintel', config.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI app.
    Opens the shared HTTP client on startup and closes it on shutdown.
    """
    logger.info("Starting up application...")
    app.state.http_client = create_http_client()
    try:
        yield
    finally:
        await app.state.http_client.aclose()
        logger.info("Application shutdown complete")


# Create FastAPI app
app = FastAPI(
    title=Config.API_TITLE,
    description=Config.API_DESCRIPTION,
    version=Config.API_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    max_age=600,  # Cache preflight requests for 10 minutes
)

# Add Prometheus metrics
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)


@app.exception_handler(TokenIntelError)
async def token_intel_error_handler(request: Request, exc: TokenIntelError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc), "code": exc.code},
    )


# Create API router with prefix
api_router = APIRouter(prefix="/api")

api_router.include_router(onchain_router, prefix="/onchain")
api_router.include_router(social_router, prefix="/social")
api_router.include_router(research_router, prefix="/research")
api_router.include_router(chat_router, prefix="/chats")

app.include_router(api_router)


@app.get("/")
async def root():
    """Service banner used for connectivity checks."""
    return {
        "name": Config.API_TITLE,
        "version": Config.API_VERSION,
        "status": "success",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

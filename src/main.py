"""
Footfall Monitoring API - FastAPI Application
Main entry point for the API server
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
import logging
import uvicorn
import structlog
from contextlib import asynccontextmanager

from src.api.routes import analytics, devices, health, realtime, sensor_data
from src.core.config import settings
from src.core.exceptions import FootfallError, StoreUnavailable, ValidationError
from src.database.connection import store_monitor
from src.services.broadcast import BroadcastChannel

logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Footfall Monitoring API")
    # Startup
    await store_monitor.start()
    yield
    # Shutdown
    await store_monitor.stop()
    logger.info("Shutting down Footfall Monitoring API")

async def footfall_error_handler(request: Request, exc: FootfallError):
    """Map the error taxonomy onto HTTP status codes"""
    if isinstance(exc, StoreUnavailable):
        store_monitor.mark_unavailable()
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Invalid request bodies and parameters are client errors"""
    error = ValidationError.from_pydantic(exc)
    logger.info("Rejected invalid request", path=request.url.path, reason=error.message)
    return JSONResponse(status_code=error.status_code, content={"error": error.message})

async def store_error_handler(request: Request, exc: OperationalError):
    """Store went away mid-request"""
    logger.error("Store operation failed", path=request.url.path, error=str(exc))
    return await footfall_error_handler(request, StoreUnavailable())

async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error("Unhandled exception", exc_info=exc, path=request.url.path)
    content = {"error": "Internal server error"}
    if settings.debug:
        content["message"] = str(exc)
    return JSONResponse(status_code=500, content=content)

def create_app() -> FastAPI:
    app = FastAPI(
        title="Footfall Monitoring API",
        description="Footfall sensor ingest, analytics and device liveness",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # Real-time fan-out owned by this application instance
    app.state.broadcast = BroadcastChannel(queue_size=settings.broadcast_queue_size)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(FootfallError, footfall_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(OperationalError, store_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    # Include routers
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(sensor_data.router, prefix="/api", tags=["sensor-data"])
    app.include_router(analytics.router, prefix="/api", tags=["analytics"])
    app.include_router(devices.router, prefix="/api", tags=["devices"])
    app.include_router(realtime.router, tags=["realtime"])

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": "Footfall Monitoring API",
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/api/health"
        }

    return app

app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )

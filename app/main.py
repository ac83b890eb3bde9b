from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
import time
import logging
import os

from .api.v1.analytics import router as analytics_router
from .api.v1.auth import router as auth_router
from .api.v1.prescriptions import router as prescriptions_router
from .api.v1.views import router as views_router
from .core.config import settings
from .core.database import SessionLocal, get_redis, init_db
from .core.exceptions import PharmacyServiceError, ValidationError
from .services.analytics import Analytics
from .services.prescription_store import PrescriptionStore
from .services.storage import RedisStorage, SQLStorage

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Prescription dispensing and role-based view access for the hospital front-end",
    openapi_url="/api/v1/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Middleware setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Only add TrustedHostMiddleware in production, not in testing
if not os.getenv("TESTING"):
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=["localhost", "127.0.0.1", "*.localhost", "testserver"]
    )

# Custom middleware for request logging and timing
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    # Log request
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Time: {process_time:.4f}s"
    )

    return response

# Exception handlers
@app.exception_handler(PharmacyServiceError)
async def pharmacy_error_handler(request: Request, exc: PharmacyServiceError):
    logger.warning(f"{exc.error} on {request.url.path}: {exc.message}")
    content = {
        "error": exc.error,
        "message": exc.message,
    }
    if isinstance(exc, ValidationError):
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)

@app.exception_handler(404)
async def not_found_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=404,
        content={
            "error": "Not Found",
            "message": "The requested resource was not found",
            "path": str(request.url.path)
        }
    )

@app.exception_handler(500)
async def internal_error_handler(request: Request, exc: Exception):
    logger.error(f"Internal server error: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "message": "An unexpected error occurred"
        }
    )

# Include routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(views_router, prefix="/api/v1")
app.include_router(prescriptions_router, prefix="/api/v1")
app.include_router(analytics_router, prefix="/api/v1")

def create_storage():
    """Build the configured durable slot for prescriptions."""
    if settings.STORAGE_BACKEND == "redis":
        return RedisStorage(get_redis(), settings.PRESCRIPTIONS_KEY)
    if settings.STORAGE_BACKEND == "sql":
        init_db()
        return SQLStorage(SessionLocal, settings.PRESCRIPTIONS_KEY)
    raise ValueError(f"Unknown storage backend: {settings.STORAGE_BACKEND}")

# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    logger.info("Starting Hospital Pharmacy Service...")
    logger.info(f"Using {settings.STORAGE_BACKEND} prescription storage")

    try:
        app.state.prescription_store = PrescriptionStore(create_storage())
        logger.info("Prescription store loaded successfully")
    except Exception as e:
        logger.error(f"Failed to load prescription store: {str(e)}")
        raise

    app.state.analytics = Analytics(max_events=settings.ANALYTICS_MAX_EVENTS)
    logger.info("Application startup complete")

@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on application shutdown."""
    logger.info("Shutting down Hospital Pharmacy Service...")

# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.VERSION
    }

# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Welcome to the Hospital Pharmacy Service API",
        "version": settings.VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/health"
    }

# API Info endpoint
@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.VERSION,
        "endpoints": {
            "authentication": "/api/v1/auth",
            "views": "/api/v1/views",
            "prescriptions": "/api/v1/prescriptions",
            "analytics": "/api/v1/analytics/events",
            "docs": "/docs",
            "openapi": "/api/v1/openapi.json"
        }
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info"
    )

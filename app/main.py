"""
Main FastAPI Application for the Thailand Digital Arrival Card Service
"""

from fastapi import FastAPI, Request, status, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import time
import logging

from app.core.config import get_settings
from app.core.database import create_tables, test_database_connection
from app.api.v1.api import api_router, files_router

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events
    Handles startup and shutdown tasks
    """
    # Startup
    logger.info("Starting Thailand Digital Arrival Card Service...")
    try:
        create_tables()
        logger.info("✅ Arrival card tables ready")
    except Exception as e:
        logger.error(f"❌ Failed to create tables: {e}")
        logger.info("⚠️ Continuing startup - submissions will fail until the database is reachable")

    yield

    # Shutdown
    logger.info("Shutting down Thailand Digital Arrival Card Service...")


# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Thailand Digital Arrival Card issuance API",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add request processing time to response headers"""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


@app.exception_handler(Exception)
async def handle_unexpected_errors(request: Request, exc: Exception):
    """Last-resort handler: anything escaping an endpoint becomes a JSON 500"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": str(exc)}
    )


# Health check endpoint
@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint with database connection test
    """
    db_connected, db_message = test_database_connection()

    health_status = {
        "status": "healthy" if db_connected else "unhealthy",
        "version": settings.VERSION,
        "system": settings.PROJECT_NAME,
        "timestamp": time.time(),
        "database": {
            "connected": db_connected,
            "message": db_message
        }
    }

    # Return 503 if database is not connected
    if not db_connected:
        raise HTTPException(status_code=503, detail=health_status)

    return health_status


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with basic system information"""
    return {
        "message": "Thailand Digital Arrival Card Service API",
        "version": settings.VERSION,
        "docs_url": f"{settings.API_PREFIX}/docs",
        "api_base": settings.API_PREFIX
    }


# Include API routers
app.include_router(api_router, prefix=settings.API_PREFIX)
app.include_router(files_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=5001, reload=settings.DEBUG)

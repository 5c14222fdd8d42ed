"""
FastAPI application entry point
"""
from contextlib import asynccontextmanager
import logging
import time
import uuid

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import uvicorn

from app.core.config import settings
from app.core.dependencies import get_log_store
from app.core.logging_config import setup_logging
from app.core.health import get_health_status
from app.core.rate_limit import limiter
from app.core.redis import create_redis_client
from app.services.log_store import LogStore

# Setup logging
setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the single Redis-backed LogStore for the life of the process"""
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    # Invalid REDIS_URL fails startup here, before anything is served
    log_store = LogStore(
        create_redis_client(settings.REDIS_URL),
        ttl=settings.MESSAGE_TTL_SECONDS,
    )
    app.state.log_store = log_store
    try:
        if await log_store.ping():
            logger.info("✅ Redis connected")
        else:
            logger.warning("⚠️  Redis is not reachable yet, requests will fail until it is")
        yield
    finally:
        logger.info(f"Shutting down {settings.APP_NAME}...")
        await log_store.close()
        app.state.log_store = None


app = FastAPI(
    title=settings.APP_NAME,
    description="Per-session message log backed by Redis streams",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": f"{settings.APP_NAME} API",
        "version": "0.1.0",
        "status": "running"
    }


@app.get("/health")
async def health(log_store: LogStore = Depends(get_log_store)):
    """
    Health check endpoint.
    Returns status of all components.
    """
    return await get_health_status(log_store)


@app.get("/health/ready")
@app.get("/readyz")
async def readiness(log_store: LogStore = Depends(get_log_store)):
    """
    Readiness probe.
    Returns 200 if Redis answers, 503 otherwise.
    """
    health_status = await get_health_status(log_store)

    if health_status["status"] == "healthy":
        return JSONResponse(
            content=health_status,
            status_code=status.HTTP_200_OK
        )
    else:
        return JSONResponse(
            content=health_status,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )


@app.get("/health/live")
@app.get("/livez")
async def liveness():
    """
    Liveness probe.
    Returns 200 if application is alive.
    """
    return {"status": "alive"}


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests and tag them with a request id"""
    start_time = time.time()
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex

    # Log request
    logger.info(
        f"[{request_id}] {request.method} {request.url.path} - "
        f"{request.client.host if request.client else 'unknown'}"
    )

    try:
        response = await call_next(request)
        process_time = time.time() - start_time

        # Log response
        logger.info(
            f"[{request_id}] {request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.3f}s"
        )

        response.headers["X-Request-ID"] = request_id
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(
            f"[{request_id}] {request.method} {request.url.path} - "
            f"Error: {str(e)} - "
            f"Time: {process_time:.3f}s",
            exc_info=True
        )
        raise


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    logger.error(
        f"Unhandled exception: {exc}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
        }
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "message": str(exc) if settings.DEBUG else "An error occurred"
        }
    )


# Include routers
from app.api.v1 import messages

app.include_router(messages.router, tags=["messages"])


def run():
    """Serve the app with uvicorn; SIGINT/SIGTERM trigger a graceful shutdown"""
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        timeout_graceful_shutdown=settings.SHUTDOWN_TIMEOUT,
        log_config=None,
    )


if __name__ == "__main__":
    run()

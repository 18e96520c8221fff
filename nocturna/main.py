"""
Nocturna API: members, vigils and minutes for a nocturnal adoration
organization.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from nocturna.config import settings
from nocturna.db.pool import db_pool
from nocturna.db.schema import ensure_schema
from nocturna.errors import register_exception_handlers
from nocturna.infrastructure.observability.logging import get_logger, log_request, setup_logging
from nocturna.middleware.request_context import RequestContextMiddleware
from nocturna.middleware.security_headers import SecurityHeadersMiddleware
from nocturna.routes import auth, health, members, minutes, sections, vigils

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the pool and apply the collection schema; close the pool on shutdown."""
    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    await db_pool.initialize()
    try:
        await ensure_schema()
    except Exception as e:
        logger.error("Failed to apply schema", error=str(e))
        await db_pool.close()
        raise

    logger.info("All services initialized successfully")

    yield

    logger.info("Application shutting down")
    try:
        await db_pool.close()
    except Exception as e:
        logger.error("Error closing database pool", error=str(e))


app = FastAPI(
    title="Nocturna",
    description="Membership, vigil and minute management",
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

app.add_middleware(SecurityHeadersMiddleware, enforce_https=settings.is_production())
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "X-Request-ID"],
)

# Include routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(sections.router)
app.include_router(members.router)
app.include_router(vigils.router)
app.include_router(minutes.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
        user_id=getattr(request.state, "user_id", None),
    )
    return response


# Outermost, so the request id is bound before anything logs
app.add_middleware(RequestContextMiddleware)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)

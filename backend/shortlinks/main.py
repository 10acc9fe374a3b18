import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.middleware import SlowAPIMiddleware
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from .database import engine, Base
from .api import analytics, auth, links, redirect
from .config import settings
from .core.exceptions import ShortLinkError, StorageUnavailable
from .core.limiter import limiter
from .core.log import configure_logging
from . import models  # noqa: F401

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(
    title="Short Links",
    description="URL shortening service with click analytics",
    version="1.0.0"
)

# Setup rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(ShortLinkError)
async def short_link_error_handler(request: Request, exc: ShortLinkError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Storage error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=StorageUnavailable.status_code,
        content={"detail": StorageUnavailable.detail},
    )


# Include routers
app.include_router(auth.router, prefix="/api", tags=["auth"])
app.include_router(links.router, prefix="/api", tags=["urls"])
app.include_router(analytics.router, prefix="/api", tags=["analytics"])


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "Short Links", "environment": settings.ENVIRONMENT}


# Redirect endpoint (must be last to not conflict with other routes)
app.include_router(redirect.router, tags=["redirect"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)

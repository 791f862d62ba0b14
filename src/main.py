import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

import src.shared.models  # noqa: F401  registers every table
from src.core import exceptions
from src.core.config import settings
from src.core.database import create_tables, engine
from src.core.logger import configure_logging
from src.core.response.handlers import (
    global_exception_handler,
    service_exception_handler,
    validation_exception_handler,
)

# Import routers from apps
from src.apps.blog import post_router

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Create database tables
    await create_tables()
    logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))
    yield
    # Shutdown: release pooled connections
    await engine.dispose()
    logger.info("Shutting down")


# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description=settings.PROJECT_INFO,
    version=settings.PROJECT_VERSION,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Exception handlers
app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore
app.add_exception_handler(exceptions.ServiceException, service_exception_handler)  # type: ignore
app.add_exception_handler(Exception, global_exception_handler)


# Health check endpoint
@app.get("/", tags=["Health"])
async def root():
    """Root endpoint with health check."""
    return {"message": "Server is running", "status": "healthy", "version": settings.PROJECT_VERSION}


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "message": "Service is running normally"}


# Include app routers
app.include_router(post_router)


if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,  # Enable auto-reload in development
        log_level=settings.LOG_LEVEL.lower(),
    )

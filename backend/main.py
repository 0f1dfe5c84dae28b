"""
Math Submission Grader - Backend Application

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from datetime import datetime

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from math_grader import __version__
from math_grader.api import api_router
from math_grader.core.config import get_config, get_log_path
from math_grader.core.logging import get_logger, setup_logging


# Record startup time globally
_startup_time = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Opens the shared HTTP client for AI provider calls on startup and closes
    it on shutdown.
    """
    global _startup_time
    _startup_time = datetime.utcnow().isoformat()
    logger = setup_logging()
    config = get_config()
    logger.info("Starting Math Submission Grader...")
    logger.debug("Log level: %s, log file: %s", config.logging.level, get_log_path())
    logger.info(
        "AI provider: base_url=%s, model=%s, kind=%s, configured=%s",
        config.ai.base_url,
        config.ai.model,
        config.ai.model_kind.value,
        config.ai.is_configured,
    )

    app.state.http_client = httpx.AsyncClient(timeout=config.ai.timeout)
    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")
    await app.state.http_client.aclose()


app = FastAPI(
    title="Math Submission Grader",
    description="AI grading of handwritten math submissions",
    version=__version__,
    lifespan=lifespan,
)


# Request logging middleware (log each request and response)
@app.middleware("http")
async def log_requests(request, call_next):
    logger = get_logger()
    method = request.method
    path = request.url.path
    logger.debug("Request started: %s %s", method, path)
    response = await call_next(request)
    logger.debug("Request completed: %s %s -> %s", method, path, response.status_code)
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().server.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {
        "name": "Math Submission Grader",
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint with startup time."""
    return {
        "status": "healthy",
        "startup_time": _startup_time,
        "timestamp": datetime.utcnow().isoformat(),
    }


if __name__ == "__main__":
    import uvicorn

    config = get_config()
    uvicorn.run(
        "main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.debug,
    )

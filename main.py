"""
FastAPI Application Entry Point

Integrates:
  - Metis host routes (selection lists, generation and chat batches)
  - Health checks
  - Middleware for logging & error handling

Run: uvicorn main:app --reload --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.routes import router as metis_router
from config import Config

# Setup logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: startup and shutdown handlers.
    """
    # Startup
    logger.info("=" * 60)
    logger.info("Metis gateway client starting up...")
    logger.info(f"Metis API: {Config.METIS_BASE_URL}")
    logger.info(f"Environment: {Config.ENVIRONMENT}")
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info("Metis gateway client shutting down...")


# Create FastAPI app
app = FastAPI(
    title="Metis Gateway Client",
    description="Generation tasks and chat sessions against the Metis AI gateway",
    version="1.0.0",
    lifespan=lifespan,
)


# Middleware for logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    logger.debug(f"{request.method} {request.url.path}")
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"Request error: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


# Include routers
app.include_router(metis_router)


# Health check endpoints
@app.get("/health/live")
async def health_live():
    """Live health check (Kubernetes liveness probe)."""
    return {"status": "alive"}


@app.get("/health/ready")
async def health_ready():
    """Readiness health check: an API key must be configured."""
    if Config.validate():
        return {"status": "ready"}
    return {"status": "not_ready", "reason": "METIS_API_KEY not configured"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Metis Gateway Client",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "providers": "GET /metis/providers",
            "operations": "GET /metis/operations",
            "argument_names": "GET /metis/arguments/{group}",
            "enum_values": "GET /metis/arguments/enum-values",
            "generations": "POST /metis/generations",
            "chat_messages": "POST /metis/chat/messages",
            "verify_credentials": "GET /metis/credentials/verify",
            "health_live": "GET /health/live",
            "health_ready": "GET /health/ready",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=Config.PORT,
        reload=Config.ENVIRONMENT == "development",
    )

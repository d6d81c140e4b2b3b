"""FastAPI application entry point for the moderation service."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from . import __version__
from .config import settings
from .dependencies import close_clients
from .errors import InputError, JobFailedError, ModerationError
from .routes import api_router

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger("ams_moderation")

# Create FastAPI app
app = FastAPI(
    title="AMS Moderation API",
    description="Adult-content moderation of uploaded media via Azure Media Services video analysis",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router)


@app.exception_handler(InputError)
async def input_error_handler(request: Request, exc: InputError):
    logger.info(f"Rejected {request.url.path}: {exc}")
    return PlainTextResponse(str(exc), status_code=status.HTTP_400_BAD_REQUEST)


@app.exception_handler(JobFailedError)
async def job_failed_handler(request: Request, exc: JobFailedError):
    logger.warning(f"{request.url.path}: {exc}")
    return PlainTextResponse(str(exc), status_code=status.HTTP_502_BAD_GATEWAY)


@app.exception_handler(ModerationError)
async def moderation_error_handler(request: Request, exc: ModerationError):
    logger.error(f"{request.url.path} failed: {exc}", exc_info=exc)
    return PlainTextResponse("Internal Server Error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    logger.info(f"Starting AMS Moderation API v{__version__}")
    logger.info(f"Backend: {settings.backend}, transform: {settings.transform_name}")
    logger.info(f"Output directory: {settings.output_dir}")

    # Ensure output directory exists
    settings.output_dir.mkdir(parents=True, exist_ok=True)

    # Log function key status
    valid_keys = settings.get_valid_function_keys()
    if valid_keys:
        logger.info(f"Loaded {len(valid_keys)} valid function keys")
    else:
        logger.warning("No function keys configured - running in development mode")

    if settings.max_wait_seconds is None:
        logger.info("Job polling has no time limit")


@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown."""
    logger.info("Shutting down AMS Moderation API")
    await close_clients()


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "AMS Moderation API",
        "version": __version__,
        "status": "operational",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "version": __version__,
        "backend": settings.backend,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ams_moderation.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower(),
    )

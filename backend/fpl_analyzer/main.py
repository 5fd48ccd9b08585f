"""Main FastAPI application entry point."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fpl_analyzer.api.routes import router
from fpl_analyzer.config import get_settings
from fpl_analyzer.dependencies import get_fpl_client
from fpl_analyzer.services.fpl_client import UpstreamUnavailable

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="FPL Manager Analyzer",
    description="FPL API proxy and manager season analysis",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware - "*" by default; credentials cannot be combined with a wildcard
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials="*" not in settings.cors_origins_list,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# Include API routes
app.include_router(router)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors with the same {"error": ...} body as the routes."""
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render parameter validation failures as {"error", "details"}."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request parameters", "details": details},
    )


@app.exception_handler(UpstreamUnavailable)
async def upstream_exception_handler(request: Request, exc: UpstreamUnavailable) -> JSONResponse:
    """Catch-all for upstream failures a route did not handle itself."""
    logger.error(f"Unhandled upstream failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Upstream request failed", "details": str(exc)},
    )


@app.get("/api/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}


@app.on_event("startup")
async def startup_event() -> None:
    """Log startup information."""
    logger.info("Starting FPL Manager Analyzer")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"FPL API base: {settings.fpl_api_base_url}")
    logger.info(f"League for comparison: {settings.league_id}")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    """Cleanup on shutdown."""
    logger.info("Shutting down FPL Manager Analyzer")
    await get_fpl_client().close()

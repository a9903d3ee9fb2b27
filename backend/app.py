"""
Mollier Backend Application

FastAPI application serving the psychrometric diagram of Home Assistant
temperature/humidity sensors.
"""

import os
import sys
from contextlib import asynccontextmanager

import log_config  # noqa: F401
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

# Add core to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Import API router
import api
from api import router as api_router

from core.mollier.diagram_service import DiagramService


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan manager for startup/shutdown."""
    # Startup
    logger.info("Mollier starting")

    # Log registered routes
    routes = [
        f"{getattr(route, 'path', '?')} - {getattr(route, 'methods', ['MOUNT'])}"
        for route in app.routes
    ]
    logger.info(f"Registered routes: {routes}")

    service = None
    if api.ha_client:
        service = DiagramService(api.ha_client, api.SETTINGS)
        await service.start()
        api.diagram_service = service
    else:
        logger.warning("⚠️ No HA token, diagram will show overlays only")

    yield

    # Shutdown
    logger.info("Mollier shutting down")
    if service:
        await service.stop()
        api.diagram_service = None


# Create FastAPI application
app = FastAPI(
    title="Mollier API",
    description="Psychrometric (Mollier) diagram of Home Assistant temperature and humidity sensors",
    version="0.1.0",
    lifespan=lifespan,
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Handle all unhandled exceptions gracefully."""
    import traceback

    tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    logger.error(f"Unhandled exception: {exc}")
    logger.error(f"Request path: {request.url.path}")
    logger.error(f"Stack trace:\n{tb_str}")

    return JSONResponse(
        status_code=500,
        content={
            "detail": str(exc),
            "type": type(exc).__name__,
            "message": "Internal server error",
        },
    )


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router)

# Mount static files
static_dir = os.path.join(os.path.dirname(__file__), "static")
if os.path.exists(static_dir):
    app.mount("/static", StaticFiles(directory=static_dir), name="static")
    logger.info(f"Mounted static files from {static_dir}")


@app.get("/")
async def root(request: Request):
    """Root endpoint - serve UI with proper base path."""
    # Get ingress path from Home Assistant header
    ingress_path = request.headers.get("X-Ingress-Path", "")
    logger.info(f"Serving root with X-Ingress-Path: '{ingress_path}'")

    index_path = os.path.join(static_dir, "index.html")
    with open(index_path) as f:
        html_content = f.read()

    # Inject base tag if ingress path exists
    if ingress_path:
        base_tag = f'<base href="{ingress_path}/">'
        html_content = html_content.replace('<head>', f'<head>\n    {base_tag}')
        logger.info(f"Injected base tag: {base_tag}")

    return HTMLResponse(content=html_content)


# For development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8080)

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.config import get_settings
from app.routers import calls, health, users
from app.schemas.health import ErrorResponse
from app.services.port_finder import find_available_port
from app.services.webex_client import WebexAPIError, close_webex_client, get_webex_client

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Webex Call History gateway...")
    logger.info(f"Webex API: {settings.webex_base_url}, token: {settings.masked_token}")

    client = get_webex_client()
    if not settings.has_token:
        logger.warning("WEBEX_TOKEN is not set - upstream calls will fail until it is configured")
    elif settings.verify_on_startup:
        try:
            me = await client.get_me()
            logger.info(f"Connected to Webex API as {me.get('displayName', 'unknown')}")
        except WebexAPIError as e:
            logger.warning(f"Failed to connect to Webex API - check configuration ({e.message})")

    yield

    # Shutdown
    logger.info("Shutting down Webex Call History gateway...")
    await close_webex_client()


app = FastAPI(
    title="Webex Call History",
    description="Gateway between the call history viewer and the Webex API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WebexAPIError)
async def webex_error_handler(request: Request, exc: WebexAPIError):
    """Relay upstream failures as {error, details} with the upstream status."""
    logger.error(f"{request.method} {request.url.path} failed: {exc.status_code} {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message, details=exc.details).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error="Invalid request parameters",
            details=[
                {"field": ".".join(str(part) for part in err["loc"][1:]), "message": err["msg"]}
                for err in exc.errors()
            ],
        ).model_dump(),
    )


# Include routers
app.include_router(calls.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(health.router, prefix="/api")

# Static viewer assets, when present
if Path(settings.static_dir).is_dir():
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")


def run() -> int:
    """Pick a free port and serve the gateway with uvicorn."""
    import uvicorn

    port = find_available_port(settings.port, host=settings.host)
    logger.info(f"Server running on http://localhost:{port}")
    uvicorn.run(app, host=settings.host, port=port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(run())

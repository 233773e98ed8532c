from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import logging

from app.schemas.health import ApiInfo, HealthResponse, UnhealthyResponse
from app.services.webex_client import (
    WebexAPIError,
    WebexAuthError,
    WebexClient,
    WebexConnectionError,
    get_webex_client,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])

MISSING_TOKEN_RESOLUTION = (
    "Set WEBEX_TOKEN in the environment or in the .env file, then restart the server."
)
AUTH_FAILED_RESOLUTION = (
    "Your Webex token is invalid or expired. Personal access tokens last 12 hours; "
    "generate a new one at https://developer.webex.com and update WEBEX_TOKEN."
)
CONNECTION_RESOLUTION = (
    "Check network access to the Webex API and that WEBEX_BASE_URL is correct, then try again."
)


def _unhealthy(status_code: int, error: str, details, resolution: str) -> JSONResponse:
    body = UnhealthyResponse(error=error, details=details, resolution=resolution)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.get("", response_model=HealthResponse)
async def health_check(client: WebexClient = Depends(get_webex_client)):
    """Verify the configured token against the Webex identity endpoint."""
    if not client.settings.has_token:
        logger.error("Health check failed: WEBEX_TOKEN is not configured")
        return _unhealthy(
            500,
            "WEBEX_TOKEN is not configured",
            "The server has no Webex access token to authenticate with.",
            MISSING_TOKEN_RESOLUTION,
        )

    try:
        me = await client.get_me()
    except WebexAuthError as e:
        logger.error(f"Health check failed: authentication rejected ({e.status_code})")
        return _unhealthy(e.status_code, "Authentication with the Webex API failed", e.message, AUTH_FAILED_RESOLUTION)
    except WebexConnectionError as e:
        logger.error(f"Health check failed: {e.message}")
        return _unhealthy(503, "Unable to connect to the Webex API", e.message, CONNECTION_RESOLUTION)
    except WebexAPIError as e:
        logger.error(f"Health check failed: {e.status_code} {e.message}")
        return _unhealthy(e.status_code, "Unable to connect to the Webex API", e.message, CONNECTION_RESOLUTION)

    emails = me.get("emails") or []
    user = me.get("displayName") or (emails[0] if emails else "unknown")
    return HealthResponse(
        api=ApiInfo(
            version=client.settings.webex_api_version,
            webexConnection="connected",
            user=user,
        )
    )

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS = 429


class WebexAPIError(Exception):
    """An upstream call failed; carries the status and message to relay."""

    def __init__(self, status_code: int, message: str, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details


class WebexAuthError(WebexAPIError):
    """The upstream API rejected the configured token (401/403)."""


class WebexConnectionError(WebexAPIError):
    """The upstream API could not be reached at all."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(502, message, details)


class MissingCredentialError(WebexAPIError):
    def __init__(self):
        super().__init__(
            500,
            "WEBEX_TOKEN is not configured",
            "The Webex access token is missing from the server configuration.",
        )


def _extract_message(body: Any, default: str) -> str:
    """Pull a human-readable message out of a Webex error body."""
    if isinstance(body, dict):
        if body.get("message"):
            return str(body["message"])
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            first = errors[0]
            if isinstance(first, dict) and first.get("description"):
                return str(first["description"])
    return default


class WebexClient:
    """Client for the Webex REST API with bounded retry on transient failures."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings or get_settings()
        self.base_url = self.settings.webex_base_url.rstrip("/")
        self._transport = transport
        self._sleep = sleep
        self._client: Optional[httpx.AsyncClient] = None

    async def get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.settings.request_timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.webex_token}",
            "Content-Type": "application/json",
        }

    def _retry_delay(self, status_code: int) -> Optional[float]:
        """Delay before retrying a response with this status, or None if it is final."""
        if status_code == RATE_LIMIT_STATUS:
            return self.settings.rate_limit_retry_delay
        if status_code >= 500:
            return self.settings.server_error_retry_delay
        return None

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        error_message: str = "Webex API request failed",
    ) -> Dict[str, Any]:
        """Make an authenticated request, retrying 429 and 5xx responses.

        Raises WebexAPIError (or a subclass) once the request fails for good.
        """
        if not self.settings.has_token:
            raise MissingCredentialError()

        client = await self.get_client()
        max_attempts = self.settings.max_retries + 1
        attempt = 0
        total_delay = 0.0

        while True:
            attempt += 1
            logger.info(f"Webex {method} {endpoint} (attempt {attempt}/{max_attempts}) params={params}")
            try:
                response = await client.request(method, endpoint, params=params, headers=self._headers())
            except httpx.HTTPError as e:
                logger.error(f"HTTP error calling Webex {endpoint}: {e}")
                raise WebexConnectionError(
                    f"Unable to reach the Webex API: {e}",
                    details=type(e).__name__,
                ) from e

            if response.is_success:
                logger.info(f"Webex {endpoint} responded {response.status_code}")
                try:
                    return response.json()
                except ValueError:
                    logger.error(f"Webex {endpoint} returned a non-JSON body")
                    raise WebexAPIError(
                        502,
                        f"{error_message}: upstream returned a non-JSON body",
                        response.text[:200],
                    )

            try:
                body = response.json()
            except ValueError:
                body = response.text or None

            message = _extract_message(body, error_message)
            delay = self._retry_delay(response.status_code)

            if delay is not None and attempt < max_attempts:
                total_delay += delay
                logger.warning(
                    f"Webex {endpoint} returned {response.status_code}, retrying in {delay}s "
                    f"(attempt {attempt}/{max_attempts}, waited {total_delay}s so far)"
                )
                await self._sleep(delay)
                continue

            logger.error(f"Webex {endpoint} failed with {response.status_code}: {message}")
            if response.status_code in (401, 403):
                raise WebexAuthError(response.status_code, message, body)
            raise WebexAPIError(response.status_code, message, body)

    # ==================== Call History ====================

    async def get_call_history(
        self,
        start_time: str,
        end_time: str,
        person_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Fetch call history records between two ISO-8601 timestamps."""
        params: Dict[str, Any] = {
            "startTime": start_time,
            "endTime": end_time,
            "max": self.settings.clamp_limit(limit),
        }
        if person_id:
            params["personId"] = person_id

        return await self._request(
            "GET",
            "/telephony/calls/history",
            params,
            error_message="Failed to fetch call history",
        )

    # ==================== People ====================

    async def get_people(self, limit: Optional[int] = None) -> Dict[str, Any]:
        """Fetch the organisation's people list."""
        result = await self._request(
            "GET",
            "/people",
            {"max": self.settings.clamp_limit(limit)},
            error_message="Failed to fetch users",
        )
        logger.info(f"Fetched {len(result.get('items') or [])} users")
        return result

    async def get_me(self) -> Dict[str, Any]:
        """Fetch the identity behind the configured token."""
        return await self._request(
            "GET",
            "/people/me",
            error_message="Failed to verify Webex credentials",
        )


# Global client instance
_webex_client: Optional[WebexClient] = None


def get_webex_client() -> WebexClient:
    """Get or create the global Webex client instance."""
    global _webex_client
    if _webex_client is None:
        _webex_client = WebexClient()
    return _webex_client


async def close_webex_client():
    global _webex_client
    if _webex_client is not None:
        await _webex_client.close()
        _webex_client = None

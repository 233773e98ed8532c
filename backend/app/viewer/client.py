import asyncio
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import httpx
from pydantic import ValidationError

from app.schemas.call_log import CallRecord, DirectionFilter
from app.schemas.user import Person, PersonList
from app.viewer.directions import parse_direction_filter
from app.viewer.records import merge_call_records, to_call_record
from app.viewer.state import ViewerState

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
MAX_LIMIT = 200  # per-user page size the viewer will ever ask for

DateInput = Union[date, str, None]


class GatewayError(Exception):
    """The gateway answered with a non-2xx status, or could not be reached."""

    def __init__(self, status_code: Optional[int], message: str, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details


class QueryValidationError(ValueError):
    """A query was rejected locally, before any request was made."""


class GatewayClient:
    """Thin async client for the gateway's /api endpoints."""

    def __init__(self, base_url: str = "http://localhost:3000", client: Optional[httpx.AsyncClient] = None):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=60.0)

    async def close(self):
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None, default_error: str = "Request failed") -> Dict[str, Any]:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            raise GatewayError(None, f"Could not reach the gateway: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.is_success:
            message = default_error
            details = None
            if isinstance(body, dict):
                message = body.get("error") or message
                details = body.get("details")
            raise GatewayError(response.status_code, message, details)
        return body or {}

    async def get_health(self) -> Dict[str, Any]:
        return await self._get("/api/health", default_error="API connection unhealthy")

    async def get_users(self, limit: Optional[int] = None) -> Dict[str, Any]:
        params = {"limit": limit} if limit else None
        return await self._get("/api/users", params, default_error="Failed to fetch users")

    async def get_calls(self, user_id: str, start: str, end: str, limit: int) -> Dict[str, Any]:
        params = {"userId": user_id, "startDate": start, "endDate": end, "limit": limit}
        return await self._get("/api/calls", params, default_error="Failed to fetch call data")


def _coerce_date(value: DateInput, label: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        raise QueryValidationError("Please select start and end dates")
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise QueryValidationError(f"Invalid {label} date: {value}")


def _coerce_limit(value: Union[int, str, None]) -> int:
    if value is None or value == "":
        return DEFAULT_LIMIT
    try:
        limit = int(value)
    except (TypeError, ValueError):
        raise QueryValidationError(f"Limit must be a positive number, got {value!r}")
    if limit < 1:
        raise QueryValidationError(f"Limit must be a positive number, got {value!r}")
    return min(limit, MAX_LIMIT)


def day_bounds(start: date, end: date) -> Tuple[str, str]:
    """Widen calendar dates to whole UTC days."""
    return f"{start.isoformat()}T00:00:00.000Z", f"{end.isoformat()}T23:59:59.999Z"


class CallHistoryViewer:
    """Drives the query lifecycle against the gateway and keeps the view state.

    With ``allow_partial`` off (the default) one failed per-user fetch fails the
    whole query. With it on, successful users are still shown and the failed
    ones are listed in ``state.failed_user_ids``.
    """

    def __init__(self, gateway: GatewayClient, state: Optional[ViewerState] = None, allow_partial: bool = False):
        self.gateway = gateway
        self.state = state or ViewerState()
        self.allow_partial = allow_partial

    async def check_health(self) -> str:
        """Return the identity the gateway is authenticated as."""
        data = await self.gateway.get_health()
        if data.get("status") != "healthy":
            raise GatewayError(None, "API connection unhealthy", data)
        user = data.get("api", {}).get("user", "unknown")
        logger.info(f"API connected, authenticated as {user}")
        return user

    async def load_users(self) -> List[Person]:
        """Fetch the roster. On failure the error is kept in state for a retry."""
        try:
            data = await self.gateway.get_users()
        except GatewayError as e:
            logger.error(f"Error fetching users: {e.message}")
            self.state.set_users_error(e.message)
            return []

        try:
            users = PersonList.model_validate(data).items
        except ValidationError as e:
            logger.error(f"Unexpected user list from gateway: {e}")
            self.state.set_users_error("Received an invalid user list")
            return []

        self.state.set_users(users)
        logger.info(f"Loaded {len(self.state.users)} users")
        return self.state.users

    def _validate(self, start_date: DateInput, end_date: DateInput, limit, user_ids: Sequence[str]) -> Tuple[str, str, int]:
        if not start_date or not end_date:
            raise QueryValidationError("Please select start and end dates")
        start = _coerce_date(start_date, "start")
        end = _coerce_date(end_date, "end")
        if start > end:
            raise QueryValidationError("Start date must be on or before end date")
        if not user_ids:
            raise QueryValidationError("Please select at least one user")
        start_ts, end_ts = day_bounds(start, end)
        return start_ts, end_ts, _coerce_limit(limit)

    async def _fetch_user_calls(self, user_id: str, start: str, end: str, limit: int) -> List[CallRecord]:
        logger.info(f"Fetching calls for user {user_id} from {start} to {end}")
        data = await self.gateway.get_calls(user_id, start, end, limit)
        user_name = self.state.user_name(user_id)
        return [to_call_record(item, user_id=user_id, user_name=user_name) for item in data.get("items") or []]

    async def submit_query(
        self,
        start_date: DateInput,
        end_date: DateInput,
        limit: Union[int, str, None] = None,
        selected_user_ids: Optional[Sequence[str]] = None,
    ) -> List[CallRecord]:
        """Fetch, merge and sort call history for the selected users.

        Raises QueryValidationError without touching the network when the
        input is incomplete, and GatewayError when the fetch fails.
        """
        self.state.begin_validation()
        user_ids = list(selected_user_ids if selected_user_ids is not None else self.state.selected_user_ids)
        try:
            start, end, page_size = self._validate(start_date, end_date, limit, user_ids)
        except QueryValidationError as e:
            self.state.reject(str(e))
            raise

        self.state.selected_user_ids = user_ids
        self.state.begin_fetch()
        results = await asyncio.gather(
            *(self._fetch_user_calls(uid, start, end, page_size) for uid in user_ids),
            return_exceptions=True,
        )

        batches: List[List[CallRecord]] = []
        failures: List[Tuple[str, GatewayError]] = []
        for user_id, result in zip(user_ids, results):
            if isinstance(result, GatewayError):
                logger.error(f"Error fetching calls for user {user_id}: {result.message}")
                failures.append((user_id, result))
            elif isinstance(result, BaseException):
                self.state.fail(str(result), [user_id])
                raise result
            else:
                batches.append(result)

        failed_ids = [uid for uid, _ in failures]
        if failures and (not self.allow_partial or not batches):
            first_error = failures[0][1]
            self.state.fail(first_error.message, failed_ids)
            raise first_error

        merged = merge_call_records(batches)
        self.state.complete(merged, failed_ids)
        logger.info(f"Loaded {len(merged)} calls for {len(batches)} users")
        return merged

    def apply_direction_filter(self, direction: Union[str, DirectionFilter]) -> List[CallRecord]:
        """Switch the direction filter; purely local, nothing is re-fetched."""
        self.state.set_filter(parse_direction_filter(direction))
        return self.state.visible_calls

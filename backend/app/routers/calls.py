from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from typing import Optional
from datetime import datetime
import logging

from app.schemas.health import ErrorResponse
from app.services.webex_client import WebexClient, get_webex_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["calls"])


def _parse_iso_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, accepting a trailing 'Z'."""
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def _bad_request(error: str, details) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error=error, details=details).model_dump(),
    )


@router.get("/calls")
@router.get("/cdr")
async def get_call_history(
    startDate: Optional[str] = Query(None, description="Range start, ISO-8601"),
    endDate: Optional[str] = Query(None, description="Range end, ISO-8601"),
    userId: Optional[str] = Query(None, description="Webex person ID to filter by"),
    limit: Optional[int] = Query(None, ge=1, description="Maximum number of records"),
    client: WebexClient = Depends(get_webex_client),
):
    """Fetch call history from Webex for a date range, passed through verbatim."""
    missing = [name for name, value in (("startDate", startDate), ("endDate", endDate)) if not value]
    if missing:
        return _bad_request(
            "Start date and end date are required",
            {"missing": missing},
        )

    start = _parse_iso_timestamp(startDate)
    end = _parse_iso_timestamp(endDate)
    invalid = [name for name, parsed in (("startDate", start), ("endDate", end)) if parsed is None]
    if invalid:
        return _bad_request(
            "Start date and end date must be ISO-8601 timestamps",
            {"invalid": invalid},
        )

    # Naive and aware timestamps can't be compared; only check when both agree.
    if (start.tzinfo is None) == (end.tzinfo is None) and start > end:
        return _bad_request(
            "Start date must not be after end date",
            {"startDate": startDate, "endDate": endDate},
        )

    logger.info(f"Call history request: {startDate} -> {endDate}, user={userId}, limit={limit}")
    return await client.get_call_history(
        start_time=startDate,
        end_time=endDate,
        person_id=userId,
        limit=limit,
    )

from fastapi import APIRouter, Depends, Query
from typing import Optional

from app.services.webex_client import WebexClient, get_webex_client

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
async def list_users(
    limit: Optional[int] = Query(None, ge=1, description="Maximum number of users (default 100)"),
    client: WebexClient = Depends(get_webex_client),
):
    """List Webex people, passed through verbatim."""
    return await client.get_people(limit=limit)

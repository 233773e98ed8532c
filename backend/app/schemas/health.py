from pydantic import BaseModel
from typing import Any, Literal, Optional


class ErrorResponse(BaseModel):
    """Envelope returned for every failed gateway request."""
    error: str
    details: Any = None


class ApiInfo(BaseModel):
    version: str
    webexConnection: str
    user: str


class HealthResponse(BaseModel):
    status: Literal["healthy"] = "healthy"
    api: ApiInfo


class UnhealthyResponse(BaseModel):
    status: Literal["unhealthy"] = "unhealthy"
    error: str
    details: Any = None
    resolution: Optional[str] = None

from app.schemas.call_log import CallDirection, DirectionFilter, CallRecord, CallStats
from app.schemas.user import Person, PersonList
from app.schemas.health import ErrorResponse, ApiInfo, HealthResponse, UnhealthyResponse

__all__ = [
    "CallDirection", "DirectionFilter", "CallRecord", "CallStats",
    "Person", "PersonList",
    "ErrorResponse", "ApiInfo", "HealthResponse", "UnhealthyResponse",
]

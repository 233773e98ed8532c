from pydantic import BaseModel
from typing import Any, Dict, Optional
from datetime import datetime
import enum


class CallDirection(str, enum.Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"
    MISSED = "missed"
    UNKNOWN = "unknown"


class DirectionFilter(str, enum.Enum):
    ALL = "all"
    INBOUND = "inbound"
    OUTBOUND = "outbound"
    MISSED = "missed"


class CallRecord(BaseModel):
    direction: CallDirection
    start_time: Optional[datetime] = None
    duration_seconds: Optional[int] = None
    from_party: str = "Unknown"
    to_party: str = "Unknown"
    caller_name: str = ""
    user_id: Optional[str] = None
    user_name: str = "Unknown User"
    raw: Dict[str, Any] = {}


class CallStats(BaseModel):
    total: int = 0
    inbound: int = 0
    outbound: int = 0
    missed: int = 0
    total_duration_seconds: int = 0

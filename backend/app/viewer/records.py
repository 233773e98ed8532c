import logging
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from app.schemas.call_log import CallDirection, CallRecord, CallStats
from app.viewer.directions import classify_direction

logger = logging.getLogger(__name__)

# Records without a usable timestamp sort after everything else.
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def parse_start_time(value: Any) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable call time {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_duration(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        return None
    return seconds if seconds >= 0 else None


def _first(raw: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = raw.get(key)
        if value:
            return str(value)
    return None


def to_call_record(raw: Mapping[str, Any], user_id: Optional[str] = None, user_name: str = "Unknown User") -> CallRecord:
    """Build a CallRecord from one upstream call history item."""
    return CallRecord(
        direction=classify_direction(raw),
        start_time=parse_start_time(raw.get("time") or raw.get("startTime")),
        duration_seconds=_parse_duration(raw.get("duration")),
        from_party=_first(raw, "from", "number", "callerNumber") or "Unknown",
        to_party=_first(raw, "to", "calledNumber") or "Unknown",
        caller_name=_first(raw, "name", "callerName") or "",
        user_id=user_id,
        user_name=user_name,
        raw=dict(raw),
    )


def merge_call_records(batches: Iterable[Sequence[CallRecord]]) -> List[CallRecord]:
    """Concatenate per-user batches, newest first.

    The sort is stable, so records with equal start times keep arrival order.
    """
    merged = [record for batch in batches for record in batch]
    return sorted(merged, key=lambda record: record.start_time or _OLDEST, reverse=True)


def compute_stats(records: Iterable[CallRecord]) -> CallStats:
    stats = CallStats()
    for record in records:
        stats.total += 1
        if record.direction == CallDirection.INBOUND:
            stats.inbound += 1
        elif record.direction == CallDirection.OUTBOUND:
            stats.outbound += 1
        elif record.direction == CallDirection.MISSED:
            stats.missed += 1
        if record.duration_seconds:
            stats.total_duration_seconds += record.duration_seconds
    return stats

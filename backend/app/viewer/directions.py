"""Call direction classification.

Webex has reported the same fact through different fields over time: the
current call history API uses ``type`` (placed/received/missed), older
payloads carry ``callType`` (in/out) and a ``disposition`` flag. Everything
that needs a direction goes through ``classify_direction`` so the rendered
rows and the aggregate counts can never disagree.
"""

from typing import Any, Iterable, List, Mapping, Union

from app.schemas.call_log import CallDirection, CallRecord, DirectionFilter


def classify_direction(raw: Mapping[str, Any]) -> CallDirection:
    """Map raw upstream fields onto exactly one canonical direction."""
    call_type = raw.get("type")
    legacy_type = raw.get("callType")

    if raw.get("disposition") == "missed" or call_type == "missed":
        return CallDirection.MISSED
    if call_type == "received" or legacy_type == "in":
        return CallDirection.INBOUND
    if call_type == "placed" or legacy_type == "out":
        return CallDirection.OUTBOUND
    return CallDirection.UNKNOWN


def parse_direction_filter(value: Union[str, DirectionFilter]) -> DirectionFilter:
    try:
        return DirectionFilter(value)
    except ValueError:
        allowed = ", ".join(f.value for f in DirectionFilter)
        raise ValueError(f"Unknown direction filter {value!r}; expected one of: {allowed}")


def filter_records(records: Iterable[CallRecord], direction_filter: DirectionFilter) -> List[CallRecord]:
    if direction_filter == DirectionFilter.ALL:
        return list(records)
    wanted = CallDirection(direction_filter.value)
    return [record for record in records if record.direction == wanted]

"""Display shaping for call history rows and statistics.

Produces plain data for whatever draws the page (the CLI below, or a
template), so no rendering layer has to look at raw upstream fields.
"""

from dataclasses import dataclass
from typing import Dict, List

from app.schemas.call_log import CallDirection, CallRecord, CallStats, DirectionFilter
from app.viewer.formatting import format_duration, format_phone_number, format_total_duration
from app.viewer.state import QueryPhase, ViewerState

NO_DATA_MESSAGE = "No call history found for the selected criteria"
NO_MATCH_MESSAGE = "No calls match the selected filter"

_TYPE_DISPLAY = {
    CallDirection.INBOUND: ("Inbound", "call-inbound"),
    CallDirection.OUTBOUND: ("Outbound", "call-outbound"),
    CallDirection.MISSED: ("Missed", "call-missed"),
    CallDirection.UNKNOWN: ("Unknown", ""),
}


@dataclass
class CallRow:
    type_display: str
    type_class: str
    date: str
    time: str
    duration: str
    from_number: str
    caller_name: str
    to_number: str
    user_name: str


def _display_number(number: str) -> str:
    return format_phone_number(number) if number else "Unknown"


def call_row(record: CallRecord) -> CallRow:
    type_display, type_class = _TYPE_DISPLAY[record.direction]
    if record.start_time is not None:
        local = record.start_time.astimezone()
        date_text = local.strftime("%Y-%m-%d")
        time_text = local.strftime("%H:%M:%S")
    else:
        date_text = time_text = "Unknown"
    return CallRow(
        type_display=type_display,
        type_class=type_class,
        date=date_text,
        time=time_text,
        duration=format_duration(record.duration_seconds),
        from_number=_display_number(record.from_party),
        caller_name=record.caller_name,
        to_number=_display_number(record.to_party),
        user_name=record.user_name,
    )


def render_rows(state: ViewerState) -> List[CallRow]:
    return [call_row(record) for record in state.visible_calls]


def empty_message(state: ViewerState) -> str:
    """Message to show when there is nothing to list, or '' when there is."""
    if not state.calls:
        return NO_DATA_MESSAGE
    if not state.visible_calls:
        return NO_MATCH_MESSAGE
    return ""


def filter_indicator(state: ViewerState) -> Dict[str, bool]:
    """Which filter button is active."""
    return {f.value: f == state.current_filter for f in DirectionFilter}


def stats_summary(stats: CallStats) -> Dict[str, str]:
    return {
        "Total Calls": str(stats.total),
        "Inbound": str(stats.inbound),
        "Outbound": str(stats.outbound),
        "Missed": str(stats.missed),
        "Total Talk Time": format_total_duration(stats.total_duration_seconds),
    }


def render_text(state: ViewerState) -> str:
    """Plain-text rendering of the current view."""
    if state.phase in (QueryPhase.REJECTED, QueryPhase.ERROR):
        return f"Error: {state.message}"

    lines = []
    if state.calls:
        lines.extend(f"{label}: {value}" for label, value in stats_summary(state.stats).items())
    else:
        lines.append("No data available")
    if state.failed_user_ids:
        lines.append(f"Failed users: {', '.join(state.failed_user_ids)}")

    active = [name for name, on in filter_indicator(state).items() if on]
    lines.append(f"Filter: {active[0]}")
    lines.append("")

    message = empty_message(state)
    if message:
        lines.append(message)
        return "\n".join(lines)

    for row in render_rows(state):
        caller = f" ({row.caller_name})" if row.caller_name else ""
        lines.append(
            f"{row.type_display:<9} {row.date} {row.time}  Duration: {row.duration:<6} "
            f"From: {row.from_number}{caller}  To: {row.to_number}  User: {row.user_name}"
        )
    return "\n".join(lines)

from app.viewer.client import CallHistoryViewer, GatewayClient, GatewayError, QueryValidationError
from app.viewer.directions import classify_direction
from app.viewer.formatting import format_phone_number
from app.viewer.state import QueryPhase, ViewerState

__all__ = [
    "CallHistoryViewer", "GatewayClient", "GatewayError", "QueryValidationError",
    "classify_direction", "format_phone_number",
    "QueryPhase", "ViewerState",
]

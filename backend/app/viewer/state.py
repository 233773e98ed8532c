"""Viewer application state.

Holds the roster, the active dataset and the direction filter for one
session, and enforces the query lifecycle:

    idle -> validating -> (rejected | fetching) -> (error | ready)

Filter changes never leave ``ready``; a new query re-enters ``validating``
from any phase.
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from app.schemas.call_log import CallRecord, CallStats, DirectionFilter
from app.schemas.user import Person
from app.viewer.directions import filter_records
from app.viewer.records import compute_stats


class QueryPhase(str, enum.Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    REJECTED = "rejected"
    FETCHING = "fetching"
    ERROR = "error"
    READY = "ready"


_TRANSITIONS = {
    QueryPhase.VALIDATING: {QueryPhase.REJECTED, QueryPhase.FETCHING},
    QueryPhase.FETCHING: {QueryPhase.ERROR, QueryPhase.READY},
}


class InvalidTransition(RuntimeError):
    pass


@dataclass
class ViewerState:
    users: List[Person] = field(default_factory=list)
    users_error: Optional[str] = None
    selected_user_ids: List[str] = field(default_factory=list)

    calls: List[CallRecord] = field(default_factory=list)
    stats: CallStats = field(default_factory=CallStats)
    current_filter: DirectionFilter = DirectionFilter.ALL

    phase: QueryPhase = QueryPhase.IDLE
    message: Optional[str] = None
    failed_user_ids: List[str] = field(default_factory=list)

    # ==================== Roster ====================

    def set_users(self, users: List[Person]):
        self.users = list(users)
        self.users_error = None
        known = {user.id for user in self.users}
        self.selected_user_ids = [uid for uid in self.selected_user_ids if uid in known]

    def set_users_error(self, message: str):
        self.users = []
        self.users_error = message

    def user_name(self, user_id: str) -> str:
        for user in self.users:
            if user.id == user_id:
                return user.display_name
        return "Unknown User"

    def users_by_id(self) -> Dict[str, Person]:
        return {user.id: user for user in self.users}

    def select_all_users(self):
        self.selected_user_ids = [user.id for user in self.users]

    def deselect_all_users(self):
        self.selected_user_ids = []

    # ==================== Query lifecycle ====================

    def _move(self, target: QueryPhase):
        if target not in _TRANSITIONS.get(self.phase, set()):
            raise InvalidTransition(f"Cannot move from {self.phase.value} to {target.value}")
        self.phase = target

    def begin_validation(self):
        # Allowed from any phase.
        self.phase = QueryPhase.VALIDATING
        self.message = None
        self.failed_user_ids = []

    def reject(self, message: str):
        self._move(QueryPhase.REJECTED)
        self.message = message

    def begin_fetch(self):
        self._move(QueryPhase.FETCHING)
        self.calls = []
        self.stats = CallStats()

    def fail(self, message: str, failed_user_ids: Optional[List[str]] = None):
        self._move(QueryPhase.ERROR)
        self.message = message
        self.failed_user_ids = list(failed_user_ids or [])

    def complete(self, calls: List[CallRecord], failed_user_ids: Optional[List[str]] = None):
        self._move(QueryPhase.READY)
        self.calls = list(calls)
        self.stats = compute_stats(self.calls)
        self.failed_user_ids = list(failed_user_ids or [])

    # ==================== View ====================

    def set_filter(self, direction_filter: DirectionFilter):
        """Change the direction filter; the phase is left as it is."""
        self.current_filter = direction_filter

    @property
    def visible_calls(self) -> List[CallRecord]:
        return filter_records(self.calls, self.current_filter)

    @property
    def is_loading(self) -> bool:
        return self.phase == QueryPhase.FETCHING

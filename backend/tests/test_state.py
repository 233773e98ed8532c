import pytest

from app.schemas.call_log import DirectionFilter
from app.schemas.user import Person
from app.viewer.records import to_call_record
from app.viewer.state import InvalidTransition, QueryPhase, ViewerState


def test_happy_path_transitions():
    state = ViewerState()
    assert state.phase == QueryPhase.IDLE

    state.begin_validation()
    state.begin_fetch()
    assert state.is_loading

    state.complete([to_call_record({"type": "placed", "duration": 5})])
    assert state.phase == QueryPhase.READY
    assert state.stats.total == 1
    assert state.stats.outbound == 1


def test_fetch_cannot_start_without_validation():
    state = ViewerState()

    with pytest.raises(InvalidTransition):
        state.begin_fetch()


def test_rejected_query_never_reaches_fetching():
    state = ViewerState()
    state.begin_validation()
    state.reject("Please select at least one user")

    assert state.phase == QueryPhase.REJECTED
    with pytest.raises(InvalidTransition):
        state.begin_fetch()


def test_filter_change_keeps_ready_phase():
    state = ViewerState()
    state.begin_validation()
    state.begin_fetch()
    state.complete([to_call_record({"type": "placed"}), to_call_record({"type": "missed"})])

    state.set_filter(DirectionFilter.MISSED)

    assert state.phase == QueryPhase.READY
    assert len(state.visible_calls) == 1
    assert state.stats.total == 2


def test_new_query_from_error_reenters_validation():
    state = ViewerState()
    state.begin_validation()
    state.begin_fetch()
    state.fail("boom", ["p-1"])
    assert state.failed_user_ids == ["p-1"]

    state.begin_validation()

    assert state.phase == QueryPhase.VALIDATING
    assert state.message is None
    assert state.failed_user_ids == []


def test_roster_selection_and_names():
    state = ViewerState()
    state.set_users([
        Person(id="p-1", displayName="Ada Lovelace"),
        Person(id="p-2", firstName="Alan", lastName="Turing"),
        Person(id="p-3"),
    ])

    state.select_all_users()
    assert state.selected_user_ids == ["p-1", "p-2", "p-3"]
    assert state.user_name("p-2") == "Alan Turing"
    assert state.user_name("p-3") == "Unknown User"
    assert state.user_name("nobody") == "Unknown User"

    state.deselect_all_users()
    assert state.selected_user_ids == []


def test_users_error_replaces_roster():
    state = ViewerState()
    state.set_users([Person(id="p-1", displayName="Ada")])

    state.set_users_error("Failed to fetch users")

    assert state.users == []
    assert state.users_error == "Failed to fetch users"

from app.schemas.call_log import DirectionFilter
from app.viewer.records import to_call_record
from app.viewer.render import (
    NO_DATA_MESSAGE,
    NO_MATCH_MESSAGE,
    call_row,
    empty_message,
    filter_indicator,
    render_text,
    stats_summary,
)
from app.viewer.state import ViewerState


def _ready_state(*raws):
    state = ViewerState()
    state.begin_validation()
    state.begin_fetch()
    state.complete([to_call_record(raw, user_name="Ada") for raw in raws])
    return state


def test_call_row_shapes_display_fields():
    record = to_call_record(
        {"callType": "in", "disposition": "missed", "time": "2024-01-02T10:00:00Z",
         "callerNumber": "15551234567", "calledNumber": "5559876543", "callerName": "Bob", "duration": 75},
        user_name="Ada",
    )

    row = call_row(record)

    assert row.type_display == "Missed"
    assert row.type_class == "call-missed"
    assert row.duration == "1:15"
    assert row.from_number == "+1 (555) 123-4567"
    assert row.to_number == "(555) 987-6543"
    assert row.caller_name == "Bob"
    assert row.user_name == "Ada"


def test_unknown_parties_and_times():
    row = call_row(to_call_record({}))

    assert row.type_display == "Unknown"
    assert row.type_class == ""
    assert row.from_number == "Unknown"
    assert row.to_number == "Unknown"
    assert row.date == "Unknown"
    assert row.duration == "N/A"


def test_empty_messages_distinguish_no_data_from_no_match():
    assert empty_message(ViewerState()) == NO_DATA_MESSAGE

    state = _ready_state({"type": "placed"})
    assert empty_message(state) == ""
    state.set_filter(DirectionFilter.MISSED)
    assert empty_message(state) == NO_MATCH_MESSAGE


def test_filter_indicator_marks_one_active_button():
    state = _ready_state({"type": "placed"})
    state.set_filter(DirectionFilter.OUTBOUND)

    assert filter_indicator(state) == {"all": False, "inbound": False, "outbound": True, "missed": False}


def test_stats_summary():
    state = _ready_state({"type": "received", "duration": 3600}, {"type": "placed", "duration": 61})

    assert stats_summary(state.stats) == {
        "Total Calls": "2",
        "Inbound": "1",
        "Outbound": "1",
        "Missed": "0",
        "Total Talk Time": "1h 1m 1s",
    }


def test_render_text():
    state = _ready_state({"type": "received", "number": "5551234567", "name": "Bob", "duration": 5})

    text = render_text(state)

    assert "Total Calls: 1" in text
    assert "Filter: all" in text
    assert "From: (555) 123-4567 (Bob)" in text
    assert "User: Ada" in text


def test_render_text_shows_rejection():
    state = ViewerState()
    state.begin_validation()
    state.reject("Please select at least one user")

    assert render_text(state) == "Error: Please select at least one user"

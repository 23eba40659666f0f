"""Tests for subscription module."""

import pytest
from pathlib import Path

from src.watchman_pdu.clock import (
    ClockSpec,
    FatClockData,
    ScmAwareClockData,
    SavedStateClockData,
)
from src.watchman_pdu.exceptions import DecodeError, MissingFieldError, ServerError
from src.watchman_pdu.subscription import (
    SubscribeRequest,
    SubscribeCommand,
    SubscribeResponse,
    Unsubscribe,
    UnsubscribeResponse,
)


class TestSubscribeRequest:
    """Tests for subscription parameters."""

    def test_minimal(self):
        assert SubscribeRequest().to_dict() == {"fields": ["name"]}

    def test_flags(self):
        data = SubscribeRequest(
            fields=["name", "exists"],
            empty_on_fresh_instance=True,
            case_sensitive=True,
            relative_root="www",
            expression=["suffix", "php"],
        ).to_dict()
        assert data == {
            "relative_root": "www",
            "expression": ["suffix", "php"],
            "fields": ["name", "exists"],
            "empty_on_fresh_instance": True,
            "case_sensitive": True,
        }

    def test_has_no_generator_fields(self):
        data = SubscribeRequest(since=ClockSpec.null()).to_dict()
        assert set(data) == {"since", "fields"}

    def test_round_trip_with_source_control_clock(self):
        since = FatClockData(
            clock=ClockSpec.from_wire("c:123:4"),
            scm=ScmAwareClockData(
                mergebase="f00d",
                saved_state=SavedStateClockData(storage="local", config={"max-commits": 10}),
            ),
        )
        request = SubscribeRequest(since=since, fields=["name", "exists"])
        wire = request.to_dict()
        assert wire["since"] == {
            "clock": "c:123:4",
            "scm": {
                "mergebase": "f00d",
                "saved-state": {"storage": "local", "config": {"max-commits": 10}},
            },
        }

        decoded = SubscribeRequest.from_dict(wire)
        assert decoded == request
        assert decoded.since.scm.mergebase_with is None
        assert decoded.since.scm.saved_state.commit is None
        assert decoded.to_dict() == wire

    def test_from_dict_requires_fields(self):
        with pytest.raises(MissingFieldError):
            SubscribeRequest.from_dict({})


class TestSubscribeCommand:
    """Tests for subscribe and unsubscribe envelopes."""

    def test_subscribe_envelope(self):
        command = SubscribeCommand(Path("/repo"), "my-sub", SubscribeRequest(fields=["name"]))
        assert command.to_wire() == ["subscribe", "/repo", "my-sub", {"fields": ["name"]}]

    def test_unsubscribe_envelope(self):
        assert Unsubscribe(Path("/repo"), "my-sub").to_wire() == ["unsubscribe", "/repo", "my-sub"]


class TestSubscribeResponse:
    """Tests for subscription acknowledgements."""

    def test_decode(self):
        response = SubscribeResponse.from_dict({
            "version": "2023.01.01.00",
            "subscribe": "my-sub",
            "clock": "c:1:2",
            "asserted-states": ["hg.update"],
            "saved-state-info": {"manifold": "x"},
        })
        assert response.subscribe == "my-sub"
        assert response.clock == ClockSpec.from_wire("c:1:2")
        assert response.asserted_states == ["hg.update"]
        assert response.saved_state_info == {"manifold": "x"}

    def test_asserted_states_default_empty(self):
        response = SubscribeResponse.from_dict({"version": "1", "subscribe": "s", "clock": "c:1:2"})
        assert response.asserted_states == []
        assert response.saved_state_info is None

    def test_structured_clock_keeps_token(self):
        response = SubscribeResponse.from_dict({
            "version": "1",
            "subscribe": "s",
            "clock": {"clock": "c:1:2", "scm": {"mergebase": "abc"}},
        })
        assert response.clock == ClockSpec.from_wire("c:1:2")

    def test_missing_clock(self):
        with pytest.raises(MissingFieldError):
            SubscribeResponse.from_dict({"version": "1", "subscribe": "s"})

    def test_bad_asserted_states(self):
        with pytest.raises(DecodeError):
            SubscribeResponse.from_dict({
                "version": "1", "subscribe": "s", "clock": "c:1:2", "asserted-states": "hg.update",
            })

    def test_server_error(self):
        with pytest.raises(ServerError, match="unknown root"):
            SubscribeResponse.from_dict({"version": "1", "error": "unknown root"})


class TestUnsubscribeResponse:
    """Tests for unsubscribe acknowledgements."""

    def test_decode(self):
        response = UnsubscribeResponse.from_dict({"version": "1", "unsubscribe": "my-sub"})
        assert response.unsubscribe == "my-sub"

    def test_missing_name(self):
        with pytest.raises(MissingFieldError):
            UnsubscribeResponse.from_dict({"version": "1"})

    def test_server_error(self):
        with pytest.raises(ServerError) as exc_info:
            UnsubscribeResponse.from_dict({"version": "1", "error": "no such subscription"})
        assert exc_info.value.message == "no such subscription"

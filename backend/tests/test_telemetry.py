"""Telemetry emission and session adaptation."""
from typing import Any

from fruitmachine.logic.models import MachineConfig
from fruitmachine.logic.session import SlotSession
from fruitmachine.telemetry import (
    SpinIgnoredEvent,
    TelemetryService,
)
from tests.conftest import ScriptedRNG


class RecordingSink:
    def __init__(self):
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        self.events.append((event_name, data))


class FailingSink:
    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        raise ConnectionError("sink offline")


class TestTelemetryService:
    def test_sink_failure_is_swallowed_and_counted(self):
        service = TelemetryService(sink=FailingSink())
        service.emit_spin_ignored(
            SpinIgnoredEvent(player_id="p1", spin_id=0, reason="insufficient_credits")
        )
        assert service.sink_errors == 1

    def test_session_listener_maps_spin_cycle(self, three_reel_config: MachineConfig):
        sink = RecordingSink()
        service = TelemetryService(sink=sink)
        session = SlotSession(three_reel_config, rng=ScriptedRNG(), initial_indices=[1, 2, 3])
        session.subscribe(service.session_listener("p1", "abc123"))

        session.toggle_hold("reel-3")
        session.request_spin()
        session.complete_reel_spin("reel-1")
        session.complete_reel_spin("reel-2")

        assert [name for name, _ in sink.events] == ["spin_started", "spin_settled"]
        started = sink.events[0][1]
        assert started == {
            "player_id": "p1",
            "spin_id": 1,
            "spin_cost": 1,
            "credits_after_debit": 9,
            "pending_stops": 2,
            "held_reels": ["reel-3"],
        }
        settled = sink.events[1][1]
        assert settled["config_hash"] == "abc123"
        assert settled["total_payout"] == 0
        assert settled["line_ids"] == []

    def test_session_listener_maps_ignored_spin(self, three_reel_config: MachineConfig):
        sink = RecordingSink()
        service = TelemetryService(sink=sink)
        session = SlotSession(three_reel_config, credits=0, initial_indices=[0, 0, 0])
        session.subscribe(service.session_listener("p2", "abc123"))

        session.request_spin()

        assert sink.events == [
            ("spin_ignored", {"player_id": "p2", "spin_id": 0, "reason": "insufficient_credits"})
        ]

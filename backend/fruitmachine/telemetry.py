"""Server-side telemetry for fruit machine sessions."""
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from fruitmachine.logic.session import EventType, SessionEvent, SessionListener


logger = logging.getLogger(__name__)


class TelemetrySink(Protocol):
    """Protocol for telemetry sinks."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        """Emit a telemetry event."""
        ...


class LoggingTelemetrySink:
    """Default sink that logs telemetry events."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        logger.info("TELEMETRY %s: %s", event_name, data)


@dataclass
class SpinStartedEvent:
    """spin_started telemetry event."""

    player_id: str
    spin_id: int
    spin_cost: int
    credits_after_debit: int
    pending_stops: int
    held_reels: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "spin_id": self.spin_id,
            "spin_cost": self.spin_cost,
            "credits_after_debit": self.credits_after_debit,
            "pending_stops": self.pending_stops,
            "held_reels": list(self.held_reels),
        }


@dataclass
class SpinSettledEvent:
    """spin_settled telemetry event."""

    player_id: str
    spin_id: int
    total_payout: int
    credits: int
    line_ids: list[str]
    config_hash: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "spin_id": self.spin_id,
            "total_payout": self.total_payout,
            "credits": self.credits,
            "line_ids": list(self.line_ids),
            "config_hash": self.config_hash,
        }


@dataclass
class SpinIgnoredEvent:
    """spin_ignored telemetry event (precondition not met, no state change)."""

    player_id: str
    spin_id: int
    reason: str  # "already_spinning" | "insufficient_credits"

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "spin_id": self.spin_id,
            "reason": self.reason,
        }


class TelemetryService:
    """Service for emitting server telemetry events."""

    def __init__(self, sink: TelemetrySink | None = None):
        self._sink = sink or LoggingTelemetrySink()
        self._sink_errors = 0

    @property
    def sink_errors(self) -> int:
        return self._sink_errors

    def set_sink(self, sink: TelemetrySink) -> None:
        """Set the telemetry sink (useful for testing)."""
        self._sink = sink

    def _safe_emit(self, event_name: str, data: dict[str, Any]) -> None:
        """Emit event; sink failures MUST NOT break session transitions or requests."""
        try:
            self._sink.emit(event_name, data)
        except Exception as e:
            self._sink_errors += 1
            logger.warning(
                "Telemetry sink error (count=%d): %s - %s",
                self._sink_errors,
                event_name,
                str(e),
            )

    def emit_spin_started(self, event: SpinStartedEvent) -> None:
        self._safe_emit("spin_started", event.to_dict())

    def emit_spin_settled(self, event: SpinSettledEvent) -> None:
        self._safe_emit("spin_settled", event.to_dict())

    def emit_spin_ignored(self, event: SpinIgnoredEvent) -> None:
        self._safe_emit("spin_ignored", event.to_dict())

    def session_listener(self, player_id: str, config_hash: str) -> SessionListener:
        """Adapt session events of one player to telemetry events."""

        def listener(event: SessionEvent) -> None:
            data = event.data
            if event.type == EventType.SPIN_STARTED:
                self.emit_spin_started(
                    SpinStartedEvent(
                        player_id=player_id,
                        spin_id=event.spin_id,
                        spin_cost=data["spin_cost"],
                        credits_after_debit=data["credits"],
                        pending_stops=data["pending_stops"],
                        held_reels=data["held"],
                    )
                )
            elif event.type == EventType.SPIN_SETTLED:
                self.emit_spin_settled(
                    SpinSettledEvent(
                        player_id=player_id,
                        spin_id=event.spin_id,
                        total_payout=data["total_payout"],
                        credits=data["credits"],
                        line_ids=[line["line_id"] for line in data["lines"]],
                        config_hash=config_hash,
                    )
                )
            elif event.type == EventType.SPIN_IGNORED:
                self.emit_spin_ignored(
                    SpinIgnoredEvent(
                        player_id=player_id,
                        spin_id=event.spin_id,
                        reason=data["reason"],
                    )
                )

        return listener


# Global instance
telemetry_service = TelemetryService()

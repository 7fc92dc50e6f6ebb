"""Pytest fixtures for backend tests."""
from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient

from fruitmachine.logic.models import MachineConfig
from fruitmachine.logic.presets import get_preset, load_machine_config
from fruitmachine.logic.rng import RNGBase, SeededRNG
from fruitmachine.logic.session import SessionEvent, SlotSession
from fruitmachine.main import app
from fruitmachine.session_store import session_store


PLAYER_ID = "test-player-123"


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (long seeded simulations)"
    )


class ScriptedRNG(RNGBase):
    """
    RNG that replays queued values.

    randint() pops from `ints` (falls back to the lower bound when empty),
    random() pops from `floats` (falls back to `default_float`).
    Every randint range requested is recorded in `int_calls`.
    """

    def __init__(
        self,
        ints: list[int] | None = None,
        floats: list[float] | None = None,
        default_float: float = 0.5,
    ):
        self.ints = list(ints or [])
        self.floats = list(floats or [])
        self.default_float = default_float
        self.int_calls: list[tuple[int, int]] = []

    def random(self) -> float:
        return self.floats.pop(0) if self.floats else self.default_float

    def randint(self, a: int, b: int) -> int:
        self.int_calls.append((a, b))
        if not self.ints:
            return a
        value = self.ints.pop(0)
        if not a <= value <= b:
            raise AssertionError(f"Scripted value {value} outside [{a}, {b}]")
        return value


class FakeClock:
    """Manually advanced clock (seconds)."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class EventRecorder:
    """Session listener that keeps every event."""

    def __init__(self):
        self.events: list[SessionEvent] = []

    def __call__(self, event: SessionEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [event.type for event in self.events]


def make_config(
    strips: list[list[str]],
    payouts: dict[str, int],
    lines: list[tuple[str, list[int], float]],
    **overrides: Any,
) -> MachineConfig:
    """Build a validated config from compact test data."""
    data: dict[str, Any] = {
        "name": "Test Cabinet",
        "reels": [
            {"id": f"reel-{index + 1}", "symbols": strip}
            for index, strip in enumerate(strips)
        ],
        "symbols": {
            symbol_id: {"id": symbol_id, "label": symbol_id.title(), "payout": payout}
            for symbol_id, payout in payouts.items()
        },
        "win_lines": [
            {"id": line_id, "offsets": offsets, "payout_multiplier": multiplier}
            for line_id, offsets, multiplier in lines
        ],
        "spin_cost": 1,
        "initial_credits": 10,
        "spin_duration_bounds": (2.0, 3.0),
        "angular_velocity_bounds": (5.0, 10.0),
    }
    data.update(overrides)
    return load_machine_config(data)


@pytest.fixture
def three_reel_config() -> MachineConfig:
    """3 reels of A B C D, a single center line x1. A pays 10."""
    strip = ["A", "B", "C", "D"]
    return make_config(
        strips=[strip, strip, strip],
        payouts={"A": 10, "B": 20, "C": 5, "D": 7},
        lines=[("center", [0, 0, 0], 1)],
    )


@pytest.fixture
def five_reel_config() -> MachineConfig:
    """5 reels of X Y Z W with center/top/bottom/zig lines. X pays 20."""
    strip = ["X", "Y", "Z", "W"]
    return make_config(
        strips=[strip] * 5,
        payouts={"X": 20, "Y": 3, "Z": 4, "W": 6},
        lines=[
            ("center", [0, 0, 0, 0, 0], 1),
            ("top", [-1, -1, -1, -1, -1], 1),
            ("bottom", [1, 1, 1, 1, 1], 1),
            ("zig", [0, -1, 0, 1, 0], 1.5),
        ],
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def session(three_reel_config: MachineConfig, clock: FakeClock) -> SlotSession:
    """Idle 3-reel session resting on B/C/D with 10 credits."""
    return SlotSession(
        three_reel_config,
        rng=ScriptedRNG(),
        clock=clock,
        initial_indices=[1, 2, 3],
    )


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """TestClient on the Aurora Five preset with seeded sessions."""
    session_store.set_config(get_preset("aurora_five"))
    session_store.rng_factory = lambda: SeededRNG(seed="api-tests")

    with TestClient(app) as test_client:
        yield test_client

    session_store.rng_factory = None
    session_store.reset()

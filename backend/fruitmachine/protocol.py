"""HTTP protocol models (camelCase wire format)."""
from pydantic import BaseModel, Field

from fruitmachine.config import settings
from fruitmachine.logic.models import (
    MachineConfig,
    ReelRuntimeState,
    SessionState,
    SpinPlan,
    SpinResult,
)


# === Configuration view ===


class SymbolView(BaseModel):
    id: str
    label: str
    payout: int


class ReelView(BaseModel):
    id: str
    symbols: list[str]


class WinLineView(BaseModel):
    id: str
    offsets: list[int]
    payoutMultiplier: float


class Configuration(BaseModel):
    """Machine configuration object in /init response."""

    name: str
    spinCost: int
    initialCredits: int
    spinDurationBounds: tuple[float, float]
    angularVelocityBounds: tuple[float, float]
    reels: list[ReelView]
    symbols: list[SymbolView]
    winLines: list[WinLineView]
    configHash: str

    @classmethod
    def from_config(cls, config: MachineConfig, config_hash: str) -> "Configuration":
        return cls(
            name=config.name,
            spinCost=config.spin_cost,
            initialCredits=config.initial_credits,
            spinDurationBounds=config.spin_duration_bounds,
            angularVelocityBounds=config.angular_velocity_bounds,
            reels=[ReelView(id=reel.id, symbols=list(reel.symbols)) for reel in config.reels],
            symbols=[
                SymbolView(id=symbol.id, label=symbol.label, payout=symbol.payout)
                for symbol in config.symbols.values()
            ],
            winLines=[
                WinLineView(
                    id=line.id,
                    offsets=list(line.offsets),
                    payoutMultiplier=line.payout_multiplier,
                )
                for line in config.win_lines
            ],
            configHash=config_hash,
        )


# === Session snapshot ===


class SpinPlanView(BaseModel):
    """Plan handed to the client animator."""

    spinId: int
    startAngle: float
    targetAngle: float
    duration: float
    delay: float
    startTime: float
    targetIndex: int

    @classmethod
    def from_plan(cls, plan: SpinPlan) -> "SpinPlanView":
        return cls(
            spinId=plan.spin_id,
            startAngle=plan.start_angle,
            targetAngle=plan.target_angle,
            duration=plan.duration,
            delay=plan.delay,
            startTime=plan.start_time,
            targetIndex=plan.target_index,
        )


class ReelStateView(BaseModel):
    id: str
    held: bool
    currentIndex: int
    currentAngle: float
    spinPlan: SpinPlanView | None = None

    @classmethod
    def from_reel(cls, reel: ReelRuntimeState) -> "ReelStateView":
        return cls(
            id=reel.id,
            held=reel.held,
            currentIndex=reel.current_index,
            currentAngle=reel.current_angle,
            spinPlan=SpinPlanView.from_plan(reel.spin_plan) if reel.spin_plan else None,
        )


class WinLineResultView(BaseModel):
    lineId: str
    symbol: str
    payout: int
    matchLength: int


class SpinResultView(BaseModel):
    totalPayout: int
    lines: list[WinLineResultView] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: SpinResult) -> "SpinResultView":
        return cls(
            totalPayout=result.total_payout,
            lines=[
                WinLineResultView(
                    lineId=line.line_id,
                    symbol=line.symbol,
                    payout=line.payout,
                    matchLength=line.match_length,
                )
                for line in result.lines
            ],
        )


class SessionSnapshot(BaseModel):
    """Read-only HUD view of a session."""

    credits: int
    isSpinning: bool
    pendingStops: int
    spinCounter: int
    canSpin: bool
    reels: list[ReelStateView]
    lastResult: SpinResultView | None = None

    @classmethod
    def from_state(cls, state: SessionState, spin_cost: int) -> "SessionSnapshot":
        return cls(
            credits=state.credits,
            isSpinning=state.is_spinning,
            pendingStops=state.pending_stops,
            spinCounter=state.spin_counter,
            canSpin=not state.is_spinning and state.credits >= spin_cost,
            reels=[ReelStateView.from_reel(reel) for reel in state.reels],
            lastResult=(
                SpinResultView.from_result(state.last_result) if state.last_result else None
            ),
        )


# === Responses ===


class InitResponse(BaseModel):
    """GET /init response."""

    protocolVersion: str = settings.protocol_version
    configuration: Configuration
    state: SessionSnapshot


class StateResponse(BaseModel):
    """GET /state response."""

    protocolVersion: str = settings.protocol_version
    state: SessionSnapshot


class ActionResponse(BaseModel):
    """Response of every mutating route; applied is False for ignored requests."""

    protocolVersion: str = settings.protocol_version
    applied: bool
    state: SessionSnapshot

"""Machine configuration and runtime state models."""
from pydantic import BaseModel, ConfigDict, Field, model_validator


# === Configuration (immutable) ===


class SymbolDefinition(BaseModel):
    """A reel symbol and its base payout for a full line match."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    payout: int = Field(ge=0)


class ReelConfig(BaseModel):
    """A physical reel strip; symbols are laid out evenly around 2*pi."""

    model_config = ConfigDict(frozen=True)

    id: str
    symbols: tuple[str, ...] = Field(min_length=3)


class WinLine(BaseModel):
    """
    Pattern of visible positions checked for matching symbols.

    offsets holds one entry per reel relative to the landed center index:
    -1 is the row above, 0 the center row, 1 the row below.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    offsets: tuple[int, ...]
    payout_multiplier: float = Field(gt=0)


class MachineConfig(BaseModel):
    """
    Static description of a cabinet.

    Invariants are checked on construction; use
    fruitmachine.logic.presets.load_machine_config to get a
    ConfigurationError instead of a pydantic ValidationError.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    reels: tuple[ReelConfig, ...] = Field(min_length=1)
    symbols: dict[str, SymbolDefinition]
    win_lines: tuple[WinLine, ...] = ()
    spin_cost: int = Field(default=1, ge=0)
    initial_credits: int = Field(default=50, ge=0)
    spin_duration_bounds: tuple[float, float] = (2.5, 3.4)
    angular_velocity_bounds: tuple[float, float] = (7.0, 11.0)

    @model_validator(mode="after")
    def _check_invariants(self) -> "MachineConfig":
        for key, definition in self.symbols.items():
            if key != definition.id:
                raise ValueError(
                    f"Symbol table key {key!r} does not match symbol id {definition.id!r}"
                )

        reel_ids = [reel.id for reel in self.reels]
        if len(set(reel_ids)) != len(reel_ids):
            raise ValueError(f"Duplicate reel ids: {reel_ids}")

        for reel in self.reels:
            missing = sorted(set(reel.symbols) - set(self.symbols))
            if missing:
                raise ValueError(f"Reel {reel.id!r} references unknown symbols: {missing}")

        line_ids = [line.id for line in self.win_lines]
        if len(set(line_ids)) != len(line_ids):
            raise ValueError(f"Duplicate win line ids: {line_ids}")

        for line in self.win_lines:
            if len(line.offsets) != len(self.reels):
                raise ValueError(
                    f"Win line {line.id!r} has {len(line.offsets)} offsets, "
                    f"expected one per reel ({len(self.reels)})"
                )

        min_duration, max_duration = self.spin_duration_bounds
        if min_duration < 0 or min_duration > max_duration:
            raise ValueError(
                f"Invalid spin_duration_bounds {self.spin_duration_bounds}: "
                "need 0 <= min <= max"
            )

        min_velocity, max_velocity = self.angular_velocity_bounds
        if min_velocity <= 0 or min_velocity > max_velocity:
            raise ValueError(
                f"Invalid angular_velocity_bounds {self.angular_velocity_bounds}: "
                "need 0 < min <= max"
            )

        return self

    @property
    def reel_count(self) -> int:
        return len(self.reels)


# === Runtime state ===


class SpinPlan(BaseModel):
    """
    Kinematics of one reel for one spin, handed to the animator.

    target_angle may exceed 2*pi to encode extra full turns and is never
    smaller than start_angle. Times are seconds on the session clock.
    """

    model_config = ConfigDict(frozen=True)

    spin_id: int
    reel_index: int
    start_angle: float
    target_angle: float
    start_time: float
    delay: float
    duration: float
    target_index: int

    @property
    def distance(self) -> float:
        return self.target_angle - self.start_angle


class ReelRuntimeState(BaseModel):
    """
    Mutable per-reel state owned by a SlotSession.

    current_index/current_angle are authoritative only while spin_plan is None.
    """

    id: str
    config: ReelConfig
    held: bool = False
    current_index: int = 0
    current_angle: float = 0.0
    spin_plan: SpinPlan | None = None

    @property
    def is_animating(self) -> bool:
        return self.spin_plan is not None

    @property
    def length(self) -> int:
        return len(self.config.symbols)


class WinLineResult(BaseModel):
    """A paying win line."""

    model_config = ConfigDict(frozen=True)

    line_id: str
    symbol: str
    payout: int
    match_length: int


class SpinResult(BaseModel):
    """Outcome of a fully settled spin."""

    model_config = ConfigDict(frozen=True)

    total_payout: int = 0
    lines: tuple[WinLineResult, ...] = ()


class SessionState(BaseModel):
    """
    Player session state.

    Tracks:
    - credits (never negative; a spin needs credits >= spin_cost)
    - is_spinning / pending_stops (reels still awaiting completion)
    - spin_counter (incremented by every granted spin)
    - last_result (cleared when a spin starts, set when it settles)
    """

    credits: int = Field(ge=0)
    is_spinning: bool = False
    pending_stops: int = 0
    spin_counter: int = 0
    last_result: SpinResult | None = None
    reels: list[ReelRuntimeState] = Field(default_factory=list)

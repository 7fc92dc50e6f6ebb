"""Randomized outcome selection: target stops and spin kinematics per reel."""
import time
from typing import Callable

from fruitmachine.logic.kinematics import angle_for_index, forward_target_angle
from fruitmachine.logic.models import MachineConfig, ReelRuntimeState, SpinPlan
from fruitmachine.logic.rng import ProductionRNG, RNGBase


# Minimum extra full turns; the upper bound grows with the reel index
MIN_EXTRA_TURNS = 2
EXTRA_TURNS_BASE_MAX = 4

# Duration jitter keeps each spin within [40%, 100%] of the configured range
DURATION_JITTER_MIN = 0.4
DURATION_JITTER_SPAN = 0.6

# Per-reel stagger (seconds)
DURATION_STAGGER_PER_REEL = 0.15
DELAY_PER_REEL = 0.12


class OutcomeSelector:
    """
    Picks target stops and builds SpinPlans.

    Implements:
    - Uniform target index per reel
    - Forward-only target angle with extra turns growing per reel
    - Jittered, staggered duration widened to respect the velocity bound
    - Cascading start delay

    Never mutates the reels it is given; the session applies the plans.
    """

    def __init__(
        self,
        rng: RNGBase | None = None,
        clock: Callable[[], float] | None = None,
    ):
        self.rng = rng or ProductionRNG()
        self.clock = clock or time.monotonic

    def plan_spin(
        self,
        reel: ReelRuntimeState,
        reel_index: int,
        config: MachineConfig,
        spin_id: int = 0,
        now: float | None = None,
    ) -> SpinPlan | None:
        """
        Plan one reel's spin.

        Args:
            reel: Current runtime state of the reel
            reel_index: 0-based position of the reel in the cabinet
            config: Machine configuration (duration/velocity bounds)
            spin_id: Session spin counter value the plan belongs to
            now: Start timestamp; read from the clock when omitted

        Returns:
            SpinPlan, or None for a held reel
        """
        if reel.held:
            return None

        symbol_count = reel.length
        target_index = self.rng.randint(0, symbol_count - 1)
        landing_angle = angle_for_index(target_index, symbol_count)

        extra_turns = self.rng.randint(MIN_EXTRA_TURNS, EXTRA_TURNS_BASE_MAX + reel_index)
        start_angle = reel.current_angle
        target_angle = forward_target_angle(start_angle, landing_angle, extra_turns)

        min_duration, max_duration = config.spin_duration_bounds
        jitter = self.rng.random() * DURATION_JITTER_SPAN + DURATION_JITTER_MIN
        duration = (
            min_duration
            + (max_duration - min_duration) * jitter
            + reel_index * DURATION_STAGGER_PER_REEL
        )

        min_velocity, max_velocity = config.angular_velocity_bounds
        velocity = self.rng.uniform(min_velocity, max_velocity)
        duration = max(duration, (target_angle - start_angle) / velocity)

        return SpinPlan(
            spin_id=spin_id,
            reel_index=reel_index,
            start_angle=start_angle,
            target_angle=target_angle,
            start_time=self.clock() if now is None else now,
            delay=reel_index * DELAY_PER_REEL,
            duration=duration,
            target_index=target_index,
        )

    def plan_all(
        self,
        reels: list[ReelRuntimeState],
        config: MachineConfig,
        spin_id: int = 0,
    ) -> list[SpinPlan | None]:
        """Plan every reel with a single shared start timestamp."""
        now = self.clock()
        return [
            self.plan_spin(reel, index, config, spin_id=spin_id, now=now)
            for index, reel in enumerate(reels)
        ]

"""Session state machine: spin lifecycle, holds and credit accounting."""
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Callable

from fruitmachine.logic.kinematics import angle_for_index
from fruitmachine.logic.models import (
    MachineConfig,
    ReelRuntimeState,
    SessionState,
    SpinResult,
)
from fruitmachine.logic.outcome import OutcomeSelector
from fruitmachine.logic.payout import evaluate_spin_result
from fruitmachine.logic.rng import ProductionRNG, RNGBase


logger = logging.getLogger(__name__)


class EventType:
    """Session event names published to listeners."""

    SPIN_STARTED = "spin_started"
    SPIN_IGNORED = "spin_ignored"
    REEL_SETTLED = "reel_settled"
    SPIN_SETTLED = "spin_settled"
    HOLD_CHANGED = "hold_changed"
    HOLD_IGNORED = "hold_ignored"


@dataclass(frozen=True)
class SessionEvent:
    """Notification published after every session transition (or ignored request)."""

    type: str
    spin_id: int
    data: dict[str, Any] = field(default_factory=dict)


SessionListener = Callable[[SessionEvent], None]


class SlotSession:
    """
    One player's fruit machine session.

    States:
    - Idle: is_spinning False, no reel carries a plan
    - Spinning: is_spinning True, pending_stops > 0
    - Settling is folded into the completion that brings pending_stops to 0

    Requests that violate a precondition (spin while spinning, spin without
    enough credits, hold changes while spinning, unknown reel ids) are
    silently ignored: the method returns False and no state changes.
    """

    def __init__(
        self,
        config: MachineConfig,
        rng: RNGBase | None = None,
        clock: Callable[[], float] | None = None,
        selector: OutcomeSelector | None = None,
        initial_indices: Sequence[int] | None = None,
        credits: int | None = None,
    ):
        self.config = config
        self.rng = rng or ProductionRNG()
        self.clock = clock or time.monotonic
        self.selector = selector or OutcomeSelector(rng=self.rng, clock=self.clock)
        self.state = SessionState(
            credits=config.initial_credits if credits is None else credits,
            reels=self._initial_reels(initial_indices),
        )
        self._listeners: list[SessionListener] = []
        self._listener_errors = 0

    def _initial_reels(self, initial_indices: Sequence[int] | None) -> list[ReelRuntimeState]:
        """Create resting reels at the given indices, or random ones."""
        if initial_indices is not None and len(initial_indices) != self.config.reel_count:
            raise ValueError(
                f"Expected {self.config.reel_count} initial indices, got {len(initial_indices)}"
            )

        reels = []
        for position, reel_config in enumerate(self.config.reels):
            length = len(reel_config.symbols)
            if initial_indices is None:
                index = self.rng.randint(0, length - 1)
            else:
                index = initial_indices[position]
                if not 0 <= index < length:
                    raise ValueError(
                        f"Initial index {index} out of range for reel {reel_config.id!r} "
                        f"with {length} symbols"
                    )
            reels.append(
                ReelRuntimeState(
                    id=reel_config.id,
                    config=reel_config,
                    current_index=index,
                    current_angle=angle_for_index(index, length),
                )
            )
        return reels

    # === Read accessors (HUD / marquee) ===

    @property
    def credits(self) -> int:
        return self.state.credits

    @property
    def is_spinning(self) -> bool:
        return self.state.is_spinning

    @property
    def pending_stops(self) -> int:
        return self.state.pending_stops

    @property
    def spin_counter(self) -> int:
        return self.state.spin_counter

    @property
    def last_result(self) -> SpinResult | None:
        return self.state.last_result

    @property
    def reels(self) -> list[ReelRuntimeState]:
        return self.state.reels

    @property
    def can_spin(self) -> bool:
        return not self.state.is_spinning and self.state.credits >= self.config.spin_cost

    def get_reel(self, reel_id: str) -> ReelRuntimeState | None:
        for reel in self.state.reels:
            if reel.id == reel_id:
                return reel
        return None

    def snapshot(self) -> SessionState:
        """Detached copy of the current state."""
        return self.state.model_copy(deep=True)

    # === Listeners ===

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, event_type: str, **data: Any) -> None:
        """Notify listeners; listener failures never break a transition."""
        event = SessionEvent(type=event_type, spin_id=self.state.spin_counter, data=data)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                self._listener_errors += 1
                logger.warning(
                    "Session listener error (count=%d): %s - %s",
                    self._listener_errors,
                    event_type,
                    str(e),
                )

    # === Transitions ===

    def request_spin(self) -> bool:
        """
        Idle -> Spinning.

        Debits spin_cost, plans every non-held reel and resets last_result.
        With every reel held the spin resolves immediately against the
        current positions and the session stays idle.

        Returns:
            True if the spin was granted, False if it was ignored
        """
        state = self.state
        if state.is_spinning:
            logger.debug("Spin ignored: already spinning (spin_id=%d)", state.spin_counter)
            self._publish(EventType.SPIN_IGNORED, reason="already_spinning")
            return False

        spin_cost = self.config.spin_cost
        if state.credits < spin_cost:
            logger.debug(
                "Spin ignored: insufficient credits (credits=%d, cost=%d)",
                state.credits,
                spin_cost,
            )
            self._publish(EventType.SPIN_IGNORED, reason="insufficient_credits")
            return False

        spin_id = state.spin_counter + 1
        plans = self.selector.plan_all(state.reels, self.config, spin_id=spin_id)

        state.credits -= spin_cost
        state.spin_counter = spin_id
        state.last_result = None

        pending_stops = 0
        for reel, plan in zip(state.reels, plans):
            reel.spin_plan = plan
            if plan is not None:
                pending_stops += 1
        state.pending_stops = pending_stops
        state.is_spinning = pending_stops > 0

        logger.debug(
            "Spin %d started: cost=%d, credits=%d, pending_stops=%d",
            spin_id,
            spin_cost,
            state.credits,
            pending_stops,
        )
        self._publish(
            EventType.SPIN_STARTED,
            spin_cost=spin_cost,
            credits=state.credits,
            pending_stops=pending_stops,
            held=self._held_ids(),
        )

        if pending_stops == 0:
            self._settle()
        return True

    def complete_reel_spin(self, reel_id: str) -> bool:
        """
        Finalize one reel from its plan.

        Called by the animator once per plan. Unknown reels and reels with
        no active plan are ignored, so duplicate completions are harmless.
        When the last pending reel settles the payout is evaluated and credited.

        Returns:
            True if a plan was consumed, False if the call was ignored
        """
        reel = self.get_reel(reel_id)
        if reel is None:
            logger.debug("Completion ignored: unknown reel %r", reel_id)
            return False

        plan = reel.spin_plan
        if plan is None:
            logger.debug("Completion ignored: reel %r has no active plan", reel_id)
            return False

        reel.current_index = plan.target_index
        reel.current_angle = angle_for_index(plan.target_index, reel.length)
        reel.spin_plan = None

        state = self.state
        state.pending_stops = max(state.pending_stops - 1, 0)
        self._publish(
            EventType.REEL_SETTLED,
            reel_id=reel.id,
            index=reel.current_index,
            pending_stops=state.pending_stops,
        )

        if state.pending_stops == 0:
            self._settle()
        return True

    def _settle(self) -> None:
        """Evaluate settled reels, credit the payout and publish the result."""
        state = self.state
        result = evaluate_spin_result(self.config, state.reels)
        state.credits += result.total_payout
        state.last_result = result
        state.is_spinning = False

        logger.info(
            "Spin %d settled: payout=%d, lines=%s, credits=%d",
            state.spin_counter,
            result.total_payout,
            [line.line_id for line in result.lines],
            state.credits,
        )
        self._publish(
            EventType.SPIN_SETTLED,
            total_payout=result.total_payout,
            credits=state.credits,
            lines=[line.model_dump() for line in result.lines],
        )

    def toggle_hold(self, reel_id: str) -> bool:
        """Flip a reel's held flag while idle."""
        if self.state.is_spinning:
            logger.debug("Hold toggle ignored while spinning: %r", reel_id)
            self._publish(EventType.HOLD_IGNORED, reel_id=reel_id, reason="spinning")
            return False

        reel = self.get_reel(reel_id)
        if reel is None:
            logger.debug("Hold toggle ignored: unknown reel %r", reel_id)
            self._publish(EventType.HOLD_IGNORED, reel_id=reel_id, reason="unknown_reel")
            return False

        reel.held = not reel.held
        self._publish(EventType.HOLD_CHANGED, held=self._held_ids())
        return True

    def release_all_holds(self) -> bool:
        """Clear every held flag while idle."""
        if self.state.is_spinning:
            logger.debug("Release holds ignored while spinning")
            self._publish(EventType.HOLD_IGNORED, reason="spinning")
            return False

        for reel in self.state.reels:
            reel.held = False
        self._publish(EventType.HOLD_CHANGED, held=[])
        return True

    def _held_ids(self) -> list[str]:
        return [reel.id for reel in self.state.reels if reel.held]

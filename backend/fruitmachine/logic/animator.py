"""Reference animator that drives reel completions from a clock."""
import logging
from typing import Callable

from fruitmachine.logic.kinematics import (
    COMPLETION_THRESHOLD,
    angle_at,
    ease_out_cubic,
    normalize_angle,
    plan_progress,
)
from fruitmachine.logic.session import SlotSession


logger = logging.getLogger(__name__)


class ReelAnimator:
    """
    Frame-loop stand-in for the visual reel columns.

    Each tick interpolates every animating reel with ease-out-cubic and
    reports a completion exactly once when eased progress reaches
    COMPLETION_THRESHOLD. Headless callers use settle_all().
    """

    def __init__(self, session: SlotSession, clock: Callable[[], float] | None = None):
        self.session = session
        self.clock = clock or session.clock

    def display_angles(self, now: float | None = None) -> dict[str, float]:
        """Angle each reel should be drawn at, normalized to [0, 2*pi)."""
        now = self.clock() if now is None else now
        angles = {}
        for reel in self.session.reels:
            if reel.spin_plan is None:
                angles[reel.id] = reel.current_angle
            else:
                angles[reel.id] = normalize_angle(angle_at(reel.spin_plan, now))
        return angles

    def tick(self, now: float | None = None) -> list[str]:
        """
        Advance to `now` and report finished reels.

        Returns:
            Ids of reels completed by this tick
        """
        now = self.clock() if now is None else now
        completed = []
        for reel in list(self.session.reels):
            plan = reel.spin_plan
            if plan is None:
                continue
            if ease_out_cubic(plan_progress(plan, now)) >= COMPLETION_THRESHOLD:
                if self.session.complete_reel_spin(reel.id):
                    completed.append(reel.id)
        if completed:
            logger.debug("Tick at %.3f completed reels %s", now, completed)
        return completed

    def settle_all(self) -> list[str]:
        """Complete every pending plan immediately, in reel order."""
        completed = []
        for reel in list(self.session.reels):
            if reel.spin_plan is not None and self.session.complete_reel_spin(reel.id):
                completed.append(reel.id)
        return completed

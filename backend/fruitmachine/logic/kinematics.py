"""Reel angle helpers shared by outcome selection and animators."""
import math

from fruitmachine.logic.models import SpinPlan

TAU = math.pi * 2

# Eased progress at which an animator treats a plan as finished
COMPLETION_THRESHOLD = 0.999


def normalize_angle(angle: float) -> float:
    """Wrap an angle into [0, 2*pi)."""
    wrapped = math.fmod(angle, TAU)
    if wrapped < 0:
        wrapped += TAU
    # fmod of values just below a multiple of TAU can round up to TAU
    return 0.0 if wrapped >= TAU else wrapped


def angle_for_index(index: int, total: int) -> float:
    """Resting angle of a reel showing symbol `index` on the center row."""
    return normalize_angle(index * (TAU / total))


def forward_target_angle(current: float, landing: float, extra_turns: int) -> float:
    """
    Angle reached by turning forward from `current` onto `landing`.

    Always travels at least extra_turns full rotations; a landing equal to the
    current angle adds nothing beyond those turns.
    """
    return current + (landing - current + TAU) % TAU + extra_turns * TAU


def ease_out_cubic(t: float) -> float:
    t = min(max(t, 0.0), 1.0)
    return 1 - (1 - t) ** 3


def plan_progress(plan: SpinPlan, now: float) -> float:
    """Linear progress of a plan in [0, 1] at time `now` (delay excluded)."""
    elapsed = now - plan.start_time
    if elapsed < plan.delay:
        return 0.0
    if plan.duration <= 0:
        return 1.0
    return min((elapsed - plan.delay) / plan.duration, 1.0)


def angle_at(plan: SpinPlan, now: float) -> float:
    """Eased reel angle (not normalized) of a plan at time `now`."""
    eased = ease_out_cubic(plan_progress(plan, now))
    return plan.start_angle + plan.distance * eased

"""Angle helpers and plan interpolation."""
import math

import pytest

from fruitmachine.logic.kinematics import (
    TAU,
    angle_at,
    angle_for_index,
    ease_out_cubic,
    forward_target_angle,
    normalize_angle,
    plan_progress,
)
from fruitmachine.logic.models import SpinPlan


def make_plan(**overrides) -> SpinPlan:
    data = dict(
        spin_id=1,
        reel_index=0,
        start_angle=1.0,
        target_angle=1.0 + 3 * TAU,
        start_time=10.0,
        delay=0.5,
        duration=2.0,
        target_index=0,
    )
    data.update(overrides)
    return SpinPlan(**data)


class TestAngles:
    @pytest.mark.parametrize("angle", [0.0, 1.0, TAU - 1e-9, TAU, 5 * TAU + 0.3, -0.3, -7 * TAU])
    def test_normalize_stays_in_range(self, angle: float):
        wrapped = normalize_angle(angle)
        assert 0 <= wrapped < TAU

    def test_normalize_negative(self):
        assert normalize_angle(-0.5) == pytest.approx(TAU - 0.5)

    def test_angle_for_index(self):
        assert angle_for_index(0, 15) == 0
        assert angle_for_index(5, 20) == pytest.approx(math.pi / 2)

    def test_forward_target_moves_forward(self):
        target = forward_target_angle(current=5.0, landing=1.0, extra_turns=2)
        assert target > 5.0
        assert normalize_angle(target) == pytest.approx(1.0)
        assert target - 5.0 == pytest.approx((1.0 - 5.0 + TAU) + 2 * TAU)

    def test_forward_target_same_landing_still_turns(self):
        target = forward_target_angle(current=2.0, landing=2.0, extra_turns=2)
        assert target == pytest.approx(2.0 + 2 * TAU)


class TestInterpolation:
    def test_ease_out_cubic_bounds(self):
        assert ease_out_cubic(0) == 0
        assert ease_out_cubic(1) == 1
        assert ease_out_cubic(0.5) == pytest.approx(0.875)
        assert ease_out_cubic(2.0) == 1

    def test_progress_zero_during_delay(self):
        plan = make_plan()
        assert plan_progress(plan, 10.2) == 0.0
        assert angle_at(plan, 10.2) == plan.start_angle

    def test_progress_midway(self):
        plan = make_plan()
        assert plan_progress(plan, 11.5) == pytest.approx(0.5)
        assert angle_at(plan, 11.5) == pytest.approx(1.0 + 3 * TAU * 0.875)

    def test_progress_clamped_at_end(self):
        plan = make_plan()
        assert plan_progress(plan, 100.0) == 1.0
        assert angle_at(plan, 100.0) == pytest.approx(plan.target_angle)

    def test_zero_duration_completes_after_delay(self):
        plan = make_plan(duration=0.0)
        assert plan_progress(plan, 10.5) == 1.0

"""Machine configuration invariants and presets."""
import pytest

from fruitmachine.config import Settings
from fruitmachine.config_hash import get_config_hash
from fruitmachine.errors import ConfigurationError
from fruitmachine.logic.presets import (
    PRESET_NAMES,
    configured_machine,
    get_preset,
    load_machine_config,
)
from tests.conftest import make_config


STRIP = ["A", "B", "C"]
PAYOUTS = {"A": 10, "B": 5, "C": 2}
CENTER = [("center", [0, 0, 0], 1)]


class TestConfigurationInvariants:
    """Configuration violations are fatal at load time."""

    def test_valid_config_loads(self):
        config = make_config([STRIP] * 3, PAYOUTS, CENTER)
        assert config.reel_count == 3
        assert config.symbols["A"].payout == 10

    def test_unknown_symbol_on_reel_rejected(self):
        """A reel symbol missing from the symbol table must fail loading."""
        with pytest.raises(ConfigurationError, match="unknown symbols"):
            make_config([STRIP, STRIP, ["A", "B", "Q"]], PAYOUTS, CENTER)

    def test_duration_bounds_min_above_max_rejected(self):
        with pytest.raises(ConfigurationError, match="spin_duration_bounds"):
            make_config([STRIP] * 3, PAYOUTS, CENTER, spin_duration_bounds=(4.0, 3.0))

    def test_velocity_bounds_min_above_max_rejected(self):
        with pytest.raises(ConfigurationError, match="angular_velocity_bounds"):
            make_config([STRIP] * 3, PAYOUTS, CENTER, angular_velocity_bounds=(12, 11))

    def test_zero_velocity_rejected(self):
        with pytest.raises(ConfigurationError):
            make_config([STRIP] * 3, PAYOUTS, CENTER, angular_velocity_bounds=(0, 11))

    def test_equal_bounds_allowed(self):
        config = make_config(
            [STRIP] * 3,
            PAYOUTS,
            CENTER,
            spin_duration_bounds=(3.0, 3.0),
            angular_velocity_bounds=(9, 9),
        )
        assert config.spin_duration_bounds == (3.0, 3.0)

    def test_negative_spin_cost_rejected(self):
        with pytest.raises(ConfigurationError):
            make_config([STRIP] * 3, PAYOUTS, CENTER, spin_cost=-1)

    def test_zero_spin_cost_allowed(self):
        config = make_config([STRIP] * 3, PAYOUTS, CENTER, spin_cost=0)
        assert config.spin_cost == 0

    def test_win_line_offset_count_must_match_reels(self):
        with pytest.raises(ConfigurationError, match="one per reel"):
            make_config([STRIP] * 3, PAYOUTS, [("short", [0, 0], 1)])

    def test_duplicate_reel_ids_rejected(self):
        config = make_config([STRIP] * 3, PAYOUTS, CENTER)
        data = config.model_dump()
        data["reels"][1]["id"] = data["reels"][0]["id"]
        with pytest.raises(ConfigurationError, match="Duplicate reel ids"):
            load_machine_config(data)

    def test_symbol_key_must_match_id(self):
        config = make_config([STRIP] * 3, PAYOUTS, CENTER)
        data = config.model_dump()
        data["symbols"]["A"]["id"] = "B"
        with pytest.raises(ConfigurationError, match="does not match"):
            load_machine_config(data)

    def test_reel_shorter_than_three_rejected(self):
        with pytest.raises(ConfigurationError):
            make_config([["A", "B"]] * 3, PAYOUTS, CENTER)

    def test_config_is_immutable(self):
        config = make_config([STRIP] * 3, PAYOUTS, CENTER)
        with pytest.raises(Exception):
            config.spin_cost = 5


class TestPresets:
    """Built-in cabinets."""

    @pytest.mark.parametrize("name", sorted(PRESET_NAMES))
    def test_presets_are_valid(self, name: str):
        config = get_preset(name)
        assert config.reel_count == 5
        assert len(config.win_lines) == 6
        for reel in config.reels:
            assert len(reel.symbols) == 15

    def test_aurora_five_economy(self):
        config = get_preset("aurora_five")
        assert config.name == "Aurora Five"
        assert config.spin_cost == 1
        assert config.initial_credits == 50
        assert config.spin_duration_bounds == (2.5, 3.4)
        assert config.angular_velocity_bounds == (7, 11)
        assert config.symbols["diamond"].payout == 50
        assert [line.id for line in config.win_lines] == [
            "center", "top", "bottom", "v-down", "v-up", "zig",
        ]

    def test_skins_share_payouts(self):
        aurora = get_preset("aurora_five")
        bread = get_preset("breadwinner")
        assert [s.payout for s in aurora.symbols.values()] == [
            s.payout for s in bread.symbols.values()
        ]
        assert bread.symbols["symbol2"].label == "Croissant"

    def test_unknown_preset_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown machine preset"):
            get_preset("mega_reels")

    def test_settings_overrides(self):
        config = configured_machine(Settings(spin_cost=3, initial_credits=99))
        assert config.spin_cost == 3
        assert config.initial_credits == 99

    def test_settings_without_overrides_returns_preset(self):
        assert configured_machine(Settings()) == get_preset("aurora_five")


class TestConfigHash:
    def test_hash_is_stable(self):
        assert get_config_hash(get_preset("aurora_five")) == get_config_hash(
            get_preset("aurora_five")
        )

    def test_hash_changes_with_config(self):
        assert get_config_hash(get_preset("aurora_five")) != get_config_hash(
            get_preset("breadwinner")
        )

    def test_hash_length(self):
        assert len(get_config_hash(get_preset("aurora_five"))) == 16

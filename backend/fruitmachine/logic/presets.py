"""Built-in cabinet configurations and configuration loading."""
from typing import Any

from pydantic import ValidationError

from fruitmachine.config import Settings
from fruitmachine.errors import ConfigurationError
from fruitmachine.logic.models import MachineConfig


# Symbol payouts (base win for a full match on a x1 line)
AURORA_SYMBOLS: list[tuple[str, str, int]] = [
    ("cherry", "Cherry", 10),
    ("lemon", "Lemon", 8),
    ("plum", "Plum", 12),
    ("bell", "Bell", 16),
    ("seven", "Seven", 30),
    ("diamond", "Diamond", 50),
]

REEL_STRIPS: list[list[str]] = [
    ["cherry", "lemon", "plum", "bell", "seven", "diamond", "lemon", "plum",
     "cherry", "lemon", "plum", "bell", "seven", "diamond", "lemon"],
    ["plum", "lemon", "diamond", "cherry", "bell", "seven", "cherry", "lemon",
     "plum", "lemon", "diamond", "cherry", "bell", "seven", "cherry"],
    ["lemon", "bell", "plum", "diamond", "seven", "cherry", "bell", "plum",
     "lemon", "bell", "plum", "diamond", "seven", "cherry", "bell"],
    ["diamond", "plum", "cherry", "bell", "lemon", "seven", "lemon", "plum",
     "diamond", "plum", "cherry", "bell", "lemon", "seven", "lemon"],
    ["cherry", "seven", "diamond", "plum", "lemon", "bell", "plum", "diamond",
     "cherry", "seven", "diamond", "plum", "lemon", "bell", "plum"],
]

WIN_LINES: list[dict[str, Any]] = [
    {"id": "center", "offsets": [0, 0, 0, 0, 0], "payout_multiplier": 1},
    {"id": "top", "offsets": [-1, -1, -1, -1, -1], "payout_multiplier": 0.8},
    {"id": "bottom", "offsets": [1, 1, 1, 1, 1], "payout_multiplier": 0.8},
    {"id": "v-down", "offsets": [-1, 0, 0, 0, -1], "payout_multiplier": 1.2},
    {"id": "v-up", "offsets": [1, 0, 0, 0, 1], "payout_multiplier": 1.2},
    {"id": "zig", "offsets": [0, -1, 0, 1, 0], "payout_multiplier": 1.5},
]

# Alternative skins reuse the Aurora strips with generic ids symbol1..symbol6
SKIN_LABELS: dict[str, list[str]] = {
    "fruit_machine": ["Banana", "CashStack", "Cherry", "ChestGold", "Coin", "GoldBars"],
    "breadwinner": ["Cherry", "Croissant", "Donut", "Breadroll", "BirthdayCake", "Cupcake"],
}

PRESET_NAMES: dict[str, str] = {
    "aurora_five": "Aurora Five",
    "fruit_machine": "Fruit Machine",
    "breadwinner": "Breadwinner",
}


def _machine_data(preset: str) -> dict[str, Any]:
    """Raw configuration mapping for a preset."""
    if preset == "aurora_five":
        rename = {symbol_id: symbol_id for symbol_id, _, _ in AURORA_SYMBOLS}
        labels = [label for _, label, _ in AURORA_SYMBOLS]
    else:
        rename = {
            symbol_id: f"symbol{position + 1}"
            for position, (symbol_id, _, _) in enumerate(AURORA_SYMBOLS)
        }
        labels = SKIN_LABELS[preset]

    symbols = {}
    for (symbol_id, _, payout), label in zip(AURORA_SYMBOLS, labels):
        new_id = rename[symbol_id]
        symbols[new_id] = {"id": new_id, "label": label, "payout": payout}

    return {
        "name": PRESET_NAMES[preset],
        "reels": [
            {"id": f"reel-{index + 1}", "symbols": [rename[s] for s in strip]}
            for index, strip in enumerate(REEL_STRIPS)
        ],
        "symbols": symbols,
        "win_lines": WIN_LINES,
        "spin_cost": 1,
        "initial_credits": 50,
        "spin_duration_bounds": (2.5, 3.4),
        "angular_velocity_bounds": (7, 11),
    }


def load_machine_config(data: dict[str, Any] | MachineConfig) -> MachineConfig:
    """
    Validate a machine configuration.

    Raises:
        ConfigurationError: if any configuration invariant is violated
    """
    if isinstance(data, MachineConfig):
        return data
    try:
        return MachineConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid machine configuration: {e}") from e


def get_preset(name: str) -> MachineConfig:
    """Return a validated built-in configuration by preset name."""
    if name not in PRESET_NAMES:
        raise ConfigurationError(
            f"Unknown machine preset {name!r}. Available: {sorted(PRESET_NAMES)}"
        )
    return load_machine_config(_machine_data(name))


def configured_machine(settings: Settings) -> MachineConfig:
    """Preset selected by settings with the economy overrides applied."""
    config = get_preset(settings.machine_preset)
    overrides: dict[str, Any] = {}
    if settings.spin_cost is not None:
        overrides["spin_cost"] = settings.spin_cost
    if settings.initial_credits is not None:
        overrides["initial_credits"] = settings.initial_credits
    if not overrides:
        return config
    return load_machine_config({**config.model_dump(), **overrides})

"""Win line evaluation over settled reels."""
import math
from collections.abc import Sequence

from fruitmachine.logic.models import (
    MachineConfig,
    ReelRuntimeState,
    SpinResult,
    WinLine,
    WinLineResult,
)


# Partial (prefix) match multipliers by run length; 5 of 5 is a full match
PARTIAL_MATCH_MULTIPLIERS: dict[int, float] = {
    3: 0.35,
    4: 0.65,
}

MIN_PARTIAL_PAYOUT = 1


def round_half_up(value: float) -> int:
    """Round to nearest integer with .5 going up (builtin round() is banker's)."""
    return math.floor(value + 0.5)


def visible_symbol(reel: ReelRuntimeState, offset: int) -> str:
    """Symbol shown `offset` rows away from the reel's center, wrapping around the strip."""
    symbols = reel.config.symbols
    return symbols[(reel.current_index + offset) % len(symbols)]


def line_symbols(line: WinLine, reels: Sequence[ReelRuntimeState]) -> list[str]:
    """Visible symbols along a win line, one per reel."""
    return [visible_symbol(reel, line.offsets[index]) for index, reel in enumerate(reels)]


def prefix_run_length(symbols: Sequence[str]) -> int:
    """Count of consecutive symbols from reel 0 equal to the first one."""
    if not symbols:
        return 0
    count = 1
    for symbol in symbols[1:]:
        if symbol != symbols[0]:
            break
        count += 1
    return count


def evaluate_line(
    config: MachineConfig, line: WinLine, reels: Sequence[ReelRuntimeState]
) -> WinLineResult | None:
    """
    Score a single win line.

    Full match is checked first; otherwise only a prefix run starting at
    reel 0 with a multiplier in PARTIAL_MATCH_MULTIPLIERS pays.

    Returns None when the line pays nothing.
    """
    symbols = line_symbols(line, reels)
    if not symbols:
        return None

    first = symbols[0]
    definition = config.symbols.get(first)
    if definition is None:
        return None

    run = prefix_run_length(symbols)

    if run == len(symbols):
        payout = round_half_up(definition.payout * line.payout_multiplier)
    else:
        partial = PARTIAL_MATCH_MULTIPLIERS.get(run, 0)
        if partial <= 0:
            return None
        payout = max(
            MIN_PARTIAL_PAYOUT,
            round_half_up(definition.payout * line.payout_multiplier * partial),
        )

    if payout <= 0:
        return None

    return WinLineResult(line_id=line.id, symbol=first, payout=payout, match_length=run)


def evaluate_spin_result(
    config: MachineConfig, reels: Sequence[ReelRuntimeState]
) -> SpinResult:
    """
    Evaluate every configured win line against settled reel positions.

    Pure: no randomness, no mutation. Paying lines keep the configured
    win line order.
    """
    lines: list[WinLineResult] = []
    for line in config.win_lines:
        result = evaluate_line(config, line, reels)
        if result is not None:
            lines.append(result)

    return SpinResult(
        total_payout=sum(line.payout for line in lines),
        lines=tuple(lines),
    )

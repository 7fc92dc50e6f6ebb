#!/usr/bin/env python3
"""
Audit simulation for a fruit machine preset.

Runs headless spin cycles on a seeded session (reels settled instantly) and
writes a one-row CSV summary.

Usage:
    python -m scripts.audit_sim --rounds 100000 --seed AUDIT_2026 --out out/audit_aurora.csv
    python -m scripts.audit_sim --preset breadwinner --rounds 50000 --seed AUDIT_2026 --out out/audit_bread.csv
    python -m scripts.audit_sim --rounds 20000 --seed HOLD --hold-pattern 0,1 --out out/audit_hold.csv
"""
import argparse
import csv
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fruitmachine.config_hash import get_config_hash
from fruitmachine.logic.animator import ReelAnimator
from fruitmachine.logic.models import MachineConfig
from fruitmachine.logic.presets import PRESET_NAMES, get_preset
from fruitmachine.logic.rng import SeededRNG
from fruitmachine.logic.session import SlotSession


@dataclass
class SimulationStats:
    """Statistics accumulated during simulation."""
    rounds: int = 0
    total_wagered: int = 0
    total_won: int = 0
    wins: int = 0
    max_payout: int = 0
    line_hits: dict[str, int] = field(default_factory=dict)
    payouts: list[int] = field(default_factory=list)

    @property
    def rtp(self) -> float:
        return (self.total_won / self.total_wagered * 100) if self.total_wagered > 0 else 0.0

    @property
    def hit_freq(self) -> float:
        return (self.wins / self.rounds * 100) if self.rounds > 0 else 0.0


def get_timestamp_iso() -> str:
    """Get ISO 8601 UTC timestamp."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_hold_pattern(value: str | None) -> list[int]:
    """Parse '0,2' into reel positions held for every spin."""
    if not value:
        return []
    return [int(part) for part in value.split(",") if part.strip()]


def run_simulation(
    config: MachineConfig,
    rounds: int,
    seed_str: str,
    hold_pattern: list[int] | None = None,
    verbose: bool = False,
) -> SimulationStats:
    """
    Run headless simulation.

    Args:
        config: Machine configuration to audit
        rounds: Number of spin cycles
        seed_str: Seed string for reproducibility
        hold_pattern: Reel positions held for the whole run
        verbose: Print progress

    Returns:
        SimulationStats with aggregated results
    """
    # Bankroll covers every spin so the run never stalls on credits
    session = SlotSession(
        config,
        rng=SeededRNG(seed=seed_str),
        clock=lambda: 0.0,
        credits=rounds * config.spin_cost,
    )
    animator = ReelAnimator(session)
    for position in hold_pattern or []:
        session.toggle_hold(config.reels[position].id)

    stats = SimulationStats(line_hits={line.id: 0 for line in config.win_lines})
    progress_interval = max(1, rounds // 100)

    for round_count in range(rounds):
        if verbose and round_count % progress_interval == 0:
            pct = (round_count / rounds) * 100
            print(f"\rProgress: {pct:.1f}%", end="", flush=True)

        credits_before = session.credits
        if not session.request_spin():
            raise RuntimeError(f"Spin {round_count} was not granted (credits={credits_before})")
        animator.settle_all()

        result = session.last_result
        if result is None:
            raise RuntimeError(f"Spin {round_count} did not settle")
        stats.rounds += 1
        stats.total_wagered += config.spin_cost
        stats.total_won += result.total_payout
        stats.payouts.append(result.total_payout)
        if result.total_payout > 0:
            stats.wins += 1
        stats.max_payout = max(stats.max_payout, result.total_payout)
        for line in result.lines:
            stats.line_hits[line.line_id] += 1

    if verbose:
        print("\rProgress: 100.0%")

    return stats


def generate_csv(
    preset: str,
    config: MachineConfig,
    seed_str: str,
    stats: SimulationStats,
    output_path: str,
) -> dict[str, str]:
    """Write the audit row and return it."""
    avg_payout = stats.total_won / stats.rounds if stats.rounds > 0 else 0

    row = {
        "timestamp": get_timestamp_iso(),
        "config_hash": get_config_hash(config),
        "preset": preset,
        "rounds": str(stats.rounds),
        "seed": seed_str,
        "rtp": f"{stats.rtp:.4f}",
        "hit_freq": f"{stats.hit_freq:.4f}",
        "avg_payout": f"{avg_payout:.4f}",
        "max_payout": str(stats.max_payout),
    }
    for line_id, hits in stats.line_hits.items():
        rate = (hits / stats.rounds * 100) if stats.rounds > 0 else 0
        row[f"line_{line_id}_rate"] = f"{rate:.4f}"

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=row.keys())
        writer.writeheader()
        writer.writerow(row)

    print(f"CSV written to: {output_path}")
    return row


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Fruit machine audit simulation")
    parser.add_argument(
        "--preset",
        choices=sorted(PRESET_NAMES),
        default="aurora_five",
        help="Machine preset to simulate",
    )
    parser.add_argument("--rounds", type=int, required=True, help="Number of spins to simulate")
    parser.add_argument("--seed", type=str, required=True, help="Seed string for reproducibility")
    parser.add_argument("--out", type=str, required=True, help="Output CSV path")
    parser.add_argument(
        "--hold-pattern",
        type=str,
        default=None,
        help="Comma separated reel positions held for every spin, e.g. 0,1",
    )
    parser.add_argument("--verbose", action="store_true", help="Show progress")

    args = parser.parse_args()

    config = get_preset(args.preset)
    hold_pattern = parse_hold_pattern(args.hold_pattern)
    print(f"Running simulation: preset={args.preset}, rounds={args.rounds}, seed={args.seed}")
    print(f"Config hash: {get_config_hash(config)}")

    stats = run_simulation(
        config=config,
        rounds=args.rounds,
        seed_str=args.seed,
        hold_pattern=hold_pattern,
        verbose=args.verbose,
    )
    generate_csv(args.preset, config, args.seed, stats, args.out)

    print("\nSummary:")
    print(f"  Rounds: {stats.rounds}")
    print(f"  Total wagered: {stats.total_wagered}")
    print(f"  Total won: {stats.total_won}")
    print(f"  RTP: {stats.rtp:.4f}%")
    print(f"  Hit frequency: {stats.hit_freq:.4f}%")
    print(f"  Max payout: {stats.max_payout}")
    for line_id, hits in stats.line_hits.items():
        print(f"  Line {line_id}: {hits} hits")

    return 0


if __name__ == "__main__":
    sys.exit(main())

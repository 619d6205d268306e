"""
Shape Dunk Play-test — Evaluation Script

Play whole sessions with a scripted policy and report score, combo and
outcome statistics per preset.

Usage:
    python -m playtest.evaluate --policy aimed --episodes 20
    python -m playtest.evaluate --preset blitz --policy random --episodes 50
    python -m playtest.evaluate --preset all --verbose   # engine debug log via rich
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import numpy as np
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dunk_engine.config import ConfigError, load_presets
from playtest.display import ConsoleDisplay
from playtest.envs.swipe_match_env import SwipeMatchEnv

console = Console()

CONFIGS_DIR = Path(__file__).resolve().parent / "configs"
PRESETS_PATH = CONFIGS_DIR / "presets.yaml"
POLICIES = ("random", "aimed")


def load_session_presets(path: Path = PRESETS_PATH) -> list:
    """Load session presets from YAML."""
    return load_presets(path)


def evaluate_preset(
    preset: dict,
    n_episodes: int = 10,
    policy: str = "aimed",
    seed: int = 0,
    watch: bool = False,
) -> dict:
    """Play n_episodes full sessions under one preset.

    Returns dict with: avg_score, score_std, best_combo, throws, bonus/basic/miss/weak counts.
    """
    display = ConsoleDisplay(console=console) if watch else None
    env = SwipeMatchEnv(session_config=preset, display=display)
    env.action_space.seed(seed)

    scores = []
    best_combo = 0
    counts = {"bonus": 0, "basic": 0, "miss": 0, "weak": 0}
    throws = 0

    for i in range(n_episodes):
        _, info = env.reset(seed=seed + i)
        terminated = False
        while not terminated:
            rounds_before = info["rounds"]
            if policy == "random":
                action = env.action_space.sample()
            else:
                action = env.heuristic_action()
            _, _, terminated, _, info = env.step(action)
            throws += 1
            # A throw still in flight when time runs out never resolves
            if info["rounds"] > rounds_before:
                counts[info["outcome"]] += 1
                if info["weak_throw"]:
                    counts["weak"] += 1

        scores.append(info["score"])
        best_combo = max(best_combo, info["best_combo"])

    env.close()

    return {
        "avg_score": float(np.mean(scores)) if scores else 0.0,
        "score_std": float(np.std(scores)) if scores else 0.0,
        "max_score": int(np.max(scores)) if scores else 0,
        "best_combo": best_combo,
        "throws": throws,
        "episodes": n_episodes,
        **counts,
    }


def evaluate(
    preset_name: str = "standard",
    n_episodes: int = 10,
    policy: str = "aimed",
    seed: int = 0,
    watch: bool = False,
):
    """Main evaluation function."""
    console.print(f"\n[bold cyan]═══ Shape Dunk Evaluation ═══[/bold cyan]")
    console.print(f"  Policy: {policy}")

    try:
        presets = load_session_presets()
    except ConfigError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        return None

    if preset_name != "all":
        presets = [p for p in presets if p.get("name") == preset_name]
        if not presets:
            console.print(f"[red]Preset '{preset_name}' not found[/red]")
            return None

    console.print(f"  Episodes per preset: {n_episodes}")
    console.print(f"  Presets: {[p['name'] for p in presets]}\n")

    table = Table(title="Evaluation Results")
    table.add_column("Preset", style="cyan")
    table.add_column("Avg Score", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Best Combo", justify="right")
    table.add_column("Bonus", justify="right", style="green")
    table.add_column("Basic", justify="right", style="yellow")
    table.add_column("Miss", justify="right", style="red")
    table.add_column("Weak", justify="right", style="red")
    table.add_column("Throws", justify="right")

    all_results = {}
    for preset in presets:
        console.print(f"  Evaluating: {preset['name']}...")
        try:
            results = evaluate_preset(preset, n_episodes, policy, seed, watch)
        except ConfigError as exc:
            console.print(f"[red]  Skipping {preset['name']}: {exc}[/red]")
            continue
        all_results[preset["name"]] = results
        table.add_row(
            preset["name"],
            f"{results['avg_score']:.1f} ± {results['score_std']:.1f}",
            f"{results['max_score']}",
            f"{results['best_combo']}",
            f"{results['bonus']}",
            f"{results['basic']}",
            f"{results['miss']}",
            f"{results['weak']}",
            f"{results['throws']}",
        )

    console.print()
    console.print(table)
    console.print()
    return all_results


# ---------- CLI ----------
def main(argv=None):
    parser = argparse.ArgumentParser(description="Shape Dunk play-test evaluation")
    parser.add_argument("--preset", type=str, default="standard",
                        help="Preset name from configs/presets.yaml or 'all'")
    parser.add_argument("--episodes", type=int, default=10,
                        help="Number of sessions per preset")
    parser.add_argument("--policy", type=str, default="aimed", choices=POLICIES,
                        help="Scripted policy to play with")
    parser.add_argument("--seed", type=int, default=0,
                        help="Base seed; episode i uses seed + i")
    parser.add_argument("--watch", action="store_true",
                        help="Print status messages and game-over panels as they happen")
    parser.add_argument("--verbose", action="store_true",
                        help="Show engine debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    evaluate(
        preset_name=args.preset,
        n_episodes=args.episodes,
        policy=args.policy,
        seed=args.seed,
        watch=args.watch,
    )


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""CLI entry point for the table tennis simulation.

Usage:
    python main.py play [difficulty] [best_of] [points] [name1] [name2]
                                                          Launch the pygame game
    python main.py match [difficulty] [best_of] [seed]    AI vs AI match in text mode
    python main.py analyze                                Generate analysis charts
    python main.py test                                   Run all tests

Set TT_LOG_LEVEL=INFO (or DEBUG) to see set and point logging.
"""

import logging
import os
import random
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from tt_engine.errors import InvalidConfiguration
from tt_engine.types import Difficulty, Settings

DIFFICULTIES = [d.value for d in Difficulty]


def _arg(index, default=None):
    return sys.argv[index] if len(sys.argv) > index else default


def _settings_from_args() -> Settings:
    """Build Settings from `[difficulty] [best_of] [points]` arguments."""
    difficulty = _arg(2, "medium")
    if difficulty not in DIFFICULTIES:
        raise InvalidConfiguration(
            f"Unknown difficulty {difficulty!r}, choose from: {', '.join(DIFFICULTIES)}"
        )
    try:
        best_of = int(_arg(3, 5))
        points = int(_arg(4, 11)) if sys.argv[1] == "play" else 11
    except ValueError as e:
        raise InvalidConfiguration(f"Expected a number: {e}") from e
    return Settings(match_format=best_of, points_to_win=points, difficulty=difficulty)


def _names_from_args() -> tuple:
    """Player names from `play ... [name1] [name2]`, defaulting to Player 1/2."""
    return (_arg(5, "Player 1"), _arg(6, "Player 2"))


def cmd_play():
    """Launch the pygame game (you are player 1)."""
    settings = _settings_from_args()
    names = _names_from_args()
    print("Launching Table Tennis...")
    print("Controls: W/S=move  SPACE=start/pause  R=reset set  N=new game  Q=quit")
    print("Hold UP/DOWN to take over player 2 from the AI.")
    print("-" * 60)
    from tt_sim.visualizer import run_visualizer
    run_visualizer(settings, names=names)


def cmd_match():
    """Run an AI vs AI match (text mode) and print stats."""
    from tt_engine.ai_player import get_preset
    from tt_engine.game import simulate_match

    settings = _settings_from_args()
    try:
        seed = int(_arg(4, 42))
    except ValueError as e:
        raise InvalidConfiguration(f"Seed must be a number: {e}") from e

    print("=" * 60)
    print("  AI TABLE TENNIS MATCH")
    print("=" * 60)
    preset = get_preset(settings.difficulty)
    print(f"\n  Both paddles: {preset['label']} AI "
          f"(spd:{preset['speed']:.2f} acc:{preset['accuracy']:.0%})")
    print(f"  Best of {settings.match_format}, sets to {settings.points_to_win}, seed {seed}")
    print()

    result = simulate_match(settings, rng=random.Random(seed))
    m = result.match
    s = result.stats

    for record in m.sets_history:
        print(f"  Set {record.set_index}: {record.player1_score:2d} - {record.player2_score:2d}"
              f"  -> Player {record.winner}")

    print()
    if result.finished:
        print(f"  SETS: {m.sets[0]} - {m.sets[1]}")
        print(f"  WINNER: Player {m.winner}")
    else:
        print(f"  Stopped after {result.ticks} ticks without a winner")
    print()
    print(f"  Points played: {m.total_points}")
    print(f"  Avg rally length: {s['avg_rally_length']} hits")
    print(f"  Max rally length: {s['max_rally_length']} hits")
    print(f"  Top ball speed: {s['top_speed']:.2f} px/tick")
    print(f"  P1 points: {s['p1_points']}  |  P2 points: {s['p2_points']}")
    print()
    print("  Difficulties: " + ", ".join(DIFFICULTIES))
    print("  Usage: python main.py match [difficulty] [best_of] [seed]")
    print("=" * 60)


def cmd_analyze():
    """Generate all analysis charts."""
    print("Generating analysis charts...")
    print("-" * 60)
    from tt_sim.analysis import generate_all_charts
    output_dir = os.path.join(os.path.dirname(__file__), "output")
    paths = generate_all_charts(output_dir=output_dir)
    print(f"\nDone! {len(paths)} charts saved to {output_dir}/")


def cmd_test():
    """Run all tests."""
    import subprocess
    print("Running tests...")
    print("-" * 60)
    result = subprocess.run(
        [sys.executable, "-m", "pytest", "tests/", "-v"],
        cwd=os.path.dirname(os.path.abspath(__file__)),
    )
    sys.exit(result.returncode)


COMMANDS = {
    "play": cmd_play,
    "match": cmd_match,
    "analyze": cmd_analyze,
    "test": cmd_test,
}


def main():
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        print(__doc__)
        print("Available commands:")
        for name, func in COMMANDS.items():
            print(f"  {name:12s} {func.__doc__}")
        sys.exit(1)

    logging.basicConfig(
        level=os.environ.get("TT_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        COMMANDS[sys.argv[1]]()
    except InvalidConfiguration as e:
        print(f"ERROR: {e}")
        sys.exit(2)


if __name__ == "__main__":
    main()

"""Matplotlib analysis charts — rally speed, rally length by difficulty, set scores."""

import os
import random

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np

from tt_engine.ai_player import DIFFICULTY_PRESETS
from tt_engine.game import GameSession, simulate_match
from tt_engine.types import Difficulty, PaddleHit, Settings
from tt_engine import table

P1_COLOR = "#3498db"
P2_COLOR = "#e74c3c"
DIFFICULTY_COLORS = {
    Difficulty.EASY: "#28a745",
    Difficulty.MEDIUM: "#ffc107",
    Difficulty.HARD: "#dc3545",
}


def _style_chart(ax, title):
    """Apply dark theme styling to chart."""
    ax.set_facecolor("#0f0f1a")
    ax.set_title(title, color="#e0e0e0", fontsize=13, fontweight="bold", pad=12)
    ax.tick_params(colors="#888888", labelsize=9)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.spines["bottom"].set_color("#333333")
    ax.spines["left"].set_color("#333333")
    ax.xaxis.label.set_color("#aaaaaa")
    ax.yaxis.label.set_color("#aaaaaa")


def record_rally_speeds(seed=7, difficulty=Difficulty.HARD, max_ticks=5000):
    """Ball speed per tick over the first AI vs AI rally.

    Returns (speeds, hit_ticks) as numpy arrays.
    """
    session = GameSession(Settings(difficulty=difficulty), rng=random.Random(seed), ai_paddles=(1, 2))
    session.start()
    speeds = [session.snapshot().ball.speed]
    hit_ticks = []

    for tick in range(1, max_ticks + 1):
        events = session.advance()
        if any(isinstance(e, PaddleHit) for e in events):
            hit_ticks.append(tick)
        if session.rallies:
            break
        speeds.append(session.snapshot().ball.speed)

    return np.array(speeds), np.array(hit_ticks, dtype=int)


def chart_rally_speed(save_path=None, seed=7):
    """Chart 1: Ball speed over one rally.

    Every paddle hit multiplies the speed by SPEEDUP_PER_HIT until the cap.
    """
    speeds, hit_ticks = record_rally_speeds(seed=seed)

    fig, ax = plt.subplots(figsize=(8, 5))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, "Ball Speed Across a Rally")

    ax.plot(np.arange(len(speeds)), speeds, color="#4ecdc4", linewidth=2, label="Ball speed")
    for tick in hit_ticks:
        if tick < len(speeds):
            ax.axvline(x=tick, color="#555555", linewidth=0.8, alpha=0.6)

    ax.axhline(y=table.BALL_MAX_SPEED, color="#e94560", linestyle="--", linewidth=1.5, alpha=0.7)
    ax.text(0, table.BALL_MAX_SPEED + 0.1, "Speed cap", color="#e94560", fontsize=9)

    ax.set_xlabel("Tick")
    ax.set_ylabel("Speed (px / tick)")
    ax.set_ylim(0, table.BALL_MAX_SPEED * 1.2)
    ax.legend(facecolor="#1a1a2e", edgecolor="#333", labelcolor="#e0e0e0", fontsize=9)
    ax.grid(True, alpha=0.15)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def rally_lengths_by_difficulty(n_matches=3, seed=0):
    """Mean and spread of paddle hits per rally for each difficulty (AI vs AI)."""
    results = {}
    for difficulty in DIFFICULTY_PRESETS:
        hits = []
        for i in range(n_matches):
            settings = Settings(match_format=1, difficulty=difficulty)
            result = simulate_match(settings, rng=random.Random(seed + i))
            hits.extend(r.hits for r in result.rallies)
        arr = np.array(hits, dtype=float) if hits else np.zeros(1)
        results[difficulty] = (float(np.mean(arr)), float(np.std(arr)))
    return results


def chart_rally_length_by_difficulty(save_path=None, n_matches=3):
    """Chart 2: Average rally length per AI difficulty."""
    results = rally_lengths_by_difficulty(n_matches=n_matches)
    labels = [DIFFICULTY_PRESETS[d]["label"] for d in results]
    means = [results[d][0] for d in results]
    stds = [results[d][1] for d in results]
    colors = [DIFFICULTY_COLORS[d] for d in results]

    fig, ax = plt.subplots(figsize=(8, 5))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, "Rally Length by AI Difficulty")

    x = np.arange(len(labels))
    bars = ax.bar(x, means, yerr=stds, color=colors, alpha=0.85, capsize=6, ecolor="#aaaaaa")
    for bar, mean in zip(bars, means):
        ax.text(
            bar.get_x() + bar.get_width() / 2, bar.get_height() + 0.2,
            f"{mean:.1f}", ha="center", va="bottom", fontsize=9, color="#aaa",
        )

    ax.set_xticks(x)
    ax.set_xticklabels(labels)
    ax.set_ylabel("Paddle hits per rally")
    ax.grid(True, alpha=0.15, axis="y")

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def chart_set_scores(save_path=None, seed=42, settings=None):
    """Chart 3: Per-set score of one simulated match."""
    result = simulate_match(settings or Settings(), rng=random.Random(seed))
    history = result.match.sets_history

    fig, ax = plt.subplots(figsize=(8, 5))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, f"Set Scores (sets {result.match.sets[0]}-{result.match.sets[1]})")

    x = np.arange(len(history))
    width = 0.35
    p1 = [r.player1_score for r in history]
    p2 = [r.player2_score for r in history]
    ax.bar(x - width / 2, p1, width, color=P1_COLOR, label="Player 1", alpha=0.85)
    ax.bar(x + width / 2, p2, width, color=P2_COLOR, label="Player 2", alpha=0.85)

    ax.set_xticks(x)
    ax.set_xticklabels([f"Set {r.set_index}" for r in history])
    ax.set_ylabel("Points")
    ax.legend(facecolor="#1a1a2e", edgecolor="#333", labelcolor="#e0e0e0", fontsize=9)
    ax.grid(True, alpha=0.15, axis="y")

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def generate_all_charts(output_dir="output"):
    """Generate and save all charts. Returns the list of saved paths."""
    os.makedirs(output_dir, exist_ok=True)
    charts = [
        ("rally_speed.png", chart_rally_speed),
        ("rally_length_by_difficulty.png", chart_rally_length_by_difficulty),
        ("set_scores.png", chart_set_scores),
    ]

    paths = []
    for filename, chart_fn in charts:
        path = os.path.join(output_dir, filename)
        fig = chart_fn(save_path=path)
        plt.close(fig)
        print(f"  Saved: {path}")
        paths.append(path)
    return paths

"""Tests for the AI opponent."""

import random
import statistics

import pytest

from tt_engine.ai_player import DIFFICULTY_PRESETS, compute_ai_move, get_preset
from tt_engine.types import Ball, Difficulty, Paddle, Vec2
from tt_engine import table


def _paddle(y=150):
    return Paddle(player=2, x=765, y=y)


def test_presets_exist():
    """All three difficulties have speed, accuracy and reaction time."""
    assert set(DIFFICULTY_PRESETS) == {Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD}
    for preset in DIFFICULTY_PRESETS.values():
        assert "speed" in preset
        assert "accuracy" in preset
        assert "reaction_time" in preset
        assert 0 < preset["accuracy"] <= 1


def test_preset_values():
    assert get_preset(Difficulty.EASY)["speed"] == pytest.approx(0.05)
    assert get_preset(Difficulty.EASY)["accuracy"] == pytest.approx(0.70)
    assert get_preset(Difficulty.MEDIUM)["speed"] == pytest.approx(0.08)
    assert get_preset(Difficulty.MEDIUM)["accuracy"] == pytest.approx(0.85)
    assert get_preset(Difficulty.HARD)["speed"] == pytest.approx(0.12)
    assert get_preset(Difficulty.HARD)["accuracy"] == pytest.approx(0.95)


def test_harder_presets_are_faster_and_more_accurate():
    easy, medium, hard = (get_preset(d) for d in (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD))
    assert easy["speed"] < medium["speed"] < hard["speed"]
    assert easy["accuracy"] < medium["accuracy"] < hard["accuracy"]


def test_moves_toward_ball_below():
    """Paddle centre above the ball moves down."""
    paddle = _paddle(150)
    ball = Ball(pos=Vec2(700, 300))
    target = compute_ai_move(paddle, ball, Difficulty.MEDIUM, random.Random(1))
    # 100 px error * 0.08 = 8 px, jitter at most 3.75 px
    assert 150 + 8 - 3.75 <= target <= 150 + 8 + 3.75


def test_moves_toward_ball_above():
    paddle = _paddle(150)
    ball = Ball(pos=Vec2(700, 100))
    target = compute_ai_move(paddle, ball, Difficulty.MEDIUM, random.Random(1))
    assert target < 150


def test_does_not_modify_paddle():
    paddle = _paddle(150)
    compute_ai_move(paddle, Ball(pos=Vec2(700, 390)), Difficulty.HARD, random.Random(0))
    assert paddle.y == 150


def test_result_clamped_to_board():
    """Target never leaves [0, H - height]."""
    rng = random.Random(9)
    top = compute_ai_move(_paddle(0), Ball(pos=Vec2(700, 0)), Difficulty.MEDIUM, rng)
    assert top == 0

    high = table.BOARD_HEIGHT - table.PADDLE_HEIGHT
    for _ in range(100):
        bottom = compute_ai_move(_paddle(high), Ball(pos=Vec2(700, 399)), Difficulty.EASY, rng)
        assert 0 <= bottom <= high


def test_jitter_bounded_by_accuracy():
    """With the ball level with the paddle centre, only noise moves it."""
    rng = random.Random(4)
    for difficulty, preset in DIFFICULTY_PRESETS.items():
        bound = (1 - preset["accuracy"]) * table.AI_JITTER / 2
        for _ in range(200):
            target = compute_ai_move(_paddle(150), Ball(pos=Vec2(700, 200)), difficulty, rng)
            assert abs(target - 150) <= bound + 1e-9


def test_hard_tracks_faster_than_easy():
    """On average a hard AI closes more of the gap per tick."""
    rng = random.Random(12)
    ball = Ball(pos=Vec2(700, 300))
    easy = statistics.mean(compute_ai_move(_paddle(150), ball, Difficulty.EASY, rng) - 150 for _ in range(300))
    hard = statistics.mean(compute_ai_move(_paddle(150), ball, Difficulty.HARD, rng) - 150 for _ in range(300))
    assert easy == pytest.approx(5.0, abs=1.0)
    assert hard == pytest.approx(12.0, abs=0.5)
    assert hard > easy


def test_seeded_rng_is_deterministic():
    ball = Ball(pos=Vec2(700, 320))
    a = compute_ai_move(_paddle(), ball, Difficulty.EASY, random.Random(5))
    b = compute_ai_move(_paddle(), ball, Difficulty.EASY, random.Random(5))
    assert a == b


def test_accepts_difficulty_string():
    ball = Ball(pos=Vec2(700, 320))
    a = compute_ai_move(_paddle(), ball, "hard", random.Random(2))
    b = compute_ai_move(_paddle(), ball, Difficulty.HARD, random.Random(2))
    assert a == b


def test_unknown_difficulty_rejected():
    with pytest.raises(ValueError):
        get_preset("impossible")

"""AI opponent — a proportional controller that chases the ball's height.

Each tick the paddle closes a fixed fraction of the gap between its centre and
the ball. Less accurate presets add more tracking noise, which is what makes
them miss fast, steep returns.
"""

import random
from typing import Optional, Union

from tt_engine.types import Ball, Difficulty, Paddle
from tt_engine.physics import paddle_y_range
from tt_engine import table


# Difficulty presets
# reaction_time is in ticks and is not used by the movement formula yet.
DIFFICULTY_PRESETS = {
    Difficulty.EASY: {
        "label": "Easy",
        "speed": 0.05,
        "accuracy": 0.70,
        "reaction_time": 20,
    },
    Difficulty.MEDIUM: {
        "label": "Medium",
        "speed": 0.08,
        "accuracy": 0.85,
        "reaction_time": 15,
    },
    Difficulty.HARD: {
        "label": "Hard",
        "speed": 0.12,
        "accuracy": 0.95,
        "reaction_time": 8,
    },
}


def get_preset(difficulty: Union[Difficulty, str]) -> dict:
    return DIFFICULTY_PRESETS[Difficulty(difficulty)]


def compute_ai_move(
    paddle: Paddle,
    ball: Ball,
    difficulty: Union[Difficulty, str],
    rng: Optional[random.Random] = None,
    board_height: float = table.BOARD_HEIGHT,
) -> float:
    """Return the paddle's next top-edge y for this tick.

    Args:
        paddle: The AI-driven paddle (not modified).
        ball: Current ball state.
        difficulty: Preset key from DIFFICULTY_PRESETS.
        rng: Source of tracking noise; pass a seeded Random for replays.
        board_height: Used to clamp the result onto the board.
    """
    rng = rng or random.Random()
    preset = get_preset(difficulty)

    error = ball.pos.y - paddle.center_y
    move = error * preset["speed"]
    jitter = (rng.random() - 0.5) * (1 - preset["accuracy"]) * table.AI_JITTER

    low, high = paddle_y_range(paddle, board_height)
    return max(low, min(paddle.y + move + jitter, high))

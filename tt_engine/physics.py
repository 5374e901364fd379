"""Ball and paddle kinematics — wall bounces, paddle collisions, serves."""

import math
import random
from typing import Optional

from tt_engine.types import Ball, OutOfBounds, Paddle, Vec2
from tt_engine import table


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def step_ball(
    ball: Ball,
    dt: float = 1.0,
    board_width: float = table.BOARD_WIDTH,
    board_height: float = table.BOARD_HEIGHT,
) -> Optional[OutOfBounds]:
    """Advance the ball by dt ticks.

    Top and bottom walls reflect the Y velocity and the ball is clamped back
    inside the board. Returns OutOfBounds when the ball has fully crossed the
    left or right edge, naming the player who conceded.
    """
    ball.pos = ball.pos + ball.vel * dt

    r = ball.radius
    if ball.pos.y <= r:
        ball.vel.y = abs(ball.vel.y)
    elif ball.pos.y >= board_height - r:
        ball.vel.y = -abs(ball.vel.y)
    ball.pos.y = _clamp(ball.pos.y, r, board_height - r)

    if ball.pos.x < -r:
        return OutOfBounds(conceded=1)
    if ball.pos.x > board_width + r:
        return OutOfBounds(conceded=2)
    return None


def _overlaps(ball: Ball, paddle: Paddle) -> bool:
    """Circle vs rectangle test using the closest point on the paddle."""
    nearest_x = _clamp(ball.pos.x, paddle.x, paddle.x + paddle.width)
    nearest_y = _clamp(ball.pos.y, paddle.y, paddle.y + paddle.height)
    dx = ball.pos.x - nearest_x
    dy = ball.pos.y - nearest_y
    return dx * dx + dy * dy <= ball.radius * ball.radius


def _moving_toward(ball: Ball, paddle: Paddle) -> bool:
    if paddle.player == 1:
        return ball.vel.x < 0
    return ball.vel.x > 0


def resolve_paddle_collision(ball: Ball, paddle: Paddle) -> bool:
    """Bounce the ball off a paddle if they touch. Returns True on a hit.

    The outgoing angle depends on where the ball meets the paddle: the centre
    sends it straight back, the tips send it off at MAX_BOUNCE_ANGLE. Each hit
    speeds the ball up by SPEEDUP_PER_HIT, capped at ball.max_speed.
    """
    if not _moving_toward(ball, paddle) or not _overlaps(ball, paddle):
        return False

    half_height = paddle.height / 2
    relative_intersect = _clamp((ball.pos.y - paddle.center_y) / half_height, -1.0, 1.0)
    angle = relative_intersect * table.MAX_BOUNCE_ANGLE
    direction = 1 if paddle.player == 1 else -1

    new_speed = min(ball.speed * table.SPEEDUP_PER_HIT, ball.max_speed)
    ball.vel = Vec2(
        math.cos(angle) * new_speed * direction,
        math.sin(angle) * new_speed,
    )

    # Flush against the face so the next step cannot hit again
    if direction == 1:
        ball.pos.x = paddle.x + paddle.width + ball.radius
    else:
        ball.pos.x = paddle.x - ball.radius
    return True


def check_paddle_collisions(ball: Ball, paddle1: Paddle, paddle2: Paddle) -> Optional[int]:
    """Resolve at most one paddle hit per step, paddle 1 first."""
    if resolve_paddle_collision(ball, paddle1):
        return 1
    if resolve_paddle_collision(ball, paddle2):
        return 2
    return None


def paddle_y_range(paddle: Paddle, board_height: float = table.BOARD_HEIGHT) -> tuple[float, float]:
    return 0.0, max(0.0, board_height - paddle.height)


def place_paddle(paddle: Paddle, y: float, board_height: float = table.BOARD_HEIGHT) -> None:
    """Set the paddle's top edge, clamped onto the board."""
    low, high = paddle_y_range(paddle, board_height)
    paddle.y = _clamp(y, low, high)


def move_paddle(
    paddle: Paddle,
    direction: int,
    dt: float = 1.0,
    board_height: float = table.BOARD_HEIGHT,
) -> None:
    """Move up (-1) or down (+1) at paddle.speed."""
    if direction == 0:
        return
    place_paddle(paddle, paddle.y + direction * paddle.speed * dt, board_height)


def create_paddles(
    board_width: float = table.BOARD_WIDTH,
    board_height: float = table.BOARD_HEIGHT,
) -> tuple[Paddle, Paddle]:
    paddle1 = Paddle(player=1, x=table.PADDLE_MARGIN)
    paddle2 = Paddle(player=2, x=board_width - table.PADDLE_MARGIN - table.PADDLE_WIDTH)
    reset_paddles(paddle1, paddle2, board_height)
    return paddle1, paddle2


def reset_paddles(paddle1: Paddle, paddle2: Paddle, board_height: float = table.BOARD_HEIGHT) -> None:
    for paddle in (paddle1, paddle2):
        paddle.y = (board_height - paddle.height) / 2


def center_ball(
    ball: Ball,
    board_width: float = table.BOARD_WIDTH,
    board_height: float = table.BOARD_HEIGHT,
) -> None:
    """Park the ball at the centre of the board, not moving."""
    ball.pos = Vec2(board_width / 2, board_height / 2)
    ball.vel = Vec2(0.0, 0.0)


def serve_ball(
    ball: Ball,
    server: int,
    rng: Optional[random.Random] = None,
    board_width: float = table.BOARD_WIDTH,
    board_height: float = table.BOARD_HEIGHT,
) -> None:
    """Put the ball in play from the centre, heading away from the server."""
    rng = rng or random.Random()
    center_ball(ball, board_width, board_height)
    angle = (rng.random() - 0.5) * 2 * table.SERVE_ANGLE_RANGE
    direction = 1 if server == 1 else -1
    ball.vel = Vec2(
        math.cos(angle) * table.SERVE_SPEED * direction,
        math.sin(angle) * table.SERVE_SPEED,
    )

"""Tests for ball and paddle physics."""

import math
import random

import pytest

from tt_engine.types import Ball, OutOfBounds, Paddle, Vec2
from tt_engine.physics import (
    check_paddle_collisions,
    create_paddles,
    move_paddle,
    place_paddle,
    resolve_paddle_collision,
    serve_ball,
    step_ball,
)
from tt_engine import table


def test_ball_moves_by_velocity():
    """One tick moves the ball by its velocity."""
    ball = Ball(pos=Vec2(100, 200), vel=Vec2(3, 1))
    assert step_ball(ball) is None
    assert ball.pos.x == pytest.approx(103)
    assert ball.pos.y == pytest.approx(201)


def test_dt_scales_movement():
    """Half a tick moves the ball half as far."""
    ball = Ball(pos=Vec2(100, 200), vel=Vec2(3, 1))
    step_ball(ball, dt=0.5)
    assert ball.pos.x == pytest.approx(101.5)
    assert ball.pos.y == pytest.approx(200.5)


def test_top_wall_reflects_and_clamps():
    """Ball hitting the top wall bounces down and stays on the board."""
    ball = Ball(pos=Vec2(400, 10), vel=Vec2(0, -5))
    step_ball(ball)
    assert ball.vel.y == pytest.approx(5)
    assert ball.pos.y == pytest.approx(ball.radius)


def test_bottom_wall_reflects_and_clamps():
    """Ball hitting the bottom wall bounces up and stays on the board."""
    ball = Ball(pos=Vec2(400, 390), vel=Vec2(2, 5))
    step_ball(ball)
    assert ball.vel.y == pytest.approx(-5)
    assert ball.vel.x == pytest.approx(2)
    assert ball.pos.y == pytest.approx(table.BOARD_HEIGHT - ball.radius)


def test_out_left_concedes_player1():
    """Ball fully past the left edge is a point against player 1."""
    ball = Ball(pos=Vec2(0, 200), vel=Vec2(-9, 0))
    event = step_ball(ball)
    assert event == OutOfBounds(conceded=1)
    assert event.scorer == 2


def test_out_right_concedes_player2():
    """Ball fully past the right edge is a point against player 2."""
    ball = Ball(pos=Vec2(table.BOARD_WIDTH, 200), vel=Vec2(9, 0))
    event = step_ball(ball)
    assert event == OutOfBounds(conceded=2)
    assert event.scorer == 1


def test_ball_on_edge_is_not_out():
    """Ball must cross the edge by more than its radius to be out."""
    ball = Ball(pos=Vec2(-7, 200), vel=Vec2(-1, 0))
    assert step_ball(ball) is None


def test_centre_hit_returns_straight():
    """Hitting the middle of the paddle sends the ball straight back, 5% faster."""
    paddle = Paddle(player=1, x=20, y=150)
    ball = Ball(pos=Vec2(40, 200), vel=Vec2(-4, 0))

    assert resolve_paddle_collision(ball, paddle) is True
    assert ball.vel.x == pytest.approx(4 * 1.05)
    assert ball.vel.y == pytest.approx(0)
    # Flush against the paddle face
    assert ball.pos.x == pytest.approx(paddle.x + paddle.width + ball.radius)


def test_no_hit_when_moving_away():
    """A ball leaving the paddle is not hit again."""
    paddle = Paddle(player=1, x=20, y=150)
    ball = Ball(pos=Vec2(40, 200), vel=Vec2(4, 0))

    assert resolve_paddle_collision(ball, paddle) is False
    assert ball.vel.x == 4
    assert ball.pos.x == 40


def test_no_hit_when_not_touching():
    paddle = Paddle(player=1, x=20, y=150)
    ball = Ball(pos=Vec2(60, 200), vel=Vec2(-4, 0))
    assert resolve_paddle_collision(ball, paddle) is False


def test_tip_hit_uses_max_angle():
    """Hitting the bottom tip bounces at 60 degrees downward."""
    paddle = Paddle(player=1, x=20, y=150)
    ball = Ball(pos=Vec2(40, 250), vel=Vec2(-4, 0))

    assert resolve_paddle_collision(ball, paddle)
    angle = math.atan2(ball.vel.y, ball.vel.x)
    assert angle == pytest.approx(table.MAX_BOUNCE_ANGLE)


def test_corner_hit_is_clamped_to_max_angle():
    """A ball overlapping the corner from beyond the tip still bounces at 60 degrees."""
    paddle = Paddle(player=1, x=20, y=150)
    ball = Ball(pos=Vec2(40, 255), vel=Vec2(-4, 0))

    assert resolve_paddle_collision(ball, paddle)
    angle = math.atan2(ball.vel.y, ball.vel.x)
    assert angle == pytest.approx(table.MAX_BOUNCE_ANGLE)


def test_paddle2_returns_ball_left():
    """Player 2's paddle sends the ball back toward player 1."""
    paddle = Paddle(player=2, x=765, y=150)
    ball = Ball(pos=Vec2(760, 200), vel=Vec2(4, 0))

    assert resolve_paddle_collision(ball, paddle)
    assert ball.vel.x < 0
    assert ball.pos.x == pytest.approx(paddle.x - ball.radius)


def test_speed_is_capped():
    """Speed never exceeds max_speed after a hit."""
    paddle = Paddle(player=1, x=20, y=150)
    ball = Ball(pos=Vec2(40, 200), vel=Vec2(-7.9, 0), max_speed=8.0)

    resolve_paddle_collision(ball, paddle)
    assert ball.speed == pytest.approx(8.0)


def test_speed_non_decreasing_up_to_cap():
    """For any hit: new speed == min(old * 1.05, max) and never above the cap."""
    rng = random.Random(11)
    paddle = Paddle(player=1, x=20, y=150)

    for _ in range(200):
        speed = rng.uniform(0.5, 8.0)
        angle = rng.uniform(-1.0, 1.0)
        ball = Ball(
            pos=Vec2(40, rng.uniform(150, 250)),
            vel=Vec2(-abs(math.cos(angle)) * speed, math.sin(angle) * speed),
        )
        assert resolve_paddle_collision(ball, paddle)
        assert ball.speed <= ball.max_speed + 1e-9
        assert ball.speed >= speed - 1e-9
        assert ball.speed == pytest.approx(min(speed * table.SPEEDUP_PER_HIT, ball.max_speed))


def test_collision_checks_paddle1_first():
    """Only one paddle can resolve per step."""
    paddle1, paddle2 = create_paddles()
    ball = Ball(pos=Vec2(40, paddle1.center_y), vel=Vec2(-4, 0))
    assert check_paddle_collisions(ball, paddle1, paddle2) == 1

    ball = Ball(pos=Vec2(400, 200), vel=Vec2(-4, 0))
    assert check_paddle_collisions(ball, paddle1, paddle2) is None


def test_move_paddle_clamps_to_board():
    """Paddles stop at the board edges instead of leaving it."""
    paddle = Paddle(player=1, x=20, y=2)
    move_paddle(paddle, -1)
    assert paddle.y == 0

    paddle.y = table.BOARD_HEIGHT - paddle.height - 3
    move_paddle(paddle, 1)
    assert paddle.y == table.BOARD_HEIGHT - paddle.height


def test_place_paddle_clamps_out_of_range_target():
    paddle = Paddle(player=2, x=765, y=150)
    place_paddle(paddle, -50)
    assert paddle.y == 0
    place_paddle(paddle, 10_000)
    assert paddle.y == table.BOARD_HEIGHT - paddle.height


def test_paddle_stays_in_range_for_random_moves():
    """Paddle y stays within [0, H - height] whatever the inputs."""
    rng = random.Random(5)
    paddle1, _ = create_paddles()
    for _ in range(1000):
        move_paddle(paddle1, rng.choice([-1, 0, 1]), dt=rng.uniform(0.5, 3.0))
        assert 0 <= paddle1.y <= table.BOARD_HEIGHT - paddle1.height


def test_paddles_start_centred():
    paddle1, paddle2 = create_paddles()
    assert paddle1.x == table.PADDLE_MARGIN
    assert paddle2.x == table.BOARD_WIDTH - table.PADDLE_MARGIN - table.PADDLE_WIDTH
    assert paddle1.center_y == pytest.approx(table.BOARD_HEIGHT / 2)
    assert paddle2.center_y == pytest.approx(table.BOARD_HEIGHT / 2)


def test_serve_heads_away_from_server():
    """Player 1 serves right, player 2 serves left, within ±30 degrees."""
    rng = random.Random(42)
    for server, sign in ((1, 1), (2, -1)):
        for _ in range(50):
            ball = Ball()
            serve_ball(ball, server, rng)
            assert ball.pos.x == table.BOARD_WIDTH / 2
            assert ball.pos.y == table.BOARD_HEIGHT / 2
            assert ball.vel.x * sign > 0
            assert ball.speed == pytest.approx(table.SERVE_SPEED)
            assert abs(ball.vel.y) <= table.SERVE_SPEED * math.sin(table.SERVE_ANGLE_RANGE) + 1e-9


def test_serve_is_reproducible_with_seed():
    a, b = Ball(), Ball()
    serve_ball(a, 1, random.Random(3))
    serve_ball(b, 1, random.Random(3))
    assert a.vel == b.vel

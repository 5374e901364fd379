"""Referee rules — deuce, serve rotation and set wins.

All functions are pure: they read the current score and settings and return
new values, so any point in a set can be replayed from its score sequence.

Defaults follow ITTF rules:
- Set to 11, must win by 2
- Serve rotates every 2 points
- At deuce (10-10): serve rotates every point
"""

import math
from typing import Optional

from tt_engine.types import Score, ServeState, Settings


def is_deuce(score: Score, points_to_win: int) -> bool:
    """Both players are one point (or less) from the target."""
    threshold = points_to_win - 1
    return score.player1 >= threshold and score.player2 >= threshold


def on_point_scored(serve: ServeState, score: Score, settings: Settings) -> ServeState:
    """Serve state after a point. `score` already includes that point.

    Entering deuce restarts the service count, so the deuce cadence always
    begins fresh.
    """
    points = serve.points_in_service + 1
    deuce = is_deuce(score, settings.points_to_win)
    if deuce and not serve.deuce:
        points = 0

    interval = settings.deuce_serve_switch_points if deuce else settings.serve_switch_points
    server = serve.server
    if points >= interval:
        server = 2 if server == 1 else 1
        points = 0

    return ServeState(server=server, points_in_service=points, deuce=deuce)


def set_winner(score: Score, points_to_win: int) -> Optional[int]:
    """Winner of the set at this score, if any."""
    p1, p2 = score.player1, score.player2
    if p1 >= points_to_win and p1 - p2 >= 2:
        return 1
    if p2 >= points_to_win and p2 - p1 >= 2:
        return 2
    return None


def sets_to_win(match_format: int) -> int:
    """Sets needed to take a best-of-N match."""
    return math.ceil(match_format / 2)

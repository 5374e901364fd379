"""Game session — ties physics, AI, serve rules and the match together.

A GameSession is advanced one tick at a time by an outside loop (the pygame
visualizer, a test, or simulate_match). It never blocks and owns no timers:
pausing just means advance() stops doing anything.

    MENU --start()--> PLAYING <--toggle_pause()--> PAUSED
    PLAYING --(set won)--> SET_OVER --start()--> PLAYING
    PLAYING --(match won)--> GAME_OVER --new_game()--> MENU
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from tt_engine.ai_player import compute_ai_move
from tt_engine.errors import InvalidOperation
from tt_engine.match import Match
from tt_engine.physics import (
    center_ball,
    check_paddle_collisions,
    create_paddles,
    move_paddle,
    place_paddle,
    reset_paddles,
    serve_ball,
    step_ball,
)
from tt_engine.referee import is_deuce
from tt_engine.types import (
    Ball,
    BallView,
    InputState,
    MatchOver,
    MatchPhase,
    MatchState,
    PaddleHit,
    PaddleView,
    SessionPhase,
    SetOver,
    Settings,
    Snapshot,
)
from tt_engine import table

logger = logging.getLogger(__name__)


@dataclass
class RallyResult:
    """One finished rally (serve to point)."""
    winner: int
    hits: int        # paddle hits, serve excluded
    ticks: int
    top_speed: float


@dataclass
class MatchResult:
    """Outcome of a headless simulate_match() run."""
    match: MatchState
    rallies: list         # list[RallyResult]
    ticks: int
    finished: bool        # False if the tick budget ran out first
    stats: dict = field(default_factory=dict)


class GameSession:
    """One table, two paddles, one match.

    Args:
        settings: Match settings; defaults to best of 5, sets to 11.
        rng: Random source for serve angles and AI noise. Pass a seeded
            random.Random to make a whole match reproducible.
        ai_paddles: Players whose paddle the AI drives whenever no human
            input arrives for it on a tick. Defaults to player 2 only.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        ai_paddles: Iterable[int] = (2,),
        board_width: float = table.BOARD_WIDTH,
        board_height: float = table.BOARD_HEIGHT,
    ):
        self.rng = rng or random.Random()
        self.ai_paddles = frozenset(ai_paddles)
        self.board_width = board_width
        self.board_height = board_height

        self.match = Match(settings)
        self.ball = Ball()
        self.paddle1, self.paddle2 = create_paddles(board_width, board_height)
        self.phase = SessionPhase.MENU

        self.rallies: list[RallyResult] = []
        self._rally_hits = 0
        self._rally_ticks = 0
        self._rally_top_speed = 0.0
        self._listeners: list[Callable] = []

        center_ball(self.ball, board_width, board_height)

    @property
    def settings(self) -> Settings:
        return self.match.settings

    # --- Events ---

    def subscribe(self, listener: Callable) -> None:
        """Call listener(event) for every event, in the order they happen."""
        self._listeners.append(listener)

    def _emit(self, events: list) -> list:
        for event in events:
            for listener in self._listeners:
                listener(event)
        return events

    # --- Phase control ---

    def start(self) -> None:
        """Begin play from the menu, or move on after a finished set."""
        if self.phase == SessionPhase.GAME_OVER:
            raise InvalidOperation("Match is over; call new_game() first")
        if self.phase == SessionPhase.SET_OVER:
            self.match.start_next_set()
            reset_paddles(self.paddle1, self.paddle2, self.board_height)
        elif self.phase != SessionPhase.MENU:
            return
        self.phase = SessionPhase.PLAYING
        self._serve()
        logger.info("Set %d under way, P%d serving", self.match.current_set, self.match.serve.server)

    def toggle_pause(self) -> None:
        """Pause or resume. From the menu or a set break this starts play."""
        if self.phase == SessionPhase.PLAYING:
            self.phase = SessionPhase.PAUSED
        elif self.phase == SessionPhase.PAUSED:
            self.phase = SessionPhase.PLAYING
        elif self.phase in (SessionPhase.MENU, SessionPhase.SET_OVER):
            self.start()

    def reset(self) -> None:
        """Replay the current set from 0-0. Sets won and history are kept."""
        if self.phase == SessionPhase.GAME_OVER:
            raise InvalidOperation("Match is over; call new_game() instead")
        self.match.reset_set()
        self._reset_table()
        self.phase = SessionPhase.MENU
        logger.info("Set %d reset", self.match.current_set)

    def new_game(self, settings: Optional[Settings] = None) -> None:
        """Start a whole new match, optionally with new settings."""
        self.match.new_match(settings)
        self.rallies = []
        self._reset_table()
        self.phase = SessionPhase.MENU
        logger.info(
            "New game: best of %d, sets to %d, %s AI",
            self.settings.match_format, self.settings.points_to_win,
            self.settings.difficulty.value,
        )

    def handle_controls(self, inputs: InputState) -> None:
        """Apply the pause and reset actions of a key press."""
        if inputs.reset:
            self.reset()
        elif inputs.toggle_pause:
            self.toggle_pause()

    def _reset_table(self) -> None:
        center_ball(self.ball, self.board_width, self.board_height)
        reset_paddles(self.paddle1, self.paddle2, self.board_height)
        self._start_rally()

    def _serve(self) -> None:
        serve_ball(self.ball, self.match.serve.server, self.rng, self.board_width, self.board_height)
        self._start_rally()

    def _start_rally(self) -> None:
        self._rally_hits = 0
        self._rally_ticks = 0
        self._rally_top_speed = self.ball.speed

    # --- Tick ---

    def advance(self, dt: float = 1.0, inputs: Optional[InputState] = None) -> list:
        """Run one tick of play and return the events it produced.

        Does nothing unless the session is PLAYING.
        """
        if self.phase != SessionPhase.PLAYING:
            return []
        inputs = inputs or InputState()
        events: list = []

        for paddle in (self.paddle1, self.paddle2):
            if inputs.has_input(paddle.player):
                move_paddle(paddle, inputs.direction(paddle.player), dt, self.board_height)
            elif paddle.player in self.ai_paddles:
                target = compute_ai_move(
                    paddle, self.ball, self.settings.difficulty, self.rng, self.board_height,
                )
                place_paddle(paddle, target, self.board_height)

        self._rally_ticks += 1
        out = step_ball(self.ball, dt, self.board_width, self.board_height)
        if out is None:
            hitter = check_paddle_collisions(self.ball, self.paddle1, self.paddle2)
            if hitter is not None:
                self._rally_hits += 1
                self._rally_top_speed = max(self._rally_top_speed, self.ball.speed)
                events.append(PaddleHit(player=hitter, speed=self.ball.speed))
        else:
            events.extend(self._point_over(out.scorer))

        return self._emit(events)

    def _point_over(self, scorer: int) -> list:
        self.rallies.append(RallyResult(
            winner=scorer,
            hits=self._rally_hits,
            ticks=self._rally_ticks,
            top_speed=round(self._rally_top_speed, 3),
        ))
        events = self.match.score_point(scorer)

        if any(isinstance(e, MatchOver) for e in events):
            self.phase = SessionPhase.GAME_OVER
            center_ball(self.ball, self.board_width, self.board_height)
        elif any(isinstance(e, SetOver) for e in events):
            self.phase = SessionPhase.SET_OVER
            center_ball(self.ball, self.board_width, self.board_height)
        else:
            self._serve()
        return events

    # --- Views ---

    def snapshot(self) -> Snapshot:
        """Immutable copy of everything a renderer draws."""
        match = self.match
        return Snapshot(
            ball=BallView(
                x=self.ball.pos.x,
                y=self.ball.pos.y,
                radius=self.ball.radius,
                speed=self.ball.speed,
            ),
            paddle1=_paddle_view(self.paddle1),
            paddle2=_paddle_view(self.paddle2),
            score=match.score.as_tuple(),
            sets=(match.sets[0], match.sets[1]),
            current_set=match.current_set,
            server=match.serve.server,
            deuce=is_deuce(match.score, self.settings.points_to_win),
            phase=self.phase,
            match_phase=match.phase,
            sets_history=tuple(match.sets_history),
            total_points=match.total_points,
            match_winner=match.winner,
            rally_hits=self._rally_hits,
            board_width=self.board_width,
            board_height=self.board_height,
        )

    @property
    def stats(self) -> dict:
        return compute_match_stats(self.rallies)


def _paddle_view(paddle) -> PaddleView:
    return PaddleView(
        player=paddle.player,
        x=paddle.x,
        y=paddle.y,
        width=paddle.width,
        height=paddle.height,
    )


def compute_match_stats(rallies: list[RallyResult]) -> dict:
    """Rally statistics for a list of finished rallies."""
    hits = [r.hits for r in rallies]
    return {
        "p1_points": sum(1 for r in rallies if r.winner == 1),
        "p2_points": sum(1 for r in rallies if r.winner == 2),
        "total_rallies": len(rallies),
        "avg_rally_length": round(sum(hits) / max(len(hits), 1), 1),
        "max_rally_length": max(hits) if hits else 0,
        "total_ticks": sum(r.ticks for r in rallies),
        "top_speed": max((r.top_speed for r in rallies), default=0.0),
    }


def simulate_match(
    settings: Optional[Settings] = None,
    rng: Optional[random.Random] = None,
    max_ticks: int = 500_000,
) -> MatchResult:
    """Play a whole AI vs AI match without a display.

    Set breaks are skipped straight away. If max_ticks runs out before the
    match ends, the partial result is returned with finished=False.
    """
    session = GameSession(settings, rng=rng, ai_paddles=(1, 2))
    session.start()

    ticks = 0
    while session.phase != SessionPhase.GAME_OVER and ticks < max_ticks:
        if session.phase == SessionPhase.SET_OVER:
            session.start()
        session.advance()
        ticks += 1

    finished = session.match.phase == MatchPhase.MATCH_OVER
    if not finished:
        logger.warning("Match stopped after %d ticks without a winner", ticks)

    return MatchResult(
        match=session.match.state(),
        rallies=list(session.rallies),
        ticks=ticks,
        finished=finished,
        stats=session.stats,
    )

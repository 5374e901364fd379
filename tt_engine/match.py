"""Match state machine — points into sets, sets into a match.

    IN_SET --(set won)--> SET_OVER --start_next_set()--> IN_SET
    IN_SET --(deciding set won)--> MATCH_OVER (terminal until new_match())
"""

import logging
from typing import Optional

from tt_engine.errors import InvalidOperation
from tt_engine.referee import is_deuce, on_point_scored, set_winner, sets_to_win
from tt_engine.types import (
    MatchOver,
    MatchPhase,
    MatchState,
    PointScored,
    Score,
    ServeState,
    ServeSwitched,
    SetOver,
    SetRecord,
    Settings,
)

logger = logging.getLogger(__name__)


class Match:
    """Score, sets, history and serve for one match."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.new_match()

    def new_match(self, settings: Optional[Settings] = None) -> None:
        """Start over: clears scores, sets and the set history."""
        if settings is not None:
            self.settings = settings
        self.phase = MatchPhase.IN_SET
        self.score = Score()
        self.sets = [0, 0]
        self.sets_history: list[SetRecord] = []
        self.current_set = 1
        self.total_points = 0
        self.winner: Optional[int] = None
        self.serve = self._fresh_serve(1)
        self._set_first_server = 1

    def _fresh_serve(self, server: int) -> ServeState:
        # Deuce follows the score, so a 1-point set is in deuce from 0-0
        return ServeState(server=server, deuce=is_deuce(self.score, self.settings.points_to_win))

    def reset_set(self) -> None:
        """Replay the current set from 0-0, keeping sets, history and server."""
        if self.phase == MatchPhase.MATCH_OVER:
            raise InvalidOperation("Match is over; start a new match instead")
        self.score = Score()
        self.serve = self._fresh_serve(self.serve.server)
        self.phase = MatchPhase.IN_SET

    def score_point(self, player: int) -> list:
        """Award a point and return the events it caused, in order.

        Raises:
            InvalidOperation: if the set or match is over, or player is not 1 or 2.
        """
        if self.phase == MatchPhase.MATCH_OVER:
            raise InvalidOperation(f"Match already won by player {self.winner}")
        if self.phase == MatchPhase.SET_OVER:
            raise InvalidOperation("Set is over; call start_next_set() first")
        if player not in (1, 2):
            raise InvalidOperation(f"Invalid player: {player!r}")

        if player == 1:
            self.score.player1 += 1
        else:
            self.score.player2 += 1
        self.total_points += 1
        events: list = [PointScored(player=player, score=self.score.as_tuple())]

        previous_server = self.serve.server
        self.serve = on_point_scored(self.serve, self.score, self.settings)
        if self.serve.server != previous_server:
            events.append(ServeSwitched(new_server=self.serve.server))

        logger.debug(
            "Point to P%d: %d-%d (server P%d%s)",
            player, self.score.player1, self.score.player2,
            self.serve.server, ", deuce" if self.serve.deuce else "",
        )

        winner = set_winner(self.score, self.settings.points_to_win)
        if winner is not None:
            events.extend(self._end_set(winner))
        return events

    def _end_set(self, winner: int) -> list:
        record = SetRecord(
            set_index=self.current_set,
            player1_score=self.score.player1,
            player2_score=self.score.player2,
            winner=winner,
        )
        self.sets_history.append(record)
        self.sets[winner - 1] += 1
        events: list = [SetOver(
            winner=winner,
            set_index=record.set_index,
            scores=(record.player1_score, record.player2_score),
        )]
        logger.info(
            "Set %d to P%d (%d-%d), sets %d-%d",
            record.set_index, winner, record.player1_score, record.player2_score,
            self.sets[0], self.sets[1],
        )

        if self.sets[winner - 1] >= sets_to_win(self.settings.match_format):
            self.phase = MatchPhase.MATCH_OVER
            self.winner = winner
            events.append(MatchOver(winner=winner, final_sets=tuple(self.sets)))
            logger.info("Match to P%d, sets %d-%d", winner, self.sets[0], self.sets[1])
            return events

        # Next set: fresh score, the other player serves first
        self.current_set += 1
        self.score = Score()
        self._set_first_server = 2 if self._set_first_server == 1 else 1
        previous_server = self.serve.server
        self.serve = self._fresh_serve(self._set_first_server)
        if self.serve.server != previous_server:
            events.append(ServeSwitched(new_server=self.serve.server))
        self.phase = MatchPhase.SET_OVER
        return events

    def start_next_set(self) -> None:
        if self.phase != MatchPhase.SET_OVER:
            raise InvalidOperation(f"No finished set to move on from (phase: {self.phase.value})")
        self.phase = MatchPhase.IN_SET

    @property
    def is_over(self) -> bool:
        return self.phase == MatchPhase.MATCH_OVER

    def state(self) -> MatchState:
        """Immutable copy of the match progress."""
        return MatchState(
            sets=(self.sets[0], self.sets[1]),
            sets_history=tuple(self.sets_history),
            current_set=self.current_set,
            total_points=self.total_points,
            winner=self.winner,
        )

"""Core data types for the table tennis simulation."""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional

from tt_engine.errors import InvalidConfiguration
from tt_engine import table


@dataclass
class Vec2:
    """2D vector for position and velocity (board pixels, pixels per tick)."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vec2":
        return Vec2(self.x * scalar, self.y * scalar)

    def __rmul__(self, scalar: float) -> "Vec2":
        return self.__mul__(scalar)

    def magnitude(self) -> float:
        return (self.x**2 + self.y**2) ** 0.5

    def copy(self) -> "Vec2":
        return Vec2(self.x, self.y)


@dataclass
class Ball:
    """The ball. Speed never exceeds max_speed after a paddle hit."""
    pos: Vec2 = field(default_factory=Vec2)
    vel: Vec2 = field(default_factory=Vec2)
    radius: float = table.BALL_RADIUS
    max_speed: float = table.BALL_MAX_SPEED

    @property
    def speed(self) -> float:
        return self.vel.magnitude()


@dataclass
class Paddle:
    """A paddle. x is fixed, y is the top edge."""
    player: int  # 1 (left) or 2 (right)
    x: float
    y: float = 0.0
    width: float = table.PADDLE_WIDTH
    height: float = table.PADDLE_HEIGHT
    speed: float = table.PADDLE_SPEED

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2


@dataclass
class Score:
    """Points of each player in the current set."""
    player1: int = 0
    player2: int = 0

    def get(self, player: int) -> int:
        return self.player1 if player == 1 else self.player2

    def as_tuple(self) -> tuple[int, int]:
        return (self.player1, self.player2)


@dataclass(frozen=True)
class SetRecord:
    """A finished set. Never modified once appended to the history."""
    set_index: int
    player1_score: int
    player2_score: int
    winner: int


@dataclass(frozen=True)
class ServeState:
    """Who serves, and how many points they have served in the current turn."""
    server: int = 1
    points_in_service: int = 0
    deuce: bool = False


@dataclass(frozen=True)
class MatchState:
    """Read-only view of match progress."""
    sets: tuple[int, int] = (0, 0)
    sets_history: tuple[SetRecord, ...] = ()
    current_set: int = 1
    total_points: int = 0
    winner: Optional[int] = None


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class SessionPhase(Enum):
    """Control state of a GameSession (separate from the match)."""
    MENU = "menu"
    PLAYING = "playing"
    PAUSED = "paused"
    SET_OVER = "set_over"
    GAME_OVER = "game_over"


class MatchPhase(Enum):
    IN_SET = "in_set"
    SET_OVER = "set_over"
    MATCH_OVER = "match_over"


@dataclass(frozen=True)
class Settings:
    """Match settings. Validated on construction, fixed for a whole match."""
    match_format: int = 5  # best of N sets
    points_to_win: int = 11
    serve_switch_points: int = 2
    deuce_serve_switch_points: int = 1
    difficulty: Difficulty = Difficulty.MEDIUM

    def __post_init__(self):
        if isinstance(self.difficulty, str):
            try:
                object.__setattr__(self, "difficulty", Difficulty(self.difficulty.lower()))
            except ValueError:
                raise InvalidConfiguration(f"Unknown difficulty: {self.difficulty!r}") from None
        if not isinstance(self.difficulty, Difficulty):
            raise InvalidConfiguration(f"Unknown difficulty: {self.difficulty!r}")
        for name in ("match_format", "points_to_win", "serve_switch_points", "deuce_serve_switch_points"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
        if self.match_format < 1 or self.match_format % 2 == 0:
            raise InvalidConfiguration(
                f"match_format must be a positive odd number, got {self.match_format}"
            )
        if self.points_to_win < 1:
            raise InvalidConfiguration(
                f"points_to_win must be at least 1, got {self.points_to_win}"
            )
        if self.serve_switch_points < 1 or self.deuce_serve_switch_points < 1:
            raise InvalidConfiguration("serve switch intervals must be at least 1")

    def to_dict(self) -> dict:
        data = asdict(self)
        data["difficulty"] = self.difficulty.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        """Build settings from a plain dict, ignoring unknown keys."""
        known = cls.__dataclass_fields__
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class InputState:
    """Logical actions pressed during one tick."""
    p1_up: bool = False
    p1_down: bool = False
    p2_up: bool = False
    p2_down: bool = False
    toggle_pause: bool = False
    reset: bool = False

    def direction(self, player: int) -> int:
        """-1 (up), +1 (down) or 0 for the given player's paddle."""
        if player == 1:
            up, down = self.p1_up, self.p1_down
        else:
            up, down = self.p2_up, self.p2_down
        return int(down) - int(up)

    def has_input(self, player: int) -> bool:
        if player == 1:
            return self.p1_up or self.p1_down
        return self.p2_up or self.p2_down


# --- Events ---


@dataclass(frozen=True)
class OutOfBounds:
    """Ball left the board past a player's edge."""
    conceded: int  # player who missed

    @property
    def scorer(self) -> int:
        return 2 if self.conceded == 1 else 1


@dataclass(frozen=True)
class PaddleHit:
    player: int
    speed: float  # ball speed after the hit


@dataclass(frozen=True)
class PointScored:
    player: int
    score: tuple[int, int]


@dataclass(frozen=True)
class ServeSwitched:
    new_server: int


@dataclass(frozen=True)
class SetOver:
    winner: int
    set_index: int
    scores: tuple[int, int]


@dataclass(frozen=True)
class MatchOver:
    winner: int
    final_sets: tuple[int, int]


# --- Render snapshot ---


@dataclass(frozen=True)
class BallView:
    x: float
    y: float
    radius: float
    speed: float


@dataclass(frozen=True)
class PaddleView:
    player: int
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class Snapshot:
    """Everything a renderer needs for one frame."""
    ball: BallView
    paddle1: PaddleView
    paddle2: PaddleView
    score: tuple[int, int]
    sets: tuple[int, int]
    current_set: int
    server: int
    deuce: bool
    phase: SessionPhase
    match_phase: MatchPhase
    sets_history: tuple[SetRecord, ...]
    total_points: int
    match_winner: Optional[int]
    rally_hits: int
    board_width: float
    board_height: float

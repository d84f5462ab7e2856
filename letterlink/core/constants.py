"""Shared constants and enumerations for the letter-link engine."""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum



class GameOverType(int, Enum):
    """How a session ended."""

    NORMAL = 1
    STEPS_EXCEEDED = 2
    TIME_EXCEEDED = 3


class SessionState(str, Enum):
    """States of the game session state machine."""

    IDLE = "IDLE"
    PLAYING = "PLAYING"
    SELECTING = "SELECTING"
    RESOLVING = "RESOLVING"
    GAME_OVER = "GAME_OVER"


class AnimationKind(str, Enum):
    """Outcome a pending animation acknowledgment will finalize."""

    CLEAR = "CLEAR"
    SHAKE = "SHAKE"


class NoticeKind(str, Enum):
    """Advisory, non-blocking notices surfaced to the presentation layer."""

    DEADLOCK_RESHUFFLE = "DEADLOCK_RESHUFFLE"
    DEADLOCK_NO_CREDITS = "DEADLOCK_NO_CREDITS"
    BOARD_REGENERATED = "BOARD_REGENERATED"


ALPHABET: str = string.ascii_lowercase
MAX_DISTINCT_PAIRS: int = len(ALPHABET)

# Edge score is EDGE_SCORE_BASE minus the distance to the nearest border line.
EDGE_SCORE_BASE: int = 10
OCCUPANT_ID_RANGE: int = 1000

GENERATION_OUTER_ATTEMPTS: int = 100
GENERATION_INNER_ATTEMPTS: int = 30
GENERATION_EDGE_PRIORITY_ATTEMPTS: int = 15

RESHUFFLE_EDGE_PRIORITY_ATTEMPTS: int = 50
RESHUFFLE_SPREAD_ATTEMPTS: int = 50
RESHUFFLE_UNIFORM_ATTEMPTS: int = 100

# Search nodes one solvability check may explore during generation or reshuffling.
SEARCH_NODE_BUDGET: int = 20_000

DEFAULT_PLAY_ROWS: int = 3
DEFAULT_PLAY_COLS: int = 4
DEFAULT_INITIAL_TIME: int = 120
DEFAULT_MAX_STEPS: int = 6
DEFAULT_HINT_STEP: int = 5
DEFAULT_RESHUFFLE_CREDITS: int = 5
DEFAULT_MATCH_SCORE: int = 100
DEFAULT_TARGET_LETTER: str = "A"
TICK_INTERVAL_MS: int = 1000


@dataclass(frozen=True)
class Bounds:
    """Simple rectangle bounds helper."""

    rows: int
    cols: int

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def is_border(self, row: int, col: int) -> bool:
        return row in (0, self.rows - 1) or col in (0, self.cols - 1)

"""Turn-, step- and time-limited game session.

A session owns one board and drives it through selection, match
resolution, deadlock recovery, hinting and termination. Match outcomes are
two-phase: the session proposes an outcome by emitting an
:class:`AnimationTicket`, and the presentation layer calls
``ticket.resolve()`` once its animation is done. Clicks are ignored while a
ticket is pending.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from ..core.constants import (
    DEFAULT_HINT_STEP,
    DEFAULT_INITIAL_TIME,
    DEFAULT_MATCH_SCORE,
    DEFAULT_MAX_STEPS,
    DEFAULT_PLAY_COLS,
    DEFAULT_PLAY_ROWS,
    DEFAULT_RESHUFFLE_CREDITS,
    DEFAULT_TARGET_LETTER,
    AnimationKind,
    GameOverType,
    NoticeKind,
    SessionState,
)
from ..core.exceptions import ConfigurationError, PreconditionError
from ..core.models import Position, TileRef, letters_match
from ..engine.connectivity import can_connect
from ..engine.generator import GeneratorConfig, MapGenerator
from ..engine.grid import GridConfig, LetterGrid
from ..engine.reshuffle import ReshuffleConfig, ReshuffleEngine
from ..engine.solver import SolvabilityVerifier, default_verifier, first_match, is_deadlocked
from ..utils.logger import get_logger
from .events import ListenerGroup, SessionListener
from .scheduler import Countdown, ManualScheduler, Scheduler

LOGGER = get_logger(__name__)


@dataclass
class SessionConfig:
    play_rows: int = DEFAULT_PLAY_ROWS
    play_cols: int = DEFAULT_PLAY_COLS
    initial_time: int = DEFAULT_INITIAL_TIME
    max_steps: int = DEFAULT_MAX_STEPS
    hint_step: int = DEFAULT_HINT_STEP
    reshuffle_credits: int = DEFAULT_RESHUFFLE_CREDITS
    match_score: int = DEFAULT_MATCH_SCORE
    target_letter: str = DEFAULT_TARGET_LETTER
    auto_acknowledge: bool = False
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.initial_time < 1:
            raise ConfigurationError("initial_time must be at least one second")
        if self.max_steps < 1:
            raise ConfigurationError("max_steps must be positive")
        if self.reshuffle_credits < 0:
            raise ConfigurationError("reshuffle_credits cannot be negative")
        self.target_letter = _checked_letter(self.target_letter)

    def to_grid_config(self) -> GridConfig:
        return GridConfig(play_rows=self.play_rows, play_cols=self.play_cols, rng_seed=self.seed)

    def to_generator_config(self) -> GeneratorConfig:
        return GeneratorConfig(play_rows=self.play_rows, play_cols=self.play_cols, seed=self.seed)

    def to_reshuffle_config(self) -> ReshuffleConfig:
        return ReshuffleConfig(seed=self.seed)


class AnimationTicket:
    """Pending acknowledgment for a proposed match outcome.

    ``resolve()`` finalizes the outcome once; ``cancel()`` drops it. Both are
    no-ops on a ticket that is no longer pending.
    """

    def __init__(
        self,
        kind: AnimationKind,
        cells: Sequence[TileRef],
        path: Sequence[Position],
        on_resolve: Callable[["AnimationTicket"], None],
    ) -> None:
        self.kind = kind
        self.cells: Tuple[TileRef, ...] = tuple(cells)
        self.path: Tuple[Position, ...] = tuple(path)
        self._on_resolve = on_resolve
        self.resolved = False
        self.cancelled = False

    @property
    def pending(self) -> bool:
        return not (self.resolved or self.cancelled)

    def resolve(self) -> bool:
        if not self.pending:
            return False
        self.resolved = True
        self._on_resolve(self)
        return True

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        status = "pending" if self.pending else ("resolved" if self.resolved else "cancelled")
        return f"AnimationTicket({self.kind.value}, {[t.position for t in self.cells]}, {status})"


class GameSession:
    """Single-player session; not meant for concurrent callers."""

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        scheduler: Optional[Scheduler] = None,
        listeners: Sequence[SessionListener] = (),
        generator: Optional[MapGenerator] = None,
        reshuffler: Optional[ReshuffleEngine] = None,
        verifier: Optional[SolvabilityVerifier] = None,
    ) -> None:
        self.config = config or SessionConfig()
        self.rng = random.Random(self.config.seed)
        self.scheduler = scheduler or ManualScheduler()
        self.listeners = ListenerGroup(listeners)
        verifier = verifier or default_verifier()
        self.generator = generator or MapGenerator(
            self.config.to_generator_config(), verifier=verifier, rng=self.rng
        )
        self.reshuffler = reshuffler or ReshuffleEngine(
            self.config.to_reshuffle_config(),
            generator=self.generator,
            verifier=verifier,
            rng=self.rng,
        )
        self.countdown = Countdown(self.scheduler, self._tick)

        self.grid: LetterGrid = LetterGrid(self.config.to_grid_config())
        self._target_letter = self.config.target_letter
        self._active = False
        self._game_over_type: Optional[GameOverType] = None
        self._selection: Optional[TileRef] = None
        self._pending: Optional[AnimationTicket] = None
        self._hint: Tuple[TileRef, ...] = ()
        self._score = 0
        self._steps = 0
        self._time_left = self.config.initial_time
        self._reshuffle_credits = self.config.reshuffle_credits
        self._remain = 0

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def add_listener(self, listener: SessionListener) -> None:
        self.listeners.add(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        self.listeners.remove(listener)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        if self._game_over_type is not None:
            return SessionState.GAME_OVER
        if not self._active:
            return SessionState.IDLE
        if self._pending is not None:
            return SessionState.RESOLVING
        if self._selection is not None:
            return SessionState.SELECTING
        return SessionState.PLAYING

    @property
    def score(self) -> int:
        return self._score

    @property
    def steps(self) -> int:
        return self._steps

    @property
    def time_left(self) -> int:
        return self._time_left

    @property
    def reshuffle_credits(self) -> int:
        return self._reshuffle_credits

    @property
    def remain(self) -> int:
        return self._remain

    @property
    def selection(self) -> Optional[TileRef]:
        return self._selection

    @property
    def hint(self) -> Tuple[TileRef, ...]:
        return self._hint

    @property
    def pending_animation(self) -> Optional[AnimationTicket]:
        return self._pending

    @property
    def game_over_type(self) -> Optional[GameOverType]:
        return self._game_over_type

    @property
    def target_letter(self) -> str:
        return self._target_letter

    def get_target_letter(self) -> str:
        return self._target_letter

    def set_target_letter(self, letter: str) -> None:
        """Takes effect on the next start or restart."""

        self._target_letter = _checked_letter(letter)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        LOGGER.info("Starting session (target letter '%s')", self._target_letter)
        self._begin()

    def restart(self) -> None:
        LOGGER.info("Restarting session")
        self._begin()

    def destroy(self) -> None:
        self.countdown.stop()
        self._cancel_pending()
        self._active = False
        self._selection = None
        self._hint = ()
        LOGGER.debug("Session destroyed")

    def _begin(self) -> None:
        self.countdown.stop()
        self._cancel_pending()
        self.grid = self.generator.generate(self._target_letter)
        self._active = True
        self._game_over_type = None
        self._selection = None
        self._hint = ()
        self._score = 0
        self._steps = 0
        self._time_left = self.config.initial_time
        self._reshuffle_credits = self.config.reshuffle_credits
        self._remain = self.grid.occupied_count()

        self.listeners.emit("on_score_changed", self._score)
        self.listeners.emit("on_steps_changed", self._steps)
        self.listeners.emit("on_time_changed", self._time_left)
        self.listeners.emit("on_selection_changed", None)
        self.listeners.emit("on_map_changed", self.grid)
        self.countdown.start()

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def handle_cell_click(self, row: int, col: int) -> None:
        if self.state not in (SessionState.PLAYING, SessionState.SELECTING):
            LOGGER.debug("Ignoring click at (%d,%d) while %s", row, col, self.state.value)
            return
        if self._remain <= 0 or not self.grid.in_play_area(row, col):
            return

        self._clear_hint()
        if self.grid.is_empty(row, col):
            return

        position = (row, col)
        if self._selection is not None and self._selection.position == position:
            self._set_selection(None)
            return
        if self._selection is None:
            self._set_selection(self.grid.tile(row, col))
            return

        first = self._selection.position
        if not letters_match(self.grid.symbol_at(first), self.grid.symbol_at(position)):
            self._set_selection(self.grid.tile(row, col))
            return

        path = can_connect(self.grid, first, position)
        if path:
            self._propose_clear(first, position, path)
        else:
            self._propose_shake(first, position)

    def request_reshuffle(self) -> bool:
        """Spend one reshuffle credit; ``False`` when none is left or play is not open."""

        if self.state not in (SessionState.PLAYING, SessionState.SELECTING):
            return False
        if self._reshuffle_credits <= 0 or self.grid.occupied_count() == 0:
            return False
        self._reshuffle_credits -= 1
        self._clear_hint()
        self._set_selection(None)
        self._reshuffle_board()
        return True

    def _set_selection(self, tile: Optional[TileRef]) -> None:
        self._selection = tile
        self.listeners.emit("on_selection_changed", tile)

    # ------------------------------------------------------------------
    # Two-phase match resolution
    # ------------------------------------------------------------------
    def _propose_clear(self, first: Position, second: Position, path: List[Position]) -> None:
        self._score += self.config.match_score
        self._remain -= 2
        ticket = AnimationTicket(
            AnimationKind.CLEAR, self.grid.tiles([first, second]), path, self._finish_animation
        )
        self._set_selection(None)
        self._pending = ticket
        self.listeners.emit("on_score_changed", self._score)
        self.listeners.emit("on_animation_start", ticket)
        self._auto_acknowledge(ticket)

    def _propose_shake(self, first: Position, second: Position) -> None:
        ticket = AnimationTicket(
            AnimationKind.SHAKE, self.grid.tiles([first, second]), (), self._finish_animation
        )
        self._pending = ticket
        self.listeners.emit("on_shake_effect", ticket.cells, ticket)
        self._auto_acknowledge(ticket)

    def _auto_acknowledge(self, ticket: AnimationTicket) -> None:
        if self.config.auto_acknowledge and ticket.pending:
            ticket.resolve()

    def _finish_animation(self, ticket: AnimationTicket) -> None:
        if ticket is not self._pending or self.state != SessionState.RESOLVING:
            return
        self._pending = None

        if ticket.kind == AnimationKind.CLEAR:
            if any(tile.letter.upper() == self._target_letter for tile in ticket.cells):
                self.listeners.emit("on_target_letter_cleared")
            for tile in ticket.cells:
                self.grid.clear(tile.position)
            self.listeners.emit("on_map_changed", self.grid)
        else:
            self._set_selection(None)
            self.listeners.emit("on_shake_effect", (), None)

        self._advance_step()

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    # ------------------------------------------------------------------
    # Steps, deadlocks, hints
    # ------------------------------------------------------------------
    def _advance_step(self) -> None:
        self._steps += 1
        self.listeners.emit("on_steps_changed", self._steps)

        if self._remain <= 0:
            self._game_over(GameOverType.NORMAL)
            return
        if self._steps >= self.config.max_steps:
            self._game_over(GameOverType.STEPS_EXCEEDED)
            return

        self._recover_from_deadlock()
        if self._steps == self.config.hint_step and self._remain > 0:
            self._show_hint()

    def _recover_from_deadlock(self) -> None:
        if not is_deadlocked(self.grid):
            return
        if self._reshuffle_credits <= 0:
            LOGGER.warning("Board is deadlocked and no reshuffle credits remain")
            self.listeners.emit(
                "on_notice",
                NoticeKind.DEADLOCK_NO_CREDITS,
                "No moves left; reshuffle manually",
            )
            return
        self._reshuffle_credits -= 1
        LOGGER.info("Deadlock detected; auto-reshuffling (%d credits left)", self._reshuffle_credits)
        self.listeners.emit("on_notice", NoticeKind.DEADLOCK_RESHUFFLE, "Deadlock, auto-reshuffling")
        self._reshuffle_board()

    def _reshuffle_board(self) -> None:
        if self.grid.occupied_count() == 0:
            raise PreconditionError("Reshuffle requested on an empty board")
        outcome = self.reshuffler.reshuffle(self.grid)
        if outcome.forced:
            self.listeners.emit(
                "on_notice", NoticeKind.BOARD_REGENERATED, "Board regeneration forced"
            )
        self._remain = self.grid.occupied_count()
        self.listeners.emit("on_map_changed", self.grid)

    def _show_hint(self) -> None:
        match = first_match(self.grid)
        if match is None:
            return
        self._hint = tuple(self.grid.tiles([match.first, match.second]))
        self.listeners.emit("on_hint", self._hint)

    def _clear_hint(self) -> None:
        if self._hint:
            self._hint = ()
            self.listeners.emit("on_hint", ())

    # ------------------------------------------------------------------
    # Countdown and termination
    # ------------------------------------------------------------------
    def _tick(self) -> None:
        if self.state in (SessionState.IDLE, SessionState.GAME_OVER):
            return
        self._time_left -= 1
        self.listeners.emit("on_time_changed", self._time_left)
        if self._time_left <= 0:
            self._game_over(GameOverType.TIME_EXCEEDED)

    def _game_over(self, kind: GameOverType) -> None:
        if self._game_over_type is not None:
            return
        self._game_over_type = kind
        self.countdown.stop()
        self._cancel_pending()
        self._selection = None
        LOGGER.info("Game over: %s with score %d", kind.name, self._score)
        self.listeners.emit("on_game_over", kind, self._score)


def _checked_letter(letter: str) -> str:
    if not isinstance(letter, str) or len(letter) != 1 or not letter.isascii() or not letter.isalpha():
        raise PreconditionError(f"Target letter must be a single ASCII letter, got {letter!r}")
    return letter.upper()

"""Listener interface through which a session reports state changes.

The presentation layer subclasses :class:`SessionListener` and overrides
the hooks it cares about. Hooks may fire repeatedly with the same values and
must be handled idempotently.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence

from ..core.constants import GameOverType, NoticeKind
from ..core.models import TileRef
from ..utils.logger import get_logger

if TYPE_CHECKING:
    from ..engine.grid import LetterGrid
    from .game import AnimationTicket


LOGGER = get_logger(__name__)


class SessionListener:
    """No-op base for session observers."""

    def on_score_changed(self, score: int) -> None:
        pass

    def on_time_changed(self, time_left: int) -> None:
        pass

    def on_steps_changed(self, steps: int) -> None:
        pass

    def on_selection_changed(self, selection: Optional[TileRef]) -> None:
        pass

    def on_map_changed(self, grid: LetterGrid) -> None:
        pass

    def on_game_over(self, kind: GameOverType, score: int) -> None:
        pass

    def on_animation_start(self, ticket: AnimationTicket) -> None:
        """A match was accepted; play the link animation, then ``ticket.resolve()``."""

    def on_shake_effect(self, cells: Sequence[TileRef], ticket: Optional[AnimationTicket]) -> None:
        """Matching letters could not be linked; shake, then ``ticket.resolve()``.

        Fired again with no cells and no ticket once the shake is resolved.
        """

    def on_hint(self, cells: Sequence[TileRef]) -> None:
        """Highlight ``cells``; an empty sequence clears the hint."""

    def on_target_letter_cleared(self) -> None:
        pass

    def on_notice(self, kind: NoticeKind, message: str) -> None:
        pass


class ListenerGroup:
    """Fans each event out to every registered listener.

    A failing listener is logged and skipped so one broken observer cannot
    stall the session.
    """

    def __init__(self, listeners: Sequence[SessionListener] = ()) -> None:
        self._listeners: List[SessionListener] = list(listeners)

    def add(self, listener: SessionListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def __len__(self) -> int:
        return len(self._listeners)

    def emit(self, hook: str, *args) -> None:
        for listener in list(self._listeners):
            try:
                getattr(listener, hook)(*args)
            except Exception:
                LOGGER.exception("Listener %r failed in %s", listener, hook)


class LoggingListener(SessionListener):
    """Mirrors session events into the log, for headless runs and debugging."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or get_logger("letterlink.events")

    def on_score_changed(self, score: int) -> None:
        self.logger.debug("score=%d", score)

    def on_steps_changed(self, steps: int) -> None:
        self.logger.debug("steps=%d", steps)

    def on_time_changed(self, time_left: int) -> None:
        self.logger.debug("time_left=%d", time_left)

    def on_game_over(self, kind: GameOverType, score: int) -> None:
        self.logger.info("Game over: %s (score %d)", kind.name, score)

    def on_hint(self, cells: Sequence[TileRef]) -> None:
        if cells:
            self.logger.info(
                "Hint: %s", ", ".join(f"{t.letter}@({t.row},{t.col})" for t in cells)
            )

    def on_notice(self, kind: NoticeKind, message: str) -> None:
        self.logger.warning("%s: %s", kind.value, message)

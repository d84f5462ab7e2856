"""CLI entrypoint for the letter-link puzzle engine."""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from letterlink.core.constants import (
    DEFAULT_INITIAL_TIME,
    DEFAULT_PLAY_COLS,
    DEFAULT_PLAY_ROWS,
    DEFAULT_TARGET_LETTER,
    GameOverType,
    NoticeKind,
)
from letterlink.core.exceptions import LetterLinkError
from letterlink.core.models import TileRef
from letterlink.engine.generator import GeneratorConfig, MapGenerator
from letterlink.engine.grid import LetterGrid
from letterlink.engine.solver import is_solvable
from letterlink.session.events import LoggingListener, SessionListener
from letterlink.session.game import AnimationTicket, GameSession, SessionConfig
from letterlink.session.scheduler import ManualScheduler
from letterlink.utils.logger import configure_logging, level_from_name
from letterlink.utils.pretty import pretty_print_grid, print_board_stats

GAME_OVER_MESSAGES = {
    GameOverType.NORMAL: "Board cleared!",
    GameOverType.STEPS_EXCEEDED: "Out of steps.",
    GameOverType.TIME_EXCEEDED: "Out of time.",
}

PLAY_HELP = "Commands: '<row> <col>' to pick a tile, 's' reshuffle, 'r' restart, 'q' quit"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate and play letter-link boards",
    )
    parser.add_argument("--rows", type=int, default=DEFAULT_PLAY_ROWS, help="Play-area rows")
    parser.add_argument("--cols", type=int, default=DEFAULT_PLAY_COLS, help="Play-area columns")
    parser.add_argument(
        "--target",
        type=str,
        default=DEFAULT_TARGET_LETTER,
        help="Letter whose pair is always placed on the board",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument(
        "--time",
        type=int,
        default=DEFAULT_INITIAL_TIME,
        help="Countdown in seconds for --play",
    )
    parser.add_argument("--play", action="store_true", help="Start an interactive text session")
    parser.add_argument("--json", action="store_true", help="Print the board as JSON")
    parser.add_argument("--output", type=Path, help="Optional path to JSON output")
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def board_payload(grid: LetterGrid, target: str, seed: Optional[int]) -> Dict[str, Any]:
    return {
        "play_rows": grid.config.play_rows,
        "play_cols": grid.config.play_cols,
        "rows": grid.rows,
        "cols": grid.cols,
        "target_letter": target.upper(),
        "seed": seed,
        "solvable": is_solvable(grid),
        "grid": grid.to_jsonable(),
    }


class TextListener(SessionListener):
    """Prints session events for the interactive text front-end."""

    def __init__(self, stream=None) -> None:
        self.stream = stream or sys.stdout

    def _say(self, message: str) -> None:
        print(message, file=self.stream)

    def on_selection_changed(self, selection: Optional[TileRef]) -> None:
        if selection is not None:
            self._say(f"Picked '{selection.letter}' at ({selection.row}, {selection.col})")

    def on_animation_start(self, ticket: AnimationTicket) -> None:
        first, second = ticket.cells
        self._say(f"Linked '{first.letter}' and '{second.letter}' via {list(ticket.path)}")

    def on_shake_effect(self, cells, ticket) -> None:
        if cells:
            self._say("Those letters match but cannot be linked.")

    def on_hint(self, cells) -> None:
        if cells:
            spots = ", ".join(f"({t.row}, {t.col})" for t in cells)
            self._say(f"Hint: try {spots}")

    def on_target_letter_cleared(self) -> None:
        self._say("Target letter cleared!")

    def on_notice(self, kind: NoticeKind, message: str) -> None:
        self._say(f"[{kind.value}] {message}")

    def on_game_over(self, kind: GameOverType, score: int) -> None:
        self._say(f"{GAME_OVER_MESSAGES[kind]} Final score: {score}")


def run_interactive(config: SessionConfig, stdin=None, stream=None) -> GameSession:
    stdin = stdin or sys.stdin
    stream = stream or sys.stdout
    scheduler = ManualScheduler()
    listener = TextListener(stream)
    session = GameSession(config, scheduler=scheduler, listeners=[listener, LoggingListener()])
    session.start()
    print(PLAY_HELP, file=stream)

    last = time.monotonic()
    while True:
        pretty_print_grid(session.grid, highlight=session.hint, stream=stream)
        print(
            f"score={session.score} steps={session.steps}/{config.max_steps} "
            f"time={session.time_left}s reshuffles={session.reshuffle_credits}",
            file=stream,
        )
        if session.game_over_type is not None:
            print("Type 'r' to play again or 'q' to quit.", file=stream)
        print("> ", end="", file=stream, flush=True)
        line = stdin.readline()
        if not line:
            break

        now = time.monotonic()
        scheduler.advance(now - last)
        last = now

        command = line.strip().lower()
        if command in ("q", "quit"):
            break
        if command == "r":
            session.restart()
            continue
        if command == "s":
            if not session.request_reshuffle():
                print("Reshuffle not available.", file=stream)
            continue
        parts = command.split()
        if len(parts) == 2 and all(part.isdigit() for part in parts):
            session.handle_cell_click(int(parts[0]), int(parts[1]))
        else:
            print(PLAY_HELP, file=stream)

    session.destroy()
    return session


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level_from_name(args.log_level))

    try:
        if args.play:
            config = SessionConfig(
                play_rows=args.rows,
                play_cols=args.cols,
                initial_time=args.time,
                target_letter=args.target,
                auto_acknowledge=True,
                seed=args.seed,
            )
            run_interactive(config)
            return

        generator = MapGenerator(
            GeneratorConfig(play_rows=args.rows, play_cols=args.cols, seed=args.seed)
        )
        grid = generator.generate(args.target)
    except LetterLinkError as exc:
        parser.error(str(exc))

    if args.json or args.output:
        output_text = json.dumps(board_payload(grid, args.target, args.seed), indent=2)
        if args.output:
            args.output.write_text(output_text, encoding="utf-8")
        else:
            print(output_text)
        return

    print_board_stats(grid, solvable=is_solvable(grid))


if __name__ == "__main__":  # pragma: no cover
    main()

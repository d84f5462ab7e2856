"""Pretty-print helpers for letter boards."""

from __future__ import annotations

import sys
from collections import Counter
from typing import TYPE_CHECKING, Optional, Sequence

from ..core.models import Cell, Path, Position, TileRef, pair_key

if TYPE_CHECKING:
    from ..engine.grid import LetterGrid


EMPTY_SYMBOL = "."
PATH_SYMBOL = "*"


def cell_symbol(cell: Cell) -> str:
    if cell.is_empty:
        return EMPTY_SYMBOL
    return cell.symbol or "?"


def _path_cells(path: Sequence[Position]) -> set:
    """Every cell covered by the polyline, vertices included."""

    covered = set()
    for (r1, c1), (r2, c2) in zip(path, path[1:]):
        if r1 == r2:
            low, high = sorted((c1, c2))
            covered.update((r1, c) for c in range(low, high + 1))
        else:
            low, high = sorted((r1, r2))
            covered.update((r, c1) for r in range(low, high + 1))
    return covered


def format_grid(
    grid: LetterGrid,
    *,
    path: Optional[Path] = None,
    highlight: Sequence[TileRef] = (),
) -> str:
    """Render the grid with row/column headers.

    Empty cells on ``path`` are drawn as ``*``; highlighted tiles are wrapped
    in brackets.
    """

    width = grid.cols
    on_path = _path_cells(path) if path else set()
    marked = {tile.position for tile in highlight}
    header_cells = [f"{c:>3}" for c in range(width)]
    lines = ["    " + "".join(header_cells)]
    lines.append("    " + "-" * (3 * width))
    for r in range(grid.rows):
        rendered = []
        for c in range(width):
            symbol = cell_symbol(grid.cell(r, c))
            if symbol == EMPTY_SYMBOL and (r, c) in on_path:
                symbol = PATH_SYMBOL
            if (r, c) in marked:
                rendered.append(f"[{symbol}]")
            else:
                rendered.append(f"{symbol:>3}")
        lines.append(f"{r:>2} |" + "".join(rendered))
    return "\n".join(lines)


def pretty_print_grid(grid: LetterGrid, *, label: str | None = None, stream=None, **kwargs) -> None:
    """Print the board in a human-friendly format."""

    stream = stream or sys.stdout
    if label:
        print(label, file=stream)
    print(format_grid(grid, **kwargs), file=stream)


def print_board_stats(grid: LetterGrid, *, solvable: Optional[bool] = None, stream=None) -> None:
    """Print grid + tile stats for a board."""

    stream = stream or sys.stdout
    print(format_grid(grid), file=stream)

    symbols = grid.symbols()
    letters = Counter(pair_key(symbol) for symbol in symbols)
    play_cells = grid.config.play_cells

    print(file=stream)
    print("--- Board ---", file=stream)
    print(f"  Play area:     {grid.config.play_rows} x {grid.config.play_cols} ({play_cells} cells)", file=stream)
    print(f"  Tiles:         {len(symbols)} ({len(symbols) // 2} pairs)", file=stream)
    if play_cells - len(symbols):
        print(f"  Empty:         {play_cells - len(symbols)}", file=stream)
    if letters:
        print(f"  Letters:       {' '.join(sorted(letters))}", file=stream)
    if solvable is not None:
        print(f"  Solvable:      {'yes' if solvable else 'NO'}", file=stream)

"""Orthogonal connectivity search with at most two turns.

Probe order is fixed: straight or detour runs for aligned cells first, then
the two one-turn corners, then two-turn routes scanning intermediate columns
(rightward, then leftward) before intermediate rows (downward, then upward).
The first route found is returned; no shortest-path preference exists.

All coordinates are ``(row, col)``. A returned path lists the polyline
vertices from the first cell to the second, two to four points long.
"""

from __future__ import annotations

from typing import Optional

from ..core.exceptions import PreconditionError
from ..core.models import Path, Position
from .grid import LetterGrid


def row_clear(grid: LetterGrid, row: int, col_a: int, col_b: int) -> bool:
    """True when every cell strictly between the two columns is empty."""

    low, high = sorted((col_a, col_b))
    return all(grid.is_empty(row, col) for col in range(low + 1, high))


def col_clear(grid: LetterGrid, col: int, row_a: int, row_b: int) -> bool:
    """True when every cell strictly between the two rows is empty."""

    low, high = sorted((row_a, row_b))
    return all(grid.is_empty(row, col) for row in range(low + 1, high))


def can_connect(grid: LetterGrid, first: Position, second: Position) -> Optional[Path]:
    """Return the linking path between two occupied cells, or ``None``."""

    _check_endpoints(grid, first, second)
    r1, c1 = first
    r2, c2 = second

    if c1 == c2:
        path = _same_column(grid, first, second)
        if path:
            return path

    if r1 == r2:
        path = _same_row(grid, first, second)
        if path:
            return path

    path = _one_turn(grid, first, second)
    if path:
        return path

    if r1 != r2 and c1 != c2:
        return _two_turns(grid, first, second)
    return None


def _check_endpoints(grid: LetterGrid, first: Position, second: Position) -> None:
    if first == second:
        raise PreconditionError(f"Cannot connect a cell with itself: {first}")
    for row, col in (first, second):
        if not grid.in_play_area(row, col):
            raise PreconditionError(f"Cell outside the play area: {(row, col)}")
        if grid.is_empty(row, col):
            raise PreconditionError(f"Cannot connect an empty cell: {(row, col)}")


def _same_column(grid: LetterGrid, first: Position, second: Position) -> Optional[Path]:
    (r1, col), (r2, _) = first, second
    if abs(r1 - r2) == 1 or col_clear(grid, col, r1, r2):
        return [first, second]

    for direction, in_range in ((1, lambda c: c < grid.cols), (-1, lambda c: c >= 0)):
        offset = 1
        while in_range(col + direction * offset):
            detour = col + direction * offset
            if not grid.is_empty(r1, detour) or not grid.is_empty(r2, detour):
                break
            if col_clear(grid, detour, r1, r2):
                return [first, (r1, detour), (r2, detour), second]
            offset += 1
    return None


def _same_row(grid: LetterGrid, first: Position, second: Position) -> Optional[Path]:
    (row, c1), (_, c2) = first, second
    if abs(c1 - c2) == 1 or row_clear(grid, row, c1, c2):
        return [first, second]

    for direction, in_range in ((1, lambda r: r < grid.rows), (-1, lambda r: r >= 0)):
        offset = 1
        while in_range(row + direction * offset):
            detour = row + direction * offset
            if not grid.is_empty(detour, c1) or not grid.is_empty(detour, c2):
                break
            if row_clear(grid, detour, c1, c2):
                return [first, (detour, c1), (detour, c2), second]
            offset += 1
    return None


def _one_turn(grid: LetterGrid, first: Position, second: Position) -> Optional[Path]:
    (r1, c1), (r2, c2) = first, second
    if row_clear(grid, r1, c1, c2) and grid.is_empty(r1, c2) and col_clear(grid, c2, r1, r2):
        return [first, (r1, c2), second]
    if col_clear(grid, c1, r1, r2) and grid.is_empty(r2, c1) and row_clear(grid, r2, c1, c2):
        return [first, (r2, c1), second]
    return None


def _two_turns(grid: LetterGrid, first: Position, second: Position) -> Optional[Path]:
    (r1, c1), (r2, c2) = first, second

    # Intermediate column: run along row r1, cross at column i, finish along row r2.
    for columns in (range(c1 + 1, grid.cols), range(c1 - 1, -1, -1)):
        for i in columns:
            if not grid.is_empty(r1, i):
                break
            if (
                col_clear(grid, i, r1, r2)
                and row_clear(grid, r2, i, c2)
                and grid.is_empty(r2, i)
            ):
                return [first, (r1, i), (r2, i), second]

    # Intermediate row: run along column c1, cross at row i, finish along column c2.
    for rows in (range(r1 + 1, grid.rows), range(r1 - 1, -1, -1)):
        for i in rows:
            if not grid.is_empty(i, c1):
                break
            if (
                row_clear(grid, i, c1, c2)
                and col_clear(grid, c2, i, r2)
                and grid.is_empty(i, c2)
            ):
                return [first, (i, c1), (i, c2), second]
    return None

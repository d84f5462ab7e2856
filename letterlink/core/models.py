"""Data models supporting the letter-link engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

Position = Tuple[int, int]
Path = List[Position]


def letters_match(first: str, second: str) -> bool:
    """Two letters pair up when they are the same letter in opposite case."""

    return first.lower() == second.lower() and first != second


def pair_key(symbol: str) -> str:
    return symbol.lower()


@dataclass
class Cell:
    """Represents a grid cell; ``symbol`` only matters while occupied."""

    is_empty: bool = True
    symbol: str = ""
    occupant_id: Optional[int] = None


@dataclass(frozen=True)
class TileRef:
    """A located tile as reported to listeners (selection, hints, shakes)."""

    row: int
    col: int
    letter: str = ""
    occupant_id: Optional[int] = None

    @property
    def position(self) -> Position:
        return (self.row, self.col)


@dataclass(frozen=True)
class MatchPair:
    """Two occupied cells whose letters match and which are connectable."""

    first: Position
    second: Position
    path: Tuple[Position, ...] = ()

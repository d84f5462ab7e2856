"""Grid representation and helper utilities."""

from __future__ import annotations

import copy
import random
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..core.constants import EDGE_SCORE_BASE, MAX_DISTINCT_PAIRS, OCCUPANT_ID_RANGE, Bounds
from ..core.exceptions import ConfigurationError, PreconditionError
from ..core.models import Cell, Position, TileRef
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


@dataclass
class GridConfig:
    """Play-area dimensions; the border ring is added on top."""

    play_rows: int
    play_cols: int
    rng_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.play_rows < 1 or self.play_cols < 1:
            raise ConfigurationError(
                f"Play area must be at least 1x1, got {self.play_rows}x{self.play_cols}"
            )
        if self.pair_capacity > MAX_DISTINCT_PAIRS:
            raise ConfigurationError(
                f"Play area {self.play_rows}x{self.play_cols} needs {self.pair_capacity} "
                f"distinct letter pairs; at most {MAX_DISTINCT_PAIRS} exist"
            )

    @property
    def rows(self) -> int:
        return self.play_rows + 2

    @property
    def cols(self) -> int:
        return self.play_cols + 2

    @property
    def play_cells(self) -> int:
        return self.play_rows * self.play_cols

    @property
    def pair_capacity(self) -> int:
        return self.play_cells // 2

    def bounds(self) -> Bounds:
        return Bounds(rows=self.rows, cols=self.cols)


class LetterGrid:
    """Bordered 2-D cell array. Border cells are never occupied."""

    def __init__(self, config: GridConfig, rng: Optional[random.Random] = None) -> None:
        self.config = config
        self.bounds = config.bounds()
        self.rng = rng or random.Random(config.rng_seed)
        self.cells: List[List[Cell]] = [
            [Cell() for _ in range(self.bounds.cols)] for _ in range(self.bounds.rows)
        ]

    @property
    def rows(self) -> int:
        return self.bounds.rows

    @property
    def cols(self) -> int:
        return self.bounds.cols

    # ------------------------------------------------------------------
    # Cell manipulation
    # ------------------------------------------------------------------
    def place(self, position: Position, symbol: str) -> None:
        """Occupy a play cell with ``symbol`` and a fresh random occupant tag."""

        self.assign(position, symbol, self.rng.randrange(OCCUPANT_ID_RANGE))

    def assign(self, position: Position, symbol: str, occupant_id: Optional[int]) -> None:
        row, col = position
        if not self.in_play_area(row, col):
            raise PreconditionError(f"Cannot place a tile outside the play area: {position}")
        cell = self.cells[row][col]
        cell.is_empty = False
        cell.symbol = symbol
        cell.occupant_id = occupant_id

    def clear(self, position: Position) -> None:
        row, col = position
        if not self.in_play_area(row, col):
            raise PreconditionError(f"Cannot clear a cell outside the play area: {position}")
        self.cells[row][col].is_empty = True

    def reset(self) -> None:
        """Empty every cell, keeping the grid object (and its listeners' references)."""

        for row in self.cells:
            for cell in row:
                cell.is_empty = True
                cell.symbol = ""
                cell.occupant_id = None

    def clone(self) -> "LetterGrid":
        """Disposable deep copy sharing nothing mutable with this grid."""

        duplicate = LetterGrid(self.config, rng=random.Random(self.config.rng_seed))
        duplicate.cells = copy.deepcopy(self.cells)
        return duplicate

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def cell(self, row: int, col: int) -> Cell:
        return self.cells[row][col]

    def is_empty(self, row: int, col: int) -> bool:
        return self.cells[row][col].is_empty

    def symbol_at(self, position: Position) -> str:
        row, col = position
        return self.cells[row][col].symbol

    def in_play_area(self, row: int, col: int) -> bool:
        return self.bounds.contains(row, col) and not self.bounds.is_border(row, col)

    def play_positions(self) -> List[Position]:
        return [
            (row, col)
            for row in range(1, self.rows - 1)
            for col in range(1, self.cols - 1)
        ]

    def occupied_positions(self) -> List[Position]:
        """Occupied play cells in row-major order."""

        return [pos for pos in self.play_positions() if not self.is_empty(*pos)]

    def occupied_count(self) -> int:
        return len(self.occupied_positions())

    def symbols(self) -> List[str]:
        return [self.symbol_at(pos) for pos in self.occupied_positions()]

    def tile(self, row: int, col: int) -> TileRef:
        cell = self.cells[row][col]
        return TileRef(row=row, col=col, letter=cell.symbol, occupant_id=cell.occupant_id)

    def tiles(self, positions: Iterable[Position]) -> List[TileRef]:
        return [self.tile(row, col) for row, col in positions]

    def edge_score(self, row: int, col: int) -> int:
        """Higher for cells closer to the border ring."""

        distance = min(row - 1, self.rows - 2 - row, col - 1, self.cols - 2 - col)
        return EDGE_SCORE_BASE - distance

    def rank_by_edge(self, positions: Iterable[Position]) -> List[Position]:
        """Sort positions border-first; ties keep their incoming order."""

        return sorted(positions, key=lambda pos: self.edge_score(*pos), reverse=True)

    # ------------------------------------------------------------------
    # Serialization helpers
    # ------------------------------------------------------------------
    def to_jsonable(self) -> List[List[dict]]:
        serialized: List[List[dict]] = []
        for row in self.cells:
            serialized.append(
                [
                    {
                        "is_empty": cell.is_empty,
                        "symbol": cell.symbol if not cell.is_empty else "",
                        "occupant_id": cell.occupant_id if not cell.is_empty else None,
                    }
                    for cell in row
                ]
            )
        return serialized

    @classmethod
    def from_rows(cls, rows: List[str], rng_seed: Optional[int] = None) -> "LetterGrid":
        """Build a grid from play-area text rows; ``.`` marks an empty cell.

        ``["ab", "BA"]`` yields a 2x2 play area inside a 4x4 grid.
        """

        if not rows or any(len(line) != len(rows[0]) for line in rows):
            raise ConfigurationError("Board rows must be non-empty and equally long")
        grid = cls(GridConfig(play_rows=len(rows), play_cols=len(rows[0]), rng_seed=rng_seed))
        for r, line in enumerate(rows, start=1):
            for c, char in enumerate(line, start=1):
                if char != ".":
                    grid.place((r, c), char)
        return grid

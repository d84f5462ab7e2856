"""Backtracking solvability verifier and connectable-pair enumeration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterator, List, Optional, Set

from ..core.constants import SEARCH_NODE_BUDGET
from ..core.exceptions import ConfigurationError
from ..core.models import MatchPair, Position, letters_match
from ..utils.logger import get_logger
from .connectivity import can_connect
from .grid import LetterGrid

LOGGER = get_logger(__name__)


def iter_matches(grid: LetterGrid) -> Iterator[MatchPair]:
    """Yield matching, connectable pairs in row-major ``(i < j)`` order."""

    cells = grid.occupied_positions()
    for i, first in enumerate(cells):
        first_symbol = grid.symbol_at(first)
        for second in cells[i + 1:]:
            if not letters_match(first_symbol, grid.symbol_at(second)):
                continue
            path = can_connect(grid, first, second)
            if path:
                yield MatchPair(first=first, second=second, path=tuple(path))


def find_matches(grid: LetterGrid) -> List[MatchPair]:
    return list(iter_matches(grid))


def first_match(grid: LetterGrid) -> Optional[MatchPair]:
    return next(iter_matches(grid), None)


def is_deadlocked(grid: LetterGrid) -> bool:
    """Tiles remain but no pair can currently be linked."""

    return grid.occupied_count() > 0 and first_match(grid) is None


class _BudgetExceeded(Exception):
    pass


@dataclass
class SolverConfig:
    """Search limits for the verifier.

    ``node_budget`` caps the number of sub-boards explored per call. Running
    out of budget answers ``False``: a board is only certified solvable when a
    full clearing sequence was actually found.
    """

    node_budget: Optional[int] = None

    def __post_init__(self) -> None:
        if self.node_budget is not None and self.node_budget < 1:
            raise ConfigurationError("node_budget must be positive when set")


class SolvabilityVerifier:
    """Certifies that a board can be cleared completely.

    Works on a private clone of the caller's grid: each connectable pair is
    removed, the smaller board is searched recursively, and the pair is put
    back on failure. Sub-boards already proven dead are memoized by their set
    of remaining cells, since removal order does not change that set.
    """

    def __init__(self, config: Optional[SolverConfig] = None) -> None:
        self.config = config or SolverConfig()
        self.nodes_explored = 0

    def is_solvable(self, grid: LetterGrid) -> bool:
        scratch = grid.clone()
        self.nodes_explored = 0
        dead_ends: Set[FrozenSet[Position]] = set()
        try:
            return self._solve(scratch, scratch.occupied_positions(), dead_ends)
        except _BudgetExceeded:
            LOGGER.debug(
                "Solvability search gave up after %d nodes", self.nodes_explored
            )
            return False

    def _solve(
        self,
        grid: LetterGrid,
        cells: List[Position],
        dead_ends: Set[FrozenSet[Position]],
    ) -> bool:
        if not cells:
            return True
        self.nodes_explored += 1
        budget = self.config.node_budget
        if budget is not None and self.nodes_explored > budget:
            raise _BudgetExceeded()

        key = frozenset(cells)
        if key in dead_ends:
            return False

        for i, first in enumerate(cells):
            first_symbol = grid.symbol_at(first)
            for j in range(i + 1, len(cells)):
                second = cells[j]
                if not letters_match(first_symbol, grid.symbol_at(second)):
                    continue
                if not can_connect(grid, first, second):
                    continue
                grid.clear(first)
                grid.clear(second)
                remaining = [cell for k, cell in enumerate(cells) if k not in (i, j)]
                if self._solve(grid, remaining, dead_ends):
                    return True
                grid.cell(*first).is_empty = False
                grid.cell(*second).is_empty = False

        dead_ends.add(key)
        return False


def is_solvable(grid: LetterGrid, node_budget: Optional[int] = None) -> bool:
    return SolvabilityVerifier(SolverConfig(node_budget=node_budget)).is_solvable(grid)


def default_verifier() -> SolvabilityVerifier:
    """Verifier capped at ``SEARCH_NODE_BUDGET`` nodes, for generation and reshuffling."""

    return SolvabilityVerifier(SolverConfig(node_budget=SEARCH_NODE_BUDGET))

"""Symbol reshuffling over the occupied cells of an existing board."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..core.constants import (
    RESHUFFLE_EDGE_PRIORITY_ATTEMPTS,
    RESHUFFLE_SPREAD_ATTEMPTS,
    RESHUFFLE_UNIFORM_ATTEMPTS,
)
from ..core.exceptions import ConfigurationError, PreconditionError
from ..core.models import Position
from ..utils.logger import get_logger
from .generator import GeneratorConfig, MapGenerator, place_linear_pairs, split_pairs
from .grid import LetterGrid
from .retry import RetryPolicy, StrategyPhase
from .solver import SolvabilityVerifier, default_verifier
from .validator import BoardValidator

LOGGER = get_logger(__name__)

# (symbol, occupant_id); tags travel with their symbol.
Tile = Tuple[str, Optional[int]]


@dataclass
class ReshuffleConfig:
    edge_priority_attempts: int = RESHUFFLE_EDGE_PRIORITY_ATTEMPTS
    spread_attempts: int = RESHUFFLE_SPREAD_ATTEMPTS
    uniform_attempts: int = RESHUFFLE_UNIFORM_ATTEMPTS
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if min(self.edge_priority_attempts, self.spread_attempts, self.uniform_attempts) < 0:
            raise ConfigurationError("Reshuffle attempt budgets cannot be negative")


@dataclass
class ReshuffleOutcome:
    strategy: str
    attempts: int
    forced: bool = False


class ReshuffleEngine:
    """Re-permutes symbols in place until the board verifies as solvable.

    Positions and emptiness are untouched by the three strategies. Only the
    forced recovery (after the whole budget fails) may move tiles: it
    regenerates the board from the current tiles and, failing that, lays them
    out as adjacent pairs.
    """

    def __init__(
        self,
        config: Optional[ReshuffleConfig] = None,
        generator: Optional[MapGenerator] = None,
        verifier: Optional[SolvabilityVerifier] = None,
        validator: Optional[BoardValidator] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or ReshuffleConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.verifier = verifier or default_verifier()
        self.validator = validator or BoardValidator()
        self.generator = generator

    def reshuffle(self, grid: LetterGrid) -> ReshuffleOutcome:
        positions = grid.occupied_positions()
        if not positions:
            raise PreconditionError("Cannot reshuffle a board with no tiles")
        tiles: List[Tile] = [
            (grid.cell(r, c).symbol, grid.cell(r, c).occupant_id) for r, c in positions
        ]

        policy = RetryPolicy(
            phases=[
                StrategyPhase(
                    "edge-priority",
                    self.config.edge_priority_attempts,
                    lambda: self._edge_priority(grid, positions, tiles),
                ),
                StrategyPhase(
                    "spread",
                    self.config.spread_attempts,
                    lambda: self._spread(grid, positions, tiles),
                ),
                StrategyPhase(
                    "uniform",
                    self.config.uniform_attempts,
                    lambda: self._uniform(grid, positions, tiles),
                ),
            ],
            fallback=lambda: self._force_recovery(grid),
            fallback_name="forced recovery",
            label="reshuffle",
        )
        outcome = policy.run(accept=lambda: self.verifier.is_solvable(grid))
        self.validator.ensure_valid(grid)
        return ReshuffleOutcome(
            strategy=outcome.strategy,
            attempts=outcome.attempts,
            forced=outcome.used_fallback,
        )

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------
    def _edge_priority(self, grid: LetterGrid, positions: List[Position], tiles: List[Tile]) -> None:
        shuffled = list(tiles)
        self.rng.shuffle(shuffled)
        _assign(grid, grid.rank_by_edge(positions), shuffled)

    def _spread(self, grid: LetterGrid, positions: List[Position], tiles: List[Tile]) -> None:
        """Put the two halves of each pair half the occupied list apart."""

        pairs, leftovers = split_pairs(tiles, symbol_of=lambda tile: tile[0])
        self.rng.shuffle(pairs)
        half = len(positions) // 2
        slots: List[Optional[Tile]] = [None] * len(positions)
        for index, (first, second) in enumerate(pairs):
            if self.rng.random() < 0.5:
                first, second = second, first
            slots[index] = first
            slots[index + half] = second
        remaining = iter(leftovers)
        ordered = [slot if slot is not None else next(remaining) for slot in slots]
        _assign(grid, positions, ordered)

    def _uniform(self, grid: LetterGrid, positions: List[Position], tiles: List[Tile]) -> None:
        shuffled = list(tiles)
        self.rng.shuffle(shuffled)
        _assign(grid, positions, shuffled)

    # ------------------------------------------------------------------
    # Recovery
    # ------------------------------------------------------------------
    def _force_recovery(self, grid: LetterGrid) -> None:
        LOGGER.warning("Forcing board regeneration from %d tiles", grid.occupied_count())
        generator = self.generator or MapGenerator(
            GeneratorConfig(play_rows=grid.config.play_rows, play_cols=grid.config.play_cols),
            verifier=self.verifier,
            validator=self.validator,
            rng=self.rng,
        )
        generator.regenerate(grid)
        if self.verifier.is_solvable(grid):
            return
        LOGGER.warning("Regenerated board still unsolvable; laying tiles out as adjacent pairs")
        pairs, leftovers = split_pairs(grid.symbols())
        place_linear_pairs(grid, pairs, leftovers)


def _assign(grid: LetterGrid, positions: List[Position], tiles: List[Tile]) -> None:
    for position, (symbol, occupant_id) in zip(positions, tiles):
        grid.assign(position, symbol, occupant_id)

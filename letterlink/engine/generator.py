"""Board generation.

Boards are built from a letter-pair inventory under two randomized
placement strategies (edge-priority, then traditional row-major), each
placement checked by the solvability verifier. When the inner retry budget
runs out the serpentine template is laid instead; it pairs orthogonally
adjacent cells only and is therefore solvable by construction.
"""

from __future__ import annotations

import random
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from ..core.constants import (
    ALPHABET,
    GENERATION_EDGE_PRIORITY_ATTEMPTS,
    GENERATION_INNER_ATTEMPTS,
    GENERATION_OUTER_ATTEMPTS,
)
from ..core.exceptions import ConfigurationError, PreconditionError
from ..core.models import Position, pair_key
from ..utils.logger import get_logger
from .grid import GridConfig, LetterGrid
from .retry import RetryOutcome, RetryPolicy, StrategyPhase
from .solver import SolvabilityVerifier, default_verifier
from .validator import BoardValidator


LOGGER = get_logger(__name__)

LetterPair = Tuple[str, str]
T = TypeVar("T")


@dataclass
class GeneratorConfig:
    play_rows: int
    play_cols: int
    outer_attempts: int = GENERATION_OUTER_ATTEMPTS
    inner_attempts: int = GENERATION_INNER_ATTEMPTS
    edge_priority_attempts: int = GENERATION_EDGE_PRIORITY_ATTEMPTS
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.outer_attempts < 1 or self.inner_attempts < 1:
            raise ConfigurationError("Generation needs at least one outer and one inner attempt")
        if not 0 <= self.edge_priority_attempts <= self.inner_attempts:
            raise ConfigurationError(
                "edge_priority_attempts must lie between 0 and inner_attempts"
            )

    def to_grid_config(self, seed_override: Optional[int] = None) -> GridConfig:
        return GridConfig(
            play_rows=self.play_rows,
            play_cols=self.play_cols,
            rng_seed=seed_override if seed_override is not None else self.seed,
        )


# ----------------------------------------------------------------------
# Inventory and deterministic layout helpers (shared with reshuffling)
# ----------------------------------------------------------------------
def split_pairs(
    items: Sequence[T], symbol_of: Callable[[T], str] = str
) -> Tuple[List[Tuple[T, T]], List[T]]:
    """Group items into (lower, upper) pairs, in first-seen letter order.

    ``symbol_of`` extracts the letter from an item (the item itself by
    default). Items without an opposite-case partner are returned separately.
    """

    groups: "OrderedDict[str, Tuple[List[T], List[T]]]" = OrderedDict()
    for item in items:
        symbol = symbol_of(item)
        lowers, uppers = groups.setdefault(pair_key(symbol), ([], []))
        (lowers if symbol.islower() else uppers).append(item)

    pairs: List[Tuple[T, T]] = []
    leftovers: List[T] = []
    for lowers, uppers in groups.values():
        matched = min(len(lowers), len(uppers))
        pairs.extend(zip(lowers[:matched], uppers[:matched]))
        leftovers.extend(lowers[matched:])
        leftovers.extend(uppers[matched:])
    return pairs, leftovers


def serpentine_positions(grid: LetterGrid) -> List[Position]:
    """Play cells walked left-to-right, then right-to-left on the next row.

    Consecutive cells of the walk are always orthogonally adjacent.
    """

    walk: List[Position] = []
    for index, row in enumerate(range(1, grid.rows - 1)):
        cols = list(range(1, grid.cols - 1))
        if index % 2:
            cols.reverse()
        walk.extend((row, col) for col in cols)
    return walk


def place_linear_pairs(
    grid: LetterGrid, pairs: Sequence[LetterPair], leftovers: Sequence[str] = ()
) -> None:
    """Lay every pair on two adjacent cells of the serpentine walk."""

    walk = serpentine_positions(grid)
    if 2 * len(pairs) + len(leftovers) > len(walk):
        raise PreconditionError(
            f"{len(pairs)} pairs and {len(leftovers)} extra tiles do not fit "
            f"{len(walk)} play cells"
        )
    grid.reset()
    for index, (first, second) in enumerate(pairs):
        grid.place(walk[2 * index], first)
        grid.place(walk[2 * index + 1], second)
    for offset, symbol in enumerate(leftovers):
        grid.place(walk[2 * len(pairs) + offset], symbol)


class MapGenerator:
    """Produces boards the solvability verifier accepts."""

    def __init__(
        self,
        config: GeneratorConfig,
        verifier: Optional[SolvabilityVerifier] = None,
        validator: Optional[BoardValidator] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config
        self.grid_config = config.to_grid_config()
        self.rng = rng or random.Random(config.seed)
        self.verifier = verifier or default_verifier()
        self.validator = validator or BoardValidator()
        self.last_outcome: Optional[RetryOutcome] = None

    # ------------------------------------------------------------------
    # Public entrypoints
    # ------------------------------------------------------------------
    def generate(self, target_letter: str = "") -> LetterGrid:
        """Build a fresh, verified-solvable board containing the target pair."""

        target = _normalize_target(target_letter)
        grid_seed = self.rng.randint(0, 1_000_000)
        grid = LetterGrid(self.config.to_grid_config(seed_override=grid_seed))
        pair_count = self.grid_config.pair_capacity
        self._fill(grid, lambda: self.build_letter_inventory(target, pair_count))
        LOGGER.info(
            "Generated %dx%d board with %d pairs (target '%s')",
            self.config.play_rows,
            self.config.play_cols,
            pair_count,
            target.upper(),
        )
        return grid

    def regenerate(self, grid: LetterGrid) -> None:
        """Rebuild ``grid`` in place from its current tiles, positions free."""

        inventory = grid.symbols()
        if not inventory:
            raise PreconditionError("Cannot regenerate a board without tiles")

        def shuffled() -> List[str]:
            letters = list(inventory)
            self.rng.shuffle(letters)
            return letters

        self._fill(grid, shuffled)

    def build_letter_inventory(self, target_letter: str, pair_count: int) -> List[str]:
        """Target pair first, then distinct random letters, each as lower+upper."""

        if pair_count < 1:
            return []
        if pair_count > len(ALPHABET):
            raise ConfigurationError(f"Cannot build {pair_count} distinct letter pairs")
        letters: List[str] = []
        used = set()
        if target_letter:
            lower = target_letter.lower()
            letters.extend([lower, lower.upper()])
            used.add(lower)
        needed = pair_count - len(used)
        pool = [letter for letter in ALPHABET if letter not in used]
        for letter in self.rng.sample(pool, needed):
            letters.extend([letter, letter.upper()])
        return letters

    # ------------------------------------------------------------------
    # Retry loops
    # ------------------------------------------------------------------
    def _fill(self, grid: LetterGrid, make_letters: Callable[[], List[str]]) -> None:
        edge_attempts = self.config.edge_priority_attempts
        policy = RetryPolicy(
            phases=[
                StrategyPhase(
                    "edge-priority",
                    edge_attempts,
                    lambda: self._place_edge_priority(grid, make_letters()),
                ),
                StrategyPhase(
                    "traditional",
                    self.config.inner_attempts - edge_attempts,
                    lambda: self._place_traditional(grid, make_letters()),
                ),
            ],
            fallback=lambda: self._place_template(grid, make_letters()),
            fallback_name="solvable template",
            label="map generation",
        )

        outcome: Optional[RetryOutcome] = None
        for attempt in range(1, self.config.outer_attempts + 1):
            outcome = policy.run(accept=lambda: self.verifier.is_solvable(grid))
            if not outcome.used_fallback or self.verifier.is_solvable(grid):
                break
            LOGGER.debug("Outer generation attempt %d produced no verified board", attempt)
        else:
            LOGGER.warning(
                "Verifier rejected every outer attempt; keeping the solvable template"
            )
            self._place_template(grid, make_letters())

        self.validator.ensure_valid(grid)
        self.last_outcome = outcome
        if outcome is not None:
            LOGGER.debug(
                "Board placed with %s after %d attempt(s)", outcome.strategy, outcome.attempts
            )

    # ------------------------------------------------------------------
    # Placement strategies
    # ------------------------------------------------------------------
    def _place_edge_priority(self, grid: LetterGrid, letters: List[str]) -> None:
        grid.reset()
        positions = grid.rank_by_edge(grid.play_positions())
        pairs, _ = split_pairs(letters)
        for index, (first, second) in enumerate(pairs):
            if 2 * index + 1 >= len(positions):
                break
            grid.place(positions[2 * index], first)
            grid.place(positions[2 * index + 1], second)

    def _place_traditional(self, grid: LetterGrid, letters: List[str]) -> None:
        grid.reset()
        shuffled = list(letters)
        self.rng.shuffle(shuffled)
        for position, letter in zip(grid.play_positions(), shuffled):
            grid.place(position, letter)

    def _place_template(self, grid: LetterGrid, letters: List[str]) -> None:
        pairs, leftovers = split_pairs(letters)
        place_linear_pairs(grid, pairs, leftovers)


def _normalize_target(letter: str) -> str:
    if not letter:
        return ""
    if len(letter) != 1 or not letter.isascii() or not letter.isalpha():
        raise PreconditionError(f"Target letter must be a single ASCII letter, got {letter!r}")
    return letter.lower()

"""Deterministic structural validation for letter boards."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import List

from ..core.exceptions import ValidationError
from .grid import LetterGrid
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


@dataclass
class ValidationResult:
    ok: bool
    messages: List[str]


class BoardValidator:
    """Runs structural validation over a board.

    Solvability is not checked here; see :class:`SolvabilityVerifier`.
    """

    def validate(self, grid: LetterGrid) -> ValidationResult:
        messages: List[str] = []
        try:
            self._check_border_empty(grid)
            self._check_symbols_valid(grid)
            self._check_pairs_complete(grid)
        except ValidationError as exc:
            messages.append(str(exc))
            LOGGER.error("Validation failed: %s", exc)
            return ValidationResult(ok=False, messages=messages)
        return ValidationResult(ok=True, messages=[])

    def ensure_valid(self, grid: LetterGrid) -> None:
        result = self.validate(grid)
        if not result.ok:
            raise ValidationError(f"Board validation failed: {result.messages}")

    def _check_border_empty(self, grid: LetterGrid) -> None:
        for r in range(grid.rows):
            for c in range(grid.cols):
                if grid.bounds.is_border(r, c) and not grid.is_empty(r, c):
                    raise ValidationError(f"Border cell ({r},{c}) is occupied")

    def _check_symbols_valid(self, grid: LetterGrid) -> None:
        for r, c in grid.occupied_positions():
            symbol = grid.cell(r, c).symbol
            if len(symbol) != 1 or not symbol.isascii() or not symbol.isalpha():
                raise ValidationError(f"Invalid symbol '{symbol}' at ({r},{c})")

    def _check_pairs_complete(self, grid: LetterGrid) -> None:
        counts = Counter(grid.symbols())
        for symbol, count in sorted(counts.items()):
            partner = symbol.swapcase()
            if counts.get(partner, 0) != count:
                raise ValidationError(
                    f"Letter '{symbol}' appears {count} time(s) but its partner "
                    f"'{partner}' appears {counts.get(partner, 0)} time(s)"
                )

import io
import unittest

from letterlink.core.models import Cell
from letterlink.engine.grid import LetterGrid
from letterlink.utils.pretty import cell_symbol, format_grid, pretty_print_grid, print_board_stats


class PrettyPrintTests(unittest.TestCase):
    def test_cell_symbol(self) -> None:
        self.assertEqual(cell_symbol(Cell()), ".")
        self.assertEqual(cell_symbol(Cell(is_empty=False, symbol="q")), "q")
        self.assertEqual(cell_symbol(Cell(is_empty=False)), "?")
        self.assertEqual(cell_symbol(Cell(is_empty=True, symbol="q")), ".")

    def test_format_grid_shows_letters_and_border(self) -> None:
        grid = LetterGrid.from_rows(["aA", "b."])
        lines = format_grid(grid).splitlines()
        self.assertEqual(len(lines), 2 + grid.rows)
        self.assertIn("a", lines[3])
        self.assertIn("A", lines[3])
        self.assertEqual(lines[2].split("|")[1].split(), [".", ".", ".", "."])

    def test_path_and_highlight_marks(self) -> None:
        grid = LetterGrid.from_rows(["abA"])
        rendered = format_grid(
            grid,
            path=[(1, 1), (2, 1), (2, 3), (1, 3)],
            highlight=[grid.tile(1, 1)],
        )
        self.assertIn("[a]", rendered)
        self.assertEqual(rendered.splitlines()[4].split("|")[1].split(), [".", "*", "*", "*", "."])

    def test_pretty_print_with_label(self) -> None:
        stream = io.StringIO()
        pretty_print_grid(LetterGrid.from_rows(["aA"]), label="Board", stream=stream)
        self.assertTrue(stream.getvalue().startswith("Board\n"))

    def test_board_stats(self) -> None:
        stream = io.StringIO()
        print_board_stats(LetterGrid.from_rows(["aA", "b."]), solvable=False, stream=stream)
        output = stream.getvalue()
        self.assertIn("Tiles:         3 (1 pairs)", output)
        self.assertIn("Empty:         1", output)
        self.assertIn("Solvable:      NO", output)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

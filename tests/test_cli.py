import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

from letterlink.core.constants import SessionState
from letterlink.session.game import SessionConfig

import main


class CliTests(unittest.TestCase):
    def test_json_output(self) -> None:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            main.main(["--rows", "2", "--cols", "3", "--seed", "4", "--target", "k", "--json"])
        payload = json.loads(buffer.getvalue())
        self.assertEqual(payload["play_rows"], 2)
        self.assertEqual(payload["cols"], 5)
        self.assertEqual(payload["target_letter"], "K")
        self.assertTrue(payload["solvable"])
        symbols = [cell["symbol"] for row in payload["grid"] for cell in row if not cell["is_empty"]]
        self.assertIn("k", symbols)
        self.assertIn("K", symbols)

    def test_output_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "board.json"
            main.main(["--seed", "1", "--output", str(target)])
            payload = json.loads(target.read_text(encoding="utf-8"))
        self.assertEqual((payload["play_rows"], payload["play_cols"]), (3, 4))

    def test_default_prints_board_stats(self) -> None:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            main.main(["--seed", "2"])
        self.assertIn("Solvable:      yes", buffer.getvalue())

    def test_invalid_dimensions_exit(self) -> None:
        with redirect_stdout(io.StringIO()), self.assertRaises(SystemExit):
            main.main(["--rows", "8", "--cols", "8"])

    def test_interactive_session_quits(self) -> None:
        config = SessionConfig(auto_acknowledge=True, seed=6)
        stdin = io.StringIO("1 1\nbogus\ns\nq\n")
        stream = io.StringIO()
        session = main.run_interactive(config, stdin=stdin, stream=stream)
        output = stream.getvalue()
        self.assertIn("Commands:", output)
        self.assertEqual(session.state, SessionState.IDLE)
        self.assertEqual(session.reshuffle_credits, 4)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

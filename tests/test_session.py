import unittest
from unittest.mock import MagicMock, call

from letterlink.core.constants import (
    SEARCH_NODE_BUDGET,
    AnimationKind,
    GameOverType,
    NoticeKind,
    SessionState,
)
from letterlink.core.exceptions import ConfigurationError, PreconditionError
from letterlink.engine.grid import LetterGrid
from letterlink.engine.solver import is_solvable
from letterlink.session.events import SessionListener
from letterlink.session.game import GameSession, SessionConfig
from letterlink.session.scheduler import ManualScheduler

SINGLE_ADJACENT_PAIR = ["aA....", "......", "......", "......", "......"]
SINGLE_DISTANT_PAIR = ["a.....", "......", "......", "......", ".....A"]
# No opposite-case pair on this board can be linked.
DEADLOCKED = ["dabc", "eCDf", "FBAE"]
# Only e/E and f/F can be linked; a at (1,2) and A at (3,3) cannot.
STUCK_PAIR = ["dabc", "eCDf", "EBAF"]


def make_session(rows, listener=None, scheduler=None, **overrides):
    generator = MagicMock()
    generator.generate.side_effect = lambda target: LetterGrid.from_rows(rows, rng_seed=1)
    options = dict(play_rows=len(rows), play_cols=len(rows[0]), auto_acknowledge=True, seed=3)
    options.update(overrides)
    listener = listener or MagicMock(spec=SessionListener)
    session = GameSession(
        SessionConfig(**options),
        scheduler=scheduler or ManualScheduler(),
        listeners=[listener],
        generator=generator,
    )
    return session, listener


class SessionScenarioTests(unittest.TestCase):
    def test_adjacent_pair_clears_board(self) -> None:
        session, listener = make_session(SINGLE_ADJACENT_PAIR)
        session.start()
        session.handle_cell_click(1, 1)
        self.assertEqual(session.state, SessionState.SELECTING)
        session.handle_cell_click(1, 2)

        self.assertEqual(session.score, 100)
        self.assertEqual(session.remain, 0)
        self.assertEqual(session.steps, 1)
        self.assertEqual(session.game_over_type, GameOverType.NORMAL)
        self.assertEqual(session.state, SessionState.GAME_OVER)
        listener.on_game_over.assert_called_once_with(GameOverType.NORMAL, 100)
        ticket = listener.on_animation_start.call_args[0][0]
        self.assertEqual(ticket.path, ((1, 1), (1, 2)))

    def test_distant_pair_links_around_corner(self) -> None:
        session, listener = make_session(SINGLE_DISTANT_PAIR, auto_acknowledge=False)
        session.start()
        session.handle_cell_click(1, 1)
        session.handle_cell_click(5, 6)

        ticket = session.pending_animation
        self.assertEqual(ticket.kind, AnimationKind.CLEAR)
        self.assertEqual(ticket.path, ((1, 1), (1, 6), (5, 6)))
        self.assertEqual(session.state, SessionState.RESOLVING)
        self.assertEqual(session.score, 100)
        self.assertFalse(session.grid.is_empty(1, 1))

        self.assertTrue(ticket.resolve())
        self.assertTrue(session.grid.is_empty(1, 1))
        self.assertTrue(session.grid.is_empty(5, 6))
        self.assertEqual(session.game_over_type, GameOverType.NORMAL)

    def test_steps_exhausted_with_pairs_left(self) -> None:
        session, listener = make_session(STUCK_PAIR)
        session.start()
        for _ in range(6):
            session.handle_cell_click(1, 2)
            session.handle_cell_click(3, 3)

        self.assertEqual(session.steps, 6)
        self.assertEqual(session.score, 0)
        self.assertEqual(session.remain, 12)
        self.assertEqual(session.game_over_type, GameOverType.STEPS_EXCEEDED)
        listener.on_game_over.assert_called_once_with(GameOverType.STEPS_EXCEEDED, 0)

    def test_countdown_expiry(self) -> None:
        scheduler = ManualScheduler()
        session, listener = make_session(STUCK_PAIR, scheduler=scheduler, initial_time=1)
        session.start()
        scheduler.advance(1)

        self.assertEqual(session.time_left, 0)
        self.assertEqual(session.game_over_type, GameOverType.TIME_EXCEEDED)
        listener.on_game_over.assert_called_once_with(GameOverType.TIME_EXCEEDED, 0)
        self.assertEqual(scheduler.pending, 0)

    def test_deadlock_triggers_one_reshuffle(self) -> None:
        session, listener = make_session(DEADLOCKED)
        session.start()
        positions = session.grid.occupied_positions()
        session.handle_cell_click(1, 2)
        session.handle_cell_click(3, 3)

        self.assertEqual(session.steps, 1)
        self.assertEqual(session.reshuffle_credits, 4)
        listener.on_notice.assert_called_once()
        self.assertEqual(listener.on_notice.call_args[0][0], NoticeKind.DEADLOCK_RESHUFFLE)
        self.assertTrue(is_solvable(session.grid))
        self.assertEqual(session.grid.occupied_positions(), positions)
        self.assertEqual(session.remain, 12)


class SessionInputTests(unittest.TestCase):
    def test_clicks_ignored_before_start(self) -> None:
        session, listener = make_session(SINGLE_ADJACENT_PAIR)
        session.handle_cell_click(1, 1)
        self.assertEqual(session.state, SessionState.IDLE)
        self.assertIsNone(session.selection)
        listener.on_selection_changed.assert_not_called()

    def test_empty_and_border_cells_ignored(self) -> None:
        session, _ = make_session(SINGLE_ADJACENT_PAIR)
        session.start()
        session.handle_cell_click(3, 3)
        session.handle_cell_click(0, 0)
        session.handle_cell_click(40, 40)
        self.assertIsNone(session.selection)
        self.assertEqual(session.state, SessionState.PLAYING)

    def test_clicking_selected_cell_clears_selection(self) -> None:
        session, listener = make_session(SINGLE_ADJACENT_PAIR)
        session.start()
        session.handle_cell_click(1, 1)
        session.handle_cell_click(1, 1)
        self.assertIsNone(session.selection)
        self.assertEqual(listener.on_selection_changed.call_args, call(None))
        self.assertEqual(session.steps, 0)

    def test_mismatch_moves_selection_without_step(self) -> None:
        session, _ = make_session(["ab", "BA"])
        session.start()
        session.handle_cell_click(1, 1)
        session.handle_cell_click(1, 2)
        self.assertEqual(session.selection.position, (1, 2))
        self.assertEqual(session.selection.letter, "b")
        self.assertEqual(session.steps, 0)

    def test_same_case_letters_do_not_match(self) -> None:
        session, _ = make_session(["aa", "AA"])
        session.start()
        session.handle_cell_click(1, 1)
        session.handle_cell_click(1, 2)
        self.assertEqual(session.selection.position, (1, 2))
        self.assertEqual(session.score, 0)

    def test_clicks_ignored_while_resolving(self) -> None:
        session, _ = make_session(["aA", "bB"], auto_acknowledge=False)
        session.start()
        session.handle_cell_click(1, 1)
        session.handle_cell_click(1, 2)
        session.handle_cell_click(2, 1)
        self.assertEqual(session.state, SessionState.RESOLVING)
        self.assertIsNone(session.selection)
        self.assertEqual(session.steps, 0)
        self.assertFalse(session.request_reshuffle())

        ticket = session.pending_animation
        self.assertTrue(ticket.resolve())
        self.assertFalse(ticket.resolve())
        self.assertEqual(session.steps, 1)
        self.assertEqual(session.state, SessionState.PLAYING)

    def test_shake_waits_for_acknowledgment(self) -> None:
        session, listener = make_session(STUCK_PAIR, auto_acknowledge=False)
        session.start()
        session.handle_cell_click(1, 2)
        session.handle_cell_click(3, 3)

        ticket = session.pending_animation
        self.assertEqual(ticket.kind, AnimationKind.SHAKE)
        cells, emitted = listener.on_shake_effect.call_args[0]
        self.assertIs(emitted, ticket)
        self.assertEqual([tile.position for tile in cells], [(1, 2), (3, 3)])
        self.assertEqual(session.steps, 0)

        ticket.resolve()
        self.assertEqual(listener.on_shake_effect.call_args, call((), None))
        self.assertIsNone(session.selection)
        self.assertEqual(session.steps, 1)
        self.assertEqual(session.score, 0)


class SessionFeatureTests(unittest.TestCase):
    def test_hint_after_fifth_step_and_cleared_on_click(self) -> None:
        session, listener = make_session(STUCK_PAIR)
        session.start()
        for _ in range(5):
            session.handle_cell_click(1, 2)
            session.handle_cell_click(3, 3)

        hint = listener.on_hint.call_args[0][0]
        self.assertEqual([(t.row, t.col, t.letter) for t in hint], [(2, 1, "e"), (3, 1, "E")])
        self.assertEqual(session.hint, hint)

        session.handle_cell_click(2, 1)
        self.assertEqual(listener.on_hint.call_args, call(()))
        self.assertEqual(session.hint, ())

    def test_target_letter_event_fires_on_resolution(self) -> None:
        session, listener = make_session(["aA", "bB"], auto_acknowledge=False)
        session.start()
        session.handle_cell_click(1, 1)
        session.handle_cell_click(1, 2)
        listener.on_target_letter_cleared.assert_not_called()
        session.pending_animation.resolve()
        listener.on_target_letter_cleared.assert_called_once_with()

        session.handle_cell_click(2, 1)
        session.handle_cell_click(2, 2)
        session.pending_animation.resolve()
        listener.on_target_letter_cleared.assert_called_once_with()
        self.assertEqual(session.game_over_type, GameOverType.NORMAL)

    def test_set_target_letter(self) -> None:
        session, _ = make_session(SINGLE_ADJACENT_PAIR)
        session.set_target_letter("q")
        self.assertEqual(session.get_target_letter(), "Q")
        session.start()
        session.generator.generate.assert_called_with("Q")
        with self.assertRaises(PreconditionError):
            session.set_target_letter("7")

    def test_manual_reshuffle_spends_credit(self) -> None:
        session, listener = make_session(STUCK_PAIR, reshuffle_credits=1)
        session.start()
        session.handle_cell_click(2, 1)
        self.assertTrue(session.request_reshuffle())
        self.assertEqual(session.reshuffle_credits, 0)
        self.assertIsNone(session.selection)
        self.assertTrue(is_solvable(session.grid))
        self.assertFalse(session.request_reshuffle())

    def test_deadlock_without_credits_only_notifies(self) -> None:
        session, listener = make_session(DEADLOCKED, reshuffle_credits=0)
        session.start()
        before = session.grid.to_jsonable()
        with self.assertLogs("letterlink.session.game", level="WARNING"):
            session.handle_cell_click(1, 2)
            session.handle_cell_click(3, 3)
        listener.on_notice.assert_called_once()
        self.assertEqual(listener.on_notice.call_args[0][0], NoticeKind.DEADLOCK_NO_CREDITS)
        self.assertEqual(session.grid.to_jsonable(), before)

    def test_restart_cancels_pending_animation(self) -> None:
        session, _ = make_session(["aA", "bB"], auto_acknowledge=False)
        session.start()
        session.handle_cell_click(1, 1)
        session.handle_cell_click(1, 2)
        ticket = session.pending_animation

        session.restart()
        self.assertTrue(ticket.cancelled)
        self.assertFalse(ticket.resolve())
        self.assertEqual(session.score, 0)
        self.assertEqual(session.steps, 0)
        self.assertEqual(session.remain, 4)
        self.assertEqual(session.state, SessionState.PLAYING)

    def test_destroy_stops_countdown(self) -> None:
        scheduler = ManualScheduler()
        session, listener = make_session(SINGLE_ADJACENT_PAIR, scheduler=scheduler)
        session.start()
        session.destroy()
        scheduler.advance(10)
        self.assertEqual(session.time_left, 120)
        self.assertEqual(session.state, SessionState.IDLE)
        self.assertEqual(scheduler.pending, 0)
        listener.on_game_over.assert_not_called()

    def test_nothing_changes_after_game_over(self) -> None:
        scheduler = ManualScheduler()
        session, listener = make_session(STUCK_PAIR, scheduler=scheduler, initial_time=2)
        session.start()
        scheduler.advance(2)
        session.handle_cell_click(2, 1)
        session.handle_cell_click(3, 1)
        scheduler.advance(5)
        self.assertEqual(session.score, 0)
        self.assertEqual(session.time_left, 0)
        self.assertFalse(session.request_reshuffle())
        listener.on_game_over.assert_called_once_with(GameOverType.TIME_EXCEEDED, 0)

    def test_failing_listener_does_not_break_session(self) -> None:
        class Broken(SessionListener):
            def on_score_changed(self, score: int) -> None:
                raise RuntimeError("boom")

        session, recorder = make_session(SINGLE_ADJACENT_PAIR)
        session.add_listener(Broken())
        with self.assertLogs("letterlink.session.events", level="ERROR"):
            session.start()
            session.handle_cell_click(1, 1)
            session.handle_cell_click(1, 2)
        self.assertEqual(session.game_over_type, GameOverType.NORMAL)
        recorder.on_game_over.assert_called_once_with(GameOverType.NORMAL, 100)

    def test_config_validation(self) -> None:
        with self.assertRaises(ConfigurationError):
            SessionConfig(initial_time=0)
        with self.assertRaises(PreconditionError):
            SessionConfig(target_letter="ab")
        self.assertEqual(SessionConfig(target_letter="z").target_letter, "Z")

    def test_default_engines_share_bounded_verifier(self) -> None:
        session = GameSession(SessionConfig(play_rows=2, play_cols=2, seed=1))
        self.assertIs(session.generator.verifier, session.reshuffler.verifier)
        self.assertEqual(session.generator.verifier.config.node_budget, SEARCH_NODE_BUDGET)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

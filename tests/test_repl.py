"""Tests for the REPL module."""

from unittest.mock import MagicMock

import pytest

from chainscout.orchestrator import TurnResult, TurnStatus
from chainscout.repl import ChainscoutREPL


def _make_mock_app(result=None):
    app = MagicMock()
    app.debug = False
    app.ask.return_value = result or TurnResult(
        status=TurnStatus.ANSWERED, text="ok", model_calls=1, usage=(10, 2),
    )
    return app


def _scripted_input(*lines):
    """An input function that replays ``lines``, then signals end of input."""
    queue = list(lines)

    def _input(prompt):
        if not queue:
            raise EOFError
        item = queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    return _input


@pytest.mark.parametrize("command", ["exit", "quit", "EXIT", "  Quit  "])
def test_exit_commands_end_session(command):
    app = _make_mock_app()
    repl = ChainscoutREPL(app, input_fn=_scripted_input(command, "never sent"))
    repl.run()
    app.ask.assert_not_called()


def test_blank_lines_are_skipped():
    app = _make_mock_app()
    repl = ChainscoutREPL(app, input_fn=_scripted_input("", "   ", "exit"))
    repl.run()
    app.ask.assert_not_called()


def test_line_is_forwarded_verbatim():
    app = _make_mock_app()
    repl = ChainscoutREPL(app, input_fn=_scripted_input("  balance of vitalik.eth? ", "exit"))
    repl.run()
    app.ask.assert_called_once_with("  balance of vitalik.eth? ")


def test_end_of_input_ends_session():
    app = _make_mock_app()
    repl = ChainscoutREPL(app, input_fn=_scripted_input("latest blocks"))
    repl.run()
    assert app.ask.call_count == 1


def test_interrupt_at_prompt_continues():
    app = _make_mock_app()
    repl = ChainscoutREPL(app, input_fn=_scripted_input(KeyboardInterrupt(), "stats", "exit"))
    repl.run()
    app.ask.assert_called_once_with("stats")


def test_error_does_not_end_session():
    app = _make_mock_app()
    app.ask.side_effect = [RuntimeError("boom"), TurnResult(status=TurnStatus.ANSWERED, text="fine")]
    repl = ChainscoutREPL(app, input_fn=_scripted_input("first", "second", "exit"))
    repl.run()
    assert app.ask.call_count == 2


def test_session_counters():
    app = _make_mock_app()
    repl = ChainscoutREPL(app)

    repl.handle_line("a")
    app.ask.return_value = TurnResult(
        status=TurnStatus.BUDGET_EXHAUSTED, text="gave up", tool_results=[MagicMock(), MagicMock()],
    )
    repl.handle_line("b")

    assert repl._turns == 2
    assert repl._answered == 1
    assert repl._tool_calls == 2
    assert repl._input_tokens == 10
    assert repl._output_tokens == 2

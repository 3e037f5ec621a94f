"""Interactive REPL mode for Chainscout."""

import time
from typing import Callable

from rich.panel import Panel

from .cli import ChainscoutApp
from .orchestrator import TurnStatus
from .ui import CYAN, VIOLET, console, render_error, render_header

EXIT_COMMANDS = ("exit", "quit")

EXAMPLES = (
    "What's the balance of vitalik.eth?",
    "Show me recent transactions for 0x1234...",
    "What are the latest blocks?",
    "Search for USDC token",
    "Get network statistics",
)


class ChainscoutREPL:
    """Line-at-a-time front end for the conversation loop."""

    def __init__(self, app: ChainscoutApp, input_fn: Callable[[str], str] = input):
        self.app = app
        self._input = input_fn
        self._start_time = time.monotonic()
        self._turns = 0
        self._answered = 0
        self._tool_calls = 0
        self._input_tokens = 0
        self._output_tokens = 0

    def welcome(self) -> None:
        """Show welcome message."""
        render_header(
            "CHAINSCOUT",
            "Ask anything about Ethereum addresses, transactions, tokens, blocks or network stats.",
        )
        console.print("Examples:", style=f"bold {CYAN}")
        for example in EXAMPLES:
            console.print(f'  - "{example}"', style="dim")
        console.print('Type "exit" to quit.\n', style="dim")
        if self.app.debug:
            console.print("Debug mode enabled - verbose logging active\n", style="dim yellow")

    def handle_line(self, line: str) -> None:
        """Forward one line of user text to the conversation loop."""
        self._turns += 1
        try:
            result = self.app.ask(line)
        except Exception as e:
            render_error(f"Error: {e}")
            return

        self._tool_calls += len(result.tool_results)
        self._input_tokens += result.usage[0]
        self._output_tokens += result.usage[1]
        if result.status == TurnStatus.ANSWERED:
            self._answered += 1

    def _print_exit_summary(self) -> None:
        elapsed = time.monotonic() - self._start_time
        minutes = int(elapsed) // 60
        seconds = int(elapsed) % 60
        wall = f"{minutes}m {seconds:02d}s" if minutes > 0 else f"{seconds}s"

        def _fmt(n: int) -> str:
            return f"~{n / 1000:.1f}k" if n >= 1000 else f"~{n}"

        lines = [
            f"  [bold {CYAN}]Session Summary[/]",
            f"  Questions:     {self._turns} ({self._answered} answered)",
            f"  Tool calls:    {self._tool_calls}",
            f"  Tokens:        {_fmt(self._input_tokens)} input / {_fmt(self._output_tokens)} output",
            f"  Wall Time:     {wall}",
        ]
        console.print()
        console.print(Panel("\n".join(lines), border_style=VIOLET, padding=(0, 1), expand=False))
        console.print("Goodbye!", style=f"dim {VIOLET}")

    def run(self) -> None:
        """Start the REPL loop."""
        self.welcome()

        while True:
            try:
                line = self._input("You: ")
            except KeyboardInterrupt:
                console.print("\n")
                continue
            except EOFError:
                break

            if not line.strip():
                continue

            if line.strip().lower() in EXIT_COMMANDS:
                break

            try:
                self.handle_line(line)
            except KeyboardInterrupt:
                console.print("\nInterrupted.", style="dim red")

        self._print_exit_summary()

"""Ordered, append-only conversation log replayed to the model."""

import logging
from typing import Iterator, List, Tuple

from .turns import Turn, UserTurn

logger = logging.getLogger(__name__)


class ConversationState:
    """The literal context sent to the model, in insertion order.

    Only the orchestrator that owns an instance mutates it. Trimming drops
    the oldest turns but never separates a model tool-call turn from the tool
    turn that answers it.
    """

    def __init__(self) -> None:
        self._turns: List[Turn] = []

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    def append(self, turn: Turn) -> None:
        self._turns.append(turn)

    def snapshot(self) -> Tuple[Turn, ...]:
        return tuple(self._turns)

    def checkpoint(self) -> int:
        """Return a mark that rollback() can restore to."""
        return len(self._turns)

    def rollback(self, mark: int) -> int:
        """Drop every turn appended after ``mark``. Returns how many were dropped."""
        if mark < 0 or mark > len(self._turns):
            raise ValueError(f"Invalid checkpoint {mark} for {len(self._turns)} turns")
        dropped = len(self._turns) - mark
        del self._turns[mark:]
        if dropped:
            logger.debug("Rolled back %d turn(s)", dropped)
        return dropped

    def clear(self) -> None:
        self._turns.clear()

    def trim(self, max_turns: int) -> int:
        """Drop the oldest turns so at most ``max_turns`` remain.

        The cut is moved forward to the next user turn, so the retained log
        always opens with a user turn and every model/tool pair stays whole.
        When no user turn lies past the cut, the newest exchange alone is over
        the ceiling and the log is cleared.

        Returns:
            Number of turns removed.
        """
        if max_turns < 0:
            raise ValueError("max_turns must be >= 0")

        excess = len(self._turns) - max_turns
        if excess <= 0:
            return 0

        cut = self._find_cut(excess)
        del self._turns[:cut]
        logger.debug("Trimmed %d turn(s), %d remain", cut, len(self._turns))
        return cut

    def _find_cut(self, start: int) -> int:
        turns = self._turns
        for i in range(start, len(turns)):
            if isinstance(turns[i], UserTurn):
                return i
        return len(turns)

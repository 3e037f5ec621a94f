"""Tool-calling conversation loop.

One user turn runs through possibly several model <-> tool round-trips:

    Start -> Awaiting-Model -> Inspect -+-> Done (answer)
                  ^                     +-> Done (budget exhausted)
                  |                     |
                  +---- dispatch tools -+

The loop is strictly sequential. Within a round the dispatcher may run
tool calls concurrently, but results come back in request order. Tool
failures reach the model as data; a failed model call ends only the
current user turn.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from .conversation.state import ConversationState
from .conversation.turns import ModelTurn, ToolCallRequest, ToolResult, ToolTurn, UserTurn
from .errors import ModelCallFailure
from .providers.base import BaseProvider
from .tools.dispatcher import ToolDispatcher
from .tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROUNDS = 5
DEFAULT_MAX_TURNS = 40

BUDGET_EXHAUSTED_NOTICE = (
    "No answer was produced: the assistant used all {rounds} tool rounds "
    "without finishing. Try a narrower question."
)
MODEL_FAILURE_NOTICE = "The model request failed: {error}"


class TurnStatus(str, Enum):
    """How a user turn ended."""

    ANSWERED = "answered"
    BUDGET_EXHAUSTED = "budget_exhausted"
    MODEL_FAILURE = "model_failure"


@dataclass(frozen=True)
class TraceEvent:
    """One step of the loop, for verbose tracing sinks."""

    kind: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class OrchestratorConfig:
    """Everything that varies between conversation drivers."""

    system_prompt: Optional[str] = None
    max_rounds: int = DEFAULT_MAX_ROUNDS
    max_turns: int = DEFAULT_MAX_TURNS
    concurrent_tools: bool = True
    max_workers: int = 4
    trace: Optional[Callable[[TraceEvent], None]] = None
    on_narration: Optional[Callable[[str], None]] = None

    def __post_init__(self) -> None:
        if self.max_rounds < 0:
            raise ValueError("max_rounds must be >= 0")
        if self.max_turns < 1:
            raise ValueError("max_turns must be >= 1")


@dataclass
class TurnResult:
    """Outcome of one user turn."""

    status: TurnStatus
    text: str = ""
    rounds: int = 0
    model_calls: int = 0
    tool_results: List[ToolResult] = field(default_factory=list)
    narration: List[str] = field(default_factory=list)
    usage: Tuple[int, int] = (0, 0)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == TurnStatus.ANSWERED


class Orchestrator:
    """Drive user turns through the model and the tool registry.

    Owns the conversation state for its lifetime; nothing else mutates it.
    """

    def __init__(
        self,
        model: BaseProvider,
        registry: ToolRegistry,
        config: Optional[OrchestratorConfig] = None,
    ):
        self.model = model
        self.registry = registry
        self.config = config or OrchestratorConfig()
        self.dispatcher = ToolDispatcher(registry)
        self._state = ConversationState()

    @property
    def history(self) -> tuple:
        return self._state.snapshot()

    def reset(self) -> None:
        """Forget the conversation."""
        self._state.clear()
        self._sync_model()

    def run_turn(self, text: str) -> TurnResult:
        """Run one user turn to completion.

        Never raises for tool or model failures; the returned TurnResult says
        how the turn ended.
        """
        mark = self._state.checkpoint()
        user_turn = UserTurn(text)
        self._state.append(user_turn)
        self._trace("user_input", text=text)

        result = TurnResult(status=TurnStatus.ANSWERED)
        pending = [user_turn]
        rounds_left = self.config.max_rounds

        try:
            while True:
                model_turn = self._ask_model(pending, result)
                calls = model_turn.tool_calls

                if not calls:
                    if model_turn.parts:
                        self._state.append(model_turn)
                    result.text = model_turn.text
                    self._trace("answer", text=result.text, rounds=result.rounds)
                    self._trim()
                    return result

                if rounds_left == 0:
                    logger.debug("Round budget of %d exhausted", self.config.max_rounds)
                    self._abandon(mark)
                    result.status = TurnStatus.BUDGET_EXHAUSTED
                    result.text = BUDGET_EXHAUSTED_NOTICE.format(rounds=self.config.max_rounds)
                    self._trace("budget_exhausted", rounds=result.rounds)
                    return result

                for part in model_turn.parts:
                    if isinstance(part, ToolCallRequest):
                        break
                    if part.text.strip():
                        self._narrate(part.text, result)

                tool_turn = self._run_tools(model_turn, result)
                self._state.append(model_turn)
                self._state.append(tool_turn)
                pending = [tool_turn]
                rounds_left -= 1
                result.rounds += 1

        except ModelCallFailure as e:
            logger.debug("Model call failed: %s", e)
            self._abandon(mark)
            result.status = TurnStatus.MODEL_FAILURE
            result.error = str(e)
            result.text = MODEL_FAILURE_NOTICE.format(error=e)
            self._trace("model_failure", error=str(e))
            return result
        except BaseException:
            # Interrupted or crashed mid-turn: keep the history well-formed
            self._abandon(mark)
            raise

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ask_model(self, pending: list, result: TurnResult) -> ModelTurn:
        if self.model.manages_history:
            history = tuple(pending)
        else:
            history = self._state.snapshot()

        tools = self.registry.definitions
        self._trace("model_request", turns=len(history), tools=len(tools))
        model_turn = self.model.send_turn(history, tools, system=self.config.system_prompt)
        result.model_calls += 1

        usage = self.model.last_usage
        if usage:
            result.usage = (result.usage[0] + usage[0], result.usage[1] + usage[1])

        self._trace(
            "model_response",
            text=model_turn.text,
            tool_calls=[c.name for c in model_turn.tool_calls],
        )
        return model_turn

    def _run_tools(self, model_turn: ModelTurn, result: TurnResult) -> ToolTurn:
        calls = model_turn.tool_calls
        for call in calls:
            self._trace("tool_call", name=call.name, arguments=dict(call.arguments), id=call.call_id)

        results = self.dispatcher.dispatch_all(
            calls,
            concurrent=self.config.concurrent_tools,
            max_workers=self.config.max_workers,
        )

        for tool_result in results:
            self._trace(
                "tool_result",
                name=tool_result.name,
                ok=tool_result.ok,
                error=tool_result.error.message if tool_result.error else None,
            )
        result.tool_results.extend(results)
        return ToolTurn(tuple(results))

    def _narrate(self, text: str, result: TurnResult) -> None:
        result.narration.append(text)
        self._trace("narration", text=text)
        if self.config.on_narration is not None:
            self.config.on_narration(text)

    def _abandon(self, mark: int) -> None:
        """Drop an unfinished user turn so the replayed history stays well-formed."""
        self._state.rollback(mark)
        self._sync_model()

    def _trim(self) -> None:
        if self._state.trim(self.config.max_turns):
            self._sync_model()

    def _sync_model(self) -> None:
        if self.model.manages_history:
            self.model.sync_history(self._state.snapshot())

    def _trace(self, kind: str, **data: Any) -> None:
        if self.config.trace is not None:
            self.config.trace(TraceEvent(kind, data))

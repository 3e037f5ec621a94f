"""Tests for the tool dispatcher: every outcome is a ToolResult."""

import pytest

from chainscout.conversation.turns import (
    HandlerFailure,
    InvalidArguments,
    ToolCallRequest,
    UnknownTool,
)
from chainscout.errors import NotFound, RateLimited
from chainscout.tools.dispatcher import ToolDispatcher, normalize_arguments
from chainscout.tools.registry import ToolRegistry
from chainscout.tools.schema import ParamSpec, ToolSpec


def _make_dispatcher():
    calls = []

    def get_address_transactions(address: str, limit: int = 10) -> dict:
        """List transactions.

        Args:
            address: Address hash
            limit: How many to return
        """
        calls.append(("tx", address, limit))
        return {"address": address, "limit": limit}

    def always_fails(address: str) -> dict:
        raise NotFound(f"addresses/{address}")

    def rate_limited() -> dict:
        raise RateLimited("stats")

    def crashes() -> dict:
        raise KeyError("items")

    registry = ToolRegistry()
    registry.register_function("getAddressTransactions", get_address_transactions)
    registry.register_function("getAddressInfo", always_fails)
    registry.register_function("getNetworkStats", rate_limited)
    registry.register_function("broken", crashes)
    registry.freeze()
    return ToolDispatcher(registry), calls


class TestDispatch:

    @pytest.mark.parametrize("name", ["nope", "", "getaddresstransactions", "getAddressTransactions "])
    def test_unknown_tool_never_raises(self, name):
        dispatcher, calls = _make_dispatcher()

        result = dispatcher.dispatch(ToolCallRequest(name, {"address": "0x1"}, call_id="id-1"))

        assert not result.ok
        assert result.error == UnknownTool(name)
        assert result.call_id == "id-1"
        assert calls == []
        assert result.to_response()["error"]["kind"] == "UnknownTool"

    def test_success_payload(self):
        dispatcher, calls = _make_dispatcher()

        result = dispatcher.dispatch(
            ToolCallRequest("getAddressTransactions", {"address": "0xabc", "limit": 3}, call_id="x")
        )

        assert result.ok
        assert result.payload == {"address": "0xabc", "limit": 3}
        assert result.call_id == "x"
        assert result.to_response() == {"result": {"address": "0xabc", "limit": 3}}
        assert calls == [("tx", "0xabc", 3)]

    def test_missing_required_param_skips_handler(self):
        dispatcher, calls = _make_dispatcher()

        result = dispatcher.dispatch(ToolCallRequest("getAddressTransactions", {"limit": 3}))

        assert isinstance(result.error, InvalidArguments)
        assert result.error.missing_fields == ("address",)
        assert calls == []

    def test_null_required_param_counts_as_missing(self):
        dispatcher, calls = _make_dispatcher()

        result = dispatcher.dispatch(ToolCallRequest("getAddressTransactions", {"address": None}))

        assert result.error.missing_fields == ("address",)
        assert calls == []

    def test_optional_param_may_be_omitted(self):
        dispatcher, calls = _make_dispatcher()

        result = dispatcher.dispatch(ToolCallRequest("getAddressTransactions", {"address": "0xabc"}))

        assert result.ok
        assert calls == [("tx", "0xabc", 10)]

    def test_float_count_is_coerced_to_int(self):
        dispatcher, calls = _make_dispatcher()

        dispatcher.dispatch(ToolCallRequest("getAddressTransactions", {"address": "0xabc", "limit": 5.0}))

        assert calls == [("tx", "0xabc", 5)]
        assert isinstance(calls[0][2], int)

    def test_uncoercible_value_is_invalid(self):
        dispatcher, calls = _make_dispatcher()

        result = dispatcher.dispatch(
            ToolCallRequest("getAddressTransactions", {"address": "0xabc", "limit": "lots"})
        )

        assert isinstance(result.error, InvalidArguments)
        assert result.error.invalid_fields == ("limit",)
        assert result.error.missing_fields == ()
        assert calls == []

    def test_undeclared_arguments_are_dropped(self):
        dispatcher, calls = _make_dispatcher()

        result = dispatcher.dispatch(
            ToolCallRequest("getAddressTransactions", {"address": "0xabc", "network": "mainnet"})
        )

        assert result.ok
        assert calls == [("tx", "0xabc", 10)]

    def test_data_service_error_becomes_handler_failure(self):
        dispatcher, _ = _make_dispatcher()

        result = dispatcher.dispatch(ToolCallRequest("getAddressInfo", {"address": "0xdead"}))

        assert isinstance(result.error, HandlerFailure)
        assert result.error.name == "getAddressInfo"
        assert "Not found" in result.error.reason
        response = result.to_response()
        assert response["error"]["kind"] == "HandlerFailure"
        assert "getAddressInfo" in response["error"]["message"]

    def test_rate_limit_becomes_handler_failure(self):
        dispatcher, _ = _make_dispatcher()
        result = dispatcher.dispatch(ToolCallRequest("getNetworkStats", {}))
        assert isinstance(result.error, HandlerFailure)
        assert "Rate limit" in result.error.reason

    def test_unexpected_exception_becomes_handler_failure(self):
        dispatcher, _ = _make_dispatcher()
        result = dispatcher.dispatch(ToolCallRequest("broken", {}))
        assert isinstance(result.error, HandlerFailure)
        assert "items" in result.error.reason


class TestDispatchAll:

    def test_empty_round(self):
        dispatcher, _ = _make_dispatcher()
        assert dispatcher.dispatch_all([]) == []

    @pytest.mark.parametrize("concurrent", [True, False])
    def test_mixed_round_keeps_order(self, concurrent):
        dispatcher, _ = _make_dispatcher()
        calls = [
            ToolCallRequest("getAddressTransactions", {"address": "0x1"}, call_id="1"),
            ToolCallRequest("missing", {}, call_id="2"),
            ToolCallRequest("getAddressInfo", {"address": "0x3"}, call_id="3"),
            ToolCallRequest("getAddressTransactions", {}, call_id="4"),
        ]

        results = dispatcher.dispatch_all(calls, concurrent=concurrent)

        assert [r.call_id for r in results] == ["1", "2", "3", "4"]
        assert results[0].ok
        assert isinstance(results[1].error, UnknownTool)
        assert isinstance(results[2].error, HandlerFailure)
        assert isinstance(results[3].error, InvalidArguments)


class TestNormalizeArguments:

    def _spec(self):
        return ToolSpec(
            name="t",
            description="",
            params=(
                ParamSpec("n", "integer"),
                ParamSpec("x", "number", required=False),
                ParamSpec("s", "string", required=False),
                ParamSpec("b", "boolean", required=False),
                ParamSpec("items", "array", required=False),
            ),
        )

    def test_coercions(self):
        args, missing, invalid = normalize_arguments(
            self._spec(),
            {"n": "7", "x": "1.5", "s": 12345.0, "b": "true", "items": ("a",)},
        )
        assert args == {"n": 7, "x": 1.5, "s": "12345", "b": True, "items": ["a"]}
        assert missing == ()
        assert invalid == ()

    def test_bool_is_not_an_integer(self):
        _args, missing, invalid = normalize_arguments(self._spec(), {"n": True})
        assert invalid == ("n",)
        assert missing == ()

    def test_fractional_float_is_not_an_integer(self):
        _args, _missing, invalid = normalize_arguments(self._spec(), {"n": 2.5})
        assert invalid == ("n",)

    def test_missing_required(self):
        args, missing, invalid = normalize_arguments(self._spec(), {"s": "x"})
        assert args == {"s": "x"}
        assert missing == ("n",)
        assert invalid == ()

    def test_none_arguments(self):
        _args, missing, _invalid = normalize_arguments(self._spec(), None)
        assert missing == ("n",)

"""Tests for the Blockscout client and the explorer tool handlers.

The HTTP layer is replaced with httpx.MockTransport, so no request leaves
the process.
"""

import httpx
import pytest

from chainscout.blockscout import BlockscoutClient
from chainscout.errors import (
    DataServiceError,
    NotFound,
    RateLimited,
    TransientNetworkError,
    UpstreamError,
)
from chainscout.tools.blockscout import MAX_ITEMS, BlockscoutTools, is_ens_name

VITALIK = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"


def _client(routes, seen=None):
    """Build a client whose transport answers from a path -> (status, body) dict."""
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        path = request.url.path.split("/api/v2/", 1)[-1]
        status, body = routes.get(path, (404, {"message": "Not found"}))
        if isinstance(body, Exception):
            raise body
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    return BlockscoutClient(transport=httpx.MockTransport(handler))


class TestBlockscoutClient:

    def test_get_decodes_json(self):
        client = _client({"stats": (200, {"total_blocks": "1"})})
        assert client.stats() == {"total_blocks": "1"}

    def test_search_sends_query_param(self):
        seen = []
        client = _client({"search": (200, {"items": []})}, seen)

        client.search("vitalik.eth")

        assert seen[0].url.params["q"] == "vitalik.eth"
        assert seen[0].headers["accept"] == "application/json"

    def test_base_url_gets_trailing_slash(self):
        client = BlockscoutClient(base_url="https://example.test/api/v2")
        assert client.base_url == "https://example.test/api/v2/"
        client.close()

    def test_404_is_not_found(self):
        client = _client({})
        with pytest.raises(NotFound) as exc_info:
            client.address("0xdead")
        assert exc_info.value.path == "addresses/0xdead"

    def test_429_is_rate_limited(self):
        client = _client({"stats": (429, {})})
        with pytest.raises(RateLimited):
            client.stats()

    def test_5xx_is_upstream_error(self):
        client = _client({"blocks": (502, {})})
        with pytest.raises(UpstreamError) as exc_info:
            client.blocks()
        assert exc_info.value.status == 502

    def test_transport_failure_is_transient(self):
        client = _client({"blocks": (0, httpx.ConnectError("dns failure"))})
        with pytest.raises(TransientNetworkError):
            client.blocks()

    def test_bad_json_is_data_service_error(self):
        client = _client({"stats": (200, "<html>oops</html>")})
        with pytest.raises(DataServiceError):
            client.stats()

    def test_context_manager_closes(self):
        with _client({}) as client:
            assert not client.client.is_closed
        assert client.client.is_closed


class TestBlockscoutTools:

    def test_address_info(self):
        tools = BlockscoutTools(_client({
            f"addresses/{VITALIK}": (200, {
                "hash": VITALIK,
                "coin_balance": "1000",
                "is_contract": False,
                "is_verified": None,
                "ens_domain_name": "vitalik.eth",
            }),
        }))

        info = tools.get_address_info(VITALIK)

        assert info == {
            "address": VITALIK,
            "balance": "1000",
            "type": "EOA (Externally Owned Account)",
            "verified": False,
            "ens_name": "vitalik.eth",
        }

    def test_missing_balance_defaults_to_zero(self):
        tools = BlockscoutTools(_client({
            "addresses/0x1": (200, {"hash": "0x1", "coin_balance": None, "is_contract": True}),
        }))
        info = tools.get_address_info("0x1")
        assert info["balance"] == "0"
        assert info["type"] == "Contract"

    def test_latest_blocks_clamped(self):
        items = [{"height": 100 - i, "hash": f"0x{i}", "miner": {"hash": "0xm"}} for i in range(60)]
        tools = BlockscoutTools(_client({"blocks": (200, {"items": items})}))

        assert [b["number"] for b in tools.get_latest_blocks(3)] == [100, 99, 98]
        assert len(tools.get_latest_blocks(500)) == MAX_ITEMS
        assert len(tools.get_latest_blocks(0)) == 1
        assert len(tools.get_latest_blocks()) == 5
        assert tools.get_latest_blocks(1)[0]["miner"] == "0xm"

    def test_address_transactions(self):
        items = [
            {"hash": f"0x{i}", "from": {"hash": "0xa"}, "to": None, "value": "1"}
            for i in range(20)
        ]
        tools = BlockscoutTools(_client({"addresses/0xa/transactions": (200, {"items": items})}))

        txs = tools.get_address_transactions("0xa")

        assert len(txs) == 10
        assert txs[0]["from"] == "0xa"
        assert txs[0]["to"] is None

    def test_token_balances(self):
        tools = BlockscoutTools(_client({
            "addresses/0xa/token-balances": (200, [
                {
                    "token": {"name": "USD Coin", "symbol": "USDC", "address_hash": "0xusdc",
                              "type": "ERC-20", "decimals": "6"},
                    "value": "2500000",
                },
            ]),
        }))

        balances = tools.get_address_token_balances("0xa")

        assert balances == [{
            "token": {"name": "USD Coin", "symbol": "USDC", "address": "0xusdc", "type": "ERC-20"},
            "value": "2500000",
            "decimals": "6",
        }]

    def test_token_and_transaction_info(self):
        tools = BlockscoutTools(_client({
            "tokens/0xt": (200, {"name": "Tether", "symbol": "USDT", "holders": "100"}),
            "transactions/0xtx": (200, {"hash": "0xtx", "from": {"hash": "0xa"}, "block": 7}),
        }))

        token = tools.get_token_info("0xt")
        tx = tools.get_transaction_info("0xtx")

        assert token["holder_count"] == "100"
        assert tx["from"] == "0xa"
        assert tx["block_number"] == 7

    def test_search_resolves_ens(self):
        tools = BlockscoutTools(_client({
            "search": (200, {"items": [
                {"type": "token", "name": "Vitalik Token", "address": "0xtok"},
                {"type": "ens_domain", "name": "vitalik.eth", "address": VITALIK},
            ]}),
        }))

        result = tools.search_blockchain("vitalik.eth")

        assert result["resolved_address"] == VITALIK
        assert result["results_count"] == 2
        assert result["results"][1]["ens_resolution"] == f"vitalik.eth resolves to {VITALIK}"
        assert "ens_resolution" not in result["results"][0]

    def test_plain_search_does_not_resolve(self):
        tools = BlockscoutTools(_client({
            "search": (200, {"items": [{"type": "address", "name": "USDC", "address": "0xusdc"}]}),
        }))

        result = tools.search_blockchain("usdc")

        assert result["resolved_address"] is None
        assert result["results"][0]["address"] == "0xusdc"

    def test_search_with_no_results(self):
        tools = BlockscoutTools(_client({"search": (200, {"items": []})}))
        result = tools.search_blockchain("nothing.eth")
        assert result == {
            "query": "nothing.eth",
            "results_count": 0,
            "results": [],
            "resolved_address": None,
        }

    def test_handler_propagates_data_service_error(self):
        tools = BlockscoutTools(_client({"stats": (429, {})}))
        with pytest.raises(RateLimited):
            tools.get_network_stats()

    @pytest.mark.parametrize("query,expected", [
        ("vitalik.eth", True),
        (" Vitalik.ETH ", True),
        ("0xabc", False),
        ("ethereum", False),
    ])
    def test_is_ens_name(self, query, expected):
        assert is_ens_name(query) is expected

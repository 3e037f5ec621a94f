"""Read-only Blockscout query tools exposed to the model.

Each handler performs one explorer request and reduces the response to the
fields the model needs. Data service errors propagate to the dispatcher,
which reports them to the model as handler failures.
"""

import logging
from typing import Any, Callable, Dict, Optional

from ..blockscout import BlockscoutClient

logger = logging.getLogger(__name__)

MAX_ITEMS = 50
ENS_SUFFIX = ".eth"

# Search result types that carry a resolvable address
_ADDRESS_RESULT_TYPES = ("address", "ens_domain")


def _clamp(value: Optional[int], default: int) -> int:
    if value is None:
        return default
    return max(1, min(int(value), MAX_ITEMS))


def _hash_of(entry: Optional[dict]) -> Optional[str]:
    return entry.get("hash") if entry else None


def is_ens_name(query: str) -> bool:
    return query.strip().lower().endswith(ENS_SUFFIX)


class BlockscoutTools:
    """The explorer tool set, bound to one client."""

    name = "blockscout"
    description = "Read-only Ethereum queries against a Blockscout explorer"

    def __init__(self, client: BlockscoutClient):
        self.client = client

    def get_tools(self) -> Dict[str, Callable[..., Any]]:
        """Return a mapping of model-facing tool name -> handler."""
        return {
            "getAddressInfo": self.get_address_info,
            "getAddressTransactions": self.get_address_transactions,
            "getAddressTokenBalances": self.get_address_token_balances,
            "getTokenInfo": self.get_token_info,
            "getTransactionInfo": self.get_transaction_info,
            "getLatestBlocks": self.get_latest_blocks,
            "searchBlockchain": self.search_blockchain,
            "getNetworkStats": self.get_network_stats,
        }

    def get_address_info(self, address: str) -> dict:
        """Get basic information about an Ethereum address (0x...) including balance, transaction count, and type. If you have an ENS name like vitalik.eth, use searchBlockchain first to resolve it to an address.

        Args:
            address: Ethereum address in 0x format (40 hex characters after 0x)
        """
        data = self.client.address(address)
        return {
            "address": data.get("hash"),
            "balance": data.get("coin_balance") or "0",
            "type": "Contract" if data.get("is_contract") else "EOA (Externally Owned Account)",
            "verified": bool(data.get("is_verified")),
            "ens_name": data.get("ens_domain_name"),
        }

    def get_address_transactions(self, address: str, limit: int = 10) -> list:
        """Get recent transactions for an Ethereum address (0x...). If you have an ENS name, use searchBlockchain first to resolve it.

        Args:
            address: Ethereum address in 0x format (40 hex characters after 0x)
            limit: Number of transactions to retrieve (default 10, max 50)
        """
        data = self.client.address_transactions(address)
        items = (data.get("items") or [])[:_clamp(limit, 10)]
        return [
            {
                "hash": tx.get("hash"),
                "from": _hash_of(tx.get("from")),
                "to": _hash_of(tx.get("to")),
                "value": tx.get("value"),
                "gas_used": tx.get("gas_used"),
                "status": tx.get("status"),
                "timestamp": tx.get("timestamp"),
                "method": tx.get("method"),
            }
            for tx in items
        ]

    def get_address_token_balances(self, address: str) -> list:
        """Get all token balances for an Ethereum address (0x...). Shows ERC-20, ERC-721, and other token holdings. If you have an ENS name, use searchBlockchain first.

        Args:
            address: Ethereum address in 0x format (40 hex characters after 0x)
        """
        balances = self.client.address_token_balances(address) or []
        result = []
        for balance in balances:
            token = balance.get("token") or {}
            result.append({
                "token": {
                    "name": token.get("name"),
                    "symbol": token.get("symbol"),
                    "address": token.get("address") or token.get("address_hash"),
                    "type": token.get("type"),
                },
                "value": balance.get("value"),
                "decimals": token.get("decimals"),
            })
        return result

    def get_token_info(self, tokenAddress: str) -> dict:
        """Get detailed information about a specific token by its contract address, including name, symbol, total supply, and holder count.

        Args:
            tokenAddress: Token contract address in 0x format
        """
        data = self.client.token(tokenAddress)
        return {
            "name": data.get("name"),
            "symbol": data.get("symbol"),
            "decimals": data.get("decimals"),
            "total_supply": data.get("total_supply"),
            "holder_count": data.get("holders") or data.get("holders_count"),
            "type": data.get("type"),
        }

    def get_transaction_info(self, txHash: str) -> dict:
        """Get detailed information about a specific transaction including gas usage, fees, method called, and status.

        Args:
            txHash: Transaction hash in 0x format (64 hex characters after 0x)
        """
        data = self.client.transaction(txHash)
        return {
            "hash": data.get("hash"),
            "from": _hash_of(data.get("from")),
            "to": _hash_of(data.get("to")),
            "value": data.get("value"),
            "gas_used": data.get("gas_used"),
            "gas_limit": data.get("gas_limit"),
            "gas_price": data.get("gas_price"),
            "status": data.get("status"),
            "block_number": data.get("block_number") or data.get("block"),
            "timestamp": data.get("timestamp"),
            "method": data.get("method"),
            "fee": data.get("fee"),
        }

    def get_latest_blocks(self, count: int = 5) -> list:
        """Get information about the most recent blocks on the Ethereum blockchain, including block numbers, timestamps, gas usage, and miner information.

        Args:
            count: Number of latest blocks to retrieve (default 5, max 50)
        """
        data = self.client.blocks()
        items = (data.get("items") or [])[:_clamp(count, 5)]
        return [
            {
                "number": block.get("height"),
                "hash": block.get("hash"),
                "timestamp": block.get("timestamp"),
                "transaction_count": block.get("transaction_count") or block.get("tx_count"),
                "miner": _hash_of(block.get("miner")),
                "gas_used": block.get("gas_used"),
                "gas_limit": block.get("gas_limit"),
            }
            for block in items
        ]

    def search_blockchain(self, query: str) -> dict:
        """Universal search that can find and resolve ENS names (like vitalik.eth), addresses, transaction hashes, block numbers, token names or symbols. Use this first whenever you have an ENS name or need to find something by name or partial identifier.

        Args:
            query: Search query such as an ENS name, partial address, token name (USDC), transaction hash or block number
        """
        data = self.client.search(query)
        items = data.get("items") or []
        ens = is_ens_name(query)

        results = [self._search_item(item, query, ens) for item in items]

        resolved = None
        if ens:
            for item in items:
                if item.get("type") in _ADDRESS_RESULT_TYPES and item.get("address"):
                    resolved = item["address"]
                    logger.debug("ENS resolution found: %s -> %s", query, resolved)
                    break

        return {
            "query": query,
            "results_count": len(items),
            "results": results,
            "resolved_address": resolved,
        }

    @staticmethod
    def _search_item(item: dict, query: str, ens: bool) -> dict:
        kind = item.get("type")
        result: Dict[str, Any] = {"type": kind, "name": item.get("name") or "Unknown"}

        if kind in _ADDRESS_RESULT_TYPES and item.get("address"):
            result["address"] = item["address"]
            result["is_contract"] = item.get("is_smart_contract_verified")
            result["url"] = item.get("address_url") or item.get("url")
            if ens:
                result["ens_resolution"] = f"{query} resolves to {item['address']}"
        elif kind == "token" and item.get("address"):
            result["address"] = item["address"]
            result["symbol"] = item.get("symbol")
            result["token_type"] = item.get("token_type")
            result["url"] = item.get("token_url") or item.get("url")
        elif kind == "transaction" and item.get("tx_hash"):
            result["hash"] = item["tx_hash"]
            result["url"] = item.get("url")
        elif kind == "block" and item.get("block_number") is not None:
            result["block_number"] = item["block_number"]
            result["url"] = item.get("url")

        return result

    def get_network_stats(self) -> dict:
        """Get overall Ethereum network statistics including total blocks, transactions, addresses, average block time, and network utilization."""
        data = self.client.stats()
        return {
            "total_blocks": data.get("total_blocks"),
            "total_transactions": data.get("total_transactions"),
            "total_addresses": data.get("total_addresses"),
            "average_block_time": data.get("average_block_time"),
            "network_utilization": data.get("network_utilization_percentage"),
            "gas_prices": data.get("gas_prices"),
        }

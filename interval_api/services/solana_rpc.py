"""
Solana JSON-RPC client
Fetches the network checkpoint (recent blockhash + validity window) that
every transaction handed to a wallet must reference.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..errors import LedgerRpcError

logger = logging.getLogger(__name__)

CLUSTER_RPC_URLS = {
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "mainnet": "https://api.mainnet-beta.solana.com",
}

DEFAULT_COMMITMENT = "confirmed"


def cluster_rpc_url(network: str) -> str:
    """Public RPC endpoint for a cluster name, devnet when unknown"""
    return CLUSTER_RPC_URLS.get((network or "").strip().lower(), CLUSTER_RPC_URLS["devnet"])


@dataclass(frozen=True)
class Checkpoint:
    blockhash: str
    last_valid_block_height: int


@dataclass(frozen=True)
class CheckpointSnapshot:
    blockhash: str
    last_valid_block_height: int
    slot: int
    block_height: int

    def to_dict(self) -> dict:
        return {
            "blockhash": self.blockhash,
            "lastValidBlockHeight": self.last_valid_block_height,
            "slot": self.slot,
            "blockHeight": self.block_height,
        }


class SolanaRpcClient:
    """Thin JSON-RPC 2.0 client over a shared httpx.AsyncClient"""

    def __init__(self, rpc_url: str, http_client: httpx.AsyncClient, timeout: float = 10.0):
        self.rpc_url = rpc_url
        self.http_client = http_client
        self.timeout = timeout
        self._ids = itertools.count(1)

    async def _call(self, method: str, params: Optional[list] = None) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params or []}
        try:
            response = await self.http_client.post(self.rpc_url, json=payload, timeout=self.timeout)
        except httpx.TimeoutException as e:
            logger.error(f"❌ Solana RPC {method} timed out after {self.timeout}s")
            raise LedgerRpcError(f"Solana RPC {method} timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"❌ Solana RPC {method} transport error: {e}")
            raise LedgerRpcError(f"Solana RPC {method} failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"❌ Solana RPC {method} returned HTTP {response.status_code}")
            raise LedgerRpcError(f"Solana RPC {method} returned HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise LedgerRpcError(f"Solana RPC {method} returned invalid JSON") from e

        if body.get("error"):
            error = body["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            logger.error(f"❌ Solana RPC {method} error: {message}")
            raise LedgerRpcError(f"Solana RPC {method} error: {message}")

        if "result" not in body:
            raise LedgerRpcError(f"Solana RPC {method} returned no result")
        return body["result"]

    async def get_latest_blockhash(self, commitment: str = DEFAULT_COMMITMENT) -> Checkpoint:
        result = await self._call("getLatestBlockhash", [{"commitment": commitment}])
        try:
            value = result["value"]
            return Checkpoint(
                blockhash=value["blockhash"],
                last_valid_block_height=int(value["lastValidBlockHeight"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise LedgerRpcError("Solana RPC getLatestBlockhash returned a malformed result") from e

    async def get_slot(self, commitment: str = DEFAULT_COMMITMENT) -> int:
        return int(await self._call("getSlot", [{"commitment": commitment}]))

    async def get_block_height(self, commitment: str = DEFAULT_COMMITMENT) -> int:
        return int(await self._call("getBlockHeight", [{"commitment": commitment}]))

    async def get_checkpoint_snapshot(self, commitment: str = DEFAULT_COMMITMENT) -> CheckpointSnapshot:
        """Blockhash, slot and block height fetched concurrently"""
        checkpoint, slot, block_height = await asyncio.gather(
            self.get_latest_blockhash(commitment),
            self.get_slot(commitment),
            self.get_block_height(commitment),
        )
        return CheckpointSnapshot(
            blockhash=checkpoint.blockhash,
            last_valid_block_height=checkpoint.last_valid_block_height,
            slot=slot,
            block_height=block_height,
        )

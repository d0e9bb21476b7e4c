# Filename: chain_client.py

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solders.pubkey import Pubkey
from solders.rpc.config import RpcTransactionLogsFilterMentions
from solders.signature import Signature

from errors import NotFoundError, RateLimitError, TransientNetworkError, is_rate_limit_error
from websocket_listener import (
    SubscriptionListener,
    account_id_from_notification,
    signature_from_notification,
)

logger = logging.getLogger("ChainClient")

TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")


class SolanaChainClient:
    """
    Thin async wrapper over the Solana RPC used by the detection pipeline.

    Transport failures come out as RateLimitError (HTTP 429) or
    TransientNetworkError; parsed transactions are returned as the plain
    JSON-RPC ``jsonParsed`` dict.
    """

    def __init__(self, config: Dict[str, Any], client: Optional[AsyncClient] = None):
        self.rpc_url = config.get("RPC_HTTP_ENDPOINT", "https://api.mainnet-beta.solana.com")
        self.ws_url = config.get("RPC_WS_ENDPOINT", "wss://api.mainnet-beta.solana.com")
        self.commitment = Commitment(config.get("COMMITMENT", "confirmed"))
        self.reconnect_delay = config.get("WS_RECONNECT_DELAY_SECONDS", 5)
        self.client = client or AsyncClient(self.rpc_url, commitment=self.commitment)

    async def _rpc(self, what: str, call: Awaitable[Any]) -> Any:
        try:
            return await call
        except Exception as e:
            if is_rate_limit_error(e):
                raise RateLimitError(f"{what}: {e}") from e
            raise TransientNetworkError(f"{what}: {e}") from e

    async def get_account_info(self, address: str) -> Optional[bytes]:
        resp = await self._rpc(
            f"getAccountInfo {address}",
            self.client.get_account_info(Pubkey.from_string(address)),
        )
        if resp.value is None:
            return None
        return bytes(resp.value.data)

    async def get_mint_supply(self, address: str) -> int:
        resp = await self._rpc(
            f"getTokenSupply {address}",
            self.client.get_token_supply(Pubkey.from_string(address)),
        )
        if getattr(resp, "value", None) is None:
            raise NotFoundError(f"Mint not found: {address}")
        return int(resp.value.amount)

    async def get_latest_signature(self, address: str) -> Optional[str]:
        resp = await self._rpc(
            f"getSignaturesForAddress {address}",
            self.client.get_signatures_for_address(Pubkey.from_string(address), limit=1),
        )
        if not resp.value:
            return None
        return str(resp.value[0].signature)

    async def get_parsed_transaction(self, signature: str) -> Optional[Dict[str, Any]]:
        resp = await self._rpc(
            f"getTransaction {signature}",
            self.client.get_transaction(
                Signature.from_string(signature),
                encoding="jsonParsed",
                commitment=self.commitment,
                max_supported_transaction_version=0,
            ),
        )
        if resp.value is None:
            return None
        return json.loads(resp.to_json()).get("result")

    async def get_slot(self) -> int:
        resp = await self._rpc("getSlot", self.client.get_slot())
        return resp.value

    async def get_version(self) -> str:
        resp = await self._rpc("getVersion", self.client.get_version())
        return resp.value.solana_core

    def subscribe_program_account_change(
        self, program_id: Pubkey, callback: Callable[[str], Awaitable[None]]
    ) -> SubscriptionListener:
        async def subscribe(ws):
            await ws.program_subscribe(program_id, commitment=self.commitment, encoding="base64")

        logger.info(f"Subscribing to account changes of program {program_id}")
        return SubscriptionListener(
            self.ws_url,
            subscribe,
            account_id_from_notification,
            callback,
            reconnect_delay=self.reconnect_delay,
            name=f"program:{program_id}",
        ).start()

    def subscribe_logs(
        self, address: str, callback: Callable[[str], Awaitable[None]]
    ) -> SubscriptionListener:
        mention = RpcTransactionLogsFilterMentions(Pubkey.from_string(address))

        async def subscribe(ws):
            await ws.logs_subscribe(mention, commitment=self.commitment)

        logger.info(f"Subscribing to logs mentioning {address}")
        return SubscriptionListener(
            self.ws_url,
            subscribe,
            signature_from_notification,
            callback,
            reconnect_delay=self.reconnect_delay,
            name=f"logs:{address}",
        ).start()

    async def close(self):
        await self.client.close()

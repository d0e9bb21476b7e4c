# Filename: creation_watcher.py

import asyncio
import logging
import time
from typing import Callable, Optional

from chain_client import TOKEN_PROGRAM_ID
from errors import is_rate_limit_error
from formatters import format_token_message
from models import InlineAction, TokenInfo
from token_classifier import is_token_creation

logger = logging.getLogger("CreationWatcher")


class RateGate:
    """
    Lets at most one event through per interval. The check and the update of
    the last-processed time happen under one lock, so two concurrent events
    can never both pass inside the same window. Rejected events are dropped.
    """

    def __init__(self, interval_ms: int = 5000, clock: Callable[[], float] = time.monotonic):
        self.interval = interval_ms / 1000
        self.clock = clock
        self.last_processed: Optional[float] = None
        self._lock = asyncio.Lock()

    async def try_acquire(self) -> bool:
        async with self._lock:
            now = self.clock()
            if self.last_processed is not None and now - self.last_processed < self.interval:
                return False
            self.last_processed = now
            return True


def token_actions(token: TokenInfo) -> list:
    return [
        InlineAction("Add Deployer to Blacklist", f"blacklist:{token.creator}"),
        InlineAction("Monitor Token (Next 10 TX)", f"monitor:{token.address}"),
    ]


class CreationWatcher:
    def __init__(
        self,
        chain,
        store,
        notifier,
        assembler,
        rate_limit_ms: int = 5000,
        settle_delay_ms: int = 1000,
        explorer_base_url: str = "https://solscan.io",
        clock: Callable[[], float] = time.monotonic,
        sleep=asyncio.sleep,
        program_id=TOKEN_PROGRAM_ID,
    ):
        self.chain = chain
        self.store = store
        self.notifier = notifier
        self.assembler = assembler
        self.rate_limit_ms = rate_limit_ms
        self.settle_delay = settle_delay_ms / 1000
        self.explorer_base_url = explorer_base_url
        self.sleep = sleep
        self.program_id = program_id
        self.gate = RateGate(rate_limit_ms, clock)
        self.subscription = None
        self.stats = {
            "events": 0,
            "dropped": 0,
            "creations": 0,
            "notified": 0,
            "blacklisted": 0,
            "errors": 0,
        }

    def start(self):
        logger.info("Starting token monitoring...")
        self.subscription = self.chain.subscribe_program_account_change(self.program_id, self.on_account_change)
        return self.subscription

    def stop(self):
        if self.subscription:
            self.subscription.stop()
            self.subscription = None

    async def on_account_change(self, account_id: str):
        """Subscription callback. Never raises."""
        try:
            await self.process_account_change(account_id)
        except Exception as e:
            self.stats["errors"] += 1
            if is_rate_limit_error(e):
                logger.warning("Rate limit reached, waiting before next request...")
                await self.sleep(self.rate_limit_ms / 1000)
            else:
                logger.error(f"Error processing account change {account_id}: {e}")

    async def process_account_change(self, account_id: str) -> bool:
        self.stats["events"] += 1
        if not await self.gate.try_acquire():
            self.stats["dropped"] += 1
            return False

        signature = await self.chain.get_latest_signature(account_id)
        if not signature:
            return False

        await self.sleep(self.settle_delay)
        tx = await self.chain.get_parsed_transaction(signature)
        if not is_token_creation(tx):
            return False

        self.stats["creations"] += 1
        logger.info(f"New token creation detected: {signature}")
        return await self.handle_new_token(signature)

    async def handle_new_token(self, signature: str) -> bool:
        logger.info(f"Processing new token: {signature}")

        await self.sleep(self.settle_delay)
        tx = await self.chain.get_parsed_transaction(signature)
        if not tx:
            logger.warning(f"Transaction not found: {signature}")
            return False

        await self.sleep(self.settle_delay)
        token = await self.assembler.assemble(tx)
        if not token:
            logger.warning(f"Could not get token info for {signature}")
            return False

        if await self.store.is_blacklisted(token.creator):
            self.stats["blacklisted"] += 1
            logger.info(f"Creator is blacklisted: {token.creator}")
            return False

        logger.info(f"Sending token info to Telegram: {token.address} ({token.symbol})")
        sent = await self.notifier.send(
            format_token_message(token, self.explorer_base_url),
            parse_mode="HTML",
            inline_actions=token_actions(token),
        )
        if sent:
            self.stats["notified"] += 1
        return sent

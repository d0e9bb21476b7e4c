# Filename: deep_monitor.py

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from formatters import format_transaction_message

logger = logging.getLogger("DeepMonitor")

MONITOR_TX_CAP = 10


@dataclass
class MonitorSession:
    token_address: str
    count: int = 0
    pending: int = 0          # slots reserved by in-flight deliveries
    subscription: Optional[object] = field(default=None, repr=False)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @property
    def used(self) -> int:
        return self.count + self.pending


class DeepMonitor:
    """
    Forwards the next few transactions that mention a token, up to ``cap``.

    The forwarded count lives in the store so a restart cannot resume a token
    that already reached the cap. Inside one process a delivery reserves its
    slot before sending, so concurrent log events never push the count past
    the cap. Two processes sharing the same store can still overshoot.
    """

    def __init__(self, chain, store, notifier, cap: int = MONITOR_TX_CAP,
                 explorer_base_url: str = "https://solscan.io"):
        self.chain = chain
        self.store = store
        self.notifier = notifier
        self.cap = cap
        self.explorer_base_url = explorer_base_url
        self.sessions: Dict[str, MonitorSession] = {}
        self._lock = asyncio.Lock()

    def is_active(self, token_address: str) -> bool:
        session = self.sessions.get(token_address)
        return session is not None and session.subscription is not None

    async def start(self, token_address: str) -> bool:
        async with self._lock:
            if self.is_active(token_address):
                logger.info(f"[MONITOR] {token_address} is already monitored")
                return False

            count = await self.store.get_token_monitoring(token_address)
            if count >= self.cap:
                logger.info(f"[MONITOR] {token_address} already forwarded {count} transactions")
                return False

            session = MonitorSession(token_address=token_address, count=count)
            self.sessions[token_address] = session
            session.subscription = self.chain.subscribe_logs(
                token_address, functools.partial(self.on_log, token_address)
            )
            logger.info(f"[MONITOR] Started for {token_address} ({count}/{self.cap})")
            return True

    async def on_log(self, token_address: str, signature: str) -> bool:
        """Log subscription callback. Never raises."""
        session = self.sessions.get(token_address)
        if session is None:
            return False

        async with session.lock:
            if session.used >= self.cap:
                return False
            session.pending += 1

        delivered = False
        try:
            tx = await self.chain.get_parsed_transaction(signature)
            if not tx:
                logger.warning(f"[MONITOR] Transaction not found: {signature}")
            else:
                delivered = await self.notifier.send(
                    format_transaction_message(tx, self.explorer_base_url), parse_mode="HTML"
                )
        except Exception as e:
            logger.error(f"[MONITOR] Failed to forward {signature} for {token_address}: {e}")

        async with session.lock:
            session.pending -= 1
            if not delivered:
                return False
            session.count += 1
            try:
                await self.store.set_token_monitoring(token_address, session.count)
            except Exception as e:
                logger.error(f"[MONITOR] Could not persist count for {token_address}: {e}")
            if session.count >= self.cap:
                self._finish(session)

        return True

    def _finish(self, session: MonitorSession):
        logger.info(f"[MONITOR] Cap of {self.cap} reached for {session.token_address}")
        if session.subscription is not None:
            session.subscription.stop()
            session.subscription = None

    def stop_all(self):
        for session in self.sessions.values():
            if session.subscription is not None:
                session.subscription.stop()
                session.subscription = None

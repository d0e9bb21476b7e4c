# Filename: websocket_listener.py

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set

from solana.rpc.websocket_api import connect
from websockets.exceptions import ConnectionClosed

logger = logging.getLogger("WebSocketListener")


def account_id_from_notification(msg: Any) -> Optional[str]:
    """programSubscribe notification -> changed account address."""
    try:
        return str(msg.result.value.pubkey)
    except AttributeError:
        return None


def signature_from_notification(msg: Any) -> Optional[str]:
    """logsSubscribe notification -> transaction signature."""
    try:
        return str(msg.result.value.signature)
    except AttributeError:
        return None


class SubscriptionListener:
    """
    Keeps one websocket subscription alive and hands every notification to an
    async callback. Each callback runs in its own task so slow handlers never
    hold up the socket; a callback that raises is logged and forgotten.
    """

    def __init__(
        self,
        ws_url: str,
        subscribe: Callable[[Any], Awaitable[Any]],
        extract: Callable[[Any], Optional[str]],
        callback: Callable[[str], Awaitable[None]],
        reconnect_delay: float = 5,
        name: str = "subscription",
    ):
        self.ws_url = ws_url
        self.subscribe = subscribe
        self.extract = extract
        self.callback = callback
        self.reconnect_delay = reconnect_delay
        self.name = name
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._handlers: Set[asyncio.Task] = set()

    def start(self) -> "SubscriptionListener":
        self._task = asyncio.create_task(self._run())
        return self

    def stop(self):
        self._stop_event.set()
        if self._task and not self._task.done():
            self._task.cancel()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self):
        while not self._stop_event.is_set():
            try:
                async with connect(self.ws_url) as ws:
                    await self.subscribe(ws)
                    logger.info(f"[WS] {self.name} subscribed")
                    async for batch in ws:
                        if self._stop_event.is_set():
                            break
                        messages = batch if isinstance(batch, list) else [batch]
                        for msg in messages:
                            value = self.extract(msg)
                            if value is not None:
                                self.dispatch(value)
            except asyncio.CancelledError:
                raise
            except ConnectionClosed as e:
                logger.warning(f"[WS] {self.name} connection closed ({e}), reconnecting")
            except Exception as e:
                logger.error(f"[WS] {self.name} connection error: {e}")

            if not self._stop_event.is_set():
                await asyncio.sleep(self.reconnect_delay)

    def dispatch(self, value: str):
        task = asyncio.create_task(self._guarded(value))
        self._handlers.add(task)
        task.add_done_callback(self._handlers.discard)

    async def _guarded(self, value: str):
        try:
            await self.callback(value)
        except Exception as e:
            logger.error(f"[WS] {self.name} handler failed for {value}: {e}")

# Filename: bot_commands.py

import asyncio
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger("BotCommands")

HELP_MESSAGE = """
🤖 Solana Token Monitor Bot

Commands:
/blacklist - Show blacklisted addresses
/unblacklist <address> - Remove address from blacklist
/stats - Show detection counters
/test - Check Solana and Redis connections
/help - Show this help message

Features:
• Monitors new token creations
• Shows token metadata and social links
• Blacklist management
• Transaction monitoring
""".strip()


class CommandRouter:
    """
    Routes Telegram updates: inline button presses (``blacklist:<address>``,
    ``monitor:<address>``) and slash commands from the operator chat.
    """

    def __init__(self, notifier, store, deep_monitor, chain, watcher=None, poll_timeout: int = 30):
        self.notifier = notifier
        self.store = store
        self.deep_monitor = deep_monitor
        self.chain = chain
        self.watcher = watcher
        self.poll_timeout = poll_timeout
        self.offset: Optional[int] = None
        self._running = False

    async def handle_update(self, update: Dict[str, Any]):
        try:
            if "callback_query" in update:
                await self.handle_callback(update["callback_query"])
            elif "message" in update:
                await self.handle_message(update["message"])
        except Exception as e:
            logger.error(f"Error handling update {update.get('update_id')}: {e}")

    async def handle_callback(self, query: Dict[str, Any]):
        action, _, address = (query.get("data") or "").partition(":")
        if not address:
            return

        if action == "blacklist":
            await self.store.add_to_blacklist(address)
            await self.notifier.answer_callback(query["id"], "Address added to blacklist")
        elif action == "monitor":
            started = await self.deep_monitor.start(address)
            text = "Started monitoring token transactions" if started else "Token monitoring already finished or running"
            await self.notifier.answer_callback(query["id"], text)

    async def handle_message(self, message: Dict[str, Any]):
        text = (message.get("text") or "").strip()
        if not text.startswith("/"):
            return

        chat_id = message["chat"]["id"]
        parts = text.split()
        command = parts[0].split("@")[0].lower()

        if command == "/blacklist":
            await self.notifier.reply(chat_id, await self.blacklist_text())
        elif command == "/unblacklist":
            if len(parts) < 2:
                await self.notifier.reply(
                    chat_id,
                    "❌ Please provide an address to remove from blacklist\nUsage: /unblacklist <address>",
                )
                return
            await self.store.remove_from_blacklist(parts[1])
            await self.notifier.reply(chat_id, f"✅ Address {parts[1]} removed from blacklist")
        elif command == "/help":
            await self.notifier.reply(chat_id, HELP_MESSAGE)
        elif command == "/stats":
            await self.notifier.reply(chat_id, self.stats_text())
        elif command == "/test":
            await self.notifier.reply(chat_id, "Bot is working! Checking connections...")
            for line in await self.self_test():
                await self.notifier.reply(chat_id, line)

    async def blacklist_text(self) -> str:
        blacklist = await self.store.get_blacklist()
        if not blacklist:
            return "📋 Blacklist is empty"
        lines = "\n".join(f"{i}. {address}" for i, address in enumerate(blacklist, 1))
        return f"📋 Blacklisted addresses:\n\n{lines}"

    def stats_text(self) -> str:
        if self.watcher is None:
            return "📊 Watcher not running"
        stats = self.watcher.stats
        return (
            "📊 Detection stats\n"
            f"Events: {stats['events']} (dropped by rate limit: {stats['dropped']})\n"
            f"Creations: {stats['creations']}\n"
            f"Notified: {stats['notified']}\n"
            f"Blacklisted: {stats['blacklisted']}\n"
            f"Errors: {stats['errors']}"
        )

    async def self_test(self) -> List[str]:
        results = []
        try:
            slot = await self.chain.get_slot()
            version = await self.chain.get_version()
            results.append(f"✅ Connected to Solana network\nCurrent slot: {slot}\nSolana version: {version}")
        except Exception as e:
            logger.error(f"Solana connection error: {e}")
            results.append("❌ Error connecting to Solana network. Please try again later.")

        if await self.store.ping():
            results.append("✅ Redis connection: OK")
        else:
            results.append("❌ Error connecting to Redis. Please check Redis server.")
        return results

    async def poll_updates(self):
        self._running = True
        logger.info("Command polling started")
        while self._running:
            updates = await self.notifier.get_updates(self.offset, self.poll_timeout)
            if not updates:
                await asyncio.sleep(1)
                continue
            for update in updates:
                self.offset = update["update_id"] + 1
                await self.handle_update(update)

    def stop(self):
        self._running = False

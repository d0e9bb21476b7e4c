# Filename: main.py

import asyncio
import logging

from bot_commands import CommandRouter
from chain_client import SolanaChainClient
from config import load_config
from creation_watcher import CreationWatcher
from deep_monitor import DeepMonitor
from metadata_resolver import MetadataResolver
from redis_store import RedisStore
from telegram_alert import TelegramNotifier
from token_assembler import TokenInfoAssembler

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger("Main")


async def run(config):
    chain = SolanaChainClient(config)
    store = RedisStore(config["REDIS_URL"])
    notifier = TelegramNotifier(config["TELEGRAM_BOT_TOKEN"], config["TELEGRAM_CHAT_ID"])

    resolver = MetadataResolver(
        chain,
        layout=config["METADATA_LAYOUT"],
        uri_timeout=config["URI_FETCH_TIMEOUT_SECONDS"],
    )
    assembler = TokenInfoAssembler(chain, resolver, config["EXPLORER_BASE_URL"])
    watcher = CreationWatcher(
        chain,
        store,
        notifier,
        assembler,
        rate_limit_ms=config["RATE_LIMIT_MS"],
        settle_delay_ms=config["SETTLE_DELAY_MS"],
        explorer_base_url=config["EXPLORER_BASE_URL"],
    )
    deep_monitor = DeepMonitor(
        chain, store, notifier,
        cap=config["MONITOR_TX_CAP"],
        explorer_base_url=config["EXPLORER_BASE_URL"],
    )
    router = CommandRouter(
        notifier, store, deep_monitor, chain,
        watcher=watcher,
        poll_timeout=config["TELEGRAM_POLL_TIMEOUT_SECONDS"],
    )

    if await store.ping():
        logger.info("Redis connected")
    else:
        logger.error("Redis is not reachable, blacklist and monitor counters will fail")

    try:
        version = await chain.get_version()
        logger.info(f"Connected to Solana: {version}")
        watcher.start()
    except Exception as e:
        logger.error(f"Error connecting to Solana: {e}")

    try:
        logger.info("Bot is running...")
        await router.poll_updates()
    finally:
        router.stop()
        watcher.stop()
        deep_monitor.stop_all()
        await chain.close()
        await store.close()


def main():
    logger.info("🚀 Starting MintWatchBot...")
    config = load_config()
    try:
        asyncio.run(run(config))
    except KeyboardInterrupt:
        logger.info("❌ Bot stopped by user.")


if __name__ == "__main__":
    main()

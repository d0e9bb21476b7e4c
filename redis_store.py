# Filename: redis_store.py

import logging
from typing import List

import redis.asyncio as aioredis
from redis.exceptions import RedisError

logger = logging.getLogger("RedisStore")

BLACKLIST_KEY = "blacklist"
MONITORING_KEY = "token_monitoring"


class RedisStore:
    """Blacklisted creators (a set) and deep-monitor counters (a hash)."""

    def __init__(self, redis_url: str = "redis://localhost:6379/0", client=None):
        self.redis_url = redis_url
        self.client = client or aioredis.from_url(redis_url, decode_responses=True)

    async def add_to_blacklist(self, address: str):
        await self.client.sadd(BLACKLIST_KEY, address)
        logger.info(f"[BLACKLIST] Added {address}")

    async def remove_from_blacklist(self, address: str):
        await self.client.srem(BLACKLIST_KEY, address)
        logger.info(f"[BLACKLIST] Removed {address}")

    async def is_blacklisted(self, address: str) -> bool:
        return bool(await self.client.sismember(BLACKLIST_KEY, address))

    async def get_blacklist(self) -> List[str]:
        return sorted(await self.client.smembers(BLACKLIST_KEY))

    async def set_token_monitoring(self, token_address: str, tx_count: int):
        await self.client.hset(MONITORING_KEY, token_address, str(tx_count))

    async def get_token_monitoring(self, token_address: str) -> int:
        count = await self.client.hget(MONITORING_KEY, token_address)
        return int(count) if count else 0

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except RedisError as e:
            logger.error(f"Redis ping error: {e}")
            return False

    async def close(self):
        await self.client.aclose()

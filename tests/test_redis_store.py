import asyncio

from redis.exceptions import ConnectionError as RedisConnectionError

from fakes import CREATOR, MINT, OTHER_ACCOUNT
from redis_store import BLACKLIST_KEY, MONITORING_KEY, RedisStore


class MemoryRedis:
    """Async double of the few redis-py calls the store makes, string replies only."""

    def __init__(self, fail_ping=False):
        self.sets = {}
        self.hashes = {}
        self.fail_ping = fail_ping
        self.closed = False

    async def sadd(self, key, member):
        self.sets.setdefault(key, set()).add(member)
        return 1

    async def srem(self, key, member):
        self.sets.get(key, set()).discard(member)
        return 1

    async def sismember(self, key, member):
        return int(member in self.sets.get(key, set()))

    async def smembers(self, key):
        return set(self.sets.get(key, set()))

    async def hset(self, key, field, value):
        self.hashes.setdefault(key, {})[field] = value
        return 1

    async def hget(self, key, field):
        return self.hashes.get(key, {}).get(field)

    async def ping(self):
        if self.fail_ping:
            raise RedisConnectionError("Connection refused")
        return True

    async def aclose(self):
        self.closed = True


def test_blacklist_add_remove_and_sorted_listing():
    client = MemoryRedis()
    store = RedisStore(client=client)

    async def scenario():
        await store.add_to_blacklist(OTHER_ACCOUNT)
        await store.add_to_blacklist(CREATOR)
        await store.add_to_blacklist(CREATOR)
        listed = await store.get_blacklist()
        await store.remove_from_blacklist(OTHER_ACCOUNT)
        return listed, await store.is_blacklisted(OTHER_ACCOUNT), await store.is_blacklisted(CREATOR)

    listed, other_blacklisted, creator_blacklisted = asyncio.run(scenario())

    assert listed == sorted([CREATOR, OTHER_ACCOUNT])
    assert other_blacklisted is False
    assert creator_blacklisted is True
    assert client.sets[BLACKLIST_KEY] == {CREATOR}


def test_monitoring_count_round_trips_through_hash_strings():
    client = MemoryRedis()
    store = RedisStore(client=client)

    async def scenario():
        before = await store.get_token_monitoring(MINT)
        await store.set_token_monitoring(MINT, 7)
        return before, await store.get_token_monitoring(MINT)

    before, after = asyncio.run(scenario())

    assert before == 0
    assert after == 7
    assert client.hashes[MONITORING_KEY] == {MINT: "7"}


def test_ping_reports_unreachable_redis_and_close_releases_client():
    client = MemoryRedis(fail_ping=True)
    store = RedisStore(client=client)

    assert asyncio.run(store.ping()) is False
    asyncio.run(store.close())
    assert client.closed

import asyncio

from bot_commands import HELP_MESSAGE, CommandRouter
from deep_monitor import DeepMonitor
from errors import TransientNetworkError
from fakes import CREATOR, MINT, FakeChain, FakeNotifier, FakeStore

CHAT_ID = -100123


def build_router():
    chain = FakeChain()
    store = FakeStore()
    notifier = FakeNotifier()
    monitor = DeepMonitor(chain, store, notifier)
    return CommandRouter(notifier, store, monitor, chain), chain, store, notifier


def callback_update(data):
    return {"update_id": 1, "callback_query": {"id": "cb1", "data": data}}


def command_update(text):
    return {"update_id": 2, "message": {"chat": {"id": CHAT_ID}, "text": text}}


def test_blacklist_button_adds_creator():
    router, _, store, notifier = build_router()

    asyncio.run(router.handle_update(callback_update(f"blacklist:{CREATOR}")))

    assert store.blacklist == {CREATOR}
    assert notifier.answers == [("cb1", "Address added to blacklist")]


def test_monitor_button_starts_deep_monitor():
    router, chain, _, notifier = build_router()

    asyncio.run(router.handle_update(callback_update(f"monitor:{MINT}")))

    assert [s.target for s in chain.subscriptions] == [MINT]
    assert notifier.answers == [("cb1", "Started monitoring token transactions")]


def test_unblacklist_requires_address():
    router, _, store, notifier = build_router()
    store.blacklist.add(CREATOR)

    async def scenario():
        await router.handle_update(command_update("/unblacklist"))
        await router.handle_update(command_update(f"/unblacklist {CREATOR}"))

    asyncio.run(scenario())

    assert "Usage: /unblacklist <address>" in notifier.replies[0][1]
    assert notifier.replies[1] == (CHAT_ID, f"✅ Address {CREATOR} removed from blacklist")
    assert store.blacklist == set()


def test_blacklist_listing():
    router, _, store, notifier = build_router()

    async def scenario():
        await router.handle_update(command_update("/blacklist"))
        await store.add_to_blacklist(CREATOR)
        await router.handle_update(command_update("/blacklist@mint_watch_bot"))

    asyncio.run(scenario())

    assert notifier.replies[0][1] == "📋 Blacklist is empty"
    assert notifier.replies[1][1] == f"📋 Blacklisted addresses:\n\n1. {CREATOR}"


def test_help_and_plain_text():
    router, _, _, notifier = build_router()

    async def scenario():
        await router.handle_update(command_update("hello there"))
        await router.handle_update(command_update("/help"))

    asyncio.run(scenario())

    assert notifier.replies == [(CHAT_ID, HELP_MESSAGE)]


def test_self_test_reports_each_check():
    router, chain, store, _ = build_router()

    assert asyncio.run(router.self_test()) == [
        "✅ Connected to Solana network\nCurrent slot: 250000000\nSolana version: 1.18.22",
        "✅ Redis connection: OK",
    ]

    chain.errors["get_slot"] = TransientNetworkError("down")
    store.alive = False
    lines = asyncio.run(router.self_test())

    assert lines[0].startswith("❌ Error connecting to Solana")
    assert lines[1].startswith("❌ Error connecting to Redis")


def test_handler_errors_are_contained():
    router, _, store, _ = build_router()

    async def broken(address):
        raise RuntimeError("redis down")

    store.add_to_blacklist = broken

    asyncio.run(router.handle_update(callback_update(f"blacklist:{CREATOR}")))

import asyncio

from creation_watcher import CreationWatcher, RateGate
from errors import RateLimitError, TransientNetworkError
from fakes import (
    CREATOR,
    MINT,
    SIGNATURE,
    FakeChain,
    FakeClock,
    FakeNotifier,
    FakeResolver,
    FakeStore,
    SleepRecorder,
    make_tx,
)
from token_assembler import TokenInfoAssembler


def build_watcher(tx=None):
    chain = FakeChain(transactions={SIGNATURE: tx or make_tx()}, supplies={MINT: 1_000_000})
    store = FakeStore()
    notifier = FakeNotifier()
    clock = FakeClock()
    sleep = SleepRecorder()
    assembler = TokenInfoAssembler(chain, FakeResolver())
    watcher = CreationWatcher(chain, store, notifier, assembler, clock=clock, sleep=sleep)
    return watcher, chain, store, notifier, clock, sleep


def test_events_inside_window_trigger_one_fetch():
    watcher, chain, _, _, clock, _ = build_watcher()

    async def scenario():
        await watcher.on_account_change(MINT)
        clock.advance_ms(100)
        await watcher.on_account_change(MINT)

    asyncio.run(scenario())

    assert chain.count("get_latest_signature") == 1
    assert watcher.stats["dropped"] == 1


def test_events_outside_window_trigger_two_fetches():
    watcher, chain, _, _, clock, _ = build_watcher()

    async def scenario():
        await watcher.on_account_change(MINT)
        clock.advance_ms(6000)
        await watcher.on_account_change(MINT)

    asyncio.run(scenario())

    assert chain.count("get_latest_signature") == 2


def test_rate_gate_lets_one_of_many_concurrent_events_through():
    gate = RateGate(5000, FakeClock())

    async def scenario():
        return await asyncio.gather(*(gate.try_acquire() for _ in range(10)))

    assert sum(asyncio.run(scenario())) == 1


def test_creation_sends_notification_with_actions():
    watcher, chain, _, notifier, _, sleep = build_watcher()

    asyncio.run(watcher.on_account_change(MINT))

    assert len(notifier.sent) == 1
    message = notifier.sent[0]
    assert message["parse_mode"] == "HTML"
    assert [a.action_id for a in message["inline_actions"]] == [f"blacklist:{CREATOR}", f"monitor:{MINT}"]
    assert MINT in message["text"]
    assert sleep.calls == [1.0, 1.0, 1.0]
    assert chain.count("get_parsed_transaction") == 2


def test_non_creation_transaction_is_ignored():
    tx = make_tx(logs=["Program log: Instruction: Transfer"])
    watcher, _, _, notifier, _, _ = build_watcher(tx)

    asyncio.run(watcher.on_account_change(MINT))

    assert notifier.sent == []


def test_blacklisted_creator_is_suppressed_until_removed():
    watcher, _, store, notifier, clock, _ = build_watcher()

    async def scenario():
        await store.add_to_blacklist(CREATOR)
        await watcher.on_account_change(MINT)
        assert notifier.sent == []

        await store.remove_from_blacklist(CREATOR)
        clock.advance_ms(6000)
        await watcher.on_account_change(MINT)

    asyncio.run(scenario())

    assert len(notifier.sent) == 1
    assert watcher.stats["blacklisted"] == 1


def test_rate_limit_error_backs_off():
    watcher, chain, _, notifier, _, sleep = build_watcher()
    chain.errors["get_latest_signature"] = RateLimitError("HTTP 429 Too Many Requests")

    asyncio.run(watcher.on_account_change(MINT))

    assert sleep.calls == [5.0]
    assert notifier.sent == []


def test_other_errors_are_swallowed_without_backoff():
    watcher, chain, _, _, _, sleep = build_watcher()
    chain.errors["get_latest_signature"] = TransientNetworkError("connection reset")

    asyncio.run(watcher.on_account_change(MINT))

    assert sleep.calls == []
    assert watcher.stats["errors"] == 1


def test_missing_transaction_on_refetch_sends_nothing():
    watcher, chain, _, notifier, _, _ = build_watcher()
    chain.transactions = {}

    assert asyncio.run(watcher.handle_new_token(SIGNATURE)) is False
    assert notifier.sent == []


def test_start_subscribes_to_token_program():
    watcher, chain, _, _, _, _ = build_watcher()

    subscription = watcher.start()
    watcher.stop()

    assert chain.subscriptions == [subscription]
    assert subscription.callback == watcher.on_account_change
    assert subscription.stopped is True


def test_network_error_for_account_containing_429_is_logged_not_backed_off(caplog):
    account = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosg429"
    watcher, chain, _, notifier, _, sleep = build_watcher()
    chain.errors["get_latest_signature"] = TransientNetworkError(
        f"getSignaturesForAddress {account}: connection reset"
    )

    with caplog.at_level("ERROR", logger="CreationWatcher"):
        asyncio.run(watcher.on_account_change(account))

    assert sleep.calls == []
    assert notifier.sent == []
    assert "connection reset" in caplog.text

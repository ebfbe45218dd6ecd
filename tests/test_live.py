import asyncio

from live import ChangeNotifier, LiveQuery


def _counter_fetch():
    calls = {"n": 0}

    async def fetch():
        calls["n"] += 1
        return calls["n"]

    return fetch, calls


def test_live_query_reemits_after_notify():
    async def run():
        notifier = ChangeNotifier()
        fetch, _ = _counter_fetch()
        it = LiveQuery(fetch, notifier).__aiter__()

        assert await it.__anext__() == 1
        notifier.notify()
        assert await asyncio.wait_for(it.__anext__(), 1) == 2
        await it.aclose()

    asyncio.run(run())


def test_distinct_query_skips_repeated_values():
    async def run():
        notifier = ChangeNotifier()
        values = iter([True, True, False])

        async def fetch():
            return next(values)

        it = LiveQuery(fetch, notifier, distinct=True).__aiter__()
        assert await it.__anext__() is True

        notifier.notify()
        pending = asyncio.ensure_future(it.__anext__())
        await asyncio.sleep(0.02)
        assert not pending.done()

        notifier.notify()
        assert await asyncio.wait_for(pending, 1) is False
        await it.aclose()

    asyncio.run(run())


def test_query_without_notifier_emits_once():
    async def run():
        fetch, _ = _counter_fetch()
        return [value async for value in LiveQuery(fetch)]

    assert asyncio.run(run()) == [1]


def test_first_does_not_subscribe():
    async def run():
        notifier = ChangeNotifier()
        fetch, calls = _counter_fetch()
        value = await LiveQuery(fetch, notifier).first()
        notifier.notify()
        await asyncio.sleep(0)
        return value, calls["n"]

    assert asyncio.run(run()) == (1, 1)

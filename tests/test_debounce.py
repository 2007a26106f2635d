import asyncio

import pytest

from perfdemo.debounce import Debouncer, Throttler, debounce
from perfdemo.errors import DebouncerDisposedError


def test_triggers_within_delay_fire_only_last_callback(fake_loop):
    fired = []
    d = Debouncer(0.5, loop=fake_loop)
    for t, label in [(0.0, "a"), (0.05, "b"), (0.1, "c")]:
        fake_loop.advance_to(t)
        d.trigger(lambda label=label: fired.append((fake_loop.time(), label)))

    fake_loop.advance_to(5.0)
    assert len(fired) == 1
    assert fired[0][0] == pytest.approx(0.6)
    assert fired[0][1] == "c"


def test_quiet_gap_lets_each_trigger_fire(fake_loop):
    fired = []
    d = Debouncer(0.5, loop=fake_loop)
    d.trigger(lambda: fired.append(fake_loop.time()))
    fake_loop.advance_to(0.6)
    d.trigger(lambda: fired.append(fake_loop.time()))
    fake_loop.advance_to(5.0)
    assert fired == [pytest.approx(0.5), pytest.approx(1.1)]


def test_dispose_cancels_pending(fake_loop):
    fired = []
    d = Debouncer(0.5, loop=fake_loop)
    d.trigger(lambda: fired.append("x"))
    fake_loop.advance_to(0.1)
    d.dispose()
    fake_loop.advance_to(5.0)
    assert fired == []
    assert not d.pending
    assert fake_loop.scheduled() == []


def test_dispose_twice_is_harmless(fake_loop):
    fired = []
    d = Debouncer(0.5, loop=fake_loop)
    d.trigger(lambda: fired.append("x"))
    d.dispose()
    d.dispose()
    fake_loop.advance_to(5.0)
    assert fired == []
    assert d.disposed


def test_dispose_from_inside_callback(fake_loop):
    d = Debouncer(0.5, loop=fake_loop)
    fired = []

    def callback():
        fired.append("x")
        d.dispose()

    d.trigger(callback)
    fake_loop.advance_to(1.0)
    assert fired == ["x"]
    assert d.disposed


def test_trigger_after_dispose_raises(fake_loop):
    d = Debouncer(0.5, loop=fake_loop)
    d.dispose()
    with pytest.raises(DebouncerDisposedError):
        d.trigger(lambda: None)
    assert fake_loop.scheduled() == []


def test_negative_delay_rejected():
    with pytest.raises(ValueError):
        Debouncer(-1)


def test_pending_tracks_schedule(fake_loop):
    d = Debouncer(0.5, loop=fake_loop)
    assert not d.pending
    d(lambda: None)
    assert d.pending
    fake_loop.advance_to(1.0)
    assert not d.pending


def test_debounce_function_form(fake_loop):
    calls = []
    search = debounce(0.3, lambda: calls.append(fake_loop.time()), loop=fake_loop)
    search()
    fake_loop.advance_to(0.2)
    search()
    fake_loop.advance_to(2.0)
    assert calls == [pytest.approx(0.5)]
    search.debouncer.dispose()


def test_runs_on_asyncio_loop():
    fired = []

    async def main():
        d = Debouncer(0.02)
        for i in range(3):
            d.trigger(lambda i=i: fired.append(i))
            await asyncio.sleep(0)
        await asyncio.sleep(0.1)
        d.dispose()

    asyncio.run(main())
    assert fired == [2]


def test_callback_error_reaches_loop_handler():
    seen = []

    async def main():
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(lambda loop, context: seen.append(context["exception"]))
        d = Debouncer(0, loop=loop)

        def boom():
            raise RuntimeError("boom")

        d.trigger(boom)
        await asyncio.sleep(0.01)

    asyncio.run(main())
    assert len(seen) == 1
    assert str(seen[0]) == "boom"


def test_throttler_drops_calls_inside_interval():
    now = [0.0]
    throttle = Throttler(1.0, clock=lambda: now[0])
    calls = []
    assert throttle(lambda: calls.append(now[0]))
    now[0] = 0.5
    assert not throttle(lambda: calls.append(now[0]))
    now[0] = 1.0
    assert throttle(lambda: calls.append(now[0]))
    assert calls == [0.0, 1.0]


def test_throttler_rejects_negative_interval():
    with pytest.raises(ValueError):
        Throttler(-0.1)


def test_failed_loop_lookup_keeps_pending_schedule():
    d = Debouncer(10)

    async def arm():
        d.trigger(lambda: None)
        return d._handle

    handle = asyncio.run(arm())
    assert d.pending
    with pytest.raises(RuntimeError):
        d.trigger(lambda: None)
    assert d._handle is handle
    assert not handle.cancelled()

import pytest


class FakeHandle:
    def __init__(self, when, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeLoop:
    """Virtual clock exposing the call_later/time part of an asyncio loop."""

    def __init__(self):
        self.now = 0.0
        self._handles = []

    def time(self):
        return self.now

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(self.now + delay, callback, args)
        self._handles.append(handle)
        return handle

    def scheduled(self):
        return [h for h in self._handles if not h.cancelled]

    def advance_to(self, t):
        while True:
            due = [h for h in self.scheduled() if h.when <= t]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self._handles.remove(handle)
            self.now = handle.when
            handle.callback(*handle.args)
        self.now = t


class RecordingSleep:
    def __init__(self):
        self.calls = []

    async def __call__(self, delay):
        self.calls.append(delay)


@pytest.fixture
def fake_loop():
    return FakeLoop()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()

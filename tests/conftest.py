"""Shared fixtures for SwitchSync tests."""

from typing import Callable, Dict, List, Tuple

import pytest

from switch_group import SwitchGroup


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakePublisher:
    """In-memory stand-in for the MQTT bridge."""

    def __init__(self):
        self.handlers: Dict[str, List[Callable[[str, str], None]]] = {}
        self.published: List[Tuple[str, str]] = []
        self.unsubscribed: List[str] = []

    def subscribe(self, topic, handler):
        self.handlers.setdefault(topic, []).append(handler)

    def unsubscribe(self, topic, handler):
        self.handlers.get(topic, []).remove(handler)
        if not self.handlers.get(topic):
            self.handlers.pop(topic, None)
        self.unsubscribed.append(topic)

    def publish(self, topic, payload):
        self.published.append((topic, payload))

    def deliver(self, topic, payload):
        """Simulate a message arriving from the broker."""
        for handler in list(self.handlers.get(topic, [])):
            handler(topic, payload)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def make_group(publisher, clock) -> Callable[..., SwitchGroup]:
    """Build a SwitchGroup wired to the fake publisher and clock."""

    def _make(**kwargs) -> SwitchGroup:
        kwargs.setdefault("state_cache_seconds", 2)
        return SwitchGroup(publisher, clock=clock, **kwargs)

    return _make

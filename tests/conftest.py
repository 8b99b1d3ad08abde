"""Test configuration and fixtures for appliance auto-off tests."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from custom_components.appliance_auto_off.models import AutoOffConfig
from custom_components.appliance_auto_off.state_machine import AutoOffStateMachine


class FakeClock:
    """Manually advanced clock."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


class FakeTimer:
    """Timer handle recorded by FakeScheduler."""

    def __init__(self, due, delay, repeating, action) -> None:
        self.due = due
        self.delay = delay
        self.repeating = repeating
        self.action = action
        self.cancelled = False
        self.fired = False

    @property
    def pending(self) -> bool:
        return not self.cancelled and not self.fired


class FakeScheduler:
    """Deterministic scheduler driven by FakeClock."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.timers: list[FakeTimer] = []

    def schedule(self, delay, repeating, action) -> FakeTimer:
        timer = FakeTimer(self.clock.now + delay, delay, repeating, action)
        self.timers.append(timer)
        return timer

    def cancel(self, handle: FakeTimer) -> None:
        handle.cancelled = True

    def pending(self) -> list[FakeTimer]:
        return [timer for timer in self.timers if timer.pending]

    def advance(self, delta: timedelta) -> None:
        """Move the clock forward, firing due timers in order."""
        target = self.clock.now + delta
        while True:
            due = [timer for timer in self.pending() if timer.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.clock.now = timer.due
            if timer.repeating:
                timer.due = timer.due + timer.delay
            else:
                timer.fired = True
            timer.action()
        self.clock.now = target


@pytest.fixture
def config():
    """Default timings: 30 min delay, 15 min confirmation, 20 min check."""
    return AutoOffConfig(
        initial_delay=timedelta(minutes=30),
        check_duration=timedelta(minutes=20),
        initial_check_duration=timedelta(minutes=15),
        check_interval=timedelta(seconds=60),
        keep_alive_interval=timedelta(seconds=60),
        power_on_threshold=0.7,
        power_active_threshold=0.7,
    )


@pytest.fixture
def clock():
    """Create a fake clock."""
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    """Create a fake scheduler."""
    return FakeScheduler(clock)


@pytest.fixture
def relay():
    """Create a mock relay."""
    return MagicMock()


@pytest.fixture
def notifier():
    """Create a mock notifier."""
    return MagicMock()


@pytest.fixture
def machine(config, scheduler, relay, notifier, clock):
    """Create a state machine wired to fakes."""
    return AutoOffStateMachine(
        config, scheduler, relay, notifier, clock=clock, name="Oven"
    )

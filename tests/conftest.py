import os
import sys

import pytest

# Ensure repository root is on sys.path for package imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from extended_future import AsyncioFutureImplementation, get_settings, reset_future_implementation, set_future_implementation
from extended_future.log import close_logging


class RecordingImplementation(AsyncioFutureImplementation):
    """asyncio implementation that remembers which members were used."""

    def __init__(self):
        super().__init__()
        self.calls = []

    def create(self, executor):
        self.calls.append("create")
        return super().create(executor)

    def catch(self, future, on_rejected):
        self.calls.append("catch")
        return super().catch(future, on_rejected)

    def schedule(self, coroutine):
        self.calls.append("schedule")
        return super().schedule(coroutine)

    def all(self, awaitables):
        self.calls.append("all")
        return super().all(awaitables)

    def race(self, awaitables):
        self.calls.append("race")
        return super().race(awaitables)

    def resolve(self, value=None):
        self.calls.append("resolve")
        return super().resolve(value)


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    monkeypatch.delenv("EXTENDED_FUTURE_SUPPRESS_UNHANDLED_REJECTIONS", raising=False)
    monkeypatch.delenv("EXTENDED_FUTURE_LOG_LEVEL", raising=False)
    reset_future_implementation()
    get_settings.cache_clear()
    yield
    reset_future_implementation()
    get_settings.cache_clear()
    close_logging()


@pytest.fixture
def recording_implementation():
    impl = RecordingImplementation()
    set_future_implementation(impl)
    return impl

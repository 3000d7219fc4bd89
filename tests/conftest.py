"""Shared fixtures for tracker tests."""

import pytest

from job_tracker.tracking import ApplicationStorage, MemoryStore, RecordStore, TrackerController

CURRENT_KEY = "job_applications"
LEGACY_KEY = "gcandidaturas:v1"


class FakeTimer:
    """Stand-in for threading.Timer that only fires when told to."""

    created = []

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args, **self.kwargs)


class Notices(list):
    """Captured (message, is_error) notifications."""

    def __call__(self, message, is_error=False):
        self.append((message, is_error))

    def __bool__(self):
        # Always truthy so ``notify or default`` wires this sink in even when empty.
        return True

    @property
    def errors(self):
        return [m for m, is_error in self if is_error]

    @property
    def infos(self):
        return [m for m, is_error in self if not is_error]


@pytest.fixture
def notices():
    return Notices()


@pytest.fixture
def kv():
    return MemoryStore()


@pytest.fixture
def storage(kv):
    return ApplicationStorage(kv, key=CURRENT_KEY, legacy_key=LEGACY_KEY)


@pytest.fixture
def store(storage, notices):
    return RecordStore(storage, notify=notices)


@pytest.fixture
def fake_timers():
    FakeTimer.created = []
    yield FakeTimer.created
    FakeTimer.created = []


@pytest.fixture
def timer_factory(fake_timers):
    return FakeTimer


@pytest.fixture
def controller(store, timer_factory):
    return TrackerController(store, debounce_seconds=0.2, timer_factory=timer_factory)

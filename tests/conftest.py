"""Shared fixtures."""
import pytest

from field_validation.translation import MessageCatalog


class FakeTimer:
    """threading.Timer stand-in that only fires when told to."""

    def __init__(self, interval, function, args=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.started = False
        self.cancelled = False
        self.daemon = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args)


class FakeTimerFactory:
    """Records every timer created so tests can fire them."""

    def __init__(self):
        self.timers = []

    def __call__(self, interval, function, args=None):
        timer = FakeTimer(interval, function, args)
        self.timers.append(timer)
        return timer

    @property
    def last(self):
        return self.timers[-1]


@pytest.fixture
def timers():
    return FakeTimerFactory()


@pytest.fixture
def catalog():
    """Small message catalog with predictable text."""
    return MessageCatalog({
        "INVALID_REQUIRED": "Field is required. ",
        "INVALID_MIN_CHAR": "Must be at least :param characters. ",
        "INVALID_BETWEEN_NUM": "Between :param and :param. ",
        "INVALID_EMAIL": "Bad email. ",
        "INVALID_PATTERN": "Format: :param ",
        "INVALID_KEY_CHAR": "Bad key. ",
    })

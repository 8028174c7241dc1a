import pytest

from config import AppConfig
from notes.model import Song, SongNote


class ManualTimer:
    """Stands in for the pygame tick timer; the test fires ticks by hand."""

    def __init__(self, callback, period_ms):
        self.callback = callback
        self.period_ms = period_ms
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def fire(self, n=1):
        for _ in range(n):
            if not self.cancelled:
                self.callback()


class TimerFactory:
    def __init__(self):
        self.created = []

    def __call__(self, callback, period_ms):
        t = ManualTimer(callback, period_ms)
        self.created.append(t)
        return t

    @property
    def last(self):
        return self.created[-1]


class FakeMedia:
    def __init__(self):
        self.current_position_ms = 0.0
        self.playback_rate = 1.0
        self.calls = []

    def play(self):
        self.calls.append("play")

    def pause(self):
        self.calls.append("pause")

    def seek_to(self, ms):
        self.calls.append(("seek", ms))
        self.current_position_ms = ms

    def close(self):
        self.calls.append("close")


@pytest.fixture
def timers():
    return TimerFactory()


@pytest.fixture
def media():
    return FakeMedia()


@pytest.fixture
def cfg():
    return AppConfig()


@pytest.fixture
def chord_song():
    return Song(
        id="s1",
        name="chords",
        notes=(
            SongNote("C", 1000, 500),
            SongNote("e", 1000, 200),
            SongNote("G", 1400, 0),
            SongNote("c", 2000, 100),
        ),
        duration=2100,
    )

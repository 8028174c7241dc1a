# timeline/clock.py
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol
from notes.transform import clamp_speed

TICK_MS = 16

class MediaHandle(Protocol):
    playback_rate: float

    @property
    def current_position_ms(self) -> float: ...
    def play(self) -> None: ...
    def pause(self) -> None: ...
    def seek_to(self, ms: float) -> None: ...

class Timer(Protocol):
    def cancel(self) -> None: ...

TimerFactory = Callable[[Callable[[], None], int], Timer]

@dataclass
class PlaybackState:
    cursor_ms: float = 0.0
    running: bool = False
    speed_factor: float = 1.0
    silent: bool = False

class SimulatedSource:
    """Free-running clock: no audio is decoded, time is advanced by hand."""
    def advance(self, state: PlaybackState, tick_ms: int) -> float:
        return state.cursor_ms + tick_ms * state.speed_factor

class MediaSource:
    """Decoded-audio position is authoritative."""
    def __init__(self, handle: MediaHandle):
        self.handle = handle

    def advance(self, state: PlaybackState, tick_ms: int) -> float:
        return max(state.cursor_ms, float(self.handle.current_position_ms))

class PlaybackClock:
    """Single time cursor for the active song.

    Owns the media handle exclusively and the tick timer, which exists only
    while running: start() creates it, stop() cancels it before returning.
    """
    def __init__(self, timer_factory: TimerFactory, media: Optional[MediaHandle] = None,
                 speed: float = 1.0, silent: bool = False, tick_ms: int = TICK_MS):
        self._timer_factory = timer_factory
        self._timer: Optional[Timer] = None
        self._media = media
        self.tick_ms = tick_ms
        self.state = PlaybackState(speed_factor=clamp_speed(speed), silent=silent)

    # ---------- read-only views ----------
    @property
    def cursor_ms(self) -> float:
        return self.state.cursor_ms

    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def media(self) -> Optional[MediaHandle]:
        return self._media

    def _drives_media(self) -> bool:
        return self._media is not None and not self.state.silent

    def source(self):
        return MediaSource(self._media) if self._drives_media() else SimulatedSource()

    # ---------- transport ----------
    def start(self):
        if self.state.running:
            return
        if self._drives_media():
            self._media.playback_rate = self.state.speed_factor
            self._media.seek_to(self.state.cursor_ms)
            self._media.play()
        self._timer = self._timer_factory(self.tick, self.tick_ms)
        self.state.running = True
        logging.debug("clock start at %.1f ms (silent=%s, speed=%.2f)",
                      self.state.cursor_ms, self.state.silent, self.state.speed_factor)

    def stop(self):
        if not self.state.running:
            return
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
        if self._drives_media():
            self._media.pause()
        self.state.running = False
        logging.debug("clock stop at %.1f ms", self.state.cursor_ms)

    def seek(self, to_ms: float):
        self.state.cursor_ms = max(0.0, float(to_ms))
        if self._drives_media():
            self._media.seek_to(self.state.cursor_ms)

    def tick(self):
        if not self.state.running:
            return
        self.state.cursor_ms = self.source().advance(self.state, self.tick_ms)

    # ---------- settings ----------
    def set_speed(self, factor: float) -> float:
        self.state.speed_factor = clamp_speed(factor)
        if self._drives_media():
            self._media.playback_rate = self.state.speed_factor
        return self.state.speed_factor

    def set_silent(self, silent: bool):
        silent = bool(silent)
        if silent == self.state.silent:
            return
        if self.state.running and self._media is not None:
            if silent:
                self._media.pause()
            else:
                self._media.playback_rate = self.state.speed_factor
                self._media.seek_to(self.state.cursor_ms)
                self._media.play()
        self.state.silent = silent

    def _release_media(self):
        close = getattr(self._media, "close", None)
        if close is not None:
            close()

    def attach_media(self, media: Optional[MediaHandle]):
        self.stop()
        if media is not self._media:
            self._release_media()
        self._media = media

    def close(self):
        self.stop()
        self._release_media()
        self._media = None

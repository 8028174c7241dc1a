# session.py
import logging
from typing import Callable, FrozenSet, Optional
from config import AppConfig
from notes.model import InstrumentType, Recording, Song
from notes.errors import AnalysisError, NoActiveSongError
from notes.loader import SongAnalyzer
from notes.transform import TransformSettings
from timeline.clock import MediaHandle, PlaybackClock, TimerFactory
from timeline.resolver import highlighted_keys
from midi.export import EventFile, export_song
from input.recorder import Recorder

class Session:
    """One active song, its clock, read-time settings and the player's input.

    Every state-precondition problem (no song, out-of-range settings) is a
    silent no-op or a clamp; only analysis failures reach the caller.
    """
    def __init__(self, cfg: AppConfig, timer_factory: TimerFactory):
        self.cfg = cfg
        self.song: Optional[Song] = None
        self.clock = PlaybackClock(timer_factory, speed=cfg.playback.speed,
                                   silent=cfg.playback.silent, tick_ms=cfg.playback.tick_ms)
        self.transform = TransformSettings(cfg.music.transposition)
        self.music_enabled = cfg.music.enabled
        self.progress: Optional[int] = None
        self.highlighted: FrozenSet[str] = frozenset()
        self.typed_text = ""
        self.recorder = Recorder()
        if cfg.music.record_mode:
            self.recorder.begin()
        self._request = 0

    # ---------- Loading ----------
    async def load_song(self, analyzer: SongAnalyzer, data: bytes,
                        media: Optional[MediaHandle] = None,
                        on_progress: Optional[Callable[[int], None]] = None) -> Optional[Song]:
        self._request += 1
        token = self._request

        def _progress(pct: int):
            if token != self._request:
                return  # superseded
            self.progress = max(0, min(100, int(pct)))
            if on_progress:
                on_progress(self.progress)

        self.progress = 0
        try:
            song = await analyzer.analyze(data, _progress)
        except AnalysisError:
            if token == self._request:
                self.progress = None
            logging.warning("Song analysis failed", exc_info=True)
            raise
        if token != self._request:
            logging.info("Dropping stale analysis result %r", song.name)
            return None

        self.clock.stop()
        self.clock.seek(0)
        self.clock.attach_media(media)
        self.song = song
        self.progress = None
        self.refresh()
        logging.info("Loaded song %r (%d notes, %d ms)", song.name, len(song.notes), song.duration)
        return song

    # ---------- Transport ----------
    def _require_song(self, op: str) -> bool:
        if self.song is None:
            logging.debug("%s ignored: no active song", op)
            return False
        return True

    @property
    def is_playing(self) -> bool:
        return self.clock.running

    def start(self):
        if self._require_song("start"):
            self.clock.start()

    def stop(self):
        if self._require_song("stop"):
            self.clock.stop()

    def toggle_playback(self):
        if self.clock.running:
            self.stop()
        else:
            self.start()

    def restart(self):
        if self._require_song("restart"):
            self.clock.seek(0)
            self.refresh()

    def tick(self) -> FrozenSet[str]:
        self.clock.tick()
        return self.refresh()

    def refresh(self) -> FrozenSet[str]:
        self.highlighted = highlighted_keys(self.song, self.clock.cursor_ms, self.music_enabled)
        return self.highlighted

    # ---------- Settings ----------
    def set_transposition(self, semitones: int) -> int:
        self.transform = TransformSettings(semitones)
        return self.transform.transposition

    def shift_transposition(self, delta: int) -> int:
        self.transform = self.transform.shifted(delta)
        return self.transform.transposition

    def set_speed(self, factor: float) -> float:
        return self.clock.set_speed(factor)

    def step_speed(self, direction: int) -> float:
        steps = self.cfg.playback.speed_steps
        cur = self.clock.state.speed_factor
        idx = min(range(len(steps)), key=lambda i: abs(steps[i] - cur))
        idx = max(0, min(len(steps) - 1, idx + direction))
        return self.set_speed(steps[idx])

    def set_silent(self, silent: bool):
        self.clock.set_silent(silent)

    def set_music_mode(self, enabled: bool):
        self.music_enabled = bool(enabled)
        self.refresh()

    # ---------- Export ----------
    def export(self) -> Optional[EventFile]:
        try:
            return export_song(self.song, self.transform, self.cfg.export)
        except NoActiveSongError:
            logging.debug("export ignored: no active song")
            return None

    # ---------- Player input ----------
    def press_key(self, symbol: str):
        if symbol == "BS":
            self.typed_text = self.typed_text[:-1]
        elif symbol == "ENT":
            self.typed_text += "\n"
        else:
            self.typed_text += symbol
        self.recorder.press(symbol, self.clock.cursor_ms)

    def release_key(self, symbol: str):
        self.recorder.release(symbol, self.clock.cursor_ms)

    def set_record_mode(self, enabled: bool) -> Optional[Recording]:
        if enabled and not self.recorder.active:
            self.recorder.begin()
            return None
        if not enabled and self.recorder.active:
            return self.recorder.finish(InstrumentType(self.cfg.music.instrument))
        return None

    def close(self):
        self.clock.close()

# audio/media.py
import logging, os
import pygame

class MixerMedia:
    """
    Media primitive on top of pygame.mixer.music:
    - the track is loaded on first play(), so building a handle never
      disturbs the one currently playing
    - current_position_ms: offset of the last (re)start + mixer's get_pos()
    - seek_to() while paused is applied on the next play()
    - playback_rate is recorded only; the mixer cannot resample on the fly
    """
    def __init__(self, path: str):
        if not os.path.isfile(path):
            raise FileNotFoundError(path)
        self.path = path
        self._loaded = False
        self._offset_ms = 0.0
        self._playing = False
        self._paused = False
        self._rate = 1.0
        self._rate_warned = False

    def _ensure_loaded(self):
        if self._loaded:
            return
        if not pygame.mixer.get_init():
            pygame.mixer.init()
        pygame.mixer.music.load(self.path)
        self._loaded = True

    @property
    def playback_rate(self) -> float:
        return self._rate

    @playback_rate.setter
    def playback_rate(self, rate: float):
        self._rate = float(rate)
        if self._rate != 1.0 and not self._rate_warned:
            logging.warning("pygame mixer plays at 1.0x; requested %.2fx is not applied to audio", self._rate)
            self._rate_warned = True

    @property
    def current_position_ms(self) -> float:
        if not (self._playing or self._paused):
            return self._offset_ms
        pos = pygame.mixer.music.get_pos()
        if pos < 0:
            return self._offset_ms
        return self._offset_ms + pos

    def play(self):
        self._ensure_loaded()
        if self._paused:
            pygame.mixer.music.unpause()
        else:
            pygame.mixer.music.play(start=self._offset_ms / 1000.0)
        self._playing, self._paused = True, False

    def pause(self):
        if not self._playing:
            return
        pygame.mixer.music.pause()
        self._playing, self._paused = False, True

    def seek_to(self, ms: float):
        self._offset_ms = max(0.0, float(ms))
        if self._playing:
            pygame.mixer.music.play(start=self._offset_ms / 1000.0)
        elif self._paused:
            # restart from the new offset on next play()
            pygame.mixer.music.stop()
            self._paused = False

    def close(self):
        if self._loaded:
            try:
                pygame.mixer.music.stop()
                pygame.mixer.music.unload()
            except pygame.error:
                logging.debug("mixer already closed", exc_info=True)
        self._loaded = False
        self._playing = self._paused = False

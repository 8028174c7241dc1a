# app.py
import logging, os
import pygame
from typing import Callable, Optional
from config import AppConfig
from session import Session
from render.renderer import Renderer
from input.keymap import DEFAULT_KEYMAP, keycode_to_name, keycode_to_symbol
from notes.errors import AnalysisError
from notes.loader import JsonSongAnalyzer, read_song_file, save_song_json
from midi.export import export_song
from timeline.resolver import visible_notes
from timeline.timer import PygameTickTimer
from audio.media import MixerMedia
from utils.crashlog import log_exception, run_logged

SONG_PATTERNS = [("Song documents", "*.json"), ("All files", "*.*")]
AUDIO_PATTERNS = [("Audio files", "*.ogg *.wav *.mp3 *.flac"), ("All files", "*.*")]

def pick_file_dialog(title: str, patterns: list[tuple[str, str]]) -> Optional[str]:
    try:
        import tkinter as tk
        from tkinter import filedialog
        root = tk.Tk(); root.withdraw()
        file = filedialog.askopenfilename(title=title, filetypes=patterns)
        root.update(); root.destroy()
        return file or None
    except Exception:
        logging.debug("file dialog unavailable", exc_info=True)
        return None

class App:
    def __init__(self, cfg: AppConfig, out_dir: str = "."):
        self.cfg = cfg
        self.out_dir = out_dir
        self.renderer = Renderer(cfg.render)
        self._timer: Optional[PygameTickTimer] = None
        self.session = Session(cfg, self._make_timer)
        self.keymap = dict(DEFAULT_KEYMAP)
        self.timeline_enabled = cfg.music.timeline_enabled

        # UI 訊息（toast）
        self._msg = ""
        self._msg_time = 0.0

    def _make_timer(self, callback: Callable[[], None], period_ms: int) -> PygameTickTimer:
        self._timer = PygameTickTimer(callback, period_ms)
        return self._timer

    def _toast(self, msg: str, secs: float = 4.0):
        self._msg = msg
        self._msg_time = max(self._msg_time, secs)

    def close(self):
        self.session.close()
        pygame.quit()

    # ---------- Loading ----------
    def _on_progress(self, pct: int):
        self._toast(f"Analyzing song... {pct}%", 2.0)

    def load_song_from(self, song_path: str, audio_path: Optional[str] = None) -> bool:
        name = os.path.splitext(os.path.basename(song_path))[0]
        try:
            media = MixerMedia(audio_path) if audio_path else None
            song = run_logged(self.session.load_song(JsonSongAnalyzer(default_name=name),
                                                     read_song_file(song_path), media=media,
                                                     on_progress=self._on_progress))
        except (AnalysisError, OSError) as e:
            log_exception("load_song_from", e)
            self._toast("Failed to analyze song (see logs)", 6.0)
            return False
        if song is None:
            return False
        self._toast(f"Loaded {song.name}", 2.0)
        return True

    def load_song_interactive(self) -> bool:
        path = pick_file_dialog("Select a song document", SONG_PATTERNS)
        if not path:
            return False
        audio = pick_file_dialog("Select audio (cancel for silent)", AUDIO_PATTERNS)
        return self.load_song_from(path, audio)

    def toggle_playback(self):
        try:
            self.session.toggle_playback()
        except pygame.error as e:
            log_exception("toggle_playback", e)
            self.session.set_silent(True)
            self._toast("Audio failed, playing silent (see logs)", 6.0)

    def toggle_music_mode(self):
        self.session.set_music_mode(not self.session.music_enabled)
        self._toast(f"Music mode {'ON' if self.session.music_enabled else 'OFF'}", 2.0)

    def toggle_timeline(self):
        self.timeline_enabled = not self.timeline_enabled
        self._toast(f"Timeline {'ON' if self.timeline_enabled else 'OFF'}", 2.0)

    # ---------- Export / record ----------
    def export_current(self):
        ev = self.session.export()
        if ev is None:
            return
        try:
            path = ev.save(self.out_dir)
            self._toast(f"Saved {os.path.basename(path)}", 3.0)
        except OSError as e:
            log_exception("export_current", e)
            self._toast("Export failed (see logs)", 6.0)

    def toggle_record(self):
        if not self.session.recorder.active:
            self.session.set_record_mode(True)
            self._toast("REC", 2.0)
            return
        rec = self.session.set_record_mode(False)
        if rec is None or not rec.notes:
            return
        song = rec.to_song(f"recording-{rec.timestamp}")
        try:
            save_song_json(song, os.path.join(self.out_dir, f"{song.name}.json"))
            export_song(song, self.session.transform, self.cfg.export).save(self.out_dir)
            self._toast(f"Saved {song.name}", 3.0)
        except OSError as e:
            log_exception("toggle_record", e)
            self._toast("Saving recording failed (see logs)", 6.0)

    # ---------- Events ----------
    def _handle_keydown(self, e):
        s = self.session
        if e.key == pygame.K_SPACE:
            self.toggle_playback()
        elif e.key == pygame.K_HOME:
            s.restart()
        elif e.key == pygame.K_F2:
            s.set_silent(not s.clock.state.silent)
        elif e.key == pygame.K_F3:
            self.load_song_interactive()
        elif e.key == pygame.K_F5:
            self.export_current()
        elif e.key == pygame.K_F6:
            self.toggle_music_mode()
        elif e.key == pygame.K_F7:
            self.toggle_timeline()
        elif e.key == pygame.K_F9:
            self.toggle_record()
        elif e.key == pygame.K_LEFT:
            s.shift_transposition(-1)
        elif e.key == pygame.K_RIGHT:
            s.shift_transposition(+1)
        elif e.key == pygame.K_UP:
            s.step_speed(+1)
        elif e.key == pygame.K_DOWN:
            s.step_speed(-1)
        elif keycode_to_symbol(e.key, self.keymap) is not None:
            s.press_key(keycode_to_symbol(e.key, self.keymap))
        else:
            logging.debug("unmapped key %s", keycode_to_name(e.key))

    def _status_text(self) -> str:
        s = self.session
        st = s.clock.state
        fields = [
            s.song.name if s.song else "Ready",
            f"PLAY: {'ON' if st.running else 'OFF'}",
            f"SILENT: {'ON' if st.silent else 'OFF'}",
            f"SPEED: {st.speed_factor:.2f}x",
            f"KEY: {s.transform.transposition:+d}",
            f"MUSIC: {'ON' if s.music_enabled else 'OFF'}",
            f"TIMELINE: {'ON' if self.timeline_enabled else 'OFF'}",
            f"t={st.cursor_ms / 1000.0:6.2f}s",
        ]
        if s.recorder.active:
            fields.append("REC")
        if self._msg:
            fields.append(self._msg)
        return "  |  ".join(fields)

    # ---------- Main loop ----------
    def run(self):
        running = True
        try:
            while running:
                dt = self.renderer.tick(60)
                for e in pygame.event.get():
                    if self._timer is not None and self._timer.handle(e):
                        continue
                    if e.type == pygame.QUIT:
                        running = False
                    elif e.type == pygame.KEYDOWN:
                        if e.key == pygame.K_ESCAPE:
                            running = False
                        else:
                            self._handle_keydown(e)
                    elif e.type == pygame.KEYUP and e.key in self.keymap:
                        self.session.release_key(self.keymap[e.key])

                if self._msg_time > 0:
                    self._msg_time -= dt
                    if self._msg_time <= 0:
                        self._msg_time = 0
                        self._msg = ""

                self._draw()
        finally:
            self.close()

    def _draw(self):
        s = self.session
        self.renderer.begin_frame()
        self.renderer.draw_status_bar(self._status_text())
        self.renderer.draw_typed_text(s.typed_text)
        if s.song is not None and self.timeline_enabled:
            t = s.clock.cursor_ms
            upcoming = visible_notes(s.song.notes, t - 100, t + self.cfg.render.lookahead_ms)
            self.renderer.draw_notes(upcoming, t)
        self.renderer.draw_keyboard(highlight=s.refresh())
        self.renderer.end_frame()

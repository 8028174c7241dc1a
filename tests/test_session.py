"""Tests for the session: loading, transport gating, settings and export."""

import asyncio
import json

import pytest

from notes.errors import AnalysisError
from notes.loader import JsonSongAnalyzer
from notes.model import Song, SongNote
from session import Session


def _doc(name="song", notes=None):
    notes = notes if notes is not None else [{"key": "C", "time": 1000, "duration": 500}]
    return json.dumps({"id": name, "name": name, "notes": notes, "duration": 1500}).encode("utf-8")


def _load(session, data, **kw):
    return asyncio.run(session.load_song(JsonSongAnalyzer(), data, **kw))


class TestLoading:

    def test_load_installs_song_and_resets_clock(self, cfg, timers, media):
        s = Session(cfg, timers)
        progress = []
        song = _load(s, _doc(), media=media, on_progress=progress.append)
        assert s.song is song
        assert s.progress is None
        assert progress == [0, 50, 100]
        assert s.clock.cursor_ms == 0.0
        assert s.clock.media is media

    def test_failed_analysis_leaves_state_untouched(self, cfg, timers):
        s = Session(cfg, timers)
        first = _load(s, _doc("first"))
        s.start()
        timers.last.fire(3)
        cursor = s.clock.cursor_ms
        with pytest.raises(AnalysisError):
            _load(s, b"\xff\xfe not json")
        assert s.song is first
        assert s.progress is None
        assert s.clock.cursor_ms == cursor

    def test_bad_note_is_analysis_error(self, cfg, timers):
        s = Session(cfg, timers)
        with pytest.raises(AnalysisError):
            _load(s, _doc(notes=[{"key": "A", "time": -5, "duration": 10}]))
        assert s.song is None

    def test_stale_request_is_dropped(self, cfg, timers):
        s = Session(cfg, timers)
        slow_progress = []

        class SlowAnalyzer:
            def __init__(self):
                self.gate = asyncio.Event()

            async def analyze(self, data, on_progress):
                on_progress(10)
                await self.gate.wait()
                on_progress(90)
                return Song("old", "old", (SongNote("A", 0, 10),), 10)

        async def scenario():
            slow = SlowAnalyzer()
            old = asyncio.ensure_future(s.load_song(slow, b"", on_progress=slow_progress.append))
            await asyncio.sleep(0)
            new = await s.load_song(JsonSongAnalyzer(), _doc("new"))
            slow.gate.set()
            return await old, new

        old, new = asyncio.run(scenario())
        assert old is None
        assert s.song is new
        assert s.song.name == "new"
        assert slow_progress == [10]
        assert s.progress is None


class TestTransport:

    def test_no_song_is_a_no_op(self, cfg, timers):
        s = Session(cfg, timers)
        s.start()
        s.toggle_playback()
        s.restart()
        assert not s.is_playing
        assert timers.created == []
        assert s.export() is None

    def test_tick_updates_highlights(self, cfg, timers):
        cfg.playback.silent = True
        s = Session(cfg, timers)
        _load(s, _doc())
        s.clock.seek(1184)
        s.start()
        assert s.tick() == {"C"}
        s.clock.seek(1600)
        assert s.tick() == frozenset()

    def test_toggle_and_restart(self, cfg, timers):
        s = Session(cfg, timers)
        _load(s, _doc())
        s.toggle_playback()
        assert s.is_playing
        timers.last.fire(5)
        s.toggle_playback()
        assert not s.is_playing
        assert timers.last.cancelled
        s.restart()
        assert s.clock.cursor_ms == 0.0

    def test_stop_freezes_cursor(self, cfg, timers):
        s = Session(cfg, timers)
        _load(s, _doc())
        s.start()
        timers.last.fire(4)
        s.stop()
        frozen = s.clock.cursor_ms
        timers.last.fire(10)
        assert s.clock.cursor_ms == frozen

    def test_music_mode_off_clears_highlights(self, cfg, timers):
        s = Session(cfg, timers)
        _load(s, _doc())
        s.clock.seek(1200)
        assert s.refresh() == {"C"}
        s.set_music_mode(False)
        assert s.highlighted == frozenset()


class TestSettings:

    def test_transposition_clamps(self, cfg, timers):
        s = Session(cfg, timers)
        assert s.set_transposition(13) == 12
        assert s.set_transposition(-20) == -12
        assert s.shift_transposition(-1) == -12

    def test_transposition_does_not_change_highlights(self, cfg, timers):
        s = Session(cfg, timers)
        _load(s, _doc())
        s.clock.seek(1200)
        before = s.refresh()
        s.set_transposition(7)
        assert s.refresh() == before

    def test_speed_steps(self, cfg, timers):
        s = Session(cfg, timers)
        assert s.step_speed(+1) == 1.25
        assert s.step_speed(+1) == 1.5
        assert s.step_speed(+1) == 1.5
        s.set_speed(0.5)
        assert s.step_speed(-1) == 0.5

    def test_speed_clamps(self, cfg, timers):
        s = Session(cfg, timers)
        assert s.set_speed(4) == 1.5


class TestExport:

    def test_export_uses_transposition(self, cfg, timers):
        s = Session(cfg, timers)
        _load(s, _doc("demo", [{"key": "A", "time": 0, "duration": 200}]))
        s.set_transposition(2)
        ev = s.export()
        assert ev.filename == "demo.mid"
        assert ev.data[22 + 2] == 62

    def test_export_independent_of_playback(self, cfg, timers):
        s = Session(cfg, timers)
        _load(s, _doc())
        idle = s.export().data
        s.start()
        timers.last.fire(20)
        assert s.export().data == idle


class TestPlayerInput:

    def test_typed_text_buffer(self, cfg, timers):
        s = Session(cfg, timers)
        for k in ["H", "I", "BS", "O", "ENT", "X"]:
            s.press_key(k)
        assert s.typed_text == "HO\nX"

    def test_recording_against_cursor(self, cfg, timers):
        s = Session(cfg, timers)
        _load(s, _doc())
        assert s.set_record_mode(True) is None
        s.clock.seek(100)
        s.press_key("a")
        s.clock.seek(350)
        s.release_key("a")
        s.press_key("ENT")
        rec = s.set_record_mode(False)
        assert [(n.key, n.time, n.duration) for n in rec.notes] == [("A", 100, 250)]
        assert rec.instrument.value == "ACOUSTIC"

    def test_record_mode_off_without_recording(self, cfg, timers):
        s = Session(cfg, timers)
        assert s.set_record_mode(False) is None

# notes/loader.py
import asyncio, json, logging, uuid
from pathlib import Path
from typing import Callable, Optional, Protocol
from notes.model import Song, SongNote
from notes.errors import AnalysisError

ProgressFn = Callable[[int], None]

class SongAnalyzer(Protocol):
    async def analyze(self, data: bytes, on_progress: ProgressFn) -> Song: ...

def song_from_dict(obj: dict, default_name: str = "Untitled") -> Song:
    notes = [SongNote(key=str(n["key"]), time=int(n["time"]), duration=int(n.get("duration", 0)))
             for n in obj.get("notes", [])]
    duration = obj.get("duration")
    if duration is None:
        duration = max((n.end for n in notes), default=0)
    return Song(
        id=str(obj.get("id") or uuid.uuid4().hex),
        name=str(obj.get("name") or default_name),
        notes=tuple(notes),
        duration=int(duration),
    )

def song_to_dict(song: Song) -> dict:
    return {
        "id": song.id,
        "name": song.name,
        "notes": [{"key": n.key, "time": n.time, "duration": n.duration} for n in song.notes],
        "duration": song.duration,
    }

class JsonSongAnalyzer:
    """Reads a pre-analyzed song document (the analysis pipeline's output)."""
    def __init__(self, default_name: str = "Untitled"):
        self.default_name = default_name

    async def analyze(self, data: bytes, on_progress: ProgressFn) -> Song:
        on_progress(0)
        try:
            obj = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise AnalysisError(f"not a song document: {e}") from e
        if not isinstance(obj, dict):
            raise AnalysisError("song document must be a JSON object")
        await asyncio.sleep(0)
        on_progress(50)
        try:
            song = song_from_dict(obj, self.default_name)
        except (KeyError, TypeError, ValueError) as e:
            raise AnalysisError(f"bad note in song document: {e}") from e
        on_progress(100)
        logging.debug("Analyzed song %r: %d notes, %d ms", song.name, len(song.notes), song.duration)
        return song

def read_song_file(path: str) -> bytes:
    p = Path(path)
    if not p.exists():
        raise AnalysisError(f"file not found: {path}")
    return p.read_bytes()

def save_song_json(song: Song, path: str, indent: Optional[int] = 2):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(song_to_dict(song), f, ensure_ascii=False, indent=indent)

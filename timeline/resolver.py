# timeline/resolver.py
from typing import FrozenSet, Iterable, List, Optional
from notes.model import Song, SongNote
from notes.transform import canonical_key

def resolve_active(cursor_ms: float, notes: Iterable[SongNote]) -> FrozenSet[str]:
    """Keys of every note whose [time, time + duration] window contains cursor_ms."""
    return frozenset(canonical_key(n.key) for n in notes if n.time <= cursor_ms <= n.end)

def highlighted_keys(song: Optional[Song], cursor_ms: float, enabled: bool = True) -> FrozenSet[str]:
    if song is None or not enabled:
        return frozenset()
    return resolve_active(cursor_ms, song.notes)

def visible_notes(notes: Iterable[SongNote], start_ms: float, end_ms: float) -> List[SongNote]:
    """Notes overlapping [start_ms, end_ms], for the falling-note lane."""
    out = [n for n in notes if n.end >= start_ms and n.time <= end_ms]
    out.sort(key=lambda n: (n.time, canonical_key(n.key)))
    return out

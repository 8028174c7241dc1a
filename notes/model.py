# notes/model.py
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

@dataclass(frozen=True)
class SongNote:
    key: str
    time: int       # ms
    duration: int   # ms

    def __post_init__(self):
        if not self.key:
            raise ValueError("SongNote.key must be non-empty")
        if self.time < 0 or self.duration < 0:
            raise ValueError(f"SongNote time/duration must be >= 0: {self.time}, {self.duration}")

    @property
    def end(self) -> int:
        return self.time + self.duration

@dataclass(frozen=True)
class Song:
    id: str
    name: str
    notes: Tuple[SongNote, ...]
    duration: int   # ms

    def __post_init__(self):
        # tuple keeps the note list immutable even if a list was passed in
        object.__setattr__(self, "notes", tuple(self.notes))

class InstrumentType(str, Enum):
    ACOUSTIC = "ACOUSTIC"
    ELECTRIC = "ELECTRIC"
    SITAR = "SITAR"
    HARP = "HARP"
    PIANO = "PIANO"

@dataclass
class RecordedNote:
    key: str
    time: int
    duration: Optional[int] = None

@dataclass
class Recording:
    timestamp: int      # ms since epoch
    instrument: InstrumentType
    notes: List[RecordedNote] = field(default_factory=list)

    def to_song(self, name: str) -> Song:
        notes = [SongNote(n.key, n.time, n.duration or 0) for n in self.notes]
        total = max((n.end for n in notes), default=0)
        return Song(id=f"rec-{self.timestamp}", name=name, notes=tuple(notes), duration=total)

# input/recorder.py
import time
from typing import Dict, List, Optional
from notes.model import InstrumentType, RecordedNote, Recording
from notes.transform import canonical_key

SPECIAL_KEYS = {"BS", "ENT"}

class Recorder:
    """Captures the player's key presses against the playback cursor."""
    def __init__(self):
        self.notes: List[RecordedNote] = []
        self._held: Dict[str, RecordedNote] = {}
        self.started_at: Optional[int] = None

    @property
    def active(self) -> bool:
        return self.started_at is not None

    def begin(self):
        self.notes = []
        self._held.clear()
        self.started_at = int(time.time() * 1000)

    def press(self, key: str, at_ms: float):
        if not self.active or key in SPECIAL_KEYS:
            return
        k = canonical_key(key)
        if k in self._held:
            return  # key repeat
        n = RecordedNote(key=k, time=int(at_ms))
        self.notes.append(n)
        self._held[k] = n

    def release(self, key: str, at_ms: float):
        n = self._held.pop(canonical_key(key), None)
        if n is not None:
            n.duration = max(0, int(at_ms) - n.time)

    def finish(self, instrument: InstrumentType = InstrumentType.ACOUSTIC) -> Optional[Recording]:
        if not self.active:
            return None
        rec = Recording(timestamp=self.started_at, instrument=InstrumentType(instrument), notes=list(self.notes))
        self.started_at = None
        self._held.clear()
        return rec

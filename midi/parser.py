# midi/parser.py
import io
import mido
from dataclasses import dataclass
from typing import List, Tuple, Union

@dataclass(frozen=True)
class EventNote:
    pitch: int
    start: float    # seconds
    end: float      # seconds
    velocity: int
    channel: int

def _open(source: Union[str, bytes]) -> mido.MidiFile:
    if isinstance(source, (bytes, bytearray)):
        return mido.MidiFile(file=io.BytesIO(bytes(source)))
    return mido.MidiFile(source)

def parse_event_file(source: Union[str, bytes]) -> Tuple[List[EventNote], float]:
    mid = _open(source)
    tpb = mid.ticks_per_beat
    tempo = 500000  # default 120 bpm
    time_sec = 0.0
    active = {}
    notes: List[EventNote] = []

    for msg in mido.merge_tracks(mid.tracks):
        time_sec += mido.tick2second(msg.time, tpb, tempo)
        if msg.is_meta:
            if msg.type == 'set_tempo':
                tempo = msg.tempo
        elif msg.type == 'note_on' and msg.velocity > 0:
            active[(msg.channel, msg.note)] = (time_sec, msg.velocity)
        elif msg.type == 'note_off' or (msg.type == 'note_on' and msg.velocity == 0):
            key = (msg.channel, msg.note)
            if key in active:
                st, vel = active.pop(key)
                notes.append(EventNote(pitch=msg.note, start=st, end=time_sec, velocity=vel, channel=msg.channel))
    # close dangling
    for (ch, p), (st, vel) in active.items():
        notes.append(EventNote(pitch=p, start=st, end=time_sec, velocity=vel, channel=ch))
    total = max((n.end for n in notes), default=0.0)
    notes.sort(key=lambda n: (n.start, n.pitch))
    return notes, total

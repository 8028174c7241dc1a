# midi/export.py
import io, logging, os
from dataclasses import dataclass
from typing import List, Optional
import mido
from notes.model import Song
from notes.errors import NoActiveSongError
from notes.transform import TransformSettings, key_to_pitch
from config import ExportConfig

MIME_TYPE = "audio/midi"

@dataclass(frozen=True)
class EventFile:
    data: bytes
    filename: str
    mime_type: str = MIME_TYPE

    def save(self, directory: str = ".") -> str:
        os.makedirs(directory, exist_ok=True)
        path = os.path.join(directory, self.filename)
        with open(path, "wb") as f:
            f.write(self.data)
        return path

def build_events(song: Song, transform: TransformSettings, cfg: ExportConfig) -> List[mido.Message]:
    """One note-on / note-off pair per note, in the song's list order.

    Every note lasts a fixed cfg.note_ticks; the song's own timing is not
    carried into the file.
    """
    events: List[mido.Message] = []
    for n in song.notes:
        pitch = key_to_pitch(n.key, transform.transposition, cfg.base_pitch)
        events.append(mido.Message("note_on", channel=0, note=pitch, velocity=cfg.velocity, time=0))
        events.append(mido.Message("note_off", channel=0, note=pitch, velocity=0, time=cfg.note_ticks))
    return events

def export_song(song: Optional[Song], transform: Optional[TransformSettings] = None,
                cfg: Optional[ExportConfig] = None) -> EventFile:
    if song is None:
        raise NoActiveSongError("nothing to export")
    transform = transform or TransformSettings()
    cfg = cfg or ExportConfig()

    track = mido.MidiTrack(build_events(song, transform, cfg))
    track.append(mido.MetaMessage("end_of_track", time=0))

    mid = mido.MidiFile(type=0, ticks_per_beat=cfg.ticks_per_beat)
    mid.tracks.append(track)

    buf = io.BytesIO()
    mid.save(file=buf)
    data = buf.getvalue()
    logging.info("Exported %r: %d notes, %d bytes, transposition=%+d",
                 song.name, len(song.notes), len(data), transform.transposition)
    return EventFile(data=data, filename=f"{song.name}.mid")

# ========================= config.py =========================
from dataclasses import dataclass, field
from typing import List

@dataclass
class PlaybackConfig:
    tick_ms: int = 16                 # ~60 Hz
    speed: float = 1.0
    silent: bool = False
    speed_steps: List[float] = field(default_factory=lambda: [0.5, 0.75, 1.0, 1.25, 1.5])

@dataclass
class ExportConfig:
    ticks_per_beat: int = 480
    base_pitch: int = 60      # 'A' -> 60
    velocity: int = 0x64
    note_ticks: int = 192     # fixed note-off delta

@dataclass
class MusicModeConfig:
    enabled: bool = True
    timeline_enabled: bool = True
    transposition: int = 0
    record_mode: bool = False
    instrument: str = "ACOUSTIC"

@dataclass
class RenderConfig:
    window_w: int = 1280
    window_h: int = 720
    keys_h: int = 120
    lookahead_ms: int = 3000    # timeline runway above keys

@dataclass
class AppConfig:
    playback: PlaybackConfig = field(default_factory=PlaybackConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    music: MusicModeConfig = field(default_factory=MusicModeConfig)
    render: RenderConfig = field(default_factory=RenderConfig)

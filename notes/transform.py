# notes/transform.py
import logging
from dataclasses import dataclass
from notes.errors import InvalidRangeError

TRANSPOSE_MIN, TRANSPOSE_MAX = -12, 12
SPEED_MIN, SPEED_MAX = 0.5, 1.5
BASE_PITCH = 60   # 'A'

def canonical_key(key: str) -> str:
    return key.upper()

def check_transposition(semitones: int) -> int:
    v = int(semitones)
    if not (TRANSPOSE_MIN <= v <= TRANSPOSE_MAX):
        raise InvalidRangeError("transposition", v, TRANSPOSE_MIN, TRANSPOSE_MAX)
    return v

def check_speed(factor: float) -> float:
    v = float(factor)
    if not (SPEED_MIN <= v <= SPEED_MAX):
        raise InvalidRangeError("speed", v, SPEED_MIN, SPEED_MAX)
    return v

def clamp_transposition(semitones: int) -> int:
    try:
        return check_transposition(semitones)
    except InvalidRangeError as e:
        logging.debug("clamping %s", e)
        return e.bound

def clamp_speed(factor: float) -> float:
    try:
        return check_speed(factor)
    except InvalidRangeError as e:
        logging.debug("clamping %s", e)
        return e.bound

@dataclass(frozen=True)
class TransformSettings:
    """Read-time pitch reinterpretation; the Song itself is never touched."""
    transposition: int = 0

    def __post_init__(self):
        object.__setattr__(self, "transposition", clamp_transposition(self.transposition))

    def shifted(self, delta: int) -> "TransformSettings":
        return TransformSettings(self.transposition + delta)

def key_to_pitch(key: str, transposition: int = 0, base_pitch: int = BASE_PITCH) -> int:
    """Letter-per-semitone mapping: 'A' -> 60, 'B' -> 61, ... Result clamped to 0..127.

    Only the first character counts. Keys outside A-Z still map (and clamp),
    they just don't land on a musically meaningful pitch.
    """
    ordinal = ord(canonical_key(key)[0]) - ord("A")
    return max(0, min(127, base_pitch + ordinal + int(transposition)))

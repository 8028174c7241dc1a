"""Tests for transposition, speed clamping and the key-to-pitch mapping."""

import pytest

from notes.errors import InvalidRangeError
from notes.transform import (
    TransformSettings,
    canonical_key,
    check_speed,
    check_transposition,
    clamp_speed,
    clamp_transposition,
    key_to_pitch,
)


class TestClamping:

    def test_transposition_bounds(self):
        assert clamp_transposition(13) == 12
        assert clamp_transposition(-20) == -12
        assert clamp_transposition(5) == 5

    def test_speed_bounds(self):
        assert clamp_speed(2.0) == 1.5
        assert clamp_speed(0.1) == 0.5
        assert clamp_speed(0.75) == 0.75

    def test_check_raises(self):
        with pytest.raises(InvalidRangeError) as ei:
            check_transposition(13)
        assert ei.value.bound == 12
        with pytest.raises(InvalidRangeError):
            check_speed(1.6)

    def test_settings_clamp_on_construction(self):
        assert TransformSettings(99).transposition == 12
        assert TransformSettings(-99).transposition == -12

    def test_shifted_stops_at_bounds(self):
        s = TransformSettings(11)
        s = s.shifted(+1).shifted(+1)
        assert s.transposition == 12
        assert TransformSettings(-12).shifted(-1).transposition == -12


class TestKeyToPitch:

    def test_letter_per_semitone(self):
        assert key_to_pitch("A") == 60
        assert key_to_pitch("C") == 62
        assert key_to_pitch("Z") == 85

    def test_lower_case_maps_like_upper_case(self):
        assert key_to_pitch("c") == key_to_pitch("C")
        assert canonical_key("q") == "Q"

    def test_transposition_shifts_pitch(self):
        assert key_to_pitch("A", 12) == 72
        assert key_to_pitch("A", -12) == 48

    def test_first_character_only(self):
        assert key_to_pitch("Bb") == 61

    def test_out_of_range_clamps(self):
        assert key_to_pitch("~") == 121
        assert key_to_pitch("É") == 127
        assert key_to_pitch("!", -12) == 16
        assert key_to_pitch("\x00") == 0

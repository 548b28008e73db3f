import random

import pytest

from vlga.music_constants import ChordQuality, Pitch
from vlga.music_utils import MusicUtils


def test_registers_and_unknown_voice():
    assert MusicUtils.register_of('S') == (Pitch.G4, Pitch.A5)
    assert MusicUtils.register_of('B') == (2, 14)
    assert MusicUtils.is_in_register('T', Pitch.F4)
    assert not MusicUtils.is_in_register('T', Pitch.G4)
    with pytest.raises(ValueError):
        MusicUtils.register_of('Q')


def test_random_pitch_stays_in_register():
    rng = random.Random(5)
    for _ in range(200):
        assert 2 <= MusicUtils.random_pitch('B', rng) <= 14


def test_pitch_spelling():
    assert MusicUtils.step_of(14) == 'C'
    assert MusicUtils.octave_of(14) == 4
    assert MusicUtils.pitch_name(27) == "B5"
    assert Pitch.D4.step == 'D' and Pitch.D4.octave == 4
    assert MusicUtils.pitch_set([14, 21, 16]) == frozenset("CE")
    assert MusicUtils.to_music21_pitch(14).nameWithOctave == "C4"


def test_interval_consonance():
    assert MusicUtils.is_consonant_interval(14, 18)          # fifth
    assert not MusicUtils.is_consonant_interval(17, 20)      # F-B tritone
    assert not MusicUtils.is_consonant_interval(14, 15)      # second
    assert not MusicUtils.is_consonant_interval(14, 17)      # fourth
    assert MusicUtils.is_consonant_interval(14, 17, fourth_is_consonant=True)


def test_chord_consonance():
    c_major = [21, 18, 16, 7]
    assert MusicUtils.is_consonant_chord(c_major)
    assert not MusicUtils.is_consonant_chord([21, 20, 16, 7])
    assert MusicUtils.is_consonant_chord_from_bass(c_major, "SATB")
    assert not MusicUtils.is_consonant_chord_from_bass(c_major, "BATS")
    assert MusicUtils.is_consonant_chord_from_bass(c_major, "BATS", check_bass=False)


def test_figured_numbers_and_root():
    assert MusicUtils.get_numbers([21, 18, 16, 7]) == {5, 3}
    assert MusicUtils.get_root([21, 18, 16, 7]) == 'C'
    assert MusicUtils.get_root([22, 20, 15, 4]) == 'G'
    assert MusicUtils.get_root([14, 15, 16]) == 'X'
    assert MusicUtils.get_bottom([22, 20, 15, 4]) == 4
    assert MusicUtils.get_top([22, 20, 15, 4]) == 22


def test_triads():
    assert MusicUtils.triad_chord_test([22, 20, 15, 4]) == 'G'
    assert MusicUtils.chord_quality([22, 20, 15, 4]) is ChordQuality.ROOT_TRIAD

    first_inversion = [21, 18, 14, 9]
    assert MusicUtils.get_numbers(first_inversion) == {6, 3}
    assert MusicUtils.chord_quality(first_inversion) is ChordQuality.INVERTED_TRIAD
    assert MusicUtils.chord_symbol(first_inversion) == 'C'


def test_sevenths():
    g7 = [24, 20, 15, 4]
    assert MusicUtils.get_numbers(g7) == {7, 5, 3}
    assert MusicUtils.triad_chord_test(g7) == 'X'
    assert MusicUtils.seventh_chord_test(g7) == 'g'
    assert MusicUtils.chord_quality(g7) is ChordQuality.ROOT_SEVENTH
    assert MusicUtils.locate_seventh_note(g7) == [0]


def test_leading_tone_triad():
    b_dim = [24, 22, 13, 8]
    assert MusicUtils.triad_chord_test(b_dim) == 'X'
    assert MusicUtils.seventh_chord_test(b_dim) == 'B'
    assert MusicUtils.is_root_position(b_dim)
    assert MusicUtils.chord_quality(b_dim) is ChordQuality.ROOT_SEVENTH
    assert MusicUtils.chord_symbol(b_dim) == 'B'
    assert MusicUtils.locate_seventh_note(b_dim) == [0]


def test_non_chord():
    unisons = [21, 21, 14, 7]
    assert MusicUtils.chord_quality(unisons) is ChordQuality.NON_CHORD
    assert MusicUtils.chord_symbol(unisons) == 'X'
    assert MusicUtils.locate_seventh_note([14, 15, 16]) == []
    assert MusicUtils.seventh_chord_test([14, 15, 16]) == 'X'

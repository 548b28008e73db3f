# vlga/music_utils.py
"""
Module: music_utils.py

Purpose:
This module provides the tonal pitch model used by the voice-leading genetic
algorithm: the register lookup for each voice, random in-register pitches,
interval consonance, and the chord-classification primitives (figured-bass
numbers, triad/seventh detection, root finding, inversion and the location
of chord sevenths). All chords are lists of pitch ordinals in voice order.
Conversion to music21 objects is provided for score rendering.
"""

import random
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from music21 import pitch as m21pitch

from .music_constants import (
    CONSONANT_INTERVAL_CLASSES, FOURTH_INTERVAL_CLASS, LEADING_TONE_ROOT_POSITION,
    LEADING_TONE_TRIAD, NON_CHORD, REGISTERS, ROOT_POSITION_NUMBERS, SEVENTH_SHAPES,
    SEVENTHS, STEP_LETTERS, TRIAD_SHAPES, TRITONE, Chord, ChordQuality, Pitch,
)


class MusicUtils:
    """
    A utility class containing static methods for the diatonic pitch model
    and chord classification.
    """

    # --- Pitches and registers ---

    @staticmethod
    def register_of(voice: str) -> Tuple[int, int]:
        """
        Returns the closed (low, high) ordinal range of a voice label.

        Raises:
            ValueError: If the voice label is not one of S, A, T, B.
        """
        try:
            low, high = REGISTERS[voice]
        except KeyError:
            raise ValueError(f"Unexpected voice label: {voice!r}") from None
        return int(low), int(high)

    @staticmethod
    def is_in_register(voice: str, ordinal: int) -> bool:
        low, high = MusicUtils.register_of(voice)
        return low <= ordinal <= high

    @staticmethod
    def random_pitch(voice: str, rng: Optional[random.Random] = None) -> int:
        """Uniformly random ordinal within the voice's register."""
        low, high = MusicUtils.register_of(voice)
        return (rng or random).randint(low, high)

    @staticmethod
    def step_of(ordinal: int) -> str:
        return STEP_LETTERS[ordinal % 7]

    @staticmethod
    def octave_of(ordinal: int) -> int:
        return 2 + ordinal // 7

    @staticmethod
    def pitch_name(ordinal: int) -> str:
        return Pitch(ordinal).name

    @staticmethod
    def pitch_set(ordinals: Iterable[int]) -> FrozenSet[str]:
        """Set of step letters sounding in the given pitches."""
        return frozenset(MusicUtils.step_of(o) for o in ordinals)

    @staticmethod
    def to_music21_pitch(ordinal: int) -> m21pitch.Pitch:
        return m21pitch.Pitch(MusicUtils.pitch_name(ordinal))

    # --- Intervals ---

    @staticmethod
    def is_consonant_interval(o1: int, o2: int, fourth_is_consonant: bool = False) -> bool:
        """
        Two pitches are consonant unless they spell the F-B tritone or their
        diatonic interval class is a second or seventh. The fourth counts as
        consonant only when `fourth_is_consonant` is set.
        """
        if MusicUtils.pitch_set((o1, o2)) == TRITONE:
            return False
        interval_class = abs(o1 - o2) % 7
        return (interval_class in CONSONANT_INTERVAL_CLASSES
                or (fourth_is_consonant and interval_class == FOURTH_INTERVAL_CLASS))

    @staticmethod
    def is_consonant_chord(chord: Chord) -> bool:
        """True if every pair of notes is consonant (fourths allowed)."""
        return all(
            MusicUtils.is_consonant_interval(chord[i], chord[j], True)
            for i in range(len(chord) - 1)
            for j in range(i + 1, len(chord))
        )

    @staticmethod
    def is_consonant_chord_from_bass(chord: Chord, voices: str, check_bass: bool = True) -> bool:
        """
        True if every note is consonant with the lowest one (fourths not allowed)
        and, when `check_bass` is set, the lowest note is held by a bass voice.
        """
        lowest = MusicUtils.get_bottom(chord)
        if check_bass and voices[list(chord).index(lowest)] != 'B':
            return False
        return all(MusicUtils.is_consonant_interval(lowest, p, False) for p in chord)

    # --- Chord classification ---

    @staticmethod
    def get_bottom(chord: Chord) -> int:
        return min(chord)

    @staticmethod
    def get_top(chord: Chord) -> int:
        return max(chord)

    @staticmethod
    def get_numbers(chord: Chord) -> FrozenSet[int]:
        """
        Figured-bass numbers of the chord: the interval above the lowest note of
        every pitch, reduced into 1..7, with the unison/octave (1) left out.
        """
        bottom = MusicUtils.get_bottom(chord)
        return frozenset(n for n in ((o - bottom) % 7 + 1 for o in chord) if n > 1)

    @staticmethod
    def _spelling_from(letter: str) -> str:
        return next(s for s in SEVENTHS if s.startswith(letter))

    @staticmethod
    def get_root(chord: Chord) -> str:
        """
        Finds the chord root by trying the diatonic seventh spelled from each
        note in voice order; the first spelling containing every letter of the
        chord gives the root. Returns 'X' when no spelling fits.
        """
        letters = MusicUtils.pitch_set(chord)
        for ordinal in chord:
            spelling = MusicUtils._spelling_from(MusicUtils.step_of(ordinal))
            if letters <= set(spelling):
                return spelling[0]
        return NON_CHORD

    @staticmethod
    def triad_chord_test(chord: Chord) -> str:
        """Root letter if the chord is a (non-diminished) triad, otherwise 'X'."""
        if MusicUtils.pitch_set(chord) == LEADING_TONE_TRIAD:
            return NON_CHORD
        if MusicUtils.get_numbers(chord) not in TRIAD_SHAPES:
            return NON_CHORD
        return MusicUtils.get_root(chord)

    @staticmethod
    def seventh_chord_test(chord: Chord) -> str:
        """
        Lowercase root letter if the chord is a seventh chord, 'B' for the
        leading-tone diminished triad, otherwise 'X'.
        """
        if MusicUtils.pitch_set(chord) == LEADING_TONE_TRIAD:
            return 'B'
        if MusicUtils.get_numbers(chord) not in SEVENTH_SHAPES:
            return NON_CHORD
        root = MusicUtils.get_root(chord)
        return NON_CHORD if root == NON_CHORD else root.lower()

    @staticmethod
    def is_root_position(chord: Chord) -> bool:
        numbers = MusicUtils.get_numbers(chord)
        if MusicUtils.pitch_set(chord) == LEADING_TONE_TRIAD:
            return numbers == LEADING_TONE_ROOT_POSITION
        return 3 in numbers and numbers <= ROOT_POSITION_NUMBERS

    @staticmethod
    def locate_seventh_note(chord: Chord) -> List[int]:
        """
        Returns the indices of all voices holding the chord's seventh.
        The leading-tone triad counts F as its seventh.
        """
        if MusicUtils.pitch_set(chord) == LEADING_TONE_TRIAD:
            seventh = 'F'
        else:
            root = MusicUtils.get_root(chord)
            if root == NON_CHORD:
                return []
            seventh = MusicUtils._spelling_from(root)[3]
        return [i for i, o in enumerate(chord) if MusicUtils.step_of(o) == seventh]

    @staticmethod
    def chord_quality(chord: Chord) -> ChordQuality:
        if MusicUtils.triad_chord_test(chord) != NON_CHORD:
            if MusicUtils.is_root_position(chord):
                return ChordQuality.ROOT_TRIAD
            return ChordQuality.INVERTED_TRIAD
        if MusicUtils.seventh_chord_test(chord) != NON_CHORD:
            if MusicUtils.is_root_position(chord):
                return ChordQuality.ROOT_SEVENTH
            return ChordQuality.INVERTED_SEVENTH
        return ChordQuality.NON_CHORD

    @staticmethod
    def chord_symbol(chord: Chord) -> str:
        """
        Progression token for one chord: uppercase root for triads, lowercase
        root for sevenths, 'B' for the leading-tone triad, 'X' for anything else.
        """
        triad = MusicUtils.triad_chord_test(chord)
        if triad != NON_CHORD:
            return triad
        return MusicUtils.seventh_chord_test(chord)

    @staticmethod
    def translate_o2p(ordinals: Sequence[int]) -> List[Pitch]:
        return [Pitch(o) for o in ordinals]

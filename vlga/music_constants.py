# vlga/music_constants.py
"""
Module: music_constants.py

Purpose:
This module serves as a central repository for the constants, type definitions
and default configuration used throughout the voice-leading genetic algorithm.
Keeping them here makes the musical model and the behaviour of the search easy
to tune from one place.

Key Sections:
- Type Aliases: Genome, Chord and Melody representations.
- Pitch Gamut: The 28-step diatonic gamut (C2 to B5) as an IntEnum.
- Voice Registers: Legal pitch range for each voice label (S, A, T, B).
- Chord Spellings and Figured-Bass Shapes: Used to classify chords.
- Chord Quality: The closed set of per-slot chord classifications.
- Rule Weights: Unit penalty of each voice-leading rule.
- Melodic Whitelists and Cadences: Interval and cadence tables used by rules.
- Genetic Algorithm Defaults: Population, rates and stopping parameters.
"""

from enum import Enum, IntEnum
from typing import Dict, FrozenSet, List, Sequence, Tuple

# --- Type Aliases for Clarity ---

# Genome: the flattened, chord-slot-major list of pitch ordinals.
Genome = Tuple[int, ...]
# Chord: one pitch ordinal per voice at a single slot.
Chord = Sequence[int]
# Melody: one pitch ordinal per slot for a single voice.
Melody = Sequence[int]

# --- Pitch Gamut ---

STEP_LETTERS: str = "CDEFGAB"


class Pitch(IntEnum):
    """
    A position in the diatonic gamut. The integer value is the ordinal used
    in genomes; `step` and `octave` give the notated spelling.
    """
    C2 = 0
    D2 = 1
    E2 = 2
    F2 = 3
    G2 = 4
    A2 = 5
    B2 = 6
    C3 = 7
    D3 = 8
    E3 = 9
    F3 = 10
    G3 = 11
    A3 = 12
    B3 = 13
    C4 = 14
    D4 = 15
    E4 = 16
    F4 = 17
    G4 = 18
    A4 = 19
    B4 = 20
    C5 = 21
    D5 = 22
    E5 = 23
    F5 = 24
    G5 = 25
    A5 = 26
    B5 = 27

    @property
    def step(self) -> str:
        return STEP_LETTERS[self.value % 7]

    @property
    def octave(self) -> int:
        return 2 + self.value // 7

    def __str__(self) -> str:
        return self.name


# --- Voice Registers ---
# Closed [low, high] ranges. Every gene assigned to a voice must lie within them.
REGISTERS: Dict[str, Tuple[Pitch, Pitch]] = {
    'S': (Pitch.G4, Pitch.A5),  # Soprano
    'A': (Pitch.G3, Pitch.C5),  # Alto
    'T': (Pitch.C3, Pitch.F4),  # Tenor
    'B': (Pitch.E2, Pitch.C4),  # Bass
}

VOICE_NAMES: Dict[str, str] = {'S': "Soprano", 'A': "Alto", 'T': "Tenor", 'B': "Bass"}

INNER_VOICES: str = "AT"
OUTER_VOICES: str = "SB"
# Voice pairs that get the stricter (hidden fifths/octaves) independence check.
OUTER_VOICE_PAIRS: FrozenSet[str] = frozenset({"SB", "BS"})

# --- Chord Spellings ---
TRIADS: List[str] = ["CEG", "DFA", "EGB", "FAC", "GBD", "ACE"]
SEVENTHS: List[str] = ["CEGB", "DFAC", "EGBD", "FACE", "GBDF", "ACEG", "BDFA"]

# The diminished triad on the leading tone gets special treatment everywhere.
LEADING_TONE_TRIAD: FrozenSet[str] = frozenset("BDF")
TRITONE: FrozenSet[str] = frozenset("BF")
LEADING_TONE: str = 'B'
TONIC: str = 'C'

# --- Figured-Bass Shapes ---
TRIAD_SHAPES: List[FrozenSet[int]] = [
    frozenset({5, 3}), frozenset({3}), frozenset({6, 3}), frozenset({6, 4}),
]
SEVENTH_SHAPES: List[FrozenSet[int]] = [
    frozenset({7, 5, 3}), frozenset({7, 3}), frozenset({6, 5, 3}), frozenset({6, 5}),
    frozenset({6, 4, 3}), frozenset({6, 4, 2}), frozenset({4, 2}),
]
ROOT_POSITION_NUMBERS: FrozenSet[int] = frozenset({7, 5, 3})
LEADING_TONE_ROOT_POSITION: FrozenSet[int] = frozenset({6, 3})

CONSONANT_INTERVAL_CLASSES: FrozenSet[int] = frozenset({0, 2, 4, 5})
FOURTH_INTERVAL_CLASS: int = 3
# Interval classes whose parallel motion breaks voice independence (unison/octave, fifth).
PERFECT_INTERVAL_CLASSES: FrozenSet[int] = frozenset({0, 4})

NON_CHORD: str = 'X'


class ChordQuality(Enum):
    """Classification of one chord slot. The value is its `series` character."""
    ROOT_TRIAD = 'T'
    INVERTED_TRIAD = 't'
    ROOT_SEVENTH = 'S'
    INVERTED_SEVENTH = 's'
    NON_CHORD = 'X'

    @property
    def is_triad(self) -> bool:
        return self in (ChordQuality.ROOT_TRIAD, ChordQuality.INVERTED_TRIAD)

    @property
    def is_dissonant(self) -> bool:
        return not self.is_triad

    def __str__(self) -> str:
        return self.value


# --- Rule Weights (unit penalties) ---
PENALTY_MELODIC_SMOOTHNESS: float = 0.01
PENALTY_VOICE_INDEPENDENCE: float = 0.035
PENALTY_IMPROPER_OUTER_VOICES: float = 0.25
PENALTY_NOT_TRIAD_OR_SEVENTH_CHORD: float = 0.05
PENALTY_IMPROPER_RESOLUTION: float = 0.015
PENALTY_SUCCESSIVE_DISSONANCE: float = 0.02
PENALTY_NON_TRIAD_START: float = 0.03
PENALTY_IMPROPER_CADENTIAL: float = 0.06

# --- Melodic Whitelists ---
# Signed diatonic steps a voice may take between adjacent slots.
FEASIBLE_INTERVALS_INNER: FrozenSet[int] = frozenset({0, 1, 2, 3, -1, -2, -3})
FEASIBLE_INTERVALS_OUTER: FrozenSet[int] = frozenset({1, 2, 3, 4, 5, 7, -1, -2, -3, -4, -5, -7})
MAX_INNER_FIGURE_SPAN: int = 6   # exclusive bound on |step1 + step2| for inner voices
MAX_OUTER_FIGURE_SPAN: int = 7   # inclusive bound on |step1 + step2| for outer voices
# Allowed melodic motion of a chord seventh into the next slot: held or down a step.
SEVENTH_RESOLUTION_STEPS: FrozenSet[int] = frozenset({0, -1})

# --- Cadences ---
# Final progression token -> tokens that may approach it.
CADENCES: Dict[str, FrozenSet[str]] = {
    'C': frozenset("GFgf"),
    'D': frozenset("CAa"),
    'E': frozenset("DFA"),
    'F': frozenset("C"),
    'G': frozenset("DFAdf"),
    'A': frozenset("EGeg"),
}

# --- Roman Numerals ---
ROMAN_NUMERALS: Dict[str, str] = {
    'C': "I",
    'D': "ii",
    'E': "iii",
    'F': "IV",
    'G': "V",
    'A': "vi",
    'B': "vii",
    'X': "-",
}
TEXT_FIGURE_FORMAT: str = "{}_{}"
LATEX_FIGURE_FORMAT: str = "$\\myChord{{{}}}{{{}}}{{{}}}{{{}}}$"

# --- Genetic Algorithm Defaults ---
DEFAULT_VOICES: str = "SAATTB"
DEFAULT_CHORD_COUNT: int = 17
POPULATION_LIMIT: int = 1200
ELITISM_RATE: float = 0.25
CROSSOVER_ONLY_RATE: float = 0.10
CROSSOVER_MUTATION_RATE: float = 0.75
MUTATION_ONLY_RATE: float = 0.10
MAX_MUTATION_LOCI: int = 3
FITNESS_AIM: float = 0.98
GENERATION_LIMIT: int = 1200
TOURNAMENT_ARITY: int = 2
CROSSOVER_BY_CHORD_RATIO: float = 0.8
UNIFORM_CROSSOVER_RATIO: float = 0.3

# --- Progress Logging ---
LOG_INTERVAL_SECONDS: float = 3.0
LOG_EVERY_GENERATIONS: int = 10
PROGRESS_FORMAT: str = "{:6d}:{:6.3f} /{:6.3f} {} P{}"

# --- Score Output ---
SCORE_TITLE: str = "Exploring Voice-Leading with GA"
SCORE_TEMPO_WHOLE_NOTES: int = 52
SCORE_TIME_SIGNATURE: str = "2/2"
SCORE_NOTE_QUARTER_LENGTH: float = 4.0
DATA_FOLDER: str = "data"

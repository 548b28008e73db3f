# vlga/evaluation.py
"""
Module: evaluation.py

Purpose:
This module defines the fitness landscape of the voice-leading genetic
algorithm: eight independent rules, each counting the defects of a candidate
progression and carrying a fixed unit penalty. A candidate's fitness is
1 minus the sum of the weighted defect counts of its active rules.

Rules only read from a candidate (its melodies, chords and per-slot chord
classification), so they are pure functions and safe to evaluate in parallel.
"""

from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Sequence, Tuple

from .music_constants import (
    CADENCES, FEASIBLE_INTERVALS_INNER, FEASIBLE_INTERVALS_OUTER, INNER_VOICES,
    LEADING_TONE, MAX_INNER_FIGURE_SPAN, MAX_OUTER_FIGURE_SPAN, NON_CHORD,
    OUTER_VOICE_PAIRS, OUTER_VOICES, PENALTY_IMPROPER_CADENTIAL,
    PENALTY_IMPROPER_OUTER_VOICES, PENALTY_IMPROPER_RESOLUTION,
    PENALTY_MELODIC_SMOOTHNESS, PENALTY_NON_TRIAD_START,
    PENALTY_NOT_TRIAD_OR_SEVENTH_CHORD, PENALTY_SUCCESSIVE_DISSONANCE,
    PENALTY_VOICE_INDEPENDENCE, PERFECT_INTERVAL_CLASSES,
    SEVENTH_RESOLUTION_STEPS, TONIC, TRITONE, Chord, ChordQuality, Melody,
)
from .music_utils import MusicUtils

if TYPE_CHECKING:
    from .candidate import Candidate


# --- Melodic smoothness ---

def is_melodic_feasible(voice: str, figure: Sequence[int]) -> bool:
    """
    Checks whether a short melodic figure (two or three notes) is easy to sing.

    A figure is infeasible if any two adjacent notes spell the F-B tritone, or
    if its steps fall outside the whitelist for the voice. Inner voices (A, T)
    may move by at most a fourth and two steps together must span less than a
    sixth; outer voices (S, B) may leap up to a sixth or an octave and two
    steps together may span up to an octave.

    Args:
        voice (str): Voice label of the melody.
        figure (Sequence[int]): Consecutive pitch ordinals of the melody.

    Returns:
        bool: True if the figure is singable.
    """
    for first, second in zip(figure, figure[1:]):
        if MusicUtils.pitch_set((first, second)) == TRITONE:
            return False

    steps = sorted(second - first for first, second in zip(figure, figure[1:]))
    if not steps:
        return True

    if voice in INNER_VOICES:
        return (all(step in FEASIBLE_INTERVALS_INNER for step in steps)
                and (len(steps) == 1 or abs(steps[0] + steps[1]) < MAX_INNER_FIGURE_SPAN))

    return (all(step in FEASIBLE_INTERVALS_OUTER for step in steps)
            and (len(steps) == 1 or abs(steps[0] + steps[1]) <= MAX_OUTER_FIGURE_SPAN))


def melodic_infeasibility_count(voice: str, melody: Melody) -> int:
    """
    Counts the infeasible three-note figures centred on every interior note,
    plus the excess of skips over steps in the whole melody.
    """
    count = sum(
        1 for i in range(1, len(melody) - 1)
        if not is_melodic_feasible(voice, melody[i - 1:i + 2])
    )
    motions = [abs(second - first) for first, second in zip(melody, melody[1:])]
    skips = sum(1 for m in motions if m > 1)
    steps = len(motions) - skips
    return count + max(0, skips - steps)


def melodic_smoothness_defects(candidate: "Candidate") -> int:
    return sum(
        melodic_infeasibility_count(voice, candidate.melody(v))
        for v, voice in enumerate(candidate.voices)
    )


# --- Voice independence ---

def voice_independence_check(m1: Melody, m2: Melody, is_outers: bool) -> int:
    """
    Counts parallel fifths and octaves (unisons included) between two melodies.

    Args:
        m1 (Melody): The first melody.
        m2 (Melody): The second melody.
        is_outers (bool): Also count hidden fifths/octaves, i.e. any similar
                          motion into a perfect interval, as required between
                          the outer voices.

    Returns:
        int: Total number of offending time steps.
    """
    counter = 0
    for i in range(1, min(len(m1), len(m2))):
        if MusicUtils.pitch_set((m1[i], m2[i])) == TRITONE:
            continue
        current = abs(m2[i] - m1[i]) % 7
        previous = abs(m2[i - 1] - m1[i - 1]) % 7
        if current not in PERFECT_INTERVAL_CLASSES:
            continue
        motion = (m2[i] - m2[i - 1]) * (m1[i] - m1[i - 1])
        if previous == current and motion != 0:
            counter += 1
        elif is_outers and motion > 0:
            counter += 1
    return counter


def voice_independence_defects(candidate: "Candidate") -> int:
    voices = candidate.voices
    return sum(
        voice_independence_check(
            candidate.melody(i), candidate.melody(j),
            voices[i] + voices[j] in OUTER_VOICE_PAIRS)
        for i in range(len(voices) - 1)
        for j in range(i + 1, len(voices))
    )


# --- Outer voices ---

def improper_outer_voice_count(chord: Chord, voices: str) -> int:
    """Number of S voices not holding the highest note and B voices not holding the lowest."""
    count = 0
    for v, voice in enumerate(voices):
        if voice == 'S' and chord[v] != MusicUtils.get_top(chord):
            count += 1
        elif voice == 'B' and chord[v] != MusicUtils.get_bottom(chord):
            count += 1
    return count


def improper_outer_voice_defects(candidate: "Candidate") -> int:
    return sum(
        improper_outer_voice_count(candidate.chord(i), candidate.voices)
        for i in range(candidate.chord_count)
    )


# --- Chord vocabulary ---

def non_chord_defects(candidate: "Candidate") -> int:
    return sum(1 for q in candidate.qualities if q is ChordQuality.NON_CHORD)


def successive_dissonance_defects(candidate: "Candidate") -> int:
    """Number of adjacent slot pairs that are both sevenths or non-chords."""
    qualities = candidate.qualities
    return sum(
        1 for first, second in zip(qualities, qualities[1:])
        if first.is_dissonant and second.is_dissonant
    )


def non_triad_start_defects(candidate: "Candidate") -> int:
    return 0 if candidate.qualities[0].is_triad else 1


# --- Resolutions ---

def improper_seventh_resolution(candidate: "Candidate") -> int:
    """
    Every voice holding the seventh of a seventh chord must hold it or step
    down into the next slot. Counts the voices that do not.
    """
    count = 0
    for slot in range(candidate.chord_count - 1):
        chord = candidate.chord(slot)
        if MusicUtils.seventh_chord_test(chord) == NON_CHORD:
            continue
        for v in MusicUtils.locate_seventh_note(chord):
            melody = candidate.melody(v)
            if melody[slot + 1] - melody[slot] not in SEVENTH_RESOLUTION_STEPS:
                count += 1
    return count


def leading_tone_defects(letters: Sequence[str]) -> int:
    """
    Counts runs of leading tones that move on to something other than the tonic.
    A run at the very end of the melody only counts when it has more than
    one note.
    """
    count = 0
    last = len(letters) - 1
    i = 0
    while i < last:
        if letters[i] != LEADING_TONE:
            i += 1
            continue
        end = i
        while end < last and letters[end + 1] == LEADING_TONE:
            end += 1
        if end == last or letters[end + 1] != TONIC:
            count += 1
        i = end + 1
    return count


def improper_leading_tone_resolution(candidate: "Candidate") -> int:
    return sum(
        leading_tone_defects([MusicUtils.step_of(o) for o in candidate.melody(v)])
        for v, voice in enumerate(candidate.voices)
        if voice in OUTER_VOICES
    )


def improper_resolution_defects(candidate: "Candidate") -> int:
    return improper_seventh_resolution(candidate) + improper_leading_tone_resolution(candidate)


# --- Cadence ---

def matches_cadence(symbols: Sequence[str]) -> bool:
    """
    True if the progression ends with one of the cadential formulas: an
    approach chord from the formula's set followed by its target triad.
    """
    if len(symbols) < 2:
        return False
    approaches = CADENCES.get(symbols[-1])
    return approaches is not None and symbols[-2] in approaches


def has_cadential_ending(qualities: Sequence[ChordQuality]) -> bool:
    """The last chord is a root-position triad approached by a root-position triad or seventh."""
    return (len(qualities) >= 2
            and qualities[-1] is ChordQuality.ROOT_TRIAD
            and qualities[-2] in (ChordQuality.ROOT_TRIAD, ChordQuality.ROOT_SEVENTH))


def improper_cadence_defects(candidate: "Candidate") -> int:
    last_chord = candidate.last_chord
    count = 0 if has_cadential_ending(candidate.qualities) else 1
    count += 0 if matches_cadence(candidate.symbols) else 1
    top_letter = MusicUtils.step_of(MusicUtils.get_top(last_chord))
    count += 0 if MusicUtils.get_root(last_chord) == top_letter else 1
    return count


class Rule(Enum):
    """
    The voice-leading rules. Each member carries its unit penalty (`weight`)
    and the function counting a candidate's defects (`counter`).
    """
    MELODIC_SMOOTHNESS = (PENALTY_MELODIC_SMOOTHNESS, melodic_smoothness_defects)
    VOICE_INDEPENDENCE = (PENALTY_VOICE_INDEPENDENCE, voice_independence_defects)
    IMPROPER_OUTER_VOICES = (PENALTY_IMPROPER_OUTER_VOICES, improper_outer_voice_defects)
    NOT_TRIAD_OR_SEVENTH_CHORD = (PENALTY_NOT_TRIAD_OR_SEVENTH_CHORD, non_chord_defects)
    IMPROPER_RESOLUTION = (PENALTY_IMPROPER_RESOLUTION, improper_resolution_defects)
    SUCCESSIVE_DISSONANT_CHORDS = (PENALTY_SUCCESSIVE_DISSONANCE, successive_dissonance_defects)
    START_WITH_NON_TRIAD = (PENALTY_NON_TRIAD_START, non_triad_start_defects)
    IMPROPER_CADENTIAL_FORM = (PENALTY_IMPROPER_CADENTIAL, improper_cadence_defects)

    def __init__(self, weight: float, counter: Callable[["Candidate"], int]):
        self.weight = weight
        self.counter = counter

    def count(self, candidate: "Candidate") -> int:
        return self.counter(candidate)

    def evaluate(self, candidate: "Candidate") -> float:
        """Weighted penalty of this rule for the candidate."""
        return self.weight * self.count(candidate)

    @classmethod
    def from_name(cls, name: str) -> "Rule":
        """
        Looks a rule up by name, ignoring case, underscores and hyphens, so
        that "voice-independence", "VoiceIndependence" and
        "VOICE_INDEPENDENCE" all resolve to the same member.
        """
        wanted = name.replace('_', '').replace('-', '').upper()
        for rule in cls:
            if rule.name.replace('_', '') == wanted:
                return rule
        raise ValueError(f"Unknown rule: {name!r}")

    def __str__(self) -> str:
        return self.name


ALL_RULES: Tuple[Rule, ...] = tuple(Rule)


def parse_rules(names: Sequence[str]) -> Tuple[Rule, ...]:
    return tuple(Rule.from_name(n) for n in names)


def rule_report(candidate: "Candidate") -> List[Tuple[Rule, int, float]]:
    """(rule, defect count, weighted penalty) for every active rule of the candidate."""
    report = []
    for rule in candidate.rules:
        count = rule.count(candidate)
        report.append((rule, count, rule.weight * count))
    return report

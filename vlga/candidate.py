# vlga/candidate.py
"""
Module: candidate.py

Purpose:
This module defines the genome evolved by the genetic algorithm. A Candidate is
an immutable, chord-slot-major sequence of pitch ordinals: all voices of the
first chord, then all voices of the second chord, and so on. It exposes derived
views (melodies, chords, per-slot chord quality, the progression of chord
roots) which are computed on first access and memoized, and the aggregate
fitness over its active rules.

Key Functionalities:
- Construction from explicit genes, validated against the voice registers.
- Random construction for a given number of chords.
- Fitness: 1 minus the sum of the weighted defect counts of the active rules.
- Harmonic analysis output: roman numerals with figured-bass suffixes, as plain
  text or LaTeX macros.
"""

import random
from functools import cached_property
from typing import Iterable, List, Optional, Sequence, Tuple

from .evaluation import ALL_RULES, Rule
from .music_constants import (
    LATEX_FIGURE_FORMAT, ROMAN_NUMERALS, TEXT_FIGURE_FORMAT, ChordQuality, Genome, Pitch,
)
from .music_utils import MusicUtils


class InvalidRepresentationError(ValueError):
    """Raised when a genome does not describe a valid progression for its voices."""


def _describe_pitch(ordinal: int) -> str:
    try:
        return Pitch(ordinal).name
    except ValueError:
        return str(ordinal)


class Candidate:
    """
    One chord progression in the population.

    Args:
        genes (Iterable[int]): Pitch ordinals, chord-slot-major.
        voices (str): Ordered voice labels, e.g. "SATB".
        rules (Optional[Sequence[Rule]]): Active rules; None selects all of them.

    Raises:
        InvalidRepresentationError: If the genome is empty, its length is not a
                                    multiple of the voice count, or a gene lies
                                    outside its voice's register.
        ValueError: If `voices` is empty or holds an unknown label.
    """

    def __init__(self, genes: Iterable[int], voices: str = "SATB",
                 rules: Optional[Sequence[Rule]] = None):
        if not voices:
            raise ValueError("At least one voice is required.")
        self._voices: str = voices
        self._rules: Tuple[Rule, ...] = ALL_RULES if rules is None else tuple(rules)
        self._genes: Genome = tuple(int(g) for g in genes)
        self._fitness: Optional[float] = None
        self._check_validity()

    def _check_validity(self) -> None:
        voice_count = len(self._voices)
        if not self._genes:
            raise InvalidRepresentationError("A genome needs at least one chord.")
        if len(self._genes) % voice_count != 0:
            raise InvalidRepresentationError(
                f"Genome length {len(self._genes)} is not a multiple of {voice_count} voices ({self._voices}).")
        for i, gene in enumerate(self._genes):
            voice = self._voices[i % voice_count]
            low, high = MusicUtils.register_of(voice)
            if not low <= gene <= high:
                raise InvalidRepresentationError(
                    f"{voice}:{_describe_pitch(gene)} is outside the register "
                    f"[{Pitch(low).name}, {Pitch(high).name}]")

    @classmethod
    def random(cls, chord_count: int, voices: str = "SATB",
               rules: Optional[Sequence[Rule]] = None,
               rng: Optional[random.Random] = None) -> "Candidate":
        """
        Generates a progression of `chord_count` chords with every pitch drawn
        independently and uniformly from its voice's register.
        """
        if chord_count < 1:
            raise ValueError(f"chord_count must be positive, got {chord_count}")
        rng = rng or random.Random()
        genes = [MusicUtils.random_pitch(voice, rng) for _ in range(chord_count) for voice in voices]
        return cls(genes, voices, rules)

    def with_genes(self, genes: Iterable[int]) -> "Candidate":
        """New candidate over the same voices and rules."""
        return Candidate(genes, self._voices, self._rules)

    # --- Structure ---

    @property
    def genes(self) -> Genome:
        return self._genes

    @property
    def voices(self) -> str:
        return self._voices

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return self._rules

    @property
    def voice_count(self) -> int:
        return len(self._voices)

    @property
    def chord_count(self) -> int:
        return len(self._genes) // len(self._voices)

    def __len__(self) -> int:
        return len(self._genes)

    @cached_property
    def melodies(self) -> Tuple[Tuple[int, ...], ...]:
        return tuple(self._genes[v::self.voice_count] for v in range(self.voice_count))

    @cached_property
    def chords(self) -> Tuple[Tuple[int, ...], ...]:
        n = self.voice_count
        return tuple(self._genes[c * n:(c + 1) * n] for c in range(self.chord_count))

    def melody(self, voice_index: int) -> Tuple[int, ...]:
        return self.melodies[voice_index]

    def chord(self, slot: int) -> Tuple[int, ...]:
        return self.chords[slot]

    @property
    def last_chord(self) -> Tuple[int, ...]:
        return self.chords[-1]

    # --- Harmonic views ---

    @cached_property
    def qualities(self) -> Tuple[ChordQuality, ...]:
        return tuple(MusicUtils.chord_quality(c) for c in self.chords)

    @cached_property
    def symbols(self) -> Tuple[str, ...]:
        return tuple(MusicUtils.chord_symbol(c) for c in self.chords)

    @cached_property
    def series(self) -> str:
        """Chord quality of every slot, e.g. "[TtSTT]"."""
        return "[" + "".join(q.value for q in self.qualities) + "]"

    @cached_property
    def progression(self) -> str:
        """Chord root of every slot, e.g. "[CFgC]"; 'X' marks a slot that is no chord."""
        return "[" + "".join(self.symbols) + "]"

    @cached_property
    def figured_numerals(self) -> Tuple[Tuple[int, ...], ...]:
        return tuple(tuple(sorted(MusicUtils.get_numbers(c), reverse=True)) for c in self.chords)

    # --- Fitness ---

    def fitness(self) -> float:
        """
        1 minus the sum of the weighted penalties of the active rules. Not
        clamped: a candidate breaking many rules has negative fitness.
        """
        if self._fitness is None:
            penalty = 0.0
            for rule in self._rules:
                value = rule.evaluate(self)
                if value > 0:
                    penalty += value
            self._fitness = 1.0 - penalty
        return self._fitness

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Candidate):
            return NotImplemented
        return self._genes == other._genes

    def __hash__(self) -> int:
        return hash(self._genes)

    def __lt__(self, other: "Candidate") -> bool:
        return self.fitness() < other.fitness()

    def __repr__(self) -> str:
        return f"Candidate(voices={self._voices!r}, genes={list(self._genes)!r})"

    # --- Analysis output ---

    def _numeral(self, slot: int) -> str:
        return ROMAN_NUMERALS[self.symbols[slot].upper()]

    def text_figure(self, slot: int) -> str:
        """Roman numeral of a slot with its inversion, e.g. "V_6/5"; "-" for a non-chord."""
        roman = self._numeral(slot)
        if roman == "-":
            return roman
        numbers = set(self.figured_numerals[slot])
        figure = roman.upper()
        if 7 in numbers:
            return TEXT_FIGURE_FORMAT.format(figure, "7")
        if {6, 5} <= numbers:
            return TEXT_FIGURE_FORMAT.format(figure, "6/5")
        if {4, 3} <= numbers:
            return TEXT_FIGURE_FORMAT.format(figure, "4/3")
        if 2 in numbers:
            return TEXT_FIGURE_FORMAT.format(figure, "4/2")
        if {6, 4} <= numbers:
            return TEXT_FIGURE_FORMAT.format(figure, "6/4")
        if {6, 3} <= numbers:
            return TEXT_FIGURE_FORMAT.format(figure, "6")
        return figure

    def latex_figure(self, slot: int) -> str:
        """The slot as a `\\myChord{numeral}{quality}{upper}{lower}` LaTeX macro."""
        symbol = self.symbols[slot]
        roman = self._numeral(slot)
        if roman == "-":
            return roman
        numbers = set(self.figured_numerals[slot])

        figure = [roman, "\\ ", "\\ ", "\\ "]
        if symbol == 'B':
            figure[1] = "\\circ"
        elif symbol == 'b':
            figure[1] = "\\textrm{\\diameter}"

        if 7 in numbers:
            figure[3] = "7"
        elif {6, 5} <= numbers:
            figure[2:] = ["6", "5"]
        elif {4, 3} <= numbers:
            figure[2:] = ["4", "3"]
        elif 2 in numbers:
            figure[2:] = ["4", "2"]
        elif {6, 4} <= numbers:
            figure[2:] = ["6", "4"]
        elif {6, 3} <= numbers:
            figure[3] = "6"
        return LATEX_FIGURE_FORMAT.format(*figure)

    def to_roman_numerals(self, latex: bool = False) -> str:
        if latex:
            return "\n".join(self.latex_figure(i) for i in range(self.chord_count))
        return "  ".join(self.text_figure(i) for i in range(self.chord_count))

    def pitch_names(self) -> List[List[str]]:
        return [[p.name for p in MusicUtils.translate_o2p(c)] for c in self.chords]

    def __str__(self) -> str:
        lines = ["[" + ", ".join(" " + v for v in self._voices) + "]"]
        lines.extend("[" + ", ".join(names) + "]" for names in self.pitch_names())
        lines.append("-" * (self.voice_count * 4))
        lines.append("Harmonic Progression:")
        lines.append(self.to_roman_numerals())
        return "\n".join(lines)

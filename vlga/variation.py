# vlga/variation.py
"""
Module: variation.py

Purpose:
This module holds the variation operators of the genetic algorithm. Both are
aware of the chord structure of a genome:

- Crossover (`CrossoverByChord`): cuts two parent progressions between chord
  slots so that every chord survives intact; with a configurable probability
  it falls back to a gene-by-gene uniform crossover instead.
- Mutation (`MutationByChord`): picks a few chord slots and, within each, a
  few voices, and re-draws those pitches from the voice's register, keeping
  only pitches that form a singable interval with the neighbouring chord.

Operators are small callable policy objects. They never modify a candidate;
they return new ones. Every random choice goes through the `random.Random`
handle passed in, so runs are reproducible from a seed.
"""

import logging
import random
from typing import Dict, List, Optional, Sequence, Tuple

from .candidate import Candidate
from .evaluation import is_melodic_feasible
from .music_constants import CROSSOVER_BY_CHORD_RATIO, UNIFORM_CROSSOVER_RATIO
from .music_utils import MusicUtils

logger = logging.getLogger(__name__)

CandidatePair = Tuple[Candidate, Candidate]


def _require_candidates(*operands: object) -> None:
    for operand in operands:
        if not isinstance(operand, Candidate):
            raise TypeError(f"Variation operators work on Candidate, got {type(operand).__name__}")


def chordal_crossover(first: Candidate, second: Candidate, locus: int) -> CandidatePair:
    """
    Single-point crossover on a chord boundary.

    Args:
        first (Candidate): The first parent.
        second (Candidate): The second parent, with the same voices and length.
        locus (int): Index of the first slot taken from the other parent,
                     in [1, chord_count - 1].

    Returns:
        CandidatePair: first[:locus] + second[locus:], and the complement.
    """
    _require_candidates(first, second)
    if len(first) != len(second) or first.voices != second.voices:
        raise ValueError("Crossover parents must share voices and chord count.")
    if not 1 <= locus <= first.chord_count - 1:
        raise ValueError(f"Crossover locus {locus} outside [1, {first.chord_count - 1}]")
    cut = locus * first.voice_count
    child1 = first.genes[:cut] + second.genes[cut:]
    child2 = second.genes[:cut] + first.genes[cut:]
    return first.with_genes(child1), first.with_genes(child2)


def uniform_crossover(first: Candidate, second: Candidate, ratio: float,
                      rng: Optional[random.Random] = None) -> CandidatePair:
    """Swaps each gene between the parents independently with probability `ratio`."""
    _require_candidates(first, second)
    if len(first) != len(second) or first.voices != second.voices:
        raise ValueError("Crossover parents must share voices and chord count.")
    rng = rng or random.Random()
    child1: List[int] = []
    child2: List[int] = []
    for g1, g2 in zip(first.genes, second.genes):
        if rng.random() < ratio:
            child1.append(g2)
            child2.append(g1)
        else:
            child1.append(g1)
            child2.append(g2)
    return first.with_genes(child1), first.with_genes(child2)


class CrossoverByChord:
    """
    Crossover policy blending chordal crossover with uniform crossover.

    Args:
        by_chord_ratio (float): Chance of using chordal crossover.
        uniform_ratio (float): Per-gene swap probability of the uniform fallback.
    """

    def __init__(self, by_chord_ratio: float = CROSSOVER_BY_CHORD_RATIO,
                 uniform_ratio: float = UNIFORM_CROSSOVER_RATIO):
        for name, value in (("by_chord_ratio", by_chord_ratio), ("uniform_ratio", uniform_ratio)):
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        self.by_chord_ratio = by_chord_ratio
        self.uniform_ratio = uniform_ratio

    def crossover(self, first: Candidate, second: Candidate,
                  rng: Optional[random.Random] = None) -> CandidatePair:
        _require_candidates(first, second)
        rng = rng or random.Random()
        # A single chord has no interior cut point.
        if first.chord_count > 1 and rng.random() < self.by_chord_ratio:
            locus = rng.randint(1, first.chord_count - 1)
            return chordal_crossover(first, second, locus)
        return uniform_crossover(first, second, self.uniform_ratio, rng)

    __call__ = crossover


class MutationByChord:
    """
    Mutation policy re-drawing a few voices at a few chord slots.

    Args:
        max_loci (int): Upper bound on the number of mutated slots.
        max_voices (int): Upper bound on the number of mutated voices per slot.
    """

    def __init__(self, max_loci: int, max_voices: int):
        if max_loci < 1 or max_voices < 1:
            raise ValueError("max_loci and max_voices must be positive.")
        self.max_loci = max_loci
        self.max_voices = max_voices

    def mutate(self, candidate: Candidate, rng: Optional[random.Random] = None) -> Candidate:
        _require_candidates(candidate)
        rng = rng or random.Random()
        m_voices = rng.randint(1, self.max_voices)
        m_loci = rng.randint(1, self.max_loci)
        return self.get_mutation(candidate, m_loci, m_voices, rng=rng)

    __call__ = mutate

    def get_mutation(self, candidate: Candidate, m_loci: int, m_voices: int,
                     can_keep: bool = True, rng: Optional[random.Random] = None) -> Candidate:
        """
        Mutates `m_loci` distinct slots, `m_voices` voices in each. Both numbers
        are clamped to the genome's dimensions.
        """
        _require_candidates(candidate)
        rng = rng or random.Random()
        loci = choose_loci(candidate.chord_count, candidate.voice_count, m_loci, m_voices, rng)
        return mutate_at(candidate, loci, can_keep, rng)


def choose_loci(chord_count: int, voice_count: int, m_loci: int, m_voices: int,
                rng: random.Random) -> Dict[int, List[int]]:
    """
    Picks `m_loci` distinct slots and, for each, a voice set drawn uniformly
    among those with exactly `m_voices` members (a random bitmask with that
    many set bits).
    """
    m_loci = max(1, min(m_loci, chord_count))
    m_voices = max(1, min(m_voices, voice_count))
    slots = rng.sample(range(chord_count), m_loci)
    return {slot: sorted(rng.sample(range(voice_count), m_voices)) for slot in slots}


def feasible_replacements(candidate: Candidate, slot: int, voice_index: int,
                          can_keep: bool = True) -> List[int]:
    """
    Register pitches the gene at (slot, voice) may be replaced with: those
    forming a feasible melodic interval with the adjacent slot of the same
    voice (the previous slot for the last chord, the next one otherwise).

    When no pitch passes the feasibility filter the filter is dropped and the
    whole register is offered; with `can_keep` False the current pitch is
    never offered. The result may be empty only for a one-pitch register.
    """
    voice = candidate.voices[voice_index]
    low, high = MusicUtils.register_of(voice)
    melody = candidate.melody(voice_index)
    current = melody[slot]

    pool = [p for p in range(low, high + 1) if can_keep or p != current]
    if candidate.chord_count == 1:
        return pool

    if slot == candidate.chord_count - 1:
        feasible = [p for p in pool if is_melodic_feasible(voice, (melody[slot - 1], p))]
    else:
        feasible = [p for p in pool if is_melodic_feasible(voice, (p, melody[slot + 1]))]

    if not feasible:
        logger.debug("No feasible pitch for %s at slot %d; drawing from the whole register.",
                     voice, slot)
        return pool
    return feasible


def mutate_at(candidate: Candidate, loci: Dict[int, Sequence[int]], can_keep: bool = True,
              rng: Optional[random.Random] = None) -> Candidate:
    """
    Re-draws the genes at the given {slot: voice indices} positions. Every
    other gene is copied unchanged. Feasibility is judged against the source
    candidate's melodies, not the partially mutated genome.
    """
    _require_candidates(candidate)
    rng = rng or random.Random()
    genes = list(candidate.genes)
    for slot, voice_indices in loci.items():
        for v in voice_indices:
            pool = feasible_replacements(candidate, slot, v, can_keep)
            if pool:
                genes[slot * candidate.voice_count + v] = rng.choice(pool)
    return candidate.with_genes(genes)

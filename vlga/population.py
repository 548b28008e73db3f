# vlga/population.py
"""
Module: population.py

Purpose:
An elitist, fixed-capacity population of candidate progressions and the
tournament selection used to draw parents from it.
"""

import math
import random
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .candidate import Candidate
from .evaluation import Rule
from .music_constants import TOURNAMENT_ARITY


class Population:
    def __init__(self, capacity: int, elitism_rate: float, candidates: Iterable[Candidate] = ()):
        if capacity < 1:
            raise ValueError(f"Population capacity must be positive, got {capacity}")
        if not 0.0 <= elitism_rate <= 1.0:
            raise ValueError(f"Elitism rate must be within [0, 1], got {elitism_rate}")
        self.capacity = capacity
        self.elitism_rate = elitism_rate
        self.individuals: List[Candidate] = []
        for candidate in candidates:
            self.add(candidate)

    @classmethod
    def random(cls, capacity: int, elitism_rate: float, chord_count: int, voices: str,
               rules: Optional[Sequence[Rule]] = None,
               rng: Optional[random.Random] = None) -> "Population":
        """A full population of randomly generated progressions."""
        rng = rng or random.Random()
        return cls(capacity, elitism_rate,
                   (Candidate.random(chord_count, voices, rules, rng) for _ in range(capacity)))

    def add(self, candidate: Candidate) -> None:
        if self.is_full():
            raise ValueError(f"Population is full ({self.capacity} individuals).")
        self.individuals.append(candidate)

    def is_full(self) -> bool:
        return len(self.individuals) >= self.capacity

    def get_size(self) -> int:
        return len(self.individuals)

    __len__ = get_size

    def __iter__(self):
        return iter(self.individuals)

    def ranked(self) -> List[Candidate]:
        """Individuals by descending fitness; ties keep insertion order."""
        return sorted(self.individuals, key=lambda indiv: indiv.fitness(), reverse=True)

    def fittest(self) -> Candidate:
        if not self.individuals:
            raise ValueError("An empty population has no fittest individual.")
        return max(self.individuals, key=lambda indiv: indiv.fitness())

    def elite_size(self) -> int:
        # 0.07 * 100 == 7.000000000000001
        return math.ceil(round(self.elitism_rate * len(self.individuals), 9))

    def elites(self) -> List[Candidate]:
        return self.ranked()[:self.elite_size()]

    def next_generation(self) -> "Population":
        """An empty population of the same shape, seeded with this one's elites."""
        return Population(self.capacity, self.elitism_rate, self.elites())

    def average_fitness(self) -> float:
        return float(np.mean([indiv.fitness() for indiv in self.individuals]))

    def average_elite_fitness(self) -> float:
        # At least the fittest individual, even with a zero elitism rate.
        elites = self.elites() or [self.fittest()]
        return float(np.mean([indiv.fitness() for indiv in elites]))


class TournamentSelection:
    """
    Draws each parent as the fittest of `arity` distinct individuals picked at
    random from the population.
    """

    def __init__(self, arity: int = TOURNAMENT_ARITY):
        if arity < 1:
            raise ValueError(f"Tournament arity must be positive, got {arity}")
        self.arity = arity

    def tournament(self, population: Population, rng: random.Random) -> Candidate:
        if self.arity > population.get_size():
            raise ValueError(
                f"Tournament arity {self.arity} exceeds population size {population.get_size()}")
        contestants = rng.sample(population.individuals, self.arity)
        return max(contestants, key=lambda indiv: indiv.fitness())

    def select(self, population: Population,
               rng: Optional[random.Random] = None) -> Tuple[Candidate, Candidate]:
        rng = rng or random.Random()
        return self.tournament(population, rng), self.tournament(population, rng)

    __call__ = select

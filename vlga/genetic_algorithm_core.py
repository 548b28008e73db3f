# vlga/genetic_algorithm_core.py
"""
Module: genetic_algorithm_core.py

Purpose:
This module implements the evolutionary loop searching for well-formed
chord progressions. Each generation carries the elite of the previous one
over unchanged, then fills the remaining places with offspring: parents are
picked by tournament, and one random draw decides whether they go through
crossover followed by mutation, crossover only, mutation only, or are copied
as they are. The loop stops when the fittest progression reaches the fitness
aim with no unclassifiable chord, when the generation limit is reached, or
when the caller signals cancellation.
"""

import logging
import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

from .candidate import Candidate
from .music_constants import (
    FITNESS_AIM, GENERATION_LIMIT, LOG_EVERY_GENERATIONS, LOG_INTERVAL_SECONDS, NON_CHORD,
    PROGRESS_FORMAT,
)
from .population import Population, TournamentSelection
from .variation import CrossoverByChord, MutationByChord

logger = logging.getLogger(__name__)


class FitnessAimOrGenerationLimit:
    """
    Stopping condition: the fittest individual reaches `fitness_aim` and its
    progression has no non-chord slot, or `generation_limit` generations have
    been evolved.
    """

    def __init__(self, fitness_aim: float = FITNESS_AIM, generation_limit: int = GENERATION_LIMIT):
        self.fitness_aim = fitness_aim
        self.generation_limit = generation_limit

    def is_satisfied(self, population: Population, generations_evolved: int) -> bool:
        fittest = population.fittest()
        if fittest.fitness() >= self.fitness_aim and NON_CHORD not in fittest.progression:
            return True
        return generations_evolved >= self.generation_limit

    __call__ = is_satisfied


StoppingCondition = Callable[[Population, int], bool]


class GeneticAlgorithm:
    """
    Drives selection, variation and replacement across generations.

    Args:
        crossover_policy (CrossoverByChord): Produces two children from two parents.
        mutation_policy (MutationByChord): Produces a mutated copy of one candidate.
        selection_policy (TournamentSelection): Picks two parents from a population.
        crossover_only_rate (float): Probability of crossover without mutation.
        crossover_mutation_rate (float): Probability of crossover followed by
                                         mutation of both children.
        mutation_only_rate (float): Probability of mutating both parents.
                                    The three rates need not sum to 1; the
                                    remainder copies the parents unchanged.
        rng (Optional[random.Random]): Random source for every stochastic step.
        workers (int): Threads used to evaluate the fitness of each new
                       generation; 1 evaluates in the calling thread.
        log_interval_seconds (float): Minimum time between progress lines.
        log_every_generations (int): Progress lines are only written on
                                     generations that are a multiple of this.
    """

    def __init__(self, crossover_policy: CrossoverByChord,
                 mutation_policy: MutationByChord,
                 selection_policy: TournamentSelection,
                 crossover_only_rate: float,
                 crossover_mutation_rate: float,
                 mutation_only_rate: float,
                 rng: Optional[random.Random] = None,
                 workers: int = 1,
                 log_interval_seconds: float = LOG_INTERVAL_SECONDS,
                 log_every_generations: int = LOG_EVERY_GENERATIONS):
        for name, rate in (("crossover_only_rate", crossover_only_rate),
                           ("crossover_mutation_rate", crossover_mutation_rate),
                           ("mutation_only_rate", mutation_only_rate)):
            if not 0.0 <= rate <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {rate}")
        if workers < 1:
            raise ValueError(f"workers must be positive, got {workers}")

        self.crossover_policy = crossover_policy
        self.mutation_policy = mutation_policy
        self.selection_policy = selection_policy
        self.crossover_only_rate = crossover_only_rate
        self.crossover_mutation_rate = crossover_mutation_rate
        self.mutation_only_rate = mutation_only_rate
        self.rng = rng or random.Random()
        self.workers = workers
        self.log_interval_seconds = log_interval_seconds
        self.log_every_generations = log_every_generations

        self.generations_evolved: int = 0
        self.text_log: List[str] = []
        self._timer: float = time.monotonic()

    def log(self, text: str) -> None:
        """Writes a line to the logger and keeps it in `text_log`."""
        logger.info(text)
        self.text_log.append(text)

    def _crossover(self, first: Candidate, second: Candidate):
        return self.crossover_policy.crossover(first, second, self.rng)

    def _mutate(self, candidate: Candidate) -> Candidate:
        return self.mutation_policy.mutate(candidate, self.rng)

    def _breed(self, first: Candidate, second: Candidate):
        dice = self.rng.random()
        dice -= self.crossover_mutation_rate
        if dice < 0:
            first, second = self._crossover(first, second)
            return self._mutate(first), self._mutate(second)
        dice -= self.crossover_only_rate
        if dice < 0:
            return self._crossover(first, second)
        dice -= self.mutation_only_rate
        if dice < 0:
            return self._mutate(first), self._mutate(second)
        return first, second

    def evaluate(self, population: Population) -> None:
        """
        Computes (and memoizes) the fitness of every individual. Fitness only
        reads the immutable genome, so it can run on a thread pool.
        """
        if self.workers > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                list(pool.map(Candidate.fitness, population.individuals))
        else:
            for indiv in population.individuals:
                indiv.fitness()

    def next_generation(self, current: Population) -> Population:
        """
        Builds the generation following `current`: its elites first, then
        offspring until the population is full.
        """
        next_population = current.next_generation()
        while not next_population.is_full():
            first, second = self.selection_policy.select(current, self.rng)
            first, second = self._breed(first, second)
            next_population.add(first)
            if not next_population.is_full():
                next_population.add(second)

        self.evaluate(next_population)
        self._log_progress(next_population)
        return next_population

    def _log_progress(self, population: Population) -> None:
        now = time.monotonic()
        generation = self.generations_evolved + 1
        if now - self._timer < self.log_interval_seconds or generation % self.log_every_generations != 0:
            return
        self._timer = now
        fittest = population.fittest()
        self.log(PROGRESS_FORMAT.format(
            generation, fittest.fitness(), population.average_elite_fitness(),
            fittest.series, fittest.progression))

    def evolve(self, initial: Population, condition: StoppingCondition,
               cancel_event: Optional[threading.Event] = None) -> Population:
        """
        Evolves `initial` until `condition(population, generations_evolved)`
        holds or `cancel_event` is set.

        Returns:
            Population: The last generation produced.
        """
        self.generations_evolved = 0
        self._timer = time.monotonic()
        current = initial
        self.evaluate(current)
        while not condition(current, self.generations_evolved):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("Evolution cancelled after %d generations.", self.generations_evolved)
                break
            current = self.next_generation(current)
            self.generations_evolved += 1
        return current

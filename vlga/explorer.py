# vlga/explorer.py
"""
Module: explorer.py

Purpose:
This module wires one complete search run together: it builds the random
initial population, configures the variation and selection policies, runs
the genetic algorithm until the stopping condition holds and keeps the
fittest progression found. It also persists the result as a MusicXML score
and as a plain-text run log.

Key Functionalities:
- Run parameters with the defaults of `music_constants`.
- A parameter preamble, progress lines and a result summary in the run log.
- File names of the form vlga-<voices>x<chords>-<epoch millis>.
"""

import logging
import random
import threading
import time
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .candidate import Candidate
from .evaluation import ALL_RULES, Rule
from .genetic_algorithm_core import FitnessAimOrGenerationLimit, GeneticAlgorithm
from .music_constants import (
    CROSSOVER_BY_CHORD_RATIO, CROSSOVER_MUTATION_RATE, CROSSOVER_ONLY_RATE, DATA_FOLDER,
    DEFAULT_CHORD_COUNT, DEFAULT_VOICES, ELITISM_RATE, FITNESS_AIM, GENERATION_LIMIT,
    MAX_MUTATION_LOCI, MUTATION_ONLY_RATE, POPULATION_LIMIT, TOURNAMENT_ARITY,
    UNIFORM_CROSSOVER_RATIO,
)
from .population import Population, TournamentSelection
from .score_writer import write_musicxml
from .variation import CrossoverByChord, MutationByChord

logger = logging.getLogger(__name__)


class Explorer:
    """
    One voice-leading search run.

    Args:
        voices (str): Ordered voice labels, e.g. "SAATTB".
        chord_count (int): Number of chord slots.
        population_limit (int): Population capacity.
        elitism_rate (float): Fraction of each generation carried over unchanged.
        crossover_only_rate (float): Probability of crossover without mutation.
        crossover_mutation_rate (float): Probability of crossover then mutation.
        mutation_only_rate (float): Probability of mutation without crossover.
        max_mutation_loci (int): Maximum number of mutated slots.
        max_mutation_voices (Optional[int]): Maximum number of mutated voices per
                                             slot; defaults to the voice count.
        rules (Optional[Sequence[Rule]]): Active rules; None selects all of them.
        fitness_aim (float): Fitness at which the search stops.
        generation_limit (int): Generation cap.
        seed (Optional[int]): Seed of the run's random source.
        workers (int): Threads used for fitness evaluation.
        run_index (Optional[int]): Position of the run in a batch; appended to
                                   `filename` so that runs started in the same
                                   millisecond do not overwrite each other.
    """

    def __init__(self, voices: str = DEFAULT_VOICES,
                 chord_count: int = DEFAULT_CHORD_COUNT,
                 population_limit: int = POPULATION_LIMIT,
                 elitism_rate: float = ELITISM_RATE,
                 crossover_only_rate: float = CROSSOVER_ONLY_RATE,
                 crossover_mutation_rate: float = CROSSOVER_MUTATION_RATE,
                 mutation_only_rate: float = MUTATION_ONLY_RATE,
                 max_mutation_loci: int = MAX_MUTATION_LOCI,
                 max_mutation_voices: Optional[int] = None,
                 rules: Optional[Sequence[Rule]] = None,
                 fitness_aim: float = FITNESS_AIM,
                 generation_limit: int = GENERATION_LIMIT,
                 seed: Optional[int] = None,
                 workers: int = 1,
                 run_index: Optional[int] = None):
        if chord_count < 1:
            raise ValueError(f"chord_count must be positive, got {chord_count}")
        self.voices = voices
        self.chord_count = chord_count
        self.population_limit = population_limit
        self.elitism_rate = elitism_rate
        self.crossover_only_rate = crossover_only_rate
        self.crossover_mutation_rate = crossover_mutation_rate
        self.mutation_only_rate = mutation_only_rate
        self.max_mutation_loci = max_mutation_loci
        self.max_mutation_voices = max_mutation_voices or len(voices)
        self.rules = ALL_RULES if rules is None else tuple(rules)
        self.fitness_aim = fitness_aim
        self.generation_limit = generation_limit
        self.seed = seed
        self.rng = random.Random(seed)

        self.timestamp = int(time.time() * 1000)
        self.filename = f"vlga-{len(voices)}x{chord_count}-{self.timestamp}"
        if run_index is not None:
            self.filename += f"-{run_index}"
        self.ga = GeneticAlgorithm(
            CrossoverByChord(CROSSOVER_BY_CHORD_RATIO, UNIFORM_CROSSOVER_RATIO),
            MutationByChord(self.max_mutation_loci, self.max_mutation_voices),
            TournamentSelection(TOURNAMENT_ARITY),
            crossover_only_rate, crossover_mutation_rate, mutation_only_rate,
            rng=self.rng, workers=workers)
        self.fittest: Optional[Candidate] = None

    @property
    def generations_evolved(self) -> int:
        return self.ga.generations_evolved

    @property
    def text_log(self) -> List[str]:
        return self.ga.text_log

    def _log_preamble(self) -> None:
        log = self.ga.log
        log(f"Voice = {self.voices}")
        log(f"Chord No. = {self.chord_count}")
        log(f"Population = {self.population_limit}")
        log(f"Elitism Rate = {self.elitism_rate}")
        log(f"Crossover Only Rate = {self.crossover_only_rate}")
        log(f"Crossover + Mutation Rate = {self.crossover_mutation_rate}")
        log(f"Mutation Only Rate = {self.mutation_only_rate}")
        log(f"Fitness Aim = {self.fitness_aim}")
        log(f"Generation Limit = {self.generation_limit}")
        log(f"Max Mutation Loci = {self.max_mutation_loci}")
        log(f"Max Mutated Voices = {self.max_mutation_voices}")
        log("Evaluation:")
        for rule in self.rules:
            log(f" - {rule}")

    def start(self, cancel_event: Optional[threading.Event] = None) -> Candidate:
        """
        Runs the search and returns the fittest progression of the last
        generation.
        """
        self._log_preamble()
        self.ga.log("\nEvolution begins...")

        initial = Population.random(self.population_limit, self.elitism_rate, self.chord_count,
                                    self.voices, self.rules, self.rng)
        condition = FitnessAimOrGenerationLimit(self.fitness_aim, self.generation_limit)
        final = self.ga.evolve(initial, condition, cancel_event)

        self.fittest = final.fittest()
        self.ga.log("Fittest = \n" + str(self.fittest))
        self.ga.log("fitness = %f" % self.fittest.fitness())
        self.ga.log(f"generation = {self.generations_evolved}")
        return self.fittest

    def save_score(self, folder: Union[str, Path] = DATA_FOLDER,
                   composer: Optional[str] = None) -> Path:
        """Writes the fittest progression to `<folder>/<filename>.musicxml`."""
        if self.fittest is None:
            raise RuntimeError("No result to save; call start() first.")
        composer = composer or f"Composer-{self.timestamp}"
        try:
            return write_musicxml(self.fittest, folder, self.filename, composer)
        except OSError:
            logger.exception("Could not write score %s to %s", self.filename, folder)
            raise

    def save_data(self, folder: Union[str, Path] = DATA_FOLDER) -> Path:
        """Writes the run log to `<folder>/<filename>.txt`."""
        path = Path(folder) / f"{self.filename}.txt"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("\n".join(self.text_log) + "\n", encoding="utf-8")
        except OSError:
            logger.exception("Could not write run log to %s", path)
            raise
        logger.info("Run log written to %s", path)
        return path

import random
import threading

import pytest

from vlga.candidate import Candidate
from vlga.evaluation import Rule
from vlga.explorer import Explorer
from vlga.genetic_algorithm_core import FitnessAimOrGenerationLimit, GeneticAlgorithm
from vlga.population import Population, TournamentSelection
from vlga.variation import CrossoverByChord, MutationByChord


def _algorithm(seed=0, workers=1, **kwargs):
    return GeneticAlgorithm(CrossoverByChord(), MutationByChord(3, 4), TournamentSelection(2),
                            0.10, 0.75, 0.10, rng=random.Random(seed), workers=workers, **kwargs)


def _population(seed=0, capacity=20, elitism_rate=0.2):
    return Population.random(capacity, elitism_rate, 4, "SATB", rng=random.Random(seed))


def test_stopping_condition_on_fitness_aim(v_i):
    condition = FitnessAimOrGenerationLimit(fitness_aim=0.95, generation_limit=100)
    assert condition(Population(1, 0.0, [v_i]), 0)


def test_stopping_condition_requires_a_chord_in_every_slot():
    unisons = Candidate([21, 21, 14, 7] * 2, "SATB", rules=[Rule.MELODIC_SMOOTHNESS])
    assert unisons.fitness() == 1.0
    population = Population(1, 0.0, [unisons])
    condition = FitnessAimOrGenerationLimit(fitness_aim=0.98, generation_limit=5)
    assert not condition(population, 4)
    assert condition(population, 5)


def test_invalid_rates():
    with pytest.raises(ValueError):
        GeneticAlgorithm(CrossoverByChord(), MutationByChord(1, 1), TournamentSelection(),
                         1.5, 0.5, 0.1)
    with pytest.raises(ValueError):
        _algorithm(workers=0)


def test_next_generation_is_full_and_keeps_elites():
    ga = _algorithm()
    current = _population()
    elites = current.elites()
    successor = ga.next_generation(current)
    assert successor.is_full()
    assert successor.individuals[:len(elites)] == elites


def test_fittest_never_gets_worse():
    ga = _algorithm(seed=1)
    current = _population(seed=1)
    best = current.fittest().fitness()
    for _ in range(15):
        current = ga.next_generation(current)
        assert current.fittest().fitness() >= best
        best = current.fittest().fitness()


def test_evolve_stops_at_generation_limit():
    ga = _algorithm()
    final = ga.evolve(_population(), FitnessAimOrGenerationLimit(2.0, 3))
    assert ga.generations_evolved == 3
    assert final.is_full()


def test_evolve_honours_cancellation():
    ga = _algorithm()
    cancel = threading.Event()
    cancel.set()
    initial = _population()
    final = ga.evolve(initial, FitnessAimOrGenerationLimit(2.0, 50), cancel)
    assert final is initial
    assert ga.generations_evolved == 0


def test_parallel_evaluation_matches_sequential():
    sequential = _algorithm(seed=4).evolve(_population(seed=4), FitnessAimOrGenerationLimit(2.0, 5))
    parallel = _algorithm(seed=4, workers=4).evolve(_population(seed=4), FitnessAimOrGenerationLimit(2.0, 5))
    assert [c.genes for c in sequential] == [c.genes for c in parallel]


def test_progress_lines():
    ga = _algorithm(log_interval_seconds=0.0, log_every_generations=2)
    ga.evolve(_population(), FitnessAimOrGenerationLimit(2.0, 4))
    assert len(ga.text_log) == 2
    assert ga.text_log[0].startswith("     2:")
    assert " P[" in ga.text_log[0]


def test_explorer_end_to_end(tmp_path):
    explorer = Explorer("SATB", 4, population_limit=50, elitism_rate=0.2, generation_limit=200,
                        fitness_aim=0.98, seed=2024)
    fittest = explorer.start()

    assert len(fittest) == 16
    assert explorer.generations_evolved <= 200
    if explorer.generations_evolved < 200:
        assert fittest.fitness() >= 0.98
        assert 'X' not in fittest.series
    assert "Voice = SATB" in explorer.text_log
    assert "\nEvolution begins..." in explorer.text_log
    assert explorer.text_log[-1] == f"generation = {explorer.generations_evolved}"
    assert explorer.filename.startswith("vlga-4x4-")

    log_path = explorer.save_data(tmp_path)
    assert log_path.name == f"{explorer.filename}.txt"
    assert "Chord No. = 4" in log_path.read_text(encoding="utf-8")


def test_explorer_is_reproducible_from_seed():
    first = Explorer("SATB", 3, population_limit=20, generation_limit=5, seed=11).start()
    second = Explorer("SATB", 3, population_limit=20, generation_limit=5, seed=11).start()
    assert first == second

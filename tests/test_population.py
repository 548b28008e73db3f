import random

import pytest

from vlga.candidate import Candidate
from vlga.population import Population, TournamentSelection


def _random_population(capacity=10, elitism_rate=0.25, seed=0):
    return Population.random(capacity, elitism_rate, 4, "SATB", rng=random.Random(seed))


def test_capacity_is_enforced(v_i, v7_i):
    population = Population(1, 0.5, [v_i])
    assert population.is_full()
    with pytest.raises(ValueError):
        population.add(v7_i)


@pytest.mark.parametrize("capacity, elitism_rate", [(0, 0.2), (10, -0.1), (10, 1.5)])
def test_invalid_settings(capacity, elitism_rate):
    with pytest.raises(ValueError):
        Population(capacity, elitism_rate)


def test_random_population_is_full():
    population = _random_population()
    assert population.is_full()
    assert len(population) == 10
    assert all(indiv.chord_count == 4 for indiv in population)


def test_ranking_and_elites():
    population = _random_population()
    ranked = population.ranked()
    fitness = [indiv.fitness() for indiv in ranked]
    assert fitness == sorted(fitness, reverse=True)
    assert population.fittest().fitness() == fitness[0]
    assert population.elite_size() == 3
    assert population.elites() == ranked[:3]


def test_ties_keep_insertion_order(v_i):
    twin = Candidate(list(v_i.genes), "SATB")
    population = Population(2, 1.0, [v_i, twin])
    assert population.ranked()[0] is v_i
    assert population.fittest() is v_i


@pytest.mark.parametrize("elitism_rate, expected", [(0.07, 7), (0.55, 55), (0.071, 8), (0.0, 0)])
def test_elite_size_is_exact_ceiling(v_i, elitism_rate, expected):
    population = Population(100, elitism_rate, [v_i] * 100)
    assert population.elite_size() == expected
    assert len(population.elites()) == expected


def test_next_generation_starts_with_elites():
    population = _random_population()
    successor = population.next_generation()
    assert successor.capacity == population.capacity
    assert successor.elitism_rate == population.elitism_rate
    assert not successor.is_full()
    assert successor.individuals == population.elites()
    assert all(a is b for a, b in zip(successor.individuals, population.elites()))


def test_averages(v_i, v7_i):
    population = Population(2, 0.5, [v7_i, v_i])
    assert population.average_fitness() == pytest.approx((0.98 + 0.90) / 2)
    assert population.average_elite_fitness() == pytest.approx(0.98)
    assert Population(2, 0.0, [v7_i, v_i]).average_elite_fitness() == pytest.approx(0.98)


def test_tournament_over_whole_population_picks_the_fittest(v_i, v7_i):
    population = Population(2, 0.5, [v7_i, v_i])
    first, second = TournamentSelection(2).select(population, random.Random(0))
    assert first is v_i and second is v_i


def test_tournament_picks_members():
    population = _random_population()
    rng = random.Random(3)
    for _ in range(20):
        for parent in TournamentSelection()(population, rng):
            assert parent in population.individuals


def test_tournament_arity_checks(v_i):
    with pytest.raises(ValueError):
        TournamentSelection(0)
    with pytest.raises(ValueError):
        TournamentSelection(3).select(Population(2, 0.5, [v_i]), random.Random(0))

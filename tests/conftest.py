"""Shared fixtures for strategy tests."""

import numpy as np
import pytest

from neuro_forage.core.individual import random_population
from neuro_forage.core.network import Topology

SMALL_TOPOLOGY = Topology(input_size=1, hidden_size=2, output_size=2)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def make_population(rng):
    """Build a population with the given fitness values."""

    def _make(fitnesses, topology=SMALL_TOPOLOGY, team="test"):
        population = random_population(len(fitnesses), 100, 100, rng, team, topology)
        for ind, fitness in zip(population, fitnesses):
            ind.fitness = float(fitness)
        return population

    return _make

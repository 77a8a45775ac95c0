"""
evolution/genetic.py

Generational genetic algorithm over flat weight vectors.

Each generation:
1. Elites (top-K by fitness) pass through untouched
2. Everyone else is bred: tournament, tournament, single-point
   crossover, Gaussian mutation

Selection pressure comes from the tournament; exploration from the
mutation; memory from the elites.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence
import logging

import numpy as np

from neuro_forage.core.individual import Individual, fitness_values, respawn
from neuro_forage.core.network import WEIGHT_LIMIT

from .strategy import GenerationStats, require_population, summarize

logger = logging.getLogger(__name__)


@dataclass
class GeneticConfig:
    """Configuration for the genetic algorithm."""
    mutation_rate: float = 0.1      # Per-weight mutation probability
    crossover_rate: float = 0.8     # Probability a child is a crossover
    elite_count: int = 1            # Individuals copied unchanged
    tournament_size: int = 3        # Samples per tournament (with replacement)
    mutation_sigma: float = 0.3     # Std of Gaussian mutation noise

    def __post_init__(self):
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ValueError(f"mutation_rate must be in [0, 1], got {self.mutation_rate}")
        if not 0.0 <= self.crossover_rate <= 1.0:
            raise ValueError(f"crossover_rate must be in [0, 1], got {self.crossover_rate}")
        if self.elite_count < 0:
            raise ValueError(f"elite_count must be >= 0, got {self.elite_count}")
        if self.tournament_size < 1:
            raise ValueError(f"tournament_size must be >= 1, got {self.tournament_size}")
        if self.mutation_sigma < 0:
            raise ValueError(f"mutation_sigma must be >= 0, got {self.mutation_sigma}")


class GeneticAlgorithm:
    """
    Elitist GA with tournament selection.

    Stateless across generations apart from the generation counter and
    the last statistics: every offspring is built from the population
    handed to `evolve`.
    """

    def __init__(
        self,
        config: Optional[GeneticConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config or GeneticConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.generation = 0
        self.stats = GenerationStats()
        self.history: List[Dict[str, Any]] = []
        self._evaluated = False

    def initialize(self, population: Sequence[Individual]) -> None:
        """Nothing to bind; validates the population only."""
        require_population(population)

    def set_parameters(self, **kwargs: Any) -> None:
        """Swap in new knobs, e.g. set_parameters(mutation_rate=0.2)."""
        self.config = replace(self.config, **kwargs)

    # ==================== Generation cycle ====================

    def evaluate(self, population: Sequence[Individual]) -> GenerationStats:
        self.stats = summarize(population, self.generation)
        self._evaluated = True
        return self.stats

    def evolve(
        self,
        population: Sequence[Individual],
        width: float,
        height: float,
    ) -> List[Individual]:
        require_population(population)
        if not self._evaluated:
            self.evaluate(population)

        population = list(population)
        fitnesses = fitness_values(population)
        size = len(population)

        # Stable sort keeps population order among equal fitness
        ranked = np.argsort(-fitnesses, kind="stable")
        elite_count = min(self.config.elite_count, size)

        offspring: List[Individual] = []
        for idx in ranked[:elite_count]:
            elite = population[idx]
            offspring.append(respawn(elite, elite.brain.copy(), width, height, self.rng))

        while len(offspring) < size:
            parent1 = self.tournament_selection(population)
            parent2 = self.tournament_selection(population)
            child_weights = self.mutate(self.crossover(parent1, parent2))
            # Bred children always land in range, whatever the parents held
            np.clip(child_weights, -WEIGHT_LIMIT, WEIGHT_LIMIT, out=child_weights)
            brain = parent1.brain.copy_with(child_weights)
            offspring.append(respawn(parent1, brain, width, height, self.rng))

        self._record()
        self.generation += 1
        self._evaluated = False
        return offspring

    # ==================== Operators ====================

    def tournament_selection(self, population: Sequence[Individual]) -> Individual:
        """Best of `tournament_size` uniform draws; earliest draw wins ties."""
        require_population(population)
        draws = self.rng.integers(len(population), size=self.config.tournament_size)
        best = population[draws[0]]
        for idx in draws[1:]:
            candidate = population[idx]
            if candidate.fitness > best.fitness:
                best = candidate
        return best

    def crossover(self, parent1: Individual, parent2: Individual) -> np.ndarray:
        """
        Single-point crossover.

        Indices below the cut come from parent1, the rest from parent2.
        Without crossover the child is a copy of parent1.
        """
        weights1 = parent1.brain.get_weights()
        if self.rng.random() >= self.config.crossover_rate:
            return weights1

        weights2 = parent2.brain.weights
        point = int(self.rng.integers(len(weights1)))
        weights1[point:] = weights2[point:]
        return weights1

    def mutate(self, weights: np.ndarray) -> np.ndarray:
        """Gaussian noise on each weight with probability `mutation_rate`."""
        mask = self.rng.random(len(weights)) < self.config.mutation_rate
        noise = self.rng.normal(0.0, self.config.mutation_sigma, len(weights))
        mutated = np.clip(weights + noise, -WEIGHT_LIMIT, WEIGHT_LIMIT)
        return np.where(mask, mutated, weights)

    # ==================== Statistics ====================

    def _record(self) -> None:
        self.history.append({
            "generation": self.generation,
            "best_fitness": self.stats.best_fitness,
            "average_fitness": self.stats.average_fitness,
        })
        logger.debug(
            f"GA generation {self.generation}: best={self.stats.best_fitness:.1f} "
            f"avg={self.stats.average_fitness:.1f}"
        )

    def get_stats(self) -> Dict[str, Any]:
        stats = self.stats.rounded()
        stats["generation"] = self.generation
        return stats

    def __repr__(self) -> str:
        return f"GeneticAlgorithm(generation={self.generation}, config={self.config})"

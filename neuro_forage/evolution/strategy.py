"""
evolution/strategy.py

The contract every optimizer honors, and the bookkeeping they share.

Three optimizers, three very different kinds of memory:
- GeneticAlgorithm: none beyond its counter
- ParticleSwarm: velocities, personal bests, a global best
- RewardAdjustment: per-individual experience logs

They are not related by inheritance. Each one satisfies the same
structural protocol, and the orchestrator only ever talks to that.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Protocol, Sequence, runtime_checkable

import numpy as np

from neuro_forage.core.individual import Individual, fitness_values


class EmptyPopulationError(ValueError):
    """A strategy was handed a population with no individuals."""


@dataclass
class GenerationStats:
    """Fitness summary for one evaluated generation."""
    generation: int = 0
    best_fitness: float = 0.0
    average_fitness: float = 0.0

    def rounded(self) -> Dict[str, Any]:
        return {
            "generation": self.generation,
            "best_fitness": round_half_up(self.best_fitness),
            "average_fitness": round_half_up(self.average_fitness),
        }


def round_half_up(value: float, decimals: int = 1) -> float:
    """Round like a display would: 0.25 -> 0.3, -0.25 -> -0.2."""
    scale = 10 ** decimals
    return math.floor(value * scale + 0.5) / scale


def require_population(population: Sequence[Individual]) -> None:
    if len(population) == 0:
        raise EmptyPopulationError("Population must contain at least one individual")


def summarize(population: Sequence[Individual], generation: int) -> GenerationStats:
    """Best and mean fitness of a non-empty population."""
    require_population(population)
    fitnesses = fitness_values(list(population))
    return GenerationStats(
        generation=generation,
        best_fitness=float(fitnesses.max()),
        average_fitness=float(fitnesses.mean()),
    )


@runtime_checkable
class OptimizationStrategy(Protocol):
    """
    What the orchestrator needs from an optimizer.

    Per generation: evaluate(population), then evolve(population, w, h).
    `evolve` returns a brand-new list of the same length and is the only
    place the generation counter advances.
    """
    config: Any
    generation: int
    history: List[Dict[str, Any]]

    def initialize(self, population: Sequence[Individual]) -> None: ...

    def set_parameters(self, **kwargs: Any) -> None: ...

    def evaluate(self, population: Sequence[Individual]) -> GenerationStats: ...

    def evolve(
        self,
        population: Sequence[Individual],
        width: float,
        height: float,
    ) -> List[Individual]: ...

    def get_stats(self) -> Dict[str, Any]: ...


@runtime_checkable
class ExperienceRecorder(Protocol):
    """Strategies that learn from the (observation, action) stream."""

    def record_step(
        self,
        index: int,
        observation: np.ndarray,
        action: np.ndarray,
    ) -> None: ...

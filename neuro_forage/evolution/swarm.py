"""
evolution/swarm.py

Particle swarm optimization over network weights.

Each individual is a particle in weight space. It remembers the best
weights it has ever held and hears about the best weights anyone has
ever held, and it drifts toward both:

    v' = w*v + c1*U1*(personal_best - x) + c2*U2*(global_best - x)
    x' = x + v'

Unlike the GA nothing is discarded: particle i of the next generation
continues the trajectory of particle i of this one.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

import numpy as np

from neuro_forage.core.individual import Individual, respawn
from neuro_forage.core.network import WEIGHT_LIMIT

from .strategy import GenerationStats, require_population, summarize

logger = logging.getLogger(__name__)

VELOCITY_LIMIT = 1.0


@dataclass
class SwarmConfig:
    """Configuration for particle swarm optimization."""
    inertia_weight: float = 0.7     # w: how much velocity persists
    cognitive_weight: float = 1.5   # c1: pull toward personal best
    social_weight: float = 1.5      # c2: pull toward global best


class ParticleSwarm:
    """
    PSO with per-particle velocity and personal best, one global best.

    Bookkeeping is indexed by population slot and created lazily the
    first time a population of a new size is seen.
    """

    def __init__(
        self,
        config: Optional[SwarmConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config or SwarmConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.generation = 0
        self.stats = GenerationStats()
        self.history: List[Dict[str, Any]] = []
        self._evaluated = False

        self.velocities: List[np.ndarray] = []
        self.personal_best_weights: List[np.ndarray] = []
        self.personal_best_fitness: List[float] = []
        self.global_best_weights: Optional[np.ndarray] = None
        self.global_best_fitness = float("-inf")

    def initialize(self, population: Sequence[Individual]) -> None:
        """
        Zero velocities; personal bests at current weights with a -inf
        score so the first real fitness (even 0) always replaces it.
        """
        require_population(population)
        self.velocities = [np.zeros(ind.brain.weight_count) for ind in population]
        self.personal_best_weights = [ind.brain.get_weights() for ind in population]
        self.personal_best_fitness = [float("-inf")] * len(population)
        self.global_best_weights = population[0].brain.get_weights()
        self.global_best_fitness = float("-inf")

    def _ensure_initialized(self, population: Sequence[Individual]) -> None:
        if len(self.velocities) != len(population):
            self.initialize(population)

    def set_parameters(self, **kwargs: Any) -> None:
        self.config = replace(self.config, **kwargs)

    # ==================== Generation cycle ====================

    def evaluate(self, population: Sequence[Individual]) -> GenerationStats:
        """Refresh personal and global bests, then summarize."""
        require_population(population)
        self._ensure_initialized(population)

        for i, ind in enumerate(population):
            if ind.fitness > self.personal_best_fitness[i]:
                self.personal_best_fitness[i] = ind.fitness
                self.personal_best_weights[i] = ind.brain.get_weights()
            if ind.fitness > self.global_best_fitness:
                self.global_best_fitness = ind.fitness
                self.global_best_weights = ind.brain.get_weights()

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
        self._ensure_initialized(population)
        if not self._evaluated:
            self.evaluate(population)

        offspring = []
        for i, ind in enumerate(population):
            weights = self.update_particle(i, ind.brain.weights)
            offspring.append(respawn(ind, ind.brain.copy_with(weights), width, height, self.rng))

        self._record()
        self.generation += 1
        self._evaluated = False
        return offspring

    def update_particle(self, index: int, current: np.ndarray) -> np.ndarray:
        """One PSO step for particle `index`; stores its new velocity."""
        cfg = self.config
        r1 = self.rng.random(len(current))
        r2 = self.rng.random(len(current))

        velocity = (
            cfg.inertia_weight * self.velocities[index]
            + cfg.cognitive_weight * r1 * (self.personal_best_weights[index] - current)
            + cfg.social_weight * r2 * (self.global_best_weights - current)
        )
        velocity = np.clip(velocity, -VELOCITY_LIMIT, VELOCITY_LIMIT)
        self.velocities[index] = velocity

        return np.clip(current + velocity, -WEIGHT_LIMIT, WEIGHT_LIMIT)

    # ==================== Statistics ====================

    def get_best(self) -> Tuple[Optional[np.ndarray], float]:
        weights = None if self.global_best_weights is None else self.global_best_weights.copy()
        return weights, self.global_best_fitness

    def _record(self) -> None:
        self.history.append({
            "generation": self.generation,
            "best_fitness": self.stats.best_fitness,
            "average_fitness": self.stats.average_fitness,
            "global_best_fitness": self.global_best_fitness,
        })
        logger.debug(
            f"PSO generation {self.generation}: best={self.stats.best_fitness:.1f} "
            f"avg={self.stats.average_fitness:.1f} global={self.global_best_fitness:.1f}"
        )

    def get_stats(self) -> Dict[str, Any]:
        stats = self.stats.rounded()
        stats["generation"] = self.generation
        return stats

    def __repr__(self) -> str:
        return (
            f"ParticleSwarm(generation={self.generation}, "
            f"global_best={self.global_best_fitness}, config={self.config})"
        )

"""
evolution/reward.py

Reward-weighted local adjustment: learning within a lifetime.

The other two strategies search between brains. This one nudges each
brain along its own trajectory. During an episode every
(observation, action) pair is logged; at the boundary the episode's
reward decides a single sign for the whole log:

    improved -> make those actions more likely   (sign +1)
    otherwise -> make them less likely           (sign -1)

One coarse sign for the entire episode, not per-step credit assignment.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence
import logging

import numpy as np

from neuro_forage.core.individual import Individual, respawn

from .strategy import GenerationStats, require_population, summarize

logger = logging.getLogger(__name__)


@dataclass
class RewardConfig:
    """Configuration for reward-weighted adjustment."""
    learning_rate: float = 0.01
    max_training_steps: int = 100   # Logged steps replayed per episode

    def __post_init__(self):
        if self.learning_rate < 0:
            raise ValueError(f"learning_rate must be >= 0, got {self.learning_rate}")
        if self.max_training_steps < 0:
            raise ValueError(
                f"max_training_steps must be >= 0, got {self.max_training_steps}"
            )


@dataclass
class Experience:
    """One individual's log for the current episode."""
    observations: List[np.ndarray] = field(default_factory=list)
    actions: List[np.ndarray] = field(default_factory=list)
    rewards: List[float] = field(default_factory=list)
    last_fitness: float = 0.0

    def __len__(self) -> int:
        return len(self.observations)

    def average_reward(self) -> float:
        return sum(self.rewards) / max(1, len(self.rewards))

    def clear(self) -> None:
        self.observations.clear()
        self.actions.clear()
        self.rewards.clear()


class RewardAdjustment:
    """
    Per-individual backpropagation toward rewarded actions.

    Networks are carried forward, never replaced: the brain an
    individual ends a generation with is the brain its successor
    starts the next one with.
    """

    def __init__(
        self,
        config: Optional[RewardConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config or RewardConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.generation = 0
        self.stats = GenerationStats()
        self.history: List[Dict[str, Any]] = []
        self.experiences: List[Experience] = []
        self._evaluated = False

    def initialize(self, population: Sequence[Individual]) -> None:
        require_population(population)
        self.experiences = [Experience() for _ in population]

    def _ensure_initialized(self, population: Sequence[Individual]) -> None:
        if len(self.experiences) != len(population):
            self.initialize(population)

    def set_parameters(self, **kwargs: Any) -> None:
        self.config = replace(self.config, **kwargs)

    def experience_for(self, index: int) -> Optional[Experience]:
        if 0 <= index < len(self.experiences):
            return self.experiences[index]
        return None

    def record_step(
        self,
        index: int,
        observation: np.ndarray,
        action: np.ndarray,
    ) -> None:
        """Log one frame for individual `index`. Unknown indices are ignored."""
        experience = self.experience_for(index)
        if experience is None:
            logger.debug(f"Ignoring experience for unknown individual {index}")
            return
        experience.observations.append(np.array(observation, dtype=np.float64))
        experience.actions.append(np.array(action, dtype=np.float64))

    # ==================== Generation cycle ====================

    def evaluate(self, population: Sequence[Individual]) -> GenerationStats:
        """Reward = fitness gained since the previous evaluation."""
        require_population(population)
        self._ensure_initialized(population)

        for ind, experience in zip(population, self.experiences):
            experience.rewards.append(ind.fitness - experience.last_fitness)
            experience.last_fitness = ind.fitness

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

        for ind, experience in zip(population, self.experiences):
            self.train(ind, experience)

        offspring = [
            respawn(ind, ind.brain, width, height, self.rng) for ind in population
        ]

        self._record()
        self.generation += 1
        self._evaluated = False
        return offspring

    def train(self, individual: Individual, experience: Experience) -> int:
        """
        Replay up to `max_training_steps` logged steps through the
        individual's own network, then clear the log.

        Returns the number of adjustment steps applied.
        """
        if len(experience) == 0:
            experience.clear()
            return 0

        reward_sign = 1 if experience.average_reward() > 0 else -1
        steps = min(len(experience), self.config.max_training_steps)
        for observation, action in zip(
            experience.observations[:steps], experience.actions[:steps]
        ):
            individual.brain.local_adjust(
                observation, action, reward_sign, self.config.learning_rate
            )

        experience.clear()
        return steps

    # ==================== Statistics ====================

    def _record(self) -> None:
        self.history.append({
            "generation": self.generation,
            "best_fitness": self.stats.best_fitness,
            "average_fitness": self.stats.average_fitness,
        })
        logger.debug(
            f"BP generation {self.generation}: best={self.stats.best_fitness:.1f} "
            f"avg={self.stats.average_fitness:.1f}"
        )

    def get_stats(self) -> Dict[str, Any]:
        stats = self.stats.rounded()
        stats["generation"] = self.generation
        return stats

    def __repr__(self) -> str:
        return (
            f"RewardAdjustment(generation={self.generation}, "
            f"learning_rate={self.config.learning_rate})"
        )

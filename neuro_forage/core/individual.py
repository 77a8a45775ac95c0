"""
core/individual.py

An individual is a brain with a body and a score.

The brain (a NeuralNetwork) is what evolves. The body (position,
heading, velocity) and the score (fitness) belong to one episode only
and are thrown away at every generation boundary.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional
import numpy as np

from .network import DEFAULT_TOPOLOGY, NeuralNetwork, Topology


@dataclass(eq=False)
class Individual:
    """
    One candidate solution: a weight vector plus episode bookkeeping.

    Fitness is accumulated additively by the environment during an
    episode; strategies read it at the generation boundary.
    """
    brain: NeuralNetwork
    position: np.ndarray = field(default_factory=lambda: np.zeros(2))
    heading: float = 0.0
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(2))
    fitness: float = 0.0
    food_collected: int = 0
    team: str = ""

    def __post_init__(self):
        self.position = np.asarray(self.position, dtype=np.float64)
        self.velocity = np.asarray(self.velocity, dtype=np.float64)

    @classmethod
    def spawn(
        cls,
        brain: NeuralNetwork,
        width: float,
        height: float,
        rng: Optional[np.random.Generator] = None,
        team: str = "",
    ) -> "Individual":
        """Fresh episode state at a uniformly random spot and heading."""
        rng = rng if rng is not None else np.random.default_rng()
        return cls(
            brain=brain,
            position=np.array([rng.uniform(0, width), rng.uniform(0, height)]),
            heading=float(rng.uniform(0, 2 * np.pi)),
            team=team,
        )

    @property
    def weights(self) -> np.ndarray:
        """Read-only view of the brain's weights."""
        view = self.brain.weights.view()
        view.flags.writeable = False
        return view

    def add_fitness(self, delta: float) -> None:
        self.fitness += delta

    def reset_fitness(self) -> None:
        self.fitness = 0.0
        self.food_collected = 0

    def __repr__(self) -> str:
        return (
            f"Individual(team={self.team!r}, "
            f"pos=[{self.position[0]:.1f}, {self.position[1]:.1f}], "
            f"fitness={self.fitness:.1f})"
        )


def random_population(
    size: int,
    width: float,
    height: float,
    rng: Optional[np.random.Generator] = None,
    team: str = "",
    topology: Topology = DEFAULT_TOPOLOGY,
) -> List[Individual]:
    """Initial population with random brains scattered over the field."""
    rng = rng if rng is not None else np.random.default_rng()
    return [
        Individual.spawn(NeuralNetwork.random(rng, topology), width, height, rng, team)
        for _ in range(size)
    ]


def respawn(
    individual: Individual,
    brain: NeuralNetwork,
    width: float,
    height: float,
    rng: Optional[np.random.Generator] = None,
) -> Individual:
    """New individual on the same team carrying `brain`, with fresh episode state."""
    return Individual.spawn(brain, width, height, rng, team=individual.team)


def fitness_values(population: List[Individual]) -> np.ndarray:
    return np.array([ind.fitness for ind in population], dtype=np.float64)

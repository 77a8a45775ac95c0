"""
neuro_forage/evolution/

Three interchangeable optimizers over network weights.

Every generation is the same two calls:
- evaluate(population): read fitness, update internal bests/rewards
- evolve(population, width, height): return the next population

Algorithms:
- GeneticAlgorithm: elitism, tournament selection, crossover, mutation
- ParticleSwarm: velocity toward personal and global bests
- RewardAdjustment: in-place backprop toward rewarded actions
"""

from .strategy import (
    EmptyPopulationError,
    ExperienceRecorder,
    GenerationStats,
    OptimizationStrategy,
)
from .genetic import GeneticAlgorithm, GeneticConfig
from .swarm import ParticleSwarm, SwarmConfig
from .reward import Experience, RewardAdjustment, RewardConfig

__all__ = [
    "EmptyPopulationError",
    "ExperienceRecorder",
    "GenerationStats",
    "OptimizationStrategy",
    "GeneticAlgorithm",
    "GeneticConfig",
    "ParticleSwarm",
    "SwarmConfig",
    "Experience",
    "RewardAdjustment",
    "RewardConfig",
]

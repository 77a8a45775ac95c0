"""
neuro_forage/services/orchestrator.py

Generation orchestrator.

Drives the whole run:
1. Every frame, each individual of each team senses, acts and eats
2. Experience is streamed to strategies that learn from it
3. At a generation boundary each team's strategy evaluates, then evolves
4. The field is restocked

All run state lives on the orchestrator instance. Teams never share
strategy state; they only share the field and the random source.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from neuro_forage.core.individual import Individual, random_population
from neuro_forage.environments.foraging_field import FieldConfig, ForagingField
from neuro_forage.evolution.genetic import GeneticAlgorithm, GeneticConfig
from neuro_forage.evolution.reward import RewardAdjustment, RewardConfig
from neuro_forage.evolution.strategy import ExperienceRecorder, OptimizationStrategy
from neuro_forage.evolution.swarm import ParticleSwarm, SwarmConfig

logger = logging.getLogger(__name__)

TEAM_NAMES = ("ga", "pso", "bp")


@dataclass
class OrchestratorConfig:
    """Configuration for the generation loop."""
    population_size: int = 15           # Per team
    generation_frames: int = 300         # Frames per episode
    initial_food: int = 30
    food_per_generation: int = 10        # Restock at each boundary
    food_spawn_chance: float = 0.02      # Per-frame chance of one extra item
    max_food: int = 50                   # Random spawning stops at this count
    teams: Tuple[str, ...] = ("ga", "pso")
    seed: Optional[int] = None

    def __post_init__(self):
        self.teams = tuple(self.teams)
        if self.population_size < 1:
            raise ValueError(f"population_size must be >= 1, got {self.population_size}")
        if self.generation_frames < 1:
            raise ValueError(f"generation_frames must be >= 1, got {self.generation_frames}")
        if not 0.0 <= self.food_spawn_chance <= 1.0:
            raise ValueError(
                f"food_spawn_chance must be in [0, 1], got {self.food_spawn_chance}"
            )
        if min(self.initial_food, self.food_per_generation, self.max_food) < 0:
            raise ValueError("Food counts must be >= 0")
        if not self.teams:
            raise ValueError("At least one team is required")
        unknown = [t for t in self.teams if t not in TEAM_NAMES]
        if unknown:
            raise ValueError(f"Unknown teams {unknown}; choose from {TEAM_NAMES}")
        if len(set(self.teams)) != len(self.teams):
            raise ValueError(f"Duplicate teams in {self.teams}")


@dataclass
class Team:
    """One sub-population and the strategy bound to it for the run."""
    name: str
    strategy: OptimizationStrategy
    population: List[Individual] = field(default_factory=list)


class GenerationOrchestrator:
    """
    Frame loop plus generation boundaries for every team.

    Usage:
        orchestrator = GenerationOrchestrator(OrchestratorConfig(seed=1))
        history = orchestrator.run(generations=10)
    """

    def __init__(
        self,
        config: Optional[OrchestratorConfig] = None,
        field_config: Optional[FieldConfig] = None,
        genetic_config: Optional[GeneticConfig] = None,
        swarm_config: Optional[SwarmConfig] = None,
        reward_config: Optional[RewardConfig] = None,
        strategies: Optional[Dict[str, OptimizationStrategy]] = None,
    ):
        self.config = config or OrchestratorConfig()
        self.field_config = field_config or FieldConfig()
        self.strategy_configs: Dict[str, Any] = {
            "ga": genetic_config or GeneticConfig(),
            "pso": swarm_config or SwarmConfig(),
            "bp": reward_config or RewardConfig(),
        }
        # Pre-built strategies are bound on the first build only
        self._pending_strategies: Dict[str, OptimizationStrategy] = dict(strategies or {})
        unbound = set(self._pending_strategies) - set(self.config.teams)
        if unbound:
            raise ValueError(f"Strategies given for teams not in the run: {sorted(unbound)}")
        self.teams: List[Team] = []
        self.reset()

    @classmethod
    def from_run_config(cls, run_config) -> "GenerationOrchestrator":
        """Build from a `neuro_forage.config.RunConfig`."""
        return cls(
            config=run_config.orchestrator,
            field_config=run_config.field,
            genetic_config=run_config.genetic,
            swarm_config=run_config.swarm,
            reward_config=run_config.reward,
        )

    # ==================== Setup ====================

    def _create_strategy(self, name: str) -> OptimizationStrategy:
        strategy = self._pending_strategies.pop(name, None)
        if strategy is not None:
            self.strategy_configs[name] = strategy.config
            return strategy

        cfg = self.strategy_configs[name]
        if name == "ga":
            return GeneticAlgorithm(cfg, self.rng)
        if name == "pso":
            return ParticleSwarm(cfg, self.rng)
        return RewardAdjustment(cfg, self.rng)

    def reset(self) -> None:
        """
        Fresh strategies, populations and food. Current knobs are kept.

        Strategies passed to the constructor are replaced too: their
        config survives, their learned state and random source do not.
        """
        for team in self.teams:
            self.strategy_configs[team.name] = team.strategy.config

        self.rng = np.random.default_rng(self.config.seed)
        self.field = ForagingField(self.field_config, self.rng)
        self.frame = 0
        self.history: List[Dict[str, Dict[str, Any]]] = []

        self.teams = []
        for name in self.config.teams:
            strategy = self._create_strategy(name)
            population = random_population(
                self.config.population_size,
                self.field_config.width,
                self.field_config.height,
                self.rng,
                team=name,
            )
            strategy.initialize(population)
            self.teams.append(Team(name, strategy, population))

        self.field.spawn_food(self.config.initial_food)
        logger.info(
            f"Run initialized: teams={list(self.config.teams)}, "
            f"population={self.config.population_size}, seed={self.config.seed}"
        )

    def team(self, name: str) -> Team:
        for team in self.teams:
            if team.name == name:
                return team
        raise KeyError(f"No team named {name!r}")

    def set_parameters(self, team_name: str, **kwargs: Any) -> None:
        """Retune one team's strategy mid-run."""
        team = self.team(team_name)
        team.strategy.set_parameters(**kwargs)
        self.strategy_configs[team_name] = team.strategy.config

    # ==================== Loop ====================

    def step(self) -> Optional[Dict[str, Dict[str, Any]]]:
        """
        Advance one frame.

        Returns per-team stats when this frame closed a generation.
        """
        for team in self.teams:
            recorder = team.strategy if isinstance(team.strategy, ExperienceRecorder) else None
            for index, individual in enumerate(team.population):
                observation, action, _ = self.field.step_individual(individual)
                if recorder is not None:
                    recorder.record_step(index, observation, action)

        self.frame += 1
        stats = None
        if self.frame >= self.config.generation_frames:
            stats = self.advance_generation()
            self.frame = 0

        if (
            self.rng.random() < self.config.food_spawn_chance
            and self.field.food_count < self.config.max_food
        ):
            self.field.spawn_food(1)

        return stats

    def advance_generation(self) -> Dict[str, Dict[str, Any]]:
        """Evaluate then evolve every team; restock the field."""
        for team in self.teams:
            team.strategy.evaluate(team.population)
            team.population = team.strategy.evolve(
                team.population,
                self.field_config.width,
                self.field_config.height,
            )

        self.field.spawn_food(self.config.food_per_generation)

        stats = self.get_stats()
        self.history.append(stats)
        for name, team_stats in stats.items():
            logger.info(
                f"[{name}] generation {team_stats['generation']}: "
                f"best={team_stats['best_fitness']} avg={team_stats['average_fitness']}"
            )
        return stats

    def run(self, generations: int) -> List[Dict[str, Dict[str, Any]]]:
        """Step until `generations` more boundaries have passed."""
        completed = []
        while len(completed) < generations:
            stats = self.step()
            if stats is not None:
                completed.append(stats)
        return completed

    def get_stats(self) -> Dict[str, Dict[str, Any]]:
        return {team.name: team.strategy.get_stats() for team in self.teams}

    def __repr__(self) -> str:
        return (
            f"GenerationOrchestrator(teams={[t.name for t in self.teams]}, "
            f"frame={self.frame}/{self.config.generation_frames})"
        )

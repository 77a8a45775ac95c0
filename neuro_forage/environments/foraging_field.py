"""
environments/foraging_field.py

A flat, wrapping 2D field scattered with food.

Headless: no drawing, just geometry. Individuals sense the nearest
food, turn and move according to their brain, and score by touching
food, which is then consumed.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
import numpy as np

from neuro_forage.core.individual import Individual


@dataclass
class FieldConfig:
    """Configuration for the foraging field."""
    width: float = 800.0
    height: float = 800.0
    sense_radius: float = 150.0      # Distance normalizer for sensing
    max_speed: float = 2.0
    max_turn: float = np.pi / 4      # Turn per frame at |action[0]| = 1
    ant_size: float = 6.0
    food_size: float = 8.0
    food_reward: float = 10.0        # Fitness per food item

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Field must have positive size, got {self.width}x{self.height}")
        if self.sense_radius <= 0:
            raise ValueError(f"sense_radius must be > 0, got {self.sense_radius}")


class ForagingField:
    """
    Toroidal field holding food.

    Food is an (n, 2) array of positions; eaten food is removed.
    """

    def __init__(
        self,
        config: Optional[FieldConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config or FieldConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.food = np.empty((0, 2))

    @property
    def food_count(self) -> int:
        return len(self.food)

    # ==================== Food ====================

    def spawn_food(self, count: int) -> None:
        """Scatter `count` food items uniformly over the field."""
        if count <= 0:
            return
        new_food = np.column_stack([
            self.rng.uniform(0, self.config.width, count),
            self.rng.uniform(0, self.config.height, count),
        ])
        self.food = np.vstack([self.food, new_food])

    def add_food(self, x: float, y: float) -> None:
        self.food = np.vstack([self.food, [[x, y]]])

    def clear_food(self) -> None:
        self.food = np.empty((0, 2))

    def nearest_food(self, position: np.ndarray) -> Optional[int]:
        if not len(self.food):
            return None
        distances = np.linalg.norm(self.food - position, axis=1)
        return int(distances.argmin())

    # ==================== Individual dynamics ====================

    def sense(self, individual: Individual) -> np.ndarray:
        """
        Observation: [food_angle, food_distance, vx, vy, bias].

        Angle is relative to heading, in [-1, 1] (units of pi).
        Distance and velocity are normalized by sense radius and max speed.
        """
        food_angle = 0.0
        food_distance = 1.0

        nearest = self.nearest_food(individual.position)
        if nearest is not None:
            offset = self.food[nearest] - individual.position
            bearing = np.arctan2(offset[1], offset[0]) - individual.heading
            # Wrap into [-pi, pi]
            bearing = (bearing + np.pi) % (2 * np.pi) - np.pi
            food_angle = bearing / np.pi
            food_distance = min(np.linalg.norm(offset) / self.config.sense_radius, 1.0)

        velocity = individual.velocity / self.config.max_speed
        return np.array([food_angle, food_distance, velocity[0], velocity[1], 1.0])

    def move(self, individual: Individual, action: Sequence[float]) -> None:
        """Turn by action[0], run at speed mapped from action[1], wrap at edges."""
        individual.heading += action[0] * self.config.max_turn
        speed = (action[1] + 1.0) / 2.0

        direction = np.array([np.cos(individual.heading), np.sin(individual.heading)])
        individual.velocity = direction * speed * self.config.max_speed

        size = np.array([self.config.width, self.config.height])
        individual.position = (individual.position + individual.velocity) % size

    def collect(self, individual: Individual) -> float:
        """Eat every food item in reach. Returns the fitness gained."""
        if not len(self.food):
            return 0.0

        reach = self.config.ant_size + self.config.food_size
        distances = np.linalg.norm(self.food - individual.position, axis=1)
        eaten = distances < reach
        count = int(eaten.sum())
        if count == 0:
            return 0.0

        self.food = self.food[~eaten]
        reward = count * self.config.food_reward
        individual.food_collected += count
        individual.add_fitness(reward)
        return reward

    def step_individual(self, individual: Individual) -> Tuple[np.ndarray, np.ndarray, float]:
        """One frame for one individual: sense, think, move, eat."""
        observation = self.sense(individual)
        action = individual.brain.predict(observation)
        self.move(individual, action)
        reward = self.collect(individual)
        return observation, action, reward

    def __repr__(self) -> str:
        return (
            f"ForagingField({self.config.width:.0f}x{self.config.height:.0f}, "
            f"food={self.food_count})"
        )

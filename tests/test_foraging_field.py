"""
Tests for environments/foraging_field.py

Headless foraging geometry.
"""

import numpy as np
import pytest

from neuro_forage.core.individual import Individual
from neuro_forage.core.network import NeuralNetwork
from neuro_forage.environments.foraging_field import FieldConfig, ForagingField


def make_individual(position, heading=0.0, velocity=(0.0, 0.0)):
    return Individual(
        NeuralNetwork(np.zeros(28)),
        position=np.array(position, dtype=float),
        heading=heading,
        velocity=np.array(velocity, dtype=float),
    )


class TestFieldConfig:
    """Tests for FieldConfig dataclass."""

    def test_default_config(self):
        config = FieldConfig()
        assert config.width == 800.0
        assert config.height == 800.0
        assert config.sense_radius == 150.0
        assert config.food_reward == 10.0

    def test_invalid_size_raises(self):
        with pytest.raises(ValueError):
            FieldConfig(width=0)


class TestFood:
    """Tests for food placement."""

    def test_spawn_food_within_bounds(self):
        field = ForagingField(FieldConfig(width=100, height=50), np.random.default_rng(42))
        field.spawn_food(40)

        assert field.food_count == 40
        assert np.all((field.food[:, 0] >= 0) & (field.food[:, 0] < 100))
        assert np.all((field.food[:, 1] >= 0) & (field.food[:, 1] < 50))

    def test_add_and_clear_food(self):
        field = ForagingField()
        field.add_food(10, 20)
        np.testing.assert_array_equal(field.food, [[10.0, 20.0]])
        field.clear_food()
        assert field.food_count == 0

    def test_nearest_food(self):
        field = ForagingField()
        assert field.nearest_food(np.zeros(2)) is None

        field.add_food(100, 100)
        field.add_food(10, 0)
        assert field.nearest_food(np.zeros(2)) == 1


class TestSense:
    """Tests for observations."""

    def test_no_food_observation(self):
        field = ForagingField()
        ind = make_individual([50, 50], velocity=(1.0, -2.0))
        np.testing.assert_allclose(field.sense(ind), [0.0, 1.0, 0.5, -1.0, 1.0])

    def test_food_straight_ahead(self):
        field = ForagingField()
        field.add_food(125, 50)
        ind = make_individual([50, 50], heading=0.0)

        obs = field.sense(ind)

        assert obs[0] == pytest.approx(0.0)
        assert obs[1] == pytest.approx(0.5)
        assert obs[4] == 1.0

    def test_food_to_the_left_wraps_angle(self):
        """Bearing is relative to heading and stays in [-1, 1]."""
        field = ForagingField()
        field.add_food(50, 60)                       # Straight +y
        ind = make_individual([50, 50], heading=-np.pi / 2 + 2 * np.pi)

        obs = field.sense(ind)

        assert obs[0] == pytest.approx(-1.0) or obs[0] == pytest.approx(1.0)

    def test_distance_capped(self):
        field = ForagingField()
        field.add_food(700, 50)
        assert field.sense(make_individual([50, 50]))[1] == 1.0


class TestMoveAndCollect:
    """Tests for movement and eating."""

    def test_move_straight_full_speed(self):
        field = ForagingField()
        ind = make_individual([50, 50])

        field.move(ind, np.array([0.0, 1.0]))

        np.testing.assert_allclose(ind.position, [52.0, 50.0])
        np.testing.assert_allclose(ind.velocity, [2.0, 0.0])

    def test_move_turns(self):
        field = ForagingField()
        ind = make_individual([50, 50])
        field.move(ind, np.array([1.0, -1.0]))
        assert ind.heading == pytest.approx(np.pi / 4)
        np.testing.assert_allclose(ind.position, [50.0, 50.0])

    def test_move_wraps_edges(self):
        field = ForagingField(FieldConfig(width=100, height=100))
        ind = make_individual([99.5, 10])
        field.move(ind, np.array([0.0, 1.0]))
        assert ind.position[0] == pytest.approx(1.5)

    def test_collect_eats_food_in_reach(self):
        field = ForagingField()
        field.add_food(55, 50)
        field.add_food(300, 300)
        ind = make_individual([50, 50])

        reward = field.collect(ind)

        assert reward == 10.0
        assert ind.fitness == 10.0
        assert ind.food_collected == 1
        assert field.food_count == 1

    def test_collect_multiple(self):
        field = ForagingField()
        field.add_food(51, 50)
        field.add_food(49, 50)
        ind = make_individual([50, 50])
        assert field.collect(ind) == 20.0
        assert field.food_count == 0

    def test_collect_nothing(self):
        field = ForagingField()
        ind = make_individual([50, 50])
        assert field.collect(ind) == 0.0
        field.add_food(200, 200)
        assert field.collect(ind) == 0.0
        assert ind.fitness == 0.0

    def test_step_individual(self):
        """Zero brain goes straight at half speed."""
        field = ForagingField()
        ind = make_individual([50, 50])

        observation, action, reward = field.step_individual(ind)

        assert observation.shape == (5,)
        np.testing.assert_array_equal(action, [0.0, 0.0])
        np.testing.assert_allclose(ind.position, [51.0, 50.0])
        assert reward == 0.0

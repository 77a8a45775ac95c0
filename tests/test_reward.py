"""
Tests for evolution/reward.py
"""

import numpy as np
import pytest

from neuro_forage.core.network import DEFAULT_TOPOLOGY
from neuro_forage.evolution.reward import Experience, RewardAdjustment, RewardConfig
from neuro_forage.evolution.strategy import EmptyPopulationError, ExperienceRecorder


OBSERVATION = np.array([0.3, 0.6, -0.4, 0.2, 1.0])
ACTION = np.array([0.8, -0.6])


class TestExperience:
    """Tests for the Experience log."""

    def test_average_reward_of_empty_log(self):
        assert Experience().average_reward() == 0.0

    def test_clear_keeps_watermark(self):
        experience = Experience(rewards=[1.0], last_fitness=7.0)
        experience.observations.append(OBSERVATION)
        experience.actions.append(ACTION)
        experience.clear()
        assert len(experience) == 0
        assert experience.rewards == []
        assert experience.last_fitness == 7.0


class TestRecordStep:
    """Tests for experience recording."""

    def test_records_copies(self, make_population, rng):
        bp = RewardAdjustment(rng=rng)
        bp.initialize(make_population([0, 0], topology=DEFAULT_TOPOLOGY))

        observation = OBSERVATION.copy()
        bp.record_step(1, observation, ACTION)
        observation[0] = 99.0

        experience = bp.experience_for(1)
        assert len(experience) == 1
        assert experience.observations[0][0] == 0.3

    def test_unknown_index_is_ignored(self, make_population, rng):
        bp = RewardAdjustment(rng=rng)
        bp.initialize(make_population([0, 0], topology=DEFAULT_TOPOLOGY))

        bp.record_step(5, OBSERVATION, ACTION)
        bp.record_step(-1, OBSERVATION, ACTION)

        assert all(len(e) == 0 for e in bp.experiences)

    def test_record_before_initialize_is_ignored(self, rng):
        bp = RewardAdjustment(rng=rng)
        bp.record_step(0, OBSERVATION, ACTION)
        assert bp.experiences == []

    def test_is_experience_recorder(self, rng):
        assert isinstance(RewardAdjustment(rng=rng), ExperienceRecorder)


class TestEvaluate:
    """Tests for reward bookkeeping."""

    def test_reward_is_fitness_delta(self, make_population, rng):
        bp = RewardAdjustment(rng=rng)
        population = make_population([10, 0], topology=DEFAULT_TOPOLOGY)

        bp.evaluate(population)
        assert bp.experiences[0].rewards == [10.0]
        assert bp.experiences[0].last_fitness == 10.0

        population[0].fitness = 4.0
        bp.evaluate(population)
        assert bp.experiences[0].rewards == [10.0, -6.0]

    def test_statistics(self, make_population, rng):
        bp = RewardAdjustment(rng=rng)
        stats = bp.evaluate(make_population([10, 30, 20, 5], topology=DEFAULT_TOPOLOGY))
        assert stats.best_fitness == 30.0
        assert stats.average_fitness == 16.25

    def test_empty_population_raises(self, rng):
        bp = RewardAdjustment(rng=rng)
        with pytest.raises(EmptyPopulationError):
            bp.evaluate([])
        with pytest.raises(EmptyPopulationError):
            bp.evolve([], 100, 100)


class TestEvolve:
    """Tests for in-place training."""

    def _trained(self, make_population, rng, fitness, steps=1):
        bp = RewardAdjustment(RewardConfig(learning_rate=0.1), rng)
        population = make_population([fitness], topology=DEFAULT_TOPOLOGY)
        bp.initialize(population)
        for _ in range(steps):
            bp.record_step(0, OBSERVATION, ACTION)
        return bp, population

    def test_empty_experience_leaves_weights_unchanged(self, make_population, rng):
        bp = RewardAdjustment(rng=rng)
        population = make_population([10, 20], topology=DEFAULT_TOPOLOGY)
        before = [ind.brain.get_weights() for ind in population]

        bp.evaluate(population)
        offspring = bp.evolve(population, 100, 100)

        for ind, weights in zip(offspring, before):
            np.testing.assert_array_equal(ind.weights, weights)

    def test_positive_reward_reinforces_action(self, make_population, rng):
        bp, population = self._trained(make_population, rng, fitness=10)
        before = np.linalg.norm(ACTION - population[0].brain.predict(OBSERVATION))

        bp.evaluate(population)
        offspring = bp.evolve(population, 100, 100)

        after = np.linalg.norm(ACTION - offspring[0].brain.predict(OBSERVATION))
        assert after < before

    def test_no_improvement_discourages_action(self, make_population, rng):
        """Zero reward counts as failure: sign -1."""
        bp, population = self._trained(make_population, rng, fitness=0)
        before = np.linalg.norm(ACTION - population[0].brain.predict(OBSERVATION))

        bp.evaluate(population)
        offspring = bp.evolve(population, 100, 100)

        after = np.linalg.norm(ACTION - offspring[0].brain.predict(OBSERVATION))
        assert after > before

    def test_training_capped_and_log_cleared(self, make_population, rng):
        bp, population = self._trained(make_population, rng, fitness=10, steps=150)
        bp.evaluate(population)

        applied = bp.train(population[0], bp.experiences[0])

        assert applied == 100
        assert len(bp.experiences[0]) == 0
        assert bp.experiences[0].rewards == []

    def test_network_is_carried_forward(self, make_population, rng):
        """Same brain object, fresh episode state."""
        bp, population = self._trained(make_population, rng, fitness=10)
        bp.evaluate(population)
        offspring = bp.evolve(population, 50, 50)

        assert offspring[0].brain is population[0].brain
        assert offspring[0] is not population[0]
        assert offspring[0].fitness == 0.0
        assert 0 <= offspring[0].position[0] < 50

    def test_generation_increments(self, make_population, rng):
        bp, population = self._trained(make_population, rng, fitness=3)
        bp.evaluate(population)
        bp.evolve(population, 100, 100)
        assert bp.generation == 1
        assert bp.get_stats()["generation"] == 1
        assert len(bp.history) == 1

    def test_evolve_without_evaluate_evaluates_once(self, make_population, rng):
        bp, population = self._trained(make_population, rng, fitness=10)
        bp.evolve(population, 100, 100)
        assert bp.experiences[0].last_fitness == 10.0
        assert bp.history[0]["best_fitness"] == 10.0


class TestSetParameters:
    """Tests for retuning between generations."""

    def test_learning_rate_update_keeps_experience(self, make_population, rng):
        bp = RewardAdjustment(rng=rng)
        population = make_population([1], topology=DEFAULT_TOPOLOGY)
        bp.initialize(population)
        bp.record_step(0, OBSERVATION, ACTION)

        bp.set_parameters(learning_rate=0.5)

        assert bp.config.learning_rate == 0.5
        assert len(bp.experience_for(0)) == 1

    def test_negative_learning_rate_rejected(self, rng):
        with pytest.raises(ValueError):
            RewardAdjustment(rng=rng).set_parameters(learning_rate=-1.0)

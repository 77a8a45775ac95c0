"""
core/network.py

The brain of a forager: a tiny fixed-topology feedforward network.

    observation (5) -> tanh hidden (4) -> tanh action (2)

Inputs: food angle, food distance, velocity x, velocity y, bias.
Outputs: turn, speed.

Weights live in one flat vector, layer-major:
    [input->hidden block | hidden->output block]

so that evolutionary operators can treat a brain as a plain point in
weight space while the network itself stays a pure function of
(weights, observation).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence
import logging

import numpy as np

logger = logging.getLogger(__name__)

WEIGHT_LIMIT = 2.0


@dataclass(frozen=True)
class Topology:
    """Layer sizes of the network. Fixed for the lifetime of a network."""
    input_size: int = 5
    hidden_size: int = 4
    output_size: int = 2

    @property
    def input_hidden_count(self) -> int:
        return self.input_size * self.hidden_size

    @property
    def hidden_output_count(self) -> int:
        return self.hidden_size * self.output_size

    @property
    def weight_count(self) -> int:
        return self.input_hidden_count + self.hidden_output_count


DEFAULT_TOPOLOGY = Topology()


def neutral_action(output_size: int) -> np.ndarray:
    """Go straight at half speed: turn=0, every other channel 0.5."""
    action = np.full(output_size, 0.5)
    if output_size:
        action[0] = 0.0
    return action


class NeuralNetwork:
    """
    Fixed-topology tanh network over a flat weight vector.

    The weight vector is owned exclusively by this network. Copies
    (`copy`, `copy_with`, `get_weights`) never alias it, so in-place
    learning on one brain cannot leak into another.
    """

    def __init__(
        self,
        weights: Sequence[float],
        topology: Topology = DEFAULT_TOPOLOGY,
    ):
        self.topology = topology
        self.weights = np.array(weights, dtype=np.float64)
        if self.weights.ndim != 1 or len(self.weights) != topology.weight_count:
            raise ValueError(
                f"Expected {topology.weight_count} weights for {topology}, "
                f"got shape {self.weights.shape}"
            )
        # Count of malformed inputs seen; callers inspect this
        self.malformed_inputs = 0

    @classmethod
    def random(
        cls,
        rng: Optional[np.random.Generator] = None,
        topology: Topology = DEFAULT_TOPOLOGY,
    ) -> "NeuralNetwork":
        """Uniform weights in [-1, 1)."""
        rng = rng if rng is not None else np.random.default_rng()
        return cls(rng.uniform(-1.0, 1.0, topology.weight_count), topology)

    # ==================== Weight access ====================

    @property
    def weight_count(self) -> int:
        return len(self.weights)

    def get_weights(self) -> np.ndarray:
        return self.weights.copy()

    def set_weights(self, weights: Sequence[float]) -> None:
        new_weights = np.array(weights, dtype=np.float64)
        if new_weights.shape != self.weights.shape:
            raise ValueError(
                f"Weight vector length {len(new_weights)} != {self.weight_count}"
            )
        self.weights = new_weights

    def copy_with(self, weights: Sequence[float]) -> "NeuralNetwork":
        """New network of the same topology over a private copy of `weights`."""
        return NeuralNetwork(weights, self.topology)

    def copy(self) -> "NeuralNetwork":
        return self.copy_with(self.weights)

    def _layers(self):
        """Reshaped views onto the flat vector; writes go through to it."""
        t = self.topology
        w_ih = self.weights[:t.input_hidden_count].reshape(t.hidden_size, t.input_size)
        w_ho = self.weights[t.input_hidden_count:].reshape(t.output_size, t.hidden_size)
        return w_ih, w_ho

    # ==================== Forward ====================

    def _forward(self, observation: np.ndarray):
        w_ih, w_ho = self._layers()
        hidden = np.tanh(w_ih @ observation)
        output = np.tanh(w_ho @ hidden)
        return hidden, output

    def _as_vector(self, values, size: int) -> Optional[np.ndarray]:
        vector = np.asarray(values, dtype=np.float64).reshape(-1)
        if len(vector) != size:
            return None
        return vector

    def predict(self, observation: Sequence[float]) -> np.ndarray:
        """
        Map an observation to an action in [-1, 1]^output_size.

        A wrongly sized observation yields the neutral action instead of
        an error: the environment has no way to retry a frame.
        """
        obs = self._as_vector(observation, self.topology.input_size)
        if obs is None:
            self.malformed_inputs += 1
            logger.warning(
                f"Observation of length {np.size(observation)} does not match "
                f"input size {self.topology.input_size}; using neutral action"
            )
            return neutral_action(self.topology.output_size)

        _, output = self._forward(obs)
        return output

    # ==================== Learning ====================

    def local_adjust(
        self,
        observation: Sequence[float],
        action_taken: Sequence[float],
        reward_sign: int,
        learning_rate: float,
    ) -> None:
        """
        One backpropagation step toward (or away from) a taken action.

        The target is the action that was actually taken; the output
        error is multiplied by `reward_sign`, so +1 reinforces the action
        and -1 pushes the network away from it. Standard tanh chain rule,
        delta = error * (1 - y^2), with both layers' deltas computed
        before any weight moves. Weights are clamped to
        [-WEIGHT_LIMIT, WEIGHT_LIMIT] afterwards.

        Mutates this network's weights in place.
        """
        if reward_sign not in (1, -1):
            raise ValueError(f"reward_sign must be +1 or -1, got {reward_sign}")

        obs = self._as_vector(observation, self.topology.input_size)
        target = self._as_vector(action_taken, self.topology.output_size)
        if obs is None or target is None:
            self.malformed_inputs += 1
            logger.warning("Skipping local adjustment on malformed experience")
            return

        hidden, output = self._forward(obs)
        w_ih, w_ho = self._layers()

        output_delta = (target - output) * reward_sign * (1.0 - output ** 2)
        hidden_delta = (w_ho.T @ output_delta) * (1.0 - hidden ** 2)

        w_ho += learning_rate * np.outer(output_delta, hidden)
        w_ih += learning_rate * np.outer(hidden_delta, obs)
        np.clip(self.weights, -WEIGHT_LIMIT, WEIGHT_LIMIT, out=self.weights)

    def __repr__(self) -> str:
        t = self.topology
        return (
            f"NeuralNetwork({t.input_size}-{t.hidden_size}-{t.output_size}, "
            f"weights={self.weight_count})"
        )

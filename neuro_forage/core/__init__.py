"""
Core components of the neuro-forage system.

- network: The fixed-topology brain
- individual: A brain with an episode attached
"""

from .network import DEFAULT_TOPOLOGY, NeuralNetwork, Topology
from .individual import Individual, random_population

__all__ = [
    "DEFAULT_TOPOLOGY",
    "NeuralNetwork",
    "Topology",
    "Individual",
    "random_population",
]

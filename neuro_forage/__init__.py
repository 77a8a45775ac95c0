"""
Neuro-Forage: evolving tiny forager brains three ways

Fixed-topology neural controllers are optimized by a genetic algorithm,
a particle swarm, and reward-weighted backpropagation, each driving its
own team in a shared foraging field.
"""

__version__ = "0.1.0"

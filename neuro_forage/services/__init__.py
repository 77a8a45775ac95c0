"""
Services that drive the optimizers over time.

- orchestrator: frame loop, generation boundaries, team bookkeeping
"""

from .orchestrator import GenerationOrchestrator, OrchestratorConfig, Team

__all__ = ["GenerationOrchestrator", "OrchestratorConfig", "Team"]

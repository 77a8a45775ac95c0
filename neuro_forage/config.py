"""
neuro_forage/config.py

Run configuration from YAML.

One file, one section per component:

    field:         FieldConfig
    orchestrator:  OrchestratorConfig
    genetic:       GeneticConfig
    swarm:         SwarmConfig
    reward:        RewardConfig

Missing sections fall back to defaults. Values are validated by the
dataclasses themselves.
"""

from __future__ import annotations
from dataclasses import dataclass, field as dataclass_field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

import yaml

from neuro_forage.environments.foraging_field import FieldConfig
from neuro_forage.evolution.genetic import GeneticConfig
from neuro_forage.evolution.reward import RewardConfig
from neuro_forage.evolution.swarm import SwarmConfig
from neuro_forage.services.orchestrator import OrchestratorConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "scripts" / "configs" / "default.yaml"


@dataclass
class RunConfig:
    """Everything needed to build a GenerationOrchestrator."""
    field: FieldConfig = dataclass_field(default_factory=FieldConfig)
    orchestrator: OrchestratorConfig = dataclass_field(default_factory=OrchestratorConfig)
    genetic: GeneticConfig = dataclass_field(default_factory=GeneticConfig)
    swarm: SwarmConfig = dataclass_field(default_factory=SwarmConfig)
    reward: RewardConfig = dataclass_field(default_factory=RewardConfig)


SECTIONS = {f.name: f.default_factory for f in fields(RunConfig)}


def config_from_dict(data: Optional[Dict[str, Any]]) -> RunConfig:
    """Build a RunConfig from parsed YAML. Unknown sections are an error."""
    data = data or {}
    unknown = set(data) - set(SECTIONS)
    if unknown:
        raise ValueError(f"Unknown config sections: {sorted(unknown)}")

    sections = {}
    for name, factory in SECTIONS.items():
        values = data.get(name) or {}
        if not isinstance(values, dict):
            raise ValueError(f"Section {name!r} must be a mapping")
        sections[name] = factory(**values) if values else factory()
    return RunConfig(**sections)


def load_config(config_path: Union[str, Path, None] = None) -> RunConfig:
    """Load a run configuration; the packaged default when no path is given."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    with open(config_path) as f:
        data = yaml.safe_load(f)

    logger.debug(f"Loaded config from {config_path}")
    return config_from_dict(data)

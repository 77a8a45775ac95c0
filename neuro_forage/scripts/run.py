#!/usr/bin/env python3
"""
Headless Foraging Run

Pit the optimizers against each other in one shared field and log how
each team's fitness develops.

Usage:
    # Default config, 10 generations
    python -m neuro_forage.scripts.run

    # All three teams, reproducible, with a stats dump
    python -m neuro_forage.scripts.run --teams ga pso bp --seed 7 \
        --generations 50 --history stats.json

    # Custom config
    python -m neuro_forage.scripts.run --config my_run.yaml
"""

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path

from neuro_forage.config import load_config
from neuro_forage.services.orchestrator import TEAM_NAMES, GenerationOrchestrator

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Evolve forager brains headlessly")
    parser.add_argument("--config", default=None, help="YAML run configuration")
    parser.add_argument("--generations", type=int, default=10)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--teams", nargs="+", choices=TEAM_NAMES, default=None)
    parser.add_argument("--history", default=None, help="Write per-generation stats as JSON")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    run_config = load_config(args.config)
    overrides = {}
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.teams:
        overrides["teams"] = tuple(args.teams)
    if overrides:
        run_config.orchestrator = replace(run_config.orchestrator, **overrides)

    orchestrator = GenerationOrchestrator.from_run_config(run_config)
    logger.info(f"Running {args.generations} generations")
    history = orchestrator.run(args.generations)

    if args.history:
        output_path = Path(args.history)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(history, f, indent=2)
        logger.info(f"Stats written to {output_path}")

    for name, stats in orchestrator.get_stats().items():
        logger.info(
            f"Final [{name}]: generation={stats['generation']} "
            f"best={stats['best_fitness']} avg={stats['average_fitness']}"
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""
CLI module for lightga.

Loads a YAML run configuration, builds the engine and runs the jump finder
sample problem against it, printing a short report.
"""

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

import numpy as np

from .config import (
    create_engine_from_settings,
    load_config,
    settings_from_config,
)
from .errors import ConfigValidationError, EngineConfigurationError
from .jump_finder import JumpFinder


def _build_problem(problem_config: Dict[str, Any], chromosome_count: int,
                   seed: Optional[int]) -> JumpFinder:
    if not isinstance(problem_config, dict):
        raise ConfigValidationError("'problem' must be a dictionary")

    target = problem_config.get('target', 1234)
    max_jump_distance = problem_config.get('max_jump_distance', 1000)
    for name, value in [('target', target), ('max_jump_distance', max_jump_distance)]:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigValidationError(f"'problem.{name}' must be an integer, got: {value}")

    return JumpFinder(
        target,
        max_steps=chromosome_count,
        max_jump_distance=max_jump_distance,
        start=problem_config.get('start'),
        rng=np.random.default_rng(seed),
    )


def run_from_config(config_path: str, seed: Optional[int] = None,
                    target: Optional[int] = None) -> float:
    """
    Load run configuration and optimise the jump finder problem.

    Args:
        config_path: Path to run configuration YAML file
        seed: Overrides 'random_seed' from the configuration
        target: Overrides 'problem.target' from the configuration

    Returns:
        Best score after the last run() call

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
    """
    print(f"Loading configuration from: {config_path}")
    config = load_config(config_path)
    if seed is not None:
        config['random_seed'] = seed

    print("Validating configuration...")
    engine_settings, run_settings = settings_from_config(config)
    if engine_settings.gene_count < 2:
        raise ConfigValidationError(
            "The jump finder needs 'engine.gene_count' >= 2 (distance and direction)"
        )

    problem_config = dict(config.get('problem') or {})
    if target is not None:
        problem_config['target'] = target
    problem = _build_problem(problem_config, engine_settings.chromosome_count,
                             engine_settings.random_seed)

    engine = create_engine_from_settings(engine_settings)

    print("=" * 70)
    print("JUMP FINDER")
    print("=" * 70)
    print(f"Policy: {engine.policy.name}")
    print(f"Random seed: {engine_settings.random_seed}")
    print(f"Target: {problem.target}")
    print(f"Start: {problem.start}")
    print()

    for call in range(run_settings.repeat):
        generations = engine.run(
            problem,
            optimize_for_maximum=run_settings.optimize_for_maximum,
            max_generations=run_settings.max_generations,
            timeout_ms=run_settings.timeout_ms,
            shift_on_reuse=run_settings.shift_on_reuse,
        )
        stats = engine.last_run_stats
        print(f"Run {call + 1}/{run_settings.repeat}: {generations} generations, "
              f"{stats.evaluations} evaluations, {stats.elapsed_ms:.1f} ms"
              + (" (timed out)" if stats.timed_out else ""))

    print()
    print("=" * 70)
    print("SURVIVORS")
    print("=" * 70)
    for rank, (genome, score) in enumerate(zip(engine.best_genomes, engine.best_fitnesses)):
        print(f"  #{rank}: {problem.describe(engine, genome)}")
        print(f"      Score: {score:g}")
        print(f"      Genome: {engine.format_genome(genome)}")

    return engine.best_fitness


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lightga",
        description="Run the lightga engine on the jump finder sample problem.",
    )
    parser.add_argument("config", help="Path to run configuration YAML file")
    parser.add_argument("--seed", type=int, default=None, help="Override random_seed")
    parser.add_argument("--target", type=int, default=None, help="Override problem.target")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every generation")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the lightga CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        run_from_config(args.config, seed=args.seed, target=args.target)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return 1
    except (FileNotFoundError, ConfigValidationError, EngineConfigurationError) as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1

    print("\nRun completed successfully!")
    return 0


if __name__ == '__main__':
    sys.exit(main())

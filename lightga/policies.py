"""
Variant policies for the lightga engine.

The engine's numeric policy (how new chromosomes are filled, which mutation
law is applied and how operator rates evolve over generations) is bundled
in an EnginePolicy. Two presets are shipped: "classic" and "reset".
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .errors import ConfigValidationError


class DefaultFill(Enum):
    """Fill used for new chromosomes when no default template is set."""
    RANDOM = "random"
    ONES = "ones"


class MutationLaw(Enum):
    """How a chromosome's genes are perturbed."""
    BIASED_REDUCTION = "biased_reduction"
    PROBABILISTIC_RESET = "probabilistic_reset"


class RateSchedule:
    """
    Generation-dependent operator rates.

    Subclasses return absolute probabilities. Crossover and mutation together
    never exceed 1; replacement receives whatever mass is left.
    """

    def crossover_rate(self, generation: int) -> float:
        raise NotImplementedError

    def mutation_rate(self, generation: int) -> float:
        raise NotImplementedError

    def rates(self, generation: int) -> Tuple[float, float]:
        """
        Get (crossover, mutation) probabilities for a generation.

        Both values are clipped to [0, 1] and mutation is capped so the
        pair sums to at most 1.
        """
        crossover = min(max(self.crossover_rate(generation), 0.0), 1.0)
        mutation = min(max(self.mutation_rate(generation), 0.0), 1.0 - crossover)
        return crossover, mutation


@dataclass(frozen=True)
class ClassicSchedule(RateSchedule):
    """
    Crossover ramps from 0.5 to 0.75; mutation applies to the remaining mass.

    ``crossover = min(0.5 + 0.05 g, 0.75)`` and the chance of mutating a
    chromosome that was not crossed over is ``max(0.5 - 0.02 g, 0.01)``.
    """
    crossover_start: float = 0.5
    crossover_step: float = 0.05
    crossover_max: float = 0.75
    mutation_start: float = 0.5
    mutation_step: float = 0.02
    mutation_min: float = 0.01

    def crossover_rate(self, generation: int) -> float:
        return min(self.crossover_start + generation * self.crossover_step, self.crossover_max)

    def conditional_mutation_rate(self, generation: int) -> float:
        return max(self.mutation_start - generation * self.mutation_step, self.mutation_min)

    def mutation_rate(self, generation: int) -> float:
        return (1.0 - self.crossover_rate(generation)) * self.conditional_mutation_rate(generation)


@dataclass(frozen=True)
class LinearSchedule(RateSchedule):
    """Absolute rates moving linearly per generation between fixed bounds."""
    crossover_start: float = 0.3
    crossover_step: float = 0.05
    crossover_max: float = 0.8
    mutation_start: float = 0.4
    mutation_step: float = 0.02
    mutation_min: float = 0.05

    def crossover_rate(self, generation: int) -> float:
        return min(self.crossover_start + generation * self.crossover_step, self.crossover_max)

    def mutation_rate(self, generation: int) -> float:
        return max(self.mutation_start - generation * self.mutation_step, self.mutation_min)


@dataclass(frozen=True)
class EnginePolicy:
    """
    Named bundle of the engine's variant choices.

    Attributes:
        name: Preset name (informational)
        default_fill: Fill for new chromosomes without a template
        mutation_law: Mutation law applied by mutate_chromosome
        schedule: Operator rate schedule
        mutation_intensity: Default intensity passed to the mutation law
    """
    name: str = "classic"
    default_fill: DefaultFill = DefaultFill.RANDOM
    mutation_law: MutationLaw = MutationLaw.BIASED_REDUCTION
    schedule: RateSchedule = field(default_factory=ClassicSchedule)
    mutation_intensity: float = 1.0


CLASSIC_POLICY = EnginePolicy()

RESET_POLICY = EnginePolicy(
    name="reset",
    default_fill=DefaultFill.ONES,
    mutation_law=MutationLaw.PROBABILISTIC_RESET,
    schedule=LinearSchedule(),
    mutation_intensity=0.25,
)

POLICIES: Dict[str, EnginePolicy] = {
    CLASSIC_POLICY.name: CLASSIC_POLICY,
    RESET_POLICY.name: RESET_POLICY,
}

SCHEDULES = {
    "classic": ClassicSchedule,
    "linear": LinearSchedule,
}


def get_policy(name: str) -> EnginePolicy:
    """
    Look up a preset policy by name.

    Raises:
        ConfigValidationError: If no preset has this name
    """
    try:
        return POLICIES[name]
    except KeyError:
        raise ConfigValidationError(
            f"Unknown policy: '{name}'. Must be one of {sorted(POLICIES)}"
        ) from None


def _parse_enum(enum_type, value: Any, key: str):
    try:
        return enum_type(value)
    except ValueError:
        choices = [member.value for member in enum_type]
        raise ConfigValidationError(
            f"Invalid {key}: '{value}'. Must be one of {choices}"
        ) from None


def _build_schedule(schedule_config: Dict[str, Any]) -> RateSchedule:
    schedule_config = dict(schedule_config)
    kind = schedule_config.pop('type', 'classic')
    if kind not in SCHEDULES:
        raise ConfigValidationError(
            f"Invalid schedule type: '{kind}'. Must be one of {sorted(SCHEDULES)}"
        )
    try:
        return SCHEDULES[kind](**{k: float(v) for k, v in schedule_config.items()})
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(f"Invalid schedule parameters: {e}") from e


def build_policy(policy_config: Optional[Dict[str, Any]] = None) -> EnginePolicy:
    """
    Build a policy from a configuration mapping.

    The mapping names a preset and may override any of its fields:

        name: reset
        default_fill: random
        mutation_law: biased_reduction
        mutation_intensity: 0.5
        schedule: {type: linear, crossover_start: 0.4}

    Args:
        policy_config: Policy section of a run configuration (may be None)

    Returns:
        EnginePolicy

    Raises:
        ConfigValidationError: On unknown names or invalid values
    """
    if not policy_config:
        return CLASSIC_POLICY
    if not isinstance(policy_config, dict):
        raise ConfigValidationError("'policy' must be a dictionary")

    policy = get_policy(policy_config.get('name', CLASSIC_POLICY.name))
    overrides = {}

    if 'default_fill' in policy_config:
        overrides['default_fill'] = _parse_enum(
            DefaultFill, policy_config['default_fill'], 'default_fill'
        )
    if 'mutation_law' in policy_config:
        overrides['mutation_law'] = _parse_enum(
            MutationLaw, policy_config['mutation_law'], 'mutation_law'
        )
    if 'mutation_intensity' in policy_config:
        intensity = policy_config['mutation_intensity']
        if not isinstance(intensity, (int, float)) or isinstance(intensity, bool) or intensity < 0:
            raise ConfigValidationError(
                f"'mutation_intensity' must be a non-negative number, got: {intensity}"
            )
        overrides['mutation_intensity'] = float(intensity)
    if 'schedule' in policy_config:
        if not isinstance(policy_config['schedule'], dict):
            raise ConfigValidationError("'policy.schedule' must be a dictionary")
        overrides['schedule'] = _build_schedule(policy_config['schedule'])

    return replace(policy, **overrides) if overrides else policy

"""
Jump finder: a small sample fitness for the engine.

Find the quickest sequence of jumps that takes a random start value to a
target. Each chromosome is one jump: gene 0 scales the jump distance and
gene 1 picks the direction (below 0.5 subtracts, otherwise adds).
"""

from typing import Optional

import numpy as np

from .engine import GeneticEngine


class JumpFinder:
    """
    Fitness functional scoring jump sequences (lower is better).

    After every jump the distance to the target is weighted by the jump
    number and accumulated; hitting the target stops the accumulation.
    """

    def __init__(
        self,
        target: int,
        max_steps: int = 5,
        max_jump_distance: int = 1000,
        start: Optional[int] = None,
        rng: Optional[np.random.Generator] = None
    ):
        """
        Args:
            target: Value to reach
            max_steps: Jumps available (one chromosome each)
            max_jump_distance: Distance of a jump whose gene 0 is 1.0
            start: Starting value; drawn around the target when omitted
            rng: Generator used to draw the start value
        """
        self.target = target
        self.max_steps = max_steps
        self.max_jump_distance = max_jump_distance

        if start is None:
            rng = rng if rng is not None else np.random.default_rng()
            reach = max_jump_distance * max_steps
            start = target - reach + int(rng.integers(2 * reach))
        self.start = start

    def jump_size(self, g1: float) -> int:
        return int(round(g1 * self.max_jump_distance))

    def perform(self, number: int, g1: float, g2: float) -> int:
        """Apply one jump to ``number``."""
        if g2 < 0.5:
            return number - self.jump_size(g1)
        return number + self.jump_size(g1)

    def _steps(self, engine: GeneticEngine) -> int:
        return min(self.max_steps, engine.chromosome_count)

    def evaluate(self, engine: GeneticEngine, genome: np.ndarray) -> float:
        position = self.start
        score = 0
        for step in range(self._steps(engine)):
            position = self.perform(
                position,
                engine.read_gene(genome, step, 0),
                engine.read_gene(genome, step, 1),
            )
            if position == self.target:
                break
            score += (step + 1) * abs(self.target - position)
        return float(score)

    def describe(self, engine: GeneticEngine, genome: np.ndarray) -> str:
        """
        Render the jumps of a genome, e.g. ``"+ 120 - 40 = 1234"``.

        Stops at the first jump that lands on the target.
        """
        position = self.start
        parts = []
        for step in range(self._steps(engine)):
            g1 = engine.read_gene(genome, step, 0)
            g2 = engine.read_gene(genome, step, 1)
            sign = "-" if g2 < 0.5 else "+"
            parts.append(f"{sign} {self.jump_size(g1)}")
            position = self.perform(position, g1, g2)
            if position == self.target:
                break
        parts.append(f"= {position}")
        return " ".join(parts)

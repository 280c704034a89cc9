"""
Tests for variant policies and rate schedules.
"""

import unittest

from lightga.errors import ConfigValidationError
from lightga.policies import (
    CLASSIC_POLICY,
    RESET_POLICY,
    ClassicSchedule,
    DefaultFill,
    LinearSchedule,
    MutationLaw,
    RateSchedule,
    build_policy,
    get_policy,
)


class TestSchedules(unittest.TestCase):
    """Test generation-dependent operator rates."""

    def test_classic_rates(self):
        """Test classic schedule values at a few generations."""
        schedule = ClassicSchedule()

        crossover, mutation = schedule.rates(0)
        self.assertAlmostEqual(crossover, 0.5)
        self.assertAlmostEqual(mutation, 0.25)

        crossover, mutation = schedule.rates(10)
        self.assertAlmostEqual(crossover, 0.75)
        self.assertAlmostEqual(mutation, 0.25 * 0.3)

        crossover, mutation = schedule.rates(100)
        self.assertAlmostEqual(crossover, 0.75)
        self.assertAlmostEqual(mutation, 0.25 * 0.01)

    def test_linear_rates(self):
        """Test linear schedule values and bounds."""
        schedule = LinearSchedule()

        crossover, mutation = schedule.rates(0)
        self.assertAlmostEqual(crossover, 0.3)
        self.assertAlmostEqual(mutation, 0.4)

        crossover, mutation = schedule.rates(50)
        self.assertAlmostEqual(crossover, 0.8)
        self.assertAlmostEqual(mutation, 0.05)

    def test_exploitation_increases_over_generations(self):
        """Test crossover never decreases and mutation never increases."""
        for schedule in [ClassicSchedule(), LinearSchedule()]:
            previous = schedule.rates(0)
            for generation in range(1, 60):
                current = schedule.rates(generation)
                self.assertGreaterEqual(current[0], previous[0])
                self.assertLessEqual(current[1], previous[1])
                previous = current

    def test_rates_leave_room_for_replacement(self):
        """Test crossover and mutation never exceed probability one."""
        for schedule in [ClassicSchedule(), LinearSchedule(crossover_start=0.9, mutation_start=0.9)]:
            for generation in range(0, 40):
                crossover, mutation = schedule.rates(generation)
                self.assertGreaterEqual(mutation, 0.0)
                self.assertLessEqual(crossover + mutation, 1.0 + 1e-12)

    def test_out_of_range_rates_are_clipped(self):
        """Test custom schedules are clipped into valid probabilities."""

        class GreedySchedule(RateSchedule):
            def crossover_rate(self, generation):
                return 1.5

            def mutation_rate(self, generation):
                return 0.5

        self.assertEqual(GreedySchedule().rates(0), (1.0, 0.0))


class TestPolicies(unittest.TestCase):
    """Test policy presets and configuration."""

    def test_presets(self):
        """Test the two shipped presets."""
        self.assertIs(get_policy('classic'), CLASSIC_POLICY)
        self.assertEqual(CLASSIC_POLICY.default_fill, DefaultFill.RANDOM)
        self.assertEqual(CLASSIC_POLICY.mutation_law, MutationLaw.BIASED_REDUCTION)
        self.assertEqual(CLASSIC_POLICY.mutation_intensity, 1.0)

        self.assertIs(get_policy('reset'), RESET_POLICY)
        self.assertEqual(RESET_POLICY.default_fill, DefaultFill.ONES)
        self.assertEqual(RESET_POLICY.mutation_law, MutationLaw.PROBABILISTIC_RESET)
        self.assertIsInstance(RESET_POLICY.schedule, LinearSchedule)

    def test_unknown_preset(self):
        """Test unknown preset names are rejected."""
        with self.assertRaises(ConfigValidationError):
            get_policy('annealing')

    def test_build_default(self):
        """Test an empty section gives the classic preset."""
        self.assertIs(build_policy(None), CLASSIC_POLICY)
        self.assertIs(build_policy({}), CLASSIC_POLICY)
        self.assertIs(build_policy({'name': 'reset'}), RESET_POLICY)

    def test_build_with_overrides(self):
        """Test preset fields can be overridden."""
        policy = build_policy({
            'name': 'classic',
            'default_fill': 'ones',
            'mutation_law': 'probabilistic_reset',
            'mutation_intensity': 0.5,
            'schedule': {'type': 'linear', 'crossover_start': 0.4},
        })

        self.assertEqual(policy.name, 'classic')
        self.assertEqual(policy.default_fill, DefaultFill.ONES)
        self.assertEqual(policy.mutation_law, MutationLaw.PROBABILISTIC_RESET)
        self.assertEqual(policy.mutation_intensity, 0.5)
        self.assertIsInstance(policy.schedule, LinearSchedule)
        self.assertEqual(policy.schedule.crossover_start, 0.4)
        self.assertEqual(policy.schedule.crossover_max, 0.8)

        # Presets are left untouched
        self.assertEqual(CLASSIC_POLICY.default_fill, DefaultFill.RANDOM)

    def test_build_rejects_invalid_values(self):
        """Test invalid overrides raise ConfigValidationError."""
        invalid = [
            {'default_fill': 'zeros'},
            {'mutation_law': 'gaussian'},
            {'mutation_intensity': -1},
            {'mutation_intensity': 'high'},
            {'schedule': {'type': 'cosine'}},
            {'schedule': {'type': 'linear', 'warmup': 3}},
            {'schedule': 'linear'},
        ]
        for policy_config in invalid:
            with self.assertRaises(ConfigValidationError, msg=str(policy_config)):
                build_policy(policy_config)

        with self.assertRaises(ConfigValidationError):
            build_policy(['classic'])


def run_tests():
    """Run all tests in this module."""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestSchedules))
    suite.addTests(loader.loadTestsFromTestCase(TestPolicies))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return result.wasSuccessful()


if __name__ == '__main__':
    import sys
    success = run_tests()
    sys.exit(0 if success else 1)

"""
Tests for YAML configuration loading and validation.
"""

import unittest
import tempfile
import shutil
import copy
from pathlib import Path

import yaml

from lightga.config import (
    EngineSettings,
    RunSettings,
    load_config,
    validate_config,
    settings_from_config,
    create_engine_from_config,
    create_engine_from_settings,
)
from lightga.errors import ConfigValidationError
from lightga.policies import CLASSIC_POLICY, DefaultFill, MutationLaw


VALID_CONFIG = {
    'engine': {
        'population': 20,
        'survival_count': 3,
        'chromosome_count': 4,
        'gene_count': 2,
    },
    'policy': {'name': 'reset', 'mutation_intensity': 0.1},
    'run': {
        'optimize_for_maximum': False,
        'max_generations': 25,
        'timeout_ms': 250,
        'shift_on_reuse': False,
        'repeat': 3,
    },
    'random_seed': 11,
}


class TestLoadConfig(unittest.TestCase):
    """Test reading configuration files."""

    def setUp(self):
        """Create temporary directory."""
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        """Remove temporary directory."""
        shutil.rmtree(self.temp_dir)

    def _write(self, name, text):
        path = self.temp_dir / name
        path.write_text(text)
        return path

    def test_load_valid_file(self):
        """Test a valid YAML file loads into a dictionary."""
        path = self._write('config.yaml', yaml.safe_dump(VALID_CONFIG))
        config = load_config(path)
        self.assertEqual(config, VALID_CONFIG)

    def test_missing_file(self):
        """Test a missing file raises FileNotFoundError."""
        with self.assertRaises(FileNotFoundError):
            load_config(self.temp_dir / 'missing.yaml')

    def test_empty_file(self):
        """Test an empty file is rejected."""
        path = self._write('empty.yaml', '')
        with self.assertRaises(ConfigValidationError):
            load_config(path)

    def test_invalid_yaml(self):
        """Test malformed YAML is rejected."""
        path = self._write('broken.yaml', 'engine: [population: 10\n')
        with self.assertRaises(ConfigValidationError):
            load_config(path)

    def test_non_mapping(self):
        """Test a top-level list is rejected."""
        path = self._write('list.yaml', '- 1\n- 2\n')
        with self.assertRaises(ConfigValidationError):
            load_config(path)

    def test_create_engine_from_config(self):
        """Test building an initialized engine from a file."""
        path = self._write('config.yaml', yaml.safe_dump(VALID_CONFIG))
        engine, run_settings = create_engine_from_config(path)

        self.assertTrue(engine.initialized)
        self.assertEqual(engine.population_size, 20)
        self.assertEqual(engine.survival_count, 3)
        self.assertEqual(engine.chromosome_count, 4)
        self.assertEqual(engine.gene_count, 2)
        self.assertEqual(engine.policy.name, 'reset')
        self.assertEqual(run_settings.repeat, 3)


class TestValidateConfig(unittest.TestCase):
    """Test configuration validation and conversion."""

    def setUp(self):
        """Copy the valid configuration."""
        self.config = copy.deepcopy(VALID_CONFIG)

    def test_valid_config(self):
        """Test the reference configuration passes."""
        validate_config(self.config)

    def test_missing_engine(self):
        """Test the engine section is required."""
        del self.config['engine']
        with self.assertRaises(ConfigValidationError):
            validate_config(self.config)

    def test_missing_engine_field(self):
        """Test every engine size is required."""
        for name in ['population', 'survival_count', 'chromosome_count', 'gene_count']:
            config = copy.deepcopy(VALID_CONFIG)
            del config['engine'][name]
            with self.assertRaises(ConfigValidationError, msg=name):
                validate_config(config)

    def test_invalid_engine_sizes(self):
        """Test sizes must be positive integers with room for offspring."""
        for name, value in [('population', 0), ('gene_count', -1),
                            ('chromosome_count', 2.5), ('survival_count', True),
                            ('survival_count', 20), ('survival_count', 25)]:
            config = copy.deepcopy(VALID_CONFIG)
            config['engine'][name] = value
            with self.assertRaises(ConfigValidationError, msg=f"{name}={value}"):
                validate_config(config)

    def test_invalid_policy(self):
        """Test policy errors surface during validation."""
        self.config['policy'] = {'name': 'unknown'}
        with self.assertRaises(ConfigValidationError):
            validate_config(self.config)

    def test_invalid_run_section(self):
        """Test run options are type checked."""
        for name, value in [('optimize_for_maximum', 'yes'), ('shift_on_reuse', 1),
                            ('max_generations', 1.5), ('timeout_ms', -1),
                            ('timeout_ms', 'fast'), ('repeat', 0)]:
            config = copy.deepcopy(VALID_CONFIG)
            config['run'][name] = value
            with self.assertRaises(ConfigValidationError, msg=f"{name}={value}"):
                validate_config(config)

        self.config['run'] = ['max_generations']
        with self.assertRaises(ConfigValidationError):
            validate_config(self.config)

    def test_invalid_seed(self):
        """Test random_seed must be a non-negative integer."""
        self.config['random_seed'] = -3
        with self.assertRaises(ConfigValidationError):
            validate_config(self.config)

    def test_settings_from_config(self):
        """Test conversion into settings records."""
        engine_settings, run_settings = settings_from_config(self.config)

        self.assertIsInstance(engine_settings, EngineSettings)
        self.assertEqual(engine_settings.population, 20)
        self.assertEqual(engine_settings.random_seed, 11)
        self.assertEqual(engine_settings.policy.default_fill, DefaultFill.ONES)
        self.assertEqual(engine_settings.policy.mutation_law, MutationLaw.PROBABILISTIC_RESET)
        self.assertEqual(engine_settings.policy.mutation_intensity, 0.1)

        self.assertIsInstance(run_settings, RunSettings)
        self.assertFalse(run_settings.optimize_for_maximum)
        self.assertEqual(run_settings.max_generations, 25)
        self.assertEqual(run_settings.timeout_ms, 250)
        self.assertFalse(run_settings.shift_on_reuse)
        self.assertEqual(run_settings.repeat, 3)

    def test_settings_defaults(self):
        """Test optional sections fall back to defaults."""
        config = {'engine': dict(VALID_CONFIG['engine'])}
        engine_settings, run_settings = settings_from_config(config)

        self.assertIs(engine_settings.policy, CLASSIC_POLICY)
        self.assertIsNone(engine_settings.random_seed)
        self.assertEqual(run_settings, RunSettings())

    def test_seeded_engines_match(self):
        """Test engines built from the same settings behave identically."""
        engine_settings, _ = settings_from_config(self.config)
        first = create_engine_from_settings(engine_settings)
        second = create_engine_from_settings(engine_settings)

        for engine in (first, second):
            engine.run(lambda e, genome: float(genome.sum()), max_generations=5, timeout_ms=10000)

        self.assertEqual(first.best_fitness, second.best_fitness)


def run_tests():
    """Run all tests in this module."""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestLoadConfig))
    suite.addTests(loader.loadTestsFromTestCase(TestValidateConfig))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return result.wasSuccessful()


if __name__ == '__main__':
    import sys
    success = run_tests()
    sys.exit(0 if success else 1)

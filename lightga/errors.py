"""
Exception types for the lightga optimizer.

Configuration problems fail fast, shape problems surface as index errors,
and configuration files that cannot be used raise ConfigValidationError.
"""


class EngineConfigurationError(ValueError):
    """Raised when the engine is sized incorrectly or used before initialize()."""
    pass


class GenomeShapeError(IndexError):
    """Raised when a genome, chromosome or gene index does not fit the layout."""
    pass


class ConfigValidationError(Exception):
    """Raised when a YAML configuration is invalid."""
    pass

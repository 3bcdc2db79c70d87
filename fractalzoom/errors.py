"""Exceptions raised by the fractal explorer."""


class ConfigurationError(ValueError):
    """Startup or render parameters that cannot produce a valid frame."""
